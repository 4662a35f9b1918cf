"""Test package for Gemini Chat.

Structure:
    - unit/: Controller, state, config, model client and formatting tests
    - integration/: Host application and live Gemini tests

Unit tests replace the Gemini client with a scripted fake stream source.
"""
