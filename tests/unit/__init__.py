"""Unit tests for individual components in isolation.

Coverage:
    - agent/: Streaming reply throttle, commits, failures and clearing
    - agent/: StateFlow notifications and configuration validation
    - agent/: Gemini request building with a patched SDK
    - ui/: Markdown and timestamp formatting

Uses a scripted model client and patched SDK objects, never the network.
"""
