"""Integration tests for components working together as a system.

Coverage:
    - Host application endpoints with real HTTP requests
    - Streamed and single-shot replies from the live Gemini API (when configured)

Requires GEMINI_API_KEY for the live tests; they are skipped otherwise.
"""
