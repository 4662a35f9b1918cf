"""Gemini Chat - streamed Gemini replies in a web chat interface.

Combines the google-genai SDK for generation, NiceGUI for the chat page,
FastAPI as the host application, and Pydantic for models and configuration.

Components:
    - agent: Conversation controller, throttled streaming and model client
    - api: Host application and health endpoint
    - ui: Web interface for chat interactions
    - models: Message and request schemas
"""

__version__ = "0.1.0"
