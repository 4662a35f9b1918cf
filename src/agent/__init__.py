"""Conversation control and Gemini model access.

Turns user input into model requests and streamed replies into
observable conversation state.

Responsibilities:
    - Conversation state and busy flag as observable StateFlows
    - Role-tagged request history for the model
    - Throttled buffering of streamed reply text
    - Error entries for failed replies
    - Gemini client configuration from the environment

Maintains clean separation from the UI and HTTP layers.
"""

from src.agent.chat_controller import ChatController, StreamSession
from src.agent.config import ChatConfig, ThrottleSettings, get_chat_config
from src.agent.model_client import GeminiModelClient, ModelClient, get_model_client
from src.agent.state import StateFlow

__all__ = [
    "ChatConfig",
    "ChatController",
    "GeminiModelClient",
    "ModelClient",
    "StateFlow",
    "StreamSession",
    "ThrottleSettings",
    "get_chat_config",
    "get_model_client",
]
