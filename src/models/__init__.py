"""Pydantic models shared by the controller, the model client and the UI.

Models:
    - ChatMessage: Immutable entry in the visible conversation
    - Turn: Role-tagged request turn for the model client
    - TextDelta: One streamed increment of reply text
    - Completion: Result of a non-streaming generation
"""

from src.models.schemas import ChatMessage, Completion, TextDelta, Turn

__all__ = ["ChatMessage", "Completion", "TextDelta", "Turn"]
