import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    """A single entry in the visible conversation.

    Attributes:
        text: The message text.
        from_user: True for user messages, False for assistant replies.
        timestamp: Creation time in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    from_user: bool
    timestamp: int = Field(default_factory=_now_ms)

    def with_text(self, text: str) -> "ChatMessage":
        """Return a copy of this message carrying new text."""
        return self.model_copy(update={"text": text})


class Turn(BaseModel):
    """One role-tagged turn of the request sent to the model.

    Attributes:
        role: "user" for user messages, "model" for assistant replies.
        text: The turn text.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str

    @classmethod
    def from_message(cls, message: ChatMessage) -> "Turn":
        return cls(role="user" if message.from_user else "model", text=message.text)


class TextDelta(BaseModel):
    """One increment of streamed text."""

    text_delta: str


class Completion(BaseModel):
    """Result of a non-streaming generation.

    Attributes:
        text: Generated text, or None when the model returned nothing.
    """

    text: str | None = None
