"""Chat configuration with environment variable loading.

Pydantic-based configuration for the Gemini model client and the
streaming reply throttle.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ThrottleSettings(BaseModel):
    """Flush cadence for streamed replies.

    Both limits apply together: the chunk count keeps bursts from
    over-flushing and the interval keeps slow trickles visible.

    Attributes:
        flush_chunk_threshold: Flush after every N received chunks.
        flush_interval_ms: Flush when this much time passed since the last flush.
    """

    flush_chunk_threshold: int = Field(
        default_factory=lambda: int(os.getenv("FLUSH_CHUNK_THRESHOLD", "3")),
        ge=1,
        description="Number of chunks between forced flushes",
    )
    flush_interval_ms: float = Field(
        default_factory=lambda: float(os.getenv("FLUSH_INTERVAL_MS", "150")),
        gt=0,
        description="Maximum time between flushes in milliseconds",
    )


class ChatConfig(ThrottleSettings):
    """Configuration for the Gemini chat client.

    Attributes:
        api_key: Google AI API key, passed through to the SDK.
        model_name: Gemini model identifier.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in a generated reply.
        streaming: Stream replies (True) or wait for a single completion.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", "")),
        validate_default=True,
        description="API key for the Gemini API",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=65536,
        description="Maximum tokens in generated response",
    )
    streaming: bool = Field(
        default_factory=lambda: _env_bool("CHAT_STREAMING", True),
        description="Stream replies instead of waiting for the full completion",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set GEMINI_API_KEY or GOOGLE_API_KEY in .env"
            )
        return v.strip()

    @property
    def throttle(self) -> ThrottleSettings:
        return ThrottleSettings(
            flush_chunk_threshold=self.flush_chunk_threshold,
            flush_interval_ms=self.flush_interval_ms,
        )


def get_chat_config() -> ChatConfig:
    """Create chat configuration from environment.

    Returns:
        Configured ChatConfig instance.

    Raises:
        ValidationError: If no API key is set or a value is out of range.
    """
    return ChatConfig()
