"""Gemini model client behind a small injectable interface.

The chat controller only depends on the ModelClient protocol, so tests
substitute a fake stream source and the UI composition root decides
which concrete client to build.

Note: Gemini can return chunks without text (safety filtering, usage-only
final chunks). Those are skipped rather than surfaced as empty deltas.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol

from google import genai
from google.genai import types

from src.agent.config import ChatConfig, get_chat_config
from src.models.schemas import Completion, TextDelta, Turn

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """Capability consumed by the chat controller."""

    def generate_stream(self, history: Sequence[Turn]) -> AsyncIterator[TextDelta]:
        """Stream a reply to the full role-tagged history."""
        ...

    async def generate(self, prompt: str) -> Completion:
        """Return a single completion for one prompt."""
        ...


class GeminiModelClient:
    """Google Gemini implementation of ModelClient.

    Wraps the google-genai SDK with:
    - Turn to Content conversion
    - Generation config built once from ChatConfig
    - Text extraction that tolerates empty or non-text chunks
    """

    def __init__(self, config: ChatConfig | None = None, **client_kwargs: Any) -> None:
        """Initialize the Gemini client.

        Args:
            config: Optional chat configuration.
                    Loads from environment if not provided.
            **client_kwargs: Additional kwargs for genai.Client.
        """
        self._config = config or get_chat_config()
        self._client = genai.Client(api_key=self._config.api_key, **client_kwargs)
        self._generation_config = types.GenerateContentConfig(
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_tokens,
        )

    @property
    def model(self) -> str:
        return self._config.model_name

    @staticmethod
    def _to_contents(history: Sequence[Turn]) -> list[types.Content]:
        # Gemini rejects empty text parts; an empty reply left in the chat is skipped
        return [
            types.Content(role=turn.role, parts=[types.Part(text=turn.text)])
            for turn in history
            if turn.text
        ]

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Extract text from a Gemini response or stream chunk.

        Args:
            response: GenerateContentResponse (full or streamed chunk).

        Returns:
            Joined text parts, or an empty string.
        """
        candidates = getattr(response, "candidates", None)
        if candidates:
            content = candidates[0].content
            if content and content.parts:
                texts = [part.text for part in content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def generate_stream(self, history: Sequence[Turn]) -> AsyncIterator[TextDelta]:
        """Stream reply deltas for the conversation history.

        Args:
            history: Chronological role-tagged turns, ending with the user turn.

        Yields:
            TextDelta for each non-empty chunk, in arrival order.
        """
        logger.debug(f"Opening Gemini stream with {len(history)} turns on {self.model}")
        stream = await self._client.aio.models.generate_content_stream(
            model=self.model,
            contents=self._to_contents(history),
            config=self._generation_config,
        )
        async for chunk in stream:
            text = self._extract_text(chunk)
            if text:
                yield TextDelta(text_delta=text)

    async def generate(self, prompt: str) -> Completion:
        """Generate a complete reply for a single prompt.

        Args:
            prompt: The user's message.

        Returns:
            Completion whose text is None when Gemini returned no text.
        """
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._generation_config,
        )
        return Completion(text=self._extract_text(response) or None)


# Module-level cached instance for the UI composition root
_model_client: GeminiModelClient | None = None


def get_model_client() -> GeminiModelClient:
    """Get or create the shared Gemini client.

    Returns:
        The GeminiModelClient instance.
    """
    global _model_client
    if _model_client is None:
        _model_client = GeminiModelClient()
    return _model_client
