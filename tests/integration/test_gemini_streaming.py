"""Integration tests against the live Gemini API.

Requirements:
    - GEMINI_API_KEY environment variable
    - Tests are skipped without a key
"""

import os

import pytest

from src.agent.chat_controller import ChatController
from src.agent.config import ChatConfig, ThrottleSettings
from src.agent.model_client import GeminiModelClient
from src.models.schemas import ChatMessage, Turn


def has_gemini_key() -> bool:
    """Check if a Gemini API key is configured."""
    key = os.environ.get("GEMINI_API_KEY", "")
    return bool(key and not key.isspace())


requires_api_key = pytest.mark.skipif(
    not has_gemini_key(),
    reason="GEMINI_API_KEY not set - skipping Gemini integration test",
)


@pytest.fixture
def gemini_client() -> GeminiModelClient:
    return GeminiModelClient(config=ChatConfig(max_tokens=256))


@requires_api_key
class TestLiveStreaming:
    """End-to-end replies through the real Gemini client."""

    async def test_stream_yields_text(self, gemini_client: GeminiModelClient) -> None:
        history = [Turn(role="user", text="Count from 1 to 5, separated by spaces.")]

        deltas = [delta.text_delta async for delta in gemini_client.generate_stream(history)]

        assert len(deltas) >= 1
        assert "1" in "".join(deltas)

    async def test_controller_commits_full_reply(
        self, gemini_client: GeminiModelClient
    ) -> None:
        """Final committed text equals the concatenation of every commit's growth."""
        controller = ChatController(
            gemini_client,
            ThrottleSettings(flush_chunk_threshold=3, flush_interval_ms=150),
        )
        snapshots: list[tuple[ChatMessage, ...]] = []
        controller.messages.subscribe(snapshots.append)

        task = controller.send_message("Write a haiku about coding")
        assert task is not None
        await task

        reply = controller.messages.value[1].text
        assert reply
        assert not reply.startswith("Error: ")
        assert controller.is_loading.value is False
        commits = [snapshot[1].text for snapshot in snapshots[2:]]
        assert all(reply.startswith(commit) for commit in commits)

    async def test_single_completion(self, gemini_client: GeminiModelClient) -> None:
        completion = await gemini_client.generate("Say the word 'hello' and nothing else")

        assert completion.text is not None
        assert "hello" in completion.text.lower()
