"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - fake_client: Scripted stand-in for the Gemini model client
    - make_controller: Factory for ChatController wired to a fake client
    - started_app: Host app with its startup run against a test environment
    - async_client: HTTPX client for API testing
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Sequence
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.agent.chat_controller import ChatController
from src.agent.config import ThrottleSettings
from src.api.app import create_app
from src.models.schemas import Completion, TextDelta, Turn

Step = str | float | BaseException


class FakeModelClient:
    """Model client that replays a script instead of calling Gemini.

    Script steps:
        - str: yielded as a TextDelta
        - float: sleep for that many seconds
        - exception: raised at that point of the stream
    """

    def __init__(
        self,
        script: Sequence[Step] = (),
        completion: Completion | BaseException | None = None,
    ) -> None:
        self.script = list(script)
        self.completion = completion if completion is not None else Completion(text="ok")
        self.histories: list[list[Turn]] = []
        self.prompts: list[str] = []

    async def generate_stream(self, history: Sequence[Turn]) -> AsyncIterator[TextDelta]:
        self.histories.append(list(history))
        for step in self.script:
            if isinstance(step, BaseException):
                raise step
            if isinstance(step, float):
                await asyncio.sleep(step)
                continue
            yield TextDelta(text_delta=step)

    async def generate(self, prompt: str) -> Completion:
        self.prompts.append(prompt)
        if isinstance(self.completion, BaseException):
            raise self.completion
        return self.completion


def frozen_clock() -> float:
    """Clock that never advances, so only the chunk threshold triggers flushes."""
    return 0.0


@pytest.fixture
def fake_client() -> FakeModelClient:
    """Return an empty scripted model client."""
    return FakeModelClient()


@pytest.fixture
def make_controller(
    fake_client: FakeModelClient,
) -> Callable[..., ChatController]:
    """Return a factory for controllers backed by ``fake_client``.

    Args:
        fake_client: The scripted client shared with the test.

    Returns:
        Factory accepting throttle values and controller options.
    """

    def factory(
        chunk_threshold: int = 3,
        interval_ms: float = 150,
        **kwargs: object,
    ) -> ChatController:
        throttle = ThrottleSettings(
            flush_chunk_threshold=chunk_threshold,
            flush_interval_ms=interval_ms,
        )
        return ChatController(fake_client, throttle, **kwargs)

    return factory


TEST_ENV = {"GEMINI_API_KEY": "AIza-test-key", "GEMINI_MODEL": "gemini-2.5-flash"}


@pytest.fixture
async def started_app() -> AsyncGenerator[FastAPI]:
    """Create the host app and run its startup with a test environment.

    Yields:
        Application whose lifespan has loaded the chat configuration.
    """
    application = create_app()
    with patch.dict("os.environ", TEST_ENV, clear=True):
        async with application.router.lifespan_context(application):
            yield application


@pytest.fixture
async def async_client(started_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Args:
        started_app: Application with its startup already run.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=started_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
