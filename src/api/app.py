"""FastAPI host application for the chat page.

Loads the chat configuration once at startup, so a missing API key stops
the server before any browser connects.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from src.agent.config import ChatConfig, get_chat_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Validate configuration on startup and expose it on ``app.state``.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.

    Raises:
        ValidationError: If the API key is missing or a setting is out of range.
    """
    config = get_chat_config()
    app.state.config = config
    logger.info(
        f"Starting Gemini Chat with {config.model_name} "
        f"({'streaming' if config.streaming else 'single completion'}, "
        f"flush every {config.flush_chunk_threshold} chunks / {config.flush_interval_ms:g} ms)"
    )
    yield
    logger.info("Shutting down Gemini Chat...")


def create_app() -> FastAPI:
    """Create the host application.

    Returns:
        FastAPI application with the configuration lifespan and health route.
    """
    application = FastAPI(
        title="Gemini Chat",
        description="Chat interface that streams Gemini replies.",
        version="0.1.0",
        lifespan=lifespan,
    )

    @application.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """Report service status and the configured reply mode."""
        config: ChatConfig = request.app.state.config
        return {
            "status": "healthy",
            "service": "gemini-chat",
            "model": config.model_name,
            "mode": "streaming" if config.streaming else "single",
        }

    return application


app = create_app()
