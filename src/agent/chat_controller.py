"""Chat controller that turns a streamed model reply into conversation updates.

Core module for the chat's conversation handling.

Flow of one send:

1. **User entry** - the user's text is appended to the conversation.
2. **Request** - the whole conversation is translated into role-tagged
   turns (``user`` / ``model``) and handed to the model client.
3. **Placeholder** - an empty assistant entry is appended and its index is
   fixed as the target of every commit for this reply.
4. **Throttled commits** - deltas accumulate in a buffer. The buffer is
   written into the placeholder every N chunks, or once the flush interval
   elapsed, with a one-shot deferred flush covering slow trickles.
5. **Termination** - a final commit on completion, or an ``Error: ...``
   entry on failure, then the busy flag is cleared.

Commits always replace the placeholder's whole text on a fresh tuple
snapshot, so re-running a commit never duplicates text.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.agent.config import ThrottleSettings
from src.agent.model_client import ModelClient
from src.agent.state import StateFlow
from src.models.schemas import ChatMessage, Turn

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error: "
NO_RESPONSE_TEXT = "No response"


def format_error(exc: BaseException) -> str:
    """Render an exception as the text of a chat entry."""
    detail = str(exc) or type(exc).__name__
    return f"{ERROR_PREFIX}{detail}"


@dataclass
class StreamSession:
    """Per-reply buffering state, discarded when the reply terminates.

    Attributes:
        target_index: Index of the placeholder entry this reply writes into.
        epoch: Conversation generation the placeholder belongs to.
        last_flush_time: Clock reading of the last commit (or session start).
        buffer: Accumulated reply text.
        chunk_count: Number of deltas received so far.
        pending_flush: Scheduled deferred flush, if any.
    """

    target_index: int
    epoch: int
    last_flush_time: float
    buffer: str = ""
    chunk_count: int = 0
    pending_flush: asyncio.TimerHandle | None = None


class ChatController:
    """Owns the observable conversation and drives model replies into it.

    Exposes:
    - ``messages``: StateFlow of the conversation as a tuple of ChatMessage
    - ``is_loading``: StateFlow of the busy flag
    - ``send_message`` / ``clear_chat`` commands

    Only one reply is in flight at a time; sends while busy are rejected.
    """

    def __init__(
        self,
        model_client: ModelClient,
        throttle: ThrottleSettings | None = None,
        *,
        streaming: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the controller.

        Args:
            model_client: Source of streamed and single-shot replies.
            throttle: Flush cadence. Loads from environment if not provided.
            streaming: Stream replies, or wait for one completion per send.
            clock: Monotonic clock in seconds, used for flush timing.
        """
        self._client = model_client
        self._throttle = throttle or ThrottleSettings()
        self._streaming = streaming
        self._clock = clock
        self._epoch = 0
        self._task: asyncio.Task[None] | None = None

        self.messages: StateFlow[tuple[ChatMessage, ...]] = StateFlow(())
        self.is_loading: StateFlow[bool] = StateFlow(False)

    @property
    def flush_interval(self) -> float:
        """Flush interval in seconds."""
        return self._throttle.flush_interval_ms / 1000

    def send_message(self, user_text: str) -> asyncio.Task[None] | None:
        """Append the user's message and start generating a reply.

        Must be called from a running event loop. Returns immediately;
        the reply is consumed by the returned task.

        Args:
            user_text: The user's message.

        Returns:
            The task consuming the reply, or None when the send was ignored
            (blank text, or a reply is still in flight).
        """
        if not user_text.strip():
            return None
        if self.is_loading.value:
            logger.warning("Ignoring send while a reply is still in flight")
            return None

        loop = asyncio.get_running_loop()

        self._append(ChatMessage(text=user_text, from_user=True))
        history = self._build_history()
        self._append(ChatMessage(text="", from_user=False))

        session = StreamSession(
            target_index=len(self.messages.value) - 1,
            epoch=self._epoch,
            last_flush_time=self._clock(),
        )
        self.is_loading.value = True

        if self._streaming:
            reply = self._consume_stream(session, history)
        else:
            reply = self._consume_completion(session, user_text)
        self._task = loop.create_task(reply)
        return self._task

    def clear_chat(self) -> None:
        """Empty the conversation.

        A reply still in flight keeps running, but its commits become no-ops.
        """
        self._epoch += 1
        self.messages.value = ()

    async def close(self) -> None:
        """Cancel the reply in flight, if any, and wait for it to unwind."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _append(self, message: ChatMessage) -> None:
        self.messages.value = (*self.messages.value, message)

    def _build_history(self) -> list[Turn]:
        return [Turn.from_message(message) for message in self.messages.value]

    def _commit(self, session: StreamSession, text: str) -> None:
        """Replace the placeholder's text with ``text``.

        No-op when the conversation was cleared since the session started.
        """
        messages = self.messages.value
        if session.epoch != self._epoch or session.target_index >= len(messages):
            logger.debug(f"Dropping commit for stale index {session.target_index}")
            return

        updated = list(messages)
        updated[session.target_index] = messages[session.target_index].with_text(text)
        self.messages.value = tuple(updated)

    def _flush(self, session: StreamSession, now: float) -> None:
        self._cancel_pending_flush(session)
        self._commit(session, session.buffer)
        session.last_flush_time = now

    def _deferred_flush(self, session: StreamSession) -> None:
        session.pending_flush = None
        logger.debug(f"Deferred flush after {session.chunk_count} chunks")
        self._flush(session, self._clock())

    def _cancel_pending_flush(self, session: StreamSession) -> None:
        if session.pending_flush is not None:
            session.pending_flush.cancel()
            session.pending_flush = None

    def _on_chunk(self, session: StreamSession, text_delta: str) -> None:
        session.buffer += text_delta
        session.chunk_count += 1

        now = self._clock()
        elapsed = now - session.last_flush_time
        threshold = self._throttle.flush_chunk_threshold

        if session.chunk_count % threshold == 0 or elapsed >= self.flush_interval:
            self._flush(session, now)
        elif session.pending_flush is None:
            delay = max(0.0, self.flush_interval - elapsed)
            session.pending_flush = asyncio.get_running_loop().call_later(
                delay, self._deferred_flush, session
            )

    async def _consume_stream(self, session: StreamSession, history: Sequence[Turn]) -> None:
        """Consume the model stream into the session's placeholder."""
        logger.info(f"Streaming reply for {len(history)} turns")
        try:
            try:
                async for delta in self._client.generate_stream(history):
                    self._on_chunk(session, delta.text_delta)
            except Exception as e:
                self._cancel_pending_flush(session)
                logger.warning(f"Reply stream failed after {session.chunk_count} chunks: {e}")
                self._commit(session, format_error(e))
            else:
                self._cancel_pending_flush(session)
                self._commit(session, session.buffer)
                logger.info(
                    f"Reply complete: {session.chunk_count} chunks, {len(session.buffer)} chars"
                )
        except Exception:
            logger.exception("Unexpected failure while finishing reply")
        finally:
            self._cancel_pending_flush(session)
            self.is_loading.value = False

    async def _consume_completion(self, session: StreamSession, prompt: str) -> None:
        """Wait for a single completion and commit it once."""
        logger.info("Requesting single completion")
        try:
            try:
                completion = await self._client.generate(prompt)
            except Exception as e:
                logger.warning(f"Completion failed: {e}")
                self._commit(session, format_error(e))
            else:
                text = completion.text if completion.text is not None else NO_RESPONSE_TEXT
                self._commit(session, text)
        except Exception:
            logger.exception("Unexpected failure while finishing reply")
        finally:
            self.is_loading.value = False
