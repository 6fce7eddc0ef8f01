"""Session controller: session identity, push-stream lifecycle and outbound calls.

The controller owns the ``SessionContext`` and is the single place where the
stream connection is opened, dropped and re-opened. At most one stream task
is live at any time; opening a new one always cancels the previous one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Callable, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, wait_fixed

from ..constants import ERROR_PARAM_UPDATE_FAILED, ERROR_SEND_FAILED, ERROR_SESSION_FAILED
from ..domain.config import ClientConfig
from ..domain.transcript import Decision, Message, ParsedCommand
from ..events import EventPayload
from ..logging import before_sleep_log_event, log_event, preview_raw, sanitize_error_message
from ..transport.api import BackendClient, BackendError
from ..transport.sse import SSEFrame
from .decisions import DecisionCoordinator
from .reducer import EventReducer
from .state import SessionContext, append_error
from .store import StoreListener


READY_EVENT = "ready"
MESSAGE_EVENT = "message"


class SessionError(Exception):
    """Raised when a session could not be created."""


class StreamClosedError(Exception):
    """Raised when the server ends the event stream."""


class SessionController:
    """Owns one session, its event stream and the transcript it feeds."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        client: Optional[BackendClient] = None,
        context: Optional[SessionContext] = None,
    ):
        """Initialize controller.

        Args:
            config: Client configuration (defaults when omitted)
            client: Backend client (built from config when omitted)
            context: Session context (fresh when omitted)
        """
        self.config = config or ClientConfig()
        self.context = context or SessionContext()
        self.client = client or BackendClient(
            self.config.base_url,
            timeout=self.config.timeout,
        )
        self.reducer = EventReducer(
            self.context,
            min_decision_id_length=self.config.min_decision_id_length,
        )
        self.decisions = DecisionCoordinator(
            self.context,
            self.client,
            min_decision_id_length=self.config.min_decision_id_length,
        )
        self._stream_task: Optional[asyncio.Task] = None
        self._session_task: Optional[asyncio.Task] = None
        self._closed = False

    async def __aenter__(self) -> SessionController:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ===================================================================
    # Read-only state
    # ===================================================================

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.context.store.messages

    @property
    def session_id(self) -> Optional[str]:
        return self.context.session_id

    @property
    def is_loading(self) -> bool:
        return self.context.is_loading

    @property
    def is_connected(self) -> bool:
        return self.context.is_connected

    @property
    def current_intent(self) -> Optional[ParsedCommand]:
        return self.context.current_intent

    @property
    def current_decision(self) -> Optional[Decision]:
        return self.context.current_decision

    @property
    def stream_task(self) -> Optional[asyncio.Task]:
        return self._stream_task

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Observe transcript changes."""
        return self.context.store.subscribe(listener)

    # ===================================================================
    # Session lifecycle
    # ===================================================================

    async def start(self) -> Optional[str]:
        """Create the initial session; failures are already in the transcript."""
        try:
            return await self.create_session()
        except SessionError:
            return None

    async def create_session(self) -> str:
        """Request a new session and open its event stream.

        Raises:
            SessionError: If the backend did not provide a session. The
                session stays unset; retrying is up to the caller.
        """
        started = time.perf_counter()
        try:
            session_id = await self.client.create_session()
        except BackendError as error:
            log_event(
                "session_create_failed",
                level=logging.ERROR,
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )
            append_error(self.context, ERROR_SESSION_FAILED)
            raise SessionError(f"Failed to create session: {error}") from error

        self.context.activate(session_id)
        log_event(
            "session_created",
            level=logging.INFO,
            session_id=session_id,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        self.connect()
        return session_id

    def connect(self) -> Optional[asyncio.Task]:
        """(Re)open the event stream for the current session.

        Any existing stream task is cancelled first. No-op without a session.
        """
        self._cancel_stream()
        session_id = self.context.session_id
        if not session_id or self._closed:
            return None
        self._stream_task = asyncio.create_task(
            self._run_stream(session_id),
            name=f"event-stream-{session_id}",
        )
        return self._stream_task

    def clear(self) -> asyncio.Task:
        """Drop the session and transcript, then start creating a new session.

        Returns:
            Background task resolving to the new session id (or None on failure)
        """
        previous_session = self.context.session_id
        message_count = len(self.context.store)

        self._cancel_stream()
        if self._session_task is not None and not self._session_task.done():
            self._session_task.cancel()
        self.context.reset()

        log_event(
            "session_cleared",
            level=logging.INFO,
            session_id=previous_session,
            message_count=message_count,
        )
        self._session_task = asyncio.create_task(self.start(), name="create-session")
        return self._session_task

    async def close(self) -> None:
        """Stop all background work and release the HTTP client."""
        self._closed = True
        tasks = [t for t in (self._stream_task, self._session_task) if t is not None]
        self._cancel_stream()
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._session_task = None
        await self.client.aclose()

    async def _wait_for_pending_session(self) -> bool:
        """Wait out background session creation started by ``clear``.

        Returns:
            True if a creation was pending
        """
        waited = False
        while self._session_task is not None and not self._session_task.done():
            waited = True
            await asyncio.wait({self._session_task})
        return waited

    def _cancel_stream(self) -> None:
        task = self._stream_task
        self._stream_task = None
        if task is not None and not task.done():
            task.cancel()
        self.context.is_connected = False

    # ===================================================================
    # Event stream
    # ===================================================================

    def _should_reconnect(self, session_id: str, error: BaseException) -> bool:
        if self._closed or self.context.session_id != session_id:
            return False
        return isinstance(error, (httpx.HTTPError, BackendError, StreamClosedError))

    async def _run_stream(self, session_id: str) -> None:
        """Keep the session's stream open, reconnecting after a fixed delay."""
        retrying = AsyncRetrying(
            retry=retry_if_exception(lambda e: self._should_reconnect(session_id, e)),
            wait=wait_fixed(self.config.reconnect_delay),
            before_sleep=before_sleep_log_event(
                component="event_stream",
                operation="reconnect",
                session_id=session_id,
            ),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._consume_stream(session_id)
        except asyncio.CancelledError:
            log_event(
                "stream_closed",
                level=logging.INFO,
                session_id=session_id,
                reason="cancelled",
            )
            raise
        except Exception as error:
            log_event(
                "stream_closed",
                level=logging.WARNING,
                session_id=session_id,
                reason="not reconnecting",
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )

    async def _consume_stream(self, session_id: str) -> None:
        try:
            async with self.client.stream_events(session_id) as frames:
                self.context.is_connected = True
                async for frame in frames:
                    if self.context.session_id != session_id:
                        break
                    self._handle_frame(session_id, frame)
        except (httpx.HTTPError, BackendError) as error:
            self.context.is_connected = False
            log_event(
                "stream_closed",
                level=logging.WARNING,
                session_id=session_id,
                reason="error",
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )
            raise

        self.context.is_connected = False
        log_event(
            "stream_closed",
            level=logging.INFO,
            session_id=session_id,
            reason="ended by server",
        )
        raise StreamClosedError("Event stream ended")

    def _handle_frame(self, session_id: str, frame: SSEFrame) -> None:
        if frame.event == READY_EVENT:
            self.context.is_connected = True
            log_event("stream_ready", level=logging.INFO, session_id=session_id)
            return

        if frame.event != MESSAGE_EVENT:
            log_event(
                "stream_frame_ignored",
                level=logging.DEBUG,
                session_id=session_id,
                sse_event=frame.event,
            )
            return

        if not frame.data:
            return

        try:
            raw = json.loads(frame.data)
        except json.JSONDecodeError as error:
            log_event(
                "stream_frame_invalid",
                level=logging.WARNING,
                session_id=session_id,
                error=str(error),
                raw=preview_raw(frame.data),
            )
            return

        self.handle_event(raw)

    def handle_event(self, raw: Any) -> Optional[EventPayload]:
        """Single inbound sink for pushed events."""
        return self.reducer.apply(raw)

    # ===================================================================
    # Outbound requests
    # ===================================================================

    async def send_message(self, content: str) -> bool:
        """Append a user message and send it to the backend.

        Ignored when blank or while a previous request is still loading.
        A session still being created after ``clear`` is awaited, never
        duplicated. Results arrive later through the event stream.
        """
        if not content.strip() or self.context.is_loading:
            return False

        waited = await self._wait_for_pending_session()
        if not self.context.has_session:
            if waited:
                return False
            try:
                await self.create_session()
            except SessionError:
                return False

        session_id = self.context.session_id
        assert session_id is not None

        self.context.store.append(content, "user")
        self.context.is_loading = True
        try:
            await self.client.send_message(session_id, content)
        except BackendError as error:
            log_event(
                "message_send_failed",
                level=logging.ERROR,
                session_id=session_id,
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )
            append_error(self.context, ERROR_SEND_FAILED)
            self.context.is_loading = False
            return False
        return True

    async def send_param_update(
        self,
        intent_id: str,
        param_overrides: dict[str, Any],
    ) -> bool:
        """Send edited intent parameters. No-op without a session."""
        session_id = self.context.session_id
        if not session_id:
            return False

        try:
            await self.client.send_param_update(session_id, intent_id, param_overrides)
        except BackendError as error:
            log_event(
                "param_update_failed",
                level=logging.ERROR,
                session_id=session_id,
                intent_id=intent_id,
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )
            append_error(self.context, ERROR_PARAM_UPDATE_FAILED)
            return False
        return True

    async def resolve_decision(self, decision_id: Any, option_id: Any) -> bool:
        return await self.decisions.resolve(decision_id, option_id)

    async def execute_command(self, message_id: str) -> bool:
        return await self.decisions.execute_command(message_id)
