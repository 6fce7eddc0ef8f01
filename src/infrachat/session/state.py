"""Session context model and state-scoped helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from ..domain.transcript import Decision, Message, ParsedCommand
from .store import MessageStore


SessionPhase = Literal["idle", "active", "cleared"]


@dataclass
class SessionContext:
    """State owned by one client instance for its single live session.

    Lifecycle: ``idle`` (no session yet) -> ``active`` (session id set) ->
    ``cleared`` (session and transcript discarded) -> ``active`` again once
    a replacement session exists.
    """

    store: MessageStore = field(default_factory=MessageStore)
    session_id: Optional[str] = None
    phase: SessionPhase = "idle"
    is_loading: bool = False
    is_connected: bool = False
    current_decision: Optional[Decision] = None
    current_intent: Optional[ParsedCommand] = None

    @property
    def has_session(self) -> bool:
        return self.session_id is not None

    def activate(self, session_id: str) -> None:
        """Adopt a freshly created session."""
        self.session_id = session_id
        self.phase = "active"

    def reset(self) -> None:
        """Discard session identity, transcript and per-session caches."""
        self.session_id = None
        self.phase = "cleared"
        self.is_loading = False
        self.is_connected = False
        self.current_decision = None
        self.current_intent = None
        self.store.clear()


def append_error(context: SessionContext, text: str) -> Message:
    """Append a user-visible error entry to the transcript."""
    return context.store.append(text, "assistant")


def last_assistant_message(context: SessionContext) -> Optional[Message]:
    """Return the last message when it is an assistant message."""
    last = context.store.last()
    if last is not None and last.role == "assistant":
        return last
    return None
