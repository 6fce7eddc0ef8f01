"""Ordered transcript store with lookup and change notification."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Iterator, Literal, Optional

from ..domain.transcript import Message, Role
from ..logging import log_event


StoreChange = Literal["append", "update", "clear"]
StoreListener = Callable[[StoreChange, Optional[Message]], None]

_IMMUTABLE_MESSAGE_FIELDS = frozenset({"id", "role", "timestamp"})


class MessageStore:
    """Append-only-by-default list of transcript entries.

    Entries are appended in arrival order. The reducer and decision
    coordinator rewrite fields through ``update``; token growth mutates the
    last message in place and announces it with ``touch``.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[StoreListener] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def messages(self) -> tuple[Message, ...]:
        """Read-only view of the transcript in order."""
        return tuple(self._messages)

    # ===================================================================
    # Mutation
    # ===================================================================

    def append(self, content: str, role: Role, **fields: Any) -> Message:
        """Create and append a new message."""
        message = Message(content=content, role=role, **fields)
        self._messages.append(message)
        self._notify("append", message)
        return message

    def update(self, message_id: str, **changes: Any) -> Optional[Message]:
        """Merge field changes into an existing message.

        Returns:
            Updated message, or None when no message has that id
        """
        blocked = _IMMUTABLE_MESSAGE_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot update message fields: {', '.join(sorted(blocked))}")

        message = self.get(message_id)
        if message is None:
            return None

        known = {f.name for f in dataclasses.fields(Message)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown message fields: {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            setattr(message, name, value)
        self._notify("update", message)
        return message

    def touch(self, message: Message) -> None:
        """Announce an in-place mutation of a stored message."""
        self._notify("update", message)

    def clear(self) -> None:
        """Drop every message."""
        self._messages.clear()
        self._notify("clear", None)

    # ===================================================================
    # Lookup
    # ===================================================================

    def last(self) -> Optional[Message]:
        """Return the most recent message, if any."""
        if not self._messages:
            return None
        return self._messages[-1]

    def get(self, message_id: str) -> Optional[Message]:
        """Look up a message by id."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def find_by_decision_id(self, decision_id: str) -> Optional[Message]:
        """Look up the message that materializes a decision."""
        return self.find_first(lambda m: m.decision_id == decision_id)

    def find_first(self, predicate: Callable[[Message], bool]) -> Optional[Message]:
        """Return the first message (oldest first) matching predicate."""
        for message in self._messages:
            if predicate(message):
                return message
        return None

    def index_of(self, message_id: str) -> Optional[int]:
        """Return the 0-based position of a message, or None."""
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return None

    # ===================================================================
    # Observers
    # ===================================================================

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, change: StoreChange, message: Optional[Message]) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(change, message)
            except Exception as error:
                log_event(
                    "store_listener_error",
                    level=logging.ERROR,
                    change=change,
                    error_type=type(error).__name__,
                    error=str(error),
                )
