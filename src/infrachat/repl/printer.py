"""Print transcript changes as they happen."""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..domain.transcript import Message
from ..formatting import format_message, format_role
from ..session.store import MessageStore, StoreChange


Writer = Callable[..., None]


def _fingerprint(message: Message) -> dict[str, Any]:
    payload = message.to_dict()
    payload.pop("content", None)
    return payload


class TranscriptPrinter:
    """Store listener that renders each change once.

    Token growth on the most recent message is streamed as a text delta;
    every other change re-renders the whole message.
    """

    def __init__(self, store: MessageStore, write: Optional[Writer] = None):
        self.store = store
        self._write = write or print
        self._printed: dict[str, tuple[str, dict[str, Any]]] = {}
        self._streaming_id: Optional[str] = None

    def __call__(self, change: StoreChange, message: Optional[Message]) -> None:
        if change == "clear":
            self._end_stream()
            self._printed.clear()
            return
        if message is None:
            return

        if self._is_token_growth(change, message):
            self._stream(message)
            return

        self._end_stream()
        index = self.store.index_of(message.id)
        self._write(format_message(message, index + 1 if index is not None else None))
        self._printed[message.id] = (message.content, _fingerprint(message))

    def _is_token_growth(self, change: StoreChange, message: Message) -> bool:
        if change == "append":
            return message.event_type == "token"
        if self.store.last() is not message:
            return False
        previous = self._printed.get(message.id)
        if previous is None:
            return False
        content, fingerprint = previous
        return (
            len(message.content) > len(content)
            and message.content.startswith(content)
            and _fingerprint(message) == fingerprint
        )

    def _stream(self, message: Message) -> None:
        previous = self._printed.get(message.id)
        printed = previous[0] if previous else ""
        if self._streaming_id != message.id:
            self._end_stream()
            if previous is None:
                self._write(f"{format_role(message)}:")
            self._streaming_id = message.id
        delta = message.content[len(printed):]
        if delta:
            self._write(delta, end="", flush=True)
        self._printed[message.id] = (message.content, _fingerprint(message))

    def _end_stream(self) -> None:
        if self._streaming_id is not None:
            self._streaming_id = None
            self._write("")
