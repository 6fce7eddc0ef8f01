"""Server-Sent Events framing over an async line iterator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Optional


DEFAULT_EVENT_NAME = "message"


@dataclass(slots=True, frozen=True)
class SSEFrame:
    """One dispatched server-sent event."""

    event: str = DEFAULT_EVENT_NAME
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


class _FrameBuilder:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.event: Optional[str] = None
        self.data_lines: list[str] = []
        self.id: Optional[str] = None
        self.retry: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.data_lines and self.event is None

    def feed(self, line: str) -> None:
        if line.startswith(":"):
            return
        name, sep, value = line.partition(":")
        if not sep:
            value = ""
        elif value.startswith(" "):
            value = value[1:]

        if name == "event":
            self.event = value
        elif name == "data":
            self.data_lines.append(value)
        elif name == "id":
            if "\x00" not in value:
                self.id = value
        elif name == "retry":
            if value.isdigit():
                self.retry = int(value)

    def build(self) -> SSEFrame:
        return SSEFrame(
            event=self.event or DEFAULT_EVENT_NAME,
            data="\n".join(self.data_lines),
            id=self.id,
            retry=self.retry,
        )


async def iter_sse_frames(lines: AsyncIterable[str]) -> AsyncIterator[SSEFrame]:
    """Group SSE text lines into frames.

    A blank line dispatches the pending frame. Comment lines (``:``) such as
    keep-alives are skipped. A partial frame left at end of stream is dropped.
    """
    builder = _FrameBuilder()
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line:
            builder.feed(line)
            continue
        if not builder.is_empty:
            yield builder.build()
        builder.reset()
