"""Backend transport: HTTP endpoints and the server-push event stream."""

from .api import (
    BackendClient,
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    BackendTransportError,
)
from .sse import SSEFrame, iter_sse_frames

__all__ = [
    "BackendClient",
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BackendTransportError",
    "SSEFrame",
    "iter_sse_frames",
]
