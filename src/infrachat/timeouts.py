"""Centralized timeout and reconnect policy helpers."""

from __future__ import annotations

import math
from typing import Any

import httpx


# Request read timeout default (seconds, 0 = wait forever).
DEFAULT_REQUEST_TIMEOUT_SEC = 30

# Shared HTTP timeout buckets.
HTTP_CONNECT_TIMEOUT_SEC = 10.0
HTTP_WRITE_TIMEOUT_SEC = 15.0
HTTP_POOL_TIMEOUT_SEC = 5.0

# Fixed delay before re-opening a dropped event stream.
STREAM_RECONNECT_DELAY_SEC = 3.0


def normalize_timeout(value: Any) -> int | float:
    """Normalize timeout to int/float and reject invalid values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Timeout must be a non-negative finite number")
    numeric = float(value)
    if not math.isfinite(numeric) or numeric < 0:
        raise ValueError("Timeout must be a non-negative finite number")
    if numeric.is_integer():
        return int(numeric)
    return numeric


def format_timeout(timeout: int | float) -> str:
    """Format timeout value for user-facing messages."""
    if timeout == 0:
        return "0 (wait forever)"
    return f"{timeout} seconds"


def build_request_timeout(read_timeout_sec: int | float) -> httpx.Timeout:
    """Build httpx timeout config for request/response calls."""
    timeout_sec = normalize_timeout(read_timeout_sec)
    return httpx.Timeout(
        connect=HTTP_CONNECT_TIMEOUT_SEC,
        read=timeout_sec if timeout_sec > 0 else None,
        write=HTTP_WRITE_TIMEOUT_SEC,
        pool=HTTP_POOL_TIMEOUT_SEC,
    )


def build_stream_timeout() -> httpx.Timeout:
    """Build httpx timeout config for the long-lived event stream.

    The read timeout is disabled: the server may stay silent for as long as
    no event is pending.
    """
    return httpx.Timeout(
        connect=HTTP_CONNECT_TIMEOUT_SEC,
        read=None,
        write=HTTP_WRITE_TIMEOUT_SEC,
        pool=HTTP_POOL_TIMEOUT_SEC,
    )
