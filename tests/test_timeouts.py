"""Tests for timeout policy helpers."""

import pytest

from infrachat.timeouts import (
    HTTP_CONNECT_TIMEOUT_SEC,
    build_request_timeout,
    build_stream_timeout,
    format_timeout,
    normalize_timeout,
)


def test_normalize_timeout():
    assert normalize_timeout(30.0) == 30
    assert isinstance(normalize_timeout(30.0), int)
    assert normalize_timeout(2.5) == 2.5


@pytest.mark.parametrize("value", [True, -1, "30", float("nan")])
def test_normalize_timeout_rejects_invalid(value):
    with pytest.raises(ValueError):
        normalize_timeout(value)


def test_format_timeout():
    assert format_timeout(0) == "0 (wait forever)"
    assert format_timeout(30) == "30 seconds"


def test_request_and_stream_timeouts():
    request_timeout = build_request_timeout(30)
    forever = build_request_timeout(0)
    stream_timeout = build_stream_timeout()

    assert request_timeout.read == 30
    assert request_timeout.connect == HTTP_CONNECT_TIMEOUT_SEC
    assert forever.read is None
    assert stream_timeout.read is None
