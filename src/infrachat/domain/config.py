"""Typed client configuration model used at config I/O boundaries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlparse

from ..constants import DEFAULT_BASE_URL, DEFAULT_LOGS_DIR, MIN_DECISION_ID_LENGTH
from ..timeouts import DEFAULT_REQUEST_TIMEOUT_SEC, STREAM_RECONNECT_DELAY_SEC


_KNOWN_CONFIG_KEYS = {
    "base_url",
    "timeout",
    "reconnect_delay",
    "min_decision_id_length",
    "logs_dir",
}


def _require_non_negative_number(raw: Any, name: str) -> int | float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"'{name}' must be a number")
    if not math.isfinite(float(raw)) or raw < 0:
        raise ValueError(f"'{name}' must be a non-negative finite number")
    return raw


def _require_positive_number(raw: Any, name: str) -> int | float:
    value = _require_non_negative_number(raw, name)
    if value == 0:
        raise ValueError(f"'{name}' must be greater than zero")
    return value


def validate_base_url(value: Any) -> str:
    """Validate and normalize a backend base URL (no trailing slash)."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("'base_url' must be a non-empty string")
    url = value.strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"'base_url' must be an http(s) URL: {value}")
    return url


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration consumed by the controller and CLI layers."""

    base_url: str = DEFAULT_BASE_URL
    timeout: int | float = DEFAULT_REQUEST_TIMEOUT_SEC
    reconnect_delay: int | float = STREAM_RECONNECT_DELAY_SEC
    min_decision_id_length: int = MIN_DECISION_ID_LENGTH
    logs_dir: str = DEFAULT_LOGS_DIR
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_positive_number(self.reconnect_delay, "reconnect_delay")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ClientConfig:
        """Create typed config from raw mapped config data."""
        if not isinstance(raw, Mapping):
            raise ValueError("Config must be a dictionary-like mapping")

        base_url = validate_base_url(raw.get("base_url", DEFAULT_BASE_URL))
        timeout = _require_non_negative_number(
            raw.get("timeout", DEFAULT_REQUEST_TIMEOUT_SEC), "timeout"
        )
        reconnect_delay = raw.get("reconnect_delay", STREAM_RECONNECT_DELAY_SEC)

        min_length = raw.get("min_decision_id_length", MIN_DECISION_ID_LENGTH)
        if isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 1:
            raise ValueError("'min_decision_id_length' must be a positive integer")

        logs_dir = raw.get("logs_dir", DEFAULT_LOGS_DIR)
        if not isinstance(logs_dir, str) or not logs_dir.strip():
            raise ValueError("'logs_dir' must be a non-empty string")

        extras = {
            str(key): value
            for key, value in raw.items()
            if key not in _KNOWN_CONFIG_KEYS
        }

        return cls(
            base_url=base_url,
            timeout=timeout,
            reconnect_delay=reconnect_delay,
            min_decision_id_length=min_length,
            logs_dir=logs_dir,
            extras=extras,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to standard dict shape."""
        payload: dict[str, Any] = {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "reconnect_delay": self.reconnect_delay,
            "min_decision_id_length": self.min_decision_id_length,
            "logs_dir": self.logs_dir,
        }
        payload.update(self.extras)
        return payload
