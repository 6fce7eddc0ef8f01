"""Envelope normalization for pushed events.

The backend has emitted at least three envelope shapes for the same logical
event. None of them is treated as canonical; each shape is a named rule and
the rules are tried in a fixed priority order:

1. ``top_level``      ``{"type": ..., "payload": {...}}``
2. ``data_wrapped``   ``{"data": {"type": ..., "payload"?: {...}}}``
3. ``payload_typed``  ``{"payload": {"type": ..., "payload"?: {...}}}``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from ..logging import log_event, preview_raw


@dataclass(slots=True, frozen=True)
class CanonicalEvent:
    """Normalized ``(event_type, payload)`` pair."""

    event_type: str
    payload: dict[str, Any]


EnvelopeRule = Callable[[Mapping[str, Any]], Optional[CanonicalEvent]]


def _is_type(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _from_top_level(raw: Mapping[str, Any]) -> Optional[CanonicalEvent]:
    event_type = raw.get("type")
    payload = raw.get("payload")
    if _is_type(event_type) and isinstance(payload, Mapping):
        return CanonicalEvent(event_type, dict(payload))
    return None


def _from_data_wrapper(raw: Mapping[str, Any]) -> Optional[CanonicalEvent]:
    data = raw.get("data")
    if not isinstance(data, Mapping) or not _is_type(data.get("type")):
        return None
    inner = data.get("payload")
    payload = inner if isinstance(inner, Mapping) else data
    return CanonicalEvent(data["type"], dict(payload))


def _from_typed_payload(raw: Mapping[str, Any]) -> Optional[CanonicalEvent]:
    outer = raw.get("payload")
    if not isinstance(outer, Mapping) or not _is_type(outer.get("type")):
        return None
    inner = outer.get("payload")
    payload = inner if isinstance(inner, Mapping) else outer
    return CanonicalEvent(outer["type"], dict(payload))


ENVELOPE_RULES: tuple[tuple[str, EnvelopeRule], ...] = (
    ("top_level", _from_top_level),
    ("data_wrapped", _from_data_wrapper),
    ("payload_typed", _from_typed_payload),
)


def normalize_envelope(raw: Any) -> Optional[CanonicalEvent]:
    """Extract the canonical event from an arbitrarily shaped envelope.

    Returns:
        CanonicalEvent for the first matching rule, or None when no rule
        matches. Unrecognized envelopes are logged, never raised.
    """
    if not isinstance(raw, Mapping):
        log_event(
            "event_dropped",
            level=logging.WARNING,
            reason="envelope is not an object",
            raw=preview_raw(raw),
        )
        return None

    for shape, rule in ENVELOPE_RULES:
        event = rule(raw)
        if event is not None:
            log_event(
                "envelope_shape",
                level=logging.DEBUG,
                shape=shape,
                event_type=event.event_type,
            )
            return event

    log_event(
        "event_dropped",
        level=logging.WARNING,
        reason="unrecognized envelope shape",
        raw=preview_raw(raw),
    )
    return None
