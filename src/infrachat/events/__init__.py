"""Inbound event normalization and typed payloads."""

from .envelope import ENVELOPE_RULES, CanonicalEvent, normalize_envelope
from .payloads import (
    DecisionEvent,
    EditIntentArtifact,
    EventPayload,
    InfraResultArtifact,
    IntentArtifact,
    LogEvent,
    OperationUpdate,
    TokenEvent,
    UnknownEvent,
    parse_event,
)

__all__ = [
    "ENVELOPE_RULES",
    "CanonicalEvent",
    "DecisionEvent",
    "EditIntentArtifact",
    "EventPayload",
    "InfraResultArtifact",
    "IntentArtifact",
    "LogEvent",
    "OperationUpdate",
    "TokenEvent",
    "UnknownEvent",
    "normalize_envelope",
    "parse_event",
]
