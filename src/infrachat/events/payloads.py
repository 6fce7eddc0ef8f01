"""Typed event payload variants exchanged between normalizer and reducer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional, TypeAlias

from ..domain.transcript import DecisionOption, ParsedCommand
from .envelope import CanonicalEvent


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Backend log line."""

    level: str
    role: str
    text: str
    kind: Literal["log"] = "log"


@dataclass(slots=True, frozen=True)
class TokenEvent:
    """Incrementally streamed assistant text."""

    text: str
    kind: Literal["token"] = "token"


@dataclass(slots=True, frozen=True)
class IntentArtifact:
    """Parsed intent ready for review."""

    command: ParsedCommand
    intent_id: Optional[str]
    kind: Literal["intent"] = "intent"


@dataclass(slots=True, frozen=True)
class EditIntentArtifact:
    """Parsed intent the user asked to edit."""

    command: ParsedCommand
    intent_id: Optional[str]
    kind: Literal["intent_for_edit"] = "intent_for_edit"


@dataclass(slots=True, frozen=True)
class InfraResultArtifact:
    """Result of an executed infrastructure command."""

    result: str
    stdout: str
    kind: Literal["infra_result"] = "infra_result"

    @property
    def combined_text(self) -> str:
        if self.stdout:
            return f"{self.result}\n\n{self.stdout}"
        return self.result


@dataclass(slots=True, frozen=True)
class OperationUpdate:
    """Progress report for a backend operation (``intent_parse``, ``infra_execute``)."""

    status: str
    operation: str
    detail: Optional[str] = None
    kind: Literal["operation_update"] = "operation_update"


@dataclass(slots=True, frozen=True)
class DecisionEvent:
    """Backend-posed choice."""

    decision_id: Optional[str]
    decision_kind: str
    prompt: str
    options: tuple[DecisionOption, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    command: Optional[ParsedCommand] = None
    intent_id: Optional[str] = None
    kind: Literal["decision"] = "decision"


@dataclass(slots=True, frozen=True)
class UnknownEvent:
    """Any event the reducer has no rule for."""

    event_type: str
    payload: dict[str, Any]
    reason: str
    kind: Literal["unknown"] = "unknown"


EventPayload: TypeAlias = (
    LogEvent
    | TokenEvent
    | IntentArtifact
    | EditIntentArtifact
    | InfraResultArtifact
    | OperationUpdate
    | DecisionEvent
    | UnknownEvent
)


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_artifact(event: CanonicalEvent) -> EventPayload:
    payload = event.payload
    artifact_kind = payload.get("kind")
    data = payload.get("data")
    if not isinstance(data, Mapping):
        data = {}

    if artifact_kind in ("intent", "intent_for_edit"):
        intent = data.get("intent")
        if not isinstance(intent, Mapping):
            return UnknownEvent(event.event_type, payload, reason="artifact without intent")
        command = ParsedCommand.from_intent(intent)
        intent_id = _optional_text(data.get("intent_id"))
        if artifact_kind == "intent":
            return IntentArtifact(command=command, intent_id=intent_id)
        return EditIntentArtifact(command=command, intent_id=intent_id)

    if artifact_kind == "infra_result":
        return InfraResultArtifact(
            result=_text(data.get("result")),
            stdout=_text(data.get("stdout")),
        )

    return UnknownEvent(
        event.event_type,
        payload,
        reason=f"unknown artifact kind: {artifact_kind!r}",
    )


def _parse_decision(event: CanonicalEvent) -> DecisionEvent:
    payload = event.payload
    metadata_raw = payload.get("metadata")
    metadata = dict(metadata_raw) if isinstance(metadata_raw, Mapping) else {}

    intent = metadata.get("intent")
    command = ParsedCommand.from_intent(intent) if isinstance(intent, Mapping) else None

    intent_id = _optional_text(metadata.get("intent_id"))
    if intent_id is None and isinstance(intent, Mapping):
        intent_id = _optional_text(intent.get("intent_id"))

    decision_id = payload.get("decision_id")
    return DecisionEvent(
        decision_id=decision_id if isinstance(decision_id, str) and decision_id else None,
        decision_kind=_text(payload.get("kind")),
        prompt=_text(payload.get("prompt")),
        options=DecisionOption.parse_many(payload.get("options")),
        metadata=metadata,
        command=command,
        intent_id=intent_id,
    )


def parse_event(event: CanonicalEvent) -> EventPayload:
    """Turn a canonical event into its typed payload variant."""
    payload = event.payload

    if event.event_type == "log":
        return LogEvent(
            level=_text(payload.get("level")),
            role=_text(payload.get("role")),
            text=_text(payload.get("text")),
        )

    if event.event_type == "token":
        return TokenEvent(text=_text(payload.get("text")))

    if event.event_type == "artifact":
        return _parse_artifact(event)

    if event.event_type == "operation_update":
        return OperationUpdate(
            status=_text(payload.get("status")),
            operation=_text(payload.get("kind")),
            detail=_optional_text(payload.get("detail")),
        )

    if event.event_type == "decision":
        return _parse_decision(event)

    return UnknownEvent(
        event.event_type,
        payload,
        reason=f"unknown event type: {event.event_type!r}",
    )
