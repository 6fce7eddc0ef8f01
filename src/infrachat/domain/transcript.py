"""Typed transcript domain models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from ..logging import log_event
from ..message_ids import generate_message_id
from ..time_utils import utc_now_iso


Role = Literal["user", "assistant"]
EventType = Literal["log", "token", "artifact", "operation_update", "decision"]

STATUS_RUNNING_TEXT = "Running..."
STATUS_COMPLETED_TEXT = "Operation completed"
STATUS_SUCCEEDED_TEXT = "Operation completed successfully"
STATUS_FAILED_TEXT = "Operation failed"
STATUS_CANCELLED_TEXT = "Cancelled"


def _text_or_empty(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(slots=True)
class ParsedCommand:
    """Snapshot of a backend-parsed intent."""

    action: str = ""
    resource: str = ""
    provider: str = ""
    tool: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_intent(cls, intent: Mapping[str, Any]) -> ParsedCommand:
        """Build from a backend intent mapping (``params`` holds parameters)."""
        params = intent.get("params")
        return cls(
            action=_text_or_empty(intent.get("action")),
            resource=_text_or_empty(intent.get("resource")),
            provider=_text_or_empty(intent.get("provider")),
            tool=_text_or_empty(intent.get("tool")),
            parameters=dict(params) if isinstance(params, Mapping) else {},
        )

    def matches(self, action: str, resource: str) -> bool:
        """Return True when action and resource both match."""
        return self.action == action and self.resource == resource

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "resource": self.resource,
            "provider": self.provider,
            "tool": self.tool,
            "parameters": dict(self.parameters),
        }


@dataclass(slots=True, frozen=True)
class ExecutionStatus:
    """Execution state attached to a transcript message."""

    is_running: bool
    is_complete: bool
    success: bool
    message: str

    @property
    def is_terminal(self) -> bool:
        return self.is_complete

    @classmethod
    def running(cls) -> ExecutionStatus:
        return cls(is_running=True, is_complete=False, success=False, message=STATUS_RUNNING_TEXT)

    @classmethod
    def completed(cls) -> ExecutionStatus:
        return cls(is_running=False, is_complete=True, success=True, message=STATUS_COMPLETED_TEXT)

    @classmethod
    def succeeded(cls, detail: Optional[str] = None) -> ExecutionStatus:
        return cls(
            is_running=False,
            is_complete=True,
            success=True,
            message=detail or STATUS_SUCCEEDED_TEXT,
        )

    @classmethod
    def failed(cls, detail: Optional[str] = None) -> ExecutionStatus:
        return cls(
            is_running=False,
            is_complete=True,
            success=False,
            message=detail or STATUS_FAILED_TEXT,
        )

    @classmethod
    def cancelled(cls) -> ExecutionStatus:
        return cls(is_running=False, is_complete=True, success=False, message=STATUS_CANCELLED_TEXT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "is_complete": self.is_complete,
            "success": self.success,
            "message": self.message,
        }


def transition_execution_status(
    current: Optional[ExecutionStatus],
    new: ExecutionStatus,
) -> ExecutionStatus:
    """Return the status a message should carry after a requested change.

    A terminal status never goes back to running; the rejected change is
    logged and the current status kept.
    """
    if current is not None and current.is_terminal and not new.is_terminal:
        log_event(
            "status_transition_rejected",
            level=logging.WARNING,
            current=current.message,
            requested=new.message,
        )
        return current
    return new


@dataclass(slots=True, frozen=True)
class DecisionOption:
    """One selectable option of a decision."""

    id: str
    label: str
    description: Optional[str] = None

    @classmethod
    def parse_many(cls, raw_options: Any) -> tuple[DecisionOption, ...]:
        """Parse option mappings leniently, dropping entries without an id."""
        if not isinstance(raw_options, (list, tuple)):
            return ()
        options: list[DecisionOption] = []
        for raw in raw_options:
            if not isinstance(raw, Mapping) or not raw.get("id"):
                log_event("decision_option_dropped", level=logging.WARNING, option=raw)
                continue
            option_id = str(raw["id"])
            description = raw.get("description")
            options.append(
                cls(
                    id=option_id,
                    label=_text_or_empty(raw.get("label")) or option_id,
                    description=str(description) if description is not None else None,
                )
            )
        return tuple(options)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "label": self.label}
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(slots=True)
class Decision:
    """Backend-posed choice awaiting user resolution."""

    id: str
    session_id: str
    kind: str
    prompt: str
    options: tuple[DecisionOption, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Message:
    """One transcript entry."""

    content: str
    role: Role
    id: str = field(default_factory=generate_message_id)
    timestamp: str = field(default_factory=utc_now_iso)
    raw_content: Optional[str] = None
    parsed_command: Optional[ParsedCommand] = None
    summary: Optional[str] = None
    execution_status: Optional[ExecutionStatus] = None
    intent_id: Optional[str] = None
    decision_id: Optional[str] = None
    decision_options: Optional[tuple[DecisionOption, ...]] = None
    is_decision: bool = False
    is_edit_mode: bool = False
    event_type: Optional[EventType] = None

    @property
    def accepts_tokens(self) -> bool:
        """Return True when streamed tokens may be appended to this message."""
        return self.role == "assistant" and not self.is_decision

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain snapshot for rendering and diagnostics."""
        payload: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
            "is_decision": self.is_decision,
            "is_edit_mode": self.is_edit_mode,
        }
        if self.raw_content is not None:
            payload["raw_content"] = self.raw_content
        if self.parsed_command is not None:
            payload["parsed_command"] = self.parsed_command.to_dict()
        if self.summary is not None:
            payload["summary"] = self.summary
        if self.execution_status is not None:
            payload["execution_status"] = self.execution_status.to_dict()
        if self.intent_id is not None:
            payload["intent_id"] = self.intent_id
        if self.decision_id is not None:
            payload["decision_id"] = self.decision_id
        if self.decision_options is not None:
            payload["decision_options"] = [o.to_dict() for o in self.decision_options]
        if self.event_type is not None:
            payload["event_type"] = self.event_type
        return payload
