"""Event reducer: applies one canonical event to the session transcript.

Every rule reads the current transcript state instead of assuming which
event came before it, so stream events and request/response completions
may interleave in any order.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..constants import (
    ERROR_DECISION_ID_FORMAT,
    ERROR_DECISION_ID_MISSING,
    MIN_DECISION_ID_LENGTH,
    TEXT_EDIT_PARAMETERS,
    TEXT_PARSING_INTENT,
)
from ..domain.transcript import (
    Decision,
    ExecutionStatus,
    Message,
    ParsedCommand,
    transition_execution_status,
)
from ..events import (
    DecisionEvent,
    EditIntentArtifact,
    EventPayload,
    InfraResultArtifact,
    IntentArtifact,
    LogEvent,
    OperationUpdate,
    TokenEvent,
    UnknownEvent,
    normalize_envelope,
    parse_event,
)
from ..logging import log_event
from .state import SessionContext, append_error, last_assistant_message
from .store import MessageStore


OPERATION_INTENT_PARSE = "intent_parse"
OPERATION_INFRA_EXECUTE = "infra_execute"

STATUS_RUNNING = "running"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"


def review_summary(command: ParsedCommand) -> str:
    """Summary line shown on an intent review message."""
    return f"Reviewing summary ~ {command.action} {command.resource}"


def matches_intent(
    message: Message,
    command: ParsedCommand,
    intent_id: Optional[str],
) -> bool:
    """Return True when a message holds the same intent.

    The backend intent id is used when both sides carry one; otherwise the
    ``(action, resource)`` pair decides.
    """
    if message.parsed_command is None:
        return False
    if intent_id and message.intent_id:
        return message.intent_id == intent_id
    return message.parsed_command.matches(command.action, command.resource)


def _is_review(message: Message) -> bool:
    return (
        message.event_type == "artifact"
        and message.parsed_command is not None
        and not message.is_edit_mode
    )


class EventReducer:
    """State machine mapping canonical events onto transcript mutations."""

    def __init__(
        self,
        context: SessionContext,
        *,
        min_decision_id_length: int = MIN_DECISION_ID_LENGTH,
    ):
        self.context = context
        self.min_decision_id_length = min_decision_id_length

    @property
    def store(self) -> MessageStore:
        return self.context.store

    def apply(self, raw: Any) -> Optional[EventPayload]:
        """Normalize, parse and apply one raw inbound event.

        Returns:
            The typed payload that was applied, or None when the envelope
            was unrecognized or the rule failed.
        """
        event = normalize_envelope(raw)
        if event is None:
            return None

        payload = parse_event(event)
        try:
            self.dispatch(payload)
        except Exception as error:
            log_event(
                "reducer_error",
                level=logging.ERROR,
                event_type=event.event_type,
                error_type=type(error).__name__,
                error=str(error),
            )
            logging.error("Reducer rule failed: %s", error, exc_info=True)
            return None

        log_event(
            "event_applied",
            level=logging.DEBUG,
            event_type=event.event_type,
            kind=payload.kind,
            message_count=len(self.store),
        )
        return payload

    def dispatch(self, payload: EventPayload) -> None:
        """Apply an already-typed payload."""
        if isinstance(payload, LogEvent):
            self._on_log(payload)
        elif isinstance(payload, TokenEvent):
            self._on_token(payload)
        elif isinstance(payload, IntentArtifact):
            self._on_intent(payload)
        elif isinstance(payload, EditIntentArtifact):
            self._on_intent_for_edit(payload)
        elif isinstance(payload, InfraResultArtifact):
            self._on_infra_result(payload)
        elif isinstance(payload, OperationUpdate):
            self._on_operation_update(payload)
        elif isinstance(payload, DecisionEvent):
            self._on_decision(payload)
        elif isinstance(payload, UnknownEvent):
            log_event(
                "event_ignored",
                level=logging.INFO,
                event_type=payload.event_type,
                reason=payload.reason,
            )

    # ===================================================================
    # Rules
    # ===================================================================

    def _on_log(self, payload: LogEvent) -> None:
        # User-role info logs echo the user's own message, already in the transcript.
        log_event(
            "backend_log",
            level=logging.DEBUG,
            backend_level=payload.level,
            role=payload.role,
            text=payload.text,
        )

    def _on_token(self, payload: TokenEvent) -> None:
        if not payload.text:
            return
        last = self.store.last()
        if last is not None and last.accepts_tokens:
            last.content += payload.text
            self.store.touch(last)
        else:
            self.store.append(payload.text, "assistant", event_type="token")

    def _on_intent(self, payload: IntentArtifact) -> None:
        self.context.current_intent = payload.command

        existing = self._find_duplicate_intent(payload.command, payload.intent_id)
        if existing is not None:
            log_event(
                "intent_duplicate_suppressed",
                level=logging.INFO,
                intent_id=payload.intent_id,
                action=payload.command.action,
                resource=payload.command.resource,
                message_id=existing.id,
            )
            return

        self.store.append(
            "",
            "assistant",
            intent_id=payload.intent_id,
            parsed_command=payload.command,
            summary=review_summary(payload.command),
            event_type="artifact",
        )

    def _on_intent_for_edit(self, payload: EditIntentArtifact) -> None:
        self.context.current_intent = payload.command

        decision_message = self.store.find_first(
            lambda m: m.is_decision and matches_intent(m, payload.command, payload.intent_id)
        )
        if decision_message is not None:
            self.store.update(
                decision_message.id,
                is_decision=False,
                is_edit_mode=True,
                intent_id=payload.intent_id,
                parsed_command=payload.command,
                content=TEXT_EDIT_PARAMETERS,
                decision_options=None,
            )
            log_event(
                "decision_to_edit_mode",
                level=logging.INFO,
                message_id=decision_message.id,
                intent_id=payload.intent_id,
            )
            return

        log_event(
            "edit_message_created",
            level=logging.INFO,
            intent_id=payload.intent_id,
            reason="no matching decision message",
        )
        self.store.append(
            TEXT_EDIT_PARAMETERS,
            "assistant",
            intent_id=payload.intent_id,
            is_edit_mode=True,
            parsed_command=payload.command,
            event_type="artifact",
        )

    def _on_infra_result(self, payload: InfraResultArtifact) -> None:
        text = payload.combined_text
        target = last_assistant_message(self.context)
        if target is not None:
            self.store.update(
                target.id,
                raw_content=text,
                execution_status=ExecutionStatus.completed(),
            )
            return

        self.store.append(
            text,
            "assistant",
            raw_content=text,
            execution_status=ExecutionStatus.completed(),
        )

    def _on_operation_update(self, payload: OperationUpdate) -> None:
        if payload.status == STATUS_RUNNING:
            self.context.is_loading = True
            if payload.operation == OPERATION_INTENT_PARSE:
                target = last_assistant_message(self.context)
                if target is not None:
                    self.store.update(target.id, content=TEXT_PARSING_INTENT)
                else:
                    self.store.append(TEXT_PARSING_INTENT, "assistant")
            elif payload.operation == OPERATION_INFRA_EXECUTE:
                self._set_last_status(ExecutionStatus.running())
            return

        if payload.status in (STATUS_SUCCEEDED, STATUS_FAILED):
            self.context.is_loading = False
            if payload.operation == OPERATION_INFRA_EXECUTE:
                if payload.status == STATUS_SUCCEEDED:
                    status = ExecutionStatus.succeeded(payload.detail)
                else:
                    status = ExecutionStatus.failed(payload.detail)
                self._set_last_status(status)
            return

        log_event(
            "operation_status_ignored",
            level=logging.INFO,
            status=payload.status,
            operation=payload.operation,
        )

    def _on_decision(self, payload: DecisionEvent) -> None:
        decision_id = payload.decision_id
        if not decision_id:
            log_event(
                "decision_rejected",
                level=logging.ERROR,
                reason="missing decision id",
                prompt=payload.prompt,
            )
            append_error(self.context, ERROR_DECISION_ID_MISSING)
            return

        if len(decision_id) < self.min_decision_id_length:
            log_event(
                "decision_rejected",
                level=logging.ERROR,
                decision_id=decision_id,
                reason="decision id too short",
            )
            append_error(self.context, ERROR_DECISION_ID_FORMAT)
            return

        existing = self.store.find_by_decision_id(decision_id)
        if existing is not None:
            # Replayed frame; the decision already has its transcript entry.
            log_event(
                "decision_duplicate_suppressed",
                level=logging.INFO,
                decision_id=decision_id,
                message_id=existing.id,
            )
            return

        self.context.current_decision = Decision(
            id=decision_id,
            session_id=self.context.session_id or "",
            kind=payload.decision_kind,
            prompt=payload.prompt,
            options=payload.options,
            metadata=dict(payload.metadata),
        )

        message = self.store.append(
            "",
            "assistant",
            decision_id=decision_id,
            is_decision=True,
            parsed_command=payload.command,
            intent_id=payload.intent_id,
            summary=payload.prompt,
            decision_options=payload.options,
            event_type="decision",
        )
        log_event(
            "decision_created",
            level=logging.INFO,
            decision_id=decision_id,
            message_id=message.id,
            option_count=len(payload.options),
        )

    # ===================================================================
    # Helpers
    # ===================================================================

    def _find_duplicate_intent(
        self,
        command: ParsedCommand,
        intent_id: Optional[str],
    ) -> Optional[Message]:
        """Find a message that already represents this intent.

        Open decision messages match by intent id or ``(action, resource)``.
        Review messages match by intent id anywhere in the transcript; without
        ids only the latest intent-bearing message is compared, so a later
        request for the same action and resource is not swallowed.
        """
        latest_with_command = None
        for message in reversed(self.store.messages):
            if message.parsed_command is not None:
                latest_with_command = message
                break

        def _is_duplicate(message: Message) -> bool:
            if message.is_decision:
                return matches_intent(message, command, intent_id)
            if not _is_review(message):
                return False
            if intent_id and message.intent_id:
                return message.intent_id == intent_id
            return message is latest_with_command and matches_intent(
                message, command, intent_id
            )

        return self.store.find_first(_is_duplicate)

    def _set_last_status(self, status: ExecutionStatus) -> None:
        last = self.store.last()
        if last is None:
            return
        self.store.update(
            last.id,
            execution_status=transition_execution_status(last.execution_status, status),
        )
