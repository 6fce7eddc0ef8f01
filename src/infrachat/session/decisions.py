"""Decision resolution: validation, backend call, and local effect."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from ..constants import (
    ERROR_DECISION_ID_TOO_SHORT,
    ERROR_INVALID_DECISION_ID,
    ERROR_INVALID_OPTION_ID,
    ERROR_RESOLVE_FAILED,
    MIN_DECISION_ID_LENGTH,
    OPTION_CANCEL,
    OPTION_RUN,
    TEXT_OPERATION_CANCELLED,
)
from ..domain.transcript import ExecutionStatus, Message, transition_execution_status
from ..logging import log_event, sanitize_error_message
from ..transport.api import BackendError
from .state import SessionContext, append_error

if TYPE_CHECKING:
    from ..transport.api import BackendClient


def validate_resolution(
    decision_id: Any,
    option_id: Any,
    min_length: int = MIN_DECISION_ID_LENGTH,
) -> Optional[str]:
    """Validate identifiers before they may reach the resolution endpoint.

    Returns:
        User-facing error text, or None when both ids are usable
    """
    if not decision_id or not isinstance(decision_id, str):
        return ERROR_INVALID_DECISION_ID
    if not option_id or not isinstance(option_id, str):
        return ERROR_INVALID_OPTION_ID
    if len(decision_id) < min_length:
        return ERROR_DECISION_ID_TOO_SHORT
    return None


class DecisionCoordinator:
    """Resolve decisions against the backend and reflect the outcome locally."""

    def __init__(
        self,
        context: SessionContext,
        client: BackendClient,
        *,
        min_decision_id_length: int = MIN_DECISION_ID_LENGTH,
    ):
        self.context = context
        self.client = client
        self.min_decision_id_length = min_decision_id_length

    async def resolve(self, decision_id: Any, option_id: Any) -> bool:
        """Resolve a decision with the selected option.

        Returns:
            True when the backend accepted the resolution
        """
        error_text = validate_resolution(
            decision_id, option_id, self.min_decision_id_length
        )
        if error_text is not None:
            log_event(
                "decision_rejected",
                level=logging.ERROR,
                decision_id=decision_id,
                option_id=option_id,
                reason=error_text,
            )
            append_error(self.context, error_text)
            return False

        try:
            await self.client.resolve_decision(decision_id, option_id)
        except BackendError as error:
            log_event(
                "decision_resolve_failed",
                level=logging.ERROR,
                decision_id=decision_id,
                option_id=option_id,
                error_type=type(error).__name__,
                error=sanitize_error_message(str(error)),
            )
            append_error(self.context, ERROR_RESOLVE_FAILED)
            return False

        self.apply_resolution(decision_id, option_id)
        return True

    def apply_resolution(self, decision_id: str, option_id: str) -> Optional[Message]:
        """Reflect an accepted resolution on the decision's transcript message.

        A missing message is logged only; later stream events may still
        bring the transcript up to date.
        """
        current = self.context.current_decision
        if current is not None and current.id == decision_id:
            self.context.current_decision = None

        message = self.context.store.find_by_decision_id(decision_id)
        if message is None:
            log_event(
                "decision_message_missing",
                level=logging.WARNING,
                decision_id=decision_id,
                option_id=option_id,
            )
            return None

        changes: dict[str, Any] = {"is_decision": False}
        if option_id == OPTION_RUN:
            changes["execution_status"] = transition_execution_status(
                message.execution_status, ExecutionStatus.running()
            )
        elif option_id == OPTION_CANCEL:
            changes["content"] = TEXT_OPERATION_CANCELLED
            changes["execution_status"] = ExecutionStatus.cancelled()
        self.context.store.update(message.id, **changes)

        log_event(
            "decision_resolved",
            level=logging.INFO,
            decision_id=decision_id,
            option_id=option_id,
            message_id=message.id,
        )
        return message

    async def execute_command(self, message_id: str) -> bool:
        """Resolve a message's pending decision with the ``run`` option.

        No-op when the message is unknown or carries no decision.
        """
        message = self.context.store.get(message_id)
        if message is None or not message.decision_id:
            return False
        return await self.resolve(message.decision_id, OPTION_RUN)
