"""Typed domain models for transcript entries and configuration."""

from .config import ClientConfig
from .transcript import (
    Decision,
    DecisionOption,
    ExecutionStatus,
    Message,
    ParsedCommand,
    transition_execution_status,
)

__all__ = [
    "ClientConfig",
    "Decision",
    "DecisionOption",
    "ExecutionStatus",
    "Message",
    "ParsedCommand",
    "transition_execution_status",
]
