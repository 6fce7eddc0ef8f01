"""Render transcript messages as terminal text."""

from __future__ import annotations

import json
from typing import Iterable, Optional

from ..domain.transcript import DecisionOption, ExecutionStatus, Message, ParsedCommand
from ..time_utils import format_local_time
from .constants import (
    DATETIME_FORMAT_SHORT,
    DISPLAY_NONE,
    DISPLAY_UNKNOWN,
    EMOJI_ROLE_ASSISTANT,
    EMOJI_ROLE_USER,
    EMOJI_STATUS_FAILURE,
    EMOJI_STATUS_RUNNING,
    EMOJI_STATUS_SUCCESS,
    HISTORY_PREVIEW_LENGTH,
)
from .text import format_blocks, minify_text, truncate_text


def format_role(message: Message) -> str:
    if message.role == "user":
        return f"{EMOJI_ROLE_USER} User"
    if message.role == "assistant":
        return f"{EMOJI_ROLE_ASSISTANT} Assistant"
    return message.role.capitalize()


def format_status(status: Optional[ExecutionStatus]) -> str:
    """Format an execution status as one marker line."""
    if status is None:
        return DISPLAY_NONE
    if status.is_running:
        return f"{EMOJI_STATUS_RUNNING} {status.message}"
    if status.success:
        return f"{EMOJI_STATUS_SUCCESS} {status.message}"
    return f"{EMOJI_STATUS_FAILURE} {status.message}"


def format_command(command: ParsedCommand) -> list[str]:
    """Format a parsed command as indented detail lines."""
    lines = [
        f"  action:   {command.action or DISPLAY_UNKNOWN}",
        f"  resource: {command.resource or DISPLAY_UNKNOWN}",
    ]
    if command.provider:
        lines.append(f"  provider: {command.provider}")
    if command.tool:
        lines.append(f"  tool:     {command.tool}")
    for key, value in command.parameters.items():
        rendered = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
        lines.append(f"  {key} = {rendered}")
    return lines


def format_options(options: Iterable[DecisionOption]) -> list[str]:
    """Format decision options as selectable lines."""
    lines = []
    for option in options:
        line = f"  [{option.id}] {option.label}"
        if option.description:
            line += f" - {option.description}"
        lines.append(line)
    return lines


def format_message(message: Message, index: Optional[int] = None) -> str:
    """Format one message with everything the transcript knows about it."""
    time_str = format_local_time(message.timestamp, DATETIME_FORMAT_SHORT) or DISPLAY_UNKNOWN
    prefix = f"#{index} " if index is not None else ""
    lines = [f"{prefix}{format_role(message)} | {time_str} | {message.id}"]

    if message.summary:
        lines.append(message.summary)
    if message.content:
        lines.append(message.content)
    if message.parsed_command is not None:
        if message.intent_id:
            lines.append(f"  intent:   {message.intent_id}")
        lines.extend(format_command(message.parsed_command))
    if message.is_decision and message.decision_options:
        lines.append("Options:")
        lines.extend(format_options(message.decision_options))
    if message.is_edit_mode and message.intent_id:
        lines.append(f"Use /edit {message.intent_id} key=value ...")
    if message.raw_content and message.raw_content != message.content:
        lines.append(message.raw_content)
    if message.execution_status is not None:
        lines.append(format_status(message.execution_status))

    return "\n".join(lines)


def format_history_line(
    message: Message,
    index: int,
    truncate_length: int = HISTORY_PREVIEW_LENGTH,
) -> str:
    """Format one message as a short history line."""
    text = message.content or message.summary or ""
    preview = truncate_text(minify_text(text), truncate_length)
    markers = []
    if message.is_decision:
        markers.append("decision")
    if message.is_edit_mode:
        markers.append("edit")
    if message.execution_status is not None:
        markers.append(format_status(message.execution_status))
    suffix = f" ({', '.join(markers)})" if markers else ""
    return f"#{index} {format_role(message)}{suffix}\n  {preview}"


def format_transcript(messages: Iterable[Message]) -> str:
    """Format a whole transcript with borderlines between messages."""
    numbered = list(enumerate(messages, start=1))
    return format_blocks(numbered, lambda item: format_message(item[1], item[0]))
