"""Formatting helpers grouped by output domain."""

from .text import format_blocks, make_borderline, minify_text, truncate_text
from .transcript import (
    format_command,
    format_history_line,
    format_message,
    format_options,
    format_role,
    format_status,
    format_transcript,
)

__all__ = [
    "minify_text",
    "truncate_text",
    "make_borderline",
    "format_blocks",
    "format_role",
    "format_status",
    "format_command",
    "format_options",
    "format_message",
    "format_history_line",
    "format_transcript",
]
