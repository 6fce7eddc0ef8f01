"""Core text truncation and bordered-block utilities."""

from __future__ import annotations

import re
import unicodedata
from typing import Callable, TypeVar

from .constants import BORDERLINE_CHAR, BORDERLINE_WIDTH, TRUNCATE_SEARCH_RADIUS

T = TypeVar("T")


def minify_text(text: str) -> str:
    """Collapse repeated whitespace to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def _is_truncate_boundary(character: str) -> bool:
    return bool(character) and unicodedata.category(character).startswith(("Z", "P"))


def _find_truncate_position(text: str, target: int, search_radius: int) -> int | None:
    search_start = max(0, target - search_radius)

    for pos in range(target, search_start - 1, -1):
        if pos < len(text) and _is_truncate_boundary(text[pos]):
            while pos > 0 and _is_truncate_boundary(text[pos - 1]):
                pos -= 1
            return pos if pos > 0 else None

    return None


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to max_length, preferring to break at word boundaries."""
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    if len(suffix) >= max_length:
        return suffix[:max_length]

    target = max_length - len(suffix)
    break_pos = _find_truncate_position(text, target, TRUNCATE_SEARCH_RADIUS)
    if break_pos is not None:
        truncated = text[:break_pos].rstrip()
    else:
        truncated = text[:target].rstrip()

    if not truncated:
        truncated = text[:target]

    return truncated + suffix


def make_borderline(width: int | None = None, char: str | None = None) -> str:
    """Create a borderline."""
    return (char or BORDERLINE_CHAR) * (width or BORDERLINE_WIDTH)


def format_blocks(
    items: list[T],
    formatter: Callable[[T], str],
    borderline_width: int | None = None,
) -> str:
    """Join formatted items, separated and framed by borderlines."""
    borderline = make_borderline(borderline_width)
    parts = []
    for item in items:
        parts.append(borderline)
        parts.append(formatter(item))
    parts.append(borderline)
    return "\n".join(parts)
