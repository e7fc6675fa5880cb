"""Validation and clamping helpers shared across buffer services."""

from __future__ import annotations

from typing import Sequence, Tuple

from .document import BufferDocument
from .state import Cursor


class BufferValidationError(RuntimeError):
    """Raised when a range operation receives out-of-bounds cursor info."""

    def __init__(self, message: str, *, cursor: Tuple[int, int] | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor


def ensure_cursor(document: BufferDocument, cursor: Tuple[int, int]) -> Cursor:
    line, col = cursor
    if line < 0 or line >= document.line_count:
        raise BufferValidationError("Line out of range", cursor=cursor)
    text = document.get_line(line)
    if col < 0 or col > len(text):
        raise BufferValidationError("Column out of range", cursor=cursor)
    return Cursor(line, col)


def max_col(text: str, *, insert: bool) -> int:
    """Last valid column: one past the end only while inserting."""

    if insert:
        return len(text)
    return max(0, len(text) - 1)


def clamp_cursor(
    lines: Sequence[str], cursor: Tuple[int, int], *, insert: bool = False
) -> Cursor:
    line, col = cursor
    line = max(0, min(line, len(lines) - 1))
    col = max(0, min(col, max_col(lines[line], insert=insert)))
    return Cursor(line, col)
