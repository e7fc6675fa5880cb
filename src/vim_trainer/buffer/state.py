"""Cursor, selection, and search state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


class Cursor(NamedTuple):
    """Zero-based ``(line, col)`` position; orders like a plain tuple."""

    line: int
    col: int


Selection = Tuple[Cursor, Cursor]


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + selection info tied to a BufferDocument."""

    cursor: Cursor = Cursor(0, 0)
    selection: Optional[Selection] = None
    last_search: str = ""
    message: str = ""

    def clear_selection(self) -> None:
        self.selection = None

    def reset(self) -> None:
        """Back to the top of the buffer; search and message survive."""

        self.cursor = Cursor(0, 0)
        self.selection = None
