"""High-level buffer façade combining document, state, and registers."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, Optional, Sequence, Tuple

from vim_trainer.runtime import telemetry

from .document import BufferDocument
from .registers import RegisterBank
from .state import BufferState, Cursor, Selection
from .validation import clamp_cursor, ensure_cursor


@dataclass(frozen=True, slots=True)
class BufferView:
    version: int
    lines: Tuple[str, ...]
    cursor: Cursor
    selection: Optional[Selection]

    @property
    def text(self) -> str:
        return _flatten_lines(self.lines)


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_lines(lines))

    @property
    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    @property
    def line_count(self) -> int:
        return self.document.line_count

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    def line(self, index: Optional[int] = None) -> str:
        if index is None:
            index = self.state.cursor.line
        return self.document.get_line(index)

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            lines=tuple(self.document.snapshot()),
            cursor=self.state.cursor,
            selection=self.state.selection,
        )

    def load(self, lines: Iterable[str]) -> None:
        """Replace the whole content and reset cursor and selection."""

        with Transaction(self, "load"):
            self.document = self.document.with_lines(lines)
            self.state.reset()

    def set_cursor(self, cursor: Tuple[int, int], *, insert: bool = False) -> Cursor:
        clamped = clamp_cursor(self.lines, cursor, insert=insert)
        self.state.cursor = clamped
        return clamped

    def clamp(self, *, insert: bool = False) -> Cursor:
        return self.set_cursor(self.state.cursor, insert=insert)

    def set_line(self, index: int, text: str, *, label: str) -> None:
        with Transaction(self, label):
            self.document = self.document.splice(index, index + 1, [text])

    def insert_text(self, text: str, *, label: str = "insert") -> Cursor:
        """Type single-line ``text`` at the cursor and move past it."""

        line, col = self.state.cursor
        current = self.document.get_line(line)
        self.set_line(line, current[:col] + text + current[col:], label=label)
        self.state.cursor = Cursor(line, col + len(text))
        return self.state.cursor

    def splice_lines(
        self, start: int, end: int, new_lines: Iterable[str], *, label: str
    ) -> None:
        """Replace lines ``[start:end]``; an emptied buffer keeps one blank line."""

        with Transaction(self, label):
            self.document = self.document.splice(start, end, new_lines)

    def replace_range(self, start: Cursor, end: Cursor, text: str, *, label: str) -> Cursor:
        """Replace the character range ``[start, end)`` and return the end of ``text``."""

        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        if start > end:
            start, end = end, start
        with Transaction(self, label):
            before_text = _flatten_lines(self.document.snapshot())
            start_offset = _offset_for_cursor(self.document, start)
            end_offset = _offset_for_cursor(self.document, end)
            new_text = before_text[:start_offset] + text + before_text[end_offset:]
            self.document = self.document.with_lines(new_text.split("\n"))
            return _cursor_from_offset(self.document, start_offset + len(text))

    def get_text_range(self, start: Cursor, end: Cursor) -> str:
        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        if start > end:
            start, end = end, start
        text = _flatten_lines(self.document.snapshot())
        start_offset = _offset_for_cursor(self.document, start)
        end_offset = _offset_for_cursor(self.document, end)
        return text[start_offset:end_offset]


class Transaction(AbstractContextManager["Transaction"]):
    """Labelled edit wrapped in a telemetry span."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _flatten_lines(lines) -> str:
    return "\n".join(lines)


def _offset_for_cursor(document: BufferDocument, cursor: Cursor) -> int:
    lines = document.snapshot()
    row, col = cursor
    offset = 0
    for i in range(row):
        offset += len(lines[i]) + 1  # newline
    offset += col
    return offset


def _cursor_from_offset(document: BufferDocument, offset: int) -> Cursor:
    lines = document.snapshot()
    running = 0
    for row, line in enumerate(lines):
        line_len = len(line)
        if offset <= running + line_len:
            return Cursor(row, offset - running)
        running += line_len + 1
    return Cursor(len(lines) - 1, len(lines[-1]))
