"""Versioned line storage behind a trainer buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True, slots=True)
class BufferDocument:
    """A tuple of lines plus an edit counter.

    Edits return a new document with ``version + 1``. A document always
    holds at least one line, so deleting every line leaves one empty line.
    """

    lines: Tuple[str, ...] = ("",)
    version: int = 0

    def __post_init__(self) -> None:
        if not self.lines:
            object.__setattr__(self, "lines", ("",))

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, version: int = 0) -> "BufferDocument":
        return cls(lines=tuple(str(line) for line in lines), version=version)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def get_line(self, index: int) -> str:
        return self.lines[index]

    def snapshot(self) -> Tuple[str, ...]:
        return self.lines

    def with_lines(self, lines: Iterable[str]) -> "BufferDocument":
        """Whole-content replacement as the next version."""

        return BufferDocument.from_lines(lines, version=self.version + 1)

    def splice(
        self, start: int, end: int, new_lines: Iterable[str]
    ) -> "BufferDocument":
        """Replace ``lines[start:end]`` with ``new_lines`` as the next version."""

        lines = list(self.lines)
        lines[start:end] = new_lines
        return self.with_lines(lines)


__all__ = ["BufferDocument"]
