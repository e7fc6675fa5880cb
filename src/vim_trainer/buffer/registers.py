"""Register storage for yanked and deleted text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

UNNAMED = '"'


@dataclass(frozen=True, slots=True)
class RegisterValue:
    """Register text; a trailing newline marks line-wise content."""

    text: str

    @property
    def linewise(self) -> bool:
        return self.text.endswith("\n")

    @property
    def lines(self) -> list[str]:
        body = self.text[:-1] if self.linewise else self.text
        return body.split("\n")

    @classmethod
    def from_lines(cls, lines: list[str]) -> "RegisterValue":
        return cls(text="\n".join(lines) + "\n")


class RegisterBank:
    """Single unnamed register; every write overwrites the previous text."""

    def __init__(self) -> None:
        self._value = RegisterValue(text="")

    def get(self) -> RegisterValue:
        return self._value

    def yank_text(self, text: str) -> None:
        self._value = RegisterValue(text=text)

    def yank_lines(self, lines: list[str]) -> None:
        self._value = RegisterValue.from_lines(lines)

    def serialize(self) -> Mapping[str, str]:
        return {UNNAMED: self._value.text}
