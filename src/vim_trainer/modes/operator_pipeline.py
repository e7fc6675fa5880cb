"""Repeat-count parsing for normal-mode commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .base_mode import KeyInput


@dataclass(slots=True)
class OperatorDraft:
    """Count digits typed ahead of the command they apply to."""

    digits: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.digits)

    @property
    def count(self) -> Optional[int]:
        if not self.digits:
            return None
        return int(self.text)

    def clear(self) -> None:
        self.digits.clear()


class CountParser:
    """Accepts ``1``-``9`` to start a count and ``0``-``9`` to extend one.

    A leading ``0`` is never a count, it is the start-of-line motion.
    """

    def accepts(self, key: KeyInput, draft: OperatorDraft) -> bool:
        if key.modifiers or len(key.key) != 1 or key.key not in "0123456789":
            return False
        if draft.digits:
            return True
        return key.key != "0"

    def parse(self, key: KeyInput, draft: OperatorDraft) -> bool:
        if not self.accepts(key, draft):
            return False
        draft.digits.append(key.key)
        return True

    def take(self, draft: OperatorDraft) -> Optional[int]:
        """Return the count and reset the draft for the next command."""

        count = draft.count
        draft.clear()
        return count


__all__ = ["CountParser", "OperatorDraft"]
