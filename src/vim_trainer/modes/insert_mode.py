"""Insert mode: special keys resolve through the keymap, text is typed."""

from __future__ import annotations

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode, printable


class InsertMode(KeymapMode):
    name = "insert"
    insert_clamp = True

    def on_enter(self, previous: str | None) -> None:
        del previous
        self.reset()
        self.context.buffer.clamp(insert=True)

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        char = printable(key)
        if char is None:
            return ModeResult(consumed=False, status="miss")
        self.context.buffer.insert_text(char)
        return ModeResult(consumed=True, status="insert")


__all__ = ["InsertMode"]
