"""Command-line mode with inline editing and keymap integration."""

from __future__ import annotations

from typing import MutableMapping, cast

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode, printable


class CommandMode(KeymapMode):
    """Edits the text held in ``context.extras["command_state"]["text"]``.

    The action that enters the mode seeds the text with ``:`` or ``/``;
    Enter, Escape and Backspace resolve through the keymap, any other
    printable key is appended.
    """

    name = "command"

    def on_enter(self, previous: str | None) -> None:
        del previous
        self.reset()
        state = self._command_state()
        if not state.get("text"):
            state["text"] = ":"
        self.context.buffer.clamp()
        self.context.bus.emit("command.start", self.current_command)

    def on_exit(self, next_mode: str | None) -> None:
        super().on_exit(next_mode)
        self.context.bus.emit("command.end", self.current_command)
        self._command_state()["text"] = ""

    @property
    def current_command(self) -> str:
        return str(self._command_state().get("text", ""))

    @property
    def command_buffer(self) -> str:
        return self.current_command

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        char = printable(key)
        if char is None:
            return ModeResult(consumed=False, status="miss")
        state = self._command_state()
        state["text"] = self.current_command + char
        return ModeResult(consumed=True, status="editing")

    def _command_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("command_state", {}),
        )


__all__ = ["CommandMode"]
