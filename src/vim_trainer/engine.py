"""UI-agnostic engine facade used by the lesson and sandbox hosts."""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Tuple

from vim_trainer.actions.visual import sync_selection
from vim_trainer.buffer import Buffer, Cursor, Selection
from vim_trainer.keymaps import KeymapRegistry
from vim_trainer.modes import (
    CommandMode,
    InsertMode,
    ModeBus,
    ModeContext,
    NormalMode,
    VisualMode,
)
from vim_trainer.modes.keymap_helpers import normalize_key
from vim_trainer.modes.mode_manager import Clock, ModeManager
from vim_trainer.runtime import telemetry

# Keys whose host default (scrolling, focus change, history) is suppressed
# outside insert mode even when the engine does not consume them.
HOST_DEFAULT_KEYS = frozenset({"LEFT", "RIGHT", "UP", "DOWN", "BACKSPACE", "TAB"})


@dataclass(frozen=True, slots=True)
class EditorState:
    """Immutable snapshot handed to hosts and lesson validators."""

    lines: Tuple[str, ...]
    cursor: Cursor
    mode: str
    selection: Optional[Selection]
    command_buffer: str
    registers: Mapping[str, str]
    last_search: str
    message: str
    version: int

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def current_line(self) -> str:
        return self.lines[self.cursor.line]


ChangeCallback = Callable[[EditorState], None]


class VimEngine:
    """One buffer, one register bank, four modes.

    Every mutation (consumed key, content load, cursor set, expired prefix)
    is followed by a synchronous call to the ``on_change`` listener.
    """

    def __init__(
        self,
        lines: Iterable[str] = ("",),
        *,
        name: str = "default",
        default_pending_timeout_ms: int = 1000,
        keymap_registry: KeymapRegistry | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.logger = telemetry.get_logger("vim_trainer.engine")
        self.buffer = Buffer.from_lines(lines, name=name)
        self.context = ModeContext(
            buffer=self.buffer,
            registers=self.buffer.registers,
            bus=ModeBus(),
            extras={},
        )
        self.manager = ModeManager(
            self.context,
            keymap_registry=keymap_registry,
            clock=clock,
        )
        for mode_cls in (NormalMode, InsertMode, VisualMode, CommandMode):
            self.manager.register_mode(
                mode_cls, default_pending_timeout_ms=default_pending_timeout_ms
            )
        self._listener: Optional[ChangeCallback] = None

    @property
    def bus(self) -> ModeBus:
        return self.context.bus

    @property
    def mode(self) -> str:
        return self.manager.active_name

    def on_change(self, callback: Optional[ChangeCallback]) -> None:
        """Install the single change listener, replacing any previous one."""

        self._listener = callback

    def snapshot(self) -> EditorState:
        buffer = self.buffer
        active = self.manager.active_mode
        return EditorState(
            lines=tuple(buffer.lines),
            cursor=buffer.cursor,
            mode=self.mode,
            selection=buffer.state.selection,
            command_buffer=active.command_buffer if active else "",
            registers=MappingProxyType(dict(buffer.registers.serialize())),
            last_search=buffer.state.last_search,
            message=buffer.state.message,
            version=buffer.document.version,
        )

    def handle_key(
        self,
        key: str,
        *,
        shift: bool = False,
        ctrl: bool = False,
        event: object | None = None,
    ) -> bool:
        """Feed one host key event; returns whether the engine consumed it."""

        expired = self.manager.process_timeouts()
        key_input = normalize_key(key, shift=shift, ctrl=ctrl)
        suppress = self.mode != "insert" and key_input.key in HOST_DEFAULT_KEYS

        result = self.manager.handle_key(key_input)
        self.logger.debug(
            "key %r consumed=%s status=%s mode=%s",
            key_input.key,
            result.consumed,
            result.status,
            self.mode,
        )
        if result.consumed:
            self.buffer.state.message = result.message or ""
            self._clamp_for_mode()
        if result.consumed or suppress:
            _prevent_default(event)
        if result.consumed or expired:
            self._notify()
        return result.consumed

    def feed(self, keys: Iterable[str]) -> int:
        """Press each key in turn and return how many were consumed."""

        return sum(1 for key in keys if self.handle_key(key))

    def tick(self, now: Optional[float] = None) -> bool:
        """Expire pending prefixes whose deadline has passed."""

        expired = self.manager.process_timeouts(now)
        if expired:
            self._notify()
        return bool(expired)

    def set_content(self, lines: Iterable[str]) -> None:
        """Load new content and reset mode, cursor, and pending input."""

        self.manager.reset("normal")
        self.buffer.load(lines)
        telemetry.record_event(
            "engine.load",
            level="debug",
            data={"buffer": self.buffer.name, "lines": self.buffer.line_count},
        )
        self._notify()

    def set_cursor(self, cursor: Tuple[int, int]) -> None:
        self._clamp_for_mode(cursor)
        sync_selection(self.context)
        self._notify()

    def _clamp_for_mode(self, cursor: Optional[Tuple[int, int]] = None) -> None:
        active = self.manager.active_mode
        insert = bool(active and active.insert_clamp)
        self.buffer.set_cursor(cursor or self.buffer.cursor, insert=insert)

    def _notify(self) -> None:
        if self._listener is None:
            return
        self._listener(self.snapshot())


def _prevent_default(event: object | None) -> None:
    prevent = getattr(event, "prevent_default", None)
    if callable(prevent):
        prevent()


__all__ = ["EditorState", "HOST_DEFAULT_KEYS", "VimEngine"]
