"""Textual adapter that forwards key events to a VimEngine and snapshots back."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from vim_trainer.engine import EditorState, VimEngine

from .render import command_line, status_line

# Textual key names that differ from the engine's key vocabulary.
TEXTUAL_KEYS: Dict[str, str] = {
    "escape": "Escape",
    "enter": "Enter",
    "backspace": "Backspace",
    "delete": "Delete",
    "tab": "Tab",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "space": " ",
}

# Keys the host application keeps for itself.
RESERVED_KEYS = frozenset({"ctrl+c", "ctrl+q"})

BUS_EVENTS = (
    "visual.selection",
    "visual.yank",
    "visual.delete",
    "command.start",
    "command.end",
    "command.submit",
    "command.write",
    "command.quit",
    "command.error",
    "command.substitute",
    "search.wrap",
)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[EditorState], None]
    update_status: Callable[[str], None] = _noop
    show_command: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


def translate_key(
    key: str, character: Optional[str] = None
) -> Optional[Tuple[str, bool]]:
    """Map a Textual key/character pair to ``(engine_key, ctrl)``.

    Returns ``None`` for keys the host reserves.
    """

    if key in RESERVED_KEYS:
        return None
    if character and len(character) == 1 and character.isprintable():
        return character, False
    if key.startswith("ctrl+"):
        return key[len("ctrl+") :], True
    return TEXTUAL_KEYS.get(key, key), False


class TextualTrainerAdapter:
    """Bridges a VimEngine and its bus events to a Textual-friendly surface."""

    def __init__(self, engine: VimEngine, hooks: TextualUIHooks) -> None:
        self.engine = engine
        self.hooks = hooks
        self.engine.on_change(self._refresh)
        self._subscribe_events()
        self._refresh(self.engine.snapshot())

    def handle_textual_key(
        self,
        key: str,
        *,
        character: Optional[str] = None,
        event: object | None = None,
    ) -> bool:
        """Translate a Textual key event and dispatch it to the engine."""

        translated = translate_key(key, character)
        if translated is None:
            return False
        engine_key, ctrl = translated
        consumed = self.engine.handle_key(engine_key, ctrl=ctrl, event=event)
        self.hooks.log(
            f"key -> {engine_key!r} ctrl={ctrl} consumed={consumed} "
            f"mode={self.engine.mode}"
        )
        return consumed

    def tick(self) -> bool:
        """Expire pending prefixes; called from the host's interval timer."""

        expired = self.engine.tick()
        if expired:
            self.hooks.log("timeout -> pending prefix cleared")
        return expired

    def _subscribe_events(self) -> None:
        bus = self.engine.bus
        for event in BUS_EVENTS:
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self.hooks.log(f"event -> {name} payload={payload!r}")
        self.hooks.handle_event(name, payload)

    def _refresh(self, state: EditorState) -> None:
        self.hooks.update_buffer(state)
        self.hooks.update_status(status_line(state))
        self.hooks.show_command(command_line(state))


__all__ = [
    "BUS_EVENTS",
    "TextualTrainerAdapter",
    "TextualUIHooks",
    "translate_key",
]
