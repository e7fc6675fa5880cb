"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

from typing import List, Optional

from vim_trainer.keymaps import KeymapResolver
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

# Host key names (browser ``KeyboardEvent.key`` and Textual) mapped to tokens.
KEY_ALIASES = {
    "escape": "ESC",
    "esc": "ESC",
    "<esc>": "ESC",
    "enter": "ENTER",
    "return": "ENTER",
    "backspace": "BACKSPACE",
    "delete": "DELETE",
    "tab": "TAB",
    "space": " ",
    "arrowleft": "LEFT",
    "left": "LEFT",
    "arrowright": "RIGHT",
    "right": "RIGHT",
    "arrowup": "UP",
    "up": "UP",
    "arrowdown": "DOWN",
    "down": "DOWN",
}


def normalize_key(
    key: str, *, shift: bool = False, ctrl: bool = False
) -> KeyInput:
    """Build a ``KeyInput`` from a host key name plus modifier flags."""

    if len(key) == 1:
        modifiers: tuple[str, ...] = ("ctrl",) if ctrl else ()
        return KeyInput(key=key, modifiers=modifiers, text=key)

    name = KEY_ALIASES.get(key.lower(), key.upper())
    mods: List[str] = []
    if ctrl:
        mods.append("ctrl")
    if shift:
        mods.append("shift")
    text = name if len(name) == 1 else None
    return KeyInput(key=name, modifiers=tuple(mods), text=text)


def key_to_token(key: KeyInput) -> str:
    if key.modifiers:
        modifier = "+".join(sorted(m.lower() for m in key.modifiers))
        return f"{modifier}+{key.key}"
    return key.key


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def printable(key: KeyInput) -> Optional[str]:
    """Return the character a key types, or ``None`` for control keys."""

    if key.modifiers and "ctrl" in key.modifiers:
        return None
    if key.text and len(key.text) == 1:
        return key.text
    return None


class KeymapMode(Mode):
    """Mode that resolves keys through the keymap trie.

    Keys accumulate in ``_pending`` while they form a strict prefix of a
    binding. A miss after a prefix drops the prefix and handles the key
    again as if it were pressed first.
    """

    logger_name = "vim_trainer.modes"

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = 1000,
    ) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"{self.logger_name}.{self.name}")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []
        self._default_timeout_ms = default_pending_timeout_ms

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self._pending)

    @property
    def command_buffer(self) -> str:
        return "".join(self._pending)

    def reset(self) -> None:
        self._pending.clear()

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self.reset()

    def handle_key(self, key: KeyInput) -> ModeResult:
        return self._resolve_key(key)

    def _resolve_key(self, key: KeyInput) -> ModeResult:
        token = key_to_token(key)
        self._pending.append(token)
        result = self._resolver.resolve(self.name, tuple(self._pending))

        if result.status == "match" and result.match:
            self._pending.clear()
            return self._execute_match(result.match)

        if result.status == "pending":
            timeout_ms = result.timeout_ms or self._default_timeout_ms
            return ModeResult(
                consumed=True,
                status="pending",
                timeout_ms=timeout_ms,
            )

        had_prefix = len(self._pending) > 1
        self._pending.clear()
        if had_prefix:
            self.logger.debug("dropping prefix before %r", token)
            return self.handle_key(key)
        return self.handle_unmapped(key)

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        del key
        return ModeResult(consumed=False, status="miss")

    def handle_timeout(self) -> ModeResult:
        if not self._pending:
            return ModeResult(consumed=False, status="timeout")
        dropped = "".join(self._pending)
        self.reset()
        self.logger.debug("pending sequence %r expired", dropped)
        return ModeResult(consumed=False, status="timeout")

    def _execute_match(self, match: ResolutionMatch) -> ModeResult:
        with telemetry.span(
            "keymaps::execute",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": match.action.id},
        ):
            outcome = match.action(self.context, match)

        if isinstance(outcome, ModeResult):
            return outcome
        return ModeResult(consumed=True)


__all__ = [
    "KEY_ALIASES",
    "KeymapMode",
    "key_to_token",
    "normalize_key",
    "printable",
    "require_keymap_resolver",
]
