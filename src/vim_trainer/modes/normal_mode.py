"""Normal mode: repeat counts in front of keymap-resolved commands."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from vim_trainer.keymaps.resolver import ResolutionMatch

from .base_mode import KeyInput, ModeContext, ModeResult
from .keymap_helpers import KeymapMode
from .operator_pipeline import CountParser, OperatorDraft


class NormalMode(KeymapMode):
    """Counts are only parsed while no prefix is pending.

    That ordering lets ``f``/``F``/``r``/``t``/``T`` take a digit as their
    argument (``f3`` jumps to the next ``3``) instead of starting a count.
    """

    name = "normal"

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = 1000,
    ) -> None:
        super().__init__(
            context, default_pending_timeout_ms=default_pending_timeout_ms
        )
        self._draft = OperatorDraft()
        self._counts = CountParser()

    @property
    def count(self) -> Optional[int]:
        return self._draft.count

    @property
    def command_buffer(self) -> str:
        return self._draft.text + "".join(self._pending)

    def on_enter(self, previous: str | None) -> None:
        del previous
        self.reset()
        self.context.buffer.clamp()

    def reset(self) -> None:
        super().reset()
        self._draft.clear()

    def handle_key(self, key: KeyInput) -> ModeResult:
        if not self._pending and self._counts.parse(key, self._draft):
            return ModeResult(consumed=True, status="count")
        return self._resolve_key(key)

    def handle_unmapped(self, key: KeyInput) -> ModeResult:
        self._draft.clear()
        return super().handle_unmapped(key)

    def handle_timeout(self) -> ModeResult:
        if self._draft.digits and not self._pending:
            self.logger.debug("count %r expired", self._draft.text)
        self._draft.clear()
        return super().handle_timeout()

    def _execute_match(self, match: ResolutionMatch) -> ModeResult:
        count = self._counts.take(self._draft)
        return super()._execute_match(replace(match, count=count))


__all__ = ["NormalMode"]
