"""Visual mode: character-wise and line-wise selections."""

from __future__ import annotations

from typing import MutableMapping, cast

from vim_trainer.buffer import visual_selection

from .keymap_helpers import KeymapMode


class VisualMode(KeymapMode):
    """Selection state lives in ``context.extras["visual_state"]``.

    Keys: ``anchor`` (fixed end of the selection), ``linewise`` (set by the
    action entering the mode) and ``active``. Motions and operators read the
    same mapping.
    """

    name = "visual"

    def on_enter(self, previous: str | None) -> None:
        del previous
        self.reset()
        buffer = self.context.buffer
        anchor = buffer.clamp()
        state = self._visual_state()
        state["anchor"] = anchor
        state["active"] = True
        state.setdefault("linewise", False)
        buffer.state.selection = visual_selection(
            buffer.lines, anchor, anchor, linewise=bool(state["linewise"])
        )
        self.context.bus.emit(
            "visual.selection", {"anchor": anchor, "cursor": anchor}
        )

    def on_exit(self, next_mode: str | None) -> None:
        super().on_exit(next_mode)
        state = self._visual_state()
        state.pop("anchor", None)
        state["active"] = False
        state["linewise"] = False
        self.context.buffer.state.clear_selection()

    @property
    def linewise(self) -> bool:
        return bool(self._visual_state().get("linewise", False))

    def _visual_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("visual_state", {}),
        )


__all__ = ["VisualMode"]
