"""Actions dedicated to Visual mode selection management."""

from __future__ import annotations

from typing import MutableMapping, Optional, Tuple, cast

from vim_trainer.buffer import UNNAMED, Cursor, ordered, visual_selection
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

SelectionBounds = Tuple[Cursor, Cursor, bool]


def _visual_state(context: ModeContext) -> MutableMapping[str, object]:
    return cast(
        MutableMapping[str, object], context.extras.setdefault("visual_state", {})
    )


def visual_active(context: ModeContext) -> bool:
    state = context.extras.get("visual_state")
    return isinstance(state, MutableMapping) and bool(state.get("active"))


def sync_selection(context: ModeContext) -> None:
    """Stretch the selection from the anchor to the cursor while in visual mode."""

    if not visual_active(context):
        return
    state = _visual_state(context)
    buffer = context.buffer
    cursor = buffer.cursor
    anchor = cast(Cursor, state.get("anchor", cursor))
    buffer.state.selection = visual_selection(
        buffer.lines, anchor, cursor, linewise=bool(state.get("linewise"))
    )
    context.bus.emit("visual.selection", {"anchor": anchor, "cursor": cursor})


def _toggle(context: ModeContext, *, linewise: bool) -> ModeResult:
    state = _visual_state(context)
    if bool(state.get("linewise")) == linewise:
        return ModeResult(consumed=True, switch_to="normal", status="visual_exit")
    state["linewise"] = linewise
    sync_selection(context)
    return ModeResult(consumed=True, status="visual_kind")


def toggle_charwise(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _toggle(context, linewise=False)


def toggle_linewise(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _toggle(context, linewise=True)


def swap_anchor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = _visual_state(context)
    cursor = context.buffer.cursor
    anchor = cast(Cursor, state.get("anchor", cursor))
    state["anchor"] = cursor
    context.buffer.set_cursor(anchor)
    sync_selection(context)
    return ModeResult(consumed=True, status="visual_swap")


def _selection_bounds(context: ModeContext) -> Optional[SelectionBounds]:
    selection = context.buffer.state.selection
    if not selection:
        return None
    start, end = ordered(selection)
    return start, end, bool(_visual_state(context).get("linewise"))


def _inclusive_end(context: ModeContext, end: Cursor) -> Cursor:
    return Cursor(end.line, min(end.col + 1, len(context.buffer.line(end.line))))


def yank_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    bounds = _selection_bounds(context)
    if bounds is None:
        return ModeResult(consumed=True, switch_to="normal", status="no_selection")
    start, end, linewise = bounds
    buffer = context.buffer
    if linewise:
        lines = list(buffer.lines[start.line : end.line + 1])
        context.registers.yank_lines(lines)
        buffer.set_cursor((start.line, 0))
    else:
        text = buffer.get_text_range(start, _inclusive_end(context, end))
        context.registers.yank_text(text)
        buffer.set_cursor(start)
    context.bus.emit(
        "visual.yank",
        {
            "register": UNNAMED,
            "text": context.registers.get().text,
            "range": (start, end),
        },
    )
    return ModeResult(consumed=True, switch_to="normal", status="visual_yank")


def _delete_selection(context: ModeContext, *, label: str, keep_line: bool) -> bool:
    bounds = _selection_bounds(context)
    if bounds is None:
        return False
    start, end, linewise = bounds
    buffer = context.buffer
    if linewise:
        lines = list(buffer.lines[start.line : end.line + 1])
        context.registers.yank_lines(lines)
        replacement = [""] if keep_line else []
        buffer.splice_lines(start.line, end.line + 1, replacement, label=label)
        buffer.set_cursor((start.line, 0), insert=keep_line)
    else:
        stop = _inclusive_end(context, end)
        text = buffer.get_text_range(start, stop)
        if text:
            context.registers.yank_text(text)
        buffer.replace_range(start, stop, "", label=label)
        buffer.set_cursor(start, insert=keep_line)
    context.bus.emit(
        "visual.delete",
        {"label": label, "register": UNNAMED, "range": (start, end)},
    )
    return True


def delete_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    _delete_selection(context, label="visual_delete", keep_line=False)
    return ModeResult(consumed=True, switch_to="normal", status="visual_delete")


def change_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not _delete_selection(context, label="visual_change", keep_line=True):
        return ModeResult(consumed=True, switch_to="normal", status="no_selection")
    return ModeResult(consumed=True, switch_to="insert", status="visual_change")


__all__ = [
    "change_selection",
    "delete_selection",
    "swap_anchor",
    "sync_selection",
    "toggle_charwise",
    "toggle_linewise",
    "visual_active",
    "yank_selection",
]
