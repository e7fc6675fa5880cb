"""Mode-switching actions shared across modes."""

from __future__ import annotations

from typing import MutableMapping, cast

from vim_trainer.buffer import Cursor
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

from .motions import first_non_blank

UNDO_UNAVAILABLE = "Undo not available in this trainer"


def enter_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="insert")


def append_after_cursor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line, col = buffer.cursor
    buffer.set_cursor((line, col + 1), insert=True)
    return ModeResult(consumed=True, switch_to="insert")


def append_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    buffer.set_cursor((line, len(buffer.line(line))), insert=True)
    return ModeResult(consumed=True, switch_to="insert")


def insert_line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    buffer.set_cursor((line, first_non_blank(buffer.line(line))), insert=True)
    return ModeResult(consumed=True, switch_to="insert")


def open_line_below(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    buffer.splice_lines(line + 1, line + 1, [""], label="open_below")
    buffer.state.cursor = Cursor(line + 1, 0)
    return ModeResult(consumed=True, switch_to="insert")


def open_line_above(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    buffer.splice_lines(line, line, [""], label="open_above")
    buffer.state.cursor = Cursor(line, 0)
    return ModeResult(consumed=True, switch_to="insert")


def exit_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Leave insert mode; the cursor steps back onto the last typed character."""

    del match
    buffer = context.buffer
    line, col = buffer.cursor
    buffer.state.cursor = Cursor(line, max(0, col - 1))
    return ModeResult(consumed=True, switch_to="normal")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="normal")


def clear_pending(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.state.clear_selection()
    return ModeResult(consumed=True, status="cleared")


def _enter_visual(context: ModeContext, *, linewise: bool) -> ModeResult:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("visual_state", {})
    )
    state["linewise"] = linewise
    return ModeResult(consumed=True, switch_to="visual")


def enter_visual_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _enter_visual(context, linewise=False)


def enter_visual_line_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _enter_visual(context, linewise=True)


def _enter_command_line(context: ModeContext, prefix: str) -> ModeResult:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state["text"] = prefix
    return ModeResult(consumed=True, switch_to="command")


def enter_command_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _enter_command_line(context, ":")


def enter_search_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _enter_command_line(context, "/")


def undo_unavailable(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, status="unsupported", message=UNDO_UNAVAILABLE)


__all__ = [
    "UNDO_UNAVAILABLE",
    "append_after_cursor",
    "append_line_end",
    "clear_pending",
    "enter_command_mode",
    "enter_insert_mode",
    "enter_search_mode",
    "enter_visual_line_mode",
    "enter_visual_mode",
    "exit_insert_mode",
    "exit_to_normal_mode",
    "insert_line_start",
    "open_line_above",
    "open_line_below",
    "undo_unavailable",
]
