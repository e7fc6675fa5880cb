"""Insert-mode editing keys."""

from __future__ import annotations

from vim_trainer.buffer import Cursor
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

TAB_TEXT = "  "


def backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Delete before the cursor, joining onto the previous line at column 0."""

    del match
    buffer = context.buffer
    line, col = buffer.cursor
    text = buffer.line(line)
    if col > 0:
        buffer.set_line(line, text[: col - 1] + text[col:], label="backspace")
        buffer.state.cursor = Cursor(line, col - 1)
    elif line > 0:
        previous = buffer.line(line - 1)
        buffer.splice_lines(line - 1, line + 1, [previous + text], label="backspace")
        buffer.state.cursor = Cursor(line - 1, len(previous))
    return ModeResult(consumed=True)


def delete_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Delete under the cursor, joining the next line at end of line."""

    del match
    buffer = context.buffer
    line, col = buffer.cursor
    text = buffer.line(line)
    if col < len(text):
        buffer.set_line(line, text[:col] + text[col + 1 :], label="delete_forward")
    elif line < buffer.line_count - 1:
        following = buffer.line(line + 1)
        buffer.splice_lines(line, line + 2, [text + following], label="delete_forward")
    return ModeResult(consumed=True)


def split_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line, col = buffer.cursor
    text = buffer.line(line)
    buffer.splice_lines(line, line + 1, [text[:col], text[col:]], label="newline")
    buffer.state.cursor = Cursor(line + 1, 0)
    return ModeResult(consumed=True)


def insert_tab(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.insert_text(TAB_TEXT, label="tab")
    return ModeResult(consumed=True)


def _move(context: ModeContext, d_line: int, d_col: int) -> ModeResult:
    line, col = context.buffer.cursor
    context.buffer.set_cursor((max(0, line + d_line), max(0, col + d_col)), insert=True)
    return ModeResult(consumed=True)


def cursor_left(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _move(context, 0, -1)


def cursor_right(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _move(context, 0, 1)


def cursor_up(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _move(context, -1, 0)


def cursor_down(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _move(context, 1, 0)


__all__ = [
    "TAB_TEXT",
    "backspace",
    "cursor_down",
    "cursor_left",
    "cursor_right",
    "cursor_up",
    "delete_forward",
    "insert_tab",
    "split_line",
]
