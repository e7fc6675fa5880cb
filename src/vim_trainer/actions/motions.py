"""Cursor motions shared by Normal and Visual mode."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from vim_trainer.buffer import Cursor
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

from .visual import sync_selection

SPACE, WORD, PUNCT = 0, 1, 2


def is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def char_class(char: str) -> int:
    if char.isspace():
        return SPACE
    if is_word_char(char):
        return WORD
    return PUNCT


def repeat_count(match: ResolutionMatch | None) -> int:
    if match is None or not match.count:
        return 1
    return max(1, match.count)


def first_non_blank(text: str) -> int:
    stripped = text.lstrip()
    if not stripped:
        return 0
    return len(text) - len(stripped)


def word_forward(lines: Sequence[str], cursor: Tuple[int, int]) -> Cursor:
    """Start of the next word, continuing onto the next line."""

    line, col = cursor
    text = lines[line]
    if col < len(text):
        kind = char_class(text[col])
        if kind != SPACE:
            while col < len(text) and char_class(text[col]) == kind:
                col += 1
    while col < len(text) and text[col].isspace():
        col += 1

    if col >= len(text) and line < len(lines) - 1:
        line += 1
        text = lines[line]
        col = 0
        while col < len(text) and text[col].isspace():
            col += 1

    return Cursor(line, min(col, max(0, len(text) - 1)))


def word_backward(lines: Sequence[str], cursor: Tuple[int, int]) -> Cursor:
    """Start of the current or previous word on the same line."""

    line, col = cursor
    text = lines[line]
    col -= 1
    while col >= 0 and text[col].isspace():
        col -= 1
    if col < 0:
        return Cursor(line, 0)
    kind = char_class(text[col])
    while col > 0 and char_class(text[col - 1]) == kind:
        col -= 1
    return Cursor(line, col)


def word_end(lines: Sequence[str], cursor: Tuple[int, int]) -> Cursor:
    """Last character of the current or next word on the same line."""

    line, col = cursor
    text = lines[line]
    col += 1
    while col < len(text) and text[col].isspace():
        col += 1
    if col >= len(text):
        return Cursor(line, max(0, len(text) - 1))
    kind = char_class(text[col])
    while col < len(text) - 1 and char_class(text[col + 1]) == kind:
        col += 1
    return Cursor(line, col)


def find_in_line(
    text: str,
    col: int,
    char: str,
    *,
    forward: bool = True,
    till: bool = False,
    count: int = 1,
) -> Optional[int]:
    """Column of the ``count``-th ``char`` after/before ``col``, if any.

    ``till`` stops one column short of the match, as ``t``/``T`` do.
    """

    position = col
    for _ in range(count):
        if forward:
            position = text.find(char, position + 1)
        else:
            position = text.rfind(char, 0, position) if position > 0 else -1
        if position == -1:
            return None
    if till:
        position = position - 1 if forward else position + 1
    return position


def move_to(context: ModeContext, target: Tuple[int, int]) -> ModeResult:
    """Place the cursor (normal clamp) and extend an active visual selection."""

    context.buffer.set_cursor(target)
    sync_selection(context)
    return ModeResult(consumed=True, status="motion")


def move_left(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    line, col = context.buffer.cursor
    return move_to(context, (line, max(0, col - repeat_count(match))))


def move_right(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    line, col = context.buffer.cursor
    return move_to(context, (line, col + repeat_count(match)))


def move_up(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    line, col = context.buffer.cursor
    return move_to(context, (max(0, line - repeat_count(match)), col))


def move_down(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    line, col = context.buffer.cursor
    return move_to(context, (line + repeat_count(match), col))


def _repeat(context: ModeContext, match: ResolutionMatch, step) -> ModeResult:
    lines = context.buffer.lines
    cursor = context.buffer.cursor
    for _ in range(repeat_count(match)):
        cursor = step(lines, cursor)
    return move_to(context, cursor)


def next_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _repeat(context, match, word_forward)


def previous_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _repeat(context, match, word_backward)


def end_of_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _repeat(context, match, word_end)


def line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return move_to(context, (context.buffer.cursor.line, 0))


def line_first_non_blank(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    line = context.buffer.cursor.line
    return move_to(context, (line, first_non_blank(context.buffer.line(line))))


def line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    line = context.buffer.cursor.line
    return move_to(context, (line, len(context.buffer.line(line))))


def goto_first_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    if match.count:
        return move_to(context, (match.count - 1, context.buffer.cursor.col))
    return move_to(context, (0, 0))


def goto_last_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    if match.count:
        target = match.count - 1
    else:
        target = context.buffer.line_count - 1
    return move_to(context, (target, context.buffer.cursor.col))


def _find(
    context: ModeContext, match: ResolutionMatch, *, forward: bool, till: bool
) -> ModeResult:
    line, col = context.buffer.cursor
    if not match.argument:
        return ModeResult(consumed=True, status="noop")
    target = find_in_line(
        context.buffer.line(line),
        col,
        match.argument,
        forward=forward,
        till=till,
        count=repeat_count(match),
    )
    if target is None:
        return ModeResult(consumed=True, status="not_found")
    return move_to(context, (line, target))


def find_char_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _find(context, match, forward=True, till=False)


def find_char_backward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _find(context, match, forward=False, till=False)


def till_char_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _find(context, match, forward=True, till=True)


def till_char_backward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _find(context, match, forward=False, till=True)


__all__ = [
    "char_class",
    "end_of_word",
    "find_char_backward",
    "find_char_forward",
    "find_in_line",
    "first_non_blank",
    "goto_first_line",
    "goto_last_line",
    "is_word_char",
    "line_end",
    "line_first_non_blank",
    "line_start",
    "move_down",
    "move_left",
    "move_right",
    "move_to",
    "move_up",
    "next_word",
    "previous_word",
    "repeat_count",
    "till_char_backward",
    "till_char_forward",
    "word_backward",
    "word_end",
    "word_forward",
]
