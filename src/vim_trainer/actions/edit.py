"""Normal-mode edits: deletes, changes, yanks, and puts.

Every edit that removes or copies text writes the unnamed register.
Line-wise text is stored with a trailing newline, character-wise text
without one. An edit that removes nothing leaves the register alone.
"""

from __future__ import annotations

from typing import Optional, Tuple

from vim_trainer.buffer import Cursor
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

from .motions import SPACE, char_class, repeat_count

QUOTE_CHARS = frozenset("\"'`")


def _word_span_end(text: str, col: int, *, trailing_space: bool) -> int:
    end = col
    if end < len(text):
        kind = char_class(text[end])
        if kind != SPACE:
            while end < len(text) and char_class(text[end]) == kind:
                end += 1
    if trailing_space:
        while end < len(text) and text[end].isspace():
            end += 1
    return end


def inner_quote_span(text: str, col: int, quote: str) -> Optional[Tuple[int, int]]:
    """Columns strictly between the quote pair around ``col``.

    Looks backward from the cursor (inclusive) and forward from just after
    it; without an enclosing pair the first pair on the line is used.
    """

    start = text.rfind(quote, 0, col + 1)
    end = text.find(quote, col + 1)
    if start == -1 or end == -1:
        start = text.find(quote)
        end = text.find(quote, start + 1) if start != -1 else -1
    if start == -1 or end == -1 or start >= end:
        return None
    return start + 1, end


def _remove_columns(
    context: ModeContext, start: int, end: int, *, label: str
) -> str:
    buffer = context.buffer
    line = buffer.cursor.line
    text = buffer.line(line)
    removed = text[start:end]
    if removed:
        context.registers.yank_text(removed)
        buffer.set_line(line, text[:start] + text[end:], label=label)
    return removed


def delete_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    col = context.buffer.cursor.col
    _remove_columns(context, col, col + repeat_count(match), label="delete_char")
    context.buffer.clamp()
    return ModeResult(consumed=True)


def delete_char_before(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    line, col = buffer.cursor
    start = max(0, col - repeat_count(match))
    if _remove_columns(context, start, col, label="delete_char_before"):
        buffer.set_cursor((line, start))
    return ModeResult(consumed=True)


def substitute_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    col = context.buffer.cursor.col
    _remove_columns(context, col, col + repeat_count(match), label="substitute")
    return ModeResult(consumed=True, switch_to="insert")


def delete_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    line, col = buffer.cursor
    end = min(line + repeat_count(match), buffer.line_count)
    context.registers.yank_lines(list(buffer.lines[line:end]))
    buffer.splice_lines(line, end, [], label="delete_lines")
    buffer.set_cursor((line, col))
    return ModeResult(consumed=True)


def yank_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    line = buffer.cursor.line
    end = min(line + repeat_count(match), buffer.line_count)
    yanked = list(buffer.lines[line:end])
    context.registers.yank_lines(yanked)
    return ModeResult(consumed=True, message=f"{len(yanked)} line(s) yanked")


def change_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    line = buffer.cursor.line
    end = min(line + repeat_count(match), buffer.line_count)
    context.registers.yank_lines(list(buffer.lines[line:end]))
    buffer.splice_lines(line, end, [""], label="change_lines")
    buffer.state.cursor = Cursor(line, 0)
    return ModeResult(consumed=True, switch_to="insert")


def delete_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    col = buffer.cursor.col
    text = buffer.line()
    end = col
    for _ in range(repeat_count(match)):
        end = _word_span_end(text, end, trailing_space=True)
    _remove_columns(context, col, end, label="delete_word")
    buffer.clamp()
    return ModeResult(consumed=True)


def change_word(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    buffer = context.buffer
    col = buffer.cursor.col
    text = buffer.line()
    end = col
    for index in range(repeat_count(match)):
        if index:
            while end < len(text) and text[end].isspace():
                end += 1
        end = _word_span_end(text, end, trailing_space=False)
    _remove_columns(context, col, end, label="change_word")
    return ModeResult(consumed=True, switch_to="insert")


def delete_to_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    col = context.buffer.cursor.col
    _remove_columns(context, col, len(context.buffer.line()), label="delete_to_end")
    context.buffer.clamp()
    return ModeResult(consumed=True)


def change_to_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    col = context.buffer.cursor.col
    _remove_columns(context, col, len(context.buffer.line()), label="change_to_end")
    return ModeResult(consumed=True, switch_to="insert")


def _delete_inner_quotes(context: ModeContext, quote: str) -> None:
    buffer = context.buffer
    line, col = buffer.cursor
    span = inner_quote_span(buffer.line(line), col, quote)
    if span is None:
        return
    start, end = span
    _remove_columns(context, start, end, label="delete_inner")
    buffer.state.cursor = Cursor(line, start)


def delete_inner_quotes(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    if match.argument in QUOTE_CHARS:
        _delete_inner_quotes(context, match.argument)
        context.buffer.clamp()
    return ModeResult(consumed=True)


def change_inner_quotes(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    if match.argument not in QUOTE_CHARS:
        return ModeResult(consumed=True)
    _delete_inner_quotes(context, match.argument)
    return ModeResult(consumed=True, switch_to="insert")


def replace_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``r<c>``: overwrite ``count`` characters; too short a line is a no-op."""

    buffer = context.buffer
    line, col = buffer.cursor
    text = buffer.line(line)
    count = repeat_count(match)
    if not match.argument or col + count > len(text):
        return ModeResult(consumed=True, status="noop")
    updated = text[:col] + match.argument * count + text[col + count :]
    buffer.set_line(line, updated, label="replace_char")
    buffer.state.cursor = Cursor(line, col + count - 1)
    return ModeResult(consumed=True)


def join_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    if line < buffer.line_count - 1:
        joined = buffer.line(line) + " " + buffer.line(line + 1).lstrip()
        buffer.splice_lines(line, line + 2, [joined], label="join")
    return ModeResult(consumed=True)


def _put(context: ModeContext, match: ResolutionMatch, *, after: bool) -> ModeResult:
    value = context.registers.get()
    if not value.text:
        return ModeResult(consumed=True, status="noop")
    buffer = context.buffer
    line, col = buffer.cursor
    count = repeat_count(match)

    if value.linewise:
        target = line + 1 if after else line
        buffer.splice_lines(target, target, value.lines * count, label="put_lines")
        buffer.set_cursor((target, 0))
        return ModeResult(consumed=True)

    text = value.text * count
    current = buffer.line(line)
    at = min(col + 1 if after else col, len(current))
    if "\n" in text:
        buffer.replace_range(Cursor(line, at), Cursor(line, at), text, label="put")
        buffer.set_cursor((line, at))
    else:
        buffer.set_line(line, current[:at] + text + current[at:], label="put")
        buffer.set_cursor((line, at + len(text) - 1))
    return ModeResult(consumed=True)


def put_after(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _put(context, match, after=True)


def put_before(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    return _put(context, match, after=False)


__all__ = [
    "QUOTE_CHARS",
    "change_inner_quotes",
    "change_lines",
    "change_to_line_end",
    "change_word",
    "delete_char",
    "delete_char_before",
    "delete_inner_quotes",
    "delete_lines",
    "delete_to_line_end",
    "delete_word",
    "inner_quote_span",
    "join_lines",
    "put_after",
    "put_before",
    "replace_char",
    "substitute_char",
    "yank_lines",
]
