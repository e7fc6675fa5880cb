"""Case-insensitive literal search with wrap-around."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from vim_trainer.buffer import Cursor
from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

from .motions import is_word_char, move_to

SearchHit = Tuple[Cursor, bool]


def find_forward(
    lines: Sequence[str], cursor: Tuple[int, int], pattern: str
) -> Optional[SearchHit]:
    """Next match after ``cursor`` as ``(position, wrapped)``.

    Scans the rest of the cursor line, every following line with wrap, and
    finally the cursor line up to and including the cursor column.
    """

    needle = pattern.lower()
    total = len(lines)
    line, col = cursor
    for offset in range(total + 1):
        index = (line + offset) % total
        text = lines[index].lower()
        if offset == 0:
            found = text.find(needle, col + 1)
        else:
            found = text.find(needle)
            if offset == total and found > col:
                found = -1
        if found != -1:
            return Cursor(index, found), line + offset >= total
    return None


def find_backward(
    lines: Sequence[str], cursor: Tuple[int, int], pattern: str
) -> Optional[SearchHit]:
    """Previous match before ``cursor``; mirror image of :func:`find_forward`."""

    needle = pattern.lower()
    total = len(lines)
    line, col = cursor
    for offset in range(total + 1):
        index = (line - offset) % total
        text = lines[index].lower()
        if offset == 0:
            found = text.rfind(needle, 0, col - 1 + len(needle)) if col > 0 else -1
        else:
            found = text.rfind(needle)
            if offset == total and found < col:
                found = -1
        if found != -1:
            return Cursor(index, found), line - offset < 0
    return None


def _jump(context: ModeContext, pattern: str, *, forward: bool) -> ModeResult:
    buffer = context.buffer
    finder = find_forward if forward else find_backward
    hit = finder(buffer.lines, buffer.cursor, pattern)
    if hit is None:
        return ModeResult(
            consumed=True,
            status="search_miss",
            message=f"Pattern not found: {pattern}",
        )
    position, wrapped = hit
    if wrapped:
        context.bus.emit("search.wrap", {"pattern": pattern, "forward": forward})
    result = move_to(context, position)
    result.status = "search"
    return result


def search_for(context: ModeContext, pattern: str) -> ModeResult:
    """Run a ``/`` search; an empty pattern repeats the previous one."""

    state = context.buffer.state
    if pattern:
        state.last_search = pattern
    if not state.last_search:
        return ModeResult(consumed=True, switch_to="normal", status="search_empty")
    result = _jump(context, state.last_search, forward=True)
    result.switch_to = "normal"
    return result


def search_next(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    pattern = context.buffer.state.last_search
    if not pattern:
        return ModeResult(consumed=True, status="search_empty")
    return _jump(context, pattern, forward=True)


def search_previous(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    pattern = context.buffer.state.last_search
    if not pattern:
        return ModeResult(consumed=True, status="search_empty")
    return _jump(context, pattern, forward=False)


def word_at(text: str, col: int) -> str:
    """Word under ``col``, or the first word after it on the line."""

    while col < len(text) and not is_word_char(text[col]):
        col += 1
    if col >= len(text):
        return ""
    start = end = col
    while start > 0 and is_word_char(text[start - 1]):
        start -= 1
    while end < len(text) and is_word_char(text[end]):
        end += 1
    return text[start:end]


def search_word_under_cursor(
    context: ModeContext, match: ResolutionMatch
) -> ModeResult:
    del match
    buffer = context.buffer
    word = word_at(buffer.line(), buffer.cursor.col)
    if not word:
        return ModeResult(consumed=True, status="search_empty")
    buffer.state.last_search = word
    return _jump(context, word, forward=True)


__all__ = [
    "find_backward",
    "find_forward",
    "search_for",
    "search_next",
    "search_previous",
    "search_word_under_cursor",
    "word_at",
]
