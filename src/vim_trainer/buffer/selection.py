"""Visual selection helpers."""

from __future__ import annotations

from typing import Sequence, Tuple

from .state import Cursor, Selection


def visual_selection(
    lines: Sequence[str],
    anchor: Tuple[int, int],
    cursor: Tuple[int, int],
    *,
    linewise: bool = False,
) -> Selection:
    """Selection between ``anchor`` and ``cursor``.

    Line-wise selections are widened so that, once ordered, they cover the
    anchor and cursor lines completely.
    """

    anchor = Cursor(*anchor)
    cursor = Cursor(*cursor)
    if not linewise:
        return (anchor, cursor)
    if cursor.line >= anchor.line:
        return (Cursor(anchor.line, 0), Cursor(cursor.line, len(lines[cursor.line])))
    return (Cursor(anchor.line, len(lines[anchor.line])), Cursor(cursor.line, 0))


def ordered(selection: Selection) -> Selection:
    start, end = selection
    if start <= end:
        return start, end
    return end, start
