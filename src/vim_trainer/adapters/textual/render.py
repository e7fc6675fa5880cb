"""Render engine snapshots as ``rich`` text for Textual widgets."""

from __future__ import annotations

from typing import Optional

from rich.style import Style
from rich.text import Text

from vim_trainer.buffer import Selection, ordered
from vim_trainer.engine import EditorState

CURSOR_STYLE = Style(reverse=True)
INSERT_CURSOR_STYLE = Style(underline=True, bold=True)
SELECTION_STYLE = Style(bgcolor="blue")
LINE_NUMBER_STYLE = Style(dim=True)
ACTIVE_LINE_NUMBER_STYLE = Style(bold=True, color="yellow")

MODE_STYLES = {
    "normal": Style(bold=True, color="black", bgcolor="green"),
    "insert": Style(bold=True, color="black", bgcolor="cyan"),
    "visual": Style(bold=True, color="black", bgcolor="magenta"),
    "command": Style(bold=True, color="black", bgcolor="yellow"),
}


def is_selected(selection: Optional[Selection], line: int, col: int) -> bool:
    """Whether ``(line, col)`` falls inside the inclusive selection."""

    if selection is None:
        return False
    start, end = ordered(selection)
    return start <= (line, col) <= end


def render_buffer(state: EditorState, *, line_numbers: bool = True) -> Text:
    """Buffer lines with the cursor cell and selection highlighted.

    Empty lines render a single space so the cursor stays visible. In insert
    mode a cursor past the end of the line gets its own trailing cell.
    """

    text = Text(no_wrap=True, end="")
    width = len(str(len(state.lines)))
    insert = state.mode == "insert"
    for index, line in enumerate(state.lines):
        if index:
            text.append("\n")
        current = index == state.cursor.line
        if line_numbers:
            style = ACTIVE_LINE_NUMBER_STYLE if current else LINE_NUMBER_STYLE
            text.append(f"{index + 1:>{width}} ", style=style)

        cells = line or " "
        for col, char in enumerate(cells):
            style = Style()
            if line and is_selected(state.selection, index, col):
                style += SELECTION_STYLE
            if current and col == state.cursor.col:
                style += INSERT_CURSOR_STYLE if insert else CURSOR_STYLE
            text.append(char, style=style)
        if current and insert and state.cursor.col >= len(line) and line:
            text.append(" ", style=INSERT_CURSOR_STYLE)
    return text


def mode_label(state: EditorState) -> Text:
    return Text(f" {state.mode.upper()} ", style=MODE_STYLES.get(state.mode, Style()))


def cursor_position(state: EditorState) -> str:
    return f"Ln {state.cursor.line + 1}, Col {state.cursor.col + 1}"


def status_line(state: EditorState) -> str:
    """Plain status text such as ``NORMAL  Ln 1, Col 1``."""

    return f"{state.mode.upper()}  {cursor_position(state)}"


def command_line(state: EditorState) -> str:
    """Text shown under the buffer: the typed command, else the message."""

    return state.command_buffer or state.message


__all__ = [
    "command_line",
    "cursor_position",
    "is_selected",
    "mode_label",
    "render_buffer",
    "status_line",
]
