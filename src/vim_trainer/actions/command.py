"""Actions that edit and evaluate Ex-style command lines."""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, List, MutableMapping, cast

from vim_trainer.keymaps.resolver import ResolutionMatch
from vim_trainer.modes.base_mode import ModeContext, ModeResult

from .search import search_for

CommandHandler = Callable[[ModeContext, List[str]], ModeResult]

WRITE_MESSAGE = "File saved (simulated)"
QUIT_MESSAGE = "Would quit (simulated)"
WRITE_QUIT_MESSAGE = "Saved and quit (simulated)"


def _command_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state.setdefault("text", "")
    return state


def command_backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Drop the last typed character; erasing the ``:``/``/`` leaves the mode."""

    del match
    state = _command_state(context)
    text = str(state.get("text", ""))
    if len(text) > 1:
        state["text"] = text[:-1]
        return ModeResult(consumed=True, status="editing")
    return ModeResult(consumed=True, switch_to="normal", status="command_cancel")


def submit_command_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = _command_state(context)
    raw = str(state.get("text", ""))
    context.bus.emit("command.submit", raw)
    state["text"] = ""

    if raw.startswith("/"):
        return search_for(context, raw[1:])

    command = raw[1:] if raw.startswith(":") else raw
    text = command.strip()
    if not text:
        return ModeResult(consumed=True, switch_to="normal", status="command_empty")
    parts = text.split()
    handler = _COMMAND_HANDLERS.get(parts[0])
    if handler is not None:
        return handler(context, parts[1:])
    if text == "$" or (text.isascii() and text.isdigit()):
        return _goto_line(context, text)
    if text.startswith(("s/", "%s/")):
        # Trailing spaces belong to the replacement.
        return _substitute(context, command.lstrip())
    return _unknown_command(context, text)


def _unknown_command(context: ModeContext, command: str) -> ModeResult:
    context.bus.emit("command.error", command)
    return ModeResult(consumed=True, switch_to="normal", status="command_error")


def _goto_line(context: ModeContext, text: str) -> ModeResult:
    buffer = context.buffer
    if text == "$":
        target = buffer.line_count - 1
    else:
        target = int(text) - 1
    buffer.set_cursor((max(0, target), buffer.cursor.col))
    return ModeResult(consumed=True, switch_to="normal", status="command_goto")


def _substitute(context: ModeContext, text: str) -> ModeResult:
    """``s/search/replace/flags`` with literal matching; ``%`` covers every line."""

    every_line = text.startswith("%")
    parts = text[1:].split("/") if every_line else text.split("/")
    if len(parts) < 3 or not parts[1]:
        return _unknown_command(context, text)
    search, replacement = parts[1], parts[2]
    flags = parts[3] if len(parts) > 3 else ""
    occurrences = -1 if "g" in flags else 1

    buffer = context.buffer
    indexes = range(buffer.line_count) if every_line else [buffer.cursor.line]
    changed = 0
    for index in indexes:
        line = buffer.line(index)
        updated = line.replace(search, replacement, occurrences)
        if updated != line:
            buffer.set_line(index, updated, label="substitute")
            changed += 1
    buffer.clamp()
    context.bus.emit(
        "command.substitute",
        {"search": search, "replace": replacement, "flags": flags, "lines": changed},
    )
    return ModeResult(consumed=True, switch_to="normal", status="command_substitute")


def _handle_write(
    context: ModeContext, args: List[str], *, force: bool = False
) -> ModeResult:
    _emit_write(context, args, force=force)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_write_force" if force else "command_write",
        message=WRITE_MESSAGE,
    )


def _handle_quit(
    context: ModeContext, args: List[str], *, force: bool = False
) -> ModeResult:
    del args
    _emit_quit(context, force=force)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_quit_force" if force else "command_quit",
        message=QUIT_MESSAGE,
    )


def _handle_wq(
    context: ModeContext, args: List[str], *, force: bool = False
) -> ModeResult:
    _emit_write(context, args, force=force)
    _emit_quit(context, force=force)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_wq_force" if force else "command_wq",
        message=WRITE_QUIT_MESSAGE,
    )


def _emit_write(context: ModeContext, args: List[str], *, force: bool) -> None:
    payload = {
        "force": force,
        "args": list(args),
        "snapshot": context.buffer.snapshot(),
    }
    context.bus.emit("command.write", payload)


def _emit_quit(context: ModeContext, *, force: bool) -> None:
    context.bus.emit("command.quit", {"force": force})


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "write": _handle_write,
    "w": _handle_write,
    "write!": partial(_handle_write, force=True),
    "w!": partial(_handle_write, force=True),
    "quit": _handle_quit,
    "q": _handle_quit,
    "quit!": partial(_handle_quit, force=True),
    "q!": partial(_handle_quit, force=True),
    "wq": _handle_wq,
    "wq!": partial(_handle_wq, force=True),
    "x": _handle_wq,
    "x!": partial(_handle_wq, force=True),
}


__all__ = [
    "QUIT_MESSAGE",
    "WRITE_MESSAGE",
    "WRITE_QUIT_MESSAGE",
    "command_backspace",
    "submit_command_line",
]
