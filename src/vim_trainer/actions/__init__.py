"""High-level editing verbs reused across modes."""

from . import command, core, edit, insert, motions, search, visual
from .core import (
    enter_command_mode,
    enter_insert_mode,
    enter_search_mode,
    enter_visual_mode,
    exit_to_normal_mode,
)
from .command import submit_command_line
from .visual import sync_selection

__all__ = [
    "command",
    "core",
    "edit",
    "insert",
    "motions",
    "search",
    "visual",
    "enter_command_mode",
    "enter_insert_mode",
    "enter_search_mode",
    "enter_visual_mode",
    "exit_to_normal_mode",
    "submit_command_line",
    "sync_selection",
]
