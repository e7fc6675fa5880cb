"""Built-in keymaps that seed each mode with the trainer's command set."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from vim_trainer.actions import command as command_actions
from vim_trainer.actions import core as core_actions
from vim_trainer.actions import edit as edit_actions
from vim_trainer.actions import insert as insert_actions
from vim_trainer.actions import motions as motion_actions
from vim_trainer.actions import search as search_actions
from vim_trainer.actions import visual as visual_actions

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    # Mode switches
    ActionRef(
        id="core.enter_insert",
        handler=core_actions.enter_insert_mode,
        description="Insert before the cursor",
    ),
    ActionRef(
        id="core.append",
        handler=core_actions.append_after_cursor,
        description="Insert after the cursor",
    ),
    ActionRef(
        id="core.append_line_end",
        handler=core_actions.append_line_end,
        description="Insert at end of line",
    ),
    ActionRef(
        id="core.insert_line_start",
        handler=core_actions.insert_line_start,
        description="Insert at first non-blank",
    ),
    ActionRef(
        id="core.open_below",
        handler=core_actions.open_line_below,
        description="Open a line below",
    ),
    ActionRef(
        id="core.open_above",
        handler=core_actions.open_line_above,
        description="Open a line above",
    ),
    ActionRef(
        id="core.exit_insert",
        handler=core_actions.exit_insert_mode,
        description="Leave insert mode",
    ),
    ActionRef(
        id="core.exit_to_normal",
        handler=core_actions.exit_to_normal_mode,
        description="Return to normal mode",
    ),
    ActionRef(
        id="core.clear",
        handler=core_actions.clear_pending,
        description="Cancel pending input",
    ),
    ActionRef(
        id="core.enter_visual",
        handler=core_actions.enter_visual_mode,
        description="Enter visual mode",
    ),
    ActionRef(
        id="core.enter_visual_line",
        handler=core_actions.enter_visual_line_mode,
        description="Enter line-wise visual mode",
    ),
    ActionRef(
        id="core.enter_command",
        handler=core_actions.enter_command_mode,
        description="Enter command-line mode",
    ),
    ActionRef(
        id="core.enter_search",
        handler=core_actions.enter_search_mode,
        description="Start a forward search",
    ),
    ActionRef(
        id="core.undo",
        handler=core_actions.undo_unavailable,
        description="Report that undo is unavailable",
    ),
    # Motions
    ActionRef(
        id="motion.left",
        handler=motion_actions.move_left,
        description="Cursor left",
    ),
    ActionRef(
        id="motion.right",
        handler=motion_actions.move_right,
        description="Cursor right",
    ),
    ActionRef(
        id="motion.up",
        handler=motion_actions.move_up,
        description="Cursor up",
    ),
    ActionRef(
        id="motion.down",
        handler=motion_actions.move_down,
        description="Cursor down",
    ),
    ActionRef(
        id="motion.word_forward",
        handler=motion_actions.next_word,
        description="Next word start",
    ),
    ActionRef(
        id="motion.word_backward",
        handler=motion_actions.previous_word,
        description="Previous word start",
    ),
    ActionRef(
        id="motion.word_end",
        handler=motion_actions.end_of_word,
        description="Word end",
    ),
    ActionRef(
        id="motion.line_start",
        handler=motion_actions.line_start,
        description="Line start",
    ),
    ActionRef(
        id="motion.first_non_blank",
        handler=motion_actions.line_first_non_blank,
        description="First non-blank",
    ),
    ActionRef(
        id="motion.line_end",
        handler=motion_actions.line_end,
        description="Line end",
    ),
    ActionRef(
        id="motion.first_line",
        handler=motion_actions.goto_first_line,
        description="First line",
    ),
    ActionRef(
        id="motion.last_line",
        handler=motion_actions.goto_last_line,
        description="Last line",
    ),
    ActionRef(
        id="motion.find_forward",
        handler=motion_actions.find_char_forward,
        description="Find character",
    ),
    ActionRef(
        id="motion.find_backward",
        handler=motion_actions.find_char_backward,
        description="Find character backwards",
    ),
    ActionRef(
        id="motion.till_forward",
        handler=motion_actions.till_char_forward,
        description="Till character",
    ),
    ActionRef(
        id="motion.till_backward",
        handler=motion_actions.till_char_backward,
        description="Till character backwards",
    ),
    # Normal-mode edits
    ActionRef(
        id="edit.delete_char",
        handler=edit_actions.delete_char,
        description="Delete under the cursor",
    ),
    ActionRef(
        id="edit.delete_char_before",
        handler=edit_actions.delete_char_before,
        description="Delete before the cursor",
    ),
    ActionRef(
        id="edit.substitute_char",
        handler=edit_actions.substitute_char,
        description="Substitute characters",
    ),
    ActionRef(
        id="edit.delete_lines",
        handler=edit_actions.delete_lines,
        description="Delete lines",
    ),
    ActionRef(
        id="edit.yank_lines",
        handler=edit_actions.yank_lines,
        description="Yank lines",
    ),
    ActionRef(
        id="edit.change_lines",
        handler=edit_actions.change_lines,
        description="Change lines",
    ),
    ActionRef(
        id="edit.delete_word",
        handler=edit_actions.delete_word,
        description="Delete word",
    ),
    ActionRef(
        id="edit.change_word",
        handler=edit_actions.change_word,
        description="Change word",
    ),
    ActionRef(
        id="edit.delete_to_end",
        handler=edit_actions.delete_to_line_end,
        description="Delete to end of line",
    ),
    ActionRef(
        id="edit.change_to_end",
        handler=edit_actions.change_to_line_end,
        description="Change to end of line",
    ),
    ActionRef(
        id="edit.delete_inner",
        handler=edit_actions.delete_inner_quotes,
        description="Delete inside quotes",
    ),
    ActionRef(
        id="edit.change_inner",
        handler=edit_actions.change_inner_quotes,
        description="Change inside quotes",
    ),
    ActionRef(
        id="edit.replace_char",
        handler=edit_actions.replace_char,
        description="Replace characters",
    ),
    ActionRef(
        id="edit.join_lines",
        handler=edit_actions.join_lines,
        description="Join with next line",
    ),
    ActionRef(
        id="edit.put_after",
        handler=edit_actions.put_after,
        description="Put after the cursor",
    ),
    ActionRef(
        id="edit.put_before",
        handler=edit_actions.put_before,
        description="Put before the cursor",
    ),
    # Insert mode
    ActionRef(
        id="insert.backspace",
        handler=insert_actions.backspace,
        description="Delete backwards",
    ),
    ActionRef(
        id="insert.delete",
        handler=insert_actions.delete_forward,
        description="Delete forwards",
    ),
    ActionRef(
        id="insert.newline",
        handler=insert_actions.split_line,
        description="Split the line",
    ),
    ActionRef(
        id="insert.tab",
        handler=insert_actions.insert_tab,
        description="Insert indentation",
    ),
    ActionRef(
        id="insert.left",
        handler=insert_actions.cursor_left,
        description="Cursor left",
    ),
    ActionRef(
        id="insert.right",
        handler=insert_actions.cursor_right,
        description="Cursor right",
    ),
    ActionRef(
        id="insert.up",
        handler=insert_actions.cursor_up,
        description="Cursor up",
    ),
    ActionRef(
        id="insert.down",
        handler=insert_actions.cursor_down,
        description="Cursor down",
    ),
    # Visual mode
    ActionRef(
        id="visual.toggle_charwise",
        handler=visual_actions.toggle_charwise,
        description="Character-wise selection",
    ),
    ActionRef(
        id="visual.toggle_linewise",
        handler=visual_actions.toggle_linewise,
        description="Line-wise selection",
    ),
    ActionRef(
        id="visual.swap_anchor",
        handler=visual_actions.swap_anchor,
        description="Swap selection anchor",
    ),
    ActionRef(
        id="visual.yank_selection",
        handler=visual_actions.yank_selection,
        description="Yank selection",
    ),
    ActionRef(
        id="visual.delete_selection",
        handler=visual_actions.delete_selection,
        description="Delete selection",
    ),
    ActionRef(
        id="visual.change_selection",
        handler=visual_actions.change_selection,
        description="Change selection",
    ),
    # Command line and search
    ActionRef(
        id="command.submit_line",
        handler=command_actions.submit_command_line,
        description="Evaluate the command line",
    ),
    ActionRef(
        id="command.backspace",
        handler=command_actions.command_backspace,
        description="Erase a command-line character",
    ),
    ActionRef(
        id="search.next",
        handler=search_actions.search_next,
        description="Next match",
    ),
    ActionRef(
        id="search.previous",
        handler=search_actions.search_previous,
        description="Previous match",
    ),
    ActionRef(
        id="search.word",
        handler=search_actions.search_word_under_cursor,
        description="Search word under cursor",
    ),
)

# (name, keys, action id, takes a character argument)
MOTION_KEYS: tuple[tuple[str, tuple[str, ...], str, bool], ...] = (
    ("left", ("h",), "motion.left", False),
    ("left_arrow", ("LEFT",), "motion.left", False),
    ("right", ("l",), "motion.right", False),
    ("right_arrow", ("RIGHT",), "motion.right", False),
    ("up", ("k",), "motion.up", False),
    ("up_arrow", ("UP",), "motion.up", False),
    ("down", ("j",), "motion.down", False),
    ("down_arrow", ("DOWN",), "motion.down", False),
    ("word_forward", ("w",), "motion.word_forward", False),
    ("word_backward", ("b",), "motion.word_backward", False),
    ("word_end", ("e",), "motion.word_end", False),
    ("line_start", ("0",), "motion.line_start", False),
    ("first_non_blank", ("^",), "motion.first_non_blank", False),
    ("line_end", ("$",), "motion.line_end", False),
    ("first_line", ("g", "g"), "motion.first_line", False),
    ("last_line", ("G",), "motion.last_line", False),
    ("find_forward", ("f",), "motion.find_forward", True),
    ("find_backward", ("F",), "motion.find_backward", True),
    ("till_forward", ("t",), "motion.till_forward", True),
    ("till_backward", ("T",), "motion.till_backward", True),
)

NORMAL_KEYS: tuple[tuple[str, tuple[str, ...], str, bool], ...] = (
    ("insert", ("i",), "core.enter_insert", False),
    ("append", ("a",), "core.append", False),
    ("append_line_end", ("A",), "core.append_line_end", False),
    ("insert_line_start", ("I",), "core.insert_line_start", False),
    ("open_below", ("o",), "core.open_below", False),
    ("open_above", ("O",), "core.open_above", False),
    ("visual", ("v",), "core.enter_visual", False),
    ("visual_line", ("V",), "core.enter_visual_line", False),
    ("command", (":",), "core.enter_command", False),
    ("search", ("/",), "core.enter_search", False),
    ("escape", ("ESC",), "core.clear", False),
    ("undo", ("u",), "core.undo", False),
    ("delete_char", ("x",), "edit.delete_char", False),
    ("delete_char_before", ("X",), "edit.delete_char_before", False),
    ("substitute_char", ("s",), "edit.substitute_char", False),
    ("substitute_line", ("S",), "edit.change_lines", False),
    ("delete_to_end", ("D",), "edit.delete_to_end", False),
    ("change_to_end", ("C",), "edit.change_to_end", False),
    ("delete_lines", ("d", "d"), "edit.delete_lines", False),
    ("delete_word", ("d", "w"), "edit.delete_word", False),
    ("delete_inner", ("d", "i"), "edit.delete_inner", True),
    ("change_lines", ("c", "c"), "edit.change_lines", False),
    ("change_word", ("c", "w"), "edit.change_word", False),
    ("change_inner", ("c", "i"), "edit.change_inner", True),
    ("yank_lines", ("y", "y"), "edit.yank_lines", False),
    ("replace_char", ("r",), "edit.replace_char", True),
    ("join_lines", ("J",), "edit.join_lines", False),
    ("put_after", ("p",), "edit.put_after", False),
    ("put_before", ("P",), "edit.put_before", False),
    ("search_next", ("n",), "search.next", False),
    ("search_previous", ("N",), "search.previous", False),
    ("search_word", ("*",), "search.word", False),
)

INSERT_KEYS: tuple[tuple[str, tuple[str, ...], str, bool], ...] = (
    ("exit_escape", ("ESC",), "core.exit_insert", False),
    ("backspace", ("BACKSPACE",), "insert.backspace", False),
    ("delete", ("DELETE",), "insert.delete", False),
    ("newline", ("ENTER",), "insert.newline", False),
    ("tab", ("TAB",), "insert.tab", False),
    ("left", ("LEFT",), "insert.left", False),
    ("right", ("RIGHT",), "insert.right", False),
    ("up", ("UP",), "insert.up", False),
    ("down", ("DOWN",), "insert.down", False),
)

VISUAL_KEYS: tuple[tuple[str, tuple[str, ...], str, bool], ...] = (
    ("exit_escape", ("ESC",), "core.exit_to_normal", False),
    ("charwise", ("v",), "visual.toggle_charwise", False),
    ("linewise", ("V",), "visual.toggle_linewise", False),
    ("swap_anchor", ("o",), "visual.swap_anchor", False),
    ("yank_selection", ("y",), "visual.yank_selection", False),
    ("delete_selection", ("d",), "visual.delete_selection", False),
    ("cut_selection", ("x",), "visual.delete_selection", False),
    ("change_selection", ("c",), "visual.change_selection", False),
)

COMMAND_KEYS: tuple[tuple[str, tuple[str, ...], str, bool], ...] = (
    ("exit_escape", ("ESC",), "core.exit_to_normal", False),
    ("submit_enter", ("ENTER",), "command.submit_line", False),
    ("backspace", ("BACKSPACE",), "command.backspace", False),
)


def _bindings(
    mode: str, table: Iterable[tuple[str, tuple[str, ...], str, bool]]
) -> tuple[Binding, ...]:
    return tuple(
        Binding(
            id=f"{mode}.{name}",
            mode=mode,
            sequence=KeySequence.from_strings(*keys),
            action_id=action_id,
            argument=argument,
        )
        for name, keys, action_id, argument in table
    )


DEFAULT_BINDINGS: tuple[Binding, ...] = (
    _bindings("normal", MOTION_KEYS)
    + _bindings("normal", NORMAL_KEYS)
    + _bindings("insert", INSERT_KEYS)
    + _bindings("visual", MOTION_KEYS)
    + _bindings("visual", VISUAL_KEYS)
    + _bindings("command", COMMAND_KEYS)
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode.

    Bindings whose action was filtered out are skipped as well.
    """

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    registered: set[str] = set()
    for action in DEFAULT_ACTIONS:
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)
        registered.add(action.id)

    for binding in DEFAULT_BINDINGS:
        if binding.action_id not in registered:
            continue
        if not _selected(binding.id, allowed_bindings):
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms),
            replace=replace,
        )

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)

    if per_mode_overrides:
        for mode, bindings in per_mode_overrides.items():
            for binding in bindings:
                if binding.mode != mode:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target mode '{mode}'"
                    )
                registry.register_binding(binding, replace=True)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    return binding.with_timeout(timeout_ms)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = [
    "DEFAULT_ACTIONS",
    "DEFAULT_BINDINGS",
    "load_default_keymaps",
]
