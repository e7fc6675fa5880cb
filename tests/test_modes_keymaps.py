from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from vim_trainer.buffer import Buffer
from vim_trainer.keymaps import (
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)
from vim_trainer.keymaps.defaults import load_default_keymaps
from vim_trainer.modes import (
    CommandMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    NormalMode,
    VisualMode,
)
from vim_trainer.modes.mode_manager import ModeManager


def make_context(
    registry: KeymapRegistry,
    resolver: KeymapResolver,
    *,
    buffer: Optional[Buffer] = None,
) -> ModeContext:
    buffer_obj = buffer or Buffer()
    registers = buffer_obj.registers
    extras: Dict[str, Any] = {
        "keymap_registry": registry,
        "keymap_resolver": resolver,
    }
    return ModeContext(
        buffer=buffer_obj,
        registers=registers,
        bus=ModeBus(),
        extras=extras,
    )


def make_default_context(*, buffer: Optional[Buffer] = None) -> ModeContext:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    return make_context(registry, KeymapResolver(registry), buffer=buffer)


def char(key: str) -> KeyInput:
    return KeyInput(key=key, text=key)


def test_mode_requires_resolver_in_context() -> None:
    buffer = Buffer()
    context = ModeContext(buffer=buffer, registers=buffer.registers, bus=ModeBus())

    with pytest.raises(RuntimeError):
        NormalMode(context)


def test_normal_mode_uses_keymap_binding() -> None:
    context = make_default_context()
    mode = NormalMode(context)

    result = mode.handle_key(char("i"))

    assert result.switch_to == "insert"
    assert result.consumed is True


def test_normal_mode_unmapped_key_is_not_consumed() -> None:
    context = make_default_context()
    mode = NormalMode(context)

    result = mode.handle_key(char("Z"))

    assert result.consumed is False
    assert mode.command_buffer == ""


def test_insert_mode_escape_binding() -> None:
    context = make_default_context()
    mode = InsertMode(context)

    result = mode.handle_key(KeyInput(key="ESC"))

    assert result.switch_to == "normal"
    assert result.consumed is True


def test_insert_mode_types_printable_keys() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["ac"]))
    context.buffer.set_cursor((0, 1), insert=True)
    mode = InsertMode(context)

    result = mode.handle_key(char("b"))

    assert result.status == "insert"
    assert context.buffer.line(0) == "abc"
    assert context.buffer.cursor == (0, 2)


def test_normal_mode_pending_sequence() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["one", "two"]))
    mode = NormalMode(context)

    pending = mode.handle_key(char("d"))
    assert pending.status == "pending"
    assert pending.consumed is True
    assert mode.command_buffer == "d"

    mode.handle_key(char("d"))

    assert list(context.buffer.lines) == ["two"]
    assert mode.command_buffer == ""


def test_normal_mode_miss_after_prefix_replays_key() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["abc"]))
    mode = NormalMode(context)

    mode.handle_key(char("d"))
    result = mode.handle_key(char("l"))

    assert result.status == "motion"
    assert context.buffer.cursor == (0, 1)
    assert context.buffer.line(0) == "abc"


def test_normal_mode_count_prefix_shows_in_command_buffer() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["abcdef"]))
    mode = NormalMode(context)

    assert mode.handle_key(char("3")).status == "count"
    assert mode.command_buffer == "3"
    mode.handle_key(char("x"))

    assert context.buffer.line(0) == "def"
    assert mode.count is None


def test_normal_mode_zero_is_a_motion_not_a_count() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["abcdef"]))
    context.buffer.set_cursor((0, 4))
    mode = NormalMode(context)

    result = mode.handle_key(char("0"))

    assert result.status == "motion"
    assert context.buffer.cursor == (0, 0)


def test_pending_sequence_timeout_via_mode_manager() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    manager.register_mode(NormalMode)

    pending = manager.handle_key(char("g"))
    assert pending.status == "pending"
    assert pending.timeout_ms is not None

    timeouts = manager.force_timeout("normal")
    assert "normal" in timeouts
    timeout_result = timeouts["normal"]
    assert timeout_result.status == "timeout"
    assert timeout_result.consumed is False
    assert manager.has_pending_timeout() is False


def test_normal_mode_custom_default_timeout() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    mode = NormalMode(context, default_pending_timeout_ms=250)

    pending = mode.handle_key(char("g"))

    assert pending.status == "pending"
    assert pending.timeout_ms == 250


def test_mode_manager_forwards_mode_kwargs() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    manager.register_mode(NormalMode, default_pending_timeout_ms=300)

    pending = manager.handle_key(char("g"))

    assert pending.timeout_ms == 300


def test_mode_manager_rejects_duplicate_and_unknown_modes() -> None:
    context = make_default_context()
    manager = ModeManager(context, load_defaults=False)
    manager.register_mode(NormalMode)

    with pytest.raises(ValueError):
        manager.register_mode(NormalMode)
    with pytest.raises(KeyError):
        manager.switch_mode("replace")


def test_mode_manager_custom_binding() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    registry.register_binding(
        Binding(
            id="normal.quick_insert",
            mode="normal",
            sequence=KeySequence.from_strings("g", "i"),
            action_id="core.enter_insert",
        )
    )
    context = make_context(registry, KeymapResolver(registry))
    manager = ModeManager(context, keymap_registry=registry)
    manager.register_mode(NormalMode)
    manager.register_mode(InsertMode)

    manager.handle_key(char("g"))
    manager.handle_key(char("i"))

    assert manager.active_name == "insert"


def test_mode_manager_switches_to_visual_mode() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    manager.register_mode(NormalMode)
    manager.register_mode(VisualMode)

    result = manager.handle_key(char("v"))

    assert result.switch_to == "visual"
    assert manager.active_mode and manager.active_mode.name == "visual"
    assert context.buffer.state.selection == ((0, 0), (0, 0))


def test_command_mode_text_entry_and_submit() -> None:
    context = make_default_context()
    submitted: list[str] = []
    context.bus.subscribe("command.submit", lambda payload: submitted.append(payload))
    mode = CommandMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("w"))
    mode.handle_key(char("q"))
    assert mode.command_buffer == ":wq"
    result = mode.handle_key(KeyInput(key="ENTER"))

    assert result.switch_to == "normal"
    assert submitted == [":wq"]


def test_command_mode_backspace_on_prefix_leaves_mode() -> None:
    context = make_default_context()
    mode = CommandMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("w"))
    edited = mode.handle_key(KeyInput(key="BACKSPACE"))
    assert edited.switch_to is None
    assert mode.command_buffer == ":"

    result = mode.handle_key(KeyInput(key="BACKSPACE"))
    assert result.switch_to == "normal"


def test_visual_mode_selection_and_yank() -> None:
    buffer = Buffer.from_lines(["alpha"])
    context = make_default_context(buffer=buffer)
    mode = VisualMode(context)
    mode.on_enter("normal")

    move = mode.handle_key(char("l"))

    assert move.status == "motion"
    assert context.buffer.state.selection == ((0, 0), (0, 1))

    yank = mode.handle_key(char("y"))

    assert yank.status == "visual_yank"
    assert context.buffer.registers.get().text == "al"


def test_command_mode_submit_binding_executes_action() -> None:
    context = make_default_context()
    submissions: list[str] = []
    writes: list[Any] = []
    quits: list[Any] = []
    context.bus.subscribe("command.submit", lambda payload: submissions.append(payload))
    context.bus.subscribe("command.write", lambda payload: writes.append(payload))
    context.bus.subscribe("command.quit", lambda payload: quits.append(payload))
    mode = CommandMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("w"))
    mode.handle_key(char("q"))
    result = mode.handle_key(KeyInput(key="ENTER"))

    assert result.switch_to == "normal"
    assert result.message == "Saved and quit (simulated)"
    assert submissions == [":wq"]
    assert len(writes) == 1
    assert writes[0]["force"] is False
    assert len(quits) == 1
    assert quits[0]["force"] is False


def test_visual_mode_swap_anchor() -> None:
    buffer = Buffer.from_lines(["abcd"])
    context = make_default_context(buffer=buffer)
    mode = VisualMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("l"))
    swap = mode.handle_key(char("o"))

    assert swap.status == "visual_swap"
    assert context.buffer.state.cursor == (0, 0)
    assert context.buffer.state.selection == ((0, 1), (0, 0))


def test_visual_mode_delete_selection_returns_to_normal() -> None:
    buffer = Buffer.from_lines(["alpha"])
    context = make_default_context(buffer=buffer)
    mode = VisualMode(context)
    mode.on_enter("normal")
    mode.handle_key(char("l"))

    result = mode.handle_key(char("d"))

    assert result.switch_to == "normal"
    assert context.buffer.snapshot().text == "pha"
    assert context.buffer.registers.get().text == "al"


def test_visual_mode_change_selection_switches_to_insert() -> None:
    buffer = Buffer.from_lines(["alpha"])
    context = make_default_context(buffer=buffer)
    mode = VisualMode(context)
    mode.on_enter("normal")
    mode.handle_key(char("l"))

    result = mode.handle_key(char("c"))

    assert result.switch_to == "insert"
    assert context.buffer.snapshot().text == "pha"


def test_visual_mode_exit_clears_selection() -> None:
    context = make_default_context(buffer=Buffer.from_lines(["alpha"]))
    mode = VisualMode(context)
    mode.on_enter("normal")
    mode.handle_key(char("l"))

    mode.on_exit("normal")

    assert context.buffer.state.selection is None
    assert context.extras["visual_state"]["active"] is False


def test_command_mode_write_force_event() -> None:
    context = make_default_context()
    writes: list[Dict[str, object]] = []
    context.bus.subscribe("command.write", lambda payload: writes.append(payload))
    mode = CommandMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("w"))
    mode.handle_key(char("!"))
    mode.handle_key(KeyInput(key="ENTER"))

    assert writes and writes[0]["force"] is True


def test_command_mode_x_command_triggers_write_and_quit() -> None:
    context = make_default_context()
    writes: list[Dict[str, object]] = []
    quits: list[Dict[str, object]] = []
    context.bus.subscribe("command.write", lambda payload: writes.append(payload))
    context.bus.subscribe("command.quit", lambda payload: quits.append(payload))
    mode = CommandMode(context)
    mode.on_enter("normal")

    mode.handle_key(char("x"))
    mode.handle_key(KeyInput(key="ENTER"))

    assert writes and writes[0]["force"] is False
    assert quits and quits[0]["force"] is False


def test_command_mode_unknown_command_emits_error() -> None:
    context = make_default_context()
    errors: list[object] = []
    context.bus.subscribe("command.error", lambda payload: errors.append(payload))
    mode = CommandMode(context)
    mode.on_enter("normal")

    for key in "edit":
        mode.handle_key(char(key))
    result = mode.handle_key(KeyInput(key="ENTER"))

    assert result.switch_to == "normal"
    assert result.message is None
    assert errors == ["edit"]
