from __future__ import annotations

from typing import List

import pytest

from vim_trainer.engine import EditorState, VimEngine


class FakeEvent:
    def __init__(self) -> None:
        self.prevented = False

    def prevent_default(self) -> None:
        self.prevented = True


def make_engine(*lines: str) -> VimEngine:
    return VimEngine(lines or ("",))


def test_initial_snapshot() -> None:
    engine = make_engine("hello", "world")

    state = engine.snapshot()

    assert state.lines == ("hello", "world")
    assert tuple(state.cursor) == (0, 0)
    assert state.mode == "normal"
    assert state.selection is None
    assert state.command_buffer == ""
    assert state.registers['"'] == ""
    assert state.last_search == ""
    assert state.message == ""
    assert state.text == "hello\nworld"
    assert state.current_line == "hello"


def test_snapshot_is_immutable() -> None:
    engine = make_engine("abc")
    state = engine.snapshot()

    with pytest.raises(AttributeError):
        state.mode = "insert"  # type: ignore[misc]
    with pytest.raises(TypeError):
        state.registers['"'] = "x"  # type: ignore[index]


def test_snapshot_is_not_affected_by_later_edits() -> None:
    engine = make_engine("abc")
    before = engine.snapshot()

    engine.feed("yyx")

    assert before.lines == ("abc",)
    assert before.registers['"'] == ""
    assert engine.snapshot().registers['"'] == "a"
    assert engine.snapshot().version > before.version


def test_handle_key_reports_consumption() -> None:
    engine = make_engine("abc")

    assert engine.handle_key("l") is True
    assert engine.handle_key("Q") is False
    assert engine.handle_key("F12") is False


def test_on_change_fires_for_consumed_keys_only() -> None:
    engine = make_engine("abc")
    seen: List[EditorState] = []
    engine.on_change(seen.append)

    engine.handle_key("Q")
    assert seen == []

    engine.handle_key("l")
    assert len(seen) == 1
    assert tuple(seen[0].cursor) == (0, 1)


def test_on_change_is_single_slot() -> None:
    engine = make_engine("abc")
    first: List[EditorState] = []
    second: List[EditorState] = []

    engine.on_change(first.append)
    engine.on_change(second.append)
    engine.handle_key("l")

    assert first == []
    assert len(second) == 1

    engine.on_change(None)
    engine.handle_key("l")
    assert len(second) == 1


def test_set_content_resets_mode_cursor_and_pending() -> None:
    engine = make_engine("abc")
    engine.feed(["i", "x"])
    assert engine.mode == "insert"
    seen: List[EditorState] = []
    engine.on_change(seen.append)

    engine.set_content(["new", "content"])

    state = engine.snapshot()
    assert state.lines == ("new", "content")
    assert state.mode == "normal"
    assert tuple(state.cursor) == (0, 0)
    assert state.command_buffer == ""
    assert seen and seen[-1].lines == ("new", "content")


def test_set_content_drops_pending_prefix() -> None:
    engine = make_engine("abc")
    engine.handle_key("d")

    engine.set_content(["one", "two"])
    engine.handle_key("d")

    assert engine.snapshot().lines == ("one", "two")
    assert engine.snapshot().command_buffer == "d"


def test_set_content_keeps_registers() -> None:
    engine = make_engine("abc")
    engine.feed("yy")

    engine.set_content(["other"])
    engine.feed("p")

    assert engine.snapshot().lines == ("other", "abc")


def test_set_content_keeps_last_search_and_message() -> None:
    engine = make_engine("foo")
    engine.feed(["/", "f", "o", "o", "Enter", ":", "w", "Enter"])
    message = engine.snapshot().message
    assert message

    engine.set_content(["x", "foo"])
    state = engine.snapshot()
    assert state.last_search == "foo"
    assert state.message == message

    engine.handle_key("n")
    assert tuple(engine.snapshot().cursor) == (1, 0)


def test_set_content_with_no_lines_leaves_one_empty_line() -> None:
    engine = make_engine("abc")

    engine.set_content([])

    assert engine.snapshot().lines == ("",)


def test_set_cursor_clamps_for_mode() -> None:
    engine = make_engine("abc", "de")
    seen: List[EditorState] = []
    engine.on_change(seen.append)

    engine.set_cursor((5, 10))
    assert tuple(engine.snapshot().cursor) == (1, 1)
    assert len(seen) == 1

    engine.feed("A")
    engine.set_cursor((0, 10))
    assert tuple(engine.snapshot().cursor) == (0, 3)


def test_prevent_default_outside_insert_mode() -> None:
    engine = make_engine("abc")

    for key in ("ArrowLeft", "Backspace", "Tab"):
        event = FakeEvent()
        engine.handle_key(key, event=event)
        assert event.prevented, key


def test_prevent_default_for_consumed_keys_only() -> None:
    engine = make_engine("abc")

    ignored = FakeEvent()
    engine.handle_key("Q", event=ignored)
    assert ignored.prevented is False

    consumed = FakeEvent()
    engine.handle_key("l", event=consumed)
    assert consumed.prevented is True


def test_insert_mode_tab_is_consumed() -> None:
    engine = make_engine("abc")
    engine.handle_key("i")

    event = FakeEvent()
    assert engine.handle_key("Tab", event=event) is True
    assert event.prevented
    assert engine.snapshot().lines == ("  abc",)


def test_textual_style_key_names() -> None:
    engine = make_engine("abc")

    engine.handle_key("right")
    engine.handle_key("i")
    engine.handle_key("escape")

    assert engine.mode == "normal"
    assert tuple(engine.snapshot().cursor) == (0, 0)


def test_event_without_prevent_default_is_accepted() -> None:
    engine = make_engine("abc")

    assert engine.handle_key("l", event=object()) is True


def test_feed_counts_consumed_keys() -> None:
    engine = make_engine("abc")

    assert engine.feed(["l", "Q", "l"]) == 2
    assert tuple(engine.snapshot().cursor) == (0, 2)


def test_engines_are_independent() -> None:
    first = make_engine("one")
    second = make_engine("two")

    first.feed("yy")
    first.feed("i")

    assert second.mode == "normal"
    assert second.snapshot().registers['"'] == ""
    second.feed("p")
    assert second.snapshot().lines == ("two",)


def test_shift_flag_is_accepted_for_named_keys() -> None:
    engine = make_engine("abc")
    engine.handle_key("i")

    engine.handle_key("Enter", shift=True)

    assert engine.mode == "insert"
