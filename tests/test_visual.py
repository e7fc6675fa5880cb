from __future__ import annotations

from typing import Iterable

from vim_trainer.buffer import visual_selection
from vim_trainer.engine import VimEngine


def make_engine(*lines: str) -> VimEngine:
    return VimEngine(lines or ("",))


def press(engine: VimEngine, keys: Iterable[str]) -> None:
    for key in keys:
        engine.handle_key(key)


def test_selection_follows_cursor() -> None:
    engine = make_engine("abcdef")

    press(engine, "vll")

    state = engine.snapshot()
    assert state.mode == "visual"
    assert state.selection == ((0, 0), (0, 2))


def test_visual_delete_is_order_independent() -> None:
    backward = make_engine("abcdefgh", "ijklmnop")
    backward.set_cursor((1, 5))
    press(backward, "vkhhh")
    assert backward.snapshot().selection == ((1, 5), (0, 2))

    forward = make_engine("abcdefgh", "ijklmnop")
    forward.set_cursor((0, 2))
    press(forward, "vjlll")
    assert forward.snapshot().selection == ((0, 2), (1, 5))

    press(backward, "d")
    press(forward, "d")

    assert backward.snapshot().lines == forward.snapshot().lines == ("abop",)
    assert backward.snapshot().registers['"'] == "cdefgh\nijklmn"
    assert tuple(backward.snapshot().cursor) == (0, 2)
    assert backward.mode == forward.mode == "normal"


def test_visual_yank_moves_cursor_to_start() -> None:
    engine = make_engine("hello world")
    engine.set_cursor((0, 4))

    press(engine, "vbhy")

    state = engine.snapshot()
    assert state.registers['"'] == "hello"
    assert tuple(state.cursor) == (0, 0)
    assert state.selection is None


def test_visual_line_delete_covers_whole_lines() -> None:
    engine = make_engine("a", "b", "c")

    press(engine, "Vjd")

    state = engine.snapshot()
    assert state.lines == ("c",)
    assert state.registers['"'] == "a\nb\n"


def test_visual_line_selection_upwards() -> None:
    engine = make_engine("one", "two", "three")

    press(engine, "GVk")
    assert engine.snapshot().selection == ((2, 5), (1, 0))

    press(engine, "d")
    assert engine.snapshot().lines == ("one",)


def test_visual_line_yank_then_put() -> None:
    engine = make_engine("one", "two")

    press(engine, "Vyjp")

    assert engine.snapshot().lines == ("one", "two", "one")


def test_switching_between_charwise_and_linewise() -> None:
    engine = make_engine("abc", "def")

    press(engine, "vl")
    assert engine.snapshot().selection == ((0, 0), (0, 1))

    press(engine, "V")
    assert engine.mode == "visual"
    assert engine.snapshot().selection == ((0, 0), (0, 3))

    press(engine, "V")
    assert engine.mode == "normal"
    assert engine.snapshot().selection is None


def test_visual_change_enters_insert() -> None:
    engine = make_engine("abcdef")

    press(engine, "lvlc")

    assert engine.snapshot().lines == ("adef",)
    assert engine.mode == "insert"
    assert tuple(engine.snapshot().cursor) == (0, 1)


def test_visual_line_change_keeps_empty_line() -> None:
    engine = make_engine("one", "two", "three")

    press(engine, "jVc")

    assert engine.snapshot().lines == ("one", "", "three")
    assert engine.mode == "insert"


def test_escape_leaves_visual_mode() -> None:
    engine = make_engine("abc")

    press(engine, ["v", "l", "Escape"])

    assert engine.mode == "normal"
    assert engine.snapshot().selection is None
    assert engine.snapshot().lines == ("abc",)


def test_visual_selection_helper_widens_linewise() -> None:
    lines = ["ab", "cdef"]

    assert visual_selection(lines, (0, 1), (1, 2)) == ((0, 1), (1, 2))
    assert visual_selection(lines, (0, 1), (1, 2), linewise=True) == ((0, 0), (1, 4))
    assert visual_selection(lines, (1, 2), (0, 1), linewise=True) == ((1, 4), (0, 0))
