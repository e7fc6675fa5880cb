"""Guided-lesson harness that drives a :class:`VimEngine` and checks steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vim_trainer.engine import EditorState, VimEngine
from vim_trainer.runtime import telemetry

StepValidator = Callable[[EditorState, Optional[EditorState]], bool]
StepListener = Callable[["Lesson", int], None]
LessonListener = Callable[["Lesson"], None]


@dataclass(frozen=True, slots=True)
class LessonStep:
    """One goal inside a lesson.

    ``validate`` receives the snapshot after a consumed key and the snapshot
    taken immediately before that key. ``initial_content`` and
    ``initial_cursor`` are loaded into the engine when the step starts.
    """

    instruction: str
    hint: str
    validate: StepValidator
    initial_content: Optional[Tuple[str, ...]] = None
    initial_cursor: Optional[Tuple[int, int]] = None


@dataclass(frozen=True, slots=True)
class Lesson:
    id: str
    title: str
    description: str
    keys: str
    steps: Tuple[LessonStep, ...]

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Lesson id must be non-empty")
        if not self.steps:
            raise ValueError(f"Lesson '{self.id}' must define at least one step")


@dataclass(frozen=True, slots=True)
class LessonProgress:
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.completed * 100 / self.total)

    def __str__(self) -> str:
        return f"{self.percent}% Complete ({self.completed}/{self.total})"


@dataclass(slots=True)
class _Listeners:
    step: List[StepListener] = field(default_factory=list)
    lesson: List[LessonListener] = field(default_factory=list)


class LessonSession:
    """Feeds keys to an engine and advances through lesson steps.

    Completion is tracked for the lifetime of the session only.
    """

    def __init__(self, engine: VimEngine, lessons: Sequence[Lesson]) -> None:
        self.engine = engine
        self._lessons: Dict[str, Lesson] = {}
        for lesson in lessons:
            if lesson.id in self._lessons:
                raise ValueError(f"Duplicate lesson id '{lesson.id}'")
            self._lessons[lesson.id] = lesson
        self._order = [lesson.id for lesson in lessons]
        self._current: Optional[Lesson] = None
        self._step_index = 0
        self._finished = False
        self._completed: set[str] = set()
        self._listeners = _Listeners()
        self.logger = telemetry.get_logger("vim_trainer.lessons")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def lessons(self) -> List[Lesson]:
        return [self._lessons[lesson_id] for lesson_id in self._order]

    @property
    def current_lesson(self) -> Optional[Lesson]:
        return self._current

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def current_step(self) -> Optional[LessonStep]:
        if self._current is None:
            return None
        return self._current.steps[self._step_index]

    @property
    def finished(self) -> bool:
        """Whether the selected lesson has had its last step validated."""

        return self._finished

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._completed)

    def progress(self) -> LessonProgress:
        return LessonProgress(completed=len(self._completed), total=len(self._order))

    def step_label(self) -> str:
        if self._current is None:
            return ""
        return f"Step {self._step_index + 1}/{len(self._current.steps)}"

    def hint(self) -> str:
        step = self.current_step
        return step.hint if step else ""

    def next_lesson(self) -> Optional[Lesson]:
        if self._current is None:
            return None
        index = self._order.index(self._current.id)
        if index + 1 >= len(self._order):
            return None
        return self._lessons[self._order[index + 1]]

    # ------------------------------------------------------------------
    # Listener hooks
    # ------------------------------------------------------------------
    def on_step_complete(self, callback: StepListener) -> None:
        self._listeners.step.append(callback)

    def on_lesson_complete(self, callback: LessonListener) -> None:
        self._listeners.lesson.append(callback)

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------
    def select(self, lesson_id: str) -> Lesson:
        try:
            lesson = self._lessons[lesson_id]
        except KeyError as exc:
            raise KeyError(f"Unknown lesson '{lesson_id}'") from exc
        self._current = lesson
        self._step_index = 0
        self._finished = False
        telemetry.record_event(
            "lesson.select",
            level="debug",
            data={"lesson": lesson.id, "steps": len(lesson.steps)},
        )
        self._load_step()
        return lesson

    def handle_key(
        self,
        key: str,
        *,
        shift: bool = False,
        ctrl: bool = False,
        event: object | None = None,
    ) -> bool:
        """Dispatch a key to the engine and validate the current step."""

        previous = self.engine.snapshot()
        consumed = self.engine.handle_key(key, shift=shift, ctrl=ctrl, event=event)
        if consumed:
            self._check_step(previous)
        return consumed

    def feed(self, keys: Sequence[str]) -> int:
        return sum(1 for key in keys if self.handle_key(key))

    def _load_step(self) -> None:
        step = self.current_step
        if step is None:
            return
        if step.initial_content is not None:
            self.engine.set_content(step.initial_content)
        if step.initial_cursor is not None:
            self.engine.set_cursor(step.initial_cursor)

    def _check_step(self, previous: EditorState) -> None:
        lesson = self._current
        step = self.current_step
        if lesson is None or step is None or self._finished:
            return
        if not step.validate(self.engine.snapshot(), previous):
            return

        index = self._step_index
        self.logger.info("lesson %s step %d complete", lesson.id, index + 1)
        for listener in list(self._listeners.step):
            listener(lesson, index)

        if index < len(lesson.steps) - 1:
            self._step_index += 1
            self._load_step()
            return

        self._finished = True
        self._completed.add(lesson.id)
        telemetry.record_event(
            "lesson.complete",
            data={"lesson": lesson.id, "progress": str(self.progress())},
        )
        for listener in list(self._listeners.lesson):
            listener(lesson)


__all__ = [
    "Lesson",
    "LessonProgress",
    "LessonSession",
    "LessonStep",
    "StepValidator",
]
