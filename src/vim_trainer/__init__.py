"""UI-agnostic Vim editing engine for guided lessons and free practice."""

from .engine import EditorState, VimEngine
from .lessons import Lesson, LessonSession, LessonStep

__all__ = [
    "EditorState",
    "Lesson",
    "LessonSession",
    "LessonStep",
    "VimEngine",
    "actions",
    "adapters",
    "buffer",
    "keymaps",
    "lessons",
    "modes",
    "runtime",
]

__version__ = "0.1.0"
