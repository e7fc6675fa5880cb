"""Buffer abstractions: lines, cursor state, and registers."""

from .buffer import Buffer, BufferView, Transaction
from .document import BufferDocument
from .selection import ordered, visual_selection
from .registers import UNNAMED, RegisterBank, RegisterValue
from .state import BufferState, Cursor, Selection
from .validation import BufferValidationError, clamp_cursor, ensure_cursor, max_col

__all__ = [
    "BufferDocument",
    "BufferState",
    "Cursor",
    "Selection",
    "RegisterBank",
    "RegisterValue",
    "UNNAMED",
    "Buffer",
    "BufferView",
    "Transaction",
    "BufferValidationError",
    "clamp_cursor",
    "ensure_cursor",
    "max_col",
    "ordered",
    "visual_selection",
]
