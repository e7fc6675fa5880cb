"""Textual host for the trainer.

``controller`` and ``render`` only need ``rich``; importing ``app`` requires
``textual`` itself.
"""

from .controller import TextualTrainerAdapter, TextualUIHooks, translate_key
from .render import render_buffer, status_line

__all__ = [
    "TextualTrainerAdapter",
    "TextualUIHooks",
    "render_buffer",
    "status_line",
    "translate_key",
]
