"""Executable Textual app that hosts a practice sandbox for the trainer."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use vim_trainer.adapters.textual.app"
    ) from exc

from rich.text import Text

from vim_trainer.engine import EditorState, VimEngine
from vim_trainer.runtime import telemetry

from .controller import TextualTrainerAdapter, TextualUIHooks
from .render import mode_label, render_buffer

SANDBOX_CONTENT = (
    "// Sandbox Mode - Practice freely!",
    "",
    "function greet(name) {",
    "  return `Hello, ${name}!`;",
    "}",
    "",
    'const message = greet("Vim User");',
    "console.log(message);",
    "",
    "// Try any Vim commands here...",
)


def create_sandbox_engine(
    lines: Optional[Sequence[str]] = None, *, timeout_ms: int = 1000
) -> VimEngine:
    """Build an engine seeded with ``lines`` or the default sandbox text."""

    return VimEngine(
        lines if lines is not None else SANDBOX_CONTENT,
        name="sandbox",
        default_pending_timeout_ms=timeout_ms,
    )


@dataclass
class UIState:
    status_text: str = ""
    command_text: str = ""
    event_text: str = ""


class TrainerApp(App[None]):
    """Free-form practice buffer rendered with Textual."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		content-align: left top;
		overflow: auto;
	}

	#status-bar {
		height: 1;
		background: $surface-darken-1;
	}

	#mode-indicator {
		width: auto;
		padding: 0 1 0 0;
	}

	#status-line {
		width: 1fr;
	}

	#command-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        lines: Optional[Sequence[str]] = None,
        timeout_ms: int = 1000,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self._lines = lines
        self._timeout_ms = timeout_ms
        self.engine: VimEngine | None = None
        self.adapter: TextualTrainerAdapter | None = None
        self._buffer_widget: Static | None = None
        self._mode_widget: Static | None = None
        self._status_widget: Static | None = None
        self._command_widget: Static | None = None
        self.logger = telemetry.get_logger("vim_trainer.app")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        with Horizontal(id="status-bar"):
            self._mode_widget = Static("", id="mode-indicator")
            self._status_widget = Static("", id="status-line")
            yield self._mode_widget
            yield self._status_widget
        self._command_widget = Static("", id="command-line")
        yield self._command_widget
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Vim Trainer"
        self.sub_title = "Sandbox"
        self.engine = create_sandbox_engine(self._lines, timeout_ms=self._timeout_ms)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_command=self._show_command,
            handle_event=self._handle_event,
            log=self.logger.debug,
        )
        self.adapter = TextualTrainerAdapter(self.engine, hooks)
        self.set_interval(0.1, self._process_timeouts)

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.tick()

    def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        consumed = self.adapter.handle_textual_key(
            event.key, character=event.character, event=event
        )
        if consumed:
            event.stop()

    def _update_buffer(self, state: EditorState) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(render_buffer(state))
        if self._mode_widget:
            self._mode_widget.update(mode_label(state))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(self._status_markup())

    def _show_command(self, command: str) -> None:
        self._state.command_text = command
        if self._command_widget:
            self._command_widget.update(Text(command))

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "command.quit":
            self.exit()
            return
        if name in {"command.error", "search.wrap"}:
            self._state.event_text = name
            if self._status_widget:
                self._status_widget.update(self._status_markup())

    def _status_markup(self) -> Text:
        text = Text(self._state.status_text)
        if self._state.event_text:
            text.append(f"  [{self._state.event_text}]", style="dim")
        return text


def _env_int(key: str, fallback: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Practice Vim keys in a sandbox.")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Seed the sandbox with this file instead of the sample text",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=_env_int("VIM_TRAINER_TIMEOUT_MS", 1000),
        help="Pending multi-key prefix timeout in milliseconds (default: 1000)",
    )
    parser.add_argument(
        "--log-file",
        default=os.environ.get("VIM_TRAINER_LOG_FILE", ""),
        help="Write log records to this file",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("VIM_TRAINER_LOG_LEVEL", "WARNING"),
        help="Minimum log level (default: WARNING)",
    )
    return parser.parse_args(argv)


def _read_lines(path: Optional[Path]) -> Optional[List[str]]:
    if path is None:
        return None
    return path.read_text(encoding="utf-8").splitlines() or [""]


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    # Console output would draw over the Textual screen.
    config = telemetry.TelemetryConfig(
        level=args.log_level.upper(), console=False, log_file=args.log_file
    )
    telemetry.configure(config=config)
    app = TrainerApp(lines=_read_lines(args.file), timeout_ms=args.timeout_ms)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
