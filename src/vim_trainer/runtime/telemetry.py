"""Telemetry services built on telelog.

This module exposes a narrow surface area for the rest of the trainer:

``configure(...)`` -- override or preset the telelog configuration
``get_logger(name)`` -- fetch a logger below the package logger
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- context manager timing a block, optionally per component
"""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

import telelog  # type: ignore[import]

ENV_PREFIX = "VIM_TRAINER_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "vim_trainer")
DEFAULT_LOG_FILE = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.FATAL,
}

_ACTIVE_CONFIG: Optional["TelemetryConfig"] = None


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> str:
    return " ".join(f"{key}={_stringify(value)}" for key, value in data.items())


@dataclass
class TelemetryConfig:
    """Arguments handed to ``telelog.get_logger`` plus the JSON switch.

    ``log_format`` is telelog's line layout (``"default"`` or
    ``"digital_life"``); ``json_format`` replaces it with one JSON object
    per record.
    """

    level: str = "INFO"
    console: bool = True
    json_format: bool = False
    log_file: str = ""
    log_format: str = "default"
    backup_count: int = 7

    def with_min_level(self, level: str) -> "TelemetryConfig":
        self.level = level.upper()
        return self

    def with_console_output(self, enabled: bool) -> "TelemetryConfig":
        self.console = enabled
        return self

    def with_json_format(self, enabled: bool) -> "TelemetryConfig":
        self.json_format = enabled
        return self

    def with_file_output(self, path: str) -> "TelemetryConfig":
        self.log_file = path
        return self


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            # telelog pads level names ("INFO ", "WARN ").
            "level": record.levelname.strip(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = getattr(record, "telemetry", None)
        if data:
            payload.update(data)
        return json.dumps(payload, default=str)


def _build_preset_config(preset: str) -> TelemetryConfig:
    config = TelemetryConfig()
    key = preset.lower()

    if key == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_json_format(False)
    elif key == "production":
        config.with_min_level("INFO")
        config.with_console_output(False)
        log_path = _env("LOG_FILE", DEFAULT_LOG_FILE) or "vim_trainer.log"
        config.with_file_output(log_path)
    elif key in {"performance", "performance_analysis"}:
        config.with_min_level("DEBUG")
        config.with_console_output(False)
        config.with_json_format(True)
        log_path = _env("LOG_FILE", DEFAULT_LOG_FILE) or "vim_trainer-performance.log"
        config.with_file_output(log_path)
    else:
        raise ValueError(f"Unknown preset '{preset}'.")

    return config


def _build_default_config() -> TelemetryConfig:
    config = TelemetryConfig()
    config.with_min_level((_env("LOG_LEVEL") or "WARNING").upper())
    config.with_console_output(not _env_flag("DISABLE_CONSOLE", False))

    if _env_flag("LOG_JSON", False):
        config.with_json_format(True)

    log_file = _env("LOG_FILE") or DEFAULT_LOG_FILE
    if log_file:
        config.with_file_output(log_file)

    return config


def _install(config: TelemetryConfig) -> None:
    root = logging.getLogger(DEFAULT_LOGGER_NAME)
    # telelog detaches old handlers without closing them.
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    telelog.get_logger(
        root,
        level=config.level,
        log_path=config.log_file or None,
        backup_count=config.backup_count,
        terminal=config.console,
        log_format=config.log_format,
    )
    if config.json_format:
        for handler in root.handlers:
            handler.setFormatter(_JsonFormatter())
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    root.propagate = False


def configure(
    *, config: Optional[TelemetryConfig] = None, preset: Optional[str] = None
) -> TelemetryConfig:
    """Override the active telelog configuration.

    Parameters
    ----------
    config:
        Explicit ``TelemetryConfig`` instance to adopt.
    preset:
        Named preset (``"development"``, ``"production"``, ``"performance"``).
        ``config`` and ``preset`` are mutually exclusive.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = _build_default_config()

    _ACTIVE_CONFIG = config
    _install(config)
    return config


def _ensure_config() -> TelemetryConfig:
    if _ACTIVE_CONFIG is None:
        return configure()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger below the package logger, configuring it on first use."""

    _ensure_config()
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name != DEFAULT_LOGGER_NAME and not logger_name.startswith(
        f"{DEFAULT_LOGGER_NAME}."
    ):
        logger_name = f"{DEFAULT_LOGGER_NAME}.{logger_name}"
    return logging.getLogger(logger_name)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[str(level).lower()]
    except KeyError:
        raise ValueError(f"Unsupported log level '{level}'.") from None


def record_event(
    name: str,
    *,
    level: str | int = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured ``event::<name>`` record with key/value pairs."""

    log = get_logger(logger_name)
    payload = {"event": name, **(data or {})}
    log.log(
        _resolve_level(level),
        "event::%s %s",
        name,
        _format_pairs(payload),
        extra={"telemetry": {k: _stringify(v) for k, v in payload.items()}},
    )


@dataclass
class SpanHandle:
    """Handle returned from ``span`` for optional metadata updates."""

    logger: logging.Logger
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _emit(
        self, level: str, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> None:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})
        self.logger.log(
            _resolve_level(level),
            "%s %s",
            message,
            _format_pairs(payload),
            extra={"telemetry": payload},
        )

    def fail(self, reason: str) -> None:
        self._emit("error", "span::fail", {"reason": reason})

    def cancel(self, reason: str | None = None) -> None:
        extra = {"reason": reason} if reason else None
        self._emit("warning", "span::cancel", extra)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time a code block and log it at DEBUG level.

    Parameters
    ----------
    name:
        Operation name written with every record of the span.
    logger_name:
        Target logger; defaults to the package logger.
    component:
        If ``True`` use the same name as the span; if a string, use it as the
        component identifier.
    metadata:
        Optional key/value pairs attached to the exit record.
    """

    log = get_logger(logger_name)
    component_name = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    handle = SpanHandle(
        logger=log,
        span_name=name,
        component_name=component_name,
        metadata={key: _stringify(value) for key, value in (metadata or {}).items()},
    )
    started = time.perf_counter()
    try:
        yield handle
    except Exception as exc:
        handle.fail(str(exc))
        raise
    finally:
        if log.isEnabledFor(logging.DEBUG):
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            handle._emit("debug", "span::exit", {"elapsed_ms": f"{elapsed_ms:.3f}"})


__all__ = [
    "SpanHandle",
    "TelemetryConfig",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
