from __future__ import annotations

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Iterator

import pytest

from vim_trainer.runtime import telemetry
from vim_trainer.runtime.telemetry import TelemetryConfig


@pytest.fixture
def log_file(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / "trainer.log"
    yield path
    telemetry.configure(config=TelemetryConfig(level="WARNING", console=False))


def configure_file(path: Path, *, json_format: bool = False) -> None:
    telemetry.configure(
        config=TelemetryConfig(
            level="DEBUG", console=False, json_format=json_format, log_file=str(path)
        )
    )


def test_record_event_writes_key_value_pairs(log_file: Path) -> None:
    configure_file(log_file)

    telemetry.record_event("lesson.select", data={"lesson": "movement", "steps": 2})

    text = log_file.read_text(encoding="utf-8")
    assert "event::lesson.select" in text
    assert "lesson=movement" in text
    assert "steps=2" in text


def test_json_format_carries_event_fields(log_file: Path) -> None:
    configure_file(log_file, json_format=True)

    telemetry.record_event("engine.load", data={"lines": 3})

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["event"] == "engine.load"
    assert record["lines"] == "3"
    assert record["logger"] == "vim_trainer"


def test_span_logs_failure_and_reraises(log_file: Path) -> None:
    configure_file(log_file)

    with pytest.raises(RuntimeError):
        with telemetry.span("keymaps::execute", component="keymaps"):
            raise RuntimeError("boom")

    text = log_file.read_text(encoding="utf-8")
    assert "span::fail" in text
    assert "reason=boom" in text
    assert "span::exit" in text


def test_get_logger_nests_under_package_logger() -> None:
    assert telemetry.get_logger("engine").name == "vim_trainer.engine"
    assert telemetry.get_logger("vim_trainer.modes").name == "vim_trainer.modes"
    assert telemetry.get_logger().name == "vim_trainer"


def test_configure_rejects_config_and_preset() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=TelemetryConfig(), preset="development")


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")


def test_configure_routes_file_output_through_telelog(log_file: Path) -> None:
    configure_file(log_file)

    root = logging.getLogger("vim_trainer")
    assert root.level == logging.DEBUG
    assert root.propagate is False
    assert [type(h) for h in root.handlers] == [TimedRotatingFileHandler]


def test_json_level_names_are_unpadded(log_file: Path) -> None:
    configure_file(log_file, json_format=True)

    telemetry.record_event("engine.load", level="warning")

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["level"] == "WARN"


def test_reconfigure_without_outputs_leaves_a_null_handler(log_file: Path) -> None:
    configure_file(log_file)
    telemetry.configure(config=TelemetryConfig(level="INFO", console=False))

    handlers = logging.getLogger("vim_trainer").handlers
    assert [type(h) for h in handlers] == [logging.NullHandler]


def test_unsupported_event_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        telemetry.record_event("engine.load", level="verbose")
