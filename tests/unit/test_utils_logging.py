from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from grub_bootimage.utils.logging import bind_context, clear_contextvars, setup_logging


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    clear_contextvars()
    setup_logging()


def test_setup_logging_produces_json_on_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """Configure logging and verify that structlog writes JSON to stderr, not stdout."""
    setup_logging("INFO")
    log = structlog.get_logger()
    log.info("hello", foo=123)

    captured = capsys.readouterr()
    assert captured.out == ""
    data = json.loads(captured.err.strip())
    # Verify keys added by processors
    assert data["event"] == "hello"
    assert data["message"] == "hello"
    assert data["level"] in ("info", "INFO")
    assert "timestamp" in data
    assert data["foo"] == 123


def test_level_filters_records(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("ERROR")
    log = structlog.get_logger()
    log.info("hidden")
    log.error("shown")

    lines = capsys.readouterr().err.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["event"] == "shown"


def test_bound_context_and_file_sink(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Bound mode/kernel appear in every record and records are duplicated to the log file."""
    log_file = tmp_path / "logs" / "runner.jsonl"
    setup_logging("DEBUG", log_file)
    bind_context(mode="test", kernel=Path("target/deps/kernel"))
    structlog.get_logger().debug("packaging", iso=None)

    data = json.loads(log_file.read_text(encoding="utf-8").strip())
    assert data["mode"] == "test"
    assert data["kernel"] == str(Path("target/deps/kernel"))
    # None values are dropped
    assert "iso" not in data
    assert json.loads(capsys.readouterr().err.strip())["event"] == "packaging"
