from __future__ import annotations

import json
import os
import sys
import threading
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

_LEVEL_ENV = "GRUB_BOOTIMAGE_LOG_LEVEL"
_FILE_ENV = "GRUB_BOOTIMAGE_LOG_FILE"


def _level_from_name(raw: str | None) -> int:
    """Translate TRACE|DEBUG|INFO|WARNING|ERROR into a numeric level."""
    import logging

    raw = (raw or os.getenv(_LEVEL_ENV, "INFO")).upper()
    if raw == "TRACE":
        # Numeric level below DEBUG
        return 5
    return getattr(logging, raw, logging.INFO)


_file_lock = threading.RLock()
_log_file: Path | None = None


def _copy_event_to_message(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    # For consistency add "message" field as a copy of standard "event" field
    if "event" in event_dict and "message" not in event_dict:
        event_dict["message"] = event_dict["event"]
    return event_dict


def _drop_none_values(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    return {k: v for k, v in event_dict.items() if v is not None}


def _file_sink_processor(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """
    Processor that duplicates log records as JSON lines into GRUB_BOOTIMAGE_LOG_FILE.

    Does nothing when no log file is configured.
    """
    if _log_file is None:
        return event_dict

    line = json.dumps(event_dict, ensure_ascii=False, default=str)
    try:
        with _file_lock:
            _log_file.parent.mkdir(parents=True, exist_ok=True)
            with _log_file.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
    except OSError:
        # Never break a kernel run because of log write issues
        pass

    return event_dict


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def bind_context(*, mode: str | None = None, kernel: str | Path | None = None) -> None:
    """
    Bind run mode and kernel path into the logging context.

    This data is then automatically included in all structured log records.
    """
    bind_contextvars(mode=mode, kernel=str(kernel) if kernel is not None else None)


_CONFIGURED = False


def setup_logging(level: str | None = None, log_file: str | Path | None = None) -> None:
    """
    Centralized setup of structured logging with JSON output.

    Includes:
    - Log level from the argument or GRUB_BOOTIMAGE_LOG_LEVEL
    - ISO 8601 timestamp (key: "timestamp")
    - Context (mode, kernel) via contextvars
    - Optional duplication of each record into GRUB_BOOTIMAGE_LOG_FILE
    - JSON lines printed to stderr, so the kernel's serial output on stdout stays clean
    """
    import logging

    global _CONFIGURED, _log_file

    numeric = _level_from_name(level)
    file_name = log_file or os.getenv(_FILE_ENV)
    _log_file = Path(file_name) if file_name else None

    structlog.configure(
        processors=[
            merge_contextvars,  # Automatically include bound context
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.MODULE]
            ),
            _copy_event_to_message,
            _drop_none_values,
            _file_sink_processor,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=_stderr_logger_factory,
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=False,
    )

    # Sync root logging level (for third-party libraries)
    logging.getLogger().setLevel(numeric)

    _CONFIGURED = True


def get_logger(name: str | None = None) -> Any:
    """
    Get a structlog logger instance.

    Ensures logging is configured even when used outside the CLI entry point.
    """
    if not _CONFIGURED:
        setup_logging()
    return structlog.get_logger(name or __name__)


__all__ = [
    "setup_logging",
    "bind_context",
    "get_logger",
    "clear_contextvars",
]
