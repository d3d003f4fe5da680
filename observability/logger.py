"""Structured event logging for interview sessions."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Callable

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
HUMAN_KEYS = ("visa_type", "question_id", "score", "flagged", "ai", "outcome", "rule_ms", "ai_ms", "idle_s")

_logger = logging.getLogger("interview.events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _rotating(path: str, formatter: logging.Formatter, keep: Callable[[logging.LogRecord], bool]) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(keep)
    return handler


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    # Console: human-readable event lines only
    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_human_formatter())
    console.addFilter(lambda record: getattr(record, "is_json", False) is not True)
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    human_file = LOG_FILE[: -len(".log")] + "-human.log" if LOG_FILE.endswith(".log") else LOG_FILE + "-human.log"

    _logger.addHandler(
        _rotating(LOG_FILE, logging.Formatter("%(message)s"), lambda record: getattr(record, "is_json", False) is True)
    )
    _logger.addHandler(
        _rotating(human_file, _human_formatter(), lambda record: getattr(record, "is_json", False) is not True)
    )


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Give module loggers (``logging.getLogger(__name__)``) the same console format."""

    root = logging.getLogger()
    if not any(getattr(handler, "_interview_console", False) for handler in root.handlers):
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_human_formatter())
        handler._interview_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)


def _format_human(evt: dict[str, Any]) -> str:
    base = f"session={evt.get('session_id')} kind={evt.get('kind')}"
    extras = [f"{key}={evt[key]}" for key in HUMAN_KEYS if key in evt]
    return base + (" " + " ".join(extras) if extras else "")


def _emit(message: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(
        name=_logger.name,
        level=logging.INFO,
        fn="",
        lno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, **fields: Any) -> None:
    """Emit one human line (console and human file) and one JSON line (file only)."""

    _ensure_handlers()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "session_id": session_id,
    }
    payload.update(fields)

    _emit(_format_human(payload), is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["configure_logging", "log_event"]
