"""Logging configuration and event emission."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

from skillgate.skills.models import TurnEvent


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            # Use ISO8601 format
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname


def _json_formatter() -> logging.Formatter:
    return CustomJsonFormatter(  # type: ignore[no-untyped-call]
        "%(timestamp)s %(level)s %(name)s %(message)s", json_ensure_ascii=False
    )


def setup_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: Path | None = None,
) -> None:
    """Configure the root logger.

    Records always go to stderr: stdout belongs to the host and carries the
    rendered activation text.
    """

    log_level = getattr(logging, level.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if log_format.lower() == "json":
        log_handler = logging.StreamHandler(sys.stderr)
        log_handler.setFormatter(_json_formatter())
        root_logger.addHandler(log_handler)
    else:
        # Rich Text Format
        from rich.console import Console
        from rich.logging import RichHandler

        rich_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False,
        )
        # RichHandler handles formatting internally, no need for setFormatter
        root_logger.addHandler(rich_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_json_formatter())
        root_logger.addHandler(file_handler)

    # Silence noisy libs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def log_event(event: TurnEvent) -> None:
    """Log a structured per-turn event."""
    logger = logging.getLogger("event")

    payload = event.model_dump(mode="json", exclude_none=True)
    extra = {
        "event_type": event.__class__.__name__,
        "event_data": payload,
        "conversation_id": event.conversation_id,
    }

    logger.info(f"Event: {event.__class__.__name__}", extra=extra)


__all__ = ["CustomJsonFormatter", "setup_logging", "log_event"]
