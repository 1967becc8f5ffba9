"""Tests for logging setup and event emission."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from skillgate.observability.logging import CustomJsonFormatter, log_event, setup_logging
from skillgate.skills.models import TurnEvent


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    def test_json_format(self) -> None:
        setup_logging("debug", "json")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_text_format_uses_rich(self) -> None:
        setup_logging("INFO", "text")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)

    def test_log_file_receives_json_records(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "skillgate.log"
        setup_logging("INFO", "json", log_file)

        logging.getLogger("skillgate.test").info("hello", extra={"skill": "api"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["skill"] == "api"
        assert "timestamp" in record

    def test_unknown_level_falls_back_to_warning(self) -> None:
        setup_logging("chatty", "json")
        assert logging.getLogger().level == logging.WARNING


def test_log_event(caplog: pytest.LogCaptureFixture) -> None:
    event = TurnEvent(conversation_id="c1", scorer="keyword", final_order=["a"])

    with caplog.at_level(logging.INFO, logger="event"):
        log_event(event)

    record = caplog.records[-1]
    assert record.name == "event"
    assert record.getMessage() == "Event: TurnEvent"
    assert record.event_type == "TurnEvent"
    assert record.conversation_id == "c1"
    assert record.event_data["final_order"] == ["a"]
    assert "duration_ms" not in record.event_data
