"""Tests for session identity, event emission, and the JSON logger."""

import json
import logging
import sys
import os
from logging.handlers import RotatingFileHandler

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from chatwidget.core.events import ClientEvent, EventEmitter
from chatwidget.core.identity import generate_session_id
from chatwidget.core.logger import ChatWidgetLogger, _JsonFormatter


# ── Session identity ─────────────────────────────────────────────────────────


class TestGenerateSessionId:
    """Validate the advisory session token."""

    def test_shape(self) -> None:
        prefix, millis, suffix = generate_session_id().split("_")
        assert prefix == "session"
        assert millis.isdigit()
        assert len(suffix) == 9

    def test_rarely_collides(self) -> None:
        ids = {generate_session_id() for _ in range(1000)}
        # Uniqueness is best-effort; allow a tiny number of collisions.
        assert len(ids) >= 998


# ── EventEmitter ─────────────────────────────────────────────────────────────


class TestEventEmitter:
    """Validate hook delivery."""

    def test_default_is_noop(self) -> None:
        event = EventEmitter().emit("x.started", "x", a=1)
        assert event == ClientEvent(name="x.started", operation="x", fields={"a": 1})

    def test_hook_receives_event(self) -> None:
        seen = []
        EventEmitter(seen.append).emit("upload_file.succeeded", "upload_file", file_id="f1")
        assert len(seen) == 1
        assert seen[0].fields == {"file_id": "f1"}

    def test_hook_error_logged(self, caplog) -> None:
        def hook(event: ClientEvent) -> None:
            raise ValueError("nope")

        with caplog.at_level(logging.WARNING, logger=ChatWidgetLogger.LOGGER_NAME):
            event = EventEmitter(hook).emit("send_message.started", "send_message")
        assert event.name == "send_message.started"
        assert any(r.getMessage() == "Event hook raised" for r in caplog.records)


# ── JSON logger ──────────────────────────────────────────────────────────────


class TestJsonFormatter:
    """Validate structured log output."""

    def test_extra_fields_merged(self) -> None:
        record = logging.LogRecord(
            name="chatwidget", level=logging.INFO, pathname=__file__, lineno=1,
            msg="upload_file succeeded", args=(), exc_info=None,
        )
        record.operation = "upload_file"
        record.file_id = "f1"

        entry = json.loads(_JsonFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["message"] == "upload_file succeeded"
        assert entry["operation"] == "upload_file"
        assert entry["file_id"] == "f1"
        assert "msg" not in entry


class TestChatWidgetLogger:
    """Validate the singleton logger."""

    def test_singleton(self) -> None:
        assert ChatWidgetLogger.get_logger() is ChatWidgetLogger.get_logger(logging.DEBUG)
        assert ChatWidgetLogger.get_logger().name == "chatwidget"

    def test_configure_adds_file_handler(self, tmp_path) -> None:
        log = ChatWidgetLogger.configure("INFO", str(tmp_path))
        handlers = [h for h in log.handlers if isinstance(h, RotatingFileHandler)]
        try:
            assert len(handlers) == 1
            log.info("file output", extra={"operation": "test"})
            handlers[0].flush()
            line = (tmp_path / "chatwidget.log").read_text(encoding="utf-8").strip().splitlines()[-1]
            assert json.loads(line)["operation"] == "test"
        finally:
            for handler in handlers:
                handler.close()
                log.removeHandler(handler)
