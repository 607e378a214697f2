"""Tests for the structured logging package."""
from __future__ import annotations

import json
import logging

import pytest


class TestLevels:
    """Test numeric level handling."""

    def test_enum_values(self):
        from tts_gateway.core.logging import LogLevel

        assert [LogLevel.MINIMAL, LogLevel.NORMAL, LogLevel.VERBOSE, LogLevel.DEBUG] == [1, 2, 3, 4]

    @pytest.mark.parametrize("value,expected", [
        (1, 1), (4, 4), ("3", 3), ("verbose", 3), ("INFO", 2), ("warning", 1),
        (logging.WARNING, 1), (logging.INFO, 2), (logging.DEBUG, 4), ("bogus", 2), (None, 2),
    ])
    def test_coerce_level(self, value, expected):
        from tts_gateway.core.logging import coerce_level

        assert coerce_level(value) == expected


class TestColors:
    """Test console coloring rules."""

    def test_no_color_env(self, monkeypatch):
        from tts_gateway.core.logging import supports_color

        monkeypatch.setenv("TTS_GW_NO_COLOR", "1")
        assert supports_color() is False

    def test_status_colors(self):
        from tts_gateway.core.logging import ColoredConsoleFormatter, Colors

        fmt = ColoredConsoleFormatter()
        assert fmt._get_field_color("status", 200) == Colors.GREEN
        assert fmt._get_field_color("status", 429) == Colors.YELLOW
        assert fmt._get_field_color("status", 502) == Colors.RED

    def test_remaining_colors(self):
        from tts_gateway.core.logging import ColoredConsoleFormatter, Colors

        fmt = ColoredConsoleFormatter()
        assert fmt._get_field_color("remaining", 0) == Colors.RED
        assert fmt._get_field_color("remaining", 5) == Colors.YELLOW
        assert fmt._get_field_color("remaining", 50) == Colors.CYAN
        assert fmt._get_field_color("client", "10.0.0.1") == Colors.MAGENTA

    def test_plain_console_line(self, monkeypatch):
        import tts_gateway.core.logging as log_module
        from tts_gateway.core.logging import ColoredConsoleFormatter

        monkeypatch.setattr(log_module, "_USE_COLORS", False)
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "request_done", None, None)
        record.tag = "INFO"
        record.request_id = "abc123"
        record.seconds = 0.25
        record.extra_data = {"status": 200}
        line = ColoredConsoleFormatter().format(record)
        assert "(abc123) request_done status=200 0.250s" in line
        assert "\033[" not in line


class TestJsonl:
    """Test JSONL output."""

    def test_record_shape(self):
        from tts_gateway.core.logging import JsonlFormatter

        record = logging.LogRecord("t", logging.WARNING, __file__, 1, "rate_limited", None, None)
        record.tag = "WARN"
        record.numeric_level = 2
        record.request_id = "rid1"
        record.extra_data = {"client": "10.0.0.7", "remaining": 0}
        payload = json.loads(JsonlFormatter().format(record))
        assert payload["tag"] == "WARN"
        assert payload["message"] == "rate_limited"
        assert payload["request_id"] == "rid1"
        assert payload["extra"] == {"client": "10.0.0.7", "remaining": 0}

    def test_file_handler(self, tmp_path, monkeypatch):
        """configure_logging writes JSONL when TTS_GW_LOG_DIR is set."""
        from tts_gateway.core.logging import configure_logging, get_logger, info, set_request_id

        monkeypatch.setenv("TTS_GW_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("TTS_GW_JSONL_FILE", "gw.jsonl")
        try:
            configure_logging(force=True)
            set_request_id("filetest")
            info(get_logger("tts-gateway.test"), "hello", voice="v1")
            for handler in logging.getLogger().handlers:
                handler.flush()
            lines = (tmp_path / "gw.jsonl").read_text(encoding="utf-8").splitlines()
            entry = json.loads(lines[-1])
            assert entry["message"] == "hello"
            assert entry["request_id"] == "filetest"
            assert entry["extra"] == {"voice": "v1"}
        finally:
            monkeypatch.delenv("TTS_GW_LOG_DIR")
            for handler in logging.getLogger().handlers:
                handler.close()
            configure_logging(force=True)
            set_request_id("-")


class TestLogResponse:
    """Test status-driven severity of request_done."""

    @pytest.mark.parametrize("status,level", [
        (200, logging.INFO), (401, logging.WARNING), (429, logging.WARNING), (502, logging.ERROR),
    ])
    def test_severity(self, status, level):
        from tts_gateway.core.logging import log_response

        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger("tts-gateway.test.response")
        handler = Capture()
        logger.addHandler(handler)
        try:
            log_response(logger, "GET", "/api/voices", status, seconds=0.01)
        finally:
            logger.removeHandler(handler)

        assert records[-1].levelno == level
        assert records[-1].getMessage() == "request_done"
        assert records[-1].extra_data["status"] == status

    def test_level_filtering(self):
        """Messages above the configured verbosity are dropped."""
        from tts_gateway.core.logging import LogLevel, debug, get_level, set_level

        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger("tts-gateway.test.filter")
        handler = Capture()
        logger.addHandler(handler)
        previous = get_level()
        try:
            set_level(LogLevel.NORMAL)
            debug(logger, "hidden")
            set_level(LogLevel.DEBUG)
            debug(logger, "shown")
        finally:
            set_level(previous)
            logger.removeHandler(handler)

        assert [r.getMessage() for r in records] == ["shown"]
