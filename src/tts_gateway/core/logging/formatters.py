"""
Log record formatters.

Both formatters read the structured attributes that ``_log`` attaches to a
record: ``tag``, ``numeric_level``, ``request_id``, ``event``, ``seconds``
and ``extra_data``.

Console:
    14:30:05 [ INFO  ] (3f9c0a1b2c4d) request method=GET path=/api/voices ip=10.0.0.7
    14:30:05 [ WARN  ] (3f9c0a1b2c4d) request_done method=GET path=/api/voices status=429 0.004s

JSONL:
    {"ts": "2026-01-15T14:30:05.412+00:00", "level": 2, "tag": "WARN", "logger": "tts-gateway.api",
     "message": "request_done", "request_id": "3f9c0a1b2c4d", "seconds": 0.004,
     "extra": {"method": "GET", "path": "/api/voices", "status": 429}}
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .colors import Colors, get_tag_color

# Fields always shown in the same color
_FIXED_FIELD_COLORS = {
    "client": Colors.MAGENTA,
    "ip": Colors.MAGENTA,
    "voice": Colors.MAGENTA,
    "limiter": Colors.BLUE,
    "path": Colors.BLUE,
}


def _use_colors() -> bool:
    # The package-level flag is the one tests toggle
    import tts_gateway.core.logging as package
    return bool(getattr(package, "_USE_COLORS", False))


def _paint(text: str, color: str) -> str:
    return f"{color}{text}{Colors.RESET}" if _use_colors() else text


def _seconds_color(seconds: float) -> str:
    if seconds < 0.1:
        return Colors.GREEN
    return Colors.YELLOW if seconds < 1.0 else Colors.RED


class JsonlFormatter(logging.Formatter):
    """One JSON object per line; values that are not JSON types are stringified."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for key in ("event", "seconds"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        extra = getattr(record, "extra_data", None)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """``HH:MM:SS [ TAG ] (rid) message key=value ... 0.123s``"""

    def format(self, record: logging.LogRecord) -> str:
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [
            _paint(datetime.fromtimestamp(record.created).strftime("%H:%M:%S"), Colors.DIM),
            _paint(f"[{tag:^7}]", get_tag_color(tag)),
        ]
        if rid != "-":
            parts.append(_paint(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(_paint(f"event={event}", Colors.BLUE))

        for key, value in (getattr(record, "extra_data", None) or {}).items():
            parts.append(_paint(f"{key}={value}", self._get_field_color(key, value)))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            parts.append(_paint(f"{seconds:.3f}s", _seconds_color(seconds)))

        return " ".join(parts)

    def _get_field_color(self, key: str, value: Any) -> str:
        """
        HTTP status: 5xx red, 4xx yellow, else green.
        Remaining rate budget: exhausted red, under 10 yellow, else cyan.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            if key == "status":
                if value >= 500:
                    return Colors.RED
                return Colors.YELLOW if value >= 400 else Colors.GREEN
            if key == "remaining":
                if value <= 0:
                    return Colors.RED
                return Colors.YELLOW if value < 10 else Colors.CYAN
        return _FIXED_FIELD_COLORS.get(key, Colors.DIM)
