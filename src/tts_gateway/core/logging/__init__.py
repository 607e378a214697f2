"""
tts-gateway Structured Logging.

Every log call names an event and attaches key=value fields:

    from tts_gateway.core.logging import get_logger, info, warn

    _LOG = get_logger("tts-gateway.admission")
    warn(_LOG, "rate_limited", limiter="tts", client="10.0.0.7", remaining=0)

Output goes to a colored console line and, when a log directory is
configured, to a rotating JSONL file. Each line carries the request id set
by the API layer for the current request.

Verbosity is a number from 1 to 4 (see levels.py), set by
``logging.level`` in settings.yaml or TTS_GW_LOG_LEVEL:

    error, fail               1  MINIMAL
    info, warn, success       2  NORMAL
    verbose                   3  VERBOSE
    debug, trace              4  DEBUG

Submodules:
    - levels.py: LogLevel and level coercion
    - colors.py: ANSI colors and terminal detection
    - context.py: request id and configuration state
    - formatters.py: JsonlFormatter, ColoredConsoleFormatter
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

from . import colors
from .colors import Colors, colorize, get_tag_color, supports_color
from .context import (
    get_level,
    get_level_name,
    get_log_config,
    get_request_id,
    is_configured,
    read_logging_config,
    set_configured,
    set_level,
    set_log_config,
    set_request_id,
)
from .formatters import ColoredConsoleFormatter, JsonlFormatter
from .levels import LEVEL_MAP, LEVEL_NAMES, TRACE, LogLevel, coerce_level

# Read by the console formatter; tests may toggle it
_USE_COLORS = supports_color()

DEFAULT_JSONL_FILE = "tts-gateway.jsonl"
DEFAULT_ROTATE_BYTES = 10 * 1024 * 1024
DEFAULT_ROTATE_BACKUPS = 5


def _file_handler(cfg: Dict[str, Any]) -> Optional[logging.Handler]:
    log_dir = cfg.get("log_dir")
    if not log_dir:
        return None
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        directory / str(cfg.get("jsonl_file", DEFAULT_JSONL_FILE)),
        maxBytes=int(cfg.get("rotate_max_bytes", DEFAULT_ROTATE_BYTES)),
        backupCount=int(cfg.get("rotate_backup_count", DEFAULT_ROTATE_BACKUPS)),
        encoding="utf-8",
        delay=True,
    )
    # The file keeps everything; verbosity only filters the console
    handler.setLevel(TRACE)
    handler.setFormatter(JsonlFormatter())
    return handler


def configure_logging(level: Optional[Union[int, str, LogLevel]] = None, force: bool = False) -> None:
    """
    Install the console (and optional JSONL file) handlers on the root logger.

    Args:
        level: Verbosity override; defaults to the configured level.
        force: Reconfigure even if logging is already set up.
    """
    global _USE_COLORS

    if is_configured() and not force:
        return

    colors.USE_COLORS = supports_color()
    _USE_COLORS = colors.USE_COLORS

    cfg = read_logging_config()
    set_log_config(cfg)
    current = coerce_level(level if level is not None else cfg.get("level", LogLevel.NORMAL))
    set_level(current)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(LEVEL_MAP[current])
    console.setFormatter(ColoredConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(TRACE)
    root.handlers = [console]
    file_handler = _file_handler(cfg)
    if file_handler is not None:
        root.addHandler(file_handler)

    set_configured(True)


def get_logger(name: str = "tts-gateway") -> logging.Logger:
    """Named logger; configures logging on first use."""
    configure_logging()
    return logging.getLogger(name)


def _log(logger: logging.Logger, py_level: int, tag: str, numeric_level: int, msg: str, fields: Dict[str, Any]) -> None:
    if numeric_level > get_level():
        return
    event = fields.pop("event", None)
    seconds = fields.pop("seconds", None)
    logger.log(
        py_level,
        msg,
        extra={
            "tag": tag,
            "numeric_level": numeric_level,
            "request_id": get_request_id(),
            "event": event,
            "seconds": seconds,
            "extra_data": fields or None,
        },
    )


def info(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.INFO, "INFO", LogLevel.NORMAL, msg, fields)


def warn(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Rejected or degraded requests (rate limited, unauthorized, bad markup)."""
    _log(logger, logging.WARNING, "WARN", LogLevel.NORMAL, msg, fields)


def error(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Failures; shown even at MINIMAL."""
    _log(logger, logging.ERROR, "ERROR", LogLevel.MINIMAL, msg, fields)


def success(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.INFO, "SUCCESS", LogLevel.NORMAL, msg, fields)


def fail(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.ERROR, "FAIL", LogLevel.MINIMAL, msg, fields)


def verbose(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.DEBUG, "INFO", LogLevel.VERBOSE, msg, fields)


def debug(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.DEBUG, "DEBUG", LogLevel.DEBUG, msg, fields)


def trace(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, TRACE, "TRACE", LogLevel.DEBUG, msg, fields)


def log_response(logger: logging.Logger, method: str, path: str, status: int, **fields: Any) -> None:
    """
    Log ``request_done`` for a finished exchange.

    Severity follows the status: 5xx error, 4xx warn, otherwise info.
    """
    if status >= 500:
        emit = error
    elif status >= 400:
        emit = warn
    else:
        emit = info
    emit(logger, "request_done", method=method, path=path, status=status, **fields)


__all__ = [
    "LogLevel",
    "LEVEL_MAP",
    "LEVEL_NAMES",
    "TRACE",
    "coerce_level",
    "Colors",
    "colorize",
    "get_tag_color",
    "supports_color",
    "get_level",
    "get_level_name",
    "get_log_config",
    "get_request_id",
    "set_level",
    "set_request_id",
    "ColoredConsoleFormatter",
    "JsonlFormatter",
    "configure_logging",
    "get_logger",
    "info",
    "warn",
    "error",
    "success",
    "fail",
    "verbose",
    "debug",
    "trace",
    "log_response",
]
