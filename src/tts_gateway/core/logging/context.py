"""
Logging state: request correlation id and resolved configuration.

The request id is a ContextVar, so a handler running on FastAPI's
threadpool and the event loop code around it log under the same id.

Environment overrides of the ``logging`` settings section:

    TTS_GW_LOG_LEVEL            level (1-4 or a name)
    TTS_GW_LOG_DIR              directory of the JSONL file (unset = console only)
    TTS_GW_JSONL_FILE           JSONL file name
    TTS_GW_LOG_ROTATE_BYTES     rotate after this many bytes
    TTS_GW_LOG_ROTATE_BACKUP    rotated files kept
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Callable, Dict, Tuple

import yaml

from .levels import LEVEL_NAMES, LogLevel

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


class _State:
    configured = False
    level = LogLevel.NORMAL
    config: Dict[str, Any] = {}


def get_request_id() -> str:
    """Current request id, "-" outside a request."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _State.level


def set_level(level: LogLevel) -> None:
    _State.level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(int(_State.level), "NORMAL")


def is_configured() -> bool:
    return _State.configured


def set_configured(value: bool) -> None:
    _State.configured = value


def get_log_config() -> Dict[str, Any]:
    return _State.config


def set_log_config(config: Dict[str, Any]) -> None:
    _State.config = config


# env var -> (config key, parser); unparseable values are ignored
_ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "TTS_GW_LOG_LEVEL": ("level", str),
    "TTS_GW_LOG_DIR": ("log_dir", str),
    "TTS_GW_JSONL_FILE": ("jsonl_file", str),
    "TTS_GW_LOG_ROTATE_BYTES": ("rotate_max_bytes", int),
    "TTS_GW_LOG_ROTATE_BACKUP": ("rotate_backup_count", int),
}


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve the logging section: environment over settings file.

    Logging must come up even when the settings file is broken, so a file
    that cannot be read or parsed contributes nothing.
    """
    from tts_gateway.core.config import ConfigValidationError, load_settings, settings_path

    cfg: Dict[str, Any] = {}
    try:
        cfg.update(load_settings(settings_path(), missing_ok=True).raw.get("logging") or {})
    except (OSError, ValueError, yaml.YAMLError, ConfigValidationError):
        pass

    for env_name, (key, parse) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        try:
            cfg[key] = parse(raw)
        except ValueError:
            continue
    return cfg
