"""
Numeric verbosity levels.

Operators pick one of four levels instead of Python's named levels:

    Level     Python level     Typical gateway events
    1 MINIMAL WARNING (30)     startup, shutdown, upstream failures
    2 NORMAL  INFO (20)        request / request_done, admission rejections
    3 VERBOSE DEBUG (10)       parsed parameters, admitted requests
    4 DEBUG   TRACE (5)        built documents, limiter sweeps
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, Dict

TRACE = logging.DEBUG - 5


class LogLevel(IntEnum):
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


LEVEL_MAP: Dict[LogLevel, int] = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: TRACE,
}

LEVEL_NAMES: Dict[int, str] = {level.value: level.name for level in LogLevel}

# Python level names (and TRACE) mapped onto the numeric scale
_ALIASES: Dict[str, LogLevel] = {
    "TRACE": LogLevel.DEBUG,
    "INFO": LogLevel.NORMAL,
    "WARN": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "CRITICAL": LogLevel.MINIMAL,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Interpret a configured level.

    Accepts 1-4, a LogLevel, a Python logging level number, a name
    ("verbose", "INFO", "trace") or a digit string. Unrecognized values
    mean NORMAL.

        >>> coerce_level("3")
        <LogLevel.VERBOSE: 3>
        >>> coerce_level(logging.ERROR)
        <LogLevel.MINIMAL: 1>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        if value in LEVEL_NAMES:
            return LogLevel(value)
        # Python logging numbers: anything below INFO is as chatty as DEBUG
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        return LogLevel.NORMAL if value >= logging.INFO else LogLevel.DEBUG

    if isinstance(value, str):
        key = value.strip().upper()
        if key.isdigit():
            return coerce_level(int(key)) if int(key) in LEVEL_NAMES else LogLevel.NORMAL
        if key in LogLevel.__members__:
            return LogLevel[key]
        return _ALIASES.get(key, LogLevel.NORMAL)

    return LogLevel.NORMAL
