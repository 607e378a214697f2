"""
ANSI colors for the console formatter.

Colors are off when stdout is not a terminal (container logs, pipes), when
NO_COLOR is set (https://no-color.org/), or when TTS_GW_NO_COLOR=1.
"""
from __future__ import annotations

import os
import sys


class Colors:
    RESET = "\033[0m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


_TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "WARNING": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
    "TRACE": Colors.DIM,
}


def _enable_windows_ansi() -> bool:
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        # STD_OUTPUT_HANDLE, ENABLE_PROCESSED_OUTPUT | WRAP_AT_EOL | VIRTUAL_TERMINAL_PROCESSING
        kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
        return True
    except (AttributeError, OSError):
        return False


def supports_color() -> bool:
    """Whether console output should carry ANSI escapes."""
    if os.getenv("TTS_GW_NO_COLOR", "0") == "1" or os.getenv("NO_COLOR"):
        return False

    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None or not isatty():
        return False

    if sys.platform == "win32":
        return _enable_windows_ansi()
    return True


# Rechecked by configure_logging()
USE_COLORS = supports_color()


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Colors.RESET}" if USE_COLORS else text


def get_tag_color(tag: str) -> str:
    """Color of a ``[ TAG ]`` column; unknown tags are uncolored."""
    return _TAG_COLORS.get(tag.upper(), Colors.RESET)
