"""Number rendering shared by validation messages and SSML attributes."""
from __future__ import annotations

from typing import Union

Number = Union[int, float]


def format_number(value: Number) -> str:
    """
    Render a number without a redundant fraction.

    >>> format_number(5.0)
    '5'
    >>> format_number(0.25)
    '0.25'
    >>> format_number(-10)
    '-10'
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
