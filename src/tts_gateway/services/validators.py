"""
Request Parameter Validation.

Transport-independent checks for caller-supplied parameters. Query strings
arrive as text, so numeric parameters are parsed here rather than by the
framework; that keeps the error messages identical for every endpoint.

Validation Rules:
    - Required string: present and non-blank after trimming
    - Bounded number: absent -> default; else parsed and range-checked
      against the closed interval [min, max]
    - Text length: at most ``max_length`` characters

All failures raise ValidationError (code INVALID_PARAMETER):
    "Missing required parameter: text"
    "Invalid pitch: must be a number"
    "Invalid pitch: must be between -100 and 100"
    "Text too long (max 10000 characters)"

Usage:
    from tts_gateway.services.validators import (
        validate_bounded_number,
        validate_required_string,
    )

    voice = validate_required_string(params.get("voice"), "voice")
    rate = validate_bounded_number(params.get("rate"), "rate", 0, -100, 100)
"""
from __future__ import annotations

import math
import re
from typing import Optional, Union

from tts_gateway.core.logging import get_logger, verbose
from tts_gateway.services.errors import ValidationError
from tts_gateway.utils.numbers import Number, format_number

_LOG = get_logger("tts-gateway.validators")

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
# ASCII digits, sign, point and exponent only; no digit-group underscores
_NUMERIC_CHARS = frozenset("0123456789+-.eE")
_MAX_LITERAL_CHARS = 64


def validate_required_string(value: Optional[str], name: str) -> str:
    """
    Validate that a string parameter is present.

    Args:
        value: Raw parameter value.
        name: Parameter name used in the error message.

    Returns:
        The value, unchanged.

    Raises:
        ValidationError: If the value is None or blank after trimming.
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"Missing required parameter: {name}", {"parameter": name})
    return value


def parse_number(value: Union[str, Number]) -> Optional[Number]:
    """
    Parse a numeric parameter.

    Integer literals become int, other numeric text becomes float. Only
    ASCII decimal literals of at most 64 characters are accepted. Returns
    None for blank, unparseable, NaN and infinite input.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: Number = value
    else:
        text = str(value).strip()
        if not text or len(text) > _MAX_LITERAL_CHARS or not _NUMERIC_CHARS.issuperset(text):
            return None
        try:
            number = int(text) if _INT_RE.match(text) else float(text)
        except ValueError:
            return None
    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return None
    return number


def validate_bounded_number(
    value: Optional[Union[str, Number]],
    name: str,
    default: Number,
    min_value: Number,
    max_value: Number,
) -> Number:
    """
    Validate an optional numeric parameter within [min_value, max_value].

    Args:
        value: Raw parameter value; None means absent.
        name: Parameter name used in error messages.
        default: Returned untouched when the value is absent.
        min_value: Inclusive lower bound.
        max_value: Inclusive upper bound.

    Returns:
        The parsed number, or ``default``.

    Raises:
        ValidationError: If the value is not a number or is out of range.
    """
    if value is None:
        return default

    number = parse_number(value)
    if number is None:
        raise ValidationError(f"Invalid {name}: must be a number", {"parameter": name})

    if number < min_value or number > max_value:
        raise ValidationError(
            f"Invalid {name}: must be between {format_number(min_value)} and {format_number(max_value)}",
            {"parameter": name, "value": number},
        )

    verbose(_LOG, "param_ok", name=name, value=number)
    return number


def validate_text_length(text: str, max_length: int) -> str:
    """Reject text longer than ``max_length`` characters."""
    if len(text) > max_length:
        raise ValidationError(
            f"Text too long (max {max_length} characters)",
            {"length": len(text), "max_length": max_length},
        )
    return text
