"""Tests for timing and number helpers."""
from __future__ import annotations

import pytest

from tts_gateway.utils.numbers import format_number
from tts_gateway.utils.timeit import timeit


class TestFormatNumber:
    @pytest.mark.parametrize("value,expected", [(5, "5"), (5.0, "5"), (-10.0, "-10"), (0.25, "0.25"), (0.01, "0.01")])
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestTimeit:
    """Test the timing context manager."""

    def test_context_manager(self):
        with timeit("block", meta={"k": 1}) as t:
            assert t.seconds >= 0.0
        assert t.timing is not None
        assert t.timing.name == "block"
        assert t.timing.meta == {"k": 1}
        assert t.seconds == t.timing.seconds

    def test_records_on_exception(self):
        t = timeit("fails")
        with pytest.raises(RuntimeError):
            with t:
                raise RuntimeError("x")
        assert t.timing is not None

    def test_not_started(self):
        assert timeit("idle").seconds == 0.0
