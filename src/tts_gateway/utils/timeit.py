"""
Wall-clock timing for request handling and upstream calls.

    with timeit("upstream", meta={"voice": voice}) as t:
        audio = connector.synthesize_ssml(doc)
    info(_LOG, "synthesized", seconds=t.seconds)
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Timing:
    name: str
    seconds: float
    meta: Optional[Dict[str, Any]] = None


class timeit:
    """
    Measure the block it wraps.

    ``timing`` is set on exit, also when the block raised; ``seconds`` is
    the running time inside the block and the final time after it.
    """

    def __init__(self, name: str, meta: Optional[Dict[str, Any]] = None):
        self.name = name
        self.meta = meta
        self.timing: Optional[Timing] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "timeit":
        self._started = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.timing = Timing(self.name, self._elapsed(), self.meta)

    def _elapsed(self) -> float:
        return 0.0 if self._started is None else perf_counter() - self._started

    @property
    def seconds(self) -> float:
        return self.timing.seconds if self.timing is not None else self._elapsed()
