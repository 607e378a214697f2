"""
Sliding-Window Rate Limiter.

Tracks recent request timestamps per caller identifier and admits or rejects
requests against a rolling time budget. Unlike bucketed counters the window
moves continuously: a stored timestamp ``t`` counts iff ``now - t < window``.

Concurrency:
    - A map lock guards creating and removing per-identifier entries.
    - Each entry has its own lock; the prune/count/append sequence of one
      ``check()`` runs entirely under it, so at most ``max_requests``
      requests are admitted per window even under concurrent callers.
    - Different identifiers never contend on the same entry lock.
    - An entry dropped by ``reset()`` or the sweep is flagged evicted; a
      ``check()`` that locked an evicted entry retries with a fresh one.
    - Lock order is always entry lock, then map lock.

Memory:
    A daemon thread started by ``start()`` calls ``cleanup()`` every
    ``cleanup_interval_s`` seconds, independent of traffic, and drops
    identifiers whose history became empty.

State is per process and not persisted.

Example:
    >>> limiter = RateLimiter(window_ms=60_000, max_requests=2)
    >>> limiter.check("10.0.0.7").allowed
    True
    >>> limiter.check("10.0.0.7").remaining
    0
    >>> limiter.check("10.0.0.7").allowed
    False
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from tts_gateway.core.config import Defaults
from tts_gateway.core.logging import debug, error, get_logger, info, trace
from tts_gateway.core.metrics import metrics

_LOG = get_logger("tts-gateway.ratelimit")


@dataclass(frozen=True)
class RateLimitResult:
    """
    Outcome of one ``RateLimiter.check()``.

    Attributes:
        allowed: Whether the request was admitted (and recorded).
        remaining: Requests still available in the current window.
        reset_at: Epoch seconds when the oldest counted request leaves
            the window.
        limit: The limiter's max_requests.
    """
    allowed: bool
    remaining: int
    reset_at: float
    limit: int

    @property
    def reset_at_iso(self) -> str:
        """reset_at as ISO-8601 UTC with milliseconds, e.g. 2026-01-15T14:30:05.123Z."""
        dt = datetime.fromtimestamp(self.reset_at, tz=timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at_iso,
        }


@dataclass
class _Entry:
    timestamps: List[float] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)
    evicted: bool = False


class RateLimiter:
    """
    Per-identifier sliding-window rate limiter.

    Args:
        window_ms: Window length in milliseconds (> 0).
        max_requests: Requests admitted per window (> 0).
        cleanup_interval_s: Sweep period for the background thread.
        clock: Returns the current time in epoch seconds.
        name: Label used in logs, metrics and stats.
    """

    def __init__(
        self,
        window_ms: int = Defaults.RATE_LIMIT_TTS_WINDOW_MS,
        max_requests: int = Defaults.RATE_LIMIT_TTS_MAX_REQUESTS,
        cleanup_interval_s: float = Defaults.RATE_LIMIT_CLEANUP_INTERVAL_S,
        clock: Callable[[], float] = time.time,
        name: str = "default",
    ):
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")

        self.window_ms = int(window_ms)
        self.max_requests = int(max_requests)
        self.cleanup_interval_s = float(cleanup_interval_s)
        self.name = name
        self._window_s = self.window_ms / 1000.0
        self._clock = clock

        self._entries: Dict[str, _Entry] = {}
        self._map_lock = threading.Lock()

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Admission
    # ─────────────────────────────────────────────────────────────────────────

    def check(self, identifier: str) -> RateLimitResult:
        """
        Decide whether ``identifier`` may make one more request now.

        Prunes timestamps that left the window, admits iff fewer than
        ``max_requests`` remain, and records ``now`` when admitted.
        """
        while True:
            entry = self._get_or_create(identifier)
            with entry.lock:
                if entry.evicted:
                    continue

                now = self._clock()
                retained = self._prune(entry, now)
                count = len(retained)
                allowed = count < self.max_requests
                remaining = max(0, self.max_requests - count - (1 if allowed else 0))
                oldest = retained[0] if retained else now
                reset_at = oldest + self._window_s

                if allowed:
                    retained.append(now)

                result = RateLimitResult(
                    allowed=allowed,
                    remaining=remaining,
                    reset_at=reset_at,
                    limit=self.max_requests,
                )
            trace(_LOG, "limiter_check", limiter=self.name, client=identifier, count=count, allowed=allowed)
            return result

    def reset(self, identifier: str) -> None:
        """Forget the request history of ``identifier``."""
        with self._map_lock:
            entry = self._entries.get(identifier)
        if entry is None:
            return
        with entry.lock:
            self._remove(identifier, entry)

    def get_count(self, identifier: str) -> int:
        """Number of requests from ``identifier`` inside the window right now. Read-only."""
        with self._map_lock:
            entry = self._entries.get(identifier)
        if entry is None:
            return 0
        with entry.lock:
            now = self._clock()
            return sum(1 for t in entry.timestamps if now - t < self._window_s)

    # ─────────────────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────────────────

    def cleanup(self) -> int:
        """
        Prune every tracked identifier and drop the ones left empty.

        Each entry is pruned under its own lock, so an in-flight ``check()``
        for the same identifier is never disturbed.

        Returns:
            Number of identifiers removed.
        """
        with self._map_lock:
            snapshot = list(self._entries.items())

        removed = 0
        for identifier, entry in snapshot:
            with entry.lock:
                if entry.evicted:
                    continue
                if not self._prune(entry, self._clock()):
                    self._remove(identifier, entry)
                    removed += 1

        metrics.set_tracked_identifiers(self.name, self.tracked_count)
        if removed:
            debug(_LOG, "sweep", limiter=self.name, removed=removed, tracked=self.tracked_count)
        return removed

    def start(self) -> None:
        """Start the background sweep thread (idempotent)."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name=f"ratelimit-sweep-{self.name}",
            daemon=True,
        )
        self._thread.start()
        info(_LOG, "sweep_started", limiter=self.name, interval_s=self.cleanup_interval_s)

    def close(self, timeout: float = 5.0) -> None:
        """Stop the sweep thread and wait for it to exit."""
        self._stop.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tracked_count(self) -> int:
        with self._map_lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Limiter configuration and current size, for health output."""
        return {
            "name": self.name,
            "window_ms": self.window_ms,
            "max_requests": self.max_requests,
            "tracked": self.tracked_count,
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _get_or_create(self, identifier: str) -> _Entry:
        with self._map_lock:
            entry = self._entries.get(identifier)
            if entry is None:
                entry = _Entry()
                self._entries[identifier] = entry
            return entry

    def _prune(self, entry: _Entry, now: float) -> List[float]:
        # Caller holds entry.lock
        entry.timestamps = [t for t in entry.timestamps if now - t < self._window_s]
        return entry.timestamps

    def _remove(self, identifier: str, entry: _Entry) -> None:
        # Caller holds entry.lock
        entry.evicted = True
        with self._map_lock:
            if self._entries.get(identifier) is entry:
                del self._entries[identifier]

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.cleanup_interval_s):
            try:
                self.cleanup()
            except Exception as e:
                # A failed pass must not end the sweep thread
                error(_LOG, "sweep_failed", limiter=self.name, error=str(e))
