"""Request-log stores backing the Admission Guard.

A store owns the per-client timestamp lists. Purge, count and record must
happen atomically per call, so a shared store (Redis, a database) can stand
in for the in-process one without changing the guard.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Optional


class RequestLogStore(ABC):
    """Sliding-window request log keyed by client."""

    @abstractmethod
    def acquire(self, key: str, now: float, window: float, quota: int) -> Optional[float]:
        """Try to record a request for ``key`` at ``now``.

        Entries with ``now - ts >= window`` are purged first. The request is
        recorded iff fewer than ``quota`` entries remain.

        Returns:
            None when admitted, otherwise the oldest timestamp still inside
            the window (the caller derives the retry delay from it).
        """

    @abstractmethod
    def count(self, key: str, now: float, window: float) -> int:
        """Number of in-window entries for ``key`` (read-only)."""


class InMemoryRequestLogStore(RequestLogStore):
    """Process-local store. State resets on restart.

    Thread-safe: every operation holds a single lock for its whole
    purge-check-record sequence. Clients with no in-window entries are
    swept at most once per window, so idle keys do not accumulate.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._log: dict[str, list[float]] = {}
        self._last_sweep: Optional[float] = None

    def acquire(self, key: str, now: float, window: float, quota: int) -> Optional[float]:
        with self._lock:
            if self._last_sweep is None or now - self._last_sweep >= window:
                self._sweep(now, window)
            recent = [ts for ts in self._log.get(key, ()) if now - ts < window]
            if len(recent) >= quota:
                self._log[key] = recent
                return recent[0]
            recent.append(now)
            self._log[key] = recent
            return None

    def count(self, key: str, now: float, window: float) -> int:
        with self._lock:
            return sum(1 for ts in self._log.get(key, ()) if now - ts < window)

    def prune(self, now: float, window: float) -> int:
        """Drop clients with no in-window entries. Returns how many were dropped."""
        with self._lock:
            return self._sweep(now, window)

    def _sweep(self, now: float, window: float) -> int:
        # Caller holds the lock. Timestamps are appended in order, so the
        # newest one decides whether a client is idle.
        stale = [
            key
            for key, stamps in self._log.items()
            if not stamps or now - stamps[-1] >= window
        ]
        for key in stale:
            del self._log[key]
        self._last_sweep = now
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._log)
