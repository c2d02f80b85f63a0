"""Per-client sliding-window rate limiter gating the scan pipeline."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..logging_config import get_logger
from .store import InMemoryRequestLogStore, RequestLogStore

logger = get_logger(__name__)

DEFAULT_WINDOW_SECONDS = 3600.0
DEFAULT_MAX_REQUESTS = 10


@dataclass(frozen=True)
class Admission:
    """Outcome of one admission check."""

    allowed: bool
    retry_after_seconds: int = 0


class AdmissionGuard:
    """Admit at most ``max_requests`` scans per client per ``window_seconds``.

    Advisory flood control, not a security boundary. The guard itself is
    stateless apart from the injected store.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        store: Optional[RequestLogStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.store = store if store is not None else InMemoryRequestLogStore()
        self._clock = clock

    def admit(self, client_key: str) -> Admission:
        now = self._clock()
        oldest = self.store.acquire(client_key, now, self.window_seconds, self.max_requests)

        if oldest is None:
            return Admission(allowed=True)

        retry_after = max(1, math.ceil(oldest + self.window_seconds - now))
        logger.info("Admission rejected for %s, retry after %ds", client_key, retry_after)
        return Admission(allowed=False, retry_after_seconds=retry_after)

    def remaining(self, client_key: str) -> int:
        """Slots left for ``client_key`` in the current window."""
        used = self.store.count(client_key, self._clock(), self.window_seconds)
        return max(0, self.max_requests - used)
