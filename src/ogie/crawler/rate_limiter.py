"""
Rate limiting primitives for bulk extraction.

``RollingWindowLimiter`` caps how many extractions may start within a
rolling time window. ``DomainThrottle`` enforces a minimum spacing between
successive starts to the same domain. Neither blocks: the scheduler asks for
the remaining ``delay`` and records a start once it admits one.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict

Clock = Callable[[], float]


class RollingWindowLimiter:
    """At most ``max_events`` starts in any ``window_seconds`` span."""

    def __init__(self, max_events: int, window_seconds: float = 60.0, clock: Clock = time.monotonic):
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._clock = clock
        self._events: Deque[float] = deque()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._events and self._events[0] <= cutoff:
            self._events.popleft()

    def delay(self, now: float | None = None) -> float:
        """Seconds until another start is allowed; ``0.0`` when one is allowed now."""
        now = self._clock() if now is None else now
        self._prune(now)
        if len(self._events) < self.max_events:
            return 0.0
        return max(0.0, self._events[0] + self.window_seconds - now)

    def record(self, now: float | None = None) -> None:
        self._events.append(self._clock() if now is None else now)


class DomainThrottle:
    """Minimum spacing between starts to the same domain."""

    def __init__(self, min_delay_seconds: float, clock: Clock = time.monotonic):
        self.min_delay_seconds = min_delay_seconds
        self._clock = clock
        self._last_start: Dict[str, float] = {}

    def delay(self, domain: str, now: float | None = None) -> float:
        last = self._last_start.get(domain)
        if last is None or self.min_delay_seconds <= 0:
            return 0.0
        now = self._clock() if now is None else now
        return max(0.0, last + self.min_delay_seconds - now)

    def record_start(self, domain: str, now: float | None = None) -> None:
        self._last_start[domain] = self._clock() if now is None else now
