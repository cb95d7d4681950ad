"""Per-session bookkeeping for LLM analyses.

An :class:`AnalysisContext` is created when a session starts and cleared when
it ends; callers pass it to whoever runs analyses instead of sharing globals.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable, Optional

DEFAULT_DURATION = 15.0
MIN_RECORDED_DURATION = 2.0
MAX_RECORDED_DURATION = 120.0
HISTORY_SIZE = 10


class AnalysisContext:
    """Tracks analyses in progress and recent run durations (seconds)."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        durations: Iterable[float] = (),
    ) -> None:
        self._clock = clock
        self._active: Dict[str, float] = {}
        self._durations: Deque[float] = deque(maxlen=HISTORY_SIZE)
        for d in durations:
            self.record_duration(d)

    def __enter__(self) -> "AnalysisContext":
        return self

    def __exit__(self, *exc) -> None:
        self.clear()

    def start(self, item_id: str) -> None:
        self._active[item_id] = self._clock()

    def finish(self, item_id: str, record: bool = True) -> Optional[float]:
        """Stop tracking ``item_id`` and return how long it ran."""
        started = self._active.pop(item_id, None)
        if started is None:
            return None
        duration = self._clock() - started
        if record:
            self.record_duration(duration)
        return duration

    def is_active(self, item_id: str) -> bool:
        return item_id in self._active

    def elapsed(self, item_id: str) -> Optional[float]:
        started = self._active.get(item_id)
        return None if started is None else self._clock() - started

    def record_duration(self, duration: float) -> bool:
        # ignore implausibly short or long runs
        if not MIN_RECORDED_DURATION <= duration <= MAX_RECORDED_DURATION:
            return False
        self._durations.append(duration)
        return True

    @property
    def durations(self) -> list:
        return list(self._durations)

    def estimated_duration(self) -> float:
        if not self._durations:
            return DEFAULT_DURATION
        return sum(self._durations) / len(self._durations)

    def clear(self) -> None:
        self._active.clear()
        self._durations.clear()
