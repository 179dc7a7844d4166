"""Single-concurrency ordered task queue.

Tasks run one at a time in submission order; the next task starts only after
the previous one returned, and no sooner than `min_interval_seconds` after the
previous task started. The first failure drops every pending task and
propagates, so results are all-or-nothing.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from time import monotonic, sleep
from typing import Generic, TypeVar

_TaskResult = TypeVar("_TaskResult")


class SequentialTaskQueue(Generic[_TaskResult]):
    """FIFO queue that drains its tasks strictly sequentially."""

    def __init__(
        self,
        min_interval_seconds: float = 0.0,
        clock: Callable[[], float] = monotonic,
        sleeper: Callable[[float], None] = sleep,
    ) -> None:
        if min_interval_seconds < 0.0:
            raise ValueError("`min_interval_seconds` must not be negative.")
        self._pending: deque[Callable[[], _TaskResult]] = deque()
        self._running = False
        self._min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleeper = sleeper

    def __len__(self) -> int:
        return len(self._pending)

    def submit(self, task: Callable[[], _TaskResult]) -> int:
        """Enqueue a task and return its 0-based position in the result list."""

        if self._running:
            raise RuntimeError("Cannot submit tasks while the queue is draining.")
        self._pending.append(task)
        return len(self._pending) - 1

    def drain(self) -> list[_TaskResult]:
        """Run all pending tasks in order and return their results in the same order."""

        if self._running:
            raise RuntimeError("Queue is already draining.")
        self._running = True
        results: list[_TaskResult] = []
        last_started: float | None = None
        try:
            while self._pending:
                task = self._pending.popleft()
                last_started = self._pace(last_started)
                results.append(task())
        except BaseException:
            self._pending.clear()
            raise
        finally:
            self._running = False
        return results

    def _pace(self, last_started: float | None) -> float:
        now = self._clock()
        if last_started is None or self._min_interval_seconds <= 0.0:
            return now
        wait_seconds = last_started + self._min_interval_seconds - now
        if wait_seconds > 0.0:
            self._sleeper(wait_seconds)
            now = self._clock()
        return now
