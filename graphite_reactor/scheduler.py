"""
Periodic Scheduler

A single-threaded scheduler that calls registered callbacks on a fixed
period of simulated time. Registering returns a handle; releasing the handle
removes the callback, including while the scheduler is running callbacks.
"""

from typing import Callable, Dict, Optional
import itertools


class SchedulerHandle:
    """Registration of one callback with a scheduler."""

    def __init__(self, scheduler: "PeriodicScheduler", key: int):
        self._scheduler = scheduler
        self._key = key

    @property
    def active(self) -> bool:
        return self._scheduler is not None and self._key in self._scheduler._entries

    def release(self) -> None:
        """Stop calling the callback. Releasing twice does nothing."""
        if self._scheduler is None:
            return
        self._scheduler._entries.pop(self._key, None)
        self._scheduler = None


class _Entry:
    __slots__ = ("callback", "period", "next_due")

    def __init__(self, callback: Callable[[], object], period: float, next_due: float):
        self.callback = callback
        self.period = period
        self.next_due = next_due


class PeriodicScheduler:
    """
    Calls callbacks every ``period`` seconds of simulated time.

    Attributes:
        time: Simulated time elapsed [s]
    """

    def __init__(self):
        self.time = 0.0
        self._entries: Dict[int, _Entry] = {}
        self._keys = itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, callback: Callable[[], object], period: float = 1.0) -> SchedulerHandle:
        """
        Call ``callback`` every ``period`` seconds, starting one period from now.

        Returns:
            Handle used to deregister the callback
        """
        if period <= 0:
            raise ValueError(f"Period must be positive, got {period}")

        key = next(self._keys)
        self._entries[key] = _Entry(callback, float(period), self.time + period)
        return SchedulerHandle(self, key)

    def advance(self, seconds: float) -> int:
        """
        Move simulated time forward, firing every callback that falls due.

        A callback due several times within ``seconds`` fires once per
        period. A callback released by an earlier callback does not fire.

        Returns:
            Number of callbacks fired
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance by a negative time, got {seconds}")

        target = self.time + seconds
        fired = 0
        while True:
            due = self._next_due(target)
            if due is None:
                break
            key, entry = due
            self.time = entry.next_due
            entry.next_due += entry.period
            entry.callback()
            fired += 1

        self.time = target
        return fired

    def run(self, ticks: int, period: float = 1.0) -> int:
        """Advance ``ticks`` periods of ``period`` seconds."""
        return sum(self.advance(period) for _ in range(ticks))

    def _next_due(self, target: float) -> Optional[tuple]:
        due = [
            (entry.next_due, key, entry)
            for key, entry in self._entries.items()
            if entry.next_due <= target + 1e-9
        ]
        if not due:
            return None
        _, key, entry = min(due, key=lambda item: (item[0], item[1]))
        return key, entry
