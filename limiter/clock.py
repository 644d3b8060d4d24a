"""Clocks for the enforcer and the time-dependent policies.

A clock is any zero-argument callable returning a naive local datetime.
Production code uses ``system_clock``; tests and the traffic simulator drive
a ``ManualClock`` so "now" is whatever the last simulated request said.
"""

from datetime import datetime, timedelta
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


class ManualClock:
    __slots__ = ("_now",)

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime.now()

    def __call__(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, delta: timedelta) -> datetime:
        self._now += delta
        return self._now
