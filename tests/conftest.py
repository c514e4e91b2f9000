from __future__ import annotations

from typing import Callable, List, Optional

import pytest


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers only fire when the test says so."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire(self, timer: Optional[ManualTimer] = None) -> None:
        """Run ``timer`` (default: the newest pending one) as if it elapsed."""

        if timer is None:
            timer = self.pending[-1]
        timer.cancelled = True
        timer.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
