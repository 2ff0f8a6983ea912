"""Hand-driven scheduler for deterministic timer tests."""

from typing import Any, Callable, List, Tuple

from patternbus.core.message_bus.scheduler import Scheduler, TimerHandle


class ManualTimerHandle(TimerHandle):
    """Timer that only fires when the scheduler is advanced."""

    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler with a virtual clock, advanced explicitly by tests."""

    def __init__(self):
        self.now = 0.0
        self.timers: List[ManualTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimerHandle:
        handle = ManualTimerHandle(self.now + delay, callback, args)
        self.timers.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualTimerHandle]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in deadline order."""
        target = self.now + seconds
        fired = 0
        while True:
            due = sorted((t for t in self.pending if t.when <= target), key=lambda t: t.when)
            if not due:
                break
            timer = due[0]
            self.now = max(self.now, timer.when)
            timer.fired = True
            timer.callback(*timer.args)
            fired += 1
        self.now = target
        return fired

    def advance_ms(self, ms: float) -> int:
        return self.advance(ms / 1000)

    def run_pending(self) -> int:
        """Fire every timer that is due now (the next scheduling tick)."""
        return self.advance(0)
