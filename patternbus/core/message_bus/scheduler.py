"""
One-shot timer scheduling

Subscribers only need "run this callback after a delay" and "cancel it". The
Scheduler interface keeps them independent of any particular clock so tests
can drive timers by hand.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

log = logging.getLogger(__name__)


class TimerHandle(ABC):
    """Handle for a pending one-shot callback"""

    @abstractmethod
    def cancel(self) -> None:
        pass


class Scheduler(ABC):
    """Abstract schedule/cancel primitive"""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """
        Schedule a one-shot callback

        Args:
            delay: Seconds to wait before calling back
            callback: Function to call
            *args: Positional arguments for the callback

        Returns:
            Handle whose cancel() prevents the callback from running
        """
        pass


class _ThreadTimerHandle(TimerHandle):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class _LoopTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """
    Schedules on the event loop running in the calling thread

    Falls back to a daemon thread timer when called outside of a running loop,
    so subscribers created from synchronous code still get their cutovers.
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            return _LoopTimerHandle(loop.call_later(delay, callback, *args))

        log.debug("[AsyncioScheduler] No running loop, scheduling %.3fs timer on a thread", delay)
        timer = threading.Timer(delay, callback, args)
        timer.daemon = True
        timer.start()
        return _ThreadTimerHandle(timer)
