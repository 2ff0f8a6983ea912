"""
Consumer-driven delivery channel

The producer side (put) never suspends. Only the consumer side (get) waits,
and only while the channel is empty. Competing consumers on the same channel
share items: each item is handed to exactly one of them.
"""

import asyncio
import logging
import threading
from collections import deque
from typing import Any, Deque

log = logging.getLogger(__name__)


class ChannelEmpty(Exception):
    """No item is queued right now"""


class ChannelClosed(Exception):
    """The channel has ended and every queued item has been consumed"""


_END = object()


def _running_loop():
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class DeliveryChannel:
    """Unbounded FIFO queue with suspending pulls and an end-of-stream marker"""

    def __init__(self):
        self._items: Deque[Any] = deque()
        self._waiters: Deque[asyncio.Future] = deque()
        self._ended = False
        self._lock = threading.Lock()

    @property
    def ended(self) -> bool:
        """True once end() or close() was called"""
        return self._ended

    @property
    def closed(self) -> bool:
        """True once the channel has ended and is drained"""
        return self._ended and not self._items

    def __len__(self) -> int:
        return len(self._items)

    def put(self, item: Any) -> bool:
        """
        Queue an item without suspending

        Returns:
            False if the channel has ended and the item was dropped
        """
        with self._lock:
            if self._ended:
                return False
            while self._waiters:
                waiter = self._waiters.popleft()
                if waiter.done():
                    continue
                self._resolve(waiter, item)
                return True
            self._items.append(item)
            return True

    def get_nowait(self) -> Any:
        with self._lock:
            if self._items:
                return self._items.popleft()
            if self._ended:
                raise ChannelClosed()
            raise ChannelEmpty()

    async def get(self) -> Any:
        """
        Take the next item, waiting while the channel is empty

        Raises:
            ChannelClosed: the channel ended and has no more items
        """
        with self._lock:
            if self._items:
                return self._items.popleft()
            if self._ended:
                raise ChannelClosed()
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)

        try:
            item = await waiter
        except asyncio.CancelledError:
            with self._lock:
                if waiter.done() and not waiter.cancelled():
                    handed = waiter.result()
                    if handed is not _END:
                        self._items.appendleft(handed)
                else:
                    try:
                        self._waiters.remove(waiter)
                    except ValueError:
                        pass
            raise

        if item is _END:
            raise ChannelClosed()
        return item

    def end(self) -> None:
        """Mark end-of-stream; queued items are still delivered first"""
        with self._lock:
            if self._ended:
                return
            self._ended = True
            if not self._items:
                self._release_waiters()

    def close(self) -> int:
        """
        Mark end-of-stream and discard queued items

        Returns:
            Number of discarded items
        """
        with self._lock:
            discarded = len(self._items)
            self._items.clear()
            self._ended = True
            self._release_waiters()
        if discarded:
            log.debug("[DeliveryChannel] Closed with %d undelivered items", discarded)
        return discarded

    def _release_waiters(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                self._resolve(waiter, _END)

    def _resolve(self, waiter: asyncio.Future, item: Any) -> None:
        loop = waiter.get_loop()
        if _running_loop() is loop:
            waiter.set_result(item)
        else:
            loop.call_soon_threadsafe(self._resolve_later, waiter, item)

    def _resolve_later(self, waiter: asyncio.Future, item: Any) -> None:
        if not waiter.done():
            waiter.set_result(item)
        elif item is not _END:
            # the puller went away before the hand-off landed
            with self._lock:
                self._items.appendleft(item)
