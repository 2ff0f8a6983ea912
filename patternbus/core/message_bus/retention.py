"""
Retention buffer for replaying recent messages to late relays
"""

import logging
from collections import deque
from typing import Any, Iterator, List, Optional

from patternbus.utils.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_MAX = 32


class RetentionBuffer:
    """Bounded FIFO history, evicting the oldest entry once full"""

    def __init__(self, max: int = DEFAULT_MAX):
        if isinstance(max, bool) or not isinstance(max, int) or max < 1:
            raise ConfigurationError(f"Retention max must be a positive integer, got {max!r}")
        self._max = max
        self._items: deque = deque()

    @property
    def max(self) -> int:
        return self._max

    def append(self, item: Any) -> Optional[Any]:
        """
        Store an item

        Returns:
            The evicted oldest item if the buffer was full, otherwise None
        """
        self._items.append(item)
        if len(self._items) > self._max:
            evicted = self._items.popleft()
            log.debug("[RetentionBuffer] Full at %d entries, evicted oldest", self._max)
            return evicted
        return None

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> List[Any]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.snapshot())

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"RetentionBuffer(max={self._max}, size={len(self._items)})"
