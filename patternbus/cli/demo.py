"""
Publish/subscribe walkthrough used by the patternbus command.

Two subscribers share one nested pattern in turn: the first consumes two
matching messages and is destroyed, then the second picks up the next one.
A message that does not match the pattern is published in between.
"""

import asyncio
import datetime
import logging
from typing import Callable, Optional

from patternbus.core.message_bus import Bus, Subscriber

log = logging.getLogger(__name__)

PATTERN = {"match": "this", "and": {"also": "this"}}


async def _log_messages(subscriber: Subscriber, out: Callable[[str], None]) -> None:
    async for message in subscriber:
        out(f"BUS MSG {datetime.datetime.now().isoformat()} - {message}")


def _schedule_publishes(bus: Bus) -> None:
    loop = asyncio.get_running_loop()

    def first():
        bus.pub({"match": "this", "and": {"also": "this"}, "content": "Hello, world!"})
        loop.call_soon(second)

    def second():
        bus.pub({"something": "else", "whatever": "that might be"})
        bus.pub({"match": "this", "and": {"also": "this"}, "content": "more content"})
        loop.call_soon(third)

    def third():
        bus.pub({"match": "this", "and": {"also": "this"}, "content": "even more content"})

    loop.call_soon(first)


async def run_demo(log_messages: bool = False, out: Optional[Callable[[str], None]] = None) -> int:
    """
    Run the walkthrough

    Args:
        log_messages: Also print every bus message through a catch-all subscriber
        out: Line sink, print by default

    Returns:
        Number of messages the two pattern subscribers received
    """
    out = out or print
    bus = Bus()
    count = 0

    logger_task = None
    if log_messages:
        logger_task = asyncio.create_task(_log_messages(bus.sub({}), out))

    _schedule_publishes(bus)

    async with bus.sub(PATTERN) as subscriber:
        async for message in subscriber:
            out(f"1st subscriber got {message}")
            count += 1
            if count == 2:
                break

    async with bus.sub(PATTERN) as subscriber:
        async for message in subscriber:
            out(f"2nd subscriber got {message}")
            count += 1
            if count == 3:
                break

    out("done")

    bus.destroy()
    if logger_task is not None:
        await logger_task

    log.debug("Demo finished, stats: %s", bus.get_stats())
    return count
