"""
In-process pattern-matching message bus

Producers publish plain mappings with pub(); consumers subscribe with a
partial-match pattern through sub() and receive every matching message on
their own Subscriber. Publishing is synchronous and never waits on consumers.
"""

import dataclasses
import logging
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from patternbus.utils.errors import ConfigurationError, InvalidPatternError, TransformError

from .interface import BusConfig, SubscriberOptions, TransformFailurePolicy
from .matcher import is_mapping, match
from .scheduler import AsyncioScheduler, Scheduler
from .subscriber import Subscriber

log = logging.getLogger(__name__)


class Bus:
    """
    Registry of subscribers with pattern-based fan-out

    Every registered subscriber whose pattern matches a published message gets
    its own copy of the delivery; there is no load balancing between
    subscribers.
    """

    match = staticmethod(match)
    Subscriber = Subscriber

    def __init__(
        self,
        config: Optional[BusConfig] = None,
        scheduler: Optional[Scheduler] = None,
        onsub: Optional[Callable[[Subscriber], None]] = None,
    ):
        self.config = config or BusConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.onsub = onsub

        # Insertion ordered registry, dict used as an ordered set
        self._subscribers: Dict[Subscriber, None] = {}
        self._lock = threading.Lock()
        self.start_time = time.time()

        self.stats = {
            "messages_published": 0,
            "messages_delivered": 0,
            "transform_failures": 0,
            "subscriptions_created": 0,
            "subscriptions_destroyed": 0,
        }

        log.debug("[Bus] Initialized with config: %s", self.config.to_dict())

    @property
    def subscribers(self) -> Tuple[Subscriber, ...]:
        """Snapshot of the registered subscribers"""
        with self._lock:
            return tuple(self._subscribers)

    def __len__(self) -> int:
        return len(self._subscribers)

    def pub(self, message: Any) -> None:
        """
        Publish a message to every matching subscriber

        Iterates a snapshot of the registry, so subscribing or destroying from
        inside a delivery does not affect this publish.
        """
        snapshot = self.subscribers
        delivered = 0
        failures = 0

        try:
            for subscriber in snapshot:
                try:
                    if subscriber.push_on_match(message):
                        delivered += 1
                except TransformError as e:
                    failures += 1
                    if self.config.transform_failures is TransformFailurePolicy.ABORT:
                        log.error("[Bus] Transform failed for %s, aborting fan-out: %s", subscriber.id, e.cause)
                        raise
                    log.error("[Bus] Transform failed for %s, skipping it: %s", subscriber.id, e.cause)
        finally:
            with self._lock:
                self.stats["messages_published"] += 1
                self.stats["messages_delivered"] += delivered
                self.stats["transform_failures"] += failures

        log.debug("[Bus] Published to %d of %d subscribers", delivered, len(snapshot))

    def sub(
        self,
        pattern: Any,
        options: Optional[Union[SubscriberOptions, Mapping[str, Any]]] = None,
        **opts: Any,
    ) -> Subscriber:
        """
        Subscribe to messages matching a pattern

        Args:
            pattern: Mapping every delivered message must satisfy; {} matches all
            options: Subscriber options, as a record or a plain mapping
            **opts: Option overrides (max, retain, map, relays, fallback_cutover_ms)

        Returns:
            The registered subscriber

        Raises:
            InvalidPatternError: pattern is not a mapping
            ConfigurationError: options are invalid
        """
        if not is_mapping(pattern):
            raise InvalidPatternError(pattern)

        defaults = {
            "max": self.config.default_max,
            "fallback_cutover_ms": self.config.fallback_cutover_ms,
        }

        if options is None:
            options = SubscriberOptions(**{**defaults, **opts})
        elif isinstance(options, SubscriberOptions):
            if opts:
                options = dataclasses.replace(options, **opts)
        elif is_mapping(options):
            options = SubscriberOptions(**{**defaults, **options, **opts})
        else:
            raise ConfigurationError(
                f"options must be a SubscriberOptions or a mapping, got {type(options).__name__}"
            )

        subscriber = Subscriber(self, pattern, options, self.scheduler)

        with self._lock:
            self._subscribers[subscriber] = None
            self.stats["subscriptions_created"] += 1

        log.debug("[Bus] Subscribed %s to pattern %r. Total subscribers: %d",
                  subscriber.id, pattern, len(self._subscribers))

        if self.onsub is not None:
            self.onsub(subscriber)

        return subscriber

    def _deregister(self, subscriber: Subscriber) -> bool:
        with self._lock:
            if subscriber not in self._subscribers:
                return False
            del self._subscribers[subscriber]
            self.stats["subscriptions_destroyed"] += 1

        log.debug("[Bus] Deregistered %s. Total subscribers: %d", subscriber.id, len(self._subscribers))
        return True

    def destroy(self) -> None:
        """Destroy every registered subscriber; safe to call repeatedly"""
        snapshot = self.subscribers
        for subscriber in snapshot:
            subscriber.destroy()

        if snapshot:
            log.info("[Bus] Destroyed %d subscribers", len(snapshot))

    def get_stats(self) -> Dict[str, Any]:
        """Get bus statistics"""
        uptime = time.time() - self.start_time
        with self._lock:
            counters = dict(self.stats)

        return {
            "uptime_seconds": uptime,
            **counters,
            "active_subscribers": len(self._subscribers),
            "pending_messages": sum(subscriber.pending for subscriber in self.subscribers),
        }
