"""
Subscriber: a pattern-filtered message channel

A subscriber receives every published message that matches its pattern. It
is consumed either by pulling (async iteration) or by registering "data"
listeners, and it can optionally:

- retain a bounded history of recent messages (retain=True)
- relay everything it receives into downstream subscribers, replaying the
  retained history to each newly attached downstream first
- cut over: release the retained history and continue live-only, either on
  request or when the fallback timer fires
"""

import asyncio
import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from patternbus.events import EventEmitter
from patternbus.utils.errors import DuplicateRelayerError, TransformError

from .channel import ChannelClosed, ChannelEmpty, DeliveryChannel
from .interface import BufferingState, LifecycleState, SubscriberOptions
from .matcher import match
from .retention import RetentionBuffer
from .scheduler import Scheduler, TimerHandle

log = logging.getLogger(__name__)


class Subscriber:
    """
    Pattern-filtered, pull-consumable message channel

    Subscribers are created through Bus.sub(), which registers them. Delivery
    order within one subscriber is the publish order. Several pull loops on the
    same subscriber compete for its messages; distinct subscribers each get
    every matching message.

    Notifications (see on/once/off):
    - data(message): a message reached a data listener (flowing mode)
    - end(): the stream ended and every queued message was consumed
    - cutover(after_ms): the retention buffer was released
    - close(): destroy completed
    """

    def __init__(self, bus, pattern, options: SubscriberOptions, scheduler: Scheduler):
        self.bus = bus
        self.pattern = pattern
        self.options = options
        self.id = f"sub-{uuid.uuid4().hex[:8]}"

        self.transform: Optional[Callable[[Any], Any]] = options.map
        self.relaying = options.relays
        self.relayer: Optional["Subscriber"] = None

        self.state = LifecycleState.ACTIVE
        self.buffering = BufferingState.RETAINING if options.retain else BufferingState.NOT_RETAINING
        self.buffer: Optional[RetentionBuffer] = RetentionBuffer(options.max) if options.retain else None

        # downstream -> whether forwarded messages are re-filtered through its pattern
        self._downstreams: Dict["Subscriber", bool] = {}
        self._channel = DeliveryChannel()
        self._events = EventEmitter(name=f"Subscriber {self.id}")
        self._scheduler = scheduler
        self._timer: Optional[TimerHandle] = None
        self._timer_seq = 0
        self._lock = threading.RLock()
        self._dispatching = False
        self._end_emitted = False

        if options.retain:
            self._arm_cutover(options.fallback_cutover_ms)
            log.debug("[Subscriber] %s retaining up to %d messages, fallback cutover in %dms",
                      self.id, options.max, options.fallback_cutover_ms)

    def __repr__(self) -> str:
        return (f"Subscriber(id={self.id!r}, pattern={self.pattern!r}, state={self.state.value}, "
                f"buffering={self.buffering.value}, pending={self.pending})")

    @property
    def pending(self) -> int:
        """Number of queued messages waiting to be consumed"""
        return len(self._channel)

    @property
    def downstreams(self) -> List["Subscriber"]:
        with self._lock:
            return list(self._downstreams)

    @property
    def destroyed(self) -> bool:
        return self.state is LifecycleState.DESTROYED

    # Notifications

    def on(self, event: str, listener: Callable[..., Any]) -> "Subscriber":
        """Register a listener; a "data" listener switches to flowing mode"""
        self._events.on(event, listener)
        if event == "data":
            self._dispatch()
        return self

    def once(self, event: str, listener: Callable[..., Any]) -> "Subscriber":
        self._events.once(event, listener)
        if event == "data":
            self._dispatch()
        return self

    def off(self, event: str, listener: Callable[..., Any]) -> "Subscriber":
        self._events.off(event, listener)
        return self

    # Delivery

    def push_on_match(self, message: Any) -> bool:
        """Push the message if it matches this subscriber's pattern"""
        if not match(message, self.pattern):
            return False
        return self.push(message)

    def push(self, message: Any) -> bool:
        """
        Deliver a message to this subscriber

        The message is transformed (if a map function is set), retained (while
        retaining), forwarded to downstream relays and queued for consumption.
        Never blocks.

        Returns:
            False if the subscriber is no longer active and the message was dropped

        Raises:
            TransformError: the map function raised
        """
        if self.state is not LifecycleState.ACTIVE:
            log.debug("[Subscriber] %s is %s, dropping message", self.id, self.state.value)
            return False

        if self.transform is not None:
            try:
                message = self.transform(message)
            except Exception as e:
                raise TransformError(self.id, e) from e

        # Only queue under the lock; listeners run after it is released
        forwarded = []
        with self._lock:
            if self.buffering is BufferingState.RETAINING:
                self.buffer.append(message)

            if self.relaying:
                for downstream, refilter in self._downstreams.items():
                    if self._forward(downstream, message, refilter):
                        forwarded.append(downstream)

            delivered = self._enqueue(message)

        for downstream in forwarded:
            downstream._dispatch()
        if delivered:
            self._dispatch()
        return delivered

    def _forward(self, downstream: "Subscriber", message: Any, refilter: bool) -> bool:
        if refilter and not match(message, downstream.pattern):
            return False
        return downstream._enqueue(message)

    def _enqueue(self, message: Any) -> bool:
        if self.state is not LifecycleState.ACTIVE:
            return False
        if not self._channel.put(message):
            log.debug("[Subscriber] %s has ended, dropping message", self.id)
            return False
        return True

    def _dispatch(self) -> None:
        """Flush queued messages to data listeners, if there are any"""
        while self._events.listener_count("data"):
            with self._lock:
                if self._dispatching:
                    # The running dispatch loop picks the message up
                    return
                self._dispatching = True
            try:
                while self._events.listener_count("data"):
                    try:
                        message = self._channel.get_nowait()
                    except ChannelEmpty:
                        break
                    except ChannelClosed:
                        self._emit_end()
                        break
                    self._events.emit("data", message)
            finally:
                with self._lock:
                    self._dispatching = False
            if not len(self._channel):
                return

    def _emit_end(self) -> None:
        with self._lock:
            if self._end_emitted or self.state is not LifecycleState.ACTIVE:
                return
            self._end_emitted = True
        self._events.emit("end")

    # Consumption

    def __aiter__(self) -> "Subscriber":
        return self

    async def __anext__(self) -> Any:
        try:
            return await self._channel.get()
        except ChannelClosed:
            self._emit_end()
            raise StopAsyncIteration

    def drain(self) -> List[Any]:
        """Take every queued message without waiting"""
        messages = []
        while True:
            try:
                messages.append(self._channel.get_nowait())
            except (ChannelEmpty, ChannelClosed):
                break
        return messages

    def end(self) -> None:
        """End the stream; consumers stop once the queued messages are consumed"""
        if self.state is not LifecycleState.ACTIVE:
            return
        self._channel.end()
        log.debug("[Subscriber] %s ended with %d pending messages", self.id, self.pending)
        self._dispatch()

    # Relaying

    def relay(self, downstream: "Subscriber", *, refilter: bool = False) -> "Subscriber":
        """
        Continuously replicate this subscriber's messages into another subscriber

        Retained messages are replayed into the downstream first, then live
        messages follow. The attachment is dropped when the downstream closes.

        Args:
            downstream: Subscriber to relay into
            refilter: Only forward messages matching the downstream's own pattern

        Returns:
            The downstream subscriber, for chaining

        Raises:
            DuplicateRelayerError: the downstream is relayed by another subscriber
        """
        if downstream is self:
            raise ValueError("A subscriber cannot relay into itself")

        if self.destroyed or downstream.destroyed:
            log.warning("[Subscriber] Ignoring relay %s -> %s, subscriber already destroyed",
                        self.id, downstream.id)
            return downstream

        with downstream._lock:
            if downstream.relayer is self:
                return downstream
            if downstream.relayer is not None:
                raise DuplicateRelayerError(downstream.id, downstream.relayer.id)
            downstream.relayer = self

        # Replay is queued under the lock so no live message can overtake it
        with self._lock:
            self._downstreams[downstream] = refilter
            replay = self.buffer.snapshot() if self.buffer else []
            for message in replay:
                self._forward(downstream, message, refilter)

        downstream._dispatch()
        downstream.once("close", lambda: self._detach(downstream))

        log.debug("[Subscriber] Relaying %s -> %s (replayed %d, refilter=%s)",
                  self.id, downstream.id, len(replay), refilter)
        return downstream

    def _detach(self, downstream: "Subscriber") -> None:
        with self._lock:
            self._downstreams.pop(downstream, None)
        log.debug("[Subscriber] Detached downstream %s from %s", downstream.id, self.id)

    # Cutover

    def cutover(self, after_ms: int = 0) -> None:
        """
        Release the retention buffer after a delay

        Re-arming replaces any pending cutover, including the fallback timer.
        A "cutover" notification carrying after_ms is emitted when it fires.
        """
        if isinstance(after_ms, bool) or not isinstance(after_ms, (int, float)) or after_ms < 0:
            raise ValueError(f"Cutover delay must be a non-negative number of milliseconds, got {after_ms!r}")

        with self._lock:
            if self.state is not LifecycleState.ACTIVE:
                log.debug("[Subscriber] %s is %s, ignoring cutover", self.id, self.state.value)
                return
            self._arm_cutover(after_ms)

        log.debug("[Subscriber] %s cutover armed for %sms", self.id, after_ms)

    def _arm_cutover(self, after_ms) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer_seq += 1
        self._timer = self._scheduler.call_later(after_ms / 1000, self._on_cutover, self._timer_seq, after_ms)

    def _on_cutover(self, seq: int, after_ms) -> None:
        with self._lock:
            if seq != self._timer_seq:
                return
            self._timer = None
            released = 0
            if self.buffer is not None:
                released = len(self.buffer)
                self.buffer.clear()
            self.buffering = BufferingState.CUT_OVER

        log.debug("[Subscriber] %s cut over after %sms, released %d retained messages",
                  self.id, after_ms, released)
        self._events.emit("cutover", after_ms)

    # Teardown

    def destroy(self) -> None:
        """
        Stop receiving messages and release all resources

        The subscriber leaves the bus at once. It is reported destroyed (the
        "close" notification) once the forced cutover has released its buffer.
        """
        with self._lock:
            if self.state is not LifecycleState.ACTIVE:
                return
            self.state = LifecycleState.DESTROYING

        self.bus._deregister(self)
        self._channel.close()
        self._events.once("cutover", self._finish_destroy)
        with self._lock:
            # armed directly; cutover() is ignored once destroying
            self._arm_cutover(0)

    def _finish_destroy(self, after_ms) -> None:
        with self._lock:
            self.state = LifecycleState.DESTROYED
            downstreams = list(self._downstreams)
            self._downstreams.clear()

        for downstream in downstreams:
            with downstream._lock:
                if downstream.relayer is self:
                    downstream.relayer = None

        log.debug("[Subscriber] %s destroyed", self.id)
        self._events.emit("close")

    async def wait_closed(self) -> None:
        """Wait until destroy has completed"""
        if self.destroyed:
            return

        loop = asyncio.get_running_loop()
        closed = loop.create_future()

        def _set_closed():
            if not closed.done():
                closed.set_result(None)

        def _on_close():
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                _set_closed()
            else:
                loop.call_soon_threadsafe(_set_closed)

        self.once("close", _on_close)
        if self.destroyed:
            self.off("close", _on_close)
            _set_closed()
        await closed

    def __enter__(self) -> "Subscriber":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    async def __aenter__(self) -> "Subscriber":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()
