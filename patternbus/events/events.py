import asyncio
import inspect
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

log = logging.getLogger(__name__)

Listener = Callable[..., Any]


class _Once:
    """Wraps a listener so it is removed before its first call"""

    def __init__(self, emitter: "EventEmitter", event: str, listener: Listener):
        self.emitter = emitter
        self.event = event
        self.listener = listener
        self.fired = False

    def __call__(self, *args: Any) -> Any:
        if self.fired:
            return None
        self.fired = True
        self.emitter.off(self.event, self)
        return self.listener(*args)


class EventEmitter:
    """Observer lists keyed by event name:

    - on: listener called for every emit
    - once: listener called for the next emit only
    - emit: synchronous, in registration order
    """

    def __init__(self, name: str = "EventEmitter") -> None:
        self.name = name
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener for every emit of event"""
        with self._lock:
            self._listeners[event].append(listener)
            count = len(self._listeners[event])
        log.debug("[%s] Registered listener for '%s'. Total listeners for this event: %d", self.name, event, count)

    def once(self, event: str, listener: Listener) -> None:
        """Register a listener for the next emit of event only"""
        self.on(event, _Once(self, event, listener))

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener registered with on() or once()"""
        with self._lock:
            listeners = self._listeners.get(event, [])
            for registered in listeners:
                if registered is listener or (isinstance(registered, _Once) and registered.listener is listener):
                    listeners.remove(registered)
                    break

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        with self._lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)

    def _execute_listener(self, listener: Listener, event: str, args: tuple) -> None:
        """Execute listener with error handling"""
        try:
            target = listener.listener if isinstance(listener, _Once) else listener
            if inspect.iscoroutinefunction(target):
                if isinstance(listener, _Once):
                    if listener.fired:
                        return
                    listener.fired = True
                    self.off(event, listener)
                asyncio.get_running_loop().create_task(target(*args))
            else:
                listener(*args)
        except Exception as e:
            log.exception("[%s] Listener failed for '%s': %s", self.name, event, e)

    def emit(self, event: str, *args: Any) -> int:
        """
        Call every listener of event

        Returns:
            Number of listeners called
        """
        with self._lock:
            listeners = list(self._listeners.get(event, []))

        for listener in listeners:
            self._execute_listener(listener, event, args)

        return len(listeners)
