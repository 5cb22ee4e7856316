"""Trailing debounce keyed by field name."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def thread_timer(interval: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class Debouncer:
    """
    One trailing timer per key.

    Calling ``call`` again for a key restarts only that key's timer, so a
    burst of input coalesces to the last value while timers for other keys
    keep running. Timer threads and callers share the key table under a
    lock; handlers always run outside it.

    Usage:
        debouncer = Debouncer()
        debouncer.call("search", 700, apply, "widgets")
    """

    def __init__(self, timer_factory: Optional[TimerFactory] = None):
        self._timer_factory = timer_factory or thread_timer
        self._timers: dict[str, Timer] = {}
        self._pending: dict[str, Callable[[], None]] = {}
        self._lock = threading.Lock()

    def call(self, key: str, delay_ms: int, handler: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        def fire() -> None:
            handler(*args, **kwargs)

        if delay_ms <= 0:
            self.cancel(key)
            fire()
            return

        def elapsed() -> None:
            with self._lock:
                if self._timers.get(key) is not timer:
                    return
                del self._timers[key]
                self._pending.pop(key, None)
            fire()

        timer = self._timer_factory(delay_ms / 1000.0, elapsed)
        with self._lock:
            previous = self._timers.get(key)
            self._timers[key] = timer
            self._pending[key] = fire
        if previous is not None:
            previous.cancel()
        logger.debug("Debouncing '%s' for %sms", key, delay_ms)
        timer.start()

    def cancel(self, key: str) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
            self._pending.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            keys = list(self._timers)
        for key in keys:
            self.cancel(key)

    def flush(self, key: Optional[str] = None) -> None:
        """Fire pending handlers immediately."""
        with self._lock:
            keys = [key] if key is not None else list(self._pending)
            due = []
            for name in keys:
                fire = self._pending.pop(name, None)
                if fire is None:
                    continue
                due.append((self._timers.pop(name), fire))
        for timer, fire in due:
            timer.cancel()
            fire()

    def pending(self, key: Optional[str] = None) -> bool:
        if key is None:
            return bool(self._timers)
        return key in self._timers
