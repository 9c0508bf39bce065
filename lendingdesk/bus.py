"""An in-process publish/subscribe bus with synchronous and threaded handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(eq=False)
class _Handler:
    callback: Callable[[Any], Any]
    reference: int
    is_async: bool
    transactional: bool
    once: bool
    lock: threading.Lock = field(default_factory=threading.Lock)


class EventBus:
    """Routes published events to the handlers subscribed to their topic."""

    def __init__(self):
        self._handlers: dict[str, dict[int, _Handler]] = {}
        self._last_ref = 0
        self._lock = threading.RLock()
        self._pending = 0
        self._idle = threading.Condition()

    def has_callback(self, topic):
        """Whether any handler is subscribed to *topic*."""
        with self._lock:
            return bool(self._handlers.get(topic))

    def subscribe(self, topic, fn):
        return self._subscribe(topic, fn, is_async=False, transactional=False, once=False)

    def subscribe_once(self, topic, fn):
        return self._subscribe(topic, fn, is_async=False, transactional=False, once=True)

    def subscribe_async(self, topic, fn, transactional=False):
        """Run *fn* on its own thread; transactional handlers run one at a time."""
        return self._subscribe(
            topic, fn, is_async=True, transactional=transactional, once=False
        )

    def subscribe_once_async(self, topic, fn):
        return self._subscribe(topic, fn, is_async=True, transactional=False, once=True)

    def unsubscribe(self, topic, ref):
        with self._lock:
            listeners = self._handlers.get(topic)
            if listeners is not None:
                listeners.pop(ref, None)

    def publish(self, topic, arg):
        """Deliver *arg* to every handler of *topic*."""
        with self._lock:
            listeners = self._handlers.get(topic)
            if not listeners:
                return
            fire = list(listeners.values())
            for handler in fire:
                if handler.once:
                    listeners.pop(handler.reference, None)
        for handler in fire:
            self._call(handler, arg)

    def wait_async(self):
        """Block until every running asynchronous handler has finished."""
        with self._idle:
            self._idle.wait_for(lambda: self._pending == 0)

    def _subscribe(self, topic, fn, *, is_async, transactional, once):
        with self._lock:
            self._last_ref += 1
            ref = self._last_ref
            self._handlers.setdefault(topic, {})[ref] = _Handler(
                callback=fn,
                reference=ref,
                is_async=is_async,
                transactional=transactional,
                once=once,
            )
            return ref

    def _call(self, handler, arg):
        if not handler.is_async:
            handler.callback(arg)
            return
        with self._idle:
            self._pending += 1
        thread = threading.Thread(target=self._run, args=(handler, arg), daemon=True)
        thread.start()

    def _run(self, handler, arg):
        try:
            if handler.transactional:
                with handler.lock:
                    handler.callback(arg)
            else:
                handler.callback(arg)
        finally:
            with self._idle:
                self._pending -= 1
                self._idle.notify_all()