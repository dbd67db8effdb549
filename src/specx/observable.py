"""Stores — values that push changes to their subscribers.

A store hands its current value to every new subscriber right away, then
again on every accepted change. The first subscriber starts the store (a
derived store wires up its own sources at that point) and the last
disposer stops it, so an unobserved part of the graph costs nothing.

Subscribers may pass an ``invalidate`` callback next to ``run``: it fires
as soon as a change is announced, before the new value is delivered. The
aggregators use it to hold back recomputation until every input settled.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Callable, Generic, TypeVar

from specx import _queue
from specx.util import equals, noop

T = TypeVar("T")

Disposer = Callable[[], None]
Start = Callable[[Callable[[T], None]], "Disposer | None"]

_SCALARS = (str, bytes, int, float, complex, bool, type(None), Decimal, date, datetime, time, timedelta)


def safe_not_equal(a, b) -> bool:
    """Scalars compare by value; any other object always counts as a change."""
    if isinstance(a, _SCALARS) and isinstance(b, _SCALARS):
        return a != b
    return True


class Subscriber:
    __slots__ = ("run", "invalidate", "active")

    def __init__(self, run: Callable, invalidate: Callable) -> None:
        self.run = run
        self.invalidate = invalidate
        self.active = True


class Readable(Generic[T]):
    """A store whose value is produced by its own start function."""

    def __init__(self, value: T | None = None, start: Start | None = None) -> None:
        self._value = value
        self._start = start
        self._stop: Disposer | None = None
        self._subscribers: list[Subscriber] = []

    def _differs(self, old, new) -> bool:
        return safe_not_equal(old, new)

    def _set(self, value: T) -> None:
        if not self._differs(self._value, value):
            return
        self._value = value
        if self._stop is None:
            # Not started: nobody to tell.
            return
        subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber.invalidate()
        for subscriber in subscribers:
            _queue.enqueue(subscriber, value)
        _queue.flush()

    def subscribe(self, run: Callable[[T], None], invalidate: Callable[[], None] | None = None) -> Disposer:
        """Register run. It is called right away with the current value.

        Returns a function that removes it.
        """
        subscriber = Subscriber(run, invalidate or noop)
        self._subscribers.append(subscriber)
        if len(self._subscribers) == 1:
            self._stop = (self._start(self._set) if self._start else None) or noop
        run(self._value)

        def _unsubscribe() -> None:
            if not subscriber.active:
                return
            subscriber.active = False
            self._subscribers.remove(subscriber)
            if not self._subscribers and self._stop is not None:
                stop, self._stop = self._stop, None
                stop()

        return _unsubscribe

    def get(self) -> T:
        """Read the current value, starting the store briefly if nothing observes it."""
        if self._stop is not None:
            return self._value
        captured = []
        self.subscribe(captured.append)()
        return captured[0]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Writable(Readable[T]):
    """A store that can be set from the outside."""

    def set(self, value: T) -> None:
        self._set(value)

    def update(self, fn: Callable[[T], T]) -> None:
        self._set(fn(self._value))


class Observable(Writable[T]):
    """A writable that ignores values deep-equal to the one it holds.

    Setting a value that round-trips back unchanged (e.g. a composed
    collection value re-derived from its own children) notifies nobody.
    """

    def _differs(self, old, new) -> bool:
        return not equals(old, new)
