"""Dynamic aggregates — one value combined from a changeable list of stores.

Unlike a fixed derivation, the list of source stores can be replaced at
any time (``set``/``update``/``include``/``exclude``) while subscribers stay
subscribed. Subscriptions to sources that remain in the list are kept, along
with their last value; dropped sources are unsubscribed, new ones subscribed.

The combine function receives source values in list order. With one
parameter its return value is published. With two it also receives a
``publish`` callback and may return a cleanup function, called before the
next computation and when the aggregate stops.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from specx.observable import Disposer, Readable
from specx.util import arity, identity, noop

logger = logging.getLogger("specx.aggregate")


class DynamicAggregate(Readable):
    """Publishes fn(values) for an ordered, replaceable list of source stores."""

    def __init__(self, sources: Iterable = (), fn: Callable = identity, initial: Any = None) -> None:
        super().__init__(initial, self._start_sources)
        self._sources: list = list(sources)
        self._fn = fn
        self._auto = arity(fn) < 2

        self._publish: Callable = self._set
        self._started = False
        self._unsubs: dict[int, Disposer] = {}
        self._values: dict[int, Any] = {}
        self._pending: set[int] = set()
        self._cleanup: Callable[[], None] = noop
        self._syncing = False
        self._resync = False
        self._wiring = False

    @property
    def sources(self) -> list:
        return list(self._sources)

    # --- Source list ---

    def set(self, sources: Iterable) -> None:
        """Replace the tracked sources. Recomputes once if live."""
        self._sources = list(sources)
        if self._started:
            self._wire()
            self._sync()

    def update(self, fn: Callable[[list], Iterable]) -> None:
        self.set(fn(list(self._sources)))

    def include(self, *sources) -> None:
        self.set([*self._sources, *sources])

    def exclude(self, *sources) -> None:
        self.set([s for s in self._sources if not any(s is x for x in sources)])

    # --- Lifecycle ---

    def _start_sources(self, publish: Callable) -> Disposer:
        self._publish = publish
        self._unsubs = {}
        self._values = {}
        self._pending = set()
        self._wire()
        self._started = True
        self._sync()
        return self._stop_sources

    def _stop_sources(self) -> None:
        for unsub in self._unsubs.values():
            unsub()
        self._unsubs.clear()
        self._values.clear()
        self._pending.clear()
        self._started = False
        cleanup, self._cleanup = self._cleanup, noop
        cleanup()

    def _wire(self) -> None:
        """Diff subscriptions against the current source list."""
        wanted = {id(source): source for source in self._sources}
        dropped = [key for key in self._unsubs if key not in wanted]
        for key in dropped:
            self._unsubs.pop(key)()
            self._values.pop(key, None)
            self._pending.discard(key)
        if dropped:
            logger.debug("Dropped %d source(s), tracking %d", len(dropped), len(wanted))

        self._wiring = True
        try:
            for key, source in wanted.items():
                if key not in self._unsubs:
                    self._unsubs[key] = source.subscribe(
                        self._on_value(key), self._on_invalidate(key)
                    )
        finally:
            self._wiring = False

    def _on_value(self, key: int) -> Callable:
        def run(value) -> None:
            self._values[key] = value
            self._pending.discard(key)
            if self._started and not self._wiring:
                self._sync()

        return run

    def _on_invalidate(self, key: int) -> Callable:
        def invalidate() -> None:
            self._pending.add(key)

        return invalidate

    # --- Computation ---

    def _sync(self) -> None:
        """Recompute and publish, unless a source is about to deliver a new value."""
        if self._pending:
            return
        if self._syncing:
            self._resync = True
            return
        self._syncing = True
        try:
            while True:
                self._resync = False
                self._compute()
                if not self._resync or self._pending or not self._started:
                    break
        finally:
            self._syncing = False

    def _compute(self) -> None:
        cleanup, self._cleanup = self._cleanup, noop
        cleanup()
        values = [self._values[id(s)] for s in self._sources if id(s) in self._values]
        if self._auto:
            self._publish(self._fn(values))
        else:
            result = self._fn(values, self._publish)
            self._cleanup = result if callable(result) else noop


def derived(stores, fn: Callable = identity, initial: Any = None) -> DynamicAggregate:
    """Combine a fixed set of stores.

    A single store (anything with ``subscribe``, rather than a list) passes
    its value unwrapped.

    Usage:
        first = Writable("Ada")
        last = Writable("Lovelace")
        full = derived([first, last], lambda names: " ".join(names))
    """
    if hasattr(stores, "subscribe"):
        if arity(fn) < 2:
            return DynamicAggregate([stores], lambda values: fn(values[0]), initial)
        return DynamicAggregate([stores], lambda values, publish: fn(values[0], publish), initial)
    return DynamicAggregate(stores, fn, initial)
