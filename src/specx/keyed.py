"""Collection aggregates — a DynamicAggregate over a keyed collection of stores.

The sources are given as a list or a mapping of stores. The combine
function receives the latest values in that same shape, keyed the same way,
even after ``set`` swapped the collection for one with different keys.
"""

from __future__ import annotations

from typing import Any, Callable

from specx.aggregate import DynamicAggregate
from specx.observable import Disposer
from specx.util import arity, entries, from_entries, identity, type_of


class CollectionAggregate:
    """Publishes fn(values_by_key) for a list or mapping of stores."""

    def __init__(self, coll, fn: Callable = identity, initial: Any = None) -> None:
        self._fn = fn
        self._track(coll)
        if arity(fn) < 2:
            combine = lambda values: fn(self._rekey(values))
        else:
            combine = lambda values, publish: fn(self._rekey(values), publish)
        self._aggregate = DynamicAggregate(self._stores, combine, initial)

    def _track(self, coll) -> None:
        pairs = entries(coll)
        self._coll = coll
        self._kind = type_of(coll) or "dict"
        self._keys = [key for key, _ in pairs]
        self._stores = [store for _, store in pairs]

    def _rekey(self, values: list):
        return from_entries(zip(self._keys, values), self._kind)

    @property
    def coll(self):
        return self._coll

    def set(self, coll) -> None:
        """Swap the tracked collection; keys and stores change together."""
        self._track(coll)
        self._aggregate.set(self._stores)

    def subscribe(self, run: Callable, invalidate: Callable | None = None) -> Disposer:
        return self._aggregate.subscribe(run, invalidate)

    def get(self):
        return self._aggregate.get()

    def __repr__(self) -> str:
        return f"CollectionAggregate({self._keys!r})"
