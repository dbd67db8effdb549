"""Behaviour shared by predicate and collection nodes."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from specx.observable import Disposer
from specx.util import equals

logger = logging.getLogger("specx.node")

_MISSING = object()


def value_changed(a, b) -> bool:
    return not equals(a, b)


class Node:
    """A validator node: a store of NodeState plus the operations that drive it."""

    id: Any = None
    is_required: bool = False
    spec: Any = None

    _parent: Node | None = None
    _on_submit: Callable | None = None
    _state: Any

    def subscribe(self, run: Callable, invalidate: Callable | None = None) -> Disposer:
        return self._state.subscribe(run, invalidate)

    def get(self):
        """Current published state."""
        return self._state.get()

    def _snapshot(self):
        """Last published state, without starting the node."""
        return self._state._value

    @property
    def parent(self) -> Node | None:
        return self._parent

    def ancestor(self, hops: int) -> Node | None:
        """Walk ``hops`` collection ancestors up. Zero hops is the node itself."""
        node: Node | None = self
        for _ in range(hops):
            if node is None:
                return None
            node = node._parent
        return node

    def activate(self, active: bool = True):
        raise NotImplementedError

    def _set_active(self, active: bool) -> None:
        raise NotImplementedError

    def _is_live(self) -> bool:
        raise NotImplementedError

    def _validity(self):
        raise NotImplementedError

    def _set_submitting(self, submitting: bool) -> None:
        raise NotImplementedError

    async def submit(self):
        """Validate, then hand the current value to the submit handler if valid.

        Returns None without a handler, False when invalid, True once the
        handler completed. ``submitting`` is published as True only while
        this runs. Errors from the handler propagate.
        """
        if self._on_submit is None:
            return None
        self._set_submitting(True)
        try:
            if not await self.activate():
                return False
            outcome = self._on_submit(self.value, self)
            if inspect.isawaitable(outcome):
                await outcome
            return True
        except Exception:
            logger.exception("Submit failed for node %r", self.id)
            raise
        finally:
            self._set_submitting(False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
