"""Predicate nodes — live validation of a single, non-collection value.

A node re-validates whenever its value, its active flag, or one of the
values its predicate read through ``get_from`` changes, and publishes a
NodeState pairing the value with the result of validating exactly that
value.

Asynchronous predicates publish a ``validating`` state right away. When the
answer arrives it is published only if no newer evaluation has started in
the meantime; answers for superseded values are dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from specx._queue import batch
from specx.aggregate import DynamicAggregate, derived
from specx.config import ensure_configured
from specx.keyed import CollectionAggregate
from specx.node import _MISSING, Node, value_changed
from specx.observable import Observable, Writable
from specx.result import VALID, ValidationResult, Validity, enhance
from specx.state import NodeState
from specx.util import count_path_ancestors, equals, get_path, keep_forward_path

logger = logging.getLogger("specx.predicate")


def _always_true(value) -> bool:
    return True


def is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class PredicateNode(Node):
    """Validates one value against one predicate.

    Usage:
        age = PredicateNode(12, spec=lambda v: v >= 18 or "too young")
        age.subscribe(print)
        await age.activate()   # False; the state's error is "too young"
        age.set(21)            # re-validates, now valid
    """

    def __init__(
        self,
        initial_value: Any = None,
        *,
        change_pred: Callable[[Any, Any], bool] | None = None,
        id: Any = None,
        required: Any = False,
        spec: Any = None,
        on_submit: Callable | None = None,
        _parent: Node | None = None,
    ) -> None:
        self._adapter = ensure_configured()
        self.id = id
        self._parent = _parent
        self.spec = self._adapter.get_pred(spec) or _always_true
        self.is_required = bool(required)
        self._own_pred = (
            self._adapter.and_(self._check_required, self.spec) if self.is_required else self.spec
        )
        self._change_pred = change_pred or value_changed
        self._on_submit = on_submit

        # get_from() subscriptions, one per distinct relative path.
        self._context_stores: dict[str, DynamicAggregate] = {}
        self._context_values: dict[str, Any] = {}
        self._context = CollectionAggregate({})

        self._active = Writable(False)
        self._submitting = Writable(False)
        self._initial = Observable(initial_value)
        self._value = Observable(initial_value)
        self._current_promise = None

        self._state = DynamicAggregate(
            [self._active, self._value, self._initial, self._context, self._submitting],
            self._evaluate,
            self._interpret(VALID, False, initial_value, initial_value, False),
        )

    @property
    def initial_value(self):
        return self._initial.get()

    def _check_required(self, value):
        return not is_missing(value) or self._adapter.get_message("is_required")

    # --- Evaluation ---

    def _evaluate(self, values: list, publish: Callable) -> None:
        active, value, initial, context, submitting = values

        def get_from(rel_path: str):
            if rel_path not in self._context_stores:
                return self._add_context(rel_path, value)
            return context.get(rel_path)

        if active and (value is not None or self.is_required):
            result = enhance(self._adapter.validate_pred(self._own_pred, value, get_from))
        else:
            # Inactive, or an optional field left unset: never invalid.
            result = VALID

        self._current_promise = result.promise if result.is_pending else result
        publish(self._interpret(result, active, value, initial, submitting))

        if result.is_pending:
            promise = result.promise

            def settled(task) -> None:
                if task is not self._current_promise:
                    logger.debug("Dropping superseded async result for node %r", self.id)
                    return
                if task.cancelled():
                    return
                error = task.exception()
                if error is not None:
                    logger.warning("Async predicate failed for node %r: %r", self.id, error)
                    return
                publish(self._interpret(task.result(), active, value, initial, submitting))

            promise.add_done_callback(settled)

    def _interpret(self, result: ValidationResult, active, value, initial, submitting) -> NodeState:
        changed = bool(self._change_pred(value, initial))
        return NodeState(
            value=value if changed else initial,
            initial_value=initial,
            active=active,
            changed=changed,
            valid=result.valid is True,
            validating=result.is_pending,
            error=result.reason if result.valid is False else None,
            id=self.id,
            promise=result.promise if result.is_pending else result,
            submitting=submitting,
        )

    def _add_context(self, rel_path: str, own_value):
        """Resolve rel_path and keep following it from now on.

        The new subscription only delivers on the next evaluation, so this
        first answer is read from the ancestor's current state.
        """
        hops = count_path_ancestors(rel_path)
        forward = keep_forward_path(rel_path)
        if hops == 0:
            return get_path(forward, own_value)

        ancestor = self.ancestor(hops)
        if ancestor is None:
            return None

        def follow(state, publish) -> None:
            if state is None:
                return
            target = get_path(forward, state.value)
            if rel_path in self._context_values and equals(self._context_values[rel_path], target):
                return
            self._context_values[rel_path] = target
            publish(target)

        self._context_stores[rel_path] = derived(ancestor, follow)
        self._context.set(self._context_stores)

        snapshot = ancestor.get()
        return get_path(forward, snapshot.value) if snapshot is not None else None

    # --- Operations ---

    def set(self, value, should_activate: bool = False) -> None:
        self._value.set(value)
        if should_activate:
            self._active.set(True)

    def _set_active(self, active: bool) -> None:
        self._active.set(active)

    def _is_live(self) -> bool:
        """Active flag as set, even while its notification is still queued."""
        return self._active._value is True

    def _validity(self) -> Validity:
        return Validity(self.get().promise)

    def activate(self, active: bool = True) -> Validity:
        """Switch live validation on (or off).

        Returns an awaitable resolving to the node's validity once any
        asynchronous predicate settled.
        """
        self._active.set(active)
        return self._validity()

    def reset(self, new_initial_value=_MISSING) -> None:
        """Take a new baseline, deactivate, and go back to the baseline value."""
        with batch():
            if new_initial_value is not _MISSING:
                self._initial.set(new_initial_value)
            self._active.set(False)
            self._value.set(self._initial.get())

    @property
    def value(self):
        """Current value, whether or not it differs from the baseline."""
        return self._value.get()

    def _set_submitting(self, submitting: bool) -> None:
        self._submitting.set(submitting)
