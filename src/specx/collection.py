"""Collection nodes — validation of a list or mapping, one child node per key.

A collection node builds a child node for every relevant key (from its
value, spec, required-spec and fields), composes its own value from the
children's values, validates that composed value with its own
collection-level predicate, and folds its own state and its children's into
one CollectionState carrying every error of the subtree.

Children are identified by ``id``, not by position: list children get a
random id unless ``get_id`` derives one from the item, mapping children use
their key. ``remove`` works on ids, so reordering or inserting never points
a removal at the wrong item.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Iterable

from specx._queue import batch
from specx.aggregate import DynamicAggregate
from specx.config import ensure_configured
from specx.errors import OWN_KEY, details_to_errors
from specx.keyed import CollectionAggregate
from specx.node import _MISSING, Node
from specx.observable import Readable, Writable
from specx.predicate import PredicateNode
from specx.result import Validity
from specx.state import CollectionState, NodeState, Status, combine_status
from specx.util import (
    call_with_arity,
    entries,
    from_entries,
    gen_random_id,
    get,
    is_coll,
    keys,
    type_of,
    values,
)

logger = logging.getLogger("specx.collection")


class CollectionNode(Node):
    """Validates a collection by composing one node per key.

    Usage:
        form = CollectionNode(
            {"name": "", "age": 10},
            spec={"name": lambda v: bool(v) or "required",
                  "age": lambda v: v >= 18 or "too young"},
            required={"name": True},
        )
        form.subscribe(render)
        await form.activate()          # False
        form.get().errors              # one record for name, one for age
    """

    def __init__(
        self,
        initial_value: Any = None,
        *,
        change_pred: Callable[[Any, Any], bool] | None = None,
        fields: Any = None,
        get_id: Any = None,
        id: Any = None,
        required: Any = None,
        spec: Any = None,
        on_submit: Callable | None = None,
        _parent: Node | None = None,
    ) -> None:
        adapter = self._adapter = ensure_configured()
        self.id = id
        self.spec = spec
        self._parent = _parent
        self._fields = fields
        self._required = required
        self._get_id = get_id
        self._id_gen = get_id if callable(get_id) else None
        self._on_submit = on_submit
        self.is_required = bool(required) and not adapter.is_opt(required)

        spread_declared = any(adapter.get_spread(x) is not None for x in (spec, fields, required))
        # Without a declared field list the key set follows the value.
        self._dynamic = spread_declared or not (is_coll(spec) or is_coll(fields))
        self._kind = (
            type_of(spec)
            or type_of(initial_value)
            or type_of(fields)
            or ("list" if spread_declared else "dict")
        )

        all_keys = dict.fromkeys(
            [*keys(initial_value), *keys(spec), *keys(required), *keys(fields)]
        )
        self._children = from_entries(
            [self._make_child(key, initial_value) for key in all_keys], self._kind
        )

        self._own = PredicateNode(
            self._compose_initial(self._children),
            change_pred=change_pred,
            id=id,
            required=self.is_required,
            spec=spec,
            _parent=_parent,
        )
        self._children_store = Writable(self._children)
        self._children_view = Readable(self._children, self._children_store.subscribe)
        self._value_agg = CollectionAggregate(self._children, self._compose)
        self._state = DynamicAggregate(
            self._status_sources(),
            self._summarize,
            self._summarize_states(
                self._own._snapshot(), [child._snapshot() for child in values(self._children)]
            ),
        )

    # --- Children ---

    def _make_child(self, key, coll, new_key=_MISSING) -> tuple[Any, Node]:
        from specx.factory import validator

        adapter = self._adapter
        sub_value = get(key, coll)
        if self._id_gen is not None:
            sub_id = call_with_arity(self._id_gen, sub_value, key)
        elif self._kind == "list":
            sub_id = gen_random_id()
        else:
            sub_id = key

        child = validator(
            sub_value,
            spec=get(key, self.spec) or adapter.get_spread(self.spec),
            id=sub_id,
            get_id=get(key, self._get_id) or adapter.get_spread(self._get_id),
            fields=get(key, self._fields) or adapter.get_spread(self._fields),
            required=get(key, self._required) or adapter.get_spread(self._required),
            _parent=self,
        )
        if child._parent is None:
            child._parent = self
        return (key if new_key is _MISSING else new_key), child

    def _status_sources(self) -> list:
        return [self._value_agg, self._own, *values(self._children)]

    def _set_children(self, children) -> None:
        with batch():
            self._children = children
            self._children_store.set(children)
            self._value_agg.set(children)
            self._state.set(self._status_sources())

    def _compose_initial(self, children):
        return from_entries(
            [(key, child.initial_value) for key, child in entries(children)], self._kind
        )

    def _follow_shape(self, coll) -> None:
        """Add children for keys coll gained and drop those for keys it lost."""
        incoming = keys(coll)
        if self._kind == "list":
            current = list(self._children)
            kept, dropped = current[: len(incoming)], current[len(incoming):]
            added = [self._make_child(i, coll)[1] for i in range(len(current), len(incoming))]
            new_children = kept + added
        else:
            wanted = set(incoming)
            dropped = [child for key, child in self._children.items() if key not in wanted]
            new_children = {key: child for key, child in self._children.items() if key in wanted}
            added = [key for key in incoming if key not in new_children]
            for key in added:
                new_children[key] = self._make_child(key, coll)[1]

        if dropped or added:
            if dropped:
                logger.debug(
                    "Collection %r dropped children %r", self.id, [child.id for child in dropped]
                )
            self._set_children(new_children)

    @property
    def children(self) -> Readable:
        """Read-only store of the current key-to-child mapping."""
        return self._children_view

    def get_children(self):
        return list(self._children) if self._kind == "list" else dict(self._children)

    def get_child(self, path: Iterable | Any = ()):
        """Descend by keys (not ids). None when any key is absent."""
        if not isinstance(path, (list, tuple)):
            path = [path]
        node: Node | None = self
        for key in path:
            if not isinstance(node, CollectionNode):
                return None
            node = get(key, node._children)
            if node is None:
                return None
        return node

    # --- Composition ---

    def _compose(self, child_states):
        value = from_entries(
            [(key, state.value) for key, state in entries(child_states)], self._kind
        )
        self._own.set(value)
        return value

    def _summarize(self, states: list) -> CollectionState:
        _, own, *children = states
        # Live flags, not the delivered states: those may predate a reset.
        if self._children and all(child._is_live() for child in values(self._children)):
            self._own._set_active(True)
        return self._summarize_states(own, children)

    def _summarize_states(self, own: NodeState, children: list[NodeState]) -> CollectionState:
        combined = functools.reduce(combine_status, children, Status.of(own))
        details = {OWN_KEY: own, **{child.id: child for child in children}}
        errors = details_to_errors(details, self.id)
        return CollectionState(
            value=own.value,
            initial_value=own.initial_value,
            active=combined.active,
            changed=combined.changed,
            valid=combined.valid,
            validating=combined.validating,
            error=own.error,
            id=self.id,
            promise=own.promise,
            submitting=own.submitting,
            errors=errors,
            coll_errors=tuple(record for record in errors if record.is_coll),
            details=details,
        )

    @property
    def initial_value(self):
        return self._own.initial_value

    @property
    def value(self):
        """Current composed value of the children."""
        return from_entries(
            [(key, child.value) for key, child in entries(self._children)], self._kind
        )

    # --- Operations ---

    def set(self, coll, partial: bool = False, should_activate: bool = False) -> CollectionNode:
        """Push values down to the children by key.

        Partial: keys whose incoming value is None are left alone and no
        child is added or removed. Otherwise a dynamically-shaped collection
        also grows and shrinks to the keys of coll.
        """
        with batch():
            if not partial and self._dynamic:
                self._follow_shape(coll)
            for key, child in entries(self._children):
                sub_value = get(key, coll)
                if partial and sub_value is None:
                    continue
                if isinstance(child, CollectionNode):
                    child.set(sub_value, partial)
                else:
                    child.set(sub_value)
        if should_activate:
            self.activate()
        return self

    def add(self, coll) -> CollectionNode:
        """Attach one new child per key of coll."""
        if not coll:
            return self
        offset = len(self._children) if self._kind == "list" else 0
        new_entries = [
            self._make_child(key, coll, key + offset if self._kind == "list" else key)
            for key in keys(coll)
        ]
        self._set_children(from_entries([*entries(self._children), *new_entries], self._kind))
        logger.debug("Collection %r added children %r", self.id, [child.id for _, child in new_entries])
        return self

    def remove(self, ids_to_remove: Iterable = ()) -> CollectionNode:
        """Drop the children whose id is listed."""
        ids_to_remove = list(ids_to_remove)
        kept = [(key, child) for key, child in entries(self._children) if child.id not in ids_to_remove]
        self._set_children(from_entries(kept, self._kind))
        logger.debug("Collection %r removed children %r", self.id, ids_to_remove)
        return self

    def update(self, fn: Callable) -> CollectionNode:
        """Replace the key-to-child mapping with fn(current mapping).

        Raises ValueError when the result holds the same child twice.
        """
        children = fn(self.get_children())
        nodes = values(children)
        if len({id(node) for node in nodes}) != len(nodes):
            raise ValueError(f"update() on collection {self.id!r} returned a child more than once")
        self._set_children(children)
        return self

    def _set_active(self, active: bool) -> None:
        # The own predicate may lag the children while unobserved.
        self._own.set(self.value)
        self._own._set_active(active)
        for child in values(self._children):
            child._set_active(active)

    def _is_live(self) -> bool:
        return self._own._is_live() and all(child._is_live() for child in values(self._children))

    def _validity(self) -> Validity:
        return Validity(
            self._own._validity(), *[child._validity() for child in values(self._children)]
        )

    def activate(self, active: bool = True) -> Validity:
        """Activate (or deactivate) the collection predicate and every child.

        Subscribers see one recomputation. The returned awaitable is True
        only if every one of them is valid.
        """
        with batch():
            self._set_active(active)
        return self._validity()

    def _set_submitting(self, submitting: bool) -> None:
        self._own._set_submitting(submitting)

    def reset(self, new_initial_value=_MISSING) -> CollectionNode:
        """Reset every child, then take their baselines as this node's baseline."""
        with batch():
            if new_initial_value is not _MISSING and self._dynamic:
                self._follow_shape(new_initial_value)
            for key, child in entries(self._children):
                if new_initial_value is _MISSING:
                    child.reset()
                else:
                    child.reset(get(key, new_initial_value))
            self._own.reset(self._compose_initial(self._children))
        return self
