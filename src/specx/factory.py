"""validator() — build the right node for a value and its spec."""

from __future__ import annotations

from typing import Any, Callable

from specx.collection import CollectionNode
from specx.config import ensure_configured
from specx.node import Node
from specx.predicate import PredicateNode
from specx.util import is_coll


def validator(
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
) -> Node:
    """Build a CollectionNode or a PredicateNode.

    The shape is decided by ``fields``, else ``spec``, else the value
    itself: a list, a mapping or a spread declaration makes a collection
    node. A node passed as the value is returned unchanged.

    Usage:
        form = validator(
            {"email": "", "password": ""},
            spec={"email": is_email, "password": is_strong},
            required={"email": True, "password": True},
        )
    """
    if isinstance(initial_value, Node):
        return initial_value

    adapter = ensure_configured()
    candidate = fields or spec or initial_value
    if is_coll(candidate) or adapter.get_spread(candidate) is not None:
        return CollectionNode(
            initial_value,
            change_pred=change_pred,
            fields=fields,
            get_id=get_id,
            id=id,
            required=required,
            spec=spec,
            on_submit=on_submit,
            _parent=_parent,
        )
    return PredicateNode(
        initial_value,
        change_pred=change_pred,
        id=id,
        required=required,
        spec=spec,
        on_submit=on_submit,
        _parent=_parent,
    )
