"""Error aggregation — flatten a collection's detail tree into error records.

Each record carries the path of ids from the collection down to the node
that owns the error, its dotted rendering, and whether the error comes from
a collection-level predicate rather than a leaf field.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from specx.state import CollectionState, ErrorRecord, NodeState

OWN_KEY = "_"


def render_path(path: tuple) -> str:
    return ".".join(str(part) for part in path)


def make_record(path: tuple, error: Any, is_coll: bool) -> ErrorRecord:
    return ErrorRecord(path=path, which=render_path(path), error=error, is_coll=is_coll)


def lift(record: ErrorRecord, prefix: tuple) -> ErrorRecord:
    return make_record(prefix + record.path, record.error, record.is_coll)


def iter_errors(details: Mapping[Any, NodeState], prefix: tuple = ()) -> Iterator[ErrorRecord]:
    """Yield records for a collection's own state and each child state.

    Child collections have already flattened their subtree into ``errors``
    (paths relative to, and starting with, that child), so they are lifted
    rather than walked again.
    """
    for key, state in details.items():
        if key == OWN_KEY:
            if state.error:
                yield make_record(prefix, state.error, True)
        elif isinstance(state, CollectionState):
            for record in state.errors:
                yield lift(record, prefix)
        elif state.error:
            yield make_record(prefix + (state.id,), state.error, False)


def details_to_errors(details: Mapping[Any, NodeState], own_id: Any = None) -> tuple[ErrorRecord, ...]:
    prefix = () if own_id is None else (own_id,)
    return tuple(iter_errors(details, prefix))
