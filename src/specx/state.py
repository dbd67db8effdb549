"""Published node states."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable


@dataclass(frozen=True)
class NodeState:
    value: Any
    initial_value: Any
    active: bool | None
    changed: bool
    valid: bool
    validating: bool
    error: Any
    id: Any
    promise: Awaitable
    submitting: bool = False


@dataclass(frozen=True)
class ErrorRecord:
    path: tuple
    which: str
    error: Any
    is_coll: bool = False


@dataclass(frozen=True)
class CollectionState(NodeState):
    errors: tuple[ErrorRecord, ...] = ()
    coll_errors: tuple[ErrorRecord, ...] = ()
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Status:
    """The part of a state that folds across a collection's constituents."""

    active: bool | None
    changed: bool
    valid: bool
    validating: bool

    @classmethod
    def of(cls, state: NodeState) -> Status:
        return cls(state.active, state.changed, state.valid, state.validating)


def combine_status(a: Status | NodeState, b: Status | NodeState) -> Status:
    """Fold two statuses. Associative and commutative.

    ``active`` is None ("mixed") unless both sides agree.
    """
    validating = a.validating or b.validating
    return Status(
        active=a.active if a.active == b.active else None,
        changed=a.changed or b.changed,
        valid=bool(a.valid and b.valid) and not validating,
        validating=validating,
    )
