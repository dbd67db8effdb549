"""Reference predicate adapter.

Pass this module to ``specx.configure``. It understands this spec language:

- a predicate is a callable ``pred(value)`` or ``pred(value, get_from)``
  returning ``True`` when valid, an awaitable when the answer comes later,
  or anything else as the reason the value is invalid;
- a collection spec is a dict or list of sub-specs;
- ``checked(pred, shape)`` attaches a collection-level predicate to a shape;
- ``spread(each)`` declares that every key of a collection shares ``each``;
- ``opt(required)`` keeps the nested required-spec but makes the
  collection itself optional.

Usage:
    spec = {
        "name": lambda v: bool(v) or "required",
        "tags": spread(lambda t: len(t) < 10 or "too long"),
    }
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from specx.result import VALID, ValidationResult
from specx.util import call_with_arity

MESSAGES = {
    "is_required": "is required",
    "is_invalid": "is invalid",
}


class Spread:
    """Declaration shared by every key of a dynamically-sized collection."""

    __slots__ = ("each", "pred", "optional")

    def __init__(self, each: Any, pred: Callable | None = None, optional: bool = False) -> None:
        self.each = each
        self.pred = pred
        self.optional = optional

    def __repr__(self) -> str:
        return f"spread({self.each!r})"


class _CheckedDict(dict):
    pred: Callable | None = None
    optional = False


class _CheckedList(list):
    pred: Callable | None = None
    optional = False


def spread(each: Any, pred: Callable | None = None) -> Spread:
    return Spread(each, pred)


def checked(pred: Callable, shape):
    """Attach a collection-level predicate to a dict or list shape."""
    if isinstance(shape, Spread):
        return Spread(shape.each, pred, shape.optional)
    result = _CheckedDict(shape) if isinstance(shape, dict) else _CheckedList(shape)
    result.pred = pred
    return result


def opt(required):
    """Mark a required-spec whose collection may itself be missing."""
    if isinstance(required, Spread):
        return Spread(required.each, required.pred, optional=True)
    if not isinstance(required, (dict, list, tuple)):
        return False
    result = _CheckedDict(required) if isinstance(required, dict) else _CheckedList(required)
    result.pred = getattr(required, "pred", None)
    result.optional = True
    return result


# --- Adapter contract ---


def get_pred(spec) -> Callable | None:
    if callable(spec):
        return spec
    return getattr(spec, "pred", None)


def get_spread(spec):
    if isinstance(spec, Spread):
        return spec.each
    return None


def is_opt(required) -> bool:
    return bool(getattr(required, "optional", False))


def get_message(key: str):
    return MESSAGES.get(key, key)


def and_(*preds: Callable | None) -> Callable:
    """Conjunction that stops at the first predicate not returning True."""
    chain = [pred for pred in preds if pred is not None]

    def conjunction(value, get_from=None):
        return _run_chain(chain, value, get_from)

    return conjunction


def _run_chain(chain: list, value, get_from):
    for i, pred in enumerate(chain):
        outcome = call_with_arity(pred, value, get_from)
        if inspect.isawaitable(outcome) and not isinstance(outcome, ValidationResult):
            return _finish_chain(outcome, chain[i + 1:], value, get_from)
        if outcome is not True:
            return outcome
    return True


async def _finish_chain(outcome, rest: list, value, get_from):
    outcome = await outcome
    if outcome is not True:
        return outcome
    outcome = _run_chain(rest, value, get_from)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


def to_result(outcome) -> ValidationResult:
    if isinstance(outcome, ValidationResult):
        return outcome
    if inspect.isawaitable(outcome):
        return ValidationResult.pending(_resolve(outcome))
    if outcome is True:
        return VALID
    if outcome is False or outcome is None:
        return ValidationResult.invalid(MESSAGES["is_invalid"])
    return ValidationResult.invalid(outcome)


async def _resolve(awaitable) -> ValidationResult:
    return to_result(await awaitable)


def validate_pred(pred: Callable | None, value, get_from=None) -> ValidationResult:
    if pred is None:
        return VALID
    return to_result(call_with_arity(pred, value, get_from))
