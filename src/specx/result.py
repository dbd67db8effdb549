"""Validation results — valid, invalid (with a reason) or pending.

A pending result carries an awaitable that settles to one of the two
terminal results. Every result is itself awaitable: awaiting a terminal
result gives it back, awaiting a pending one gives its settled result.
That lets callers treat synchronous and asynchronous validation alike.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable


@dataclass(frozen=True)
class ValidationResult:
    valid: bool | None
    reason: Any = None
    promise: Awaitable[ValidationResult] | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return VALID

    @classmethod
    def invalid(cls, reason: Any) -> ValidationResult:
        return cls(False, reason)

    @classmethod
    def pending(cls, awaitable: Awaitable) -> ValidationResult:
        return cls(None, promise=awaitable)

    @property
    def is_pending(self) -> bool:
        return self.valid is None

    def __await__(self):
        if self.promise is None:
            return self
        return (yield from self.promise.__await__())

    def __repr__(self) -> str:
        if self.valid is None:
            return "ValidationResult(pending)"
        if self.valid:
            return "ValidationResult(valid)"
        return f"ValidationResult(invalid, {self.reason!r})"


VALID = ValidationResult(True)


async def _settle(awaitable: Awaitable) -> ValidationResult:
    result = await awaitable
    # Pending results never settle to another pending result.
    while isinstance(result, ValidationResult) and result.is_pending:
        result = await result.promise
    return result


def enhance(result: ValidationResult) -> ValidationResult:
    """Give a pending result a task that settles to a terminal result.

    The task is scheduled on the running loop, so an asynchronous predicate
    can only be evaluated from inside one.
    """
    if not result.is_pending:
        return result
    loop = asyncio.get_running_loop()
    return ValidationResult(None, promise=loop.create_task(_settle(result.promise)))


class Validity:
    """Awaitable boolean: True when every given result settles valid.

    Each item may be a ValidationResult, an awaitable settling to one, or
    another Validity. All items are awaited before the answer is formed.
    """

    __slots__ = ("_items",)

    def __init__(self, *items: Awaitable) -> None:
        self._items = items

    def __await__(self):
        valid = True
        for item in self._items:
            outcome = yield from item.__await__()
            if isinstance(outcome, ValidationResult):
                outcome = outcome.valid
            valid = bool(outcome) and valid
        return valid

    def __repr__(self) -> str:
        return f"Validity({len(self._items)} item(s))"
