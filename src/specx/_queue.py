"""Notification queue — the ordering engine behind every store.

A store change invalidates all of its subscribers first and queues their
``run`` callbacks second. Queued callbacks run in order once the outermost
change (or batch) completes, so a derivation never recomputes from a mix of
old and new inputs while its other inputs are still waiting to be delivered.

Batching: changes inside ``batched`` or ``with batch()`` queue their
notifications and flush them once at the end.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, ParamSpec, TypeVar

if TYPE_CHECKING:
    from specx.observable import Subscriber

P = ParamSpec("P")
R = TypeVar("R")

# Batch depth counter. When > 0, flushing is deferred.
_batch_depth: int = 0

# True while the queue is being drained; nested changes only append.
_flushing: bool = False

_queue: list[tuple[Subscriber, object]] = []


def enqueue(subscriber: Subscriber, value: object) -> None:
    _queue.append((subscriber, value))


def flush() -> None:
    """Run queued callbacks. Callbacks queued during the flush run in the same pass."""
    global _flushing
    if _flushing or _batch_depth > 0:
        return
    _flushing = True
    try:
        i = 0
        while i < len(_queue):
            subscriber, value = _queue[i]
            i += 1
            # Disposed while waiting in the queue.
            if subscriber.active:
                subscriber.run(value)
    finally:
        _queue.clear()
        _flushing = False


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush the queue."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        flush()


def get_pending_count() -> int:
    """Number of callbacks waiting to run. Useful for testing."""
    return len(_queue)


@contextmanager
def batch():
    """Context manager for batching store changes.

    Usage:
        with batch():
            first.set(1)
            second.set(2)
            # subscribers run here, after both are set
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def batched(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: queue every notification caused by fn until it returns."""

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper
