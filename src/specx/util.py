"""Collection-shape helpers shared by the aggregators and the nodes.

Two shapes are understood: ``"list"`` (lists and tuples, keyed by position)
and ``"dict"`` (any Mapping). Everything else is a scalar.
"""

from __future__ import annotations

import inspect
import secrets
from collections.abc import Mapping
from typing import Any, Callable, Iterable


def identity(x):
    return x


def noop(*args) -> None:
    return None


def type_of(coll) -> str | None:
    if isinstance(coll, Mapping):
        return "dict"
    if isinstance(coll, (list, tuple)):
        return "list"
    return None


def is_coll(x) -> bool:
    return type_of(x) is not None


def entries(coll) -> list[tuple[Any, Any]]:
    kind = type_of(coll)
    if kind == "dict":
        return list(coll.items())
    if kind == "list":
        return list(enumerate(coll))
    return []


def keys(coll) -> list:
    return [key for key, _ in entries(coll)]


def values(coll) -> list:
    return [value for _, value in entries(coll)]


def from_entries(pairs: Iterable[tuple[Any, Any]], kind: str | None):
    """Rebuild a collection of the given shape. Lists drop their keys."""
    if kind == "list":
        return [value for _, value in pairs]
    return dict(pairs)


def get(key, coll):
    kind = type_of(coll)
    if kind == "dict":
        return coll.get(key)
    if kind == "list":
        if isinstance(key, int) and -len(coll) <= key < len(coll):
            return coll[key]
    return None


def get_path(path: Iterable, value):
    for key in path:
        value = get(key, value)
    return value


def split_path(rel_path: str) -> list[str]:
    return [part for part in rel_path.split("/") if part not in ("", ".")]


def count_path_ancestors(rel_path: str) -> int:
    """Number of leading ``..`` hops in a relative path."""
    count = 0
    for part in split_path(rel_path):
        if part != "..":
            break
        count += 1
    return count


def keep_forward_path(rel_path: str) -> list:
    """Path segments left once the ancestor hops are stripped."""
    parts = split_path(rel_path)[count_path_ancestors(rel_path):]
    return [int(part) if part.lstrip("-").isdigit() else part for part in parts]


def _without_none(x):
    kind = type_of(x)
    if kind == "dict":
        return {k: _without_none(v) for k, v in x.items() if v is not None}
    if kind == "list":
        return [_without_none(v) for v in x]
    return x


def equals(a, b) -> bool:
    """Deep equality where ``None`` mapping entries count as absent."""
    if a is b:
        return True
    return _without_none(a) == _without_none(b)


def gen_random_id() -> str:
    return secrets.token_hex(6)


def arity(fn: Callable) -> int:
    """Count the positional parameters fn accepts (``*args`` counts as many)."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return 1
    count = 0
    for param in params:
        if param.kind is param.VAR_POSITIONAL:
            return 1_000
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def call_with_arity(fn: Callable, *args):
    """Call fn with as many of args as its signature takes."""
    return fn(*args[: max(arity(fn), 1)])
