"""Tests for collection and path helpers."""

from specx.util import (
    arity,
    call_with_arity,
    count_path_ancestors,
    entries,
    equals,
    from_entries,
    get,
    get_path,
    keep_forward_path,
    type_of,
)


class TestShapes:
    def test_type_of(self):
        assert type_of({}) == "dict"
        assert type_of([]) == "list"
        assert type_of(()) == "list"
        assert type_of("abc") is None

    def test_entries_and_back(self):
        assert entries(["a", "b"]) == [(0, "a"), (1, "b")]
        assert from_entries([(0, "a")], "list") == ["a"]
        assert from_entries([("k", 1)], "dict") == {"k": 1}
        assert entries(5) == []

    def test_get(self):
        assert get("a", {"a": 1}) == 1
        assert get(1, [1, 2]) == 2
        assert get(5, [1]) is None
        assert get("a", None) is None
        assert get_path(["a", 0], {"a": ["x"]}) == "x"


class TestPaths:
    def test_ancestor_hops(self):
        assert count_path_ancestors("../../a") == 2
        assert count_path_ancestors("a/b") == 0
        assert count_path_ancestors("./../a") == 1

    def test_forward_path(self):
        assert keep_forward_path("../../a/0/b") == ["a", 0, "b"]
        assert keep_forward_path("..") == []


class TestEquals:
    def test_deep(self):
        assert equals({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]})
        assert not equals([1, 2], [2, 1])

    def test_none_entries_are_absent(self):
        assert equals({"a": 1, "b": None}, {"a": 1})
        assert not equals(None, 0)


class TestArity:
    def test_counts_positional(self):
        assert arity(lambda a: a) == 1
        assert arity(lambda a, b: a) == 2
        assert arity(lambda *args: 0) > 2

    def test_call_with_arity_trims(self):
        assert call_with_arity(lambda a: a, 1, 2) == 1
        assert call_with_arity(lambda a, b: (a, b), 1, 2) == (1, 2)
