"""Tests for validator()."""

from specx import CollectionNode, PredicateNode, validator
from specx.predicates import checked, spread


class TestValidator:
    def test_scalar_gives_predicate_node(self):
        assert isinstance(validator(1), PredicateNode)
        assert isinstance(validator(None, spec=lambda v: True), PredicateNode)

    def test_collection_value_gives_collection_node(self):
        assert isinstance(validator({"a": 1}), CollectionNode)
        assert isinstance(validator([1, 2]), CollectionNode)

    def test_spec_shape_wins_over_value(self):
        node = validator(None, spec={"a": lambda v: True})
        assert isinstance(node, CollectionNode)
        assert list(node.get_children()) == ["a"]

    def test_fields_shape(self):
        node = validator(None, fields={"a": True, "b": True})
        assert isinstance(node, CollectionNode)
        assert node.value == {"a": None, "b": None}

    def test_spread_gives_collection_node(self):
        node = validator(None, spec=spread(lambda v: True))
        assert isinstance(node, CollectionNode)
        assert node.value == []

    def test_checked_shape(self):
        node = validator({"a": 1}, spec=checked(lambda v: True, {"a": lambda v: True}))
        assert isinstance(node, CollectionNode)

    def test_node_passes_through(self):
        node = validator(1)
        assert validator(node) is node
