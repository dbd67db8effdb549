"""Tests for the reference predicate adapter."""

import asyncio

from specx import predicates as p
from specx.result import VALID, ValidationResult


async def _await(awaitable):
    return await awaitable


class TestSpecLanguage:
    def test_get_pred(self):
        fn = lambda v: True
        assert p.get_pred(fn) is fn
        assert p.get_pred({"a": fn}) is None
        assert p.get_pred(p.checked(fn, {"a": fn})) is fn

    def test_checked_keeps_shape(self):
        shape = p.checked(lambda v: True, {"a": 1})
        assert shape == {"a": 1}
        shape = p.checked(lambda v: True, [1])
        assert shape == [1]

    def test_spread(self):
        each = lambda v: True
        assert p.get_spread(p.spread(each)) is each
        assert p.get_spread({"a": each}) is None

    def test_checked_spread(self):
        pred = lambda v: True
        s = p.checked(pred, p.spread("each"))
        assert p.get_pred(s) is pred
        assert p.get_spread(s) == "each"

    def test_opt(self):
        assert p.is_opt(p.opt({"a": True}))
        assert p.opt({"a": True}) == {"a": True}
        assert not p.is_opt({"a": True})
        assert p.opt(True) is False
        assert p.is_opt(p.opt(p.spread(True)))

    def test_get_message(self):
        assert p.get_message("is_required") == "is required"
        assert p.get_message("unknown") == "unknown"


class TestValidatePred:
    def test_true_is_valid(self):
        assert p.validate_pred(lambda v: True, 1) is VALID

    def test_reason_is_kept(self):
        assert p.validate_pred(lambda v: "too small", 1) == ValidationResult.invalid("too small")

    def test_false_gets_generic_message(self):
        assert p.validate_pred(lambda v: False, 1).reason == "is invalid"

    def test_no_pred(self):
        assert p.validate_pred(None, 1) is VALID

    def test_get_from_is_passed(self):
        seen = []
        p.validate_pred(lambda v, get_from: seen.append(get_from("x")) or True, 1, lambda path: path)
        assert seen == ["x"]

    def test_async_pred_is_pending(self):
        async def check(v):
            return v > 0 or "not positive"

        async def scenario():
            result = p.validate_pred(check, -1)
            assert result.is_pending
            return await result

        assert asyncio.run(scenario()) == ValidationResult.invalid("not positive")


class TestAnd:
    def test_stops_at_first_failure(self):
        calls = []
        combined = p.and_(lambda v: "first", lambda v: calls.append(v) or True)
        assert combined(1) == "first"
        assert calls == []

    def test_all_pass(self):
        assert p.and_(lambda v: True, None, lambda v: True)(1) is True

    def test_async_link_continues(self):
        calls = []

        async def slow(v):
            return True

        combined = p.and_(slow, lambda v: calls.append(v) or "second")
        assert asyncio.run(_await(combined(5))) == "second"
        assert calls == [5]

    def test_async_failure_short_circuits(self):
        calls = []

        async def slow(v):
            return "nope"

        combined = p.and_(slow, lambda v: calls.append(v) or True)
        assert asyncio.run(_await(combined(5))) == "nope"
        assert calls == []
