"""Tests for specx.textual — Input binding."""

import threading
import types

import pytest
from textual.css.query import NoMatches

from specx import validator
from specx import textual as stx


class _MockInput:
    def __init__(self, value=""):
        self.value = value


class _MockApp:
    """Minimal mock matching the Textual App interface stx needs."""

    def __init__(self, *, is_running=True, widget=None):
        self.is_running = is_running
        self.widget = widget
        self.queries = []
        self._call_from_thread_log = []

    def query_one(self, selector, expect_type=None):
        self.queries.append(selector)
        if self.widget is None:
            raise NoMatches(selector)
        return self.widget

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


def _changed(value):
    return types.SimpleNamespace(value=value)


class TestMirror:
    def test_value_written_on_bind(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        stx.bind(app, "#age", validator(12))
        assert widget.value == "12"

    def test_none_renders_empty(self):
        widget = _MockInput("stale")
        app = _MockApp(widget=widget)
        stx.bind(app, "#name", validator(None))
        assert widget.value == ""

    def test_skips_when_not_running(self):
        widget = _MockInput()
        app = _MockApp(is_running=False, widget=widget)
        node = validator("a")
        stx.bind(app, "#name", node)
        node.set("b")
        assert widget.value == ""

    def test_skips_during_pause(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        node = validator("a")
        stx.bind(app, "#name", node)
        with stx.pause(app):
            node.set("b")
        assert widget.value == "a"

    def test_catches_nomatch(self):
        app = _MockApp(widget=None)
        node = validator("a")
        binding = stx.bind(app, "#gone", node)
        node.set("b")
        assert app.queries == ["#gone", "#gone"]
        binding.dispose()

    def test_custom_formatter(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        stx.bind(app, "#price", validator(3.5), to_input=lambda v: f"{v:.2f}")
        assert widget.value == "3.50"

    def test_off_thread_marshals(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        node = validator("a")
        stx.bind(app, "#name", node)

        t = threading.Thread(target=lambda: node.set("b"))
        t.start()
        t.join()

        assert len(app._call_from_thread_log) == 1
        assert widget.value == "b"


class TestEvents:
    def test_changed_sets_node(self):
        app = _MockApp(widget=_MockInput())
        node = validator("")
        binding = stx.bind(app, "#name", node)
        binding.handle_changed(_changed("Ada"))
        assert node.value == "Ada"

    def test_changed_converts(self):
        app = _MockApp(widget=_MockInput())
        node = validator(0, spec=lambda v: v >= 18 or "too young")
        binding = stx.bind(app, "#age", node, to_value=int)
        binding.handle_changed(_changed("21"))
        assert node.value == 21

    def test_blurred_activates(self):
        app = _MockApp(widget=_MockInput())
        node = validator(10, spec=lambda v: v >= 18 or "too young")
        binding = stx.bind(app, "#age", node)
        binding.handle_blurred()
        assert node.get().active is True
        assert node.get().error == "too young"

    def test_dispose_stops_mirroring(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        node = validator("a")
        binding = stx.bind(app, "#name", node)
        binding.dispose()
        node.set("b")
        assert widget.value == "a"
        assert binding.node is None
        binding.handle_changed(_changed("ignored"))
        assert node.value == "b"

    def test_update_retargets(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        first = validator("a")
        second = validator("x")
        binding = stx.bind(app, "#name", first)
        binding.update(second)
        assert widget.value == "x"
        first.set("b")
        assert widget.value == "x"
        assert binding.node is second

    def test_propagates_real_errors(self):
        widget = _MockInput()
        app = _MockApp(widget=widget)
        node = validator("a")

        def boom(value):
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            stx.bind(app, "#name", node, to_input=boom)
