"""Textual integration for specx. Opt-in — requires textual.

Binds one validator node to one ``Input`` widget: typing pushes the text
into the node, leaving the field activates it, and the node's value is
mirrored back into the widget.

    class SignUp(App):
        def on_mount(self) -> None:
            self.email = stx.bind(self, "#email", form.get_child("email"))

        def on_input_changed(self, event: Input.Changed) -> None:
            if event.input.id == "email":
                self.email.handle_changed(event)

        def on_input_blurred(self, event: Input.Blurred) -> None:
            if event.input.id == "email":
                self.email.handle_blurred(event)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable

from textual.css.query import NoMatches
from textual.widgets import Input

# Pause state per app, keyed by id(app).
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend mirroring into widgets, e.g. while the screen is rebuilt."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _to_input(value: Any) -> str:
    return "" if value is None else str(value)


class InputBinding:
    """Keeps one node and one Input widget in step."""

    def __init__(
        self,
        app,
        selector: str,
        node,
        *,
        to_input: Callable[[Any], str] = _to_input,
        to_value: Callable[[str], Any] | None = None,
    ) -> None:
        self._app = app
        self._selector = selector
        self._to_input = to_input
        self._to_value = to_value
        self._main = threading.get_ident()
        self._node = None
        self._unsubscribe: Callable[[], None] | None = None
        self.update(node)

    @property
    def node(self):
        return self._node

    def _mirror(self, state) -> None:
        if not is_safe(self._app):
            return
        if threading.get_ident() != self._main:
            self._app.call_from_thread(self._write, state.value)
        else:
            self._write(state.value)

    def _write(self, value) -> None:
        try:
            widget = self._app.query_one(self._selector, Input)
        except NoMatches:
            return
        text = self._to_input(value)
        if widget.value != text:
            widget.value = text

    def handle_changed(self, event) -> None:
        """Push the widget's text into the node."""
        if self._node is None:
            return
        value = event.value
        self._node.set(self._to_value(value) if self._to_value else value)

    def handle_blurred(self, event=None):
        """Start live validation once the user leaves the field."""
        if self._node is None:
            return None
        return self._node.activate()

    def update(self, node) -> None:
        """Re-target the binding at another node (or at nothing)."""
        self.dispose()
        self._node = node
        if node is not None:
            self._unsubscribe = node.subscribe(self._mirror)

    def dispose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._node = None


def bind(app, selector: str, node, **converters) -> InputBinding:
    """Bind node to the Input widget found by selector."""
    return InputBinding(app, selector, node, **converters)
