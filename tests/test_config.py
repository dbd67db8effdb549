"""Tests for predicate-adapter configuration."""

import logging
import types

import pytest

from specx import ConfigurationError, configure, predicates, validator
from specx import config


class TestConfigure:
    def test_unconfigured_raises(self, monkeypatch):
        monkeypatch.setattr(config, "_adapter", None)
        with pytest.raises(ConfigurationError, match="predicate adapter"):
            validator(1)

    def test_is_a_type_error(self):
        assert issubclass(ConfigurationError, TypeError)

    def test_incomplete_adapter_rejected(self):
        partial = types.SimpleNamespace(get_pred=lambda spec: None)
        with pytest.raises(ConfigurationError):
            configure(partial)

    def test_none_rejected(self):
        with pytest.raises(ConfigurationError):
            configure(None)

    def test_rejected_adapter_keeps_previous(self):
        with pytest.raises(ConfigurationError):
            configure(object())
        assert config.ensure_configured() is predicates

    def test_logs_adapter(self, caplog):
        with caplog.at_level(logging.INFO, logger="specx.config"):
            configure(predicates)
        assert "specx.predicates" in caplog.text

    def test_custom_adapter(self):
        adapter = types.SimpleNamespace(
            get_pred=predicates.get_pred,
            get_spread=predicates.get_spread,
            is_opt=predicates.is_opt,
            get_message=lambda key: "needed",
            and_=predicates.and_,
            validate_pred=predicates.validate_pred,
        )
        configure(adapter)
        node = validator(None, required=True)
        node.activate()
        assert node.get().error == "needed"
