"""Predicate-library configuration.

Nodes never interpret specs themselves: every question about a spec
(its predicate, its spread, whether a required-spec is optional, how to run
a predicate) goes through the adapter given to ``configure`` once at
startup. ``specx.predicates`` is a ready-made adapter:

    import specx
    from specx import predicates

    specx.configure(predicates)
"""

from __future__ import annotations

import logging

logger = logging.getLogger("specx.config")

REQUIRED_FUNCTIONS = (
    "and_",
    "get_message",
    "get_pred",
    "get_spread",
    "is_opt",
    "validate_pred",
)

CONFIG_ERROR_MSG = "specx must be configured with a predicate adapter providing: " + ", ".join(
    REQUIRED_FUNCTIONS
)

_adapter = None


class ConfigurationError(TypeError):
    """The predicate adapter is missing or incomplete."""


def configure(adapter) -> None:
    """Install the predicate adapter used by every node built afterwards."""
    global _adapter
    if adapter is None or any(
        not callable(getattr(adapter, name, None)) for name in REQUIRED_FUNCTIONS
    ):
        raise ConfigurationError(CONFIG_ERROR_MSG)
    _adapter = adapter
    logger.info("Configured predicate adapter %s", getattr(adapter, "__name__", type(adapter).__name__))


def ensure_configured():
    """Return the installed adapter, or raise ConfigurationError."""
    if _adapter is None:
        raise ConfigurationError(CONFIG_ERROR_MSG)
    return _adapter
