"""specx: reactive validation graphs for Python."""

from importlib.metadata import version as _version

__version__ = _version("specx")

from specx._queue import batch, batched, get_pending_count
from specx.observable import Readable, Writable, Observable
from specx.aggregate import DynamicAggregate, derived
from specx.keyed import CollectionAggregate
from specx.config import ConfigurationError, configure
from specx.result import ValidationResult, Validity
from specx.state import CollectionState, ErrorRecord, NodeState
from specx.predicate import PredicateNode
from specx.collection import CollectionNode
from specx.factory import validator
# textual is not auto-imported: opt-in only

__all__ = [
    "Readable",
    "Writable",
    "Observable",
    "DynamicAggregate",
    "CollectionAggregate",
    "derived",
    "batch",
    "batched",
    "get_pending_count",
    "ValidationResult",
    "Validity",
    "NodeState",
    "CollectionState",
    "ErrorRecord",
    "PredicateNode",
    "CollectionNode",
    "validator",
    "configure",
    "ConfigurationError",
]
