"""
Client-side table engine.

Tracks sort, filter, search, column, page size and selection state over
server-provided snapshots and dispatches record, bulk and page actions
through an injected transport.
"""

from .actions import ActionDispatcher, ActionKind, ActionOutcome, classify
from .bulk import Bulk, BulkSelection
from .debounce import Debouncer
from .normalizer import normalize, toggle_value
from .refine import Binding, Refine
from .table import Table
from .transport import RequestsTransport, Transport

__all__ = [
    "ActionDispatcher",
    "ActionKind",
    "ActionOutcome",
    "Binding",
    "Bulk",
    "BulkSelection",
    "Debouncer",
    "Refine",
    "RequestsTransport",
    "Table",
    "Transport",
    "classify",
    "normalize",
    "toggle_value",
]
