"""Error taxonomy and exceptions for table refinement."""

from .exceptions import (
    ActionNotAllowedError,
    ActionNotFoundError,
    ConfigurationError,
    RecordNotFoundError,
    TableError,
    TableNotFoundError,
    TransportError,
)
from .handlers import error_code_for, to_error
from .taxonomy import TableErrorCode

__all__ = [
    "ActionNotAllowedError",
    "ActionNotFoundError",
    "ConfigurationError",
    "RecordNotFoundError",
    "TableError",
    "TableErrorCode",
    "TableNotFoundError",
    "TransportError",
    "error_code_for",
    "to_error",
]
