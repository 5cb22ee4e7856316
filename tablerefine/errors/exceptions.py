"""
Exceptions raised by the table refinement engine.

The client engine itself never raises for stale refiner or action names;
these types cover transport failures without a failure callback and
server-side lookups performed by the action endpoint.
"""

from typing import Optional

from .taxonomy import TableErrorCode


class TableError(Exception):
    """Base exception for table errors."""

    code = TableErrorCode.UNKNOWN
    status = 400

    def __init__(self, message: str, table: Optional[str] = None):
        self.table = table
        super().__init__(message)


class TransportError(TableError):
    """Raised when a request fails and the caller supplied no failure callback."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        original: Optional[BaseException] = None,
    ):
        self.original = original
        super().__init__(message, table)


class ConfigurationError(TableError):
    """Raised for integration-time conflicts such as duplicate wire keys."""

    code = TableErrorCode.VALIDATION


class TableNotFoundError(TableError):
    code = TableErrorCode.NOT_FOUND
    status = 404


class ActionNotFoundError(TableError):
    code = TableErrorCode.NOT_FOUND
    status = 404

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        action_name: Optional[str] = None,
        action_type: Optional[str] = None,
    ):
        self.action_name = action_name
        self.action_type = action_type
        super().__init__(message, table)


class ActionNotAllowedError(TableError):
    code = TableErrorCode.PERMISSION
    status = 403

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        action_name: Optional[str] = None,
    ):
        self.action_name = action_name
        super().__init__(message, table)


class RecordNotFoundError(TableError):
    code = TableErrorCode.NOT_FOUND
    status = 404
