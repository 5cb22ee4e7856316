"""Table error taxonomy."""

from __future__ import annotations

from enum import Enum


class TableErrorCode(str, Enum):
    UNKNOWN = "TABLE_UNKNOWN"
    VALIDATION = "TABLE_VALIDATION"
    NOT_FOUND = "TABLE_NOT_FOUND"
    PERMISSION = "TABLE_PERMISSION"
    ACTION_FAILED = "TABLE_ACTION_FAILED"
