"""Map table errors to JSON-friendly payloads."""

from __future__ import annotations

from .taxonomy import TableErrorCode


def to_error(code: TableErrorCode, message: str, *, retryable: bool = False, details: dict | None = None) -> dict:
    return {
        "message": message,
        "code": str(code.value if hasattr(code, "value") else code),
        "severity": "error",
        "details": details or {},
        "retryable": retryable,
    }


def error_code_for(exc: Exception) -> TableErrorCode:
    return getattr(exc, "code", TableErrorCode.UNKNOWN)
