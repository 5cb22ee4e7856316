"""
Value normalization for wire parameters.

Every value passes through the same pipeline before it becomes a query
parameter:

1. toggle membership in the current value set (multi-valued filters only)
2. collapse list-like values into one delimited string
3. trim strings and collapse internal whitespace
4. map empty values to ``None``, meaning "omit the parameter"

Omission is how a refinement is cleared; the server treats an absent
parameter as the authoritative default. The pipeline is idempotent.
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Iterable, Optional

WHITESPACE_PATTERN = re.compile(r"\s+")

DEFAULT_DELIMITER = ","


def is_omitted(value: Any) -> bool:
    """Whether ``value`` is one of the sentinels that clears a parameter."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def clean_text(value: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def split_values(value: Any, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Expand a delimited string or iterable into a list of clean tokens."""
    if is_omitted(value):
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(delimiter)
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        items = [value]

    tokens: list[str] = []
    for item in items:
        if item is None:
            continue
        token = clean_text(stringify(item))
        if token:
            tokens.append(token)
    return tokens


def toggle_value(current: Any, value: Any, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """
    Add or remove ``value`` from the current value set.

    Each token of ``value`` is toggled independently, and the order of
    the remaining tokens is preserved.
    """
    tokens = split_values(current, delimiter)
    for token in split_values(value, delimiter):
        if token in tokens:
            tokens.remove(token)
        else:
            tokens.append(token)
    return tokens


def normalize(
    value: Any,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    toggle: bool = False,
    current: Any = None,
) -> Optional[Any]:
    """
    Run the normalization pipeline.

    Returns ``None`` when the parameter should be omitted. Scalars other
    than strings, lists and dates (integers, booleans) pass through.
    """
    if toggle:
        value = toggle_value(current, value, delimiter)

    if isinstance(value, (list, tuple, set, frozenset)):
        tokens = split_values(value, delimiter)
        value = delimiter.join(tokens)

    if isinstance(value, (datetime.date, datetime.datetime)):
        value = value.isoformat()

    if isinstance(value, str):
        value = clean_text(value)

    if is_omitted(value):
        return None
    return value


def normalize_params(
    params: dict[str, Any], *, delimiter: str = DEFAULT_DELIMITER
) -> dict[str, Optional[Any]]:
    """Normalize every value of a parameter delta, keeping omissions as ``None``."""
    return {key: normalize(value, delimiter=delimiter) for key, value in params.items()}


def merge_params(
    current: dict[str, Any], delta: dict[str, Optional[Any]]
) -> dict[str, Any]:
    """Apply a parameter delta; ``None`` removes the key."""
    merged = dict(current)
    for key, value in delta.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged
