"""
Default configuration for the django-tablerefine library.

Every setting the library consumes is listed here. Projects override any
subset of it through the ``TABLEREFINE`` Django setting.
"""

from __future__ import annotations

from typing import Any

LIBRARY_VERSION = "0.1.0"
LIBRARY_NAME = "django-tablerefine"

PAGINATOR_SHAPES = ("collection", "cursor", "simple", "length-aware")


# --------------------------------------------------------------------------- #
# Library-wide defaults
# --------------------------------------------------------------------------- #
LIBRARY_DEFAULTS: dict[str, Any] = {
    "table_settings": {
        # Client engine
        "filter_debounce_ms": 250,
        "search_debounce_ms": 700,
        "request_timeout_seconds": None,
        # Wire keys
        "delimiter": ",",
        "sort_key": "sort",
        "search_key": "search",
        "match_key": "match",
        "records_key": "rows",
        "columns_key": "columns",
        "page_key": "page",
        "cursor_key": "cursor",
        "record_key": "id",
        # Server-side builder
        "per_page": [10, 25, 50, 100],
        "default_per_page": 10,
        "paginator": "length-aware",
        "action_endpoint": "/tables/actions/",
        "partial_header": "X-Table-Partial",
    },
}


def merge_settings(*settings_dicts: dict[str, Any]) -> dict[str, Any]:
    """
    Merge multiple settings dictionaries with deep merging for nested dicts.
    Later dictionaries override earlier ones.
    """
    result: dict[str, Any] = {}
    for settings_dict in settings_dicts:
        for key, value in settings_dict.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = merge_settings(result[key], value)
            else:
                result[key] = value
    return result
