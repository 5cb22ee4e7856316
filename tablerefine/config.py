"""Settings loader for table refinement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from django.conf import settings as django_settings

from .defaults import LIBRARY_DEFAULTS, PAGINATOR_SHAPES, merge_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSettings:
    filter_debounce_ms: int = 250
    search_debounce_ms: int = 700
    request_timeout_seconds: Optional[float] = None
    delimiter: str = ","
    sort_key: str = "sort"
    search_key: str = "search"
    match_key: str = "match"
    records_key: str = "rows"
    columns_key: str = "columns"
    page_key: str = "page"
    cursor_key: str = "cursor"
    record_key: str = "id"
    per_page: list[int] = field(default_factory=lambda: [10, 25, 50, 100])
    default_per_page: int = 10
    paginator: str = "length-aware"
    action_endpoint: str = "/tables/actions/"
    partial_header: str = "X-Table-Partial"

    def wire_keys(self) -> dict[str, str]:
        return {
            "sort_key": self.sort_key,
            "search_key": self.search_key,
            "match_key": self.match_key,
            "records_key": self.records_key,
            "columns_key": self.columns_key,
            "page_key": self.page_key,
            "cursor_key": self.cursor_key,
        }


def get_table_settings(overrides: Optional[dict[str, Any]] = None) -> TableSettings:
    defaults = LIBRARY_DEFAULTS.get("table_settings", {})
    merged = merge_settings(defaults)

    # The client engine is usable without a configured Django project.
    if django_settings.configured:
        external = getattr(django_settings, "TABLEREFINE", None)
        if isinstance(external, dict):
            merged = merge_settings(merged, external)

    if overrides:
        merged = merge_settings(merged, overrides)

    return _build_settings(merged)


def _build_settings(config: dict[str, Any]) -> TableSettings:
    paginator = str(config.get("paginator", "length-aware"))
    if paginator not in PAGINATOR_SHAPES:
        logger.warning(
            "Unknown paginator shape '%s', falling back to 'length-aware'", paginator
        )
        paginator = "length-aware"

    per_page = _normalize_int_list(config.get("per_page")) or [10]
    default_per_page = _coerce_int(config.get("default_per_page"), per_page[0])

    return TableSettings(
        filter_debounce_ms=_coerce_int(config.get("filter_debounce_ms"), 250),
        search_debounce_ms=_coerce_int(config.get("search_debounce_ms"), 700),
        request_timeout_seconds=_coerce_optional_float(
            config.get("request_timeout_seconds")
        ),
        delimiter=str(config.get("delimiter") or ","),
        sort_key=str(config.get("sort_key", "sort")),
        search_key=str(config.get("search_key", "search")),
        match_key=str(config.get("match_key", "match")),
        records_key=str(config.get("records_key", "rows")),
        columns_key=str(config.get("columns_key", "columns")),
        page_key=str(config.get("page_key", "page")),
        cursor_key=str(config.get("cursor_key", "cursor")),
        record_key=str(config.get("record_key", "id")),
        per_page=per_page,
        default_per_page=default_per_page,
        paginator=paginator,
        action_endpoint=str(config.get("action_endpoint", "/tables/actions/")),
        partial_header=str(config.get("partial_header", "X-Table-Partial")),
    )


def find_key_conflicts(table_settings: TableSettings) -> list[str]:
    """Return wire keys that are configured more than once."""
    seen: dict[str, str] = {}
    conflicts: list[str] = []
    for setting_name, key in table_settings.wire_keys().items():
        if key in seen:
            conflicts.append(f"{setting_name} and {seen[key]} both use '{key}'")
        else:
            seen[key] = setting_name
    return conflicts


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_optional_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize_int_list(raw: Any) -> list[int]:
    if isinstance(raw, int):
        return [raw]
    if not isinstance(raw, (list, tuple)):
        return []
    values: list[int] = []
    for item in raw:
        try:
            values.append(int(item))
        except (TypeError, ValueError):
            continue
    return values
