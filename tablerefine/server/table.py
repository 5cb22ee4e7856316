"""
Declarative server-side table.

Subclasses describe a queryset, its columns, refiners and actions; the
base class turns a request's query parameters into the snapshot dict the
client engine consumes, and runs dispatched actions.

Example:

    class ContactTable(Table):
        id = "contacts"
        toggle = True

        def for_(self):
            return Contact.objects.select_related("organization")

        def columns(self):
            return [
                KeyColumn("id"),
                TextColumn("name").sortable().searchable(),
                TextColumn("organization.name", "Organization"),
            ]
"""

from __future__ import annotations

import logging
import re
from functools import reduce
from operator import or_
from typing import Any, Iterable, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet
from django.http import HttpRequest
from django.urls import NoReverseMatch, reverse
from django.utils.http import urlencode

from ..client.normalizer import merge_params, split_values
from ..config import TableSettings, get_table_settings
from ..errors import (
    ActionNotAllowedError,
    ActionNotFoundError,
    ConfigurationError,
    RecordNotFoundError,
)
from ..types import BULK, INLINE
from .actions import BaseAction, BulkAction, InlineAction, PageAction
from .columns import Column
from .pagination import paginate
from .refiners import Filter, Search, Sort, field_path
from .sanitization import sanitize_search

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Table:
    id: Optional[str] = None
    scope: Optional[str] = None
    pagination: Any = None
    default_pagination: Optional[int] = None
    paginator: Optional[str] = None
    toggle = False
    endpoint: Optional[str] = None

    def __init__(self, request: Optional[HttpRequest] = None, settings: Optional[TableSettings] = None):
        self.request = request
        self.settings = settings or get_table_settings()

    @classmethod
    def make(cls, request: Optional[HttpRequest] = None, **kwargs: Any) -> "Table":
        return cls(request, **kwargs)

    @classmethod
    def identifier(cls) -> str:
        return cls.id or _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()

    # ------------------------------------------------------------------ #
    # Definition hooks
    # ------------------------------------------------------------------ #
    def for_(self) -> QuerySet:
        raise NotImplementedError(f"{self.__class__.__name__} must define for_()")

    def columns(self) -> list[Column]:
        return []

    def filters(self) -> list[Filter]:
        return []

    def sorts(self) -> list[Sort]:
        return []

    def searches(self) -> list[Search]:
        return []

    def actions(self) -> list[BaseAction]:
        return []

    def after(self, queryset: QuerySet) -> QuerySet:
        return queryset

    def meta(self) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------ #
    # Wire configuration
    # ------------------------------------------------------------------ #
    def key_column(self, columns: Optional[Iterable[Column]] = None) -> Optional[Column]:
        columns = self.columns() if columns is None else columns
        return next((column for column in columns if column.is_key), None)

    def key_field(self, columns: Optional[Iterable[Column]] = None) -> str:
        column = self.key_column(columns)
        return field_path(column.name) if column is not None else "pk"

    def _scoped(self, key: str) -> str:
        return f"{self.scope}_{key}" if self.scope else key

    def config(self, columns: Optional[Iterable[Column]] = None) -> dict[str, str]:
        column = self.key_column(columns)
        settings = self.settings
        return {
            "table": self.identifier(),
            "delimiter": settings.delimiter,
            "sort": self._scoped(settings.sort_key),
            "search": self._scoped(settings.search_key),
            "match": self._scoped(settings.match_key),
            "records": self._scoped(settings.records_key),
            "columns": self._scoped(settings.columns_key),
            "page": self._scoped(settings.page_key),
            "cursor": self._scoped(settings.cursor_key),
            "record": column.name if column is not None else settings.record_key,
        }

    def action_endpoint(self) -> str:
        if self.endpoint:
            return self.endpoint
        try:
            return reverse("tablerefine:action")
        except NoReverseMatch:
            return self.settings.action_endpoint

    def per_page_options(self) -> list[int]:
        if isinstance(self.pagination, int):
            return [self.pagination]
        if isinstance(self.pagination, (list, tuple)) and self.pagination:
            return [int(value) for value in self.pagination]
        return list(self.settings.per_page)

    def _per_page(self, raw: Any, options: list[int]) -> int:
        default = self.default_pagination or self.settings.default_per_page
        if default not in options:
            default = options[0]
        try:
            requested = int(raw)
        except (TypeError, ValueError):
            return default
        return requested if requested in options else default

    def _check_keys(self, config: dict[str, str], filters: Iterable[Filter]) -> None:
        reserved = {config[key] for key in ("sort", "search", "match", "records", "columns", "page", "cursor")}
        clashes = sorted(item.name for item in filters if item.name in reserved)
        if clashes:
            raise ConfigurationError(
                f"Filter names {clashes} collide with wire keys of table '{self.identifier()}'",
                table=self.identifier(),
            )

    def _check_defaults(self, actions: Iterable[BaseAction]) -> None:
        defaults = [action.name for action in actions if isinstance(action, InlineAction) and action.is_default]
        if len(defaults) > 1:
            raise ConfigurationError(
                f"Table '{self.identifier()}' declares more than one default inline action: {defaults}",
                table=self.identifier(),
            )

    # ------------------------------------------------------------------ #
    # Snapshot
    # ------------------------------------------------------------------ #
    def build(self, request: Optional[HttpRequest] = None) -> dict[str, Any]:
        request = request or self.request
        if request is None:
            return self.build_from({})
        return self.build_from(request.GET, request.path)

    def build_from(self, params: Any, path: str = "") -> dict[str, Any]:
        params = {key: params.get(key) for key in params}
        columns = self.columns()
        filters = self.filters()
        config = self.config(columns)
        self._check_keys(config, filters)
        actions = self.actions()
        self._check_defaults(actions)
        delimiter = config["delimiter"]

        queryset = self.for_()

        searches = self.searches() + [column.search for column in columns if column.search is not None]
        term = sanitize_search(params.get(config["search"]))
        queryset = self._apply_search(queryset, searches, term, params.get(config["match"]), delimiter)

        for item in filters:
            queryset, _ = item.refine(queryset, params.get(item.name), delimiter)

        sorts = self.sorts() + [column.sort for column in columns if column.sort is not None]
        queryset = self._apply_sort(queryset, sorts, params.get(config["sort"]))
        queryset = self.after(queryset)
        if not queryset.ordered:
            queryset = queryset.order_by(self.key_field(columns))

        shape = self.paginator or self.settings.paginator
        options = self.per_page_options()
        per_page = self._per_page(params.get(config["records"]), options)

        def link(updates: dict[str, Any]) -> str:
            query = urlencode(merge_params(params, updates))
            return f"{path}?{query}" if query else path or "?"

        page = paginate(
            queryset,
            shape,
            per_page=per_page,
            params=params,
            page_key=config["page"],
            cursor_key=config["cursor"],
            link=link,
        )

        active = self._active_columns(columns, params.get(config["columns"]), delimiter)
        inline = [action for action in actions if isinstance(action, InlineAction)]
        key_column = self.key_column(columns)

        logger.debug(
            "Built table '%s' with %d record(s) on a %s paginator",
            self.identifier(),
            len(page.records),
            shape,
        )
        return {
            "id": self.identifier(),
            "records": [
                self._serialize_record(instance, columns, active, inline, key_column, config["record"])
                for instance in page.records
            ],
            "columns": [column.serialize(active=column.name in active) for column in columns],
            "sorts": [sort.serialize() for sort in sorts],
            "filters": [item.serialize() for item in filters],
            "searches": [item.serialize() for item in searches],
            "search": term,
            "actions": {
                "bulk": [a.serialize() for a in actions if isinstance(a, BulkAction) and a.is_allowed()],
                "page": [a.serialize() for a in actions if isinstance(a, PageAction) and a.is_allowed()],
                "hasInline": bool(inline),
            },
            "paginator": page.paginator,
            "recordsPerPage": []
            if shape == "collection"
            else [{"value": value, "active": value == per_page} for value in options],
            "config": config,
            "endpoint": self.action_endpoint(),
            "toggleable": bool(self.toggle),
            "meta": self.meta(),
        }

    def _apply_search(
        self,
        queryset: QuerySet,
        searches: list[Search],
        term: Optional[str],
        match: Any,
        delimiter: str,
    ) -> QuerySet:
        names = {search.name for search in searches}
        matches = [name for name in split_values(match, delimiter) if name in names]
        for search in searches:
            search.active = search.name in matches if matches else bool(term)

        if not term or not searches:
            return queryset
        matchers = [search for search in searches if not matches or search.name in matches]
        return queryset.filter(reduce(or_, (search.q(term) for search in matchers)))

    def _apply_sort(self, queryset: QuerySet, sorts: list[Sort], token: Optional[str]) -> QuerySet:
        applied = False
        for sort in sorts:
            if applied:
                sort.active = False
                continue
            queryset, applied = sort.refine(queryset, token)

        if applied:
            return queryset
        default = next((sort for sort in sorts if sort.is_default), None)
        if default is not None:
            return queryset.order_by(default.ordering())
        return queryset

    def _active_columns(self, columns: list[Column], requested: Any, delimiter: str) -> set[str]:
        wanted = split_values(requested, delimiter) if self.toggle else []
        if not wanted:
            return {column.name for column in columns if column.active_by_default}
        return {
            column.name
            for column in columns
            if not column.is_hidden and (column.name in wanted or not column.toggleable)
        }

    def _serialize_record(
        self,
        instance: Any,
        columns: list[Column],
        active: set[str],
        inline: list[InlineAction],
        key_column: Optional[Column],
        record_key: str,
    ) -> dict[str, Any]:
        row = {
            column.name: column.value(instance)
            for column in columns
            if column.is_key or column.name in active
        }
        row[record_key] = key_column.resolve(instance) if key_column is not None else instance.pk
        row["actions"] = [action.serialize(instance) for action in inline if action.is_allowed(instance)]
        return row

    # ------------------------------------------------------------------ #
    # Action endpoint
    # ------------------------------------------------------------------ #
    def find_action(self, action_type: str, name: str) -> BaseAction:
        action = next(
            (item for item in self.actions() if item.type == action_type and item.name == name),
            None,
        )
        if action is None or action.handler is None:
            raise ActionNotFoundError(
                f"Action '{name}' of type '{action_type}' does not exist on table '{self.identifier()}'",
                table=self.identifier(),
                action_name=name,
                action_type=action_type,
            )
        return action

    def selection(self, payload: dict[str, Any]) -> QuerySet:
        lookup = f"{self.key_field()}__in"
        queryset = self.for_()
        if payload.get("all"):
            return queryset.exclude(**{lookup: payload.get("except") or []})
        return queryset.filter(**{lookup: payload.get("only") or []})

    def handle_action(self, payload: dict[str, Any]) -> Any:
        """Resolve the action named by ``payload`` and run its handler."""
        action_type = payload.get("type")
        name = payload.get("name")
        action = self.find_action(action_type, name)
        table_id = self.identifier()

        if action_type == INLINE:
            try:
                record = self.for_().filter(**{self.key_field(): payload.get("id")}).first()
            except (ValueError, ValidationError):
                record = None
            if record is None:
                raise RecordNotFoundError(
                    f"Record '{payload.get('id')}' does not exist on table '{table_id}'", table=table_id
                )
            if not action.is_allowed(record):
                raise ActionNotAllowedError(
                    f"Action '{name}' is not allowed for this record", table=table_id, action_name=name
                )
            logger.info("Running inline action '%s' on table '%s'", name, table_id)
            return action.handler(record)

        if not action.is_allowed():
            raise ActionNotAllowedError(f"Action '{name}' is not allowed", table=table_id, action_name=name)

        if action_type == BULK:
            queryset = self.selection(payload)
            logger.info("Running bulk action '%s' on table '%s'", name, table_id)
            return action.handler(queryset)

        logger.info("Running page action '%s' on table '%s'", name, table_id)
        return action.handler()
