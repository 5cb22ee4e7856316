"""Table snapshot value objects.

A snapshot is the complete, server-computed description of a table's
current state. It is rebuilt from the wire dict on every response and is
never mutated in place; the client engine derives its view from it.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from django.utils.dateparse import parse_date

Identifier = Union[str, int]

ASC = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)

INLINE = "inline"
BULK = "bulk"
PAGE = "page"
ACTION_TYPES = (INLINE, BULK, PAGE)


@dataclass(frozen=True)
class Refiner:
    """A named, server-defined axis of query refinement."""

    name: str
    label: str
    type: str
    active: bool = False
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Sort(Refiner):
    direction: Optional[str] = None
    next: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sort":
        direction = data.get("direction")
        return cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=str(data.get("type") or "sort"),
            active=bool(data.get("active", False)),
            meta=dict(data.get("meta") or {}),
            direction=direction if direction in DIRECTIONS else None,
            next=data.get("next"),
        )


@dataclass(frozen=True)
class Option:
    label: str
    value: Any
    active: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Option":
        return cls(
            label=str(data.get("label", data.get("value"))),
            value=data.get("value"),
            active=bool(data.get("active", False)),
        )


@dataclass(frozen=True)
class Filter(Refiner):
    value: Any = None
    multiple: bool = False
    options: tuple[Option, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Filter":
        filter_type = str(data.get("type") or "filter")
        filter_cls = _FILTER_TYPES.get(filter_type, Filter)
        return filter_cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=filter_type,
            active=bool(data.get("active", False)),
            meta=dict(data.get("meta") or {}),
            value=filter_cls.coerce(data.get("value")),
            multiple=bool(data.get("multiple", False)),
            options=tuple(Option.from_dict(opt) for opt in data.get("options") or []),
        )

    @staticmethod
    def coerce(value: Any) -> Any:
        return value


@dataclass(frozen=True)
class SetFilter(Filter):
    @staticmethod
    def coerce(value: Any) -> Any:
        if isinstance(value, tuple):
            return list(value)
        return value

    def active_options(self) -> list[Option]:
        return [option for option in self.options if option.active]


@dataclass(frozen=True)
class DateFilter(Filter):
    @staticmethod
    def coerce(value: Any) -> Optional[datetime.date]:
        if isinstance(value, datetime.date) or value is None:
            return value
        try:
            return parse_date(str(value))
        except ValueError:
            return None


@dataclass(frozen=True)
class BooleanFilter(Filter):
    @staticmethod
    def coerce(value: Any) -> Optional[bool]:
        if value is None or isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}


_FILTER_TYPES: dict[str, type[Filter]] = {
    "filter": Filter,
    "set": SetFilter,
    "date": DateFilter,
    "boolean": BooleanFilter,
}


@dataclass(frozen=True)
class Search(Refiner):
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Search":
        return cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=str(data.get("type") or "search"),
            active=bool(data.get("active", False)),
            meta=dict(data.get("meta") or {}),
        )


@dataclass(frozen=True)
class ColumnSort:
    """Sort trigger attached to a column heading."""

    active: bool = False
    direction: Optional[str] = None
    next: Optional[str] = None


@dataclass(frozen=True)
class Column:
    name: str
    label: str
    type: str = "column"
    hidden: bool = False
    active: bool = True
    toggleable: bool = True
    sort: Optional[ColumnSort] = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def visible(self) -> bool:
        return self.active and not self.hidden

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Column":
        sort = data.get("sort")
        return cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=str(data.get("type") or "column"),
            hidden=bool(data.get("hidden", False)),
            active=bool(data.get("active", True)),
            toggleable=bool(data.get("toggleable", True)),
            sort=ColumnSort(
                active=bool(sort.get("active", False)),
                direction=sort.get("direction") if sort.get("direction") in DIRECTIONS else None,
                next=sort.get("next"),
            )
            if isinstance(sort, dict)
            else None,
            meta=dict(data.get("meta") or {}),
        )


@dataclass(frozen=True)
class Route:
    href: str
    method: str = "get"


@dataclass(frozen=True)
class Confirm:
    title: str
    description: str = ""


@dataclass(frozen=True)
class Action:
    """
    A record, bulk or page level action.

    ``route`` makes it a navigation, ``dispatch`` makes it a server-side
    named action posted to the table endpoint, and neither makes it a
    client-local callback looked up by ``name``.
    """

    name: str
    label: str
    type: str
    route: Optional[Route] = None
    dispatch: bool = False
    confirm: Optional[Confirm] = None
    default: bool = False
    keep_selected: bool = False
    icon: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], action_type: Optional[str] = None) -> "Action":
        route = data.get("route")
        confirm = data.get("confirm")
        return cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=str(data.get("type") or action_type or INLINE),
            route=Route(
                href=str(route["href"]), method=str(route.get("method") or "get").lower()
            )
            if isinstance(route, dict) and route.get("href")
            else None,
            dispatch=bool(data.get("dispatch", False)),
            confirm=Confirm(
                title=str(confirm.get("title") or ""),
                description=str(confirm.get("description") or ""),
            )
            if isinstance(confirm, dict)
            else None,
            default=bool(data.get("default", False)),
            keep_selected=bool(data.get("keepSelected", False)),
            icon=data.get("icon"),
            extra=dict(data.get("extra") or {}),
        )


@dataclass(frozen=True)
class PageLink:
    url: Optional[str]
    label: str
    active: bool = False


@dataclass(frozen=True)
class Paginator:
    """Collection shape: no position information, only emptiness."""

    type: str = "collection"
    empty: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Paginator":
        data = data or {}
        kind = str(data.get("type") or "collection")
        empty = bool(data.get("empty", True))
        if kind == "collection":
            return Paginator(type=kind, empty=empty)

        cursor_fields = {
            "prev_link": data.get("prevLink"),
            "next_link": data.get("nextLink"),
            "per_page": int(data.get("perPage") or 0),
        }
        if kind == "cursor":
            return CursorPaginator(type=kind, empty=empty, **cursor_fields)

        current_page = int(data.get("currentPage") or 1)
        if kind == "simple":
            return SimplePaginator(
                type=kind, empty=empty, current_page=current_page, **cursor_fields
            )

        return LengthAwarePaginator(
            type="length-aware",
            empty=empty,
            current_page=current_page,
            total=int(data.get("total") or 0),
            from_=data.get("from"),
            to=data.get("to"),
            first_link=data.get("firstLink"),
            last_link=data.get("lastLink"),
            last_page=int(data.get("lastPage") or 1),
            links=tuple(
                PageLink(
                    url=link.get("url"),
                    label=str(link.get("label", "")),
                    active=bool(link.get("active", False)),
                )
                for link in data.get("links") or []
            ),
            **cursor_fields,
        )


@dataclass(frozen=True)
class CursorPaginator(Paginator):
    prev_link: Optional[str] = None
    next_link: Optional[str] = None
    per_page: int = 0


@dataclass(frozen=True)
class SimplePaginator(CursorPaginator):
    current_page: int = 1


@dataclass(frozen=True)
class LengthAwarePaginator(SimplePaginator):
    total: int = 0
    from_: Optional[int] = None
    to: Optional[int] = None
    first_link: Optional[str] = None
    last_link: Optional[str] = None
    last_page: int = 1
    links: tuple[PageLink, ...] = ()


@dataclass(frozen=True)
class PerPage:
    value: int
    active: bool = False


@dataclass(frozen=True)
class TableConfig:
    """Wire key names for one table."""

    table: str
    delimiter: str = ","
    sort: str = "sort"
    search: str = "search"
    match: str = "match"
    records: str = "rows"
    columns: str = "columns"
    page: str = "page"
    cursor: str = "cursor"
    record: str = "id"

    @classmethod
    def from_dict(cls, data: dict[str, Any], table: str) -> "TableConfig":
        defaults = cls(table=table)
        values = {
            name: str(data.get(name) or getattr(defaults, name))
            for name in (
                "delimiter",
                "sort",
                "search",
                "match",
                "records",
                "columns",
                "page",
                "cursor",
                "record",
            )
        }
        return cls(table=str(data.get("table") or table), **values)


@dataclass(frozen=True)
class Record:
    key: Identifier
    values: dict[str, Any]
    actions: tuple[Action, ...] = ()

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    @property
    def default_action(self) -> Optional[Action]:
        return next((action for action in self.actions if action.default), None)


@dataclass(frozen=True)
class TableSnapshot:
    id: str
    records: tuple[Record, ...] = ()
    columns: tuple[Column, ...] = ()
    sorts: tuple[Sort, ...] = ()
    filters: tuple[Filter, ...] = ()
    searches: tuple[Search, ...] = ()
    search: Optional[str] = None
    bulk_actions: tuple[Action, ...] = ()
    page_actions: tuple[Action, ...] = ()
    has_inline: bool = False
    paginator: Paginator = field(default_factory=Paginator)
    records_per_page: tuple[PerPage, ...] = ()
    config: TableConfig = field(default_factory=lambda: TableConfig(table=""))
    endpoint: Optional[str] = None
    toggleable: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TableSnapshot":
        table_id = str(data.get("id") or "")
        config = TableConfig.from_dict(data.get("config") or {}, table_id)
        actions = data.get("actions") or {}
        return cls(
            id=table_id or config.table,
            records=tuple(
                _parse_record(record, config.record) for record in data.get("records") or []
            ),
            columns=tuple(Column.from_dict(column) for column in data.get("columns") or []),
            sorts=tuple(Sort.from_dict(sort) for sort in data.get("sorts") or []),
            filters=tuple(Filter.from_dict(item) for item in data.get("filters") or []),
            searches=tuple(Search.from_dict(item) for item in data.get("searches") or []),
            search=data.get("search"),
            bulk_actions=tuple(
                Action.from_dict(action, BULK) for action in actions.get("bulk") or []
            ),
            page_actions=tuple(
                Action.from_dict(action, PAGE) for action in actions.get("page") or []
            ),
            has_inline=bool(actions.get("hasInline", False)),
            paginator=Paginator.from_dict(data.get("paginator")),
            records_per_page=tuple(
                PerPage(value=int(item["value"]), active=bool(item.get("active", False)))
                for item in data.get("recordsPerPage") or []
            ),
            config=config,
            endpoint=data.get("endpoint"),
            toggleable=bool(data.get("toggleable", False)),
            meta=dict(data.get("meta") or {}),
        )


def _parse_record(data: dict[str, Any], key_field: str) -> Record:
    values = {name: value for name, value in data.items() if name != "actions"}
    return Record(
        key=values.get(key_field),
        values=values,
        actions=tuple(Action.from_dict(action, INLINE) for action in data.get("actions") or []),
    )
