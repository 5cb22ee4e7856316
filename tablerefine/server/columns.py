"""Column definitions for server-built tables."""

from __future__ import annotations

import datetime
from typing import Any, Callable, Optional

from .refiners import Search, Sort, field_path, labelize

ALWAYS = "always"
SOMETIMES = "sometimes"


class Column:
    type = "column"

    def __init__(self, name: str, label: Optional[str] = None):
        self.name = name
        self.label = label or labelize(name)
        self.is_key = False
        self.is_hidden = False
        self.visibility: Optional[str] = None
        self.sort: Optional[Sort] = None
        self.search: Optional[Search] = None
        self.formatter: Optional[Callable[[Any], Any]] = None
        self.meta: dict[str, Any] = {}

    @classmethod
    def make(cls, name: str, label: Optional[str] = None) -> "Column":
        return cls(name, label)

    def key(self) -> "Column":
        self.is_key = True
        return self

    def hidden(self) -> "Column":
        self.is_hidden = True
        return self

    def always(self) -> "Column":
        """Always shown; the user cannot hide it."""
        self.visibility = ALWAYS
        return self

    def sometimes(self) -> "Column":
        """Toggleable, hidden until the user asks for it."""
        self.visibility = SOMETIMES
        return self

    def sortable(self, field: Optional[str] = None) -> "Column":
        self.sort = Sort(self.name, self.label, field or field_path(self.name))
        return self

    def searchable(self, field: Optional[str] = None) -> "Column":
        self.search = Search(self.name, self.label, field or field_path(self.name))
        return self

    def formatted(self, formatter: Callable[[Any], Any]) -> "Column":
        self.formatter = formatter
        return self

    def with_meta(self, **meta: Any) -> "Column":
        self.meta.update(meta)
        return self

    @property
    def toggleable(self) -> bool:
        return not self.is_hidden and self.visibility != ALWAYS

    @property
    def active_by_default(self) -> bool:
        return not self.is_hidden and self.visibility != SOMETIMES

    def resolve(self, instance: Any) -> Any:
        value = instance
        for part in self.name.split("."):
            if value is None:
                return None
            value = getattr(value, part, None)
        return value

    def format(self, value: Any) -> Any:
        return value

    def value(self, instance: Any) -> Any:
        value = self.resolve(instance)
        if self.formatter is not None:
            return self.formatter(value)
        if value is None:
            return None
        return self.format(value)

    def serialize(self, *, active: bool) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "hidden": self.is_hidden,
            "active": active and not self.is_hidden,
            "toggleable": self.toggleable,
            "meta": dict(self.meta),
        }
        if self.sort is not None:
            data["sort"] = {
                "active": self.sort.active,
                "direction": self.sort.direction if self.sort.active else None,
                "next": self.sort.next_token(),
            }
        return data


class KeyColumn(Column):
    type = "key"

    def __init__(self, name: str = "id", label: Optional[str] = None):
        super().__init__(name, label)
        self.is_key = True
        self.is_hidden = True


class TextColumn(Column):
    type = "text"

    def format(self, value: Any) -> str:
        return str(value)


class NumberColumn(Column):
    type = "number"

    def format(self, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return value
        return float(value)


class DateColumn(Column):
    type = "date"

    def __init__(self, name: str, label: Optional[str] = None, date_format: Optional[str] = None):
        super().__init__(name, label)
        self.date_format = date_format

    def format(self, value: Any) -> Any:
        if not isinstance(value, (datetime.date, datetime.datetime)):
            return value
        if self.date_format:
            return value.strftime(self.date_format)
        return value.isoformat()


class BooleanColumn(Column):
    type = "boolean"

    def format(self, value: Any) -> bool:
        return bool(value)
