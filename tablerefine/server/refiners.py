"""
Server-side sorts, filters and searches.

Each refiner reads its own wire parameter, narrows or orders the queryset,
and serializes itself with an ``active`` flag describing whether it
affected the result.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Iterable, Optional

from django.db.models import Q, QuerySet
from django.utils.dateparse import parse_date
from django.utils.text import capfirst

from ..client.normalizer import clean_text, split_values, stringify
from ..types import ASC, DESC

logger = logging.getLogger(__name__)


def labelize(name: str) -> str:
    return capfirst(name.replace(".", " ").replace("_", " "))


def field_path(name: str) -> str:
    return name.replace(".", "__")


class Refiner:
    type = "refiner"

    def __init__(self, name: str, label: Optional[str] = None, field: Optional[str] = None):
        self.name = name
        self.label = label or labelize(name)
        self.field = field or field_path(name)
        self.active = False
        self.meta: dict[str, Any] = {}

    @classmethod
    def make(cls, name: str, label: Optional[str] = None, **kwargs: Any):
        return cls(name, label, **kwargs)

    def with_meta(self, **meta: Any):
        self.meta.update(meta)
        return self

    def serialize(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "active": self.active,
            "meta": dict(self.meta),
        }


class Sort(Refiner):
    """
    Ordering by one field.

    A sort without a fixed direction cycles none, asc, desc, none; ``next``
    carries the token that advances it. A fixed-direction sort toggles
    between inactive and its direction.
    """

    type = "sort"

    def __init__(self, name: str, label: Optional[str] = None, field: Optional[str] = None):
        super().__init__(name, label, field)
        self.fixed: Optional[str] = None
        self.direction: Optional[str] = None
        self.is_default = False

    def asc(self) -> "Sort":
        self.fixed = ASC
        return self

    def desc(self) -> "Sort":
        self.fixed = DESC
        return self

    def default(self) -> "Sort":
        self.is_default = True
        return self

    def token(self, direction: str) -> str:
        return self.name if direction == ASC else f"-{self.name}"

    def resolve(self, token: Optional[str]) -> Optional[str]:
        if token == self.name:
            return ASC
        if token == f"-{self.name}":
            return DESC
        return None

    def ordering(self, direction: Optional[str] = None) -> str:
        direction = direction or self.fixed or ASC
        return f"-{self.field}" if direction == DESC else self.field

    def refine(self, queryset: QuerySet, token: Optional[str]) -> tuple[QuerySet, bool]:
        direction = self.resolve(token)
        if direction is None or (self.fixed is not None and direction != self.fixed):
            self.active = False
            self.direction = None
            return queryset, False
        self.active = True
        self.direction = direction
        return queryset.order_by(self.ordering(direction)), True

    def next_token(self) -> Optional[str]:
        if self.fixed is not None:
            return None if self.active else self.token(self.fixed)
        if not self.active:
            return self.token(ASC)
        if self.direction == ASC:
            return self.token(DESC)
        return None

    def serialize(self) -> dict[str, Any]:
        data = super().serialize()
        data["direction"] = self.fixed or (self.direction if self.active else None)
        data["next"] = self.next_token()
        return data


class Filter(Refiner):
    type = "filter"
    lookup = "exact"

    def __init__(
        self,
        name: str,
        label: Optional[str] = None,
        field: Optional[str] = None,
        lookup: Optional[str] = None,
    ):
        super().__init__(name, label, field)
        if lookup:
            self.lookup = lookup
        self.value: Any = None

    def parse(self, raw: Any, delimiter: str = ",") -> Any:
        if raw is None:
            return None
        value = clean_text(stringify(raw))
        return value or None

    def apply(self, queryset: QuerySet, value: Any) -> QuerySet:
        return queryset.filter(**{f"{self.field}__{self.lookup}": value})

    def refine(self, queryset: QuerySet, raw: Any, delimiter: str = ",") -> tuple[QuerySet, bool]:
        value = self.parse(raw, delimiter)
        if value is None or value == []:
            self.active = False
            self.value = None
            return queryset, False
        self.active = True
        self.value = value
        return self.apply(queryset, value), True

    def serialize_value(self) -> Any:
        return self.value

    def serialize(self) -> dict[str, Any]:
        data = super().serialize()
        data["value"] = self.serialize_value()
        return data


class SetFilter(Filter):
    type = "set"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.is_multiple = False
        self.choices: list[tuple[Any, str]] = []

    def options(self, options: Any) -> "SetFilter":
        """Accept a mapping of value to label, pairs, or bare values."""
        if hasattr(options, "items"):
            pairs = list(options.items())
        else:
            pairs = [
                tuple(item) if isinstance(item, (list, tuple)) else (item, item)
                for item in options
            ]
        self.choices = [(value, str(label)) for value, label in pairs]
        return self

    def multiple(self, multiple: bool = True) -> "SetFilter":
        self.is_multiple = multiple
        return self

    def _known(self, tokens: Iterable[str]) -> list[str]:
        if not self.choices:
            return list(tokens)
        allowed = {stringify(value) for value, _ in self.choices}
        return [token for token in tokens if token in allowed]

    def parse(self, raw: Any, delimiter: str = ",") -> Any:
        if self.is_multiple:
            return self._known(split_values(raw, delimiter)) or None
        value = super().parse(raw, delimiter)
        if value is None:
            return None
        known = self._known([value])
        return known[0] if known else None

    def apply(self, queryset: QuerySet, value: Any) -> QuerySet:
        if self.is_multiple:
            return queryset.filter(**{f"{self.field}__in": value})
        return super().apply(queryset, value)

    def serialize_value(self) -> Any:
        if self.is_multiple:
            return list(self.value or [])
        return self.value

    def serialize(self) -> dict[str, Any]:
        data = super().serialize()
        selected = set(self.value or []) if self.is_multiple else {self.value}
        data["multiple"] = self.is_multiple
        data["options"] = [
            {
                "label": label,
                "value": value,
                "active": self.active and stringify(value) in selected,
            }
            for value, label in self.choices
        ]
        return data


class DateFilter(Filter):
    type = "date"

    def parse(self, raw: Any, delimiter: str = ",") -> Optional[datetime.date]:
        value = super().parse(raw, delimiter)
        if value is None:
            return None
        try:
            return parse_date(value)
        except ValueError:
            logger.debug("Ignoring invalid date '%s' for filter '%s'", value, self.name)
            return None

    def serialize_value(self) -> Optional[str]:
        return self.value.isoformat() if self.value else None


class BooleanFilter(Filter):
    type = "boolean"

    TRUE_VALUES = {"1", "true", "yes", "on"}
    FALSE_VALUES = {"0", "false", "no", "off"}

    def parse(self, raw: Any, delimiter: str = ",") -> Optional[bool]:
        value = super().parse(raw, delimiter)
        if value is None:
            return None
        value = value.lower()
        if value in self.TRUE_VALUES:
            return True
        if value in self.FALSE_VALUES:
            return False
        return None


class Search(Refiner):
    """Case-insensitive containment match on one field."""

    type = "search"

    def q(self, term: str) -> Q:
        return Q(**{f"{self.field}__icontains": term})
