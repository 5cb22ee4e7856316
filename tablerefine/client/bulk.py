"""
Bulk record selection.

Selection is tracked as ``all``/``only``/``except`` rather than a list of
ids so that "every record except a few" stays small no matter how many
records the table holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


@dataclass
class BulkSelection(Generic[T]):
    all: bool = False
    only: set[T] = field(default_factory=set)
    exclude: set[T] = field(default_factory=set)

    def payload(self) -> dict[str, Any]:
        return {
            "all": self.all,
            "only": sorted(self.only, key=str),
            "except": sorted(self.exclude, key=str),
        }


class Bulk(Generic[T]):
    """Tri-state selection over records that may never all be loaded."""

    def __init__(self) -> None:
        self.selection: BulkSelection[T] = BulkSelection()

    def select_all(self) -> None:
        self.selection.all = True
        self.selection.only.clear()
        self.selection.exclude.clear()

    def deselect_all(self) -> None:
        self.selection.all = False
        self.selection.only.clear()
        self.selection.exclude.clear()

    def select(self, *keys: T) -> None:
        for key in keys:
            self.selection.exclude.discard(key)
            self.selection.only.add(key)

    def deselect(self, *keys: T) -> None:
        for key in keys:
            self.selection.only.discard(key)
            # Exclusions only mean something relative to "all".
            if self.selection.all:
                self.selection.exclude.add(key)

    def toggle(self, key: T, force: Optional[bool] = None) -> None:
        if force is None:
            force = not self.selected(key)
        if force:
            self.select(key)
        else:
            self.deselect(key)

    def selected(self, key: T) -> bool:
        if self.selection.all:
            return key not in self.selection.exclude
        return key in self.selection.only

    def select_page(self, keys: Iterable[T]) -> None:
        self.select(*keys)

    def deselect_page(self, keys: Iterable[T]) -> None:
        self.deselect(*keys)

    def is_page_selected(self, keys: Iterable[T]) -> bool:
        keys = list(keys)
        return bool(keys) and all(self.selected(key) for key in keys)

    @property
    def all_selected(self) -> bool:
        return self.selection.all and not self.selection.exclude

    @property
    def has_selected(self) -> bool:
        return self.selection.all or bool(self.selection.only)

    def payload(self) -> dict[str, Any]:
        return self.selection.payload()

    def bind(self, key: T) -> dict[str, Any]:
        """Checkbox binding for one record."""

        def on_change(checked: bool) -> None:
            self.toggle(key, bool(checked))

        bound: dict[str, Any] = {
            "checked": self.selected(key),
            "value": key,
            "on_change": on_change,
        }
        return bound

