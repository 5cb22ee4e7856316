"""
Sort, filter and search state for one table.

The state is derived from the current snapshot and re-derived whenever a
new snapshot arrives. Applying a refiner normalizes the value and asks
for a reload carrying only that parameter; every other parameter keeps
whatever the current location already holds.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..config import TableSettings, get_table_settings
from ..types import Filter, Search, Sort, TableSnapshot
from .debounce import Debouncer
from .normalizer import normalize, split_values, toggle_value

logger = logging.getLogger(__name__)

Reload = Callable[..., None]


class Binding:
    """Debounced two-way binding between an input and one refiner."""

    def __init__(
        self,
        getter: Callable[[], Any],
        setter: Callable[[Any], Any],
        clearer: Callable[[], Any],
    ):
        self._getter = getter
        self._setter = setter
        self._clearer = clearer

    @property
    def value(self) -> Any:
        return self._getter()

    @value.setter
    def value(self, value: Any) -> None:
        self._setter(value)

    def update(self, value: Any) -> None:
        self._setter(value)

    def clear(self) -> None:
        self._clearer()


class BoundRefiner:
    def __init__(self, refiner: Any, refine: "Refine"):
        self._refiner = refiner
        self._refine = refine

    def __getattr__(self, name: str) -> Any:
        return getattr(self._refiner, name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._refiner!r})"

    @property
    def refiner(self) -> Any:
        return self._refiner


class BoundSort(BoundRefiner):
    def apply(self, **options: Any) -> bool:
        return self._refine.apply_sort(self._refiner.name, self._refiner.direction, **options)

    def clear(self, **options: Any) -> bool:
        return self._refine.clear_sort(**options)


class BoundFilter(BoundRefiner):
    def apply(self, value: Any, **options: Any) -> bool:
        return self._refine.apply_filter(self._refiner.name, value, **options)

    def clear(self, **options: Any) -> bool:
        return self._refine.clear_filter(self._refiner.name, **options)

    def bind(self) -> Optional[Binding]:
        return self._refine.bind_filter(self._refiner.name)

    @property
    def current(self) -> Any:
        return self._refine.filter_value(self._refiner.name)


class BoundSearch(BoundRefiner):
    def apply(self, **options: Any) -> bool:
        return self._refine.apply_match(self._refiner.name, **options)

    def clear(self, **options: Any) -> bool:
        return self._refine.clear_search(**options)


class Refine:
    def __init__(
        self,
        snapshot: TableSnapshot,
        reload: Reload,
        *,
        settings: Optional[TableSettings] = None,
        debouncer: Optional[Debouncer] = None,
    ):
        self._reload = reload
        self.settings = settings or get_table_settings()
        self.debouncer = debouncer or Debouncer()
        self._filter_values: dict[str, Any] = {}
        self._search: Optional[str] = None
        self._matches: list[str] = []
        self.snapshot = snapshot
        self.update(snapshot)

    def update(self, snapshot: TableSnapshot) -> None:
        """
        Adopt a new snapshot.

        Local values with a debounce still pending are kept, so an input the
        user is typing into does not jump back to the server's older value.
        """
        self.snapshot = snapshot
        for item in snapshot.filters:
            if self.debouncer.pending(self._filter_key(item.name)):
                continue
            self._filter_values[item.name] = (
                split_values(item.value, self.delimiter) if item.multiple else item.value
            )
        for name in list(self._filter_values):
            if self.get_filter(name) is None:
                del self._filter_values[name]

        if not self.debouncer.pending(self._search_key()):
            self._search = snapshot.search
        if not self.debouncer.pending(self._match_key()):
            self._matches = [search.name for search in snapshot.searches if search.active]

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    @property
    def config(self):
        return self.snapshot.config

    @property
    def delimiter(self) -> str:
        return self.snapshot.config.delimiter

    def get_sort(self, name: str, direction: Optional[str] = None) -> Optional[Sort]:
        candidates = [sort for sort in self.snapshot.sorts if sort.name == name]
        if direction is not None:
            candidates = [sort for sort in candidates if sort.direction == direction]
        if not candidates:
            return None
        return next((sort for sort in candidates if sort.active), candidates[0])

    def get_filter(self, name: str) -> Optional[Filter]:
        return next((item for item in self.snapshot.filters if item.name == name), None)

    def get_search(self, name: str) -> Optional[Search]:
        return next((item for item in self.snapshot.searches if item.name == name), None)

    def current_sort(self) -> Optional[Sort]:
        return next((sort for sort in self.snapshot.sorts if sort.active), None)

    def current_filters(self) -> list[Filter]:
        return [item for item in self.snapshot.filters if item.active]

    def current_searches(self) -> list[Search]:
        return [item for item in self.snapshot.searches if item.active]

    def is_sorting(self, name: Optional[str] = None) -> bool:
        current = self.current_sort()
        if name:
            return current is not None and current.name == name
        return current is not None

    def is_filtering(self, name: Optional[str] = None) -> bool:
        if name:
            return any(item.name == name for item in self.current_filters())
        return bool(self.current_filters())

    def is_searching(self, name: Optional[str] = None) -> bool:
        if name:
            return any(item.name == name for item in self.current_searches())
        return bool(self.snapshot.search)

    def is_matching(self, name: str) -> bool:
        return name in self._matches

    @property
    def sorts(self) -> list[BoundSort]:
        return [BoundSort(sort, self) for sort in self.snapshot.sorts]

    @property
    def filters(self) -> list[BoundFilter]:
        return [BoundFilter(item, self) for item in self.snapshot.filters]

    @property
    def searches(self) -> list[BoundSearch]:
        return [BoundSearch(item, self) for item in self.snapshot.searches]

    def filter_value(self, name: str) -> Any:
        return self._filter_values.get(name)

    @property
    def search_value(self) -> Optional[str]:
        return self._search

    # ------------------------------------------------------------------ #
    # Sorts
    # ------------------------------------------------------------------ #
    def apply_sort(self, name: str, direction: Optional[str] = None, *, debounce: int = 0, **options: Any) -> bool:
        sort = self.get_sort(name, direction)
        if sort is None:
            logger.warning("Sort [%s] does not exist.", name if direction is None else f"{name}:{direction}")
            return False
        key = self.config.sort
        self._schedule(key, debounce, {key: sort.next}, options)
        return True

    def clear_sort(self, *, debounce: int = 0, **options: Any) -> bool:
        key = self.config.sort
        self._schedule(key, debounce, {key: None}, options)
        return True

    # ------------------------------------------------------------------ #
    # Filters
    # ------------------------------------------------------------------ #
    def apply_filter(self, name: str, value: Any, *, debounce: Optional[int] = None, **options: Any) -> bool:
        item = self.get_filter(name)
        if item is None:
            logger.warning("Filter [%s] does not exist.", name)
            return False
        if item.multiple:
            tokens = toggle_value(self._filter_values.get(item.name), value, self.delimiter)
            self._filter_values[item.name] = tokens
            wire_value = normalize(tokens, delimiter=self.delimiter)
        else:
            wire_value = normalize(value, delimiter=self.delimiter)
            self._filter_values[item.name] = wire_value
        return self._send_filter(item, wire_value, debounce, options)

    def clear_filter(self, name: str, *, debounce: int = 0, **options: Any) -> bool:
        item = self.get_filter(name)
        if item is None:
            logger.warning("Filter [%s] does not exist.", name)
            return False
        self._filter_values[item.name] = [] if item.multiple else None
        return self._send_filter(item, None, debounce, options)

    def _send_filter(self, item: Filter, wire_value: Any, debounce: Optional[int], options: dict[str, Any]) -> bool:
        delay = self.settings.filter_debounce_ms if debounce is None else debounce
        self._schedule(self._filter_key(item.name), delay, {item.name: wire_value}, options)
        return True

    def bind_filter(self, name: str, *, debounce: Optional[int] = None) -> Optional[Binding]:
        item = self.get_filter(name)
        if item is None:
            logger.warning("Filter [%s] does not exist.", name)
            return None
        if item.multiple:
            # Inputs bound to a multi-valued filter hold the whole value set.
            def setter(value: Any) -> bool:
                tokens = split_values(value, self.delimiter)
                self._filter_values[name] = tokens
                return self._send_filter(item, normalize(tokens, delimiter=self.delimiter), debounce, {})
        else:
            def setter(value: Any) -> bool:
                return self.apply_filter(name, value, debounce=debounce)

        return Binding(
            getter=lambda: self.filter_value(name),
            setter=setter,
            clearer=lambda: self.clear_filter(name),
        )

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #
    def apply_search(self, value: Any, *, debounce: Optional[int] = None, **options: Any) -> bool:
        wire_value = normalize(value, delimiter=self.delimiter)
        if wire_value is not None:
            wire_value = str(wire_value)
        self._search = wire_value
        key = self.config.search
        delay = self.settings.search_debounce_ms if debounce is None else debounce
        self._schedule(self._search_key(), delay, {key: wire_value}, options)
        return True

    def clear_search(self, *, debounce: int = 0, **options: Any) -> bool:
        return self.apply_search(None, debounce=debounce, **options)

    def apply_match(self, name: str, *, debounce: int = 0, **options: Any) -> bool:
        if self.get_search(name) is None:
            logger.warning("Search [%s] does not exist.", name)
            return False
        self._matches = toggle_value(self._matches, name, self.delimiter)
        key = self.config.match
        self._schedule(
            self._match_key(),
            debounce,
            {key: normalize(self._matches, delimiter=self.delimiter)},
            options,
        )
        return True

    def bind_search(self, *, debounce: Optional[int] = None) -> Binding:
        return Binding(
            getter=lambda: self.search_value,
            setter=lambda value: self.apply_search(value, debounce=debounce),
            clearer=self.clear_search,
        )

    # ------------------------------------------------------------------ #
    # Reset
    # ------------------------------------------------------------------ #
    def reset(self, **options: Any) -> bool:
        """Clear every sort, filter and search parameter in one request."""
        delta: dict[str, Any] = {
            self.config.sort: None,
            self.config.search: None,
            self.config.match: None,
        }
        for item in self.snapshot.filters:
            delta[item.name] = None
            self.debouncer.cancel(self._filter_key(item.name))
            self._filter_values[item.name] = [] if item.multiple else None
        for key in (self.config.sort, self._search_key(), self._match_key()):
            self.debouncer.cancel(key)
        self._search = None
        self._matches = []
        self._reload(delta, **options)
        return True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _filter_key(self, name: str) -> str:
        return f"filter:{name}"

    def _search_key(self) -> str:
        return f"search:{self.config.search}"

    def _match_key(self) -> str:
        return f"match:{self.config.match}"

    def _schedule(self, key: str, delay: int, delta: dict[str, Any], options: dict[str, Any]) -> None:
        self.debouncer.call(key, delay, self._reload, delta, **options)
