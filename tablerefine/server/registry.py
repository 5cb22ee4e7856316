"""Lookup of table classes by id for the shared action endpoint."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..errors import ConfigurationError, TableNotFoundError

logger = logging.getLogger(__name__)


class TableRegistry:
    def __init__(self):
        self._tables: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, table_class: type, table_id: Optional[str] = None) -> type:
        """Register a table class; usable as a class decorator."""
        table_id = table_id or table_class.identifier()
        with self._lock:
            existing = self._tables.get(table_id)
            if existing is not None and existing is not table_class:
                raise ConfigurationError(
                    f"Table id '{table_id}' is already registered by {existing.__name__}",
                    table=table_id,
                )
            self._tables[table_id] = table_class
        logger.debug("Registered table '%s' (%s)", table_id, table_class.__name__)
        return table_class

    def unregister(self, table_id: str) -> None:
        with self._lock:
            self._tables.pop(table_id, None)

    def get(self, table_id: str) -> type:
        table_class = self._tables.get(table_id)
        if table_class is None:
            raise TableNotFoundError(f"Table '{table_id}' is not registered", table=table_id)
        return table_class

    def all(self) -> dict[str, type]:
        return dict(self._tables)

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()


table_registry = TableRegistry()


def register_table(table_class: type) -> type:
    return table_registry.register(table_class)
