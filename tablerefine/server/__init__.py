"""
Server-side snapshot builder.

Declare a ``Table`` subclass with columns, refiners and actions, serve its
snapshot with ``TableView`` and mount ``tablerefine.server.urls`` for the
shared action endpoint.
"""

from .actions import BulkAction, InlineAction, PageAction
from .columns import (
    BooleanColumn,
    Column,
    DateColumn,
    KeyColumn,
    NumberColumn,
    TextColumn,
)
from .refiners import BooleanFilter, DateFilter, Filter, Search, SetFilter, Sort
from .registry import register_table, table_registry
from .table import Table

__all__ = [
    "BooleanColumn",
    "BooleanFilter",
    "BulkAction",
    "Column",
    "DateColumn",
    "DateFilter",
    "Filter",
    "InlineAction",
    "KeyColumn",
    "NumberColumn",
    "PageAction",
    "Search",
    "SetFilter",
    "Sort",
    "Table",
    "TextColumn",
    "register_table",
    "table_registry",
]
