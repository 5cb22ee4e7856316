"""
Table orchestrator.

Composes refinement, bulk selection and action dispatch over the current
snapshot, and adds column visibility, page sizing and paginator
navigation. The snapshot is replaced wholesale on every response; only
the bulk selection and pending debounce timers outlive it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from ..config import TableSettings, get_table_settings
from ..types import Action, Column, PerPage, Record, TableSnapshot
from . import paginator as paging
from .actions import ActionDispatcher, ActionKind, ActionOutcome, Confirmer, classify
from .bulk import Bulk
from .debounce import Debouncer
from .normalizer import normalize
from .refine import Refine
from .transport import SuccessCallback, Transport

logger = logging.getLogger(__name__)

SnapshotLike = Union[TableSnapshot, dict[str, Any]]


def as_snapshot(snapshot: SnapshotLike) -> TableSnapshot:
    if isinstance(snapshot, TableSnapshot):
        return snapshot
    return TableSnapshot.from_dict(snapshot)


class Table:
    def __init__(
        self,
        snapshot: SnapshotLike,
        transport: Transport,
        *,
        callbacks: Optional[dict[str, Callable[..., Any]]] = None,
        confirmer: Optional[Confirmer] = None,
        settings: Optional[TableSettings] = None,
        debouncer: Optional[Debouncer] = None,
        reload_on_dispatch: bool = True,
        on_update: Optional[Callable[[TableSnapshot], None]] = None,
    ):
        self.transport = transport
        self.settings = settings or get_table_settings()
        self.debouncer = debouncer or Debouncer()
        self.reload_on_dispatch = reload_on_dispatch
        self.on_update = on_update
        self.snapshot = as_snapshot(snapshot)
        self.bulk: Bulk = Bulk()
        self.refine = Refine(
            self.snapshot,
            self._reload,
            settings=self.settings,
            debouncer=self.debouncer,
        )
        self.actions = ActionDispatcher(
            transport,
            self.bulk,
            table=self.snapshot.id,
            endpoint=self.snapshot.endpoint,
            callbacks=callbacks,
            confirmer=confirmer,
        )
        self._active_columns = self._derive_active_columns()

    def update(self, snapshot: SnapshotLike) -> None:
        """Replace the snapshot; selection and pending inputs survive."""
        self.snapshot = as_snapshot(snapshot)
        self.refine.update(self.snapshot)
        self.actions.table = self.snapshot.id
        self.actions.endpoint = self.snapshot.endpoint
        self._active_columns = self._derive_active_columns()
        if self.on_update is not None:
            self.on_update(self.snapshot)

    # ------------------------------------------------------------------ #
    # Snapshot view
    # ------------------------------------------------------------------ #
    @property
    def id(self) -> str:
        return self.snapshot.id

    @property
    def config(self):
        return self.snapshot.config

    @property
    def records(self) -> tuple[Record, ...]:
        return self.snapshot.records

    @property
    def keys(self) -> list[Any]:
        return [record.key for record in self.snapshot.records]

    @property
    def columns(self) -> tuple[Column, ...]:
        return self.snapshot.columns

    @property
    def headings(self) -> list[Column]:
        return [column for column in self.snapshot.columns if column.name in self._active_columns]

    @property
    def paginator(self):
        return self.snapshot.paginator

    @property
    def is_empty(self) -> bool:
        return not self.snapshot.records

    def get_column(self, name: str) -> Optional[Column]:
        return next((column for column in self.snapshot.columns if column.name == name), None)

    def get_record(self, key: Any) -> Optional[Record]:
        return next((record for record in self.snapshot.records if record.key == key), None)

    # ------------------------------------------------------------------ #
    # Column visibility
    # ------------------------------------------------------------------ #
    @property
    def active_columns(self) -> list[str]:
        return list(self._active_columns)

    def is_column_active(self, name: str) -> bool:
        return name in self._active_columns

    def toggle_column(self, name: str, **options: Any) -> bool:
        column = self.get_column(name)
        if column is None:
            logger.warning("Column [%s] does not exist.", name)
            return False
        if column.hidden:
            logger.warning("Column [%s] is hidden and cannot be toggled.", name)
            return False
        if not self.snapshot.toggleable or not column.toggleable:
            logger.warning("Column [%s] is not toggleable.", name)
            return False

        wanted = set(self._active_columns) ^ {name}
        self._active_columns = [
            item.name for item in self.snapshot.columns if item.name in wanted and not item.hidden
        ]
        key = self.config.columns
        self._reload({key: normalize(self._active_columns, delimiter=self.config.delimiter)}, **options)
        return True

    def sort_by_column(self, name: str, **options: Any) -> bool:
        column = self.get_column(name)
        if column is None or column.sort is None:
            logger.warning("Column [%s] is not sortable.", name)
            return False
        self._reload({self.config.sort: column.sort.next}, **options)
        return True

    def _derive_active_columns(self) -> list[str]:
        return [column.name for column in self.snapshot.columns if column.visible]

    # ------------------------------------------------------------------ #
    # Page size
    # ------------------------------------------------------------------ #
    @property
    def records_per_page(self) -> tuple[PerPage, ...]:
        return self.snapshot.records_per_page

    @property
    def current_per_page(self) -> Optional[int]:
        return next((item.value for item in self.snapshot.records_per_page if item.active), None)

    def set_records_per_page(self, value: Any, **options: Any) -> bool:
        try:
            size = int(value)
        except (TypeError, ValueError):
            size = None
        allowed = [item.value for item in self.snapshot.records_per_page]
        if size is None or size not in allowed:
            logger.warning("Page size [%s] is not one of %s.", value, allowed)
            return False
        # A new size must not keep a position that may now be out of range.
        delta = {
            self.config.records: size,
            self.config.page: None,
            self.config.cursor: None,
        }
        self._reload(delta, **options)
        return True

    # ------------------------------------------------------------------ #
    # Pagination
    # ------------------------------------------------------------------ #
    @property
    def has_next(self) -> bool:
        return paging.navigation_link(self.paginator, paging.NEXT) is not None

    @property
    def has_previous(self) -> bool:
        return paging.navigation_link(self.paginator, paging.PREVIOUS) is not None

    @property
    def has_first(self) -> bool:
        return paging.navigation_link(self.paginator, paging.FIRST) is not None

    @property
    def has_last(self) -> bool:
        return paging.navigation_link(self.paginator, paging.LAST) is not None

    @property
    def page_links(self):
        return paging.page_links(self.paginator)

    @property
    def current_page(self) -> Optional[int]:
        return paging.current_page(self.paginator)

    @property
    def total(self) -> Optional[int]:
        return paging.total(self.paginator)

    def next_page(self, **options: Any) -> bool:
        return self._navigate(paging.NEXT, **options)

    def previous_page(self, **options: Any) -> bool:
        return self._navigate(paging.PREVIOUS, **options)

    def first_page(self, **options: Any) -> bool:
        return self._navigate(paging.FIRST, **options)

    def last_page(self, **options: Any) -> bool:
        return self._navigate(paging.LAST, **options)

    def goto(self, url: Optional[str], **options: Any) -> bool:
        if not url:
            logger.warning("Cannot navigate table [%s] to an empty link.", self.id)
            return False
        on_success = options.pop("on_success", None)
        options.setdefault("preserve_scroll", True)
        options.setdefault("preserve_state", True)
        self.transport.visit(
            url,
            method="get",
            only=[self.id],
            on_success=self._receiver(on_success),
            **options,
        )
        return True

    def _navigate(self, where: str, **options: Any) -> bool:
        link = paging.navigation_link(self.paginator, where)
        if link is None:
            logger.debug("Paginator '%s' has no %s link.", self.paginator.type, where)
            return False
        return self.goto(link, **options)

    # ------------------------------------------------------------------ #
    # Selection
    # ------------------------------------------------------------------ #
    def selected(self, record: Union[Record, Any]) -> bool:
        key = record.key if isinstance(record, Record) else record
        return self.bulk.selected(key)

    def select_page(self) -> None:
        self.bulk.select_page(self.keys)

    def deselect_page(self) -> None:
        self.bulk.deselect_page(self.keys)

    @property
    def is_page_selected(self) -> bool:
        return self.bulk.is_page_selected(self.keys)

    @property
    def selected_records(self) -> list[Record]:
        return [record for record in self.snapshot.records if self.bulk.selected(record.key)]

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #
    @property
    def bulk_actions(self) -> tuple[Action, ...]:
        return self.snapshot.bulk_actions

    @property
    def page_actions(self) -> tuple[Action, ...]:
        return self.snapshot.page_actions

    def execute_inline(self, action: Union[Action, str], record: Union[Record, Any], **options: Any) -> ActionOutcome:
        if not isinstance(record, Record):
            found = self.get_record(record)
            if found is None:
                logger.warning("Record [%s] is not on the current page.", record)
                return ActionOutcome.SKIPPED
            record = found
        resolved = self._resolve(action, record.actions, "Inline action")
        if resolved is None:
            return ActionOutcome.SKIPPED
        return self.actions.execute_inline(resolved, record, **self._dispatch_options(resolved, options))

    def execute_bulk(self, action: Union[Action, str], **options: Any) -> ActionOutcome:
        resolved = self._resolve(action, self.snapshot.bulk_actions, "Bulk action")
        if resolved is None:
            return ActionOutcome.SKIPPED
        return self.actions.execute_bulk(
            resolved, self.selected_records, **self._dispatch_options(resolved, options)
        )

    def execute_page(self, action: Union[Action, str], **options: Any) -> ActionOutcome:
        resolved = self._resolve(action, self.snapshot.page_actions, "Page action")
        if resolved is None:
            return ActionOutcome.SKIPPED
        return self.actions.execute_page(resolved, **self._dispatch_options(resolved, options))

    def execute_default(self, record: Union[Record, Any], **options: Any) -> ActionOutcome:
        if not isinstance(record, Record):
            record = self.get_record(record)
            if record is None:
                return ActionOutcome.SKIPPED
        action = record.default_action
        if action is None:
            logger.debug("Record [%s] has no default action", record.key)
            return ActionOutcome.SKIPPED
        return self.actions.execute_inline(action, record, **self._dispatch_options(action, options))

    def _resolve(self, action: Union[Action, str], available, label: str) -> Optional[Action]:
        if isinstance(action, Action):
            return action
        found = next((item for item in available if item.name == action), None)
        if found is None:
            logger.warning("%s [%s] does not exist.", label, action)
        return found

    def _dispatch_options(self, action: Action, options: dict[str, Any]) -> dict[str, Any]:
        if not self.reload_on_dispatch or classify(action) is not ActionKind.DISPATCH:
            return options
        on_success = options.get("on_success")

        def refreshed(response: Any) -> None:
            if on_success is not None:
                on_success(response)
            self.reload()

        return {**options, "on_success": refreshed}

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #
    def reset(self, **options: Any) -> bool:
        return self.refine.reset(**options)

    def reload(self, data: Optional[dict[str, Any]] = None, **options: Any) -> None:
        self._reload(dict(data or {}), **options)

    def _reload(self, delta: dict[str, Any], **options: Any) -> None:
        on_success = options.pop("on_success", None)
        options.setdefault("preserve_scroll", True)
        options.setdefault("preserve_state", True)
        self.transport.reload(
            delta,
            only=[self.id],
            on_success=self._receiver(on_success),
            **options,
        )

    def _receiver(self, on_success: Optional[SuccessCallback]) -> SuccessCallback:
        def receive(payload: Any) -> None:
            data = self._extract(payload)
            if data is not None:
                self.update(data)
            else:
                logger.warning("Response for table [%s] carried no snapshot.", self.id)
            if on_success is not None:
                on_success(payload)

        return receive

    def _extract(self, payload: Any) -> Optional[SnapshotLike]:
        if isinstance(payload, TableSnapshot):
            return payload
        if not isinstance(payload, dict):
            return None
        scoped = payload.get(self.id)
        if isinstance(scoped, dict) and "records" in scoped:
            return scoped
        if "records" in payload:
            return payload
        return None
