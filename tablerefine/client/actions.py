"""
Action classification and execution.

An action is one of three kinds, decided when it runs:

- route: navigate to the action's target with its declared method
- dispatch: post a typed payload to the table's action endpoint
- local: call a callback registered under the action's name

Actions that declare ``confirm`` do not run until the caller confirms.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from ..types import BULK, INLINE, PAGE, Action, Record
from .bulk import Bulk
from .transport import ErrorCallback, SuccessCallback, Transport

logger = logging.getLogger(__name__)

Confirmer = Callable[[Action], bool]


class ActionKind(str, Enum):
    ROUTE = "route"
    DISPATCH = "dispatch"
    LOCAL = "local"


class ActionOutcome(str, Enum):
    EXECUTED = "executed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SKIPPED = "skipped"


def classify(action: Action) -> ActionKind:
    if action.route is not None:
        return ActionKind.ROUTE
    if action.dispatch:
        return ActionKind.DISPATCH
    return ActionKind.LOCAL


class ActionDispatcher:
    def __init__(
        self,
        transport: Transport,
        bulk: Bulk,
        *,
        table: str,
        endpoint: Optional[str] = None,
        callbacks: Optional[dict[str, Callable[..., Any]]] = None,
        confirmer: Optional[Confirmer] = None,
    ):
        self.transport = transport
        self.bulk = bulk
        self.table = table
        self.endpoint = endpoint
        self.callbacks: dict[str, Callable[..., Any]] = dict(callbacks or {})
        self.confirmer = confirmer

    def register(self, name: str, callback: Callable[..., Any], action_type: Optional[str] = None) -> None:
        """Register a client-local callback, optionally scoped to one action type."""
        key = f"{action_type}:{name}" if action_type else name
        self.callbacks[key] = callback

    def callback_for(self, action: Action) -> Optional[Callable[..., Any]]:
        return self.callbacks.get(f"{action.type}:{action.name}") or self.callbacks.get(action.name)

    def execute(
        self,
        action: Action,
        *,
        record: Optional[Record] = None,
        records: Iterable[Record] = (),
        confirmed: bool = False,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **options: Any,
    ) -> ActionOutcome:
        if action.confirm is not None and not confirmed:
            if self.confirmer is None:
                logger.debug("Action [%s] is waiting for confirmation", action.name)
                return ActionOutcome.AWAITING_CONFIRMATION
            if not self.confirmer(action):
                logger.debug("Action [%s] was not confirmed", action.name)
                return ActionOutcome.SKIPPED

        kind = classify(action)
        if kind is ActionKind.ROUTE:
            return self._navigate(action, on_success=on_success, on_error=on_error, **options)
        if kind is ActionKind.DISPATCH:
            return self._dispatch(action, record=record, on_success=on_success, on_error=on_error, **options)
        return self._call_local(action, record=record, records=records)

    def execute_inline(self, action: Action, record: Record, **options: Any) -> ActionOutcome:
        return self.execute(action, record=record, **options)

    def execute_bulk(self, action: Action, records: Iterable[Record] = (), **options: Any) -> ActionOutcome:
        return self.execute(action, records=records, **options)

    def execute_page(self, action: Action, **options: Any) -> ActionOutcome:
        return self.execute(action, **options)

    def execute_default(self, record: Record, **options: Any) -> ActionOutcome:
        action = record.default_action
        if action is None:
            logger.debug("Record [%s] has no default action", record.key)
            return ActionOutcome.SKIPPED
        return self.execute_inline(action, record, **options)

    def payload(self, action: Action, record: Optional[Record] = None) -> Optional[dict[str, Any]]:
        """Build the endpoint payload for a dispatch action."""
        payload: dict[str, Any] = {"name": action.name, "type": action.type, "table": self.table}
        if action.type == INLINE:
            if record is None:
                logger.warning("Inline action [%s] needs a record", action.name)
                return None
            payload["id"] = record.key
        elif action.type == BULK:
            payload.update(self.bulk.payload())
        elif action.type != PAGE:
            logger.warning("Action [%s] has unknown type '%s'", action.name, action.type)
            return None
        return payload

    def _navigate(self, action: Action, **options: Any) -> ActionOutcome:
        route = action.route
        self.transport.visit(route.href, method=route.method, **options)
        return ActionOutcome.EXECUTED

    def _dispatch(
        self,
        action: Action,
        *,
        record: Optional[Record],
        on_success: Optional[SuccessCallback],
        on_error: Optional[ErrorCallback],
        data: Optional[dict[str, Any]] = None,
        **options: Any,
    ) -> ActionOutcome:
        if not self.endpoint:
            logger.warning("Table [%s] has no action endpoint for [%s]", self.table, action.name)
            return ActionOutcome.SKIPPED
        if action.type == BULK and not self.bulk.has_selected:
            logger.warning("Bulk action [%s] has no selected records", action.name)
            return ActionOutcome.SKIPPED

        payload = self.payload(action, record)
        if payload is None:
            return ActionOutcome.SKIPPED
        if data:
            payload = {**data, **payload}

        def succeeded(response: Any) -> None:
            self._after_bulk(action)
            if on_success is not None:
                on_success(response)

        self.transport.post(self.endpoint, payload, on_success=succeeded, on_error=on_error, **options)
        return ActionOutcome.EXECUTED

    def _call_local(self, action: Action, *, record: Optional[Record], records: Iterable[Record]) -> ActionOutcome:
        callback = self.callback_for(action)
        if callback is None:
            logger.debug("No callback registered for action [%s]", action.name)
            return ActionOutcome.SKIPPED

        if action.type == INLINE:
            callback(record)
        elif action.type == BULK:
            callback(list(records))
        else:
            callback()
        self._after_bulk(action)
        return ActionOutcome.EXECUTED

    def _after_bulk(self, action: Action) -> None:
        if action.type == BULK and not action.keep_selected:
            self.bulk.deselect_all()
