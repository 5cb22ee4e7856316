"""
Inline, bulk and page actions declared by a server-built table.

An action with a route serializes as a navigation target, an action with a
handler serializes with ``dispatch`` set and runs through the action
endpoint, and an action with neither is left to a client-side callback.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from django.urls import NoReverseMatch, reverse

from ..types import BULK, INLINE, PAGE
from .refiners import labelize

RouteTarget = Union[str, Callable[..., str]]


class BaseAction:
    type = ""

    def __init__(self, name: str, label: Optional[str] = None):
        self.name = name
        self.label = label or labelize(name)
        self.route_target: Optional[RouteTarget] = None
        self.route_method = "get"
        self.handler: Optional[Callable[..., Any]] = None
        self.allow_check: Optional[Callable[..., bool]] = None
        self.confirm_data: Optional[dict[str, str]] = None
        self.icon_name: Optional[str] = None
        self.extra_data: dict[str, Any] = {}

    @classmethod
    def make(cls, name: str, label: Optional[str] = None):
        return cls(name, label)

    def route(self, target: RouteTarget, method: str = "get"):
        """Navigate to a path, a URL name, or the result of a callable."""
        self.route_target = target
        self.route_method = method.lower()
        return self

    def action(self, handler: Callable[..., Any]):
        self.handler = handler
        return self

    def allow(self, check: Callable[..., bool]):
        self.allow_check = check
        return self

    def confirm(self, title: str, description: str = ""):
        self.confirm_data = {"title": title, "description": description}
        return self

    def icon(self, name: str):
        self.icon_name = name
        return self

    def extra(self, **data: Any):
        self.extra_data.update(data)
        return self

    def is_allowed(self, *args: Any) -> bool:
        if self.allow_check is None:
            return True
        return bool(self.allow_check(*args))

    @property
    def dispatches(self) -> bool:
        return self.route_target is None and self.handler is not None

    def resolve_href(self, *args: Any) -> str:
        target = self.route_target
        if callable(target):
            return str(target(*args))
        if target.startswith("/") or "://" in target:
            return target
        try:
            return reverse(target, args=[getattr(arg, "pk", arg) for arg in args])
        except NoReverseMatch:
            return reverse(target)

    def serialize(self, *args: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "dispatch": self.dispatches,
            "route": None,
            "confirm": dict(self.confirm_data) if self.confirm_data else None,
            "icon": self.icon_name,
            "extra": dict(self.extra_data),
        }
        if self.route_target is not None:
            data["route"] = {"href": self.resolve_href(*args), "method": self.route_method}
        return data


class InlineAction(BaseAction):
    type = INLINE

    def __init__(self, name: str, label: Optional[str] = None):
        super().__init__(name, label)
        self.is_default = False

    def default(self) -> "InlineAction":
        """Run this action when the record row itself is clicked."""
        self.is_default = True
        return self

    def serialize(self, *args: Any) -> dict[str, Any]:
        data = super().serialize(*args)
        data["default"] = self.is_default
        return data


class BulkAction(BaseAction):
    type = BULK

    def __init__(self, name: str, label: Optional[str] = None):
        super().__init__(name, label)
        self.keeps_selected = False

    def keep_selected(self, keep: bool = True) -> "BulkAction":
        self.keeps_selected = keep
        return self

    def serialize(self, *args: Any) -> dict[str, Any]:
        data = super().serialize(*args)
        data["keepSelected"] = self.keeps_selected
        return data


class PageAction(BaseAction):
    type = PAGE
