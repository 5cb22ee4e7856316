from typing import Any, Callable

import pytest

from tablerefine.client.debounce import Debouncer
from tablerefine.client.transport import Transport


class RecordingTransport(Transport):
    """Transport that records requests instead of sending them."""

    def __init__(self):
        self.reloads: list[dict[str, Any]] = []
        self.visits: list[dict[str, Any]] = []
        self.posts: list[dict[str, Any]] = []

    def reload(self, data, *, only=(), on_success=None, on_error=None, **options):
        self.reloads.append(
            {"data": dict(data), "only": list(only), "on_success": on_success, "on_error": on_error, "options": options}
        )

    def visit(self, href, *, method="get", data=None, only=(), on_success=None, on_error=None, **options):
        self.visits.append(
            {
                "href": href,
                "method": method,
                "data": data,
                "only": list(only),
                "on_success": on_success,
                "on_error": on_error,
                "options": options,
            }
        )

    def post(self, url, payload, *, on_success=None, on_error=None, **options):
        self.posts.append(
            {"url": url, "payload": dict(payload), "on_success": on_success, "on_error": on_error, "options": options}
        )


class ManualTimer:
    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class ManualClock:
    """Timer factory whose timers only fire when told to."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def fire_all(self) -> None:
        for timer in list(self.live):
            timer.fire()


def make_snapshot(**overrides: Any) -> dict[str, Any]:
    snapshot: dict[str, Any] = {
        "id": "organizations",
        "records": [
            {"id": 1, "name": "Acme", "email": "a@acme.test", "actions": [
                {"name": "view", "label": "View", "type": "inline", "default": True,
                 "route": {"href": "/organizations/1/", "method": "get"}},
                {"name": "delete", "label": "Delete", "type": "inline", "dispatch": True,
                 "confirm": {"title": "Delete organization", "description": "This cannot be undone."}},
                {"name": "preview", "label": "Preview", "type": "inline"},
            ]},
            {"id": 2, "name": "Globex", "email": "g@globex.test", "actions": []},
        ],
        "columns": [
            {"name": "id", "label": "Id", "type": "key", "hidden": True, "active": False, "toggleable": False},
            {"name": "name", "label": "Name", "type": "text", "active": True, "toggleable": False,
             "sort": {"active": False, "direction": None, "next": "name"}},
            {"name": "email", "label": "Email", "type": "text", "active": True, "toggleable": True},
            {"name": "city", "label": "City", "type": "text", "active": False, "toggleable": True},
        ],
        "sorts": [
            {"name": "name", "label": "Name", "type": "sort", "active": False, "direction": None, "next": "name"},
            {"name": "city", "label": "City A-Z", "type": "sort", "active": False, "direction": "asc", "next": "city"},
            {"name": "city", "label": "City Z-A", "type": "sort", "active": False, "direction": "desc", "next": "-city"},
        ],
        "filters": [
            {"name": "country", "label": "Country", "type": "set", "active": False, "value": [],
             "multiple": True, "options": [
                 {"label": "United States", "value": "US", "active": False},
                 {"label": "Canada", "value": "CA", "active": False},
             ]},
            {"name": "status", "label": "Status", "type": "filter", "active": False, "value": None},
        ],
        "searches": [
            {"name": "name", "label": "Name", "type": "search", "active": False},
            {"name": "email", "label": "Email", "type": "search", "active": False},
        ],
        "search": None,
        "actions": {
            "bulk": [
                {"name": "delete", "label": "Delete", "type": "bulk", "dispatch": True, "keepSelected": False},
                {"name": "touch", "label": "Touch", "type": "bulk", "dispatch": True, "keepSelected": True},
                {"name": "export", "label": "Export", "type": "bulk"},
            ],
            "page": [
                {"name": "create", "label": "Create", "type": "page",
                 "route": {"href": "/organizations/create/", "method": "get"}},
                {"name": "refresh", "label": "Refresh", "type": "page"},
            ],
            "hasInline": True,
        },
        "paginator": {
            "type": "length-aware",
            "empty": False,
            "perPage": 10,
            "currentPage": 2,
            "total": 35,
            "from": 11,
            "to": 20,
            "lastPage": 4,
            "prevLink": "/organizations/?page=1",
            "nextLink": "/organizations/?page=3",
            "firstLink": "/organizations/?page=1",
            "lastLink": "/organizations/?page=4",
            "links": [
                {"url": "/organizations/?page=1", "label": "1", "active": False},
                {"url": "/organizations/?page=2", "label": "2", "active": True},
            ],
        },
        "recordsPerPage": [{"value": 10, "active": True}, {"value": 25, "active": False}],
        "config": {
            "table": "organizations",
            "delimiter": ",",
            "sort": "sort",
            "search": "search",
            "match": "match",
            "records": "rows",
            "columns": "columns",
            "page": "page",
            "cursor": "cursor",
            "record": "id",
        },
        "endpoint": "/tables/actions/",
        "toggleable": True,
        "meta": {},
    }
    snapshot.update(overrides)
    return snapshot


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def debouncer(clock) -> Debouncer:
    return Debouncer(timer_factory=clock)


@pytest.fixture
def snapshot_data() -> dict[str, Any]:
    return make_snapshot()


@pytest.fixture
def snapshot_factory() -> Callable[..., dict[str, Any]]:
    return make_snapshot
