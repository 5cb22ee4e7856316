import logging

import pytest

from tablerefine.client.actions import ActionOutcome
from tablerefine.client.table import Table
from tablerefine.types import LengthAwarePaginator

pytestmark = pytest.mark.unit


@pytest.fixture
def table(snapshot_data, transport, debouncer):
    return Table(snapshot_data, transport, debouncer=debouncer)


def test_snapshot_view(table):
    assert table.id == "organizations"
    assert table.keys == [1, 2]
    assert [column.name for column in table.headings] == ["name", "email"]
    assert table.get_record(2).get("name") == "Globex"
    assert table.current_per_page == 10
    assert isinstance(table.paginator, LengthAwarePaginator)
    assert table.is_empty is False


def test_reloads_are_scoped_to_the_table(table, transport):
    table.refine.apply_sort("name")
    request = transport.reloads[0]
    assert request["data"] == {"sort": "name"}
    assert request["only"] == ["organizations"]
    assert request["options"] == {"preserve_scroll": True, "preserve_state": True}


def test_response_replaces_snapshot_and_keeps_selection(table, transport, snapshot_factory):
    table.bulk.select(1)
    seen = []
    table.on_update = seen.append
    table.refine.apply_sort("name")

    data = snapshot_factory(search="acme")
    data["records"] = [{"id": 3, "name": "Initech", "actions": []}]
    transport.reloads[0]["on_success"]({"organizations": data, "other": {"records": []}})

    assert table.keys == [3]
    assert table.refine.search_value == "acme"
    assert table.bulk.selected(1) is True
    assert seen and seen[0].id == "organizations"


def test_bare_snapshot_responses_are_accepted(table, transport, snapshot_factory):
    table.reload()
    transport.reloads[0]["on_success"](snapshot_factory(records=[]))
    assert table.is_empty is True


def test_toggle_column_sends_active_set(table, transport):
    assert table.toggle_column("city") is True
    assert transport.reloads[0]["data"] == {"columns": "name,email,city"}
    assert table.toggle_column("email") is True
    assert transport.reloads[1]["data"] == {"columns": "name,city"}
    assert table.is_column_active("email") is False


def test_toggling_a_column_twice_restores_active_set(table):
    before = sorted(table.active_columns)
    table.toggle_column("city")
    table.toggle_column("city")
    assert sorted(table.active_columns) == before


@pytest.mark.parametrize("name", ["id", "name", "missing"])
def test_untoggleable_columns_are_ignored(table, transport, name, caplog):
    with caplog.at_level(logging.WARNING, logger="tablerefine.client.table"):
        assert table.toggle_column(name) is False
    assert transport.reloads == []
    assert f"Column [{name}]" in caplog.text


def test_table_without_toggling_ignores_column_toggles(snapshot_factory, transport, debouncer):
    table = Table(snapshot_factory(toggleable=False), transport, debouncer=debouncer)
    assert table.toggle_column("city") is False
    assert transport.reloads == []


def test_sort_by_column(table, transport):
    assert table.sort_by_column("name") is True
    assert table.sort_by_column("email") is False
    assert transport.reloads[0]["data"] == {"sort": "name"}


def test_per_page_change_resets_position(table, transport):
    assert table.set_records_per_page(25) is True
    assert transport.reloads[0]["data"] == {"rows": 25, "page": None, "cursor": None}
    assert table.set_records_per_page(7) is False
    assert table.set_records_per_page("many") is False
    assert len(transport.reloads) == 1


def test_paginator_navigation_visits_server_links(table, transport):
    assert table.has_next and table.has_previous and table.has_first and table.has_last
    assert table.next_page() is True
    visit = transport.visits[0]
    assert visit["href"] == "/organizations/?page=3"
    assert visit["only"] == ["organizations"]
    assert len(table.page_links) == 2
    assert (table.current_page, table.total) == (2, 35)


def test_cursor_paginator_has_no_first_or_last(snapshot_factory, transport, debouncer):
    table = Table(
        snapshot_factory(paginator={"type": "cursor", "empty": False, "perPage": 10, "nextLink": "/o?cursor=abc"}),
        transport,
        debouncer=debouncer,
    )
    assert table.has_next is True
    assert table.has_previous is False
    assert table.first_page() is False
    assert table.page_links == ()
    assert table.total is None
    assert transport.visits == []


def test_collection_paginator_has_no_links(snapshot_factory, transport, debouncer):
    table = Table(snapshot_factory(paginator={"type": "collection", "empty": True}), transport, debouncer=debouncer)
    assert not (table.has_next or table.has_previous or table.has_first or table.has_last)


def test_dispatch_success_reloads_the_table(table, transport):
    table.bulk.select(2)
    assert table.execute_bulk("delete") is ActionOutcome.EXECUTED
    transport.posts[0]["on_success"]({"status": "success"})
    assert table.bulk.has_selected is False
    assert transport.reloads[0]["data"] == {}
    assert transport.reloads[0]["only"] == ["organizations"]


def test_named_actions_resolve_against_snapshot(table, transport, caplog):
    with caplog.at_level(logging.WARNING, logger="tablerefine.client.table"):
        assert table.execute_page("ghost") is ActionOutcome.SKIPPED
    assert "Page action [ghost] does not exist." in caplog.text

    assert table.execute_page("create") is ActionOutcome.EXECUTED
    assert table.execute_inline("delete", 1, confirmed=True) is ActionOutcome.EXECUTED
    assert transport.posts[0]["payload"]["id"] == 1
    assert table.execute_inline("view", 99) is ActionOutcome.SKIPPED
    assert table.execute_default(1) is ActionOutcome.EXECUTED


def test_bulk_local_callback_receives_selected_visible_records(snapshot_data, transport, debouncer):
    exported = []
    table = Table(
        snapshot_data,
        transport,
        debouncer=debouncer,
        callbacks={"export": lambda records: exported.extend(r.key for r in records)},
    )
    table.select_page()
    assert table.is_page_selected is True
    table.execute_bulk("export")
    assert exported == [1, 2]
    assert table.selected_records == []


def test_reset_goes_through_refine(table, transport):
    table.reset()
    assert transport.reloads[0]["data"]["sort"] is None
    assert transport.reloads[0]["data"]["country"] is None
