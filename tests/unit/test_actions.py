import pytest

from tablerefine.client.actions import ActionDispatcher, ActionKind, ActionOutcome, classify
from tablerefine.client.bulk import Bulk
from tablerefine.types import Action, Confirm, Record, Route, TableSnapshot

pytestmark = pytest.mark.unit


@pytest.fixture
def snapshot(snapshot_data):
    return TableSnapshot.from_dict(snapshot_data)


@pytest.fixture
def bulk():
    return Bulk()


@pytest.fixture
def dispatcher(transport, bulk):
    return ActionDispatcher(transport, bulk, table="organizations", endpoint="/tables/actions/")


def bulk_action(snapshot, name):
    return next(action for action in snapshot.bulk_actions if action.name == name)


def test_classification():
    assert classify(Action("a", "A", "page", route=Route("/x"))) is ActionKind.ROUTE
    assert classify(Action("a", "A", "page", dispatch=True)) is ActionKind.DISPATCH
    assert classify(Action("a", "A", "page")) is ActionKind.LOCAL


def test_bulk_dispatch_clears_selection_on_success(dispatcher, transport, bulk, snapshot):
    bulk.select_all()
    bulk.deselect(2)
    received = []

    outcome = dispatcher.execute_bulk(bulk_action(snapshot, "delete"), on_success=received.append)

    assert outcome is ActionOutcome.EXECUTED
    request = transport.posts[0]
    assert request["url"] == "/tables/actions/"
    assert request["payload"] == {
        "name": "delete",
        "type": "bulk",
        "table": "organizations",
        "all": True,
        "only": [],
        "except": [2],
    }
    assert bulk.has_selected is True

    request["on_success"]({"ok": True})
    assert received == [{"ok": True}]
    assert bulk.payload() == {"all": False, "only": [], "except": []}


def test_keep_selected_preserves_selection(dispatcher, transport, bulk, snapshot):
    bulk.select(1, 2)
    dispatcher.execute_bulk(bulk_action(snapshot, "touch"))
    transport.posts[0]["on_success"](None)
    assert bulk.selection.only == {1, 2}


def test_failed_dispatch_keeps_selection(dispatcher, transport, bulk, snapshot):
    bulk.select(1)
    errors = []
    dispatcher.execute_bulk(bulk_action(snapshot, "delete"), on_error=errors.append)
    failure = RuntimeError("boom")
    transport.posts[0]["on_error"](failure)
    assert errors == [failure]
    assert bulk.selected(1) is True


def test_bulk_dispatch_without_selection_is_skipped(dispatcher, transport, snapshot):
    assert dispatcher.execute_bulk(bulk_action(snapshot, "delete")) is ActionOutcome.SKIPPED
    assert transport.posts == []


def test_inline_dispatch_payload_requires_confirmation(dispatcher, transport, snapshot):
    record = snapshot.records[0]
    delete = next(action for action in record.actions if action.name == "delete")

    assert dispatcher.execute_inline(delete, record) is ActionOutcome.AWAITING_CONFIRMATION
    assert transport.posts == []

    assert dispatcher.execute_inline(delete, record, confirmed=True) is ActionOutcome.EXECUTED
    assert transport.posts[0]["payload"] == {
        "name": "delete",
        "type": "inline",
        "table": "organizations",
        "id": 1,
    }


def test_confirmer_gates_execution(transport, bulk):
    asked = []

    def confirmer(action):
        asked.append(action.confirm.title)
        return False

    dispatcher = ActionDispatcher(
        transport, bulk, table="t", endpoint="/tables/actions/", confirmer=confirmer
    )
    action = Action("archive", "Archive", "page", dispatch=True, confirm=Confirm("Sure?"))
    assert dispatcher.execute_page(action) is ActionOutcome.SKIPPED
    assert asked == ["Sure?"]
    assert transport.posts == []


def test_route_actions_visit_with_method(dispatcher, transport, snapshot):
    create = snapshot.page_actions[0]
    dispatcher.execute_page(create)
    assert transport.visits[0]["href"] == "/organizations/create/"
    assert transport.visits[0]["method"] == "get"


def test_default_action_runs_the_marked_inline_action(dispatcher, transport, snapshot):
    assert dispatcher.execute_default(snapshot.records[0]) is ActionOutcome.EXECUTED
    assert transport.visits[0]["href"] == "/organizations/1/"
    assert dispatcher.execute_default(snapshot.records[1]) is ActionOutcome.SKIPPED


def test_local_callbacks_receive_affected_records(dispatcher, bulk, snapshot):
    calls = []
    dispatcher.register("preview", lambda record: calls.append(("inline", record.key)))
    dispatcher.register("export", lambda records: calls.append(("bulk", [r.key for r in records])), "bulk")
    dispatcher.register("refresh", lambda: calls.append(("page",)))

    record = snapshot.records[0]
    preview = next(action for action in record.actions if action.name == "preview")
    dispatcher.execute_inline(preview, record)

    bulk.select(1)
    dispatcher.execute_bulk(bulk_action(snapshot, "export"), [record])
    dispatcher.execute_page(snapshot.page_actions[1])

    assert calls == [("inline", 1), ("bulk", [1]), ("page",)]
    assert bulk.has_selected is False


def test_unregistered_local_action_is_silent(dispatcher, snapshot):
    assert dispatcher.execute_page(snapshot.page_actions[1]) is ActionOutcome.SKIPPED


def test_missing_endpoint_skips_dispatch(transport, bulk):
    dispatcher = ActionDispatcher(transport, bulk, table="t")
    action = Action("archive", "Archive", "page", dispatch=True)
    assert dispatcher.execute_page(action) is ActionOutcome.SKIPPED
    assert transport.posts == []


def test_extra_data_is_merged_under_payload(dispatcher, transport):
    action = Action("archive", "Archive", "page", dispatch=True)
    dispatcher.execute_page(action, data={"reason": "old", "table": "ignored"})
    assert transport.posts[0]["payload"] == {"reason": "old", "name": "archive", "type": "page", "table": "organizations"}


def test_inline_payload_needs_a_record(dispatcher):
    action = Action("delete", "Delete", "inline", dispatch=True)
    assert dispatcher.payload(action) is None
    assert dispatcher.payload(action, Record(key=3, values={"id": 3})) == {
        "name": "delete",
        "type": "inline",
        "table": "organizations",
        "id": 3,
    }
