import logging

import pytest

from tablerefine.client.refine import Refine
from tablerefine.types import TableSnapshot

pytestmark = pytest.mark.unit


class ReloadRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, delta, **options):
        self.calls.append((delta, options))

    @property
    def deltas(self):
        return [delta for delta, _ in self.calls]


@pytest.fixture
def reload():
    return ReloadRecorder()


@pytest.fixture
def refine(snapshot_data, reload, debouncer):
    return Refine(TableSnapshot.from_dict(snapshot_data), reload, debouncer=debouncer)


def with_sort(snapshot_factory, *, active, direction, next_token):
    data = snapshot_factory()
    data["sorts"][0] = {
        "name": "name",
        "label": "Name",
        "type": "sort",
        "active": active,
        "direction": direction,
        "next": next_token,
    }
    return TableSnapshot.from_dict(data)


def test_multi_valued_filter_toggles_within_debounce_window(refine, reload, clock):
    assert refine.apply_filter("country", "US") is True
    assert refine.apply_filter("country", "CA") is True
    assert reload.calls == []
    assert len(clock.live) == 1
    assert clock.live[0].interval == pytest.approx(0.25)

    clock.fire_all()
    assert reload.deltas == [{"country": "US,CA"}]
    assert refine.filter_value("country") == ["US", "CA"]


def test_toggling_a_value_off_omits_the_parameter(refine, reload):
    refine.apply_filter("country", "US", debounce=0)
    refine.apply_filter("country", "US", debounce=0)
    assert reload.deltas == [{"country": "US"}, {"country": None}]


def test_unknown_filter_logs_and_sends_nothing(refine, reload, clock, caplog):
    with caplog.at_level(logging.WARNING, logger="tablerefine.client.refine"):
        assert refine.apply_filter("ghost", "x") is False
    assert "Filter [ghost] does not exist." in caplog.text
    assert reload.calls == []
    assert clock.timers == []


def test_single_valued_filter_is_normalized(refine, reload):
    refine.apply_filter("status", "  open  ", debounce=0)
    refine.clear_filter("status")
    assert reload.deltas == [{"status": "open"}, {"status": None}]


def test_sort_cycle_returns_to_none(snapshot_factory, reload, debouncer):
    refine = Refine(
        with_sort(snapshot_factory, active=False, direction=None, next_token="name"),
        reload,
        debouncer=debouncer,
    )
    refine.apply_sort("name")
    refine.update(with_sort(snapshot_factory, active=True, direction="asc", next_token="-name"))
    assert refine.is_sorting("name") is True
    refine.apply_sort("name")
    refine.update(with_sort(snapshot_factory, active=True, direction="desc", next_token=None))
    refine.apply_sort("name")

    assert reload.deltas == [{"sort": "name"}, {"sort": "-name"}, {"sort": None}]


def test_fixed_direction_sorts_resolve_by_direction(refine, reload):
    refine.apply_sort("city", "desc")
    assert reload.deltas == [{"sort": "-city"}]


def test_unknown_sort_is_a_no_op(refine, reload, caplog):
    with caplog.at_level(logging.WARNING, logger="tablerefine.client.refine"):
        assert refine.apply_sort("missing") is False
    assert "Sort [missing] does not exist." in caplog.text
    assert reload.calls == []


def test_search_is_debounced_longer_than_filters(refine, reload, clock):
    refine.apply_search("  acme   corp ")
    assert clock.live[0].interval == pytest.approx(0.7)
    assert refine.search_value == "acme corp"
    clock.fire_all()
    assert reload.deltas == [{"search": "acme corp"}]


def test_pending_search_survives_a_new_snapshot(refine, snapshot_data):
    refine.apply_search("acme")
    refine.update(TableSnapshot.from_dict(snapshot_data))
    assert refine.search_value == "acme"


def test_snapshot_replaces_settled_values(refine, snapshot_factory):
    data = snapshot_factory(search="globex")
    data["filters"][0]["value"] = "US"
    data["filters"][0]["active"] = True
    refine.update(TableSnapshot.from_dict(data))
    assert refine.search_value == "globex"
    assert refine.filter_value("country") == ["US"]
    assert refine.is_filtering("country") is True
    assert refine.is_searching() is True


def test_match_toggles_sub_matchers(refine, reload):
    refine.apply_match("email")
    refine.apply_match("name")
    refine.apply_match("email")
    assert reload.deltas == [{"match": "email"}, {"match": "email,name"}, {"match": "name"}]
    assert refine.is_matching("name") is True


def test_reset_clears_everything_in_one_request(refine, reload, clock):
    refine.apply_filter("country", "US")
    refine.apply_search("acme")
    refine.reset()

    assert reload.deltas == [
        {"sort": None, "search": None, "match": None, "country": None, "status": None}
    ]
    clock.fire_all()
    assert len(reload.calls) == 1
    assert refine.search_value is None
    assert refine.filter_value("country") == []


def test_options_are_forwarded_to_reload(refine, reload):
    refine.clear_sort(preserve_scroll=False)
    assert reload.calls == [({"sort": None}, {"preserve_scroll": False})]


def test_bound_refiners(refine, reload):
    country = next(item for item in refine.filters if item.name == "country")
    country.apply("CA", debounce=0)
    assert country.current == ["CA"]
    assert country.label == "Country"

    name_search = refine.searches[0]
    name_search.apply()
    assert reload.deltas[-1] == {"match": "name"}


def test_filter_binding(refine, reload, clock):
    binding = refine.bind_filter("status")
    binding.value = "open"
    assert binding.value == "open"
    clock.fire_all()
    assert reload.deltas == [{"status": "open"}]

    multi = refine.bind_filter("country", debounce=0)
    multi.update("US,CA")
    assert reload.deltas[-1] == {"country": "US,CA"}
    multi.clear()
    assert reload.deltas[-1] == {"country": None}


def test_binding_unknown_filter_returns_none(refine):
    assert refine.bind_filter("ghost") is None
