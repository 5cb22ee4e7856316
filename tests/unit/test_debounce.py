import threading

import pytest

from tablerefine.client.debounce import Debouncer

pytestmark = pytest.mark.unit


def test_zero_delay_fires_immediately(debouncer, clock):
    calls = []
    debouncer.call("sort", 0, calls.append, "name")
    assert calls == ["name"]
    assert clock.timers == []


def test_trailing_call_wins_per_key(debouncer, clock):
    calls = []
    debouncer.call("search", 700, calls.append, "a")
    debouncer.call("search", 700, calls.append, "ab")
    assert debouncer.pending("search") is True
    assert clock.timers[0].cancelled is True
    assert clock.timers[0].interval == pytest.approx(0.7)

    clock.fire_all()
    assert calls == ["ab"]
    assert debouncer.pending("search") is False


def test_keys_are_independent(debouncer, clock):
    calls = []
    debouncer.call("filter:country", 250, calls.append, "country")
    debouncer.call("filter:status", 250, calls.append, "status")
    debouncer.cancel("filter:country")
    clock.fire_all()
    assert calls == ["status"]


def test_flush_fires_pending_handlers_now(debouncer):
    calls = []
    debouncer.call("a", 100, calls.append, 1)
    debouncer.call("b", 100, calls.append, 2)
    debouncer.flush("a")
    assert calls == [1]
    debouncer.flush()
    assert calls == [1, 2]
    assert debouncer.pending() is False


def test_cancel_all(debouncer, clock):
    calls = []
    debouncer.call("a", 100, calls.append, 1)
    debouncer.call("b", 100, calls.append, 2)
    debouncer.cancel_all()
    clock.fire_all()
    assert calls == []


def test_default_factory_uses_daemon_threads():
    debouncer = Debouncer()
    debouncer.call("a", 10_000, lambda: None)
    timer = debouncer._timers["a"]
    assert timer.daemon is True
    debouncer.cancel_all()


def test_stale_timer_does_not_drop_newer_input(debouncer, clock):
    calls = []
    debouncer.call("search", 10, calls.append, "old")
    stale = clock.timers[0]
    debouncer.call("search", 10, calls.append, "new")

    # The old timer thread was already running when it got replaced.
    stale.callback()
    assert calls == []
    assert debouncer.pending("search") is True

    clock.fire_all()
    assert calls == ["new"]
    assert debouncer.pending("search") is False


def test_elapsed_timer_waits_for_the_key_table(debouncer, clock):
    calls = []
    debouncer.call("search", 10, calls.append, "old")
    timer = clock.timers[0]

    with debouncer._lock:
        worker = threading.Thread(target=timer.callback)
        worker.start()
        worker.join(0.05)
        assert worker.is_alive()
        assert calls == []

    worker.join(1)
    assert not worker.is_alive()
    assert calls == ["old"]
    assert debouncer.pending() is False
