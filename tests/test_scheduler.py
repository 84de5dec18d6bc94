from __future__ import annotations

import logging
import time

import pytest

from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.scheduler import AlreadyRunningError, NotRunningError, Scheduler, SchedulerState
from tests.fakes import RecordingProcessor


def _wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_first_cycle_runs_immediately():
    proc = RecordingProcessor()
    s = Scheduler(proc, interval=60, min_interval=0)

    s.start()
    try:
        assert proc.cycle.wait(2)
        assert s.is_running()
        assert s.state is SchedulerState.RUNNING
    finally:
        s.stop(wait=2)

    assert s.state is SchedulerState.IDLE


def test_second_start_fails_and_one_stop_is_enough():
    proc = RecordingProcessor()
    s = Scheduler(proc, interval=60, min_interval=0)

    s.start()
    with pytest.raises(AlreadyRunningError):
        s.start()
    assert proc.cycle.wait(2)

    s.stop(wait=2)

    assert not s.is_running()
    with pytest.raises(NotRunningError):
        s.stop()
    # Only one loop was ever spawned.
    assert proc.calls == 1


def test_stop_on_idle_scheduler_fails_without_side_effects():
    s = Scheduler(RecordingProcessor(), interval=60, min_interval=0)

    with pytest.raises(NotRunningError):
        s.stop()

    assert s.state is SchedulerState.IDLE


def test_interval_below_floor_is_clamped():
    assert Scheduler(RecordingProcessor(), interval=30).interval == 120
    assert Scheduler(RecordingProcessor(), interval=0).interval == 120
    assert Scheduler(RecordingProcessor(), interval=300).interval == 300


def test_failed_cycles_are_logged_and_loop_continues(caplog):
    proc = RecordingProcessor(fail_first=2)
    s = Scheduler(proc, interval=0.02, min_interval=0)

    with caplog.at_level(logging.ERROR, logger="scheduler"):
        s.start()
        try:
            assert _wait_for(lambda: proc.calls >= 4)
        finally:
            s.stop(wait=2)

    assert "Scheduler iteration failed: boom 1" in caplog.text
    assert "Scheduler iteration failed: boom 2" in caplog.text


def test_no_cycle_after_stop():
    proc = RecordingProcessor()
    s = Scheduler(proc, interval=0.02, min_interval=0)

    s.start()
    assert _wait_for(lambda: proc.calls >= 2)
    s.stop(wait=2)
    calls = proc.calls
    time.sleep(0.1)

    assert proc.calls == calls


def test_stop_cancels_in_flight_cycle_quietly(caplog):
    proc = RecordingProcessor(block_until_cancelled=True)
    s = Scheduler(proc, interval=60, min_interval=0)

    with caplog.at_level(logging.ERROR, logger="scheduler"):
        s.start()
        assert proc.cycle.wait(2)
        started = time.monotonic()
        s.stop(wait=2)

    assert time.monotonic() - started < 2
    assert "iteration failed" not in caplog.text
    assert not s._thread.is_alive()


def test_stop_returns_without_waiting_by_default():
    proc = RecordingProcessor(duration=0.3)
    s = Scheduler(proc, interval=60, min_interval=0)

    s.start()
    assert proc.cycle.wait(2)
    started = time.monotonic()
    s.stop()

    assert time.monotonic() - started < 0.2
    assert not s.is_running()
    assert _wait_for(lambda: proc.active == 0)


def test_overrunning_cycle_holds_one_tick_and_cycles_never_overlap():
    proc = RecordingProcessor(durations=[0.5])
    s = Scheduler(proc, interval=0.2, min_interval=0)

    s.start()
    try:
        assert _wait_for(lambda: proc.calls >= 3, timeout=3)
    finally:
        s.stop(wait=2)

    first, second, third = proc.starts[:3]
    # The tick missed during the slow cycle is served right away...
    assert second - first < 0.5 + 0.15
    # ...but the remaining missed ticks are dropped, not replayed back to back.
    assert third - second >= 0.05
    assert proc.max_active == 1


def test_parent_cancellation_ends_loop_and_allows_restart():
    proc = RecordingProcessor()
    s = Scheduler(proc, interval=60, min_interval=0)
    parent = CancelScope()

    s.start(parent)
    assert proc.cycle.wait(2)
    parent.cancel()

    assert _wait_for(lambda: not s.is_running())

    s.start()
    assert _wait_for(lambda: proc.calls == 2)
    s.stop(wait=2)


def test_restart_after_stop_does_not_overlap_in_flight_cycle():
    proc = RecordingProcessor(duration=0.2)
    s = Scheduler(proc, interval=60, min_interval=0)

    s.start()
    assert proc.cycle.wait(2)
    s.stop()
    s.start()
    try:
        assert _wait_for(lambda: proc.calls == 2)
    finally:
        s.stop(wait=2)

    assert proc.max_active == 1
