"""Tests for the periodic publication trigger."""

from __future__ import annotations

import threading

import pytest

from publication_export.jobs import PeriodicPublicationTrigger


class _DiscovererStub:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    def discoverer_trigger_publications(self) -> list:
        self.calls += 1
        if self.fail:
            raise ConnectionError("source store unreachable")
        return []


class _SchedulerStub:
    def __init__(self, ticked: threading.Event | None = None):
        self.calls: list[str] = []
        self._ticked = ticked

    def scheduler_run_next(self) -> int:
        self.calls.append("run_next")
        return 0

    def scheduler_retry_failed(self) -> int:
        self.calls.append("retry_failed")
        if self._ticked is not None:
            self._ticked.set()
        return 0


def test_tick_runs_discovery_scheduler_and_retry_sweep_in_order() -> None:
    discoverer = _DiscovererStub()
    scheduler = _SchedulerStub()

    PeriodicPublicationTrigger(discoverer=discoverer, scheduler=scheduler).timer_tick()

    assert discoverer.calls == 1
    assert scheduler.calls == ["run_next", "retry_failed"]


def test_tick_keeps_scheduling_when_discovery_fails(caplog) -> None:
    """Log discovery failures and still drain scheduled jobs."""

    scheduler = _SchedulerStub()

    PeriodicPublicationTrigger(discoverer=_DiscovererStub(fail=True), scheduler=scheduler).timer_tick()

    assert scheduler.calls == ["run_next", "retry_failed"]
    assert "Polling Kaleidos for publication activities failed" in caplog.text


def test_start_runs_first_tick_immediately_and_stop_joins_thread() -> None:
    """Run a tick on start without waiting for the interval.

    Returns:
        None: Assertions validate thread lifecycle.

    Raises:
        AssertionError: Raised when the first tick does not run.
    """

    ticked = threading.Event()
    trigger = PeriodicPublicationTrigger(
        discoverer=_DiscovererStub(),
        scheduler=_SchedulerStub(ticked=ticked),
        interval_seconds=3600,
    )

    trigger.start()
    try:
        assert ticked.wait(timeout=5.0)
        assert trigger.is_running
    finally:
        trigger.stop()

    assert not trigger.is_running


def test_invalid_interval_is_rejected() -> None:
    with pytest.raises(ValueError):
        PeriodicPublicationTrigger(discoverer=_DiscovererStub(), scheduler=_SchedulerStub(), interval_seconds=0)
