from __future__ import annotations

import asyncio
import logging

import pytest

from aistrack.inactivity import InactivityMonitor


def test_tick_accumulates_and_logs_minutes(caplog: pytest.LogCaptureFixture) -> None:
    monitor = InactivityMonitor(interval=300.0)

    with caplog.at_level(logging.INFO, logger="aistrack.inactivity"):
        monitor.tick()
        monitor.tick()

    assert monitor.elapsed == 600.0
    assert "5 minutes since last message..." in caplog.text
    assert "10 minutes since last message..." in caplog.text


def test_reset_zeroes_counter() -> None:
    monitor = InactivityMonitor(interval=300.0)
    monitor.tick()
    monitor.reset()
    assert monitor.elapsed == 0.0


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InactivityMonitor(interval=0)


@pytest.mark.asyncio
async def test_running_timer_ticks_until_stopped() -> None:
    monitor = InactivityMonitor(interval=0.005)
    monitor.start()
    await asyncio.sleep(0.05)
    monitor.stop()

    assert not monitor.running
    ticked = monitor.elapsed
    assert ticked > 0
    await asyncio.sleep(0.02)
    assert monitor.elapsed == ticked


@pytest.mark.asyncio
async def test_start_replaces_previous_timer() -> None:
    monitor = InactivityMonitor(interval=0.005)
    monitor.start()
    first = monitor._task  # type: ignore[attr-defined]
    monitor.start()
    await asyncio.sleep(0)

    assert first is not None
    assert first.cancelled() or first.done()
    assert monitor.running
    monitor.stop()
