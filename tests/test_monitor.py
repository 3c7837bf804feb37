"""Tests for the liveness monitor timer."""

from __future__ import annotations

import asyncio

import pytest

from chatlink.events import ProbeTick
from chatlink.monitor import LivenessMonitor


@pytest.mark.asyncio
async def test_ticks_while_active(wait_for):
    ticks: list[ProbeTick] = []
    monitor = LivenessMonitor(0.01, ticks.append)
    monitor.start()
    await wait_for(lambda: len(ticks) >= 3)
    monitor.stop()
    assert {t.generation for t in ticks} == {1}


@pytest.mark.asyncio
async def test_stop_when_inactive_is_noop():
    monitor = LivenessMonitor(0.01, lambda tick: None)
    monitor.stop()
    assert monitor.active is False
    assert monitor.generation == 0


@pytest.mark.asyncio
async def test_no_tick_after_stop(wait_for, monitor_tasks):
    ticks: list[ProbeTick] = []
    monitor = LivenessMonitor(0.01, ticks.append)
    monitor.start()
    await wait_for(lambda: len(ticks) >= 1)
    monitor.stop()
    seen = len(ticks)
    await asyncio.sleep(0.05)
    assert len(ticks) == seen
    assert monitor_tasks() == []


@pytest.mark.asyncio
async def test_ticks_from_before_stop_are_stale(wait_for):
    ticks: list[ProbeTick] = []
    monitor = LivenessMonitor(0.01, ticks.append)
    monitor.start()
    await wait_for(lambda: len(ticks) >= 1)
    assert monitor.is_current(ticks[-1])
    monitor.stop()
    assert not monitor.is_current(ticks[-1])
    monitor.start()
    assert not monitor.is_current(ticks[-1])
    monitor.stop()


@pytest.mark.asyncio
async def test_restart_keeps_single_timer(monitor_tasks):
    monitor = LivenessMonitor(0.01, lambda tick: None)
    for _ in range(5):
        monitor.start()
    await asyncio.sleep(0.02)
    assert len(monitor_tasks()) == 1
    monitor.stop()
    await asyncio.sleep(0.01)
    assert monitor_tasks() == []
