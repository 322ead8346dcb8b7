"""
Tests for the periodic sweep scheduler.
"""

import asyncio

import pytest

from dropout_risk.workers.scheduler import SweepScheduler


@pytest.mark.asyncio
async def test_scheduler_runs_sweeps_until_stopped(make_engine, store, example_student):
    scheduler = SweepScheduler(make_engine(), interval_seconds=0.02)
    scheduler.start()
    assert scheduler.running

    await asyncio.sleep(0.15)
    await scheduler.stop()

    assert not scheduler.running
    assert (await store.get_risk_profile("stu-001")).score == 32


@pytest.mark.asyncio
async def test_stop_before_first_interval_skips_sweep(make_engine, store, example_student):
    scheduler = SweepScheduler(make_engine(), interval_seconds=60)
    scheduler.start()
    await scheduler.stop()

    assert await store.get_risk_profile("stu-001") is None


@pytest.mark.asyncio
async def test_failed_sweep_does_not_stop_scheduler(make_engine):
    engine = make_engine()
    calls = []

    async def broken_sweep(cancel_event=None):
        calls.append(cancel_event)
        raise ConnectionError("directory unreachable")

    engine.recompute_all = broken_sweep
    scheduler = SweepScheduler(engine, interval_seconds=0.02)
    scheduler.start()
    await asyncio.sleep(0.15)
    await scheduler.stop()

    assert len(calls) >= 2
    assert all(isinstance(event, asyncio.Event) for event in calls)
