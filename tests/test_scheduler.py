import asyncio

import pytest

from videosync.features.processing.scheduler import SweepScheduler
from videosync.features.processing.schemas import SweepSummary


@pytest.mark.asyncio
async def test_runs_repeatedly_and_survives_failures():
    calls = []

    async def run_sweep():
        calls.append(len(calls))
        if len(calls) == 1:
            raise RuntimeError("platform down")
        return SweepSummary()

    scheduler = SweepScheduler(0.01, run_sweep)
    scheduler.start()
    for _ in range(100):
        if len(calls) >= 3:
            break
        await asyncio.sleep(0.01)

    assert scheduler.running
    await scheduler.stop()

    assert len(calls) >= 3
    assert not scheduler.running


@pytest.mark.asyncio
async def test_stop_without_start_is_harmless():
    scheduler = SweepScheduler(60, lambda: None)
    await scheduler.stop()
    assert not scheduler.running
