"""
Tests for the periodic sync job registration.
"""

from datetime import timedelta
import pytest
from unittest.mock import MagicMock

from reminder_sync.infrastructure import scheduler as scheduler_module
from reminder_sync.infrastructure.scheduler import SYNC_JOB_ID, get_scheduler, schedule_sync_job, stop_scheduler


def test_schedule_sync_job(monkeypatch):
    monkeypatch.setattr(scheduler_module, "scheduler", None)
    cycle = MagicMock()

    schedule_sync_job(cycle, interval_minutes=5)
    job = get_scheduler().get_job(SYNC_JOB_ID)

    assert job is not None
    assert job.func is cycle.run_cycle
    assert job.trigger.interval == timedelta(minutes=5)
    assert job.max_instances == 1
    assert job.coalesce is True


@pytest.mark.asyncio
async def test_stop_scheduler_waits_for_running_jobs(monkeypatch):
    running = MagicMock(running=True)
    monkeypatch.setattr(scheduler_module, "scheduler", running)

    await stop_scheduler()

    running.shutdown.assert_called_once_with(wait=True)
    assert scheduler_module.scheduler is None
