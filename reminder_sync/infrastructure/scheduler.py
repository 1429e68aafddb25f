"""
APScheduler setup for the periodic reminder sync.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from reminder_sync.config.settings import get_settings

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "reminder_sync"

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the scheduler instance."""
    global scheduler

    if scheduler is None:
        scheduler = AsyncIOScheduler(timezone="UTC")

    return scheduler


async def start_scheduler() -> None:
    """Start the scheduler."""
    sched = get_scheduler()
    if not sched.running:
        sched.start()
        logger.info("Scheduler started")


async def stop_scheduler() -> None:
    """Stop the scheduler gracefully."""
    global scheduler
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
    scheduler = None


def schedule_sync_job(sync_cycle, interval_minutes: Optional[int] = None) -> None:
    """
    Register the periodic sync job.

    Args:
        sync_cycle: SyncCycle whose run_cycle is fired on every tick
        interval_minutes: Period between ticks (defaults to settings)
    """
    if interval_minutes is None:
        interval_minutes = get_settings().sync_interval_minutes

    sched = get_scheduler()
    sched.add_job(
        sync_cycle.run_cycle,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=SYNC_JOB_ID,
        name="Reminder sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Reminder sync scheduled every {interval_minutes} minute(s)")
