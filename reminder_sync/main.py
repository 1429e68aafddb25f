"""
WhatsApp Group Reminder Sync - Main Application Entry Point

Buffers WhatsApp group messages pushed by a bridge, extracts reminders
from them with OpenAI on a fixed interval, and syncs the reminders into a
Google Sheet.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from reminder_sync.api.whatsapp_webhook import router as whatsapp_router
from reminder_sync.config.settings import get_settings
from reminder_sync.infrastructure.scheduler import (
    get_scheduler,
    schedule_sync_job,
    start_scheduler,
    stop_scheduler,
)
from reminder_sync.infrastructure.sheets_store import SheetsStore
from reminder_sync.usecases.message_buffer import MessageBuffer
from reminder_sync.usecases.reconciler import ReminderReconciler
from reminder_sync.usecases.sync_cycle import SyncCycle

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting WhatsApp Group Reminder Sync...")

    buffer = MessageBuffer()
    reconciler = ReminderReconciler(SheetsStore.from_settings())
    sync_cycle = SyncCycle(buffer, reconciler)

    app.state.message_buffer = buffer
    app.state.sync_cycle = sync_cycle

    logger.info("Starting scheduler...")
    schedule_sync_job(sync_cycle)
    await start_scheduler()

    logger.info("Application startup complete!")
    logger.info(f"AI model: {settings.llm_model}")
    logger.info(f"Target sheet: {settings.google_sheet_name}")
    logger.info(f"Bridge token validation: {bool(settings.bridge_token)}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_scheduler()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="WhatsApp Group Reminder Sync",
    description="Extracts reminders from WhatsApp group chats into Google Sheets",
    version="1.0.0",
    lifespan=lifespan
)

# Register routers
app.include_router(whatsapp_router, tags=["WhatsApp"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "WhatsApp Group Reminder Sync",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "webhook": "/webhook/whatsapp",
            "health": "/health",
            "scheduler": "/scheduler/status"
        }
    }


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint, with the sync cycle's progress when it is running."""
    response = {"status": "healthy", "service": "whatsapp-reminder-sync"}

    sync_cycle = getattr(request.app.state, "sync_cycle", None)
    if sync_cycle is not None:
        last_cycle_at = sync_cycle.last_cycle_at
        response.update({
            "last_cycle_at": last_cycle_at.isoformat() if last_cycle_at else None,
            "watermark": sync_cycle.watermark.isoformat(),
            "pending_messages": len(sync_cycle.buffer),
            "cycle_state": sync_cycle.state.value,
        })

    return response


@app.get("/scheduler/status")
async def scheduler_status():
    """Get scheduler status and pending jobs."""
    scheduler = get_scheduler()

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": str(job.next_run_time) if getattr(job, "next_run_time", None) else None
        })

    return {
        "running": scheduler.running,
        "jobs_count": len(jobs),
        "jobs": jobs
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "reminder_sync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
