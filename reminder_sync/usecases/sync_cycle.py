"""
Batch sync cycle: drain -> format -> extract -> reconcile.
"""

import asyncio
import logging
from datetime import date, datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from reminder_sync.ai.reminder_extractor import extract_reminders
from reminder_sync.domain.reminder import CandidateReminder, SyncReport
from reminder_sync.infrastructure.sheets_store import SheetsReadError
from reminder_sync.usecases.message_buffer import MessageBuffer
from reminder_sync.usecases.reconciler import ReminderReconciler
from reminder_sync.usecases.transcript import format_transcript
from reminder_sync.utils.time import get_current_time, get_local_date

logger = logging.getLogger(__name__)

Extractor = Callable[[str, date], Awaitable[List[CandidateReminder]]]


class CycleState(str, Enum):
    """Where the sync cycle currently is."""
    IDLE = "idle"
    DRAINING = "draining"
    EXTRACTING = "extracting"
    RECONCILING = "reconciling"


class SyncCycle:
    """
    Owns the processing watermark and runs one cycle at a time.

    The watermark advances at the start of every attempt, so a batch whose
    extraction fails is dropped rather than retried.
    """

    def __init__(
        self,
        buffer: MessageBuffer,
        reconciler: ReminderReconciler,
        extractor: Extractor = extract_reminders,
        today: Callable[[], date] = get_local_date,
    ):
        self.buffer = buffer
        self.reconciler = reconciler
        self._extract = extractor
        self._today = today
        self._lock = asyncio.Lock()

        self.state = CycleState.IDLE
        self.watermark: datetime = buffer.last_cutoff
        self.last_cycle_at: Optional[datetime] = None
        self.last_report: Optional[SyncReport] = None

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> Optional[SyncReport]:
        """
        Run one sync cycle unless another is already in flight.

        Returns:
            The reconciliation report, or None when nothing was reconciled
        """
        if self._lock.locked():
            logger.warning("Previous sync cycle still running, skipping this tick")
            return None

        async with self._lock:
            try:
                return await self._run()
            finally:
                self.state = CycleState.IDLE
                logger.info("--- Reminder sync run complete ---")

    async def _run(self) -> Optional[SyncReport]:
        self.last_cycle_at = get_current_time()
        logger.info(f"--- Running reminder sync at {self.last_cycle_at.isoformat()} ---")

        self.state = CycleState.DRAINING
        batch, self.watermark = self.buffer.drain(self.watermark)

        if not batch:
            logger.info("No new messages received since the last run")
            return None

        logger.info(f"Found {len(batch)} new messages to process")
        transcript = format_transcript(batch)

        self.state = CycleState.EXTRACTING
        try:
            candidates = await self._extract(transcript, self._today())
        except Exception as e:
            # The batch is already out of the buffer and behind the watermark: it is lost
            logger.exception(f"Reminder extraction failed, dropping {len(batch)} messages: {e}")
            return None

        if not candidates:
            logger.info("No reminders found in this batch")
            return None

        self.state = CycleState.RECONCILING
        try:
            report = await self.reconciler.reconcile(candidates)
        except SheetsReadError as e:
            logger.error(f"Aborting sheet sync due to read error: {e}")
            return None

        self.last_report = report
        return report
