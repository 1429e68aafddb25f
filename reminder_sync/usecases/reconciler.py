"""
Reconciles extracted reminders into the Google Sheets reminders table.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from reminder_sync.config.settings import get_settings
from reminder_sync.domain.reminder import (
    HEADER_ROW_INDEX,
    CandidateReminder,
    ReminderRecord,
    RowUpdate,
    SyncReport,
    normalize_title,
)
from reminder_sync.infrastructure.sheets_store import SheetsStore, SheetsWriteError

logger = logging.getLogger(__name__)


def build_title_index(rows: Sequence[Sequence]) -> Dict[str, ReminderRecord]:
    """
    Map normalized title -> first record carrying it.

    Rows are taken in stored order with the header excluded. Later rows
    repeating a title are left out of the index and never targeted.
    """
    index: Dict[str, ReminderRecord] = {}

    for i in range(HEADER_ROW_INDEX + 1, len(rows)):
        record = ReminderRecord.from_cells(rows[i], row_number=i + 1)
        if not record.title:
            logger.warning(f"Skipping row {record.row_number}: missing title")
            continue
        index.setdefault(record.normalized_title, record)

    return index


class ReminderReconciler:
    """Decides UPDATE vs APPEND for each candidate and issues the writes."""

    def __init__(
        self,
        store: SheetsStore,
        default_icon: Optional[str] = None,
        default_status: Optional[str] = None,
    ):
        settings = get_settings()
        self.store = store
        self.default_icon = default_icon or settings.default_icon
        self.default_status = default_status or settings.default_status

    def plan_writes(
        self,
        candidates: Iterable[CandidateReminder],
        index: Dict[str, ReminderRecord],
    ) -> Tuple[List[RowUpdate], List[List[str]], int]:
        """
        Classify candidates against the title index.

        Returns:
            (row updates, rows to append, number of skipped candidates)
        """
        updates: List[RowUpdate] = []
        appends: List[List[str]] = []
        skipped = 0

        for candidate in candidates:
            key = normalize_title(candidate.title)
            if not key:
                logger.warning(f"Skipping reminder with no title: {candidate.model_dump()}")
                skipped += 1
                continue

            title = candidate.title.strip()
            due_date = candidate.due_date or ""
            description = candidate.description or ""
            existing = index.get(key)

            if existing:
                logger.info(f"Found existing reminder for '{title}' at row {existing.row_number}, preparing update")
                # Icon and status belong to the operator: carry them forward
                row = [
                    title,
                    due_date,
                    description,
                    existing.icon or self.default_icon,
                    existing.status or self.default_status,
                ]
                updates.append(RowUpdate(range=self.store.row_range(existing.row_number), values=row))
            else:
                logger.info(f"Adding new reminder '{title}' to append list")
                appends.append([title, due_date, description, self.default_icon, self.default_status])

        return updates, appends, skipped

    async def reconcile(self, candidates: Sequence[CandidateReminder]) -> SyncReport:
        """
        Sync candidates into the sheet: update rows whose title matches, append the rest.

        Args:
            candidates: Reminders proposed by the model

        Returns:
            SyncReport describing what was written

        Raises:
            SheetsReadError: Existing rows could not be loaded; nothing was written
        """
        report = SyncReport()
        if not candidates:
            logger.info("No reminders to sync")
            return report

        # A failed read must abort: treating the table as empty would duplicate every row
        rows = await self.store.read_rows()

        index = build_title_index(rows)
        logger.info(f"Mapped {len(index)} unique existing reminders")

        logger.info(f"Processing {len(candidates)} reminders from the model")
        updates, appends, report.skipped = self.plan_writes(candidates, index)

        if updates:
            logger.info(f"Performing batch update for {len(updates)} reminders")
            try:
                await self.store.batch_update(updates)
                report.updated = len(updates)
            except SheetsWriteError as e:
                report.update_error = str(e)
        else:
            logger.info("No existing reminders require updates")

        if appends:
            logger.info(f"Appending {len(appends)} new reminders")
            try:
                await self.store.append_rows(appends)
                report.appended = len(appends)
            except SheetsWriteError as e:
                report.append_error = str(e)
        else:
            logger.info("No new reminders to append")

        logger.info(
            f"Sync complete: {report.updated} updated, {report.appended} appended, {report.skipped} skipped"
        )
        return report
