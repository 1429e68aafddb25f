"""
Reminder domain models and schemas.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from pydantic import BaseModel, field_validator

from reminder_sync.utils.time import normalize_due_date

# Sheet layout: header on row 0, columns A..E
HEADER_ROW_INDEX = 0
TITLE_COL = 0        # Column A
DUE_DATE_COL = 1     # Column B
DESC_COL = 2         # Column C
ICON_COL = 3         # Column D
STATUS_COL = 4       # Column E
NUM_COLUMNS = 5
LAST_COLUMN = chr(ord("A") + NUM_COLUMNS - 1)


def normalize_title(title: Optional[str]) -> str:
    """Merge key for a reminder title: trimmed and lowercased."""
    return (title or "").strip().lower()


class CandidateReminder(BaseModel):
    """Reminder proposed by the language model, not yet persisted."""
    title: str = ""  # Blank titles are skipped by the reconciler
    description: str = ""
    due_date: Optional[str] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalize_due_date(cls, value):
        if value is None or isinstance(value, str):
            return normalize_due_date(value)
        return value


@dataclass
class ReminderRecord:
    """A reminder row as stored in the sheet."""
    title: str
    due_date: str
    description: str
    icon: str
    status: str
    row_number: int  # 1-based sheet row

    @classmethod
    def from_cells(cls, cells: Sequence, row_number: int) -> "ReminderRecord":
        """
        Build a record from positional sheet cells.

        Missing trailing cells (the Sheets API omits empty ones) default to
        empty strings and non-string cells are stringified, so a ragged or
        oddly typed row never raises.
        """
        cells = list(cells or [])

        def cell(index: int) -> str:
            if index >= len(cells) or cells[index] is None:
                return ""
            return str(cells[index])

        return cls(
            title=cell(TITLE_COL).strip(),
            due_date=cell(DUE_DATE_COL),
            description=cell(DESC_COL),
            icon=cell(ICON_COL),
            status=cell(STATUS_COL),
            row_number=row_number,
        )

    @property
    def normalized_title(self) -> str:
        return normalize_title(self.title)

    def to_cells(self) -> List[str]:
        return [self.title, self.due_date, self.description, self.icon, self.status]


@dataclass
class RowUpdate:
    """One row overwrite inside a batched update."""
    range: str
    values: List[str]

    def to_request(self) -> dict:
        return {"range": self.range, "values": [self.values]}


@dataclass
class SyncReport:
    """Outcome of one reconciliation run."""
    updated: int = 0
    appended: int = 0
    skipped: int = 0
    update_error: Optional[str] = None
    append_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.update_error is None and self.append_error is None
