"""
Google Sheets access for the reminders table.
"""

import asyncio
import json
import logging
from typing import List

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from reminder_sync.config.settings import get_settings
from reminder_sync.domain.reminder import LAST_COLUMN, RowUpdate

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

# Cells are stored exactly as sent; date-like strings stay text
VALUE_INPUT_OPTION = "RAW"


class SheetsError(Exception):
    """Base class for Google Sheets failures."""


class SheetsReadError(SheetsError):
    """Existing rows could not be loaded."""


class SheetsWriteError(SheetsError):
    """An update or append request failed."""


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a sheet name for A1 notation ('My Sheet' -> "'My Sheet'")."""
    return "'" + sheet_name.replace("'", "''") + "'"


def _describe_http_error(error: Exception) -> str:
    """Pull Google's error payload out of an HttpError for logging."""
    if isinstance(error, HttpError):
        try:
            details = json.loads(error.content.decode("utf-8")).get("error", {})
            return f"HTTP {error.resp.status}: {json.dumps(details)}"
        except (ValueError, AttributeError):
            return f"HTTP {getattr(error.resp, 'status', '?')}: {error}"
    return str(error)


class SheetsStore:
    """Reads and writes the five-column reminders range of one sheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        service_account_email: str,
        private_key: str,
        service=None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._service_account_email = service_account_email
        self._private_key = private_key
        self._service = service

    @classmethod
    def from_settings(cls) -> "SheetsStore":
        settings = get_settings()
        return cls(
            spreadsheet_id=settings.google_sheet_id,
            sheet_name=settings.google_sheet_name,
            service_account_email=settings.google_service_account_email,
            private_key=settings.google_private_key,
        )

    @property
    def read_range(self) -> str:
        return f"{quote_sheet_name(self.sheet_name)}!A:{LAST_COLUMN}"

    def row_range(self, row_number: int) -> str:
        """A1 range covering columns A..E of a single 1-based row."""
        return f"{quote_sheet_name(self.sheet_name)}!A{row_number}:{LAST_COLUMN}{row_number}"

    def _get_service(self):
        """Build the Sheets API client on first use."""
        if self._service is not None:
            return self._service

        logger.info("Creating Google Sheets client for service account")
        creds = Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": self._service_account_email,
                "private_key": self._private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=SHEETS_SCOPES,
        )
        self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        logger.info("Google Sheets client ready")
        return self._service

    def _read_rows_sync(self) -> List[list]:
        response = (
            self._get_service()
            .spreadsheets()
            .values()
            .get(spreadsheetId=self.spreadsheet_id, range=self.read_range)
            .execute()
        )
        return response.get("values", []) or []

    def _batch_update_sync(self, updates: List[RowUpdate]) -> dict:
        body = {
            "valueInputOption": VALUE_INPUT_OPTION,
            "data": [u.to_request() for u in updates],
        }
        return (
            self._get_service()
            .spreadsheets()
            .values()
            .batchUpdate(spreadsheetId=self.spreadsheet_id, body=body)
            .execute()
        )

    def _append_rows_sync(self, rows: List[List[str]]) -> dict:
        return (
            self._get_service()
            .spreadsheets()
            .values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=self.read_range,
                valueInputOption=VALUE_INPUT_OPTION,
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            )
            .execute()
        )

    async def read_rows(self) -> List[list]:
        """
        Fetch every row of A:E in stored order (row 0 is the header).

        Raises:
            SheetsReadError: The read (or client setup) failed
        """
        logger.info(f"Reading existing data from range {self.read_range}")
        try:
            rows = await asyncio.to_thread(self._read_rows_sync)
        except Exception as e:
            detail = _describe_http_error(e)
            logger.error(f"Failed to read sheet data: {detail}")
            raise SheetsReadError(detail) from e

        logger.info(f"Read {len(rows)} rows")
        return rows

    async def batch_update(self, updates: List[RowUpdate]) -> int:
        """
        Overwrite several rows in one request.

        Returns:
            Number of rows the API reports as updated

        Raises:
            SheetsWriteError: The request failed
        """
        try:
            result = await asyncio.to_thread(self._batch_update_sync, updates)
        except Exception as e:
            detail = _describe_http_error(e)
            logger.error(f"Failed during batch update: {detail}")
            raise SheetsWriteError(detail) from e

        updated_rows = result.get("totalUpdatedRows", 0) or 0
        logger.info(
            f"Batch update successful: {updated_rows} rows updated across "
            f"{len(result.get('responses', []) or [])} ranges"
        )
        return updated_rows

    async def append_rows(self, rows: List[List[str]]) -> int:
        """
        Append rows after the existing data; the API picks the positions.

        Returns:
            Number of rows the API reports as appended

        Raises:
            SheetsWriteError: The request failed
        """
        try:
            result = await asyncio.to_thread(self._append_rows_sync, rows)
        except Exception as e:
            detail = _describe_http_error(e)
            logger.error(f"Failed during append: {detail}")
            raise SheetsWriteError(detail) from e

        appended = (result.get("updates") or {}).get("updatedRows", 0) or 0
        logger.info(f"Append successful: {appended} rows appended")
        return appended
