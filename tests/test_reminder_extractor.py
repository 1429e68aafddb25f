"""
Unit tests for reminder extraction with mocked OpenAI calls.
"""

import json
import pytest
from datetime import date
from unittest.mock import AsyncMock, patch, MagicMock

from reminder_sync.ai.reminder_extractor import (
    ReminderExtractionError,
    build_extraction_prompt,
    extract_reminders,
    parse_reminder_payload,
)

TRANSCRIPT = "[2024-05-01T09:00:01.000Z] [Group: Project Team] [Sender: 92300]: Report due next Friday\n"


class TestExtractReminders:
    """Tests for the extract_reminders function."""

    @pytest.mark.asyncio
    async def test_extract_reminders(self, mock_openai_response):
        """Test a well-formed structured response."""
        with patch("reminder_sync.ai.reminder_extractor._call_openai_structured", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = json.dumps(mock_openai_response)

            result = await extract_reminders(TRANSCRIPT, date(2024, 5, 1))

        assert [r.title for r in result] == ["Submit Report", "Pay Fees"]
        assert result[0].due_date == "2024-05-10"
        assert result[1].due_date is None

    @pytest.mark.asyncio
    async def test_prompt_embeds_transcript_and_reference_date(self):
        with patch("reminder_sync.ai.reminder_extractor._call_openai_structured", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = '{"reminders": []}'

            await extract_reminders(TRANSCRIPT, date(2024, 5, 1))

        prompt = mock_call.call_args.args[0]
        assert "Current Date: 2024-05-01" in prompt
        assert TRANSCRIPT in prompt
        assert "--- TRANSCRIPT END ---" in prompt

    @pytest.mark.asyncio
    async def test_empty_reminder_list(self):
        with patch("reminder_sync.ai.reminder_extractor._call_openai_structured", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = '{"reminders": []}'

            result = await extract_reminders(TRANSCRIPT, date(2024, 5, 1))

        assert result == []

    @pytest.mark.asyncio
    async def test_null_content_is_empty(self):
        """A null answer is treated the same as an empty list."""
        with patch("reminder_sync.ai.reminder_extractor._call_openai_structured", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = None

            result = await extract_reminders(TRANSCRIPT, date(2024, 5, 1))

        assert result == []

    @pytest.mark.asyncio
    async def test_api_error_is_raised_without_retry(self):
        """API failures propagate to the caller and are not retried."""
        from openai import APIError

        with patch("reminder_sync.ai.reminder_extractor._call_openai_structured", new_callable=AsyncMock) as mock_call:
            mock_call.side_effect = APIError(
                message="API Error",
                request=MagicMock(),
                body=None
            )

            with pytest.raises(APIError):
                await extract_reminders(TRANSCRIPT, date(2024, 5, 1))

        assert mock_call.await_count == 1


class TestParseReminderPayload:
    """Tests for parse_reminder_payload."""

    @pytest.mark.parametrize("content", ["", "   ", "null", '{"reminders": null}', '{"other": 1}', '"text"'])
    def test_non_list_payloads_are_empty(self, content):
        assert parse_reminder_payload(content) == []

    def test_bare_array_is_accepted(self):
        result = parse_reminder_payload('[{"title": "Pay Fees", "description": "Before Friday"}]')

        assert len(result) == 1
        assert result[0].title == "Pay Fees"

    def test_invalid_json_raises(self):
        with pytest.raises(ReminderExtractionError):
            parse_reminder_payload("This is not valid JSON")

    def test_items_without_title_are_kept_blank(self):
        result = parse_reminder_payload(
            '{"reminders": [{"title": null, "description": "x"},'
            ' {"description": "no title"},'
            ' {"title": "Pay Fees", "description": null}]}'
        )

        assert [r.title for r in result] == ["", "", "Pay Fees"]
        assert result[2].description == ""

    def test_non_object_item_raises(self):
        with pytest.raises(ReminderExtractionError):
            parse_reminder_payload('{"reminders": ["Pay Fees"]}')

    def test_missing_description_defaults_to_empty(self):
        result = parse_reminder_payload('{"reminders": [{"title": "Pay Fees"}]}')

        assert result[0].description == ""

    def test_due_date_is_normalized(self):
        result = parse_reminder_payload(
            '{"reminders": [{"title": "A", "description": "", "due_date": "2024-05-10T00:00:00"},'
            ' {"title": "B", "description": "", "due_date": "end of term"},'
            ' {"title": "C", "description": "", "due_date": ""}]}'
        )

        assert result[0].due_date == "2024-05-10"
        assert result[1].due_date == "end of term"
        assert result[2].due_date is None

    @pytest.mark.parametrize("raw", ["May 2024", "2024-05", "Friday", "10 May", "next week"])
    def test_partial_or_relative_due_dates_stay_verbatim(self, raw):
        payload = json.dumps({"reminders": [{"title": "Pay Fees", "description": "", "due_date": raw}]})

        assert parse_reminder_payload(payload)[0].due_date == raw

    def test_full_written_date_is_normalized(self):
        payload = json.dumps({"reminders": [{"title": "Pay Fees", "description": "", "due_date": "May 10, 2024"}]})

        assert parse_reminder_payload(payload)[0].due_date == "2024-05-10"


def test_build_extraction_prompt_handles_braces_in_transcript():
    prompt = build_extraction_prompt("[Sender: x]: json {like} this\n", date(2024, 5, 1))

    assert "json {like} this" in prompt
    assert '{"reminders": []}' in prompt
