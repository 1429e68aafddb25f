"""
OpenAI-powered reminder extraction from group chat transcripts.
"""

import json
import logging
from datetime import date
from typing import List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from reminder_sync.config.settings import get_settings
from reminder_sync.domain.reminder import CandidateReminder

logger = logging.getLogger(__name__)
settings = get_settings()

# Initialize OpenAI client
openai_client = AsyncOpenAI(api_key=settings.openai_api_key)

# Structured output schema: an object wrapping the reminder array, since
# the response_format schema root must be an object
REMINDER_LIST_SCHEMA = {
    "type": "object",
    "properties": {
        "reminders": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": "A clear, concise title for the reminder or task (max 10 words).",
                    },
                    "description": {
                        "type": "string",
                        "description": "A detailed description of the task, event, or information to be reminded of.",
                    },
                    "due_date": {
                        "type": "string",
                        "description": "The due date in YYYY-MM-DD ISO 8601 format. Infer from text and current date. Omit if not found/inferrable.",
                    },
                },
                "required": ["title", "description"],
            },
        }
    },
    "required": ["reminders"],
}

EXTRACTION_PROMPT = """You are an AI assistant analyzing a transcript of WhatsApp group messages from the last processing period for a shared reminders dashboard. Your task is to identify any potential tasks, deadlines, events, or important information mentioned in *any* of the messages that should be turned into reminders. Avoid creating duplicate reminders if the same task is mentioned multiple times, consolidate if possible.

Current Date: {current_date}

Analyze the following transcript:
--- TRANSCRIPT START ---
{transcript}--- TRANSCRIPT END ---

Extract all potential reminders. For each reminder, provide:
1.  A concise 'title'.
2.  A detailed 'description'.
3.  A 'due_date' in YYYY-MM-DD format if a specific date or deadline is mentioned or clearly inferrable from the text and current date. Omit 'due_date' if none is found or clearly inferrable.

Format the output STRICTLY as a JSON object with a 'reminders' array containing reminder objects conforming to the provided schema.
If no reminders are found in the transcript, return an empty array: {{"reminders": []}}."""


class ReminderExtractionError(Exception):
    """The model answered, but not with a usable reminder list."""


def build_extraction_prompt(transcript: str, reference_date: date) -> str:
    """Embed the transcript and today's date into the extraction instructions."""
    return EXTRACTION_PROMPT.format(
        current_date=reference_date.isoformat(),
        transcript=transcript,
    )


async def _call_openai_structured(prompt: str) -> Optional[str]:
    """
    Make a single OpenAI chat completion call constrained to the reminder schema.

    Args:
        prompt: Full extraction prompt

    Returns:
        Raw response content (may be None)
    """
    response = await openai_client.chat.completions.create(
        model=settings.llm_model,
        messages=[{"role": "user", "content": prompt}],
        response_format={
            "type": "json_schema",
            "json_schema": {"name": "reminder_list", "schema": REMINDER_LIST_SCHEMA},
        },
        temperature=0.1,
    )
    return response.choices[0].message.content


def parse_reminder_payload(content: Optional[str]) -> List[CandidateReminder]:
    """
    Turn raw model output into candidate reminders.

    A null/empty answer, or a payload without a reminder array, means
    "nothing actionable". Items with a null or missing title come back with
    an empty title for the reconciler to skip. Malformed JSON or items that
    are not objects raise ReminderExtractionError.
    """
    if content is None or not content.strip():
        return []

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ReminderExtractionError(f"Model returned invalid JSON: {e}") from e

    items = payload.get("reminders") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        logger.info("Model returned no reminder list, treating as empty")
        return []

    try:
        return [CandidateReminder.model_validate(item) for item in items]
    except ValidationError as e:
        raise ReminderExtractionError(f"Model output failed schema validation: {e}") from e


async def extract_reminders(transcript: str, reference_date: date) -> List[CandidateReminder]:
    """
    Extract candidate reminders from a message transcript.

    Args:
        transcript: Formatted message transcript
        reference_date: "Today", used to resolve relative dates like "next Friday"

    Returns:
        Candidate reminders (possibly empty)

    Raises:
        openai.OpenAIError: The API call failed (not retried)
        ReminderExtractionError: The response could not be parsed
    """
    prompt = build_extraction_prompt(transcript, reference_date)

    logger.info(f"Sending transcript ({len(transcript)} chars) to {settings.llm_model} for reminder extraction")
    content = await _call_openai_structured(prompt)

    reminders = parse_reminder_payload(content)
    logger.info(f"Model proposed {len(reminders)} reminder(s)")
    logger.debug(f"Extracted reminders: {[r.model_dump() for r in reminders]}")

    return reminders
