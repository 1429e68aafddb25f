"""
Transcript rendering for the reminder extraction prompt.
"""

from typing import Iterable

from reminder_sync.domain.message import Message
from reminder_sync.utils.time import format_iso_utc


def format_message_line(message: Message) -> str:
    """Render one message as a transcript line (without trailing newline)."""
    return (
        f"[{format_iso_utc(message.timestamp)}] "
        f"[Group: {message.display_group}] "
        f"[Sender: {message.sender_id}]: {message.text}"
    )


def format_transcript(messages: Iterable[Message]) -> str:
    """
    Render a batch of messages, in the order given, one line each.

    Message text is not escaped: embedded newlines continue onto the next
    visual line.
    """
    return "".join(f"{format_message_line(m)}\n" for m in messages)
