"""
WhatsApp webhook endpoint for receiving group messages from the bridge.
"""

import hmac
import logging
import threading
from collections import OrderedDict
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from reminder_sync.config.settings import get_settings
from reminder_sync.domain.message import BridgeMessageEvent, Message
from reminder_sync.usecases.message_buffer import MessageBuffer
from reminder_sync.utils.time import get_current_time

logger = logging.getLogger(__name__)
router = APIRouter()

GROUP_JID_SUFFIX = "@g.us"
MAX_TRACKED_MESSAGE_IDS = 5000

# Recently seen bridge message ids; the bridge may redeliver after a reconnect
_processed_ids: "OrderedDict[str, None]" = OrderedDict()
_processed_ids_lock = threading.Lock()


def is_message_processed(message_id: str) -> bool:
    """
    Check whether a bridge message id was already accepted.

    Args:
        message_id: Bridge message id

    Returns:
        True if the message was seen recently
    """
    with _processed_ids_lock:
        return message_id in _processed_ids


def mark_message_processed(message_id: str) -> None:
    """Remember a message id, forgetting the oldest once the cache is full."""
    with _processed_ids_lock:
        _processed_ids[message_id] = None
        _processed_ids.move_to_end(message_id)
        while len(_processed_ids) > MAX_TRACKED_MESSAGE_IDS:
            _processed_ids.popitem(last=False)


def clear_processed_messages() -> None:
    with _processed_ids_lock:
        _processed_ids.clear()


def is_group_chat(event: BridgeMessageEvent) -> bool:
    if event.is_group is not None:
        return event.is_group
    return event.chat_id.endswith(GROUP_JID_SUFFIX)


def message_from_event(event: BridgeMessageEvent) -> Optional[Message]:
    """
    Convert a bridge event into a buffered message.

    Returns:
        The message, or None for events that carry nothing to remember:
        non-message events, our own messages, direct chats and blank text.
    """
    if event.type != "message" or event.from_me:
        return None
    if not event.chat_id or not is_group_chat(event):
        return None

    text = (event.content or "").strip()
    if not text:
        return None

    return Message(
        timestamp=get_current_time(),
        sender_id=event.sender or event.chat_id,
        group_id=event.chat_id,
        group_name=(event.group_name or "").strip() or None,
        text=text,
    )


def validate_bridge_token(x_bridge_token: Optional[str] = Header(default=None)) -> None:
    """Reject requests without the shared bridge secret, when one is configured."""
    expected = get_settings().bridge_token
    if not expected:
        return
    if not x_bridge_token or not hmac.compare_digest(x_bridge_token, expected):
        logger.warning("Invalid bridge token on webhook request")
        raise HTTPException(status_code=403, detail="Invalid bridge token")


def get_message_buffer(request: Request) -> MessageBuffer:
    return request.app.state.message_buffer


@router.post("/webhook/whatsapp", dependencies=[Depends(validate_bridge_token)])
async def whatsapp_webhook(
    event: BridgeMessageEvent,
    buffer: MessageBuffer = Depends(get_message_buffer),
):
    """
    Accept one message event from the WhatsApp bridge.

    Group messages with text are buffered for the next sync cycle; anything
    else is acknowledged and dropped.
    """
    if event.id and is_message_processed(event.id):
        logger.info(f"Message {event.id} already received, skipping")
        return {"status": "ignored", "reason": "duplicate"}

    message = message_from_event(event)
    if message is None:
        logger.debug(f"Ignoring bridge event {event.id} ({event.type}) from {event.chat_id}")
        return {"status": "ignored", "reason": "not a group text message"}

    if event.id:
        mark_message_processed(event.id)

    buffer.append(message)
    logger.debug(f"Stored message from {message.sender_id} in {message.display_group}")

    return {"status": "queued"}
