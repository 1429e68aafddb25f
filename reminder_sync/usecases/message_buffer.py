"""
In-memory buffer of group messages waiting for the next sync cycle.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from reminder_sync.domain.message import Message
from reminder_sync.utils.time import get_current_time

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


class MessageBuffer:
    """
    Append-only message store with an atomic time-windowed drain.

    The ingestion path and the sync cycle may run on different threads, so
    every access goes through one lock. Contents are volatile and lost on
    restart.
    """

    def __init__(self, created_at: Optional[datetime] = None):
        self._messages: List[Message] = []
        self._lock = threading.Lock()
        self._last_cutoff = created_at or get_current_time()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    @property
    def last_cutoff(self) -> datetime:
        """Cutoff of the most recent drain (creation time before the first one)."""
        with self._lock:
            return self._last_cutoff

    def append(self, message: Message) -> Message:
        """
        Store a message.

        A message stamped at or before the latest drain cutoff is moved to
        just after it, so it falls into the next window instead of behind
        the watermark.

        Returns:
            The message as stored
        """
        with self._lock:
            if message.timestamp <= self._last_cutoff:
                message = message.model_copy(update={"timestamp": self._last_cutoff + _TICK})
            self._messages.append(message)
        return message

    def drain(self, since: datetime) -> Tuple[List[Message], datetime]:
        """
        Remove and return every message newer than `since`.

        Args:
            since: Exclusive lower bound (the current watermark)

        Returns:
            (messages in arrival order, new watermark)
        """
        with self._lock:
            cutoff = max(get_current_time(), self._last_cutoff)
            batch, remaining = [], []
            for message in self._messages:
                if since < message.timestamp <= cutoff:
                    batch.append(message)
                else:
                    remaining.append(message)
            self._messages = remaining
            self._last_cutoff = cutoff

        logger.debug(f"Drained {len(batch)} message(s) in ({since.isoformat()}, {cutoff.isoformat()}]")
        return batch, cutoff
