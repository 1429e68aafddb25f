"""
Inbound chat message models.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """One buffered group chat message."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime  # Arrival instant (UTC)
    sender_id: str
    group_id: str
    group_name: Optional[str] = None
    text: str

    @property
    def display_group(self) -> str:
        """Group name when known, otherwise the group id."""
        return self.group_name or self.group_id


class BridgeMessageEvent(BaseModel):
    """
    Message event pushed by the WhatsApp bridge.

    Field names follow the bridge's camelCase JSON; unknown fields are
    ignored so newer bridge versions keep working.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = "message"
    id: Optional[str] = None
    sender: str = ""
    chat_id: str = Field(default="", alias="chatId")
    content: Optional[str] = ""
    timestamp: Optional[Union[float, str]] = None  # Bridge send time, informational only
    is_group: Optional[bool] = Field(default=None, alias="isGroup")
    from_me: bool = Field(default=False, alias="fromMe")
    group_name: Optional[str] = Field(default=None, alias="groupName")
