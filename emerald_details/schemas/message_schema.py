"""Conversation and message records for the messaging relay."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from emerald_details.utils import new_id, utcnow


class Message(BaseModel):
    """A single append-only message in a conversation log."""
    id: str = Field(default_factory=new_id)
    sender_id: str
    sender_name: str
    receiver_id: str
    appointment_id: Optional[str] = None
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    is_read: bool = False


class Conversation(BaseModel):
    """Conversation between an unordered pair of participants."""
    id: str = Field(default_factory=new_id)
    participant_ids: list[str]
    participant_names: dict[str, str] = Field(default_factory=dict)
    appointment_id: Optional[str] = None
    last_message: Optional[str] = None
    last_message_timestamp: datetime = Field(default_factory=utcnow)
    unread_counts: dict[str, int] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    def other_participant(self, user_id: str) -> Optional[str]:
        return next((p for p in self.participant_ids if p != user_id), None)

    def other_participant_name(self, user_id: str) -> str:
        other = self.other_participant(user_id)
        return self.participant_names.get(other, "Unknown") if other else "Unknown"

    def unread_for(self, user_id: str) -> int:
        return self.unread_counts.get(user_id, 0)
