"""Notification payloads sent to the notification sink."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationKind(str, Enum):
    """Kinds of collaboration notifications."""

    NOTE_CREATED = "note_created"
    NOTE_SHARED_SELF = "note_shared_self"
    NOTE_SHARED_WITH_USER = "note_shared_with_user"
    NOTE_UPDATED_SELF = "note_updated_self"
    NOTE_UPDATED_SHARED = "note_updated_shared"
    NOTE_DELETED = "note_deleted"
    NOTE_COPIED = "note_copied"


class Notification(BaseModel):
    """One notification addressed to one or many recipients."""

    actor: uuid.UUID = Field(description="User whose action triggered the notification")
    recipients: List[uuid.UUID] = Field(min_length=1)
    kind: NotificationKind
    title: str
    message: str
    reference_id: uuid.UUID = Field(description="Note the notification is about")
    url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def payload_for(self, recipient: uuid.UUID) -> dict:
        """JSON-ready payload as stored in one recipient's inbox."""
        data = self.model_dump(mode="json", exclude={"recipients"})
        data["user"] = str(recipient)
        return data
