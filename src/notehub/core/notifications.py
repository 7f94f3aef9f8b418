"""
Collaboration notifications.

Notifications are a side channel: they are sent after a mutation has
committed, every delivery is attempted, failures are logged and swallowed.
Nothing here can fail or roll back the mutation that triggered it.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from uuid import UUID

from redis.exceptions import RedisError

from ..config import get_settings
from .logging import get_logger
from .redis_client import RedisClient, get_redis_client
from .schemas.identity import Viewer
from .schemas.notifications import Notification, NotificationKind

logger = get_logger("notifications")


class NotificationDeliveryError(Exception):
    """A sink could not hand a notification over."""


class NotificationSink(ABC):
    """Destination for notifications."""

    @abstractmethod
    async def deliver(self, notification: Notification) -> None:
        """Deliver to every recipient or raise."""
        pass


class RedisNotificationSink(NotificationSink):
    """Stores notifications in per-user Redis inboxes and publishes them live."""

    def __init__(self, client: Optional[RedisClient] = None):
        self.client = client or get_redis_client()

    async def deliver(self, notification: Notification) -> None:
        missed = []
        for recipient in notification.recipients:
            try:
                delivered = await self.client.push_notification(
                    recipient, notification.payload_for(recipient)
                )
            except RedisError as e:
                logger.debug(f"Inbox push failed for {recipient}: {e}")
                delivered = False
            if not delivered:
                missed.append(recipient)

        if missed:
            raise NotificationDeliveryError(
                f"{len(missed)} of {len(notification.recipients)} recipients not reached"
            )


class NotificationDispatcher:
    """Best-effort fan-out of notifications to a sink."""

    def __init__(self, sink: NotificationSink, enabled: bool = True):
        self.sink = sink
        self.enabled = enabled

    async def dispatch(self, *notifications: Optional[Notification]) -> int:
        """Attempt every delivery, wait for all of them, never raise.

        Returns how many notifications were delivered.
        """
        pending = [n for n in notifications if n is not None]
        if not self.enabled or not pending:
            return 0

        results = await asyncio.gather(
            *(self.sink.deliver(n) for n in pending), return_exceptions=True
        )

        delivered = 0
        for notification, result in zip(pending, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Notification delivery failed",
                    extra={
                        "kind": notification.kind.value,
                        "reference_id": str(notification.reference_id),
                        "recipients": len(notification.recipients),
                        "error": repr(result),
                    },
                )
            else:
                delivered += 1
        return delivered


def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency: dispatcher bound to the Redis sink."""
    settings = get_settings()
    return NotificationDispatcher(RedisNotificationSink(), enabled=settings.notifications_enabled)


# Message templates


def _note_url(note_id: UUID) -> str:
    return f"/notes/{note_id}"


def _recipients(ids: Iterable[UUID]) -> List[UUID]:
    return list(dict.fromkeys(ids))


def note_created(actor: Viewer, note, recipient_count: int = 0) -> Notification:
    """Self-acknowledgement for the owner of a new note."""
    if recipient_count:
        return Notification(
            actor=actor.id,
            recipients=[actor.id],
            kind=NotificationKind.NOTE_SHARED_SELF,
            title=f'You shared a note "{note.title}"',
            message=f'📝 You shared a new note "{note.title}" with {recipient_count} users.',
            reference_id=note.id,
            url=_note_url(note.id),
        )
    return Notification(
        actor=actor.id,
        recipients=[actor.id],
        kind=NotificationKind.NOTE_CREATED,
        title=f'Note "{note.title}" created',
        message=f'📝 You created a new note "{note.title}".',
        reference_id=note.id,
        url=_note_url(note.id),
    )


def note_shared(actor: Viewer, note, recipients: Iterable[UUID], on_create: bool = False) -> Optional[Notification]:
    recipients = _recipients(recipients)
    if not recipients:
        return None
    if on_create:
        title = "New note shared with you"
        message = f'📝 {actor.username} shared a note "{note.title}" with you.'
    else:
        title = "Note shared"
        message = f'📝 {actor.username} shared "{note.title}" with you.'
    return Notification(
        actor=actor.id,
        recipients=recipients,
        kind=NotificationKind.NOTE_SHARED_WITH_USER,
        title=title,
        message=message,
        reference_id=note.id,
        url=_note_url(note.id),
    )


def note_updated_self(actor: Viewer, note, recipient_count: int) -> Notification:
    return Notification(
        actor=actor.id,
        recipients=[actor.id],
        kind=NotificationKind.NOTE_UPDATED_SELF,
        title="You updated a shared note",
        message=f'📝 You updated the note "{note.title}" shared with {recipient_count} users.',
        reference_id=note.id,
        url=_note_url(note.id),
    )


def note_updated_shared(actor: Viewer, note, recipients: Iterable[UUID]) -> Optional[Notification]:
    recipients = _recipients(recipients)
    if not recipients:
        return None
    owner_name = note.created_username or actor.username
    return Notification(
        actor=actor.id,
        recipients=recipients,
        kind=NotificationKind.NOTE_UPDATED_SHARED,
        title=f'Note "{note.title}" updated',
        message=f'📝 {owner_name} updated a shared note "{note.title}".',
        reference_id=note.id,
        url=_note_url(note.id),
    )


def note_deleted(actor: Viewer, note_id: UUID, title: str, recipients: Iterable[UUID]) -> Optional[Notification]:
    recipients = _recipients(recipients)
    if not recipients:
        return None
    # no url: the note is gone
    return Notification(
        actor=actor.id,
        recipients=recipients,
        kind=NotificationKind.NOTE_DELETED,
        title=f'Note "{title}" deleted',
        message=f'🗑️ The shared note "{title}" was deleted.',
        reference_id=note_id,
    )


def note_copied(actor: Viewer, original, copy) -> Notification:
    return Notification(
        actor=actor.id,
        recipients=[original.created_by],
        kind=NotificationKind.NOTE_COPIED,
        title=f'Your note "{original.title}" was copied',
        message=f'📋 {actor.username or "Someone"} copied your note "{original.title}".',
        reference_id=copy.id,
        url=_note_url(copy.id),
    )
