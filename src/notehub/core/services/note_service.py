"""Note service implementation."""

import copy
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from .. import notifications
from ..exceptions import Forbidden, InvalidRequest, NotFound, StoreFailure, Unauthenticated
from ..logging import get_logger
from ..notifications import NotificationDispatcher, get_notification_dispatcher
from ..repositories.note_repository import NoteFilter, NoteRepository
from ..schemas.identity import Viewer
from ..schemas.notes import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    ShareResponse,
)
from ..visibility import annotate, can_edit, can_read
from .interfaces import INoteService

logger = get_logger("services.notes")


def _without_owner(user_ids: Iterable[UUID], owner_id: UUID) -> List[UUID]:
    """Dedupe recipients and drop the owner, who never sits in their own shared-with set."""
    return [user_id for user_id in dict.fromkeys(user_ids) if user_id != owner_id]


class NoteService(INoteService):
    """Note service implementation."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[NotificationDispatcher] = None):
        self.session = session
        self.note_repo = NoteRepository(session)
        self.dispatcher = dispatcher or get_notification_dispatcher()
        self.settings = get_settings()

    @asynccontextmanager
    async def _store(self, operation: str, **context):
        """Turn persistence errors into StoreFailure after logging them."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                f"Store failure during {operation}",
                extra={"operation": operation, **{k: str(v) for k, v in context.items()}},
                exc_info=e,
            )
            raise StoreFailure() from e

    def _require_viewer(self, viewer: Optional[Viewer]) -> Viewer:
        if viewer is None or getattr(viewer, "id", None) is None:
            raise Unauthenticated()
        return viewer

    async def _load(self, note_id: UUID):
        async with self._store("get_note", note_id=note_id):
            note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise NotFound()
        return note

    async def _load_owned(self, note_id: UUID, viewer: Viewer, message: str = "Forbidden: not your note"):
        note = await self._load(note_id)
        if not can_edit(note, viewer.id):
            raise Forbidden(message)
        return note

    async def create_note(self, viewer: Viewer, request: NoteCreate) -> NoteResponse:
        """Create new note."""
        viewer = self._require_viewer(viewer)
        if not request.title or not request.title.strip():
            raise InvalidRequest("Title required")

        recipients = _without_owner(request.shared_with, viewer.id)
        note_data = {
            "title": request.title.strip(),
            "project_id": request.project_id,
            "blocks": copy.deepcopy(request.blocks),
            "tags": list(request.tags),
            "is_public": request.is_public,
            "created_by": viewer.id,
            "created_username": viewer.username,
            "shared_original_id": None,
            "copied_from": None,
        }

        async with self._store("create_note", owner=viewer.id):
            note = await self.note_repo.create_note(note_data, shared_with=recipients)

        logger.info("Note created", extra={"note_id": str(note.id), "shared_with": len(recipients)})

        await self.dispatcher.dispatch(
            notifications.note_created(viewer, note, len(recipients)),
            notifications.note_shared(viewer, note, recipients, on_create=True),
        )
        return annotate(note, viewer.id)

    async def get_note(self, note_id: UUID, viewer: Viewer) -> NoteResponse:
        """Get note by ID."""
        viewer = self._require_viewer(viewer)
        note = await self._load(note_id)
        if not can_read(note, viewer.id):
            raise Forbidden()
        return annotate(note, viewer.id)

    async def update_note(self, note_id: UUID, viewer: Viewer, request: NoteUpdate) -> NoteResponse:
        """Update existing note."""
        viewer = self._require_viewer(viewer)
        note = await self._load_owned(note_id, viewer)

        patch = {}
        if request.title is not None:
            patch["title"] = request.title
        if "project_id" in request.model_fields_set:
            patch["project_id"] = request.project_id
        # empty blocks never wipe the stored content
        if request.blocks:
            patch["blocks"] = copy.deepcopy(request.blocks)
        if request.tags is not None:
            patch["tags"] = list(request.tags)
        if request.is_public is not None:
            patch["is_public"] = request.is_public

        additions = _without_owner(request.shared_with or [], note.created_by)

        async with self._store("update_note", note_id=note_id):
            updated, added = await self.note_repo.update_note(note_id, patch, additions)
        if updated is None:
            raise NotFound()

        logger.info(
            "Note updated",
            extra={"note_id": str(note_id), "fields": sorted(patch), "added_recipients": len(added)},
        )

        recipients = sorted(updated.shared_with_ids, key=str)
        if recipients:
            await self.dispatcher.dispatch(
                notifications.note_updated_self(viewer, updated, len(recipients)),
                notifications.note_updated_shared(viewer, updated, recipients),
            )
        return annotate(updated, viewer.id)

    async def delete_note(self, note_id: UUID, viewer: Viewer) -> bool:
        """Delete note."""
        viewer = self._require_viewer(viewer)
        note = await self._load_owned(note_id, viewer, message="Forbidden")

        # captured before the row (and its share rows) disappear
        recipients = sorted(note.shared_with_ids, key=str)
        title = note.title

        async with self._store("delete_note", note_id=note_id):
            deleted = await self.note_repo.delete_note(note_id)
        if not deleted:
            raise NotFound()

        await self.dispatcher.dispatch(notifications.note_deleted(viewer, note_id, title, recipients))
        return True

    async def share_note(self, note_id: UUID, viewer: Viewer, request: ShareRequest) -> ShareResponse:
        """Share note with more users (set union)."""
        viewer = self._require_viewer(viewer)
        if not request.target_user_ids:
            raise InvalidRequest("No users selected")

        note = await self._load_owned(note_id, viewer, message="Forbidden")
        targets = _without_owner(request.target_user_ids, note.created_by)

        async with self._store("share_note", note_id=note_id):
            added = await self.note_repo.add_shares(note_id, targets)
            note = await self.note_repo.get_by_id(note_id)
        if note is None:
            raise NotFound()

        logger.info(
            "Note shared",
            extra={"note_id": str(note_id), "requested": len(targets), "added": len(added)},
        )

        # already-shared recipients are not notified again
        await self.dispatcher.dispatch(notifications.note_shared(viewer, note, added))
        return ShareResponse(note=annotate(note, viewer.id), added=added)

    async def copy_note(self, note_id: UUID, viewer: Viewer) -> NoteResponse:
        """Copy a note into a new, independently owned note."""
        viewer = self._require_viewer(viewer)
        original = await self._load(note_id)

        note_data = {
            "title": original.title,
            "project_id": original.project_id,
            "blocks": copy.deepcopy(original.blocks or []),
            "tags": list(original.tags or []),
            "is_public": False,
            "created_by": viewer.id,
            "created_username": viewer.username,
            "shared_original_id": original.id,
            "copied_from": original.created_by,
        }

        async with self._store("copy_note", note_id=note_id):
            new_note = await self.note_repo.create_note(note_data)

        logger.info(
            "Note copied", extra={"note_id": str(new_note.id), "original_id": str(original.id)}
        )

        if original.created_by != viewer.id:
            await self.dispatcher.dispatch(notifications.note_copied(viewer, original, new_note))
        return annotate(new_note, viewer.id)

    async def list_visible_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        """All notes the viewer owns, can see publicly, or has been shared."""
        return await self._list(viewer, NoteFilter(), page, per_page)

    async def list_my_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        viewer = self._require_viewer(viewer)
        return await self._list(viewer, NoteFilter(created_by=viewer.id), page, per_page)

    async def list_public_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        return await self._list(viewer, NoteFilter(is_public=True), page, per_page)

    async def list_copied_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        viewer = self._require_viewer(viewer)
        return await self._list(viewer, NoteFilter(created_by=viewer.id, is_copy=True), page, per_page)

    async def list_shared_with_me(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        viewer = self._require_viewer(viewer)
        return await self._list(viewer, NoteFilter(shared_with=viewer.id), page, per_page)

    async def list_project_notes(
        self, project_id: UUID, viewer: Viewer, page: int = 1, per_page: int = 20
    ) -> NoteListResponse:
        return await self._list(viewer, NoteFilter(project_id=project_id), page, per_page)

    async def _list(self, viewer: Viewer, note_filter: NoteFilter, page: int, per_page: int) -> NoteListResponse:
        viewer = self._require_viewer(viewer)
        if page < 1:
            page = 1
        if per_page < 1:
            per_page = self.settings.default_page_size
        per_page = min(per_page, self.settings.max_page_size)

        # every listing is narrowed by the same read rule as get_note
        note_filter.readable_by = viewer.id

        async with self._store("list_notes", viewer=viewer.id):
            notes, total = await self.note_repo.find_many(note_filter, page, per_page)

        items = [annotate(note, viewer.id) for note in notes]
        return NoteListResponse.create(items=items, total=total, page=page, per_page=per_page)
