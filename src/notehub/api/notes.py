"""Notes API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.notifications import NotificationDispatcher, get_notification_dispatcher
from ..core.schemas.common import SuccessResponse
from ..core.schemas.identity import Viewer
from ..core.schemas.notes import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    ShareResponse,
)
from ..core.services import NoteService
from ..database import get_db_session
from ..middleware.auth import get_current_viewer

router = APIRouter(prefix="/notes", tags=["notes"])


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NoteService:
    return NoteService(session, dispatcher)


@router.post("/", response_model=NoteResponse, status_code=201)
async def create_note(
    request: NoteCreate,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Create a new note."""
    return await note_service.create_note(viewer, request)


@router.get("/", response_model=NoteListResponse)
async def list_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Every note the caller may read."""
    return await note_service.list_visible_notes(viewer, page=page, per_page=per_page)


@router.get("/all", response_model=NoteListResponse)
async def list_visible_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Alias of the collection root."""
    return await note_service.list_visible_notes(viewer, page=page, per_page=per_page)


@router.get("/mine", response_model=NoteListResponse)
async def list_my_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    return await note_service.list_my_notes(viewer, page=page, per_page=per_page)


@router.get("/public", response_model=NoteListResponse)
async def list_public_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    return await note_service.list_public_notes(viewer, page=page, per_page=per_page)


@router.get("/copied", response_model=NoteListResponse)
async def list_copied_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Copies the caller has made."""
    return await note_service.list_copied_notes(viewer, page=page, per_page=per_page)


@router.get("/shared-with-me", response_model=NoteListResponse)
async def list_shared_with_me(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    return await note_service.list_shared_with_me(viewer, page=page, per_page=per_page)


@router.get("/project/{project_id}", response_model=NoteListResponse)
async def list_project_notes(
    project_id: UUID,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Readable notes attached to a project."""
    return await note_service.list_project_notes(project_id, viewer, page=page, per_page=per_page)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Get a specific note."""
    return await note_service.get_note(note_id, viewer)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Update a note."""
    return await note_service.update_note(note_id, viewer, request)


@router.delete("/{note_id}", response_model=SuccessResponse, response_model_exclude_none=True)
async def delete_note(
    note_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Delete a note."""
    await note_service.delete_note(note_id, viewer)
    return SuccessResponse(message="Note deleted")


@router.post("/{note_id}/share", response_model=ShareResponse)
async def share_note(
    note_id: UUID,
    request: ShareRequest,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Add users to the note's shared-with set."""
    return await note_service.share_note(note_id, viewer, request)


@router.post("/{note_id}/copy", response_model=NoteResponse, status_code=201)
async def copy_note(
    note_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    note_service: NoteService = Depends(get_note_service),
):
    """Copy a readable note into the caller's own notes."""
    return await note_service.copy_note(note_id, viewer)
