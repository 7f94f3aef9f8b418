"""
Visibility rules for notes.

One authority for "who may read" and "who may edit": the pure predicates are
used on loaded notes, ``readable_by`` expresses the same read rule for the
store, and ``annotate`` is how every note leaves the service.

    can_edit  <=> viewer is the owner
    can_read  <=> can_edit OR note is public OR viewer is in the shared-with set
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import ColumnElement, or_, select

from .models.note import Note
from .models.share import NoteShare
from .schemas.notes import NoteResponse


def can_edit(note, viewer_id: Optional[UUID]) -> bool:
    """Only the owner may edit, share or delete."""
    return note.is_owned_by(viewer_id)


def can_read(note, viewer_id: Optional[UUID]) -> bool:
    if viewer_id is None:
        return False
    return can_edit(note, viewer_id) or bool(note.is_public) or viewer_id in note.shared_with_ids


def is_copy(note) -> bool:
    return note.shared_original_id is not None


def shared_with(viewer_id: UUID) -> ColumnElement[bool]:
    """Store clause: the viewer is one of the note's recipients."""
    return Note.id.in_(select(NoteShare.note_id).where(NoteShare.user_id == viewer_id))


def readable_by(viewer_id: UUID) -> ColumnElement[bool]:
    """Store clause equivalent of ``can_read``."""
    return or_(
        Note.created_by == viewer_id,
        Note.is_public.is_(True),
        shared_with(viewer_id),
    )


def annotate(note, viewer_id: Optional[UUID]) -> NoteResponse:
    """Project a note for one viewer, adding the derived can_edit / is_copy flags."""
    return NoteResponse(
        id=note.id,
        title=note.title,
        project_id=note.project_id,
        blocks=list(note.blocks or []),
        tags=list(note.tags or []),
        is_public=bool(note.is_public),
        created_by=note.created_by,
        created_username=note.created_username or "",
        shared_with=sorted(note.shared_with_ids, key=str),
        shared_original_id=note.shared_original_id,
        copied_from=note.copied_from,
        created_at=note.created_at,
        updated_at=note.updated_at,
        can_edit=can_edit(note, viewer_id),
        is_copy=is_copy(note),
    )
