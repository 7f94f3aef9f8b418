# Note model for user content
import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from sqlalchemy import JSON, CheckConstraint, Index, String, event
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import attributes as orm_attributes
from sqlalchemy.orm import mapped_column, relationship

from .base import BaseModel
from .types import GUID, TagSetType

if TYPE_CHECKING:
    from .share import NoteShare


class Note(BaseModel):
    """A user-owned note with sharing and provenance attributes."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # external project reference, opaque to this service
    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), nullable=True)

    # editor payload, replaced wholesale
    blocks: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    tags: Mapped[List[str]] = mapped_column(TagSetType, default=list, nullable=False)

    is_public: Mapped[bool] = mapped_column(default=False, nullable=False)

    # owner reference, written once
    created_by: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    created_username: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    # provenance for copies; no FK so copies outlive their original
    shared_original_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), nullable=True)
    copied_from: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), nullable=True)

    shares: Mapped[List["NoteShare"]] = relationship(
        "NoteShare",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        doc="Recipients granted read access",
    )

    __table_args__ = (
        Index("idx_notes_created_by", "created_by"),
        Index("idx_notes_created_at", "created_at"),
        Index("idx_notes_is_public", "is_public"),
        Index("idx_notes_project_id", "project_id"),
        Index("idx_notes_shared_original", "shared_original_id"),
        # listing order for "my notes"
        Index("idx_notes_owner_created", "created_by", "created_at"),
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', created_by={self.created_by})>"

    @property
    def shared_with_ids(self) -> Set[uuid.UUID]:
        """Ids of the users this note is shared with."""
        return {share.user_id for share in self.shares}

    def is_owned_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return user_id is not None and self.created_by == user_id


# Ensure relationship collections are initialized to avoid implicit lazy loads
@event.listens_for(Note, "init", propagate=True)
def _init_note_collections(target, args, kwargs):
    if "shares" not in kwargs:
        orm_attributes.set_committed_value(target, "shares", [])
