# Note sharing membership
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID

if TYPE_CHECKING:
    from .note import Note


class NoteShare(BaseModel):
    """One recipient in a note's shared-with set (read-only access)."""

    __tablename__ = "note_shares"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)

    note: Mapped["Note"] = relationship("Note", back_populates="shares")

    __table_args__ = (
        # one row per (note, recipient): the set semantics live here
        UniqueConstraint("note_id", "user_id", name="uq_note_shares_note_user"),
        Index("idx_note_shares_note_id", "note_id"),
        Index("idx_note_shares_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteShare(note_id={self.note_id}, user_id={self.user_id})>"
