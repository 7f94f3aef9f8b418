"""Note repository for database operations."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import visibility
from ..models.base import utcnow
from ..models.note import Note
from ..models.share import NoteShare

logger = logging.getLogger(__name__)


@dataclass
class NoteFilter:
    """Filter over the note collection. Unset fields do not constrain."""

    created_by: Optional[UUID] = None
    is_public: Optional[bool] = None
    shared_with: Optional[UUID] = None
    project_id: Optional[UUID] = None
    is_copy: Optional[bool] = None
    readable_by: Optional[UUID] = None

    def clauses(self) -> list:
        where = []
        if self.created_by is not None:
            where.append(Note.created_by == self.created_by)
        if self.is_public is not None:
            where.append(Note.is_public.is_(self.is_public))
        if self.shared_with is not None:
            where.append(visibility.shared_with(self.shared_with))
        if self.project_id is not None:
            where.append(Note.project_id == self.project_id)
        if self.is_copy is True:
            where.append(Note.shared_original_id.is_not(None))
        elif self.is_copy is False:
            where.append(Note.shared_original_id.is_(None))
        if self.readable_by is not None:
            where.append(visibility.readable_by(self.readable_by))
        return where


def _dedupe(user_ids: Iterable[UUID]) -> List[UUID]:
    return list(dict.fromkeys(user_ids))


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_note(self, note_data: dict, shared_with: Iterable[UUID] = ()) -> Note:
        """Insert a note together with its initial recipients."""
        note = Note(**note_data)
        note.shares = [NoteShare(user_id=user_id) for user_id in _dedupe(shared_with)]
        self.session.add(note)
        await self._commit("create_note")
        await self.session.refresh(note)
        return note

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note by ID with its recipients loaded."""
        stmt = (
            select(Note)
            .where(Note.id == note_id)
            # shares may have changed underneath the identity map
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_many(
        self, note_filter: NoteFilter, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Note], int]:
        """Filtered page of notes, newest first (ties broken by id)."""
        offset = (page - 1) * per_page
        where = note_filter.clauses()

        count_stmt = select(func.count(Note.id)).where(*where)
        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar() or 0

        stmt = (
            select(Note)
            .where(*where)
            .order_by(Note.created_at.desc(), Note.id.desc())
            .offset(offset)
            .limit(per_page)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total_count

    async def update_note(
        self, note_id: UUID, patch: dict, add_shared_with: Iterable[UUID] = ()
    ) -> Tuple[Optional[Note], List[UUID]]:
        """Apply a column patch and merge recipients in one transaction.

        Returns the reloaded note and the recipients that were actually added.
        """
        added: List[UUID] = []
        try:
            if patch:
                stmt = update(Note).where(Note.id == note_id).values(**patch)
                await self.session.execute(stmt)
            added = await self._insert_shares(note_id, add_shared_with)
            if added and not patch:
                await self._touch(note_id)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(f"Failed to update note {note_id}", exc_info=True)
            raise
        await self._commit("update_note")
        return await self.get_by_id(note_id), added

    async def add_shares(self, note_id: UUID, user_ids: Iterable[UUID]) -> List[UUID]:
        """Union user_ids into the note's shared-with set; returns the newly added ids."""
        try:
            added = await self._insert_shares(note_id, user_ids)
            if added:
                await self._touch(note_id)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(f"Failed to share note {note_id}", exc_info=True)
            raise
        await self._commit("add_shares")
        return added

    async def delete_note(self, note_id: UUID) -> bool:
        """Hard delete a note and its share rows."""
        try:
            await self.session.execute(delete(NoteShare).where(NoteShare.note_id == note_id))
            result = await self.session.execute(delete(Note).where(Note.id == note_id))
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(f"Failed to delete note {note_id}", exc_info=True)
            raise
        await self._commit("delete_note")
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info(f"Deleted note {note_id}")
        return deleted

    async def _touch(self, note_id: UUID) -> None:
        # membership lives in note_shares, so the note row needs an explicit bump
        await self.session.execute(update(Note).where(Note.id == note_id).values(updated_at=utcnow()))

    async def _insert_shares(self, note_id: UUID, user_ids: Iterable[UUID]) -> List[UUID]:
        """INSERT ... ON CONFLICT DO NOTHING so concurrent merges never lose members."""
        ids = _dedupe(user_ids)
        if not ids:
            return []

        dialect = self.session.get_bind().dialect.name
        now = datetime.now(timezone.utc)
        rows = [
            {"id": uuid.uuid4(), "note_id": note_id, "user_id": user_id, "created_at": now, "updated_at": now}
            for user_id in ids
        ]
        table = NoteShare.__table__

        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            return await self._insert_shares_one_by_one(note_id, ids)

        stmt = (
            dialect_insert(table)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["note_id", "user_id"])
            .returning(table.c.user_id)
        )
        result = await self.session.execute(stmt)
        inserted = set(result.scalars().all())
        return [user_id for user_id in ids if user_id in inserted]

    async def _insert_shares_one_by_one(self, note_id: UUID, ids: List[UUID]) -> List[UUID]:
        # the unique constraint still arbitrates; a conflict only means "already shared"
        added = []
        for user_id in ids:
            try:
                async with self.session.begin_nested():
                    await self.session.execute(
                        insert(NoteShare.__table__).values(
                            id=uuid.uuid4(), note_id=note_id, user_id=user_id
                        )
                    )
                added.append(user_id)
            except IntegrityError:
                continue
        return added

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(f"Commit failed during {operation}", exc_info=True)
            raise
