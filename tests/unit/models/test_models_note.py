"""
Unit tests for Note and NoteShare models.
"""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from notehub.core import visibility
from notehub.core.models.note import Note
from notehub.core.models.share import NoteShare


def new_note(**kw):
    data = dict(title="Test Note", created_by=uuid.uuid4(), created_username="alice")
    data.update(kw)
    return Note(**data)


class TestNoteModel:
    """Test Note model functionality."""

    @pytest.mark.asyncio
    async def test_create_note_defaults(self, test_session):
        note = new_note()
        test_session.add(note)
        await test_session.commit()
        await test_session.refresh(note)

        assert isinstance(note.id, uuid.UUID)
        assert note.blocks == []
        assert note.tags == []
        assert note.is_public is False
        assert note.project_id is None
        assert note.shared_original_id is None
        assert visibility.is_copy(note) is False
        assert note.shared_with_ids == set()
        assert note.created_at is not None
        assert note.updated_at is not None

    @pytest.mark.asyncio
    async def test_tags_are_a_set(self, test_session):
        note = new_note(tags=[" work ", "home", "work", ""])
        test_session.add(note)
        await test_session.commit()

        result = await test_session.execute(
            select(Note).where(Note.id == note.id).execution_options(populate_existing=True)
        )
        assert result.scalar_one().tags == ["home", "work"]

    @pytest.mark.asyncio
    async def test_blocks_round_trip_as_json(self, test_session):
        blocks = [{"type": "list", "data": {"items": ["a", "b"], "style": "ordered"}}]
        note = new_note(blocks=blocks)
        test_session.add(note)
        await test_session.commit()
        await test_session.refresh(note)
        assert note.blocks == blocks

    @pytest.mark.asyncio
    async def test_duplicate_share_rows_rejected(self, test_session):
        note = new_note()
        user = uuid.uuid4()
        note.shares = [NoteShare(user_id=user)]
        test_session.add(note)
        await test_session.commit()

        test_session.add(NoteShare(note_id=note.id, user_id=user))
        with pytest.raises(IntegrityError):
            await test_session.commit()
        await test_session.rollback()

    def test_ownership_helpers(self):
        owner = uuid.uuid4()
        note = new_note(created_by=owner, shared_original_id=uuid.uuid4())

        assert note.is_owned_by(owner) is True
        assert note.is_owned_by(uuid.uuid4()) is False
        assert note.is_owned_by(None) is False
        assert visibility.is_copy(note) is True

    def test_repr_truncates_title(self):
        note = new_note(title="x" * 40)
        assert "..." in repr(note)

    def test_to_dict_serializes_ids(self):
        note = new_note(id=uuid.uuid4())
        data = note.to_dict()
        assert data["id"] == str(note.id)
        assert data["created_by"] == str(note.created_by)
        assert data["title"] == "Test Note"
