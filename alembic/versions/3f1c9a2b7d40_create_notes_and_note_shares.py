"""Create notes and note_shares tables

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2025-09-20 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from notehub.core.models.types import GUID, TagSetType


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'notes',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('project_id', GUID(), nullable=True),
        sa.Column('blocks', sa.JSON(), nullable=False),
        sa.Column('tags', TagSetType(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('created_by', GUID(), nullable=False),
        sa.Column('created_username', sa.String(length=100), nullable=False),
        # no FK: copies keep pointing at a deleted original
        sa.Column('shared_original_id', GUID(), nullable=True),
        sa.Column('copied_from', GUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notes_created_by', 'notes', ['created_by'])
    op.create_index('idx_notes_created_at', 'notes', ['created_at'])
    op.create_index('idx_notes_is_public', 'notes', ['is_public'])
    op.create_index('idx_notes_project_id', 'notes', ['project_id'])
    op.create_index('idx_notes_shared_original', 'notes', ['shared_original_id'])
    op.create_index('idx_notes_owner_created', 'notes', ['created_by', 'created_at'])

    op.create_table(
        'note_shares',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('note_id', GUID(), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['note_id'], ['notes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('note_id', 'user_id', name='uq_note_shares_note_user'),
    )
    op.create_index('idx_note_shares_note_id', 'note_shares', ['note_id'])
    op.create_index('idx_note_shares_user_id', 'note_shares', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_note_shares_user_id', table_name='note_shares')
    op.drop_index('idx_note_shares_note_id', table_name='note_shares')
    op.drop_table('note_shares')

    op.drop_index('idx_notes_owner_created', table_name='notes')
    op.drop_index('idx_notes_shared_original', table_name='notes')
    op.drop_index('idx_notes_project_id', table_name='notes')
    op.drop_index('idx_notes_is_public', table_name='notes')
    op.drop_index('idx_notes_created_at', table_name='notes')
    op.drop_index('idx_notes_created_by', table_name='notes')
    op.drop_table('notes')
