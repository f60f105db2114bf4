"""Initial FamilyLinX schema

Revision ID: 5f2e8c1a9b34
Revises:
Create Date: 2026-10-18

Creates families, groups (members embedded as a JSON array), albums and
calendar events.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5f2e8c1a9b34'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _json() -> sa.types.TypeEngine:
    return sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    op.create_table('families',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('groups',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('family_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('members', _json(), nullable=False),
        sa.Column('parent_group_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['family_id'], ['families.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_group_id'], ['groups.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('groups', schema=None) as batch_op:
        batch_op.create_index('idx_group_family', ['family_id'], unique=False)
        batch_op.create_index('idx_group_family_slug', ['family_id', 'slug'], unique=False)
        batch_op.create_index('idx_group_parent', ['parent_group_id'], unique=False)

    op.create_table('albums',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('family_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('url', sa.String(length=2000), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False, server_default='photo'),
        sa.Column('album_date', sa.String(length=7), nullable=True),
        sa.Column('cover_url', sa.String(length=2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['family_id'], ['families.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('albums', schema=None) as batch_op:
        batch_op.create_index('idx_album_family', ['family_id'], unique=False)
        batch_op.create_index('idx_album_type', ['type'], unique=False)

    op.create_table('calendar_events',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('family_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=True),
        sa.Column('end_time', sa.String(length=5), nullable=True),
        sa.Column('all_day', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('category', sa.String(length=20), nullable=False, server_default='other'),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('attendees', _json(), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurrence_rule', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['family_id'], ['families.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('calendar_events', schema=None) as batch_op:
        batch_op.create_index('idx_calendar_event_family', ['family_id'], unique=False)
        batch_op.create_index('idx_calendar_event_start', ['family_id', 'start_date'], unique=False)
        batch_op.create_index('idx_calendar_event_category', ['category'], unique=False)


def downgrade() -> None:
    with op.batch_alter_table('calendar_events', schema=None) as batch_op:
        batch_op.drop_index('idx_calendar_event_category')
        batch_op.drop_index('idx_calendar_event_start')
        batch_op.drop_index('idx_calendar_event_family')
    op.drop_table('calendar_events')

    with op.batch_alter_table('albums', schema=None) as batch_op:
        batch_op.drop_index('idx_album_type')
        batch_op.drop_index('idx_album_family')
    op.drop_table('albums')

    with op.batch_alter_table('groups', schema=None) as batch_op:
        batch_op.drop_index('idx_group_parent')
        batch_op.drop_index('idx_group_family_slug')
        batch_op.drop_index('idx_group_family')
    op.drop_table('groups')

    op.drop_table('families')
