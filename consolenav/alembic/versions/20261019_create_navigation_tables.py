"""create navigation tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 09:00:00.000000

Sections and page entries of the console sidebar. A NULL section_key on a
page entry places it in the implicit "ungrouped" section.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import advanced_alchemy.types


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'nav_sections',
        sa.Column('id', advanced_alchemy.types.guid.GUID(length=16), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('display_name', sa.String(length=200), nullable=False),
        sa.Column('icon_name', sa.String(length=100), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('collapsed_by_default', sa.Boolean(), nullable=False),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.Column('created_at', advanced_alchemy.types.datetime.DateTimeUTC(timezone=True), nullable=False),
        sa.Column('updated_at', advanced_alchemy.types.datetime.DateTimeUTC(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_nav_sections')),
    )
    op.create_index('ix_nav_sections_key', 'nav_sections', ['key'], unique=True)
    op.create_index('ix_nav_sections_sort_order', 'nav_sections', ['sort_order'])

    op.create_table(
        'nav_page_entries',
        sa.Column('id', advanced_alchemy.types.guid.GUID(length=16), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon_name', sa.String(length=100), nullable=False),
        sa.Column('route', sa.String(length=500), nullable=False),
        sa.Column('permission', sa.String(length=100), nullable=False),
        sa.Column('section_key', sa.String(length=100), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('visible', sa.Boolean(), nullable=False),
        sa.Column('primary_action_label', sa.String(length=200), nullable=True),
        sa.Column('ai_action_label', sa.String(length=200), nullable=True),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.Column('created_at', advanced_alchemy.types.datetime.DateTimeUTC(timezone=True), nullable=False),
        sa.Column('updated_at', advanced_alchemy.types.datetime.DateTimeUTC(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_nav_page_entries')),
        sa.ForeignKeyConstraint(
            ['section_key'],
            ['nav_sections.key'],
            name=op.f('fk_nav_page_entries_section_key_nav_sections'),
        ),
        sa.UniqueConstraint('route', name=op.f('uq_nav_page_entries_route')),
    )
    op.create_index('ix_nav_page_entries_key', 'nav_page_entries', ['key'], unique=True)
    op.create_index('ix_nav_page_entries_section_key', 'nav_page_entries', ['section_key'])
    op.create_index('ix_nav_page_entries_sort_order', 'nav_page_entries', ['sort_order'])


def downgrade() -> None:
    op.drop_index('ix_nav_page_entries_sort_order', table_name='nav_page_entries')
    op.drop_index('ix_nav_page_entries_section_key', table_name='nav_page_entries')
    op.drop_index('ix_nav_page_entries_key', table_name='nav_page_entries')
    op.drop_table('nav_page_entries')
    op.drop_index('ix_nav_sections_sort_order', table_name='nav_sections')
    op.drop_index('ix_nav_sections_key', table_name='nav_sections')
    op.drop_table('nav_sections')
