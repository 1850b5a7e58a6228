"""create directory tables

Revision ID: 3c9e1f4a2b7d
Revises:
Create Date: 2025-10-02 09:12:44.301522

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f4a2b7d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'commission',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name_ar', sa.Text(), nullable=False),
        sa.Column('name_en', sa.Text(), nullable=True),
        sa.Column('code', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'district',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('code', sa.String(), nullable=True),
        sa.Column('commission_id', sa.String(length=36), sa.ForeignKey('commission.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_district_commission_id', 'district', ['commission_id'], unique=False)
    op.create_table(
        'group',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('code', sa.String(), nullable=True),
        sa.Column('town_name', sa.Text(), nullable=True),
        sa.Column('district_id', sa.String(length=36), sa.ForeignKey('district.id', ondelete='CASCADE'), nullable=False),
        sa.Column('commission_id', sa.String(length=36), sa.ForeignKey('commission.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_group_district_id', 'group', ['district_id'], unique=False)
    op.create_table(
        'band',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('code', sa.String(), nullable=True),
        sa.Column('town_name', sa.Text(), nullable=True),
        sa.Column('group_id', sa.String(length=36), sa.ForeignKey('group.id', ondelete='CASCADE'), nullable=True),
        sa.Column('district_id', sa.String(length=36), sa.ForeignKey('district.id', ondelete='CASCADE'), nullable=True),
        sa.Column('commission_id', sa.String(length=36), sa.ForeignKey('commission.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_band_group_id', 'band', ['group_id'], unique=False)
    op.create_table(
        'member',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('code', sa.String(), nullable=True),
        sa.Column('civil_id', sa.String(), nullable=True),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'band_member',
        sa.Column('member_id', sa.String(length=36), sa.ForeignKey('member.id', ondelete='CASCADE'), nullable=False),
        sa.Column('band_id', sa.String(length=36), sa.ForeignKey('band.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('member_id', 'band_id')
    )
    op.create_index('ix_band_member_band_id', 'band_member', ['band_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_band_member_band_id', table_name='band_member')
    op.drop_table('band_member')
    op.drop_table('member')
    op.drop_index('ix_band_group_id', table_name='band')
    op.drop_table('band')
    op.drop_index('ix_group_district_id', table_name='group')
    op.drop_table('group')
    op.drop_index('ix_district_commission_id', table_name='district')
    op.drop_table('district')
    op.drop_table('commission')
