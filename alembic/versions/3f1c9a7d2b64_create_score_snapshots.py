"""create score snapshots

Revision ID: 3f1c9a7d2b64
Revises: 
Create Date: 2026-10-18 09:12:41.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'score_snapshots',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('trimester', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('computed_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('member_id', 'year', 'month', 'trimester', name='uq_member_year_month_trimester'),
    )
    op.create_index('ix_score_snapshots_id', 'score_snapshots', ['id'])
    op.create_index('ix_score_snapshots_member_id', 'score_snapshots', ['member_id'])


def downgrade() -> None:
    op.drop_index('ix_score_snapshots_member_id', table_name='score_snapshots')
    op.drop_index('ix_score_snapshots_id', table_name='score_snapshots')
    op.drop_table('score_snapshots')
