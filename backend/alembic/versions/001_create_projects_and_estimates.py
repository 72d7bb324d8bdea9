"""Create projects, estimates and estimate_revisions tables

Revision ID: 001
Revises:
Create Date: 2025-12-10

WHY: Projects own estimates; estimate_revisions is the append-only
history of replaced line items, one row per (estimate_id, version).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# WHY: JSONB on PostgreSQL, JSON on SQLite for local development
line_items_type = sa.JSON().with_variant(JSONB(), 'postgresql')

project_status = sa.Enum(
    'planning', 'active', 'on_hold', 'completed',
    name='projectstatus',
)
estimate_status = sa.Enum(
    'draft', 'sent', 'approved', 'rejected',
    name='estimatestatus',
)


def upgrade() -> None:
    """
    Create projects, estimates and estimate_revisions tables.

    WHY: Enable estimate creation, revision history and the approval workflow.
    """
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', project_status, nullable=False, server_default='planning'),
        sa.Column('budget', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_projects_id', 'projects', ['id'])

    op.create_table(
        'estimates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('items', line_items_type, nullable=False),
        sa.Column('status', estimate_status, nullable=False, server_default='draft'),
        sa.Column('valid_until', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('terms', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.String(length=64), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_estimates_id', 'estimates', ['id'])
    op.create_index('ix_estimates_project_id', 'estimates', ['project_id'])
    op.create_index('ix_estimates_created_at', 'estimates', ['created_at'])

    op.create_table(
        'estimate_revisions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('estimate_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('items', line_items_type, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['estimate_id'], ['estimates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('estimate_id', 'version', name='uq_estimate_revisions_estimate_version'),
    )
    op.create_index('ix_estimate_revisions_id', 'estimate_revisions', ['id'])
    op.create_index('ix_estimate_revisions_estimate_id', 'estimate_revisions', ['estimate_id'])


def downgrade() -> None:
    """Drop estimate tables, then projects, then the enum types."""
    op.drop_index('ix_estimate_revisions_estimate_id', table_name='estimate_revisions')
    op.drop_index('ix_estimate_revisions_id', table_name='estimate_revisions')
    op.drop_table('estimate_revisions')

    op.drop_index('ix_estimates_created_at', table_name='estimates')
    op.drop_index('ix_estimates_project_id', table_name='estimates')
    op.drop_index('ix_estimates_id', table_name='estimates')
    op.drop_table('estimates')

    op.drop_index('ix_projects_id', table_name='projects')
    op.drop_table('projects')

    # WHY: PostgreSQL keeps enum types after their tables are dropped
    estimate_status.drop(op.get_bind(), checkfirst=True)
    project_status.drop(op.get_bind(), checkfirst=True)
