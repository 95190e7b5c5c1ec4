"""baseline users, resumes and activities

Revision ID: 3b7c1e2a9d40
Revises:
Create Date: 2026-10-18 09:12:41.118204

Only creates tables that are missing, so it is safe against databases that
were bootstrapped with create_all().
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '3b7c1e2a9d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RESUME_STATUS = sa.Enum('Draft', 'Polishing', 'Completed', name='resume_status')


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    if not table_exists('resumes'):
        op.create_table('resumes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('job_role', sa.String(), nullable=False),
            sa.Column('status', RESUME_STATUS, nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('file_url', sa.String(), nullable=True),
            sa.Column('content', sa.Text(), nullable=True),
            sa.Column('ats_score', sa.Integer(), nullable=False),
            sa.Column('keyword_match', sa.Integer(), nullable=False),
            sa.Column('analysis_results', sa.JSON(), nullable=True),
            sa.Column('suggestions', sa.JSON(), nullable=False),
            sa.Column('job_description', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_resume_user_status', 'resumes', ['user_id', 'status'], unique=False)
        op.create_index(op.f('ix_resumes_created_at'), 'resumes', ['created_at'], unique=False)
        op.create_index(op.f('ix_resumes_id'), 'resumes', ['id'], unique=False)
        op.create_index(op.f('ix_resumes_title'), 'resumes', ['title'], unique=False)
        op.create_index(op.f('ix_resumes_user_id'), 'resumes', ['user_id'], unique=False)

    if not table_exists('activities'):
        op.create_table('activities',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('entity_id', sa.Integer(), nullable=True),
            sa.Column('action', sa.String(), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_activity_user_timestamp', 'activities', ['user_id', 'timestamp'], unique=False)
        op.create_index(op.f('ix_activities_id'), 'activities', ['id'], unique=False)
        op.create_index(op.f('ix_activities_user_id'), 'activities', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('activities')
    op.drop_table('resumes')
    op.drop_table('users')
    RESUME_STATUS.drop(op.get_bind(), checkfirst=True)
