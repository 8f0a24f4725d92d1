"""create students, peers and sessions tables

Revision ID: a3c91e5d7b20
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a3c91e5d7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('students',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('subject', sa.String(length=100), nullable=False),
    sa.Column('range_budget', sa.Float(), nullable=False),
    sa.Column('rating', sa.Float(), nullable=False, server_default='1'),
    sa.Column('experience', sa.Float(), nullable=False, server_default='1'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_students_subject', 'students', ['subject'], unique=False)
    op.create_index('idx_students_created_at', 'students', ['created_at'], unique=False)

    op.create_table('peers',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=True),
    sa.Column('domain', sa.String(length=100), nullable=True),
    sa.Column('experience', sa.Float(), nullable=False, server_default='0'),
    sa.Column('rating', sa.Float(), nullable=False, server_default='0'),
    sa.Column('charges', sa.Float(), nullable=False, server_default='3000'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_peers_domain', 'peers', ['domain'], unique=False)
    op.create_index('idx_peers_created_at', 'peers', ['created_at'], unique=False)

    # Sessions reference students/peers by id only; no FK so either can be deleted independently
    op.create_table('sessions',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('student_id', sa.Uuid(), nullable=False),
    sa.Column('peer_id', sa.Uuid(), nullable=False),
    sa.Column('topic', sa.String(length=200), nullable=False, server_default='General'),
    sa.Column('scheduled_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
    sa.Column('remarks', sa.Text(), nullable=False, server_default=''),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.CheckConstraint(
        "status IN ('pending', 'matched', 'active', 'completed', 'cancelled')",
        name='sessions_status_check'
    ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_sessions_updated_at', 'sessions', ['updated_at'], unique=False, postgresql_ops={'updated_at': 'DESC'})
    op.create_index('idx_sessions_student', 'sessions', ['student_id'], unique=False)
    op.create_index('idx_sessions_peer', 'sessions', ['peer_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_sessions_peer', table_name='sessions')
    op.drop_index('idx_sessions_student', table_name='sessions')
    op.drop_index('idx_sessions_updated_at', table_name='sessions', postgresql_ops={'updated_at': 'DESC'})
    op.drop_table('sessions')

    op.drop_index('idx_peers_created_at', table_name='peers')
    op.drop_index('idx_peers_domain', table_name='peers')
    op.drop_table('peers')

    op.drop_index('idx_students_created_at', table_name='students')
    op.drop_index('idx_students_subject', table_name='students')
    op.drop_table('students')
