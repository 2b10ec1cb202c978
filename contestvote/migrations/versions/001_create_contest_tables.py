"""create contests, participants and votes tables

Revision ID: 001_contest_tables
Revises:
Create Date: 2026-09-28 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from contestvote.migrations.util import get_false_default, get_uuid_type


# revision identifiers, used by Alembic.
revision: str = '001_contest_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the contest, participant and vote tables."""
    uuid = get_uuid_type()

    op.create_table(
        'contests',
        sa.Column('contest_id', uuid, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('contest_id'),
        sa.CheckConstraint('start_date < end_date', name='ck_contests_date_range'),
    )
    op.create_index('ix_contests_created_at', 'contests', ['created_at'], unique=False)

    op.create_table(
        'participants',
        sa.Column('participant_id', uuid, nullable=False),
        sa.Column('code_name', sa.String(length=20), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('about', sa.Text(), nullable=False),
        sa.Column('photo', sa.String(length=500), nullable=True),
        sa.Column('contest_id', uuid, nullable=False),
        sa.Column('evicted', sa.Boolean(), nullable=False, server_default=get_false_default()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('participant_id'),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.contest_id'], ondelete='CASCADE'),
        sa.UniqueConstraint('code_name', name='uq_participants_code_name'),
        sa.UniqueConstraint('email', name='uq_participants_email'),
    )
    op.create_index(
        'ix_participants_contest_created',
        'participants',
        ['contest_id', 'created_at'],
        unique=False,
    )

    op.create_table(
        'votes',
        sa.Column('vote_id', uuid, nullable=False),
        sa.Column('contest_id', uuid, nullable=False),
        sa.Column('participant_id', uuid, nullable=False),
        sa.Column('vote_count', sa.Integer(), nullable=False),
        sa.Column('voter_name', sa.String(length=200), nullable=False),
        sa.Column('payment_reference', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('vote_id'),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.contest_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.participant_id'], ondelete='CASCADE'),
        sa.UniqueConstraint('payment_reference', name='uq_votes_payment_reference'),
        sa.CheckConstraint('vote_count >= 1', name='ck_votes_vote_count_positive'),
    )
    op.create_index('ix_votes_contest_id', 'votes', ['contest_id'], unique=False)
    op.create_index('ix_votes_participant_id', 'votes', ['participant_id'], unique=False)


def downgrade() -> None:
    """Drop the contest tables."""
    op.drop_index('ix_votes_participant_id', table_name='votes')
    op.drop_index('ix_votes_contest_id', table_name='votes')
    op.drop_table('votes')
    op.drop_index('ix_participants_contest_created', table_name='participants')
    op.drop_table('participants')
    op.drop_index('ix_contests_created_at', table_name='contests')
    op.drop_table('contests')
