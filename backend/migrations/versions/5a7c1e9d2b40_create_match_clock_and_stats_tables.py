"""create user, match, match_stats, player_stat and commentary tables

Revision ID: 5a7c1e9d2b40
Revises:
Create Date: 2026-10-19 10:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c1e9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Databases created with `flask db-reset` already have the tables
    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=50), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('password_hash', sa.String(length=128), nullable=False),
            sa.Column('photo', sa.String(length=512), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_user_email', 'user', ['email'], unique=True)

    if 'match' not in existing_tables:
        op.create_table(
            'match',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('team1_name', sa.String(length=50), nullable=False),
            sa.Column('team2_name', sa.String(length=50), nullable=False),
            sa.Column('team1_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('team2_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('team1_photo', sa.String(length=512), nullable=True),
            sa.Column('team2_photo', sa.String(length=512), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='upcoming'),
            sa.Column('match_date', sa.DateTime(), nullable=False),
            sa.Column('venue', sa.String(length=100), nullable=False),
            sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('total_duration', sa.Integer(), nullable=False, server_default='40'),
            sa.Column('remaining_duration', sa.Integer(), nullable=False),
            sa.Column('match_start_time', sa.DateTime(), nullable=True),
            sa.Column('match_pause_time', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_match_status', 'match', ['status'])
        op.create_index('ix_match_created_by_id', 'match', ['created_by_id'])

    if 'match_stats' not in existing_tables:
        op.create_table(
            'match_stats',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('match_id', sa.Integer(), sa.ForeignKey('match.id'), nullable=False, unique=True),
            sa.Column('team1_name', sa.String(length=50), nullable=False),
            sa.Column('team2_name', sa.String(length=50), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )

    if 'player_stat' not in existing_tables:
        op.create_table(
            'player_stat',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('match_stats_id', sa.Integer(), sa.ForeignKey('match_stats.id'), nullable=False),
            sa.Column('team', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('raid_points', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('tackle_points', sa.Integer(), nullable=False, server_default='0'),
            sa.UniqueConstraint('match_stats_id', 'player_id', name='uq_player_stat_match_player'),
        )
        op.create_index('ix_player_stat_match_stats_id', 'player_stat', ['match_stats_id'])

    if 'commentary' not in existing_tables:
        op.create_table(
            'commentary',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('match_id', sa.Integer(), sa.ForeignKey('match.id'), nullable=False),
            sa.Column('commentary', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_commentary_match_id', 'commentary', ['match_id'])
        op.create_index('ix_commentary_created_at', 'commentary', ['created_at'])


def downgrade():
    op.drop_table('commentary')
    op.drop_table('player_stat')
    op.drop_table('match_stats')
    op.drop_table('match')
    op.drop_table('user')
