"""club schema: users, roster, schedule, stats ledger, submissions, post-game tables

Revision ID: c4a9e1d27b10
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c4a9e1d27b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('registered_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
    )

    op.create_table(
        'schedule_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('days', sa.Text(), nullable=False),
        sa.Column('locations', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
    )

    op.create_table(
        'player_stats',
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), primary_key=True),
        sa.Column('player_name', sa.String(length=64), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('goals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('assists', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('motm_awards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('entry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False),
    )

    op.create_table(
        'submission',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('player_name', sa.String(length=64), nullable=False),
        sa.Column('game_date', sa.String(length=10), nullable=False),
        sa.Column('goals', sa.Integer(), nullable=False),
        sa.Column('assists', sa.Integer(), nullable=False),
        sa.Column('submitted_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('reviewed_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_submission_player_id', 'submission', ['player_id'])
    op.create_index('ix_submission_status', 'submission', ['status'])
    op.create_index(
        'uq_submission_pending', 'submission', ['player_id', 'game_date'], unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        'points_entry',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player_stats.player_id'), nullable=False),
        sa.Column('seq', sa.Integer(), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('goals_delta', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('assists_delta', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('motm_delta', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('added_by', sa.String(length=64), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False),
        sa.Column('match_date', sa.String(length=10), nullable=True),
        sa.Column('automatic', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('admin_edit', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submission.id'), nullable=True),
        sa.UniqueConstraint('player_id', 'seq', name='uq_points_entry_seq'),
    )
    op.create_index('ix_points_entry_player_id', 'points_entry', ['player_id'])

    op.create_table(
        'notification',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('message', sa.String(length=255), nullable=False),
        sa.Column('from_user', sa.String(length=64), nullable=True),
        sa.Column('related_player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=True),
        sa.Column('related_player_name', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_notification_user_id', 'notification', ['user_id'])

    op.create_table(
        'motm_nomination',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_date', sa.String(length=10), nullable=False),
        sa.Column('nominated_player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('nominated_player_name', sa.String(length=64), nullable=False),
        sa.Column('nominated_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('nominated_by', 'game_date', name='uq_motm_one_per_game'),
    )
    op.create_index('ix_motm_nomination_game_date', 'motm_nomination', ['game_date'])

    op.create_table(
        'kudos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('from_user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('to_player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('to_player_name', sa.String(length=64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'game_result',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_date', sa.String(length=10), nullable=False, unique=True),
        sa.Column('team1_name', sa.String(length=64), nullable=False),
        sa.Column('team1_score', sa.Integer(), nullable=False),
        sa.Column('team2_name', sa.String(length=64), nullable=False),
        sa.Column('team2_score', sa.Integer(), nullable=False),
        sa.Column('entered_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('game_result')
    op.drop_table('kudos')
    op.drop_index('ix_motm_nomination_game_date', table_name='motm_nomination')
    op.drop_table('motm_nomination')
    op.drop_index('ix_notification_user_id', table_name='notification')
    op.drop_table('notification')
    op.drop_index('ix_points_entry_player_id', table_name='points_entry')
    op.drop_table('points_entry')
    op.drop_index('uq_submission_pending', table_name='submission')
    op.drop_index('ix_submission_status', table_name='submission')
    op.drop_index('ix_submission_player_id', table_name='submission')
    op.drop_table('submission')
    op.drop_table('player_stats')
    op.drop_table('schedule_config')
    op.drop_table('player')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
