"""initial mpi schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID = postgresql.UUID(as_uuid=True)
JSONB = postgresql.JSONB()


def upgrade() -> None:
    op.create_table(
        'athlete',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('display_name', sa.Text(), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('sport', sa.Text(), server_default='baseball', nullable=False),
        sa.Column('league_tier', sa.Text(), nullable=True),
        sa.Column('primary_position', sa.Text(), nullable=True),
        sa.Column('primary_coach_id', UUID, nullable=True),
        sa.Column('data_density_level', sa.Integer(), server_default='1', nullable=False),
        sa.Column('ranking_excluded', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('streak_current', sa.Integer(), server_default='0', nullable=False),
        sa.Column('streak_best', sa.Integer(), server_default='0', nullable=False),
        sa.Column('streak_last_date', sa.Date(), nullable=True),
        sa.Column('games_minimum_met', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('integrity_threshold_met', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('coach_validation_met', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('data_span_met', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('ranking_eligible', sa.Boolean(), server_default='false', nullable=False),
    )
    op.create_index('ix_athlete_email', 'athlete', ['email'], unique=True)

    op.create_table(
        'athlete_daily_log',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('day_status', sa.Text(), nullable=False),
        sa.Column('rest_reason', sa.Text(), nullable=True),
        sa.Column('injury_mode', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('athlete_id', 'entry_date', name='uq_daily_log_athlete_date'),
    )
    op.create_index('ix_athlete_daily_log_athlete_id', 'athlete_daily_log', ['athlete_id'])

    op.create_table(
        'performance_session',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('sport', sa.Text(), server_default='baseball', nullable=False),
        sa.Column('session_type', sa.Text(), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('drill_blocks', JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('micro_layer_data', JSONB, nullable=True),
        sa.Column('fatigue_state', JSONB, nullable=True),
        sa.Column('player_grade', sa.Float(), nullable=True),
        sa.Column('coach_grade', sa.Float(), nullable=True),
        sa.Column('coach_override_grade', sa.Float(), nullable=True),
        sa.Column('scout_grade', sa.Float(), nullable=True),
        sa.Column('effective_grade', sa.Float(), nullable=True),
        sa.Column('composite_indexes', JSONB, nullable=True),
        sa.Column('intent_compliance_pct', sa.Float(), nullable=True),
        sa.Column('is_retroactive', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_locked', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_performance_session_athlete_id', 'performance_session', ['athlete_id'])
    op.create_index('ix_performance_session_athlete_date', 'performance_session', ['athlete_id', 'session_date'])

    op.create_table(
        'mpi_score',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('sport', sa.Text(), nullable=False),
        sa.Column('calculation_date', sa.Date(), nullable=False),
        sa.Column('adjusted_global_score', sa.Float(), nullable=False),
        sa.Column('global_rank', sa.Integer(), nullable=True),
        sa.Column('global_percentile', sa.Float(), nullable=True),
        sa.Column('total_athletes_in_pool', sa.Integer(), nullable=True),
        sa.Column('segment_pool', sa.Text(), nullable=True),
        sa.Column('pro_probability', sa.Float(), nullable=False),
        sa.Column('pro_probability_capped', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('trend_direction', sa.Text(), server_default='stable', nullable=False),
        sa.Column('trend_delta_30d', sa.Float(), server_default='0', nullable=False),
        sa.Column('integrity_score', sa.Float(), nullable=False),
        sa.Column('composites', JSONB, nullable=True),
        sa.Column('development_prompts', JSONB, nullable=True),
        sa.Column('verified_stat_boost', sa.Float(), nullable=True),
        sa.Column('contract_status_modifier', sa.Float(), nullable=True),
        sa.Column('consistency_score', sa.Float(), nullable=True),
        sa.Column('damping_multiplier', sa.Float(), nullable=True),
        sa.Column('game_practice_ratio', sa.Float(), nullable=True),
        sa.Column('delta_maturity_index', sa.Float(), nullable=True),
        sa.Column('fatigue_correlation_flag', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('hof_tracking_active', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('hof_probability', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('athlete_id', 'sport', 'calculation_date', name='uq_mpi_score_athlete_sport_date'),
        sa.CheckConstraint('adjusted_global_score >= 0 AND adjusted_global_score <= 100', name='ck_mpi_score_range'),
    )
    op.create_index('ix_mpi_score_athlete_id', 'mpi_score', ['athlete_id'])

    op.create_table(
        'integrity_flag',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('rule_id', sa.Text(), nullable=False),
        sa.Column('severity', sa.Text(), nullable=False),
        sa.Column('deduction_pct', sa.Float(), server_default='0', nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('source_session_id', UUID, sa.ForeignKey('performance_session.id'), nullable=True),
        sa.Column('details', JSONB, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolution_action', sa.Text(), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
    )
    op.create_index('ix_integrity_flag_athlete_id', 'integrity_flag', ['athlete_id'])
    op.create_index('ix_integrity_flag_athlete_status', 'integrity_flag', ['athlete_id', 'status'])

    op.create_table(
        'professional_status',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('sport', sa.Text(), nullable=False),
        sa.Column('current_league', sa.Text(), nullable=True),
        sa.Column('roster_verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('contract_status', sa.Text(), nullable=True),
        sa.Column('release_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('mlb_seasons_completed', sa.Integer(), server_default='0', nullable=False),
        sa.Column('milb_seasons_completed', sa.Integer(), server_default='0', nullable=False),
        sa.Column('ausl_seasons_completed', sa.Integer(), server_default='0', nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('athlete_id', 'sport', name='uq_professional_status_athlete_sport'),
    )
    op.create_index('ix_professional_status_athlete_id', 'professional_status', ['athlete_id'])

    op.create_table(
        'verified_stat_profile',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('profile_type', sa.Text(), nullable=False),
        sa.Column('confidence_weight', sa.Float(), server_default='100', nullable=False),
        sa.Column('verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_verified_stat_profile_athlete_id', 'verified_stat_profile', ['athlete_id'])

    op.create_table(
        'scout_evaluation',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('athlete_id', UUID, sa.ForeignKey('athlete.id'), nullable=False),
        sa.Column('scout_id', UUID, nullable=True),
        sa.Column('overall_grade', sa.Float(), nullable=True),
        sa.Column('tools_grade', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_scout_evaluation_athlete_id', 'scout_evaluation', ['athlete_id'])


def downgrade() -> None:
    op.drop_table('scout_evaluation')
    op.drop_table('verified_stat_profile')
    op.drop_table('professional_status')
    op.drop_table('integrity_flag')
    op.drop_table('mpi_score')
    op.drop_table('performance_session')
    op.drop_table('athlete_daily_log')
    op.drop_table('athlete')
