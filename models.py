from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Float, Date, DateTime, ForeignKey, Text, Index, UniqueConstraint, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
import uuid

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Athlete(Base):
    """
    Athlete profile plus the MPI settings the nightly job reads.

    Ranking gates are written back here on every nightly cycle so the UI can
    explain why an athlete is not ranked yet.
    """
    __tablename__ = "athlete"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    email = Column(Text, unique=True, nullable=True)
    display_name = Column(Text, nullable=True)
    birthdate = Column(Date, nullable=True)

    # --- MPI SETTINGS ---
    sport = Column(Text, default="baseball", nullable=False)  # 'baseball' | 'softball'
    league_tier = Column(Text, nullable=True)  # rec, travel, hs_jv, ... mlb, ausl
    primary_position = Column(Text, nullable=True)  # C, 1B, SS, P, ...
    primary_coach_id = Column(Uuid, nullable=True)
    data_density_level = Column(Integer, default=1, nullable=False)
    ranking_excluded = Column(Boolean, default=False, nullable=False)  # admin exclusion

    # Session streak (consecutive days with a processed session)
    streak_current = Column(Integer, default=0, nullable=False)
    streak_best = Column(Integer, default=0, nullable=False)
    streak_last_date = Column(Date, nullable=True)  # latest session date already counted

    # --- RANKING GATES (written by the nightly job) ---
    games_minimum_met = Column(Boolean, default=False, nullable=False)
    integrity_threshold_met = Column(Boolean, default=False, nullable=False)
    coach_validation_met = Column(Boolean, default=False, nullable=False)
    data_span_met = Column(Boolean, default=False, nullable=False)
    ranking_eligible = Column(Boolean, default=False, nullable=False)


class DailyLogEntry(Base):
    """One row per athlete per calendar date. Upserted, never hard-deleted."""
    __tablename__ = "athlete_daily_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    # full_training | game_only | light_work | recovery_only | travel_day |
    # injury_hold | voluntary_rest | missed
    day_status = Column(Text, nullable=False)
    rest_reason = Column(Text, nullable=True)
    injury_mode = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("athlete_id", "entry_date", name="uq_daily_log_athlete_date"),
    )


class PerformanceSession(Base):
    """
    One logged training or game unit.

    drill_blocks: list of {drill_type, intent, volume, execution_grade (20-80), outcome_tags}
    micro_layer_data: optional per-rep detail (execution_score, batted_ball_type, ...)
    fatigue_state: optional {sleep_quality, stress_level, body, overall} (1-5 scales)
    """
    __tablename__ = "performance_session"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    sport = Column(Text, default="baseball", nullable=False)
    session_type = Column(Text, nullable=False)
    session_date = Column(Date, nullable=False)
    drill_blocks = Column(JSONType, nullable=False, default=list)
    micro_layer_data = Column(JSONType, nullable=True)
    fatigue_state = Column(JSONType, nullable=True)

    # Grade hierarchy inputs (20-80 scouting scale)
    player_grade = Column(Float, nullable=True)
    coach_grade = Column(Float, nullable=True)
    coach_override_grade = Column(Float, nullable=True)
    scout_grade = Column(Float, nullable=True)
    effective_grade = Column(Float, nullable=True)

    # Computed by session scoring
    composite_indexes = Column(JSONType, nullable=True)
    intent_compliance_pct = Column(Float, nullable=True)

    is_retroactive = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_performance_session_athlete_date", "athlete_id", "session_date"),
    )


class MpiScore(Base):
    """
    Composite score snapshot. One row per athlete per sport per calculation date;
    earlier dates are history and are never rewritten.
    """
    __tablename__ = "mpi_score"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    sport = Column(Text, nullable=False)
    calculation_date = Column(Date, nullable=False)

    adjusted_global_score = Column(Float, nullable=False)  # 0-100
    global_rank = Column(Integer, nullable=True)
    global_percentile = Column(Float, nullable=True)
    total_athletes_in_pool = Column(Integer, nullable=True)
    segment_pool = Column(Text, nullable=True)

    pro_probability = Column(Float, nullable=False)  # 0-100
    pro_probability_capped = Column(Boolean, default=False, nullable=False)
    trend_direction = Column(Text, nullable=False, default="stable")  # rising | dropping | stable
    trend_delta_30d = Column(Float, nullable=False, default=0.0)
    integrity_score = Column(Float, nullable=False)  # 0-100

    composites = Column(JSONType, nullable=True)  # bqi, fqi, pei, decision, competitive
    development_prompts = Column(JSONType, nullable=True)
    verified_stat_boost = Column(Float, nullable=True)
    contract_status_modifier = Column(Float, nullable=True)
    consistency_score = Column(Float, nullable=True)
    damping_multiplier = Column(Float, nullable=True)
    game_practice_ratio = Column(Float, nullable=True)
    delta_maturity_index = Column(Float, nullable=True)
    fatigue_correlation_flag = Column(Boolean, default=False, nullable=False)
    hof_tracking_active = Column(Boolean, default=False, nullable=False)
    hof_probability = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("athlete_id", "sport", "calculation_date", name="uq_mpi_score_athlete_sport_date"),
        CheckConstraint("adjusted_global_score >= 0 AND adjusted_global_score <= 100", name="ck_mpi_score_range"),
    )


class IntegrityFlag(Base):
    """Detected (or manually raised) integrity condition. Resolved by an admin."""
    __tablename__ = "integrity_flag"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    rule_id = Column(Text, nullable=False)
    severity = Column(Text, nullable=False)  # info | warning | critical
    deduction_pct = Column(Float, nullable=False, default=0.0)
    status = Column(Text, nullable=False, default="pending")  # pending | resolved
    source_session_id = Column(Uuid, ForeignKey("performance_session.id"), nullable=True)
    details = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolution_action = Column(Text, nullable=True)
    resolution_notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_integrity_flag_athlete_status", "athlete_id", "status"),
    )


class ProfessionalStatus(Base):
    """Verified professional career data. Maintained by the verification process."""
    __tablename__ = "professional_status"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    sport = Column(Text, nullable=False)
    current_league = Column(Text, nullable=True)
    roster_verified = Column(Boolean, default=False, nullable=False)
    contract_status = Column(Text, nullable=True)  # active | free_agent | released | injured_list | retired
    release_count = Column(Integer, default=0, nullable=False)
    mlb_seasons_completed = Column(Integer, default=0, nullable=False)
    milb_seasons_completed = Column(Integer, default=0, nullable=False)
    ausl_seasons_completed = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("athlete_id", "sport", name="uq_professional_status_athlete_sport"),
    )

    @property
    def seasons_by_league(self) -> dict:
        return {
            "mlb": self.mlb_seasons_completed or 0,
            "milb": self.milb_seasons_completed or 0,
            "ausl": self.ausl_seasons_completed or 0,
        }


class VerifiedStatProfile(Base):
    __tablename__ = "verified_stat_profile"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    profile_type = Column(Text, nullable=False)  # mlb, milb, ncaa_d1, ...
    confidence_weight = Column(Float, nullable=False, default=100.0)  # 0-100
    verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ScoutEvaluation(Base):
    __tablename__ = "scout_evaluation"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid, ForeignKey("athlete.id"), nullable=False, index=True)
    scout_id = Column(Uuid, nullable=True)
    overall_grade = Column(Float, nullable=True)
    tools_grade = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
