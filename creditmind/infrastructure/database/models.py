"""SQLAlchemy ORM models for assessment records."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    TypeDecorator,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that always loads as UTC, also on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    pass


class SessionModel(Base):
    """Persisted assessment session."""

    __tablename__ = "assessment_sessions"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    session_seed: Mapped[str] = mapped_column(String(64), nullable=False)
    target_industry: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="in_progress",
        index=True,
    )
    ip_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    question_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_trait_variances: Mapped[dict] = mapped_column(JSON, nullable=False)
    previous_scenarios: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    current_question: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
        index=True,
    )
    phase1_completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    phase2_started_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    phase2_completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class ResponseModel(Base):
    """Persisted self-report answer."""

    __tablename__ = "question_responses"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    session_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("assessment_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_index: Mapped[int] = mapped_column(Integer, nullable=False)
    question_type: Mapped[str] = mapped_column(String(20), nullable=False)
    trait: Mapped[str] = mapped_column(String(1), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    raw_response: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    hesitation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    changed_answer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
    )


class BehavioralSignalModel(Base):
    """Persisted Phase 2 telemetry with the scores extracted from it."""

    __tablename__ = "behavioral_signals"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    session_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("assessment_sessions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    game_seed: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    signals: Mapped[dict] = mapped_column(JSON, nullable=False)
    behavioral_scores: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    bart_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
    )


class AssessmentModel(Base):
    """Persisted assessment: Phase 1, behavioral and blended results."""

    __tablename__ = "assessments"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    session_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("assessment_sessions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    trait_scores: Mapped[dict] = mapped_column(JSON, nullable=False)
    weighted_risk: Mapped[float] = mapped_column(Float, nullable=False)
    pd_score: Mapped[float] = mapped_column(Float, nullable=False)
    pd_phase1_only: Mapped[float] = mapped_column(Float, nullable=False)
    pd_blended: Mapped[float | None] = mapped_column(Float, nullable=True)
    pd_modified: Mapped[float] = mapped_column(Float, nullable=False)
    risk_rating: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    money_profile: Mapped[str] = mapped_column(String(100), nullable=False)
    money_profile_modifier: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    profile_confidence: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    decision: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending",
        index=True,
    )
    response_summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    behavioral_scores: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    bart_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    blended_trait_scores: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    consistency_index: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class LoanRecommendationModel(Base):
    """Persisted loan recommendation, including any admin override."""

    __tablename__ = "loan_recommendations"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    assessment_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    decision: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    max_amount: Mapped[float] = mapped_column(Float, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    apr_percent: Mapped[float] = mapped_column(Float, nullable=False)
    amount_basis: Mapped[str] = mapped_column(Text, nullable=False)
    duration_basis: Mapped[str] = mapped_column(Text, nullable=False)
    apr_basis: Mapped[str] = mapped_column(Text, nullable=False)
    admin_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    override_justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    admin_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
    )
