"""Data transfer objects for the admin review flow."""

from dataclasses import dataclass, field
from typing import List, Optional

from creditmind.domain.entities import (
    Assessment,
    BehavioralSignals,
    LoanRecommendation,
    Session,
)
from creditmind.service.scoring.models import QuestionResponse, RecommendationDecision


@dataclass(frozen=True)
class LoanAdjustment:
    """Optional admin changes to the recommended terms."""
    max_amount: Optional[float] = None
    duration_months: Optional[int] = None
    apr_percent: Optional[float] = None

    def validate(self) -> List[str]:
        errors = []

        if self.max_amount is not None and self.max_amount < 0:
            errors.append("max_amount must be non-negative")
        if self.duration_months is not None and self.duration_months <= 0:
            errors.append("duration_months must be positive")
        if self.apr_percent is not None and self.apr_percent < 0:
            errors.append("apr_percent must be non-negative")

        return errors


@dataclass(frozen=True)
class OverrideRequest:
    """Input data for a manual override of an assessment."""
    assessment_id: str
    decision: str
    justification: str
    admin_email: str
    loan_adjustment: Optional[LoanAdjustment] = None
    comment: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.assessment_id:
            errors.append("assessment_id is required")
        if self.decision not in {d.value for d in RecommendationDecision}:
            errors.append("decision must be approve, decline, or manual_review")
        if not self.justification or not self.justification.strip():
            errors.append("justification is required")
        if not self.admin_email or not self.admin_email.strip():
            errors.append("admin_email is required")
        if self.loan_adjustment is not None:
            errors.extend(self.loan_adjustment.validate())

        return errors


@dataclass(frozen=True)
class OverrideResponse:
    success: bool
    assessment_id: str
    new_decision: str
    overridden_by: str
    overridden_at: str

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "assessment_id": self.assessment_id,
            "new_decision": self.new_decision,
            "overridden_by": self.overridden_by,
            "overridden_at": self.overridden_at,
        }


@dataclass(frozen=True)
class SessionSummary:
    """One row of the admin session list."""

    session_id: str
    user_id: str
    status: str
    started_at: str
    completed_at: Optional[str]
    duration_sec: Optional[int]
    question_count: int
    industry: str
    pd: Optional[float]
    risk_rating: Optional[str]
    decision: str
    money_profile: Optional[str]
    consistency_flag: Optional[str]
    consistency_overall: Optional[float]

    @classmethod
    def from_entities(
        cls,
        session: Session,
        assessment: Optional[Assessment],
    ) -> "SessionSummary":
        consistency = assessment.consistency_index if assessment else None
        return cls(
            session_id=str(session.id),
            user_id=session.user_id,
            status=session.status.value,
            started_at=session.started_at.isoformat(),
            completed_at=session.completed_at.isoformat() if session.completed_at else None,
            duration_sec=session.duration_sec,
            question_count=session.question_count,
            industry=session.target_industry,
            pd=assessment.pd_modified if assessment else None,
            risk_rating=assessment.risk_rating.value if assessment else None,
            decision=assessment.decision.value if assessment else "pending",
            money_profile=assessment.money_profile if assessment else None,
            consistency_flag=consistency.flag.value if consistency else None,
            consistency_overall=consistency.overall if consistency else None,
        )


@dataclass(frozen=True)
class SessionListResponse:
    sessions: List[SessionSummary]
    page: int
    limit: int


@dataclass(frozen=True)
class SessionDetail:
    """Everything a reviewer sees for one session."""

    session: Session
    assessment: Optional[Assessment]
    responses: List[QuestionResponse] = field(default_factory=list)
    behavioral_signals: Optional[BehavioralSignals] = None
    loan_recommendation: Optional[LoanRecommendation] = None
    explanation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(),
            "assessment": self.assessment.to_dict() if self.assessment else None,
            "responses": [r.to_dict() for r in self.responses],
            "behavioral_signals": (
                self.behavioral_signals.to_dict() if self.behavioral_signals else None
            ),
            "loan_recommendation": (
                self.loan_recommendation.to_dict() if self.loan_recommendation else None
            ),
            "explanation": self.explanation,
        }
