"""Loan recommendation entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from creditmind.service.scoring.loan import to_recommendation_decision
from creditmind.service.scoring.models import (
    LoanDecisionResult,
    LoanTerms,
    RecommendationDecision,
)


ADMIN_OVERRIDE_BASIS = "Admin override"


@dataclass
class LoanRecommendation:
    """
    Recommended loan terms for an assessment.

    Written by the decision engine at Phase 1 and again after blending.
    Once an admin overrides it, it is final: the pipeline never writes
    to it again.
    """

    assessment_id: UUID
    decision: RecommendationDecision
    max_amount: float
    duration_months: int
    apr_percent: float
    amount_basis: str
    duration_basis: str
    apr_basis: str
    id: UUID = field(default_factory=uuid4)
    admin_override: bool = False
    override_justification: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_comment: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_decision(cls, assessment_id: UUID, result: LoanDecisionResult) -> "LoanRecommendation":
        return cls(
            assessment_id=assessment_id,
            decision=to_recommendation_decision(result.decision),
            max_amount=result.terms.max_amount,
            duration_months=result.terms.duration_months,
            apr_percent=result.terms.apr_percent,
            amount_basis=result.amount_basis,
            duration_basis=result.duration_basis,
            apr_basis=result.apr_basis,
        )

    def apply_decision(self, result: LoanDecisionResult) -> None:
        """Overwrite decision and terms with a fresh engine result."""
        self.decision = to_recommendation_decision(result.decision)
        self.max_amount = result.terms.max_amount
        self.duration_months = result.terms.duration_months
        self.apr_percent = result.terms.apr_percent
        self.amount_basis = result.amount_basis
        self.duration_basis = result.duration_basis
        self.apr_basis = result.apr_basis

    def apply_override(
        self,
        decision: RecommendationDecision,
        justification: str,
        reviewed_by: str,
        terms: LoanTerms,
        reviewed_at: datetime,
        comment: Optional[str] = None,
    ) -> None:
        self.decision = decision
        self.max_amount = terms.max_amount
        self.duration_months = terms.duration_months
        self.apr_percent = terms.apr_percent
        self.admin_override = True
        self.override_justification = justification
        self.reviewed_by = reviewed_by
        self.reviewed_at = reviewed_at
        self.admin_comment = comment or justification

    @property
    def terms(self) -> LoanTerms:
        return LoanTerms(
            max_amount=self.max_amount,
            duration_months=self.duration_months,
            apr_percent=self.apr_percent,
        )

    def to_dict(self) -> dict:
        return {
            "recommendation_id": str(self.id),
            "assessment_id": str(self.assessment_id),
            "decision": self.decision.value,
            "max_amount": self.max_amount,
            "duration_months": self.duration_months,
            "apr_percent": self.apr_percent,
            "amount_basis": self.amount_basis,
            "duration_basis": self.duration_basis,
            "apr_basis": self.apr_basis,
            "admin_override": self.admin_override,
            "override_justification": self.override_justification,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "admin_comment": self.admin_comment,
            "created_at": self.created_at.isoformat(),
        }
