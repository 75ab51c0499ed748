"""Assessment entity: the aggregate scoring result of one session."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from creditmind.service.scoring.models import (
    AssessmentDecision,
    ConsistencyIndex,
    NormalizedTraitScores,
    ResponseSummary,
    RiskRating,
    TraitScores,
)
from creditmind.service.scoring.pipeline import BlendedResult, Phase1Result


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Assessment:
    """
    Scoring result for one session.

    Created at Phase 1 completion with self-report scores only, then
    updated in place once the blended score is computed. There is exactly
    one assessment per session.
    """

    session_id: UUID
    trait_scores: TraitScores
    weighted_risk: float
    pd_score: float
    pd_phase1_only: float
    pd_modified: float
    risk_rating: RiskRating
    money_profile: str
    money_profile_modifier: float
    profile_confidence: float
    decision: AssessmentDecision
    response_summary: ResponseSummary
    id: UUID = field(default_factory=uuid4)
    behavioral_scores: Optional[NormalizedTraitScores] = None
    bart_score: Optional[float] = None
    blended_trait_scores: Optional[TraitScores] = None
    consistency_index: Optional[ConsistencyIndex] = None
    pd_blended: Optional[float] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_phase1(cls, session_id: UUID, result: Phase1Result) -> "Assessment":
        return cls(
            session_id=session_id,
            trait_scores=result.traits,
            weighted_risk=result.pd.weighted_risk,
            pd_score=result.pd.pd_raw,
            pd_phase1_only=result.pd.pd_modified,
            pd_modified=result.pd.pd_modified,
            risk_rating=result.pd.risk_rating,
            money_profile=result.profile_name,
            money_profile_modifier=result.profile.profile.pd_modifier,
            profile_confidence=result.profile.confidence,
            decision=result.decision.decision,
            response_summary=result.summary,
        )

    @property
    def is_blended(self) -> bool:
        return self.blended_trait_scores is not None

    def apply_blended(self, result: BlendedResult) -> None:
        """Replace the Phase 1 outcome with the blended one; Phase 1 scores are kept."""
        self.behavioral_scores = result.behavioral.traits
        self.bart_score = result.behavioral.bart_score
        self.blended_trait_scores = result.traits
        self.consistency_index = result.consistency
        self.weighted_risk = result.pd.weighted_risk
        self.pd_blended = result.pd.pd_raw
        self.pd_modified = result.pd.pd_modified
        self.risk_rating = result.pd.risk_rating
        self.money_profile = result.profile_name
        self.money_profile_modifier = result.profile.profile.pd_modifier
        self.profile_confidence = result.profile.confidence
        self.decision = result.decision.decision
        self.updated_at = _utcnow()

    def apply_override(self, decision: AssessmentDecision) -> None:
        self.decision = decision
        self.updated_at = _utcnow()

    def to_dict(self) -> dict:
        """Full record for the admin view. Never returned to applicants."""
        return {
            "assessment_id": str(self.id),
            "session_id": str(self.session_id),
            "trait_scores": self.trait_scores.to_dict(),
            "weighted_risk": round(self.weighted_risk, 4),
            "pd_score": round(self.pd_score, 4),
            "pd_phase1_only": round(self.pd_phase1_only, 4),
            "pd_blended": round(self.pd_blended, 4) if self.pd_blended is not None else None,
            "pd_modified": round(self.pd_modified, 4),
            "risk_rating": self.risk_rating.value,
            "money_profile": self.money_profile,
            "money_profile_modifier": self.money_profile_modifier,
            "profile_confidence": round(self.profile_confidence, 3),
            "decision": self.decision.value,
            "response_summary": self.response_summary.to_dict(),
            "behavioral_scores": (
                self.behavioral_scores.to_dict() if self.behavioral_scores else None
            ),
            "bart_score": self.bart_score,
            "blended_trait_scores": (
                self.blended_trait_scores.to_dict() if self.blended_trait_scores else None
            ),
            "consistency_index": (
                self.consistency_index.to_dict() if self.consistency_index else None
            ),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
