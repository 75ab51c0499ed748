"""
Loan Decision Engine for the CreditMind assessment pipeline.

Turns PD, risk rating and the optional consistency index into an internal
decision, a user-facing decision and recommended loan terms.

Decision Logic (first matching rule wins):
    1. Consistency overall > 0.40: manual_review (overrides everything below)
    2. PD < 8%: approved
    3. PD < 18%: pending_approval
    4. Otherwise: manual_review

Loan terms come from the risk rating alone, so they are independent of the
branch taken above.

The user-facing decision is either approved or pending_approval. Declines
and reviews are never shown to the applicant.
"""

from typing import Optional

from .models import (
    AssessmentDecision,
    ConsistencyIndex,
    LoanDecisionResult,
    RecommendationDecision,
    RiskRating,
    UserFacingDecision,
)
from .settings import ScoringSettings, scoring_settings


APPROVED_MESSAGE = (
    "Congratulations! Your assessment is complete. You will receive details shortly."
)
PENDING_MESSAGE = (
    "Thank you for completing the assessment. Our team is reviewing your "
    "profile and will be in touch within 24-48 hours."
)


def determine_loan_decision(
    pd: float,
    risk_rating: RiskRating,
    consistency: Optional[ConsistencyIndex] = None,
    settings: ScoringSettings = scoring_settings,
) -> LoanDecisionResult:
    """
    Decide on a loan application.

    Args:
        pd: Final (modified) probability of default
        risk_rating: Tier derived from PD; selects the loan terms
        consistency: Consistency index from blending; None for a Phase 1
            only decision, which never triggers the consistency rule
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        LoanDecisionResult with internal/user-facing decisions and terms
    """
    consistency_overall = consistency.overall if consistency is not None else 0.0

    if consistency_overall > settings.consistency_review_threshold:
        decision = AssessmentDecision.MANUAL_REVIEW
    elif pd < settings.auto_approve_pd:
        decision = AssessmentDecision.APPROVED
    elif pd < settings.manual_review_pd:
        decision = AssessmentDecision.PENDING_APPROVAL
    else:
        decision = AssessmentDecision.MANUAL_REVIEW

    rating = risk_rating.value
    return LoanDecisionResult(
        decision=decision,
        user_facing_decision=to_user_facing_decision(decision),
        risk_rating=risk_rating,
        pd=pd,
        terms=settings.terms_for(risk_rating),
        amount_basis=f"Based on {rating} risk rating (PD: {pd * 100:.1f}%)",
        duration_basis=f"Standard {rating}-risk term",
        apr_basis=f"Risk-adjusted rate for {rating} risk tier",
        consistency=consistency,
    )


def to_user_facing_decision(decision: AssessmentDecision) -> UserFacingDecision:
    """Collapse an internal decision to what the applicant may see."""
    if decision == AssessmentDecision.APPROVED:
        return UserFacingDecision.APPROVED
    return UserFacingDecision.PENDING_APPROVAL


def to_recommendation_decision(decision: AssessmentDecision) -> RecommendationDecision:
    """Map an internal decision onto the loan recommendation vocabulary."""
    if decision == AssessmentDecision.APPROVED:
        return RecommendationDecision.APPROVE
    if decision == AssessmentDecision.DECLINED:
        return RecommendationDecision.DECLINE
    return RecommendationDecision.MANUAL_REVIEW


def from_recommendation_decision(decision: RecommendationDecision) -> AssessmentDecision:
    """Map an admin's recommendation decision back onto the internal decision."""
    if decision == RecommendationDecision.APPROVE:
        return AssessmentDecision.APPROVED
    if decision == RecommendationDecision.DECLINE:
        return AssessmentDecision.DECLINED
    return AssessmentDecision.MANUAL_REVIEW


def user_message(decision: UserFacingDecision) -> str:
    """Message shown to the applicant alongside the user-facing decision."""
    if decision == UserFacingDecision.APPROVED:
        return APPROVED_MESSAGE
    return PENDING_MESSAGE


def explain_decision(
    result: LoanDecisionResult,
    profile_name: Optional[str] = None,
    settings: ScoringSettings = scoring_settings,
) -> str:
    """
    Generate a human-readable explanation of a loan decision.

    For reviewers and logs only; never shown to the applicant.

    Args:
        result: The decision to explain
        profile_name: Matched money profile display name, if known
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Human-readable explanation string
    """
    lines = [f"Decision: {result.decision.value.upper()}"]
    lines.append(f"Shown to applicant: {result.user_facing_decision.value}")
    lines.append(f"PD: {result.pd * 100:.1f}% ({result.risk_rating.value} risk)")
    if profile_name:
        lines.append(f"Money profile: {profile_name}")
    lines.append("")

    consistency = result.consistency
    if consistency is None:
        lines.append("Consistency: not assessed (self-report only)")
    else:
        lines.append(f"Consistency: {consistency.overall:.2f} ({consistency.flag.value})")
        if consistency.overall > settings.consistency_review_threshold:
            lines.append("  - Self-report and behavior disagree: manual review required")
        worst_trait, worst_diff = max(consistency.differences.items(), key=lambda item: item[1])
        lines.append(f"  - Largest discrepancy: {worst_trait.field_name} ({worst_diff:.2f})")

    lines.append("")
    lines.append("Recommended Terms:")
    lines.append(f"  - Max amount: {result.terms.max_amount} ({result.amount_basis})")
    lines.append(f"  - Duration: {result.terms.duration_months} months ({result.duration_basis})")
    lines.append(f"  - APR: {result.terms.apr_percent:.1f}% ({result.apr_basis})")

    return "\n".join(lines)
