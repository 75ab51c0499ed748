"""
Scoring Pipeline for the CreditMind assessment.

This module chains the scoring stages into the two entry points used by
the application layer:

Phase 1 (self-report only):
    1. Average the response history per trait
    2. Match a money profile on the averages
    3. Compute PD with the profile modifier
    4. Decide without a consistency index

Blended (after gameplay):
    1. Extract behavioral trait scores and the BART index
    2. Blend them with the stored Phase 1 averages
    3. Measure self-report vs. behavior consistency
    4. Re-match the profile and re-compute PD on the blended scores
    5. Decide, letting a large discrepancy force manual review
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .behavioral import compute_behavioral_scores
from .blending import blend_scores, compute_consistency_index
from .loan import determine_loan_decision
from .models import (
    BehavioralScores,
    BehavioralSignalBundle,
    ConsistencyIndex,
    LoanDecisionResult,
    PDResult,
    ProfileMatch,
    QuestionResponse,
    ResponseSummary,
    TraitScores,
    TraitVariances,
)
from .pd import calculate_full_pd
from .profiles import generate_blended_profile_name, match_money_profile
from .settings import ScoringSettings, scoring_settings
from .traits import compute_trait_averages, compute_trait_variances, summarize_responses


@dataclass(frozen=True)
class Phase1Result:
    traits: TraitScores
    variances: TraitVariances
    summary: ResponseSummary
    profile: ProfileMatch
    profile_name: str
    pd: PDResult
    decision: LoanDecisionResult


@dataclass(frozen=True)
class BlendedResult:
    behavioral: BehavioralScores
    traits: TraitScores
    consistency: ConsistencyIndex
    profile: ProfileMatch
    profile_name: str
    pd: PDResult
    decision: LoanDecisionResult


def score_phase1(
    responses: Sequence[QuestionResponse],
    settings: ScoringSettings = scoring_settings,
) -> Phase1Result:
    """
    Score a completed self-report session.

    Args:
        responses: Full response history of one session, in answer order
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Phase1Result with averages, profile, PD and the Phase 1 decision

    Raises:
        ValueError: If the history is empty, reordered or mixes sessions
    """
    if not responses:
        raise ValueError("Cannot score Phase 1 without responses")

    traits = compute_trait_averages(responses, settings)
    profile = match_money_profile(traits, settings=settings)
    pd = calculate_full_pd(traits, profile.profile.pd_modifier, settings)

    return Phase1Result(
        traits=traits,
        variances=compute_trait_variances(responses, settings),
        summary=summarize_responses(responses),
        profile=profile,
        profile_name=generate_blended_profile_name(traits, settings=settings),
        pd=pd,
        decision=determine_loan_decision(pd.pd_modified, pd.risk_rating, None, settings),
    )


def score_blended(
    phase1_traits: Optional[TraitScores],
    bundle: BehavioralSignalBundle,
    settings: ScoringSettings = scoring_settings,
) -> BlendedResult:
    """
    Score a session after gameplay, combining both phases.

    Args:
        phase1_traits: Stored Phase 1 averages; must not be None
        bundle: Telemetry of the completed gameplay session
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        BlendedResult with blended traits, consistency, PD and final decision

    Raises:
        ValueError: If there is no Phase 1 result to blend with
    """
    if phase1_traits is None:
        raise ValueError("Cannot blend without a Phase 1 result")

    behavioral = compute_behavioral_scores(bundle, settings)
    blended = blend_scores(phase1_traits, behavioral.traits, settings)
    consistency = compute_consistency_index(phase1_traits, behavioral.traits, settings)
    profile = match_money_profile(blended, settings=settings)
    pd = calculate_full_pd(blended, profile.profile.pd_modifier, settings)

    return BlendedResult(
        behavioral=behavioral,
        traits=blended,
        consistency=consistency,
        profile=profile,
        profile_name=generate_blended_profile_name(blended, settings=settings),
        pd=pd,
        decision=determine_loan_decision(pd.pd_modified, pd.risk_rating, consistency, settings),
    )
