"""
Blending Engine for the CreditMind assessment pipeline.

Combines Phase 1 self-report trait averages (raw 1-5 scale) with Phase 2
behavioral trait scores (normalized 0-1 scale), and measures how much the
two sources disagree.
"""

from typing import Optional

from .models import (
    ConsistencyFlag,
    ConsistencyIndex,
    NormalizedTraitScores,
    TraitScores,
    TRAIT_ORDER,
)
from .settings import ScoringSettings, scoring_settings
from .traits import denormalize_score, normalize_score


def _require_phase1(phase1: Optional[TraitScores]) -> TraitScores:
    if phase1 is None:
        raise ValueError("Cannot blend without a Phase 1 result")
    if not isinstance(phase1, TraitScores):
        raise ValueError("Phase 1 scores must be raw-scale TraitScores")
    return phase1


def _require_phase2(phase2: NormalizedTraitScores) -> NormalizedTraitScores:
    if not isinstance(phase2, NormalizedTraitScores):
        raise ValueError("Phase 2 scores must be NormalizedTraitScores")
    return phase2


def blend_scores(
    phase1: Optional[TraitScores],
    phase2: NormalizedTraitScores,
    settings: ScoringSettings = scoring_settings,
) -> TraitScores:
    """
    Blend self-report and behavioral scores per trait.

    Algorithm:
        blended = denormalize(normalize(phase1) * w1 + phase2 * w2)

    Example (Conscientiousness, w1=0.55, w2=0.45):
        phase1 C=5.0 -> 1.0; phase2 C=0.0
        blended = 0.55 * 1.0 + 0.45 * 0.0 = 0.55 -> 1 + 0.55 * 4 = 3.2

    Args:
        phase1: Phase 1 trait averages on the raw scale
        phase2: Behavioral trait scores on the normalized scale
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Blended TraitScores on the raw scale

    Raises:
        ValueError: If phase1 is missing or either input has the wrong scale
    """
    phase1 = _require_phase1(phase1)
    phase2 = _require_phase2(phase2)

    blended = {}
    for trait in TRAIT_ORDER:
        w1, w2 = settings.blending_weights[trait]
        normalized = normalize_score(phase1[trait]) * w1 + phase2[trait] * w2
        blended[trait.field_name] = denormalize_score(normalized)

    return TraitScores(**blended)


def get_consistency_flag(
    overall: float,
    settings: ScoringSettings = scoring_settings,
) -> ConsistencyFlag:
    """
    Classify a consistency value into its band.

    Bands are half-open on the upper side:
        [0, 0.20) highly_consistent
        [0.20, 0.40) normal_variance
        [0.40, 0.60) moderate_discrepancy
        [0.60, ...) high_discrepancy
    """
    if overall < settings.consistency_highly_consistent:
        return ConsistencyFlag.HIGHLY_CONSISTENT
    if overall < settings.consistency_normal_variance:
        return ConsistencyFlag.NORMAL_VARIANCE
    if overall < settings.consistency_moderate_discrepancy:
        return ConsistencyFlag.MODERATE_DISCREPANCY
    return ConsistencyFlag.HIGH_DISCREPANCY


def compute_consistency_index(
    phase1: Optional[TraitScores],
    phase2: NormalizedTraitScores,
    settings: ScoringSettings = scoring_settings,
) -> ConsistencyIndex:
    """
    Measure the discrepancy between self-report and observed behavior.

    Business Rationale:
        An applicant who reports high conscientiousness but plays
        recklessly may be gaming the questionnaire. A large discrepancy
        routes the application to manual review.

    Algorithm:
        diff[t] = |normalize(phase1[t]) - phase2[t]|
        overall = sum(importance[t] * diff[t]), importance summing to 1.0

    Args:
        phase1: Phase 1 trait averages on the raw scale
        phase2: Behavioral trait scores on the normalized scale
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        ConsistencyIndex with per-trait differences, overall value and flag

    Raises:
        ValueError: If phase1 is missing or either input has the wrong scale
    """
    phase1 = _require_phase1(phase1)
    phase2 = _require_phase2(phase2)

    differences = {
        trait.field_name: abs(normalize_score(phase1[trait]) - phase2[trait])
        for trait in TRAIT_ORDER
    }
    overall = sum(
        settings.trait_weights[trait] * differences[trait.field_name]
        for trait in TRAIT_ORDER
    )

    return ConsistencyIndex(
        differences=NormalizedTraitScores(**differences),
        overall=overall,
        flag=get_consistency_flag(overall, settings),
    )
