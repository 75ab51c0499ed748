"""
Trait Aggregation for the CreditMind assessment pipeline.

This module reduces a session's self-report responses into:
- Per-trait averages (raw 1-5 scale)
- Per-trait variances (measurement uncertainty driving adaptive questioning)
- A summary of answering behavior (timing, hesitation, changed answers)

Every function takes the FULL response history of one session, in answer
order. Variance and the stopping rule are functions of the accumulated
history, so a reordered or partial history is rejected rather than scored.
"""

from collections import defaultdict
from typing import Dict, List, Sequence

from .models import (
    QuestionResponse,
    ResponseSummary,
    Trait,
    TraitScores,
    TraitVariances,
    TRAIT_ORDER,
)
from .settings import ScoringSettings, scoring_settings


def normalize_score(score: float) -> float:
    """Map a raw 1-5 score onto 0-1: (score - 1) / 4, clamped."""
    return max(0.0, min(1.0, (score - 1.0) / 4.0))


def denormalize_score(normalized: float) -> float:
    """Map a 0-1 score back onto the raw scale: 1 + normalized * 4."""
    return 1.0 + normalized * 4.0


def validate_response_history(responses: Sequence[QuestionResponse]) -> None:
    """
    Check that a response history is complete and in answer order.

    A valid history belongs to a single session and its question indexes
    run 0, 1, 2, ... without gaps or repeats.

    Raises:
        ValueError: If the history is reordered, partial, or mixes sessions
    """
    session_ids = {r.session_id for r in responses}
    if len(session_ids) > 1:
        raise ValueError(f"Response history mixes sessions: {sorted(session_ids)}")

    for position, response in enumerate(responses):
        if response.question_index != position:
            raise ValueError(
                f"Response history out of order: position {position} "
                f"holds question_index {response.question_index}"
            )


def _scores_by_trait(responses: Sequence[QuestionResponse]) -> Dict[Trait, List[float]]:
    validate_response_history(responses)

    by_trait: Dict[Trait, List[float]] = defaultdict(list)
    for response in responses:
        by_trait[response.trait].append(response.score)
    return by_trait


def compute_trait_averages(
    responses: Sequence[QuestionResponse],
    settings: ScoringSettings = scoring_settings,
) -> TraitScores:
    """
    Average the raw scores of each trait.

    A trait with no responses gets the scale midpoint (3.0) rather than
    failing; this is the only value ever fabricated from absent data.

    Args:
        responses: Full response history of one session, in answer order
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        TraitScores on the raw 1-5 scale
    """
    by_trait = _scores_by_trait(responses)

    averages = {}
    for trait in TRAIT_ORDER:
        values = by_trait.get(trait, [])
        averages[trait.field_name] = (
            sum(values) / len(values) if values else settings.default_trait_score
        )

    return TraitScores(**averages)


def compute_trait_variances(
    responses: Sequence[QuestionResponse],
    settings: ScoringSettings = scoring_settings,
) -> TraitVariances:
    """
    Population variance (divide by n) of the raw scores of each trait.

    Traits with fewer than 2 observations are treated uniformly as
    "insufficient data" and get the maximal placeholder (1.0), which keeps
    them at the front of the adaptive question queue.

    Args:
        responses: Full response history of one session, in answer order
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        TraitVariances (all values >= 0)
    """
    by_trait = _scores_by_trait(responses)

    variances = {}
    for trait in TRAIT_ORDER:
        values = by_trait.get(trait, [])
        if len(values) < 2:
            variances[trait.field_name] = settings.insufficient_data_variance
            continue
        mean = sum(values) / len(values)
        variances[trait.field_name] = sum((v - mean) ** 2 for v in values) / len(values)

    return TraitVariances(**variances)


def select_highest_variance_trait(variances: TraitVariances) -> Trait:
    """
    Select the trait with the most measurement uncertainty.

    Ties go to the earliest trait in O, C, E, A, N order. When every trait
    has the same variance (e.g. the initial all-1.0 state) there is no
    information to prefer one, and Conscientiousness, the strongest PD
    predictor, is measured first.
    """
    values = [variances[trait] for trait in TRAIT_ORDER]
    if all(v == values[0] for v in values):
        return Trait.CONSCIENTIOUSNESS

    best_trait = TRAIT_ORDER[0]
    best_value = values[0]
    for trait, value in zip(TRAIT_ORDER[1:], values[1:]):
        if value > best_value:
            best_trait, best_value = trait, value
    return best_trait


def summarize_responses(responses: Sequence[QuestionResponse]) -> ResponseSummary:
    """
    Summarize answering behavior across a Phase 1 history.

    Stored alongside the assessment for reviewers; not used in PD.

    Raises:
        ValueError: If responses is empty
    """
    if not responses:
        raise ValueError("Cannot summarize an empty response history")

    times = [r.response_time_ms for r in responses]
    mean_time = sum(times) / len(times)
    time_variance = sum((t - mean_time) ** 2 for t in times) / len(times)

    return ResponseSummary(
        avg_response_time_ms=round(mean_time),
        response_time_variance=round(time_variance),
        changed_answer_count=sum(1 for r in responses if r.changed_answer),
        total_hesitations=sum(r.hesitation_count for r in responses),
        question_count=len(responses),
    )
