"""
Reaction-time score adjustment.

Reaction questions flash a scenario and then time how fast the applicant
taps an option. The selected option's score is nudged before the response
enters trait aggregation:

- Very fast (< 500ms): impulsive signal, score raised by 0.5 (capped at 5)
- Very slow (> 3000ms): indecisive signal, score lowered by 0.3 (floored at 1)
- Otherwise: unchanged

The adjustment is applied to raw response scores only; the aggregator
never looks at timings.
"""

from dataclasses import replace

from .models import QuestionResponse, QuestionType
from .settings import ScoringSettings, scoring_settings


def adjust_reaction_score(
    score: float,
    reaction_time_ms: float,
    settings: ScoringSettings = scoring_settings,
) -> float:
    """
    Adjust a selected option's score by how fast it was tapped.

    Args:
        score: Selected option score (1-5)
        reaction_time_ms: Time from buttons appearing to the tap
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Adjusted score, still within 1-5
    """
    if reaction_time_ms < 0:
        raise ValueError(f"reaction_time_ms cannot be negative: {reaction_time_ms}")

    if reaction_time_ms < settings.reaction_fast_ms:
        return min(5.0, score + settings.reaction_fast_bonus)
    if reaction_time_ms > settings.reaction_slow_ms:
        return max(1.0, score - settings.reaction_slow_penalty)
    return score


def apply_reaction_adjustment(
    response: QuestionResponse,
    settings: ScoringSettings = scoring_settings,
) -> QuestionResponse:
    """
    Return the response with its score adjusted, if it is a reaction question.

    Reads the tap timing from raw_response["reaction_time_ms"] and falls
    back to response_time_ms. Non-reaction responses are returned as-is.
    """
    if response.question_type != QuestionType.REACTION:
        return response

    reaction_time = response.raw_response.get("reaction_time_ms", response.response_time_ms)
    adjusted = adjust_reaction_score(response.score, float(reaction_time), settings)
    if adjusted == response.score:
        return response
    return replace(response, score=adjusted)
