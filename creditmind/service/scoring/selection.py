"""
Question Selection Policy for adaptive self-report collection.

Given the current trait variances and a batch of externally generated
candidate questions, picks the question to ask next and decides when to
stop asking.
"""

from typing import Iterable, Optional, Sequence

from .models import CandidateQuestion, QuestionType, TraitVariances, TRAIT_ORDER
from .settings import ScoringSettings, scoring_settings


def validate_candidate_batch(candidates: Sequence[CandidateQuestion]) -> None:
    """
    Reject malformed candidate batches.

    Raises:
        ValueError: If the batch is empty or a candidate lacks options
    """
    if not candidates:
        raise ValueError("Candidate batch is empty")

    for index, candidate in enumerate(candidates):
        if not isinstance(candidate, CandidateQuestion):
            raise ValueError(f"Candidate {index} is not a CandidateQuestion")
        if not candidate.options:
            raise ValueError(f"Candidate {index} has no options")


def select_optimal_question(
    candidates: Sequence[CandidateQuestion],
    variances: TraitVariances,
    recent_types: Iterable[QuestionType],
    settings: ScoringSettings = scoring_settings,
) -> int:
    """
    Pick the candidate with the highest expected information gain.

    Each candidate scores the variance of its target trait, plus a small
    bonus when its question type has not been used recently. The first
    candidate wins ties.

    Args:
        candidates: Candidate batch from the question generator
        variances: Current per-trait variances
        recent_types: Question types already shown in this session
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Index of the selected candidate

    Raises:
        ValueError: If the candidate batch is malformed
    """
    validate_candidate_batch(candidates)
    seen = set(recent_types)

    best_index = 0
    best_score = float("-inf")

    for index, candidate in enumerate(candidates):
        score = variances[candidate.trait]
        if candidate.question_type not in seen:
            score += settings.type_diversity_bonus

        if score > best_score:
            best_score = score
            best_index = index

    return best_index


def is_assessment_complete(
    variances: TraitVariances,
    question_count: int,
    variance_threshold: Optional[float] = None,
    min_questions: Optional[int] = None,
    max_questions: Optional[int] = None,
    settings: ScoringSettings = scoring_settings,
) -> bool:
    """
    Stopping rule for adaptive questioning.

    Evaluated after each new response is recorded:
    - At or past max_questions: always complete
    - Below min_questions: never complete
    - Otherwise: complete once every trait variance is below the threshold

    The rule is monotone: with equal or lower variances, a larger count
    never turns a completed assessment back into an incomplete one.

    Args:
        variances: Per-trait variances over the full history
        question_count: Number of responses recorded so far
        variance_threshold: Override of settings.variance_threshold
        min_questions: Override of settings.min_questions
        max_questions: Override of settings.max_questions
        settings: Scoring settings (uses defaults if not provided)
    """
    threshold = settings.variance_threshold if variance_threshold is None else variance_threshold
    minimum = settings.min_questions if min_questions is None else min_questions
    maximum = settings.max_questions if max_questions is None else max_questions

    if question_count >= maximum:
        return True
    if question_count < minimum:
        return False

    return all(variances[trait] < threshold for trait in TRAIT_ORDER)


def estimate_total_questions(
    variances: TraitVariances,
    question_count: int,
    settings: ScoringSettings = scoring_settings,
) -> int:
    """
    Estimate how many questions the session will take in total.

    Assumes one more question per trait still above the variance threshold,
    never less than the next question and never more than max_questions.
    Used for the progress indicator only.
    """
    settled = sum(
        1 for trait in TRAIT_ORDER if variances[trait] < settings.variance_threshold
    )
    unsettled = len(TRAIT_ORDER) - settled
    return max(
        question_count + 1,
        min(settings.max_questions, question_count + unsettled),
    )
