"""
Unit Tests for the scoring pipeline entry points.

These tests verify:
1. Phase 1 scoring chains averages, profile, PD and decision
2. Blended scoring re-scores on blended traits and keeps Phase 1 separate
3. Missing inputs are rejected
"""

import pytest

from creditmind.service.scoring.models import (
    AssessmentDecision,
    BehavioralSignalBundle,
    QuestionResponse,
    QuestionType,
    RiskRating,
    Trait,
    TraitScores,
)
from creditmind.service.scoring.pd import calculate_full_pd
from creditmind.service.scoring.pipeline import score_blended, score_phase1


def history(*answers) -> list:
    return [
        QuestionResponse(
            session_id="session-1",
            question_index=index,
            question_type=QuestionType.GRID,
            trait=trait,
            score=score,
        )
        for index, (trait, score) in enumerate(answers)
    ]


class TestScorePhase1:

    def test_stable_applicant(self):
        result = score_phase1(history(
            (Trait.CONSCIENTIOUSNESS, 5.0),
            (Trait.NEUROTICISM, 1.0),
        ))

        assert result.traits.conscientiousness == 5.0
        assert result.traits.openness == 3.0
        assert result.pd == calculate_full_pd(result.traits, result.profile.profile.pd_modifier)
        assert result.pd.risk_rating == RiskRating.LOW
        assert result.decision.consistency is None
        assert result.summary.question_count == 2

    def test_volatile_applicant_not_approved(self):
        result = score_phase1(history(
            (Trait.CONSCIENTIOUSNESS, 1.0),
            (Trait.NEUROTICISM, 5.0),
        ))

        assert result.profile.profile.name == "Stressed Reactor"
        assert result.decision.decision == AssessmentDecision.MANUAL_REVIEW

    def test_empty_history_rejected(self):
        with pytest.raises(ValueError):
            score_phase1([])

    def test_reordered_history_rejected(self):
        responses = history((Trait.OPENNESS, 3.0), (Trait.OPENNESS, 4.0))

        with pytest.raises(ValueError):
            score_phase1(list(reversed(responses)))


class TestScoreBlended:

    def test_blends_with_phase1(self):
        phase1 = TraitScores(
            openness=3.0,
            conscientiousness=5.0,
            extraversion=3.0,
            agreeableness=3.0,
            neuroticism=1.0,
        )

        result = score_blended(phase1, BehavioralSignalBundle(session_id="session-1"))

        assert result.consistency is not None
        assert result.decision.consistency == result.consistency
        assert 1.0 <= result.traits.conscientiousness <= 5.0
        assert 0.02 <= result.pd.pd_modified <= 0.35
        assert 0.0 <= result.behavioral.bart_score <= 1.0

    def test_missing_phase1_rejected(self):
        with pytest.raises(ValueError):
            score_blended(None, BehavioralSignalBundle(session_id="session-1"))
