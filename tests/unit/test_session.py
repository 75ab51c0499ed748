"""
Unit Tests for the session lifecycle and domain entities.

These tests verify:
1. Session seeds, industry selection and IP hashing
2. Forward-only status transitions and their timestamps
3. Question generation context built from a response history
4. Assessment and loan recommendation updates, including overrides
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from creditmind.domain.entities import (
    INDUSTRIES,
    Assessment,
    LoanRecommendation,
    QuestionGenerationContext,
    Session,
    SessionStatus,
    generate_session_seed,
    hash_ip,
    select_industry,
)
from creditmind.domain.exceptions import InvalidSessionTransitionException
from creditmind.service.scoring.models import (
    AssessmentDecision,
    LoanTerms,
    QuestionResponse,
    QuestionType,
    RecommendationDecision,
    Trait,
    TraitVariances,
)
from creditmind.service.scoring.pipeline import score_phase1


# =============================================================================
# Test Fixtures
# =============================================================================

def make_session(**overrides) -> Session:
    seed = overrides.pop("session_seed", "0" * 64)
    return Session(
        user_id="user-1",
        session_seed=seed,
        target_industry=select_industry(seed),
        **overrides,
    )


def make_history(*answers) -> list:
    """Build a contiguous history from (trait, score, type) tuples."""
    return [
        QuestionResponse(
            session_id="session-1",
            question_index=index,
            question_type=question_type,
            trait=trait,
            score=score,
            response_time_ms=1000,
        )
        for index, (trait, score, question_type) in enumerate(answers)
    ]


# =============================================================================
# Seed and Privacy Tests
# =============================================================================

class TestSessionSeed:

    def test_seed_is_sha256_hex(self):
        seed = generate_session_seed("user-1")

        assert len(seed) == 64
        int(seed, 16)

    def test_seeds_unique_per_session(self):
        assert generate_session_seed("user-1") != generate_session_seed("user-1")

    @pytest.mark.parametrize(
        "seed,expected",
        [
            ("00000000", "retail"),
            ("00000005", "logistics"),
            ("0000000b", "tourism"),
            ("0000000c", "retail"),
        ],
    )
    def test_industry_from_seed_prefix(self, seed, expected):
        assert select_industry(seed + "ffff") == expected

    def test_industry_always_in_catalog(self):
        assert select_industry(generate_session_seed("user-2")) in INDUSTRIES

    def test_short_seed_rejected(self):
        with pytest.raises(ValueError):
            select_industry("abc")

    def test_ip_hash_is_salted(self):
        first = hash_ip("203.0.113.7", "salt-a")

        assert first == hash_ip("203.0.113.7", "salt-a")
        assert first != hash_ip("203.0.113.7", "salt-b")
        assert "203.0.113.7" not in first


# =============================================================================
# Status Transition Tests
# =============================================================================

class TestSessionTransitions:
    """Tests for the forward-only session state machine."""

    def test_new_session_in_progress(self):
        session = make_session()

        assert session.status == SessionStatus.IN_PROGRESS
        assert session.current_variances == TraitVariances.uniform(1.0)
        assert session.is_terminal is False

    def test_happy_path_stamps_each_phase(self):
        session = make_session()

        session.transition_to(SessionStatus.PHASE1_COMPLETE)
        session.transition_to(SessionStatus.PHASE2_COMPLETE)
        session.transition_to(SessionStatus.COMPLETED)

        assert session.phase1_completed_at is not None
        assert session.phase2_completed_at is not None
        assert session.completed_at is not None
        assert session.is_terminal is True

    def test_cannot_skip_a_phase(self):
        session = make_session()

        with pytest.raises(InvalidSessionTransitionException) as exc_info:
            session.transition_to(SessionStatus.COMPLETED)

        assert exc_info.value.code == "INVALID_SESSION_TRANSITION"
        assert exc_info.value.to_dict()["error"] == "INVALID_SESSION_TRANSITION"
        assert session.status == SessionStatus.IN_PROGRESS

    def test_cannot_move_backwards(self):
        session = make_session(status=SessionStatus.PHASE2_COMPLETE)

        with pytest.raises(InvalidSessionTransitionException):
            session.transition_to(SessionStatus.PHASE1_COMPLETE)

    def test_abandon_from_any_open_status(self):
        for status in (
            SessionStatus.IN_PROGRESS,
            SessionStatus.PHASE1_COMPLETE,
            SessionStatus.PHASE2_COMPLETE,
        ):
            session = make_session(status=status)
            session.transition_to(SessionStatus.ABANDONED)
            assert session.status == SessionStatus.ABANDONED

    def test_terminal_statuses_are_final(self):
        for status in (SessionStatus.COMPLETED, SessionStatus.ABANDONED):
            session = make_session(status=status)
            with pytest.raises(InvalidSessionTransitionException):
                session.transition_to(SessionStatus.ABANDONED)

    def test_require_status(self):
        session = make_session(status=SessionStatus.PHASE1_COMPLETE)

        session.require_status(SessionStatus.IN_PROGRESS, SessionStatus.PHASE1_COMPLETE)
        with pytest.raises(InvalidSessionTransitionException) as exc_info:
            session.require_status(SessionStatus.PHASE2_COMPLETE)

        assert exc_info.value.current == "phase1_complete"

    def test_duration_measured_to_phase1(self):
        started = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        session = make_session(started_at=started)

        assert session.duration_sec is None
        session.transition_to(SessionStatus.PHASE1_COMPLETE, at=started + timedelta(seconds=95))

        assert session.duration_sec == 95

    def test_to_dict(self):
        data = make_session().to_dict()

        assert data["status"] == "in_progress"
        assert data["target_industry"] == "retail"
        assert data["phase1_completed_at"] is None
        assert data["current_trait_variances"]["C"] == 1.0


# =============================================================================
# Question Generation Context Tests
# =============================================================================

class TestQuestionGenerationContext:

    def test_built_from_history(self):
        history = make_history(
            (Trait.CONSCIENTIOUSNESS, 4.0, QuestionType.GRID),
            (Trait.CONSCIENTIOUSNESS, 5.0, QuestionType.BARS),
            (Trait.NEUROTICISM, 2.0, QuestionType.GRID),
        )
        variances = TraitVariances(
            openness=1.0,
            conscientiousness=0.25,
            extraversion=1.0,
            agreeableness=1.0,
            neuroticism=1.0,
        )

        context = QuestionGenerationContext.from_history(
            "seed", "retail", variances, history, ["market day"]
        )

        assert context.question_count == 3
        assert context.measurements[Trait.CONSCIENTIOUSNESS] == 2
        assert context.measurements[Trait.OPENNESS] == 0
        assert context.previous_types == [QuestionType.GRID, QuestionType.BARS, QuestionType.GRID]

    def test_priority_by_descending_variance_with_stable_ties(self):
        variances = TraitVariances(
            openness=0.2,
            conscientiousness=0.9,
            extraversion=0.2,
            agreeableness=0.5,
            neuroticism=0.9,
        )
        context = QuestionGenerationContext.from_history("seed", "retail", variances, [], [])

        assert context.trait_priority() == [
            Trait.CONSCIENTIOUSNESS,
            Trait.NEUROTICISM,
            Trait.AGREEABLENESS,
            Trait.OPENNESS,
            Trait.EXTRAVERSION,
        ]

    def test_to_dict(self):
        context = QuestionGenerationContext.from_history(
            "seed", "retail", TraitVariances.uniform(1.0), [], []
        )

        data = context.to_dict()

        assert data["question_number"] == 1
        assert data["candidate_count"] == 3
        assert len(data["trait_status"]) == 5
        assert "grid" in data["question_types"]


# =============================================================================
# Assessment and Recommendation Tests
# =============================================================================

class TestAssessmentEntities:
    """Tests for Assessment and LoanRecommendation."""

    def _phase1(self):
        return score_phase1(make_history(
            (Trait.CONSCIENTIOUSNESS, 5.0, QuestionType.GRID),
            (Trait.NEUROTICISM, 1.0, QuestionType.BARS),
            (Trait.CONSCIENTIOUSNESS, 5.0, QuestionType.BUDGET),
        ))

    def test_assessment_from_phase1(self):
        result = self._phase1()

        assessment = Assessment.from_phase1(uuid4(), result)

        assert assessment.trait_scores == result.traits
        assert assessment.pd_phase1_only == result.pd.pd_modified
        assert assessment.pd_modified == result.pd.pd_modified
        assert assessment.decision == result.decision.decision
        assert assessment.is_blended is False
        assert assessment.to_dict()["pd_blended"] is None

    def test_recommendation_from_decision(self):
        result = self._phase1()

        recommendation = LoanRecommendation.from_decision(uuid4(), result.decision)

        assert recommendation.terms == result.decision.terms
        assert recommendation.admin_override is False
        assert recommendation.amount_basis == result.decision.amount_basis

    def test_override_marks_recommendation(self):
        recommendation = LoanRecommendation.from_decision(uuid4(), self._phase1().decision)
        reviewed_at = datetime(2026, 2, 1, tzinfo=timezone.utc)

        recommendation.apply_override(
            decision=RecommendationDecision.DECLINE,
            justification="Inconsistent business records",
            reviewed_by="analyst@example.com",
            terms=LoanTerms(max_amount=0, duration_months=0, apr_percent=0.0),
            reviewed_at=reviewed_at,
        )

        data = recommendation.to_dict()
        assert data["decision"] == "decline"
        assert data["admin_override"] is True
        assert data["max_amount"] == 0
        assert data["admin_comment"] == "Inconsistent business records"
        assert data["reviewed_at"] == reviewed_at.isoformat()

    def test_assessment_override_keeps_scores(self):
        assessment = Assessment.from_phase1(uuid4(), self._phase1())
        pd_before = assessment.pd_modified

        assessment.apply_override(AssessmentDecision.DECLINED)

        assert assessment.decision == AssessmentDecision.DECLINED
        assert assessment.pd_modified == pd_before
        assert assessment.updated_at is not None
