"""
Integration tests for the admin review flow.

These tests verify:
1. Session listing with status and risk filters
2. Session detail with the full internal record and an explanation
3. Manual overrides: terms, audit fields, re-override
4. An overridden assessment is never rewritten by the pipeline
"""

from uuid import UUID

import pytest

from creditmind.application.dto import LoanAdjustment, OverrideRequest, StartSessionRequest
from creditmind.domain.entities import SessionStatus
from creditmind.domain.exceptions import (
    AssessmentNotFoundException,
    AssessmentOverriddenException,
    InvalidOverrideException,
    SessionNotFoundException,
)
from creditmind.infrastructure.repositories import (
    PostgresAssessmentRepository,
    PostgresBehavioralSignalRepository,
    PostgresLoanRecommendationRepository,
)
from creditmind.service.scoring.models import AssessmentDecision, RecommendationDecision


async def scored_assessment_id(assessment_service, run_phase1, test_session, user_id="user_1"):
    session_id = await run_phase1(assessment_service, user_id=user_id)
    await assessment_service.complete_phase1(session_id)
    assessment = await PostgresAssessmentRepository(test_session).get_by_session_id(
        UUID(session_id)
    )
    return session_id, str(assessment.id)


# =============================================================================
# Listing Tests
# =============================================================================

class TestListSessions:
    """Tests for AdminService.list_sessions."""

    @pytest.mark.asyncio
    async def test_lists_sessions_with_summary(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        test_session,
    ):
        session_id, _ = await scored_assessment_id(assessment_service, run_phase1, test_session)
        await assessment_service.start_session(StartSessionRequest(user_id="user_2"))

        listing = await admin_service.list_sessions()

        assert listing.page == 1
        assert len(listing.sessions) == 2
        scored = next(s for s in listing.sessions if s.session_id == session_id)
        assert scored.risk_rating == "low"
        assert scored.decision == "approved"
        assert scored.question_count == 10
        assert scored.duration_sec is not None
        unscored = next(s for s in listing.sessions if s.session_id != session_id)
        assert unscored.decision == "pending"
        assert unscored.pd is None

    @pytest.mark.asyncio
    async def test_status_filter(self, assessment_service, admin_service, run_phase1, test_session):
        await scored_assessment_id(assessment_service, run_phase1, test_session)
        await assessment_service.start_session(StartSessionRequest(user_id="user_2"))

        listing = await admin_service.list_sessions(status="in_progress")

        assert [s.user_id for s in listing.sessions] == ["user_2"]

    @pytest.mark.asyncio
    async def test_risk_filter(self, assessment_service, admin_service, run_phase1, test_session):
        await scored_assessment_id(assessment_service, run_phase1, test_session)

        assert len((await admin_service.list_sessions(risk_rating="low")).sessions) == 1
        assert len((await admin_service.list_sessions(risk_rating="elevated")).sessions) == 0

    @pytest.mark.asyncio
    async def test_unknown_filter_rejected(self, admin_service):
        with pytest.raises(ValueError):
            await admin_service.list_sessions(status="finished")

    @pytest.mark.asyncio
    async def test_page_size_capped(self, admin_service):
        listing = await admin_service.list_sessions(page=0, limit=1000)

        assert listing.page == 1
        assert listing.limit == 100


# =============================================================================
# Detail Tests
# =============================================================================

class TestSessionDetail:

    @pytest.mark.asyncio
    async def test_detail_includes_internal_record(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        test_session,
    ):
        session_id, _ = await scored_assessment_id(assessment_service, run_phase1, test_session)

        detail = await admin_service.get_detail(session_id)

        assert len(detail.responses) == 10
        assert detail.assessment.pd_modified == pytest.approx(0.02)
        assert detail.loan_recommendation is not None
        assert detail.behavioral_signals is None
        assert "Decision: APPROVED" in detail.explanation

        data = detail.to_dict()
        assert data["assessment"]["trait_scores"]["C"] == 5.0
        assert data["session"]["status"] == "phase1_complete"

    @pytest.mark.asyncio
    async def test_detail_without_assessment(self, assessment_service, admin_service):
        step = await assessment_service.start_session(StartSessionRequest(user_id="user_1"))

        detail = await admin_service.get_detail(step.session_id)

        assert detail.assessment is None
        assert detail.explanation is None

    @pytest.mark.asyncio
    async def test_unknown_session(self, admin_service):
        with pytest.raises(SessionNotFoundException):
            await admin_service.get_detail("missing")


# =============================================================================
# Override Tests
# =============================================================================

class TestOverride:
    """Tests for AdminService.override."""

    @pytest.mark.asyncio
    async def test_override_uses_rating_terms_by_default(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        test_session,
    ):
        _, assessment_id = await scored_assessment_id(assessment_service, run_phase1, test_session)

        response = await admin_service.override(
            OverrideRequest(
                assessment_id=assessment_id,
                decision="decline",
                justification="Business registration could not be verified",
                admin_email="reviewer@example.com",
            )
        )

        assert response.success is True
        assert response.new_decision == "decline"
        assert response.overridden_by == "reviewer@example.com"

        assessment = await PostgresAssessmentRepository(test_session).get_by_id(UUID(assessment_id))
        assert assessment.decision == AssessmentDecision.DECLINED

        recommendation = await PostgresLoanRecommendationRepository(
            test_session
        ).get_by_assessment_id(assessment.id)
        assert recommendation.admin_override is True
        assert recommendation.decision == RecommendationDecision.DECLINE
        assert recommendation.max_amount == 50_000
        assert recommendation.reviewed_by == "reviewer@example.com"
        assert recommendation.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_loan_adjustment_applied(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        test_session,
    ):
        _, assessment_id = await scored_assessment_id(assessment_service, run_phase1, test_session)

        await admin_service.override(
            OverrideRequest(
                assessment_id=assessment_id,
                decision="approve",
                justification="Strong repayment history with the cooperative",
                admin_email="reviewer@example.com",
                loan_adjustment=LoanAdjustment(max_amount=10_000, apr_percent=12.0),
                comment="Start small",
            )
        )

        recommendation = await PostgresLoanRecommendationRepository(
            test_session
        ).get_by_assessment_id(UUID(assessment_id))
        assert recommendation.max_amount == 10_000
        assert recommendation.apr_percent == 12.0
        assert recommendation.duration_months == 36
        assert recommendation.admin_comment == "Start small"

    @pytest.mark.asyncio
    async def test_latest_override_wins(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        test_session,
    ):
        session_id, assessment_id = await scored_assessment_id(
            assessment_service, run_phase1, test_session
        )
        for decision in ("decline", "manual_review"):
            await admin_service.override(
                OverrideRequest(
                    assessment_id=assessment_id,
                    decision=decision,
                    justification=f"Set to {decision}",
                    admin_email="reviewer@example.com",
                )
            )

        detail = await admin_service.get_detail(session_id)

        assert detail.loan_recommendation.decision == RecommendationDecision.MANUAL_REVIEW
        assert detail.assessment.decision == AssessmentDecision.MANUAL_REVIEW
        assert "Overridden to MANUAL_REVIEW by reviewer@example.com" in detail.explanation

    @pytest.mark.asyncio
    async def test_invalid_request_rejected(self, admin_service):
        with pytest.raises(InvalidOverrideException):
            await admin_service.override(
                OverrideRequest(
                    assessment_id="abc",
                    decision="approve",
                    justification=" ",
                    admin_email="reviewer@example.com",
                )
            )
        with pytest.raises(InvalidOverrideException):
            await admin_service.override(
                OverrideRequest(
                    assessment_id="abc",
                    decision="approved",
                    justification="typo in decision",
                    admin_email="reviewer@example.com",
                )
            )

    @pytest.mark.asyncio
    async def test_unknown_assessment(self, admin_service):
        with pytest.raises(AssessmentNotFoundException):
            await admin_service.override(
                OverrideRequest(
                    assessment_id="00000000-0000-0000-0000-000000000000",
                    decision="approve",
                    justification="No such record",
                    admin_email="reviewer@example.com",
                )
            )

    @pytest.mark.asyncio
    async def test_pipeline_never_rewrites_override(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        careful_game_payload,
        test_session,
    ):
        session_id, assessment_id = await scored_assessment_id(
            assessment_service, run_phase1, test_session
        )
        await assessment_service.get_game_config(session_id)
        await assessment_service.submit_behavioral_signals(session_id, careful_game_payload)
        await admin_service.override(
            OverrideRequest(
                assessment_id=assessment_id,
                decision="decline",
                justification="Fraud report received",
                admin_email="reviewer@example.com",
            )
        )

        with pytest.raises(AssessmentOverriddenException):
            await assessment_service.compute_blended_score(session_id)

        assessment = await PostgresAssessmentRepository(test_session).get_by_id(UUID(assessment_id))
        session = await assessment_service._get_session(session_id)
        assert assessment.decision == AssessmentDecision.DECLINED
        assert assessment.is_blended is False
        assert session.status == SessionStatus.PHASE2_COMPLETE

    @pytest.mark.asyncio
    async def test_telemetry_rejected_after_override(
        self,
        assessment_service,
        admin_service,
        run_phase1,
        careful_game_payload,
        test_session,
    ):
        session_id, assessment_id = await scored_assessment_id(
            assessment_service, run_phase1, test_session
        )
        await admin_service.override(
            OverrideRequest(
                assessment_id=assessment_id,
                decision="approve",
                justification="Verified income documents",
                admin_email="reviewer@example.com",
            )
        )

        with pytest.raises(AssessmentOverriddenException):
            await assessment_service.submit_behavioral_signals(session_id, careful_game_payload)

        signals = await PostgresBehavioralSignalRepository(test_session).get_by_session_id(
            UUID(session_id)
        )
        session = await assessment_service._get_session(session_id)
        assert signals is None
        assert session.status == SessionStatus.PHASE1_COMPLETE
