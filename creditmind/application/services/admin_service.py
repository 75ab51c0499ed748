"""Admin service - review and manual override of assessments."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import structlog

from creditmind.application.dto import (
    OverrideRequest,
    OverrideResponse,
    SessionDetail,
    SessionListResponse,
    SessionSummary,
)
from creditmind.core.metrics import record_admin_override
from creditmind.domain.entities import (
    Assessment,
    LoanRecommendation,
    SessionStatus,
)
from creditmind.domain.entities.loan import ADMIN_OVERRIDE_BASIS
from creditmind.domain.exceptions import (
    AssessmentNotFoundException,
    InvalidOverrideException,
    SessionNotFoundException,
)
from creditmind.domain.interfaces import (
    AssessmentRepository,
    BehavioralSignalRepository,
    LoanRecommendationRepository,
    ResponseRepository,
    SessionRepository,
)
from creditmind.service.scoring import (
    LoanTerms,
    RecommendationDecision,
    RiskRating,
    ScoringSettings,
    determine_loan_decision,
    explain_decision,
    scoring_settings,
)
from creditmind.service.scoring.loan import from_recommendation_decision

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


class AdminService:
    """
    Reviewer-facing use cases.

    Reads expose the full internal record (PD, trait scores, consistency).
    None of it may flow back into the applicant-facing service.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        response_repository: ResponseRepository,
        assessment_repository: AssessmentRepository,
        signal_repository: BehavioralSignalRepository,
        recommendation_repository: LoanRecommendationRepository,
        settings: ScoringSettings = scoring_settings,
    ):
        self._session_repo = session_repository
        self._response_repo = response_repository
        self._assessment_repo = assessment_repository
        self._signal_repo = signal_repository
        self._recommendation_repo = recommendation_repository
        self._settings = settings

    async def list_sessions(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: Optional[str] = None,
        risk_rating: Optional[str] = None,
    ) -> SessionListResponse:
        """
        List sessions newest first, with their assessment summary.

        The risk filter applies to the fetched page, so a filtered page
        may hold fewer than `limit` rows.

        Raises:
            ValueError: If status or risk_rating is not a known value
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        status_filter = SessionStatus(status) if status else None
        rating_filter = RiskRating(risk_rating) if risk_rating else None

        sessions = await self._session_repo.list(
            status=status_filter,
            limit=limit,
            offset=(page - 1) * limit,
        )

        summaries = []
        for session in sessions:
            assessment = await self._assessment_repo.get_by_session_id(session.id)
            if rating_filter is not None and (
                assessment is None or assessment.risk_rating != rating_filter
            ):
                continue
            summaries.append(SessionSummary.from_entities(session, assessment))

        return SessionListResponse(sessions=summaries, page=page, limit=limit)

    async def get_detail(self, session_id: str) -> SessionDetail:
        """
        Full record of one session, with a decision explanation.

        Raises:
            SessionNotFoundException: If the session doesn't exist
        """
        try:
            key = UUID(str(session_id))
        except ValueError:
            raise SessionNotFoundException(str(session_id)) from None

        session = await self._session_repo.get_by_id(key)
        if session is None:
            raise SessionNotFoundException(str(session_id))

        assessment = await self._assessment_repo.get_by_session_id(session.id)
        recommendation = None
        explanation = None
        if assessment is not None:
            recommendation = await self._recommendation_repo.get_by_assessment_id(assessment.id)
            explanation = self._explain(assessment, recommendation)

        return SessionDetail(
            session=session,
            assessment=assessment,
            responses=await self._response_repo.list_by_session(session.id),
            behavioral_signals=await self._signal_repo.get_by_session_id(session.id),
            loan_recommendation=recommendation,
            explanation=explanation,
        )

    async def override(self, request: OverrideRequest) -> OverrideResponse:
        """
        Replace the decision of an assessment and make it final.

        Terms not given in the loan adjustment default to the standard
        terms of the assessment's risk rating. An assessment may be
        overridden again; the latest override wins.

        Raises:
            InvalidOverrideException: If request validation fails
            AssessmentNotFoundException: If the assessment doesn't exist
        """
        errors = request.validate()
        if errors:
            raise InvalidOverrideException("; ".join(errors))

        try:
            key = UUID(str(request.assessment_id))
        except ValueError:
            raise AssessmentNotFoundException(str(request.assessment_id)) from None

        assessment = await self._assessment_repo.get_by_id(key)
        if assessment is None:
            raise AssessmentNotFoundException(str(request.assessment_id))

        decision = RecommendationDecision(request.decision)
        terms = self._override_terms(assessment, request)
        now = datetime.now(timezone.utc)

        assessment.apply_override(from_recommendation_decision(decision))
        await self._assessment_repo.save(assessment)

        recommendation = await self._recommendation_repo.get_by_assessment_id(assessment.id)
        if recommendation is None:
            recommendation = LoanRecommendation(
                assessment_id=assessment.id,
                decision=decision,
                max_amount=terms.max_amount,
                duration_months=terms.duration_months,
                apr_percent=terms.apr_percent,
                amount_basis=ADMIN_OVERRIDE_BASIS,
                duration_basis=ADMIN_OVERRIDE_BASIS,
                apr_basis=ADMIN_OVERRIDE_BASIS,
            )
        recommendation.apply_override(
            decision=decision,
            justification=request.justification,
            reviewed_by=request.admin_email,
            terms=terms,
            reviewed_at=now,
            comment=request.comment,
        )
        await self._recommendation_repo.save(recommendation)

        record_admin_override(decision.value)
        logger.info(
            "assessment_overridden",
            assessment_id=str(assessment.id),
            session_id=str(assessment.session_id),
            decision=decision.value,
            reviewed_by=request.admin_email,
        )

        return OverrideResponse(
            success=True,
            assessment_id=str(assessment.id),
            new_decision=decision.value,
            overridden_by=request.admin_email,
            overridden_at=now.isoformat(),
        )

    def _override_terms(self, assessment: Assessment, request: OverrideRequest) -> LoanTerms:
        defaults = self._settings.terms_for(assessment.risk_rating)
        adjustment = request.loan_adjustment
        if adjustment is None:
            return defaults
        return LoanTerms(
            max_amount=(
                adjustment.max_amount if adjustment.max_amount is not None
                else defaults.max_amount
            ),
            duration_months=(
                adjustment.duration_months if adjustment.duration_months is not None
                else defaults.duration_months
            ),
            apr_percent=(
                adjustment.apr_percent if adjustment.apr_percent is not None
                else defaults.apr_percent
            ),
        )

    def _explain(
        self,
        assessment: Assessment,
        recommendation: Optional[LoanRecommendation],
    ) -> str:
        result = determine_loan_decision(
            assessment.pd_modified,
            assessment.risk_rating,
            assessment.consistency_index,
            self._settings,
        )
        text = explain_decision(result, assessment.money_profile, self._settings)
        if recommendation is not None and recommendation.admin_override:
            text += (
                f"\n\nOverridden to {recommendation.decision.value.upper()}"
                f" by {recommendation.reviewed_by}: {recommendation.override_justification}"
            )
        return text
