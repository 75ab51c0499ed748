"""PostgreSQL implementation of LoanRecommendationRepository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind.domain.entities import LoanRecommendation
from creditmind.domain.interfaces import LoanRecommendationRepository
from creditmind.infrastructure.database.models import LoanRecommendationModel
from creditmind.service.scoring.models import RecommendationDecision


class PostgresLoanRecommendationRepository(LoanRecommendationRepository):
    """PostgreSQL-backed loan recommendation repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, recommendation: LoanRecommendation) -> LoanRecommendation:
        model = await self._session.get(LoanRecommendationModel, str(recommendation.id))
        if model is None:
            model = LoanRecommendationModel(
                id=str(recommendation.id),
                assessment_id=str(recommendation.assessment_id),
                created_at=recommendation.created_at,
            )
            self._session.add(model)

        model.decision = recommendation.decision.value
        model.max_amount = recommendation.max_amount
        model.duration_months = recommendation.duration_months
        model.apr_percent = recommendation.apr_percent
        model.amount_basis = recommendation.amount_basis
        model.duration_basis = recommendation.duration_basis
        model.apr_basis = recommendation.apr_basis
        model.admin_override = recommendation.admin_override
        model.override_justification = recommendation.override_justification
        model.reviewed_by = recommendation.reviewed_by
        model.reviewed_at = recommendation.reviewed_at
        model.admin_comment = recommendation.admin_comment

        await self._session.flush()

        return recommendation

    async def get_by_assessment_id(self, assessment_id: UUID) -> Optional[LoanRecommendation]:
        stmt = select(LoanRecommendationModel).where(
            LoanRecommendationModel.assessment_id == str(assessment_id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    def _to_entity(self, model: LoanRecommendationModel) -> LoanRecommendation:
        return LoanRecommendation(
            id=UUID(model.id),
            assessment_id=UUID(model.assessment_id),
            decision=RecommendationDecision(model.decision),
            max_amount=model.max_amount,
            duration_months=model.duration_months,
            apr_percent=model.apr_percent,
            amount_basis=model.amount_basis,
            duration_basis=model.duration_basis,
            apr_basis=model.apr_basis,
            admin_override=model.admin_override,
            override_justification=model.override_justification,
            reviewed_by=model.reviewed_by,
            reviewed_at=model.reviewed_at,
            admin_comment=model.admin_comment,
            created_at=model.created_at,
        )
