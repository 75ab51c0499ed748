"""PostgreSQL implementation of AssessmentRepository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind.domain.entities import Assessment
from creditmind.domain.interfaces import AssessmentRepository
from creditmind.infrastructure.database.models import AssessmentModel
from creditmind.service.scoring.models import (
    AssessmentDecision,
    ConsistencyIndex,
    NormalizedTraitScores,
    ResponseSummary,
    RiskRating,
    TraitScores,
)


class PostgresAssessmentRepository(AssessmentRepository):
    """
    PostgreSQL implementation of the Assessment repository.

    Trait vectors and the consistency index are stored as JSON keyed by
    trait letter.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, assessment: Assessment) -> Assessment:
        """Insert the assessment, or update the stored row in place."""
        model = await self._session.get(AssessmentModel, str(assessment.id))
        if model is None:
            model = AssessmentModel(
                id=str(assessment.id),
                session_id=str(assessment.session_id),
                created_at=assessment.created_at,
            )
            self._session.add(model)

        model.trait_scores = assessment.trait_scores.to_dict()
        model.weighted_risk = assessment.weighted_risk
        model.pd_score = assessment.pd_score
        model.pd_phase1_only = assessment.pd_phase1_only
        model.pd_blended = assessment.pd_blended
        model.pd_modified = assessment.pd_modified
        model.risk_rating = assessment.risk_rating.value
        model.money_profile = assessment.money_profile
        model.money_profile_modifier = assessment.money_profile_modifier
        model.profile_confidence = assessment.profile_confidence
        model.decision = assessment.decision.value
        model.response_summary = assessment.response_summary.to_dict()
        model.behavioral_scores = (
            assessment.behavioral_scores.to_dict() if assessment.behavioral_scores else None
        )
        model.bart_score = assessment.bart_score
        model.blended_trait_scores = (
            assessment.blended_trait_scores.to_dict()
            if assessment.blended_trait_scores
            else None
        )
        model.consistency_index = (
            assessment.consistency_index.to_dict() if assessment.consistency_index else None
        )
        model.updated_at = assessment.updated_at

        await self._session.flush()

        return assessment

    async def get_by_id(self, assessment_id: UUID) -> Optional[Assessment]:
        stmt = select(AssessmentModel).where(AssessmentModel.id == str(assessment_id))
        return await self._fetch_one(stmt)

    async def get_by_session_id(self, session_id: UUID) -> Optional[Assessment]:
        stmt = select(AssessmentModel).where(AssessmentModel.session_id == str(session_id))
        return await self._fetch_one(stmt)

    async def _fetch_one(self, stmt) -> Optional[Assessment]:
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    def _to_entity(self, model: AssessmentModel) -> Assessment:
        """Convert database model to domain entity."""
        return Assessment(
            id=UUID(model.id),
            session_id=UUID(model.session_id),
            trait_scores=TraitScores.from_dict(model.trait_scores),
            weighted_risk=model.weighted_risk,
            pd_score=model.pd_score,
            pd_phase1_only=model.pd_phase1_only,
            pd_modified=model.pd_modified,
            risk_rating=RiskRating(model.risk_rating),
            money_profile=model.money_profile,
            money_profile_modifier=model.money_profile_modifier,
            profile_confidence=model.profile_confidence,
            decision=AssessmentDecision(model.decision),
            response_summary=ResponseSummary(**model.response_summary),
            behavioral_scores=(
                NormalizedTraitScores.from_dict(model.behavioral_scores)
                if model.behavioral_scores
                else None
            ),
            bart_score=model.bart_score,
            blended_trait_scores=(
                TraitScores.from_dict(model.blended_trait_scores)
                if model.blended_trait_scores
                else None
            ),
            consistency_index=(
                ConsistencyIndex.from_dict(model.consistency_index)
                if model.consistency_index
                else None
            ),
            pd_blended=model.pd_blended,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
