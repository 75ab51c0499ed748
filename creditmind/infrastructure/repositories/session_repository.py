"""PostgreSQL implementation of SessionRepository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind.domain.entities import Session, SessionStatus
from creditmind.domain.interfaces import SessionRepository
from creditmind.infrastructure.database.models import SessionModel
from creditmind.service.scoring.models import CandidateQuestion, TraitVariances


class PostgresSessionRepository(SessionRepository):
    """
    PostgreSQL implementation of the Session repository.

    Uses SQLAlchemy async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, session: Session) -> Session:
        """Insert the session, or update the stored row in place."""
        model = await self._session.get(SessionModel, str(session.id))
        if model is None:
            model = SessionModel(
                id=str(session.id),
                user_id=session.user_id,
                session_seed=session.session_seed,
                target_industry=session.target_industry,
                ip_hash=session.ip_hash,
                started_at=session.started_at,
            )
            self._session.add(model)

        model.status = session.status.value
        model.question_count = session.question_count
        model.current_trait_variances = session.current_variances.to_dict()
        model.previous_scenarios = list(session.previous_scenarios)
        model.current_question = (
            session.current_question.to_dict() if session.current_question else None
        )
        model.phase1_completed_at = session.phase1_completed_at
        model.phase2_started_at = session.phase2_started_at
        model.phase2_completed_at = session.phase2_completed_at
        model.completed_at = session.completed_at

        await self._session.flush()

        return session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Retrieve a session by ID."""
        stmt = select(SessionModel).where(SessionModel.id == str(session_id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def list(
        self,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Session]:
        """List sessions ordered by started_at descending."""
        stmt = select(SessionModel)
        if status is not None:
            stmt = stmt.where(SessionModel.status == status.value)
        stmt = (
            stmt.order_by(SessionModel.started_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: SessionModel) -> Session:
        """Convert database model to domain entity."""
        return Session(
            id=UUID(model.id),
            user_id=model.user_id,
            session_seed=model.session_seed,
            target_industry=model.target_industry,
            status=SessionStatus(model.status),
            ip_hash=model.ip_hash,
            current_variances=TraitVariances.from_dict(model.current_trait_variances),
            previous_scenarios=list(model.previous_scenarios or []),
            question_count=model.question_count,
            current_question=(
                CandidateQuestion.from_dict(model.current_question)
                if model.current_question
                else None
            ),
            started_at=model.started_at,
            phase1_completed_at=model.phase1_completed_at,
            phase2_started_at=model.phase2_started_at,
            phase2_completed_at=model.phase2_completed_at,
            completed_at=model.completed_at,
        )
