"""PostgreSQL implementation of ResponseRepository."""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind.domain.interfaces import ResponseRepository
from creditmind.infrastructure.database.models import ResponseModel
from creditmind.service.scoring.models import QuestionResponse, QuestionType, Trait


class PostgresResponseRepository(ResponseRepository):
    """Append-only store of self-report answers."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, response: QuestionResponse) -> QuestionResponse:
        model = ResponseModel(
            session_id=response.session_id,
            question_index=response.question_index,
            question_type=response.question_type.value,
            trait=response.trait.value,
            score=response.score,
            response_time_ms=response.response_time_ms,
            raw_response=dict(response.raw_response),
            hesitation_count=response.hesitation_count,
            changed_answer=response.changed_answer,
        )

        self._session.add(model)
        await self._session.flush()

        return response

    async def list_by_session(self, session_id: UUID) -> List[QuestionResponse]:
        stmt = (
            select(ResponseModel)
            .where(ResponseModel.session_id == str(session_id))
            .order_by(ResponseModel.question_index.asc())
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: ResponseModel) -> QuestionResponse:
        return QuestionResponse(
            session_id=str(model.session_id),
            question_index=model.question_index,
            question_type=QuestionType(model.question_type),
            trait=Trait(model.trait),
            score=model.score,
            response_time_ms=model.response_time_ms,
            raw_response=model.raw_response or {},
            hesitation_count=model.hesitation_count,
            changed_answer=model.changed_answer,
        )
