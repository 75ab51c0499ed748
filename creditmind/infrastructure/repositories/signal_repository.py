"""PostgreSQL implementation of BehavioralSignalRepository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind.domain.entities import BehavioralSignals
from creditmind.domain.interfaces import BehavioralSignalRepository
from creditmind.infrastructure.database.models import BehavioralSignalModel
from creditmind.service.scoring.models import BehavioralSignalBundle, NormalizedTraitScores


class PostgresBehavioralSignalRepository(BehavioralSignalRepository):
    """Stores the raw telemetry bundle as one JSON document per session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, signals: BehavioralSignals) -> BehavioralSignals:
        model = await self._session.get(BehavioralSignalModel, str(signals.id))
        if model is None:
            model = BehavioralSignalModel(
                id=str(signals.id),
                session_id=str(signals.session_id),
                created_at=signals.created_at,
            )
            self._session.add(model)

        model.game_seed = signals.bundle.game_seed
        model.duration_ms = signals.bundle.duration_ms
        model.signals = signals.bundle.to_dict()
        model.behavioral_scores = (
            signals.behavioral_scores.to_dict() if signals.behavioral_scores else None
        )
        model.bart_score = signals.bart_score

        await self._session.flush()

        return signals

    async def get_by_session_id(self, session_id: UUID) -> Optional[BehavioralSignals]:
        stmt = select(BehavioralSignalModel).where(
            BehavioralSignalModel.session_id == str(session_id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    def _to_entity(self, model: BehavioralSignalModel) -> BehavioralSignals:
        return BehavioralSignals(
            id=UUID(model.id),
            session_id=UUID(model.session_id),
            bundle=BehavioralSignalBundle.from_payload(str(model.session_id), model.signals),
            behavioral_scores=(
                NormalizedTraitScores.from_dict(model.behavioral_scores)
                if model.behavioral_scores
                else None
            ),
            bart_score=model.bart_score,
            created_at=model.created_at,
        )
