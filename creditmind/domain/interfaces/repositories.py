"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from creditmind.domain.entities import (
    Assessment,
    BehavioralSignals,
    LoanRecommendation,
    Session,
    SessionStatus,
)
from creditmind.service.scoring.models import QuestionResponse


class SessionRepository(ABC):
    """
    Abstract repository for assessment Session persistence.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def save(self, session: Session) -> Session:
        """
        Insert or update a session.

        Args:
            session: The session to save

        Returns:
            The saved session
        """
        ...

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """
        Retrieve a session by ID.

        Args:
            session_id: The session's unique identifier

        Returns:
            The session if found, None otherwise
        """
        ...

    @abstractmethod
    async def list(
        self,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Session]:
        """
        List sessions, newest first.

        Args:
            status: Only return sessions with this status, if given
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip
        """
        ...


class ResponseRepository(ABC):
    """
    Abstract repository for question responses.

    Responses are append-only and read back in answer order.
    """

    @abstractmethod
    async def add(self, response: QuestionResponse) -> QuestionResponse:
        ...

    @abstractmethod
    async def list_by_session(self, session_id: UUID) -> List[QuestionResponse]:
        """
        Retrieve all responses of a session.

        Returns:
            Responses ordered by question_index ascending
        """
        ...


class AssessmentRepository(ABC):
    """Abstract repository for Assessment persistence (one per session)."""

    @abstractmethod
    async def save(self, assessment: Assessment) -> Assessment:
        """Insert or update an assessment."""
        ...

    @abstractmethod
    async def get_by_id(self, assessment_id: UUID) -> Optional[Assessment]:
        ...

    @abstractmethod
    async def get_by_session_id(self, session_id: UUID) -> Optional[Assessment]:
        ...


class BehavioralSignalRepository(ABC):
    """Abstract repository for stored gameplay telemetry."""

    @abstractmethod
    async def save(self, signals: BehavioralSignals) -> BehavioralSignals:
        ...

    @abstractmethod
    async def get_by_session_id(self, session_id: UUID) -> Optional[BehavioralSignals]:
        ...


class LoanRecommendationRepository(ABC):
    """Abstract repository for loan recommendations (one per assessment)."""

    @abstractmethod
    async def save(self, recommendation: LoanRecommendation) -> LoanRecommendation:
        """Insert or update a recommendation."""
        ...

    @abstractmethod
    async def get_by_assessment_id(self, assessment_id: UUID) -> Optional[LoanRecommendation]:
        ...
