"""Repository implementations."""

from .session_repository import PostgresSessionRepository
from .response_repository import PostgresResponseRepository
from .assessment_repository import PostgresAssessmentRepository
from .signal_repository import PostgresBehavioralSignalRepository
from .recommendation_repository import PostgresLoanRecommendationRepository

__all__ = [
    "PostgresSessionRepository",
    "PostgresResponseRepository",
    "PostgresAssessmentRepository",
    "PostgresBehavioralSignalRepository",
    "PostgresLoanRecommendationRepository",
]
