"""Database infrastructure."""

from .connection import DatabaseSessionManager, db_manager
from .models import (
    Base,
    SessionModel,
    ResponseModel,
    BehavioralSignalModel,
    AssessmentModel,
    LoanRecommendationModel,
)

__all__ = [
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "SessionModel",
    "ResponseModel",
    "BehavioralSignalModel",
    "AssessmentModel",
    "LoanRecommendationModel",
]
