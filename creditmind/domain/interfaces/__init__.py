"""
Domain Interfaces (Ports)
"""

from .repositories import (
    SessionRepository,
    ResponseRepository,
    AssessmentRepository,
    BehavioralSignalRepository,
    LoanRecommendationRepository,
)
from .clients import QuestionGeneratorClient

__all__ = [
    "SessionRepository",
    "ResponseRepository",
    "AssessmentRepository",
    "BehavioralSignalRepository",
    "LoanRecommendationRepository",
    "QuestionGeneratorClient",
]
