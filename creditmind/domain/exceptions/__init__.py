"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .session import (
    SessionNotFoundException,
    InvalidSessionTransitionException,
    InvalidResponseException,
    NoResponsesException,
    InvalidSessionRequestException,
)
from .assessment import (
    AssessmentNotFoundException,
    Phase1AssessmentMissingException,
    BehavioralSignalsMissingException,
    InvalidBehavioralSignalsException,
    InvalidOverrideException,
    AssessmentOverriddenException,
)
from .question import (
    QuestionServiceException,
    QuestionServiceTimeoutException,
    InvalidQuestionBatchException,
)

__all__ = [
    "DomainException",
    "SessionNotFoundException",
    "InvalidSessionTransitionException",
    "InvalidResponseException",
    "NoResponsesException",
    "InvalidSessionRequestException",
    "AssessmentNotFoundException",
    "Phase1AssessmentMissingException",
    "BehavioralSignalsMissingException",
    "InvalidBehavioralSignalsException",
    "InvalidOverrideException",
    "AssessmentOverriddenException",
    "QuestionServiceException",
    "QuestionServiceTimeoutException",
    "InvalidQuestionBatchException",
]
