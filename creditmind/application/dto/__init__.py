"""Data Transfer Objects for application layer."""

from .assessment import (
    BehavioralSubmissionResponse,
    QuestionStep,
    StartSessionRequest,
    SubmitResponseRequest,
    UserFacingResult,
)
from .admin import (
    LoanAdjustment,
    OverrideRequest,
    OverrideResponse,
    SessionDetail,
    SessionListResponse,
    SessionSummary,
)

__all__ = [
    "BehavioralSubmissionResponse",
    "QuestionStep",
    "StartSessionRequest",
    "SubmitResponseRequest",
    "UserFacingResult",
    "LoanAdjustment",
    "OverrideRequest",
    "OverrideResponse",
    "SessionDetail",
    "SessionListResponse",
    "SessionSummary",
]
