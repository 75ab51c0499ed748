"""Assessment-related domain exceptions."""

from .base import DomainException


class AssessmentNotFoundException(DomainException):
    """Raised when an assessment cannot be found."""

    def __init__(self, identifier: str):
        super().__init__(
            message=f"Assessment not found: {identifier}",
            code="ASSESSMENT_NOT_FOUND",
        )
        self.identifier = identifier


class Phase1AssessmentMissingException(DomainException):
    """Raised when blending is attempted before Phase 1 produced trait averages."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} has no Phase 1 assessment to blend with",
            code="PHASE1_ASSESSMENT_MISSING",
        )
        self.session_id = session_id


class BehavioralSignalsMissingException(DomainException):
    """Raised when blending is attempted before gameplay telemetry was stored."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} has no behavioral signals",
            code="BEHAVIORAL_SIGNALS_MISSING",
        )
        self.session_id = session_id


class InvalidBehavioralSignalsException(DomainException):
    """Raised when a gameplay telemetry payload is malformed."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_BEHAVIORAL_SIGNALS",
        )


class InvalidOverrideException(DomainException):
    """Raised when an admin override request is invalid."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_OVERRIDE",
        )


class AssessmentOverriddenException(DomainException):
    """Raised when the pipeline tries to rewrite a manually overridden assessment."""

    def __init__(self, assessment_id: str):
        super().__init__(
            message=f"Assessment {assessment_id} was overridden by an admin and is final",
            code="ASSESSMENT_OVERRIDDEN",
        )
        self.assessment_id = assessment_id
