"""Session-related domain exceptions."""

from .base import DomainException


class SessionNotFoundException(DomainException):
    """Raised when an assessment session cannot be found."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session not found: {session_id}",
            code="SESSION_NOT_FOUND",
        )
        self.session_id = session_id


class InvalidSessionTransitionException(DomainException):
    """Raised when a call arrives out of order for the session's status."""

    def __init__(self, session_id: str, current: str, target: str):
        super().__init__(
            message=f"Session {session_id} cannot move from {current} to {target}",
            code="INVALID_SESSION_TRANSITION",
        )
        self.session_id = session_id
        self.current = current
        self.target = target


class InvalidResponseException(DomainException):
    """Raised when a question response is malformed or out of order."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_RESPONSE",
        )


class NoResponsesException(DomainException):
    """Raised when Phase 1 completion is requested with no recorded responses."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} has no responses to score",
            code="NO_RESPONSES",
        )
        self.session_id = session_id


class InvalidSessionRequestException(DomainException):
    """Raised when a request to start a session is invalid."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_SESSION_REQUEST",
        )
