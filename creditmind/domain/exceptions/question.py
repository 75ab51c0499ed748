"""Question generation service domain exceptions."""

from .base import DomainException


class QuestionServiceException(DomainException):
    """Raised when the question generation service returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message=message,
            code="QUESTION_SERVICE_ERROR",
        )
        self.status_code = status_code


class QuestionServiceTimeoutException(QuestionServiceException):
    """Raised when the question generation service times out."""

    def __init__(self):
        super().__init__(
            message="Question generation request timed out",
            status_code=None,
        )
        self.code = "QUESTION_SERVICE_TIMEOUT"


class InvalidQuestionBatchException(DomainException):
    """Raised when a candidate question batch is malformed."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_QUESTION_BATCH",
        )
