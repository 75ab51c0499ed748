"""External API client implementations."""

from .question_client import HttpQuestionGeneratorClient

__all__ = [
    "HttpQuestionGeneratorClient",
]
