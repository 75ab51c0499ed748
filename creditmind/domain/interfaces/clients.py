"""External client interfaces."""

from abc import ABC, abstractmethod
from typing import List

from creditmind.domain.entities import QuestionGenerationContext
from creditmind.service.scoring.models import CandidateQuestion


class QuestionGeneratorClient(ABC):
    """
    Abstract client for the question generation service.

    The service produces a batch of candidate questions; the assessment
    picks one of them with the question selection policy.
    """

    @abstractmethod
    async def generate_candidates(
        self,
        context: QuestionGenerationContext,
    ) -> List[CandidateQuestion]:
        """
        Generate a batch of candidate questions.

        Args:
            context: Session state the questions should target

        Returns:
            Parsed candidate questions (normally 3)

        Raises:
            QuestionServiceException: If the service returns an error
            QuestionServiceTimeoutException: If the request times out
            InvalidQuestionBatchException: If the batch is malformed
        """
        ...
