"""HTTP implementation of QuestionGeneratorClient."""

import asyncio
from typing import Any, List

import httpx
import structlog

from creditmind.core.config import settings
from creditmind.core.metrics import (
    track_question_api_latency,
    record_question_api_success,
    record_question_api_failure,
)
from creditmind.domain.entities import QuestionGenerationContext
from creditmind.domain.exceptions import (
    InvalidQuestionBatchException,
    QuestionServiceException,
    QuestionServiceTimeoutException,
)
from creditmind.domain.interfaces import QuestionGeneratorClient
from creditmind.service.scoring.models import CandidateQuestion

logger = structlog.get_logger(__name__)


class HttpQuestionGeneratorClient(QuestionGeneratorClient):
    """
    HTTP client for the question generation service.

    Posts the session context and parses the returned candidate batch.
    Timeouts and transport errors are retried with exponential backoff;
    error responses and malformed batches are not.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url or settings.question_api_url
        self._timeout = settings.question_api_timeout if timeout is None else timeout
        self._max_retries = (
            settings.question_api_max_retries if max_retries is None else max_retries
        )
        self._transport = transport

    async def generate_candidates(
        self,
        context: QuestionGenerationContext,
    ) -> List[CandidateQuestion]:
        url = f"{self._base_url}/questions/generate"
        payload = context.to_dict()

        last_exception = None

        for attempt in range(self._max_retries):
            try:
                with track_question_api_latency():
                    async with httpx.AsyncClient(
                        timeout=self._timeout,
                        transport=self._transport,
                    ) as client:
                        response = await client.post(url, json=payload)

                        if response.status_code >= 400:
                            record_question_api_failure("error")
                            raise QuestionServiceException(
                                message=f"Question service error: {response.text[:200]}",
                                status_code=response.status_code,
                            )

                        try:
                            data = response.json()
                        except ValueError as e:
                            record_question_api_failure("malformed")
                            logger.warning("question_batch_not_json", error=str(e))
                            raise InvalidQuestionBatchException(
                                "Question service returned a non-JSON body"
                            ) from e

                candidates = self._parse_candidates(data)
                record_question_api_success()
                return candidates

            except httpx.TimeoutException:
                record_question_api_failure("timeout")
                last_exception = QuestionServiceTimeoutException()
                logger.warning(
                    "question_api_timeout",
                    question_number=context.question_count + 1,
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                )
            except (QuestionServiceException, InvalidQuestionBatchException):
                raise
            except httpx.HTTPError as e:
                record_question_api_failure("error")
                last_exception = QuestionServiceException(
                    message=f"Unexpected error: {str(e)}",
                )
                logger.error(
                    "question_api_error",
                    attempt=attempt + 1,
                    error=str(e),
                )

            # Exponential backoff
            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        raise last_exception or QuestionServiceException("Failed to generate questions")

    def _parse_candidates(self, data: Any) -> List[CandidateQuestion]:
        """Parse the raw response body into candidate questions."""
        items = data.get("candidates") if isinstance(data, dict) else data
        if not isinstance(items, list) or not items:
            record_question_api_failure("malformed")
            raise InvalidQuestionBatchException("Question service returned no candidates")

        try:
            return [CandidateQuestion.from_dict(item) for item in items]
        except ValueError as e:
            record_question_api_failure("malformed")
            logger.warning("question_batch_malformed", error=str(e))
            raise InvalidQuestionBatchException(str(e)) from e
