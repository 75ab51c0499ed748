"""Data transfer objects for the applicant-facing assessment flow."""

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from creditmind.service.scoring.loan import user_message
from creditmind.service.scoring.models import (
    CandidateQuestion,
    LoanDecisionResult,
    QuestionResponse,
    QuestionType,
    UserFacingDecision,
    coerce_trait,
)


@dataclass(frozen=True)
class StartSessionRequest:
    """Input data for starting an assessment session."""
    user_id: str
    ip_address: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.user_id or not self.user_id.strip():
            errors.append("user_id is required")

        return errors


@dataclass(frozen=True)
class QuestionStep:
    """The next question to show, with progress for the indicator."""

    session_id: str
    question: Optional[CandidateQuestion]
    progress: int
    total_estimated: int
    phase1_complete: bool = False

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "question": self.question.to_dict() if self.question else None,
            "progress": self.progress,
            "total_estimated": self.total_estimated,
            "phase1_complete": self.phase1_complete,
        }


@dataclass(frozen=True)
class SubmitResponseRequest:
    """An answered question as sent by the client."""

    session_id: str
    question_index: int
    question_type: str
    trait: str
    score: float
    response_time_ms: int = 0
    raw_response: Mapping[str, Any] = field(default_factory=dict)
    hesitation_count: int = 0
    changed_answer: bool = False

    def validate(self) -> List[str]:
        errors = []

        if not self.session_id:
            errors.append("session_id is required")
        if not isinstance(self.question_index, int) or self.question_index < 0:
            errors.append("question_index must be a non-negative integer")
        if self.question_type not in {t.value for t in QuestionType}:
            errors.append(f"unknown question_type: {self.question_type!r}")
        try:
            coerce_trait(self.trait)
        except ValueError:
            errors.append(f"unknown trait: {self.trait!r}")
        if (
            not isinstance(self.score, (int, float))
            or isinstance(self.score, bool)
            or not 1.0 <= self.score <= 5.0
        ):
            errors.append("score must be a number within [1.0, 5.0]")
        if self.response_time_ms < 0:
            errors.append("response_time_ms must be non-negative")
        if self.hesitation_count < 0:
            errors.append("hesitation_count must be non-negative")
        if (
            self.question_type == QuestionType.REACTION.value
            and "reaction_time_ms" in self.raw_response
        ):
            reaction_time = self.raw_response["reaction_time_ms"]
            if (
                not isinstance(reaction_time, (int, float))
                or isinstance(reaction_time, bool)
                or not math.isfinite(reaction_time)
                or reaction_time < 0
            ):
                errors.append("reaction_time_ms must be a non-negative number")

        return errors

    def to_response(self) -> QuestionResponse:
        """Build the scoring record. Call validate() first."""
        return QuestionResponse(
            session_id=self.session_id,
            question_index=self.question_index,
            question_type=QuestionType(self.question_type),
            trait=coerce_trait(self.trait),
            score=float(self.score),
            response_time_ms=int(self.response_time_ms),
            raw_response=dict(self.raw_response),
            hesitation_count=int(self.hesitation_count),
            changed_answer=bool(self.changed_answer),
        )


@dataclass(frozen=True)
class UserFacingResult:
    """
    The only result an applicant ever receives.

    Carries no PD, no trait scores and no internal decision. The decision
    is restricted to approved / pending_approval.
    """

    decision: UserFacingDecision
    message: str
    profile_name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.decision, UserFacingDecision):
            raise ValueError(f"Not a user-facing decision: {self.decision!r}")

    @classmethod
    def from_decision(
        cls,
        result: LoanDecisionResult,
        profile_name: Optional[str] = None,
    ) -> "UserFacingResult":
        return cls(
            decision=result.user_facing_decision,
            message=user_message(result.user_facing_decision),
            profile_name=profile_name,
        )

    @classmethod
    def pending(cls, profile_name: Optional[str] = None) -> "UserFacingResult":
        """Generic under-review result, also used when scoring fails."""
        return cls(
            decision=UserFacingDecision.PENDING_APPROVAL,
            message=user_message(UserFacingDecision.PENDING_APPROVAL),
            profile_name=profile_name,
        )

    def to_dict(self) -> dict:
        return {
            "decision": self.decision.value,
            "message": self.message,
            "profile_name": self.profile_name,
        }


@dataclass(frozen=True)
class BehavioralSubmissionResponse:
    """Acknowledgement of stored gameplay telemetry."""

    session_id: str
    status: str

    def to_dict(self) -> dict:
        return {"session_id": self.session_id, "status": self.status}
