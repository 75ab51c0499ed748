"""Assessment session entity and its lifecycle."""

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID, uuid4

from creditmind.domain.exceptions import InvalidSessionTransitionException
from creditmind.service.scoring.models import CandidateQuestion, TraitVariances


INDUSTRIES = (
    "retail",
    "restaurant",
    "technology",
    "agriculture",
    "manufacturing",
    "logistics",
    "healthcare",
    "education",
    "construction",
    "services",
    "textiles",
    "tourism",
)


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    PHASE1_COMPLETE = "phase1_complete"
    PHASE2_COMPLETE = "phase2_complete"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


ALLOWED_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.IN_PROGRESS: frozenset(
        {SessionStatus.PHASE1_COMPLETE, SessionStatus.ABANDONED}
    ),
    SessionStatus.PHASE1_COMPLETE: frozenset(
        {SessionStatus.PHASE2_COMPLETE, SessionStatus.ABANDONED}
    ),
    SessionStatus.PHASE2_COMPLETE: frozenset(
        {SessionStatus.COMPLETED, SessionStatus.ABANDONED}
    ),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.ABANDONED: frozenset(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_seed(user_id: str) -> str:
    """SHA-256 of user id, timestamp and a random nonce: unique per session."""
    raw = f"{user_id}:{int(_utcnow().timestamp() * 1000)}:{secrets.token_hex(8)}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def select_industry(session_seed: str) -> str:
    """Pick the scenario industry from the seed's first 8 hex digits."""
    if len(session_seed) < 8:
        raise ValueError("Session seed must have at least 8 hex characters")
    return INDUSTRIES[int(session_seed[:8], 16) % len(INDUSTRIES)]


def hash_ip(ip: str, salt: str) -> str:
    """Salted SHA-256 of an IP address; the raw address is never stored."""
    return hashlib.sha256(f"{ip}:{salt}".encode("utf-8")).hexdigest()


@dataclass
class Session:
    """
    One applicant's assessment session.

    Status only moves forward:
        in_progress -> phase1_complete -> phase2_complete -> completed
    and any non-terminal status may move to abandoned.
    """

    user_id: str
    session_seed: str
    target_industry: str
    id: UUID = field(default_factory=uuid4)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    ip_hash: Optional[str] = None
    current_variances: TraitVariances = field(
        default_factory=lambda: TraitVariances.uniform(1.0)
    )
    previous_scenarios: List[str] = field(default_factory=list)
    question_count: int = 0
    current_question: Optional[CandidateQuestion] = None
    started_at: datetime = field(default_factory=_utcnow)
    phase1_completed_at: Optional[datetime] = None
    phase2_started_at: Optional[datetime] = None
    phase2_completed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def can_transition_to(self, target: SessionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def require_status(self, *expected: SessionStatus) -> None:
        """Raise unless the session is currently in one of the expected statuses."""
        if self.status not in expected:
            raise InvalidSessionTransitionException(
                session_id=str(self.id),
                current=self.status.value,
                target="/".join(s.value for s in expected),
            )

    def transition_to(self, target: SessionStatus, at: Optional[datetime] = None) -> None:
        """
        Move the session to a new status.

        Raises:
            InvalidSessionTransitionException: If the move is not allowed
        """
        if not self.can_transition_to(target):
            raise InvalidSessionTransitionException(
                session_id=str(self.id),
                current=self.status.value,
                target=target.value,
            )

        at = at or _utcnow()
        if target == SessionStatus.PHASE1_COMPLETE:
            self.phase1_completed_at = at
        elif target == SessionStatus.PHASE2_COMPLETE:
            self.phase2_completed_at = at
        elif target == SessionStatus.COMPLETED:
            self.completed_at = at
        self.status = target

    @property
    def duration_sec(self) -> Optional[int]:
        """Seconds from start to Phase 1 completion."""
        if self.phase1_completed_at is None:
            return None
        return round((self.phase1_completed_at - self.started_at).total_seconds())

    def to_dict(self) -> dict:
        return {
            "session_id": str(self.id),
            "user_id": self.user_id,
            "status": self.status.value,
            "target_industry": self.target_industry,
            "question_count": self.question_count,
            "current_trait_variances": self.current_variances.to_dict(),
            "previous_scenarios": list(self.previous_scenarios),
            "started_at": self.started_at.isoformat(),
            "phase1_completed_at": (
                self.phase1_completed_at.isoformat() if self.phase1_completed_at else None
            ),
            "phase2_started_at": (
                self.phase2_started_at.isoformat() if self.phase2_started_at else None
            ),
            "phase2_completed_at": (
                self.phase2_completed_at.isoformat() if self.phase2_completed_at else None
            ),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
