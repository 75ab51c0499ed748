"""Stored gameplay telemetry for one session."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from creditmind.service.scoring.models import BehavioralSignalBundle, NormalizedTraitScores


@dataclass
class BehavioralSignals:
    """A telemetry bundle together with the scores extracted from it."""

    session_id: UUID
    bundle: BehavioralSignalBundle
    behavioral_scores: Optional[NormalizedTraitScores] = None
    bart_score: Optional[float] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "signal_id": str(self.id),
            **self.bundle.to_dict(),
            "session_id": str(self.session_id),
            "behavioral_scores": (
                self.behavioral_scores.to_dict() if self.behavioral_scores else None
            ),
            "bart_score": self.bart_score,
            "created_at": self.created_at.isoformat(),
        }
