"""Context sent to the question generation service."""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from creditmind.service.scoring.models import (
    QuestionResponse,
    QuestionType,
    Trait,
    TraitVariances,
    TRAIT_ORDER,
)


@dataclass(frozen=True)
class QuestionGenerationContext:
    """
    What the generator needs to produce the next candidate batch.

    Traits are listed by descending variance so the generator targets
    the least-measured traits first.
    """

    session_seed: str
    target_industry: str
    question_count: int
    trait_variances: TraitVariances
    measurements: Dict[Trait, int] = field(default_factory=dict)
    previous_scenarios: List[str] = field(default_factory=list)
    previous_types: List[QuestionType] = field(default_factory=list)
    candidate_count: int = 3

    @classmethod
    def from_history(
        cls,
        session_seed: str,
        target_industry: str,
        variances: TraitVariances,
        responses: Sequence[QuestionResponse],
        previous_scenarios: Sequence[str],
        candidate_count: int = 3,
    ) -> "QuestionGenerationContext":
        measurements = {trait: 0 for trait in TRAIT_ORDER}
        for response in responses:
            measurements[response.trait] += 1
        return cls(
            session_seed=session_seed,
            target_industry=target_industry,
            question_count=len(responses),
            trait_variances=variances,
            measurements=measurements,
            previous_scenarios=list(previous_scenarios),
            previous_types=[r.question_type for r in responses],
            candidate_count=candidate_count,
        )

    def trait_priority(self) -> List[Trait]:
        """Traits by descending variance; sorted() keeps O, C, E, A, N order on ties."""
        return sorted(TRAIT_ORDER, key=lambda t: -self.trait_variances[t])

    def to_dict(self) -> dict:
        return {
            "session_seed": self.session_seed,
            "target_industry": self.target_industry,
            "question_number": self.question_count + 1,
            "candidate_count": self.candidate_count,
            "trait_status": [
                {
                    "trait": trait.value,
                    "variance": round(self.trait_variances[trait], 4),
                    "measurements": self.measurements.get(trait, 0),
                }
                for trait in self.trait_priority()
            ],
            "previous_scenarios": list(self.previous_scenarios),
            "previous_types": [t.value for t in self.previous_types],
            "question_types": [t.value for t in QuestionType],
        }
