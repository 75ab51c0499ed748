"""
Data models for the scoring pipeline.

These models represent the data structures used throughout the pipeline,
from raw question responses and gameplay telemetry to the final loan
decision. All of them are immutable once created.

Two trait scales coexist and are kept in separate types:
    TraitScores            raw self-report scale, 1.0 - 5.0
    NormalizedTraitScores  normalized behavioral scale, 0.0 - 1.0
"""

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union


_TOLERANCE = 1e-9


class Trait(str, Enum):
    """The five OCEAN axes, in canonical enumeration order."""
    OPENNESS = "O"
    CONSCIENTIOUSNESS = "C"
    EXTRAVERSION = "E"
    AGREEABLENESS = "A"
    NEUROTICISM = "N"

    @property
    def field_name(self) -> str:
        return self.name.lower()


TRAIT_ORDER: Tuple[Trait, ...] = tuple(Trait)


def coerce_trait(value: Union[Trait, str]) -> Trait:
    """Accept a Trait, its letter ("C") or its full name ("conscientiousness")."""
    if isinstance(value, Trait):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unknown trait: {value!r}")
    key = value.strip()
    try:
        return Trait(key.upper())
    except ValueError:
        pass
    try:
        return Trait[key.upper()]
    except KeyError:
        raise ValueError(f"Unknown trait: {value!r}") from None


@dataclass(frozen=True)
class _TraitVector:
    """Five named numeric axes with scale bounds enforced at creation."""

    openness: float
    conscientiousness: float
    extraversion: float
    agreeableness: float
    neuroticism: float

    lower_bound: ClassVar[float] = -math.inf
    upper_bound: ClassVar[float] = math.inf

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be numeric, got {value!r}")
            if math.isnan(value) or math.isinf(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
            if value < self.lower_bound - _TOLERANCE or value > self.upper_bound + _TOLERANCE:
                raise ValueError(
                    f"{f.name}={value} outside [{self.lower_bound}, {self.upper_bound}]"
                )

    def __getitem__(self, trait: Union[Trait, str]) -> float:
        return getattr(self, coerce_trait(trait).field_name)

    def items(self):
        return [(trait, self[trait]) for trait in TRAIT_ORDER]

    def to_dict(self) -> Dict[str, float]:
        """Serialize keyed by trait letter, e.g. {"O": 3.0, "C": 4.5, ...}."""
        return {trait.value: self[trait] for trait in TRAIT_ORDER}

    @classmethod
    def from_dict(cls, data: Mapping[Any, float]):
        values = {}
        for key, value in data.items():
            values[coerce_trait(key).field_name] = float(value)
        missing = [t.value for t in TRAIT_ORDER if t.field_name not in values]
        if missing:
            raise ValueError(f"Missing traits: {', '.join(missing)}")
        return cls(**values)

    @classmethod
    def uniform(cls, value: float):
        return cls(**{trait.field_name: value for trait in TRAIT_ORDER})


@dataclass(frozen=True)
class TraitScores(_TraitVector):
    """Trait averages on the raw self-report scale (1.0 - 5.0)."""
    lower_bound: ClassVar[float] = 1.0
    upper_bound: ClassVar[float] = 5.0


@dataclass(frozen=True)
class NormalizedTraitScores(_TraitVector):
    """Trait scores on the normalized scale (0.0 - 1.0)."""
    lower_bound: ClassVar[float] = 0.0
    upper_bound: ClassVar[float] = 1.0


@dataclass(frozen=True)
class TraitVariances(_TraitVector):
    """Per-trait measurement uncertainty (population variance, >= 0)."""
    lower_bound: ClassVar[float] = 0.0


# =============================================================================
# Phase 1: self-report questions
# =============================================================================

class QuestionType(str, Enum):
    """UI formats a self-report question can be rendered in."""
    GRID = "grid"
    BARS = "bars"
    BUDGET = "budget"
    TIMELINE = "timeline"
    REACTION = "reaction"
    TRADEOFF = "tradeoff"


@dataclass(frozen=True)
class QuestionOption:
    """One answer option of a generated question."""
    label: str
    score: float
    trait: Trait
    visual_hint: str = ""

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        default_trait: Optional[Trait] = None,
    ) -> "QuestionOption":
        if not isinstance(data, Mapping):
            raise ValueError("option must be an object")
        if "score" not in data:
            raise ValueError("option is missing 'score'")
        try:
            score = float(data["score"])
        except (TypeError, ValueError):
            raise ValueError(f"option score is not numeric: {data['score']!r}") from None
        if not 1.0 <= score <= 5.0:
            raise ValueError(f"option score {score} outside [1.0, 5.0]")
        return cls(
            label=str(data.get("label", "")),
            score=score,
            trait=coerce_trait(data.get("trait") or default_trait),
            visual_hint=str(data.get("visual_hint", "")),
        )


@dataclass(frozen=True)
class CandidateQuestion:
    """
    A question produced by the external question generator.

    The pipeline only reads `trait`, `question_type` and the selected
    option's `score`; the remaining fields are display data.
    """
    question_id: str
    question_type: QuestionType
    trait: Trait
    options: Tuple[QuestionOption, ...]
    text_clue: str = ""
    visual_description: str = ""
    scenario_theme: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CandidateQuestion":
        """
        Parse a raw candidate object.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise ValueError("candidate question must be an object")
        for key in ("trait", "question_type", "options"):
            if key not in data:
                raise ValueError(f"candidate question is missing '{key}'")
        try:
            question_type = QuestionType(data["question_type"])
        except ValueError:
            raise ValueError(
                f"Unknown question_type: {data['question_type']!r}"
            ) from None
        raw_options = data["options"]
        trait = coerce_trait(data["trait"])
        if not isinstance(raw_options, (list, tuple)) or not raw_options:
            raise ValueError("candidate question needs at least one option")
        return cls(
            question_id=str(data.get("question_id", "")),
            question_type=question_type,
            trait=trait,
            options=tuple(QuestionOption.from_dict(o, trait) for o in raw_options),
            text_clue=str(data.get("text_clue", "")),
            visual_description=str(data.get("visual_description", "")),
            scenario_theme=str(data.get("scenario_theme", "")),
        )

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "question_type": self.question_type.value,
            "trait": self.trait.value,
            "text_clue": self.text_clue,
            "visual_description": self.visual_description,
            "scenario_theme": self.scenario_theme,
            "options": [
                {
                    "label": o.label,
                    "score": o.score,
                    "trait": o.trait.value,
                    "visual_hint": o.visual_hint,
                }
                for o in self.options
            ],
        }


@dataclass(frozen=True)
class QuestionResponse:
    """
    A single answered self-report question.

    Attributes:
        session_id: Session the response belongs to
        question_index: Zero-based position in the session's answer order
        question_type: UI format the question was rendered in
        trait: OCEAN trait the question targets
        score: Selected option's score on the raw 1.0 - 5.0 scale
        response_time_ms: Time from display to confirmation
        raw_response: UI-specific answer payload
        hesitation_count: Number of hesitations observed before answering
        changed_answer: True if the answer changed before confirming
    """
    session_id: str
    question_index: int
    question_type: QuestionType
    trait: Trait
    score: float
    response_time_ms: int = 0
    raw_response: Mapping[str, Any] = field(default_factory=dict)
    hesitation_count: int = 0
    changed_answer: bool = False

    def validate(self) -> list:
        errors = []

        if not self.session_id:
            errors.append("session_id is required")
        if self.question_index < 0:
            errors.append("question_index must be non-negative")
        if not isinstance(self.question_type, QuestionType):
            errors.append(f"unknown question_type: {self.question_type!r}")
        if not isinstance(self.trait, Trait):
            errors.append(f"unknown trait: {self.trait!r}")
        if not isinstance(self.score, (int, float)) or not 1.0 <= self.score <= 5.0:
            errors.append("score must be within [1.0, 5.0]")
        if self.response_time_ms < 0:
            errors.append("response_time_ms must be non-negative")
        if self.hesitation_count < 0:
            errors.append("hesitation_count must be non-negative")

        return errors

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "question_index": self.question_index,
            "question_type": self.question_type.value,
            "trait": self.trait.value,
            "score": self.score,
            "response_time_ms": self.response_time_ms,
            "raw_response": dict(self.raw_response),
            "hesitation_count": self.hesitation_count,
            "changed_answer": self.changed_answer,
        }


@dataclass(frozen=True)
class ResponseSummary:
    """Aggregate answering behavior over a Phase 1 response history."""
    avg_response_time_ms: int
    response_time_variance: int
    changed_answer_count: int
    total_hesitations: int
    question_count: int

    def to_dict(self) -> dict:
        return {
            "avg_response_time_ms": self.avg_response_time_ms,
            "response_time_variance": self.response_time_variance,
            "changed_answer_count": self.changed_answer_count,
            "total_hesitations": self.total_hesitations,
            "question_count": self.question_count,
        }


# =============================================================================
# Phase 2: gameplay telemetry
# =============================================================================

class LossType(str, Enum):
    THEFT = "theft"
    TIP_OVER = "tip_over"
    PENALTY = "penalty"


@dataclass(frozen=True)
class PathRecord:
    """Actual vs. optimal distance travelled for one delivery."""
    actual_dist: float
    optimal_dist: float
    delivery_id: int = 0


@dataclass(frozen=True)
class BankingEvent:
    timestamp_ms: int
    amount: float
    balance_before: float = 0.0


@dataclass(frozen=True)
class CargoLoad:
    """One cargo-stacking decision (the BART mechanic)."""
    crates: int
    tipped: bool
    reward: float = 0.0
    delivery_id: int = 0


@dataclass(frozen=True)
class LossEvent:
    """
    A loss suffered during play.

    behavior_delta is pre-normalized to 0-1 by the game engine and measures
    how much the player's behavior shifted after the loss.
    """
    type: LossType
    timestamp_ms: int
    amount_lost: float
    behavior_delta: float


@dataclass(frozen=True)
class SharingEvent:
    offered: bool
    accepted: bool
    reward_split: float = 0.0


def _records(payload: Mapping[str, Any], key: str, factory):
    items = payload.get(key) or []
    if not isinstance(items, (list, tuple)):
        raise ValueError(f"'{key}' must be a list")
    parsed = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ValueError(f"'{key}[{index}]' must be an object")
        try:
            parsed.append(factory(item))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"'{key}[{index}]' is malformed: {e}") from e
    return tuple(parsed)


@dataclass(frozen=True)
class BehavioralSignalBundle:
    """
    Raw telemetry of one completed 60-second gameplay session.

    Every array defaults to empty and every counter to 0 when the player
    never triggered the corresponding mechanic.
    """
    session_id: str
    game_seed: str = ""
    duration_ms: int = 60_000
    tap_intervals: Tuple[float, ...] = ()
    path_records: Tuple[PathRecord, ...] = ()
    banking_events: Tuple[BankingEvent, ...] = ()
    cargo_loads: Tuple[CargoLoad, ...] = ()
    loss_events: Tuple[LossEvent, ...] = ()
    sharing_events: Tuple[SharingEvent, ...] = ()
    exploration_tiles: int = 0
    total_tiles: int = 0
    crowd_time_ms: float = 0.0
    quiet_time_ms: float = 0.0
    multi_order_counts: Tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, session_id: str, payload: Mapping[str, Any]) -> "BehavioralSignalBundle":
        """
        Build a bundle from the telemetry collaborator's JSON payload.

        Accepts `tap_velocities` as an alias of `tap_intervals`.

        Raises:
            ValueError: If any event record is malformed
        """
        if not isinstance(payload, Mapping):
            raise ValueError("behavioral payload must be an object")

        taps = payload.get("tap_intervals", payload.get("tap_velocities")) or []
        multi = payload.get("multi_order_counts") or []
        try:
            tap_intervals = tuple(float(v) for v in taps)
            multi_order_counts = tuple(int(v) for v in multi)
            counters = {
                "duration_ms": int(payload.get("duration_ms", 60_000)),
                "exploration_tiles": int(payload.get("exploration_tiles", 0)),
                "total_tiles": int(payload.get("total_tiles", 0)),
                "crowd_time_ms": float(payload.get("crowd_time_ms", 0)),
                "quiet_time_ms": float(payload.get("quiet_time_ms", 0)),
            }
        except (TypeError, ValueError) as e:
            raise ValueError(f"behavioral payload is malformed: {e}") from e

        return cls(
            session_id=session_id,
            game_seed=str(payload.get("game_seed", "")),
            tap_intervals=tap_intervals,
            path_records=_records(payload, "path_records", lambda r: PathRecord(
                actual_dist=float(r["actual_dist"]),
                optimal_dist=float(r["optimal_dist"]),
                delivery_id=int(r.get("delivery_id", 0)),
            )),
            banking_events=_records(payload, "banking_events", lambda r: BankingEvent(
                timestamp_ms=int(r["timestamp_ms"]),
                amount=float(r.get("amount", 0)),
                balance_before=float(r.get("balance_before", 0)),
            )),
            cargo_loads=_records(payload, "cargo_loads", lambda r: CargoLoad(
                crates=int(r["crates"]),
                tipped=bool(r["tipped"]),
                reward=float(r.get("reward", 0)),
                delivery_id=int(r.get("delivery_id", 0)),
            )),
            loss_events=_records(payload, "loss_events", lambda r: LossEvent(
                type=LossType(r["type"]),
                timestamp_ms=int(r.get("timestamp_ms", 0)),
                amount_lost=float(r.get("amount_lost", 0)),
                behavior_delta=float(r["behavior_delta"]),
            )),
            sharing_events=_records(payload, "sharing_events", lambda r: SharingEvent(
                offered=bool(r["offered"]),
                accepted=bool(r["accepted"]),
                reward_split=float(r.get("reward_split", 0)),
            )),
            multi_order_counts=multi_order_counts,
            **counters,
        )

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "game_seed": self.game_seed,
            "duration_ms": self.duration_ms,
            "tap_intervals": list(self.tap_intervals),
            "path_records": [asdict(r) for r in self.path_records],
            "banking_events": [asdict(e) for e in self.banking_events],
            "cargo_loads": [asdict(c) for c in self.cargo_loads],
            "loss_events": [
                {**asdict(e), "type": e.type.value} for e in self.loss_events
            ],
            "sharing_events": [asdict(e) for e in self.sharing_events],
            "exploration_tiles": self.exploration_tiles,
            "total_tiles": self.total_tiles,
            "crowd_time_ms": self.crowd_time_ms,
            "quiet_time_ms": self.quiet_time_ms,
            "multi_order_counts": list(self.multi_order_counts),
        }


@dataclass(frozen=True)
class BehavioralScores:
    """Extractor output: normalized trait scores plus the BART risk index."""
    traits: NormalizedTraitScores
    bart_score: float


# =============================================================================
# Outputs: consistency, PD, profiles, decisions
# =============================================================================

class ConsistencyFlag(str, Enum):
    """Ordered discrepancy bands between self-report and behavior."""
    HIGHLY_CONSISTENT = "highly_consistent"
    NORMAL_VARIANCE = "normal_variance"
    MODERATE_DISCREPANCY = "moderate_discrepancy"
    HIGH_DISCREPANCY = "high_discrepancy"


@dataclass(frozen=True)
class ConsistencyIndex:
    """
    Discrepancy between Phase 1 and Phase 2 scores.

    Attributes:
        differences: Per-trait absolute difference on the normalized scale
        overall: Importance-weighted average of the differences
        flag: Band the overall value falls into
    """
    differences: NormalizedTraitScores
    overall: float
    flag: ConsistencyFlag

    def to_dict(self) -> dict:
        return {
            **self.differences.to_dict(),
            "overall": self.overall,
            "flag": self.flag.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsistencyIndex":
        return cls(
            differences=NormalizedTraitScores.from_dict(
                {t.value: data[t.value] for t in TRAIT_ORDER}
            ),
            overall=float(data["overall"]),
            flag=ConsistencyFlag(data["flag"]),
        )


class RiskRating(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    ELEVATED = "elevated"


@dataclass(frozen=True)
class PDResult:
    """
    Full probability-of-default computation.

    Attributes:
        risk_contributions: Per-trait 0-1 risk (C inverted)
        weighted_risk: Importance-weighted sum of contributions (0-1)
        pd_raw: PD before the money-profile modifier
        pd_modified: PD after the modifier, re-clamped
        risk_rating: Tier derived from pd_modified
    """
    risk_contributions: NormalizedTraitScores
    weighted_risk: float
    pd_raw: float
    pd_modified: float
    risk_rating: RiskRating


@dataclass(frozen=True)
class MoneyProfile:
    """
    A money-attitude archetype.

    trait_signature defines only the traits that characterize the
    archetype (2 to 5 of the axes), on the raw scale.
    """
    name: str
    description: str
    trait_signature: Mapping[Trait, float]
    pd_modifier: float
    risk_interpretation: str

    def __post_init__(self):
        object.__setattr__(
            self,
            "trait_signature",
            MappingProxyType({coerce_trait(k): float(v) for k, v in self.trait_signature.items()}),
        )


@dataclass(frozen=True)
class ProfileMatch:
    profile: MoneyProfile
    distance: float
    confidence: float


class AssessmentDecision(str, Enum):
    """Internal decision. Never shown to the applicant."""
    APPROVED = "approved"
    PENDING_APPROVAL = "pending_approval"
    MANUAL_REVIEW = "manual_review"
    DECLINED = "declined"
    PENDING = "pending"


class UserFacingDecision(str, Enum):
    """The only two outcomes an applicant may ever see."""
    APPROVED = "approved"
    PENDING_APPROVAL = "pending_approval"


class RecommendationDecision(str, Enum):
    """Decision vocabulary of the loan recommendation record."""
    APPROVE = "approve"
    DECLINE = "decline"
    MANUAL_REVIEW = "manual_review"


@dataclass(frozen=True)
class LoanTerms:
    max_amount: int
    duration_months: int
    apr_percent: float


@dataclass(frozen=True)
class LoanDecisionResult:
    """
    Output of the loan decision engine.

    The decision branch and the terms are derived from different inputs:
    the decision from PD and consistency, the terms from the risk rating.
    """
    decision: AssessmentDecision
    user_facing_decision: UserFacingDecision
    risk_rating: RiskRating
    pd: float
    terms: LoanTerms
    amount_basis: str
    duration_basis: str
    apr_basis: str
    consistency: Optional[ConsistencyIndex] = None
