"""
Scoring Settings for the CreditMind assessment pipeline.

This module contains every fixed parameter of the scoring pipeline: trait
importance weights, Phase 1 / Phase 2 blending weights, PD bounds, tier
thresholds, loan terms and the adaptive questioning limits. The weights and
thresholds are inputs to the pipeline, not something it derives.

Environment variables use the SCORING_ prefix; tables are given as JSON:
    SCORING_MAX_QUESTIONS=12
    SCORING_VARIANCE_THRESHOLD=0.25
    SCORING_TRAIT_WEIGHTS='{"C": 0.35, "N": 0.25, "A": 0.18, "O": 0.12, "E": 0.10}'

Usage:
    from creditmind.service.scoring.settings import scoring_settings

    # Use default settings (loaded from env once)
    threshold = scoring_settings.variance_threshold

    # Or create custom settings for testing
    custom = ScoringSettings(max_questions=10)

Instances are frozen: configuration is loaded once and never mutated.
"""

from functools import lru_cache
from typing import Dict, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import LoanTerms, RiskRating, Trait, TRAIT_ORDER


_WEIGHT_TOLERANCE = 1e-6


class ScoringSettings(BaseSettings):
    """
    Configurable parameters for the assessment scoring pipeline.

    All settings can be overridden via environment variables with SCORING_ prefix.
    Trait scores are on the raw 1-5 scale unless stated otherwise.
    PD values and thresholds are fractions (0.08 = 8%).
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # === Trait Importance Weights (risk model + consistency aggregation) ===
    trait_weights: Dict[Trait, float] = Field(
        default={
            Trait.CONSCIENTIOUSNESS: 0.35,
            Trait.NEUROTICISM: 0.25,
            Trait.AGREEABLENESS: 0.18,
            Trait.OPENNESS: 0.12,
            Trait.EXTRAVERSION: 0.10,
        },
        description="Importance weight per trait; must sum to 1.0",
    )

    # === Phase 1 / Phase 2 Blending ===
    blending_weights: Dict[Trait, Tuple[float, float]] = Field(
        default={
            Trait.CONSCIENTIOUSNESS: (0.55, 0.45),
            Trait.NEUROTICISM: (0.50, 0.50),
            Trait.AGREEABLENESS: (0.60, 0.40),
            Trait.OPENNESS: (0.45, 0.55),
            Trait.EXTRAVERSION: (0.55, 0.45),
        },
        description="(self-report weight, behavioral weight) per trait; each pair sums to 1.0",
    )

    # === PD Bounds ===
    pd_min: float = Field(default=0.02, ge=0.0, le=1.0, description="PD floor (2%)")
    pd_max: float = Field(default=0.35, ge=0.0, le=1.0, description="PD ceiling (35%)")

    # === Risk Rating Thresholds ===
    risk_low_threshold: float = Field(
        default=0.08,
        description="PD below this is rated low",
    )
    risk_moderate_threshold: float = Field(
        default=0.18,
        description="PD below this (and not low) is rated moderate; otherwise elevated",
    )

    # === Consistency Bands (upper bounds, exclusive) ===
    consistency_highly_consistent: float = Field(default=0.20)
    consistency_normal_variance: float = Field(default=0.40)
    consistency_moderate_discrepancy: float = Field(default=0.60)

    # === Loan Decision Thresholds ===
    auto_approve_pd: float = Field(
        default=0.08,
        description="PD below this is auto-approved",
    )
    manual_review_pd: float = Field(
        default=0.18,
        description="PD below this (and not auto-approved) is pending approval",
    )
    consistency_review_threshold: float = Field(
        default=0.40,
        description="Consistency overall above this forces manual review",
    )

    # === Loan Terms by Risk Rating ===
    loan_terms: Dict[RiskRating, Tuple[int, int, float]] = Field(
        default={
            RiskRating.LOW: (50_000, 36, 8.5),
            RiskRating.MODERATE: (25_000, 24, 14.0),
            RiskRating.ELEVATED: (10_000, 12, 22.0),
        },
        description="(max_amount, duration_months, apr_percent) per risk rating",
    )

    # === Behavioral (BART) ===
    max_cargo: int = Field(
        default=7,
        gt=0,
        description="Crate count that maps to a risk index of 1.0",
    )

    # === Adaptive Questioning ===
    min_questions: int = Field(default=8, ge=0)
    max_questions: int = Field(default=15, ge=1)
    variance_threshold: float = Field(
        default=0.3,
        gt=0.0,
        description="Stop once every trait variance is below this",
    )
    candidates_per_batch: int = Field(default=3, ge=1)
    type_diversity_bonus: float = Field(
        default=0.2,
        ge=0.0,
        description="Selection bonus for a question type not asked recently",
    )
    insufficient_data_variance: float = Field(
        default=1.0,
        description="Variance assigned to a trait with fewer than 2 observations",
    )
    default_trait_score: float = Field(
        default=3.0,
        ge=1.0,
        le=5.0,
        description="Trait average used when a trait has no responses (scale midpoint)",
    )

    # === Reaction-Time Adjustment ===
    reaction_fast_ms: int = Field(default=500, ge=0)
    reaction_slow_ms: int = Field(default=3000, ge=0)
    reaction_fast_bonus: float = Field(default=0.5, ge=0.0)
    reaction_slow_penalty: float = Field(default=0.3, ge=0.0)

    # === Profile Matching ===
    profile_confidence_scale: float = Field(
        default=6.0,
        gt=0.0,
        description="Distance at which match confidence reaches 0",
    )
    blended_name_margin: float = Field(
        default=1.0,
        ge=0.0,
        description="Top-two distance gap below which a hybrid name is produced",
    )

    @field_validator("trait_weights")
    @classmethod
    def validate_trait_weights(cls, v: Dict[Trait, float]) -> Dict[Trait, float]:
        """All five traits present, non-negative, summing to 1.0."""
        missing = [t.value for t in TRAIT_ORDER if t not in v]
        if missing:
            raise ValueError(f"Missing trait weights: {', '.join(missing)}")
        if any(w < 0 for w in v.values()):
            raise ValueError("Trait weights cannot be negative")
        if abs(sum(v.values()) - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Trait weights must sum to 1.0, got {sum(v.values())}")
        return v

    @field_validator("blending_weights")
    @classmethod
    def validate_blending_weights(
        cls, v: Dict[Trait, Tuple[float, float]]
    ) -> Dict[Trait, Tuple[float, float]]:
        """Each trait's (phase1, phase2) pair is non-negative and sums to 1.0."""
        missing = [t.value for t in TRAIT_ORDER if t not in v]
        if missing:
            raise ValueError(f"Missing blending weights: {', '.join(missing)}")
        for trait, (phase1, phase2) in v.items():
            if phase1 < 0 or phase2 < 0:
                raise ValueError(f"Blending weights for {trait.value} cannot be negative")
            if abs(phase1 + phase2 - 1.0) > _WEIGHT_TOLERANCE:
                raise ValueError(
                    f"Blending weights for {trait.value} must sum to 1.0, "
                    f"got {phase1 + phase2}"
                )
        return v

    @field_validator("loan_terms")
    @classmethod
    def validate_loan_terms(
        cls, v: Dict[RiskRating, Tuple[int, int, float]]
    ) -> Dict[RiskRating, Tuple[int, int, float]]:
        missing = [r.value for r in RiskRating if r not in v]
        if missing:
            raise ValueError(f"Missing loan terms for: {', '.join(missing)}")
        for rating, (amount, months, apr) in v.items():
            if amount < 0 or months <= 0 or apr < 0:
                raise ValueError(f"Invalid loan terms for {rating.value}")
        return v

    @model_validator(mode="after")
    def validate_ordering(self) -> "ScoringSettings":
        """Bounds and bands must be ordered for the step functions to be contiguous."""
        if self.pd_min > self.pd_max:
            raise ValueError(f"pd_min ({self.pd_min}) > pd_max ({self.pd_max})")
        if self.risk_low_threshold > self.risk_moderate_threshold:
            raise ValueError("risk_low_threshold must not exceed risk_moderate_threshold")
        if self.auto_approve_pd > self.manual_review_pd:
            raise ValueError("auto_approve_pd must not exceed manual_review_pd")
        if not (
            self.consistency_highly_consistent
            <= self.consistency_normal_variance
            <= self.consistency_moderate_discrepancy
        ):
            raise ValueError("Consistency band thresholds must be non-decreasing")
        if self.min_questions > self.max_questions:
            raise ValueError(
                f"min_questions ({self.min_questions}) > max_questions ({self.max_questions})"
            )
        return self

    @property
    def pd_range(self) -> float:
        """Span the weighted risk is scaled onto (0.33 by default)."""
        return self.pd_max - self.pd_min

    def terms_for(self, rating: RiskRating) -> LoanTerms:
        """Loan terms for a risk rating."""
        max_amount, duration_months, apr_percent = self.loan_terms[rating]
        return LoanTerms(
            max_amount=max_amount,
            duration_months=duration_months,
            apr_percent=apr_percent,
        )


@lru_cache
def get_scoring_settings() -> ScoringSettings:
    """Get cached scoring settings instance."""
    return ScoringSettings()


scoring_settings = get_scoring_settings()
