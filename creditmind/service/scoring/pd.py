"""
Risk Model for the CreditMind assessment pipeline.

Maps a raw-scale trait vector to a probability of default (PD).

Algorithm:
    1. Per-trait risk contribution on 0-1. High conscientiousness lowers
       risk, so C is inverted: (5 - C) / 4. N, A, O, E are direct: (x - 1) / 4.
    2. Weighted risk = sum(importance[t] * contribution[t]).
    3. PD = clamp(pd_min + weighted_risk * (pd_max - pd_min), pd_min, pd_max),
       i.e. 2% to 35% with the default settings.
    4. The matched money profile's modifier is added and PD is re-clamped.
"""

from .models import NormalizedTraitScores, PDResult, RiskRating, Trait, TraitScores, TRAIT_ORDER
from .settings import ScoringSettings, scoring_settings


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def compute_risk_contributions(traits: TraitScores) -> NormalizedTraitScores:
    """
    Per-trait risk on the 0-1 scale.

    Conscientiousness is inverted (a score of 5 contributes no risk);
    every other trait contributes risk as it increases.
    """
    contributions = {}
    for trait in TRAIT_ORDER:
        value = traits[trait]
        if trait == Trait.CONSCIENTIOUSNESS:
            risk = (5.0 - value) / 4.0
        else:
            risk = (value - 1.0) / 4.0
        contributions[trait.field_name] = _clamp(risk, 0.0, 1.0)

    return NormalizedTraitScores(**contributions)


def compute_weighted_risk(
    traits: TraitScores,
    settings: ScoringSettings = scoring_settings,
) -> float:
    """Importance-weighted sum of the risk contributions (0-1)."""
    contributions = compute_risk_contributions(traits)
    weighted = sum(settings.trait_weights[trait] * contributions[trait] for trait in TRAIT_ORDER)
    return _clamp(weighted, 0.0, 1.0)


def compute_pd(
    traits: TraitScores,
    settings: ScoringSettings = scoring_settings,
) -> float:
    """
    Probability of default before any profile modifier.

    Example:
        {O:3, C:5, E:3, A:3, N:1} -> weighted risk 0.08
        PD = 0.02 + 0.08 * 0.33 = 0.0464
    """
    weighted_risk = compute_weighted_risk(traits, settings)
    return _clamp(
        settings.pd_min + weighted_risk * settings.pd_range,
        settings.pd_min,
        settings.pd_max,
    )


def apply_profile_modifier(
    pd: float,
    modifier: float,
    settings: ScoringSettings = scoring_settings,
) -> float:
    """Add a money-profile PD modifier and re-clamp to the PD bounds."""
    return _clamp(pd + modifier, settings.pd_min, settings.pd_max)


def get_risk_rating(
    pd: float,
    settings: ScoringSettings = scoring_settings,
) -> RiskRating:
    """
    Map PD to a risk tier.

    - PD < 8%: low
    - PD < 18%: moderate
    - otherwise: elevated
    """
    if pd < settings.risk_low_threshold:
        return RiskRating.LOW
    if pd < settings.risk_moderate_threshold:
        return RiskRating.MODERATE
    return RiskRating.ELEVATED


def calculate_full_pd(
    traits: TraitScores,
    profile_modifier: float = 0.0,
    settings: ScoringSettings = scoring_settings,
) -> PDResult:
    """
    Run the full risk model.

    Every field is derived from the inputs; calling this repeatedly with
    the same arguments yields the same result.

    Args:
        traits: Trait scores on the raw 1-5 scale
        profile_modifier: Signed PD adjustment from the matched money profile
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        PDResult with contributions, weighted risk, raw/modified PD and rating
    """
    contributions = compute_risk_contributions(traits)
    weighted_risk = compute_weighted_risk(traits, settings)
    pd_raw = compute_pd(traits, settings)
    pd_modified = apply_profile_modifier(pd_raw, profile_modifier, settings)

    return PDResult(
        risk_contributions=contributions,
        weighted_risk=weighted_risk,
        pd_raw=pd_raw,
        pd_modified=pd_modified,
        risk_rating=get_risk_rating(pd_modified, settings),
    )
