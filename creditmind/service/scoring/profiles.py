"""
Money Profile Matching for the CreditMind assessment pipeline.

Each applicant is matched to the closest of ten money-attitude archetypes
by Euclidean distance in trait space. The matched profile contributes a
signed PD modifier and a display name.

Profiles only define the traits that characterize them (2 to 5 axes),
so distances are computed over the profile's own traits only.
"""

import math
from typing import List, Sequence, Tuple

from .models import MoneyProfile, ProfileMatch, Trait, TraitScores
from .settings import ScoringSettings, scoring_settings


MONEY_PROFILES: Tuple[MoneyProfile, ...] = (
    MoneyProfile(
        name="Prudent Planner",
        description=(
            "Methodical, budget-conscious, risk-averse. Plans expenditures "
            "carefully and maintains reserves."
        ),
        trait_signature={Trait.CONSCIENTIOUSNESS: 4.5, Trait.NEUROTICISM: 1.5},
        pd_modifier=-0.03,
        risk_interpretation="Low risk - disciplined financial behavior predicted",
    ),
    MoneyProfile(
        name="Anxious Saver",
        description=(
            "High financial anxiety drives excessive caution. May under-invest "
            "in growth opportunities."
        ),
        trait_signature={Trait.NEUROTICISM: 4.5, Trait.CONSCIENTIOUSNESS: 3.5},
        pd_modifier=-0.01,
        risk_interpretation=(
            "Low-moderate risk - anxiety drives caution but may impair "
            "decision-making under stress"
        ),
    ),
    MoneyProfile(
        name="Social Spender",
        description=(
            "Generous, relationship-driven spending. May prioritize social "
            "obligations over business needs."
        ),
        trait_signature={Trait.AGREEABLENESS: 4.5, Trait.EXTRAVERSION: 4.0},
        pd_modifier=0.02,
        risk_interpretation="Moderate risk - social pressure may lead to over-commitment",
    ),
    MoneyProfile(
        name="Impulsive Optimist",
        description=(
            "High risk tolerance, quick decisions, opportunistic. May overextend "
            "on promising but unvalidated ventures."
        ),
        trait_signature={
            Trait.OPENNESS: 4.5,
            Trait.NEUROTICISM: 1.5,
            Trait.CONSCIENTIOUSNESS: 2.0,
        },
        pd_modifier=0.05,
        risk_interpretation=(
            "Elevated risk - impulsivity and low planning discipline increase "
            "default probability"
        ),
    ),
    MoneyProfile(
        name="Cautious Traditionalist",
        description=(
            "Prefers proven methods, slow to adopt new approaches. Reliable but "
            "may miss growth opportunities."
        ),
        trait_signature={Trait.OPENNESS: 1.5, Trait.CONSCIENTIOUSNESS: 4.0},
        pd_modifier=-0.02,
        risk_interpretation="Low risk - conservative approach reduces default probability",
    ),
    MoneyProfile(
        name="Balanced Operator",
        description=(
            "Moderate across all dimensions. Adaptable, pragmatic. Neither overly "
            "cautious nor reckless."
        ),
        trait_signature={
            Trait.CONSCIENTIOUSNESS: 3.0,
            Trait.NEUROTICISM: 3.0,
            Trait.AGREEABLENESS: 3.0,
            Trait.OPENNESS: 3.0,
            Trait.EXTRAVERSION: 3.0,
        },
        pd_modifier=0.0,
        risk_interpretation="Moderate risk - balanced profile with no extreme signals",
    ),
    MoneyProfile(
        name="Driven Achiever",
        description=(
            "Highly competitive, results-oriented. Strong financial discipline "
            "but may take calculated risks."
        ),
        trait_signature={
            Trait.CONSCIENTIOUSNESS: 4.0,
            Trait.EXTRAVERSION: 4.5,
            Trait.NEUROTICISM: 2.0,
        },
        pd_modifier=-0.01,
        risk_interpretation="Low-moderate risk - discipline offsets competitive risk-taking",
    ),
    MoneyProfile(
        name="Cautious Innovator",
        description=(
            "Creative and exploratory but with strong planning instincts. "
            "Measures risk before acting."
        ),
        trait_signature={Trait.OPENNESS: 4.0, Trait.CONSCIENTIOUSNESS: 4.0},
        pd_modifier=-0.02,
        risk_interpretation="Low risk - innovation balanced by conscientiousness",
    ),
    MoneyProfile(
        name="Social Planner",
        description=(
            "Community-oriented with strong organizational skills. Invests in "
            "relationships and structures."
        ),
        trait_signature={Trait.AGREEABLENESS: 4.0, Trait.CONSCIENTIOUSNESS: 4.0},
        pd_modifier=-0.01,
        risk_interpretation="Low-moderate risk - social investment balanced by planning",
    ),
    MoneyProfile(
        name="Stressed Reactor",
        description=(
            "High emotional reactivity, low planning discipline. Financial "
            "decisions driven by immediate pressures."
        ),
        trait_signature={Trait.NEUROTICISM: 4.5, Trait.CONSCIENTIOUSNESS: 1.5},
        pd_modifier=0.06,
        risk_interpretation=(
            "High risk - stress-driven decision-making with poor financial planning"
        ),
    ),
)


def compute_profile_distance(traits: TraitScores, profile: MoneyProfile) -> float:
    """Euclidean distance over the traits the profile's signature defines."""
    return math.sqrt(
        sum((traits[trait] - target) ** 2 for trait, target in profile.trait_signature.items())
    )


def _rank_profiles(
    traits: TraitScores,
    profiles: Sequence[MoneyProfile],
) -> List[Tuple[MoneyProfile, float]]:
    if not profiles:
        raise ValueError("Profile catalog is empty")
    ranked = [(profile, compute_profile_distance(traits, profile)) for profile in profiles]
    # sorted() is stable: the first-defined profile wins ties
    return sorted(ranked, key=lambda item: item[1])


def match_money_profile(
    traits: TraitScores,
    profiles: Sequence[MoneyProfile] = MONEY_PROFILES,
    settings: ScoringSettings = scoring_settings,
) -> ProfileMatch:
    """
    Find the money profile closest to a trait vector.

    Confidence falls linearly with distance and reaches 0 at the
    confidence scale (6.0 by default):
        confidence = clamp(1 - distance / 6, 0, 1)

    Args:
        traits: Trait scores on the raw 1-5 scale
        profiles: Profile catalog (the ten built-in archetypes by default)
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        ProfileMatch with the closest profile, its distance and confidence
    """
    profile, distance = _rank_profiles(traits, profiles)[0]
    confidence = max(0.0, min(1.0, 1.0 - distance / settings.profile_confidence_scale))
    return ProfileMatch(profile=profile, distance=distance, confidence=confidence)


def generate_blended_profile_name(
    traits: TraitScores,
    profiles: Sequence[MoneyProfile] = MONEY_PROFILES,
    settings: ScoringSettings = scoring_settings,
) -> str:
    """
    Display name for the applicant's profile.

    When the two closest profiles are within the blend margin of each
    other, a hybrid name is formed from the first word of the closer one
    and the second word (or the only word) of the runner-up, e.g.
    "Cautious Planner". Otherwise the closest profile's name is returned.

    Display only: never used for the PD modifier.
    """
    ranked = _rank_profiles(traits, profiles)
    if len(ranked) < 2:
        return ranked[0][0].name

    (first, first_distance), (second, second_distance) = ranked[0], ranked[1]
    if second_distance - first_distance < settings.blended_name_margin:
        first_words = first.name.split()
        second_words = second.name.split()
        second_word = second_words[1] if len(second_words) > 1 else second_words[0]
        return f"{first_words[0]} {second_word}"

    return first.name
