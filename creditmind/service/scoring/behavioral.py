"""
Behavioral Signal Extraction for the CreditMind assessment pipeline.

This module converts the raw telemetry of one Supply Run gameplay session
into five normalized (0-1) trait scores plus a BART-style risk index:

- Conscientiousness: path efficiency, banking regularity, tap deliberation
- Neuroticism: post-loss behavior change, hesitation, inverse risk-taking
- Agreeableness: sharing, reward splitting, accepting help
- Openness: exploration, shortcut usage, risk-taking
- Extraversion: time in crowded zones, juggling multiple orders

Each sub-score is a pure function of the bundle. Degenerate inputs (no
events, fewer than 2 samples, zero means) return documented neutral
constants so that NaN or infinity never reaches a weighted sum.
"""

import math
from typing import Sequence

from .models import (
    BankingEvent,
    BehavioralScores,
    BehavioralSignalBundle,
    CargoLoad,
    LossEvent,
    NormalizedTraitScores,
    PathRecord,
    SharingEvent,
)
from .settings import ScoringSettings, scoring_settings


# Neutral fallbacks for missing data
NEUTRAL = 0.5
NO_BANKING_REGULARITY = 0.2
SINGLE_BANKING_REGULARITY = 0.5
NO_LOSS_BEHAVIOR_CHANGE = 0.3

# Shortcut: actual path under 95% of the optimal one
SHORTCUT_RATIO = 0.95

# Mean tap interval (ms) -> deliberation. Peaks in the middle band:
# both impulsive and indecisive extremes score low.
TAP_DELIBERATION_BANDS = (
    (200, 0.2),   # very impulsive
    (400, 0.5),   # somewhat quick
    (800, 0.9),   # deliberate
    (1200, 0.7),  # somewhat slow
)
TAP_DELIBERATION_HESITANT = 0.4

HESITATION_CV_CEILING = 1.5
BANKING_CV_CEILING = 2.0


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / mean. Caller guarantees a non-zero mean."""
    mean = _mean(values)
    std = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    return std / mean


# =============================================================================
# Sub-scores
# =============================================================================

def compute_path_efficiency(paths: Sequence[PathRecord]) -> float:
    """Mean of min(1, optimal / actual) per delivery; 0.5 without deliveries."""
    if not paths:
        return NEUTRAL
    efficiencies = [
        min(1.0, p.optimal_dist / p.actual_dist) if p.actual_dist > 0 else 0.0
        for p in paths
    ]
    return _mean(efficiencies)


def compute_banking_regularity(events: Sequence[BankingEvent]) -> float:
    """
    Regularity of banking as 1 - CV(inter-banking intervals) / 2.

    CV 0 (perfectly regular) scores 1.0; CV of 2 or more scores 0.0.
    No banking at all scores 0.2, a single banking event 0.5.
    """
    if not events:
        return NO_BANKING_REGULARITY
    if len(events) == 1:
        return SINGLE_BANKING_REGULARITY

    intervals = [
        later.timestamp_ms - earlier.timestamp_ms
        for earlier, later in zip(events, events[1:])
    ]
    if _mean(intervals) == 0:
        return NEUTRAL

    return clamp01(1 - _coefficient_of_variation(intervals) / BANKING_CV_CEILING)


def compute_tap_deliberation(tap_intervals: Sequence[float]) -> float:
    """Step function of the mean inter-tap interval; 0.5 without taps."""
    if not tap_intervals:
        return NEUTRAL

    mean_interval = _mean(tap_intervals)
    for upper_ms, score in TAP_DELIBERATION_BANDS:
        if mean_interval < upper_ms:
            return score
    return TAP_DELIBERATION_HESITANT


def compute_post_loss_change(loss_events: Sequence[LossEvent]) -> float:
    """Mean absolute behavior delta after losses; 0.3 when nothing was lost."""
    if not loss_events:
        return NO_LOSS_BEHAVIOR_CHANGE
    return clamp01(_mean([abs(e.behavior_delta) for e in loss_events]))


def compute_hesitation_pattern(tap_intervals: Sequence[float]) -> float:
    """CV of tap intervals / 1.5; 0.5 with fewer than 3 samples."""
    if len(tap_intervals) < 3:
        return NEUTRAL
    if _mean(tap_intervals) <= 0:
        return 0.0
    return clamp01(_coefficient_of_variation(tap_intervals) / HESITATION_CV_CEILING)


def compute_sharing_rate(events: Sequence[SharingEvent]) -> float:
    """Accepted-and-offered / offered; 0.5 when nothing was offered."""
    offered = [e for e in events if e.offered]
    if not offered:
        return NEUTRAL
    return sum(1 for e in offered if e.accepted) / len(offered)


def compute_reward_split(events: Sequence[SharingEvent]) -> float:
    """Mean share of reward given away (0 = kept all, 1 = gave all)."""
    if not events:
        return NEUTRAL
    return clamp01(_mean([e.reward_split for e in events]))


def compute_help_acceptance(events: Sequence[SharingEvent]) -> float:
    """Accepted / offered over events where help was actually offered."""
    help_offered = [e for e in events if e.offered]
    if not help_offered:
        return NEUTRAL
    return sum(1 for e in help_offered if e.accepted) / len(help_offered)


def compute_exploration_ratio(exploration_tiles: int, total_tiles: int) -> float:
    """Unique tiles visited / total tiles; 0 on an empty map."""
    if total_tiles <= 0:
        return 0.0
    return clamp01(exploration_tiles / total_tiles)


def compute_shortcut_usage(paths: Sequence[PathRecord]) -> float:
    """Fraction of deliveries whose path beat 95% of the optimal distance."""
    if not paths:
        return NEUTRAL
    shortcuts = sum(1 for p in paths if p.actual_dist < p.optimal_dist * SHORTCUT_RATIO)
    return shortcuts / len(paths)


def compute_crowd_fraction(crowd_time_ms: float, quiet_time_ms: float) -> float:
    """Share of time spent in crowded zones; 0.5 when neither was recorded."""
    total = crowd_time_ms + quiet_time_ms
    if total <= 0:
        return NEUTRAL
    return clamp01(crowd_time_ms / total)


def compute_multi_order_fraction(counts: Sequence[int]) -> float:
    """Fraction of concurrency samples with more than one active order."""
    if not counts:
        return NEUTRAL
    return sum(1 for c in counts if c > 1) / len(counts)


def compute_bart_score(
    cargo_loads: Sequence[CargoLoad],
    settings: ScoringSettings = scoring_settings,
) -> float:
    """
    BART risk index: mean crates over non-tipped deliveries / max cargo.

    Returns exactly 0.5 when no delivery survived (or none happened):
    absence of data must not read as risk aversion.
    """
    successful = [c for c in cargo_loads if not c.tipped]
    if not successful:
        return NEUTRAL
    return clamp01(_mean([c.crates for c in successful]) / settings.max_cargo)


# =============================================================================
# Traits
# =============================================================================

def compute_behavioral_conscientiousness(bundle: BehavioralSignalBundle) -> float:
    return clamp01(
        0.40 * compute_path_efficiency(bundle.path_records)
        + 0.35 * compute_banking_regularity(bundle.banking_events)
        + 0.25 * compute_tap_deliberation(bundle.tap_intervals)
    )


def compute_behavioral_neuroticism(
    bundle: BehavioralSignalBundle,
    settings: ScoringSettings = scoring_settings,
) -> float:
    return clamp01(
        0.40 * compute_post_loss_change(bundle.loss_events)
        + 0.30 * compute_hesitation_pattern(bundle.tap_intervals)
        + 0.30 * (1 - compute_bart_score(bundle.cargo_loads, settings))
    )


def compute_behavioral_agreeableness(bundle: BehavioralSignalBundle) -> float:
    return clamp01(
        0.40 * compute_sharing_rate(bundle.sharing_events)
        + 0.30 * compute_reward_split(bundle.sharing_events)
        + 0.30 * compute_help_acceptance(bundle.sharing_events)
    )


def compute_behavioral_openness(
    bundle: BehavioralSignalBundle,
    settings: ScoringSettings = scoring_settings,
) -> float:
    return clamp01(
        0.35 * compute_exploration_ratio(bundle.exploration_tiles, bundle.total_tiles)
        + 0.30 * compute_shortcut_usage(bundle.path_records)
        + 0.35 * compute_bart_score(bundle.cargo_loads, settings)
    )


def compute_behavioral_extraversion(bundle: BehavioralSignalBundle) -> float:
    return clamp01(
        0.55 * compute_crowd_fraction(bundle.crowd_time_ms, bundle.quiet_time_ms)
        + 0.45 * compute_multi_order_fraction(bundle.multi_order_counts)
    )


def compute_behavioral_scores(
    bundle: BehavioralSignalBundle,
    settings: ScoringSettings = scoring_settings,
) -> BehavioralScores:
    """
    Extract all five normalized trait scores and the risk index.

    Deterministic: no randomness, no wall-clock access, no shared state.

    Args:
        bundle: Telemetry of one completed gameplay session
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        BehavioralScores with traits on the 0-1 scale and the BART score
    """
    traits = NormalizedTraitScores(
        openness=compute_behavioral_openness(bundle, settings),
        conscientiousness=compute_behavioral_conscientiousness(bundle),
        extraversion=compute_behavioral_extraversion(bundle),
        agreeableness=compute_behavioral_agreeableness(bundle),
        neuroticism=compute_behavioral_neuroticism(bundle, settings),
    )
    return BehavioralScores(
        traits=traits,
        bart_score=compute_bart_score(bundle.cargo_loads, settings),
    )
