"""
Unit Tests for Behavioral Signal Extraction.

These tests verify:
1. Each sub-score on typical input and on its degenerate fallback
2. The BART risk index
3. Trait composition from sub-scores
4. Payload parsing of the telemetry bundle
"""

import math

import pytest

from creditmind.service.scoring.behavioral import (
    compute_banking_regularity,
    compute_bart_score,
    compute_behavioral_agreeableness,
    compute_behavioral_conscientiousness,
    compute_behavioral_extraversion,
    compute_behavioral_scores,
    compute_crowd_fraction,
    compute_exploration_ratio,
    compute_help_acceptance,
    compute_hesitation_pattern,
    compute_multi_order_fraction,
    compute_path_efficiency,
    compute_post_loss_change,
    compute_reward_split,
    compute_sharing_rate,
    compute_shortcut_usage,
    compute_tap_deliberation,
)
from creditmind.service.scoring.models import (
    BankingEvent,
    BehavioralSignalBundle,
    CargoLoad,
    LossEvent,
    LossType,
    PathRecord,
    SharingEvent,
)
from creditmind.service.scoring.settings import ScoringSettings


# =============================================================================
# Test Fixtures
# =============================================================================

def empty_bundle() -> BehavioralSignalBundle:
    """A player who never triggered any mechanic."""
    return BehavioralSignalBundle(session_id="session-1")


def careful_bundle() -> BehavioralSignalBundle:
    """A deliberate, regular, cooperative player."""
    return BehavioralSignalBundle(
        session_id="session-1",
        tap_intervals=(600.0, 600.0, 600.0, 600.0),
        path_records=(
            PathRecord(actual_dist=10, optimal_dist=10, delivery_id=1),
            PathRecord(actual_dist=12, optimal_dist=12, delivery_id=2),
        ),
        banking_events=(
            BankingEvent(timestamp_ms=10_000, amount=50),
            BankingEvent(timestamp_ms=20_000, amount=50),
            BankingEvent(timestamp_ms=30_000, amount=50),
        ),
        cargo_loads=(
            CargoLoad(crates=2, tipped=False),
            CargoLoad(crates=2, tipped=False),
        ),
        sharing_events=(
            SharingEvent(offered=True, accepted=True, reward_split=0.5),
            SharingEvent(offered=True, accepted=True, reward_split=0.5),
        ),
        exploration_tiles=60,
        total_tiles=300,
        crowd_time_ms=30_000,
        quiet_time_ms=30_000,
        multi_order_counts=(1, 1, 2, 1),
    )


# =============================================================================
# Conscientiousness Sub-score Tests
# =============================================================================

class TestConscientiousnessSignals:
    """Path efficiency, banking regularity and tap deliberation."""

    def test_path_efficiency_caps_at_one(self):
        paths = [
            PathRecord(actual_dist=20, optimal_dist=10),
            PathRecord(actual_dist=8, optimal_dist=10),
        ]

        assert compute_path_efficiency(paths) == pytest.approx(0.75)

    def test_path_efficiency_zero_distance(self):
        assert compute_path_efficiency([PathRecord(actual_dist=0, optimal_dist=10)]) == 0.0

    def test_path_efficiency_without_deliveries(self):
        assert compute_path_efficiency([]) == 0.5

    def test_no_banking_events(self):
        assert compute_banking_regularity([]) == 0.2

    def test_single_banking_event(self):
        assert compute_banking_regularity([BankingEvent(timestamp_ms=5000, amount=10)]) == 0.5

    def test_perfectly_regular_banking(self):
        events = [BankingEvent(timestamp_ms=t, amount=10) for t in (0, 10_000, 20_000, 30_000)]

        assert compute_banking_regularity(events) == pytest.approx(1.0)

    def test_irregular_banking(self):
        # intervals 1000 and 3000: mean 2000, std 1000, CV 0.5
        events = [BankingEvent(timestamp_ms=t, amount=10) for t in (0, 1000, 4000)]

        assert compute_banking_regularity(events) == pytest.approx(0.75)

    def test_simultaneous_banking_is_neutral(self):
        events = [BankingEvent(timestamp_ms=1000, amount=10) for _ in range(3)]

        assert compute_banking_regularity(events) == 0.5

    @pytest.mark.parametrize(
        "intervals,expected",
        [
            ([], 0.5),
            ([100.0, 150.0], 0.2),
            ([300.0], 0.5),
            ([600.0, 700.0], 0.9),
            ([1000.0], 0.7),
            ([2000.0, 1500.0], 0.4),
        ],
    )
    def test_tap_deliberation_bands(self, intervals, expected):
        assert compute_tap_deliberation(intervals) == expected

    def test_tap_deliberation_band_edges_are_exclusive(self):
        assert compute_tap_deliberation([200.0]) == 0.5
        assert compute_tap_deliberation([1200.0]) == 0.4


# =============================================================================
# Neuroticism Sub-score Tests
# =============================================================================

class TestNeuroticismSignals:
    """Post-loss change and hesitation pattern."""

    def test_no_losses(self):
        assert compute_post_loss_change([]) == 0.3

    def test_post_loss_uses_absolute_delta(self):
        losses = [
            LossEvent(type=LossType.THEFT, timestamp_ms=1000, amount_lost=20, behavior_delta=-0.4),
            LossEvent(type=LossType.TIP_OVER, timestamp_ms=2000, amount_lost=10, behavior_delta=0.8),
        ]

        assert compute_post_loss_change(losses) == pytest.approx(0.6)

    def test_hesitation_needs_three_samples(self):
        assert compute_hesitation_pattern([100.0, 900.0]) == 0.5

    def test_steady_taps_show_no_hesitation(self):
        assert compute_hesitation_pattern([500.0, 500.0, 500.0]) == 0.0

    def test_zero_mean_taps(self):
        assert compute_hesitation_pattern([0.0, 0.0, 0.0]) == 0.0

    def test_erratic_taps_saturate(self):
        assert compute_hesitation_pattern([10.0, 10.0, 10.0, 5000.0]) == 1.0


# =============================================================================
# Agreeableness, Openness, Extraversion Sub-score Tests
# =============================================================================

class TestSocialAndExplorationSignals:

    def test_sharing_rate_counts_offered_only(self):
        events = [
            SharingEvent(offered=True, accepted=True),
            SharingEvent(offered=True, accepted=False),
            SharingEvent(offered=False, accepted=False),
        ]

        assert compute_sharing_rate(events) == pytest.approx(0.5)
        assert compute_help_acceptance(events) == pytest.approx(0.5)

    def test_sharing_without_offers(self):
        assert compute_sharing_rate([]) == 0.5
        assert compute_help_acceptance([SharingEvent(offered=False, accepted=False)]) == 0.5

    def test_reward_split_mean(self):
        events = [
            SharingEvent(offered=True, accepted=True, reward_split=0.2),
            SharingEvent(offered=True, accepted=True, reward_split=0.6),
        ]

        assert compute_reward_split(events) == pytest.approx(0.4)
        assert compute_reward_split([]) == 0.5

    def test_exploration_ratio(self):
        assert compute_exploration_ratio(75, 300) == pytest.approx(0.25)
        assert compute_exploration_ratio(10, 0) == 0.0

    def test_shortcut_usage(self):
        paths = [
            PathRecord(actual_dist=9, optimal_dist=10),
            PathRecord(actual_dist=10, optimal_dist=10),
        ]

        assert compute_shortcut_usage(paths) == pytest.approx(0.5)
        assert compute_shortcut_usage([]) == 0.5

    def test_crowd_fraction(self):
        assert compute_crowd_fraction(15_000, 45_000) == pytest.approx(0.25)
        assert compute_crowd_fraction(0, 0) == 0.5

    def test_multi_order_fraction(self):
        assert compute_multi_order_fraction([1, 2, 3, 1]) == pytest.approx(0.5)
        assert compute_multi_order_fraction([]) == 0.5


# =============================================================================
# BART Tests
# =============================================================================

class TestBartScore:
    """Tests for the cargo-stacking risk index."""

    def test_no_deliveries_is_exactly_neutral(self):
        assert compute_bart_score([]) == 0.5

    def test_all_tipped_is_neutral(self):
        loads = [CargoLoad(crates=7, tipped=True), CargoLoad(crates=6, tipped=True)]

        assert compute_bart_score(loads) == 0.5

    def test_tipped_loads_excluded(self):
        loads = [
            CargoLoad(crates=7, tipped=False),
            CargoLoad(crates=6, tipped=True),
            CargoLoad(crates=0, tipped=False),
        ]

        assert compute_bart_score(loads) == pytest.approx(0.5)

    def test_clamped_to_one(self):
        assert compute_bart_score([CargoLoad(crates=10, tipped=False)]) == 1.0

    def test_custom_max_cargo(self):
        settings = ScoringSettings(max_cargo=4)

        assert compute_bart_score([CargoLoad(crates=2, tipped=False)], settings) == 0.5


# =============================================================================
# Trait Composition Tests
# =============================================================================

class TestBehavioralTraits:
    """Tests for the composed behavioral trait scores."""

    def test_empty_bundle_uses_fallbacks(self):
        bundle = empty_bundle()

        # 0.40 * 0.5 + 0.35 * 0.2 + 0.25 * 0.5
        assert compute_behavioral_conscientiousness(bundle) == pytest.approx(0.395)
        assert compute_behavioral_agreeableness(bundle) == pytest.approx(0.5)
        assert compute_behavioral_extraversion(bundle) == pytest.approx(0.5)

    def test_empty_bundle_scores_are_finite(self):
        scores = compute_behavioral_scores(empty_bundle())

        assert scores.bart_score == 0.5
        for _, value in scores.traits.items():
            assert math.isfinite(value)
            assert 0.0 <= value <= 1.0

    def test_careful_player(self):
        scores = compute_behavioral_scores(careful_bundle())

        # path 1.0, banking 1.0, taps 0.9
        assert scores.traits.conscientiousness == pytest.approx(0.40 + 0.35 + 0.25 * 0.9)
        # no losses 0.3, steady taps 0.0, bart 2/7
        assert scores.traits.neuroticism == pytest.approx(0.40 * 0.3 + 0.30 * (1 - 2 / 7))
        # exploration 0.2, no shortcuts, bart 2/7
        assert scores.traits.openness == pytest.approx(0.35 * 0.2 + 0.35 * (2 / 7))
        assert scores.traits.agreeableness == pytest.approx(0.40 + 0.30 * 0.5 + 0.30)
        assert scores.traits.extraversion == pytest.approx(0.55 * 0.5 + 0.45 * 0.25)
        assert scores.bart_score == pytest.approx(2 / 7)

    def test_extraction_is_deterministic(self):
        bundle = careful_bundle()

        assert compute_behavioral_scores(bundle) == compute_behavioral_scores(bundle)


# =============================================================================
# Payload Parsing Tests
# =============================================================================

class TestBundleParsing:
    """Tests for BehavioralSignalBundle.from_payload."""

    def test_missing_arrays_default_to_empty(self):
        bundle = BehavioralSignalBundle.from_payload("session-1", {})

        assert bundle.cargo_loads == ()
        assert bundle.tap_intervals == ()
        assert bundle.total_tiles == 0
        assert bundle.duration_ms == 60_000

    def test_tap_velocities_alias(self):
        bundle = BehavioralSignalBundle.from_payload(
            "session-1", {"tap_velocities": [300, 400]}
        )

        assert bundle.tap_intervals == (300.0, 400.0)

    def test_parses_event_records(self):
        bundle = BehavioralSignalBundle.from_payload("session-1", {
            "game_seed": "abc",
            "cargo_loads": [{"crates": 3, "tipped": False, "reward": 30}],
            "loss_events": [
                {"type": "theft", "timestamp_ms": 100, "amount_lost": 5, "behavior_delta": 0.2},
            ],
            "banking_events": [{"timestamp_ms": 1000, "amount": 40}],
        })

        assert bundle.game_seed == "abc"
        assert bundle.cargo_loads[0].crates == 3
        assert bundle.loss_events[0].type == LossType.THEFT
        assert bundle.banking_events[0].timestamp_ms == 1000

    def test_round_trips_through_to_dict(self):
        bundle = careful_bundle()

        assert BehavioralSignalBundle.from_payload("session-1", bundle.to_dict()) == bundle

    @pytest.mark.parametrize(
        "payload",
        [
            {"cargo_loads": "lots"},
            {"cargo_loads": [{"tipped": False}]},
            {"loss_events": [{"type": "earthquake", "behavior_delta": 0.1}]},
            {"tap_intervals": ["fast"]},
        ],
    )
    def test_malformed_payload_rejected(self, payload):
        with pytest.raises(ValueError):
            BehavioralSignalBundle.from_payload("session-1", payload)
