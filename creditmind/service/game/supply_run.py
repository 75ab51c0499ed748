"""
Supply Run game configuration for Phase 2.

The behavioral game is seeded from the session so that every session
gets a unique but reproducible run: the same session seed always yields
the same game seed and the same event schedule.

Events are decision points spread over the 60-second run:
- thief (15-25s): tests reaction to loss
- shortcut (20-25s): revealed subtly, tests openness
- helper (25-40s): free speed boost, tests accepting help
- premium_customer (30-50s): far away but pays triple, tests risk appetite
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple


DURATION_MS = 60_000
MAP_WIDTH = 20
MAP_HEIGHT = 15
CUSTOMER_COUNT = 4

# Probability that a cargo stack of n crates tips over (index n - 1; 7+ crates share the last)
BART_RISK_CURVE: Tuple[float, ...] = (0.00, 0.05, 0.15, 0.30, 0.50, 0.75, 0.90)


@dataclass(frozen=True)
class ScheduledEvent:
    type: str
    trigger_time_ms: int
    position: Tuple[int, int]
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "trigger_time_ms": self.trigger_time_ms,
            "position": {"x": self.position[0], "y": self.position[1]},
            "params": dict(self.params),
        }


@dataclass(frozen=True)
class GameConfig:
    game_seed: str
    event_schedule: Tuple[ScheduledEvent, ...]
    duration_ms: int = DURATION_MS
    map_width: int = MAP_WIDTH
    map_height: int = MAP_HEIGHT
    customer_count: int = CUSTOMER_COUNT
    cargo_risk_curve: Tuple[float, ...] = BART_RISK_CURVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_seed": self.game_seed,
            "duration_ms": self.duration_ms,
            "map_width": self.map_width,
            "map_height": self.map_height,
            "customer_count": self.customer_count,
            "event_schedule": [e.to_dict() for e in self.event_schedule],
            "cargo_risk_curve": list(self.cargo_risk_curve),
        }


def derive_game_seed(session_seed: str) -> str:
    """SHA-256 of the session seed with a phase suffix."""
    return hashlib.sha256(f"{session_seed}:phase2".encode("utf-8")).hexdigest()


def generate_event_schedule(game_seed: str) -> Tuple[ScheduledEvent, ...]:
    """
    Place the four game events deterministically from the game seed.

    The first 8 hex digits are read as an unsigned 32-bit number and its
    bit ranges pick each event's time and map position.

    Returns:
        Events ordered by trigger time
    """
    if len(game_seed) < 8:
        raise ValueError("Game seed must have at least 8 hex characters")
    seed = int(game_seed[:8], 16)

    events = [
        ScheduledEvent(
            type="thief",
            trigger_time_ms=15_000 + seed % 10_000,
            position=(5 + seed % 10, 3 + (seed >> 4) % 8),
            params={
                "steal_amount_percent": 0.3 + (seed % 20) / 100,
                "escape_window_ms": 2000,
            },
        ),
        ScheduledEvent(
            type="helper",
            trigger_time_ms=25_000 + (seed >> 8) % 15_000,
            position=(10 + (seed >> 12) % 8, 5 + (seed >> 16) % 6),
            params={"speed_boost": 1.5, "duration_ms": 5000, "cost": 0},
        ),
        ScheduledEvent(
            type="premium_customer",
            trigger_time_ms=30_000 + (seed >> 20) % 20_000,
            position=(15 + (seed >> 24) % 4, 2 + (seed >> 28) % 10),
            params={"reward_multiplier": 3.0, "distance_penalty": 1.5},
        ),
        ScheduledEvent(
            type="shortcut",
            trigger_time_ms=20_000 + (seed >> 4) % 5_000,
            position=(8 + (seed >> 8) % 4, 7 + (seed >> 12) % 3),
            params={"path_reduction": 0.6, "visibility": "subtle"},
        ),
    ]
    return tuple(sorted(events, key=lambda e: e.trigger_time_ms))


def build_game_config(session_seed: str) -> GameConfig:
    """Game configuration for a session that has finished Phase 1."""
    game_seed = derive_game_seed(session_seed)
    return GameConfig(
        game_seed=game_seed,
        event_schedule=generate_event_schedule(game_seed),
    )
