"""
Phase 2 behavioral game configuration
"""

from .supply_run import (
    BART_RISK_CURVE,
    GameConfig,
    ScheduledEvent,
    build_game_config,
    derive_game_seed,
    generate_event_schedule,
)

__all__ = [
    "BART_RISK_CURVE",
    "GameConfig",
    "ScheduledEvent",
    "build_game_config",
    "derive_game_seed",
    "generate_event_schedule",
]
