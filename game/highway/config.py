"""
Game configuration

All durations are milliseconds of simulation time, speeds are world units per
second and positions are world units (y grows downward).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Tuple

logger = logging.getLogger(__name__)

LANE_COUNT = 3


class ConfigError(ValueError):
    """Raised when a GameConfig is out of range or malformed."""
    pass


@dataclass
class GameConfig:
    # Playfield
    width: float = 400.0
    height: float = 600.0
    lanes: Tuple[float, float, float] = (100.0, 200.0, 300.0)
    offscreen_margin: float = 100.0

    # Session
    session_duration_ms: float = 60_000.0
    loading_duration_ms: float = 500.0
    max_delta_ms: float = 100.0

    # Speed progression
    base_speed_multiplier: float = 1.0
    boost_1_at_ms: float = 20_000.0
    boost_1_multiplier: float = 1.1
    boost_2_at_ms: float = 40_000.0
    boost_2_multiplier: float = 1.2

    # Player
    player_width: float = 80.0
    player_height: float = 120.0
    player_y_offset: float = 100.0  # distance from the bottom edge
    lane_change_duration_ms: float = 150.0
    start_power: float = 100.0
    max_power: float = 120.0
    power_decay_per_s: float = 1.0
    shield_duration_ms: float = 8_000.0
    collision_margin: float = 0.0

    # Traffic
    npc_speed: float = 200.0
    npc_speed_spread: float = 50.0
    npc_spawn_y: float = -100.0
    npc_spawn_interval_ms: float = 2_000.0
    max_npcs: int = 8
    npc_min_spacing: float = 200.0
    max_npcs_per_lane: int = 2
    npc_damage: float = 10.0
    npc_avoid_distance: float = 150.0
    npc_avoid_lateral: float = 80.0
    npc_avoid_max_speed: float = 100.0
    npc_avoid_limit: float = 60.0
    npc_avoid_decay: float = 0.9
    npc_nudge: float = 30.0
    npc_nudge_limit: float = 80.0

    # Coins
    coin_size: float = 25.0
    coin_speed_spread: float = 30.0
    coin_spawn_interval_ms: float = 600.0
    coin_spawn_chance: float = 0.35
    max_coins: int = 20
    coin_points: int = 10
    coin_burst_particles: int = 20
    combo_window_ms: float = 500.0

    # Powerups
    powerup_size: float = 30.0
    powerup_spawn_interval_ms: float = 1_000.0
    powerup_spawn_chance: float = 0.08
    max_powerups: int = 6
    powerup_points: int = 25

    # Hazards
    hazard_width: float = 30.0
    hazard_height: float = 24.0
    hazard_spawn_interval_ms: float = 1_500.0
    hazard_spawn_chance: float = 0.08
    max_hazards: int = 8
    hazard_damage: float = 15.0

    # Pickups and hazards spawn just above the top edge
    item_spawn_y: float = -50.0

    # Particles
    max_particles: int = 150
    explosion_particles: int = 15
    gravity: float = 0.3

    # Road animation
    road_speed: float = 8.0
    road_pattern: float = 40.0

    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.lanes = tuple(float(x) for x in self.lanes)
        self.validate()

    @property
    def lane_count(self) -> int:
        return len(self.lanes)

    @property
    def player_y(self) -> float:
        return self.height - self.player_y_offset

    @property
    def offscreen_y(self) -> float:
        return self.height + self.offscreen_margin

    def validate(self) -> None:
        """Fail fast on configuration that can only be a programming error."""
        if len(self.lanes) != LANE_COUNT:
            raise ConfigError(f"exactly {LANE_COUNT} lanes are required, got {len(self.lanes)}")
        if any(b <= a for a, b in zip(self.lanes, self.lanes[1:])):
            raise ConfigError(f"lane positions must be strictly increasing: {self.lanes}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigError("playfield width and height must be positive")
        for x in self.lanes:
            if not 0.0 <= x <= self.width:
                raise ConfigError(f"lane position {x} lies outside the playfield [0, {self.width}]")

        for name in ("session_duration_ms", "lane_change_duration_ms", "max_delta_ms"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")

        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith("_ms") and value < 0:
                raise ConfigError(f"{f.name} must not be negative, got {value}")
            if f.name.endswith("_chance") and not 0.0 <= value <= 1.0:
                raise ConfigError(f"{f.name} must be within [0, 1], got {value}")
            if f.name.startswith("max_") and f.name != "max_delta_ms" and value < 0:
                raise ConfigError(f"{f.name} must not be negative, got {value}")

        if self.boost_2_at_ms < self.boost_1_at_ms:
            raise ConfigError("second speed boost must not come before the first")
        if not 0 < self.start_power <= self.max_power:
            raise ConfigError("start_power must be within (0, max_power]")
        if self.power_decay_per_s < 0:
            raise ConfigError("power_decay_per_s must not be negative")
        if not 0.0 <= self.npc_avoid_decay <= 1.0:
            raise ConfigError("npc_avoid_decay must be within [0, 1]")
        if self.collision_margin < 0:
            raise ConfigError("collision_margin must not be negative")
        for name in ("npc_damage", "hazard_damage", "coin_points", "powerup_points"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.extra:
            raise ConfigError(f"unknown config keys: {sorted(self.extra)}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        unknown = {k: v for k, v in data.items() if k not in known}
        config = cls(**kwargs, extra=unknown)
        logger.debug("Loaded game config with overrides: %s", sorted(kwargs))
        return config
