"""
Spawner - cooldown, cap and chance gated creation of traffic and items
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from .config import GameConfig
from .entities import (
    HAZARD_TYPES,
    Coin,
    Hazard,
    Powerup,
    Traffic,
    new_coin,
    new_hazard,
    new_powerup,
    new_traffic,
)
from .utils import choice

logger = logging.getLogger(__name__)


class Spawner:
    """Owns one cooldown timer per category.

    Timers count simulation time since the last reset of that category.
    Traffic resets its timer only when a car actually spawns; the other
    categories reset on every attempt, since only a chance draw follows the
    cooldown.
    """

    def __init__(self, config: GameConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng
        self.reset()

    def reset(self):
        self._npc_timer = 0.0
        self._coin_timer = 0.0
        self._powerup_timer = 0.0
        self._hazard_timer = 0.0

    def _random_lane(self) -> int:
        return int(self.rng.integers(0, self.config.lane_count))

    def update(self, delta_ms: float, world, multiplier: float) -> List:
        """Run every category once, appending new entities to the world."""
        spawned = []

        self._npc_timer += delta_ms
        self._coin_timer += delta_ms
        self._powerup_timer += delta_ms
        self._hazard_timer += delta_ms

        npc = self._spawn_npc(world.npcs, multiplier)
        if npc is not None:
            world.npcs.append(npc)
            spawned.append(npc)

        coin = self._spawn_coin(world.coins, multiplier)
        if coin is not None:
            world.coins.append(coin)
            spawned.append(coin)

        powerup = self._spawn_powerup(world.powerups, multiplier)
        if powerup is not None:
            world.powerups.append(powerup)
            spawned.append(powerup)

        hazard = self._spawn_hazard(world.hazards, multiplier)
        if hazard is not None:
            world.hazards.append(hazard)
            spawned.append(hazard)

        return spawned

    # ----------------------------
    # Categories
    # ----------------------------

    def _spawn_npc(self, npcs: List[Traffic], multiplier: float):
        cfg = self.config
        if self._npc_timer < cfg.npc_spawn_interval_ms or len(npcs) >= cfg.max_npcs:
            return None

        lane = self._random_lane()
        if not self.has_room_for_npc(npcs, lane):
            return None

        self._npc_timer = 0.0
        npc = new_traffic(lane, cfg, self.rng, multiplier)
        logger.debug("Spawned %s in lane %d (vy=%.1f)", npc.car_type, lane, npc.vy)
        return npc

    def has_room_for_npc(self, npcs: List[Traffic], lane: int) -> bool:
        """Spacing from every car, and the per-lane density limit"""
        cfg = self.config
        in_lane = 0
        for other in npcs:
            if abs(other.y - cfg.npc_spawn_y) < cfg.npc_min_spacing:
                return False
            if other.lane == lane:
                in_lane += 1
        return in_lane < cfg.max_npcs_per_lane

    def _spawn_coin(self, coins: List[Coin], multiplier: float):
        cfg = self.config
        if self._coin_timer < cfg.coin_spawn_interval_ms or len(coins) >= cfg.max_coins:
            return None
        self._coin_timer = 0.0
        if self.rng.random() >= cfg.coin_spawn_chance:
            return None
        return new_coin(self._random_lane(), cfg, self.rng, multiplier)

    def _spawn_powerup(self, powerups: List[Powerup], multiplier: float):
        cfg = self.config
        if self._powerup_timer < cfg.powerup_spawn_interval_ms or len(powerups) >= cfg.max_powerups:
            return None
        self._powerup_timer = 0.0
        if self.rng.random() >= cfg.powerup_spawn_chance:
            return None
        return new_powerup(self._random_lane(), cfg, multiplier)

    def _spawn_hazard(self, hazards: List[Hazard], multiplier: float):
        cfg = self.config
        if self._hazard_timer < cfg.hazard_spawn_interval_ms or len(hazards) >= cfg.max_hazards:
            return None
        self._hazard_timer = 0.0
        if self.rng.random() >= cfg.hazard_spawn_chance:
            return None
        lane = self._random_lane()
        hazard_type = choice(self.rng, HAZARD_TYPES)
        return new_hazard(lane, hazard_type, cfg, multiplier)
