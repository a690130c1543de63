"""
World - the per-session context owning every entity collection
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import GameConfig
from .entities import (
    Coin,
    Hazard,
    Particle,
    Player,
    Powerup,
    Traffic,
    UpdateContext,
    new_player,
    update_entity,
)
from .progression import Progression, Stage
from .spawner import Spawner
from .utils import frames


@dataclass(frozen=True)
class WorldSnapshot:
    """Read-only view handed to renderers and observers"""
    state: str
    player: Player
    npcs: Tuple[Traffic, ...]
    coins: Tuple[Coin, ...]
    powerups: Tuple[Powerup, ...]
    hazards: Tuple[Hazard, ...]
    particles: Tuple[Particle, ...]
    score: int
    power: float
    max_power: float
    shield_active: bool
    time_remaining_ms: float
    elapsed_ms: float
    speed_multiplier: float
    stage: Stage
    combo: int
    road_offset: float


class World:
    def __init__(self, config: GameConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng

        self.player: Player = new_player(config)
        self.npcs: List[Traffic] = []
        self.coins: List[Coin] = []
        self.powerups: List[Powerup] = []
        self.hazards: List[Hazard] = []
        self.particles: List[Particle] = []

        self.elapsed_ms = 0.0
        self.time_remaining_ms = config.session_duration_ms
        self.road_offset = 0.0

        self.combo = 0
        self.last_score_ms: Optional[float] = None

        self.progression = Progression(config)
        self.spawner = Spawner(config, rng)

        self.stats: Dict[str, float] = {
            "coins_collected": 0,
            "powerups_collected": 0,
            "damage_taken": 0.0,
        }

    def context(self) -> UpdateContext:
        return UpdateContext(config=self.config, rng=self.rng, now_ms=self.elapsed_ms, player=self.player)

    def add_particles(self, particles: List[Particle]):
        self.particles.extend(particles)
        overflow = len(self.particles) - self.config.max_particles
        if overflow > 0:
            del self.particles[:overflow]

    def purge(self):
        """Drop inactive objects from every collection"""
        self.npcs = [n for n in self.npcs if n.active]
        self.coins = [c for c in self.coins if c.active]
        self.powerups = [p for p in self.powerups if p.active]
        self.hazards = [h for h in self.hazards if h.active]

    def update_entities(self, delta_ms: float):
        ctx = self.context()
        for group in (self.npcs, self.coins, self.powerups, self.hazards):
            for obj in group:
                update_entity(obj, delta_ms, ctx)
        self.purge()

    def update_particles(self, delta_ms: float):
        ctx = self.context()
        for particle in self.particles:
            update_entity(particle, delta_ms, ctx)
        self.particles = [p for p in self.particles if p.active]

    def scroll_road(self, delta_ms: float):
        # cosmetic dashed-line offset, moving upward
        self.road_offset -= self.config.road_speed * frames(delta_ms)
        if self.road_offset < 0:
            self.road_offset += self.config.road_pattern

    def snapshot(self, state: str) -> WorldSnapshot:
        player = self.player
        return WorldSnapshot(
            state=state,
            player=copy.copy(player),
            npcs=tuple(copy.copy(n) for n in self.npcs if n.active),
            coins=tuple(copy.copy(c) for c in self.coins if c.active),
            powerups=tuple(copy.copy(p) for p in self.powerups if p.active),
            hazards=tuple(copy.copy(h) for h in self.hazards if h.active),
            particles=tuple(copy.copy(p) for p in self.particles if p.active),
            score=player.score,
            power=player.power,
            max_power=player.max_power,
            shield_active=player.shield_active,
            time_remaining_ms=max(0.0, self.time_remaining_ms),
            elapsed_ms=self.elapsed_ms,
            speed_multiplier=self.progression.multiplier,
            stage=self.progression.stage,
            combo=self.combo,
            road_offset=self.road_offset,
        )
