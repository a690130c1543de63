"""
Game entity dataclasses and their per-kind update rules
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, List, Optional

import numpy as np

from .config import GameConfig
from .utils import choice, clamp, decay, frames, lerp, random_sign

# (type, width, height, color)
CAR_TYPES = (
    ("saloon", 85.0, 125.0, (52, 152, 219)),
    ("suv", 95.0, 140.0, (231, 76, 60)),
    ("hatchback", 75.0, 110.0, (46, 204, 113)),
    ("sports", 80.0, 120.0, (243, 156, 18)),
    ("truck", 100.0, 150.0, (155, 89, 182)),
    ("compact", 70.0, 100.0, (26, 188, 156)),
)

HAZARD_TYPES = ("light", "road_work", "crossing")
POWERUP_TYPES = ("shield",)

COIN_BURST_COLORS = ((0, 102, 204), (78, 205, 196), (255, 255, 255), (255, 215, 0), (255, 107, 53))
EXPLOSION_COLORS = ((255, 107, 53), (255, 215, 0), (255, 255, 255), (255, 71, 87))

BLINK_PERIOD = 60.0


@dataclass
class Body:
    """Shared moving-object record"""
    kind: ClassVar[str] = "body"

    x: float
    y: float
    width: float
    height: float
    vx: float = 0.0
    vy: float = 0.0
    active: bool = True

    def integrate(self, delta_ms: float):
        self.x += self.vx * (delta_ms / 1000.0)
        self.y += self.vy * (delta_ms / 1000.0)


@dataclass
class Player(Body):
    """Player car, locked to the lanes"""
    kind: ClassVar[str] = "player"

    current_lane: int = 1
    target_lane: int = 1
    lane_change_progress: float = 1.0
    power: float = 100.0
    max_power: float = 120.0
    shield_active: bool = False
    shield_expiry: float = 0.0
    score: int = 0

    @property
    def settled(self) -> bool:
        return self.lane_change_progress >= 1.0

    def request_lane_change(self, direction: int, lane_count: int = 3) -> bool:
        """Retarget one lane left (-1) or right (+1). Ignored mid-transition."""
        if not self.settled:
            return False
        new_lane = int(clamp(self.target_lane + direction, 0, lane_count - 1))
        if new_lane == self.target_lane:
            return False
        self.target_lane = new_lane
        self.lane_change_progress = 0.0
        return True

    def activate_shield(self, now_ms: float, duration_ms: float):
        self.shield_active = True
        self.shield_expiry = now_ms + duration_ms

    def take_damage(self, amount: float, bypass_shield: bool = False) -> float:
        """Reduce power, returning the amount actually lost."""
        if self.shield_active and not bypass_shield:
            return 0.0
        before = self.power
        self.power = max(0.0, self.power - amount)
        return before - self.power


@dataclass
class Traffic(Body):
    """NPC car. Never consumed by the player, it only pulls away."""
    kind: ClassVar[str] = "traffic"

    lane: int = 0
    car_type: str = "saloon"
    color: tuple = (52, 152, 219)
    original_x: float = 0.0

    wobble_phase: float = 0.0
    wobble_speed: float = 0.02

    dashing: bool = False
    dash_speed: float = 15.0
    dash_direction: int = 1
    dash_timer: float = 0.0
    dash_duration: float = 1500.0

    migrate_timer: float = 0.0
    migrate_interval: float = 8000.0
    target_lane: int = 0
    migrate_progress: float = 1.0
    migrate_speed: float = 0.002

    avoid_direction: int = 1
    avoid_offset: float = 0.0

    # True while overlapping the player; damage is applied on the rising edge
    in_contact: bool = False


@dataclass
class Coin(Body):
    kind: ClassVar[str] = "coin"

    lane: int = 0
    original_x: float = 0.0
    collected: bool = False
    bob_phase: float = 0.0
    bob_speed: float = 0.03

    def collect(self) -> bool:
        """Take the coin. Returns False if it is already gone."""
        if self.collected or not self.active:
            return False
        self.collected = True
        self.active = False
        return True


@dataclass
class Powerup(Body):
    kind: ClassVar[str] = "powerup"

    lane: int = 0
    type: str = "shield"


@dataclass
class Hazard(Body):
    kind: ClassVar[str] = "hazard"

    lane: int = 0
    type: str = "light"
    blink: float = 0.0

    @property
    def lit(self) -> bool:
        return self.blink < BLINK_PERIOD / 2


@dataclass
class Particle:
    kind: ClassVar[str] = "particle"

    x: float
    y: float
    vx: float
    vy: float
    life: float
    max_life: float
    color: tuple = (255, 255, 255)
    size: float = 3.0
    active: bool = True

    @property
    def alpha(self) -> float:
        if self.max_life <= 0:
            return 0.0
        return clamp(self.life / self.max_life, 0.0, 1.0)


# ----------------------------
# Update rules, one per kind
# ----------------------------

@dataclass
class UpdateContext:
    config: GameConfig
    rng: np.random.Generator
    now_ms: float = 0.0
    player: Optional[Player] = None


def update_player(p: Player, delta_ms: float, ctx: UpdateContext) -> bool:
    """Advance the player. Returns True if the shield expired this frame."""
    cfg = ctx.config
    p.integrate(delta_ms)

    if p.lane_change_progress < 1.0:
        p.lane_change_progress += delta_ms / cfg.lane_change_duration_ms
        if p.lane_change_progress >= 1.0:
            p.lane_change_progress = 1.0
            p.current_lane = p.target_lane

    p.x = lerp(cfg.lanes[p.current_lane], cfg.lanes[p.target_lane], p.lane_change_progress)
    p.y = cfg.player_y

    p.power = max(0.0, p.power - cfg.power_decay_per_s * delta_ms / 1000.0)

    if p.shield_active and ctx.now_ms >= p.shield_expiry:
        p.shield_active = False
        return True
    return False


def _update_dash(npc: Traffic, delta_ms: float, rng: np.random.Generator):
    npc.dash_timer += delta_ms
    if npc.dash_timer > npc.dash_duration:
        npc.dashing = rng.random() > 0.9
        npc.dash_timer = 0.0
        npc.dash_duration = 1500.0 + rng.random() * 2000.0
        npc.dash_direction = random_sign(rng)
    if npc.dashing:
        npc.y -= npc.dash_direction * npc.dash_speed * (delta_ms / 1000.0)


def _update_migration(npc: Traffic, delta_ms: float, ctx: UpdateContext):
    npc.migrate_timer += delta_ms
    if npc.migrate_timer > npc.migrate_interval and npc.migrate_progress >= 1.0:
        lanes = [i for i in range(ctx.config.lane_count) if i != npc.lane]
        npc.target_lane = choice(ctx.rng, lanes)
        npc.migrate_progress = 0.0
        npc.migrate_timer = 0.0
        npc.migrate_interval = 8000.0 + ctx.rng.random() * 12000.0

    if npc.migrate_progress < 1.0:
        npc.migrate_progress += npc.migrate_speed * frames(delta_ms)
        if npc.migrate_progress >= 1.0:
            npc.migrate_progress = 1.0
            npc.lane = npc.target_lane
            npc.original_x = ctx.config.lanes[npc.lane]


def migration_offset(npc: Traffic, config: GameConfig) -> float:
    if npc.migrate_progress >= 1.0:
        return 0.0
    start = config.lanes[npc.lane]
    end = config.lanes[npc.target_lane]
    # smoothstep easing
    t = npc.migrate_progress
    return (end - start) * t * t * (3.0 - 2.0 * t)


def _update_avoidance(npc: Traffic, delta_ms: float, cfg: GameConfig, player: Player):
    dy = abs(npc.y - player.y)
    dx = abs(npc.x - player.x)
    if dy < cfg.npc_avoid_distance and dx < cfg.npc_avoid_lateral:
        force = max(0.0, (cfg.npc_avoid_distance - dy) / cfg.npc_avoid_distance)
        speed = cfg.npc_avoid_max_speed * force
        npc.avoid_direction = 1 if player.x < npc.x else -1
        npc.avoid_offset += npc.avoid_direction * speed * (delta_ms / 1000.0)
        npc.avoid_offset = clamp(npc.avoid_offset, -cfg.npc_avoid_limit, cfg.npc_avoid_limit)
    else:
        npc.avoid_offset = decay(npc.avoid_offset, cfg.npc_avoid_decay, delta_ms)


def update_traffic(npc: Traffic, delta_ms: float, ctx: UpdateContext):
    cfg = ctx.config
    npc.integrate(delta_ms)
    _update_dash(npc, delta_ms, ctx.rng)
    _update_migration(npc, delta_ms, ctx)

    if ctx.player is not None:
        _update_avoidance(npc, delta_ms, cfg, ctx.player)

    wobble = math.sin(npc.wobble_phase) * 3.0
    npc.x = npc.original_x + wobble + npc.avoid_offset + migration_offset(npc, cfg)
    npc.wobble_phase += npc.wobble_speed * frames(delta_ms)

    if npc.y > cfg.offscreen_y:
        npc.active = False


def update_coin(coin: Coin, delta_ms: float, ctx: UpdateContext):
    coin.integrate(delta_ms)
    coin.x = coin.original_x + math.sin(coin.bob_phase) * 2.0
    coin.bob_phase += coin.bob_speed * frames(delta_ms)

    if coin.y > ctx.config.offscreen_y:
        coin.active = False


def update_powerup(powerup: Powerup, delta_ms: float, ctx: UpdateContext):
    powerup.integrate(delta_ms)
    if powerup.y > ctx.config.offscreen_y:
        powerup.active = False


def update_hazard(hazard: Hazard, delta_ms: float, ctx: UpdateContext):
    hazard.integrate(delta_ms)
    if hazard.y > ctx.config.offscreen_y:
        hazard.active = False
    if hazard.type == "light":
        hazard.blink = (hazard.blink + frames(delta_ms)) % BLINK_PERIOD


def update_particle(particle: Particle, delta_ms: float, ctx: UpdateContext):
    particle.x += particle.vx * (delta_ms / 1000.0)
    particle.y += particle.vy * (delta_ms / 1000.0)
    particle.vy += ctx.config.gravity * (delta_ms / 1000.0)
    particle.life -= delta_ms
    if particle.life <= 0:
        particle.active = False


UPDATERS: Dict[str, Callable] = {
    Player.kind: update_player,
    Traffic.kind: update_traffic,
    Coin.kind: update_coin,
    Powerup.kind: update_powerup,
    Hazard.kind: update_hazard,
    Particle.kind: update_particle,
}


def update_entity(obj, delta_ms: float, ctx: UpdateContext):
    """Dispatch on the entity's kind tag"""
    return UPDATERS[obj.kind](obj, delta_ms, ctx)


# ----------------------------
# Factories
# ----------------------------

def new_player(config: GameConfig) -> Player:
    middle = config.lane_count // 2
    return Player(
        x=config.lanes[middle],
        y=config.player_y,
        width=config.player_width,
        height=config.player_height,
        current_lane=middle,
        target_lane=middle,
        power=config.start_power,
        max_power=config.max_power,
    )


def new_traffic(lane: int, config: GameConfig, rng: np.random.Generator,
                speed_multiplier: float = 1.0) -> Traffic:
    car_type, width, height, color = choice(rng, CAR_TYPES)
    lane_x = config.lanes[lane]
    vy = config.npc_speed + (rng.random() - 0.5) * config.npc_speed_spread
    return Traffic(
        x=lane_x,
        y=config.npc_spawn_y,
        width=width,
        height=height,
        vy=vy * speed_multiplier,
        lane=lane,
        car_type=car_type,
        color=color,
        original_x=lane_x,
        wobble_phase=rng.random() * math.pi * 2,
        wobble_speed=0.02 + rng.random() * 0.03,
        dashing=rng.random() > 0.9,
        dash_speed=15.0 + rng.random() * 25.0,
        dash_direction=random_sign(rng),
        dash_duration=1500.0 + rng.random() * 2000.0,
        migrate_interval=8000.0 + rng.random() * 12000.0,
        target_lane=lane,
        migrate_speed=0.002 + rng.random() * 0.003,
        avoid_direction=random_sign(rng),
    )


def new_coin(lane: int, config: GameConfig, rng: np.random.Generator,
             speed_multiplier: float = 1.0) -> Coin:
    lane_x = config.lanes[lane]
    vy = config.npc_speed + (rng.random() - 0.5) * config.coin_speed_spread
    return Coin(
        x=lane_x,
        y=config.item_spawn_y,
        width=config.coin_size,
        height=config.coin_size,
        vy=vy * speed_multiplier,
        lane=lane,
        original_x=lane_x,
        bob_phase=rng.random() * math.pi * 2,
        bob_speed=0.03 + rng.random() * 0.02,
    )


def new_powerup(lane: int, config: GameConfig, speed_multiplier: float = 1.0,
                type: str = "shield") -> Powerup:
    return Powerup(
        x=config.lanes[lane],
        y=config.item_spawn_y,
        width=config.powerup_size,
        height=config.powerup_size,
        vy=config.npc_speed * speed_multiplier,
        lane=lane,
        type=type,
    )


def new_hazard(lane: int, type: str, config: GameConfig, speed_multiplier: float = 1.0) -> Hazard:
    if type not in HAZARD_TYPES:
        raise ValueError(f"Unknown hazard type: {type}")
    return Hazard(
        x=config.lanes[lane],
        y=config.item_spawn_y,
        width=config.hazard_width,
        height=config.hazard_height,
        vy=config.npc_speed * speed_multiplier,
        lane=lane,
        type=type,
    )


def coin_burst(x: float, y: float, config: GameConfig, rng: np.random.Generator) -> List[Particle]:
    """Evenly spaced radial burst for a collected coin"""
    n = config.coin_burst_particles
    particles = []
    for i in range(n):
        ang = (math.pi * 2) * (i / n)
        speed = 12.0 + rng.random() * 8.0
        particles.append(Particle(
            x=x, y=y,
            vx=math.cos(ang) * speed,
            vy=math.sin(ang) * speed - 5.0,
            life=1200.0, max_life=1200.0,
            color=choice(rng, COIN_BURST_COLORS),
            size=rng.random() * 4.0 + 2.0,
        ))
    return particles


def explosion(x: float, y: float, config: GameConfig, rng: np.random.Generator) -> List[Particle]:
    """Randomly scattered burst for hits and pickups"""
    particles = []
    for _ in range(config.explosion_particles):
        ang = rng.random() * math.pi * 2
        speed = 8.0 + rng.random() * 12.0
        particles.append(Particle(
            x=x, y=y,
            vx=math.cos(ang) * speed,
            vy=math.sin(ang) * speed,
            life=800.0, max_life=800.0,
            color=choice(rng, EXPLOSION_COLORS),
            size=rng.random() * 6.0 + 3.0,
        ))
    return particles
