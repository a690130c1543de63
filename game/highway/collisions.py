"""
Collision & interaction resolver

Runs once per frame after everything has moved. Categories are resolved in a
fixed order (coins, powerups, traffic, hazards) so event order is stable.
"""

from __future__ import annotations

import logging

from .entities import coin_burst, explosion
from .events import EventBus, EventType
from .utils import boxes_overlap, clamp

logger = logging.getLogger(__name__)


def award_points(world, bus: EventBus, points: int, source: str):
    """Add score and advance the combo counter"""
    now = world.elapsed_ms
    player = world.player
    player.score += points
    bus.emit(EventType.SCORED, now, points=points, total=player.score, source=source)

    if world.last_score_ms is not None and now - world.last_score_ms < world.config.combo_window_ms:
        world.combo += 1
    else:
        world.combo = 1
    world.last_score_ms = now

    if world.combo >= 2:
        bus.emit(EventType.COMBO_STREAK, now, count=world.combo)


def _resolve_coins(world, bus: EventBus):
    player = world.player
    for coin in world.coins:
        if not coin.active or not boxes_overlap(player, coin):
            continue
        if coin.collect():
            world.stats["coins_collected"] += 1
            world.add_particles(coin_burst(coin.x, coin.y, world.config, world.rng))
            award_points(world, bus, world.config.coin_points, "coin")


def _resolve_powerups(world, bus: EventBus):
    cfg = world.config
    player = world.player
    for powerup in world.powerups:
        if not powerup.active or not boxes_overlap(player, powerup):
            continue
        if powerup.type == "shield":
            player.activate_shield(world.elapsed_ms, cfg.shield_duration_ms)
            bus.emit(EventType.SHIELD_ACTIVATED, world.elapsed_ms, expires_at=player.shield_expiry)
        world.add_particles(explosion(powerup.x, powerup.y, cfg, world.rng))
        powerup.active = False
        world.stats["powerups_collected"] += 1
        award_points(world, bus, cfg.powerup_points, "powerup")


def _damage(world, bus: EventBus, amount: float, cause: str, bypass_shield: bool):
    lost = world.player.take_damage(amount, bypass_shield=bypass_shield)
    if lost > 0:
        world.stats["damage_taken"] += lost
        bus.emit(EventType.DAMAGED, world.elapsed_ms, amount=lost, cause=cause)
    bus.emit(EventType.NARROW_ESCAPE, world.elapsed_ms, cause=cause, shielded=lost == 0)


def _resolve_traffic(world, bus: EventBus) -> bool:
    cfg = world.config
    player = world.player
    for npc in world.npcs:
        touching = npc.active and boxes_overlap(player, npc, cfg.collision_margin)
        if not touching:
            npc.in_contact = False
            continue
        if npc.in_contact:
            continue

        npc.in_contact = True
        _damage(world, bus, cfg.npc_damage, "traffic", bypass_shield=False)
        world.add_particles(explosion(npc.x, npc.y, cfg, world.rng))

        # pull away harder than plain avoidance allows
        npc.avoid_offset = clamp(
            npc.avoid_offset + npc.avoid_direction * cfg.npc_nudge,
            -cfg.npc_nudge_limit, cfg.npc_nudge_limit,
        )

        if player.power <= 0:
            return True
    return False


def _resolve_hazards(world, bus: EventBus) -> bool:
    cfg = world.config
    player = world.player
    for hazard in world.hazards:
        if not hazard.active or not boxes_overlap(player, hazard, cfg.collision_margin):
            continue
        hazard.active = False
        world.add_particles(explosion(hazard.x, hazard.y, cfg, world.rng))
        _damage(world, bus, cfg.hazard_damage, hazard.type, bypass_shield=True)

        if player.power <= 0:
            return True
    return False


def resolve_collisions(world, bus: EventBus) -> bool:
    """Apply every player contact for this frame.

    Returns True when the player's power hit zero; the rest of the pass is
    skipped in that case.
    """
    _resolve_coins(world, bus)
    _resolve_powerups(world, bus)
    if _resolve_traffic(world, bus):
        logger.debug("Power depleted by traffic at %.0fms", world.elapsed_ms)
        return True
    if _resolve_hazards(world, bus):
        logger.debug("Power depleted by hazard at %.0fms", world.elapsed_ms)
        return True
    return False
