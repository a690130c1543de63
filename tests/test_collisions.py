"""
Tests for game.highway.collisions -- contacts between the player and the road.
"""

import unittest

from game.highway.collisions import resolve_collisions
from game.highway.config import GameConfig
from game.highway.entities import new_coin, new_hazard, new_powerup, new_traffic
from game.highway.events import EventBus, EventType
from game.highway.utils import make_rng
from game.highway.world import World


def event_types(events):
    return [event.type for event in events]


class CollisionTestCase(unittest.TestCase):
    """World with the player alone in the middle lane."""

    config_overrides = {}

    def setUp(self):
        self.cfg = GameConfig(**self.config_overrides)
        self.rng = make_rng(0)
        self.world = World(self.cfg, self.rng)
        self.bus = EventBus()
        self.player = self.world.player

    def on_player(self, obj):
        obj.x = self.player.x
        obj.y = self.player.y
        return obj

    def add_coin(self):
        coin = self.on_player(new_coin(1, self.cfg, self.rng))
        self.world.coins.append(coin)
        return coin

    def add_traffic(self):
        npc = self.on_player(new_traffic(1, self.cfg, self.rng))
        npc.original_x = npc.x
        self.world.npcs.append(npc)
        return npc

    def add_hazard(self, type="road_work"):
        hazard = self.on_player(new_hazard(1, type, self.cfg))
        self.world.hazards.append(hazard)
        return hazard

    def resolve(self):
        lost = resolve_collisions(self.world, self.bus)
        return lost, self.bus.drain()


class TestCoins(CollisionTestCase):

    def test_coin_scores_once(self):
        coin = self.add_coin()
        lost, events = self.resolve()

        self.assertFalse(lost)
        self.assertFalse(coin.active)
        self.assertEqual(self.player.score, self.cfg.coin_points)
        self.assertEqual(event_types(events), [EventType.SCORED])
        self.assertEqual(events[0]["points"], 10)
        self.assertEqual(self.world.stats["coins_collected"], 1)
        self.assertEqual(len(self.world.particles), self.cfg.coin_burst_particles)

        _, events = self.resolve()
        self.assertEqual(events, [])
        self.assertEqual(self.player.score, 10)

    def test_missed_coin(self):
        coin = self.add_coin()
        coin.y = self.player.y - 300.0
        self.resolve()
        self.assertTrue(coin.active)
        self.assertEqual(self.player.score, 0)

    def test_combo_within_window(self):
        self.add_coin()
        self.add_coin()
        _, events = self.resolve()

        self.assertEqual(event_types(events),
                         [EventType.SCORED, EventType.SCORED, EventType.COMBO_STREAK])
        self.assertEqual(events[-1]["count"], 2)
        self.assertEqual(self.world.combo, 2)

    def test_combo_resets_after_window(self):
        self.add_coin()
        self.resolve()
        self.world.elapsed_ms += self.cfg.combo_window_ms + 100.0
        self.add_coin()
        _, events = self.resolve()
        self.assertEqual(event_types(events), [EventType.SCORED])
        self.assertEqual(self.world.combo, 1)


class TestPowerups(CollisionTestCase):

    def test_shield_pickup(self):
        powerup = self.on_player(new_powerup(1, self.cfg))
        self.world.powerups.append(powerup)
        _, events = self.resolve()

        self.assertFalse(powerup.active)
        self.assertTrue(self.player.shield_active)
        self.assertEqual(self.player.shield_expiry, self.cfg.shield_duration_ms)
        self.assertEqual(event_types(events), [EventType.SHIELD_ACTIVATED, EventType.SCORED])
        self.assertEqual(self.player.score, self.cfg.powerup_points)


class TestTraffic(CollisionTestCase):

    def test_hit_costs_power(self):
        self.add_traffic()
        lost, events = self.resolve()

        self.assertFalse(lost)
        self.assertEqual(self.player.power, 90.0)
        self.assertEqual(event_types(events), [EventType.DAMAGED, EventType.NARROW_ESCAPE])
        self.assertEqual(events[0]["amount"], 10.0)
        self.assertEqual(events[0]["cause"], "traffic")
        self.assertFalse(events[1]["shielded"])

    def test_damage_once_per_contact(self):
        """Staying in contact does not drain power every frame."""
        npc = self.add_traffic()
        for _ in range(5):
            self.resolve()
        self.assertEqual(self.player.power, 90.0)
        self.assertTrue(npc.active)

        npc.y = self.player.y - 400.0
        self.resolve()
        self.assertFalse(npc.in_contact)

        self.on_player(npc)
        self.resolve()
        self.assertEqual(self.player.power, 80.0)

    def test_shield_blocks_traffic(self):
        self.player.activate_shield(0.0, self.cfg.shield_duration_ms)
        self.add_traffic()
        _, events = self.resolve()

        self.assertEqual(self.player.power, 100.0)
        self.assertEqual(event_types(events), [EventType.NARROW_ESCAPE])
        self.assertTrue(events[0]["shielded"])

    def test_npc_is_nudged_away(self):
        npc = self.add_traffic()
        npc.avoid_direction = 1
        npc.avoid_offset = 70.0
        self.resolve()
        self.assertEqual(npc.avoid_offset, self.cfg.npc_nudge_limit)

    def test_hit_to_zero_loses(self):
        self.player.power = 5.0
        self.add_traffic()
        hazard = self.add_hazard()
        lost, events = self.resolve()

        self.assertTrue(lost)
        self.assertEqual(self.player.power, 0.0)
        # remaining contacts are skipped once the session is lost
        self.assertTrue(hazard.active)


class TestHazards(CollisionTestCase):

    def test_hazard_ignores_shield(self):
        self.player.activate_shield(0.0, self.cfg.shield_duration_ms)
        hazard = self.add_hazard("light")
        _, events = self.resolve()

        self.assertFalse(hazard.active)
        self.assertEqual(self.player.power, 85.0)
        self.assertEqual(event_types(events), [EventType.DAMAGED, EventType.NARROW_ESCAPE])
        self.assertEqual(events[0]["cause"], "light")

    def test_hazard_consumed_once(self):
        self.add_hazard()
        self.resolve()
        self.resolve()
        self.assertEqual(self.player.power, 85.0)


class TestOrdering(CollisionTestCase):

    def test_coins_before_traffic_before_hazards(self):
        self.add_hazard()
        self.add_traffic()
        self.add_coin()
        _, events = self.resolve()
        self.assertEqual(event_types(events), [
            EventType.SCORED,
            EventType.DAMAGED, EventType.NARROW_ESCAPE,
            EventType.DAMAGED, EventType.NARROW_ESCAPE,
        ])
        self.assertEqual([e["cause"] for e in events if e.type == EventType.DAMAGED],
                         ["traffic", "road_work"])
        self.assertEqual(self.player.power, 75.0)


class TestCollisionMargin(CollisionTestCase):

    config_overrides = {"collision_margin": 20.0}

    def test_margin_forgives_grazes(self):
        npc = self.add_traffic()
        npc.width = 80.0
        # 5 units of overlap with the unshrunk player box
        npc.x = self.player.x + self.player.width / 2 + npc.width / 2 - 5.0
        lost, events = self.resolve()
        self.assertEqual(events, [])
        self.assertEqual(self.player.power, 100.0)

    def test_margin_does_not_apply_to_coins(self):
        coin = self.add_coin()
        coin.x = self.player.x + self.player.width / 2 + coin.width / 2 - 5.0
        self.resolve()
        self.assertFalse(coin.active)


class TestParticleCap(CollisionTestCase):

    def test_particles_capped(self):
        for _ in range(20):
            self.add_hazard()
        self.player.power = 1_000.0
        self.player.max_power = 1_000.0
        self.resolve()
        self.assertEqual(len(self.world.particles), self.cfg.max_particles)


if __name__ == "__main__":
    unittest.main()
