"""
Tests for game.highway.session -- the splash/loading/playing/ended state machine.
"""

import dataclasses
import unittest

from game.highway.config import GameConfig
from game.highway.events import EventType
from game.highway.session import GameSession, GameState, Intent


def calm_config(**overrides):
    """A road with no traffic or items, so only the clock and power decay act."""
    values = dict(
        max_npcs=0,
        coin_spawn_chance=0.0,
        powerup_spawn_chance=0.0,
        hazard_spawn_chance=0.0,
    )
    values.update(overrides)
    return GameConfig(**values)


def finish_loading(session, delta_ms=100.0):
    while session.state == GameState.LOADING:
        session.tick(delta_ms)


def playing_session(config=None, seed=0):
    session = GameSession(config if config is not None else calm_config(), rng=seed)
    session.start()
    finish_loading(session)
    assert session.state == GameState.PLAYING
    return session


def run_until_terminal(session, delta_ms, limit=10_000):
    events = []
    for _ in range(limit):
        events.extend(session.tick(delta_ms))
        if session.is_terminal:
            break
    return events


class TestStartup(unittest.TestCase):

    def test_starts_on_splash(self):
        session = GameSession(calm_config(), rng=0)
        self.assertEqual(session.state, GameState.SPLASH)
        self.assertEqual(session.tick(1_000.0), [])
        self.assertEqual(session.state, GameState.SPLASH)

    def test_start_intent_begins_loading(self):
        session = GameSession(calm_config(), rng=0)
        self.assertTrue(session.handle_input(Intent.START))
        self.assertEqual(session.state, GameState.LOADING)

    def test_loading_lasts_its_duration(self):
        session = GameSession(calm_config(), rng=0)
        session.start()
        for _ in range(4):
            session.tick(100.0)
        self.assertEqual(session.state, GameState.LOADING)
        events = session.tick(100.0)
        self.assertEqual(session.state, GameState.PLAYING)
        self.assertEqual(events[-1].type, EventType.STATE_CHANGED)
        self.assertEqual(events[-1]["current"], "playing")

    def test_fresh_world_on_play(self):
        session = playing_session()
        snap = session.get_snapshot()
        self.assertEqual(snap.state, "playing")
        self.assertEqual(snap.score, 0)
        self.assertEqual(snap.power, 100.0)
        self.assertEqual(snap.elapsed_ms, 0.0)
        self.assertEqual(snap.time_remaining_ms, 60_000.0)
        self.assertEqual(snap.player.current_lane, 1)


class TestSessionEnd(unittest.TestCase):

    def test_power_runs_out_before_time(self):
        """15 power decaying at 1/s runs dry at 15s of a 30s session."""
        session = playing_session(calm_config(start_power=15.0, session_duration_ms=30_000.0))
        events = run_until_terminal(session, 62.5)

        self.assertEqual(session.state, GameState.GAME_OVER)
        self.assertEqual(session.world.elapsed_ms, 15_000.0)
        self.assertIn(EventType.SESSION_LOST, [e.type for e in events])
        self.assertNotIn(EventType.SESSION_WON, [e.type for e in events])

    def test_time_runs_out_with_power_left(self):
        session = playing_session(calm_config(session_duration_ms=30_000.0))
        events = run_until_terminal(session, 62.5)

        self.assertEqual(session.state, GameState.LEAD_FORM)
        self.assertEqual(session.world.elapsed_ms, 30_000.0)
        self.assertEqual(session.get_snapshot().time_remaining_ms, 0.0)
        types = [e.type for e in events]
        self.assertIn(EventType.SESSION_WON, types)
        self.assertEqual(types.count(EventType.SPEED_BOOST), 1)

    def test_nothing_moves_after_the_end(self):
        session = playing_session(calm_config(session_duration_ms=1_000.0))
        run_until_terminal(session, 100.0)
        elapsed = session.world.elapsed_ms
        self.assertEqual(session.tick(100.0), [])
        self.assertEqual(session.world.elapsed_ms, elapsed)

    def test_restart_resets_everything(self):
        session = playing_session(calm_config(start_power=2.0))
        session.world.player.score = 50
        run_until_terminal(session, 100.0)
        self.assertEqual(session.state, GameState.GAME_OVER)

        self.assertTrue(session.handle_input(Intent.START))
        self.assertEqual(session.state, GameState.LOADING)
        finish_loading(session)

        snap = session.get_snapshot()
        self.assertEqual(snap.state, "playing")
        self.assertEqual(snap.score, 0)
        self.assertEqual(snap.power, 2.0)
        self.assertEqual(snap.elapsed_ms, 0.0)
        self.assertEqual(snap.speed_multiplier, 1.0)


class TestTiming(unittest.TestCase):

    def test_equal_totals_give_equal_results(self):
        """Frame rate does not change the outcome of the same span of time."""
        even = playing_session()
        for _ in range(40):
            even.tick(50.0)

        uneven = playing_session()
        for _ in range(5):
            for delta in (100.0, 25.0, 75.0, 50.0, 12.5, 37.5, 100.0):
                uneven.tick(delta)

        self.assertEqual(even.world.elapsed_ms, 2_000.0)
        self.assertEqual(uneven.world.elapsed_ms, 2_000.0)
        self.assertAlmostEqual(even.world.player.power, 98.0)
        self.assertAlmostEqual(uneven.world.player.power, even.world.player.power)

    def test_large_delta_is_clamped(self):
        session = playing_session()
        session.tick(10_000.0)
        self.assertEqual(session.world.elapsed_ms, session.config.max_delta_ms)

    def test_invalid_delta_is_dropped(self):
        session = playing_session()
        session.tick(-50.0)
        session.tick(float("nan"))
        self.assertEqual(session.world.elapsed_ms, 0.0)

    def test_speed_boost_events(self):
        session = playing_session()
        events = []
        for _ in range(450):
            events.extend(session.tick(100.0))
        boosts = [e for e in events if e.type == EventType.SPEED_BOOST]
        self.assertEqual([b["multiplier"] for b in boosts], [1.1, 1.2])
        self.assertEqual(session.get_snapshot().speed_multiplier, 1.2)


class TestPause(unittest.TestCase):

    def test_pause_freezes_time(self):
        session = playing_session()
        session.tick(100.0)
        self.assertTrue(session.handle_input(Intent.PAUSE))
        self.assertEqual(session.state, GameState.PAUSED)

        session.tick(100.0)
        self.assertEqual(session.world.elapsed_ms, 100.0)

        self.assertTrue(session.handle_input(Intent.PAUSE))
        self.assertEqual(session.state, GameState.PLAYING)
        session.tick(100.0)
        self.assertEqual(session.world.elapsed_ms, 200.0)

    def test_illegal_commands(self):
        session = GameSession(calm_config(), rng=0)
        with self.assertRaises(RuntimeError):
            session.pause()
        with self.assertRaises(RuntimeError):
            session.resume()

        session = playing_session()
        with self.assertRaises(RuntimeError):
            session.start()
        with self.assertRaises(RuntimeError):
            session.resume()

    def test_pause_intent_ignored_outside_play(self):
        session = GameSession(calm_config(), rng=0)
        self.assertFalse(session.handle_input(Intent.PAUSE))
        self.assertEqual(session.state, GameState.SPLASH)


class TestSteering(unittest.TestCase):

    def test_invalid_direction(self):
        session = playing_session()
        with self.assertRaises(ValueError):
            session.request_lane_change(2)
        with self.assertRaises(ValueError):
            session.request_lane_change(0)

    def test_ignored_outside_play(self):
        session = GameSession(calm_config(), rng=0)
        self.assertFalse(session.request_lane_change(-1))
        self.assertFalse(session.handle_input(Intent.LEFT))

    def test_left_intent_moves_player(self):
        session = playing_session()
        self.assertTrue(session.handle_input(Intent.LEFT))
        session.tick(100.0)
        session.tick(100.0)
        player = session.get_snapshot().player
        self.assertEqual(player.target_lane, 0)
        self.assertEqual(player.current_lane, 0)

    def test_string_intents(self):
        session = playing_session()
        self.assertTrue(session.handle_input("right"))
        session.tick(10.0)
        self.assertEqual(session.world.player.target_lane, 2)

    def test_only_first_of_rapid_requests(self):
        session = playing_session()
        session.request_lane_change(-1)
        session.request_lane_change(1)
        session.tick(10.0)
        self.assertEqual(session.world.player.target_lane, 0)

    def test_rejected_while_changing_lanes(self):
        session = playing_session()
        self.assertTrue(session.request_lane_change(-1))
        session.tick(10.0)
        self.assertFalse(session.world.player.settled)
        self.assertFalse(session.request_lane_change(1))
        self.assertFalse(session.handle_input(Intent.RIGHT))
        session.tick(10.0)
        self.assertEqual(session.world.player.target_lane, 0)


class TestObservers(unittest.TestCase):

    def test_subscribe_and_unsubscribe(self):
        session = GameSession(calm_config(), rng=0)
        seen = []
        unsubscribe = session.subscribe(seen.append)
        session.start()
        self.assertEqual([e.type for e in seen], [EventType.STATE_CHANGED])

        unsubscribe()
        finish_loading(session)
        self.assertEqual(len(seen), 1)

    def test_shield_expiry_event(self):
        session = playing_session()
        session.world.player.activate_shield(0.0, 1_000.0)
        events = []
        for _ in range(20):
            events.extend(session.tick(62.5))
        expired = [e for e in events if e.type == EventType.SHIELD_EXPIRED]
        self.assertEqual(len(expired), 1)
        self.assertEqual(expired[0].time_ms, 1_000.0)
        self.assertFalse(session.world.player.shield_active)

    def test_snapshot_is_read_only(self):
        session = playing_session()
        snap = session.get_snapshot()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            snap.score = 100
        snap.player.power = 0.0
        self.assertEqual(session.world.player.power, 100.0)


if __name__ == "__main__":
    unittest.main()
