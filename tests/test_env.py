"""
Tests for game.highway.highway_env -- the Gymnasium wrapper around a session.
These tests run headless (no arcade window is created).
"""

import unittest

import numpy as np

from game.highway import ConfigError, HighwayEnv
from game.highway.highway_env import DEFAULT_REWARDS
from rl.configs.highway_config import ENV_CONFIG, REWARD_CONFIGS


class TestSpaces(unittest.TestCase):

    def setUp(self):
        self.env = HighwayEnv()

    def tearDown(self):
        self.env.close()

    def test_spaces(self):
        self.assertEqual(self.env.action_space.n, 3)
        self.assertEqual(self.env.observation_space.shape, (18,))

    def test_reset(self):
        obs, info = self.env.reset(seed=0)
        self.assertEqual(obs.shape, (18,))
        self.assertEqual(obs.dtype, np.float32)
        self.assertTrue(self.env.observation_space.contains(obs))
        self.assertEqual(info["state"], "playing")
        self.assertEqual(info["score"], 0)
        self.assertEqual(info["step"], 0)

    def test_steps_stay_in_bounds(self):
        self.env.reset(seed=1)
        for i in range(300):
            obs, reward, terminated, truncated, info = self.env.step(i % 3)
            self.assertTrue(self.env.observation_space.contains(obs))
            self.assertIsInstance(reward, float)
            if terminated or truncated:
                break
        self.assertGreater(info["step"], 0)

    def test_steer_left(self):
        self.env.reset(seed=0)
        for _ in range(10):
            self.env.step(1)
        self.assertEqual(self.env.session.world.player.target_lane, 0)


class TestEpisodes(unittest.TestCase):

    def test_same_seed_same_episode(self):
        """Seeding reset makes the whole rollout reproducible."""
        a = HighwayEnv()
        b = HighwayEnv()
        obs_a, _ = a.reset(seed=3)
        obs_b, _ = b.reset(seed=3)
        np.testing.assert_array_equal(obs_a, obs_b)

        actions = np.random.default_rng(11).integers(0, 3, size=400)
        for action in actions:
            obs_a, r_a, term_a, _, _ = a.step(action)
            obs_b, r_b, term_b, _, _ = b.step(action)
            np.testing.assert_array_equal(obs_a, obs_b)
            self.assertEqual(r_a, r_b)
            self.assertEqual(term_a, term_b)
            if term_a:
                break

    def test_short_session_is_won(self):
        env = HighwayEnv(game_config={"session_duration_ms": 2_000.0, "max_npcs": 0,
                                      "hazard_spawn_chance": 0.0})
        env.reset(seed=0)
        total = 0.0
        for _ in range(200):
            _, reward, terminated, truncated, info = env.step(0)
            total += reward
            if terminated:
                break
        self.assertTrue(terminated)
        self.assertFalse(truncated)
        self.assertTrue(info["won"])
        self.assertEqual(info["state"], "lead_form")
        self.assertGreater(total, DEFAULT_REWARDS["R_WIN"] - 1.0)

    def test_max_steps_truncates(self):
        env = HighwayEnv(max_steps=5)
        env.reset(seed=0)
        for _ in range(5):
            _, _, terminated, truncated, _ = env.step(0)
        self.assertFalse(terminated)
        self.assertTrue(truncated)

    def test_damage_is_penalised(self):
        env = HighwayEnv(reward_config={"R_DAMAGE": 1.0, "R_ALIVE": 0.0, "name": "ignored"})
        env.reset(seed=0)
        env._events = {"damage": 10.0}
        self.assertEqual(env._compute_reward(), -10.0)


class TestArguments(unittest.TestCase):

    def test_delta_above_clamp(self):
        with self.assertRaises(ValueError):
            HighwayEnv(dt_ms=250.0)

    def test_unknown_game_config_key(self):
        with self.assertRaises(ConfigError):
            HighwayEnv(game_config={"lane_count": 4})

    def test_unsupported_render_mode(self):
        with self.assertRaises(AssertionError):
            HighwayEnv(render_mode="rgb_array")


class TestTrainingConfigs(unittest.TestCase):
    """The shipped training presets build working environments."""

    def test_reward_presets(self):
        for name, rewards in REWARD_CONFIGS.items():
            env = HighwayEnv(reward_config=rewards, **ENV_CONFIG)
            env.reset(seed=0)
            _, reward, _, _, _ = env.step(0)
            self.assertIsInstance(reward, float, name)
            self.assertEqual(env.rewards["R_WIN"], rewards["R_WIN"])
            env.close()


if __name__ == "__main__":
    unittest.main()
