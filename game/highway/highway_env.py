"""
HighwayEnv - the lane driving game as a Gymnasium environment
-------------------------------------------------------------
- GameSession for simulation (the same core a human player drives)
- Gymnasium API
- Discrete action space: 0 keep lane, 1 steer left, 2 steer right
- Vector observation: player state + nearest traffic/coin/powerup/hazard per lane
- Reward shaped from the session's events (score, damage, win/loss)

Install:
    pip install gymnasium arcade numpy

Quick test:
    python -m game.highway.highway_env
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .config import GameConfig
from .events import EventType, GameEvent
from .session import GameSession, GameState
from .utils import clamp

DEFAULT_REWARDS = {
    "R_POINT": 0.05,     # per score point
    "R_DAMAGE": 0.1,     # per unit of power lost
    "R_ALIVE": 0.001,    # per step survived
    "R_WIN": 5.0,
    "R_LOSS": 5.0,
}


class HighwayEnv(gym.Env):
    """Three-lane traffic dodging environment"""

    metadata = {"render_modes": ["human"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        dt_ms: float = 1000 / 30,
        max_steps: Optional[int] = None,
        game_config: Union[None, GameConfig, Mapping[str, Any]] = None,
        reward_config: Optional[Mapping[str, float]] = None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Unsupported render mode: {render_mode}"
        self.render_mode = render_mode

        if game_config is None:
            game_config = GameConfig()
        elif not isinstance(game_config, GameConfig):
            game_config = GameConfig.from_dict(game_config)
        self.game_config = game_config

        if dt_ms <= 0 or dt_ms > game_config.max_delta_ms:
            raise ValueError(f"dt_ms must be within (0, {game_config.max_delta_ms}], got {dt_ms}")
        self.dt_ms = dt_ms
        self.max_steps = max_steps

        self.rewards = dict(DEFAULT_REWARDS)
        if reward_config:
            self.rewards.update({k: v for k, v in reward_config.items() if k.startswith("R_")})

        self.action_space = spaces.Discrete(3)

        # Player: lane(1) lane progress(1) power(1) shield(1) time left(1) speed(1)
        # Per lane: nearest traffic, coin, powerup, hazard ahead (4)
        obs_dim = 6 + self.game_config.lane_count * 4
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self.session: Optional[GameSession] = None
        self._window = None
        self._step_count = 0
        self._events: Dict[str, float] = {}

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)

        self._step_count = 0
        self.session = GameSession(self.game_config, rng=self.np_random)
        self.session.start()
        while self.session.state == GameState.LOADING:
            self.session.tick(self.dt_ms)

        obs = self._get_obs()
        info = self._get_info()
        return obs, info

    def step(self, action):
        assert self.session is not None, "Call reset() before step()"
        action = int(action)

        if action == 1:
            self.session.request_lane_change(-1)
        elif action == 2:
            self.session.request_lane_change(1)

        events = self.session.tick(self.dt_ms)
        self._events = self._count_events(events)

        reward = self._compute_reward()

        terminated = self.session.is_terminal
        self._step_count += 1
        truncated = self.max_steps is not None and self._step_count >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    @staticmethod
    def _count_events(events: List[GameEvent]) -> Dict[str, float]:
        counts = {"points": 0.0, "damage": 0.0, "won": 0.0, "lost": 0.0}
        for event in events:
            if event.type == EventType.SCORED:
                counts["points"] += event["points"]
            elif event.type == EventType.DAMAGED:
                counts["damage"] += event["amount"]
            elif event.type == EventType.SESSION_WON:
                counts["won"] = 1.0
            elif event.type == EventType.SESSION_LOST:
                counts["lost"] = 1.0
        return counts

    def _nearest_ahead(self, objects, lane: int, player_y: float) -> float:
        """Map the gap to the nearest object in a lane onto [-1, 1]; 1 means clear"""
        height = self.game_config.height
        best = None
        for obj in objects:
            if obj.lane != lane:
                continue
            gap = player_y - obj.y
            if gap < -obj.height:
                continue
            if best is None or gap < best:
                best = gap
        if best is None:
            return 1.0
        return clamp((best / height) * 2 - 1, -1.0, 1.0)

    def _get_obs(self) -> np.ndarray:
        cfg = self.game_config
        snap = self.session.get_snapshot()
        player = snap.player

        lane = player.target_lane / max(1, cfg.lane_count - 1)
        shield_left = 0.0
        if snap.shield_active:
            shield_left = clamp((player.shield_expiry - snap.elapsed_ms) / cfg.shield_duration_ms, 0.0, 1.0)
        time_left = snap.time_remaining_ms / cfg.session_duration_ms
        speed = (snap.speed_multiplier - cfg.base_speed_multiplier) / max(
            1e-6, cfg.boost_2_multiplier - cfg.base_speed_multiplier)

        obs_parts = [lane * 2 - 1,
                     player.lane_change_progress * 2 - 1,
                     (snap.power / snap.max_power) * 2 - 1,
                     shield_left * 2 - 1,
                     time_left * 2 - 1,
                     clamp(speed, 0.0, 1.0) * 2 - 1]

        for i in range(cfg.lane_count):
            obs_parts += [
                self._nearest_ahead(snap.npcs, i, player.y),
                self._nearest_ahead(snap.coins, i, player.y),
                self._nearest_ahead(snap.powerups, i, player.y),
                self._nearest_ahead(snap.hazards, i, player.y),
            ]

        obs = np.clip(np.array(obs_parts, dtype=np.float32), -1.0, 1.0)
        return obs

    def _compute_reward(self) -> float:
        R = self.rewards
        reward = 0.0

        reward += R["R_POINT"] * self._events.get("points", 0.0)
        reward -= R["R_DAMAGE"] * self._events.get("damage", 0.0)
        reward += R["R_ALIVE"]

        if self._events.get("won", 0.0):
            reward += R["R_WIN"]
        if self._events.get("lost", 0.0):
            reward -= R["R_LOSS"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        world = self.session.world
        return {
            "state": self.session.state.value,
            "score": world.player.score,
            "power": world.player.power,
            "won": self.session.state == GameState.LEAD_FORM,
            "coins_collected": world.stats["coins_collected"],
            "powerups_collected": world.stats["powerups_collected"],
            "damage_taken": world.stats["damage_taken"],
            "num_npcs": len(world.npcs),
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            # arcade opens a display on import, keep it out of headless runs
            from .window import HighwayWindow
            self._window = HighwayWindow(self.session)

        self._window.session = self.session
        self._window.dispatch_events()
        self._window.on_draw()
        self._window.flip()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: Optional[int] = 42):
    """Run a random episode for testing"""
    env = HighwayEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

    print(f"Random episode return: {total:.2f} "
          f"(state={info['state']}, score={info['score']}, power={info['power']:.1f})")
    env.close()
    return total


if __name__ == "__main__":
    run_random_episode(render=True)
