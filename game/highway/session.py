"""
GameSession - the top-level state machine driving the simulation core

    splash -> loading -> playing -> {game_over | lead_form} -> (restart) -> loading ...
                           ^  |
                           |  v
                          paused

Hosts (an arcade window, the gym environment, tests) feed it intents and
elapsed time; it never reads a real clock.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Union

import numpy as np

from .collisions import resolve_collisions
from .config import GameConfig
from .entities import update_player
from .events import EventBus, EventType, GameEvent, Listener
from .utils import make_rng
from .world import World, WorldSnapshot

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    SPLASH = "splash"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    LEAD_FORM = "lead_form"


TERMINAL_STATES = (GameState.GAME_OVER, GameState.LEAD_FORM)


class Intent(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    START = "start"
    PAUSE = "pause"


class GameSession:
    """Explicit state machine exposing handle_input, tick and get_snapshot."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Union[None, int, np.random.Generator] = None,
    ):
        self.config = config if config is not None else GameConfig()
        self.rng = make_rng(rng)
        self.bus = EventBus()

        self.state = GameState.SPLASH
        self.world = World(self.config, self.rng)
        self._loading_ms = 0.0
        self._intents: List[int] = []

    # ----------------------------
    # Collaborator API
    # ----------------------------

    def subscribe(self, listener: Listener):
        """Register a callback for every event; returns an unsubscribe function"""
        return self.bus.subscribe(listener)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_running(self) -> bool:
        return self.state in (GameState.LOADING, GameState.PLAYING)

    def request_lane_change(self, direction: int) -> bool:
        """Queue a lane change for the next tick.

        Returns True when the request was queued. Requests made outside of
        play or while the car is still moving between lanes return False.
        Of several requests queued before one tick only the first applies.
        """
        if direction not in (-1, 1):
            raise ValueError(f"lane change direction must be -1 or +1, got {direction!r}")
        if self.state != GameState.PLAYING or not self.world.player.settled:
            return False
        self._intents.append(direction)
        return True

    def handle_input(self, intent: Intent) -> bool:
        intent = Intent(intent)
        if intent == Intent.LEFT:
            return self.request_lane_change(-1)
        if intent == Intent.RIGHT:
            return self.request_lane_change(1)
        if intent == Intent.START:
            if self.state == GameState.SPLASH or self.is_terminal:
                self.start()
                return True
            return False
        if intent == Intent.PAUSE:
            if self.state == GameState.PLAYING:
                self.pause()
                return True
            if self.state == GameState.PAUSED:
                self.resume()
                return True
            return False
        raise ValueError(f"Unknown intent: {intent}")

    def get_snapshot(self) -> WorldSnapshot:
        return self.world.snapshot(self.state.value)

    # ----------------------------
    # State transitions
    # ----------------------------

    def _set_state(self, new_state: GameState):
        previous = self.state
        self.state = new_state
        logger.info("Game state %s -> %s", previous.value, new_state.value)
        self.bus.emit(EventType.STATE_CHANGED, self.world.elapsed_ms,
                      previous=previous.value, current=new_state.value)

    def start(self):
        """Begin loading a new session (from splash or after a session ended)."""
        if not (self.state == GameState.SPLASH or self.is_terminal):
            raise RuntimeError(f"cannot start a session while {self.state.value}")
        self._loading_ms = 0.0
        self._set_state(GameState.LOADING)

    restart = start

    def pause(self):
        if self.state != GameState.PLAYING:
            raise RuntimeError(f"cannot pause while {self.state.value}")
        self._set_state(GameState.PAUSED)

    def resume(self):
        if self.state != GameState.PAUSED:
            raise RuntimeError(f"cannot resume while {self.state.value}")
        self._set_state(GameState.PLAYING)

    def _enter_playing(self):
        self.world = World(self.config, self.rng)
        self._intents.clear()
        self._set_state(GameState.PLAYING)

    def _win(self):
        self.world.time_remaining_ms = 0.0
        self._set_state(GameState.LEAD_FORM)
        self.bus.emit(EventType.SESSION_WON, self.world.elapsed_ms, score=self.world.player.score)

    def _lose(self):
        self._set_state(GameState.GAME_OVER)
        self.bus.emit(EventType.SESSION_LOST, self.world.elapsed_ms, score=self.world.player.score)

    # ----------------------------
    # Frame update
    # ----------------------------

    def clamp_delta(self, delta_ms: float) -> float:
        if not delta_ms >= 0:
            logger.debug("Dropping invalid frame delta %r", delta_ms)
            return 0.0
        if delta_ms > self.config.max_delta_ms:
            logger.debug("Clamping frame delta %.1fms to %.1fms", delta_ms, self.config.max_delta_ms)
            return self.config.max_delta_ms
        return float(delta_ms)

    def tick(self, delta_ms: float) -> List[GameEvent]:
        """Advance by one frame; returns the events emitted during it."""
        delta_ms = self.clamp_delta(delta_ms)

        if self.state == GameState.LOADING:
            self._loading_ms += delta_ms
            if self._loading_ms >= self.config.loading_duration_ms:
                self._enter_playing()
        elif self.state == GameState.PLAYING:
            self._step(delta_ms)

        return self.bus.drain()

    def _step(self, delta_ms: float):
        world = self.world
        bus = self.bus
        player = world.player

        world.elapsed_ms += delta_ms
        world.time_remaining_ms -= delta_ms
        if world.time_remaining_ms <= 0:
            self._win()
            return

        for stage, multiplier in world.progression.update(world.elapsed_ms):
            bus.emit(EventType.SPEED_BOOST, world.elapsed_ms, multiplier=multiplier, stage=stage.value)

        world.scroll_road(delta_ms)

        for direction in self._intents:
            player.request_lane_change(direction, self.config.lane_count)
        self._intents.clear()

        if update_player(player, delta_ms, world.context()):
            bus.emit(EventType.SHIELD_EXPIRED, world.elapsed_ms)
        if player.power <= 0:
            self._lose()
            return

        world.purge()
        world.spawner.update(delta_ms, world, world.progression.multiplier)
        world.update_entities(delta_ms)

        if resolve_collisions(world, bus):
            self._lose()
            return

        world.update_particles(delta_ms)
