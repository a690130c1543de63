"""Highway module - three-lane arcade driving simulation core"""

from .config import ConfigError, GameConfig
from .events import EventType, GameEvent
from .loop import GameLoop
from .session import GameSession, GameState, Intent
from .world import WorldSnapshot
from .highway_env import HighwayEnv, run_random_episode

__all__ = [
    'ConfigError',
    'GameConfig',
    'EventType',
    'GameEvent',
    'GameLoop',
    'GameSession',
    'GameState',
    'Intent',
    'WorldSnapshot',
    'HighwayEnv',
    'run_random_episode',
]
