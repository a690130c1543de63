"""
Game events emitted by the simulation core
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List


class EventType(str, Enum):
    SCORED = "scored"
    COMBO_STREAK = "combo_streak"
    DAMAGED = "damaged"
    SHIELD_ACTIVATED = "shield_activated"
    SHIELD_EXPIRED = "shield_expired"
    NARROW_ESCAPE = "narrow_escape"
    SPEED_BOOST = "speed_boost"
    SESSION_WON = "session_won"
    SESSION_LOST = "session_lost"
    STATE_CHANGED = "state_changed"


@dataclass(frozen=True)
class GameEvent:
    """A single occurrence, with its payload (points, amount, cause, ...)"""
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    time_ms: float = 0.0

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


Listener = Callable[[GameEvent], None]


class EventBus:
    """Synchronous fan-out of events to subscribed collaborators.

    Every emitted event is also kept in ``pending`` until the host drains it,
    which is how the gym environment and the tests read a tick's events.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self.pending: List[GameEvent] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, type: EventType, time_ms: float = 0.0, **data) -> GameEvent:
        event = GameEvent(type=type, data=data, time_ms=time_ms)
        self.pending.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event

    def drain(self) -> List[GameEvent]:
        events, self.pending = self.pending, []
        return events

    def clear(self) -> None:
        self.pending = []
