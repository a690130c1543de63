"""
GameLoop - turns per-refresh timestamps into session ticks
"""

from __future__ import annotations

import logging
from typing import Optional

from .session import GameSession

logger = logging.getLogger(__name__)


class GameLoop:
    """Frame-driven driver with cancellation.

    Every start() bumps a generation token. A frame callback scheduled by an
    earlier run carries the old token and is dropped, as is any callback
    arriving after stop(). The loop stops itself once the session leaves the
    loading/playing states (ended or paused).
    """

    def __init__(self, session: GameSession):
        self.session = session
        self.running = False
        self.generation = 0
        self._last_ms: Optional[float] = None

    def start(self, now_ms: float) -> int:
        self.generation += 1
        self.running = True
        self._last_ms = now_ms
        logger.debug("Loop started (generation %d)", self.generation)
        return self.generation

    def stop(self):
        if self.running:
            logger.debug("Loop stopped (generation %d)", self.generation)
        self.running = False

    def on_frame(self, now_ms: float, generation: Optional[int] = None) -> bool:
        """Process one display refresh. Returns True if another frame is wanted."""
        if not self.running:
            return False
        if generation is not None and generation != self.generation:
            return False

        delta = now_ms - self._last_ms
        self._last_ms = now_ms
        self.session.tick(delta)

        if not self.session.is_running:
            self.stop()
            return False
        return True
