"""
Difficulty progression: a one-way, time-gated speed multiplier
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Tuple

from .config import GameConfig

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    BASE = "base"
    BOOSTED_20S = "boosted_20s"
    BOOSTED_40S = "boosted_40s"


class Progression:
    """Latched speed boosts.

    Each boost fires at most once per session. The multiplier only affects
    entities spawned after it changes.
    """

    def __init__(self, config: GameConfig):
        self.config = config
        self.reset()

    def reset(self):
        self.stage = Stage.BASE
        self.multiplier = self.config.base_speed_multiplier
        self.boost_1_applied = False
        self.boost_2_applied = False

    def update(self, elapsed_ms: float) -> List[Tuple[Stage, float]]:
        """Apply any boost whose threshold has been reached.

        Returns the (stage, multiplier) transitions made by this call, in
        order. Usually empty; a single long step can cross both thresholds.
        """
        cfg = self.config
        changed = []

        if elapsed_ms >= cfg.boost_1_at_ms and not self.boost_1_applied:
            self.boost_1_applied = True
            self.stage = Stage.BOOSTED_20S
            self.multiplier = cfg.boost_1_multiplier
            changed.append((self.stage, self.multiplier))
            logger.info("Speed multiplier raised to %.2f at %.1fs", self.multiplier, elapsed_ms / 1000)

        if elapsed_ms >= cfg.boost_2_at_ms and not self.boost_2_applied:
            self.boost_2_applied = True
            self.stage = Stage.BOOSTED_40S
            self.multiplier = cfg.boost_2_multiplier
            changed.append((self.stage, self.multiplier))
            logger.info("Speed multiplier raised to %.2f at %.1fs", self.multiplier, elapsed_ms / 1000)

        return changed
