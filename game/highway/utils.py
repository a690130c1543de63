"""
Utility functions for game mechanics
"""

from __future__ import annotations
import math
from typing import Tuple, Union

import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b"""
    return a + (b - a) * t


def box_bounds(x: float, y: float, width: float, height: float) -> Tuple[float, float, float, float]:
    """Return (left, right, top, bottom) of a box centered at (x, y)"""
    hw = width / 2
    hh = height / 2
    return x - hw, x + hw, y - hh, y + hh


def boxes_overlap(a, b, margin: float = 0.0) -> bool:
    """Check if two centered boxes strictly overlap.

    ``margin`` shrinks the first box on each axis by that total amount, so a
    positive value makes contacts more forgiving for ``a``.
    """
    l1, r1, t1, b1 = box_bounds(a.x, a.y, max(0.0, a.width - margin), max(0.0, a.height - margin))
    l2, r2, t2, b2 = box_bounds(b.x, b.y, b.width, b.height)
    return l1 < r2 and r1 > l2 and t1 < b2 and b1 > t2


def frames(delta_ms: float, frame_ms: float = 1000.0 / 60.0) -> float:
    """Express a delta as a (fractional) count of 60 Hz frames"""
    return delta_ms / frame_ms


def decay(value: float, factor_per_frame: float, delta_ms: float) -> float:
    """Apply a per-frame multiplicative decay over an arbitrary delta"""
    return value * math.pow(factor_per_frame, frames(delta_ms))


def make_rng(seed: Union[None, int, np.random.Generator] = None) -> np.random.Generator:
    """Build the shared random generator, or pass an existing one through"""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def choice(rng: np.random.Generator, items):
    """Pick one element uniformly at random"""
    return items[int(rng.integers(0, len(items)))]


def random_sign(rng: np.random.Generator) -> int:
    return 1 if rng.random() > 0.5 else -1
