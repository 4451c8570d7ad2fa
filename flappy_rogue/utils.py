"""
Utility functions for game mechanics
"""

from __future__ import annotations
import math
import random
from typing import Optional, Sequence, List
import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def vec_len(x: float, y: float) -> float:
    """Calculate vector length (magnitude)"""
    return math.hypot(x, y)


def rects_overlap(ax, ay, aw, ah, bx, by, bw, bh) -> bool:
    """Axis-aligned rectangle intersection (x, y is the top-left corner)"""
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def weighted_index(weights: Sequence[float], rng: random.Random) -> int:
    """Cumulative-weight draw. Returns the index of the chosen weight"""
    total = sum(weights)
    roll = rng.random() * total
    acc = 0.0
    for i, w in enumerate(weights):
        acc += w
        if roll < acc:
            return i
    return len(weights) - 1


def weighted_sample(items: Sequence, weights: Sequence[float], k: int,
                    rng: random.Random) -> List:
    """Draw up to k distinct items without replacement, weighted"""
    pool = list(items)
    pool_weights = list(weights)
    picked = []
    while pool and len(picked) < k:
        i = weighted_index(pool_weights, rng)
        picked.append(pool.pop(i))
        pool_weights.pop(i)
    return picked


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)
