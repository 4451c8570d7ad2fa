"""
Cosmetic particle emission and lifecycle
"""

import random
from typing import List, Tuple

from .entities import Particle

WHITE = (255, 255, 255)
SHIELD_BLUE = (52, 152, 219)
HIT_RED = (231, 76, 60)
REVIVE_ORANGE = (255, 140, 0)
GOLD = (255, 215, 0)

# Emission counts per trigger
FLAP_COUNT = 5
PICKUP_COUNT = 10
SHIELD_COUNT = 15
HIT_COUNT = 20
MILESTONE_COUNT = 20
REVIVE_COUNT = 25
WORLD_COUNT = 30


def emit(particles: List[Particle], x: float, y: float, count: int,
         color: Tuple[int, int, int], rng: random.Random, life: int = 30,
         spread: float = 8.0):
    """Burst of particles with random velocity around (x, y)"""
    for _ in range(count):
        particles.append(Particle(
            x=x,
            y=y,
            vx=(rng.random() - 0.5) * spread,
            vy=(rng.random() - 0.5) * spread,
            size=rng.random() * 6 + 2,
            color=color,
            life=life,
            max_life=life,
        ))


def update_particles(particles: List[Particle]) -> List[Particle]:
    for p in particles:
        p.x += p.vx
        p.y += p.vy
        p.life -= 1
    return [p for p in particles if p.life > 0]
