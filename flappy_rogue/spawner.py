"""
Procedural obstacle and pickup spawning
"""

from __future__ import annotations

import random
from typing import Optional, List

from .entities import Obstacle, Pickup, PickupKind, RunState
from .utils import clamp, weighted_index


class Spawner:
    """Distance-gated obstacle spawner with a fairness walk on gap placement"""

    def __init__(self, profile: dict, config: dict, rng: Optional[random.Random] = None):
        self.profile = profile
        self.config = config
        self.rng = rng if rng is not None else random.Random()

        self.width = profile["width"]
        self.height = profile["height"]

        weights = config["pickup_weights"]
        self.pickup_kinds: List[PickupKind] = [PickupKind(k) for k in weights]
        self.pickup_weights: List[float] = [weights[k] for k in weights]

    # ----------------------------
    # Obstacles
    # ----------------------------

    def spawn_distance(self, cleared: int) -> float:
        reduction = min(cleared * self.config["distance_step"],
                        self.config["distance_reduction_cap"])
        return self.profile["pipe_distance"] - reduction

    def should_spawn(self, run: RunState) -> bool:
        if not run.obstacles:
            return True
        last = run.obstacles[-1]
        return last.x < self.width - self.spawn_distance(run.obstacles_cleared)

    def gap_size(self, run: RunState) -> float:
        size = run.base_gap
        if run.upgrades.wider_gaps:
            size += self.config["wider_gaps_bonus"]
        jitter = self.config["gap_jitter"]
        size += self.rng.uniform(-jitter, jitter)
        return max(size, self.profile["min_gap"])

    def gap_bounds(self, gap_size: float):
        lo = self.config["margin_top"]
        hi = self.height - gap_size - self.config["margin_bottom"]
        # A gap taller than the safe band still has to start inside the playfield
        return lo, max(lo, hi)

    def place_gap(self, run: RunState, gap_size: float) -> float:
        """Top edge of the gap for the next obstacle"""
        lo, hi = self.gap_bounds(gap_size)
        previous = run.obstacles[-1] if run.obstacles else None

        if run.obstacles_spawned < self.config["training_obstacles"]:
            jitter = self.config["training_jitter"]
            center = self.height / 2 + self.rng.uniform(-jitter, jitter)
            gap_y = center - gap_size / 2
        elif previous is not None:
            max_step = min(
                self.config["base_step"] + run.obstacles_cleared * self.config["step_growth"],
                self.config["max_step"],
            )
            center = previous.gap_center + self.rng.uniform(-max_step, max_step)
            gap_y = center - gap_size / 2
        else:
            gap_y = self.rng.uniform(lo, hi)

        return clamp(gap_y, lo, hi)

    def spawn_obstacle(self, run: RunState) -> Obstacle:
        gap_size = self.gap_size(run)
        gap_y = self.place_gap(run, gap_size)
        obstacle = Obstacle(
            x=self.width,
            gap_y=gap_y,
            gap_size=gap_size,
            width=self.config["pipe_width"],
        )
        run.obstacles.append(obstacle)
        run.obstacles_spawned += 1

        if self.rng.random() < self.config["pickup_chance"]:
            self.spawn_pickup(run, obstacle.x + obstacle.width / 2, obstacle.gap_center)

        return obstacle

    # ----------------------------
    # Pickups
    # ----------------------------

    def roll_pickup_kind(self) -> PickupKind:
        return self.pickup_kinds[weighted_index(self.pickup_weights, self.rng)]

    def spawn_pickup(self, run: RunState, x: float, y: float) -> Pickup:
        pickup = Pickup(x=x, y=y, kind=self.roll_pickup_kind(),
                        radius=self.config["pickup_radius"])
        run.pickups.append(pickup)
        return pickup

    def spawn_standalone(self, run: RunState) -> Optional[Pickup]:
        """Free-floating pickup on a timer, gated by the same spawn chance"""
        run.pickup_timer += 1
        if run.pickup_timer < self.config["standalone_pickup_interval"]:
            return None
        if self.rng.random() >= self.config["pickup_chance"]:
            return None
        run.pickup_timer = 0
        radius = self.config["pickup_radius"]
        y = self.rng.uniform(self.config["margin_top"],
                             self.height - self.config["margin_bottom"])
        return self.spawn_pickup(run, self.width + radius, y)

    def tick(self, run: RunState) -> Optional[Obstacle]:
        """Run both spawn gates once. Returns the new obstacle, if any"""
        obstacle = None
        if self.should_spawn(run):
            obstacle = self.spawn_obstacle(run)
        self.spawn_standalone(run)
        return obstacle
