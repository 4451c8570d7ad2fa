"""
Score, combo, world tiers and the difficulty curve
"""

from dataclasses import dataclass
from typing import List, Sequence

from .entities import RunState, WorldTier


@dataclass
class ClearResult:
    """What happened when one obstacle was cleared"""
    points: int
    combo: int
    milestone: bool = False
    world_changed: bool = False
    offer_upgrade: bool = False


def build_tiers(tier_configs: Sequence[dict]) -> List[WorldTier]:
    tiers = [WorldTier(**t) for t in tier_configs]
    thresholds = [t.threshold for t in tiers]
    assert thresholds == sorted(thresholds), "World tier thresholds must be ascending"
    return tiers


def tier_index(tiers: Sequence[WorldTier], cleared: int) -> int:
    """Highest tier whose threshold has been reached"""
    index = 0
    for i, tier in enumerate(tiers):
        if tier.threshold <= cleared:
            index = i
    return index


class Progression:
    """Applies the per-clear bookkeeping to a RunState"""

    def __init__(self, profile: dict, config: dict, tiers: Sequence[WorldTier]):
        self.profile = profile
        self.config = config
        self.tiers = list(tiers)

    def difficulty(self, cleared: int, world: int):
        """(speed, base_gap) for a given progress, each capped independently"""
        speed = (self.profile["base_speed"]
                 + cleared * self.config["speed_step"]
                 + world * self.config["tier_speed_step"])
        speed = min(speed, self.profile["max_speed"])

        gap = (self.profile["start_gap"]
               - cleared * self.config["gap_step"]
               - world * self.config["tier_gap_step"])
        gap = max(gap, self.profile["min_base_gap"])
        return speed, gap

    def add_score(self, run: RunState, points: int) -> bool:
        """Add points. Returns True when a milestone boundary was crossed"""
        if points <= 0:
            return False
        step = self.config["milestone_points"]
        before = run.score // step
        run.score += points
        if run.score // step > before:
            run.max_health += 1
            run.health = min(run.health + 1, run.max_health)
            run.celebration_timer = self.config["celebration_duration"]
            return True
        return False

    def update_combo(self, run: RunState) -> int:
        window = self.config["combo_window"]
        if run.last_score_tick is not None and run.ticks - run.last_score_tick < window:
            run.combo += 1
        else:
            run.combo = 1
        run.last_score_tick = run.ticks
        return run.combo

    def expire_combo(self, run: RunState):
        """Drop a combo that has gone stale"""
        if run.combo > 0 and run.last_score_tick is not None:
            if run.ticks - run.last_score_tick >= self.config["combo_window"]:
                run.combo = 0

    def clear_obstacle(self, run: RunState) -> ClearResult:
        run.obstacles_cleared += 1
        combo = self.update_combo(run)

        base = 2 if run.upgrades.double_score else 1
        points = base + combo // self.config["combo_divisor"]
        milestone = self.add_score(run, points)

        world = tier_index(self.tiers, run.obstacles_cleared)
        world_changed = world > run.world_index
        if world_changed:
            run.world_index = world
            run.world_banner_timer = self.config["world_banner_duration"]

        run.speed, run.base_gap = self.difficulty(run.obstacles_cleared, run.world_index)

        every = self.config["upgrade_every"]
        offer = bool(every) and run.obstacles_cleared % every == 0

        return ClearResult(points=points, combo=combo, milestone=milestone,
                           world_changed=world_changed, offer_upgrade=offer)
