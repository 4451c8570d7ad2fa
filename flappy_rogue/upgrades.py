"""
Roguelike upgrade pool, offer sampling and effect handlers
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List

from .entities import RunState
from .utils import weighted_sample


class UpgradeId(str, Enum):
    EXTRA_LIFE = "extra_life"
    SHIELD = "shield"
    SLOW_TIME = "slow_time"
    MAGNETISM = "magnetism"
    DOUBLE_SCORE = "double_score"
    SMALLER_BIRD = "smaller_bird"
    FLOATY = "floaty"
    WIDER_GAPS = "wider_gaps"
    SECOND_WIND = "second_wind"


@dataclass(frozen=True)
class Upgrade:
    id: UpgradeId
    name: str
    description: str
    rarity: str


RARITY_WEIGHTS = {
    "common": 10,
    "rare": 6,
    "epic": 3,
    "legendary": 1,
}

UPGRADE_POOL = [
    Upgrade(UpgradeId.EXTRA_LIFE, "Extra Heart", "+1 Max Health", "common"),
    Upgrade(UpgradeId.SHIELD, "Shield", "Block one hit", "rare"),
    Upgrade(UpgradeId.SLOW_TIME, "Slow Motion", "Slow down time briefly", "epic"),
    Upgrade(UpgradeId.MAGNETISM, "Magnet", "Attract power-ups", "rare"),
    Upgrade(UpgradeId.DOUBLE_SCORE, "Double Score", "2x points per pipe", "epic"),
    Upgrade(UpgradeId.SMALLER_BIRD, "Shrink", "Smaller hitbox", "legendary"),
    Upgrade(UpgradeId.FLOATY, "Feather Fall", "Reduced gravity", "common"),
    Upgrade(UpgradeId.WIDER_GAPS, "Wide Gaps", "Larger pipe gaps", "rare"),
    Upgrade(UpgradeId.SECOND_WIND, "Second Wind", "Revive once on death", "legendary"),
]

# Upgrades that only set a flag; offering them twice does nothing
PERSISTENT_FLAGS = {
    UpgradeId.SLOW_TIME: "slow_time",
    UpgradeId.MAGNETISM: "magnetism",
    UpgradeId.DOUBLE_SCORE: "double_score",
    UpgradeId.SMALLER_BIRD: "smaller_bird",
    UpgradeId.FLOATY: "floaty",
    UpgradeId.WIDER_GAPS: "wider_gaps",
}


def available_upgrades(run: RunState, pool=UPGRADE_POOL) -> List[Upgrade]:
    """Pool minus persistent flags the run already owns"""
    result = []
    for upgrade in pool:
        flag = PERSISTENT_FLAGS.get(upgrade.id)
        if flag and getattr(run.upgrades, flag):
            continue
        if upgrade.id == UpgradeId.SECOND_WIND and run.revive_banked:
            continue
        result.append(upgrade)
    return result


def offer_upgrades(run: RunState, rng: random.Random, k: int = 3,
                   pool=UPGRADE_POOL) -> List[Upgrade]:
    """Sample k distinct upgrades, weighted by rarity"""
    candidates = available_upgrades(run, pool)
    weights = [RARITY_WEIGHTS[u.rarity] for u in candidates]
    return weighted_sample(candidates, weights, k, rng)


# ----------------------------
# Effect handlers
# ----------------------------

def _extra_life(run: RunState, config: dict):
    run.max_health += 1
    run.health = run.max_health


def _shield(run: RunState, config: dict):
    run.shield_active = True


def _slow_time(run: RunState, config: dict):
    run.upgrades.slow_time = True
    run.slow_time_timer = max(run.slow_time_timer, config["slow_time_upgrade_duration"])


def _magnetism(run: RunState, config: dict):
    run.upgrades.magnetism = True


def _double_score(run: RunState, config: dict):
    run.upgrades.double_score = True


def _smaller_bird(run: RunState, config: dict):
    run.upgrades.smaller_bird = True
    run.agent.width = config["shrunk_width"]
    run.agent.height = config["shrunk_height"]


def _floaty(run: RunState, config: dict):
    run.upgrades.floaty = True


def _wider_gaps(run: RunState, config: dict):
    run.upgrades.wider_gaps = True


def _second_wind(run: RunState, config: dict):
    run.revive_banked = True


UPGRADE_HANDLERS: Dict[UpgradeId, Callable[[RunState, dict], None]] = {
    UpgradeId.EXTRA_LIFE: _extra_life,
    UpgradeId.SHIELD: _shield,
    UpgradeId.SLOW_TIME: _slow_time,
    UpgradeId.MAGNETISM: _magnetism,
    UpgradeId.DOUBLE_SCORE: _double_score,
    UpgradeId.SMALLER_BIRD: _smaller_bird,
    UpgradeId.FLOATY: _floaty,
    UpgradeId.WIDER_GAPS: _wider_gaps,
    UpgradeId.SECOND_WIND: _second_wind,
}


def apply_upgrade(run: RunState, upgrade_id: UpgradeId, config: dict) -> RunState:
    UPGRADE_HANDLERS[UpgradeId(upgrade_id)](run, config)
    return run
