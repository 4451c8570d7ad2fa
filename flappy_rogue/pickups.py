"""
Pickup effects
"""

from typing import Callable, Dict, Optional

from .entities import PickupKind, RunState

# Per-kind particle colors, used when the pickup is collected
PICKUP_COLORS = {
    PickupKind.COIN: (255, 215, 0),
    PickupKind.HEART: (231, 76, 60),
    PickupKind.STAR: (243, 156, 18),
    PickupKind.CLOCK: (52, 152, 219),
    PickupKind.PHOENIX: (255, 120, 40),
}

COIN_POINTS = 5
STAR_POINTS = 10


def _clock_duration(run: RunState, config: dict) -> int:
    duration = config["slow_time_duration"]
    if run.upgrades.slow_time:
        duration = int(duration * config["slow_time_upgrade_mult"])
    return duration


def _coin(run: RunState, config: dict) -> int:
    return COIN_POINTS


def _heart(run: RunState, config: dict) -> int:
    if run.health < run.max_health:
        run.health += 1
    return 0


def _star(run: RunState, config: dict) -> int:
    run.shield_active = True
    return STAR_POINTS


def _clock(run: RunState, config: dict) -> int:
    run.slow_time_timer = max(run.slow_time_timer, _clock_duration(run, config))
    return 0


def _phoenix(run: RunState, config: dict) -> int:
    run.revive_banked = True
    return 0


# Each handler mutates run state and returns the points it awards
PICKUP_HANDLERS: Dict[PickupKind, Callable[[RunState, dict], int]] = {
    PickupKind.COIN: _coin,
    PickupKind.HEART: _heart,
    PickupKind.STAR: _star,
    PickupKind.CLOCK: _clock,
    PickupKind.PHOENIX: _phoenix,
}


def apply_pickup(run: RunState, kind: PickupKind, config: dict,
                 add_score: Optional[Callable[[RunState, int], bool]] = None) -> int:
    """Apply a collected pickup. Points go through add_score when given"""
    run.pickups_collected += 1
    points = PICKUP_HANDLERS[PickupKind(kind)](run, config)
    if points:
        if add_score is not None:
            add_score(run, points)
        else:
            run.score += points
    return points
