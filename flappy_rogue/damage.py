"""
Damage and life resolution
"""

from enum import Enum

from .entities import RunState


class DamageOutcome(str, Enum):
    IGNORED = "ignored"      # invulnerability window absorbed the hit
    SHIELDED = "shielded"    # shield charge consumed
    HURT = "hurt"            # lost a heart, run continues
    REVIVED = "revived"      # banked revive consumed
    FATAL = "fatal"          # run is over


def reset_agent(run: RunState, spawn_y: float):
    run.agent.y = spawn_y
    run.agent.velocity = 0.0
    run.agent.rotation = 0.0


def resolve_damage(run: RunState, config: dict, playfield_height: float,
                   spawn_y: float, jump_force: float) -> DamageOutcome:
    """Resolve one lethal overlap against invulnerability, shield, health and revive.

    Non-fatal hits clear the obstacle list so the player gets breathing room.
    A fatal hit leaves the state untouched apart from health and combo; the
    caller is responsible for the terminal transition.
    """
    if run.invulnerable_timer > 0:
        return DamageOutcome.IGNORED

    if run.shield_active:
        run.shield_active = False
        run.invulnerable_timer = config["short_invulnerability"]
        # Bounce clear of the floor so the next tick doesn't hit it again
        run.agent.y = min(run.agent.y, playfield_height - config["shield_bounce_clearance"])
        run.agent.velocity = jump_force
        return DamageOutcome.SHIELDED

    run.health -= 1
    run.combo = 0

    if run.health <= 0:
        if run.revive_banked:
            run.revive_banked = False
            run.health = 1
            reset_agent(run, spawn_y)
            run.obstacles = []
            run.invulnerable_timer = config["revive_invulnerability"]
            return DamageOutcome.REVIVED
        run.health = 0
        return DamageOutcome.FATAL

    reset_agent(run, spawn_y)
    run.obstacles = []
    run.invulnerable_timer = config["short_invulnerability"]
    return DamageOutcome.HURT
