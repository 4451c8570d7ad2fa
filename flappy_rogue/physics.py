"""
Agent integration and collision tests
"""

from typing import Tuple

from .entities import Agent, Obstacle, Pickup
from .utils import clamp, vec_len, rects_overlap

Box = Tuple[float, float, float, float]


def integrate_agent(agent: Agent, gravity: float, time_scale: float = 1.0):
    """Advance the agent by one tick under gravity"""
    agent.velocity += gravity * time_scale
    agent.y += agent.velocity * time_scale
    agent.rotation = clamp(agent.velocity * 3, -30, 90)


def clamp_to_ceiling(agent: Agent) -> bool:
    """Soft ceiling: stop at y = 0 without damage. Returns True when clamped"""
    if agent.y < 0:
        agent.y = 0
        agent.velocity = 0.0
        return True
    return False


def hit_floor(agent: Agent, playfield_height: float) -> bool:
    return agent.y + agent.height > playfield_height


def agent_box(agent: Agent) -> Box:
    """Full sprite box centered on the agent"""
    return (agent.x - agent.width / 2, agent.y - agent.height / 2,
            agent.width, agent.height)


def agent_hitbox(agent: Agent, margin: float) -> Box:
    """Sprite box inset by a forgiveness margin on every side"""
    return (agent.x - agent.width / 2 + margin,
            agent.y - agent.height / 2 + margin,
            agent.width - margin * 2,
            agent.height - margin * 2)


def obstacle_collides(agent: Agent, obstacle: Obstacle, margin: float) -> bool:
    """True when the inset hitbox touches either half of the obstacle"""
    x, y, w, h = agent_hitbox(agent, margin)
    if not (x < obstacle.x + obstacle.width and x + w > obstacle.x):
        return False
    # Top half
    if y < obstacle.gap_y:
        return True
    # Bottom half
    return y + h > obstacle.gap_y + obstacle.gap_size


def pickup_collides(agent: Agent, pickup: Pickup, scale: float) -> bool:
    """Generous box test: enlarged pickup box against the full agent box"""
    half = pickup.radius * scale
    ax, ay, aw, ah = agent_box(agent)
    return rects_overlap(ax, ay, aw, ah,
                         pickup.x - half, pickup.y - half, half * 2, half * 2)


def in_magnet_range(agent: Agent, pickup: Pickup, magnet_range: float) -> bool:
    return vec_len(agent.x - pickup.x, agent.y - pickup.y) < magnet_range


def apply_magnetism(agent: Agent, pickup: Pickup, magnet_range: float,
                    strength: float) -> bool:
    """Pull a nearby pickup a fraction of the way toward the agent"""
    if not in_magnet_range(agent, pickup, magnet_range):
        return False
    pickup.x += (agent.x - pickup.x) * strength
    pickup.y += (agent.y - pickup.y) * strength
    return True
