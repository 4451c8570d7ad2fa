"""
Game entity dataclasses
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class GameState(str, Enum):
    """Coarse screen-level state of the engine"""
    MENU = "menu"
    PLAYING = "playing"
    CHOICE = "choice"
    GAMEOVER = "gameover"


class PickupKind(str, Enum):
    COIN = "coin"
    HEART = "heart"
    STAR = "star"
    CLOCK = "clock"
    PHOENIX = "phoenix"


@dataclass
class Agent:
    """Player-controlled flyer. y is the center used by the hitbox"""
    x: float
    y: float
    velocity: float = 0.0
    width: float = 40.0
    height: float = 30.0
    rotation: float = 0.0  # degrees, display only


@dataclass
class Obstacle:
    """Top/bottom barrier pair with a passable gap"""
    x: float
    gap_y: float
    gap_size: float
    width: float = 60.0
    passed: bool = False

    @property
    def gap_center(self) -> float:
        return self.gap_y + self.gap_size / 2


@dataclass
class Pickup:
    """Collectible entity"""
    x: float
    y: float
    kind: PickupKind
    radius: float = 15.0
    rotation: float = 0.0


@dataclass
class Particle:
    """Cosmetic transient"""
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: Tuple[int, int, int]
    life: int = 30
    max_life: int = 30

    @property
    def alpha(self) -> float:
        return self.life / self.max_life if self.max_life else 0.0


@dataclass
class WorldTier:
    name: str
    threshold: int
    sky: Tuple[int, int, int] = (135, 206, 235)
    pipe: Tuple[int, int, int] = (46, 204, 113)


@dataclass
class UpgradeFlags:
    """Persistent run-scoped modifiers"""
    slow_time: bool = False
    magnetism: bool = False
    double_score: bool = False
    smaller_bird: bool = False
    floaty: bool = False
    wider_gaps: bool = False


@dataclass
class RunState:
    """Everything one run owns. Created at run start, finalized at game over"""
    agent: Agent
    speed: float
    base_gap: float
    score: int = 0
    obstacles_cleared: int = 0
    obstacles_spawned: int = 0
    pickups_collected: int = 0
    combo: int = 0
    last_score_tick: Optional[int] = None
    health: int = 1
    max_health: int = 1
    upgrades: UpgradeFlags = field(default_factory=UpgradeFlags)

    # Effect timers
    shield_active: bool = False
    slow_time_timer: int = 0
    invulnerable_timer: int = 0
    revive_banked: bool = False
    celebration_timer: int = 0
    world_banner_timer: int = 0

    world_index: int = 0
    ticks: int = 0
    pickup_timer: int = 0

    # Entity store
    obstacles: list = field(default_factory=list)
    pickups: list = field(default_factory=list)
    particles: list = field(default_factory=list)

    @property
    def slow_time_active(self) -> bool:
        return self.slow_time_timer > 0

    @property
    def invulnerable(self) -> bool:
        return self.invulnerable_timer > 0


@dataclass
class RunSummary:
    """Final numbers handed to the screen collaborator at game over"""
    score: int
    obstacles_cleared: int
    pickups_collected: int
    high_score: int
    new_high_score: bool = False
