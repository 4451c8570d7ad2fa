"""
GameEngine - the per-frame simulation core
------------------------------------------
- Fixed-timestep update() driven once per frame by an external loop
- Gravity-driven agent with a single "activate" impulse
- Distance-gated obstacle spawning with a fair gap walk
- Pickups (standalone and in-gap) with an optional magnet pull
- Score, combo, world tiers and a difficulty curve
- Upgrade offers every few obstacles; the simulation keeps ticking while
  a choice is pending
- Shield / invulnerability / health / banked revive damage resolution

Rendering, audio, screens and stats storage are collaborators:
    snapshot()            -> read-only copy for a renderer
    AudioSink.play(cue)   <- fire-and-forget cue events
    ScreenListener        <- state transitions and the final run summary
    StatsStore            <- high score / run count
"""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import ENGINE_CONFIG, WORLD_TIERS, get_profile
from .damage import DamageOutcome, resolve_damage
from .entities import Agent, GameState, Pickup, RunState, RunSummary, WorldTier
from .events import AudioSink, Cue, ScreenListener
from .particles import (
    emit, update_particles, WHITE, SHIELD_BLUE, HIT_RED, REVIVE_ORANGE, GOLD,
    FLAP_COUNT, PICKUP_COUNT, SHIELD_COUNT, HIT_COUNT, MILESTONE_COUNT,
    REVIVE_COUNT, WORLD_COUNT,
)
from .persistence import MemoryStatsStore
from .physics import (
    integrate_agent, clamp_to_ceiling, hit_floor, obstacle_collides,
    pickup_collides, apply_magnetism,
)
from .pickups import PICKUP_COLORS, apply_pickup
from .progression import Progression, build_tiers
from .spawner import Spawner
from .upgrades import Upgrade, apply_upgrade, offer_upgrades


@dataclass
class Snapshot:
    """Read-only view handed to the renderer once per frame"""
    state: GameState
    run: Optional[RunState]
    offer: List[Upgrade] = field(default_factory=list)
    world: Optional[WorldTier] = None
    high_score: int = 0
    total_runs: int = 0
    width: int = 0
    height: int = 0


class GameEngine:
    """Owns one run at a time and advances it one tick per update()"""

    def __init__(
        self,
        platform: str = "desktop",
        seed: Optional[int] = None,
        audio: Optional[AudioSink] = None,
        screen: Optional[ScreenListener] = None,
        stats=None,
        config: Optional[dict] = None,
        profile: Optional[dict] = None,
        tiers: Optional[Sequence[dict]] = None,
        verbose: int = 0,
    ):
        self.profile = get_profile(platform)
        if profile:
            self.profile.update(profile)
        self.config = dict(ENGINE_CONFIG)
        if config:
            self.config.update(config)

        assert self.profile["min_gap"] > 0, "min_gap must be positive"
        assert self.profile["max_speed"] > 0, "max_speed must be positive"
        assert self.config["upgrade_choices"] > 0, "upgrade_choices must be positive"

        self.width = self.profile["width"]
        self.height = self.profile["height"]
        self.spawn_y = self.height / 2
        self.verbose = verbose

        self.tiers = build_tiers(tiers if tiers is not None else WORLD_TIERS)
        self.progression = Progression(self.profile, self.config, self.tiers)

        # Collaborators
        self.audio = audio if audio is not None else AudioSink()
        self.screen = screen if screen is not None else ScreenListener()
        self.stats = stats if stats is not None else MemoryStatsStore()

        stored = self.stats.load()
        self.high_score = stored["high_score"]
        self.total_runs = stored["total_runs"]

        self.state = GameState.MENU
        self.run: Optional[RunState] = None
        self.offer: List[Upgrade] = []
        self.summary: Optional[RunSummary] = None

        self.seed(seed)

    def seed(self, seed: Optional[int] = None):
        """Reseed spawner, upgrade sampling and particle effects independently"""
        master = random.Random(seed)
        self.spawn_rng = random.Random(master.getrandbits(64))
        self.upgrade_rng = random.Random(master.getrandbits(64))
        self.fx_rng = random.Random(master.getrandbits(64))
        self.spawner = Spawner(self.profile, self.config, self.spawn_rng)

    # ----------------------------
    # Public API
    # ----------------------------

    def new_run_state(self) -> RunState:
        speed, base_gap = self.progression.difficulty(0, 0)
        agent = Agent(
            x=self.profile["agent_x"],
            y=self.spawn_y,
            width=self.config["agent_width"],
            height=self.config["agent_height"],
        )
        health = self.config["start_health"]
        return RunState(agent=agent, speed=speed, base_gap=base_gap,
                        health=health, max_health=health)

    def start_run(self) -> RunState:
        self.run = self.new_run_state()
        self.offer = []
        self.summary = None
        self.total_runs = self.stats.record_run_start()

        if self.verbose > 0:
            print(f"[GameEngine] Run {self.total_runs} started "
                  f"({self.profile['name']}, high score {self.high_score})")

        self._set_state(GameState.PLAYING)
        return self.run

    def show_menu(self):
        self.offer = []
        self._set_state(GameState.MENU)

    def activate(self) -> bool:
        """Jump impulse. A no-op unless a run is being played"""
        if self.state != GameState.PLAYING:
            return False
        run = self.run
        run.agent.velocity = self.jump_force
        emit(run.particles, run.agent.x, run.agent.y + run.agent.height / 2,
             FLAP_COUNT, WHITE, self.fx_rng, life=self.config["particle_life"])
        self.audio.play(Cue.FLAP)
        return True

    def select_upgrade(self, index: int) -> Optional[Upgrade]:
        """Resolve a pending choice. Returns None when nothing is pending"""
        if self.state != GameState.CHOICE:
            return None
        if not 0 <= index < len(self.offer):
            raise ValueError(f"Upgrade index {index} out of range (0..{len(self.offer) - 1})")

        upgrade = self.offer[index]
        apply_upgrade(self.run, upgrade.id, self.config)
        self.offer = []
        self.audio.play(Cue.UPGRADE)
        self._set_state(GameState.PLAYING)
        return upgrade

    def update(self):
        """Advance the simulation by one tick"""
        if self.state not in (GameState.PLAYING, GameState.CHOICE):
            return
        if self.state == GameState.CHOICE and self.config["pause_during_choice"]:
            return

        run = self.run
        run.ticks += 1
        time_scale = self.config["slow_time_scale"] if run.slow_time_active else 1.0
        self._tick_timers(run)
        self.progression.expire_combo(run)

        # Agent physics
        integrate_agent(run.agent, self.gravity, time_scale)
        clamp_to_ceiling(run.agent)
        if hit_floor(run.agent, self.height):
            self._take_damage(run)
            if self.state == GameState.GAMEOVER:
                return

        self.spawner.tick(run)

        self._update_obstacles(run, time_scale)
        if self.state == GameState.GAMEOVER:
            return

        self._update_pickups(run, time_scale)
        run.particles = update_particles(run.particles)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            state=self.state,
            run=copy.deepcopy(self.run),
            offer=list(self.offer),
            world=self.current_world,
            high_score=self.high_score,
            total_runs=self.total_runs,
            width=self.width,
            height=self.height,
        )

    # ----------------------------
    # Derived values
    # ----------------------------

    @property
    def gravity(self) -> float:
        g = self.config["gravity"]
        if self.run is not None and self.run.upgrades.floaty:
            g *= self.config["floaty_gravity_mult"]
        return g

    @property
    def jump_force(self) -> float:
        j = self.config["jump_force"]
        if self.run is not None and self.run.upgrades.floaty:
            j *= self.config["floaty_jump_mult"]
        return j

    @property
    def current_world(self) -> WorldTier:
        index = self.run.world_index if self.run is not None else 0
        return self.tiers[index]

    # ----------------------------
    # Core mechanics
    # ----------------------------

    def _tick_timers(self, run: RunState):
        if run.slow_time_timer > 0:
            run.slow_time_timer -= 1
        if run.invulnerable_timer > 0:
            run.invulnerable_timer -= 1
        if run.celebration_timer > 0:
            run.celebration_timer -= 1
        if run.world_banner_timer > 0:
            run.world_banner_timer -= 1

    def _update_obstacles(self, run: RunState, time_scale: float):
        margin = self.config["hitbox_margin"]
        for obstacle in list(run.obstacles):
            obstacle.x -= run.speed * time_scale

            if not obstacle.passed and obstacle.x + obstacle.width < run.agent.x:
                obstacle.passed = True
                self._on_obstacle_cleared(run)

            if obstacle_collides(run.agent, obstacle, margin):
                outcome = self._take_damage(run)
                # Obstacles were cleared or the run ended
                if outcome in (DamageOutcome.HURT, DamageOutcome.REVIVED, DamageOutcome.FATAL):
                    break

        if self.state == GameState.GAMEOVER:
            return
        run.obstacles = [o for o in run.obstacles if o.x + o.width > 0]

    def _update_pickups(self, run: RunState, time_scale: float):
        remaining = []
        for pickup in run.pickups:
            pickup.x -= run.speed * time_scale
            pickup.rotation += 0.05

            if run.upgrades.magnetism:
                apply_magnetism(run.agent, pickup, self.config["magnet_range"],
                                self.config["magnet_strength"])

            if pickup_collides(run.agent, pickup, self.config["pickup_hitbox_scale"]):
                self._collect(run, pickup)
                continue

            if pickup.x + pickup.radius > 0:
                remaining.append(pickup)
        run.pickups = remaining

    def _collect(self, run: RunState, pickup: Pickup):
        apply_pickup(run, pickup.kind, self.config, self._add_score)
        emit(run.particles, pickup.x, pickup.y, PICKUP_COUNT,
             PICKUP_COLORS[pickup.kind], self.fx_rng, life=self.config["particle_life"])
        self.audio.play(Cue.POWERUP)

    def _add_score(self, run: RunState, points: int) -> bool:
        milestone = self.progression.add_score(run, points)
        if milestone:
            self._celebrate(run)
        return milestone

    def _celebrate(self, run: RunState):
        emit(run.particles, run.agent.x, run.agent.y, MILESTONE_COUNT, GOLD,
             self.fx_rng, life=self.config["particle_life"])
        self.audio.play(Cue.POWERUP)

    def _on_obstacle_cleared(self, run: RunState):
        result = self.progression.clear_obstacle(run)
        self.audio.play(Cue.SCORE)

        if result.milestone:
            self._celebrate(run)

        if result.world_changed:
            world = self.tiers[run.world_index]
            emit(run.particles, self.width / 2, self.height / 2, WORLD_COUNT,
                 world.pipe, self.fx_rng, life=self.config["particle_life"] * 2, spread=12.0)
            self.audio.play(Cue.UPGRADE)
            if self.verbose > 0:
                print(f"[GameEngine] Entered world {run.world_index} ({world.name}) "
                      f"at {run.obstacles_cleared} obstacles, speed {run.speed:.2f}")

        if result.offer_upgrade:
            self._present_offer(run)

    def _present_offer(self, run: RunState):
        # One offer at a time; a trigger during a pending choice is dropped
        if self.state == GameState.CHOICE:
            return
        self.offer = offer_upgrades(run, self.upgrade_rng, self.config["upgrade_choices"])
        if not self.offer:
            return
        self._set_state(GameState.CHOICE)

    def _take_damage(self, run: RunState) -> DamageOutcome:
        outcome = resolve_damage(run, self.config, self.height, self.spawn_y,
                                 self.jump_force)
        life = self.config["particle_life"]
        agent = run.agent

        if outcome == DamageOutcome.SHIELDED:
            emit(run.particles, agent.x, agent.y, SHIELD_COUNT, SHIELD_BLUE, self.fx_rng, life=life)
            self.audio.play(Cue.HIT)
        elif outcome == DamageOutcome.HURT:
            emit(run.particles, agent.x, agent.y, HIT_COUNT, HIT_RED, self.fx_rng, life=life)
            self.audio.play(Cue.HIT)
        elif outcome == DamageOutcome.REVIVED:
            emit(run.particles, agent.x, agent.y, REVIVE_COUNT, REVIVE_ORANGE, self.fx_rng, life=life)
            self.audio.play(Cue.REVIVE)
        elif outcome == DamageOutcome.FATAL:
            emit(run.particles, agent.x, agent.y, HIT_COUNT, HIT_RED, self.fx_rng, life=life)
            self.audio.play(Cue.DEATH)
            self._game_over(run)
        return outcome

    def _game_over(self, run: RunState):
        new_high = self.stats.record_score(run.score)
        self.high_score = max(self.high_score, run.score)
        self.offer = []
        self.summary = RunSummary(
            score=run.score,
            obstacles_cleared=run.obstacles_cleared,
            pickups_collected=run.pickups_collected,
            high_score=self.high_score,
            new_high_score=new_high,
        )

        if self.verbose > 0:
            print(f"[GameEngine] Game over: score {run.score}, "
                  f"{run.obstacles_cleared} obstacles, {run.pickups_collected} pickups"
                  + (" (new high score)" if new_high else ""))

        self._set_state(GameState.GAMEOVER)
        self.screen.on_run_summary(self.summary)

    def _set_state(self, state: GameState):
        self.state = state
        self.screen.on_state_change(state)
