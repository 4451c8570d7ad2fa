"""
Tests for the GameEngine tick loop, state machine and collaborators.
"""

import copy
import unittest

from flappy_rogue.engine import GameEngine
from flappy_rogue.entities import GameState, Obstacle, Pickup, PickupKind
from flappy_rogue.events import Cue, CueRecorder, ScreenListener
from flappy_rogue.persistence import MemoryStatsStore
from flappy_rogue.upgrades import UPGRADE_POOL, UpgradeId


class RecordingScreen(ScreenListener):
    def __init__(self):
        self.states = []
        self.summaries = []

    def on_state_change(self, state):
        self.states.append(state)

    def on_run_summary(self, summary):
        self.summaries.append(summary)


def make_engine(seed=0, **kwargs):
    audio = CueRecorder()
    screen = RecordingScreen()
    engine = GameEngine(seed=seed, audio=audio, screen=screen, **kwargs)
    return engine, audio, screen


def open_field():
    """An obstacle whose gap spans the whole playfield"""
    return Obstacle(x=300, gap_y=0, gap_size=600, width=60)


def blocking_obstacle(agent_x):
    """An obstacle overlapping the agent with a tiny gap at the very top"""
    return Obstacle(x=agent_x - 20, gap_y=0, gap_size=10, width=60)


def autopilot(engine):
    """Flap when below the next gap center"""
    run = engine.run
    agent = run.agent
    ahead = [o for o in run.obstacles if o.x + o.width >= agent.x - agent.width / 2]
    target = ahead[0].gap_center if ahead else engine.height / 2
    if agent.y > target + 10 and agent.velocity >= 0:
        engine.activate()


# =============================================================================
# 1. STATE MACHINE
# =============================================================================

class TestStateMachine(unittest.TestCase):

    def test_starts_in_menu(self):
        engine, audio, _ = make_engine()
        self.assertEqual(engine.state, GameState.MENU)
        self.assertIsNone(engine.run)
        engine.update()  # nothing to advance
        self.assertIsNone(engine.run)

    def test_activate_outside_play_is_noop(self):
        engine, audio, _ = make_engine()
        self.assertFalse(engine.activate())
        self.assertEqual(audio.cues, [])

    def test_start_run(self):
        stats = MemoryStatsStore(high_score=7, total_runs=2)
        engine, _, screen = make_engine(stats=stats)
        self.assertEqual(engine.high_score, 7)
        engine.start_run()
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(screen.states[-1], GameState.PLAYING)
        self.assertEqual(stats.total_runs, 3)
        self.assertEqual(engine.total_runs, 3)
        self.assertEqual(engine.run.health, 1)
        self.assertEqual(engine.run.agent.y, engine.height / 2)

    def test_show_menu(self):
        engine, _, screen = make_engine()
        engine.start_run()
        engine.show_menu()
        self.assertEqual(engine.state, GameState.MENU)
        self.assertEqual(screen.states[-1], GameState.MENU)
        run_before = copy.deepcopy(engine.run)
        engine.update()
        self.assertEqual(engine.run, run_before)

    def test_unknown_platform(self):
        with self.assertRaises(ValueError):
            GameEngine(platform="console")


# =============================================================================
# 2. TICK LOOP
# =============================================================================

class TestTick(unittest.TestCase):

    def test_flap(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        self.assertTrue(engine.activate())
        self.assertEqual(engine.run.agent.velocity, engine.config["jump_force"])
        self.assertEqual(audio.cues, [Cue.FLAP])
        self.assertEqual(len(engine.run.particles), 5)

    def test_floaty_flap_is_weaker(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.run.upgrades.floaty = True
        engine.activate()
        self.assertAlmostEqual(engine.run.agent.velocity, -5.0 * 0.8)
        self.assertAlmostEqual(engine.gravity, 0.2 * 0.7)

    def test_first_tick_integrates_gravity(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.update()
        self.assertAlmostEqual(engine.run.agent.velocity, 0.2)
        self.assertAlmostEqual(engine.run.agent.y, 300.2)
        self.assertEqual(engine.run.ticks, 1)
        self.assertEqual(len(engine.run.obstacles), 1)

    def test_slow_time_halves_motion(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.run.slow_time_timer = 10
        engine.run.obstacles = [open_field()]
        engine.update()
        self.assertAlmostEqual(engine.run.agent.y, 300.05)
        self.assertAlmostEqual(engine.run.obstacles[0].x, 300 - engine.run.speed * 0.5)
        self.assertEqual(engine.run.slow_time_timer, 9)

    def test_passed_flips_exactly_once(self):
        engine, audio, _ = make_engine(profile={"agent_x": 120})
        engine.start_run()
        run = engine.run
        run.speed = 0.5
        obstacle = Obstacle(x=61, gap_y=0, gap_size=600, width=60)
        run.obstacles = [obstacle]

        engine.update()  # x = 60.5
        self.assertFalse(obstacle.passed)
        engine.update()  # x = 60.0, 60 + 60 is not < 120
        self.assertFalse(obstacle.passed)
        engine.update()  # x = 59.5
        self.assertTrue(obstacle.passed)
        self.assertEqual(run.obstacles_cleared, 1)
        self.assertEqual(run.score, 1)
        self.assertEqual(audio.count(Cue.SCORE), 1)

        for _ in range(5):
            engine.update()
        self.assertEqual(run.obstacles_cleared, 1)
        self.assertEqual(audio.count(Cue.SCORE), 1)

    def test_offscreen_obstacles_removed(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.run.obstacles = [Obstacle(x=-58, gap_y=0, gap_size=600, width=60, passed=True)]
        engine.update()
        self.assertTrue(all(o.x + o.width > 0 for o in engine.run.obstacles))
        self.assertNotIn(-58 - engine.run.speed, [o.x for o in engine.run.obstacles])

    def test_pickup_collected(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.pickups = [Pickup(x=run.agent.x + 10, y=run.agent.y, kind=PickupKind.COIN)]
        engine.update()
        self.assertEqual(run.pickups_collected, 1)
        self.assertEqual(run.score, 5)
        self.assertIn(Cue.POWERUP, audio.cues)

    def test_magnet_pulls_pickups(self):
        engine, _, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.upgrades.magnetism = True
        run.pickups = [Pickup(x=run.agent.x + 120, y=run.agent.y, kind=PickupKind.COIN)]
        start_x = run.pickups[0].x
        engine.update()
        moved = start_x - run.pickups[0].x
        self.assertGreater(moved, run.speed)
        self.assertFalse(hasattr(run.pickups[0], "magnetized"))

    def test_ceiling_is_soft(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.run.agent.y = 1
        engine.run.agent.velocity = -6
        engine.update()
        self.assertEqual(engine.run.agent.y, 0)
        self.assertEqual(engine.run.health, 1)
        self.assertEqual(engine.state, GameState.PLAYING)

    def test_particles_expire(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.activate()
        for _ in range(engine.config["particle_life"]):
            engine.update()
        self.assertEqual(engine.run.particles, [])


# =============================================================================
# 3. DAMAGE THROUGH THE LOOP
# =============================================================================

class TestDamageInLoop(unittest.TestCase):

    def test_shield_absorbs_collision(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.shield_active = True
        run.obstacles = [blocking_obstacle(run.agent.x)]
        engine.update()
        self.assertFalse(run.shield_active)
        self.assertEqual(run.health, 1)
        self.assertGreater(run.invulnerable_timer, 0)
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(audio.count(Cue.HIT), 1)

        # Still overlapping next tick, but invulnerable
        engine.update()
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(audio.count(Cue.HIT), 1)

    def test_fatal_collision_ends_run(self):
        stats = MemoryStatsStore()
        engine, audio, screen = make_engine(stats=stats)
        engine.start_run()
        run = engine.run
        run.score = 12
        run.obstacles_cleared = 9
        run.pickups_collected = 2
        run.obstacles = [blocking_obstacle(run.agent.x)]
        engine.update()

        self.assertEqual(engine.state, GameState.GAMEOVER)
        self.assertEqual(run.health, 0)
        self.assertIn(Cue.DEATH, audio.cues)
        self.assertEqual(screen.states[-1], GameState.GAMEOVER)
        summary = screen.summaries[-1]
        self.assertEqual((summary.score, summary.obstacles_cleared, summary.pickups_collected),
                         (12, 9, 2))
        self.assertTrue(summary.new_high_score)
        self.assertEqual(stats.high_score, 12)
        self.assertEqual(engine.high_score, 12)

    def test_no_mutation_after_game_over(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        engine.run.obstacles = [blocking_obstacle(engine.run.agent.x)]
        engine.update()
        frozen = copy.deepcopy(engine.run)
        cues = list(audio.cues)
        for _ in range(10):
            engine.update()
        self.assertFalse(engine.activate())
        self.assertEqual(engine.run, frozen)
        self.assertEqual(audio.cues, cues)

    def test_revive_keeps_playing(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.revive_banked = True
        run.obstacles = [blocking_obstacle(run.agent.x), open_field()]
        engine.update()
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(run.health, 1)
        self.assertEqual(run.obstacles, [])
        self.assertFalse(run.revive_banked)
        self.assertIn(Cue.REVIVE, audio.cues)

    def test_floor_is_lethal(self):
        engine, _, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.agent.y = engine.height - run.agent.height
        run.agent.velocity = 3
        engine.update()
        self.assertEqual(engine.state, GameState.GAMEOVER)

    def test_floor_with_spare_heart(self):
        engine, _, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.health = run.max_health = 2
        run.agent.y = engine.height - run.agent.height
        run.agent.velocity = 3
        engine.update()
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(run.health, 1)
        self.assertLess(run.agent.y, engine.height / 2 + 5)

    def test_lower_score_keeps_high_score(self):
        stats = MemoryStatsStore(high_score=50)
        engine, _, screen = make_engine(stats=stats)
        engine.start_run()
        engine.run.score = 10
        engine.run.obstacles = [blocking_obstacle(engine.run.agent.x)]
        engine.update()
        self.assertFalse(screen.summaries[-1].new_high_score)
        self.assertEqual(stats.high_score, 50)


# =============================================================================
# 4. UPGRADE CHOICE
# =============================================================================

class TestUpgradeChoice(unittest.TestCase):

    def trigger_offer(self, engine):
        run = engine.run
        run.obstacles_cleared = engine.config["upgrade_every"] - 1
        # Trailing edge crosses the agent this tick
        run.obstacles = [Obstacle(x=run.agent.x - 60 + 1, gap_y=0, gap_size=600, width=60)]
        engine.update()

    def test_offer_after_fifth_clear(self):
        engine, _, screen = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        self.assertEqual(engine.state, GameState.CHOICE)
        self.assertEqual(screen.states[-1], GameState.CHOICE)
        ids = [u.id for u in engine.offer]
        self.assertEqual(len(ids), 3)
        self.assertEqual(len(set(ids)), 3)

    def test_time_keeps_running_during_choice(self):
        engine, _, _ = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        ticks, y = engine.run.ticks, engine.run.agent.y
        engine.update()
        self.assertEqual(engine.run.ticks, ticks + 1)
        self.assertNotEqual(engine.run.agent.y, y)
        self.assertFalse(engine.activate())

    def test_pause_during_choice_option(self):
        engine, _, _ = make_engine(config={"pause_during_choice": True})
        engine.start_run()
        self.trigger_offer(engine)
        ticks = engine.run.ticks
        engine.update()
        self.assertEqual(engine.run.ticks, ticks)

    def test_select_upgrade(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        offered = engine.offer[1]
        chosen = engine.select_upgrade(1)
        self.assertEqual(chosen, offered)
        self.assertEqual(engine.state, GameState.PLAYING)
        self.assertEqual(engine.offer, [])
        self.assertIn(Cue.UPGRADE, audio.cues)

    def test_selection_applies_effect(self):
        engine, _, _ = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        index = next((i for i, u in enumerate(engine.offer) if u.id == UpgradeId.EXTRA_LIFE), None)
        if index is None:
            engine.offer[0] = next(u for u in UPGRADE_POOL if u.id == UpgradeId.EXTRA_LIFE)
            index = 0
        engine.select_upgrade(index)
        self.assertEqual(engine.run.max_health, 2)
        self.assertEqual(engine.run.health, 2)

    def test_bad_index(self):
        engine, _, _ = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        with self.assertRaises(ValueError):
            engine.select_upgrade(3)
        self.assertEqual(engine.state, GameState.CHOICE)

    def test_select_without_offer(self):
        engine, _, _ = make_engine()
        engine.start_run()
        self.assertIsNone(engine.select_upgrade(0))

    def test_death_during_choice(self):
        engine, _, _ = make_engine()
        engine.start_run()
        self.trigger_offer(engine)
        engine.run.obstacles = [blocking_obstacle(engine.run.agent.x)]
        engine.update()
        self.assertEqual(engine.state, GameState.GAMEOVER)
        self.assertEqual(engine.offer, [])


# =============================================================================
# 5. WORLD TRANSITION AND MILESTONES
# =============================================================================

class TestProgressionInLoop(unittest.TestCase):

    def test_world_transition_event(self):
        engine, audio, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.obstacles_cleared = 7
        run.obstacles = [Obstacle(x=run.agent.x - 60 + 1, gap_y=0, gap_size=600, width=60)]
        engine.update()
        self.assertEqual(run.world_index, 1)
        self.assertEqual(engine.current_world.name, "Canyon")
        self.assertGreater(run.world_banner_timer, 0)
        self.assertIn(Cue.UPGRADE, audio.cues)
        self.assertGreaterEqual(len(run.particles), 30)

    def test_milestone_from_clear(self):
        engine, _, _ = make_engine()
        engine.start_run()
        run = engine.run
        run.score = 99
        run.obstacles = [Obstacle(x=run.agent.x - 60 + 1, gap_y=0, gap_size=600, width=60)]
        engine.update()
        self.assertEqual(run.max_health, 2)
        self.assertEqual(run.health, 2)
        self.assertGreater(run.celebration_timer, 0)


# =============================================================================
# 6. WHOLE-RUN PROPERTIES
# =============================================================================

class TestLongRuns(unittest.TestCase):

    def play(self, seed, ticks=4000):
        engine, _, _ = make_engine(seed=seed)
        engine.start_run()
        trace = []
        last_score = 0
        last_world = 0
        min_gap = engine.profile["min_gap"]
        for _ in range(ticks):
            if engine.state == GameState.CHOICE:
                engine.select_upgrade(0)
            elif engine.state == GameState.GAMEOVER:
                engine.start_run()
                last_score = 0
                last_world = 0
            run = engine.run
            autopilot(engine)
            engine.update()

            self.assertGreaterEqual(run.score, last_score)
            self.assertGreaterEqual(run.world_index, last_world)
            self.assertGreaterEqual(run.health, 0)
            self.assertLessEqual(run.health, run.max_health)
            for o in run.obstacles:
                self.assertGreaterEqual(o.gap_size, min_gap)
            last_score = run.score
            last_world = run.world_index
            trace.append((engine.state, run.score, round(run.agent.y, 6), len(run.obstacles)))
        return trace

    def test_invariants_hold(self):
        self.play(seed=3)

    def test_same_seed_same_run(self):
        self.assertEqual(self.play(seed=11, ticks=1500), self.play(seed=11, ticks=1500))


# =============================================================================
# 7. SNAPSHOT
# =============================================================================

class TestSnapshot(unittest.TestCase):

    def test_snapshot_is_a_copy(self):
        engine, _, _ = make_engine()
        engine.start_run()
        engine.update()
        snap = engine.snapshot()
        snap.run.agent.y = -100
        snap.run.obstacles.clear()
        self.assertNotEqual(engine.run.agent.y, -100)
        self.assertEqual(len(engine.run.obstacles), 1)
        self.assertEqual(snap.state, GameState.PLAYING)
        self.assertEqual(snap.world.name, "Meadow")
        self.assertEqual((snap.width, snap.height), (400, 600))

    def test_menu_snapshot(self):
        engine, _, _ = make_engine()
        snap = engine.snapshot()
        self.assertIsNone(snap.run)
        self.assertEqual(snap.state, GameState.MENU)


if __name__ == "__main__":
    unittest.main()
