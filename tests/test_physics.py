"""
Tests for agent integration and collision geometry.
"""

import unittest

from flappy_rogue.entities import Agent, Obstacle, Pickup, PickupKind
from flappy_rogue.physics import (
    integrate_agent, clamp_to_ceiling, hit_floor, agent_box, agent_hitbox,
    obstacle_collides, pickup_collides, apply_magnetism, in_magnet_range,
)


# =============================================================================
# 1. INTEGRATION
# =============================================================================

class TestIntegration(unittest.TestCase):

    def test_single_tick_from_rest(self):
        """y=300, v=0, gravity 0.2, scale 1 gives v=0.2, y=300.2."""
        agent = Agent(x=80, y=300)
        integrate_agent(agent, gravity=0.2, time_scale=1.0)
        self.assertAlmostEqual(agent.velocity, 0.2)
        self.assertAlmostEqual(agent.y, 300.2)

    def test_half_time_scale(self):
        agent = Agent(x=80, y=300)
        integrate_agent(agent, gravity=0.2, time_scale=0.5)
        self.assertAlmostEqual(agent.velocity, 0.1)
        self.assertAlmostEqual(agent.y, 300.05)

    def test_rotation_is_clamped(self):
        agent = Agent(x=80, y=300, velocity=50)
        integrate_agent(agent, gravity=0.2)
        self.assertEqual(agent.rotation, 90)

        agent = Agent(x=80, y=300, velocity=-20)
        integrate_agent(agent, gravity=0.2)
        self.assertEqual(agent.rotation, -30)

    def test_rotation_tracks_velocity(self):
        agent = Agent(x=80, y=300, velocity=2.0)
        integrate_agent(agent, gravity=0.0)
        self.assertAlmostEqual(agent.rotation, 6.0)


# =============================================================================
# 2. BOUNDARIES
# =============================================================================

class TestBoundaries(unittest.TestCase):

    def test_ceiling_clamps_without_damage(self):
        agent = Agent(x=80, y=-5, velocity=-3)
        self.assertTrue(clamp_to_ceiling(agent))
        self.assertEqual(agent.y, 0)
        self.assertEqual(agent.velocity, 0)

    def test_ceiling_leaves_inside_agent_alone(self):
        agent = Agent(x=80, y=10, velocity=-3)
        self.assertFalse(clamp_to_ceiling(agent))
        self.assertEqual(agent.y, 10)
        self.assertEqual(agent.velocity, -3)

    def test_floor_breach(self):
        agent = Agent(x=80, y=570, height=30)
        self.assertFalse(hit_floor(agent, 600))
        agent.y = 570.5
        self.assertTrue(hit_floor(agent, 600))


# =============================================================================
# 3. OBSTACLE COLLISION
# =============================================================================

class TestObstacleCollision(unittest.TestCase):

    def setUp(self):
        # Hitbox with margin 5: x 105..135, y 290..310
        self.agent = Agent(x=120, y=300, width=40, height=30)

    def test_hitbox_is_inset(self):
        self.assertEqual(agent_box(self.agent), (100, 285, 40, 30))
        self.assertEqual(agent_hitbox(self.agent, 5), (105, 290, 30, 20))

    def test_inside_gap_is_safe(self):
        obstacle = Obstacle(x=100, gap_y=250, gap_size=100)
        self.assertFalse(obstacle_collides(self.agent, obstacle, 5))

    def test_top_half(self):
        obstacle = Obstacle(x=100, gap_y=295, gap_size=100)
        self.assertTrue(obstacle_collides(self.agent, obstacle, 5))

    def test_bottom_half(self):
        obstacle = Obstacle(x=100, gap_y=200, gap_size=100)
        self.assertTrue(obstacle_collides(self.agent, obstacle, 5))

    def test_no_horizontal_overlap(self):
        obstacle = Obstacle(x=200, gap_y=0, gap_size=10)
        self.assertFalse(obstacle_collides(self.agent, obstacle, 5))
        obstacle = Obstacle(x=40, gap_y=0, gap_size=10)  # ends at 100 < 105
        self.assertFalse(obstacle_collides(self.agent, obstacle, 5))

    def test_margin_forgives_sprite_overlap(self):
        """Sprite top (285) is above the gap but the inset box (290) is not."""
        obstacle = Obstacle(x=100, gap_y=287, gap_size=100)
        self.assertFalse(obstacle_collides(self.agent, obstacle, 5))
        self.assertTrue(obstacle_collides(self.agent, obstacle, 0))


# =============================================================================
# 4. PICKUPS
# =============================================================================

class TestPickupCollision(unittest.TestCase):

    def setUp(self):
        # Full box x 100..140, y 285..315
        self.agent = Agent(x=120, y=300, width=40, height=30)

    def test_enlarged_box_reaches(self):
        # radius 15 * 1.4 = 21 half-extent: box 139..181
        pickup = Pickup(x=160, y=300, kind=PickupKind.COIN, radius=15)
        self.assertTrue(pickup_collides(self.agent, pickup, 1.4))

    def test_just_out_of_reach(self):
        pickup = Pickup(x=162, y=300, kind=PickupKind.COIN, radius=15)
        self.assertFalse(pickup_collides(self.agent, pickup, 1.4))

    def test_nominal_box_is_smaller(self):
        pickup = Pickup(x=160, y=300, kind=PickupKind.COIN, radius=15)
        self.assertFalse(pickup_collides(self.agent, pickup, 1.0))

    def test_vertical_reach(self):
        pickup = Pickup(x=120, y=335, kind=PickupKind.STAR, radius=15)
        self.assertTrue(pickup_collides(self.agent, pickup, 1.4))
        pickup.y = 337
        self.assertFalse(pickup_collides(self.agent, pickup, 1.4))


class TestMagnetism(unittest.TestCase):

    def test_pulls_nearby_pickup(self):
        agent = Agent(x=80, y=300)
        pickup = Pickup(x=180, y=300, kind=PickupKind.COIN)
        self.assertTrue(apply_magnetism(agent, pickup, 150, 0.05))
        self.assertAlmostEqual(pickup.x, 175.0)
        self.assertAlmostEqual(pickup.y, 300.0)
        self.assertTrue(in_magnet_range(agent, pickup, 150))

    def test_ignores_distant_pickup(self):
        agent = Agent(x=80, y=300)
        pickup = Pickup(x=300, y=300, kind=PickupKind.COIN)
        self.assertFalse(apply_magnetism(agent, pickup, 150, 0.05))
        self.assertEqual(pickup.x, 300)
        self.assertEqual(pickup.y, 300)
        self.assertFalse(in_magnet_range(agent, pickup, 150))


if __name__ == "__main__":
    unittest.main()
