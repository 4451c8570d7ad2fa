"""
Game configuration
Platform profiles, engine tuning and world tiers
"""

# ==============================================================================
# PLATFORM PROFILES
# Playfield size and the pacing constants that depend on it
# ==============================================================================

PLATFORM_DESKTOP = {
    "name": "desktop",
    "width": 400,
    "height": 600,
    "agent_x": 80,
    "pipe_distance": 220,    # horizontal spacing between obstacles (px)
    "min_gap": 120,          # hard floor for any spawned gap (px)
    "start_gap": 175,        # base gap at run start
    "min_base_gap": 135,     # floor of the difficulty curve (before jitter/bonus)
    "base_speed": 2.5,       # px per tick
    "max_speed": 5.5,
}

PLATFORM_MOBILE = {
    "name": "mobile",
    "width": 360,
    "height": 640,
    "agent_x": 72,
    "pipe_distance": 240,
    "min_gap": 130,
    "start_gap": 185,
    "min_base_gap": 145,
    "base_speed": 2.2,
    "max_speed": 5.0,
}

PLATFORM_PROFILES = {
    "desktop": PLATFORM_DESKTOP,
    "mobile": PLATFORM_MOBILE,
}

# ==============================================================================
# ENGINE TUNING
# All timers are in ticks (60 ticks ~ 1 second)
# ==============================================================================

ENGINE_CONFIG = {
    # Agent / physics
    "agent_width": 40,
    "agent_height": 30,
    "gravity": 0.2,
    "jump_force": -5.0,
    "floaty_gravity_mult": 0.7,
    "floaty_jump_mult": 0.8,
    "slow_time_scale": 0.5,
    "hitbox_margin": 5,           # forgiveness inset on the obstacle hitbox
    "pickup_hitbox_scale": 1.4,   # pickup hitbox half-extent = radius * scale
    "magnet_range": 150.0,
    "magnet_strength": 0.05,
    "shrunk_width": 30,
    "shrunk_height": 22,

    # Obstacles
    "pipe_width": 60,
    "distance_step": 2.0,             # spacing tightened per obstacle cleared
    "distance_reduction_cap": 40.0,
    "gap_jitter": 10.0,
    "wider_gaps_bonus": 30.0,
    "margin_top": 60,
    "margin_bottom": 80,
    "training_obstacles": 3,          # first spawns sit near the vertical center
    "training_jitter": 30.0,
    "base_step": 80.0,                # max gap-center walk between obstacles
    "step_growth": 2.0,
    "max_step": 160.0,

    # Pickups
    "pickup_radius": 15,
    "pickup_chance": 0.3,
    "pickup_weights": {"coin": 40, "heart": 25, "star": 15, "clock": 15, "phoenix": 5},
    "standalone_pickup_interval": 150,

    # Progression
    "combo_window": 120,
    "combo_divisor": 3,
    "milestone_points": 100,
    "upgrade_every": 5,
    "upgrade_choices": 3,
    "pause_during_choice": False,
    "speed_step": 0.04,
    "tier_speed_step": 0.25,
    "gap_step": 0.8,
    "tier_gap_step": 5.0,

    # Timers
    "slow_time_duration": 180,
    "slow_time_upgrade_duration": 300,
    "slow_time_upgrade_mult": 1.5,
    "short_invulnerability": 60,
    "revive_invulnerability": 180,
    "celebration_duration": 120,
    "world_banner_duration": 150,
    "particle_life": 30,

    # Health
    "start_health": 1,
    "shield_bounce_clearance": 100,
}

# ==============================================================================
# WORLD TIERS
# The active tier is the last one whose threshold has been reached
# ==============================================================================

WORLD_TIERS = [
    {"name": "Meadow", "threshold": 0, "sky": (135, 206, 235), "pipe": (46, 204, 113)},
    {"name": "Canyon", "threshold": 8, "sky": (237, 170, 110), "pipe": (160, 82, 45)},
    {"name": "Cavern", "threshold": 18, "sky": (52, 58, 64), "pipe": (112, 128, 144)},
    {"name": "Storm", "threshold": 30, "sky": (70, 80, 110), "pipe": (90, 110, 160)},
    {"name": "Volcano", "threshold": 45, "sky": (90, 30, 20), "pipe": (200, 70, 30)},
    {"name": "Void", "threshold": 60, "sky": (15, 10, 30), "pipe": (140, 60, 200)},
]


def get_profile(name: str) -> dict:
    """Look up a platform profile by name"""
    if name not in PLATFORM_PROFILES:
        raise ValueError(f"Unknown platform profile: {name}")
    return dict(PLATFORM_PROFILES[name])


if __name__ == "__main__":
    for key, profile in PLATFORM_PROFILES.items():
        print(f"  {key:10} | {profile['width']}x{profile['height']} "
              f"| pipe distance {profile['pipe_distance']}")
    print("\nWorld tiers:")
    for i, tier in enumerate(WORLD_TIERS):
        print(f"  {i}: {tier['name']:10} from {tier['threshold']:>3} obstacles")
