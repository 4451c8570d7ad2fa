"""
FlappyRogueEnv - Gymnasium wrapper around the game engine
---------------------------------------------------------
- 1 agent that flaps through procedurally spawned pipes
- Upgrade offers every few pipes, picked through the action
- Vector observation: agent state + next two pipes + nearest pickup
- MultiDiscrete action space: [flap(2), upgrade pick(4)]
  pick 0 = no choice, 1..3 = take that offer (only while a choice is pending)

Used for automated playtesting and RL agents; the human-playable window
lives in flappy_rogue.window.

Quick test:
    python -m flappy_rogue.flappy_env
"""

from __future__ import annotations

from typing import Optional, Dict, Any

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .engine import GameEngine
from .entities import GameState
from .events import CueRecorder, Cue
from .utils import clamp, seed_everything

DEFAULT_REWARDS = {
    "R_CLEAR": 1.0,      # per pipe cleared
    "R_PICKUP": 0.3,     # per pickup collected
    "R_DAMAGE": 1.0,     # per hit that cost a heart or shield
    "R_DEATH": 5.0,      # run over
    "R_ALIVE": 0.01,     # per tick survived
}


class FlappyRogueEnv(gym.Env):
    """Flappy Rogue as a Gymnasium environment"""

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        obs_mode: str = "vector",
        platform: str = "desktop",
        max_steps: int = 6000,
        frame_skip: int = 1,
        reward_config: Optional[dict] = None,
        engine_config: Optional[dict] = None,
    ):
        super().__init__()

        assert obs_mode in ("vector",), "Only 'vector' observations are implemented."
        assert frame_skip >= 1, "frame_skip must be at least 1"
        self.render_mode = render_mode
        self.obs_mode = obs_mode
        self.max_steps = max_steps
        self.frame_skip = frame_skip

        self.rewards = dict(DEFAULT_REWARDS)
        if reward_config:
            self.rewards.update({k: v for k, v in reward_config.items() if k.startswith("R_")})

        self._cues = CueRecorder()
        self.engine = GameEngine(platform=platform, config=engine_config, audio=self._cues)
        self.width = self.engine.width
        self.height = self.engine.height

        self.action_space = spaces.MultiDiscrete([2, 4])

        # Agent: y, velocity, health, shield, invulnerable, slow time, choice pending
        # Each of next 2 pipes: dx, gap top, gap bottom
        # Nearest pickup: dx, dy
        obs_dim = 7 + 2 * 3 + 2
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self._window = None
        self._step_count = 0
        self._prev = {}

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.engine.seed(seed)
        self._cues.clear()
        self.engine.start_run()

        self._step_count = 0
        self._prev = self._counters()

        return self._get_obs(), self._get_info()

    def step(self, action):
        self._cues.clear()
        flap, pick = int(action[0]), int(action[1])

        if self.engine.state == GameState.CHOICE and 1 <= pick <= len(self.engine.offer):
            self.engine.select_upgrade(pick - 1)
        if flap:
            self.engine.activate()

        for _ in range(self.frame_skip):
            self.engine.update()
            if self.engine.state == GameState.GAMEOVER:
                break

        reward = self._compute_reward()

        terminated = self.engine.state == GameState.GAMEOVER
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _counters(self) -> Dict[str, int]:
        run = self.engine.run
        return {
            "cleared": run.obstacles_cleared,
            "pickups": run.pickups_collected,
        }

    def _get_obs(self) -> np.ndarray:
        run = self.engine.run
        agent = run.agent
        w, h = self.width, self.height
        cfg = self.engine.config

        obs_parts = [
            clamp(agent.y / h * 2 - 1, -1, 1),
            clamp(agent.velocity / 10.0, -1, 1),
            run.health / max(1, run.max_health) * 2 - 1,
            1.0 if run.shield_active else -1.0,
            clamp(run.invulnerable_timer / cfg["revive_invulnerability"], 0, 1),
            clamp(run.slow_time_timer / cfg["slow_time_upgrade_duration"], 0, 1),
            1.0 if self.engine.state == GameState.CHOICE else -1.0,
        ]

        ahead = [o for o in run.obstacles if o.x + o.width >= agent.x]
        for i in range(2):
            if i < len(ahead):
                o = ahead[i]
                obs_parts += [
                    clamp((o.x + o.width - agent.x) / w, -1, 1),
                    clamp(o.gap_y / h * 2 - 1, -1, 1),
                    clamp((o.gap_y + o.gap_size) / h * 2 - 1, -1, 1),
                ]
            else:
                obs_parts += [1.0, -1.0, 1.0]

        if run.pickups:
            p = min(run.pickups, key=lambda p: (p.x - agent.x) ** 2 + (p.y - agent.y) ** 2)
            obs_parts += [clamp((p.x - agent.x) / w, -1, 1), clamp((p.y - agent.y) / h, -1, 1)]
        else:
            obs_parts += [0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _compute_reward(self) -> float:
        now = self._counters()
        cleared = now["cleared"] - self._prev["cleared"]
        pickups = now["pickups"] - self._prev["pickups"]
        self._prev = now

        hits = self._cues.count(Cue.HIT) + self._cues.count(Cue.REVIVE)

        reward = 0.0
        reward += self.rewards["R_CLEAR"] * cleared
        reward += self.rewards["R_PICKUP"] * pickups
        reward -= self.rewards["R_DAMAGE"] * hits
        reward += self.rewards["R_ALIVE"]

        if self.engine.state == GameState.GAMEOVER:
            reward -= self.rewards["R_DEATH"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        run = self.engine.run
        return {
            "score": run.score,
            "obstacles_cleared": run.obstacles_cleared,
            "pickups_collected": run.pickups_collected,
            "health": run.health,
            "world": run.world_index,
            "state": self.engine.state.value,
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self.render_mode == "human":
            if self._window is None:
                from .window import FlappyRogueWindow
                self._window = FlappyRogueWindow(self.engine, drive=False)
            self._window.on_draw()
            return None
        elif self.render_mode == "rgb_array":
            return self._render_rgb_array()

    def _render_rgb_array(self):
        # TODO: read back an offscreen arcade framebuffer instead of a blank frame
        return np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


def run_random_episode(render: bool = False, seed: int = 42):
    """Run a random episode for testing"""
    env = FlappyRogueEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()

    print(f"Random episode return: {total:.2f} "
          f"(score {info['score']}, {info['obstacles_cleared']} pipes)")
    env.close()
    return total, info


if __name__ == "__main__":
    run_random_episode(render=False)
