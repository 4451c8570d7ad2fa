"""
Custom callback for tracking game-specific metrics during training.
Records: score, pipes cleared, pickups collected, world reached.
"""

import os
import csv
from typing import Dict, List, Any, Optional

import numpy as np
from stable_baselines3.common.callbacks import BaseCallback


class MetricsCallback(BaseCallback):
    """
    Callback to track and log game metrics per episode.
    Saves to CSV for easy plotting.
    """

    def __init__(
        self,
        log_dir: str,
        algo_name: str,
        verbose: int = 1,
    ):
        super().__init__(verbose)
        self.log_dir = log_dir
        self.algo_name = algo_name

        self.episode_rewards: List[float] = []
        self.episode_lengths: List[int] = []
        self.episode_scores: List[int] = []
        self.episode_cleared: List[int] = []
        self.episode_pickups: List[int] = []
        self.episode_worlds: List[int] = []

        self.csv_path: Optional[str] = None
        self.csv_file = None
        self.csv_writer = None

    def _on_training_start(self) -> None:
        """Initialize CSV file for logging."""
        os.makedirs(self.log_dir, exist_ok=True)
        self.csv_path = os.path.join(self.log_dir, f"{self.algo_name}_metrics.csv")

        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow([
            "timestep", "episode", "reward", "length",
            "score", "pipes", "pickups", "world"
        ])
        self.csv_file.flush()

        if self.verbose > 0:
            print(f"[MetricsCallback] Logging to {self.csv_path}")

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            # Monitor wrapper adds episode info on the final step
            if done and "episode" in info:
                self.record_episode(info)

        return True

    def record_episode(self, info: Dict[str, Any]):
        ep_info = info["episode"]
        ep_reward = float(ep_info["r"])
        ep_length = int(ep_info["l"])
        score = info.get("score", 0)
        cleared = info.get("obstacles_cleared", 0)
        pickups = info.get("pickups_collected", 0)
        world = info.get("world", 0)

        self.episode_rewards.append(ep_reward)
        self.episode_lengths.append(ep_length)
        self.episode_scores.append(score)
        self.episode_cleared.append(cleared)
        self.episode_pickups.append(pickups)
        self.episode_worlds.append(world)

        if self.csv_writer:
            self.csv_writer.writerow([
                self.num_timesteps,
                len(self.episode_rewards),
                ep_reward,
                ep_length,
                score,
                cleared,
                pickups,
                world,
            ])
            self.csv_file.flush()

        if self.verbose > 0 and len(self.episode_rewards) % 10 == 0:
            avg_score = sum(self.episode_scores[-10:]) / 10
            print(f"[{self.algo_name}] Episode {len(self.episode_rewards)}, "
                  f"Timestep {self.num_timesteps}, "
                  f"Avg Score (10 ep): {avg_score:.1f}")

    def _on_training_end(self) -> None:
        """Cleanup CSV file."""
        if self.csv_file:
            self.csv_file.close()
            if self.verbose > 0:
                print(f"[MetricsCallback] Saved {len(self.episode_rewards)} episodes to {self.csv_path}")

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics."""
        if not self.episode_rewards:
            return {}

        return {
            "mean_reward": np.mean(self.episode_rewards),
            "std_reward": np.std(self.episode_rewards),
            "mean_length": np.mean(self.episode_lengths),
            "total_episodes": len(self.episode_rewards),
            "mean_score": np.mean(self.episode_scores),
            "best_score": max(self.episode_scores),
            "mean_pipes": np.mean(self.episode_cleared),
            "mean_pickups": np.mean(self.episode_pickups),
            "best_world": max(self.episode_worlds),
        }


class StopOnScoreCallback(BaseCallback):
    """
    Stops training once the mean game score of the last `window` episodes
    reaches `target_score`. Scores come from the env info, not the shaped reward.
    """

    def __init__(self, target_score: float, window: int = 20, verbose: int = 0):
        super().__init__(verbose)
        self.target_score = target_score
        self.window = window
        self.scores: List[int] = []

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        keep_going = True
        for info, done in zip(infos, dones):
            if done:
                keep_going = self.record_score(info.get("score", 0)) and keep_going
        return keep_going

    def record_score(self, score: int) -> bool:
        """Returns False once the rolling mean reaches the target"""
        self.scores.append(score)
        if len(self.scores) < self.window:
            return True
        mean_score = float(np.mean(self.scores[-self.window:]))
        if mean_score >= self.target_score:
            if self.verbose > 0:
                print(f"[StopOnScoreCallback] Mean score {mean_score:.1f} over "
                      f"{self.window} episodes reached {self.target_score}, stopping")
            return False
        return True


class TensorboardMetricsCallback(BaseCallback):
    """
    Logs game metrics to TensorBoard.
    """

    def __init__(self, verbose: int = 0):
        super().__init__(verbose)

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            if done and "episode" in info:
                ep = info["episode"]
                if self.logger:
                    self.logger.record("custom/episode_reward", ep["r"])
                    self.logger.record("custom/episode_length", ep["l"])
                    self.logger.record("custom/score", info.get("score", 0))
                    self.logger.record("custom/pipes", info.get("obstacles_cleared", 0))
                    self.logger.record("custom/world", info.get("world", 0))

        return True
