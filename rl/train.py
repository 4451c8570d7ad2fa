"""
Training script for the Flappy Rogue environment using Stable-Baselines3

One training path for both algorithms:
    PPO  - MultiDiscrete actions, n parallel envs, VecNormalize
    DQN  - flattened Discrete(8) actions, single env

Episodes are tracked by game outcome (score, pipes, world) and training can stop
early once the rolling mean score reaches a target.
"""

import os
import argparse
from typing import Optional, Dict, Any

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize
from stable_baselines3.common.callbacks import CheckpointCallback, EvalCallback
from stable_baselines3.common.monitor import Monitor

from flappy_rogue import FlappyRogueEnv
from rl.configs.flappy_config import (
    ENV_CONFIG, PPO_CONFIG, DQN_CONFIG, TRAINING_CONFIG, REWARD_CONFIGS,
)
from rl.metrics_callback import (
    MetricsCallback, StopOnScoreCallback, TensorboardMetricsCallback,
)

# Per-algorithm setup: model class, hyperparameters, action flattening, obs normalization
ALGORITHMS = {
    "ppo": {"cls": PPO, "config": PPO_CONFIG, "discrete": False, "normalize": True},
    "dqn": {"cls": DQN, "config": DQN_CONFIG, "discrete": True, "normalize": False},
}


class MultiDiscreteToDiscreteWrapper(gym.ActionWrapper):
    """
    Flattens MultiDiscrete([flap, pick]) to Discrete(2*4=8) for DQN.
    Action a decodes to (a // 4, a % 4).
    """

    def __init__(self, env):
        super().__init__(env)
        self._nvec = env.action_space.nvec
        self.action_space = spaces.Discrete(int(np.prod(self._nvec)))

    def action(self, action):
        return np.array(np.unravel_index(int(action), self._nvec), dtype=np.int64)


def get_algorithm(algo: str) -> Dict[str, Any]:
    if algo not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm: {algo}")
    return ALGORITHMS[algo]


def make_env(render_mode: Optional[str] = None, seed: Optional[int] = None,
             wrap_for_dqn: bool = False, reward_config: str = "baseline",
             env_overrides: Optional[dict] = None):
    """Factory function to create the environment"""
    if reward_config not in REWARD_CONFIGS:
        raise ValueError(f"Unknown reward config: {reward_config}")
    env_kwargs = dict(ENV_CONFIG)
    if env_overrides:
        env_kwargs.update(env_overrides)

    def _init():
        env = FlappyRogueEnv(render_mode=render_mode,
                             reward_config=REWARD_CONFIGS[reward_config],
                             **env_kwargs)
        if wrap_for_dqn:
            env = MultiDiscreteToDiscreteWrapper(env)
        env = Monitor(env)
        if seed is not None:
            env.reset(seed=seed)
        return env
    return _init


def train(
    algo: str = "ppo",
    total_timesteps: Optional[int] = None,
    save_dir: Optional[str] = None,
    log_dir: Optional[str] = None,
    tensorboard_log: Optional[str] = None,
    n_envs: int = 4,
    reward_config: str = "baseline",
    target_score: Optional[float] = None,
    algo_overrides: Optional[dict] = None,
    env_overrides: Optional[dict] = None,
):
    """
    Train one agent on Flappy Rogue

    Args:
        algo: 'ppo' or 'dqn'
        total_timesteps: training budget (default from TRAINING_CONFIG)
        save_dir / log_dir: model and metrics output (default ./models/<algo>, ./logs/<algo>)
        tensorboard_log: TensorBoard directory, None disables it
        n_envs: parallel environments (PPO only)
        reward_config: key into REWARD_CONFIGS
        target_score: stop once the rolling mean game score reaches this
        algo_overrides: hyperparameters layered over PPO_CONFIG / DQN_CONFIG
        env_overrides: env kwargs layered over ENV_CONFIG

    Returns:
        (model, metrics_callback)
    """
    setup = get_algorithm(algo)
    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]
    if target_score is None:
        target_score = TRAINING_CONFIG["target_score"]
    save_dir = save_dir or os.path.join(TRAINING_CONFIG["model_dir"], algo)
    log_dir = log_dir or os.path.join(TRAINING_CONFIG["log_dir"], algo)
    if setup["discrete"]:
        n_envs = 1

    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Training {algo.upper()} for {total_timesteps:,} timesteps "
          f"({n_envs} env(s), reward config '{reward_config}')")
    if target_score:
        print(f"Stopping early at mean score {target_score}")
    print(f"{'='*60}\n")

    def env_fns(base_seed, count):
        return [make_env(seed=base_seed + i, wrap_for_dqn=setup["discrete"],
                         reward_config=reward_config, env_overrides=env_overrides)
                for i in range(count)]

    env = DummyVecEnv(env_fns(0, n_envs))
    eval_env = DummyVecEnv(env_fns(100, 1))
    if setup["normalize"]:
        env = VecNormalize(env, norm_obs=True, norm_reward=True)
        eval_env = VecNormalize(eval_env, norm_obs=True, norm_reward=False, training=False)

    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name=algo, verbose=1)
    callbacks = [
        CheckpointCallback(
            save_freq=max(1, TRAINING_CONFIG["save_freq"] // n_envs),
            save_path=save_dir,
            name_prefix=f"{algo}_flappy",
        ),
        EvalCallback(
            eval_env,
            best_model_save_path=save_dir,
            log_path=log_dir,
            eval_freq=max(1, TRAINING_CONFIG["eval_freq"] // n_envs),
            deterministic=True,
            render=False,
        ),
        metrics_callback,
        TensorboardMetricsCallback(verbose=0),
    ]
    if target_score:
        callbacks.append(StopOnScoreCallback(target_score, window=TRAINING_CONFIG["score_window"],
                                             verbose=1))

    hyperparams = dict(setup["config"])
    if algo_overrides:
        hyperparams.update(algo_overrides)
    model = setup["cls"](env=env, tensorboard_log=tensorboard_log, **hyperparams)

    model.learn(total_timesteps=total_timesteps, callback=callbacks)

    final_path = os.path.join(save_dir, f"{algo}_flappy_final")
    model.save(final_path)
    if setup["normalize"]:
        env.save(os.path.join(save_dir, "vec_normalize.pkl"))
    env.close()
    eval_env.close()

    print(f"\n{'='*60}")
    print(f"{algo.upper()} training complete! Model saved to {final_path}")
    summary = metrics_callback.get_summary()
    if summary:
        print(f"Episodes: {summary['total_episodes']}, "
              f"mean score {summary['mean_score']:.1f} (best {summary['best_score']}), "
              f"mean pipes {summary['mean_pipes']:.1f}, furthest world {summary['best_world']}")
    print(f"{'='*60}\n")

    return model, metrics_callback


def train_ppo(total_timesteps: Optional[int] = None, n_envs: int = 4, **kwargs):
    """Train PPO agent on Flappy Rogue"""
    return train("ppo", total_timesteps=total_timesteps, n_envs=n_envs, **kwargs)


def train_dqn(total_timesteps: Optional[int] = None, **kwargs):
    """Train DQN agent on Flappy Rogue"""
    return train("dqn", total_timesteps=total_timesteps, n_envs=1, **kwargs)


def main():
    parser = argparse.ArgumentParser(description="Train RL agent on Flappy Rogue")
    parser.add_argument("--algo", type=str, default="ppo", choices=list(ALGORITHMS) + ["all"],
                        help="RL algorithm to use (default: ppo)")
    parser.add_argument("--timesteps", type=int, default=None,
                        help=f"Total timesteps to train (default: {TRAINING_CONFIG['total_timesteps']})")
    parser.add_argument("--n-envs", type=int, default=4,
                        help="Number of parallel environments for PPO (default: 4)")
    parser.add_argument("--reward", type=str, default="baseline", choices=list(REWARD_CONFIGS),
                        help="Reward shaping config (default: baseline)")
    parser.add_argument("--target-score", type=float, default=None,
                        help="Stop when the rolling mean game score reaches this")
    parser.add_argument("--tensorboard", action="store_true",
                        help=f"Log to {TRAINING_CONFIG['tensorboard_log']}/<algo>")

    args = parser.parse_args()

    algos = list(ALGORITHMS) if args.algo == "all" else [args.algo]
    for algo in algos:
        tb = os.path.join(TRAINING_CONFIG["tensorboard_log"], algo) if args.tensorboard else None
        train(algo, total_timesteps=args.timesteps, n_envs=args.n_envs,
              reward_config=args.reward, target_score=args.target_score,
              tensorboard_log=tb)


if __name__ == "__main__":
    main()
