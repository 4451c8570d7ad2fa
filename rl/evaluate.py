"""
Evaluation script for trained Flappy Rogue agents

Runs a policy for a number of episodes and reports game outcomes (score, pipes
cleared, pickups, world reached) next to the shaped reward. A random policy can
be run over the same seeds as a baseline.
"""

import argparse
import time
from typing import Callable, Dict, List, Optional, Any

import numpy as np

from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize

from flappy_rogue import FlappyRogueEnv
from rl.configs.flappy_config import ENV_CONFIG
from rl.train import MultiDiscreteToDiscreteWrapper, get_algorithm

Policy = Callable[[np.ndarray], Any]


def load_model(model_path: str, algo: str):
    return get_algorithm(algo)["cls"].load(model_path)


def make_eval_env(algo: str = "ppo", render: bool = False, env_overrides: Optional[dict] = None):
    env_kwargs = dict(ENV_CONFIG)
    if env_overrides:
        env_kwargs.update(env_overrides)
    env = FlappyRogueEnv(render_mode="human" if render else None, **env_kwargs)
    if get_algorithm(algo)["discrete"]:
        env = MultiDiscreteToDiscreteWrapper(env)
    return env


def run_episodes(env, policy: Policy, n_episodes: int, seed: Optional[int] = None,
                 render: bool = False, verbose: int = 1) -> List[Dict[str, Any]]:
    """Play n episodes and collect one outcome record per episode"""
    episodes = []
    for episode in range(n_episodes):
        obs, info = env.reset(seed=seed + episode if seed is not None else None)
        terminated = truncated = False
        total_reward = 0.0
        steps = 0

        while not (terminated or truncated):
            obs, reward, terminated, truncated, info = env.step(policy(obs))
            total_reward += reward
            steps += 1

            if render:
                window = getattr(env.unwrapped, "_window", None)
                if window:
                    window.dispatch_events()
                    window.flip()
                    time.sleep(1 / 60)

        episodes.append({
            "reward": total_reward,
            "length": steps,
            "score": info["score"],
            "pipes": info["obstacles_cleared"],
            "pickups": info["pickups_collected"],
            "world": info["world"],
            "died": terminated,
        })

        if verbose > 0:
            print(f"Episode {episode + 1}/{n_episodes}: score {info['score']}, "
                  f"{info['obstacles_cleared']} pipes, world {info['world']}, "
                  f"reward {total_reward:.2f}, length {steps}")
    return episodes


def summarize(episodes: List[Dict[str, Any]]) -> Dict[str, Any]:
    rewards = [e["reward"] for e in episodes]
    scores = [e["score"] for e in episodes]
    return {
        "mean_reward": float(np.mean(rewards)),
        "std_reward": float(np.std(rewards)),
        "mean_length": float(np.mean([e["length"] for e in episodes])),
        "mean_score": float(np.mean(scores)),
        "best_score": max(scores),
        "mean_pipes": float(np.mean([e["pipes"] for e in episodes])),
        "mean_pickups": float(np.mean([e["pickups"] for e in episodes])),
        "best_world": max(e["world"] for e in episodes),
        "survival_rate": float(np.mean([not e["died"] for e in episodes])),
        "episodes": episodes,
    }


def print_summary(title: str, summary: Dict[str, Any]):
    print("\n" + "=" * 50)
    print(f"{title} ({len(summary['episodes'])} episodes):")
    print(f"Mean Score: {summary['mean_score']:.1f} (best {summary['best_score']})")
    print(f"Mean Pipes: {summary['mean_pipes']:.1f}, furthest world {summary['best_world']}")
    print(f"Mean Reward: {summary['mean_reward']:.2f} ± {summary['std_reward']:.2f}")
    print(f"Survived to time limit: {summary['survival_rate']:.0%}")
    print("=" * 50)


def evaluate_model(
    model_path: str,
    algo: str = "ppo",
    n_episodes: int = 10,
    render: bool = True,
    seed: Optional[int] = None,
    vec_normalize_path: Optional[str] = None,
    env_overrides: Optional[dict] = None,
    verbose: int = 1,
) -> Dict[str, Any]:
    """
    Evaluate a trained model

    Args:
        model_path: Path to the saved model
        algo: Algorithm used ('ppo' or 'dqn')
        n_episodes: Number of episodes to evaluate
        render: Whether to render the environment
        seed: Episode i is reset with seed + i
        vec_normalize_path: VecNormalize stats saved next to a PPO model
        env_overrides: env kwargs layered over ENV_CONFIG
    """
    model = load_model(model_path, algo)
    env = make_eval_env(algo, render, env_overrides)

    normalizer = None
    if vec_normalize_path:
        # Only the observation statistics are needed; the wrapped env is never stepped
        normalizer = VecNormalize.load(
            vec_normalize_path, DummyVecEnv([lambda: make_eval_env(algo, False, env_overrides)]))
        normalizer.training = False

    def policy(obs):
        if normalizer is not None:
            obs = normalizer.normalize_obs(obs)
        action, _ = model.predict(obs, deterministic=True)
        return action

    summary = summarize(run_episodes(env, policy, n_episodes, seed, render, verbose))
    env.close()

    if verbose > 0:
        print_summary(f"{algo.upper()} evaluation", summary)
    return summary


def compare_with_random(n_episodes: int = 10, seed: Optional[int] = None,
                        env_overrides: Optional[dict] = None, verbose: int = 1) -> Dict[str, Any]:
    """Random policy baseline over the same episode seeds"""
    env = make_eval_env("ppo", False, env_overrides)
    env.action_space.seed(seed)

    summary = summarize(run_episodes(env, lambda obs: env.action_space.sample(),
                                     n_episodes, seed, verbose=0))
    env.close()

    if verbose > 0:
        print_summary("Random policy", summary)
    return summary


def main():
    parser = argparse.ArgumentParser(description="Evaluate trained Flappy Rogue agent")
    parser.add_argument("model_path", type=str, help="Path to the trained model")
    parser.add_argument("--algo", type=str, default="ppo", choices=["ppo", "dqn"],
                        help="Algorithm used to train the model (default: ppo)")
    parser.add_argument("--n-episodes", type=int, default=10,
                        help="Number of evaluation episodes (default: 10)")
    parser.add_argument("--no-render", action="store_true", help="Disable rendering")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--vec-normalize", type=str, default=None,
                        help="Path to VecNormalize stats file (for PPO)")
    parser.add_argument("--compare-random", action="store_true",
                        help="Also evaluate a random policy on the same seeds")

    args = parser.parse_args()

    results = evaluate_model(
        model_path=args.model_path,
        algo=args.algo,
        n_episodes=args.n_episodes,
        render=not args.no_render,
        seed=args.seed,
        vec_normalize_path=args.vec_normalize,
    )

    if args.compare_random:
        baseline = compare_with_random(n_episodes=args.n_episodes, seed=args.seed)
        print(f"\nScore over random: {results['mean_score'] - baseline['mean_score']:+.1f}, "
              f"pipes over random: {results['mean_pipes'] - baseline['mean_pipes']:+.1f}")


if __name__ == "__main__":
    main()
