#!/usr/bin/env python
"""
Experiment runner for Flappy Rogue
Runs every combination of: algorithms x reward configs x timesteps
"""

import os
import json
import argparse
from datetime import datetime
from typing import Optional, Dict, Any, List

from rl.configs.flappy_config import (
    REWARD_CONFIGS, TIMESTEP_CONFIGS, TRAINING_CONFIG, get_experiment_matrix,
)
from rl.train import train


def filter_experiments(
    experiments: List[Dict[str, Any]],
    algo: Optional[str] = None,
    reward: Optional[str] = None,
    timestep: Optional[str] = None,
) -> List[Dict[str, Any]]:
    if algo:
        experiments = [e for e in experiments if e["algorithm"] == algo]
    if reward:
        experiments = [e for e in experiments if e["reward_config"] == reward]
    if timestep:
        experiments = [e for e in experiments if e["timestep_config"] == timestep]
    return experiments


def run_single_experiment(
    experiment: Dict[str, Any],
    base_dir: str = "./experiments",
    n_envs: int = 4,
) -> Dict[str, Any]:
    """Train one (algorithm, reward, budget) cell of the matrix"""

    exp_name = experiment["name"]
    exp_dir = os.path.join(base_dir, exp_name)
    os.makedirs(exp_dir, exist_ok=True)

    with open(os.path.join(exp_dir, "config.json"), "w") as f:
        json.dump({
            "name": exp_name,
            "algorithm": experiment["algorithm"],
            "timesteps": experiment["timesteps"],
            "reward_config": experiment["reward_config"],
            "reward_params": experiment["reward_params"],
            "timestamp": datetime.now().isoformat(),
        }, f, indent=2)

    _, metrics = train(
        experiment["algorithm"],
        total_timesteps=experiment["timesteps"],
        save_dir=os.path.join(exp_dir, "models"),
        log_dir=os.path.join(exp_dir, "logs"),
        tensorboard_log=os.path.join(TRAINING_CONFIG["tensorboard_log"], exp_name),
        n_envs=n_envs,
        reward_config=experiment["reward_config"],
    )

    return {"name": exp_name, "completed": True, "summary": metrics.get_summary()}


def run_all_experiments(
    base_dir: str = "./experiments",
    filter_algo: Optional[str] = None,
    filter_reward: Optional[str] = None,
    filter_timestep: Optional[str] = None,
    n_envs: int = 4,
):
    experiments = filter_experiments(get_experiment_matrix(), filter_algo,
                                     filter_reward, filter_timestep)

    print(f"\n{'='*70}")
    print("EXPERIMENT BATCH")
    print(f"  Total experiments to run: {len(experiments)}")
    print(f"  Output directory: {base_dir}")
    print(f"{'='*70}")
    for i, exp in enumerate(experiments):
        print(f"  {i+1}. {exp['name']:40} | {exp['timesteps']:>12,} steps")

    results = []
    for i, exp in enumerate(experiments):
        print(f"\n[{i+1}/{len(experiments)}] Starting {exp['name']}...")
        results.append(run_single_experiment(exp, base_dir, n_envs))

    os.makedirs(base_dir, exist_ok=True)
    results_path = os.path.join(base_dir, "experiment_results.json")
    with open(results_path, "w") as f:
        json.dump({
            "total_experiments": len(results),
            "completed": datetime.now().isoformat(),
            "results": results,
        }, f, indent=2, default=str)

    print(f"\nAll experiments complete. Results saved to: {results_path}\n")
    return results


def main():
    parser = argparse.ArgumentParser(description="Run Flappy Rogue RL experiments")
    parser.add_argument("--output-dir", type=str, default="./experiments",
                        help="Base directory for experiment outputs")
    parser.add_argument("--algo", type=str, choices=["dqn", "ppo"],
                        help="Filter to specific algorithm")
    parser.add_argument("--reward", type=str, choices=list(REWARD_CONFIGS),
                        help="Filter to specific reward config")
    parser.add_argument("--timestep", type=str, choices=list(TIMESTEP_CONFIGS),
                        help="Filter to specific timestep config")
    parser.add_argument("--n-envs", type=int, default=4,
                        help="Number of parallel environments for PPO")
    parser.add_argument("--list", action="store_true",
                        help="List experiments without running")

    args = parser.parse_args()

    if args.list:
        experiments = filter_experiments(get_experiment_matrix(), args.algo,
                                         args.reward, args.timestep)
        print(f"\nExperiments ({len(experiments)}):")
        for exp in experiments:
            print(f"  {exp['name']:40} | {exp['timesteps']:>12,} steps")
        total = sum(e["timesteps"] for e in experiments)
        print(f"\nTotal: {total:,} steps")
        return

    run_all_experiments(
        base_dir=args.output_dir,
        filter_algo=args.algo,
        filter_reward=args.reward,
        filter_timestep=args.timestep,
        n_envs=args.n_envs,
    )


if __name__ == "__main__":
    main()
