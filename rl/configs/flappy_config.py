"""
Training configuration for the Flappy Rogue environment
Reward shaping variants, algorithm hyperparameters and the experiment matrix
"""

# Environment parameters
ENV_CONFIG = {
    # "render_mode": None,  # Don't render during training - too slow with parallel envs
    "platform": "desktop",
    "max_steps": 6000,   # ~100 seconds at 60 ticks per second
    "frame_skip": 2,
}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

# Reward Config 1: BASELINE
REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Balanced: pipes matter most, small survival trickle",
    "R_CLEAR": 1.0,      # Reward per pipe cleared
    "R_PICKUP": 0.3,     # Reward per pickup collected
    "R_DAMAGE": 1.0,     # Penalty per hit (shield or heart)
    "R_DEATH": 5.0,      # Death penalty
    "R_ALIVE": 0.01,     # Per-step survival reward
}

# Reward Config 2: SURVIVAL
REWARD_CONFIG_SURVIVAL = {
    "name": "survival",
    "description": "Prioritize staying alive - heavy damage/death penalties",
    "R_CLEAR": 0.5,
    "R_PICKUP": 0.1,
    "R_DAMAGE": 3.0,
    "R_DEATH": 10.0,
    "R_ALIVE": 0.02,
}

# Reward Config 3: GREEDY
REWARD_CONFIG_GREEDY = {
    "name": "greedy",
    "description": "Chase pickups - accepts risk for power-ups",
    "R_CLEAR": 1.0,
    "R_PICKUP": 1.5,
    "R_DAMAGE": 0.5,
    "R_DEATH": 3.0,
    "R_ALIVE": 0.0,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "survival": REWARD_CONFIG_SURVIVAL,
    "greedy": REWARD_CONFIG_GREEDY,
}

# ==============================================================================
# TIMESTEP CONFIGURATIONS
# ==============================================================================

TIMESTEP_CONFIGS = {
    "short": 50_000,
    "medium": 500_000,
    "long": 1_600_000,
}

# ==============================================================================
# ALGORITHM HYPERPARAMETERS
# ==============================================================================

# PPO hyperparameters
PPO_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 3e-4,
    "n_steps": 1024,
    "batch_size": 256,
    "n_epochs": 10,
    "gamma": 0.99,
    "gae_lambda": 0.95,
    "clip_range": 0.2,
    "ent_coef": 0.01,
    "vf_coef": 0.5,
    "max_grad_norm": 0.5,
    "verbose": 1,
}

# DQN hyperparameters
DQN_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 1e-4,
    "buffer_size": 100_000,
    "learning_starts": 1000,
    "batch_size": 128,
    "tau": 1.0,
    "gamma": 0.99,
    "train_freq": 4,
    "gradient_steps": 1,
    "target_update_interval": 1000,
    "exploration_fraction": 0.1,
    "exploration_initial_eps": 1.0,
    "exploration_final_eps": 0.05,
    "verbose": 1,
}

# ==============================================================================
# TRAINING SETTINGS
# ==============================================================================

TRAINING_CONFIG = {
    "total_timesteps": 500_000,
    "save_freq": 10_000,
    "eval_freq": 5_000,
    "target_score": None,   # stop early at this rolling mean game score
    "score_window": 20,     # episodes in the rolling mean
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}

# ==============================================================================
# EXPERIMENT CONFIGURATION
# ==============================================================================

EXPERIMENT_CONFIG = {
    "seeds": [42, 123, 456],
    "n_eval_episodes": 10,
    "algorithms": ["dqn", "ppo"],
    "reward_configs": ["baseline", "survival", "greedy"],
    "timestep_configs": ["short", "medium", "long"],
}


def get_experiment_matrix():
    """
    Generate all experiment configurations.
    Returns list of dicts with: algo, reward_config, timesteps, experiment_name
    """
    experiments = []

    for reward_name in EXPERIMENT_CONFIG["reward_configs"]:
        for timestep_name in EXPERIMENT_CONFIG["timestep_configs"]:
            for algo in EXPERIMENT_CONFIG["algorithms"]:
                exp_name = f"{algo}_{reward_name}_{timestep_name}"
                experiments.append({
                    "name": exp_name,
                    "algorithm": algo,
                    "reward_config": reward_name,
                    "reward_params": REWARD_CONFIGS[reward_name],
                    "timestep_config": timestep_name,
                    "timesteps": TIMESTEP_CONFIGS[timestep_name],
                })

    return experiments


if __name__ == "__main__":
    experiments = get_experiment_matrix()
    print(f"Total experiments: {len(experiments)}")
    print("\nExperiment Matrix:")
    print("-" * 70)
    for exp in experiments:
        print(f"  {exp['name']:35} | {exp['timesteps']:>10,} steps")
    print("-" * 70)
