"""
Training configuration for the highway environment
Reward shaping variants and algorithm hyperparameters
"""

# Environment parameters
ENV_CONFIG = {
    # "render_mode": None,  # Don't render during training
    "dt_ms": 1000 / 30,
    "max_steps": None,  # episodes end when the session is won or lost
    "game_config": {
        "session_duration_ms": 60_000.0,
        "max_delta_ms": 100.0,
    },
}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

# Reward Config 1: BASELINE
REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Balanced scoring and survival",
    "R_POINT": 0.05,     # per score point (coin = 10, powerup = 25)
    "R_DAMAGE": 0.1,     # per unit of power lost
    "R_ALIVE": 0.001,    # per step survived
    "R_WIN": 5.0,        # session timer ran out with power left
    "R_LOSS": 5.0,       # power depleted
}

# Reward Config 2: CAUTIOUS (dodge first, collect second)
REWARD_CONFIG_CAUTIOUS = {
    "name": "cautious",
    "description": "Heavier damage and loss penalties",
    "R_POINT": 0.02,
    "R_DAMAGE": 0.3,
    "R_ALIVE": 0.002,
    "R_WIN": 10.0,
    "R_LOSS": 10.0,
}

# Reward Config 3: COLLECTOR (chase coins, accept some hits)
REWARD_CONFIG_COLLECTOR = {
    "name": "collector",
    "description": "Higher point reward, lighter damage penalty",
    "R_POINT": 0.1,
    "R_DAMAGE": 0.05,
    "R_ALIVE": 0.0,
    "R_WIN": 3.0,
    "R_LOSS": 3.0,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "cautious": REWARD_CONFIG_CAUTIOUS,
    "collector": REWARD_CONFIG_COLLECTOR,
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
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}
