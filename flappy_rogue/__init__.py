"""Flappy Rogue - side-scrolling flyer with roguelike upgrades"""

from .engine import GameEngine, Snapshot
from .entities import GameState, PickupKind, RunState
from .events import AudioSink, Cue, CueRecorder, ScreenListener
from .flappy_env import FlappyRogueEnv, run_random_episode
from .persistence import MemoryStatsStore, StatsStore
from .upgrades import UpgradeId, UPGRADE_POOL

__all__ = [
    'GameEngine', 'Snapshot', 'GameState', 'PickupKind', 'RunState',
    'AudioSink', 'Cue', 'CueRecorder', 'ScreenListener',
    'FlappyRogueEnv', 'run_random_episode',
    'MemoryStatsStore', 'StatsStore', 'UpgradeId', 'UPGRADE_POOL',
]
