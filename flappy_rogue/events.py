"""
Collaborator contracts: audio cues and screen transitions
"""

from enum import Enum
from typing import List

from .entities import GameState, RunSummary


class Cue(str, Enum):
    FLAP = "flap"
    SCORE = "score"
    POWERUP = "powerup"
    HIT = "hit"
    DEATH = "death"
    UPGRADE = "upgrade"
    REVIVE = "revive"


class AudioSink:
    """Fire-and-forget cue consumer. The default plays nothing"""

    def play(self, cue: Cue) -> None:
        pass


class CueRecorder(AudioSink):
    """Keeps every cue it receives, oldest first"""

    def __init__(self):
        self.cues: List[Cue] = []

    def play(self, cue: Cue) -> None:
        self.cues.append(cue)

    def count(self, cue: Cue) -> int:
        return sum(1 for c in self.cues if c == cue)

    def clear(self):
        self.cues = []


class ScreenListener:
    """Shows/hides views on coarse state transitions"""

    def on_state_change(self, state: GameState) -> None:
        pass

    def on_run_summary(self, summary: RunSummary) -> None:
        pass
