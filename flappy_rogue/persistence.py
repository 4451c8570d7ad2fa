"""
High score and run count storage
"""

import json
import os
from typing import Dict, Optional

DEFAULT_STATS_PATH = os.path.join(os.path.expanduser("~"), ".flappy_rogue", "stats.json")


class MemoryStatsStore:
    """Stats kept for the lifetime of the process only"""

    def __init__(self, high_score: int = 0, total_runs: int = 0):
        self.high_score = high_score
        self.total_runs = total_runs

    def load(self) -> Dict[str, int]:
        return {"high_score": self.high_score, "total_runs": self.total_runs}

    def record_run_start(self) -> int:
        self.total_runs += 1
        self._save()
        return self.total_runs

    def record_score(self, score: int) -> bool:
        """Store score if it beats the high score. Returns True when it did"""
        if score <= self.high_score:
            return False
        self.high_score = score
        self._save()
        return True

    def _save(self):
        pass


class StatsStore(MemoryStatsStore):
    """JSON-file backed stats. Read and write failures never reach the game"""

    def __init__(self, path: Optional[str] = None, verbose: int = 0):
        self.path = path or DEFAULT_STATS_PATH
        self.verbose = verbose
        super().__init__()
        self.load()

    def load(self) -> Dict[str, int]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.high_score = max(0, int(data.get("high_score", 0)))
            self.total_runs = max(0, int(data.get("total_runs", 0)))
        except (OSError, ValueError, TypeError, AttributeError, OverflowError) as e:
            if self.verbose > 0 and not isinstance(e, FileNotFoundError):
                print(f"[StatsStore] Could not read {self.path}: {e}")
            self.high_score = 0
            self.total_runs = 0
        return super().load()

    def _save(self):
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({"high_score": self.high_score,
                           "total_runs": self.total_runs}, f)
        except (OSError, TypeError) as e:
            if self.verbose > 0:
                print(f"[StatsStore] Could not write {self.path}: {e}")
