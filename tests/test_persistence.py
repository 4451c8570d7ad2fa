"""
Tests for the high score / run count stores.
"""

import json
import os
import tempfile
import unittest

from flappy_rogue.engine import GameEngine
from flappy_rogue.persistence import MemoryStatsStore, StatsStore


class TestMemoryStatsStore(unittest.TestCase):

    def test_counts_runs(self):
        store = MemoryStatsStore()
        self.assertEqual(store.record_run_start(), 1)
        self.assertEqual(store.record_run_start(), 2)

    def test_only_higher_scores_stick(self):
        store = MemoryStatsStore(high_score=10)
        self.assertFalse(store.record_score(10))
        self.assertFalse(store.record_score(3))
        self.assertTrue(store.record_score(11))
        self.assertEqual(store.load(), {"high_score": 11, "total_runs": 0})


class TestStatsStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "nested", "stats.json")

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_missing_file_reads_as_zeros(self):
        store = StatsStore(self.path)
        self.assertEqual(store.load(), {"high_score": 0, "total_runs": 0})

    def test_corrupt_file_reads_as_zeros(self):
        self.write("{not json")
        store = StatsStore(self.path)
        self.assertEqual(store.high_score, 0)
        self.assertEqual(store.total_runs, 0)

    def test_wrong_shape_reads_as_zeros(self):
        self.write("[1, 2, 3]")
        self.assertEqual(StatsStore(self.path).load()["high_score"], 0)
        self.write('{"high_score": "lots"}')
        self.assertEqual(StatsStore(self.path).load()["high_score"], 0)

    def test_infinite_score_reads_as_zeros(self):
        # json parses 1e400 to inf, which int() refuses
        self.write('{"high_score": 1e400, "total_runs": 3}')
        store = StatsStore(self.path)
        self.assertEqual(store.load(), {"high_score": 0, "total_runs": 0})
        engine = GameEngine(seed=0, stats=store)
        self.assertEqual(engine.high_score, 0)

    def test_persists_across_instances(self):
        store = StatsStore(self.path)
        store.record_run_start()
        store.record_run_start()
        store.record_score(42)

        reopened = StatsStore(self.path)
        self.assertEqual(reopened.high_score, 42)
        self.assertEqual(reopened.total_runs, 2)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"high_score": 42, "total_runs": 2})

    def test_write_failure_is_not_fatal(self):
        # A regular file where a directory is needed
        blocker = os.path.join(self.tmp.name, "blocker")
        with open(blocker, "w") as f:
            f.write("x")
        store = StatsStore(os.path.join(blocker, "stats.json"))
        self.assertEqual(store.record_run_start(), 1)
        self.assertTrue(store.record_score(5))
        self.assertEqual(store.high_score, 5)

    def test_engine_reads_stored_high_score(self):
        self.write(json.dumps({"high_score": 33, "total_runs": 4}))
        engine = GameEngine(seed=0, stats=StatsStore(self.path))
        self.assertEqual(engine.high_score, 33)
        engine.start_run()
        self.assertEqual(engine.total_runs, 5)
        self.assertEqual(StatsStore(self.path).total_runs, 5)


if __name__ == "__main__":
    unittest.main()
