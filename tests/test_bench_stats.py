"""Tests for benchrunner.bench.stats — running statistics."""

from __future__ import annotations

import math
import statistics
import unittest

from benchrunner.bench.stats import RunningStats


class TestRunningStats(unittest.TestCase):
    """Tests for the Welford accumulator."""

    def test_empty(self) -> None:
        stats = RunningStats()
        self.assertEqual(stats.count, 0)
        self.assertEqual(stats.mean(), 0.0)
        self.assertEqual(stats.standard_error_of_mean(), 0.0)

    def test_known_values(self) -> None:
        """[1..5]: mean 3, stdev ~1.5811, SEM = stdev / sqrt(5)."""
        stats = RunningStats()
        for v in [1.0, 2.0, 3.0, 4.0, 5.0]:
            stats.add_value(v)
        self.assertEqual(stats.count, 5)
        self.assertAlmostEqual(stats.mean(), 3.0, places=10)
        self.assertAlmostEqual(stats.stdev(), 1.5811388, places=6)
        self.assertAlmostEqual(stats.standard_error_of_mean(), 0.7071068, places=6)

    def test_single_value_has_zero_error(self) -> None:
        stats = RunningStats()
        stats.add_value(42.0)
        self.assertEqual(stats.count, 1)
        self.assertEqual(stats.mean(), 42.0)
        self.assertEqual(stats.variance(), 0.0)
        self.assertEqual(stats.standard_error_of_mean(), 0.0)

    def test_identical_values(self) -> None:
        stats = RunningStats()
        for _ in range(10):
            stats.add_value(7.5)
        self.assertAlmostEqual(stats.mean(), 7.5)
        self.assertAlmostEqual(stats.standard_error_of_mean(), 0.0)

    def test_matches_statistics_module(self) -> None:
        values = [0.12, 0.5, 3.25, 1.75, 0.9, 2.2, 0.33]
        stats = RunningStats()
        for v in values:
            stats.add_value(v)
        self.assertAlmostEqual(stats.mean(), statistics.mean(values), places=10)
        self.assertAlmostEqual(stats.variance(), statistics.variance(values), places=10)
        expected_sem = statistics.stdev(values) / math.sqrt(len(values))
        self.assertAlmostEqual(stats.standard_error_of_mean(), expected_sem, places=10)

    def test_large_offset_is_stable(self) -> None:
        """A large common offset must not swamp a small variance."""
        stats = RunningStats()
        for v in [1e9 + 4, 1e9 + 7, 1e9 + 13, 1e9 + 16]:
            stats.add_value(v)
        self.assertAlmostEqual(stats.mean(), 1e9 + 10, places=4)
        self.assertAlmostEqual(stats.variance(), 30.0, places=4)

    def test_negative_values(self) -> None:
        stats = RunningStats()
        for v in [-2.0, 2.0]:
            stats.add_value(v)
        self.assertAlmostEqual(stats.mean(), 0.0)
        self.assertAlmostEqual(stats.stdev(), math.sqrt(8.0))

    def test_repr(self) -> None:
        stats = RunningStats()
        stats.add_value(1.0)
        self.assertIn("count=1", repr(stats))


if __name__ == "__main__":
    unittest.main()
