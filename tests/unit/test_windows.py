"""Unit tests for trailing-window aggregates."""

import numpy as np
import pytest

from propcheck.features.windows import (
    avg_margin,
    hit_rate,
    moving_average,
    population_std,
    signed_streak,
    window_stats,
)


class TestHitRate:
    """Tests for hit rate over a trailing window."""

    def test_seven_of_ten(self, seven_of_ten_logs):
        """Seven values strictly above the line out of ten."""
        assert hit_rate(seven_of_ten_logs, "points", 20.5, 10) == pytest.approx(0.7)

    def test_tie_counts_as_miss(self, log_factory):
        logs = log_factory([20.5, 20.5, 20.5])
        assert hit_rate(logs, "points", 20.5) == 0.0

    def test_empty_window_is_zero(self):
        assert hit_rate((), "points", 20.5, 10) == 0.0
        assert avg_margin((), "points", 20.5, 10) == 0.0

    def test_window_larger_than_history(self, log_factory):
        logs = log_factory([22.0] * 12)
        stats = window_stats(logs, "points", 20.5, 20)
        assert stats.games_in_window == 12
        assert stats.hit_count == 12

    def test_monotonic_in_line(self, seven_of_ten_logs):
        """Raising the line never raises the hit rate."""
        rates = [hit_rate(seven_of_ten_logs, "points", line) for line in np.arange(10.0, 35.0, 0.5)]
        assert all(a >= b for a, b in zip(rates, rates[1:]))

    def test_missing_stat_reads_zero(self, log_factory):
        logs = log_factory([30, 30, 30], stat="rebounds")
        assert hit_rate(logs, "points", 0.5) == 0.0


class TestWindowStats:
    """Tests for the combined window summary."""

    def test_margin_and_average(self, log_factory):
        logs = log_factory([10, 20, 30, 40])
        stats = window_stats(logs, "points", 25, 2)
        assert stats.games_in_window == 2
        assert stats.avg_value == pytest.approx(15.0)
        assert stats.avg_margin == pytest.approx(-10.0)
        assert stats.hit_rate == 0.0

    def test_empty(self):
        stats = window_stats((), "points", 20.5, 10)
        assert stats.games_in_window == 0
        assert stats.hit_rate == 0.0
        assert stats.to_dict()["avg_margin"] == 0.0


class TestStreaksAndSeries:
    """Tests for streak and series helpers."""

    def test_signed_streak(self):
        assert signed_streak([25, 24, 10], 20) == 2
        assert signed_streak([10, 12, 30], 20) == -2
        assert signed_streak([20, 25], 20) == -1
        assert signed_streak([], 20) == 0

    def test_moving_average_warm_up(self):
        assert moving_average([1, 2, 3, 4, 5, 6], 3) == pytest.approx([1.0, 1.5, 2.0, 3.0, 4.0, 5.0])
        assert moving_average([], 5) == []

    def test_population_std(self):
        assert population_std([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
        assert population_std([7]) == 0.0
