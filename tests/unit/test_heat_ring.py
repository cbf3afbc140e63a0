"""Unit tests for the heat ring."""

import pytest

from propcheck.analysis.heat_ring import compute_heat_ring


class TestHeatRing:
    """Tests for compute_heat_ring."""

    def test_aggregates(self, seven_of_ten_logs):
        ring = compute_heat_ring(seven_of_ten_logs, "points", 20.5)
        agg = ring.aggregates
        assert agg.total_games == 10
        assert agg.hit_count == 7
        assert agg.hit_rate == pytest.approx(0.7)
        assert agg.streak == 7
        assert ring.games[0].date == seven_of_ten_logs[0].date

    def test_respects_max_games(self, sample_snapshot):
        ring = compute_heat_ring(sample_snapshot.game_logs, "points", 24.5, max_games=5)
        assert ring.aggregates.total_games == 5
        assert ring.aggregates.hit_count <= ring.aggregates.total_games
        assert [g.value for g in ring.games] == [28, 31, 24, 19, 27]

    def test_none_uses_default(self, sample_snapshot):
        ring = compute_heat_ring(sample_snapshot.game_logs, "points", 24.5, max_games=None)
        assert ring.aggregates.total_games == 10

    def test_margins_and_misses(self, log_factory):
        ring = compute_heat_ring(log_factory([18, 25]), "points", 20.5)
        assert ring.games[0].hit is False
        assert ring.games[0].margin == pytest.approx(-2.5)
        assert ring.aggregates.streak == -1
        assert ring.aggregates.avg_margin == pytest.approx(1.0)

    def test_empty(self):
        ring = compute_heat_ring((), "points", 20.5)
        assert ring.games == ()
        assert ring.aggregates.total_games == 0
        assert ring.aggregates.hit_rate == 0.0
        assert ring.to_dict()["aggregates"]["streak"] == 0
