"""Unit tests for convergence aggregation and the weighted lean."""

from dataclasses import replace

import pytest

from propcheck.config import Config
from propcheck.constants import NEUTRAL, OVER, TOSS_UP, UNDER
from propcheck.models.convergence import (
    compute_lean,
    evaluate_convergence,
    evaluate_snapshot,
    normalized_weights,
    round_half_up,
    weighted_tally,
)
from propcheck.models.factors import CORE_FACTOR_KEYS, make_factor
from propcheck.models.types import ExtraContext


def _weighted(signal, strength, weight):
    return replace(make_factor("recent_trend", signal, strength, "", ""), weight=weight)


class TestEvaluateSnapshot:
    """Tests for running the roster over a snapshot."""

    def test_counts_cover_roster(self, sample_snapshot):
        result = evaluate_snapshot(sample_snapshot)
        assert result.over_count + result.under_count + result.neutral_count == result.roster_size
        assert result.core_keys == CORE_FACTOR_KEYS
        assert [f.key for f in result.factors] == list(CORE_FACTOR_KEYS)

    def test_counts_cover_roster_with_extensions(self, snapshot_factory):
        snapshot = snapshot_factory(values=[25] * 8, extra=ExtraContext(game_total=230.0))
        result = evaluate_snapshot(snapshot)
        assert result.roster_size == 8
        assert result.over_count + result.under_count + result.neutral_count == 8

    def test_idempotent(self, sample_snapshot):
        assert evaluate_snapshot(sample_snapshot) == evaluate_snapshot(sample_snapshot)

    def test_weights_normalized_over_roster(self, sample_snapshot):
        result = evaluate_snapshot(sample_snapshot)
        assert sum(f.weight for f in result.factors) == pytest.approx(1.0)

    def test_keyword_entry_point_matches(self, sample_snapshot):
        snap = sample_snapshot
        result = evaluate_convergence(
            snap.player, snap.game, snap.game_logs, snap.season_stats, snap.defense_ranking,
            snap.stat, snap.line,
        )
        assert result == evaluate_snapshot(snap)

    def test_weighted_tally_sums_strength(self, sample_snapshot):
        result = evaluate_snapshot(sample_snapshot)
        over = sum(f.strength for f in result.factors if f.signal == OVER)
        assert result.weighted_factors.over == pytest.approx(over)
        assert weighted_tally(result.factors) == result.weighted_factors


class TestLean:
    """Tests for the weight-normalized lean."""

    def test_strong_over(self):
        lean = compute_lean([_weighted(OVER, 1.0, 0.5), _weighted(OVER, 1.0, 0.5)])
        assert lean.direction == OVER
        assert lean.score == pytest.approx(100.0)
        assert lean.confidence == 99
        assert lean.tier == "STRONG"

    def test_balanced_is_toss_up(self):
        lean = compute_lean([_weighted(OVER, 0.4, 0.5), _weighted(UNDER, 0.4, 0.5)])
        assert lean.direction == TOSS_UP
        assert lean.tier == "NEUTRAL"
        assert lean.confidence == 1

    def test_moderate_under(self):
        lean = compute_lean([_weighted(UNDER, 0.55, 1.0), _weighted(NEUTRAL, 0.9, 0.0)])
        assert lean.direction == UNDER
        assert lean.score == pytest.approx(-55.0)
        assert lean.tier == "MODERATE"


class TestHelpers:
    """Tests for weighting and rounding helpers."""

    def test_normalized_weights(self):
        weights = normalized_weights(["recent_trend", "season_avg"], Config())
        assert weights["recent_trend"] == pytest.approx(0.26 / 0.46)
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_zero_weights_fall_back_to_uniform(self):
        config = Config(factor_weights={})
        weights = normalized_weights(["a", "b", "c", "d"], config)
        assert weights == {"a": 0.25, "b": 0.25, "c": 0.25, "d": 0.25}

    def test_round_half_up(self):
        assert round_half_up(58.5) == 59
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestFiredFactors:
    """A factor fires when it leans a direction above the configured strength."""

    def test_fired_marked_on_factors(self, sample_snapshot):
        result = evaluate_snapshot(sample_snapshot)
        for factor in result.factors:
            expected = factor.signal != NEUTRAL and factor.strength > 0.1
            assert factor.fired is expected
        assert result.fired_count == sum(1 for f in result.factors if f.fired)

    def test_threshold_from_config(self, sample_snapshot):
        result = evaluate_snapshot(sample_snapshot, Config(fired_strength=1.0))
        assert result.fired_count == 0

    def test_fired_in_output(self, sample_snapshot):
        data = evaluate_snapshot(sample_snapshot).to_dict()
        assert all("fired" in factor for factor in data["factors"])
        assert data["fired_count"] == sum(factor["fired"] for factor in data["factors"])
