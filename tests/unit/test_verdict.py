"""Unit tests for verdict synthesis."""

import pytest

from propcheck.config import Config
from propcheck.constants import NEUTRAL, OVER, TOSS_UP, UNDER
from propcheck.models.convergence import aggregate
from propcheck.models.factors import make_factor
from propcheck.models.verdict import score_snapshot, synthesize_verdict


def _convergence(over, under, neutral):
    signals = [OVER] * over + [UNDER] * under + [NEUTRAL] * neutral
    factors = [make_factor(f"f{i}", signal, 0.5, "", "") for i, signal in enumerate(signals)]
    return aggregate(factors)


class TestSynthesizeVerdict:
    """Tests for direction, confidence and label."""

    def test_lean_over(self):
        verdict = synthesize_verdict(_convergence(5, 1, 1), 0.7, 2.1, 24.0)
        assert verdict.direction == OVER
        assert verdict.convergence_score == 5
        assert verdict.confidence == 59
        assert verdict.label == "LEAN OVER"

    def test_strong_under(self):
        verdict = synthesize_verdict(_convergence(1, 6, 0), 0.1, -4.0, 18.0)
        assert verdict.direction == UNDER
        assert verdict.confidence == 83
        assert verdict.label == "STRONG UNDER"

    def test_near_tie_is_toss_up(self):
        verdict = synthesize_verdict(_convergence(3, 2, 2), 0.9, 3.0, 25.0)
        assert verdict.direction == TOSS_UP
        assert verdict.label == "TOSS-UP"

    def test_floor(self):
        verdict = synthesize_verdict(_convergence(0, 0, 7), 0.5, 0.0, 20.0)
        assert verdict.confidence == 10

    def test_ceiling(self):
        verdict = synthesize_verdict(_convergence(7, 0, 0), 1.0, 6.0, 28.0)
        assert verdict.confidence == 99
        assert verdict.label == "STRONG OVER"

    def test_empty_roster(self):
        verdict = synthesize_verdict(_convergence(0, 0, 0), 0.5, 0.0, 0.0)
        assert verdict.direction == TOSS_UP
        assert verdict.confidence == 10

    @pytest.mark.parametrize("rate", [0.0, 0.2, 0.5, 0.8, 1.0])
    def test_confidence_bounds(self, rate):
        for over in range(8):
            for under in range(8 - over):
                verdict = synthesize_verdict(_convergence(over, under, 7 - over - under), rate, 0.0, 20.0)
                assert 10 <= verdict.confidence <= 99

    def test_configured_strong_threshold(self):
        config = Config(strong_confidence=55)
        verdict = synthesize_verdict(_convergence(5, 1, 1), 0.7, 2.1, 24.0, config)
        assert verdict.label == "STRONG OVER"


class TestScoreSnapshot:
    """Tests for the snapshot level helper."""

    def test_uses_trailing_window(self, sample_snapshot):
        convergence, verdict = score_snapshot(sample_snapshot)
        assert verdict.hit_rate_l10 == pytest.approx(0.6)
        assert verdict.season_avg == pytest.approx(sample_snapshot.season_average)
        assert verdict.lean == convergence.lean
