"""Unit tests for similar-situation retrieval."""

import pytest

from propcheck.analysis.similar import find_similar_situations, find_snapshot_similar_situations, rest_tier
from propcheck.models.types import DefenseRanking


def _find(player, game, logs, rank=28, rest_days=1, is_back_to_back=False):
    return find_similar_situations(
        player=player,
        game=game,
        game_logs=logs,
        defense_ranking=DefenseRanking(rank=rank) if rank is not None else None,
        stat="points",
        line=20.5,
        rest_days=rest_days,
        is_back_to_back=is_back_to_back,
    )


class TestSimilarSituations:
    """Tests for tiered matching."""

    def test_full_match(self, player, home_game, log_factory):
        logs = log_factory(
            [30, 30, 10, 30, 15, 15],
            home_flags=[True, True, True, True, False, True],
            ranks=[25, 22, 30, 21, 25, 5],
        )
        result = _find(player, home_game, logs)
        assert result.match_tier == 1
        assert result.matching_games == 4
        assert result.hit_rate == pytest.approx(0.75)
        assert "bottom-tier defense" in result.description
        assert "normal rest" in result.description

    def test_drops_rest_before_defense(self, player, home_game, log_factory):
        logs = log_factory(
            [30, 30, 30, 20],
            home_flags=[True] * 4,
            ranks=[25, 22, 30, 25],
            rest_days=[3, 3, 1, 3],
        )
        result = _find(player, home_game, logs)
        assert result.match_tier == 2
        assert result.matching_games == 4

    def test_venue_and_rest_without_ranking(self, player, home_game, log_factory):
        logs = log_factory([30, 30, 30, 20], home_flags=[True, True, True, False])
        result = _find(player, home_game, logs, rank=None)
        assert result.match_tier == 2
        assert result.matching_games == 3
        assert "normal rest" in result.description

    def test_back_to_back_without_ranking(self, player, home_game, log_factory):
        """Rest still narrows the sample when no ranking is supplied."""
        logs = log_factory(
            [5, 5, 5, 5, 30, 30, 30, 30, 30, 30],
            home_flags=[True] * 10,
            rest_days=[0] * 4 + [1] * 6,
            back_to_backs=[True] * 4 + [False] * 6,
        )
        result = _find(player, home_game, logs, rank=None, rest_days=0, is_back_to_back=True)
        assert result.match_tier == 2
        assert result.matching_games == 4
        assert result.hit_rate == 0.0
        assert "back-to-back" in result.description

    def test_venue_only_without_ranking(self, player, home_game, log_factory):
        logs = log_factory(
            [30, 30, 30, 20],
            home_flags=[True, True, True, False],
            rest_days=[3, 1, 1, 1],
        )
        result = _find(player, home_game, logs, rank=None)
        assert result.match_tier == 3
        assert result.matching_games == 3

    def test_too_few_matches(self, player, home_game, log_factory):
        logs = log_factory([30, 30, 30, 20, 20], home_flags=[True, True, False, False, False])
        assert _find(player, home_game, logs) is None

    def test_no_history(self, player, home_game):
        assert _find(player, home_game, ()) is None

    def test_snapshot_entry_point(self, sample_snapshot):
        result = find_snapshot_similar_situations(sample_snapshot)
        assert result is not None
        assert all(log.is_home for log in result.games)
        assert result.to_dict()["matching_games"] == result.matching_games

    def test_rest_tier(self):
        assert rest_tier(0, True, 3) == "b2b"
        assert rest_tier(3, False, 3) == "rested"
        assert rest_tier(2, False, 3) == "normal"
