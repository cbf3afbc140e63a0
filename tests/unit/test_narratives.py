"""Unit tests for narrative flags."""

import pytest

from propcheck.analysis.narratives import detect_narratives, detect_snapshot_narratives
from propcheck.models.types import GameLogEntry, Injury, SeasonStats


def _detect(player, game, logs, line=20.5, injuries=(), rest_days=1, is_back_to_back=False, season=None):
    return detect_narratives(
        player=player,
        game=game,
        game_logs=logs,
        season_stats=season if season is not None else SeasonStats.from_logs(logs, "points"),
        injuries=injuries,
        is_home=game.is_home_for(player),
        rest_days=rest_days,
        is_back_to_back=is_back_to_back,
        stat="points",
        line=line,
    )


def _keys(flags):
    return [flag.key for flag in flags]


@pytest.fixture
def quiet_logs(log_factory):
    return log_factory(
        [22, 19, 22, 19, 22, 19],
        opponents=["PHX", "MIA", "DEN", "UTA", "SAC", "GSW"],
    )


class TestNarratives:
    """Tests for the individual narrative rules."""

    def test_quiet_context(self, player, home_game, quiet_logs):
        assert _detect(player, home_game, quiet_logs) == []

    def test_back_to_back_road(self, player, road_game, quiet_logs):
        keys = _keys(_detect(player, road_game, quiet_logs, rest_days=0, is_back_to_back=True))
        assert "back_to_back_road" in keys
        assert "rest_advantage" not in keys

    @pytest.mark.parametrize("days,severity", [(3, "medium"), (4, "high")])
    def test_rest_advantage(self, player, home_game, quiet_logs, days, severity):
        flags = _detect(player, home_game, quiet_logs, rest_days=days)
        assert _keys(flags) == ["rest_advantage"]
        assert flags[0].severity == severity

    def test_rivalry(self, player, road_game, quiet_logs):
        flags = _detect(player, road_game, quiet_logs)
        assert _keys(flags) == ["rivalry"]
        assert "BOS" in flags[0].headline

    def test_hot_and_cold_streaks(self, player, home_game, log_factory):
        hot = _detect(player, home_game, log_factory([25] * 5))
        assert "hot_streak" in _keys(hot)
        cold = _detect(player, home_game, log_factory([18] * 7), line=20.5)
        flag = next(f for f in cold if f.key == "cold_streak")
        assert flag.severity == "high"
        assert flag.impact == "negative"

    def test_bounce_back(self, player, home_game, log_factory):
        flags = _detect(player, home_game, log_factory([10, 25, 22]))
        flag = next(f for f in flags if f.key == "blowout_bounce")
        assert flag.severity == "medium"

    @pytest.mark.parametrize("gap,severity", [(10, "medium"), (15, "high")])
    def test_return_from_absence(self, player, home_game, gap, severity):
        logs = (
            GameLogEntry(date=f"2024-02-{1 + gap:02d}", opponent="PHX", is_home=True, stats={"points": 22}),
            GameLogEntry(date="2024-02-01", opponent="MIA", is_home=False, stats={"points": 19}),
        )
        flags = _detect(player, home_game, logs)
        flag = next(f for f in flags if f.key == "return_from_injury")
        assert flag.severity == severity

    def test_milestone(self, player, home_game, quiet_logs):
        season = SeasonStats(stat="points", average=24.8, games_played=80, total=1985.0)
        flags = _detect(player, home_game, quiet_logs, season=season)
        assert _keys(flags) == ["milestone"]
        assert flags[0].headline == "15 away from 2,000"
        assert flags[0].severity == "high"

    def test_winning_streak(self, player, home_game, log_factory):
        logs = log_factory(
            [22, 19, 22, 19, 22],
            opponents=["PHX", "MIA", "DEN", "UTA", "SAC"],
            results=["W", "W", "W", "W", "L"],
        )
        flags = _detect(player, home_game, logs)
        assert _keys(flags) == ["winning_streak"]

    def test_elevated_vs_opponent(self, player, home_game, log_factory):
        logs = log_factory(
            [35, 20, 35, 20, 35, 20, 20, 20, 20, 20],
            opponents=["DEN", "PHX", "DEN", "UTA", "DEN", "SAC", "GSW", "MIA", "PHX", "UTA"],
        )
        flag = next(f for f in _detect(player, home_game, logs, line=30.5) if f.key == "revenge_game")
        assert flag.severity == "high"
        assert "DEN" in flag.historical_stat

    def test_key_absences(self, player, home_game, quiet_logs):
        injuries = [
            Injury(player_name="Anthony Davis", team_side="teammate", status="Out", impact="high"),
            Injury(player_name="Jamal Murray", team_side="opponent", status="OUT", impact="high"),
            Injury(player_name="Bench Guard", team_side="teammate", status="Out", impact="low"),
            Injury(player_name="Aaron Gordon", team_side="opponent", status="Questionable", impact="high"),
        ]
        flags = _detect(player, home_game, quiet_logs, injuries=injuries)
        assert _keys(flags) == ["key_teammate_out", "key_opponent_out"]
        assert flags[0].impact == "positive"

    def test_snapshot_entry_point(self, sample_snapshot):
        flags = detect_snapshot_narratives(sample_snapshot)
        for flag in flags:
            assert flag.detail
        assert detect_snapshot_narratives(sample_snapshot) == flags
