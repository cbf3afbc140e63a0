"""
Pytest configuration and shared fixtures for propcheck tests.
"""

from datetime import date, timedelta

import pytest

from propcheck.config import Config
from propcheck.models.types import (
    DefenseRanking,
    Game,
    GameLogEntry,
    Player,
    PropSnapshot,
    SeasonStats,
    Team,
)

LAL = Team(id="1610612747", abbrev="LAL", name="Los Angeles Lakers")
BOS = Team(id="1610612738", abbrev="BOS", name="Boston Celtics")
DEN = Team(id="1610612743", abbrev="DEN", name="Denver Nuggets")

BASE_DATE = date(2024, 3, 1)


def build_logs(
    values,
    stat="points",
    opponents=None,
    home_flags=None,
    rest_days=None,
    back_to_backs=None,
    ranks=None,
    results=None,
    minutes=None,
    spacing=2,
):
    """Game logs most-recent-first, one every ``spacing`` days before BASE_DATE."""
    logs = []
    for i, value in enumerate(values):
        logs.append(GameLogEntry(
            date=(BASE_DATE - timedelta(days=spacing * (i + 1))).isoformat(),
            opponent=opponents[i] if opponents else "DEN",
            is_home=home_flags[i] if home_flags else i % 2 == 0,
            rest_days=rest_days[i] if rest_days else 1,
            is_back_to_back=back_to_backs[i] if back_to_backs else False,
            stats={stat: value},
            opponent_def_rank=ranks[i] if ranks else None,
            result=results[i] if results else None,
            minutes=minutes[i] if minutes else None,
        ))
    return tuple(logs)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def player():
    return Player(id="2544", name="LeBron James", team=LAL, sport="nba", position="F")


@pytest.fixture
def home_game():
    """LAL hosting DEN."""
    return Game(id="g-1", date=BASE_DATE.isoformat(), home_team=LAL, away_team=DEN)


@pytest.fixture
def road_game():
    """LAL at BOS."""
    return Game(id="g-2", date=BASE_DATE.isoformat(), home_team=BOS, away_team=LAL)


@pytest.fixture
def log_factory():
    return build_logs


@pytest.fixture
def seven_of_ten_logs():
    """Ten games, seven of them over 20.5 points (20.5 itself is a miss)."""
    return build_logs([25, 22, 21, 30, 24, 28, 21, 18, 20, 20.5])


@pytest.fixture
def snapshot_factory(player, home_game):
    def _make(
        values=None,
        logs=None,
        line=20.5,
        stat="points",
        game=None,
        defense_rank=15,
        season_stats=None,
        **kwargs
    ):
        if logs is None:
            logs = build_logs(values or [], stat=stat)
        if season_stats is None:
            season_stats = SeasonStats.from_logs(logs, stat)
        ranking = DefenseRanking(rank=defense_rank) if defense_rank is not None else None
        return PropSnapshot(
            player=kwargs.pop("player", player),
            game=game or home_game,
            game_logs=logs,
            season_stats=season_stats,
            stat=stat,
            line=line,
            defense_ranking=ranking,
            **kwargs
        )
    return _make


@pytest.fixture
def sample_snapshot(snapshot_factory):
    """A full-history snapshot used by pipeline level tests."""
    logs = build_logs(
        [28, 31, 24, 19, 27, 33, 22, 26, 18, 30, 25, 29],
        opponents=["BOS", "DEN", "MIA", "DEN", "PHX", "DEN", "GSW", "BOS", "DEN", "UTA", "DEN", "SAC"],
        ranks=[3, 12, 18, 12, 25, 12, 8, 3, 12, 29, 12, 22],
        rest_days=[1, 2, 1, 0, 3, 1, 1, 0, 2, 1, 4, 1],
        back_to_backs=[False, False, False, True, False, False, False, True, False, False, False, False],
        results=["W", "W", "W", "W", "L", "W", "L", "L", "W", "W", "L", "W"],
    )
    return snapshot_factory(logs=logs, line=24.5, defense_rank=24)


@pytest.fixture
def snapshot_payload():
    """JSON-shaped snapshot as the CLI and normalization layer receive it."""
    values = [28, 31, 24, 19, 27, 33, 22, 26, 18, 30]
    return {
        "player": {"id": "2544", "name": "LeBron James", "team": {"id": "1610612747", "abbrev": "LAL"}},
        "game": {"id": "g-1", "date": "2024-03-01", "home_team": "LAL", "away_team": "DEN"},
        "stat": "PTS",
        "line": 24.5,
        "defense_ranking": {"rank": 24, "stats_allowed": 116.2},
        # deliberately oldest-first
        "game_logs": [
            {
                "date": (BASE_DATE - timedelta(days=2 * (len(values) - i))).isoformat(),
                "opponent": "DEN" if i % 3 == 0 else "PHX",
                "is_home": i % 2 == 0,
                "rest_days": 1,
                "stats": {"pts": value},
            }
            for i, value in enumerate(reversed(values))
        ],
        "injuries": [
            {"player_name": "Anthony Davis", "team_side": "teammate", "status": "Out", "impact": "high"},
        ],
    }
