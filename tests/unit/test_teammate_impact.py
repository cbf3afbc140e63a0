"""Unit tests for teammate-absence simulation."""

import pytest

from propcheck.config import Config
from propcheck.models.types import GameLogEntry, Player, Team
from propcheck.simulation.teammate_impact import TeammateLog, simulate_teammate_absence, teammate_impact

LAL = Team(id="1610612747", abbrev="LAL")

PLAYED = ["2024-01-02", "2024-01-04", "2024-01-06", "2024-01-08"]


def _teammate(name, values_by_date):
    logs = [
        GameLogEntry(date=day, opponent="DEN", is_home=True, stats={"points": value})
        for day, value in values_by_date
    ]
    return TeammateLog(player=Player(id=name.lower(), name=name, team=LAL), game_logs=logs)


@pytest.fixture
def boosted():
    return _teammate("Austin Reaves", [
        ("2024-01-02", 10), ("2024-01-04", 12), ("2024-01-06", 8),
        ("2024-01-10", 15), ("2024-01-12", 15),
    ])


@pytest.fixture
def steady():
    return _teammate("D'Angelo Russell", [
        ("2024-01-02", 15), ("2024-01-04", 15), ("2024-01-06", 15),
        ("2024-01-10", 15.3), ("2024-01-12", 15.3),
    ])


@pytest.fixture
def dropped():
    return _teammate("Rui Hachimura", [
        ("2024-01-02", 14), ("2024-01-04", 14), ("2024-01-06", 14),
        ("2024-01-10", 12), ("2024-01-12", 12), ("2024-01-14", 12),
    ])


class TestTeammateImpact:
    """Tests for the with/without partition."""

    def test_boost(self, boosted):
        impact = teammate_impact(boosted, PLAYED, "points")
        assert impact.games_with == 3
        assert impact.games_without == 2
        assert impact.avg_with == pytest.approx(10.0)
        assert impact.avg_without == pytest.approx(15.0)
        assert impact.delta == pytest.approx(5.0)
        assert impact.pct_change == pytest.approx(50.0)
        assert impact.direction == "boost"

    def test_dead_zone(self, steady):
        impact = teammate_impact(steady, PLAYED, "points")
        assert impact.direction == "neutral"

    def test_drop(self, dropped):
        assert teammate_impact(dropped, PLAYED, "points").direction == "drop"

    def test_insufficient_with_sample(self):
        teammate = _teammate("Bench Wing", [
            ("2024-01-02", 10), ("2024-01-04", 12),
            ("2024-01-10", 15), ("2024-01-12", 15), ("2024-01-14", 9), ("2024-01-16", 11),
        ])
        assert teammate_impact(teammate, PLAYED, "points") is None

    def test_insufficient_without_sample(self):
        teammate = _teammate("Bench Big", [
            ("2024-01-02", 10), ("2024-01-04", 12), ("2024-01-06", 8), ("2024-01-10", 15),
        ])
        assert teammate_impact(teammate, PLAYED, "points") is None

    def test_configured_minimums(self, boosted):
        assert teammate_impact(boosted, PLAYED, "points", Config(teammate_min_without=3)) is None


class TestSimulateTeammateAbsence:
    """Tests for the roster-level result."""

    def test_ordered_by_effect_size(self, boosted, steady, dropped):
        impacts = simulate_teammate_absence(PLAYED, [steady, dropped, boosted], "points")
        assert [i.player_name for i in impacts] == ["Austin Reaves", "Rui Hachimura", "D'Angelo Russell"]

    def test_skips_thin_samples(self, boosted):
        thin = _teammate("Two Way", [("2024-01-02", 4), ("2024-01-10", 6)])
        impacts = simulate_teammate_absence(PLAYED, [thin, boosted], "points")
        assert [i.player_name for i in impacts] == ["Austin Reaves"]

    def test_no_teammates(self):
        assert simulate_teammate_absence(PLAYED, [], "points") == []
