"""Unit tests for the game log timeline."""

import pytest

from propcheck.analysis.timeline import build_game_log_timeline, detect_markers
from propcheck.models.types import GameLogEntry


def _log(day, value, **kwargs):
    return GameLogEntry(date=day, opponent="DEN", is_home=True, stats={"points": value}, **kwargs)


class TestTimeline:
    """Tests for build_game_log_timeline."""

    def test_oldest_first_with_moving_average(self, log_factory):
        logs = log_factory([5, 4, 3, 2, 1])
        timeline = build_game_log_timeline(logs, "points", window=3)
        assert [p.value for p in timeline.points] == [1, 2, 3, 4, 5]
        assert [p.moving_average for p in timeline.points] == pytest.approx([1.0, 1.5, 2.0, 3.0, 4.0])
        assert timeline.points[0].date < timeline.points[-1].date
        assert timeline.season_average == pytest.approx(3.0)

    def test_empty(self):
        timeline = build_game_log_timeline((), "points")
        assert timeline.points == ()
        assert timeline.season_average == 0.0
        assert timeline.to_dict()["points"] == []

    def test_return_marker(self):
        logs = (
            _log("2024-02-15", 30, rest_days=10),
            _log("2024-02-03", 22),
            _log("2024-02-01", 25),
        )
        timeline = build_game_log_timeline(logs, "points")
        assert timeline.points[0].markers == ()
        assert "injury_return" in timeline.points[2].markers
        assert "rest_advantage" in timeline.points[2].markers


class TestMarkers:
    """Tests for per-game markers."""

    def test_back_to_back(self):
        assert detect_markers(_log("2024-02-02", 20, rest_days=0, is_back_to_back=True)) == ["back_to_back"]

    def test_plain_game(self):
        previous = _log("2024-02-01", 20)
        assert detect_markers(_log("2024-02-03", 20), previous) == []
