"""Integration tests for the single-pass analysis pipeline."""

import json

import pytest

from propcheck.config import Config
from propcheck.models.verdict import score_snapshot
from propcheck.normalization.snapshot import snapshot_from_dict
from propcheck.pipeline import analyze_prop


class TestAnalyzeProp:
    """End-to-end analysis of one snapshot."""

    def test_report_is_consistent(self, sample_snapshot):
        report = analyze_prop(sample_snapshot)
        _, verdict = score_snapshot(sample_snapshot)
        assert report.verdict == verdict
        assert report.window.games_in_window == 10
        assert report.heat_ring.aggregates.total_games == 10
        assert report.spectrum.available is True
        assert len(report.timeline.points) == 12
        assert report.similar is not None
        assert report.warnings == []

    def test_max_games_sizes_heat_ring(self, sample_snapshot):
        report = analyze_prop(sample_snapshot, max_games=3)
        assert report.heat_ring.aggregates.total_games == 3
        assert report.window.games_in_window == 10

    def test_to_dict_is_json_ready(self, sample_snapshot):
        data = analyze_prop(sample_snapshot).to_dict()
        encoded = json.loads(json.dumps(data))
        assert encoded["verdict"]["label"] == data["verdict"]["label"]
        assert encoded["convergence"]["roster_size"] == 7
        assert len(encoded["spectrum"]["kde"]) == 100

    def test_explain(self, sample_snapshot):
        report = analyze_prop(sample_snapshot)
        text = report.explain()
        assert "LeBron James (LAL) vs DEN" in text
        assert report.verdict.label in text
        for factor in report.convergence.factors:
            assert factor.name in text

    def test_no_history(self, snapshot_factory):
        report = analyze_prop(snapshot_factory(values=[], defense_rank=None))
        assert report.spectrum.available is False
        assert report.similar is None
        assert report.heat_ring.aggregates.total_games == 0
        assert report.verdict.label == "TOSS-UP"
        assert any("No game log history" in w for w in report.warnings)

    def test_carries_caller_warnings(self, sample_snapshot):
        report = analyze_prop(sample_snapshot, warnings=["injuries unavailable"])
        assert report.warnings == ["injuries unavailable"]
        assert "! injuries unavailable" in report.explain()

    def test_config_changes_outcome(self, sample_snapshot):
        report = analyze_prop(sample_snapshot, config=Config(verdict_window=5))
        assert report.window.games_in_window == 5

    def test_from_payload(self, snapshot_payload):
        report = analyze_prop(snapshot_from_dict(snapshot_payload))
        assert report.stat == "points"
        assert any(flag.key == "key_teammate_out" for flag in report.narratives)
        assert 10 <= report.verdict.confidence <= 99
