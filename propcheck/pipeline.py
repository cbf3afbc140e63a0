"""
Single-pass analysis of one prop snapshot.

Runs factors -> aggregation -> verdict, and alongside them the heat ring,
spectrum, timeline, narratives and similar situations, all from the same
immutable snapshot. Nothing here fetches or caches.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from propcheck.analysis.heat_ring import compute_heat_ring
from propcheck.analysis.narratives import detect_snapshot_narratives
from propcheck.analysis.similar import find_snapshot_similar_situations
from propcheck.analysis.spectrum import compute_spectrum
from propcheck.analysis.timeline import build_game_log_timeline
from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.features.windows import WindowStats, window_stats
from propcheck.models.convergence import evaluate_snapshot
from propcheck.models.results import (
    ConvergenceResult,
    GameLogTimeline,
    HeatRing,
    NarrativeFlag,
    PropSpectrum,
    SimilarSituationSet,
    Verdict,
    format_factor_lines,
)
from propcheck.models.types import PropSnapshot
from propcheck.models.verdict import synthesize_verdict

logger = logging.getLogger(__name__)


@dataclass
class PropReport:
    """Everything the engine says about one prop."""
    player: str
    team: str
    opponent: str
    stat: str
    line: float
    is_home: bool
    convergence: ConvergenceResult
    window: WindowStats
    verdict: Verdict
    heat_ring: HeatRing
    spectrum: PropSpectrum
    timeline: GameLogTimeline
    narratives: List[NarrativeFlag] = field(default_factory=list)
    similar: Optional[SimilarSituationSet] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'player': self.player,
            'team': self.team,
            'opponent': self.opponent,
            'stat': self.stat,
            'line': self.line,
            'is_home': self.is_home,
            'verdict': self.verdict.to_dict(),
            'window': self.window.to_dict(),
            'convergence': self.convergence.to_dict(),
            'heat_ring': self.heat_ring.to_dict(),
            'spectrum': self.spectrum.to_dict(),
            'timeline': self.timeline.to_dict(),
            'narratives': [flag.to_dict() for flag in self.narratives],
            'similar_situations': self.similar.to_dict() if self.similar else None,
            'warnings': list(self.warnings),
        }

    def explain(self) -> str:
        """Human-readable breakdown of the verdict and its inputs."""
        venue = "vs" if self.is_home else "@"
        lines = [
            f"=== {self.player} ({self.team}) {venue} {self.opponent} ===",
            f"{self.stat} {self.line:g}: {self.verdict.label} ({self.verdict.confidence}% confidence)",
            "",
            f"Factors ({self.convergence.over_count} over / {self.convergence.under_count} under / "
            f"{self.convergence.neutral_count} neutral of {self.convergence.roster_size}):",
        ]
        lines.extend(format_factor_lines(list(self.convergence.factors)))
        if self.convergence.lean:
            lean = self.convergence.lean
            lines.append(f"  Weighted lean: {lean.direction} {lean.score:+.1f} ({lean.tier})")

        agg = self.heat_ring.aggregates
        lines.extend([
            "",
            f"L{self.window.games_in_window}: hit rate {self.window.hit_rate:.0%}, "
            f"avg margin {self.window.avg_margin:+.1f}",
            f"Heat ring: {agg.hit_count}/{agg.total_games} hits, streak {agg.streak:+d}",
            f"Season avg: {self.verdict.season_avg:.1f}",
        ])
        if self.spectrum.available:
            lines.append(
                f"Spectrum: {self.spectrum.over_pct:.0f}% of games over, "
                f"volatility {self.spectrum.volatility} ({self.spectrum.volatility_score:.0f})"
            )
        if self.similar:
            lines.append(
                f"Similar: {self.similar.description}: {self.similar.matching_games} games, "
                f"{self.similar.hit_rate:.0%} hit rate"
            )
        if self.narratives:
            lines.append("")
            lines.append("Narratives:")
            for flag in self.narratives:
                lines.append(f"  [{flag.severity.upper()}] {flag.headline}: {flag.detail}")
        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  ! {warning}" for warning in self.warnings)
        return "\n".join(lines)


def analyze_prop(
    snapshot: PropSnapshot,
    config: Optional[Config] = None,
    max_games: Optional[int] = None,
    warnings: Optional[List[str]] = None,
) -> PropReport:
    """Full analysis for one snapshot.

    ``max_games`` sizes the heat ring (the caller resolves any access
    tiering); it defaults to ``config.heat_ring_games``.
    """
    config = config or DEFAULT_CONFIG
    convergence = evaluate_snapshot(snapshot, config)
    window = window_stats(snapshot.game_logs, snapshot.stat, snapshot.line, config.verdict_window)
    verdict = synthesize_verdict(
        convergence,
        hit_rate_l10=window.hit_rate,
        avg_margin_l10=window.avg_margin,
        season_avg=snapshot.season_average,
        config=config,
    )

    report_warnings = list(warnings or [])
    if not snapshot.game_logs:
        report_warnings.append("No game log history: spectrum and similar situations unavailable")

    report = PropReport(
        player=snapshot.player.name,
        team=snapshot.player.team.abbrev,
        opponent=snapshot.opponent_abbrev,
        stat=snapshot.stat,
        line=snapshot.line,
        is_home=snapshot.is_home,
        convergence=convergence,
        window=window,
        verdict=verdict,
        heat_ring=compute_heat_ring(
            snapshot.game_logs, snapshot.stat, snapshot.line,
            max_games if max_games is not None else config.heat_ring_games,
        ),
        spectrum=compute_spectrum(snapshot.game_logs, snapshot.stat, snapshot.line, config),
        timeline=build_game_log_timeline(snapshot.game_logs, snapshot.stat, config.timeline_window),
        narratives=detect_snapshot_narratives(snapshot, config),
        similar=find_snapshot_similar_situations(snapshot, config),
        warnings=report_warnings,
    )
    logger.info(
        "%s %s %g -> %s (%d%%)",
        report.player, report.stat, report.line, verdict.label, verdict.confidence,
    )
    return report
