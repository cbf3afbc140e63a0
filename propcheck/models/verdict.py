"""Verdict synthesis: factor agreement blended with the trailing hit rate."""

from typing import Optional, Tuple

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.constants import OVER, UNDER, TOSS_UP
from propcheck.features.windows import window_stats
from propcheck.models.convergence import evaluate_snapshot, round_half_up
from propcheck.models.results import ConvergenceResult, Verdict
from propcheck.models.types import PropSnapshot


def _label(direction: str, confidence: int, config: Config) -> str:
    if direction == TOSS_UP:
        return "TOSS-UP"
    band = "STRONG" if confidence >= config.strong_confidence else "LEAN"
    return f"{band} {direction.upper()}"


def synthesize_verdict(
    convergence: ConvergenceResult,
    hit_rate_l10: float,
    avg_margin_l10: float,
    season_avg: float,
    config: Optional[Config] = None,
) -> Verdict:
    """
    Direction follows the over/under majority; a gap of at most
    ``verdict_tie_margin`` is a toss-up.

    confidence = round(0.6 * convergence_strength + 0.4 * hit_rate_strength)
    clamped to [confidence_floor, confidence_ceiling], where
    convergence_strength is the majority share of the roster (0-100) and
    hit_rate_strength is |hit_rate_l10 - 0.5| * 200.
    """
    config = config or DEFAULT_CONFIG
    over = convergence.over_count
    under = convergence.under_count
    roster = convergence.roster_size

    if abs(over - under) <= config.verdict_tie_margin:
        direction = TOSS_UP
    elif over > under:
        direction = OVER
    else:
        direction = UNDER

    majority = max(over, under)
    convergence_strength = (majority / float(roster)) * 100.0 if roster else 0.0
    hit_rate_strength = abs(float(hit_rate_l10) - 0.5) * 200.0
    raw = round_half_up(0.6 * convergence_strength + 0.4 * hit_rate_strength)
    confidence = max(config.confidence_floor, min(config.confidence_ceiling, raw))

    return Verdict(
        label=_label(direction, confidence, config),
        direction=direction,
        convergence_score=majority,
        confidence=confidence,
        hit_rate_l10=float(hit_rate_l10),
        avg_margin_l10=float(avg_margin_l10),
        season_avg=float(season_avg),
        lean=convergence.lean,
    )


def verdict_for_snapshot(
    snapshot: PropSnapshot,
    convergence: ConvergenceResult,
    config: Optional[Config] = None,
) -> Verdict:
    """Verdict using the snapshot's trailing window and season average."""
    config = config or DEFAULT_CONFIG
    window = window_stats(snapshot.game_logs, snapshot.stat, snapshot.line, config.verdict_window)
    return synthesize_verdict(
        convergence,
        hit_rate_l10=window.hit_rate,
        avg_margin_l10=window.avg_margin,
        season_avg=snapshot.season_average,
        config=config,
    )


def score_snapshot(snapshot: PropSnapshot, config: Optional[Config] = None) -> Tuple[ConvergenceResult, Verdict]:
    convergence = evaluate_snapshot(snapshot, config)
    return convergence, verdict_for_snapshot(snapshot, convergence, config)
