"""
Convergence aggregation.

Runs the factor roster over one snapshot and tallies the signals. The
seven core factors are always present; extensions are appended only when
their context exists, and the result records which is which so callers
can see exactly what the roster held.
"""

from dataclasses import replace
import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.constants import NEUTRAL, OVER, UNDER, TOSS_UP
from propcheck.models.extensions import active_extensions
from propcheck.models.factors import CORE_EVALUATORS
from propcheck.models.results import ConvergenceFactor, ConvergenceResult, Lean, WeightedTally
from propcheck.models.types import (
    DefenseRanking,
    ExtraContext,
    Game,
    GameLogEntry,
    Injury,
    Player,
    PropSnapshot,
    SeasonStats,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)


def normalized_weights(keys: Sequence[str], config: Config) -> Dict[str, float]:
    """Configured weights rescaled to sum to 1 over the active roster."""
    raw = {key: config.weight_for(key) for key in keys}
    total = sum(raw.values())
    if total <= 0:
        if not keys:
            return {}
        return {key: 1.0 / len(keys) for key in keys}
    return {key: value / total for key, value in raw.items()}


def tally(factors: Iterable[ConvergenceFactor]) -> Tuple[int, int, int]:
    over = under = neutral = 0
    for factor in factors:
        if factor.signal == OVER:
            over += 1
        elif factor.signal == UNDER:
            under += 1
        else:
            neutral += 1
    return over, under, neutral


def weighted_tally(factors: Iterable[ConvergenceFactor]) -> WeightedTally:
    sums = {OVER: 0.0, UNDER: 0.0, 'neutral': 0.0}
    for factor in factors:
        bucket = factor.signal if factor.signal in (OVER, UNDER) else 'neutral'
        sums[bucket] += factor.strength
    return WeightedTally(over=sums[OVER], under=sums[UNDER], neutral=sums['neutral'])


def compute_lean(factors: Sequence[ConvergenceFactor], config: Optional[Config] = None) -> Lean:
    """Weighted lean: sum of weight x direction x strength, scaled to +/-100."""
    config = config or DEFAULT_CONFIG
    score = sum(f.weight * f.direction * f.strength for f in factors) * 100.0
    magnitude = abs(score)
    if magnitude < config.lean_tossup_band:
        direction = TOSS_UP
    else:
        direction = OVER if score > 0 else UNDER
    if magnitude >= config.lean_strong_tier:
        tier = 'STRONG'
    elif magnitude >= config.lean_moderate_tier:
        tier = 'MODERATE'
    else:
        tier = 'NEUTRAL'
    confidence = min(99, max(1, round_half_up(magnitude)))
    return Lean(direction=direction, score=score, confidence=confidence, tier=tier)


def aggregate(
    factors: Sequence[ConvergenceFactor],
    config: Optional[Config] = None,
    core_keys: Sequence[str] = (),
    extension_keys: Sequence[str] = (),
) -> ConvergenceResult:
    config = config or DEFAULT_CONFIG
    over, under, neutral = tally(factors)
    return ConvergenceResult(
        factors=tuple(factors),
        over_count=over,
        under_count=under,
        neutral_count=neutral,
        core_keys=tuple(core_keys),
        extension_keys=tuple(extension_keys),
        weighted_factors=weighted_tally(factors),
        lean=compute_lean(factors, config),
    )


def evaluate_snapshot(snapshot: PropSnapshot, config: Optional[Config] = None) -> ConvergenceResult:
    """Run every core evaluator plus the active extensions and aggregate."""
    config = config or DEFAULT_CONFIG
    extensions = active_extensions(snapshot)
    roster = list(CORE_EVALUATORS) + extensions
    keys = [key for key, _ in roster]
    weights = normalized_weights(keys, config)

    factors = []
    for key, evaluator in roster:
        factor = evaluator(snapshot, config)
        fired = factor.signal != NEUTRAL and factor.strength > config.fired_strength
        factors.append(replace(factor, weight=weights[key], fired=fired))

    result = aggregate(
        factors,
        config,
        core_keys=[key for key, _ in CORE_EVALUATORS],
        extension_keys=[key for key, _ in extensions],
    )
    logger.debug(
        "Convergence %s %s %g: %d over / %d under / %d neutral",
        snapshot.player.name, snapshot.stat, snapshot.line,
        result.over_count, result.under_count, result.neutral_count,
    )
    return result


def evaluate_convergence(
    player: Player,
    game: Game,
    game_logs: Sequence[GameLogEntry],
    season_stats: Optional[SeasonStats],
    defense_ranking: Optional[DefenseRanking],
    stat: str,
    line: float,
    extra: Optional[ExtraContext] = None,
    config: Optional[Config] = None,
    injuries: Sequence[Injury] = (),
    rest_days: Optional[int] = None,
    is_back_to_back: Optional[bool] = None,
) -> ConvergenceResult:
    if season_stats is None:
        season_stats = SeasonStats.from_logs(game_logs, stat)
    snapshot = PropSnapshot(
        player=player,
        game=game,
        game_logs=tuple(game_logs),
        season_stats=season_stats,
        stat=stat,
        line=float(line),
        defense_ranking=defense_ranking,
        extra=extra,
        injuries=tuple(injuries),
        rest_days=rest_days,
        is_back_to_back=is_back_to_back,
    )
    return evaluate_snapshot(snapshot, config)
