"""Trailing hit/miss ring for a stat and line."""

from typing import Optional, Sequence

from propcheck.features.windows import safe_mean, signed_streak
from propcheck.models.results import HeatRing, HeatRingAggregates, HeatRingGame
from propcheck.models.types import GameLogEntry

DEFAULT_MAX_GAMES = 10


def compute_heat_ring(
    game_logs: Sequence[GameLogEntry],
    stat: str,
    line: float,
    max_games: Optional[int] = DEFAULT_MAX_GAMES,
) -> HeatRing:
    """Most recent ``max_games`` games, newest first, with streak and rates.

    ``max_games`` arrives already resolved by the caller's access policy.
    """
    line = float(line)
    limit = DEFAULT_MAX_GAMES if max_games is None else max(int(max_games), 0)
    recent = list(game_logs[:limit])

    games = []
    for log in recent:
        value = log.value(stat)
        games.append(HeatRingGame(
            date=log.date,
            opponent=log.opponent,
            is_home=log.is_home,
            value=value,
            margin=value - line,
            hit=value > line,
            opponent_def_rank=log.opponent_def_rank,
            is_back_to_back=log.is_back_to_back,
        ))

    if not games:
        return HeatRing(games=(), aggregates=HeatRingAggregates(), line=line)

    values = [g.value for g in games]
    hit_count = sum(1 for g in games if g.hit)
    aggregates = HeatRingAggregates(
        hit_rate=hit_count / len(games),
        hit_count=hit_count,
        total_games=len(games),
        streak=signed_streak(values, line),
        avg_margin=safe_mean([g.margin for g in games]),
        avg_value=safe_mean(values),
    )
    return HeatRing(games=tuple(games), aggregates=aggregates, line=line)
