"""Trailing-window aggregates over most-recent-first game logs.

A window larger than the available history uses every game; an empty
window reports 0 for rates and margins instead of NaN.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from propcheck.models.types import GameLogEntry


@dataclass(frozen=True)
class WindowStats:
    games_in_window: int
    hit_count: int
    hit_rate: float
    avg_margin: float
    avg_value: float

    def to_dict(self) -> dict:
        return {
            'games_in_window': self.games_in_window,
            'hit_count': self.hit_count,
            'hit_rate': round(self.hit_rate, 4),
            'avg_margin': round(self.avg_margin, 3),
            'avg_value': round(self.avg_value, 3),
        }


def stat_values(logs: Sequence[GameLogEntry], stat: str, window: Optional[int] = None) -> np.ndarray:
    """Stat values for the first ``window`` logs (all logs when omitted)."""
    subset = logs if window is None else logs[:max(int(window), 0)]
    return np.array([log.value(stat) for log in subset], dtype=float)


def hit_rate(logs: Sequence[GameLogEntry], stat: str, line: float, window: Optional[int] = None) -> float:
    values = stat_values(logs, stat, window)
    if values.size == 0:
        return 0.0
    # ties are misses
    return float(np.count_nonzero(values > float(line)) / values.size)


def avg_margin(logs: Sequence[GameLogEntry], stat: str, line: float, window: Optional[int] = None) -> float:
    values = stat_values(logs, stat, window)
    if values.size == 0:
        return 0.0
    return float(np.mean(values - float(line)))


def window_stats(logs: Sequence[GameLogEntry], stat: str, line: float, window: Optional[int] = None) -> WindowStats:
    values = stat_values(logs, stat, window)
    if values.size == 0:
        return WindowStats(0, 0, 0.0, 0.0, 0.0)
    hits = int(np.count_nonzero(values > float(line)))
    return WindowStats(
        games_in_window=int(values.size),
        hit_count=hits,
        hit_rate=hits / values.size,
        avg_margin=float(np.mean(values - float(line))),
        avg_value=float(np.mean(values)),
    )


def signed_streak(values: Sequence[float], line: float) -> int:
    """Current run from the first value: +n hits, -n misses (ties miss)."""
    if len(values) == 0:
        return 0
    results = [float(value) > float(line) for value in values]
    first = results[0]
    streak = 0
    for result in results:
        if result != first:
            break
        streak += 1
    return streak if first else -streak


def safe_mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def population_std(values: Sequence[float]) -> float:
    if len(values) <= 1:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=0))


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """Trailing mean; the first ``window - 1`` points average what exists."""
    if len(values) == 0:
        return []
    series = pd.Series(list(values), dtype=float)
    return series.rolling(window=max(int(window), 1), min_periods=1).mean().tolist()
