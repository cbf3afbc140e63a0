"""Windowed aggregates and numeric helpers."""

from propcheck.features.windows import (
    WindowStats,
    avg_margin,
    hit_rate,
    signed_streak,
    stat_values,
    window_stats,
)

__all__ = [
    "WindowStats",
    "avg_margin",
    "hit_rate",
    "signed_streak",
    "stat_values",
    "window_stats",
]
