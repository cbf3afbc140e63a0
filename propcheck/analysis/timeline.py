"""Chronological game log series with a trailing moving average."""

from typing import List, Optional, Sequence

from propcheck.features.windows import moving_average, safe_mean
from propcheck.models.results import GameLogTimeline, TimelinePoint
from propcheck.models.types import GameLogEntry, days_between

DEFAULT_WINDOW = 5
REST_ADVANTAGE_DAYS = 3
ABSENCE_GAP_DAYS = 7


def detect_markers(entry: GameLogEntry, previous: Optional[GameLogEntry] = None) -> List[str]:
    """Context markers for one game; ``previous`` is the game before it."""
    markers = []
    if entry.is_back_to_back:
        markers.append('back_to_back')
    elif entry.rest_days >= REST_ADVANTAGE_DAYS:
        markers.append('rest_advantage')
    if previous is not None:
        try:
            gap = days_between(entry.date, previous.date)
        except ValueError:
            gap = 0
        if gap >= ABSENCE_GAP_DAYS:
            markers.append('injury_return')
    return markers


def build_game_log_timeline(
    game_logs: Sequence[GameLogEntry],
    stat: str,
    window: int = DEFAULT_WINDOW,
) -> GameLogTimeline:
    """Oldest-first points. Missing games are left out, never interpolated."""
    chronological = list(reversed(list(game_logs)))
    values = [log.value(stat) for log in chronological]
    averages = moving_average(values, window)

    points = []
    for idx, log in enumerate(chronological):
        previous = chronological[idx - 1] if idx > 0 else None
        points.append(TimelinePoint(
            date=log.date,
            value=values[idx],
            moving_average=float(averages[idx]),
            markers=tuple(detect_markers(log, previous)),
        ))

    return GameLogTimeline(
        points=tuple(points),
        season_average=safe_mean(values),
        window=int(window),
    )
