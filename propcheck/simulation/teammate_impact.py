"""Teammate-absence simulation.

Splits each teammate's own log into games where the absent player also
played and games they missed, then compares the two averages. Teammates
short of either minimum sample are left out rather than reported on noise.
"""

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.models.types import GameLogEntry, Player, parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeammateLog:
    player: Player
    game_logs: Sequence[GameLogEntry]


@dataclass(frozen=True)
class TeammateImpact:
    player_id: str
    player_name: str
    games_with: int
    games_without: int
    avg_with: float
    avg_without: float
    delta: float
    pct_change: float
    direction: str  # 'boost', 'drop', 'neutral'

    def to_dict(self) -> dict:
        return {
            'player_id': self.player_id,
            'player_name': self.player_name,
            'games_with': self.games_with,
            'games_without': self.games_without,
            'avg_with': round(self.avg_with, 3),
            'avg_without': round(self.avg_without, 3),
            'delta': round(self.delta, 3),
            'pct_change': round(self.pct_change, 1),
            'direction': self.direction,
        }


def _log_frame(logs: Sequence[GameLogEntry], stat: str) -> pd.DataFrame:
    return pd.DataFrame({
        'date': [parse_date(log.date) for log in logs],
        'value': [log.value(stat) for log in logs],
    })


def _direction(delta: float, dead_zone: float) -> str:
    if delta > dead_zone:
        return 'boost'
    if delta < -dead_zone:
        return 'drop'
    return 'neutral'


def teammate_impact(
    teammate: TeammateLog,
    absent_dates: Iterable[str],
    stat: str,
    config: Optional[Config] = None,
) -> Optional[TeammateImpact]:
    """Impact for one teammate, or None when either partition is too small."""
    config = config or DEFAULT_CONFIG
    frame = _log_frame(teammate.game_logs, stat)
    played_dates = {parse_date(value) for value in absent_dates}
    frame['with_player'] = frame['date'].isin(list(played_dates))

    with_games = frame.loc[frame['with_player'], 'value']
    without_games = frame.loc[~frame['with_player'], 'value']
    if len(with_games) < config.teammate_min_with or len(without_games) < config.teammate_min_without:
        logger.debug(
            "Skipping %s: %d with / %d without",
            teammate.player.name, len(with_games), len(without_games),
        )
        return None

    avg_with = float(with_games.mean())
    avg_without = float(without_games.mean())
    delta = avg_without - avg_with
    pct_change = (delta / avg_with) * 100.0 if avg_with else 0.0
    return TeammateImpact(
        player_id=teammate.player.id,
        player_name=teammate.player.name,
        games_with=int(len(with_games)),
        games_without=int(len(without_games)),
        avg_with=avg_with,
        avg_without=avg_without,
        delta=delta,
        pct_change=pct_change,
        direction=_direction(delta, config.teammate_dead_zone),
    )


def simulate_teammate_absence(
    absent_player_dates: Iterable[str],
    teammates: Sequence[TeammateLog],
    stat: str,
    config: Optional[Config] = None,
) -> List[TeammateImpact]:
    """
    ``absent_player_dates`` are the dates the absent player actually
    played. Results are ordered by the size of the effect, largest first.
    """
    dates = list(absent_player_dates)
    impacts = []
    for teammate in teammates:
        impact = teammate_impact(teammate, dates, stat, config)
        if impact is not None:
            impacts.append(impact)
    impacts.sort(key=lambda item: (-abs(item.delta), item.player_name))
    return impacts
