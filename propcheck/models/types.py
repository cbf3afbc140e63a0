"""
Input snapshot types.

Everything the engine reads is frozen: evaluators, what-if modifications
and analytics derive new values instead of editing shared records.
Sport-specific extras travel in an explicit ``ExtraContext`` next to the
snapshot rather than being attached to the player or game.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Mapping, Optional, Sequence, Tuple


def parse_date(value: str) -> date:
    """Parse the date part of an ISO date or datetime string."""
    return date.fromisoformat(str(value)[:10])


def days_between(later: str, earlier: str) -> int:
    return (parse_date(later) - parse_date(earlier)).days


@dataclass(frozen=True)
class Team:
    id: str
    abbrev: str
    name: str = ""


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    team: Team
    sport: str = "nba"
    position: str = ""


@dataclass(frozen=True)
class Game:
    id: str
    date: str
    home_team: Team
    away_team: Team
    venue: str = ""

    def is_home_for(self, player: Player) -> bool:
        return self.home_team.abbrev == player.team.abbrev

    def opponent_of(self, player: Player) -> Team:
        return self.away_team if self.is_home_for(player) else self.home_team

    def swapped(self) -> "Game":
        """Same matchup with home and away reversed."""
        return replace(self, home_team=self.away_team, away_team=self.home_team)


@dataclass(frozen=True)
class GameLogEntry:
    """One completed game for one player."""
    date: str
    opponent: str
    is_home: bool
    rest_days: int = 1
    is_back_to_back: bool = False
    stats: Mapping[str, float] = field(default_factory=dict)
    opponent_def_rank: Optional[int] = None
    result: Optional[str] = None  # 'W' or 'L'
    minutes: Optional[float] = None
    game_id: Optional[str] = None

    def value(self, stat: str) -> float:
        """Stat value for this game; a missing stat reads as 0."""
        raw = self.stats.get(stat)
        if raw is None:
            return 0.0
        return float(raw)


@dataclass(frozen=True)
class SeasonStats:
    stat: str
    average: float
    games_played: int
    total: float = 0.0
    high: float = 0.0
    low: float = 0.0

    @classmethod
    def from_logs(cls, logs: Sequence[GameLogEntry], stat: str) -> "SeasonStats":
        values = [log.value(stat) for log in logs]
        if not values:
            return cls(stat=stat, average=0.0, games_played=0)
        total = float(sum(values))
        return cls(
            stat=stat,
            average=total / len(values),
            games_played=len(values),
            total=total,
            high=max(values),
            low=min(values),
        )


@dataclass(frozen=True)
class DefenseRanking:
    """Opponent rank for the stat/position: 1 is the best defense."""
    rank: int
    label: str = ""
    team_abbrev: str = ""
    stats_allowed: Optional[float] = None
    total_teams: int = 30

    def tier(self) -> str:
        return defense_tier(self.rank, self.total_teams)


def defense_tier(rank: Optional[int], total_teams: int = 30) -> Optional[str]:
    """'top', 'mid' or 'bottom' tertile for a defensive rank."""
    if rank is None:
        return None
    third = total_teams // 3
    if rank <= third:
        return "top"
    if rank >= total_teams - third + 1:
        return "bottom"
    return "mid"


@dataclass(frozen=True)
class Injury:
    player_name: str
    team_side: str  # 'teammate' or 'opponent'
    status: str
    impact: str = "low"  # 'high', 'medium', 'low'
    relevance: str = ""

    @property
    def is_out(self) -> bool:
        return self.status.strip().lower() == "out"


@dataclass(frozen=True)
class Weather:
    wind_speed_mph: float
    wind_direction: str = "N"
    temp_f: float = 70.0
    humidity: float = 50.0
    condition: str = "Clear"
    is_indoor: bool = False


@dataclass(frozen=True)
class OpposingPitcher:
    name: str
    hand: Optional[str] = None  # 'L' or 'R'
    era: Optional[float] = None
    fip: Optional[float] = None
    whip: Optional[float] = None
    k_per_9: Optional[float] = None
    days_rest: Optional[int] = None


@dataclass(frozen=True)
class PlatoonSplits:
    wrc_plus_vs_lhp: Optional[float] = None
    wrc_plus_vs_rhp: Optional[float] = None
    pitcher_hand: Optional[str] = None


@dataclass(frozen=True)
class ExtraContext:
    """Optional sport-specific context. Absent fields switch extensions off."""
    weather: Optional[Weather] = None
    opposing_pitcher: Optional[OpposingPitcher] = None
    platoon_splits: Optional[PlatoonSplits] = None
    game_total: Optional[float] = None
    spread: Optional[float] = None


@dataclass(frozen=True)
class PropSnapshot:
    """Everything one evaluation reads. Logs are most-recent-first."""
    player: Player
    game: Game
    game_logs: Tuple[GameLogEntry, ...]
    season_stats: SeasonStats
    stat: str
    line: float
    defense_ranking: Optional[DefenseRanking] = None
    extra: Optional[ExtraContext] = None
    injuries: Tuple[Injury, ...] = ()
    rest_days: Optional[int] = None
    is_back_to_back: Optional[bool] = None

    def __post_init__(self) -> None:
        # Callers may pass lists
        object.__setattr__(self, "game_logs", tuple(self.game_logs))
        object.__setattr__(self, "injuries", tuple(self.injuries))

    @property
    def sport(self) -> str:
        return (self.player.sport or "nba").lower()

    @property
    def is_home(self) -> bool:
        return self.game.is_home_for(self.player)

    @property
    def opponent_abbrev(self) -> str:
        return self.game.opponent_of(self.player).abbrev

    @property
    def upcoming_rest_days(self) -> int:
        if self.rest_days is not None:
            return int(self.rest_days)
        if self.game_logs:
            return int(self.game_logs[0].rest_days)
        return 1

    @property
    def upcoming_back_to_back(self) -> bool:
        if self.is_back_to_back is not None:
            return bool(self.is_back_to_back)
        if self.game_logs:
            return bool(self.game_logs[0].is_back_to_back)
        return False

    @property
    def season_average(self) -> float:
        if self.season_stats.games_played > 0:
            return float(self.season_stats.average)
        return SeasonStats.from_logs(self.game_logs, self.stat).average

    def values(self) -> Tuple[float, ...]:
        return tuple(log.value(self.stat) for log in self.game_logs)

    def with_changes(self, **changes) -> "PropSnapshot":
        return replace(self, **changes)
