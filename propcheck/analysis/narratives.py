"""
Narrative flags: heuristic, human-readable context for a prop.

Every rule is evaluated independently and any subset may fire. There is
no precedence between flags. A flag always carries detail text that
explains why it fired.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.constants import MILESTONES, USAGE_STATS, is_rivalry
from propcheck.features.windows import safe_mean, signed_streak
from propcheck.models.results import NarrativeFlag
from propcheck.models.types import (
    Game,
    GameLogEntry,
    Injury,
    Player,
    PropSnapshot,
    SeasonStats,
    days_between,
)

_HIGH_SEVERITY_STREAK = 7
_MILESTONE_HIGH_WITHIN = 20
_BOUNCE_HIGH_EXTRA = 0.2


@dataclass(frozen=True)
class _Context:
    """Read-only bundle of the rule inputs."""
    player: Player
    game: Game
    game_logs: Tuple[GameLogEntry, ...]
    season_stats: Optional[SeasonStats]
    injuries: Tuple[Injury, ...]
    is_home: bool
    rest_days: int
    is_back_to_back: bool
    stat: str
    line: float
    config: Config

    @property
    def opponent(self) -> str:
        team = self.game.away_team if self.is_home else self.game.home_team
        return team.abbrev

    def values(self) -> List[float]:
        return [log.value(self.stat) for log in self.game_logs]


def _streak_severity(length: int) -> str:
    return 'high' if abs(length) >= _HIGH_SEVERITY_STREAK else 'medium'


# =============================================================================
# RULES
# =============================================================================

def _elevated_vs_opponent(ctx: _Context) -> Optional[NarrativeFlag]:
    cfg = ctx.config
    meetings = [log for log in ctx.game_logs if log.opponent == ctx.opponent]
    if len(meetings) < cfg.h2h_min_games:
        return None
    season_avg = safe_mean(ctx.values())
    if season_avg <= 0:
        return None
    h2h_avg = safe_mean([log.value(ctx.stat) for log in meetings])
    if h2h_avg <= season_avg * cfg.narrative_revenge_ratio:
        return None
    lift = h2h_avg / season_avg - 1
    return NarrativeFlag(
        key='revenge_game',
        headline=f"Elevated vs {ctx.opponent}",
        detail=f"Averages {h2h_avg:.1f} {ctx.stat} vs {ctx.opponent} ({lift:.0%} above season avg)",
        impact='positive',
        severity='high' if h2h_avg > season_avg * cfg.narrative_revenge_high_ratio else 'medium',
        historical_stat=f"{h2h_avg:.1f} avg in {len(meetings)} games vs {ctx.opponent}",
    )


def _milestone_watch(ctx: _Context) -> Optional[NarrativeFlag]:
    if ctx.season_stats is None:
        return None
    total = float(ctx.season_stats.total)
    for milestone in MILESTONES:
        remaining = milestone - total
        if 0 < remaining <= ctx.config.narrative_milestone_window:
            return NarrativeFlag(
                key='milestone',
                headline=f"{remaining:g} away from {milestone:,}",
                detail=f"{ctx.player.name} has {total:,.0f} {ctx.season_stats.stat}, {remaining:g} short of {milestone:,}",
                impact='positive',
                severity='high' if remaining <= _MILESTONE_HIGH_WITHIN else 'medium',
            )
    return None


def _team_streak(ctx: _Context) -> Optional[NarrativeFlag]:
    results = [log.result.upper() for log in ctx.game_logs if log.result]
    if len(results) < ctx.config.min_sample_games:
        return None
    first = results[0]
    run = 0
    for result in results:
        if result != first:
            break
        run += 1
    if run < ctx.config.narrative_team_streak or first not in ('W', 'L'):
        return None
    if first == 'W':
        return NarrativeFlag(
            key='winning_streak',
            headline=f"{run}-game win streak",
            detail="Team is rolling; rotations may tighten in close games",
            impact='neutral',
            severity=_streak_severity(run),
        )
    return NarrativeFlag(
        key='losing_streak',
        headline=f"{run}-game losing streak",
        detail="Team is struggling; starters may log extra minutes or sit in garbage time",
        impact='neutral',
        severity=_streak_severity(run),
    )


def _line_streak(ctx: _Context) -> Optional[NarrativeFlag]:
    values = ctx.values()
    if len(values) < ctx.config.min_sample_games:
        return None
    streak = signed_streak(values, ctx.line)
    threshold = ctx.config.narrative_line_streak
    if streak >= threshold:
        return NarrativeFlag(
            key='hot_streak',
            headline=f"Over {ctx.line:g} in {streak} straight",
            detail=f"Cleared {ctx.line:g} {ctx.stat} in each of the last {streak} games",
            impact='positive',
            severity=_streak_severity(streak),
        )
    if streak <= -threshold:
        return NarrativeFlag(
            key='cold_streak',
            headline=f"Under {ctx.line:g} in {-streak} straight",
            detail=f"Failed to clear {ctx.line:g} {ctx.stat} in each of the last {-streak} games",
            impact='negative',
            severity=_streak_severity(streak),
        )
    return None


def _bounce_back(ctx: _Context) -> Optional[NarrativeFlag]:
    if len(ctx.game_logs) < 2 or ctx.line <= 0:
        return None
    last_value = ctx.game_logs[0].value(ctx.stat)
    margin = last_value - ctx.line
    ratio = ctx.config.narrative_bounce_ratio
    if margin >= -(ctx.line * ratio):
        return None
    return NarrativeFlag(
        key='blowout_bounce',
        headline='Bounce-back candidate',
        detail=f"Last game: {last_value:g} {ctx.stat} ({margin:+.1f} vs line). Big misses tend to regress toward the mean.",
        impact='positive',
        severity='high' if margin < -(ctx.line * (ratio + _BOUNCE_HIGH_EXTRA)) else 'medium',
    )


def _return_from_absence(ctx: _Context) -> Optional[NarrativeFlag]:
    if len(ctx.game_logs) < 2:
        return None
    try:
        gap = days_between(ctx.game_logs[0].date, ctx.game_logs[1].date)
    except ValueError:
        return None
    threshold = ctx.config.narrative_absence_days
    if gap < threshold:
        return None
    return NarrativeFlag(
        key='return_from_injury',
        headline='Recent return',
        detail=f"{gap}-day gap between games, possibly an injury return. Early games back often come with a minutes limit.",
        impact='negative',
        severity='high' if gap >= 2 * threshold else 'medium',
    )


def _back_to_back_road(ctx: _Context) -> Optional[NarrativeFlag]:
    if not (ctx.is_back_to_back and not ctx.is_home):
        return None
    return NarrativeFlag(
        key='back_to_back_road',
        headline='B2B road game',
        detail='Second night of a back-to-back on the road, the most fatiguing spot on the schedule.',
        impact='negative',
        severity='high',
    )


def _rest_advantage(ctx: _Context) -> Optional[NarrativeFlag]:
    threshold = ctx.config.narrative_rest_days
    if ctx.is_back_to_back or ctx.rest_days < threshold:
        return None
    return NarrativeFlag(
        key='rest_advantage',
        headline=f"{ctx.rest_days} days rest",
        detail=f"Coming in with {ctx.rest_days} days off. Extended rest generally helps output.",
        impact='positive',
        severity='high' if ctx.rest_days > threshold else 'medium',
    )


def _key_absences(ctx: _Context) -> List[NarrativeFlag]:
    flags = []
    for injury in ctx.injuries:
        if injury.impact != 'high' or not injury.is_out:
            continue
        if injury.team_side == 'teammate':
            flags.append(NarrativeFlag(
                key='key_teammate_out',
                headline=f"{injury.player_name} OUT",
                detail=injury.relevance or f"{injury.player_name} is out; usage shifts to the rest of the roster",
                impact='positive' if ctx.stat in USAGE_STATS else 'neutral',
                severity='high',
            ))
        elif injury.team_side == 'opponent':
            flags.append(NarrativeFlag(
                key='key_opponent_out',
                headline=f"{ctx.opponent}'s {injury.player_name} OUT",
                detail=injury.relevance or f"{ctx.opponent} is without {injury.player_name}",
                impact='positive',
                severity='medium',
            ))
    return flags


def _rivalry(ctx: _Context) -> Optional[NarrativeFlag]:
    team = ctx.player.team.abbrev
    if not is_rivalry(ctx.player.sport, team, ctx.opponent):
        return None
    return NarrativeFlag(
        key='rivalry',
        headline=f"Rivalry: {team} vs {ctx.opponent}",
        detail='Rivalry games bring extra intensity and less predictable performances.',
        impact='neutral',
        severity='medium',
    )


_SINGLE_RULES: List[Callable[[_Context], Optional[NarrativeFlag]]] = [
    _elevated_vs_opponent,
    _milestone_watch,
    _team_streak,
    _line_streak,
    _bounce_back,
    _return_from_absence,
    _back_to_back_road,
    _rest_advantage,
    _rivalry,
]


def detect_narratives(
    player: Player,
    game: Game,
    game_logs: Sequence[GameLogEntry],
    season_stats: Optional[SeasonStats],
    injuries: Sequence[Injury],
    is_home: bool,
    rest_days: int,
    is_back_to_back: bool,
    stat: str,
    line: float,
    config: Optional[Config] = None,
) -> List[NarrativeFlag]:
    ctx = _Context(
        player=player,
        game=game,
        game_logs=tuple(game_logs),
        season_stats=season_stats,
        injuries=tuple(injuries or ()),
        is_home=bool(is_home),
        rest_days=int(rest_days),
        is_back_to_back=bool(is_back_to_back),
        stat=stat,
        line=float(line),
        config=config or DEFAULT_CONFIG,
    )
    flags: List[NarrativeFlag] = []
    for rule in _SINGLE_RULES:
        flag = rule(ctx)
        if flag is not None:
            flags.append(flag)
    flags.extend(_key_absences(ctx))
    return flags


def detect_snapshot_narratives(snapshot: PropSnapshot, config: Optional[Config] = None) -> List[NarrativeFlag]:
    return detect_narratives(
        player=snapshot.player,
        game=snapshot.game,
        game_logs=snapshot.game_logs,
        season_stats=snapshot.season_stats,
        injuries=snapshot.injuries,
        is_home=snapshot.is_home,
        rest_days=snapshot.upcoming_rest_days,
        is_back_to_back=snapshot.upcoming_back_to_back,
        stat=snapshot.stat,
        line=snapshot.line,
        config=config,
    )
