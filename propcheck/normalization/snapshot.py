"""Build validated snapshots from JSON-style payloads.

A missing or malformed stat name, line, player or game is a hard input
error. Everything else has a sensible default: season stats come from
the logs, extras are optional, and missing stat values read as 0.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from propcheck.constants import STAT_ALIASES
from propcheck.exceptions import SnapshotValidationError
from propcheck.models.types import (
    DefenseRanking,
    ExtraContext,
    Game,
    GameLogEntry,
    Injury,
    OpposingPitcher,
    PlatoonSplits,
    Player,
    PropSnapshot,
    SeasonStats,
    Team,
    Weather,
    parse_date,
)
from propcheck.normalization.schema import validate_table


def normalize_stat_key(stat: str) -> str:
    key = str(stat).strip().lower().replace(" ", "_").replace("-", "_")
    return STAT_ALIASES.get(key, key)


def validate_stat(stat: Any) -> str:
    if stat is None or not str(stat).strip():
        raise SnapshotValidationError("stat", "stat name is required")
    return normalize_stat_key(stat)


def validate_line(line: Any) -> float:
    if line is None or isinstance(line, bool):
        raise SnapshotValidationError("line", "line is required")
    try:
        value = float(line)
    except (TypeError, ValueError):
        raise SnapshotValidationError("line", f"not a number: {line!r}")
    if not math.isfinite(value):
        raise SnapshotValidationError("line", f"must be finite, got {line!r}")
    return value


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def team_from_value(value: Any) -> Team:
    if isinstance(value, Team):
        return value
    if isinstance(value, str):
        return Team(id=value, abbrev=value)
    validate_table("team", [value])
    abbrev = str(value["abbrev"])
    return Team(id=str(value.get("id", abbrev)), abbrev=abbrev, name=str(value.get("name", "")))


def player_from_dict(payload: Dict[str, Any]) -> Player:
    validate_table("player", [payload])
    return Player(
        id=str(payload["id"]),
        name=str(payload["name"]),
        team=team_from_value(payload["team"]),
        sport=str(payload.get("sport", "nba")).lower(),
        position=str(payload.get("position", "")),
    )


def game_from_dict(payload: Dict[str, Any]) -> Game:
    validate_table("game", [payload])
    home = team_from_value(payload["home_team"])
    away = team_from_value(payload["away_team"])
    return Game(
        id=str(payload.get("id", f"{away.abbrev}@{home.abbrev}")),
        date=str(payload.get("date", "")),
        home_team=home,
        away_team=away,
        venue=str(payload.get("venue", "")),
    )


def game_log_from_dict(payload: Dict[str, Any]) -> GameLogEntry:
    stats = {
        normalize_stat_key(key): float(value)
        for key, value in (payload.get("stats") or {}).items()
        if value is not None
    }
    try:
        parse_date(payload["date"])
    except ValueError:
        raise SnapshotValidationError("game_logs", f"bad date {payload['date']!r}")
    return GameLogEntry(
        date=str(payload["date"]),
        opponent=str(payload["opponent"]),
        is_home=bool(payload["is_home"]),
        rest_days=int(payload.get("rest_days", 1)),
        is_back_to_back=bool(payload.get("is_back_to_back", False)),
        stats=stats,
        opponent_def_rank=_optional_int(payload.get("opponent_def_rank")),
        result=payload.get("result"),
        minutes=_optional_float(payload.get("minutes")),
        game_id=payload.get("game_id"),
    )


def game_logs_from_list(rows: List[Dict[str, Any]]) -> Tuple[GameLogEntry, ...]:
    """Parse logs and order them most-recent-first."""
    validate_table("game_logs", rows)
    logs = [game_log_from_dict(row) for row in rows]
    logs.sort(key=lambda log: parse_date(log.date), reverse=True)
    return tuple(logs)


def _extra_from_dict(payload: Optional[Dict[str, Any]]) -> Optional[ExtraContext]:
    if not payload:
        return None
    weather = payload.get("weather")
    pitcher = payload.get("opposing_pitcher")
    splits = payload.get("platoon_splits")
    return ExtraContext(
        weather=Weather(**weather) if weather else None,
        opposing_pitcher=OpposingPitcher(**pitcher) if pitcher else None,
        platoon_splits=PlatoonSplits(**splits) if splits else None,
        game_total=_optional_float(payload.get("game_total")),
        spread=_optional_float(payload.get("spread")),
    )


def _defense_from_dict(payload: Optional[Dict[str, Any]]) -> Optional[DefenseRanking]:
    if not payload:
        return None
    if "rank" not in payload:
        raise SnapshotValidationError("defense_ranking", "rank is required")
    return DefenseRanking(
        rank=int(payload["rank"]),
        label=str(payload.get("label", "")),
        team_abbrev=str(payload.get("team_abbrev", "")),
        stats_allowed=_optional_float(payload.get("stats_allowed")),
        total_teams=int(payload.get("total_teams", 30)),
    )


def injuries_from_list(rows: Optional[List[Dict[str, Any]]]) -> Tuple[Injury, ...]:
    rows = rows or []
    validate_table("injuries", rows)
    return tuple(
        Injury(
            player_name=str(row["player_name"]),
            team_side=str(row["team_side"]),
            status=str(row["status"]),
            impact=str(row.get("impact", "low")),
            relevance=str(row.get("relevance", "")),
        )
        for row in rows
    )


def snapshot_from_dict(payload: Dict[str, Any]) -> PropSnapshot:
    if not isinstance(payload, dict):
        raise SnapshotValidationError("snapshot", "expected an object")
    stat = validate_stat(payload.get("stat"))
    line = validate_line(payload.get("line"))
    validate_table("snapshot", [payload])

    logs = game_logs_from_list(payload.get("game_logs") or [])
    season = payload.get("season_stats")
    if season:
        season_stats = SeasonStats(
            stat=normalize_stat_key(season.get("stat", stat)),
            average=float(season.get("average", 0.0)),
            games_played=int(season.get("games_played", 0)),
            total=float(season.get("total", 0.0)),
            high=float(season.get("high", 0.0)),
            low=float(season.get("low", 0.0)),
        )
    else:
        season_stats = SeasonStats.from_logs(logs, stat)

    try:
        extra = _extra_from_dict(payload.get("extra"))
    except TypeError as exc:
        raise SnapshotValidationError("extra", str(exc))

    rest_days = payload.get("rest_days")
    is_b2b = payload.get("is_back_to_back")
    return PropSnapshot(
        player=player_from_dict(payload["player"]),
        game=game_from_dict(payload["game"]),
        game_logs=logs,
        season_stats=season_stats,
        stat=stat,
        line=line,
        defense_ranking=_defense_from_dict(payload.get("defense_ranking")),
        extra=extra,
        injuries=injuries_from_list(payload.get("injuries")),
        rest_days=_optional_int(rest_days),
        is_back_to_back=None if is_b2b is None else bool(is_b2b),
    )
