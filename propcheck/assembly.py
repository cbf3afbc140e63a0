"""Snapshot assembly from external providers.

The engine never fetches. This orchestrator resolves the player and
game, then pulls game logs, the defense ranking, injuries and
sport-specific extras in parallel. Providers are plain synchronous
callables run in the default executor.

Usage:
    from propcheck.assembly import SnapshotAssembler, SnapshotProviders

    assembler = SnapshotAssembler(SnapshotProviders(...), cache=MemoryCache())
    result = assembler.assemble("p-201939", "points", 27.5, "2024-02-10")
    report = analyze_prop(result.snapshot)

Player, game and game logs are required and raise ProviderError on
failure. The ranking, injuries and extras degrade: a failure is logged,
recorded in ``AssemblyResult.warnings`` and the piece is left out.
"""

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any, Callable, List, Optional, Sequence

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.exceptions import ProviderError
from propcheck.models.types import (
    DefenseRanking,
    ExtraContext,
    Game,
    GameLogEntry,
    Injury,
    Player,
    PropSnapshot,
    SeasonStats,
    parse_date,
)
from propcheck.normalization.snapshot import validate_line, validate_stat
from propcheck.storage.cache import CacheStore, MemoryCache

logger = logging.getLogger(__name__)


@dataclass
class SnapshotProviders:
    """External collaborators, one callable per snapshot piece."""
    resolve_player: Callable[[str], Player]
    fetch_schedule: Callable[[str, str], Sequence[Game]]  # (sport, date)
    fetch_game_logs: Callable[[Player], Sequence[GameLogEntry]]
    fetch_defense_ranking: Optional[Callable[[str, str, Player], Optional[DefenseRanking]]] = None
    fetch_injuries: Optional[Callable[[Game, Player], Sequence[Injury]]] = None
    fetch_extra: Optional[Callable[[Game, Player], Optional[ExtraContext]]] = None


@dataclass
class AssemblyResult:
    snapshot: PropSnapshot
    warnings: List[str] = field(default_factory=list)


class SnapshotAssembler:
    """
    Builds PropSnapshots. Schedules are cached per (sport, date) in the
    injected CacheStore for ``config.schedule_cache_ttl`` seconds. Use
    ``invalidate_schedule`` when a slate changes (postponements, late
    additions).
    """

    def __init__(
        self,
        providers: SnapshotProviders,
        cache: Optional[CacheStore] = None,
        config: Optional[Config] = None,
    ):
        self.providers = providers
        self.cache = cache if cache is not None else MemoryCache()
        self.config = config or DEFAULT_CONFIG

    # -------------------------------------------------------------------------
    # Schedule cache
    # -------------------------------------------------------------------------

    @staticmethod
    def _schedule_key(sport: str, game_date: str) -> str:
        return f"schedule:{sport.lower()}:{game_date}"

    def schedule_for(self, sport: str, game_date: str) -> List[Game]:
        key = self._schedule_key(sport, game_date)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)
        try:
            games = list(self.providers.fetch_schedule(sport, game_date))
        except Exception as exc:
            raise ProviderError("schedule", f"{sport} {game_date}", exc)
        self.cache.set(key, tuple(games), self.config.schedule_cache_ttl)
        return games

    def invalidate_schedule(self, sport: str, game_date: str) -> None:
        self.cache.invalidate(self._schedule_key(sport, game_date))

    def resolve_game(self, player: Player, game_date: str, game_id: Optional[str] = None) -> Game:
        team = player.team.abbrev
        for game in self.schedule_for(player.sport, game_date):
            if game_id is not None and game.id != game_id:
                continue
            if team in (game.home_team.abbrev, game.away_team.abbrev):
                return game
        raise ProviderError("schedule", f"no game for {team} on {game_date}")

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    async def _run(self, func: Callable, *args) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: func(*args))

    async def _optional(self, func: Optional[Callable], *args) -> Any:
        if func is None:
            return None
        return await self._run(func, *args)

    async def assemble_async(
        self,
        player_id: str,
        stat: str,
        line: float,
        game_date: str,
        game_id: Optional[str] = None,
        rest_days: Optional[int] = None,
        is_back_to_back: Optional[bool] = None,
    ) -> AssemblyResult:
        stat = validate_stat(stat)
        line = validate_line(line)

        try:
            player = await self._run(self.providers.resolve_player, player_id)
        except Exception as exc:
            raise ProviderError("player", player_id, exc)
        game = await self._run(self.resolve_game, player, game_date, game_id)
        opponent = game.opponent_of(player).abbrev

        logs, ranking, injuries, extra = await asyncio.gather(
            self._run(self.providers.fetch_game_logs, player),
            self._optional(self.providers.fetch_defense_ranking, opponent, stat, player),
            self._optional(self.providers.fetch_injuries, game, player),
            self._optional(self.providers.fetch_extra, game, player),
            return_exceptions=True,
        )

        if isinstance(logs, Exception):
            raise ProviderError("game_logs", player.name, logs)

        warnings: List[str] = []

        def degrade(name: str, value: Any) -> Any:
            if isinstance(value, Exception):
                message = f"{name} unavailable for {player.name}: {type(value).__name__}: {value}"
                logger.warning(message)
                warnings.append(message)
                return None
            return value

        ranking = degrade("defense_ranking", ranking)
        injuries = degrade("injuries", injuries) or ()
        extra = degrade("extra", extra)

        logs = tuple(sorted(logs, key=lambda log: parse_date(log.date), reverse=True))
        snapshot = PropSnapshot(
            player=player,
            game=game,
            game_logs=logs,
            season_stats=SeasonStats.from_logs(logs, stat),
            stat=stat,
            line=line,
            defense_ranking=ranking,
            extra=extra,
            injuries=tuple(injuries),
            rest_days=rest_days,
            is_back_to_back=is_back_to_back,
        )
        return AssemblyResult(snapshot=snapshot, warnings=warnings)

    def assemble(self, *args, **kwargs) -> AssemblyResult:
        """Synchronous wrapper around :meth:`assemble_async`."""
        return asyncio.run(self.assemble_async(*args, **kwargs))
