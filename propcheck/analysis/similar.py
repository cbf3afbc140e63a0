"""Similar-situation retrieval over a player's own history.

Matching is tiered. It tries venue + defense tier + rest tier first, then
drops rest, then keeps venue only. Without a defense ranking the first
try is venue + rest tier. The first tier that reaches the minimum
sample wins. Below the minimum there is no reliable sample, and the
matcher says so by returning ``None``.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.features.windows import window_stats
from propcheck.models.results import SimilarSituationSet
from propcheck.models.types import (
    DefenseRanking,
    Game,
    GameLogEntry,
    Player,
    PropSnapshot,
    defense_tier,
)

logger = logging.getLogger(__name__)

_DEFENSE_LABELS = {'top': 'top-tier defense', 'mid': 'mid-tier defense', 'bottom': 'bottom-tier defense'}
_REST_LABELS = {'b2b': 'on a back-to-back', 'rested': 'on extra rest', 'normal': 'on normal rest'}


def rest_tier(rest_days: int, is_back_to_back: bool, rested_days: int) -> str:
    if is_back_to_back:
        return 'b2b'
    if rest_days >= rested_days:
        return 'rested'
    return 'normal'


def find_similar_situations(
    player: Player,
    game: Game,
    game_logs: Sequence[GameLogEntry],
    defense_ranking: Optional[DefenseRanking],
    stat: str,
    line: float,
    is_home: Optional[bool] = None,
    rest_days: Optional[int] = None,
    is_back_to_back: Optional[bool] = None,
    config: Optional[Config] = None,
) -> Optional[SimilarSituationSet]:
    config = config or DEFAULT_CONFIG
    if not game_logs:
        return None
    if is_home is None:
        is_home = game.is_home_for(player)
    if rest_days is None:
        rest_days = game_logs[0].rest_days
    if is_back_to_back is None:
        is_back_to_back = game_logs[0].is_back_to_back

    # "extra rest" shares the narrative rest threshold
    rested_days = config.narrative_rest_days
    target_rest = rest_tier(rest_days, is_back_to_back, rested_days)
    total_teams = defense_ranking.total_teams if defense_ranking else config.league_size
    target_defense = defense_tier(defense_ranking.rank, total_teams) if defense_ranking else None
    venue = 'home' if is_home else 'away'

    def same_venue(log: GameLogEntry) -> bool:
        return log.is_home == is_home

    def same_defense(log: GameLogEntry) -> bool:
        return defense_tier(log.opponent_def_rank, total_teams) == target_defense

    def same_rest(log: GameLogEntry) -> bool:
        return rest_tier(log.rest_days, log.is_back_to_back, rested_days) == target_rest

    tiers: List[Tuple[int, str, List[Callable[[GameLogEntry], bool]]]] = []
    if target_defense is not None:
        tiers.append((
            1,
            f"{venue} games vs {_DEFENSE_LABELS[target_defense]} {_REST_LABELS[target_rest]}",
            [same_venue, same_defense, same_rest],
        ))
        tiers.append((
            2,
            f"{venue} games vs {_DEFENSE_LABELS[target_defense]}",
            [same_venue, same_defense],
        ))
    else:
        # no ranking: the defense feature matches anything
        tiers.append((2, f"{venue} games {_REST_LABELS[target_rest]}", [same_venue, same_rest]))
    tiers.append((3, f"{venue} games", [same_venue]))

    for tier, description, predicates in tiers:
        matches = [log for log in game_logs if all(p(log) for p in predicates)]
        if len(matches) < config.similar_min_games:
            continue
        summary = window_stats(matches, stat, line)
        return SimilarSituationSet(
            description=f"{player.name} in {description}",
            match_tier=tier,
            games=tuple(matches),
            hit_rate=summary.hit_rate,
            avg_value=summary.avg_value,
            avg_margin=summary.avg_margin,
        )

    logger.debug("No similar-situation sample for %s %s", player.name, stat)
    return None


def find_snapshot_similar_situations(
    snapshot: PropSnapshot, config: Optional[Config] = None
) -> Optional[SimilarSituationSet]:
    return find_similar_situations(
        player=snapshot.player,
        game=snapshot.game,
        game_logs=snapshot.game_logs,
        defense_ranking=snapshot.defense_ranking,
        stat=snapshot.stat,
        line=snapshot.line,
        is_home=snapshot.is_home,
        rest_days=snapshot.upcoming_rest_days,
        is_back_to_back=snapshot.upcoming_back_to_back,
        config=config,
    )
