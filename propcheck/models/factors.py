"""
Core factor evaluators.

Each evaluator is a pure function of the snapshot and the engine config
and returns exactly one ConvergenceFactor. Below the minimum sample an
evaluator reports neutral at strength 0 instead of guessing. Strength
otherwise grows with both the size of the deviation and the sample it
was measured on, and is always clamped to [0, 1].
"""

from typing import Callable, Dict, List, Tuple

from propcheck.config import Config
from propcheck.constants import OVER, UNDER, NEUTRAL
from propcheck.features.windows import hit_rate, safe_mean, signed_streak, stat_values
from propcheck.models.results import ConvergenceFactor
from propcheck.models.types import PropSnapshot, defense_tier


FACTOR_NAMES: Dict[str, str] = {
    'recent_trend': 'Recent Trend',
    'season_avg': 'Season Average',
    'matchup': 'Opponent Defense',
    'venue': 'Home/Away Split',
    'rest': 'Rest & Fatigue',
    'h2h': 'Head-to-Head',
    'momentum': 'Momentum',
    'minutes_trend': 'Minutes Trend',
    'game_environment': 'Game Environment',
    'weather': 'Weather',
    'opposing_pitcher': 'Opposing Pitcher',
    'platoon_split': 'Platoon Split',
}

# Neutral strength for "evidence says nothing unusual" (not insufficient data)
_BASELINE_NEUTRAL_STRENGTH = 0.1
_MID_DEFENSE_NEUTRAL_STRENGTH = 0.2


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def sample_factor(games: int, full_sample: int) -> float:
    """Scale from 0 to 1 as a sample grows toward ``full_sample`` games."""
    if full_sample <= 0:
        return 1.0
    return clamp01(games / float(full_sample))


def make_factor(key: str, signal: str, strength: float, detail: str, data_point: str) -> ConvergenceFactor:
    return ConvergenceFactor(
        key=key,
        name=FACTOR_NAMES.get(key, key),
        signal=signal,
        strength=round(clamp01(strength), 6),
        detail=detail,
        data_point=data_point,
    )


def insufficient(key: str, detail: str, data_point: str = "N/A") -> ConvergenceFactor:
    return make_factor(key, NEUTRAL, 0.0, detail, data_point)


def _directional(gap: float, threshold: float) -> str:
    if gap >= threshold:
        return OVER
    if gap <= -threshold:
        return UNDER
    return NEUTRAL


def _fmt(value: float) -> str:
    return f"{value:.1f}"


# =============================================================================
# CORE EVALUATORS
# =============================================================================

def evaluate_recent_trend(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Short-window average against the season average, with a neutral band."""
    key = 'recent_trend'
    logs = snapshot.game_logs
    if len(logs) < config.min_sample_games:
        return insufficient(key, f"Only {len(logs)} games logged")

    recent = stat_values(logs, snapshot.stat, config.trend_window)
    recent_avg = float(recent.mean())
    season_avg = snapshot.season_average
    if season_avg <= 0:
        return insufficient(key, "No season baseline", f"L{recent.size}: {_fmt(recent_avg)}")

    deviation = (recent_avg - season_avg) / season_avg
    signal = _directional(deviation, config.trend_band)
    magnitude = abs(deviation) / (2 * config.trend_band) if config.trend_band > 0 else 1.0
    strength = clamp01(magnitude) * sample_factor(recent.size, config.trend_window)

    if signal == NEUTRAL:
        detail = f"L{recent.size} avg in line with season ({deviation:+.0%})"
    else:
        word = "above" if signal == OVER else "below"
        detail = f"L{recent.size} avg {abs(deviation):.0%} {word} season avg"
    data_point = f"L{recent.size}: {_fmt(recent_avg)} vs season {_fmt(season_avg)}"
    return make_factor(key, signal, strength, detail, data_point)


def evaluate_season_avg(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Season-to-date average against the line."""
    key = 'season_avg'
    games = snapshot.season_stats.games_played or len(snapshot.game_logs)
    if games < config.min_sample_games:
        return insufficient(key, f"Only {games} games this season")

    season_avg = snapshot.season_average
    line = snapshot.line
    threshold = max(config.season_threshold_min, abs(line) * config.season_threshold_pct)
    gap = season_avg - line
    signal = _directional(gap, threshold)
    strength = clamp01(abs(gap) / (threshold * 2.5)) * sample_factor(games, config.full_sample_games)

    if signal == NEUTRAL:
        detail = f"Season avg within {threshold:.1f} of the line"
    else:
        word = "above" if signal == OVER else "below"
        detail = f"Season avg {abs(gap):.1f} {word} line"
    data_point = f"{_fmt(season_avg)} avg in {games} games vs {line:g}"
    return make_factor(key, signal, strength, detail, data_point)


def evaluate_matchup(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Opponent defensive rank: weak defenses lean over, strong ones under."""
    key = 'matchup'
    ranking = snapshot.defense_ranking
    if ranking is None:
        return insufficient(key, "No defensive ranking available")

    total = ranking.total_teams or config.league_size
    third = max(total // 3, 1)
    rank = int(ranking.rank)
    tier = defense_tier(rank, total)
    label = ranking.label or f"#{rank} defense"
    data_point = f"#{rank} of {total}"
    if ranking.stats_allowed is not None:
        data_point += f" ({ranking.stats_allowed:.1f} allowed)"

    opponent = snapshot.opponent_abbrev
    if tier == "bottom":
        strength = (rank - (total - third)) / float(third)
        return make_factor(key, OVER, strength, f"{opponent} is a weak matchup ({label})", data_point)
    if tier == "top":
        strength = (third + 1 - rank) / float(third)
        return make_factor(key, UNDER, strength, f"{opponent} is a tough matchup ({label})", data_point)
    return make_factor(
        key, NEUTRAL, _MID_DEFENSE_NEUTRAL_STRENGTH,
        f"{opponent} is a middle-of-the-pack defense ({label})", data_point,
    )


def evaluate_venue(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Average in tonight's venue type (home or away) against the line."""
    key = 'venue'
    is_home = snapshot.is_home
    venue = "home" if is_home else "away"
    venue_logs = [log for log in snapshot.game_logs if log.is_home == is_home]
    if len(venue_logs) < config.min_sample_games:
        return insufficient(key, f"Only {len(venue_logs)} {venue} games logged")

    venue_avg = safe_mean([log.value(snapshot.stat) for log in venue_logs])
    line = snapshot.line
    threshold = max(config.venue_threshold_min, abs(line) * config.venue_threshold_pct)
    gap = venue_avg - line
    signal = _directional(gap, threshold)
    strength = clamp01(abs(gap) / (threshold * 2.5)) * sample_factor(len(venue_logs), config.full_sample_games)

    if signal == NEUTRAL:
        detail = f"{venue.capitalize()} avg close to the line"
    else:
        word = "above" if signal == OVER else "below"
        detail = f"{venue.capitalize()} avg {abs(gap):.1f} {word} line"
    data_point = f"{_fmt(venue_avg)} in {len(venue_logs)} {venue} games"
    return make_factor(key, signal, strength, detail, data_point)


def evaluate_rest(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Back-to-back penalty or extended-rest boost relative to the season."""
    key = 'rest'
    stat = snapshot.stat
    season_avg = snapshot.season_average
    rest_days = snapshot.upcoming_rest_days

    if snapshot.upcoming_back_to_back:
        b2b_logs = [log for log in snapshot.game_logs if log.is_back_to_back]
        if len(b2b_logs) < config.min_sample_games:
            return insufficient(key, f"Back-to-back, only {len(b2b_logs)} prior B2B games", "B2B")
        b2b_avg = safe_mean([log.value(stat) for log in b2b_logs])
        delta = b2b_avg - season_avg
        strength = clamp01(abs(delta) / config.rest_scale) * sample_factor(len(b2b_logs), config.full_sample_games)
        signal = UNDER if delta < 0 else NEUTRAL
        detail = (
            f"Back-to-back: drops {abs(delta):.1f} on no rest"
            if signal == UNDER else "Back-to-back, but holds up on no rest"
        )
        return make_factor(key, signal, strength, detail, f"B2B avg {_fmt(b2b_avg)} in {len(b2b_logs)} games")

    if rest_days >= config.rested_days:
        rested_logs = [
            log for log in snapshot.game_logs
            if log.rest_days >= config.rested_days and not log.is_back_to_back
        ]
        if len(rested_logs) < config.min_sample_games:
            return insufficient(key, f"{rest_days} days rest, only {len(rested_logs)} rested games", f"{rest_days}d rest")
        rested_avg = safe_mean([log.value(stat) for log in rested_logs])
        delta = rested_avg - season_avg
        strength = clamp01(abs(delta) / config.rest_scale) * sample_factor(len(rested_logs), config.full_sample_games)
        signal = OVER if delta > 0 else NEUTRAL
        detail = (
            f"{rest_days} days rest: up {delta:.1f} when rested"
            if signal == OVER else f"{rest_days} days rest, no rested bump"
        )
        return make_factor(key, signal, strength, detail, f"Rested avg {_fmt(rested_avg)} in {len(rested_logs)} games")

    return make_factor(key, NEUTRAL, _BASELINE_NEUTRAL_STRENGTH, "Normal rest", f"{rest_days}d rest")


def evaluate_h2h(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Hit rate against tonight's opponent."""
    key = 'h2h'
    opponent = snapshot.opponent_abbrev
    meetings = [log for log in snapshot.game_logs if log.opponent == opponent]
    if len(meetings) < config.h2h_min_games:
        return insufficient(key, f"Limited H2H data ({len(meetings)} vs {opponent})", f"{len(meetings)} games")

    rate = hit_rate(meetings, snapshot.stat, snapshot.line)
    if rate > config.h2h_over_rate:
        signal = OVER
    elif rate < config.h2h_under_rate:
        signal = UNDER
    else:
        signal = NEUTRAL
    strength = clamp01(abs(rate - 0.5) * 2) * sample_factor(len(meetings), 2 * config.h2h_min_games)
    avg = safe_mean([log.value(snapshot.stat) for log in meetings])
    hits = int(round(rate * len(meetings)))
    detail = f"Over the line in {hits} of {len(meetings)} vs {opponent}"
    return make_factor(key, signal, strength, detail, f"{_fmt(avg)} avg vs {opponent}")


def evaluate_momentum(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Current consecutive run of hits or misses against the line."""
    key = 'momentum'
    values = snapshot.values()
    if len(values) < config.min_sample_games:
        return insufficient(key, f"Only {len(values)} games logged")

    streak = signed_streak(values, snapshot.line)
    strength = clamp01(abs(streak) / float(config.momentum_full_streak))
    if streak >= config.momentum_streak:
        return make_factor(key, OVER, strength, f"Over the line {streak} straight", f"+{streak}")
    if streak <= -config.momentum_streak:
        return make_factor(key, UNDER, strength, f"Under the line {-streak} straight", str(streak))
    return make_factor(key, NEUTRAL, strength, "No meaningful streak", f"{streak:+d}")


Evaluator = Callable[[PropSnapshot, Config], ConvergenceFactor]

CORE_EVALUATORS: List[Tuple[str, Evaluator]] = [
    ('recent_trend', evaluate_recent_trend),
    ('season_avg', evaluate_season_avg),
    ('matchup', evaluate_matchup),
    ('venue', evaluate_venue),
    ('rest', evaluate_rest),
    ('h2h', evaluate_h2h),
    ('momentum', evaluate_momentum),
]

CORE_FACTOR_KEYS: Tuple[str, ...] = tuple(key for key, _ in CORE_EVALUATORS)
