"""
Sport-specific extension factors.

These evaluators join the roster only when the snapshot carries their
input: an ExtraContext piece, or minutes on the game logs. When an
extension is off it is left out of the factor list entirely rather than
reported as a neutral placeholder.
"""

import logging
import math
from typing import Callable, List, Optional, Tuple

from propcheck.config import Config
from propcheck.constants import (
    DEFAULT_OUTFIELD_ORIENTATION,
    DEFAULT_WEATHER_FIRE_THRESHOLD,
    DIRECTION_DEGREES,
    LEAGUE_AVG_ERA,
    LEAGUE_AVG_K_PER_9,
    LEAGUE_AVG_WHIP,
    LEAGUE_AVG_WRC_PLUS,
    MLB_OUTFIELD_ORIENTATION,
    MLB_WIND_IN_STEPS,
    MLB_WIND_OUT_STEPS,
    NEUTRAL,
    NFL_INDOOR_STADIUMS,
    NFL_PASSING_STATS,
    NFL_PASSING_WIND_STEPS,
    NFL_RUSHING_STATS,
    OVER,
    PRECIPITATION_CONDITIONS,
    SPORT_MEDIAN_TOTALS,
    UNDER,
    WEATHER_FIRE_THRESHOLD,
)
from propcheck.features.windows import safe_mean
from propcheck.models.factors import Evaluator, clamp01, insufficient, make_factor
from propcheck.models.results import ConvergenceFactor
from propcheck.models.types import PropSnapshot, Weather

logger = logging.getLogger(__name__)

# Pitcher quality
_PITCHER_QUALITY_SCALE = 0.4
_PITCHER_K9_MARGIN = 1.5
_PITCHER_HIGH_K_PENALTY = 0.3
_PITCHER_LOW_K_BONUS = 0.2
_PITCHER_WHIP_SCALE = 0.5
_PITCHER_RESTED_DAYS = 5
_PITCHER_SHORT_REST_DAYS = 3
_PITCHER_REST_SHIFT = 0.2
_PITCHER_FIRE_THRESHOLD = 0.3
_PITCHER_FULL_SIGNAL = 0.8

# Platoon split
_PLATOON_FIRE_GAP = 15.0
_PLATOON_FULL_GAP = 40.0

# Game environment
_GAME_ENV_FULL_MULTIPLE = 3.0

# Weather: NFL rushing volume goes up in heavy wind
_NFL_RUSH_WIND_MPH = 20.0
_NFL_RUSH_WIND_BONUS = 0.3
_MLB_PRECIP_PENALTY = 0.20
_NFL_PRECIP_PENALTY = 0.15


# =============================================================================
# MINUTES TREND
# =============================================================================

def _recent_minutes(snapshot: PropSnapshot, config: Config) -> List[float]:
    recent = snapshot.game_logs[:config.minutes_window]
    return [float(log.minutes) for log in recent if log.minutes is not None and log.minutes > 0]


def evaluate_minutes_trend(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Last five games' minutes against the games before them in the window."""
    key = 'minutes_trend'
    minutes = _recent_minutes(snapshot, config)
    if len(minutes) < config.minutes_min_games:
        return insufficient(key, f"Minutes logged in only {len(minutes)} games")
    if len(minutes) <= 5:
        return insufficient(key, "No earlier minutes to compare against", f"L5 avg {safe_mean(minutes):.1f} min")

    recent_avg = safe_mean(minutes[:5])
    older_avg = safe_mean(minutes[5:])
    delta = recent_avg - older_avg
    if delta > config.minutes_band:
        signal = OVER
    elif delta < -config.minutes_band:
        signal = UNDER
    else:
        signal = NEUTRAL
    return make_factor(
        key,
        signal,
        abs(delta) / config.minutes_scale,
        f"L5 avg {recent_avg:.1f} min vs prior {older_avg:.1f} min",
        f"{delta:+.1f} min shift",
    )


# =============================================================================
# GAME ENVIRONMENT
# =============================================================================

def evaluate_game_environment(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Posted game total against the sport's median total."""
    key = 'game_environment'
    total = float(snapshot.extra.game_total)
    median = SPORT_MEDIAN_TOTALS.get(snapshot.sport)
    if not median:
        return insufficient(key, f"No baseline total for {snapshot.sport}", f"O/U {total:g}")

    data_point = f"O/U {total:g}"
    spread = snapshot.extra.spread
    if spread is not None:
        implied = total / 2.0 - float(spread) / 2.0
        data_point += f" (team implied {implied:.1f})"

    pct = config.game_env_threshold_pct
    deviation = (total - median) / median
    strength = clamp01(abs(deviation) / (pct * _GAME_ENV_FULL_MULTIPLE)) if pct > 0 else 1.0
    if deviation > pct:
        return make_factor(key, OVER, strength, f"High total, {deviation:.0%} above median {median:g}", data_point)
    if deviation < -pct:
        return make_factor(key, UNDER, strength, f"Low total, {abs(deviation):.0%} below median {median:g}", data_point)
    return make_factor(key, NEUTRAL, strength, f"Total near median {median:g}", data_point)


# =============================================================================
# WEATHER
# =============================================================================

def effective_wind(speed_mph: float, wind_deg: float, orientation_deg: float) -> float:
    """Wind component toward the outfield. Positive is blowing out."""
    relative = ((wind_deg - orientation_deg) + 360.0) % 360.0
    return speed_mph * math.cos(math.radians(relative))


def _first_step(value: float, steps) -> Optional[Tuple[float, str]]:
    for threshold, signal, label in steps:
        if value > threshold:
            return signal, label
    return None


def weather_signal(weather: Weather, sport: str, stat: str, home_abbrev: str) -> Tuple[float, List[str]]:
    """Weather effect in [-1, 1] (positive favors the over) and its reasons."""
    indoor = weather.is_indoor or (sport == 'nfl' and home_abbrev in NFL_INDOOR_STADIUMS)
    if indoor:
        return 0.0, ["Indoor / dome, no weather effect"]

    signal = 0.0
    reasons: List[str] = []

    if sport == 'mlb':
        orientation = MLB_OUTFIELD_ORIENTATION.get(home_abbrev, DEFAULT_OUTFIELD_ORIENTATION)
        wind_deg = DIRECTION_DEGREES.get(weather.wind_direction.upper(), 0.0)
        wind = effective_wind(weather.wind_speed_mph, wind_deg, orientation)
        step = _first_step(wind, MLB_WIND_OUT_STEPS) or _first_step(-wind, MLB_WIND_IN_STEPS)
        if step:
            signal += step[0]
            reasons.append(step[1])
        if weather.temp_f < 45:
            signal -= 0.35
            reasons.append(f"Cold ({weather.temp_f:g}F)")
        elif weather.temp_f < 55:
            signal -= 0.20
            reasons.append(f"Cool ({weather.temp_f:g}F)")
        elif weather.temp_f > 85:
            signal += 0.15
            reasons.append(f"Hot ({weather.temp_f:g}F)")

    if sport == 'nfl':
        if stat in NFL_PASSING_STATS:
            step = _first_step(weather.wind_speed_mph, NFL_PASSING_WIND_STEPS)
            if step:
                signal += step[0]
                reasons.append(step[1])
        if stat in NFL_RUSHING_STATS and weather.wind_speed_mph > _NFL_RUSH_WIND_MPH:
            signal += _NFL_RUSH_WIND_BONUS
            reasons.append("High wind, teams run more")
        if weather.temp_f < 30:
            signal -= 0.20
            reasons.append(f"Freezing ({weather.temp_f:g}F)")
        elif weather.temp_f < 40:
            signal -= 0.10
            reasons.append(f"Cold ({weather.temp_f:g}F)")

    condition = weather.condition.lower()
    if any(term in condition for term in PRECIPITATION_CONDITIONS):
        signal -= _MLB_PRECIP_PENALTY if sport == 'mlb' else _NFL_PRECIP_PENALTY
        reasons.append(weather.condition)

    return max(-1.0, min(1.0, signal)), reasons


def evaluate_weather(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    key = 'weather'
    weather = snapshot.extra.weather
    signal_value, reasons = weather_signal(
        weather, snapshot.sport, snapshot.stat, snapshot.game.home_team.abbrev
    )
    threshold = WEATHER_FIRE_THRESHOLD.get(snapshot.sport, DEFAULT_WEATHER_FIRE_THRESHOLD)
    data_point = f"{weather.temp_f:g}F | {weather.wind_speed_mph:g} mph {weather.wind_direction}"
    if weather.is_indoor:
        data_point = "Dome"
    detail = " | ".join(reasons) if reasons else "No significant weather impact"
    if signal_value > threshold:
        signal = OVER
    elif signal_value < -threshold:
        signal = UNDER
    else:
        signal = NEUTRAL
    return make_factor(key, signal, abs(signal_value), detail, data_point)


# =============================================================================
# PITCHING (MLB)
# =============================================================================

def evaluate_opposing_pitcher(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Opposing starter quality from the hitter's side: worse pitcher, over."""
    key = 'opposing_pitcher'
    pitcher = snapshot.extra.opposing_pitcher
    quality = pitcher.fip if pitcher.fip is not None else pitcher.era
    if quality is None:
        return insufficient(key, f"No ERA/FIP for {pitcher.name}", pitcher.name)

    metric = "FIP" if pitcher.fip is not None else "ERA"
    signal_value = (quality - LEAGUE_AVG_ERA) * _PITCHER_QUALITY_SCALE
    notes = [f"{metric} {quality:.2f}"]

    if pitcher.k_per_9 is not None:
        if pitcher.k_per_9 > LEAGUE_AVG_K_PER_9 + _PITCHER_K9_MARGIN:
            signal_value -= _PITCHER_HIGH_K_PENALTY
            notes.append(f"strikeout arm ({pitcher.k_per_9:.1f} K/9)")
        elif pitcher.k_per_9 < LEAGUE_AVG_K_PER_9 - _PITCHER_K9_MARGIN:
            signal_value += _PITCHER_LOW_K_BONUS
            notes.append(f"pitch-to-contact ({pitcher.k_per_9:.1f} K/9)")

    if pitcher.whip is not None:
        signal_value += (pitcher.whip - LEAGUE_AVG_WHIP) * _PITCHER_WHIP_SCALE
        notes.append(f"WHIP {pitcher.whip:.2f}")

    if pitcher.days_rest is not None:
        if pitcher.days_rest >= _PITCHER_RESTED_DAYS:
            signal_value -= _PITCHER_REST_SHIFT
            notes.append("fully rested")
        elif pitcher.days_rest <= _PITCHER_SHORT_REST_DAYS:
            signal_value += _PITCHER_REST_SHIFT
            notes.append("short rest")

    strength = abs(signal_value) / _PITCHER_FULL_SIGNAL
    if signal_value > _PITCHER_FIRE_THRESHOLD:
        signal = OVER
    elif signal_value < -_PITCHER_FIRE_THRESHOLD:
        signal = UNDER
    else:
        signal = NEUTRAL
    hand = f" ({pitcher.hand}HP)" if pitcher.hand else ""
    return make_factor(key, signal, strength, ", ".join(notes), f"{pitcher.name}{hand}")


def evaluate_platoon_split(snapshot: PropSnapshot, config: Config) -> ConvergenceFactor:
    """Hitter's wRC+ against the opposing starter's hand."""
    key = 'platoon_split'
    splits = snapshot.extra.platoon_splits
    pitcher = snapshot.extra.opposing_pitcher
    hand = splits.pitcher_hand or (pitcher.hand if pitcher else None)
    if not hand:
        return insufficient(key, "Opposing pitcher hand unknown")

    hand = hand.upper()[0]
    wrc = splits.wrc_plus_vs_lhp if hand == 'L' else splits.wrc_plus_vs_rhp
    if wrc is None:
        return insufficient(key, f"No split vs {hand}HP", f"vs {hand}HP")

    gap = wrc - LEAGUE_AVG_WRC_PLUS
    strength = abs(gap) / _PLATOON_FULL_GAP
    data_point = f"{wrc:.0f} wRC+ vs {hand}HP"
    if gap > _PLATOON_FIRE_GAP:
        return make_factor(key, OVER, strength, f"Hits {hand}HP well", data_point)
    if gap < -_PLATOON_FIRE_GAP:
        return make_factor(key, UNDER, strength, f"Struggles vs {hand}HP", data_point)
    return make_factor(key, NEUTRAL, strength, f"No strong split vs {hand}HP", data_point)


# =============================================================================
# ROSTER
# =============================================================================

def _has_minutes(snapshot: PropSnapshot) -> bool:
    if snapshot.stat == 'minutes':
        return False
    return any(log.minutes for log in snapshot.game_logs)


def _has_game_total(snapshot: PropSnapshot) -> bool:
    return snapshot.extra is not None and snapshot.extra.game_total is not None


def _has_weather(snapshot: PropSnapshot) -> bool:
    return snapshot.extra is not None and snapshot.extra.weather is not None


def _has_pitcher(snapshot: PropSnapshot) -> bool:
    return snapshot.extra is not None and snapshot.extra.opposing_pitcher is not None


def _has_platoon(snapshot: PropSnapshot) -> bool:
    return snapshot.extra is not None and snapshot.extra.platoon_splits is not None


EXTENSION_EVALUATORS: List[Tuple[str, Callable[[PropSnapshot], bool], Evaluator]] = [
    ('minutes_trend', _has_minutes, evaluate_minutes_trend),
    ('game_environment', _has_game_total, evaluate_game_environment),
    ('weather', _has_weather, evaluate_weather),
    ('opposing_pitcher', _has_pitcher, evaluate_opposing_pitcher),
    ('platoon_split', _has_platoon, evaluate_platoon_split),
]


def active_extensions(snapshot: PropSnapshot) -> List[Tuple[str, Evaluator]]:
    active = []
    for key, is_active, evaluator in EXTENSION_EVALUATORS:
        if is_active(snapshot):
            active.append((key, evaluator))
        else:
            logger.debug("Extension %s omitted: no context supplied", key)
    return active
