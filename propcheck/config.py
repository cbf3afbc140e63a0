"""Engine configuration.

Every heuristic threshold the evaluators, verdict and analytics use lives
here so tests and callers can move a boundary without touching the code.
"""

from dataclasses import dataclass, asdict, field, fields, replace
from pathlib import Path
from typing import Optional, Dict
import json
import os

from propcheck.exceptions import ConfigurationError


_ENV_PREFIX = "PROPCHECK_"

# Recent form
_DEFAULT_TREND_WINDOW = 5
_DEFAULT_TREND_BAND = 0.10

# Sample sizes
_DEFAULT_MIN_SAMPLE_GAMES = 3
_DEFAULT_FULL_SAMPLE_GAMES = 10

# Season baseline vs line
_DEFAULT_SEASON_THRESHOLD_PCT = 0.05
_DEFAULT_SEASON_THRESHOLD_MIN = 0.5

# Venue split
_DEFAULT_VENUE_THRESHOLD_PCT = 0.10
_DEFAULT_VENUE_THRESHOLD_MIN = 0.8

# Head-to-head
_DEFAULT_H2H_MIN_GAMES = 3
_DEFAULT_H2H_OVER_RATE = 0.6
_DEFAULT_H2H_UNDER_RATE = 0.4

# Momentum
_DEFAULT_MOMENTUM_STREAK = 4
_DEFAULT_MOMENTUM_FULL_STREAK = 7

# Rest / fatigue
_DEFAULT_RESTED_DAYS = 2
_DEFAULT_REST_SCALE = 4.0

# Defense ranks: 30 teams splits into <=10 / 11-20 / >=21
_DEFAULT_LEAGUE_SIZE = 30

# Game environment
_DEFAULT_GAME_ENV_THRESHOLD_PCT = 0.05

# Minutes trend: L5 vs the five before it
_DEFAULT_MINUTES_WINDOW = 10
_DEFAULT_MINUTES_MIN_GAMES = 5
_DEFAULT_MINUTES_BAND = 2.0
_DEFAULT_MINUTES_SCALE = 5.0

# Aggregation and verdict
_DEFAULT_FIRED_STRENGTH = 0.1
_DEFAULT_VERDICT_WINDOW = 10
_DEFAULT_VERDICT_TIE_MARGIN = 1
_DEFAULT_STRONG_CONFIDENCE = 70
_DEFAULT_CONFIDENCE_FLOOR = 10
_DEFAULT_CONFIDENCE_CEILING = 99
_DEFAULT_LEAN_TOSSUP_BAND = 10.0
_DEFAULT_LEAN_STRONG_TIER = 65
_DEFAULT_LEAN_MODERATE_TIER = 50

# Analytics
_DEFAULT_HEAT_RING_GAMES = 10
_DEFAULT_SPECTRUM_GRID_POINTS = 100
_DEFAULT_SPECTRUM_SILVERMAN_MIN = 5
_DEFAULT_TIMELINE_WINDOW = 5
_DEFAULT_SIMILAR_MIN_GAMES = 3

# Teammate absence
_DEFAULT_TEAMMATE_MIN_WITH = 3
_DEFAULT_TEAMMATE_MIN_WITHOUT = 2
_DEFAULT_TEAMMATE_DEAD_ZONE = 0.5

# Narratives
_DEFAULT_NARRATIVE_REVENGE_RATIO = 1.2
_DEFAULT_NARRATIVE_REVENGE_HIGH_RATIO = 1.3
_DEFAULT_NARRATIVE_MILESTONE_WINDOW = 100.0
_DEFAULT_NARRATIVE_TEAM_STREAK = 4
_DEFAULT_NARRATIVE_LINE_STREAK = 4
_DEFAULT_NARRATIVE_BOUNCE_RATIO = 0.4
_DEFAULT_NARRATIVE_ABSENCE_DAYS = 7
_DEFAULT_NARRATIVE_REST_DAYS = 3

# Orchestration
_DEFAULT_SCHEDULE_CACHE_TTL = 900

_DEFAULT_FACTOR_WEIGHTS = {
    "recent_trend": 0.26,
    "season_avg": 0.20,
    "matchup": 0.18,
    "minutes_trend": 0.14,
    "rest": 0.10,
    "venue": 0.05,
    "h2h": 0.05,
    "momentum": 0.04,
    "game_environment": 0.07,
    "weather": 0.10,
    "opposing_pitcher": 0.12,
    "platoon_split": 0.06,
}


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _coerce_float(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_str(value: Optional[str], default: str) -> str:
    if value is None:
        return default
    return str(value)


def _coercer_for(default):
    if isinstance(default, bool):
        raise TypeError("boolean settings are not supported")
    if isinstance(default, int):
        return _coerce_int
    if isinstance(default, float):
        return _coerce_float
    return _coerce_str


def _parse_env_file(path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = _strip_quotes(value.strip())
    return data


def _load_config_data(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        data = {}
        for key, value in payload.items():
            if isinstance(value, dict):
                data[str(key)] = json.dumps(value)
            else:
                data[str(key)] = str(value)
        return data
    return _parse_env_file(path)


def _load_factor_weights(path: str, defaults: Dict[str, float]) -> Dict[str, float]:
    weights = dict(defaults)
    if not path:
        return weights
    weights_path = Path(path)
    if not weights_path.exists():
        return weights
    try:
        payload = json.loads(weights_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return weights
    return _merge_weights(weights, payload)


def _merge_weights(weights: Dict[str, float], payload) -> Dict[str, float]:
    merged = dict(weights)
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            return merged
    if isinstance(payload, dict):
        for key, value in payload.items():
            try:
                merged[str(key)] = float(value)
            except (TypeError, ValueError):
                continue
    return merged


def _env_key(name: str) -> str:
    return _ENV_PREFIX + name.upper()


@dataclass
class Config:
    # Recent form
    trend_window: int = _DEFAULT_TREND_WINDOW
    trend_band: float = _DEFAULT_TREND_BAND

    # Sample sizes
    min_sample_games: int = _DEFAULT_MIN_SAMPLE_GAMES
    full_sample_games: int = _DEFAULT_FULL_SAMPLE_GAMES

    # Season baseline vs line
    season_threshold_pct: float = _DEFAULT_SEASON_THRESHOLD_PCT
    season_threshold_min: float = _DEFAULT_SEASON_THRESHOLD_MIN

    # Venue split
    venue_threshold_pct: float = _DEFAULT_VENUE_THRESHOLD_PCT
    venue_threshold_min: float = _DEFAULT_VENUE_THRESHOLD_MIN

    # Head-to-head
    h2h_min_games: int = _DEFAULT_H2H_MIN_GAMES
    h2h_over_rate: float = _DEFAULT_H2H_OVER_RATE
    h2h_under_rate: float = _DEFAULT_H2H_UNDER_RATE

    # Momentum
    momentum_streak: int = _DEFAULT_MOMENTUM_STREAK
    momentum_full_streak: int = _DEFAULT_MOMENTUM_FULL_STREAK

    # Rest / fatigue
    rested_days: int = _DEFAULT_RESTED_DAYS
    rest_scale: float = _DEFAULT_REST_SCALE

    league_size: int = _DEFAULT_LEAGUE_SIZE
    game_env_threshold_pct: float = _DEFAULT_GAME_ENV_THRESHOLD_PCT

    # Minutes trend
    minutes_window: int = _DEFAULT_MINUTES_WINDOW
    minutes_min_games: int = _DEFAULT_MINUTES_MIN_GAMES
    minutes_band: float = _DEFAULT_MINUTES_BAND
    minutes_scale: float = _DEFAULT_MINUTES_SCALE

    # Aggregation and verdict
    fired_strength: float = _DEFAULT_FIRED_STRENGTH
    verdict_window: int = _DEFAULT_VERDICT_WINDOW
    verdict_tie_margin: int = _DEFAULT_VERDICT_TIE_MARGIN
    strong_confidence: int = _DEFAULT_STRONG_CONFIDENCE
    confidence_floor: int = _DEFAULT_CONFIDENCE_FLOOR
    confidence_ceiling: int = _DEFAULT_CONFIDENCE_CEILING
    lean_tossup_band: float = _DEFAULT_LEAN_TOSSUP_BAND
    lean_strong_tier: int = _DEFAULT_LEAN_STRONG_TIER
    lean_moderate_tier: int = _DEFAULT_LEAN_MODERATE_TIER

    # Analytics
    heat_ring_games: int = _DEFAULT_HEAT_RING_GAMES
    spectrum_grid_points: int = _DEFAULT_SPECTRUM_GRID_POINTS
    spectrum_silverman_min: int = _DEFAULT_SPECTRUM_SILVERMAN_MIN
    timeline_window: int = _DEFAULT_TIMELINE_WINDOW
    similar_min_games: int = _DEFAULT_SIMILAR_MIN_GAMES

    # Teammate absence
    teammate_min_with: int = _DEFAULT_TEAMMATE_MIN_WITH
    teammate_min_without: int = _DEFAULT_TEAMMATE_MIN_WITHOUT
    teammate_dead_zone: float = _DEFAULT_TEAMMATE_DEAD_ZONE

    # Narratives
    narrative_revenge_ratio: float = _DEFAULT_NARRATIVE_REVENGE_RATIO
    narrative_revenge_high_ratio: float = _DEFAULT_NARRATIVE_REVENGE_HIGH_RATIO
    narrative_milestone_window: float = _DEFAULT_NARRATIVE_MILESTONE_WINDOW
    narrative_team_streak: int = _DEFAULT_NARRATIVE_TEAM_STREAK
    narrative_line_streak: int = _DEFAULT_NARRATIVE_LINE_STREAK
    narrative_bounce_ratio: float = _DEFAULT_NARRATIVE_BOUNCE_RATIO
    narrative_absence_days: int = _DEFAULT_NARRATIVE_ABSENCE_DAYS
    narrative_rest_days: int = _DEFAULT_NARRATIVE_REST_DAYS

    # Orchestration
    schedule_cache_ttl: int = _DEFAULT_SCHEDULE_CACHE_TTL

    factor_weights_path: str = ""
    factor_weights: Dict[str, float] = field(default=None)  # type: ignore

    def __post_init__(self) -> None:
        if self.factor_weights is None:
            self.factor_weights = _load_factor_weights(
                self.factor_weights_path, _DEFAULT_FACTOR_WEIGHTS
            )

    @classmethod
    def _scalar_fields(cls):
        return [f for f in fields(cls) if f.name != "factor_weights"]

    @classmethod
    def from_env(cls) -> "Config":
        return cls._from_mapping(os.environ, cls())

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        env_config = cls.from_env()
        if not config_path:
            return env_config
        file_data = _load_config_data(Path(config_path))
        return cls._from_mapping(file_data, env_config)

    @classmethod
    def _from_mapping(cls, data, base: "Config") -> "Config":
        values = {}
        for f in cls._scalar_fields():
            current = getattr(base, f.name)
            raw = data.get(_env_key(f.name))
            if raw is None:
                raw = data.get(f.name)
            values[f.name] = _coercer_for(current)(raw, current)

        if values["factor_weights_path"] != base.factor_weights_path:
            weights = _load_factor_weights(values["factor_weights_path"], base.factor_weights)
        else:
            weights = dict(base.factor_weights)
        inline = data.get(_env_key("factor_weights")) or data.get("factor_weights")
        if inline:
            weights = _merge_weights(weights, inline)
        values["factor_weights"] = weights

        config = cls(**values)
        config.validate()
        return config

    def with_overrides(self, **overrides) -> "Config":
        overrides["factor_weights"] = dict(overrides.get("factor_weights", self.factor_weights))
        config = replace(self, **overrides)
        config.validate()
        return config

    def weight_for(self, factor_key: str) -> float:
        return float(self.factor_weights.get(factor_key, 0.0))

    def validate(self) -> None:
        positive = (
            "trend_window",
            "min_sample_games",
            "full_sample_games",
            "h2h_min_games",
            "momentum_full_streak",
            "minutes_window",
            "minutes_min_games",
            "league_size",
            "verdict_window",
            "heat_ring_games",
            "spectrum_grid_points",
            "timeline_window",
            "similar_min_games",
            "teammate_min_with",
            "teammate_min_without",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigurationError(name, "must be positive")
        if self.rest_scale <= 0:
            raise ConfigurationError("rest_scale", "must be positive")
        if self.minutes_scale <= 0:
            raise ConfigurationError("minutes_scale", "must be positive")
        if self.trend_band < 0:
            raise ConfigurationError("trend_band", "must not be negative")
        if self.teammate_dead_zone < 0:
            raise ConfigurationError("teammate_dead_zone", "must not be negative")
        if not 0 <= self.confidence_floor <= self.confidence_ceiling <= 100:
            raise ConfigurationError(
                "confidence_floor",
                f"expected 0 <= floor <= ceiling <= 100, got "
                f"{self.confidence_floor}..{self.confidence_ceiling}",
            )
        if self.h2h_under_rate > self.h2h_over_rate:
            raise ConfigurationError("h2h_under_rate", "must not exceed h2h_over_rate")
        if any(weight < 0 for weight in self.factor_weights.values()):
            raise ConfigurationError("factor_weights", "weights must not be negative")

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_CONFIG = Config()
