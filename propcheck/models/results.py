"""
Result dataclasses produced by the convergence engine.

Created fresh for each evaluation and never persisted. ``to_dict()``
gives JSON-ready output; ``explain()`` gives a text breakdown for CLI use
and debugging.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from propcheck.constants import OVER, UNDER


@dataclass(frozen=True)
class ConvergenceFactor:
    """One evaluator's contribution. Strength 0 means insufficient evidence."""
    key: str
    name: str
    signal: str
    strength: float
    detail: str
    data_point: str
    weight: float = 0.0
    fired: bool = False

    @property
    def direction(self) -> int:
        if self.signal == OVER:
            return 1
        if self.signal == UNDER:
            return -1
        return 0

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'name': self.name,
            'signal': self.signal,
            'strength': round(self.strength, 4),
            'detail': self.detail,
            'data_point': self.data_point,
            'weight': round(self.weight, 4),
            'fired': self.fired,
        }


@dataclass(frozen=True)
class WeightedTally:
    """Strength summed per direction instead of counted."""
    over: float
    under: float
    neutral: float

    @property
    def edge(self) -> float:
        return self.over - self.under

    def to_dict(self) -> dict:
        return {
            'over': round(self.over, 4),
            'under': round(self.under, 4),
            'neutral': round(self.neutral, 4),
            'edge': round(self.edge, 4),
        }


@dataclass(frozen=True)
class Lean:
    """Weight-normalized directional lean across active factors."""
    direction: str
    score: float
    confidence: int
    tier: str  # 'STRONG', 'MODERATE', 'NEUTRAL'

    def to_dict(self) -> dict:
        return {
            'direction': self.direction,
            'score': round(self.score, 2),
            'confidence': self.confidence,
            'tier': self.tier,
        }


@dataclass(frozen=True)
class ConvergenceResult:
    factors: Tuple[ConvergenceFactor, ...]
    over_count: int
    under_count: int
    neutral_count: int
    core_keys: Tuple[str, ...] = ()
    extension_keys: Tuple[str, ...] = ()
    weighted_factors: Optional[WeightedTally] = None
    lean: Optional[Lean] = None

    @property
    def roster_size(self) -> int:
        return len(self.factors)

    @property
    def fired_count(self) -> int:
        return sum(1 for f in self.factors if f.fired)

    def factor(self, key: str) -> Optional[ConvergenceFactor]:
        for item in self.factors:
            if item.key == key:
                return item
        return None

    def to_dict(self) -> dict:
        return {
            'factors': [f.to_dict() for f in self.factors],
            'over_count': self.over_count,
            'under_count': self.under_count,
            'neutral_count': self.neutral_count,
            'roster_size': self.roster_size,
            'fired_count': self.fired_count,
            'core_keys': list(self.core_keys),
            'extension_keys': list(self.extension_keys),
            'weighted_factors': self.weighted_factors.to_dict() if self.weighted_factors else None,
            'lean': self.lean.to_dict() if self.lean else None,
        }


@dataclass(frozen=True)
class Verdict:
    label: str
    direction: str
    convergence_score: int
    confidence: int
    hit_rate_l10: float
    avg_margin_l10: float
    season_avg: float
    lean: Optional[Lean] = None

    def to_dict(self) -> dict:
        return {
            'label': self.label,
            'direction': self.direction,
            'convergence_score': self.convergence_score,
            'confidence': self.confidence,
            'hit_rate_l10': round(self.hit_rate_l10, 4),
            'avg_margin_l10': round(self.avg_margin_l10, 3),
            'season_avg': round(self.season_avg, 3),
            'lean': self.lean.to_dict() if self.lean else None,
        }


# =============================================================================
# HEAT RING
# =============================================================================

@dataclass(frozen=True)
class HeatRingGame:
    date: str
    opponent: str
    is_home: bool
    value: float
    margin: float
    hit: bool
    opponent_def_rank: Optional[int] = None
    is_back_to_back: bool = False


@dataclass(frozen=True)
class HeatRingAggregates:
    hit_rate: float = 0.0
    hit_count: int = 0
    total_games: int = 0
    streak: int = 0
    avg_margin: float = 0.0
    avg_value: float = 0.0


@dataclass(frozen=True)
class HeatRing:
    games: Tuple[HeatRingGame, ...]
    aggregates: HeatRingAggregates
    line: float = 0.0

    def to_dict(self) -> dict:
        return {
            'line': self.line,
            'games': [
                {
                    'date': g.date,
                    'opponent': g.opponent,
                    'is_home': g.is_home,
                    'value': g.value,
                    'margin': round(g.margin, 3),
                    'hit': g.hit,
                    'opponent_def_rank': g.opponent_def_rank,
                    'is_back_to_back': g.is_back_to_back,
                }
                for g in self.games
            ],
            'aggregates': {
                'hit_rate': round(self.aggregates.hit_rate, 4),
                'hit_count': self.aggregates.hit_count,
                'total_games': self.aggregates.total_games,
                'streak': self.aggregates.streak,
                'avg_margin': round(self.aggregates.avg_margin, 3),
                'avg_value': round(self.aggregates.avg_value, 3),
            },
        }


# =============================================================================
# SPECTRUM
# =============================================================================

@dataclass(frozen=True)
class SpectrumOverlay:
    games: int
    mean: float


@dataclass(frozen=True)
class PropSpectrum:
    available: bool
    line: float
    values: Tuple[float, ...] = ()
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    min: float = 0.0
    max: float = 0.0
    bandwidth: float = 0.0
    kde: Tuple[Tuple[float, float], ...] = ()
    over_pct: float = 0.0
    under_pct: float = 0.0
    volatility_score: float = 0.0
    volatility: str = "low"
    overlays: Dict[str, SpectrumOverlay] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'available': self.available,
            'line': self.line,
            'mean': round(self.mean, 3),
            'median': round(self.median, 3),
            'std_dev': round(self.std_dev, 3),
            'min': self.min,
            'max': self.max,
            'bandwidth': round(self.bandwidth, 4),
            'kde': [[round(x, 3), round(y, 6)] for x, y in self.kde],
            'over_pct': round(self.over_pct, 1),
            'under_pct': round(self.under_pct, 1),
            'volatility_score': round(self.volatility_score, 1),
            'volatility': self.volatility,
            'overlays': {
                name: {'games': o.games, 'mean': round(o.mean, 3)}
                for name, o in self.overlays.items()
            },
        }


# =============================================================================
# TIMELINE
# =============================================================================

@dataclass(frozen=True)
class TimelinePoint:
    date: str
    value: float
    moving_average: float
    markers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GameLogTimeline:
    points: Tuple[TimelinePoint, ...]
    season_average: float
    window: int

    def to_dict(self) -> dict:
        return {
            'window': self.window,
            'season_average': round(self.season_average, 3),
            'points': [
                {
                    'date': p.date,
                    'value': p.value,
                    'moving_average': round(p.moving_average, 3),
                    'markers': list(p.markers),
                }
                for p in self.points
            ],
        }


# =============================================================================
# NARRATIVES / SIMILAR SITUATIONS
# =============================================================================

@dataclass(frozen=True)
class NarrativeFlag:
    key: str
    headline: str
    detail: str
    impact: str  # 'positive', 'negative', 'neutral'
    severity: str  # 'high', 'medium', 'low'
    historical_stat: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'headline': self.headline,
            'detail': self.detail,
            'impact': self.impact,
            'severity': self.severity,
            'historical_stat': self.historical_stat,
        }


@dataclass(frozen=True)
class SimilarSituationSet:
    description: str
    match_tier: int
    games: Tuple[object, ...]
    hit_rate: float
    avg_value: float
    avg_margin: float

    @property
    def matching_games(self) -> int:
        return len(self.games)

    def to_dict(self) -> dict:
        return {
            'description': self.description,
            'match_tier': self.match_tier,
            'matching_games': self.matching_games,
            'dates': [g.date for g in self.games],
            'hit_rate': round(self.hit_rate, 4),
            'avg_value': round(self.avg_value, 3),
            'avg_margin': round(self.avg_margin, 3),
        }


def format_factor_lines(factors: List[ConvergenceFactor]) -> List[str]:
    lines = []
    for f in factors:
        arrow = {OVER: '▲', UNDER: '▼'}.get(f.signal, '-')
        lines.append(
            f"  {arrow} {f.name:<22} {f.signal:<8} {f.strength:>4.2f}  {f.detail}"
        )
    return lines
