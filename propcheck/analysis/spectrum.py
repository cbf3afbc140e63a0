"""
Prop spectrum: a kernel density view of a stat's history around a line.

Gaussian kernel on a fixed grid with a Silverman's-rule bandwidth, so the
curve widens or tightens with the sample. Small or degenerate samples fall
back to half the standard deviation (or 1.0 when every value is equal).
"""

from typing import Dict, Optional, Sequence

import numpy as np

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.features.windows import population_std, safe_mean
from propcheck.models.results import PropSpectrum, SpectrumOverlay
from propcheck.models.types import GameLogEntry, defense_tier


# Defer scipy import for faster module load
_stats = None


def _get_stats():
    """Lazy import of scipy.stats."""
    global _stats
    if _stats is None:
        from scipy import stats
        _stats = stats
    return _stats


def silverman_bandwidth(values: np.ndarray) -> float:
    """0.9 * min(sd, IQR / 1.34) * n ** -0.2, or 0 when undefined."""
    n = values.size
    if n < 2:
        return 0.0
    stats = _get_stats()
    sd = float(np.std(values, ddof=0))
    iqr = float(stats.iqr(values))
    spread = min(sd, iqr / 1.34) if iqr > 0 else sd
    return 0.9 * spread * n ** -0.2


def choose_bandwidth(values: np.ndarray, silverman_min: int) -> float:
    bandwidth = 0.0
    if values.size >= silverman_min:
        bandwidth = silverman_bandwidth(values)
    if bandwidth <= 0:
        bandwidth = population_std(values) * 0.5
    if bandwidth <= 0:
        bandwidth = 1.0
    return bandwidth


def kernel_density(values: np.ndarray, bandwidth: float, grid_points: int):
    """Density on ``grid_points`` points from max(0, min - 2h) to max + 2h."""
    stats = _get_stats()
    low = max(0.0, float(values.min()) - 2 * bandwidth)
    high = float(values.max()) + 2 * bandwidth
    grid = np.linspace(low, high, grid_points)
    density = stats.norm.pdf((grid[:, None] - values[None, :]) / bandwidth).sum(axis=1)
    density = density / (values.size * bandwidth)
    return grid, density


def _volatility_label(score: float) -> str:
    if score < 30:
        return "low"
    if score < 60:
        return "medium"
    return "high"


def _overlay(logs: Sequence[GameLogEntry], stat: str) -> SpectrumOverlay:
    return SpectrumOverlay(games=len(logs), mean=safe_mean([log.value(stat) for log in logs]))


def spectrum_overlays(game_logs: Sequence[GameLogEntry], stat: str, league_size: int) -> Dict[str, SpectrumOverlay]:
    ranked = [log for log in game_logs if log.opponent_def_rank is not None]
    return {
        'home': _overlay([log for log in game_logs if log.is_home], stat),
        'away': _overlay([log for log in game_logs if not log.is_home], stat),
        'vs_top_defense': _overlay(
            [log for log in ranked if defense_tier(log.opponent_def_rank, league_size) == 'top'], stat
        ),
        'vs_bottom_defense': _overlay(
            [log for log in ranked if defense_tier(log.opponent_def_rank, league_size) == 'bottom'], stat
        ),
    }


def empty_spectrum(line: float, league_size: int = 30) -> PropSpectrum:
    return PropSpectrum(
        available=False,
        line=float(line),
        overlays=spectrum_overlays([], "", league_size),
    )


def compute_spectrum(
    game_logs: Sequence[GameLogEntry],
    stat: str,
    line: float,
    config: Optional[Config] = None,
) -> PropSpectrum:
    config = config or DEFAULT_CONFIG
    line = float(line)
    if not game_logs:
        return empty_spectrum(line, config.league_size)

    values = np.array([log.value(stat) for log in game_logs], dtype=float)
    bandwidth = choose_bandwidth(values, config.spectrum_silverman_min)
    grid, density = kernel_density(values, bandwidth, config.spectrum_grid_points)

    mean = float(values.mean())
    std = population_std(values)
    cv = (std / mean) * 100.0 if mean > 0 else 0.0
    volatility_score = min(100.0, cv * 2.0)
    over_pct = float(np.count_nonzero(values > line)) / values.size * 100.0

    return PropSpectrum(
        available=True,
        line=line,
        values=tuple(float(v) for v in values),
        mean=mean,
        median=float(np.median(values)),
        std_dev=std,
        min=float(values.min()),
        max=float(values.max()),
        bandwidth=float(bandwidth),
        kde=tuple((float(x), float(y)) for x, y in zip(grid, density)),
        over_pct=over_pct,
        under_pct=100.0 - over_pct,
        volatility_score=volatility_score,
        volatility=_volatility_label(volatility_score),
        overlays=spectrum_overlays(game_logs, stat, config.league_size),
    )
