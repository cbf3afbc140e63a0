"""
What-if simulation: rerun factors and verdict on a modified snapshot.

Modifications never touch the caller's objects. Each one produces a new
frozen snapshot through ``dataclasses.replace``, and the result pairs
the recomputed outcome with the untouched baseline.
"""

from dataclasses import dataclass, replace
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from propcheck.config import Config, DEFAULT_CONFIG
from propcheck.exceptions import InvalidModificationError
from propcheck.models.results import ConvergenceResult, Verdict
from propcheck.models.types import (
    DefenseRanking,
    ExtraContext,
    Game,
    GameLogEntry,
    Injury,
    Player,
    PropSnapshot,
    SeasonStats,
    Weather,
)
from propcheck.models.verdict import score_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhatIfModification:
    kind: str
    value: Any = None

    def describe(self) -> str:
        if self.value is None:
            return self.kind
        return f"{self.kind}={self.value}"


@dataclass(frozen=True)
class ScenarioOutcome:
    line: float
    convergence: ConvergenceResult
    verdict: Verdict

    def to_dict(self) -> dict:
        return {
            'line': self.line,
            'convergence': self.convergence.to_dict(),
            'verdict': self.verdict.to_dict(),
        }


@dataclass(frozen=True)
class FactorChange:
    key: str
    name: str
    original_signal: Optional[str]
    modified_signal: Optional[str]
    original_strength: float
    modified_strength: float

    @property
    def changed(self) -> bool:
        return (
            self.original_signal != self.modified_signal
            or abs(self.original_strength - self.modified_strength) > 1e-9
        )

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'name': self.name,
            'original_signal': self.original_signal,
            'modified_signal': self.modified_signal,
            'original_strength': round(self.original_strength, 4),
            'modified_strength': round(self.modified_strength, 4),
            'changed': self.changed,
        }


@dataclass(frozen=True)
class WhatIfResult:
    modifications: Tuple[WhatIfModification, ...]
    baseline: ScenarioOutcome
    modified: ScenarioOutcome
    factor_changes: Tuple[FactorChange, ...]
    summary: str

    def to_dict(self) -> dict:
        return {
            'modifications': [m.describe() for m in self.modifications],
            'baseline': self.baseline.to_dict(),
            'modified': self.modified.to_dict(),
            'factor_changes': [c.to_dict() for c in self.factor_changes],
            'summary': self.summary,
        }


# =============================================================================
# MODIFICATIONS
# =============================================================================

def _as_float(mod: WhatIfModification) -> float:
    try:
        value = float(mod.value)
    except (TypeError, ValueError):
        raise InvalidModificationError(mod.kind, f"expected a number, got {mod.value!r}")
    if not math.isfinite(value):
        raise InvalidModificationError(mod.kind, "value must be finite")
    return value


def _as_int(mod: WhatIfModification, minimum: int = 0) -> int:
    value = _as_float(mod)
    if value != int(value) or value < minimum:
        raise InvalidModificationError(mod.kind, f"expected a whole number >= {minimum}, got {mod.value!r}")
    return int(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _change_line(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    return replace(snapshot, line=_as_float(mod))


def _change_defense_rank(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    stats_allowed = None
    value = mod.value
    if isinstance(value, dict):
        stats_allowed = value.get('stats_allowed')
        value = value.get('rank')
    rank = _as_int(WhatIfModification(mod.kind, value), minimum=1)
    current = snapshot.defense_ranking
    if current is None:
        ranking = DefenseRanking(rank=rank, team_abbrev=snapshot.opponent_abbrev, stats_allowed=stats_allowed)
    else:
        if rank > current.total_teams:
            raise InvalidModificationError(mod.kind, f"rank {rank} exceeds {current.total_teams} teams")
        ranking = replace(
            current,
            rank=rank,
            label="",
            stats_allowed=stats_allowed if stats_allowed is not None else current.stats_allowed,
        )
    return replace(snapshot, defense_ranking=ranking)


def _change_venue(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    venue = str(mod.value).strip().lower()
    if venue not in ('home', 'away'):
        raise InvalidModificationError(mod.kind, "expected 'home' or 'away'")
    if (venue == 'home') == snapshot.is_home:
        return snapshot
    return replace(snapshot, game=snapshot.game.swapped())


def _toggle_back_to_back(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    if mod.value is None:
        is_b2b = not snapshot.upcoming_back_to_back
    else:
        is_b2b = _as_bool(mod.value)
    if is_b2b:
        return replace(snapshot, is_back_to_back=True, rest_days=0)
    return replace(snapshot, is_back_to_back=False, rest_days=max(snapshot.upcoming_rest_days, 1))


def _change_rest_days(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    rest_days = _as_int(mod, minimum=0)
    return replace(snapshot, rest_days=rest_days, is_back_to_back=rest_days == 0)


def _override_weather(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    value = mod.value
    if isinstance(value, dict):
        try:
            value = Weather(**value)
        except TypeError as exc:
            raise InvalidModificationError(mod.kind, str(exc))
    if value is not None and not isinstance(value, Weather):
        raise InvalidModificationError(mod.kind, "expected weather fields or None")
    extra = snapshot.extra or ExtraContext()
    return replace(snapshot, extra=replace(extra, weather=value))


def _override_game_total(snapshot: PropSnapshot, mod: WhatIfModification) -> PropSnapshot:
    total = None if mod.value is None else _as_float(mod)
    extra = snapshot.extra or ExtraContext()
    return replace(snapshot, extra=replace(extra, game_total=total))


MODIFIERS: Dict[str, Callable[[PropSnapshot, WhatIfModification], PropSnapshot]] = {
    'change_line': _change_line,
    'change_defense_rank': _change_defense_rank,
    'change_venue': _change_venue,
    'toggle_back_to_back': _toggle_back_to_back,
    'change_rest_days': _change_rest_days,
    'override_weather': _override_weather,
    'override_game_total': _override_game_total,
}


def apply_modifications(snapshot: PropSnapshot, modifications: Sequence[WhatIfModification]) -> PropSnapshot:
    """Apply modifications in order, returning a new snapshot."""
    modified = snapshot
    for mod in modifications:
        modifier = MODIFIERS.get(mod.kind)
        if modifier is None:
            raise InvalidModificationError(mod.kind, f"unknown kind, expected one of {sorted(MODIFIERS)}")
        modified = modifier(modified, mod)
    return modified


# =============================================================================
# SIMULATION
# =============================================================================

def _factor_changes(baseline: ConvergenceResult, modified: ConvergenceResult) -> List[FactorChange]:
    keys = [f.key for f in baseline.factors]
    keys += [f.key for f in modified.factors if f.key not in keys]
    changes = []
    for key in keys:
        before = baseline.factor(key)
        after = modified.factor(key)
        changes.append(FactorChange(
            key=key,
            name=(before or after).name,
            original_signal=before.signal if before else None,
            modified_signal=after.signal if after else None,
            original_strength=before.strength if before else 0.0,
            modified_strength=after.strength if after else 0.0,
        ))
    return changes


def _summary(modifications, baseline: ScenarioOutcome, modified: ScenarioOutcome, changes) -> str:
    if not modifications:
        return f"No modifications: {baseline.verdict.label} ({baseline.verdict.confidence}%)"
    what = ", ".join(m.describe() for m in modifications)
    flipped = sum(1 for c in changes if c.original_signal != c.modified_signal)
    return (
        f"{what}: {baseline.verdict.label} ({baseline.verdict.confidence}%) -> "
        f"{modified.verdict.label} ({modified.verdict.confidence}%), "
        f"{flipped} factor signal(s) flipped"
    )


def simulate_snapshot(
    snapshot: PropSnapshot,
    modifications: Sequence[WhatIfModification] = (),
    config: Optional[Config] = None,
) -> WhatIfResult:
    config = config or DEFAULT_CONFIG
    modifications = tuple(modifications)
    modified_snapshot = apply_modifications(snapshot, modifications)

    base_convergence, base_verdict = score_snapshot(snapshot, config)
    baseline = ScenarioOutcome(snapshot.line, base_convergence, base_verdict)
    if modifications:
        mod_convergence, mod_verdict = score_snapshot(modified_snapshot, config)
        modified = ScenarioOutcome(modified_snapshot.line, mod_convergence, mod_verdict)
    else:
        modified = baseline

    changes = _factor_changes(baseline.convergence, modified.convergence)
    summary = _summary(modifications, baseline, modified, changes)
    logger.debug("What-if for %s: %s", snapshot.player.name, summary)
    return WhatIfResult(
        modifications=modifications,
        baseline=baseline,
        modified=modified,
        factor_changes=tuple(changes),
        summary=summary,
    )


def simulate(
    player: Player,
    game: Game,
    game_logs: Sequence[GameLogEntry],
    season_stats: Optional[SeasonStats],
    defense_ranking: Optional[DefenseRanking],
    stat: str,
    original_line: float,
    modifications: Sequence[WhatIfModification] = (),
    extra: Optional[ExtraContext] = None,
    injuries: Sequence[Injury] = (),
    rest_days: Optional[int] = None,
    is_back_to_back: Optional[bool] = None,
    config: Optional[Config] = None,
) -> WhatIfResult:
    if season_stats is None:
        season_stats = SeasonStats.from_logs(game_logs, stat)
    snapshot = PropSnapshot(
        player=player,
        game=game,
        game_logs=tuple(game_logs),
        season_stats=season_stats,
        stat=stat,
        line=float(original_line),
        defense_ranking=defense_ranking,
        extra=extra,
        injuries=tuple(injuries),
        rest_days=rest_days,
        is_back_to_back=is_back_to_back,
    )
    return simulate_snapshot(snapshot, modifications, config)
