"""Snapshot types and engine results."""

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
)
from propcheck.models.results import ConvergenceFactor, ConvergenceResult, Verdict

__all__ = [
    "ConvergenceFactor",
    "ConvergenceResult",
    "DefenseRanking",
    "ExtraContext",
    "Game",
    "GameLogEntry",
    "Injury",
    "OpposingPitcher",
    "PlatoonSplits",
    "Player",
    "PropSnapshot",
    "SeasonStats",
    "Team",
    "Verdict",
    "Weather",
]
