"""Analytics built off the same snapshot as the verdict."""

from propcheck.analysis.heat_ring import compute_heat_ring
from propcheck.analysis.narratives import detect_narratives
from propcheck.analysis.similar import find_similar_situations
from propcheck.analysis.spectrum import compute_spectrum
from propcheck.analysis.timeline import build_game_log_timeline

__all__ = [
    "build_game_log_timeline",
    "compute_heat_ring",
    "compute_spectrum",
    "detect_narratives",
    "find_similar_situations",
]
