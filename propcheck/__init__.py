"""Prop convergence scoring and verdict engine."""

__all__ = [
    "analysis",
    "assembly",
    "cli",
    "config",
    "constants",
    "exceptions",
    "features",
    "models",
    "normalization",
    "ops",
    "pipeline",
    "simulation",
    "storage",
]

__version__ = "0.1.0"
