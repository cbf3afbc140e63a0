"""Counterfactual re-evaluation."""

from propcheck.simulation.teammate_impact import TeammateImpact, TeammateLog, simulate_teammate_absence
from propcheck.simulation.what_if import WhatIfModification, WhatIfResult, simulate, simulate_snapshot

__all__ = [
    "TeammateImpact",
    "TeammateLog",
    "WhatIfModification",
    "WhatIfResult",
    "simulate",
    "simulate_snapshot",
    "simulate_teammate_absence",
]
