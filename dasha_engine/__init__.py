"""
Dasha Engine
============
Vedic period (dasha) subdivision and compatibility scoring.

Quick start:
    from datetime import datetime, timezone
    from dasha_engine import compute_vimshottari_dasha, find_current_period

    tree = compute_vimshottari_dasha(
        moon_sidereal_lon=123.45,
        birth_dt=datetime(1990, 6, 15, 5, 0, tzinfo=timezone.utc),
    )
    running = find_current_period(tree, datetime.now(timezone.utc))
"""

from .core.chart import Chart, PlanetPosition
from .core.dasha import (
    compute_ashtottari_dasha, compute_dasha, compute_vimshottari_dasha, compute_yogini_dasha,
)
from .core.guna import compute_guna_milan
from .core.manglik import assess_affliction, couple_verdict
from .core.periods import compute_periods, find_current_period
from .tools.report import generate_dasha_report

__version__ = "1.0.0"
__all__ = [
    "Chart", "PlanetPosition",
    "compute_dasha", "compute_vimshottari_dasha", "compute_ashtottari_dasha", "compute_yogini_dasha",
    "compute_periods", "find_current_period",
    "compute_guna_milan", "assess_affliction", "couple_verdict",
    "generate_dasha_report",
]
