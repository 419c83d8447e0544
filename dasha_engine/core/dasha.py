"""
dasha.py
========
Vimshottari, Ashtottari and Yogini dasha systems.

Each system is the generic period engine run over its own cycle table. The
dasha ruler and starting point come from the Moon's nakshatra at birth; the
balance of the first period is the part of that nakshatra still to be
traversed.

Vimshottari ("120 years") is the most widely used system. Ashtottari
("108 years") applies to charts passing its Rahu placement test. Yogini
("36 years") is normally read over three cycles.

Source: Parashara, B.V. "Brihat Parashara Hora Shastra" (classical text)
Algorithm: Standard dasha computation as implemented in reference software.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .cycles import DashaSystem, cycle_table, starting_position
from .periods import (
    DashaLevel, PeriodNode, PeriodTree, compute_periods,
)
from .tables import Planet, Relationship, relationship

logger = logging.getLogger(__name__)

DEFAULT_CYCLES = {
    DashaSystem.VIMSHOTTARI: 1,
    DashaSystem.ASHTOTTARI:  1,
    DashaSystem.YOGINI:      3,
}


class DashaBalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    system:           DashaSystem
    planet:           Planet
    label:            Optional[str] = None
    elapsed_fraction: float
    balance_years:    float


# ---------------------------------------------------------------------------
# Core calculation
# ---------------------------------------------------------------------------

def compute_dasha(system: DashaSystem, moon_sidereal_lon: float, birth_dt: datetime,
                  cycles: Optional[int] = None,
                  depth: DashaLevel = DashaLevel.PRATYANTARDASHA) -> PeriodTree:
    """
    Compute the dasha tree of `system` from birth.

    Args:
        system: which dasha system to use
        moon_sidereal_lon: Moon's sidereal longitude in degrees [0, 360)
        birth_dt: timezone-aware birth datetime
        cycles: passes through the cycle table (system default when None)
        depth: deepest sub-period level to generate
    """
    system = DashaSystem(system)
    start_index, elapsed = starting_position(system, moon_sidereal_lon)
    if cycles is None:
        cycles = DEFAULT_CYCLES[system]
    logger.debug("%s dasha from index %d, %.4f elapsed", system.value, start_index, elapsed)
    return compute_periods(cycle_table(system), start_index, elapsed, birth_dt, cycles, depth)


def compute_vimshottari_dasha(moon_sidereal_lon: float, birth_dt: datetime, cycles: int = 1,
                              depth: DashaLevel = DashaLevel.PRATYANTARDASHA) -> PeriodTree:
    return compute_dasha(DashaSystem.VIMSHOTTARI, moon_sidereal_lon, birth_dt, cycles, depth)


def compute_ashtottari_dasha(moon_sidereal_lon: float, birth_dt: datetime, cycles: int = 1,
                             depth: DashaLevel = DashaLevel.PRATYANTARDASHA) -> PeriodTree:
    return compute_dasha(DashaSystem.ASHTOTTARI, moon_sidereal_lon, birth_dt, cycles, depth)


def compute_yogini_dasha(moon_sidereal_lon: float, birth_dt: datetime, cycles: int = 3,
                         depth: DashaLevel = DashaLevel.PRATYANTARDASHA) -> PeriodTree:
    return compute_dasha(DashaSystem.YOGINI, moon_sidereal_lon, birth_dt, cycles, depth)


def dasha_balance(system: DashaSystem, moon_sidereal_lon: float) -> DashaBalance:
    """Ruler of the period running at birth and the years left in it."""
    system = DashaSystem(system)
    table = cycle_table(system)
    start_index, elapsed = starting_position(system, moon_sidereal_lon)
    entry = table.entries[start_index]
    return DashaBalance(
        system=system,
        planet=entry.planet,
        label=entry.label,
        elapsed_fraction=elapsed,
        balance_years=entry.years * (1.0 - elapsed),
    )


# ---------------------------------------------------------------------------
# Sub-period relationships
# ---------------------------------------------------------------------------

def antardasha_relationships(tree: PeriodTree,
                             maha: PeriodNode) -> List[Tuple[PeriodNode, Relationship]]:
    """
    Pair each Antardasha of `maha` with how its lord regards the Mahadasha lord.
    """
    return [(sub, relationship(sub.owner, maha.owner)) for sub in tree.children(maha)]


def describe_period(node: PeriodNode) -> dict:
    return {
        "lord":           node.owner.value,
        "name":           node.name,
        "level":          node.level.name.lower(),
        "start":          node.start.isoformat(),
        "end":            node.end.isoformat(),
        "duration_years": round(float(node.duration_years), 4),
    }
