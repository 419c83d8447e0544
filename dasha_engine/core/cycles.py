"""
cycles.py
=========
Cycle tables for the supported dasha systems and the rules that pick the
starting period from the Moon's nakshatra at birth.

  Vimshottari (120 years): Ketu 7 → Venus 20 → Sun 6 → Moon 10 → Mars 7
                           → Rahu 18 → Jupiter 16 → Saturn 19 → Mercury 17
  Ashtottari  (108 years): Sun 6 → Moon 15 → Mars 8 → Mercury 17 → Saturn 10
                           → Jupiter 19 → Rahu 12 → Venus 21
  Yogini       (36 years): Mangala 1 → Pingala 2 → Dhanya 3 → Bhramari 4
                           → Bhadrika 5 → Ulka 6 → Siddha 7 → Sankata 8

Source: Parashara, B.V. "Brihat Parashara Hora Shastra" (classical text)
"""

from enum import Enum
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidCycleTableError, InvalidInputError
from .longitude import nakshatra_fraction, nakshatra_index
from .tables import Planet, lookup


class DashaSystem(str, Enum):
    VIMSHOTTARI = "vimshottari"
    ASHTOTTARI = "ashtottari"
    YOGINI = "yogini"


class CycleEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    planet: Planet
    years:  int
    label:  Optional[str] = None

    @property
    def name(self) -> str:
        return self.label or self.planet.value


class CycleTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    name:        str
    total_years: int
    entries:     Tuple[CycleEntry, ...]

    def check(self) -> "CycleTable":
        """Raise InvalidCycleTableError unless the table is usable by the period engine."""
        if not self.entries:
            raise InvalidCycleTableError(f"Cycle table '{self.name}' is empty")
        planets = [entry.planet for entry in self.entries]
        if len(set(planets)) != len(planets):
            raise InvalidCycleTableError(f"Cycle table '{self.name}' repeats a planet")
        if any(entry.years <= 0 for entry in self.entries):
            raise InvalidCycleTableError(f"Cycle table '{self.name}' has a non-positive period length")
        total = sum(entry.years for entry in self.entries)
        if total != self.total_years:
            raise InvalidCycleTableError(
                f"Cycle table '{self.name}' sums to {total} years, declared {self.total_years}"
            )
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def index_of(self, planet: Planet) -> int:
        for idx, entry in enumerate(self.entries):
            if entry.planet == planet:
                return idx
        raise InvalidInputError(f"{planet.value} is not part of the {self.name} cycle")

    def rotation(self, start_index: int) -> List[CycleEntry]:
        """Entries in cycle order beginning at `start_index`."""
        return list(self.entries[start_index:] + self.entries[:start_index])

    def share(self, entry: CycleEntry) -> Fraction:
        """Proportion of any parent period allotted to `entry`."""
        return Fraction(entry.years, self.total_years)


def _table(name: str, total: int, rows) -> CycleTable:
    entries = tuple(CycleEntry(planet=planet, years=years, label=label) for planet, years, label in rows)
    return CycleTable(name=name, total_years=total, entries=entries).check()


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

VIMSHOTTARI = _table("Vimshottari", 120, [
    (Planet.KETU,    7,  None),
    (Planet.VENUS,   20, None),
    (Planet.SUN,     6,  None),
    (Planet.MOON,    10, None),
    (Planet.MARS,    7,  None),
    (Planet.RAHU,    18, None),
    (Planet.JUPITER, 16, None),
    (Planet.SATURN,  19, None),
    (Planet.MERCURY, 17, None),
])

ASHTOTTARI = _table("Ashtottari", 108, [
    (Planet.SUN,     6,  None),
    (Planet.MOON,    15, None),
    (Planet.MARS,    8,  None),
    (Planet.MERCURY, 17, None),
    (Planet.SATURN,  10, None),
    (Planet.JUPITER, 19, None),
    (Planet.RAHU,    12, None),
    (Planet.VENUS,   21, None),
])

YOGINI = _table("Yogini", 36, [
    (Planet.MOON,    1, "Mangala"),
    (Planet.SUN,     2, "Pingala"),
    (Planet.JUPITER, 3, "Dhanya"),
    (Planet.MARS,    4, "Bhramari"),
    (Planet.MERCURY, 5, "Bhadrika"),
    (Planet.SATURN,  6, "Ulka"),
    (Planet.VENUS,   7, "Siddha"),
    (Planet.RAHU,    8, "Sankata"),
])

CYCLE_TABLES: Dict[DashaSystem, CycleTable] = {
    DashaSystem.VIMSHOTTARI: VIMSHOTTARI,
    DashaSystem.ASHTOTTARI:  ASHTOTTARI,
    DashaSystem.YOGINI:      YOGINI,
}

# Ashtottari lords rotate through the nakshatras beginning with Ardra = Sun
_ASHTOTTARI_FROM_ARDRA = [Planet.SUN, Planet.MOON, Planet.MARS, Planet.MERCURY,
                          Planet.SATURN, Planet.JUPITER, Planet.RAHU, Planet.VENUS]
ASHTOTTARI_NAKSHATRA_LORDS: Dict[int, Planet] = {
    nak: _ASHTOTTARI_FROM_ARDRA[((nak - 5) % 27) % 8] for nak in range(27)
}


# ---------------------------------------------------------------------------
# Starting position
# ---------------------------------------------------------------------------

def cycle_table(system: DashaSystem) -> CycleTable:
    return lookup(CYCLE_TABLES, DashaSystem(system), "CYCLE_TABLES")


def _vimshottari_start(nakshatra: int) -> int:
    return nakshatra % 9


def _ashtottari_start(nakshatra: int) -> int:
    lord = lookup(ASHTOTTARI_NAKSHATRA_LORDS, nakshatra, "ASHTOTTARI_NAKSHATRA_LORDS")
    return ASHTOTTARI.index_of(lord)


def _yogini_start(nakshatra: int) -> int:
    # (nakshatra number + 3) mod 8 counts yoginis from Mangala = 1; 0 means Sankata.
    # Ashwini therefore opens on Bhramari. Tools that read the remainder as a
    # 0-based index start Ashwini on Bhadrika instead.
    remainder = (nakshatra + 1 + 3) % 8
    return (remainder - 1) % 8


_START_RULES = {
    DashaSystem.VIMSHOTTARI: _vimshottari_start,
    DashaSystem.ASHTOTTARI:  _ashtottari_start,
    DashaSystem.YOGINI:      _yogini_start,
}


def starting_position(system: DashaSystem, moon_sidereal_lon: float) -> Tuple[int, float]:
    """
    Index of the running period at birth and the fraction of it already elapsed.

    The elapsed fraction equals the fraction of the Moon's nakshatra traversed.
    """
    rule = lookup(_START_RULES, DashaSystem(system), "_START_RULES")
    nakshatra = nakshatra_index(moon_sidereal_lon)
    return rule(nakshatra), nakshatra_fraction(moon_sidereal_lon)
