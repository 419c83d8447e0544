"""
sudarshana.py
=============
Sudarshana Chakra dasha: a 12-year cycle progressing one house per year.

For a running year of life `age` (1 = the first year):
  house_in_cycle = ((age − 1) mod 12) + 1
  cycle          = (age − 1) // 12 + 1

The year is read simultaneously from three references (Lagna, Moon, Sun):
the active sign is the sign `house_in_cycle − 1` signs on from the
reference. Occupants and aspects onto the active sign colour the year.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidInputError
from .chart import Chart
from .longitude import add_years, sign_from, to_utc, years_between
from .tables import Planet, aspect_strength, lookup, sign_name

FAVORABLE_YEAR_HOUSES = frozenset({1, 5, 9, 10, 11})
CHALLENGING_YEAR_HOUSES = frozenset({6, 8, 12})


class ChakraReference(str, Enum):
    LAGNA = "Lagna"
    MOON = "Moon"
    SUN = "Sun"


class YearTrend(str, Enum):
    FAVORABLE = "Favorable"
    NEUTRAL = "Neutral"
    CHALLENGING = "Challenging"


class AspectInfluence(BaseModel):
    model_config = ConfigDict(frozen=True)

    planet:   Planet
    strength: float


class ChakraPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference:      ChakraReference
    reference_sign: int
    active_sign:    int
    occupants:      Tuple[Planet, ...]
    aspects:        Tuple[AspectInfluence, ...]

    @property
    def active_sign_name(self) -> str:
        return sign_name(self.active_sign)


class SudarshanaYear(BaseModel):
    model_config = ConfigDict(frozen=True)

    age:            int
    cycle:          int
    house_in_cycle: int
    year_start:     datetime
    year_end:       datetime
    trend:          YearTrend
    positions:      Tuple[ChakraPosition, ...]


def _reference_sign(chart: Chart, reference: ChakraReference) -> int:
    getters = {
        ChakraReference.LAGNA: lambda: chart.ascendant_sign,
        ChakraReference.MOON:  lambda: chart.sign_of(Planet.MOON),
        ChakraReference.SUN:   lambda: chart.sign_of(Planet.SUN),
    }
    return lookup(getters, reference, "reference getters")()


def year_trend(house_in_cycle: int) -> YearTrend:
    if house_in_cycle in FAVORABLE_YEAR_HOUSES:
        return YearTrend.FAVORABLE
    if house_in_cycle in CHALLENGING_YEAR_HOUSES:
        return YearTrend.CHALLENGING
    return YearTrend.NEUTRAL


def _position(chart: Chart, reference: ChakraReference, house: int) -> ChakraPosition:
    ref_sign = _reference_sign(chart, reference)
    active = sign_from(ref_sign, house)
    occupants = []
    aspects = []
    for planet, pos in chart.planets.items():
        if pos.sign == active:
            occupants.append(planet)
            continue
        strength = aspect_strength(planet, pos.sign, active)
        if strength > 0:
            aspects.append(AspectInfluence(planet=planet, strength=strength))
    return ChakraPosition(
        reference=reference,
        reference_sign=ref_sign,
        active_sign=active,
        occupants=tuple(occupants),
        aspects=tuple(aspects),
    )


def sudarshana_for_age(chart: Chart, age: int) -> SudarshanaYear:
    if isinstance(age, bool) or not isinstance(age, int) or age < 1:
        raise InvalidInputError(f"age must be a running year >= 1, got {age!r}")
    house = ((age - 1) % 12) + 1
    return SudarshanaYear(
        age=age,
        cycle=(age - 1) // 12 + 1,
        house_in_cycle=house,
        year_start=add_years(chart.birth, age - 1),
        year_end=add_years(chart.birth, age),
        trend=year_trend(house),
        positions=tuple(_position(chart, ref, house) for ref in ChakraReference),
    )


def sudarshana_for_date(chart: Chart, as_of: datetime) -> SudarshanaYear:
    """Sudarshana year running at `as_of` (the completed years plus one)."""
    moment = to_utc(as_of, "as_of")
    if moment < to_utc(chart.birth):
        raise InvalidInputError("as_of precedes the birth timestamp")
    age = math.floor(years_between(chart.birth, moment)) + 1
    # float years can land a microsecond off the exact year boundary
    if age > 1 and moment < add_years(chart.birth, age - 1):
        age -= 1
    elif moment >= add_years(chart.birth, age):
        age += 1
    return sudarshana_for_age(chart, age)
