"""
vedha.py
========
Gochara (transit) analysis from the natal Moon with Vedha obstruction.

A planet transiting one of its favourable houses from the Moon gives good
results unless another planet occupies the matching Vedha house, which
obstructs them. Sun and Saturn never obstruct each other.

Vedha pairs: 1↔5, 2↔12, 3↔9, 4↔10, 6↔12, 7↔11 (12 also meets 2 and 6)
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .longitude import house_from
from .tables import NATURAL_MALEFICS, UPACHAYA_HOUSES, Planet, check_sign, lookup

FAVORABLE_HOUSES: Dict[Planet, FrozenSet[int]] = {
    Planet.SUN:     frozenset({3, 6, 10, 11}),
    Planet.MOON:    frozenset({1, 3, 6, 7, 10, 11}),
    Planet.MARS:    frozenset({3, 6, 11}),
    Planet.MERCURY: frozenset({2, 4, 6, 8, 10, 11}),
    Planet.JUPITER: frozenset({2, 5, 7, 9, 11}),
    Planet.VENUS:   frozenset({1, 2, 3, 4, 5, 8, 9, 11, 12}),
    Planet.SATURN:  frozenset({3, 6, 11}),
    Planet.RAHU:    frozenset({3, 6, 10, 11}),
    Planet.KETU:    frozenset({3, 6, 11}),
}

VEDHA_HOUSES: Dict[int, FrozenSet[int]] = {
    1: frozenset({5}), 2: frozenset({12}), 3: frozenset({9}), 4: frozenset({10}),
    5: frozenset({1}), 6: frozenset({12}), 7: frozenset({11}), 8: frozenset(),
    9: frozenset({3}), 10: frozenset({4}), 11: frozenset({7}), 12: frozenset({2, 6}),
}

EXCELLENT_HOUSES = frozenset({2, 5, 9, 11})
VEDHA_EXEMPT_PAIRS = (frozenset({Planet.SUN, Planet.SATURN}),)


class VedhaSeverity(Enum):
    NONE = ("No Obstruction", 0)
    PARTIAL = ("Partial Obstruction", 25)
    MODERATE = ("Moderate Obstruction", 50)
    STRONG = ("Strong Obstruction", 75)
    COMPLETE = ("Complete Obstruction", 100)

    def __init__(self, display_name: str, reduction_percent: int):
        self.display_name = display_name
        self.reduction_percent = reduction_percent


class TransitEffectiveness(Enum):
    EXCELLENT = ("Excellent", 5)
    GOOD = ("Good", 4)
    MODERATE = ("Moderate", 3)
    WEAK = ("Weak", 2)
    NULLIFIED = ("Nullified by Vedha", 1)
    UNFAVORABLE = ("Unfavorable Transit", 0)

    def __init__(self, display_name: str, score: int):
        self.display_name = display_name
        self.score = score


class TransitVedha(BaseModel):
    model_config = ConfigDict(frozen=True)

    planet:          Planet
    house_from_moon: int
    is_favorable:    bool
    is_upachaya:     bool
    obstructed_by:   Tuple[Planet, ...] = ()
    vedha_house:     Optional[int] = None
    severity:        VedhaSeverity = VedhaSeverity.NONE
    effectiveness:   TransitEffectiveness


class VedhaAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    natal_moon_sign: int
    transits:        Tuple[TransitVedha, ...]
    overall_score:   int


# Importance of each planet in the overall score
TRANSIT_WEIGHTS: Dict[Planet, float] = {
    Planet.JUPITER: 3.0, Planet.SATURN: 2.5, Planet.SUN: 2.0, Planet.MOON: 2.0,
    Planet.VENUS: 1.5, Planet.MARS: 1.5, Planet.MERCURY: 1.5,
    Planet.RAHU: 1.0, Planet.KETU: 1.0,
}


def vedha_severity(obstructed: Planet, obstructing: Planet) -> VedhaSeverity:
    if obstructing in NATURAL_MALEFICS and obstructed in (Planet.JUPITER, Planet.VENUS, Planet.MOON):
        return VedhaSeverity.COMPLETE
    if obstructed == Planet.JUPITER:
        return VedhaSeverity.STRONG
    if obstructing in NATURAL_MALEFICS:
        return VedhaSeverity.STRONG
    if obstructing in (Planet.JUPITER, Planet.VENUS):
        return VedhaSeverity.PARTIAL
    return VedhaSeverity.MODERATE


def _effectiveness(house: int, favorable: bool, severity: VedhaSeverity) -> TransitEffectiveness:
    if not favorable:
        return TransitEffectiveness.UNFAVORABLE
    if severity == VedhaSeverity.NONE:
        if house in UPACHAYA_HOUSES and house in EXCELLENT_HOUSES:
            return TransitEffectiveness.EXCELLENT
        if house in UPACHAYA_HOUSES or house in EXCELLENT_HOUSES:
            return TransitEffectiveness.GOOD
        return TransitEffectiveness.MODERATE
    return {
        VedhaSeverity.COMPLETE: TransitEffectiveness.NULLIFIED,
        VedhaSeverity.STRONG:   TransitEffectiveness.WEAK,
        VedhaSeverity.MODERATE: TransitEffectiveness.MODERATE,
        VedhaSeverity.PARTIAL:  TransitEffectiveness.MODERATE,
    }[severity]


def analyze_transit(planet: Planet, natal_moon_sign: int,
                    transit_signs: Mapping[Planet, int]) -> TransitVedha:
    house = house_from(lookup(transit_signs, planet, "transit_signs"), natal_moon_sign)
    favorable = house in lookup(FAVORABLE_HOUSES, planet, "FAVORABLE_HOUSES")

    sources: List[Planet] = []
    vedha_house = None
    severity = VedhaSeverity.NONE
    if favorable:
        for candidate in sorted(lookup(VEDHA_HOUSES, house, "VEDHA_HOUSES")):
            for other, sign in transit_signs.items():
                if other == planet or house_from(sign, natal_moon_sign) != candidate:
                    continue
                if frozenset({planet, other}) in VEDHA_EXEMPT_PAIRS:
                    continue
                sources.append(other)
                vedha_house = candidate
                found = vedha_severity(planet, other)
                if found.reduction_percent > severity.reduction_percent:
                    severity = found

    return TransitVedha(
        planet=planet,
        house_from_moon=house,
        is_favorable=favorable,
        is_upachaya=house in UPACHAYA_HOUSES,
        obstructed_by=tuple(sources),
        vedha_house=vedha_house,
        severity=severity,
        effectiveness=_effectiveness(house, favorable, severity),
    )


def analyze_vedha(natal_moon_sign: int, transit_signs: Mapping[Planet, int]) -> VedhaAnalysis:
    """
    Args:
        natal_moon_sign: sign index of the natal Moon
        transit_signs:   current sign index of each transiting planet
    """
    check_sign(natal_moon_sign)
    for sign in transit_signs.values():
        check_sign(sign)
    transits = tuple(analyze_transit(planet, natal_moon_sign, transit_signs)
                     for planet in transit_signs)

    if transits:
        weighted = sum(t.effectiveness.score * 20 * TRANSIT_WEIGHTS[t.planet] for t in transits)
        weight = sum(TRANSIT_WEIGHTS[t.planet] for t in transits)
        overall = min(max(int(weighted / weight), 0), 100)
    else:
        overall = 50
    return VedhaAnalysis(natal_moon_sign=natal_moon_sign, transits=transits, overall_score=overall)
