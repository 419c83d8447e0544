"""
manglik.py
==========
Manglik (Kuja) dosha assessment and the couple verdict.

Mars in houses 1, 2, 4, 7, 8 or 12 counted from the Lagna, the Moon or Venus
afflicts the chart. Raw severity grows with the number of references
afflicted; cancellation rules, applied in a fixed order, step it back down
and never raise it.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .chart import Chart
from .longitude import house_from
from .tables import Planet, aspect_strength, dignity, Dignity, lookup

logger = logging.getLogger(__name__)

MANGLIK_HOUSES = frozenset({1, 2, 4, 7, 8, 12})

# Lagna house of Mars → signs that exempt it
CLASSICAL_EXCEPTIONS: Dict[int, frozenset] = {
    1:  frozenset({4, 10}),   # Leo, Aquarius
    2:  frozenset({2, 5}),    # Gemini, Virgo
    4:  frozenset({0, 7}),    # Aries, Scorpio
    7:  frozenset({3, 9}),    # Cancer, Capricorn
    8:  frozenset({8, 11}),   # Sagittarius, Pisces
    12: frozenset({1, 6}),    # Taurus, Libra
}

MATURITY_AGE = 28


class ManglikLevel(IntEnum):
    NONE = 0
    PARTIAL = 1
    FULL = 2
    DOUBLE = 3

    @property
    def display_name(self) -> str:
        return {0: "No Manglik Dosha", 1: "Partial Manglik", 2: "Full Manglik",
                3: "Double Manglik"}[self.value]


class MarsPlacement(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference: str
    house:     int
    afflicted: bool


class AfflictionAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    placements:         Tuple[MarsPlacement, ...]
    raw_severity:       ManglikLevel
    cancellation_rules: Tuple[str, ...] = ()
    cancellations:      Tuple[str, ...] = ()
    effective_severity: ManglikLevel
    factors:            Tuple[str, ...] = ()

    @property
    def is_manglik(self) -> bool:
        return self.effective_severity > ManglikLevel.NONE

    @property
    def mars_house(self) -> int:
        return self.placements[0].house


class CoupleVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    bride:      ManglikLevel
    groom:      ManglikLevel
    statement:  str
    compatible: bool


# ─── Raw severity ────────────────────────────────────────────

SEVERITY_BY_COUNT: Dict[int, ManglikLevel] = {
    0: ManglikLevel.NONE,
    1: ManglikLevel.PARTIAL,
    2: ManglikLevel.FULL,
    3: ManglikLevel.DOUBLE,
}


def mars_placements(chart: Chart) -> Tuple[MarsPlacement, ...]:
    mars_sign = chart.sign_of(Planet.MARS)
    references = (
        ("Lagna", chart.ascendant_sign),
        ("Moon", chart.sign_of(Planet.MOON)),
        ("Venus", chart.sign_of(Planet.VENUS)),
    )
    placements = []
    for name, sign in references:
        house = house_from(mars_sign, sign)
        placements.append(MarsPlacement(reference=name, house=house, afflicted=house in MANGLIK_HOUSES))
    return tuple(placements)


# ─── Cancellation rules ──────────────────────────────────────

@dataclass(frozen=True)
class CancellationRule:
    rule_id: str
    description: str
    steps: int
    applies: Callable[[Chart, Optional[int]], bool]


def _mars_own_sign(chart: Chart, age: Optional[int]) -> bool:
    return dignity(Planet.MARS, chart.sign_of(Planet.MARS)) == Dignity.OWN_SIGN


def _mars_exalted(chart: Chart, age: Optional[int]) -> bool:
    return dignity(Planet.MARS, chart.sign_of(Planet.MARS)) == Dignity.EXALTED


def _jupiter_conjunct(chart: Chart, age: Optional[int]) -> bool:
    return chart.has(Planet.JUPITER) and chart.sign_of(Planet.JUPITER) == chart.sign_of(Planet.MARS)


def _jupiter_aspects(chart: Chart, age: Optional[int]) -> bool:
    if not chart.has(Planet.JUPITER):
        return False
    return aspect_strength(Planet.JUPITER, chart.sign_of(Planet.JUPITER), chart.sign_of(Planet.MARS)) > 0


def _classical_exception(chart: Chart, age: Optional[int]) -> bool:
    mars_sign = chart.sign_of(Planet.MARS)
    house = house_from(mars_sign, chart.ascendant_sign)
    return mars_sign in CLASSICAL_EXCEPTIONS.get(house, frozenset())


def _matured(chart: Chart, age: Optional[int]) -> bool:
    return age is not None and age >= MATURITY_AGE


# Priority order
CANCELLATION_RULES: Tuple[CancellationRule, ...] = (
    CancellationRule("mars_own_sign", "Mars in its own sign", 2, _mars_own_sign),
    CancellationRule("mars_exalted", "Mars exalted in Capricorn", 2, _mars_exalted),
    CancellationRule("jupiter_conjunct_mars", "Jupiter conjunct Mars", 1, _jupiter_conjunct),
    CancellationRule("jupiter_aspects_mars", "Jupiter aspects Mars", 1, _jupiter_aspects),
    CancellationRule("classical_exception", "Mars in an exempt sign for its house", 1,
                     _classical_exception),
    CancellationRule("age_over_28", f"Native is {MATURITY_AGE} or older", 1, _matured),
)


def apply_cancellations(raw: ManglikLevel, rules) -> ManglikLevel:
    """Step `raw` down once per rule step; never below NONE, never above `raw`."""
    level = int(raw)
    for rule in rules:
        if level == ManglikLevel.NONE:
            break
        level = max(ManglikLevel.NONE, level - rule.steps)
    return ManglikLevel(level)


def assess_affliction(chart: Chart, age: Optional[int] = None) -> AfflictionAssessment:
    placements = mars_placements(chart)
    afflicted = [p for p in placements if p.afflicted]
    raw = lookup(SEVERITY_BY_COUNT, len(afflicted), "SEVERITY_BY_COUNT")

    matched = ()
    if raw > ManglikLevel.NONE:
        matched = tuple(rule for rule in CANCELLATION_RULES if rule.applies(chart, age))
    effective = apply_cancellations(raw, matched)
    logger.debug("Manglik raw=%s effective=%s (%d cancellation(s))",
                 raw.name, effective.name, len(matched))
    return AfflictionAssessment(
        placements=placements,
        raw_severity=raw,
        cancellation_rules=tuple(rule.rule_id for rule in matched),
        cancellations=tuple(rule.description for rule in matched),
        effective_severity=effective,
        factors=tuple(f"Mars in House {p.house} from {p.reference}" for p in afflicted),
    )


# ─── Couple decision table ───────────────────────────────────

NO_CONCERNS = "Both non-Manglik - No concerns"
MUTUAL_CANCEL = "Both Manglik - Doshas cancel each other"
MINOR = "Minor Manglik imbalance - Manageable with remedies"
BRIDE_ONLY = "Bride is Manglik while Groom is not - Remedies recommended before marriage"
GROOM_ONLY = "Groom is Manglik while Bride is not - Remedies recommended before marriage"
SIGNIFICANT = "Significant Manglik imbalance - Careful consideration and remedies essential"

_N, _P, _F, _D = ManglikLevel.NONE, ManglikLevel.PARTIAL, ManglikLevel.FULL, ManglikLevel.DOUBLE

# (bride, groom) → (statement, compatible)
COUPLE_TABLE: Dict[Tuple[ManglikLevel, ManglikLevel], Tuple[str, bool]] = {
    (_N, _N): (NO_CONCERNS, True),
    (_N, _P): (MINOR, True),
    (_N, _F): (GROOM_ONLY, False),
    (_N, _D): (SIGNIFICANT, False),
    (_P, _N): (MINOR, True),
    (_P, _P): (MUTUAL_CANCEL, True),
    (_P, _F): (MUTUAL_CANCEL, True),
    (_P, _D): (MINOR, True),
    (_F, _N): (BRIDE_ONLY, False),
    (_F, _P): (MUTUAL_CANCEL, True),
    (_F, _F): (MUTUAL_CANCEL, True),
    (_F, _D): (MUTUAL_CANCEL, True),
    (_D, _N): (SIGNIFICANT, False),
    (_D, _P): (MINOR, True),
    (_D, _F): (MUTUAL_CANCEL, True),
    (_D, _D): (MUTUAL_CANCEL, True),
}


def couple_verdict(bride: AfflictionAssessment, groom: AfflictionAssessment) -> CoupleVerdict:
    key = (bride.effective_severity, groom.effective_severity)
    statement, compatible = lookup(COUPLE_TABLE, key, "COUPLE_TABLE")
    return CoupleVerdict(bride=key[0], groom=key[1], statement=statement, compatible=compatible)
