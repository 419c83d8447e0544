"""
applicability.py
================
Eligibility rules deciding whether a dasha system applies to a chart.

Ashtottari is used when Rahu occupies a Kendra (1, 4, 7, 10) or Trikona
(1, 5, 9) counted from the sign of the Lagna lord. Vimshottari and Yogini
apply to every chart.
"""

from typing import Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict

from .chart import Chart
from .cycles import DashaSystem
from .longitude import house_from
from .tables import KENDRA_HOUSES, TRIKONA_HOUSES, Planet, lookup, sign_lord


class Applicability(BaseModel):
    model_config = ConfigDict(frozen=True)

    system:     DashaSystem
    applicable: bool
    reason:     str
    rahu_house: Optional[int] = None


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _house_kind(house: int) -> str:
    if house in KENDRA_HOUSES and house in TRIKONA_HOUSES:
        return "Kendra/Trikona"
    if house in KENDRA_HOUSES:
        return "Kendra"
    return "Trikona"


def is_ashtottari_applicable(chart: Chart) -> Applicability:
    lagna_lord = sign_lord(chart.ascendant_sign)
    if not chart.has(Planet.RAHU) or not chart.has(lagna_lord):
        return Applicability(
            system=DashaSystem.ASHTOTTARI,
            applicable=False,
            reason="Required planetary positions not found",
        )

    rahu_house = house_from(chart.sign_of(Planet.RAHU), chart.sign_of(lagna_lord))
    if rahu_house in KENDRA_HOUSES or rahu_house in TRIKONA_HOUSES:
        reason = (f"Rahu in {_ordinal(rahu_house)} ({_house_kind(rahu_house)}) "
                  f"from Lagna lord {lagna_lord.value}")
        applicable = True
    else:
        reason = (f"Rahu in {_ordinal(rahu_house)} from Lagna lord {lagna_lord.value}, "
                  f"not in Kendra/Trikona")
        applicable = False
    return Applicability(
        system=DashaSystem.ASHTOTTARI,
        applicable=applicable,
        reason=reason,
        rahu_house=rahu_house,
    )


def _always(system: DashaSystem) -> Callable[[Chart], Applicability]:
    def rule(chart: Chart) -> Applicability:
        return Applicability(system=system, applicable=True, reason="Applicable to every chart")
    return rule


APPLICABILITY_RULES: Dict[DashaSystem, Callable[[Chart], Applicability]] = {
    DashaSystem.VIMSHOTTARI: _always(DashaSystem.VIMSHOTTARI),
    DashaSystem.ASHTOTTARI:  is_ashtottari_applicable,
    DashaSystem.YOGINI:      _always(DashaSystem.YOGINI),
}


def is_applicable(system: DashaSystem, chart: Chart) -> Applicability:
    rule = lookup(APPLICABILITY_RULES, DashaSystem(system), "APPLICABILITY_RULES")
    return rule(chart)
