"""
test_dasha.py
=============
Starting lord, balance and defaults for the Vimshottari, Ashtottari and
Yogini systems.
"""

import pytest

from dasha_engine.core.cycles import (
    ASHTOTTARI_NAKSHATRA_LORDS, DashaSystem, YOGINI, starting_position,
)
from dasha_engine.core.dasha import (
    antardasha_relationships, compute_ashtottari_dasha, compute_dasha,
    compute_vimshottari_dasha, compute_yogini_dasha, dasha_balance, describe_period,
)
from dasha_engine.core.longitude import NAKSHATRA_SPAN
from dasha_engine.core.periods import DashaLevel
from dasha_engine.core.tables import Planet, Relationship
from dasha_engine.errors import InvalidLongitudeError


def _centre(nakshatra):
    return (nakshatra + 0.5) * NAKSHATRA_SPAN


# ---------------------------------------------------------------------------
# Vimshottari
# ---------------------------------------------------------------------------

def test_vimshottari_from_ashwini_start():
    balance = dasha_balance(DashaSystem.VIMSHOTTARI, 0.0)
    assert balance.planet == Planet.KETU
    assert balance.elapsed_fraction == 0.0
    assert balance.balance_years == 7.0


def test_vimshottari_balance_halfway_through_bharani():
    balance = dasha_balance(DashaSystem.VIMSHOTTARI, _centre(1))
    assert balance.planet == Planet.VENUS
    assert balance.balance_years == pytest.approx(10.0)


@pytest.mark.parametrize("nakshatra,lord", [
    (0, Planet.KETU), (4, Planet.MARS), (9, Planet.KETU), (17, Planet.MERCURY), (26, Planet.MERCURY),
])
def test_vimshottari_lord_repeats_every_nine_nakshatras(nakshatra, lord, birth):
    tree = compute_vimshottari_dasha(_centre(nakshatra), birth, depth=DashaLevel.MAHADASHA)
    assert tree.top_level()[0].owner == lord
    assert len(tree.roots) == 9


def test_first_period_is_shortened_by_the_elapsed_fraction(birth):
    tree = compute_vimshottari_dasha(123.45, birth, depth=DashaLevel.MAHADASHA)
    first = tree.top_level()[0]
    assert first.owner == Planet.KETU
    assert float(first.duration_years) == pytest.approx(7 * (1 - (123.45 - 120.0) / NAKSHATRA_SPAN))


# ---------------------------------------------------------------------------
# Ashtottari and Yogini
# ---------------------------------------------------------------------------

def test_ashtottari_lords_start_at_ardra():
    assert ASHTOTTARI_NAKSHATRA_LORDS[5] == Planet.SUN
    assert ASHTOTTARI_NAKSHATRA_LORDS[6] == Planet.MOON
    assert ASHTOTTARI_NAKSHATRA_LORDS[13] == Planet.SUN
    assert set(ASHTOTTARI_NAKSHATRA_LORDS) == set(range(27))


def test_ashtottari_tree_uses_108_years(birth):
    tree = compute_ashtottari_dasha(_centre(5), birth, depth=DashaLevel.MAHADASHA)
    assert tree.top_level()[0].owner == Planet.SUN
    assert float(sum(node.duration_years for node in tree.top_level())) == pytest.approx(108 - 3)


@pytest.mark.parametrize("nakshatra,yogini", [(0, "Bhramari"), (4, "Sankata"), (5, "Mangala"), (7, "Dhanya")])
def test_yogini_starting_yogini(nakshatra, yogini):
    index, _ = starting_position(DashaSystem.YOGINI, _centre(nakshatra))
    assert YOGINI.entries[index].name == yogini


def test_yogini_runs_three_cycles_by_default(birth):
    tree = compute_yogini_dasha(_centre(0), birth, depth=DashaLevel.ANTARDASHA)
    assert tree.cycles == 3
    assert len(tree.roots) == 24
    assert tree.top_level()[0].name == "Bhramari"
    assert tree.top_level()[0].label == "Bhramari"


def test_system_default_cycles(birth):
    assert compute_dasha(DashaSystem.YOGINI, 10.0, birth, depth=1).cycles == 3
    assert compute_dasha(DashaSystem.VIMSHOTTARI, 10.0, birth, depth=1).cycles == 1
    assert compute_dasha("ashtottari", 10.0, birth, cycles=2, depth=1).cycles == 2


def test_invalid_moon_longitude_rejected(birth):
    with pytest.raises(InvalidLongitudeError):
        compute_vimshottari_dasha(360.0, birth)


# ---------------------------------------------------------------------------
# Sub-period relationships and serialisation
# ---------------------------------------------------------------------------

def test_antardasha_relationships_to_mahadasha_lord(birth):
    tree = compute_vimshottari_dasha(0.0, birth, depth=DashaLevel.ANTARDASHA)
    ketu = tree.top_level()[0]
    relations = dict((sub.owner, rel) for sub, rel in antardasha_relationships(tree, ketu))
    assert relations[Planet.KETU] == Relationship.SAME
    assert relations[Planet.VENUS] == Relationship.FRIEND
    assert relations[Planet.SUN] == Relationship.ENEMY
    assert len(relations) == 9


def test_describe_period(birth):
    tree = compute_yogini_dasha(_centre(5), birth, depth=DashaLevel.MAHADASHA)
    described = describe_period(tree.top_level()[1])
    assert described["lord"] == "Sun"
    assert described["name"] == "Pingala"
    assert described["level"] == "mahadasha"
    assert described["duration_years"] == 2.0
