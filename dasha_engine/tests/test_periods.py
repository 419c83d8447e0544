"""
test_periods.py
===============
Period subdivision engine: continuity, exact child sums, cycle coverage,
boundary tie-break and input validation.
"""

import math
from datetime import timedelta, timezone
from fractions import Fraction

import pytest

from dasha_engine.core.cycles import ASHTOTTARI, VIMSHOTTARI, YOGINI, CycleEntry, CycleTable
from dasha_engine.core.longitude import years_to_timedelta
from dasha_engine.core.periods import (
    DashaLevel, LookupStatus, compute_periods, find_current_period, period_progress,
)
from dasha_engine.core.tables import Planet
from dasha_engine.errors import InvalidCycleTableError, InvalidInputError


def _origin(table, start_index, start_fraction, birth):
    consumed = table.entries[start_index].years * Fraction(start_fraction)
    return birth - years_to_timedelta(consumed)


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("table,start_index,fraction,cycles", [
    (VIMSHOTTARI, 3, 0.25, 1),
    (VIMSHOTTARI, 8, 0.0, 2),
    (ASHTOTTARI, 5, 0.5, 1),
    (YOGINI, 2, 0.75, 3),
])
def test_periods_are_contiguous_and_cover_the_cycles(birth, table, start_index, fraction, cycles):
    tree = compute_periods(table, start_index, fraction, birth, cycles, DashaLevel.PRATYANTARDASHA)

    for level in (DashaLevel.MAHADASHA, DashaLevel.ANTARDASHA, DashaLevel.PRATYANTARDASHA):
        nodes = tree.at_level(level)
        for earlier, later in zip(nodes, nodes[1:]):
            assert earlier.end == later.start
        assert nodes[0].start == tree.start == birth
        assert nodes[-1].end == tree.end

    expected_end = _origin(table, start_index, fraction, birth) \
        + years_to_timedelta(cycles * table.total_years)
    assert abs(tree.end - expected_end) <= timedelta(microseconds=1)
    assert len(tree.roots) == cycles * len(table)


def test_children_sum_exactly_to_parent(birth):
    tree = compute_periods(VIMSHOTTARI, 4, 0.4, birth, 1, DashaLevel.SOOKSHMA)
    for node in tree.walk():
        children = tree.children(node)
        if not children:
            assert node.level == DashaLevel.SOOKSHMA
            continue
        assert sum(child.duration_years for child in children) == node.duration_years
        assert children[0].start == node.start
        assert children[-1].end == node.end
        assert children[0].owner == node.owner
        assert all(tree.parent(child) == node for child in children)


@pytest.mark.parametrize("depth,count", [(1, 9), (2, 90), (3, 819)])
def test_node_count_per_depth(birth, depth, count):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, depth)
    assert len(tree.nodes) == count
    assert tree.depth == DashaLevel(depth)


def test_sub_periods_follow_cycle_order_from_their_lord(birth):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, DashaLevel.ANTARDASHA)
    venus = tree.top_level()[1]
    owners = [child.owner for child in tree.children(venus)]
    assert owners == [Planet.VENUS, Planet.SUN, Planet.MOON, Planet.MARS, Planet.RAHU,
                      Planet.JUPITER, Planet.SATURN, Planet.MERCURY, Planet.KETU]
    assert tree.children(venus)[0].duration_years == Fraction(20 * 20, 120)


def test_identical_inputs_give_identical_trees(birth):
    first = compute_periods(YOGINI, 1, 0.3, birth, 3, DashaLevel.PRATYANTARDASHA)
    second = compute_periods(YOGINI, 1, 0.3, birth, 3, DashaLevel.PRATYANTARDASHA)
    assert first == second


def test_108_year_table_with_quarter_consumed(birth):
    tree = compute_periods(ASHTOTTARI, 0, 0.25, birth, 1, DashaLevel.MAHADASHA)
    durations = [node.duration_years for node in tree.top_level()]

    assert durations[0] == Fraction(9, 2)
    assert durations[1:] == [Fraction(entry.years) for entry in ASHTOTTARI.entries[1:]]
    assert sum(durations) == Fraction(213, 2)
    assert tree.end == birth + years_to_timedelta(Fraction(213, 2))


def test_instants_are_utc(birth):
    ist = timezone(timedelta(hours=5, minutes=30))
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth.astimezone(ist), 1, DashaLevel.MAHADASHA)
    assert tree.start == birth
    assert all(node.start.tzinfo == timezone.utc for node in tree.walk())


# ---------------------------------------------------------------------------
# Current period lookup
# ---------------------------------------------------------------------------

def test_boundary_belongs_to_the_starting_period(birth):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, DashaLevel.PRATYANTARDASHA)
    outgoing, incoming = tree.top_level()[0], tree.top_level()[1]

    on_boundary = find_current_period(tree, incoming.start)
    assert on_boundary.at(DashaLevel.MAHADASHA) == incoming
    assert on_boundary.path[-1].owner == Planet.VENUS

    just_before = find_current_period(tree, incoming.start - timedelta(microseconds=1))
    assert just_before.at(DashaLevel.MAHADASHA) == outgoing
    assert just_before.path[-1].end == incoming.start


def test_lookup_path_descends_one_level_at_a_time(birth):
    tree = compute_periods(VIMSHOTTARI, 2, 0.6, birth, 1, DashaLevel.SOOKSHMA)
    result = find_current_period(tree, birth + timedelta(days=4000))

    assert result.found
    assert [node.level for node in result.path] == list(DashaLevel)[:4]
    for parent, child in zip(result.path, result.path[1:]):
        assert child.parent_index == parent.index
        assert child.contains(result.as_of)


def test_lookup_outside_the_tree_reports_status(birth):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, DashaLevel.MAHADASHA)

    before = find_current_period(tree, birth - timedelta(days=1))
    assert before.status == LookupStatus.BEFORE_START
    assert before.path == ()

    beyond = find_current_period(tree, tree.end)
    assert beyond.status == LookupStatus.BEYOND_RANGE
    assert beyond.at(DashaLevel.MAHADASHA) is None


def test_lookup_rejects_naive_as_of(birth):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, DashaLevel.MAHADASHA)
    with pytest.raises(InvalidInputError):
        find_current_period(tree, birth.replace(tzinfo=None))


def test_progress_is_clamped(birth):
    tree = compute_periods(VIMSHOTTARI, 0, 0.0, birth, 1, DashaLevel.MAHADASHA)
    node = tree.top_level()[1]
    middle = node.start + (node.end - node.start) / 2

    assert period_progress(node, node.start - timedelta(days=1)) == 0.0
    assert period_progress(node, node.end + timedelta(days=1)) == 1.0
    assert period_progress(node, middle) == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Invalid requests
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("start_index,fraction,cycles,depth", [
    (-1, 0.0, 1, 1),
    (9, 0.0, 1, 1),
    (0, 1.0, 1, 1),
    (0, -0.1, 1, 1),
    (0, math.nan, 1, 1),
    (0, 0.0, 0, 1),
    (0, 0.0, 1, 0),
    (0, 0.0, 1, 6),
])
def test_invalid_requests_rejected(birth, start_index, fraction, cycles, depth):
    with pytest.raises(InvalidInputError):
        compute_periods(VIMSHOTTARI, start_index, fraction, birth, cycles, depth)


def test_naive_birth_rejected(birth):
    with pytest.raises(InvalidInputError):
        compute_periods(VIMSHOTTARI, 0, 0.0, birth.replace(tzinfo=None))


@pytest.mark.parametrize("entries,total", [
    ((), 0),
    (((Planet.SUN, 5), (Planet.SUN, 5)), 10),
    (((Planet.SUN, 5), (Planet.MOON, 0)), 5),
    (((Planet.SUN, 5), (Planet.MOON, 5)), 11),
])
def test_unusable_cycle_tables_rejected(birth, entries, total):
    table = CycleTable(
        name="Broken",
        total_years=total,
        entries=tuple(CycleEntry(planet=planet, years=years) for planet, years in entries),
    )
    with pytest.raises(InvalidCycleTableError):
        compute_periods(table, 0, 0.0, birth)
