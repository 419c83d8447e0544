"""
test_manglik.py
===============
Manglik severity, cancellation ordering and the couple decision table.

Reference chart: Aries Lagna, Moon in Leo, Venus in Taurus, Mars in Libra
(7th from Lagna only), Jupiter in Cancer.
"""

from itertools import combinations, product

import pytest

from dasha_engine.core.manglik import (
    BRIDE_ONLY, CANCELLATION_RULES, COUPLE_TABLE, MUTUAL_CANCEL, NO_CONCERNS, ManglikLevel,
    apply_cancellations, assess_affliction, couple_verdict,
)
from dasha_engine.core.tables import Planet
from dasha_engine.errors import MissingPlanetError

from .conftest import build_chart


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

def test_single_reference_gives_partial(chart):
    result = assess_affliction(chart)
    assert result.raw_severity == ManglikLevel.PARTIAL
    assert result.effective_severity == ManglikLevel.PARTIAL
    assert result.is_manglik
    assert result.mars_house == 7
    assert result.factors == ("Mars in House 7 from Lagna",)
    assert result.cancellation_rules == ()


def test_all_three_references_give_double():
    # Moon in Libra with Mars, Venus in Cancer
    result = assess_affliction(build_chart(moon=190.0, venus=100.0))
    assert [p.house for p in result.placements] == [7, 1, 4]
    assert result.raw_severity == ManglikLevel.DOUBLE
    assert result.effective_severity == ManglikLevel.DOUBLE


def test_no_affliction_skips_cancellations():
    # Mars in Gemini: 3rd from Lagna, 11th from Moon, 3rd from Venus in Aries
    result = assess_affliction(build_chart(mars=70.0, venus=10.0))
    assert result.raw_severity == ManglikLevel.NONE
    assert not result.is_manglik
    assert result.cancellation_rules == ()


# ---------------------------------------------------------------------------
# Cancellations
# ---------------------------------------------------------------------------

def test_mars_in_own_sign_cancels_two_steps():
    # Mars in Aries: 1st from Lagna, 12th from Venus
    result = assess_affliction(build_chart(mars=15.0))
    assert result.raw_severity == ManglikLevel.FULL
    assert result.cancellation_rules == ("mars_own_sign",)
    assert result.effective_severity == ManglikLevel.NONE


def test_age_cancels_one_step(chart):
    assert assess_affliction(chart, age=27).effective_severity == ManglikLevel.PARTIAL
    matured = assess_affliction(chart, age=30)
    assert matured.cancellation_rules == ("age_over_28",)
    assert matured.effective_severity == ManglikLevel.NONE
    assert matured.raw_severity == ManglikLevel.PARTIAL


def test_jupiter_conjunct_mars():
    result = assess_affliction(build_chart(jupiter=205.0))
    assert "jupiter_conjunct_mars" in result.cancellation_rules


def test_rules_are_reported_in_priority_order():
    result = assess_affliction(build_chart(mars=15.0, jupiter=20.0), age=40)
    order = [rule.rule_id for rule in CANCELLATION_RULES]
    assert list(result.cancellation_rules) == sorted(result.cancellation_rules, key=order.index)
    assert result.cancellation_rules[0] == "mars_own_sign"


def test_cancellation_never_raises_severity():
    for raw in ManglikLevel:
        for size in range(len(CANCELLATION_RULES) + 1):
            for subset in combinations(CANCELLATION_RULES, size):
                effective = apply_cancellations(raw, subset)
                assert ManglikLevel.NONE <= effective <= raw


def test_missing_mars_rejected():
    with pytest.raises(MissingPlanetError):
        assess_affliction(build_chart(drop=(Planet.MARS,)))


# ---------------------------------------------------------------------------
# Couple verdict
# ---------------------------------------------------------------------------

def test_couple_table_is_total():
    assert set(COUPLE_TABLE) == set(product(ManglikLevel, ManglikLevel))


def test_couple_verdicts(chart):
    clear = assess_affliction(chart, age=30)
    full = assess_affliction(build_chart(mars=205.0, venus=10.0))
    assert full.effective_severity == ManglikLevel.FULL

    assert couple_verdict(clear, clear).statement == NO_CONCERNS
    bride_only = couple_verdict(full, clear)
    assert bride_only.statement == BRIDE_ONLY
    assert not bride_only.compatible
    assert couple_verdict(full, full).statement == MUTUAL_CANCEL
