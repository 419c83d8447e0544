"""
test_report.py
==============
Report façade: structure, defaults, range errors and caching.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dasha_engine.cache import PeriodCache
from dasha_engine.config import Settings
from dasha_engine.core.cycles import DashaSystem
from dasha_engine.core.periods import LookupStatus
from dasha_engine.errors import InsufficientRangeError, InvalidInputError
from dasha_engine.tools.report import current_period, generate_dasha_report, require_found


AS_OF = datetime(2010, 6, 1, tzinfo=timezone.utc)


def test_vimshottari_report_structure(chart):
    report = generate_dasha_report(chart, as_of=AS_OF, depth=2)

    assert report["system"] == "vimshottari"
    assert report["applicability"]["applicable"] is True
    assert report["balance"]["lord"] == "Ketu"
    assert report["cycles"] == 1
    assert report["depth"] == "antardasha"
    assert len(report["periods"]) == 9
    assert len(report["periods"][0]["sub_periods"]) == 9
    assert "relationships" not in report

    current = report["current"]
    assert current["status"] == "found"
    assert [p["level"] for p in current["periods"]] == ["mahadasha", "antardasha"]
    assert 0.0 <= current["periods"][0]["progress"] <= 1.0
    assert report["sudarshana"]["age"] == 11


def test_ashtottari_report_lists_relationships(chart):
    report = generate_dasha_report(chart, DashaSystem.ASHTOTTARI, depth=2)
    assert report["applicability"]["reason"] == "Rahu in 5th (Trikona) from Lagna lord Mars"
    first = report["periods"][0]["name"]
    assert report["relationships"][first][first] == "Same"
    assert "current" not in report


def test_yogini_report_defaults_to_three_cycles(chart):
    report = generate_dasha_report(chart, "yogini", depth=1)
    assert report["cycles"] == 3
    assert len(report["periods"]) == 24
    assert report["balance"]["name"] == "Bhadrika"


def test_report_before_birth(chart, birth):
    report = generate_dasha_report(chart, as_of=birth - timedelta(days=1), depth=1)
    assert report["current"]["status"] == "before_start"
    assert report["current"]["periods"] == []
    assert report["sudarshana"] is None


@pytest.mark.parametrize("cycles", [0, 6, True])
def test_cycles_out_of_range_rejected(chart, cycles):
    with pytest.raises(InvalidInputError):
        generate_dasha_report(chart, cycles=cycles, depth=1)


def test_max_cycles_follows_settings(chart):
    cfg = Settings(MAX_CYCLES=2)
    with pytest.raises(InvalidInputError):
        generate_dasha_report(chart, cycles=3, depth=1, cfg=cfg)


def test_require_found(chart, birth):
    far = birth + timedelta(days=365.25 * 200)
    lookup = current_period(chart, far, depth=1)
    assert lookup.status == LookupStatus.BEYOND_RANGE
    with pytest.raises(InsufficientRangeError):
        require_found(lookup)
    assert require_found(current_period(chart, AS_OF, depth=1)).found


def test_reports_share_a_cache(chart):
    cache = PeriodCache()
    generate_dasha_report(chart, as_of=AS_OF, depth=2, cache=cache)
    generate_dasha_report(chart, as_of=AS_OF, depth=2, cache=cache)
    assert cache.hits >= 2


def _expanded(periods, level):
    found = []
    for entry in periods:
        if entry["level"] == level and "sub_periods" in entry:
            found.append(entry)
        found.extend(_expanded(entry.get("sub_periods", []), level))
    return found


def test_deep_levels_are_listed_only_along_the_running_path(chart):
    report = generate_dasha_report(chart, as_of=AS_OF, depth=5)
    running = report["current"]["periods"]

    assert len(_expanded(report["periods"], "antardasha")) == 81
    pratyantar = _expanded(report["periods"], "pratyantardasha")
    assert [p["name"] for p in pratyantar] == [running[2]["name"]]
    assert pratyantar[0]["start"] == running[2]["start"]
    assert len(_expanded(report["periods"], "sookshma")) == 1


def test_without_as_of_the_tree_stops_at_the_full_depth(chart):
    report = generate_dasha_report(chart, depth=5)
    assert _expanded(report["periods"], "pratyantardasha") == []
    assert len(_expanded(report["periods"], "antardasha")) == 81
