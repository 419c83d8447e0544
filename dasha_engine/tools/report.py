"""
report.py
=========
Dasha report generator.

Orchestrates applicability, period, junction and Sudarshana modules to
produce one structured report for a chart.

Usage:
    from dasha_engine.tools.report import generate_dasha_report

    report = generate_dasha_report(
        chart,                      # dasha_engine.Chart
        system="vimshottari",       # or ashtottari, yogini
        as_of=datetime.now(timezone.utc),
        cycles=1,
        depth=3,                    # 1 = Mahadasha … 5 = Prana
        cache=PeriodCache(),        # optional, owned by the caller
    )
"""

import logging
from datetime import datetime
from typing import Optional

from ..cache import CacheKeys, PeriodCache
from ..config import Settings, settings as default_settings
from ..errors import InsufficientRangeError, InvalidInputError
from ..core.applicability import is_applicable
from ..core.chart import Chart
from ..core.cycles import DashaSystem
from ..core.dasha import (
    DEFAULT_CYCLES, antardasha_relationships, compute_dasha, dasha_balance, describe_period,
)
from ..core.periods import (
    CurrentPeriod, DashaLevel, LookupStatus, PeriodTree, find_current_period, period_progress,
)
from ..core.sandhi import JunctionWindow, detect_junctions
from ..core.sudarshana import SudarshanaYear, sudarshana_for_date
from ..core.tables import sign_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _resolve_cycles(system: DashaSystem, cycles: Optional[int], cfg: Settings) -> int:
    if cycles is None:
        cycles = DEFAULT_CYCLES[system]
    if isinstance(cycles, bool) or not isinstance(cycles, int) or not 1 <= cycles <= cfg.MAX_CYCLES:
        raise InvalidInputError(f"cycles must be between 1 and {cfg.MAX_CYCLES}, got {cycles!r}")
    return cycles


def period_tree(chart: Chart, system: DashaSystem = DashaSystem.VIMSHOTTARI,
                cycles: Optional[int] = None, depth: Optional[int] = None,
                cache: Optional[PeriodCache] = None,
                cfg: Optional[Settings] = None) -> PeriodTree:
    """Period tree for `chart`, served from `cache` when one is supplied."""
    cfg = cfg or default_settings
    system = DashaSystem(system)
    cycles = _resolve_cycles(system, cycles, cfg)
    depth = cfg.DEFAULT_DEPTH if depth is None else depth

    def build() -> PeriodTree:
        return compute_dasha(system, chart.moon_longitude, chart.birth, cycles, depth)

    if cache is None:
        return build()
    key = CacheKeys.periods(chart.identity, system.value, cycles, int(depth))
    return cache.get_or_compute(key, build)


def current_period(chart: Chart, as_of: datetime,
                   system: DashaSystem = DashaSystem.VIMSHOTTARI,
                   cycles: Optional[int] = None, depth: Optional[int] = None,
                   cache: Optional[PeriodCache] = None,
                   cfg: Optional[Settings] = None) -> CurrentPeriod:
    tree = period_tree(chart, system, cycles, depth, cache, cfg)
    if cache is None:
        return find_current_period(tree, as_of)
    key = CacheKeys.current(chart.identity, DashaSystem(system).value, tree.cycles,
                            int(tree.depth), as_of)
    return cache.get_or_compute(key, lambda: find_current_period(tree, as_of))


def require_found(lookup: CurrentPeriod) -> CurrentPeriod:
    """Turn a not-found lookup into InsufficientRangeError for hosts that need a hard failure."""
    if lookup.status == LookupStatus.BEFORE_START:
        raise InsufficientRangeError(f"{lookup.as_of.isoformat()} precedes the birth timestamp")
    if lookup.status == LookupStatus.BEYOND_RANGE:
        raise InsufficientRangeError(
            f"{lookup.as_of.isoformat()} lies beyond the computed cycles; request more cycles"
        )
    return lookup


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def _tree_to_dict(tree: PeriodTree, full_depth: int, running=frozenset(), node=None) -> list:
    """Nested periods; children of a node at or below `full_depth` only when it is running."""
    nodes = tree.top_level() if node is None else tree.children(node)
    out = []
    for child in nodes:
        entry = describe_period(child)
        if child.level < full_depth or child.index in running:
            sub = _tree_to_dict(tree, full_depth, running, child)
            if sub:
                entry["sub_periods"] = sub
        out.append(entry)
    return out


def current_to_dict(lookup: CurrentPeriod) -> dict:
    return {
        "status": lookup.status.value,
        "as_of": lookup.as_of.isoformat(),
        "periods": [
            dict(describe_period(node), progress=round(period_progress(node, lookup.as_of), 4))
            for node in lookup.path
        ],
    }


def junction_to_dict(window: JunctionWindow) -> dict:
    return {
        "from": window.from_period.name,
        "to": window.to_period.name,
        "level": window.to_period.level.name.lower(),
        "boundary": window.boundary.isoformat(),
        "window_start": window.window_start.isoformat(),
        "window_end": window.window_end.isoformat(),
        "distance_days": round(window.distance_days, 2),
        "intensity": window.intensity.name.title(),
        "difficulty": window.difficulty.name.title(),
        "transition": window.transition.value,
        "is_active": window.is_active,
    }


def sudarshana_to_dict(year: SudarshanaYear) -> dict:
    return {
        "age": year.age,
        "cycle": year.cycle,
        "house_in_cycle": year.house_in_cycle,
        "year_start": year.year_start.isoformat(),
        "year_end": year.year_end.isoformat(),
        "trend": year.trend.value,
        "positions": [
            {
                "reference": pos.reference.value,
                "active_sign": sign_name(pos.active_sign),
                "occupants": [p.value for p in pos.occupants],
                "aspects": [{"planet": a.planet.value, "strength": a.strength} for a in pos.aspects],
            }
            for pos in year.positions
        ],
    }


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------

def generate_dasha_report(chart: Chart, system: DashaSystem = DashaSystem.VIMSHOTTARI,
                          as_of: Optional[datetime] = None,
                          cycles: Optional[int] = None, depth: Optional[int] = None,
                          cache: Optional[PeriodCache] = None,
                          cfg: Optional[Settings] = None) -> dict:
    """
    Generate a complete dasha report.

    Returns:
        dict with applicability, balance, the period tree and, when `as_of`
        is given, the running periods, nearby Sandhis and the Sudarshana year.
    """
    cfg = cfg or default_settings
    system = DashaSystem(system)
    tree = period_tree(chart, system, cycles, depth, cache, cfg)
    applicability = is_applicable(system, chart)
    balance = dasha_balance(system, chart.moon_longitude)
    lookup = None
    if as_of is not None:
        lookup = current_period(chart, as_of, system, tree.cycles, tree.depth, cache, cfg)
    running = frozenset(node.index for node in lookup.path) if lookup is not None else frozenset()

    report = {
        "system": system.value,
        "applicability": {"applicable": applicability.applicable, "reason": applicability.reason},
        "balance": {
            "lord": balance.planet.value,
            "name": balance.label or balance.planet.value,
            "balance_years": round(balance.balance_years, 4),
        },
        "cycles": tree.cycles,
        "depth": tree.depth.name.lower(),
        "periods": _tree_to_dict(tree, cfg.FULL_TREE_DEPTH, running),
    }

    if system == DashaSystem.ASHTOTTARI and tree.depth >= DashaLevel.ANTARDASHA:
        report["relationships"] = {
            maha.name: {sub.name: rel.value for sub, rel in antardasha_relationships(tree, maha)}
            for maha in tree.top_level()
        }

    if lookup is not None:
        report["current"] = current_to_dict(lookup)
        report["sandhi"] = [junction_to_dict(w)
                            for w in detect_junctions(tree, as_of, chart=chart, cfg=cfg)]
        report["sudarshana"] = (sudarshana_to_dict(sudarshana_for_date(chart, as_of))
                                if lookup.status != LookupStatus.BEFORE_START else None)

    logger.info("Generated %s report with %d nodes", system.value, len(tree.nodes))
    return report
