"""
periods.py
==========
Hierarchical period subdivision engine.

Given a cycle table, the index of the period running at birth and the fraction
of it already elapsed, emits the nested period tree
(Mahadasha → Antardasha → Pratyantardasha → Sookshma → Prana).

Algorithm:
  - The first top-level period keeps `length × (1 − start_fraction)` years;
    the rest use full lengths, cycling the table `cycles` times.
  - A period of planet P lasting D years is split by walking the same table
    from P, giving each planet Q `D × length(Q) / total` years.
  - Every boundary is an exact rational offset (in years) from birth,
    converted to an instant with a fixed 365.25-day year. A child's end and
    its successor's start are the same offset, hence the same instant.

The tree is a flat arena of nodes; parent and children are referenced by
index.
"""

import logging
import math
from bisect import bisect_right
from datetime import datetime
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_serializer

from ..errors import InvalidInputError
from .cycles import CycleTable
from .longitude import to_utc, years_to_timedelta
from .tables import Planet

logger = logging.getLogger(__name__)


class DashaLevel(IntEnum):
    MAHADASHA = 1
    ANTARDASHA = 2
    PRATYANTARDASHA = 3
    SOOKSHMA = 4
    PRANA = 5


class LookupStatus(str, Enum):
    FOUND = "found"
    BEFORE_START = "before_start"
    BEYOND_RANGE = "beyond_range"


class PeriodNode(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index:          int
    owner:          Planet
    label:          Optional[str] = None
    level:          DashaLevel
    start:          datetime
    end:            datetime
    duration_years: Fraction
    parent_index:   Optional[int] = None
    child_indices:  Tuple[int, ...] = ()

    @field_serializer("duration_years")
    def _serialize_duration(self, value: Fraction) -> float:
        return float(value)

    @property
    def name(self) -> str:
        return self.label or self.owner.value

    def contains(self, moment: datetime) -> bool:
        """Inclusive start, exclusive end."""
        return self.start <= moment < self.end


class PeriodTree(BaseModel):
    model_config = ConfigDict(frozen=True)

    system:  str
    birth:   datetime
    cycles:  int
    depth:   DashaLevel
    nodes:   Tuple[PeriodNode, ...]
    roots:   Tuple[int, ...]

    @property
    def start(self) -> datetime:
        return self.nodes[self.roots[0]].start

    @property
    def end(self) -> datetime:
        return self.nodes[self.roots[-1]].end

    def node(self, index: int) -> PeriodNode:
        return self.nodes[index]

    def top_level(self) -> List[PeriodNode]:
        return [self.nodes[i] for i in self.roots]

    def children(self, node: PeriodNode) -> List[PeriodNode]:
        return [self.nodes[i] for i in node.child_indices]

    def parent(self, node: PeriodNode) -> Optional[PeriodNode]:
        if node.parent_index is None:
            return None
        return self.nodes[node.parent_index]

    def at_level(self, level: DashaLevel) -> List[PeriodNode]:
        """All nodes of one level in chronological order (the arena is pre-order)."""
        return [node for node in self.nodes if node.level == level]

    def walk(self) -> Iterator[PeriodNode]:
        return iter(self.nodes)


class CurrentPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: LookupStatus
    as_of:  datetime
    path:   Tuple[PeriodNode, ...] = ()

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

    def at(self, level: DashaLevel) -> Optional[PeriodNode]:
        for node in self.path:
            if node.level == level:
                return node
        return None


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _check_request(cycle_table: CycleTable, start_index: int, start_fraction: float,
                   cycles: int, depth) -> DashaLevel:
    cycle_table.check()
    if isinstance(start_index, bool) or not isinstance(start_index, int) \
            or not 0 <= start_index < len(cycle_table):
        raise InvalidInputError(
            f"start_index must be in [0, {len(cycle_table)}), got {start_index!r}"
        )
    if isinstance(start_fraction, bool) or not isinstance(start_fraction, (int, float, Fraction)) \
            or not math.isfinite(start_fraction) or not 0 <= start_fraction < 1:
        raise InvalidInputError(f"start_fraction must be in [0, 1), got {start_fraction!r}")
    if isinstance(cycles, bool) or not isinstance(cycles, int) or cycles < 1:
        raise InvalidInputError(f"cycles must be a positive integer, got {cycles!r}")
    try:
        return DashaLevel(depth)
    except ValueError:
        raise InvalidInputError(f"depth must be between 1 and {len(DashaLevel)}, got {depth!r}") from None


class _ArenaBuilder:
    """Collects draft nodes in pre-order, then freezes them."""

    def __init__(self, cycle_table: CycleTable, origin: datetime, depth: DashaLevel):
        self.cycle_table = cycle_table
        self.origin = origin
        self.depth = depth
        self.drafts: List[dict] = []

    def instant(self, offset: Fraction) -> datetime:
        return self.origin + years_to_timedelta(offset)

    def add(self, entry, level: DashaLevel, offset: Fraction, duration: Fraction,
            parent_index: Optional[int]) -> int:
        index = len(self.drafts)
        self.drafts.append({
            "index": index,
            "owner": entry.planet,
            "label": entry.label,
            "level": level,
            "start": self.instant(offset),
            "end": self.instant(offset + duration),
            "duration_years": duration,
            "parent_index": parent_index,
            "child_indices": [],
        })
        if parent_index is not None:
            self.drafts[parent_index]["child_indices"].append(index)
        if level < self.depth:
            self.subdivide(index, entry, offset, duration, DashaLevel(level + 1))
        return index

    def subdivide(self, parent_index: int, parent_entry, offset: Fraction,
                  duration: Fraction, level: DashaLevel) -> None:
        table = self.cycle_table
        cursor = offset
        for entry in table.rotation(table.index_of(parent_entry.planet)):
            span = duration * table.share(entry)
            self.add(entry, level, cursor, span, parent_index)
            cursor += span

    def freeze(self) -> Tuple[PeriodNode, ...]:
        nodes = []
        for draft in self.drafts:
            draft["child_indices"] = tuple(draft["child_indices"])
            nodes.append(PeriodNode(**draft))
        return tuple(nodes)


def compute_periods(cycle_table: CycleTable, start_index: int, start_fraction: float,
                    birth: datetime, cycles: int = 1,
                    depth: DashaLevel = DashaLevel.PRATYANTARDASHA) -> PeriodTree:
    """
    Build the period tree for `cycles` passes through `cycle_table`.

    Args:
        cycle_table:    ordered (planet, years) table
        start_index:    index of the period running at birth
        start_fraction: fraction of that period already elapsed at birth, in [0, 1)
        birth:          timezone-aware birth instant
        cycles:         number of passes through the table
        depth:          deepest level to generate

    Returns:
        PeriodTree whose instants are expressed in UTC.
    """
    level = _check_request(cycle_table, start_index, start_fraction, cycles, depth)
    origin = to_utc(birth, "birth")
    builder = _ArenaBuilder(cycle_table, origin, level)
    consumed = Fraction(start_fraction)

    roots = []
    offset = Fraction(0)
    for cycle in range(cycles):
        for position, entry in enumerate(cycle_table.rotation(start_index)):
            duration = Fraction(entry.years)
            if cycle == 0 and position == 0:
                duration *= 1 - consumed
            roots.append(builder.add(entry, DashaLevel.MAHADASHA, offset, duration, None))
            offset += duration

    nodes = builder.freeze()
    logger.debug("Computed %d %s periods over %d cycle(s) to depth %s",
                 len(nodes), cycle_table.name, cycles, level.name)
    return PeriodTree(
        system=cycle_table.name,
        birth=origin,
        cycles=cycles,
        depth=level,
        nodes=nodes,
        roots=tuple(roots),
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def find_current_period(tree: PeriodTree, as_of: datetime) -> CurrentPeriod:
    """
    Locate the chain of periods running at `as_of`, deepest level last.

    A boundary instant belongs to the period that starts there. Instants
    before the first period or at/after the end of the last one are reported
    through the status instead of raising.
    """
    moment = to_utc(as_of, "as_of")
    if moment < tree.start:
        return CurrentPeriod(status=LookupStatus.BEFORE_START, as_of=moment)
    if moment >= tree.end:
        return CurrentPeriod(status=LookupStatus.BEYOND_RANGE, as_of=moment)

    path = []
    candidates = tree.top_level()
    while candidates:
        starts = [node.start for node in candidates]
        node = candidates[bisect_right(starts, moment) - 1]
        path.append(node)
        candidates = tree.children(node)
    return CurrentPeriod(status=LookupStatus.FOUND, as_of=moment, path=tuple(path))


def period_progress(node: PeriodNode, as_of: datetime) -> float:
    """Elapsed share of `node` at `as_of`, clamped to [0, 1]."""
    moment = to_utc(as_of, "as_of")
    if moment <= node.start:
        return 0.0
    if moment >= node.end:
        return 1.0
    return (moment - node.start) / (node.end - node.start)
