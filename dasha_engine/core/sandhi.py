"""
sandhi.py
=========
Dasha Sandhi (junction) detection.

A Sandhi is the transition window around the boundary between two adjacent
periods of the same level. The window is centered on the boundary and spans a
configured share of the shorter neighbour (5% for Mahadashas, 10% for
Antardashas, 15% below that), clamped to [1 hour, 30 days].

Each window carries two grades:
  - intensity:  how close the as-of instant is to the boundary, stepped
                through the configured day thresholds (closer ⇒ higher)
  - difficulty: how demanding the transition itself is, scored from the
                level and both lords' nature, dignity and motion

The transition type records how the outgoing and incoming lords regard
each other under the natural relationships.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..config import Settings, settings as default_settings
from ..errors import InvalidInputError
from .chart import Chart
from .periods import DashaLevel, PeriodNode, PeriodTree
from .longitude import to_utc
from .tables import (
    NATURAL_MALEFICS, Dignity, Planet, Relationship, Severity, dignity, grade, relationship,
)

logger = logging.getLogger(__name__)

# Base difficulty of a change of lord at each level
LEVEL_DIFFICULTY = {
    DashaLevel.MAHADASHA:       5,
    DashaLevel.ANTARDASHA:      3,
    DashaLevel.PRATYANTARDASHA: 2,
    DashaLevel.SOOKSHMA:        1,
    DashaLevel.PRANA:           1,
}


class TransitionType(str, Enum):
    """How the outgoing lord regards the incoming one, then the reverse."""
    FRIEND_TO_FRIEND   = "Friend to Friend"
    FRIEND_TO_NEUTRAL  = "Friend to Neutral"
    FRIEND_TO_ENEMY    = "Friend to Enemy"
    NEUTRAL_TO_FRIEND  = "Neutral to Friend"
    NEUTRAL_TO_NEUTRAL = "Neutral to Neutral"
    NEUTRAL_TO_ENEMY   = "Neutral to Enemy"
    ENEMY_TO_FRIEND    = "Enemy to Friend"
    ENEMY_TO_NEUTRAL   = "Enemy to Neutral"
    ENEMY_TO_ENEMY     = "Enemy to Enemy"


class JunctionWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_period:   PeriodNode
    to_period:     PeriodNode
    boundary:      datetime
    window_start:  datetime
    window_end:    datetime
    distance_days: float
    intensity:     Severity
    difficulty:    Severity
    transition:    TransitionType
    is_active:     bool


# ---------------------------------------------------------------------------
# Policy helpers
# ---------------------------------------------------------------------------

def window_share(level: DashaLevel, cfg: Settings) -> float:
    if level == DashaLevel.MAHADASHA:
        return cfg.SANDHI_MAHADASHA_PCT
    if level == DashaLevel.ANTARDASHA:
        return cfg.SANDHI_ANTARDASHA_PCT
    return cfg.SANDHI_PRATYANTARDASHA_PCT


def window_width(level: DashaLevel, shorter: timedelta, cfg: Settings) -> timedelta:
    width = shorter * window_share(level, cfg)
    lowest = timedelta(hours=cfg.SANDHI_MIN_HOURS)
    highest = timedelta(days=cfg.SANDHI_MAX_DAYS)
    return min(max(width, lowest), highest)


def intensity_for_distance(distance_days: float, cfg: Settings) -> Severity:
    """Stepped grade of |as_of − boundary|: Critical, High, Moderate, Mild, then Minimal."""
    thresholds = cfg.SANDHI_INTENSITY_DAYS
    if len(thresholds) != 4 or any(b <= a for a, b in zip(thresholds, thresholds[1:])):
        raise InvalidInputError(
            f"SANDHI_INTENSITY_DAYS must be four ascending values, got {thresholds!r}"
        )
    ladder = (Severity.CRITICAL, Severity.HIGH, Severity.MODERATE, Severity.MILD)
    for limit, severity in zip(thresholds, ladder):
        if abs(distance_days) <= limit:
            return severity
    return Severity.MINIMAL


def transition_difficulty(level: DashaLevel, outgoing: Planet, incoming: Planet,
                          chart: Optional[Chart] = None) -> Severity:
    score = LEVEL_DIFFICULTY[level]
    if outgoing in NATURAL_MALEFICS or incoming in NATURAL_MALEFICS:
        score += 1
    if chart is not None:
        for lord in (outgoing, incoming):
            if not chart.has(lord):
                continue
            position = chart.position(lord)
            if dignity(lord, position.sign) == Dignity.DEBILITATED:
                score += 1
            if position.is_retrograde:
                score += 1
    return grade(score)


def _as_regard(rel: Relationship) -> str:
    # a lord handing over to itself counts as friendly
    return Relationship.FRIEND.value if rel == Relationship.SAME else rel.value


def transition_type(outgoing: Planet, incoming: Planet) -> TransitionType:
    forward = _as_regard(relationship(outgoing, incoming))
    backward = _as_regard(relationship(incoming, outgoing))
    return TransitionType(f"{forward} to {backward}")


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def detect_junctions(tree: PeriodTree, as_of: datetime,
                     lookahead_days: Optional[float] = None,
                     lookback_days: Optional[float] = None,
                     level: DashaLevel = DashaLevel.MAHADASHA,
                     chart: Optional[Chart] = None,
                     cfg: Optional[Settings] = None) -> List[JunctionWindow]:
    """
    Sandhi windows of `level` whose boundary lies in
    [as_of − lookback, as_of + lookahead], in chronological order.
    """
    cfg = cfg or default_settings
    moment = to_utc(as_of, "as_of")
    level = DashaLevel(level)
    if level > tree.depth:
        raise InvalidInputError(f"Tree was computed to {tree.depth.name}, not {level.name}")
    ahead = cfg.SANDHI_LOOKAHEAD_DAYS if lookahead_days is None else lookahead_days
    behind = cfg.SANDHI_LOOKBACK_DAYS if lookback_days is None else lookback_days
    if ahead < 0 or behind < 0:
        raise InvalidInputError("Sandhi look-ahead and look-back must not be negative")

    earliest = moment - timedelta(days=behind)
    latest = moment + timedelta(days=ahead)
    periods = tree.at_level(level)

    windows = []
    for outgoing, incoming in zip(periods, periods[1:]):
        boundary = incoming.start
        if not earliest <= boundary <= latest:
            continue
        shorter = min(outgoing.end - outgoing.start, incoming.end - incoming.start)
        half = window_width(level, shorter, cfg) / 2
        distance_days = (boundary - moment).total_seconds() / 86_400
        windows.append(JunctionWindow(
            from_period=outgoing,
            to_period=incoming,
            boundary=boundary,
            window_start=boundary - half,
            window_end=boundary + half,
            distance_days=distance_days,
            intensity=intensity_for_distance(distance_days, cfg),
            difficulty=transition_difficulty(level, outgoing.owner, incoming.owner, chart),
            transition=transition_type(outgoing.owner, incoming.owner),
            is_active=boundary - half <= moment <= boundary + half,
        ))
    logger.debug("%d %s sandhi window(s) near %s", len(windows), level.name, moment.isoformat())
    return windows


def active_sandhis(tree: PeriodTree, as_of: datetime, chart: Optional[Chart] = None,
                   cfg: Optional[Settings] = None) -> List[JunctionWindow]:
    """Windows containing `as_of`, across every computed level."""
    found = []
    for level in DashaLevel:
        if level > tree.depth:
            break
        found.extend(w for w in detect_junctions(tree, as_of, level=level, chart=chart, cfg=cfg)
                     if w.is_active)
    return found
