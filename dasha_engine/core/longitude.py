"""
longitude.py
============
Longitude and civil-time utilities.

Longitudes are sidereal ecliptic degrees in [0, 360). Raw inputs outside that
range are rejected; `normalize_longitude` is only for the result of
arithmetic on valid longitudes.

Dates use a fixed year of 365.25 days. Every offset is converted from an
exact rational number of years to whole microseconds once, so two
computations of the same offset always give the same instant.
"""

import math
from datetime import date, datetime, timedelta, timezone
from fractions import Fraction
from typing import Union

from ..errors import InvalidInputError, InvalidLongitudeError
from .tables import check_sign

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

NAKSHATRA_SPAN = 360.0 / 27.0     # 13°20′
PADA_SPAN = NAKSHATRA_SPAN / 4.0  # 3°20′

DAYS_PER_YEAR = 365.25
DAYS_PER_YEAR_EXACT = Fraction(1461, 4)
MICROSECONDS_PER_DAY = 86_400 * 1_000_000
SECONDS_PER_YEAR = DAYS_PER_YEAR * 86_400

Years = Union[Fraction, int, float]


# ---------------------------------------------------------------------------
# Longitude
# ---------------------------------------------------------------------------

def validate_longitude(longitude: float) -> float:
    """Return `longitude` unchanged, or raise if it is not a finite value in [0, 360)."""
    if isinstance(longitude, bool) or not isinstance(longitude, (int, float)):
        raise InvalidLongitudeError(f"Longitude must be a number, got {longitude!r}")
    if not math.isfinite(longitude) or not 0.0 <= longitude < 360.0:
        raise InvalidLongitudeError(f"Longitude must be in [0, 360), got {longitude!r}")
    return float(longitude)


def normalize_longitude(value: float) -> float:
    """Wrap the result of longitude arithmetic into [0, 360)."""
    if not math.isfinite(value):
        raise InvalidLongitudeError(f"Cannot normalize non-finite longitude {value!r}")
    wrapped = math.fmod(value, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # a tiny negative residue rounds up to exactly 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def sign_index(longitude: float) -> int:
    return int(validate_longitude(longitude) // 30.0)


def nakshatra_index(longitude: float) -> int:
    lon = validate_longitude(longitude)
    return min(int(lon / NAKSHATRA_SPAN), 26)


def nakshatra_fraction(longitude: float) -> float:
    """Fraction of the current nakshatra already traversed, in [0, 1)."""
    lon = validate_longitude(longitude)
    elapsed = (lon - nakshatra_index(lon) * NAKSHATRA_SPAN) / NAKSHATRA_SPAN
    return min(max(elapsed, 0.0), math.nextafter(1.0, 0.0))


def pada(longitude: float) -> int:
    return min(int(nakshatra_fraction(longitude) * 4) + 1, 4)


def house_from(sign: int, reference_sign: int) -> int:
    """Whole-sign house of `sign` counted from `reference_sign` (1..12)."""
    return ((check_sign(sign) - check_sign(reference_sign)) % 12) + 1


def sign_from(reference_sign: int, house: int) -> int:
    """Sign occupying `house` when counted from `reference_sign`."""
    if isinstance(house, bool) or not isinstance(house, int) or not 1 <= house <= 12:
        raise InvalidInputError(f"House must be an integer in [1, 12], got {house!r}")
    return (check_sign(reference_sign) + house - 1) % 12


# ---------------------------------------------------------------------------
# Civil time
# ---------------------------------------------------------------------------

def ensure_aware(moment: datetime, name: str = "timestamp") -> datetime:
    if not isinstance(moment, datetime):
        raise InvalidInputError(f"{name} must be a datetime, got {type(moment).__name__}")
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise InvalidInputError(f"{name} must carry a timezone offset")
    return moment


def to_utc(moment: datetime, name: str = "timestamp") -> datetime:
    return ensure_aware(moment, name).astimezone(timezone.utc)


def years_to_timedelta(years: Years) -> timedelta:
    exact = Fraction(years)
    return timedelta(microseconds=round(exact * DAYS_PER_YEAR_EXACT * MICROSECONDS_PER_DAY))


def add_years(moment: datetime, years: Years) -> datetime:
    return to_utc(moment) + years_to_timedelta(years)


def years_between(start: datetime, end: datetime) -> float:
    return (to_utc(end) - to_utc(start)).total_seconds() / SECONDS_PER_YEAR


def civil_date(moment: datetime, offset_hours: float = 0.0) -> date:
    """Calendar date of `moment` as seen at a fixed UTC offset."""
    return to_utc(moment).astimezone(timezone(timedelta(hours=offset_hours))).date()
