from datetime import datetime, timezone

import pytest

from dasha_engine.core.chart import Chart, PlanetPosition
from dasha_engine.core.longitude import house_from, sign_index
from dasha_engine.core.tables import Planet

BIRTH = datetime(2000, 1, 1, 0, 0, tzinfo=timezone.utc)

# Sidereal longitudes of the reference chart (Aries rising)
#   Sun Gemini, Moon Leo (Magha), Mars Libra, Mercury Gemini, Jupiter Cancer,
#   Venus Taurus, Saturn Capricorn, Rahu Aquarius, Ketu Leo
REFERENCE_LONGITUDES = {
    Planet.SUN:     60.5,
    Planet.MOON:    123.45,
    Planet.MARS:    200.0,
    Planet.MERCURY: 75.0,
    Planet.JUPITER: 95.0,
    Planet.VENUS:   40.0,
    Planet.SATURN:  290.0,
    Planet.RAHU:    310.0,
    Planet.KETU:    130.0,
}


def build_chart(ascendant=10.0, birth=BIRTH, drop=(), retrograde=(), chart_id=None, **longitudes):
    """Reference chart with per-planet overrides, e.g. build_chart(mars=10.0)."""
    positions = dict(REFERENCE_LONGITUDES)
    for name, lon in longitudes.items():
        positions[Planet(name.title())] = lon
    asc_sign = sign_index(ascendant)
    planets = {
        planet: PlanetPosition(
            longitude=lon,
            house=house_from(sign_index(lon), asc_sign),
            is_retrograde=planet in retrograde,
        )
        for planet, lon in positions.items()
        if planet not in drop
    }
    return Chart(birth=birth, ascendant=ascendant, planets=planets, chart_id=chart_id)


@pytest.fixture
def chart():
    return build_chart()


@pytest.fixture
def birth():
    return BIRTH
