"""
chart.py
========
Birth chart input model.

The ephemeris layer is an external collaborator: a chart arrives with a
timezone-aware birth timestamp, the ascendant longitude and, for each tracked
body, a sidereal longitude and a house number.
"""

import hashlib
import json
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import MissingPlanetError
from .longitude import nakshatra_fraction, nakshatra_index, pada, sign_index
from .tables import Planet


class PlanetPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    longitude:     float = Field(..., ge=0.0, lt=360.0)
    house:         int   = Field(..., ge=1, le=12)
    is_retrograde: bool  = False

    @property
    def sign(self) -> int:
        return sign_index(self.longitude)


class Chart(BaseModel):
    model_config = ConfigDict(frozen=True)

    birth:     datetime
    ascendant: float = Field(..., ge=0.0, lt=360.0)
    planets:   Dict[Planet, PlanetPosition]
    chart_id:  Optional[str] = None

    @field_validator("birth")
    @classmethod
    def _birth_must_be_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("birth timestamp must carry a timezone offset")
        return value

    # ── Positions ────────────────────────────────────────────────

    def has(self, planet: Planet) -> bool:
        return planet in self.planets

    def position(self, planet: Planet) -> PlanetPosition:
        try:
            return self.planets[planet]
        except KeyError:
            raise MissingPlanetError(f"Chart has no position for {planet.value}") from None

    def sign_of(self, planet: Planet) -> int:
        return self.position(planet).sign

    @property
    def ascendant_sign(self) -> int:
        return sign_index(self.ascendant)

    # ── Moon-derived attributes ──────────────────────────────────

    @property
    def moon_longitude(self) -> float:
        return self.position(Planet.MOON).longitude

    @property
    def moon_sign(self) -> int:
        return self.sign_of(Planet.MOON)

    @property
    def moon_nakshatra(self) -> int:
        return nakshatra_index(self.moon_longitude)

    @property
    def moon_nakshatra_fraction(self) -> float:
        return nakshatra_fraction(self.moon_longitude)

    @property
    def moon_pada(self) -> int:
        return pada(self.moon_longitude)

    @property
    def identity(self) -> str:
        """Stable key for caching: the caller's id, else a digest of the chart."""
        if self.chart_id:
            return self.chart_id
        payload = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode()).hexdigest()
