"""
Dasha Engine — FastAPI Backend
==============================
Endpoints:
  POST /api/dasha           — Period tree + running periods for one system
  POST /api/dasha/current   — Running Mahadasha → deepest sub-period
  POST /api/dasha/sandhi    — Junction windows near a date
  POST /api/sudarshana      — Sudarshana Chakra year
  POST /api/matchmaker      — Guna matching + Manglik analysis
  POST /api/vedha           — Transit (Gochara) Vedha analysis
  GET  /api/health          — Health check
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from dasha_engine import __version__
from dasha_engine.cache import PeriodCache
from dasha_engine.config import settings
from dasha_engine.core.chart import Chart, PlanetPosition
from dasha_engine.core.cycles import DashaSystem
from dasha_engine.core.periods import DashaLevel
from dasha_engine.core.sandhi import detect_junctions
from dasha_engine.core.sudarshana import sudarshana_for_age, sudarshana_for_date
from dasha_engine.core.tables import Planet, sign_name
from dasha_engine.core.vedha import analyze_vedha
from dasha_engine.errors import InsufficientRangeError, InvalidInputError
from dasha_engine.tools.report import (
    current_period, current_to_dict, generate_dasha_report, junction_to_dict,
    period_tree, require_found, sudarshana_to_dict,
)
from matchmaker import compute_compatibility

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dasha Engine API",
    version=__version__,
    description="Vimshottari, Ashtottari and Yogini dashas, Sandhi, Sudarshana, Matchmaking",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Owned by the app; handed to the report functions on every call
cache = PeriodCache()


# ── Request Models ─────────────────────────────────────────────

class PlanetInput(BaseModel):
    longitude:     float = Field(..., ge=0, lt=360)
    house:         int   = Field(..., ge=1, le=12)
    is_retrograde: bool  = False


class ChartInput(BaseModel):
    birth:     datetime
    ascendant: float = Field(..., ge=0, lt=360)
    planets:   Dict[Planet, PlanetInput]
    chart_id:  Optional[str] = None

    @field_validator("birth")
    @classmethod
    def _birth_must_be_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("birth must carry a timezone offset")
        return value

    def to_chart(self) -> Chart:
        return Chart(
            birth=self.birth,
            ascendant=self.ascendant,
            planets={p: PlanetPosition(**pos.model_dump()) for p, pos in self.planets.items()},
            chart_id=self.chart_id,
        )


class DashaRequest(BaseModel):
    chart:  ChartInput
    system: DashaSystem       = DashaSystem.VIMSHOTTARI
    cycles: Optional[int]     = Field(None, ge=1, le=settings.MAX_CYCLES)
    depth:  int               = Field(settings.DEFAULT_DEPTH, ge=1, le=5)
    as_of:  Optional[datetime] = Field(None, description="Defaults to now (UTC)")


class SandhiRequest(BaseModel):
    chart:          ChartInput
    system:         DashaSystem        = DashaSystem.VIMSHOTTARI
    cycles:         Optional[int]      = Field(None, ge=1, le=settings.MAX_CYCLES)
    level:          int                = Field(1, ge=1, le=5)
    as_of:          Optional[datetime] = None
    lookahead_days: Optional[float]    = Field(None, ge=0)
    lookback_days:  Optional[float]    = Field(None, ge=0)


class SudarshanaRequest(BaseModel):
    chart: ChartInput
    age:   Optional[int]      = Field(None, ge=1, le=150)
    as_of: Optional[datetime] = None


class MatchmakerRequest(BaseModel):
    bride:     ChartInput
    groom:     ChartInput
    bride_age: Optional[int] = Field(None, ge=0, le=150)
    groom_age: Optional[int] = Field(None, ge=0, le=150)


class VedhaRequest(BaseModel):
    natal_moon_sign: int             = Field(..., ge=0, le=11)
    transit_signs:   Dict[Planet, int]


# ── Utilities ──────────────────────────────────────────────────

def _as_of(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        raise InvalidInputError("as_of must carry a timezone offset")
    return value


# ── Endpoints ──────────────────────────────────────────────────

@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": __version__,
        "endpoints": [
            "POST /api/dasha",
            "POST /api/dasha/current",
            "POST /api/dasha/sandhi",
            "POST /api/sudarshana",
            "POST /api/matchmaker",
            "POST /api/vedha",
        ],
    }


@app.post("/api/dasha")
def dasha_endpoint(data: DashaRequest):
    try:
        report = generate_dasha_report(
            data.chart.to_chart(),
            system=data.system,
            as_of=_as_of(data.as_of),
            cycles=data.cycles,
            depth=data.depth,
            cache=cache,
        )
        return {"success": True, "dasha": report}
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/dasha/current")
def current_dasha_endpoint(data: DashaRequest):
    """
    Running periods at `as_of`, Mahadasha first.

    Returns 404 when `as_of` is before birth or past the computed cycles.
    """
    try:
        lookup = current_period(data.chart.to_chart(), _as_of(data.as_of), data.system,
                                data.cycles, data.depth, cache)
        return {"success": True, "current": current_to_dict(require_found(lookup))}
    except InsufficientRangeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/dasha/sandhi")
def sandhi_endpoint(data: SandhiRequest):
    try:
        chart = data.chart.to_chart()
        level = DashaLevel(data.level)
        depth = max(level, DashaLevel(settings.DEFAULT_DEPTH))
        tree = period_tree(chart, data.system, data.cycles, depth, cache)
        windows = detect_junctions(tree, _as_of(data.as_of), data.lookahead_days,
                                   data.lookback_days, level, chart)
        return {"success": True, "sandhi": [junction_to_dict(w) for w in windows]}
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/sudarshana")
def sudarshana_endpoint(data: SudarshanaRequest):
    try:
        chart = data.chart.to_chart()
        if data.age is not None:
            year = sudarshana_for_age(chart, data.age)
        else:
            year = sudarshana_for_date(chart, _as_of(data.as_of))
        return {"success": True, "sudarshana": sudarshana_to_dict(year)}
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/matchmaker")
def matchmaker_endpoint(data: MatchmakerRequest):
    try:
        compatibility = compute_compatibility(
            data.bride.to_chart(), data.groom.to_chart(),
            bride_age=data.bride_age, groom_age=data.groom_age,
        )
        return {"success": True, "compatibility": compatibility}
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/vedha")
def vedha_endpoint(data: VedhaRequest):
    try:
        analysis = analyze_vedha(data.natal_moon_sign, data.transit_signs)
        return {
            "success": True,
            "vedha": {
                "natal_moon_sign": sign_name(analysis.natal_moon_sign),
                "overall_score": analysis.overall_score,
                "transits": [
                    {
                        "planet":          t.planet.value,
                        "house_from_moon": t.house_from_moon,
                        "is_favorable":    t.is_favorable,
                        "is_upachaya":     t.is_upachaya,
                        "obstructed_by":   [p.value for p in t.obstructed_by],
                        "vedha_house":     t.vedha_house,
                        "severity":        t.severity.display_name,
                        "effectiveness":   t.effectiveness.display_name,
                    }
                    for t in analysis.transits
                ],
            },
        }
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
