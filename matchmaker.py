"""
matchmaker.py
=============
Ashta Koota (8-factor) Guna matching plus Manglik analysis for a couple.

Total points: 36
Recommended minimum: 18 points for compatibility

The koota rules live in dasha_engine.core.guna and the Manglik rules in
dasha_engine.core.manglik; this module combines them into one report.

Source: Parashara BPHS; standard Ashta Koota algorithm
"""

import logging
from typing import Optional

from dasha_engine.core.chart import Chart
from dasha_engine.core.guna import CompatibilityResult, KOOTA_SPECS, compute_guna_milan
from dasha_engine.core.manglik import AfflictionAssessment, assess_affliction, couple_verdict
from dasha_engine.core.tables import nakshatra_name, sign_name

logger = logging.getLogger(__name__)

# ── Remedies ─────────────────────────────────────────────────

DOSHA_DETAILS = {
    "Nadi Dosha":    {"severity": "High",   "remedy": "Nadi Dosha Nivaran puja recommended"},
    "Bhakoot Dosha": {"severity": "Medium", "remedy": "Consult astrologer for remedies"},
    "Gana Dosha":    {"severity": "Low",    "remedy": "Patience and communication"},
}


def _koota_dict(result: CompatibilityResult) -> dict:
    kootas = {}
    for cat in result.categories:
        key = cat.name.name.lower()
        kootas[key] = {
            "score":        cat.obtained_points,
            "max":          cat.max_points,
            "label":        cat.name.value,
            "meaning":      KOOTA_SPECS[cat.name].meaning,
            "is_positive":  cat.is_positive,
            "comparison":   cat.comparison.value,
            "bride":        cat.bride_value,
            "groom":        cat.groom_value,
            "analysis":     cat.analysis,
            "cancellation": cat.cancellation,
        }
    return kootas


def _manglik_dict(assessment: AfflictionAssessment) -> dict:
    return {
        "is_manglik":     assessment.is_manglik,
        "raw":            assessment.raw_severity.display_name,
        "effective":      assessment.effective_severity.display_name,
        "mars_house":     assessment.mars_house,
        "factors":        list(assessment.factors),
        "cancellations":  list(assessment.cancellations),
        "rule_ids":       list(assessment.cancellation_rules),
    }


# ── Main compatibility function ───────────────────────────────

def compute_compatibility(bride: Chart, groom: Chart,
                          bride_age: Optional[int] = None,
                          groom_age: Optional[int] = None) -> dict:
    """
    Compute full Ashta Koota compatibility between two charts.
    """
    result = compute_guna_milan(bride, groom)
    bride_manglik = assess_affliction(bride, bride_age)
    groom_manglik = assess_affliction(groom, groom_age)
    verdict = couple_verdict(bride_manglik, groom_manglik)
    logger.info("Guna milan %.1f/%d (%s); %s", result.total_obtained, result.total_max,
                result.rating.value, verdict.statement)

    return {
        "total_score":    result.total_obtained,
        "max_score":      result.total_max,
        "percentage":     result.percentage,
        "rating":         result.rating.value,
        "interpretation": result.interpretation,
        "kootas":         _koota_dict(result),
        "doshas": {
            name: dict(details, present=name in result.doshas)
            for name, details in DOSHA_DETAILS.items()
        },
        "manglik": {
            "bride":      _manglik_dict(bride_manglik),
            "groom":      _manglik_dict(groom_manglik),
            "note":       verdict.statement,
            "compatible": verdict.compatible,
        },
        "moon_signs": {"bride": sign_name(bride.moon_sign), "groom": sign_name(groom.moon_sign)},
        "nakshatras": {
            "bride": nakshatra_name(bride.moon_nakshatra),
            "groom": nakshatra_name(groom.moon_nakshatra),
        },
    }
