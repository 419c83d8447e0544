# Dasha Engine - Core modules
from .chart import Chart, PlanetPosition
from .cycles import CycleTable, DashaSystem, cycle_table, starting_position
from .periods import DashaLevel, LookupStatus, compute_periods, find_current_period, period_progress
from .dasha import compute_dasha, compute_vimshottari_dasha, dasha_balance
from .applicability import is_applicable, is_ashtottari_applicable
from .sandhi import active_sandhis, detect_junctions
from .sudarshana import sudarshana_for_age, sudarshana_for_date
from .guna import compute_guna_milan, score_category
from .manglik import assess_affliction, couple_verdict
from .vedha import analyze_vedha

__all__ = [
    "Chart", "PlanetPosition",
    "CycleTable", "DashaSystem", "cycle_table", "starting_position",
    "DashaLevel", "LookupStatus", "compute_periods", "find_current_period", "period_progress",
    "compute_dasha", "compute_vimshottari_dasha", "dasha_balance",
    "is_applicable", "is_ashtottari_applicable",
    "active_sandhis", "detect_junctions",
    "sudarshana_for_age", "sudarshana_for_date",
    "compute_guna_milan", "score_category",
    "assess_affliction", "couple_verdict",
    "analyze_vedha",
]
