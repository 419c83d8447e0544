"""
guna.py
=======
Ashta Koota (8-factor) Guna matching for Vedic compatibility.

Total points: 36
Recommended minimum: 18 points for compatibility

Kootas, in scoring order, with their maximum points:
  Varna 1, Vashya 2, Tara 3, Yoni 4, Graha Maitri 5, Gana 6, Bhakoot 7, Nadi 8.

Every koota compares the bride's Moon with the groom's Moon. The first seven
reward sameness; Nadi requires a difference, so identical Moons score 0 there
unless a cancellation applies.

Source: Parashara BPHS; Muhurta Chintamani; standard Ashta Koota algorithm
"""

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from ..errors import InvalidInputError, LookupTableError
from .chart import Chart
from .tables import (
    Relationship, lookup, nakshatra_name, nakshatra_ruler,
    relationship, sign_element, sign_lord, sign_name,
)

# ── Enumerations ─────────────────────────────────────────────


class Koota(str, Enum):
    VARNA = "Varna"
    VASHYA = "Vashya"
    TARA = "Tara"
    YONI = "Yoni"
    GRAHA_MAITRI = "Graha Maitri"
    GANA = "Gana"
    BHAKOOT = "Bhakoot"
    NADI = "Nadi"


class Comparison(str, Enum):
    SAME_IS_BEST = "same_is_best"
    DIFFERENCE_REQUIRED = "difference_required"


class CompatibilityRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    BELOW_AVERAGE = "Below Average"
    POOR = "Poor"


class Varna(Enum):
    SHUDRA = 1
    VAISHYA = 2
    KSHATRIYA = 3
    BRAHMIN = 4


class Vashya(str, Enum):
    CHATUSHPADA = "Chatushpada"
    MANAVA = "Manava"
    JALACHARA = "Jalachara"
    VANACHARA = "Vanachara"
    KEETA = "Keeta"


class Gana(str, Enum):
    DEVA = "Deva"
    MANUSHYA = "Manushya"
    RAKSHASA = "Rakshasa"


class Nadi(str, Enum):
    AADI = "Aadi"
    MADHYA = "Madhya"
    ANTYA = "Antya"


class Yoni(str, Enum):
    HORSE = "Horse"
    ELEPHANT = "Elephant"
    SHEEP = "Sheep"
    SERPENT = "Serpent"
    DOG = "Dog"
    CAT = "Cat"
    RAT = "Rat"
    COW = "Cow"
    BUFFALO = "Buffalo"
    TIGER = "Tiger"
    DEER = "Deer"
    MONKEY = "Monkey"
    MONGOOSE = "Mongoose"
    LION = "Lion"


# ── Koota definitions ────────────────────────────────────────

SYSTEM_MAXIMUM = 36


@dataclass(frozen=True)
class KootaSpec:
    max_points: float
    comparison: Comparison
    meaning: str
    positive_from: float


KOOTA_SPECS: Dict[Koota, KootaSpec] = {
    Koota.VARNA:        KootaSpec(1, Comparison.SAME_IS_BEST, "Spiritual compatibility", 1),
    Koota.VASHYA:       KootaSpec(2, Comparison.SAME_IS_BEST, "Dominance and attraction", 1),
    Koota.TARA:         KootaSpec(3, Comparison.SAME_IS_BEST, "Birth star compatibility", 1.5),
    Koota.YONI:         KootaSpec(4, Comparison.SAME_IS_BEST, "Biological compatibility", 2),
    Koota.GRAHA_MAITRI: KootaSpec(5, Comparison.SAME_IS_BEST, "Planetary friendship", 3),
    Koota.GANA:         KootaSpec(6, Comparison.SAME_IS_BEST, "Temperament match", 3),
    Koota.BHAKOOT:      KootaSpec(7, Comparison.SAME_IS_BEST, "Moon sign compatibility", 7),
    Koota.NADI:         KootaSpec(8, Comparison.DIFFERENCE_REQUIRED, "Constitution and progeny", 8),
}

if sum(spec.max_points for spec in KOOTA_SPECS.values()) != SYSTEM_MAXIMUM:
    raise LookupTableError(f"Koota maximums do not add up to {SYSTEM_MAXIMUM}")

# ── Sign data ────────────────────────────────────────────────

VARNA: Dict[int, Varna] = {
    3: Varna.BRAHMIN, 7: Varna.BRAHMIN, 11: Varna.BRAHMIN,
    0: Varna.KSHATRIYA, 4: Varna.KSHATRIYA, 8: Varna.KSHATRIYA,
    1: Varna.VAISHYA, 5: Varna.VAISHYA, 9: Varna.VAISHYA,
    2: Varna.SHUDRA, 6: Varna.SHUDRA, 10: Varna.SHUDRA,
}

VASHYA_GROUP: Dict[int, Vashya] = {
    0: Vashya.CHATUSHPADA, 1: Vashya.CHATUSHPADA, 2: Vashya.MANAVA,
    3: Vashya.JALACHARA, 4: Vashya.VANACHARA, 5: Vashya.MANAVA,
    6: Vashya.MANAVA, 7: Vashya.KEETA, 8: Vashya.MANAVA,
    9: Vashya.JALACHARA, 10: Vashya.MANAVA, 11: Vashya.JALACHARA,
}

# Group → groups it controls
VASHYA_CONTROL: Dict[Vashya, FrozenSet[Vashya]] = {
    Vashya.CHATUSHPADA: frozenset(),
    Vashya.MANAVA:      frozenset({Vashya.CHATUSHPADA, Vashya.JALACHARA}),
    Vashya.JALACHARA:   frozenset(),
    Vashya.VANACHARA:   frozenset({Vashya.CHATUSHPADA}),
    Vashya.KEETA:       frozenset(),
}

VASHYA_ENEMIES = (
    frozenset({Vashya.MANAVA, Vashya.VANACHARA}),
    frozenset({Vashya.JALACHARA, Vashya.VANACHARA}),
)

# ── Nakshatra data ───────────────────────────────────────────

_D, _M, _R = Gana.DEVA, Gana.MANUSHYA, Gana.RAKSHASA
GANA: List[Gana] = [
    _D, _M, _R, _M, _D, _M, _D, _D, _R,   # Ashwini–Ashlesha
    _R, _M, _M, _D, _R, _D, _R, _D, _R,   # Magha–Jyeshtha
    _R, _M, _M, _D, _R, _R, _M, _M, _D,   # Mula–Revati
]

_A, _MD, _AN = Nadi.AADI, Nadi.MADHYA, Nadi.ANTYA
NADI: List[Nadi] = [
    _A, _MD, _AN, _AN, _MD, _A, _A, _MD, _AN,
    _AN, _MD, _A, _A, _MD, _AN, _AN, _MD, _A,
    _A, _MD, _AN, _AN, _MD, _A, _A, _MD, _AN,
]

YONI: List[Yoni] = [
    Yoni.HORSE, Yoni.ELEPHANT, Yoni.SHEEP, Yoni.SERPENT, Yoni.SERPENT,
    Yoni.DOG, Yoni.CAT, Yoni.SHEEP, Yoni.CAT,
    Yoni.RAT, Yoni.RAT, Yoni.COW, Yoni.BUFFALO, Yoni.TIGER,
    Yoni.BUFFALO, Yoni.TIGER, Yoni.DEER, Yoni.DEER,
    Yoni.DOG, Yoni.MONKEY, Yoni.MONGOOSE, Yoni.MONKEY, Yoni.LION,
    Yoni.HORSE, Yoni.LION, Yoni.COW, Yoni.ELEPHANT,
]

YONI_ENEMIES = (
    frozenset({Yoni.HORSE, Yoni.BUFFALO}),
    frozenset({Yoni.ELEPHANT, Yoni.LION}),
    frozenset({Yoni.SHEEP, Yoni.MONKEY}),
    frozenset({Yoni.SERPENT, Yoni.MONGOOSE}),
    frozenset({Yoni.DOG, Yoni.DEER}),
    frozenset({Yoni.CAT, Yoni.RAT}),
    frozenset({Yoni.COW, Yoni.TIGER}),
)

YONI_FRIENDLY_GROUPS = (
    frozenset({Yoni.HORSE, Yoni.DEER, Yoni.MONKEY}),
    frozenset({Yoni.ELEPHANT, Yoni.SHEEP, Yoni.BUFFALO, Yoni.COW}),
    frozenset({Yoni.TIGER, Yoni.LION, Yoni.CAT}),
    frozenset({Yoni.SERPENT, Yoni.RAT, Yoni.DOG}),
)

GANA_POINTS: Dict[Tuple[Gana, Gana], float] = {   # (bride, groom)
    (_D, _D): 6, (_M, _M): 6, (_R, _R): 6,
    (_D, _M): 5, (_M, _D): 6,
    (_M, _R): 1, (_R, _M): 3,
    (_D, _R): 0, (_R, _D): 0,
}

AUSPICIOUS_TARAS = frozenset({2, 4, 6, 8, 9})
TARA_NAMES = {
    1: "Janma", 2: "Sampat", 3: "Vipat", 4: "Kshema", 5: "Pratyari",
    6: "Sadhana", 7: "Vadha", 8: "Mitra", 9: "Parama Mitra",
}

# Moon sign separations (groom counted from bride, 0-based) that form a dosha
BHAKOOT_DOSHAS: Dict[int, str] = {1: "2-12", 11: "2-12", 5: "6-8", 7: "6-8", 4: "5-9", 8: "5-9"}

# Nakshatra pairs whose shared Nadi does not count (Rohini–Magha)
NADI_CANCELLING_PAIRS = (frozenset({3, 9}),)

# Graha Maitri: (bride lord's view, groom lord's view) → points
MAITRI_POINTS: Dict[FrozenSet[Relationship], float] = {
    frozenset({Relationship.FRIEND}): 5,
    frozenset({Relationship.FRIEND, Relationship.NEUTRAL}): 4,
    frozenset({Relationship.NEUTRAL}): 3,
    frozenset({Relationship.FRIEND, Relationship.ENEMY}): 1,
    frozenset({Relationship.NEUTRAL, Relationship.ENEMY}): 0.5,
    frozenset({Relationship.ENEMY}): 0,
}


# ── Result models ────────────────────────────────────────────

class GunaCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    name:            Koota
    max_points:      float
    obtained_points: float
    is_positive:     bool
    comparison:      Comparison
    bride_value:     str
    groom_value:     str
    analysis:        str
    cancellation:    Optional[str] = None

    @model_validator(mode="after")
    def _points_within_cap(self) -> "GunaCategory":
        if not 0 <= self.obtained_points <= self.max_points:
            raise ValueError(
                f"{self.name.value}: obtained {self.obtained_points} outside [0, {self.max_points}]"
            )
        return self


class CompatibilityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories:     Tuple[GunaCategory, ...]
    total_obtained: float
    total_max:      float
    percentage:     float
    rating:         CompatibilityRating
    interpretation: str
    doshas:         Tuple[str, ...] = ()

    def category(self, koota: Koota) -> GunaCategory:
        for cat in self.categories:
            if cat.name == koota:
                return cat
        raise KeyError(koota)


@dataclass(frozen=True)
class MoonProfile:
    """The Moon attributes every koota reads."""
    sign: int
    nakshatra: int
    pada: int

    @classmethod
    def from_chart(cls, chart: Chart) -> "MoonProfile":
        return cls(sign=chart.moon_sign, nakshatra=chart.moon_nakshatra, pada=chart.moon_pada)


def _category(koota: Koota, points: float, bride_value: str, groom_value: str,
              analysis: str, cancellation: Optional[str] = None) -> GunaCategory:
    spec = KOOTA_SPECS[koota]
    return GunaCategory(
        name=koota,
        max_points=spec.max_points,
        obtained_points=points,
        is_positive=points >= spec.positive_from,
        comparison=spec.comparison,
        bride_value=bride_value,
        groom_value=groom_value,
        analysis=analysis,
        cancellation=cancellation,
    )


# ── Koota calculations ───────────────────────────────────────

def varna_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bv = lookup(VARNA, bride.sign, "VARNA")
    gv = lookup(VARNA, groom.sign, "VARNA")
    # Groom's varna should be equal to or higher than the bride's
    points = 1 if gv.value >= bv.value else 0
    analysis = ("Groom's varna supports the bride's" if points
                else "Bride's varna ranks above the groom's")
    return _category(Koota.VARNA, points, bv.name.title(), gv.name.title(), analysis)


def vashya_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bg = lookup(VASHYA_GROUP, bride.sign, "VASHYA_GROUP")
    gg = lookup(VASHYA_GROUP, groom.sign, "VASHYA_GROUP")
    groom_controls = bg in lookup(VASHYA_CONTROL, gg, "VASHYA_CONTROL")
    bride_controls = gg in lookup(VASHYA_CONTROL, bg, "VASHYA_CONTROL")

    if bg == gg:
        points, analysis = 2, "Same vashya group"
    elif groom_controls and bride_controls:
        points, analysis = 2, "Mutual attraction"
    elif groom_controls or bride_controls:
        points, analysis = 1, "One-sided attraction"
    elif any({bg, gg} <= pair for pair in VASHYA_ENEMIES):
        points, analysis = 0, "Opposed vashya groups"
    else:
        points, analysis = 0.5, "Neutral vashya groups"
    return _category(Koota.VASHYA, points,
                     f"{bg.value} ({sign_name(bride.sign)})",
                     f"{gg.value} ({sign_name(groom.sign)})", analysis)


def tara_number(from_nakshatra: int, to_nakshatra: int) -> int:
    diff = (to_nakshatra - from_nakshatra) % 27
    return 9 if diff == 0 else ((diff - 1) % 9) + 1


def tara_koota(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bride_to_groom = tara_number(bride.nakshatra, groom.nakshatra)
    groom_to_bride = tara_number(groom.nakshatra, bride.nakshatra)
    good = (bride_to_groom in AUSPICIOUS_TARAS) + (groom_to_bride in AUSPICIOUS_TARAS)
    points = {2: 3, 1: 1.5, 0: 0}[good]
    analysis = {2: "Auspicious taras both ways", 1: "Auspicious tara one way",
                0: "Inauspicious taras"}[good]
    return _category(Koota.TARA, points,
                     f"{nakshatra_name(bride.nakshatra)} → {TARA_NAMES[bride_to_groom]}",
                     f"{nakshatra_name(groom.nakshatra)} → {TARA_NAMES[groom_to_bride]}",
                     analysis)


def yoni_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    by = YONI[bride.nakshatra]
    gy = YONI[groom.nakshatra]
    if by == gy:
        points, analysis = 4, "Same yoni"
    elif any({by, gy} <= pair for pair in YONI_ENEMIES):
        points, analysis = 0, "Enemy yonis"
    elif any({by, gy} <= group for group in YONI_FRIENDLY_GROUPS):
        points, analysis = 3, "Friendly yonis"
    else:
        points, analysis = 2, "Neutral yonis"
    return _category(Koota.YONI, points, by.value, gy.value, analysis)


def graha_maitri(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bl = sign_lord(bride.sign)
    gl = sign_lord(groom.sign)
    if bl == gl:
        points, analysis = 5, f"Same Moon sign lord ({bl.value})"
    else:
        views = frozenset({relationship(bl, gl), relationship(gl, bl)})
        points = lookup(MAITRI_POINTS, views, "MAITRI_POINTS")
        analysis = f"{bl.value} and {gl.value}: " + " / ".join(
            sorted(view.value for view in views))
    return _category(Koota.GRAHA_MAITRI, points,
                     f"{sign_name(bride.sign)} ({bl.value})",
                     f"{sign_name(groom.sign)} ({gl.value})", analysis)


def gana_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bg = GANA[bride.nakshatra]
    gg = GANA[groom.nakshatra]
    points = lookup(GANA_POINTS, (bg, gg), "GANA_POINTS")
    analysis = "Same temperament" if bg == gg else f"{bg.value} bride with {gg.value} groom"
    return _category(Koota.GANA, points, bg.value, gg.value, analysis)


def _bhakoot_cancellation(bride_sign: int, groom_sign: int) -> Optional[str]:
    bl = sign_lord(bride_sign)
    gl = sign_lord(groom_sign)
    if bl == gl:
        return f"Both Moon signs ruled by {bl.value}"
    views = (relationship(bl, gl), relationship(gl, bl))
    if views == (Relationship.FRIEND, Relationship.FRIEND):
        return f"{bl.value} and {gl.value} are mutual friends"
    element = sign_element(bride_sign)
    if element == sign_element(groom_sign):
        return f"Both Moon signs share the {element.value} element"
    if set(views) == {Relationship.FRIEND, Relationship.NEUTRAL}:
        return f"{bl.value} and {gl.value} are friendly"
    return None


def bhakoot_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    diff = (groom.sign - bride.sign) % 12
    dosha = BHAKOOT_DOSHAS.get(diff)
    cancellation = None
    if dosha is None:
        points, analysis = 7, "Favourable Moon sign relation"
    else:
        cancellation = _bhakoot_cancellation(bride.sign, groom.sign)
        if cancellation:
            points, analysis = 7, f"{dosha} Bhakoot dosha cancelled"
        else:
            points, analysis = 0, f"{dosha} Bhakoot dosha"
    return _category(Koota.BHAKOOT, points, sign_name(bride.sign), sign_name(groom.sign),
                     analysis, cancellation)


def _nadi_cancellation(bride: MoonProfile, groom: MoonProfile) -> Optional[str]:
    same_nak = bride.nakshatra == groom.nakshatra
    same_sign = bride.sign == groom.sign
    if same_nak and not same_sign:
        return f"Same nakshatra ({nakshatra_name(bride.nakshatra)}) in different rashis"
    if same_sign and not same_nak:
        return f"Same rashi ({sign_name(bride.sign)}) with different nakshatras"
    if same_nak and same_sign and bride.pada != groom.pada:
        return f"Different padas ({bride.pada} and {groom.pada})"
    if frozenset({bride.nakshatra, groom.nakshatra}) in NADI_CANCELLING_PAIRS:
        return (f"{nakshatra_name(bride.nakshatra)} and "
                f"{nakshatra_name(groom.nakshatra)} form a cancelling pair")
    bl = sign_lord(bride.sign)
    gl = sign_lord(groom.sign)
    if bl != gl and relationship(bl, gl) == relationship(gl, bl) == Relationship.FRIEND:
        return f"Moon sign lords {bl.value} and {gl.value} are mutual friends"
    # identical Moons keep the dosha
    if not same_nak and nakshatra_ruler(bride.nakshatra) == nakshatra_ruler(groom.nakshatra):
        return f"Both nakshatras ruled by {nakshatra_ruler(bride.nakshatra).value}"
    return None


def nadi_score(bride: MoonProfile, groom: MoonProfile) -> GunaCategory:
    bn = NADI[bride.nakshatra]
    gn = NADI[groom.nakshatra]
    cancellation = None
    if bn != gn:
        points, analysis = 8, f"Different nadis ({bn.value} and {gn.value})"
    else:
        cancellation = _nadi_cancellation(bride, groom)
        if cancellation:
            points, analysis = 8, "Nadi dosha cancelled"
        else:
            points, analysis = 0, f"Nadi dosha: both {bn.value}"
    return _category(Koota.NADI, points, bn.value, gn.value, analysis, cancellation)


KOOTA_RULES: Dict[Koota, Callable[[MoonProfile, MoonProfile], GunaCategory]] = {
    Koota.VARNA:        varna_score,
    Koota.VASHYA:       vashya_score,
    Koota.TARA:         tara_koota,
    Koota.YONI:         yoni_score,
    Koota.GRAHA_MAITRI: graha_maitri,
    Koota.GANA:         gana_score,
    Koota.BHAKOOT:      bhakoot_score,
    Koota.NADI:         nadi_score,
}


def score_category(koota: Koota, bride: Chart, groom: Chart) -> GunaCategory:
    rule = lookup(KOOTA_RULES, Koota(koota), "KOOTA_RULES")
    return rule(MoonProfile.from_chart(bride), MoonProfile.from_chart(groom))


# ── Aggregation ──────────────────────────────────────────────

# (lower bound, upper bound, rating) on total / maximum; the last band is closed at 1
RATING_BANDS: Tuple[Tuple[Fraction, Fraction, CompatibilityRating], ...] = (
    (Fraction(0),      Fraction(14, 36), CompatibilityRating.POOR),
    (Fraction(14, 36), Fraction(18, 36), CompatibilityRating.BELOW_AVERAGE),
    (Fraction(18, 36), Fraction(21, 36), CompatibilityRating.AVERAGE),
    (Fraction(21, 36), Fraction(28, 36), CompatibilityRating.GOOD),
    (Fraction(28, 36), Fraction(1),      CompatibilityRating.EXCELLENT),
)

INTERPRETATIONS: Dict[CompatibilityRating, str] = {
    CompatibilityRating.EXCELLENT:
        "Highly compatible match. Strong alignment across all key areas of life.",
    CompatibilityRating.GOOD:
        "Good compatibility. Minor differences can be worked through with mutual effort.",
    CompatibilityRating.AVERAGE:
        "Acceptable match. Some areas need attention, particularly those with low scores.",
    CompatibilityRating.BELOW_AVERAGE:
        "Below average compatibility. Several areas need careful consideration.",
    CompatibilityRating.POOR:
        "Challenging compatibility. Consultation with an astrologer is advised.",
}

# Koota → dosha name reported when it scores zero
DOSHA_KOOTAS = {Koota.NADI: "Nadi Dosha", Koota.BHAKOOT: "Bhakoot Dosha", Koota.GANA: "Gana Dosha"}


def rating_for_ratio(ratio: float) -> CompatibilityRating:
    if not 0 <= ratio <= 1:
        raise InvalidInputError(f"Score ratio must be in [0, 1], got {ratio!r}")
    last = len(RATING_BANDS) - 1
    for idx, (lower, upper, rating) in enumerate(RATING_BANDS):
        if lower <= ratio < upper or (idx == last and ratio == upper):
            return rating
    raise LookupTableError(f"No rating band covers ratio {ratio!r}")


def aggregate(categories: Sequence[GunaCategory]) -> CompatibilityResult:
    if not categories:
        raise InvalidInputError("Cannot aggregate an empty category list")
    names = [cat.name for cat in categories]
    if len(set(names)) != len(names):
        raise InvalidInputError("Each koota may appear only once")

    total = sum(cat.obtained_points for cat in categories)
    maximum = sum(cat.max_points for cat in categories)
    # point values are multiples of 0.5, so the ratio is exact
    rating = rating_for_ratio(Fraction(total) / Fraction(maximum))
    doshas = tuple(DOSHA_KOOTAS[cat.name] for cat in categories
                   if cat.name in DOSHA_KOOTAS and cat.obtained_points == 0)
    return CompatibilityResult(
        categories=tuple(categories),
        total_obtained=total,
        total_max=maximum,
        percentage=round(total / maximum * 100, 1),
        rating=rating,
        interpretation=INTERPRETATIONS[rating],
        doshas=doshas,
    )


def compute_guna_milan(bride: Chart, groom: Chart) -> CompatibilityResult:
    return aggregate([score_category(koota, bride, groom) for koota in Koota])
