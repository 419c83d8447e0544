"""
tables.py
=========
Static classification tables shared by the dasha and matching engines.

Covers planets, signs, nakshatras, dignities (exaltation degree, own signs,
debilitation), the natural planetary relationship matrix, aspects and the
severity bands used to grade results.

Every accessor is total over its declared domain: a missing entry raises
LookupTableError instead of falling back to a default.

Source: Parashara, B.V. "Brihat Parashara Hora Shastra" (classical text)
"""

from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Mapping, Tuple

from ..errors import InvalidInputError, LookupTableError

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Planet(str, Enum):
    SUN = "Sun"
    MOON = "Moon"
    MARS = "Mars"
    MERCURY = "Mercury"
    JUPITER = "Jupiter"
    VENUS = "Venus"
    SATURN = "Saturn"
    RAHU = "Rahu"
    KETU = "Ketu"


class Relationship(str, Enum):
    FRIEND = "Friend"
    NEUTRAL = "Neutral"
    ENEMY = "Enemy"
    SAME = "Same"


class Dignity(str, Enum):
    EXALTED = "Exalted"
    OWN_SIGN = "Own Sign"
    DEBILITATED = "Debilitated"
    NEUTRAL = "Neutral"


class Element(str, Enum):
    FIRE = "Fire"
    EARTH = "Earth"
    AIR = "Air"
    WATER = "Water"


class Severity(IntEnum):
    """Five-step ladder used for junction intensity and transition difficulty."""
    MINIMAL = 1
    MILD = 2
    MODERATE = 3
    HIGH = 4
    CRITICAL = 5


# ---------------------------------------------------------------------------
# Signs and nakshatras
# ---------------------------------------------------------------------------

SIGNS = ["Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
         "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces"]

NAKSHATRAS = [
    "Ashwini", "Bharani", "Krittika", "Rohini", "Mrigashira", "Ardra",
    "Punarvasu", "Pushya", "Ashlesha", "Magha", "Purva Phalguni", "Uttara Phalguni",
    "Hasta", "Chitra", "Swati", "Vishakha", "Anuradha", "Jyeshtha",
    "Mula", "Purva Ashadha", "Uttara Ashadha", "Shravana", "Dhanishtha",
    "Shatabhisha", "Purva Bhadrapada", "Uttara Bhadrapada", "Revati",
]

# Sign index → ruling planet
SIGN_LORDS: Dict[int, Planet] = {
    0: Planet.MARS, 1: Planet.VENUS, 2: Planet.MERCURY, 3: Planet.MOON,
    4: Planet.SUN, 5: Planet.MERCURY, 6: Planet.VENUS, 7: Planet.MARS,
    8: Planet.JUPITER, 9: Planet.SATURN, 10: Planet.SATURN, 11: Planet.JUPITER,
}

# Nakshatra index → ruling planet (Ketu, Venus, Sun ... repeating every 9)
NAKSHATRA_RULERS: Dict[int, Planet] = {
    idx: [Planet.KETU, Planet.VENUS, Planet.SUN, Planet.MOON, Planet.MARS,
          Planet.RAHU, Planet.JUPITER, Planet.SATURN, Planet.MERCURY][idx % 9]
    for idx in range(27)
}

SIGN_ELEMENTS: Dict[int, Element] = {
    idx: [Element.FIRE, Element.EARTH, Element.AIR, Element.WATER][idx % 4]
    for idx in range(12)
}

# ---------------------------------------------------------------------------
# Dignities
# ---------------------------------------------------------------------------

# Planet → (sign index, exact degree of deep exaltation)
EXALTATION: Dict[Planet, Tuple[int, float]] = {
    Planet.SUN:     (0, 10.0),
    Planet.MOON:    (1, 3.0),
    Planet.MARS:    (9, 28.0),
    Planet.MERCURY: (5, 15.0),
    Planet.JUPITER: (3, 5.0),
    Planet.VENUS:   (11, 27.0),
    Planet.SATURN:  (6, 20.0),
    Planet.RAHU:    (1, 20.0),
    Planet.KETU:    (7, 20.0),
}

# Debilitation is the sign opposite exaltation, at the same degree
DEBILITATION: Dict[Planet, Tuple[int, float]] = {
    planet: ((sign + 6) % 12, degree) for planet, (sign, degree) in EXALTATION.items()
}

OWN_SIGNS: Dict[Planet, FrozenSet[int]] = {
    Planet.SUN:     frozenset({4}),
    Planet.MOON:    frozenset({3}),
    Planet.MARS:    frozenset({0, 7}),
    Planet.MERCURY: frozenset({2, 5}),
    Planet.JUPITER: frozenset({8, 11}),
    Planet.VENUS:   frozenset({1, 6}),
    Planet.SATURN:  frozenset({9, 10}),
    Planet.RAHU:    frozenset({10}),
    Planet.KETU:    frozenset({7}),
}

NATURAL_MALEFICS = frozenset({Planet.SATURN, Planet.MARS, Planet.RAHU, Planet.KETU})

# ---------------------------------------------------------------------------
# Natural relationships (Naisargika Maitri)
# ---------------------------------------------------------------------------

_FRIENDS: Dict[Planet, FrozenSet[Planet]] = {
    Planet.SUN:     frozenset({Planet.MOON, Planet.MARS, Planet.JUPITER}),
    Planet.MOON:    frozenset({Planet.SUN, Planet.MERCURY}),
    Planet.MARS:    frozenset({Planet.SUN, Planet.MOON, Planet.JUPITER, Planet.KETU}),
    Planet.MERCURY: frozenset({Planet.SUN, Planet.VENUS, Planet.RAHU}),
    Planet.JUPITER: frozenset({Planet.SUN, Planet.MOON, Planet.MARS}),
    Planet.VENUS:   frozenset({Planet.MERCURY, Planet.SATURN, Planet.RAHU, Planet.KETU}),
    Planet.SATURN:  frozenset({Planet.MERCURY, Planet.VENUS, Planet.RAHU, Planet.KETU}),
    Planet.RAHU:    frozenset({Planet.MERCURY, Planet.VENUS, Planet.SATURN}),
    Planet.KETU:    frozenset({Planet.MARS, Planet.VENUS, Planet.SATURN}),
}

_ENEMIES: Dict[Planet, FrozenSet[Planet]] = {
    Planet.SUN:     frozenset({Planet.VENUS, Planet.SATURN, Planet.RAHU, Planet.KETU}),
    Planet.MOON:    frozenset({Planet.RAHU, Planet.KETU}),
    Planet.MARS:    frozenset({Planet.MERCURY, Planet.RAHU}),
    Planet.MERCURY: frozenset({Planet.MOON}),
    Planet.JUPITER: frozenset({Planet.MERCURY, Planet.VENUS}),
    Planet.VENUS:   frozenset({Planet.SUN, Planet.MOON}),
    Planet.SATURN:  frozenset({Planet.SUN, Planet.MOON, Planet.MARS}),
    Planet.RAHU:    frozenset({Planet.SUN, Planet.MOON, Planet.MARS}),
    Planet.KETU:    frozenset({Planet.SUN, Planet.MOON}),
}


def _build_relationship_matrix() -> Dict[Planet, Dict[Planet, Relationship]]:
    matrix = {}
    for planet in Planet:
        row = {}
        for other in Planet:
            if other == planet:
                row[other] = Relationship.SAME
            elif other in _FRIENDS[planet]:
                row[other] = Relationship.FRIEND
            elif other in _ENEMIES[planet]:
                row[other] = Relationship.ENEMY
            else:
                row[other] = Relationship.NEUTRAL
        matrix[planet] = row
    return matrix


NATURAL_RELATIONSHIPS = _build_relationship_matrix()

# ---------------------------------------------------------------------------
# Aspects: houses counted from the planet, and the strength of the glance
# ---------------------------------------------------------------------------

PLANETARY_ASPECTS: Dict[Planet, Tuple[FrozenSet[int], float]] = {
    Planet.SUN:     (frozenset({7}), 1.0),
    Planet.MOON:    (frozenset({7}), 1.0),
    Planet.MARS:    (frozenset({4, 7, 8}), 1.0),
    Planet.MERCURY: (frozenset({7}), 1.0),
    Planet.JUPITER: (frozenset({5, 7, 9}), 1.0),
    Planet.VENUS:   (frozenset({7}), 1.0),
    Planet.SATURN:  (frozenset({3, 7, 10}), 1.0),
    Planet.RAHU:    (frozenset({5, 7, 9}), 0.75),
    Planet.KETU:    (frozenset({5, 7, 9}), 0.75),
}

KENDRA_HOUSES = frozenset({1, 4, 7, 10})
TRIKONA_HOUSES = frozenset({1, 5, 9})
UPACHAYA_HOUSES = frozenset({3, 6, 10, 11})

# ---------------------------------------------------------------------------
# Severity bands: (minimum score, grade), highest first
# ---------------------------------------------------------------------------

TRANSITION_DIFFICULTY_BANDS: Tuple[Tuple[int, Severity], ...] = (
    (8, Severity.CRITICAL),
    (6, Severity.HIGH),
    (4, Severity.MODERATE),
    (2, Severity.MILD),
    (0, Severity.MINIMAL),
)


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

def lookup(table: Mapping, key, table_name: str):
    try:
        return table[key]
    except KeyError:
        raise LookupTableError(f"{table_name} has no entry for {key!r}") from None


def check_sign(sign: int) -> int:
    if isinstance(sign, bool) or not isinstance(sign, int) or not 0 <= sign < 12:
        raise InvalidInputError(f"Sign index must be an integer in [0, 12), got {sign!r}")
    return sign


def check_nakshatra(nakshatra: int) -> int:
    if isinstance(nakshatra, bool) or not isinstance(nakshatra, int) or not 0 <= nakshatra < 27:
        raise InvalidInputError(f"Nakshatra index must be an integer in [0, 27), got {nakshatra!r}")
    return nakshatra


def sign_name(sign: int) -> str:
    return SIGNS[check_sign(sign)]


def nakshatra_name(nakshatra: int) -> str:
    return NAKSHATRAS[check_nakshatra(nakshatra)]


def sign_lord(sign: int) -> Planet:
    return lookup(SIGN_LORDS, check_sign(sign), "SIGN_LORDS")


def nakshatra_ruler(nakshatra: int) -> Planet:
    return lookup(NAKSHATRA_RULERS, check_nakshatra(nakshatra), "NAKSHATRA_RULERS")


def sign_element(sign: int) -> Element:
    return lookup(SIGN_ELEMENTS, check_sign(sign), "SIGN_ELEMENTS")


def exaltation(planet: Planet) -> Tuple[int, float]:
    return lookup(EXALTATION, planet, "EXALTATION")


def debilitation(planet: Planet) -> Tuple[int, float]:
    return lookup(DEBILITATION, planet, "DEBILITATION")


def own_signs(planet: Planet) -> FrozenSet[int]:
    return lookup(OWN_SIGNS, planet, "OWN_SIGNS")


def dignity(planet: Planet, sign: int) -> Dignity:
    """Sign-level dignity; exaltation wins over own sign (Mercury in Virgo)."""
    check_sign(sign)
    if exaltation(planet)[0] == sign:
        return Dignity.EXALTED
    if debilitation(planet)[0] == sign:
        return Dignity.DEBILITATED
    if sign in own_signs(planet):
        return Dignity.OWN_SIGN
    return Dignity.NEUTRAL


def relationship(planet: Planet, other: Planet) -> Relationship:
    """How `planet` regards `other` (natural relationships are not symmetric)."""
    row = lookup(NATURAL_RELATIONSHIPS, planet, "NATURAL_RELATIONSHIPS")
    return lookup(row, other, f"NATURAL_RELATIONSHIPS[{planet.value}]")


def aspect_strength(planet: Planet, from_sign: int, to_sign: int) -> float:
    """Strength with which `planet` in `from_sign` aspects `to_sign` (0.0 when it does not)."""
    houses, strength = lookup(PLANETARY_ASPECTS, planet, "PLANETARY_ASPECTS")
    distance = ((check_sign(to_sign) - check_sign(from_sign)) % 12) + 1
    return strength if distance in houses else 0.0


def grade(score: int, bands: Tuple[Tuple[int, Severity], ...] = TRANSITION_DIFFICULTY_BANDS) -> Severity:
    for minimum, severity in bands:
        if score >= minimum:
            return severity
    raise LookupTableError(f"No severity band covers score {score}")
