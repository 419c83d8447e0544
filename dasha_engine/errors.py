class DashaEngineError(Exception):
    """
    Base exception for all dasha-engine domain errors.
    """
    pass


class InvalidInputError(DashaEngineError, ValueError):
    """
    Raised when caller-supplied inputs are invalid or inconsistent.
    """
    pass


class InvalidLongitudeError(InvalidInputError):
    """
    Raised when a longitude is not a finite value in [0, 360).
    """
    pass


class InvalidCycleTableError(InvalidInputError):
    """
    Raised when a cycle table is empty, repeats a planet, or its lengths
    do not add up to the declared total.
    """
    pass


class MissingPlanetError(InvalidInputError):
    """
    Raised when a chart does not carry a position the calculation needs.
    """
    pass


class LookupTableError(DashaEngineError, LookupError):
    """
    Raised when a static rule table has no entry for a valid domain value.
    Signals an incomplete table, never bad user input.
    """
    pass


class InsufficientRangeError(DashaEngineError):
    """
    Raised by hosts when an as-of query falls outside the computed periods.
    """
    pass
