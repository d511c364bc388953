"""Error taxonomy for the measuring engine.

- InvalidCoordinateError: NaN or out-of-range lat/lon, rejected at the map boundary
- IllegalTransitionError: gesture not allowed in the current path state
  (resume on a non-last vertex, drag while a path is being built, ...)

Neither is fatal to the host: a rejected gesture leaves all state unchanged.
Duplicate clicks and antipodal arcs are documented behavior, not errors.
"""


class MeasureError(Exception):
    """Base class for measuring engine errors."""


class InvalidCoordinateError(MeasureError, ValueError):
    """Latitude/longitude is NaN, infinite or out of range."""


class IllegalTransitionError(MeasureError):
    """Operation not allowed in the current path or path set state.

    Raised before any mutation takes place.
    """
