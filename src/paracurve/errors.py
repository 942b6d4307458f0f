"""Exceptions raised by the paracurve builders and validators.

All of them derive from :class:`ValueError`, so callers that only care
about "bad geometry in" can catch that, while callers that want to react
to a specific failure can catch the subclass.  Convergence failure of
parameter inversion is not an exception; it is reported as ``None``.
"""


class GeometryError(ValueError):
    """Base class for paracurve construction failures."""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class ConstraintViolationError(GeometryError):
    """Builder inputs are geometrically inconsistent."""


class DegenerateGeometryError(GeometryError):
    """Curve parameters describe a degenerate curve (zero radius, ...)."""


class TopologyError(GeometryError):
    """A curve loop has a gap, fails to close, or revisits a vertex."""


__all__ = [
    'GeometryError',
    'ConstraintViolationError',
    'DegenerateGeometryError',
    'TopologyError',
]
