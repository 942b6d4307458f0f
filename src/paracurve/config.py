"""
Numerical Configuration
=======================
Central registry for the tolerances and iteration budgets used by the
curve evaluators, builders and face validation.

Every value can be overridden at import time through an environment
variable named ``PARACURVE_<NAME>`` (for example
``PARACURVE_DEFAULT_TOLERANCE=1e-9``).  Functions that take a tolerance
also accept an explicit argument, which always wins over these defaults.

Exports:
    DEFAULT_TOLERANCE (float): Point coincidence tolerance for builders,
        loop closure and the not-found test of parameter inversion.
    PARAMETER_EPSILON (float): Newton convergence threshold on |f'(t)|
        and on the step size.
    MAX_NEWTON_ITERATIONS (int): Iteration cap of parameter inversion.
    SEED_SAMPLES (int): Samples used to seed Newton iteration.
    FALLBACK_SAMPLES (int): Samples of the dense fallback search.
    REFINE_ITERATIONS (int): Golden-section steps of the fallback search.
    QUADRATURE_SEGMENTS (int): Sub-intervals used for arc length.
    QUADRATURE_POINTS (int): Gauss-Legendre nodes per sub-interval.
    DEFAULT_NURBS_DEGREE (int): Degree of fitted NURBS curves.
    INTERSECT_SAMPLES (int): Minimum chords per curve when bracketing
        curve/curve intersections.
"""
import logging
import os
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _from_env(name: str, default: T, cast: Callable[[str], T]) -> T:
    """
    Read ``PARACURVE_<name>`` from the environment, falling back to ``default``.
    """
    raw = os.environ.get(f"PARACURVE_{name}")
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"PARACURVE_{name} must be a {cast.__name__}, got {raw!r}") from exc
    logger.debug("Config override %s=%r", name, value)
    return value


# Global Constants
DEFAULT_TOLERANCE: float = _from_env("DEFAULT_TOLERANCE", 1e-6, float)
PARAMETER_EPSILON: float = _from_env("PARAMETER_EPSILON", 1e-12, float)
MAX_NEWTON_ITERATIONS: int = _from_env("MAX_NEWTON_ITERATIONS", 50, int)
SEED_SAMPLES: int = _from_env("SEED_SAMPLES", 16, int)
FALLBACK_SAMPLES: int = _from_env("FALLBACK_SAMPLES", 256, int)
REFINE_ITERATIONS: int = _from_env("REFINE_ITERATIONS", 60, int)
QUADRATURE_SEGMENTS: int = _from_env("QUADRATURE_SEGMENTS", 16, int)
QUADRATURE_POINTS: int = _from_env("QUADRATURE_POINTS", 8, int)
DEFAULT_NURBS_DEGREE: int = _from_env("DEFAULT_NURBS_DEGREE", 3, int)
INTERSECT_SAMPLES: int = _from_env("INTERSECT_SAMPLES", 64, int)
