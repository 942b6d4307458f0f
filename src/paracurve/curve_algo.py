"""Curve evaluation for paracurve.

A :class:`CurveAlgo` is a stateless evaluator bound to one curve data
list (see :mod:`paracurve.curves`).  It borrows the data, never copies
or mutates it, so evaluators for different curves can run on different
threads freely.

Every family answers the same queries:

- ``derivative(t, r)``: r-th derivative with respect to ``t`` in world
  space.  Order 0 maps the local point through the full world matrix;
  higher orders only go through its linear part.
- ``point``, ``begin``, ``end``, ``tangent``: derived from ``derivative``.
- ``parameter(p)``: the inverse query, the ``t`` whose point is closest
  to ``p`` (Newton-Raphson with a sampling fallback).
- ``length``, ``sample``, ``is_closed``.

Families only supply :meth:`CurveAlgo.local_derivative`, the derivative
in the curve's own frame.  :func:`algorithm` picks the evaluator for a
curve by its tag.
"""

from __future__ import annotations

import logging
from math import cos, sin
from typing import List, Optional, Tuple

import numpy as np

from paracurve import config, geom
from paracurve.curves import angle_range, is_curve, semi_axes
from paracurve.nurbs import domain, rational_derivatives

logger = logging.getLogger(__name__)

_GOLDEN = 0.6180339887498949


def _clamp01(t: float) -> float:
    return min(1.0, max(0.0, t))


class CurveAlgo:
    """Generalized evaluator over one curve; subclasses add the local rule."""

    periodic = False

    def __init__(self, curve):
        if not is_curve(curve):
            raise ValueError('CurveAlgo needs curve data, got {!r}'.format(curve))
        self.curve = curve

    def __repr__(self):
        return '{}({})'.format(type(self).__name__, self.curve[0])

    @property
    def dimension(self) -> int:
        return self.curve[1].dimension

    # -- evaluation ---------------------------------------------------------

    def normalize_parameter(self, t: float) -> float:
        """Map ``t`` into the evaluation domain; clamps by default."""
        return _clamp01(t)

    def local_derivative(self, t: float, r: int) -> list:
        raise NotImplementedError

    def derivative(self, t: float, r: int = 0) -> list:
        """r-th derivative of the position with respect to ``t``, in world space.

        The chain rule through the parameter mapping is included, so a
        conic picks up a factor of ``(radian1 - radian0) ** r`` and orders
        ``r`` and ``r + 4`` differ by ``(radian1 - radian0) ** 4``.  The
        bare period-4 cycle is :meth:`ConicAlgo.angle_derivative`.
        """
        if isinstance(r, bool) or not isinstance(r, int) or r < 0:
            raise ValueError('derivative order must be a non-negative integer, got {!r}'.format(r))
        if not geom.isgoodnum(t):
            raise ValueError('curve parameter must be a finite number, got {!r}'.format(t))
        local = self.local_derivative(self.normalize_parameter(float(t)), r)
        m = self.curve[1].make_world_matrix()
        if r == 0:
            return m.apply_point(local)
        return m.apply_vector(local)

    def point(self, t: float) -> list:
        return self.derivative(t, 0)

    def begin(self) -> list:
        return self.point(0.0)

    def end(self) -> list:
        return self.point(1.0)

    def tangent(self, t: float) -> list:
        """Unit first derivative at ``t``.

        Raises ValueError where the first derivative vanishes, since the
        direction is undefined there.
        """
        d = self.derivative(t, 1)
        if geom.mag(d) < 1e-300:
            raise ValueError('tangent is undefined at t={}: zero first derivative'.format(t))
        return geom.normalize(d)

    def is_periodic(self) -> bool:
        return self.periodic

    def is_closed(self, tolerance: Optional[float] = None) -> bool:
        tol = config.DEFAULT_TOLERANCE if tolerance is None else tolerance
        return geom.dist(self.begin(), self.end()) <= tol

    def sample(self, count: int = 32) -> List[list]:
        """``count`` points at uniform parameter steps, both ends included."""
        if count < 2:
            raise ValueError('count must be >= 2')
        return [self.point(i / (count - 1)) for i in range(count)]

    def length(self) -> float:
        """Arc length by composite Gauss-Legendre quadrature of |C'(t)|."""
        nodes, weights = np.polynomial.legendre.leggauss(config.QUADRATURE_POINTS)
        segments = config.QUADRATURE_SEGMENTS
        total = 0.0
        for s in range(segments):
            a = s / segments
            b = (s + 1) / segments
            half = 0.5 * (b - a)
            mid = 0.5 * (a + b)
            for x, w in zip(nodes, weights):
                total += w * half * geom.mag(self.derivative(mid + half * float(x), 1))
        return float(total)

    # -- inversion ----------------------------------------------------------

    def _wrap(self, t: float) -> float:
        if self.is_periodic():
            return t % 1.0
        return _clamp01(t)

    def _distance2(self, target, t: float) -> float:
        d = geom.sub(self.point(t), target)
        return geom.dot(d, d)

    def _seed(self, target) -> float:
        n = config.SEED_SAMPLES
        return min((i / n for i in range(n + 1)), key=lambda t: self._distance2(target, t))

    def _newton(self, target, t: float) -> Tuple[float, bool]:
        t = self._wrap(t)
        for _ in range(config.MAX_NEWTON_ITERATIONS):
            diff = geom.sub(self.point(t), target)
            d1 = self.derivative(t, 1)
            f1 = 2.0 * geom.dot(diff, d1)
            if abs(f1) < config.PARAMETER_EPSILON:
                return t, True
            d2 = self.derivative(t, 2)
            f2 = 2.0 * (geom.dot(d1, d1) + geom.dot(diff, d2))
            if f2 <= 0.0:
                # not locally convex, a Newton step may head for a maximum
                return t, False
            step = f1 / f2
            nt = self._wrap(t - step)
            moved = abs(step) if self.is_periodic() else abs(nt - t)
            t = nt
            if moved < config.PARAMETER_EPSILON:
                return t, True
        return t, False

    def _sample_search(self, target) -> float:
        n = config.FALLBACK_SAMPLES
        best = min(range(n + 1), key=lambda i: self._distance2(target, i / n))
        lo = (best - 1) / n
        hi = (best + 1) / n
        if not self.is_periodic():
            lo = max(0.0, lo)
            hi = min(1.0, hi)
        f = lambda t: self._distance2(target, self._wrap(t))
        # golden-section refinement inside the bracketing samples
        a, b = lo, hi
        c = b - _GOLDEN * (b - a)
        d = a + _GOLDEN * (b - a)
        fc, fd = f(c), f(d)
        for _ in range(config.REFINE_ITERATIONS):
            if fc < fd:
                b, d, fd = d, c, fc
                c = b - _GOLDEN * (b - a)
                fc = f(c)
            else:
                a, c, fc = c, d, fd
                d = a + _GOLDEN * (b - a)
                fd = f(d)
        t = self._wrap(0.5 * (a + b))
        sampled = best / n
        if self._distance2(target, sampled) < self._distance2(target, t):
            t = self._wrap(sampled)
        return t

    def parameter(self, p, tolerance: Optional[float] = None,
                  guess: Optional[float] = None) -> Optional[float]:
        """Return the ``t`` whose point is closest to ``p``.

        Newton-Raphson minimizes ``|point(t) - p|^2`` starting from
        ``guess`` or from the best of a coarse sampling; iterates wrap
        modulo 1 on periodic curves and are clamped to ``[0, 1]``
        otherwise.  If Newton does not converge within
        ``config.MAX_NEWTON_ITERATIONS`` a dense sampling with
        golden-section refinement takes over.

        Returns ``None`` when ``tolerance`` is given and the closest
        point is farther than ``tolerance`` from ``p``.
        """
        target = geom.point(p)
        if self.dimension == 2:
            target[2] = 0.0
        start = self._seed(target) if guess is None else float(guess)
        t, converged = self._newton(target, start)
        if not converged:
            logger.debug('Newton inversion on %r did not converge from t=%g, sampling', self, start)
            t = self._sample_search(target)
        if tolerance is not None:
            gap = geom.dist(self.point(t), target)
            if gap > tolerance:
                logger.debug('Point %s is %g from %r, beyond tolerance %g',
                             geom.vstr(target), gap, self, tolerance)
                return None
        return t

    def closest_point(self, p) -> Tuple[float, list]:
        t = self.parameter(p)
        return t, self.point(t)

    def distance(self, p) -> float:
        target = geom.point(p)
        if self.dimension == 2:
            target[2] = 0.0
        _, q = self.closest_point(target)
        return geom.dist(q, target)


class LineAlgo(CurveAlgo):
    """Line of ``length`` along the local x axis, starting at the local origin."""

    def local_derivative(self, t, r):
        length = self.curve[2]['length']
        if r == 0:
            return [t * length, 0.0, 0.0, 1.0]
        if r == 1:
            return [length, 0.0, 0.0, 0.0]
        return [0.0, 0.0, 0.0, 0.0]

    def length(self):
        return self.curve[2]['length']


class ConicAlgo(CurveAlgo):
    """Circles, ellipses and their arcs.

    The position is ``(rx cos(theta), ry sin(theta))`` in the local frame
    with ``theta = radian0 + t * (radian1 - radian0)``.  Derivatives with
    respect to ``theta`` cycle with period 4; with respect to ``t`` each
    order picks up a factor of ``radian1 - radian0``.
    """

    def normalize_parameter(self, t):
        if 0.0 <= t <= 1.0:
            return t
        if self.is_periodic():
            return t % 1.0
        return _clamp01(t)

    def is_periodic(self):
        a0, a1 = angle_range(self.curve)
        return abs(a1 - a0) >= geom.pi2 - 1e-12

    def _cycle(self, t, r):
        rx, ry = semi_axes(self.curve)
        a0, a1 = angle_range(self.curve)
        theta = a0 + (a1 - a0) * t
        c = cos(theta)
        s = sin(theta)
        k = r % 4
        if k == 0:
            return rx * c, ry * s
        elif k == 1:
            return -rx * s, ry * c
        elif k == 2:
            return -rx * c, -ry * s
        return rx * s, -ry * c

    def local_derivative(self, t, r):
        x, y = self._cycle(t, r)
        if r == 0:
            return [x, y, 0.0, 1.0]
        a0, a1 = angle_range(self.curve)
        f = (a1 - a0) ** r
        return [f * x, f * y, 0.0, 0.0]

    def angle_derivative(self, t: float, r: int = 0, local: bool = False) -> list:
        """r-th derivative with respect to the angle rather than ``t``.

        This is the bare period-4 cycle, so orders ``r`` and ``r + 4``
        agree.  With ``local`` the result stays in the curve frame;
        otherwise order 0 is mapped as a point and higher orders as
        vectors, exactly like :meth:`derivative`.
        """
        x, y = self._cycle(float(t), r)
        v = [x, y, 0.0, 1.0 if r == 0 else 0.0]
        if local:
            return v
        m = self.curve[1].make_world_matrix()
        return m.apply_point(v) if r == 0 else m.apply_vector(v)

    def length(self):
        kind = self.curve[0]
        if kind in ('circle', 'circlearc'):
            a0, a1 = angle_range(self.curve)
            return self.curve[2]['radius'] * abs(a1 - a0)
        return super().length()


class NurbsAlgo(CurveAlgo):
    """Rational B-spline; ``t`` in ``[0, 1]`` maps linearly onto the knot domain."""

    def local_derivative(self, t, r):
        meta = self.curve[2]
        knots = meta['knots']
        degree = meta['degree']
        u0, u1 = domain(knots, degree)
        u = u0 + (u1 - u0) * t
        ders = rational_derivatives(meta['controls'], meta['weights'], knots, degree, u, r)
        v = ders[r]
        if r == 0:
            return [v[0], v[1], v[2], 1.0]
        f = (u1 - u0) ** r
        return [f * v[0], f * v[1], f * v[2], 0.0]


_ALGORITHMS = {
    'line': LineAlgo,
    'circle': ConicAlgo,
    'circlearc': ConicAlgo,
    'ellipse': ConicAlgo,
    'ellipsearc': ConicAlgo,
    'arc': ConicAlgo,
    'nurbs': NurbsAlgo,
}

def algorithm(curve) -> CurveAlgo:
    """Return the evaluator matching the family of ``curve``."""
    if not is_curve(curve):
        raise ValueError('not a curve: {!r}'.format(curve))
    return _ALGORITHMS[curve[0]](curve)


__all__ = [
    'CurveAlgo',
    'LineAlgo',
    'ConicAlgo',
    'NurbsAlgo',
    'algorithm',
]
