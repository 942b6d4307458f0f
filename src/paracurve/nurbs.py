"""NURBS numerics for paracurve.

Evaluation, derivatives and interpolation of (rational) B-spline curves.
Control points are handled as plain tuples of floats of any length, so
the same routines serve 2D, 3D and homogeneous (weighted) control
points.

- :func:`de_boor` evaluates a non-rational B-spline at ``u``.
- :func:`derivative_controls` differences the control points into the
  control polygons of the degree-reduced derivative curves.
- :func:`rational_derivatives` combines both on homogeneous control
  points with the quotient rule to get NURBS derivatives.
- :func:`interpolate` fits a clamped B-spline through a point sequence
  by solving the banded collocation system.

Algorithms follow The NURBS Book (Piegl & Tiller, 2nd ed.), A2.1, A2.2,
A3.3, A4.2 and A9.1.
"""

from __future__ import annotations

from math import comb, sqrt
from typing import List, Sequence, Tuple

import numpy as np
from scipy.linalg import solve_banded

from paracurve.errors import ConstraintViolationError, DegenerateGeometryError

Vec = Tuple[float, ...]

PARAMETERIZATIONS = ('chord', 'centripetal', 'uniform')


# -----------------------------------------------------------------------------
# Knot vectors
# -----------------------------------------------------------------------------

def clamped_knots(count: int, degree: int) -> List[float]:
    """Return the clamped uniform knot vector on ``[0, 1]`` for ``count`` controls."""

    if count < degree + 1:
        raise DegenerateGeometryError('need at least {} control points for degree {}'
                                      .format(degree + 1, degree))
    inner = count - degree - 1
    knots = [0.0] * (degree + 1)
    knots.extend((i + 1) / (inner + 1) for i in range(inner))
    knots.extend([1.0] * (degree + 1))
    return knots


def validate_knots(knots: Sequence[float], count: int, degree: int) -> None:
    """Raise :class:`DegenerateGeometryError` unless ``knots`` is usable."""

    expected = count + degree + 1
    if len(knots) != expected:
        raise DegenerateGeometryError('knot vector should have {} elements, got {}'
                                      .format(expected, len(knots)),
                                      {'expected': expected, 'actual': len(knots)})
    for i in range(1, len(knots)):
        if knots[i] < knots[i - 1]:
            raise DegenerateGeometryError('knot vector is not non-decreasing at index {}'.format(i),
                                          {'index': i})
    if knots[count] <= knots[degree]:
        raise DegenerateGeometryError('knot vector has an empty parameter domain')


def domain(knots: Sequence[float], degree: int) -> Tuple[float, float]:
    """Return the valid parameter interval ``(u_start, u_end)``."""

    return knots[degree], knots[len(knots) - degree - 1]


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------

def find_span(n: int, degree: int, u: float, knots: Sequence[float]) -> int:
    """Index of the knot span holding ``u``; ``n`` is the last control index."""

    if u >= knots[n + 1]:
        return n
    if u <= knots[degree]:
        return degree
    low = degree
    high = n + 1
    mid = (low + high) // 2
    while u < knots[mid] or u >= knots[mid + 1]:
        if u < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2
    return mid


def basis_functions(span: int, u: float, degree: int, knots: Sequence[float]) -> List[float]:
    """The ``degree + 1`` non-vanishing basis functions on ``span``."""

    N = [1.0] + [0.0] * degree
    left = [0.0] * (degree + 1)
    right = [0.0] * (degree + 1)
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            temp = N[r] / (right[r + 1] + left[j - r])
            N[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        N[j] = saved
    return N


def de_boor(degree: int, knots: Sequence[float], controls: Sequence[Vec], u: float) -> List[float]:
    """Evaluate a non-rational B-spline at ``u`` with de Boor's algorithm."""

    n = len(controls) - 1
    k = find_span(n, degree, u, knots)
    d = [list(controls[j + k - degree]) for j in range(degree + 1)]
    for r in range(1, degree + 1):
        for j in range(degree, r - 1, -1):
            lo = knots[j + k - degree]
            denom = knots[j + 1 + k - r] - lo
            alpha = 0.0 if denom == 0.0 else (u - lo) / denom
            d[j] = [(1.0 - alpha) * a + alpha * b for a, b in zip(d[j - 1], d[j])]
    return d[degree]


def derivative_controls(degree: int, knots: Sequence[float], controls: Sequence[Vec],
                        order: int) -> List[List[List[float]]]:
    """Control polygons of the derivative curves up to ``order``.

    Entry ``k`` holds the controls of the k-th derivative, a spline of
    degree ``degree - k`` over ``knots[k:len(knots) - k]``.  Orders
    beyond ``degree`` vanish and are returned as empty lists.
    """

    pk = [[list(c) for c in controls]]
    n = len(controls) - 1
    for k in range(1, order + 1):
        if k > degree:
            pk.append([])
            continue
        prev = pk[k - 1]
        cur = []
        for i in range(n - k + 1):
            denom = knots[i + degree + 1] - knots[i + k]
            if denom == 0.0:
                cur.append([0.0] * len(prev[i]))
                continue
            f = (degree - k + 1) / denom
            cur.append([f * (b - a) for a, b in zip(prev[i], prev[i + 1])])
        pk.append(cur)
    return pk


def spline_derivatives(degree: int, knots: Sequence[float], controls: Sequence[Vec],
                       u: float, order: int) -> List[List[float]]:
    """Derivatives ``C^(0..order)(u)`` of a non-rational B-spline."""

    dims = len(controls[0])
    pk = derivative_controls(degree, knots, controls, order)
    ders = []
    for k in range(order + 1):
        if k > degree:
            ders.append([0.0] * dims)
            continue
        sub_knots = knots[k:len(knots) - k] if k else knots
        ders.append(de_boor(degree - k, sub_knots, pk[k], u))
    return ders


def homogeneous(controls: Sequence[Sequence[float]], weights: Sequence[float], dims: int) -> List[List[float]]:
    """Weighted control points ``(w*x, w*y, ..., w)``."""

    return [[w * c[i] for i in range(dims)] + [w] for c, w in zip(controls, weights)]


def rational_derivatives(controls: Sequence[Sequence[float]], weights: Sequence[float],
                         knots: Sequence[float], degree: int, u: float, order: int,
                         dims: int = 3) -> List[List[float]]:
    """Derivatives ``C^(0..order)(u)`` of a NURBS curve.

    Homogeneous derivatives are split into the weighted numerator
    ``A^(k)`` and weight ``w^(k)`` and combined with

    ``C^(k) = (A^(k) - sum_{i=1..k} binom(k, i) w^(i) C^(k-i)) / w``
    """

    cw = homogeneous(controls, weights, dims)
    hders = spline_derivatives(degree, knots, cw, u, order)
    w0 = hders[0][dims]
    ck: List[List[float]] = []
    for k in range(order + 1):
        v = list(hders[k][:dims])
        for i in range(1, k + 1):
            f = comb(k, i) * hders[i][dims]
            prev = ck[k - i]
            v = [a - f * b for a, b in zip(v, prev)]
        ck.append([a / w0 for a in v])
    return ck


# -----------------------------------------------------------------------------
# Interpolation
# -----------------------------------------------------------------------------

def chord_parameters(points: Sequence[Sequence[float]], method: str = 'chord') -> List[float]:
    """Parameter values on ``[0, 1]`` for fitting ``points``.

    ``method`` is ``'chord'`` (chord length), ``'centripetal'`` (square
    root of chord length) or ``'uniform'``.
    """

    if method not in PARAMETERIZATIONS:
        raise ValueError('unknown parameterization {!r}, expected one of {}'
                         .format(method, PARAMETERIZATIONS))
    count = len(points)
    if count < 2:
        raise ConstraintViolationError('need at least two points to parameterize')
    if method == 'uniform':
        return [i / (count - 1) for i in range(count)]

    steps = []
    for a, b in zip(points[:-1], points[1:]):
        d = sqrt(sum((b[i] - a[i]) ** 2 for i in range(3)))
        if d == 0.0:
            raise ConstraintViolationError('coincident consecutive fitting points',
                                           {'point': list(a)})
        steps.append(sqrt(d) if method == 'centripetal' else d)
    total = sum(steps)
    params = [0.0]
    acc = 0.0
    for s in steps[:-1]:
        acc += s
        params.append(acc / total)
    params.append(1.0)
    return params


def averaged_knots(params: Sequence[float], degree: int) -> List[float]:
    """Clamped knot vector by averaging ``degree`` consecutive parameters."""

    n = len(params) - 1
    knots = [0.0] * (degree + 1)
    for j in range(1, n - degree + 1):
        knots.append(sum(params[j:j + degree]) / degree)
    knots.extend([1.0] * (degree + 1))
    return knots


def interpolate(points: Sequence[Sequence[float]], degree: int = 3,
                method: str = 'chord') -> Tuple[List[List[float]], List[float], List[float]]:
    """Fit a clamped B-spline of ``degree`` through ``points``.

    Returns ``(controls, knots, params)`` where ``params[k]`` is the
    parameter at which the curve passes through ``points[k]``.  The
    collocation matrix has at most ``degree`` non-zero diagonals on each
    side of the main diagonal, so it is stored in LAPACK band form and
    handed to :func:`scipy.linalg.solve_banded`.
    """

    count = len(points)
    if degree < 1:
        raise DegenerateGeometryError('interpolation degree must be >= 1')
    if count < degree + 1:
        raise ConstraintViolationError('degree {} interpolation needs at least {} points, got {}'
                                       .format(degree, degree + 1, count))
    params = chord_parameters(points, method)
    knots = averaged_knots(params, degree)

    n = count - 1
    bandwidth = degree
    banded = np.zeros((2 * bandwidth + 1, count))
    for row, u in enumerate(params):
        span = find_span(n, degree, u, knots)
        for i, value in enumerate(basis_functions(span, u, degree, knots)):
            col = span - degree + i
            banded[bandwidth + row - col, col] = value

    rhs = np.array([[float(p[0]), float(p[1]), float(p[2])] for p in points])
    solution = solve_banded((bandwidth, bandwidth), banded, rhs)
    controls = [[float(x), float(y), float(z), 1.0] for x, y, z in solution]
    return controls, knots, params


__all__ = [
    'PARAMETERIZATIONS',
    'clamped_knots',
    'validate_knots',
    'domain',
    'find_span',
    'basis_functions',
    'de_boor',
    'derivative_controls',
    'spline_derivatives',
    'homogeneous',
    'rational_derivatives',
    'chord_parameters',
    'averaged_knots',
    'interpolate',
]
