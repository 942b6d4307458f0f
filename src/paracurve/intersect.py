"""Intersections between planar paracurve curves.

Every function returns a list of ``(point, t0, t1)`` tuples, ordered by
``t0``: the world-space intersection point and its parameter on the
first and the second curve.

Line/line and line/conic pairs are solved in closed form.  Every other
pair goes through :func:`curve_x_curve`, which brackets crossings by
intersecting the chord polygons of both curves and polishes each
bracket with Newton-Raphson on the two parameters.  Overlapping
stretches and tangential contacts that the chord polygons do not cross
are not reported by the generic path.
"""

from __future__ import annotations

import logging
from math import sqrt
from typing import List, Optional, Tuple

from paracurve import config, geom
from paracurve.curve_algo import algorithm
from paracurve.curves import curve_dimension, curve_type, is_conic, is_line, is_nurbs, semi_axes

logger = logging.getLogger(__name__)

Intersection = Tuple[list, float, float]

# chord crossings this far outside a segment (as a fraction of it) still
# seed a Newton refinement
_CHORD_SLACK = 0.1


def _tol(tolerance):
    return config.DEFAULT_TOLERANCE if tolerance is None else tolerance


def _clamp01(t):
    return min(1.0, max(0.0, t))


def _cross2(a, b):
    return a[0] * b[1] - a[1] * b[0]


def _check_planar(*curves):
    for c in curves:
        if curve_dimension(c) != 2:
            raise ValueError('intersection needs 2D curves, got a 3D {}'.format(curve_type(c)))


def _within(s, length, tol):
    slack = tol / length
    return -slack <= s <= 1.0 + slack


def line_x_line(c0, c1, tolerance: Optional[float] = None) -> List[Intersection]:
    """Crossing of two line segments.

    Parallel segments, overlapping ones included, have no isolated
    crossing and give an empty list.
    """
    tol = _tol(tolerance)
    _check_planar(c0, c1)
    if not (is_line(c0) and is_line(c1)):
        raise ValueError('line_x_line needs two lines')
    a0 = algorithm(c0)
    a1 = algorithm(c1)
    p0 = a0.begin()
    p1 = a1.begin()
    d0 = geom.sub(a0.end(), p0)
    d1 = geom.sub(a1.end(), p1)
    l0 = geom.mag(d0)
    l1 = geom.mag(d1)
    den = _cross2(d0, d1)
    if abs(den) <= config.PARAMETER_EPSILON * l0 * l1:
        return []
    w = geom.sub(p1, p0)
    s = _cross2(w, d1) / den
    u = _cross2(w, d0) / den
    if not (_within(s, l0, tol) and _within(u, l1, tol)):
        return []
    s = _clamp01(s)
    return [(a0.point(s), s, _clamp01(u))]


def line_x_conic(line, conic, tolerance: Optional[float] = None) -> List[Intersection]:
    """Crossings of a line segment with a circle, ellipse or arc.

    The segment is expressed in the conic's frame, scaled to the unit
    circle, and the resulting quadratic in the line parameter is solved.
    A root pair closer than ``tolerance`` along the line is a tangency
    and is reported once.  Candidates off a partial arc are dropped.
    """
    tol = _tol(tolerance)
    _check_planar(line, conic)
    if not (is_line(line) and is_conic(conic)):
        raise ValueError('line_x_conic needs a line and a conic')
    la = algorithm(line)
    ca = algorithm(conic)
    p0 = la.begin()
    d = geom.sub(la.end(), p0)
    length = geom.mag(d)

    m = conic[1].make_world_matrix()
    center = m.apply_point(geom.point(0, 0))
    ux = m.apply_vector(geom.direction(1, 0))
    uy = m.apply_vector(geom.direction(0, 1))
    rx, ry = semi_axes(conic)
    w = geom.sub(p0, center)
    ax = geom.dot(w, ux) / rx
    ay = geom.dot(w, uy) / ry
    dx = geom.dot(d, ux) / rx
    dy = geom.dot(d, uy) / ry

    a = dx * dx + dy * dy
    b = 2.0 * (ax * dx + ay * dy)
    c = ax * ax + ay * ay - 1.0
    disc = b * b - 4.0 * a * c
    mid = -b / (2.0 * a)
    half = sqrt(abs(disc)) / (2.0 * a)
    if half * length <= tol:
        roots = [mid]
    elif disc < 0.0:
        return []
    else:
        roots = [mid - half, mid + half]

    ret = []
    for s in roots:
        if not _within(s, length, tol):
            continue
        s = _clamp01(s)
        p = la.point(s)
        u = ca.parameter(p, tolerance=tol)
        if u is None:
            logger.debug('line/conic candidate %s is off the arc', geom.vstr(p))
            continue
        ret.append((p, s, u))
    return ret


def _segments(curve):
    n = config.INTERSECT_SAMPLES
    if is_nurbs(curve):
        n = max(n, 2 * len(curve[2]['controls']))
    return n


def _chord_hit(p, q, r, s):
    """fractions along chords ``pq`` and ``rs`` where they cross, or None"""
    d0 = geom.sub(q, p)
    d1 = geom.sub(s, r)
    den = _cross2(d0, d1)
    if abs(den) < 1e-300:
        return None
    w = geom.sub(r, p)
    a = _cross2(w, d1) / den
    b = _cross2(w, d0) / den
    lo = -_CHORD_SLACK
    hi = 1.0 + _CHORD_SLACK
    if lo <= a <= hi and lo <= b <= hi:
        return _clamp01(a), _clamp01(b)
    return None


def _refine(a0, a1, s, u, tol):
    """Newton-Raphson on ``C0(s) - C1(u) = 0``; None if it does not land"""
    for _ in range(config.MAX_NEWTON_ITERATIONS):
        f = geom.sub(a0.point(s), a1.point(u))
        d0 = a0.derivative(s, 1)
        d1 = a1.derivative(u, 1)
        det = d1[0] * d0[1] - d0[0] * d1[1]
        if abs(det) < 1e-300:
            break
        ds = (f[0] * d1[1] - d1[0] * f[1]) / det
        du = (d0[1] * f[0] - d0[0] * f[1]) / det
        s = a0.normalize_parameter(s + ds)
        u = a1.normalize_parameter(u + du)
        if abs(ds) < config.PARAMETER_EPSILON and abs(du) < config.PARAMETER_EPSILON:
            break
    if geom.dist(a0.point(s), a1.point(u)) <= tol:
        return s, u
    return None


def curve_x_curve(c0, c1, tolerance: Optional[float] = None,
                  segments: Optional[int] = None) -> List[Intersection]:
    """Crossings of any two planar curves.

    Both curves are sampled into chord polygons (``segments`` chords
    each, by default ``config.INTERSECT_SAMPLES`` or twice the control
    count of a NURBS curve).  Every pair of crossing chords seeds a
    two-parameter Newton refinement; results within ``tolerance`` of an
    earlier one are merged.
    """
    tol = _tol(tolerance)
    _check_planar(c0, c1)
    a0 = algorithm(c0)
    a1 = algorithm(c1)
    n0 = segments or _segments(c0)
    n1 = segments or _segments(c1)
    ts0 = [i / n0 for i in range(n0 + 1)]
    ts1 = [j / n1 for j in range(n1 + 1)]
    pts0 = [a0.point(t) for t in ts0]
    pts1 = [a1.point(t) for t in ts1]

    found = []
    for i in range(n0):
        for j in range(n1):
            hit = _chord_hit(pts0[i], pts0[i + 1], pts1[j], pts1[j + 1])
            if hit is None:
                continue
            s = ts0[i] + hit[0] * (ts0[i + 1] - ts0[i])
            u = ts1[j] + hit[1] * (ts1[j + 1] - ts1[j])
            refined = _refine(a0, a1, s, u, tol)
            if refined is None:
                logger.debug('chord crossing near t0=%g, t1=%g did not refine', s, u)
                continue
            s, u = refined
            p = a0.point(s)
            if any(geom.dist(p, q) <= tol for q, _, _ in found):
                continue
            found.append((p, s, u))
    found.sort(key=lambda h: h[1])
    return found


def intersect(c0, c1, tolerance: Optional[float] = None) -> List[Intersection]:
    """Intersections of two planar curves, picking the closed form where one exists."""
    _check_planar(c0, c1)
    if is_line(c0) and is_line(c1):
        return line_x_line(c0, c1, tolerance)
    if is_line(c0) and is_conic(c1):
        return line_x_conic(c0, c1, tolerance)
    if is_conic(c0) and is_line(c1):
        swapped = [(p, t0, t1) for p, t1, t0 in line_x_conic(c1, c0, tolerance)]
        return sorted(swapped, key=lambda h: h[1])
    return curve_x_curve(c0, c1, tolerance)


__all__ = [
    'line_x_line',
    'line_x_conic',
    'curve_x_curve',
    'intersect',
]
