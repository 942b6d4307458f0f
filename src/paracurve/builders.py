"""Curve builders for paracurve.

Pure factory functions: each takes geometric constraints (points,
centers, radii) and returns a fully populated curve data list from
:mod:`paracurve.curves`.  Inconsistent constraints raise
:class:`~paracurve.errors.ConstraintViolationError`; zero radii and
other degenerate inputs raise
:class:`~paracurve.errors.DegenerateGeometryError`.  Nothing is
returned on failure.

Points may be given as 2- or 3-tuples or as homogeneous points; the 2D
builders ignore z.
"""

from __future__ import annotations

import logging
from math import atan2, cos, sin, sqrt

from paracurve import config, geom
from paracurve.curves import (arc2, arc3, circle2, circle3, circlearc2, circlearc3,
                              ellipse2, line2, line3, nurbs2, nurbs3)
from paracurve.errors import ConstraintViolationError, DegenerateGeometryError
from paracurve.nurbs import interpolate
from paracurve.transform import Transform2, Transform3

logger = logging.getLogger(__name__)

_ZAXIS = [0.0, 0.0, 1.0, 0.0]


def _point2(p):
    q = geom.point(p)
    q[2] = 0.0
    return q


def _tol(tolerance):
    return config.DEFAULT_TOLERANCE if tolerance is None else tolerance


def _perpendicular(v):
    """some unit vector perpendicular to ``v``, preferring the x axis"""
    n = geom.normalize(v)
    for axis in ([1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0]):
        x = geom.sub(axis, geom.scale3(n, geom.dot(axis, n)))
        if geom.mag(x) > 0.1:
            return geom.normalize(x)
    # unreachable for a unit n, at least one of x/y is far from parallel
    raise DegenerateGeometryError('no perpendicular to {}'.format(geom.vstr(v)))


## lines
## -----

def line2_from_begin_end(b, e, tolerance=None):
    """2D line from ``b`` to ``e``.

    The transform sits at ``b`` rotated by the angle of ``e - b``, so
    ``point(t) = b + t * (e - b)``.
    """
    b = _point2(b)
    e = _point2(e)
    d = geom.sub(e, b)
    length = geom.mag(d)
    if length <= _tol(tolerance):
        raise ConstraintViolationError('line begin and end coincide',
                                       {'begin': b, 'end': e})
    return line2(length, Transform2(b, geom.angle2(d)))


def line3_from_begin_end(b, e, tolerance=None):
    """3D line from ``b`` to ``e``; the roll about the line is arbitrary."""
    b = geom.point(b)
    e = geom.point(e)
    d = geom.sub(e, b)
    length = geom.mag(d)
    if length <= _tol(tolerance):
        raise ConstraintViolationError('line begin and end coincide',
                                       {'begin': b, 'end': e})
    normal = _perpendicular(d)
    return line3(length, Transform3.from_frame(b, d, normal))


## circles and arcs
## ----------------

def circle2_from_center_radius(c, r):
    return circle2(r, Transform2(_point2(c)))


def circle3_from_center_radius(c, r, normal=(0.0, 0.0, 1.0)):
    """Full 3D circle about ``c`` in the plane perpendicular to ``normal``."""
    n = geom.direction(normal)
    if geom.mag(n) < geom.epsilon:
        raise DegenerateGeometryError('circle normal has zero length')
    return circle3(r, Transform3.from_frame(geom.point(c), _perpendicular(n), n))


def _sweep(lx, ly, full):
    """counter-clockwise angle on (0, 2pi] from the local x axis to (lx, ly)"""
    if full:
        return geom.pi2
    a = atan2(ly, lx) % geom.pi2
    return a if a > 0.0 else geom.pi2


def _check_radius(rb, re, tol, b, c, e):
    if rb <= tol:
        raise DegenerateGeometryError('begin point coincides with the center',
                                      {'begin': b, 'center': c})
    if abs(rb - re) > tol:
        raise ConstraintViolationError(
            'begin and end are not equidistant from the center: {} vs {}'.format(rb, re),
            {'begin': b, 'center': c, 'end': e, 'radius0': rb, 'radius1': re})


def circle2_from_begin_center_end(b, c, e, tolerance=None):
    """Counter-clockwise circular arc about ``c`` from ``b`` to ``e``.

    The transform sits at ``c`` rotated to the angle of ``b``, so
    ``radian0`` is always 0.  When ``e`` coincides with ``b`` the arc is
    the whole circle (``radian1 = 2*pi``).
    """
    tol = _tol(tolerance)
    b = _point2(b)
    c = _point2(c)
    e = _point2(e)
    vb = geom.sub(b, c)
    ve = geom.sub(e, c)
    rb = geom.mag(vb)
    _check_radius(rb, geom.mag(ve), tol, b, c, e)
    rotation = geom.angle2(vb)
    lx, ly = _local2(ve, rotation)
    sweep = _sweep(lx, ly, geom.dist(b, e) <= tol)
    return circlearc2(rb, 0.0, sweep, Transform2(c, rotation))


def _local2(v, rotation):
    """components of ``v`` in a frame rotated by ``rotation``"""
    x = [cos(rotation), sin(rotation), 0.0, 0.0]
    y = [-sin(rotation), cos(rotation), 0.0, 0.0]
    return geom.dot(v, x), geom.dot(v, y)


def _plane3(b, c, e, normal, tol):
    """local frame axes ``(x, y, n)`` for a 3D arc about ``c`` starting at ``b``"""
    vb = geom.sub(b, c)
    ve = geom.sub(e, c)
    if normal is None:
        n = geom.cross(vb, ve)
        if geom.mag(n) <= tol * max(geom.mag(vb), 1.0):
            # begin, center and end are collinear, the plane is open
            if abs(geom.dot(vb, _ZAXIS)) <= tol:
                logger.debug('arc points are collinear, falling back to the XY plane')
                n = _ZAXIS
            else:
                raise ConstraintViolationError(
                    'arc plane is undetermined by collinear points, pass a normal',
                    {'begin': b, 'center': c, 'end': e})
    else:
        n = geom.direction(normal)
    if geom.mag(n) < geom.epsilon:
        raise DegenerateGeometryError('arc normal has zero length')
    n = geom.normalize(n)
    for name, v in (('begin', vb), ('end', ve)):
        if abs(geom.dot(v, n)) > tol:
            raise ConstraintViolationError('{} point is off the arc plane'.format(name),
                                           {name: v, 'normal': n})
    x = geom.normalize(vb)
    y = geom.normalize(geom.cross(n, x))
    return x, y, n


def circle3_from_begin_center_end(b, c, e, normal=None, tolerance=None):
    """3D counterpart of :func:`circle2_from_begin_center_end`.

    The arc runs counter-clockwise about ``normal``.  Without a normal
    the plane is spanned by ``b - c`` and ``e - c``, which leaves a half
    or full circle ambiguous unless the points lie in the XY plane.
    """
    tol = _tol(tolerance)
    b = geom.point(b)
    c = geom.point(c)
    e = geom.point(e)
    rb = geom.dist(b, c)
    _check_radius(rb, geom.dist(e, c), tol, b, c, e)
    x, y, n = _plane3(b, c, e, normal, tol)
    ve = geom.sub(e, c)
    sweep = _sweep(geom.dot(ve, x), geom.dot(ve, y), geom.dist(b, e) <= tol)
    return circlearc3(rb, 0.0, sweep, Transform3.from_frame(c, x, n))


def _ellipse_through(lx, ly, rx, tol, b, c, e):
    """second semi-axis and end angle of the axis-aligned ellipse through (lx, ly)"""
    if abs(ly) <= tol:
        raise ConstraintViolationError(
            'end point lies on the first semi-axis, the second one is unconstrained',
            {'begin': b, 'center': c, 'end': e})
    ratio = (lx * lx) / (rx * rx)
    if ratio >= 1.0:
        raise ConstraintViolationError(
            'no ellipse with first semi-axis {} passes through the end point'.format(rx),
            {'begin': b, 'center': c, 'end': e})
    ry = abs(ly) / sqrt(1.0 - ratio)
    return ry, atan2(ly / ry, lx / rx) % geom.pi2


def arc2_from_begin_center_end(b, c, e, tolerance=None):
    """Elliptical arc about ``c`` from ``b`` to ``e``.

    Three points do not fix an ellipse, so the first semi-axis is taken
    to run from ``c`` through ``b``; the second semi-axis is the one
    that puts ``e`` on the curve.  The arc runs counter-clockwise.
    Raises :class:`ConstraintViolationError` when ``e`` lies on the
    first axis or outside the band the first semi-axis allows.
    """
    tol = _tol(tolerance)
    b = _point2(b)
    c = _point2(c)
    e = _point2(e)
    vb = geom.sub(b, c)
    rx = geom.mag(vb)
    if rx <= tol:
        raise DegenerateGeometryError('begin point coincides with the center',
                                      {'begin': b, 'center': c})
    rotation = geom.angle2(vb)
    lx, ly = _local2(geom.sub(e, c), rotation)
    ry, sweep = _ellipse_through(lx, ly, rx, tol, b, c, e)
    logger.debug('arc through %s solved with semi-axes (%g, %g)', geom.vstr(e), rx, ry)
    return arc2((rx, ry), 0.0, sweep, Transform2(c, rotation))


def arc3_from_begin_center_end(b, c, e, normal=None, tolerance=None):
    """3D counterpart of :func:`arc2_from_begin_center_end`."""
    tol = _tol(tolerance)
    b = geom.point(b)
    c = geom.point(c)
    e = geom.point(e)
    rx = geom.dist(b, c)
    if rx <= tol:
        raise DegenerateGeometryError('begin point coincides with the center',
                                      {'begin': b, 'center': c})
    x, y, n = _plane3(b, c, e, normal, tol)
    ve = geom.sub(e, c)
    ry, sweep = _ellipse_through(geom.dot(ve, x), geom.dot(ve, y), rx, tol, b, c, e)
    return arc3((rx, ry), 0.0, sweep, Transform3.from_frame(c, x, n))


def ellipse2_from_center_radii(c, radii, rotation=0.0):
    """Full ellipse about ``c``; ``radii`` are the semi-axes before ``rotation``."""
    return ellipse2(radii[0], radii[1], Transform2(_point2(c), rotation))


## fitted NURBS
## ------------

def _fit(points, degree, method, dimension):
    pts = []
    for p in points:
        try:
            q = geom.point(p)
        except ValueError as exc:
            raise ConstraintViolationError('bad fitting point {!r}'.format(p)) from exc
        if dimension == 2:
            q[2] = 0.0
        pts.append(q)
    if len(pts) < 2:
        raise ConstraintViolationError('NURBS fitting needs at least two points, got {}'
                                       .format(len(pts)))
    if degree > len(pts) - 1:
        logger.debug('reducing fitting degree from %d to %d for %d points',
                     degree, len(pts) - 1, len(pts))
        degree = len(pts) - 1
    controls, knots, _ = interpolate(pts, degree, method)
    return controls, knots, degree


def nurbs2_from_fitting_points(points, degree=None, method='chord'):
    """Clamped 2D B-spline interpolating ``points``.

    Point ``k`` is reached at the parameter
    ``nurbs.chord_parameters(points, method)[k]``.  With fewer than
    ``degree + 1`` points the degree drops to ``len(points) - 1``.
    """
    if degree is None:
        degree = config.DEFAULT_NURBS_DEGREE
    controls, knots, degree = _fit(points, degree, method, 2)
    return nurbs2(controls, knots=knots, degree=degree)


def nurbs3_from_fitting_points(points, degree=None, method='chord'):
    """Clamped 3D B-spline interpolating ``points``; see :func:`nurbs2_from_fitting_points`."""
    if degree is None:
        degree = config.DEFAULT_NURBS_DEGREE
    controls, knots, degree = _fit(points, degree, method, 3)
    return nurbs3(controls, knots=knots, degree=degree)


__all__ = [
    'line2_from_begin_end',
    'line3_from_begin_end',
    'circle2_from_center_radius',
    'circle3_from_center_radius',
    'circle2_from_begin_center_end',
    'circle3_from_begin_center_end',
    'arc2_from_begin_center_end',
    'arc3_from_begin_center_end',
    'ellipse2_from_center_radii',
    'nurbs2_from_fitting_points',
    'nurbs3_from_fitting_points',
]
