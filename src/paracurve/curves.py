"""Curve data for paracurve.

Every curve is a tagged list ``[tag, transform, metadata_dict]``, where
``tag`` names the curve family, ``transform`` is the owned
:class:`~paracurve.transform.Transform2` or
:class:`~paracurve.transform.Transform3` placing the curve's local frame,
and the metadata dictionary holds the family's geometric parameters:

- ``line``: ``length``
- ``circle``: ``radius``
- ``circlearc``: ``radius``, ``radian0``, ``radian1``
- ``ellipse``: ``radius0``, ``radius1``
- ``ellipsearc``: ``radius0``, ``radius1``, ``radian0``, ``radian1``
- ``arc``: ``radius`` (x/y semi-axes), ``radian0``, ``radian1``
- ``nurbs``: ``controls``, ``knots``, ``weights``, ``degree``

The curve dimension is the dimension of its transform.  All families
are parameterized on ``t`` in ``[0, 1]``.  Constructors validate their
input and raise :class:`~paracurve.errors.DegenerateGeometryError`
rather than letting a bad curve produce NaNs at evaluation time.
"""

from __future__ import annotations

from copy import deepcopy

from paracurve import geom
from paracurve.errors import DegenerateGeometryError
from paracurve.nurbs import clamped_knots, validate_knots
from paracurve.transform import Transform2, Transform3

CURVE_TYPES = ('line', 'circle', 'circlearc', 'ellipse', 'ellipsearc', 'arc', 'nurbs')

CONIC_TYPES = ('circle', 'circlearc', 'ellipse', 'ellipsearc', 'arc')


# -----------------------------------------------------------------------------
# Validation helpers
# -----------------------------------------------------------------------------

def _transform(transform, dimension):
    if transform is None:
        return Transform2() if dimension == 2 else Transform3()
    expected = Transform2 if dimension == 2 else Transform3
    if not isinstance(transform, expected):
        raise TypeError('a {}D curve needs a {}, got {!r}'
                        .format(dimension, expected.__name__, transform))
    return transform


def _positive(name, value):
    if not geom.isgoodnum(value):
        raise DegenerateGeometryError('{} must be a finite number, got {!r}'.format(name, value))
    if value <= 0:
        raise DegenerateGeometryError('{} must be positive, got {}'.format(name, value),
                                      {name: value})
    return float(value)


def _angles(radian0, radian1):
    for name, value in (('radian0', radian0), ('radian1', radian1)):
        if not geom.isgoodnum(value):
            raise DegenerateGeometryError('{} must be a finite number, got {!r}'.format(name, value))
    if radian0 == radian1:
        raise DegenerateGeometryError('arc has an empty angle range',
                                      {'radian0': radian0, 'radian1': radian1})
    return float(radian0), float(radian1)


# -----------------------------------------------------------------------------
# Family constructors
# -----------------------------------------------------------------------------

def _line(length, transform, dimension):
    meta = {'length': _positive('length', length)}
    return ['line', _transform(transform, dimension), meta]


def _circle(radius, transform, dimension):
    meta = {'radius': _positive('radius', radius)}
    return ['circle', _transform(transform, dimension), meta]


def _circlearc(radius, radian0, radian1, transform, dimension):
    r0, r1 = _angles(radian0, radian1)
    meta = {'radius': _positive('radius', radius), 'radian0': r0, 'radian1': r1}
    return ['circlearc', _transform(transform, dimension), meta]


def _ellipse(radius0, radius1, transform, dimension):
    meta = {'radius0': _positive('radius0', radius0),
            'radius1': _positive('radius1', radius1)}
    return ['ellipse', _transform(transform, dimension), meta]


def _ellipsearc(radius0, radius1, radian0, radian1, transform, dimension):
    r0, r1 = _angles(radian0, radian1)
    meta = {'radius0': _positive('radius0', radius0),
            'radius1': _positive('radius1', radius1),
            'radian0': r0, 'radian1': r1}
    return ['ellipsearc', _transform(transform, dimension), meta]


def _arc(radius, radian0, radian1, transform, dimension):
    if not isinstance(radius, (list, tuple)) or len(radius) < 2:
        raise DegenerateGeometryError('arc radius must be a pair of semi-axes, got {!r}'.format(radius))
    r0, r1 = _angles(radian0, radian1)
    meta = {'radius': (_positive('radius.x', radius[0]), _positive('radius.y', radius[1])),
            'radian0': r0, 'radian1': r1}
    return ['arc', _transform(transform, dimension), meta]


def _nurbs(controls, knots, weights, degree, transform, dimension):
    if isinstance(degree, bool) or not isinstance(degree, int) or degree < 1:
        raise DegenerateGeometryError('NURBS degree must be an integer >= 1, got {!r}'.format(degree))
    if len(controls) < degree + 1:
        raise DegenerateGeometryError(
            'degree {} NURBS needs at least {} control points, got {}'
            .format(degree, degree + 1, len(controls)),
            {'degree': degree, 'controls': len(controls)})
    ctrl = []
    for c in controls:
        try:
            p = geom.point(c)
        except ValueError as exc:
            raise DegenerateGeometryError('bad NURBS control point {!r}'.format(c)) from exc
        if dimension == 2:
            p[2] = 0.0
        ctrl.append(p)

    if knots is None:
        knots = clamped_knots(len(ctrl), degree)
    knots = [float(k) for k in knots]
    validate_knots(knots, len(ctrl), degree)

    if weights is None:
        weights = [1.0] * len(ctrl)
    if len(weights) != len(ctrl):
        raise DegenerateGeometryError('expected {} weights, got {}'.format(len(ctrl), len(weights)))
    weights = [_positive('weight', w) for w in weights]

    meta = {'controls': ctrl, 'knots': knots, 'weights': weights, 'degree': degree}
    return ['nurbs', _transform(transform, dimension), meta]


def line2(length, transform=None):
    """2D line of ``length`` along the local x axis."""
    return _line(length, transform, 2)


def line3(length, transform=None):
    """3D line of ``length`` along the local x axis."""
    return _line(length, transform, 3)


def circle2(radius, transform=None):
    """Full 2D circle about the local origin."""
    return _circle(radius, transform, 2)


def circle3(radius, transform=None):
    """Full 3D circle in the local XY plane."""
    return _circle(radius, transform, 3)


def circlearc2(radius, radian0, radian1, transform=None):
    """2D circular arc from ``radian0`` to ``radian1``.

    The arc is traversed counter-clockwise when ``radian1 > radian0``
    and clockwise otherwise.
    """
    return _circlearc(radius, radian0, radian1, transform, 2)


def circlearc3(radius, radian0, radian1, transform=None):
    return _circlearc(radius, radian0, radian1, transform, 3)


def ellipse2(radius0, radius1, transform=None):
    """Full 2D ellipse with semi-axes ``radius0`` (x) and ``radius1`` (y)."""
    return _ellipse(radius0, radius1, transform, 2)


def ellipse3(radius0, radius1, transform=None):
    return _ellipse(radius0, radius1, transform, 3)


def ellipsearc2(radius0, radius1, radian0, radian1, transform=None):
    return _ellipsearc(radius0, radius1, radian0, radian1, transform, 2)


def ellipsearc3(radius0, radius1, radian0, radian1, transform=None):
    return _ellipsearc(radius0, radius1, radian0, radian1, transform, 3)


def arc2(radius, radian0, radian1, transform=None):
    """2D elliptical arc; ``radius`` is the (x, y) pair of semi-axes."""
    return _arc(radius, radian0, radian1, transform, 2)


def arc3(radius, radian0, radian1, transform=None):
    return _arc(radius, radian0, radian1, transform, 3)


def nurbs2(controls, knots=None, weights=None, degree=3, transform=None):
    """2D NURBS curve.

    Parameters
    ----------
    controls : sequence of points
        At least ``degree + 1`` control points; z is dropped.
    knots : sequence of float, optional
        Non-decreasing knot vector of ``len(controls) + degree + 1``
        values.  Defaults to a clamped uniform vector on ``[0, 1]``.
    weights : sequence of float, optional
        Positive weights, one per control point.  Defaults to 1.
    degree : int
        Polynomial degree, at least 1.
    """
    return _nurbs(controls, knots, weights, degree, transform, 2)


def nurbs3(controls, knots=None, weights=None, degree=3, transform=None):
    """3D NURBS curve; see :func:`nurbs2`."""
    return _nurbs(controls, knots, weights, degree, transform, 3)


# -----------------------------------------------------------------------------
# Predicates and accessors
# -----------------------------------------------------------------------------

def is_curve(obj):
    """Return True if obj is a curve data list."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] in CURVE_TYPES
            and isinstance(obj[1], (Transform2, Transform3)) and isinstance(obj[2], dict))


def _is_type(obj, tag):
    return is_curve(obj) and obj[0] == tag


def is_line(obj):
    return _is_type(obj, 'line')


def is_circle(obj):
    return _is_type(obj, 'circle')


def is_circlearc(obj):
    return _is_type(obj, 'circlearc')


def is_ellipse(obj):
    return _is_type(obj, 'ellipse')


def is_ellipsearc(obj):
    return _is_type(obj, 'ellipsearc')


def is_arc(obj):
    return _is_type(obj, 'arc')


def is_nurbs(obj):
    return _is_type(obj, 'nurbs')


def is_conic(obj):
    """Return True for the circle, ellipse and arc families."""
    return is_curve(obj) and obj[0] in CONIC_TYPES


def _require(curve):
    if not is_curve(curve):
        raise ValueError('not a curve: {!r}'.format(curve))


def curve_type(curve):
    """Return the family tag of a curve."""
    _require(curve)
    return curve[0]


def curve_dimension(curve):
    """Return 2 or 3."""
    _require(curve)
    return curve[1].dimension


def curve_transform(curve):
    """Return the transform owned by a curve (not a copy)."""
    _require(curve)
    return curve[1]


def set_curve_transform(curve, transform):
    """Replace the transform of a curve.

    This is the only sanctioned mutation of curve data.  Evaluating a
    curve on another thread while it is being mutated is undefined.
    """
    _require(curve)
    curve[1] = _transform(transform, curve[1].dimension)


def curve_params(curve):
    """Return a copy of the geometric parameters of a curve."""
    _require(curve)
    return deepcopy(curve[2])


def angle_range(curve):
    """Return ``(radian0, radian1)`` for a conic; full curves span ``2*pi``."""
    _require(curve)
    meta = curve[2]
    if curve[0] in ('circle', 'ellipse'):
        return 0.0, geom.pi2
    if curve[0] in CONIC_TYPES:
        return meta['radian0'], meta['radian1']
    raise ValueError('{} curves have no angle range'.format(curve[0]))


def semi_axes(curve):
    """Return the local (x, y) semi-axes of a conic."""
    _require(curve)
    meta = curve[2]
    kind = curve[0]
    if kind in ('circle', 'circlearc'):
        return meta['radius'], meta['radius']
    if kind in ('ellipse', 'ellipsearc'):
        return meta['radius0'], meta['radius1']
    if kind == 'arc':
        return meta['radius']
    raise ValueError('{} curves have no semi-axes'.format(kind))


def is_positive(curve):
    """True when the curve runs counter-clockwise in its local frame.

    Full circles and ellipses are always positive; arcs are positive iff
    ``radian1 > radian0``.  Lines and NURBS have no orientation and
    report True.
    """
    _require(curve)
    if curve[0] in ('circlearc', 'ellipsearc', 'arc'):
        return curve[2]['radian1'] > curve[2]['radian0']
    return True


def copy_curve(curve):
    """Return a deep copy of a curve.

    The copy owns a new transform; a parent reference is shared, never
    copied.
    """
    _require(curve)
    return deepcopy(curve)


__all__ = [
    'CURVE_TYPES',
    'CONIC_TYPES',
    'line2', 'line3',
    'circle2', 'circle3',
    'circlearc2', 'circlearc3',
    'ellipse2', 'ellipse3',
    'ellipsearc2', 'ellipsearc3',
    'arc2', 'arc3',
    'nurbs2', 'nurbs3',
    'is_curve', 'is_line', 'is_circle', 'is_circlearc', 'is_ellipse',
    'is_ellipsearc', 'is_arc', 'is_nurbs', 'is_conic',
    'curve_type', 'curve_dimension', 'curve_transform', 'set_curve_transform',
    'curve_params', 'angle_range', 'semi_axes', 'is_positive', 'copy_curve',
]
