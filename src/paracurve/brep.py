"""Planar faces bounded by paracurve curves.

Topology hierarchy:
- brep_vertex: junction point between consecutive curves of a loop
- brep_edge: one curve bounded by a start and end vertex
- brep_coedge: oriented use of an edge inside a loop
- brep_loop: closed, ordered sequence of coedges
- brep_face: outer loop plus optional hole loops

Every entity is a tagged list ``[tag, payload, metadata_dict]`` whose
metadata carries a unique ``id``.  Faces are built only through
:func:`build_face` (or the convenience builders on top of it), which
validates the loops before anything is assembled: a gap between
consecutive curves, a loop that does not close, a loop that passes
through the same vertex twice or one that encloses no area raises
:class:`~paracurve.errors.TopologyError` and no face is returned.

Faces own deep copies of their curves, so later changes to the input
curves do not leak into the face.
"""

import logging
import uuid
from copy import deepcopy

from paracurve import config, geom
from paracurve.builders import (arc2_from_begin_center_end, circle2_from_begin_center_end,
                                circle2_from_center_radius, ellipse2_from_center_radii,
                                line2_from_begin_end, nurbs2_from_fitting_points)
from paracurve.curve_algo import algorithm
from paracurve.curves import copy_curve, curve_dimension, is_curve, is_line
from paracurve.errors import DegenerateGeometryError, TopologyError

logger = logging.getLogger(__name__)

# points per curve used for the enclosed-area estimate
_AREA_SAMPLES = 64


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def _generate_id():
    """Generate a unique ID for a BREP entity."""
    return str(uuid.uuid4())


def _tol(tolerance):
    return config.DEFAULT_TOLERANCE if tolerance is None else tolerance


# -----------------------------------------------------------------------------
# Entities
# -----------------------------------------------------------------------------

def brep_vertex(location, *, tolerance=None, tags=None):
    """Create a vertex: ``['brep_vertex', point, metadata_dict]``."""
    meta = {
        'id': _generate_id(),
        'tolerance': float(_tol(tolerance)),
        'tags': tags or {},
    }
    return ['brep_vertex', geom.point(location), meta]


def is_brep_vertex(obj):
    """Return True if obj is a BREP vertex."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] == 'brep_vertex'
            and geom.ispoint(obj[1]) and isinstance(obj[2], dict))


def vertex_location(v):
    """Return the location point of a vertex."""
    if not is_brep_vertex(v):
        raise ValueError("Not a BREP vertex")
    return deepcopy(v[1])


def brep_edge(curve, start_vertex, end_vertex, *, tags=None):
    """Create an edge: ``['brep_edge', curve, metadata_dict]``.

    The edge holds the curve itself, bounded by two vertices; a closed
    curve starts and ends on the same vertex.
    """
    if not is_curve(curve):
        raise ValueError('brep_edge needs curve data, got {!r}'.format(curve))
    if not (is_brep_vertex(start_vertex) and is_brep_vertex(end_vertex)):
        raise ValueError('brep_edge needs BREP vertices')
    meta = {
        'id': _generate_id(),
        'start_vertex': start_vertex,
        'end_vertex': end_vertex,
        'tags': tags or {},
    }
    return ['brep_edge', curve, meta]


def is_brep_edge(obj):
    """Return True if obj is a BREP edge."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] == 'brep_edge'
            and is_curve(obj[1]) and isinstance(obj[2], dict))


def edge_curve(e):
    """Return the curve of an edge (not a copy)."""
    if not is_brep_edge(e):
        raise ValueError("Not a BREP edge")
    return e[1]


def edge_vertices(e):
    """Return ``(start_vertex, end_vertex)`` of an edge."""
    if not is_brep_edge(e):
        raise ValueError("Not a BREP edge")
    return e[2]['start_vertex'], e[2]['end_vertex']


def brep_coedge(edge, *, sense=True):
    """Create a coedge: ``['brep_coedge', edge, metadata_dict]``.

    ``sense`` is True when the loop runs along the edge's curve direction.
    """
    if not is_brep_edge(edge):
        raise ValueError("Not a BREP edge")
    return ['brep_coedge', edge, {'id': _generate_id(), 'sense': bool(sense)}]


def is_brep_coedge(obj):
    """Return True if obj is a BREP coedge."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] == 'brep_coedge'
            and is_brep_edge(obj[1]) and isinstance(obj[2], dict))


def coedge_edge(c):
    if not is_brep_coedge(c):
        raise ValueError("Not a BREP coedge")
    return c[1]


def coedge_sense(c):
    if not is_brep_coedge(c):
        raise ValueError("Not a BREP coedge")
    return c[2]['sense']


def brep_loop(coedges, *, loop_type='outer', area=0.0, tags=None):
    """Create a loop: ``['brep_loop', coedges, metadata_dict]``.

    ``area`` is the signed enclosed area, positive for a
    counter-clockwise loop; :func:`build_face` measures it.
    """
    if loop_type not in ('outer', 'inner'):
        raise ValueError("loop_type must be 'outer' or 'inner', got {!r}".format(loop_type))
    meta = {
        'id': _generate_id(),
        'loop_type': loop_type,
        'orientation': 'ccw' if area > 0.0 else 'cw',
        'area': float(area),
        'tags': tags or {},
    }
    return ['brep_loop', list(coedges), meta]


def is_brep_loop(obj):
    """Return True if obj is a BREP loop."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] == 'brep_loop'
            and isinstance(obj[1], list) and isinstance(obj[2], dict))


def loop_coedges(loop):
    """Return the ordered coedges of a loop."""
    if not is_brep_loop(loop):
        raise ValueError("Not a BREP loop")
    return list(loop[1])


def loop_curves(loop):
    """Return the curves of a loop in loop order."""
    return [edge_curve(coedge_edge(c)) for c in loop_coedges(loop)]


def loop_type(loop):
    """Return the loop type ('outer' or 'inner')."""
    if not is_brep_loop(loop):
        raise ValueError("Not a BREP loop")
    return loop[2]['loop_type']


def loop_orientation(loop):
    """Return ``'ccw'`` or ``'cw'``."""
    if not is_brep_loop(loop):
        raise ValueError("Not a BREP loop")
    return loop[2]['orientation']


def loop_area(loop):
    """Return the signed area enclosed by a loop."""
    if not is_brep_loop(loop):
        raise ValueError("Not a BREP loop")
    return loop[2]['area']


def brep_face(border, holes=(), *, tags=None):
    """Create a face: ``['brep_face', [border, *holes], metadata_dict]``.

    Prefer :func:`build_face`, which validates the loops first.
    """
    loops = [border] + list(holes)
    if not all(is_brep_loop(lp) for lp in loops):
        raise ValueError('brep_face needs BREP loops')
    meta = {
        'id': _generate_id(),
        'tags': tags or {},
    }
    return ['brep_face', loops, meta]


def is_brep_face(obj):
    """Return True if obj is a BREP face."""
    return (isinstance(obj, list) and len(obj) == 3 and obj[0] == 'brep_face'
            and isinstance(obj[1], list) and isinstance(obj[2], dict))


def face_border(f):
    """Return the outer loop of a face."""
    if not is_brep_face(f):
        raise ValueError("Not a BREP face")
    return f[1][0]


def face_holes(f):
    """Return the hole loops of a face, possibly empty."""
    if not is_brep_face(f):
        raise ValueError("Not a BREP face")
    return list(f[1][1:])


def face_curves(f):
    """Return the curves of the outer loop, in the order they were given."""
    return loop_curves(face_border(f))


def face_area(f):
    """Return the unsigned area of a face, holes subtracted."""
    area = abs(loop_area(face_border(f)))
    for hole in face_holes(f):
        area -= abs(loop_area(hole))
    return area


# -----------------------------------------------------------------------------
# Loop validation
# -----------------------------------------------------------------------------

def _signed_area(algos):
    """shoelace area of the polygon through samples of every curve"""
    pts = []
    for algo in algos:
        count = 2 if is_line(algo.curve) else _AREA_SAMPLES
        pts.extend(algo.sample(count)[:-1])
    area = 0.0
    for a, b in zip(pts, pts[1:] + pts[:1]):
        area += a[0] * b[1] - b[0] * a[1]
    return 0.5 * area


def _build_loop(curves, loop_type, tol):
    curves = list(curves)
    if not curves:
        raise TopologyError('a loop needs at least one curve', {'loop_type': loop_type})
    for i, c in enumerate(curves):
        if not is_curve(c):
            raise TopologyError('loop member {} is not a curve'.format(i), {'index': i})
        if curve_dimension(c) != 2:
            raise TopologyError('loop member {} is not a 2D curve'.format(i), {'index': i})

    copies = [copy_curve(c) for c in curves]
    algos = [algorithm(c) for c in copies]
    begins = [a.begin() for a in algos]
    ends = [a.end() for a in algos]
    count = len(copies)

    for i in range(count):
        nxt = (i + 1) % count
        gap = geom.dist(ends[i], begins[nxt])
        if gap > tol:
            if nxt == 0:
                message = 'loop does not close: end of curve {} is {} from the first begin'
            else:
                message = 'gap between curve {} and the next: {}'
            raise TopologyError(message.format(i, gap),
                                {'index': i, 'gap': gap, 'end': ends[i],
                                 'begin': begins[nxt], 'loop_type': loop_type})

    # begins[i] is the junction shared by curve i-1 and curve i
    for i in range(count):
        for j in range(i + 1, count):
            if geom.dist(begins[i], begins[j]) <= tol:
                raise TopologyError('loop passes through vertex {} twice'
                                    .format(geom.vstr(begins[i])),
                                    {'first': i, 'second': j, 'vertex': begins[i],
                                     'loop_type': loop_type})

    area = _signed_area(algos)
    if abs(area) <= tol * tol:
        raise TopologyError('loop encloses no area', {'area': area, 'loop_type': loop_type})

    vertices = [brep_vertex(p, tolerance=tol) for p in begins]
    coedges = []
    for i, c in enumerate(copies):
        edge = brep_edge(c, vertices[i], vertices[(i + 1) % count])
        coedges.append(brep_coedge(edge))
    loop = brep_loop(coedges, loop_type=loop_type, area=area)
    logger.debug('built %s loop of %d curves, %s, area %g',
                 loop_type, count, loop_orientation(loop), area)
    return loop


def build_face(curves, holes=None, tolerance=None):
    """Build a planar face bounded by ``curves``.

    Parameters
    ----------
    curves : sequence of 2D curves
        Outer boundary, in order; the end of each curve must meet the
        begin of the next, and the last must return to the first.
    holes : sequence of sequences of 2D curves, optional
        Inner boundaries, each validated like the outer one.
    tolerance : float, optional
        Endpoint coincidence tolerance, ``config.DEFAULT_TOLERANCE`` by
        default.

    Returns
    -------
    list
        ``['brep_face', loops, metadata_dict]``; the face owns copies of
        the curves and keeps their order.

    Raises
    ------
    TopologyError
        On a gap, a loop that fails to close, a repeated junction vertex
        or a loop enclosing no area.  ``details`` names the culprit.
    """
    tol = _tol(tolerance)
    border = _build_loop(curves, 'outer', tol)
    inner = [_build_loop(h, 'inner', tol) for h in (holes or [])]
    return brep_face(border, inner)


# -----------------------------------------------------------------------------
# Edge builders
# -----------------------------------------------------------------------------

def edge_from_curve(curve, tolerance=None):
    """Wrap a curve in an edge, with vertices at its begin and end.

    A closed curve gets one vertex used at both ends.
    """
    tol = _tol(tolerance)
    algo = algorithm(curve)
    start = brep_vertex(algo.begin(), tolerance=tol)
    if algo.is_closed(tol):
        end = start
    else:
        end = brep_vertex(algo.end(), tolerance=tol)
    return brep_edge(curve, start, end)


def line_edge2(b, e):
    return edge_from_curve(line2_from_begin_end(b, e))


def circle_edge2(center, radius):
    return edge_from_curve(circle2_from_center_radius(center, radius))


def circle_edge2_from_begin_center_end(b, c, e):
    return edge_from_curve(circle2_from_begin_center_end(b, c, e))


def arc_edge2_from_begin_center_end(b, c, e):
    return edge_from_curve(arc2_from_begin_center_end(b, c, e))


def nurbs_edge2(points, degree=None):
    return edge_from_curve(nurbs2_from_fitting_points(points, degree))


# -----------------------------------------------------------------------------
# Face builders
# -----------------------------------------------------------------------------

def polygon_face(points, tolerance=None):
    """Face bounded by straight lines through ``points``, closing last to first.

    A final point repeating the first is dropped.
    """
    tol = _tol(tolerance)
    pts = [geom.point(p) for p in points]
    for p in pts:
        p[2] = 0.0
    if len(pts) > 1 and geom.dist(pts[0], pts[-1]) <= tol:
        pts = pts[:-1]
    if len(pts) < 3:
        raise TopologyError('a polygon face needs at least 3 distinct points, got {}'
                            .format(len(pts)), {'points': pts})
    count = len(pts)
    lines = [line2_from_begin_end(pts[i], pts[(i + 1) % count], tol) for i in range(count)]
    return build_face(lines, tolerance=tol)


def rectangle_face(size, origin=(0.0, 0.0)):
    """Axis-aligned rectangle, counter-clockwise from the ``origin`` corner."""
    w, h = size[0], size[1]
    if not (geom.isgoodnum(w) and geom.isgoodnum(h)) or w <= 0 or h <= 0:
        raise DegenerateGeometryError('rectangle size must be positive, got {!r}'.format(size),
                                      {'size': size})
    x, y = origin[0], origin[1]
    return polygon_face([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])


def circle_face(center, radius):
    return build_face([circle2_from_center_radius(center, radius)])


def ellipse_face(center, radii, rotation=0.0):
    return build_face([ellipse2_from_center_radii(center, radii, rotation)])


__all__ = [
    'brep_vertex', 'is_brep_vertex', 'vertex_location',
    'brep_edge', 'is_brep_edge', 'edge_curve', 'edge_vertices',
    'brep_coedge', 'is_brep_coedge', 'coedge_edge', 'coedge_sense',
    'brep_loop', 'is_brep_loop', 'loop_coedges', 'loop_curves', 'loop_type',
    'loop_orientation', 'loop_area',
    'brep_face', 'is_brep_face', 'face_border', 'face_holes', 'face_curves', 'face_area',
    'build_face',
    'edge_from_curve', 'line_edge2', 'circle_edge2', 'circle_edge2_from_begin_center_end',
    'arc_edge2_from_begin_center_end', 'nurbs_edge2',
    'polygon_face', 'rectangle_face', 'circle_face', 'ellipse_face',
]
