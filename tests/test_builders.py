import logging
import math

import pytest

from paracurve import geom
from paracurve.builders import *
from paracurve.curve_algo import algorithm
from paracurve.curves import curve_params, curve_type, is_positive
from paracurve.errors import ConstraintViolationError, DegenerateGeometryError
from paracurve.nurbs import chord_parameters


def _at(curve, t):
    return algorithm(curve).point(t)


class TestLines:

    def test_line2(self):
        curve = line2_from_begin_end((0, 0), (3, 4))
        assert curve_type(curve) == 'line'
        assert curve_params(curve)['length'] == pytest.approx(5.0)
        assert curve[1].rotation == pytest.approx(math.atan2(4, 3))
        assert curve[1].position[:2] == [0.0, 0.0]
        assert _at(curve, 0.5)[:2] == pytest.approx([1.5, 2.0])

    def test_line2_ignores_z(self):
        curve = line2_from_begin_end((1, 1, 9), (2, 1, -9))
        assert curve_params(curve)['length'] == pytest.approx(1.0)

    def test_line3(self):
        b = (1, 2, 3)
        e = (2, 4, 5)
        algo = algorithm(line3_from_begin_end(b, e))
        assert algo.begin()[:3] == pytest.approx(list(b))
        assert algo.end()[:3] == pytest.approx(list(e))
        assert algo.length() == pytest.approx(3.0)

    def test_line3_along_x(self):
        algo = algorithm(line3_from_begin_end((0, 0, 0), (-2, 0, 0)))
        assert algo.point(0.5)[:3] == pytest.approx([-1.0, 0.0, 0.0])

    def test_coincident(self):
        with pytest.raises(ConstraintViolationError):
            line2_from_begin_end((1, 1), (1, 1))
        with pytest.raises(ConstraintViolationError):
            line3_from_begin_end((1, 1, 1), (1, 1, 1 + 1e-9))
        line2_from_begin_end((0, 0), (1e-3, 0), tolerance=1e-6)
        with pytest.raises(ConstraintViolationError):
            line2_from_begin_end((0, 0), (1e-3, 0), tolerance=1e-2)


class TestCircles:

    def test_center_radius(self):
        curve = circle2_from_center_radius((1, 1), 2)
        assert curve_type(curve) == 'circle'
        assert _at(curve, 0)[:2] == pytest.approx([3.0, 1.0])
        assert _at(curve, 0.25)[:2] == pytest.approx([1.0, 3.0])
        with pytest.raises(DegenerateGeometryError):
            circle2_from_center_radius((0, 0), 0)

    def test_center_radius_3d(self):
        curve = circle3_from_center_radius((0, 0, 1), 2)
        assert curve[1].rotation == pytest.approx((0.0, 0.0, 0.0))
        assert _at(curve, 0)[:3] == pytest.approx([2.0, 0.0, 1.0])
        tilted = circle3_from_center_radius((0, 0, 0), 1, normal=(0, 1, 0))
        for i in range(8):
            assert _at(tilted, i / 8)[1] == pytest.approx(0.0, abs=1e-12)
        with pytest.raises(DegenerateGeometryError):
            circle3_from_center_radius((0, 0, 0), 1, normal=(0, 0, 0))

    def test_normal_near_x_axis(self):
        normal = (1.0, 1e-4, 0.0)
        n = geom.normalize(geom.direction(normal))
        curve = circle3_from_center_radius((0, 0, 0), 1.0, normal=normal)
        for i in range(8):
            p = _at(curve, i / 8)
            assert geom.dot(p, n) == pytest.approx(0.0, abs=1e-9)
            assert geom.mag(p) == pytest.approx(1.0)
        b = geom.point(0, 0, 1)
        e = geom.normalize(geom.cross(n, b))[:3]
        algo = algorithm(circle3_from_begin_center_end(b, (0, 0, 0), e, normal=normal))
        assert algo.begin()[:3] == pytest.approx(b[:3], abs=1e-9)
        assert algo.end()[:3] == pytest.approx(e[:3], abs=1e-9)
        assert geom.dot(algo.point(0.5), n) == pytest.approx(0.0, abs=1e-9)

    def test_begin_center_end_quarter(self):
        curve = circle2_from_begin_center_end((2, 1), (1, 1), (1, 2))
        meta = curve_params(curve)
        assert curve_type(curve) == 'circlearc'
        assert meta['radius'] == pytest.approx(1.0)
        assert meta['radian0'] == 0.0
        assert meta['radian1'] == pytest.approx(math.pi / 2)
        algo = algorithm(curve)
        assert algo.begin()[:2] == pytest.approx([2.0, 1.0])
        assert algo.end()[:2] == pytest.approx([1.0, 2.0])
        assert is_positive(curve)

    def test_begin_center_end_counterclockwise(self):
        curve = circle2_from_begin_center_end((1, 0), (0, 0), (0, -1))
        assert curve_params(curve)['radian1'] == pytest.approx(1.5 * math.pi)
        assert _at(curve, 2 / 3)[:2] == pytest.approx([-1.0, 0.0], abs=1e-12)

    def test_begin_center_end_rotation(self):
        curve = circle2_from_begin_center_end((0, 3), (0, 0), (-3, 0))
        assert curve[1].rotation == pytest.approx(math.pi / 2)
        assert curve_params(curve)['radian1'] == pytest.approx(math.pi / 2)

    def test_full_circle(self):
        curve = circle2_from_begin_center_end((1, 0), (0, 0), (1, 0))
        assert curve_params(curve)['radian1'] == geom.pi2
        algo = algorithm(curve)
        assert algo.is_periodic()
        assert algo.is_closed()

    def test_unequal_radii(self):
        with pytest.raises(ConstraintViolationError) as info:
            circle2_from_begin_center_end((1, 0), (0, 0), (0, 2))
        assert info.value.details['radius1'] == pytest.approx(2.0)

    def test_begin_on_center(self):
        with pytest.raises(DegenerateGeometryError):
            circle2_from_begin_center_end((0, 0), (0, 0), (0, 0))

    def test_begin_center_end_3d(self):
        b = (1, 0, 5)
        c = (0, 0, 5)
        e = (0, 1, 5)
        algo = algorithm(circle3_from_begin_center_end(b, c, e))
        assert algo.begin()[:3] == pytest.approx(list(b))
        assert algo.end()[:3] == pytest.approx(list(e))
        assert algo.point(0.5)[:3] == pytest.approx([math.sqrt(0.5), math.sqrt(0.5), 5.0])

    def test_begin_center_end_3d_normal(self):
        # the same points run the long way round about -z
        algo = algorithm(circle3_from_begin_center_end((1, 0, 0), (0, 0, 0), (0, 1, 0),
                                                       normal=(0, 0, -1)))
        assert algo.end()[:3] == pytest.approx([0.0, 1.0, 0.0], abs=1e-12)
        assert algo.point(0.5)[:3] == pytest.approx([-math.sqrt(0.5), -math.sqrt(0.5), 0.0])

    def test_begin_center_end_3d_collinear(self):
        # half circle in the XY plane falls back to +z
        algo = algorithm(circle3_from_begin_center_end((1, 0, 0), (0, 0, 0), (-1, 0, 0)))
        assert algo.point(0.5)[:3] == pytest.approx([0.0, 1.0, 0.0], abs=1e-12)
        with pytest.raises(ConstraintViolationError):
            circle3_from_begin_center_end((0, 0, 1), (0, 0, 0), (0, 0, -1))

    def test_begin_center_end_3d_off_plane(self):
        with pytest.raises(ConstraintViolationError):
            circle3_from_begin_center_end((1, 0, 0), (0, 0, 0), (0, 1, 0), normal=(1, 0, 0))

    def test_frame_fallback_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='paracurve.builders'):
            circle3_from_begin_center_end((1, 0, 0), (0, 0, 0), (1, 0, 0))
        assert 'XY plane' in caplog.text


class TestArcs:

    def test_arc2(self):
        b = (2, 0)
        e = (1, 1)
        curve = arc2_from_begin_center_end(b, (0, 0), e)
        assert curve_type(curve) == 'arc'
        rx, ry = curve_params(curve)['radius']
        assert rx == pytest.approx(2.0)
        assert ry == pytest.approx(1 / math.sqrt(0.75))
        algo = algorithm(curve)
        assert algo.begin()[:2] == pytest.approx([2.0, 0.0])
        assert algo.end()[:2] == pytest.approx([1.0, 1.0])

    def test_arc2_rotated(self):
        # first axis points along +y
        curve = arc2_from_begin_center_end((1, 1), (1, -1), (0, -2))
        algo = algorithm(curve)
        assert algo.begin()[:2] == pytest.approx([1.0, 1.0])
        assert algo.end()[:2] == pytest.approx([0.0, -2.0])
        assert curve_params(curve)['radian1'] == pytest.approx(2 * math.pi / 3)

    def test_arc2_end_below_first_axis(self):
        # counter-clockwise the long way round
        curve = arc2_from_begin_center_end((2, 0), (0, 0), (1, -1))
        assert curve_params(curve)['radian1'] == pytest.approx(5 * math.pi / 3)
        assert algorithm(curve).end()[:2] == pytest.approx([1.0, -1.0])

    def test_arc2_circle_case(self):
        curve = arc2_from_begin_center_end((1, 0), (0, 0), (0, 1))
        assert curve_params(curve)['radius'] == pytest.approx((1.0, 1.0))

    def test_arc2_unsolvable(self):
        with pytest.raises(ConstraintViolationError):
            arc2_from_begin_center_end((1, 0), (0, 0), (-2, 0))
        with pytest.raises(ConstraintViolationError):
            arc2_from_begin_center_end((1, 0), (0, 0), (3, 1))
        with pytest.raises(DegenerateGeometryError):
            arc2_from_begin_center_end((0, 0), (0, 0), (3, 1))

    def test_arc3(self):
        b = (0, 0, 2)
        e = (0, 1, 1)
        algo = algorithm(arc3_from_begin_center_end(b, (0, 0, 0), e, normal=(1, 0, 0)))
        assert algo.begin()[:3] == pytest.approx(list(b))
        assert algo.end()[:3] == pytest.approx(list(e))
        for i in range(5):
            assert algo.point(i / 4)[0] == pytest.approx(0.0, abs=1e-12)

    def test_ellipse(self):
        curve = ellipse2_from_center_radii((1, 2), (3, 1), math.pi / 2)
        algo = algorithm(curve)
        assert algo.point(0)[:2] == pytest.approx([1.0, 5.0])
        assert algo.point(0.25)[:2] == pytest.approx([0.0, 2.0])
        with pytest.raises(DegenerateGeometryError):
            ellipse2_from_center_radii((0, 0), (1, -1))


class TestFitting:

    POINTS = [(0, 0), (1, 2), (3, 3), (4, 1), (6, 0), (8, 2)]

    @pytest.mark.parametrize('method', ['chord', 'centripetal', 'uniform'])
    def test_passes_through_points(self, method):
        curve = nurbs2_from_fitting_points(self.POINTS, method=method)
        assert curve_params(curve)['degree'] == 3
        algo = algorithm(curve)
        pts = [geom.point(p) for p in self.POINTS]
        for p, t in zip(self.POINTS, chord_parameters(pts, method)):
            assert algo.point(t)[:2] == pytest.approx(list(p), abs=1e-9)
        assert algo.begin()[:2] == pytest.approx([0.0, 0.0])
        assert algo.end()[:2] == pytest.approx([8.0, 2.0])

    def test_degree_reduction(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='paracurve.builders'):
            curve = nurbs2_from_fitting_points([(0, 0), (1, 1), (2, 0)])
        assert curve_params(curve)['degree'] == 2
        assert 'reducing fitting degree' in caplog.text
        assert curve_params(nurbs2_from_fitting_points([(0, 0), (1, 1)]))['degree'] == 1

    def test_explicit_degree(self):
        curve = nurbs2_from_fitting_points(self.POINTS, degree=2)
        assert curve_params(curve)['degree'] == 2

    def test_fitting_errors(self):
        with pytest.raises(ConstraintViolationError):
            nurbs2_from_fitting_points([(0, 0)])
        with pytest.raises(ConstraintViolationError):
            nurbs2_from_fitting_points([(0, 0), (1, 1), (1, 1), (2, 0)])
        with pytest.raises(ConstraintViolationError):
            nurbs2_from_fitting_points([(0, 0), (float('nan'), 1)])

    def test_3d(self):
        pts = [(0, 0, 0), (1, 0, 1), (2, 1, 1), (3, 3, 0)]
        algo = algorithm(nurbs3_from_fitting_points(pts))
        for p, t in zip(pts, chord_parameters(pts)):
            assert algo.point(t)[:3] == pytest.approx(list(p), abs=1e-9)
