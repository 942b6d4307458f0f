import math

import pytest

from paracurve.geom import *

## unit tests for paracurve geom.py


class TestScalars:
    """finite-number checks and scalar closeness"""

    def test_isgoodnum(self):
        assert isgoodnum(1)
        assert isgoodnum(-2.5)
        assert not isgoodnum(True)
        assert not isgoodnum(float('nan'))
        assert not isgoodnum(float('inf'))
        assert not isgoodnum('1.0')

    def test_close(self):
        assert close(1.0, 1.0 + epsilon / 2)
        assert not close(1.0, 1.0 + 2 * epsilon)
        assert close(1.0, 1.1, tol=0.2)


class TestPoints:
    """point and vector construction"""

    def test_point_from_scalars(self):
        assert point(1, 2) == [1.0, 2.0, 0.0, 1.0]
        assert point(1, 2, 3) == [1.0, 2.0, 3.0, 1.0]
        assert point() == [0.0, 0.0, 0.0, 1.0]

    def test_point_from_sequences(self):
        assert point((3, 4)) == [3.0, 4.0, 0.0, 1.0]
        assert point([1, 2, 3]) == [1.0, 2.0, 3.0, 1.0]
        p = point(1, 2)
        q = point(p)
        assert q == p and q is not p

    def test_point_rejects_bad_input(self):
        with pytest.raises(ValueError):
            point((1,))
        with pytest.raises(ValueError):
            point((1, float('nan')))
        with pytest.raises(ValueError):
            point('abc')
        with pytest.raises(ValueError):
            point(1, 2, 3, -1)

    def test_ispoint_and_isvect(self):
        assert ispoint(point(1, 2))
        assert isvect(direction(1, 0))
        assert not ispoint(direction(1, 0))
        assert not isvect([1, 2, 3])

    def test_direction(self):
        assert direction(1, 2) == [1.0, 2.0, 0.0, 0.0]
        assert direction((0, 0, 1)) == [0.0, 0.0, 1.0, 0.0]

    def test_vect(self):
        assert vect(1, 2, 3) == [1, 2, 3, 1]
        assert vect([5, 6]) == [5, 6, 0, 1]


class TestVectorOps:
    """R^3 operations that ignore w"""

    def test_add_sub_scale(self):
        a = point(1, 2, 3)
        b = point(4, 5, 6)
        assert add(a, b) == [5, 7, 9, 1.0]
        assert sub(b, a) == [3, 3, 3, 1.0]
        assert scale3(a, 2) == [2, 4, 6, 1.0]

    def test_dot_cross(self):
        x = direction(1, 0, 0)
        y = direction(0, 1, 0)
        assert dot(x, y) == 0
        assert cross(x, y)[:3] == [0, 0, 1]
        assert cross(y, x)[:3] == [0, 0, -1]

    def test_mag_dist(self):
        assert mag(point(3, 4)) == 5.0
        assert dist(point(0, 0), point(3, 4)) == 5.0
        assert vclose(point(1, 1), point(1, 1 + epsilon / 10))
        assert not vclose(point(1, 1), point(1, 2))

    def test_normalize(self):
        n = normalize(point(3, 4))
        assert n == pytest.approx([0.6, 0.8, 0.0, 0.0])
        assert n[3] == 0.0
        with pytest.raises(ValueError):
            normalize(direction(0, 0, 0))

    def test_angle2(self):
        assert angle2(point(0, 1)) == pytest.approx(math.pi / 2)
        assert angle2(point(-1, 0)) == pytest.approx(math.pi)
        assert angle2(point(3, 4)) == pytest.approx(math.atan2(4, 3))

    def test_vstr(self):
        assert vstr(point(1, 2)) == '[1.0, 2.0]'
        assert vstr(point(1, 2, 3)) == '[1.0, 2.0, 3.0]'
        assert vstr([point(1, 2), point(3, 4)]) == '[[1.0, 2.0], [3.0, 4.0]]'
        assert vstr('x') == 'x'
