import gc
import math

import pytest

from paracurve import geom
from paracurve.transform import Transform2, Transform3


class TestTransform2:

    def test_local_matrix(self):
        t = Transform2((2, 3), math.pi / 2)
        m = t.make_local_matrix()
        assert m.size == 3
        assert m.getrow(0) == pytest.approx([0.0, -1.0, 2.0])
        assert m.getrow(1) == pytest.approx([1.0, 0.0, 3.0])
        assert m.getrow(2) == [0.0, 0.0, 1.0]

    def test_world_equals_local_without_parent(self):
        t = Transform2((1, 1), 0.3)
        assert t.make_world_matrix().isclose(t.make_local_matrix())

    def test_parent_chain(self):
        grand = Transform2((10, 0), 0.0)
        parent = Transform2((0, 5), math.pi / 2, parent=grand)
        child = Transform2((1, 0), 0.0, parent=parent)
        # (1, 0) -> (2, 0) in the parent frame -> (0, 7) in the grand frame -> (10, 7)
        p = child.apply_point(geom.point(1, 0))
        assert p == pytest.approx([10.0, 7.0, 0.0, 1.0])
        v = child.apply_vector(geom.direction(1, 0))
        assert v == pytest.approx([0.0, 1.0, 0.0, 0.0])
        assert list(child.ancestors()) == [parent, grand]

    def test_parent_is_weak(self):
        parent = Transform2((5, 0))
        child = Transform2(parent=parent)
        assert child.parent is parent
        del parent
        gc.collect()
        assert child.parent is None
        assert child.make_world_matrix().isclose(child.make_local_matrix())

    def test_cycle_rejected(self):
        a = Transform2()
        b = Transform2(parent=a)
        with pytest.raises(ValueError):
            a.parent = b
        with pytest.raises(ValueError):
            a.parent = a

    def test_dimension_mismatch(self):
        with pytest.raises(TypeError):
            Transform2(parent=Transform3())

    def test_bad_rotation(self):
        with pytest.raises(ValueError):
            Transform2((0, 0), float('nan'))

    def test_copy(self):
        parent = Transform2((1, 0))
        t = Transform2((1, 2), 0.5, parent=parent)
        c = t.copy()
        assert c is not t
        assert c.position == t.position and c.rotation == t.rotation
        assert c.parent is parent


class TestTransform3:

    def test_identity(self):
        t = Transform3()
        assert t.apply_point(geom.point(1, 2, 3)) == pytest.approx([1, 2, 3, 1])

    def test_local_matrix(self):
        t = Transform3((1, 2, 3), (0.0, 0.0, math.pi / 2))
        assert t.apply_point(geom.point(1, 0, 0)) == pytest.approx([1.0, 3.0, 3.0, 1.0])
        assert t.apply_vector(geom.direction(1, 0, 0)) == pytest.approx([0.0, 1.0, 0.0, 0.0])

    def test_parent_chain(self):
        parent = Transform3((0, 0, 10), (math.pi / 2, 0.0, 0.0))
        child = Transform3((0, 1, 0), parent=parent)
        assert child.apply_point(geom.point(0, 0, 0)) == pytest.approx([0.0, 0.0, 11.0, 1.0])

    def test_from_frame(self):
        t = Transform3.from_frame((1, 1, 1), (0, 1, 0), (1, 0, 0))
        assert t.apply_vector(geom.direction(1, 0, 0)) == pytest.approx([0, 1, 0, 0])
        assert t.apply_vector(geom.direction(0, 0, 1)) == pytest.approx([1, 0, 0, 0])
        assert t.apply_vector(geom.direction(0, 1, 0)) == pytest.approx([0, 0, 1, 0])
        assert t.apply_point(geom.point(0, 0, 0)) == pytest.approx([1, 1, 1, 1])

    def test_from_frame_orthogonalizes(self):
        n = geom.normalize(geom.direction(1, 1, 1))
        t = Transform3.from_frame((0, 0, 0), (1, 0, 0), n)
        x = t.apply_vector(geom.direction(1, 0, 0))
        assert geom.dot(x, n) == pytest.approx(0.0, abs=1e-12)
        assert geom.mag(x) == pytest.approx(1.0)

    def test_from_frame_parallel_axes(self):
        with pytest.raises(ValueError):
            Transform3.from_frame((0, 0, 0), (0, 0, 2), (0, 0, 1))

    def test_bad_rotation(self):
        with pytest.raises(ValueError):
            Transform3((0, 0, 0), (0.0, 1.0))
