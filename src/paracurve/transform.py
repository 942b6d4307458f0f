"""Placement frames for paracurve curves.

A transform positions and orients the local frame of one curve,
optionally relative to a parent transform.  Curves are always
evaluated in their local frame and mapped to world space through
:meth:`make_world_matrix`.

Parents are held through :mod:`weakref`, so a child never keeps its
parent alive.  A parent that has been garbage collected is treated as
absent.  The world matrix walks the whole ancestor chain:
``world = parent.world * local``.
"""

from __future__ import annotations

import weakref
from typing import Optional, Sequence

from paracurve import geom
from paracurve.xform import EulerRotation, Matrix, Rotation2, euler_from_matrix


class _Transform:
    """shared parent handling for the 2D and 3D transforms"""

    dimension = 0

    def __init__(self, parent=None):
        self._parent = None
        self.parent = parent

    @property
    def parent(self):
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, parent):
        if parent is None:
            self._parent = None
            return
        if not isinstance(parent, _Transform) or parent.dimension != self.dimension:
            raise TypeError('parent of a {}D transform must be a {}D transform, got {!r}'
                            .format(self.dimension, self.dimension, parent))
        node = parent
        while node is not None:
            if node is self:
                raise ValueError('transform parent chain would contain a cycle')
            node = node.parent
        self._parent = weakref.ref(parent)

    def ancestors(self):
        """yield the live parent chain, nearest first"""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def make_local_matrix(self) -> Matrix:
        raise NotImplementedError

    def make_world_matrix(self) -> Matrix:
        """local matrix composed with every live ancestor"""
        matrix = self.make_local_matrix()
        for node in self.ancestors():
            matrix = node.make_local_matrix().mul(matrix)
        return matrix

    def apply_point(self, p):
        return self.make_world_matrix().apply_point(p)

    def apply_vector(self, v):
        return self.make_world_matrix().apply_vector(v)


class Transform2(_Transform):
    """2D placement: a position in the XY plane and a rotation angle in radians."""

    dimension = 2

    def __init__(self, position: Sequence[float] = (0.0, 0.0), rotation: float = 0.0,
                 parent: Optional[Transform2] = None):
        self.position = geom.point(position[0], position[1])
        if not geom.isgoodnum(rotation):
            raise ValueError('bad rotation passed to Transform2: {}'.format(rotation))
        self.rotation = float(rotation)
        super().__init__(parent)

    def __repr__(self):
        return 'Transform2({}, {})'.format(geom.vstr(self.position), self.rotation)

    def make_local_matrix(self) -> Matrix:
        ret = Rotation2(self.rotation)
        ret.set(0, 2, self.position[0])
        ret.set(1, 2, self.position[1])
        return ret

    def copy(self) -> Transform2:
        return Transform2(self.position, self.rotation, self.parent)


class Transform3(_Transform):
    """3D placement: a position and XYZ Euler angles in radians."""

    dimension = 3

    def __init__(self, position: Sequence[float] = (0.0, 0.0, 0.0),
                 rotation: Sequence[float] = (0.0, 0.0, 0.0),
                 parent: Optional[Transform3] = None):
        self.position = geom.point(position[0], position[1],
                                   position[2] if len(position) > 2 else 0.0)
        if len(rotation) != 3 or not all(geom.isgoodnum(a) for a in rotation):
            raise ValueError('bad rotation passed to Transform3: {}'.format(rotation))
        self.rotation = tuple(float(a) for a in rotation)
        super().__init__(parent)

    def __repr__(self):
        return 'Transform3({}, {})'.format(geom.vstr(self.position), self.rotation)

    def make_local_matrix(self) -> Matrix:
        ret = EulerRotation(self.rotation)
        ret.set(0, 3, self.position[0])
        ret.set(1, 3, self.position[1])
        ret.set(2, 3, self.position[2])
        return ret

    def copy(self) -> Transform3:
        return Transform3(self.position, self.rotation, self.parent)

    @classmethod
    def from_frame(cls, origin, xaxis, normal, parent=None) -> Transform3:
        """transform whose local x axis is ``xaxis`` and local z axis is ``normal``

        ``xaxis`` is orthogonalized against ``normal``, so it only needs
        to be roughly perpendicular.
        """
        z = geom.normalize(normal)
        x = geom.sub(xaxis, geom.scale3(z, geom.dot(xaxis, z)))
        if geom.mag(x) < geom.epsilon:
            raise ValueError('x axis of frame is parallel to its normal')
        x = geom.normalize(x)
        y = geom.normalize(geom.cross(z, x))
        m = Matrix([[x[0], y[0], z[0], 0],
                    [x[1], y[1], z[1], 0],
                    [x[2], y[2], z[2], 0],
                    [0, 0, 0, 1]])
        return cls(origin, euler_from_matrix(m), parent)


__all__ = ['Transform2', 'Transform3']
