## affine matrix operations for 2D and 3D homogeneous coordinates in
## paracurve

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2025 paracurve contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import atan2, cos, hypot, sin

import paracurve.geom as geom

## A matrix is represented as a list of rows.  Two sizes are supported:
## 3x3 matrices act on the XY part of a point as a 2D affine transform
## (the z coordinate passes through untouched), and 4x4 matrices act
## on XYZ as a 3D affine transform.  Points and vectors are always
## paracurve 4-vectors; the w component decides whether the
## translation column applies (w != 0) or not (w == 0).


class Matrix:
    """square affine transformation matrix, 3x3 for 2D and 4x4 for 3D"""

    def __init__(self, a=None, size=4):
        if isinstance(a, Matrix):
            size = a.size
        if size not in (3, 4):
            raise ValueError('matrix size must be 3 or 4, got {}'.format(size))
        self.size = size
        self.m = [[1.0 if i == j else 0.0 for j in range(size)]
                  for i in range(size)]

        if isinstance(a, Matrix):
            for i in range(size):
                self.setrow(i, list(a.getrow(i)))
        elif isinstance(a, (tuple, list)):
            if len(a) == size and all(isinstance(r, (tuple, list)) for r in a):
                rows = a
            elif len(a) == size*size:
                rows = [a[i*size:(i+1)*size] for i in range(size)]
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            for i in range(size):
                if len(rows[i]) != size:
                    raise ValueError('bad row in matrix initialization: {}'.format(rows[i]))
                for j in range(size):
                    x = rows[i][j]
                    if not geom.isgoodnum(x):
                        raise ValueError('bad element in matrix initialization: {}'.format(x))
                    self.m[i][j] = float(x)
        elif a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({})".format(self.m)

    def _check(self, *idx):
        for i in idx:
            if i < 0 or i >= self.size:
                raise ValueError('bad index for {0}x{0} matrix: {1}'.format(self.size, idx))

    #return value indexed by i,j
    def get(self, i, j):
        self._check(i, j)
        return self.m[i][j]

    #set value indexed by i,j
    def set(self, i, j, x):
        self._check(i, j)
        if not geom.isgoodnum(x):
            raise ValueError('bad value passed to set: {}'.format(x))
        self.m[i][j] = x

    def getrow(self, i):
        self._check(i)
        return list(self.m[i])

    def getcol(self, j):
        self._check(j)
        return [self.m[k][j] for k in range(self.size)]

    def setrow(self, i, x):
        self._check(i)
        if len(x) != self.size:
            raise ValueError('bad row passed to setrow: {}'.format(x))
        for j in range(self.size):
            self.set(i, j, x[j])

    def setcol(self, j, x):
        self._check(j)
        if len(x) != self.size:
            raise ValueError('bad column passed to setcol: {}'.format(x))
        for i in range(self.size):
            self.set(i, j, x[i])

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # sequence of matching length, compute Mx.  If x is a scalar,
    # compute xM.
    def mul(self, x):
        n = self.size
        if isinstance(x, Matrix):
            if x.size != n:
                raise ValueError('cannot multiply {}x{} by {}x{} matrix'.format(n, n, x.size, x.size))
            result = Matrix(size=n)
            for i in range(n):
                row = self.getrow(i)
                for j in range(n):
                    col = x.getcol(j)
                    result.set(i, j, sum(row[k]*col[k] for k in range(n)))
            return result
        elif isinstance(x, (list, tuple)) and len(x) == n:
            return [sum(a*b for a, b in zip(self.getrow(i), x)) for i in range(n)]
        elif geom.isgoodnum(x):
            result = Matrix(size=n)
            for i in range(n):
                result.setrow(i, [v*x for v in self.getrow(i)])
            return result

        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def apply_point(self, p):
        """full affine application to point ``p``, returning a point"""
        if self.size == 3:
            x, y, w = self.mul([p[0], p[1], 1.0])
            return [x/w, y/w, float(p[2]), 1.0]
        x, y, z, w = self.mul([p[0], p[1], p[2], 1.0])
        return [x/w, y/w, z/w, 1.0]

    def apply_vector(self, v):
        """linear-part application to vector ``v``, returning a w=0 vector"""
        if self.size == 3:
            x, y, _ = self.mul([v[0], v[1], 0.0])
            return [x, y, float(v[2]), 0.0]
        x, y, z, _ = self.mul([v[0], v[1], v[2], 0.0])
        return [x, y, z, 0.0]

    def isclose(self, other, tol=geom.epsilon):
        if not isinstance(other, Matrix) or other.size != self.size:
            return False
        return all(abs(self.get(i, j) - other.get(i, j)) < tol
                   for i in range(self.size) for j in range(self.size))


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# radians
def Rotation(axis, angle, inverse=False):
    m = geom.mag(axis)
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = [axis[0]/m, axis[1]/m, axis[2]/m]

    if inverse:
        angle *= -1.0

    ux, uy, uz = u
    cang = cos(angle)
    cmin = 1.0-cang
    sang = sin(angle)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang, 0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin, 0],
         [0, 0, 0, 1]]

    return Matrix(R)

# 3x3 rotation about the implicit z axis of the XY plane
def Rotation2(angle, inverse=False):
    if inverse:
        angle *= -1.0
    c = cos(angle)
    s = sin(angle)
    return Matrix([[c, -s, 0],
                   [s, c, 0],
                   [0, 0, 1]], size=3)

# Euler angles in XYZ order, so the matrix is Rx * Ry * Rz
def EulerRotation(x, y=0.0, z=0.0):
    if isinstance(x, (list, tuple)):
        x, y, z = x[0], x[1], x[2]
    rx = Rotation([1, 0, 0], x)
    ry = Rotation([0, 1, 0], y)
    rz = Rotation([0, 0, 1], z)
    return rx.mul(ry).mul(rz)

def euler_from_matrix(m):
    """recover XYZ Euler angles from the rotation block of ``m``"""
    # cos(y) from the first row keeps y exact near the poles
    cy = hypot(m.get(0, 0), m.get(0, 1))
    y = atan2(m.get(0, 2), cy)
    if cy > 1e-12:
        x = atan2(-m.get(1, 2), m.get(2, 2))
        z = atan2(-m.get(0, 1), m.get(0, 0))
    else:
        x = atan2(m.get(2, 1), m.get(1, 1))
        z = 0.0
    return (x, y, z)
