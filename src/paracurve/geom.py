## vector and point primitives for the paracurve kernel
## Copyright (c) 2020 Richard DeVaul
## Copyright (c) 2025 paracurve contributors

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

"""vector and point primitives for **paracurve**

Points and vectors are plain python lists in homogeneous coordinates,
``[x, y, z, w]``.  Points lie in a positive ``w`` hyperplane (normally
``w = 1``), while direction vectors such as curve derivatives carry
``w = 0``.  Two-dimensional geometry lives in the ``z = 0`` plane, so
the same helpers serve both the 2D and 3D curve families.

The R^3 operations below ignore the ``w`` component of their inputs.
"""

from math import atan2, isfinite, pi, sqrt

## constants
epsilon = 0.000005
pi2 = 2.0*pi

## operations on scalars
## -----------------------

## booleans are ints to python, but never numbers to us
def isgoodnum(n):
    """ determine if an argument is actually a finite scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float)) and isfinite(n)

def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a-b) < tol


## operations on vectors
## ------------------------

def vect(a=False, b=False, c=False, d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0, 0, 0, 1]
    if isgoodnum(a):
        r[0] = a
        if isgoodnum(b):
            r[1] = b
            if isgoodnum(c):
                r[2] = c
                if isgoodnum(d):
                    r[3] = d
    elif isinstance(a, (tuple, list)):
        for i in range(min(4, len(a))):
            x = a[i]
            if isgoodnum(x):
                r[i] = x
    return r

def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x, list) and len(x) == 4 and all(isgoodnum(v) for v in x)

def vclose(a, b, tol=epsilon):
    """ are two vectors the same, to within ``tol``"""
    return close(mag(sub(a, b)), 0, tol)

def point(x=False, y=False, z=False, w=False):
    """Point creation from a point, a 2/3 tuple, or scalars.

    Anything that is not a finite number is rejected, so a point can
    never carry a NaN into the evaluators.
    """
    if isinstance(x, (list, tuple)):
        if len(x) < 2 or len(x) > 4:
            raise ValueError('bad coordinate sequence passed to point(): {}'.format(x))
        coords = list(x) + [0.0]*(3-min(len(x), 3))
        if len(x) < 4:
            coords.append(1.0)
        if not all(isgoodnum(c) for c in coords):
            raise ValueError('non-finite coordinate passed to point(): {}'.format(x))
        if coords[3] <= 0:
            raise ValueError('bad w argument to point()')
        return [float(c) for c in coords]
    r = [0.0, 0.0, 0.0, 1.0]
    if isgoodnum(x):
        r[0] = float(x)
        if isgoodnum(y):
            r[1] = float(y)
            if isgoodnum(z):
                r[2] = float(z)
                if isgoodnum(w):
                    r[3] = float(w)
    elif x is not False:
        raise ValueError('bad thing passed to point(): {}'.format(x))
    if r[3] > 0:
        return r
    else:
        raise ValueError('bad w argument to point()')

def ispoint(x):
    """ is it a point?"""
    return isvect(x) and x[3] > 0.0

def direction(x, y=0.0, z=0.0):
    """make a w=0 direction vector from scalars or a sequence"""
    if isinstance(x, (list, tuple)):
        y = x[1] if len(x) > 1 else 0.0
        z = x[2] if len(x) > 2 else 0.0
        x = x[0]
    return [float(x), float(y), float(z), 0.0]

## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------
def add(a, b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0], a[1]+b[1], a[2]+b[2], 1.0]

def sub(a, b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0], a[1]-b[1], a[2]-b[2], 1.0]

def scale3(a, c):
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return [a[0]*c, a[1]*c, a[2]*c, 1.0]

def cross(a, b):
    """Compute the cross product of a x b, ignoring w"""
    return [a[1]*b[2] - a[2]*b[1],
            a[2]*b[0] - a[0]*b[2],
            a[0]*b[1] - a[1]*b[0],
            1.0]

def normalize(a):
    """return ``a`` scaled to unit length as a w=0 direction

    A zero vector has no direction, so it is an error to ask for one.
    """
    m = mag(a)
    if m < 1e-300:
        raise ValueError('cannot normalize a zero-length vector')
    return [a[0]/m, a[1]/m, a[2]/m, 0.0]

## R^3 -> R functions -- ignore w component
## ----------------------------------------
def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def dist(a, b):
    """ compute the euclidean distance between two 3 vector points ``a`` and ``b``"""
    return mag(sub(a, b))

def angle2(a):
    """polar angle of the XY part of ``a``, in radians on (-pi, pi]"""
    return atan2(a[1], a[0])


## pretty printing string formatter for vectors and lists of vectors,
## falling back to str() for anything else
def vstr(a):
    """ utility function for formatting vectors without extraneous coordinates
    """
    if isvect(a):
        if abs(a[3]-1.0) > epsilon:
            return "[{}, {}, {}, {}]".format(a[0], a[1], a[2], a[3])
        elif abs(a[2]) > epsilon:
            return "[{}, {}, {}]".format(a[0], a[1], a[2])
        else:
            return "[{}, {}]".format(a[0], a[1])
    if isinstance(a, list) and a and all(isvect(v) for v in a):
        return "[" + ", ".join(vstr(v) for v in a) + "]"
    return str(a)
