# exactgeo/geometry/primitives.py

"""
================================================================================
 Geometric primitives (exactgeo/geometry/primitives.py)
================================================================================

Immutable value objects for the kernel:

- `Point(x, y)`: a fixed point with `ExactValue` coordinates.
- `FreePoint(name, constraint, param)`: a coordinate-free point. It gets
  coordinates only through `exactgeo.solver.realize`.
- `Line(a, b, c)`: the equation a*x + b*y + c = 0 with a, b not both zero.
  The coefficients are not normalized; compare lines by cross-multiplication
  (`predicates.same_line`), never by coefficient equality.
- `Segment(start, end)` and `Ray(origin, through)`: finite-extent views over
  their carrier line.
- `Circle(center, radius_sq)`: the squared radius is kept instead of the
  radius, so a circle built from rational points stays fully rational.
- `CoordinateSystem(origin, x_axis, y_axis)`: an affine frame used as an
  input to realization.

Objects defined through a free point are *synthetic*: they remember their
defining points, and reading their equation raises `UnresolvedFreePoint`
until they are realized.

Labels, colours and other decorations are not part of these objects; keep
them in a separate mapping keyed by the object.
"""
import itertools
from dataclasses import dataclass
from functools import cached_property
from typing import Optional, Tuple

from exactgeo.geometry.errors import DegenerateConstruction, UnresolvedFreePoint
from exactgeo.geometry.values import ExactValue, exact, is_zero, sign, sqrt, square

_free_names = itertools.count(1)


@dataclass(frozen=True)
class Point:
    x: ExactValue
    y: ExactValue

    def __post_init__(self):
        object.__setattr__(self, "x", exact(self.x))
        object.__setattr__(self, "y", exact(self.y))

    def to_dict(self):
        return {"type": "point", "x": self.x.to_dict(), "y": self.y.to_dict()}


@dataclass(frozen=True)
class FreePoint:
    name: str
    constraint: object = None
    param: object = None

    def to_dict(self):
        return {"type": "free_point", "name": self.name}


@dataclass(frozen=True)
class Line:
    a: Optional[ExactValue]
    b: Optional[ExactValue]
    c: Optional[ExactValue]
    through: Tuple = ()

    @property
    def synthetic(self):
        return self.a is None

    @property
    def equation(self):
        if self.synthetic:
            raise UnresolvedFreePoint(_first_free(self.through))
        return self.a, self.b, self.c

    def to_dict(self):
        if self.synthetic:
            return {"type": "line", "through": [p.to_dict() for p in self.through]}
        return {"type": "line", "a": self.a.to_dict(), "b": self.b.to_dict(), "c": self.c.to_dict()}


@dataclass(frozen=True)
class Segment:
    start: object
    end: object

    @cached_property
    def carrier(self):
        return line(self.start, self.end)

    def to_dict(self):
        return {"type": "segment", "start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class Ray:
    origin: object
    through: object

    @cached_property
    def carrier(self):
        return line(self.origin, self.through)

    def to_dict(self):
        return {"type": "ray", "origin": self.origin.to_dict(), "through": self.through.to_dict()}


@dataclass(frozen=True)
class Circle:
    center: object
    radius_sq: Optional[ExactValue]
    through: Tuple = ()

    @property
    def synthetic(self):
        return self.radius_sq is None or not isinstance(self.center, Point)

    def to_dict(self):
        if self.synthetic:
            out = {"type": "circle", "through": [p.to_dict() for p in self.through]}
            if self.center is not None:
                out["center"] = self.center.to_dict()
            return out
        return {"type": "circle", "center": self.center.to_dict(), "radius_sq": self.radius_sq.to_dict()}


@dataclass(frozen=True)
class CoordinateSystem:
    origin: Point
    x_axis: Point
    y_axis: Optional[Point] = None

    def __post_init__(self):
        e1, e2 = self.basis()
        if is_zero(e1[0] * e2[1] - e1[1] * e2[0]):
            raise DegenerateConstruction("coordinate system axes are not independent")

    def basis(self):
        e1 = (self.x_axis.x - self.origin.x, self.x_axis.y - self.origin.y)
        if self.y_axis is None:
            # x axis rotated by +90 degrees
            return e1, (-e1[1], e1[0])
        return e1, (self.y_axis.x - self.origin.x, self.y_axis.y - self.origin.y)

    def to_world(self, u, v):
        """Frame coordinates (u, v) to a fixed point."""
        (e1x, e1y), (e2x, e2y) = self.basis()
        return Point(self.origin.x + u * e1x + v * e2x, self.origin.y + u * e1y + v * e2y)


def _first_free(points):
    for p in points:
        if isinstance(p, FreePoint):
            return p.name
    return "?"


def _all_fixed(*points):
    return all(isinstance(p, Point) for p in points)


def coincide(p, q):
    """Exact equality of two fixed points."""
    (px, py), (qx, qy) = point_coords(p), point_coords(q)
    return is_zero(px - qx) and is_zero(py - qy)


# ==============================================================================
# Construction
# ==============================================================================

def point(x, y):
    """A fixed point from ints, Fractions, "p/q" strings or ExactValues."""
    return Point(exact(x), exact(y))


def point_free(name):
    return FreePoint(name)


def point_on(obj, param=None, name=None):
    """
    A free point constrained to `obj`.

    `obj` is a Line, Segment, Ray or Circle (then `param` is the curve
    parameter), or a pair of objects (then `param` picks the intersection
    branch, 0 by default).
    """
    if isinstance(obj, list):
        obj = tuple(obj)
    if isinstance(obj, tuple):
        if len(obj) != 2:
            raise TypeError("an intersection constraint needs exactly two objects")
    elif not isinstance(obj, (Line, Segment, Ray, Circle)):
        raise TypeError(f"cannot constrain a point to {type(obj).__name__}")
    if param is not None and not isinstance(obj, tuple):
        param = exact(param)
    return FreePoint(name or f"_P{next(_free_names)}", obj, param)


def line(p, q):
    """
    Line through two points: (y2-y1)*x + (x1-x2)*y + (x2*y1 - x1*y2) = 0.
    """
    if p is q:
        raise DegenerateConstruction("a line needs two distinct points")
    if not _all_fixed(p, q):
        return Line(None, None, None, (p, q))
    if coincide(p, q):
        raise DegenerateConstruction(f"points {p} and {q} coincide")
    a = q.y - p.y
    b = p.x - q.x
    c = q.x * p.y - p.x * q.y
    return Line(a, b, c, (p, q))


def line_from_eq(a, b, c):
    """
    Line a*x + b*y + c = 0 from its coefficients.

    Raises:
        DegenerateConstruction: a and b are both zero.
    """
    a, b, c = exact(a), exact(b), exact(c)
    if is_zero(a) and is_zero(b):
        raise DegenerateConstruction("line equation with a = b = 0")
    return Line(a, b, c)


def segment(p, q):
    """
    Segment between two points.

    Raises:
        DegenerateConstruction: the endpoints coincide.
    """
    if p is q or (_all_fixed(p, q) and coincide(p, q)):
        raise DegenerateConstruction("a segment needs two distinct endpoints")
    return Segment(p, q)


def ray(origin, through):
    """Ray from `origin` through `through`, unbounded past `through`."""
    if origin is through or (_all_fixed(origin, through) and coincide(origin, through)):
        raise DegenerateConstruction("a ray needs two distinct points")
    return Ray(origin, through)


def circle(center, radius):
    """Circle from a center and a radius; the radius may be an Oracle."""
    radius = exact(radius)
    if sign(radius) < 0:
        raise DegenerateConstruction(f"negative radius {radius}")
    return Circle(center, square(radius))


def circle_r2(center, radius_sq):
    """
    Circle from a center and a squared radius.

    Args:
        center (Point | FreePoint): the center; a free center makes the
            circle synthetic.
        radius_sq: a non-negative exact value.

    Returns:
        Circle: the circle, kept in squared-radius form.
    """
    radius_sq = exact(radius_sq)
    if sign(radius_sq) < 0:
        raise DegenerateConstruction(f"negative squared radius {radius_sq}")
    return Circle(center, radius_sq)


def circle_through(center, p):
    """Circle with the given center passing through `p`."""
    if not _all_fixed(center, p):
        return Circle(center, None, (p,))
    return Circle(center, square(p.x - center.x) + square(p.y - center.y), (p,))


def circle3(p, q, r):
    """
    Circle through three points.

    The circumcenter solves the perpendicular-bisector system

        d  = 2 * (px*(qy-ry) + qx*(ry-py) + rx*(py-qy))
        ux = (|p|^2*(qy-ry) + |q|^2*(ry-py) + |r|^2*(py-qy)) / d
        uy = (|p|^2*(rx-qx) + |q|^2*(px-rx) + |r|^2*(qx-px)) / d

    and d == 0 exactly when the points are collinear.
    """
    if not _all_fixed(p, q, r):
        return Circle(None, None, (p, q, r))
    d = 2 * (p.x * (q.y - r.y) + q.x * (r.y - p.y) + r.x * (p.y - q.y))
    if is_zero(d):
        raise DegenerateConstruction("three collinear points define no circle")
    p2 = square(p.x) + square(p.y)
    q2 = square(q.x) + square(q.y)
    r2 = square(r.x) + square(r.y)
    ux = (p2 * (q.y - r.y) + q2 * (r.y - p.y) + r2 * (p.y - q.y)) / d
    uy = (p2 * (r.x - q.x) + q2 * (p.x - r.x) + r2 * (q.x - p.x)) / d
    center = Point(ux, uy)
    return Circle(center, square(p.x - ux) + square(p.y - uy), (p, q, r))


# ==============================================================================
# Accessors
# ==============================================================================

def point_coords(p):
    """
    The (x, y) ExactValues of a point.

    Raises:
        UnresolvedFreePoint: `p` is a free point.
    """
    if isinstance(p, FreePoint):
        raise UnresolvedFreePoint(p.name)
    return p.x, p.y


def line_eq(l):
    """
    The coefficients (a, b, c) of a line, or of the carrier of a segment or
    ray. Not normalized.
    """
    if isinstance(l, (Segment, Ray)):
        l = l.carrier
    return l.equation


def circle_center(c):
    """The fixed center; raises UnresolvedFreePoint for a synthetic circle."""
    if not isinstance(c.center, Point):
        raise UnresolvedFreePoint(_first_free((c.center,) + c.through))
    return c.center


def circle_radius_sq(c):
    if c.radius_sq is None:
        raise UnresolvedFreePoint(_first_free((c.center,) + c.through))
    return c.radius_sq


def circle_radius(c):
    """sqrt(radius_sq); an Oracle unless the squared radius is a rational square."""
    return sqrt(circle_radius_sq(c))


STANDARD_FRAME = CoordinateSystem(point(0, 0), point(1, 0))
