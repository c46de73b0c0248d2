# exactgeo/solver/realize.py

"""
================================================================================
 Realization of synthetic objects (exactgeo/solver/realize.py)
================================================================================

`realize(obj, coord_system, assignment)` turns an object that may mention free
points into an object of the same shape with fixed coordinates only.

Resolution of a `FreePoint`, in order:
1.  **Assignment**: the point's name (or the FreePoint itself) is a key of
    `assignment`. The bound point is read as (u, v) in `coord_system` and
    mapped to origin + u*e1 + v*e2.
2.  **Curve constraint**: `point_on(obj, t)` with a parameter:
    - line/segment/ray through P, Q: P + t*(Q - P);
    - line given by an equation: the foot of the perpendicular from the
      origin plus t*(-b, a);
    - circle: center + r*((1-t^2)/(1+t^2), 2t/(1+t^2)), a rational
      parametrization, so a rational circle with rational t gives a rational
      point when r is rational.
3.  **Intersection constraint**: `point_on((o1, o2), branch)` realizes both
    objects, intersects them and picks `branch` (default 0).

Anything else raises `UnresolvedFreePoint`. Fixed points are already in world
coordinates and are returned unchanged.
"""
import logging

from exactgeo.geometry.errors import UnresolvedFreePoint
from exactgeo.geometry.kernels import Coincident, intersect
from exactgeo.geometry.primitives import (
    STANDARD_FRAME,
    Circle,
    FreePoint,
    Line,
    Point,
    Ray,
    Segment,
    circle3,
    circle_r2,
    circle_radius,
    circle_through,
    line,
    ray,
    segment,
)
from exactgeo.geometry.values import ONE, exact, square

logger = logging.getLogger(__name__)


class _Realizer:
    def __init__(self, coord_system, assignment):
        self.frame = coord_system or STANDARD_FRAME
        self.assignment = {}
        for key, value in (assignment or {}).items():
            name = key.name if isinstance(key, FreePoint) else key
            if isinstance(value, tuple):
                value = Point(*value)
            if not isinstance(value, Point):
                raise TypeError(f"binding for '{name}' must be a fixed point")
            self.assignment[name] = value
        self.resolving = set()

    def __call__(self, obj):
        if isinstance(obj, Point):
            return obj
        if isinstance(obj, FreePoint):
            return self.free_point(obj)
        if isinstance(obj, Line):
            if not obj.synthetic:
                return obj
            return line(*(self(p) for p in obj.through))
        if isinstance(obj, Segment):
            return segment(self(obj.start), self(obj.end))
        if isinstance(obj, Ray):
            return ray(self(obj.origin), self(obj.through))
        if isinstance(obj, Circle):
            return self.circle(obj)
        if isinstance(obj, (tuple, list)):
            return type(obj)(self(o) for o in obj)
        raise TypeError(f"cannot realize {type(obj).__name__}")

    def circle(self, c):
        if not c.synthetic:
            return c
        if len(c.through) == 3:
            return circle3(*(self(p) for p in c.through))
        if len(c.through) == 1:
            return circle_through(self(c.center), self(c.through[0]))
        return circle_r2(self(c.center), c.radius_sq)

    def free_point(self, fp):
        bound = self.assignment.get(fp.name)
        if bound is not None:
            return self.frame.to_world(bound.x, bound.y)
        if fp.constraint is None:
            raise UnresolvedFreePoint(fp.name)
        if fp.name in self.resolving:
            raise UnresolvedFreePoint(fp.name, f"free point '{fp.name}' is constrained by itself")
        self.resolving.add(fp.name)
        try:
            if isinstance(fp.constraint, tuple):
                return self.on_intersection(fp)
            return self.on_curve(fp)
        finally:
            self.resolving.discard(fp.name)

    def on_intersection(self, fp):
        o1, o2 = (self(o) for o in fp.constraint)
        found = intersect(o1, o2)
        branch = 0 if fp.param is None else int(fp.param)
        if isinstance(found, Coincident) or not 0 <= branch < len(found):
            raise UnresolvedFreePoint(
                fp.name, f"free point '{fp.name}': intersection has no branch {branch}"
            )
        logger.debug("realized %s as branch %d of %d", fp.name, branch, len(found))
        return found[branch]

    def on_curve(self, fp):
        if fp.param is None:
            raise UnresolvedFreePoint(fp.name, f"free point '{fp.name}' has no curve parameter")
        t = exact(fp.param)
        obj = self(fp.constraint)

        if isinstance(obj, Circle):
            denom = ONE + square(t)
            r = circle_radius(obj)
            return Point(
                obj.center.x + r * (ONE - square(t)) / denom,
                obj.center.y + r * 2 * t / denom,
            )
        if isinstance(obj, Segment):
            p, q = obj.start, obj.end
        elif isinstance(obj, Ray):
            p, q = obj.origin, obj.through
        elif obj.through:
            p, q = obj.through
        else:
            a, b, c = obj.equation
            norm = square(a) + square(b)
            p = Point(-a * c / norm, -b * c / norm)
            q = Point(p.x - b, p.y + a)
        return Point(p.x + t * (q.x - p.x), p.y + t * (q.y - p.y))


def realize(obj, coord_system=None, assignment=None):
    """
    Return `obj` with every free point replaced by fixed coordinates.

    Assignment values are frame coordinates (u, v), not world coordinates:
    the realized point is origin + u*e1 + v*e2 of `coord_system`. Reading a
    bound free point back therefore returns the assigned coordinates only in
    the standard frame; in any other frame it returns their world image.
    Fixed points are already in world coordinates and are never mapped.

    Args:
        obj: a point, line, segment, ray, circle, or a tuple/list of them.
        coord_system: the `CoordinateSystem` in which `assignment` points are
            expressed (default: the standard frame).
        assignment: mapping from free-point name (or FreePoint) to a fixed
            `Point` or an (x, y) pair, in frame coordinates.

    Returns:
        An object of the same shape as `obj` with no free points.

    Raises:
        UnresolvedFreePoint: a free point has no binding and no solvable
            constraint.
    """
    return _Realizer(coord_system, assignment)(obj)
