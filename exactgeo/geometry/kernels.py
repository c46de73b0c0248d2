# exactgeo/geometry/kernels.py

"""
================================================================================
 Exact intersection kernels (exactgeo/geometry/kernels.py)
================================================================================

All functions here work on the immutable primitives from primitives.py and
return either a list of 0, 1 or 2 `Point`s or a `Coincident` marker. Results
are exact: rational inputs produce rational points whenever the true answer is
rational, and oracle coordinates otherwise. There is no epsilon anywhere; every
branch is decided by an exact sign test (`values.sign`), which may refine
oracles and may raise `IndeterminatePredicate`.

Return convention:
- `[]`: no intersection (parallel lines, disjoint circles, ...).
- `[P]` / `[P, Q]`: intersection points; for two points the "minus" branch
  of the quadratic comes first.
- `Coincident(first, second)`: the two objects share infinitely many points.
  Coincidence is reported, never merged into one object.

Line-circle method:
Solve the line for one coordinate (x when b != 0, y otherwise), substitute
into (x-cx)^2 + (y-cy)^2 = r^2 and get A*t^2 + B*t + C = 0. The sign of the
discriminant decides the number of points; when sqrt(disc) is irrational both
points share one oracle handle, so refining one also refines the other.

Circle-circle method:
Subtracting the two circle equations gives the radical axis
    2(x2-x1)*x + 2(y2-y1)*y + (x1^2 + y1^2 - r1^2) - (x2^2 + y2^2 - r2^2) = 0
and the problem reduces to line-circle.
"""
import logging
from dataclasses import dataclass

import numpy as np

from exactgeo.geometry.errors import DegenerateConstruction
from exactgeo.geometry.primitives import (
    Circle,
    Line,
    Point,
    Ray,
    Segment,
    circle_center,
    circle_radius_sq,
    line_eq,
    line_from_eq,
    point_coords,
)
from exactgeo.geometry.values import compare, is_zero, sign, sqrt, square

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coincident:
    """The two intersected objects overlap in infinitely many points."""

    first: object
    second: object


def intersect_line_line(l1, l2):
    """
    Intersect two lines.

    With D = a1*b2 - a2*b1 (Cramer's rule):
        x = (b1*c2 - b2*c1) / D
        y = (a2*c1 - a1*c2) / D
    D == 0 means parallel or coincident; coincidence additionally needs
    a1*c2 == a2*c1 and b1*c2 == b2*c1.

    Args:
        l1 (Line): first line (a Segment or Ray contributes its carrier).
        l2 (Line): second line.

    Returns:
        list | Coincident: `[Point]`, `[]` for parallel lines, or
        `Coincident(l1, l2)`.
    """
    a1, b1, c1 = line_eq(l1)
    a2, b2, c2 = line_eq(l2)
    det = a1 * b2 - a2 * b1

    if is_zero(det):
        if is_zero(a1 * c2 - a2 * c1) and is_zero(b1 * c2 - b2 * c1):
            logger.debug("lines coincide: %s, %s", l1, l2)
            return Coincident(l1, l2)
        return []

    x = (b1 * c2 - b2 * c1) / det
    y = (a2 * c1 - a1 * c2) / det
    return [Point(x, y)]


def _line_quadratic(p, q, c, cp, cq, r_sq):
    """
    Coefficients of A*t^2 + B*t + C for the line p*t + q*s + c = 0 (q != 0)
    and the circle (t-cp)^2 + (s-cq)^2 = r_sq, after eliminating s.
    """
    k = c + q * cq
    A = square(p) + square(q)
    B = 2 * (p * k - square(q) * cp)
    C = square(q) * square(cp) + square(k) - square(q) * r_sq
    return A, B, C


def intersect_line_circle(line, circle):
    """
    Intersect a line with a circle.

    Args:
        line (Line): the line a*x + b*y + c = 0.
        circle (Circle): a circle with a fixed center.

    Returns:
        list: 0, 1 (tangent) or 2 points, minus branch first. Two irrational
        points share one oracle for sqrt(disc).

    Raises:
        DegenerateConstruction: the line has a = b = 0.
    """
    a, b, c = line_eq(line)
    center = circle_center(circle)
    r_sq = circle_radius_sq(circle)
    cx, cy = center.x, center.y

    if not is_zero(b):
        # parameter t = x, solved coordinate y
        p, q, cp, cq, t_is_x = a, b, cx, cy, True
    elif not is_zero(a):
        p, q, cp, cq, t_is_x = b, a, cy, cx, False
    else:
        raise DegenerateConstruction("line with zero direction in line-circle intersection")

    A, B, C = _line_quadratic(p, q, c, cp, cq, r_sq)
    if is_zero(A):
        raise DegenerateConstruction("degenerate quadratic in line-circle intersection")

    def at(t):
        s = -(p * t + c) / q
        return Point(t, s) if t_is_x else Point(s, t)

    disc = square(B) - 4 * A * C
    disc_sign = sign(disc)
    if disc_sign < 0:
        return []
    if disc_sign == 0:
        return [at(-B / (2 * A))]

    # one shared value for both branches
    root = sqrt(disc)
    logger.debug("line-circle discriminant %s, root %s", disc, root)
    return [at((-B - root) / (2 * A)), at((-B + root) / (2 * A))]


def radical_axis(c1, c2):
    """The line obtained by subtracting the equations of two non-concentric circles."""
    o1, o2 = circle_center(c1), circle_center(c2)
    r1, r2 = circle_radius_sq(c1), circle_radius_sq(c2)
    return line_from_eq(
        2 * (o2.x - o1.x),
        2 * (o2.y - o1.y),
        (square(o1.x) + square(o1.y) - r1) - (square(o2.x) + square(o2.y) - r2),
    )


def intersect_circle_circle(c1, c2):
    """
    Intersect two circles through their radical axis.

    Returns:
        list | Coincident: the points of `radical_axis(c1, c2)` on `c1`;
        `[]` for distinct concentric circles and `Coincident` for equal ones.
    """
    o1, o2 = circle_center(c1), circle_center(c2)

    if is_zero(o1.x - o2.x) and is_zero(o1.y - o2.y):
        # concentric
        if is_zero(circle_radius_sq(c1) - circle_radius_sq(c2)):
            return Coincident(c1, c2)
        return []

    return intersect_line_circle(radical_axis(c1, c2), c1)


# ==============================================================================
# Finite extents
# ==============================================================================

def _extent_points(obj):
    if isinstance(obj, Segment):
        return obj.start, obj.end
    return obj.origin, obj.through


def within_extent(obj, x):
    """
    Whether a point of `obj`'s carrier lies inside `obj`.

    With P, Q the defining points, the carrier is P + t*(Q-P) and
    t = (X-P).(Q-P) / |Q-P|^2. A segment needs 0 <= t <= 1, a ray t >= 0.
    The comparisons are done on the numerator to avoid a division.
    """
    if not isinstance(obj, (Segment, Ray)):
        return True
    p, q = _extent_points(obj)
    px, py = point_coords(p)
    qx, qy = point_coords(q)
    dx, dy = qx - px, qy - py
    dot = (x.x - px) * dx + (x.y - py) * dy
    if sign(dot) < 0:
        return False
    if isinstance(obj, Segment):
        return compare(dot, square(dx) + square(dy)) <= 0
    return True


def _projection_range(obj, base, d):
    """
    (lo, lo_point, hi, hi_point) of `obj` projected on direction `d` from
    `base`; an unbounded side is (None, None).
    """
    def proj(pt):
        return (pt.x - base.x) * d[0] + (pt.y - base.y) * d[1]

    if isinstance(obj, Segment):
        a, b = obj.start, obj.end
        sa, sb = proj(a), proj(b)
        if compare(sa, sb) <= 0:
            return sa, a, sb, b
        return sb, b, sa, a
    if isinstance(obj, Ray):
        so = proj(obj.origin)
        if compare(proj(obj.through), so) > 0:
            return so, obj.origin, None, None
        return None, None, so, obj.origin
    return None, None, None, None


def _overlap(o1, o2):
    """Intersection of two finite views sharing one carrier line."""
    finite = o1 if isinstance(o1, (Segment, Ray)) else o2
    base, toward = _extent_points(finite)
    d = (toward.x - base.x, toward.y - base.y)

    lo1, lo1_pt, hi1, hi1_pt = _projection_range(o1, base, d)
    lo2, lo2_pt, hi2, hi2_pt = _projection_range(o2, base, d)

    lo, lo_pt = lo1, lo1_pt
    if lo2 is not None and (lo is None or compare(lo2, lo) > 0):
        lo, lo_pt = lo2, lo2_pt
    hi, hi_pt = hi1, hi1_pt
    if hi2 is not None and (hi is None or compare(hi2, hi) < 0):
        hi, hi_pt = hi2, hi2_pt

    if lo is None or hi is None:
        return Coincident(o1, o2)
    order = compare(lo, hi)
    if order > 0:
        return []
    if order == 0:
        return [lo_pt]
    return Coincident(o1, o2)


def _carrier(obj):
    if isinstance(obj, (Segment, Ray)):
        return obj.carrier
    return obj


_ROUTINES = {
    (Line, Line): intersect_line_line,
    (Line, Circle): intersect_line_circle,
    (Circle, Line): lambda c, l: intersect_line_circle(l, c),
    (Circle, Circle): intersect_circle_circle,
}


def intersect(o1, o2):
    """
    Intersect any two of Line, Segment, Ray, Circle.

    The carriers are intersected through a fixed dispatch table; segment and
    ray extents are applied on top of the carrier result.
    """
    c1, c2 = _carrier(o1), _carrier(o2)
    routine = _ROUTINES.get((type(c1), type(c2)))
    if routine is None:
        raise TypeError(f"cannot intersect {type(o1).__name__} with {type(o2).__name__}")

    result = routine(c1, c2)
    if isinstance(result, Coincident):
        if c1 is o1 and c2 is o2:
            return result
        return _overlap(o1, o2)
    return [x for x in result if within_extent(o1, x) and within_extent(o2, x)]


def intersect_segment(seg, other):
    """`intersect` with a type check on the first argument."""
    if not isinstance(seg, Segment):
        raise TypeError(f"expected a Segment, got {type(seg).__name__}")
    return intersect(seg, other)


def intersect_ray(r, other):
    """`intersect` with a type check on the first argument."""
    if not isinstance(r, Ray):
        raise TypeError(f"expected a Ray, got {type(r).__name__}")
    return intersect(r, other)


def to_array(points):
    """Float preview of fixed points as an (n, 2) array. Display only."""
    return np.array([[p.x.approx(), p.y.approx()] for p in points], dtype=np.float64).reshape(-1, 2)
