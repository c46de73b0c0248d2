# exactgeo/geometry/predicates.py

"""
Exact geometric predicates.

Each predicate reduces to "is this ExactValue exactly zero?" (or a sign test)
and answers True/False only when that is proven. An oracle sign that cannot be
decided within the refinement bound raises `IndeterminatePredicate`; it is
never reported as False.
"""
from exactgeo.geometry.kernels import Coincident, intersect_line_line, within_extent
from exactgeo.geometry.primitives import (
    circle_center,
    circle_radius_sq,
    coincide,
    line_eq,
    point_coords,
)
from exactgeo.geometry.values import is_zero, square


def _cross(p, q, r):
    """(q - p) x (r - p), twice the signed area of the triangle pqr."""
    px, py = point_coords(p)
    qx, qy = point_coords(q)
    rx, ry = point_coords(r)
    return (qx - px) * (ry - py) - (qy - py) * (rx - px)


def collinear(*points):
    """
    True iff all points lie on one line. Fewer than three points are always
    collinear; with more, every point is tested against the first two
    distinct points.
    """
    if len(points) < 3:
        return True
    first = points[0]
    second = next((p for p in points[1:] if not coincide(first, p)), None)
    if second is None:
        return True
    return all(is_zero(_cross(first, second, p)) for p in points[1:] if p is not second)


def _lifted_det(p, q, r, s):
    """
    The in-circle determinant of p, q, r, s, taken relative to s:

        | px-sx  py-sy  (px-sx)^2 + (py-sy)^2 |
        | qx-sx  qy-sy  (qx-sx)^2 + (qy-sy)^2 |
        | rx-sx  ry-sy  (rx-sx)^2 + (ry-sy)^2 |
    """
    sx, sy = point_coords(s)
    rows = []
    for pt in (p, q, r):
        x, y = point_coords(pt)
        dx, dy = x - sx, y - sy
        rows.append((dx, dy, square(dx) + square(dy)))
    (a1, a2, a3), (b1, b2, b3), (c1, c2, c3) = rows
    return (
        a1 * (b2 * c3 - b3 * c2)
        - a2 * (b1 * c3 - b3 * c1)
        + a3 * (b1 * c2 - b2 * c1)
    )


def concyclic(*points):
    """
    True iff all points lie on one circle.

    The circle is the one through the first three points, which must not be
    collinear; each further point is tested with the lifted determinant.
    Fewer than four points are concyclic unless three of them are distinct
    and collinear.
    """
    if len(points) < 3:
        return True
    p, q, r = points[:3]
    distinct = not (coincide(p, q) or coincide(q, r) or coincide(p, r))
    if distinct and is_zero(_cross(p, q, r)):
        return False
    if len(points) == 3:
        return True
    if not distinct:
        # no unique circle through the first three; look for three distinct points
        rest = list(points)
        trio = []
        for pt in rest:
            if not any(coincide(pt, seen) for seen in trio):
                trio.append(pt)
            if len(trio) == 3:
                break
        if len(trio) < 3:
            return True
        others = [pt for pt in rest if pt not in trio]
        return concyclic(*trio, *others)
    return all(is_zero(_lifted_det(p, q, r, s)) for s in points[3:])


def on_line(p, l):
    """
    Whether `p` satisfies a*x + b*y + c == 0 exactly.

    Args:
        p (Point): a fixed point.
        l (Line | Segment | Ray): only the carrier line is used.

    Returns:
        bool: True iff the substitution is exactly zero.
    """
    a, b, c = line_eq(l)
    x, y = point_coords(p)
    return is_zero(a * x + b * y + c)


def on_circle(p, c):
    """Whether (x - cx)^2 + (y - cy)^2 - r^2 is exactly zero."""
    center = circle_center(c)
    x, y = point_coords(p)
    return is_zero(square(x - center.x) + square(y - center.y) - circle_radius_sq(c))


def on_segment(p, s):
    """On the carrier line and within 0 <= t <= 1, endpoints included."""
    return on_line(p, s) and within_extent(s, p)


def on_ray(p, r):
    """On the carrier line and at t >= 0 from the origin."""
    return on_line(p, r) and within_extent(r, p)


def parallel(l1, l2):
    """
    Parallel (or coincident) lines: the direction cross product
    a1*b2 - a2*b1 is zero.
    """
    a1, b1, _ = line_eq(l1)
    a2, b2, _ = line_eq(l2)
    return is_zero(a1 * b2 - a2 * b1)


def perpendicular(l1, l2):
    """Perpendicular lines: the normal dot product a1*a2 + b1*b2 is zero."""
    a1, b1, _ = line_eq(l1)
    a2, b2, _ = line_eq(l2)
    return is_zero(a1 * a2 + b1 * b2)


def same_line(l1, l2):
    """Coincidence of two line equations by cross-multiplication."""
    a1, b1, c1 = line_eq(l1)
    a2, b2, c2 = line_eq(l2)
    return (
        is_zero(a1 * b2 - a2 * b1)
        and is_zero(a1 * c2 - a2 * c1)
        and is_zero(b1 * c2 - b2 * c1)
    )


def concurrent(*lines):
    """
    True iff all lines pass through one point.

    Coincident copies of a line are dropped first; two distinct parallel
    lines make the answer False.
    """
    distinct = []
    for l in lines:
        if not any(same_line(l, seen) for seen in distinct):
            distinct.append(l)
    if len(distinct) < 2:
        return True

    meet = intersect_line_line(distinct[0], distinct[1])
    if isinstance(meet, Coincident) or not meet:
        return False
    x = meet[0]
    return all(on_line(x, l) for l in distinct[2:])
