"""
Tests for exactgeo.geometry.primitives

Covers construction rules, degeneracy errors, accessors and serialization.
"""
from fractions import Fraction

import pytest

from exactgeo.geometry.errors import DegenerateConstruction, UnresolvedFreePoint
from exactgeo.geometry.primitives import (
    CoordinateSystem,
    FreePoint,
    Line,
    circle,
    circle3,
    circle_center,
    circle_r2,
    circle_radius,
    circle_radius_sq,
    circle_through,
    line,
    line_eq,
    line_from_eq,
    point,
    point_coords,
    point_free,
    point_on,
    ray,
    segment,
)
from exactgeo.geometry.values import Oracle, Rational, sqrt


class TestPoint:
    """Fixed and free points"""

    def test_fixed_coords(self) -> None:
        p = point(1, "1/2")
        assert point_coords(p) == (1, Fraction(1, 2))

    def test_value_equality(self) -> None:
        assert point("2/4", 1) == point("1/2", 1)

    def test_free_point_has_no_coords(self) -> None:
        with pytest.raises(UnresolvedFreePoint) as info:
            point_coords(point_free("P"))
        assert info.value.name == "P"

    def test_point_on_line_keeps_param(self) -> None:
        l = line(point(0, 0), point(1, 0))
        fp = point_on(l, "1/2")
        assert isinstance(fp, FreePoint)
        assert fp.constraint is l
        assert fp.param == Fraction(1, 2)

    def test_point_on_intersection(self) -> None:
        l = line_from_eq(1, 0, 0)
        c = circle_r2(point(0, 0), 1)
        fp = point_on([l, c], 1, name="Q")
        assert fp.name == "Q"
        assert fp.constraint == (l, c)
        assert fp.param == 1

    def test_point_on_rejects_other_objects(self) -> None:
        with pytest.raises(TypeError):
            point_on(point(0, 0))


class TestLine:
    """Line equations"""

    def test_equation_from_points(self) -> None:
        """(y2-y1, x1-x2, x2*y1 - x1*y2)"""
        l = line(point(1, 2), point(3, 5))
        assert line_eq(l) == (3, -2, 1)

    def test_points_satisfy_equation(self) -> None:
        p, q = point("1/3", 2), point(-4, "7/5")
        a, b, c = line_eq(line(p, q))
        for x, y in (point_coords(p), point_coords(q)):
            assert a * x + b * y + c == 0

    def test_coincident_points(self) -> None:
        with pytest.raises(DegenerateConstruction):
            line(point(1, 1), point("2/2", 1))

    def test_same_object_twice(self) -> None:
        p = point_free("P")
        with pytest.raises(DegenerateConstruction):
            line(p, p)

    def test_zero_equation(self) -> None:
        with pytest.raises(DegenerateConstruction):
            line_from_eq(0, 0, 1)

    def test_synthetic_line(self) -> None:
        l = line(point_free("P"), point(1, 1))
        assert isinstance(l, Line) and l.synthetic
        with pytest.raises(UnresolvedFreePoint) as info:
            line_eq(l)
        assert info.value.name == "P"

    def test_segment_and_ray_degenerate(self) -> None:
        with pytest.raises(DegenerateConstruction):
            segment(point(0, 0), point(0, 0))
        with pytest.raises(DegenerateConstruction):
            ray(point(2, 3), point(2, 3))

    def test_segment_carrier(self) -> None:
        s = segment(point(0, 0), point(2, 2))
        assert line_eq(s) == (2, -2, 0)


class TestCircle:
    """Circle construction keeps the squared radius exact"""

    def test_radius_sq_rational_from_points(self) -> None:
        c = circle_through(point("1/2", 0), point(3, "-2/3"))
        r_sq = circle_radius_sq(c)
        assert isinstance(r_sq, Rational)
        assert r_sq == Fraction(5, 2) ** 2 + Fraction(2, 3) ** 2

    def test_root_radius_squares_back(self) -> None:
        c = circle(point(0, 0), sqrt(2))
        assert isinstance(circle_radius_sq(c), Rational)
        assert circle_radius_sq(c) == 2

    def test_radius_accessor(self) -> None:
        assert circle_radius(circle_r2(point(0, 0), 4)) == 2
        r = circle_radius(circle_r2(point(0, 0), 2))
        assert isinstance(r, Oracle)
        assert str(r) == "sqrt(2/1)"

    def test_negative_radius(self) -> None:
        with pytest.raises(DegenerateConstruction):
            circle(point(0, 0), -1)
        with pytest.raises(DegenerateConstruction):
            circle_r2(point(0, 0), "-1/4")

    def test_circle3(self) -> None:
        c = circle3(point(0, 0), point(2, 0), point(0, 2))
        assert circle_center(c) == point(1, 1)
        assert circle_radius_sq(c) == 2

    def test_circle3_rational_center(self) -> None:
        c = circle3(point(1, 0), point(0, "1/2"), point(-3, 4))
        center = circle_center(c)
        assert isinstance(center.x, Rational) and isinstance(center.y, Rational)
        for p in (point(1, 0), point(0, "1/2"), point(-3, 4)):
            assert (p.x - center.x) * (p.x - center.x) + (p.y - center.y) * (p.y - center.y) == circle_radius_sq(c)

    def test_circle3_collinear(self) -> None:
        with pytest.raises(DegenerateConstruction):
            circle3(point(0, 0), point(1, 1), point(5, 5))

    def test_synthetic_circle(self) -> None:
        c = circle3(point_free("A"), point(1, 0), point(0, 1))
        with pytest.raises(UnresolvedFreePoint):
            circle_center(c)
        with pytest.raises(UnresolvedFreePoint):
            circle_radius_sq(c)


class TestCoordinateSystem:
    """Affine frames"""

    def test_default_y_axis(self) -> None:
        cs = CoordinateSystem(point(1, 1), point(1, 2))
        assert cs.to_world(1, 0) == point(1, 2)
        assert cs.to_world(0, 1) == point(0, 1)

    def test_degenerate_frame(self) -> None:
        with pytest.raises(DegenerateConstruction):
            CoordinateSystem(point(0, 0), point(1, 1), point(2, 2))


class TestSerialization:
    """to_dict follows the value contract"""

    def test_point_dict(self) -> None:
        assert point("3/6", -2).to_dict() == {
            "type": "point",
            "x": {"kind": "rational", "value": "1/2"},
            "y": {"kind": "rational", "value": "-2/1"},
        }

    def test_circle_dict(self) -> None:
        d = circle_r2(point(0, 0), 2).to_dict()
        assert d["radius_sq"] == {"kind": "rational", "value": "2/1"}
