"""
Tests for exactgeo.geometry.oracle

Covers:
1. Integer square-root helpers
2. Refinement monotonicity and idempotence
3. Concurrent refinement of one shared handle
4. Sign decisions and the indeterminate error
"""
import threading
from fractions import Fraction

import pytest

from exactgeo.geometry.errors import IndeterminatePredicate
from exactgeo.geometry.oracle import OracleHandle, rational_sqrt, split_square, sqrt_bracket


class TestHelpers:
    """Rational square-root helpers"""

    def test_rational_sqrt(self) -> None:
        assert rational_sqrt(Fraction(49, 9)) == Fraction(7, 3)
        assert rational_sqrt(Fraction(2)) is None
        assert rational_sqrt(Fraction(-4)) is None

    def test_sqrt_bracket(self) -> None:
        lo, hi = sqrt_bracket(Fraction(2), 20)
        assert hi - lo == Fraction(1, 1 << 20)
        assert lo * lo <= 2 < hi * hi

    def test_split_square(self) -> None:
        assert split_square(72) == (6, 2)
        assert split_square(49) == (7, 1)
        assert split_square(30) == (1, 30)


class TestRefinement:
    """The cached interval only shrinks"""

    def test_widths_never_increase(self) -> None:
        h = OracleHandle("sqrt", Fraction(2))
        widths = [h.width()]
        for _ in range(10):
            h.refine()
            widths.append(h.width())
        assert all(b <= a for a, b in zip(widths, widths[1:]))
        assert widths[-1] < widths[0]

    def test_interval_encloses_value(self) -> None:
        h = OracleHandle("sqrt", Fraction(2))
        for depth in (0, 3, 12):
            lo, hi = h.interval(depth)
            assert lo * lo <= 2 <= hi * hi

    def test_refine_is_idempotent(self) -> None:
        h = OracleHandle("sqrt", Fraction(5))
        first = h.refine(8)
        again = h.refine(8)
        assert again == first

    def test_shallower_refine_keeps_tighter_state(self) -> None:
        h = OracleHandle("sqrt", Fraction(5))
        h.refine(10)
        tight = h.state
        h.refine(2)
        assert h.state == tight

    def test_compound_expression(self) -> None:
        """sqrt(2) + sqrt(3) stays enclosed while refining"""
        s2 = OracleHandle("sqrt", Fraction(2))
        s3 = OracleHandle("sqrt", Fraction(3))
        total = OracleHandle("add", s2, s3)
        lo, hi = total.refine(6)
        assert Fraction(314, 100) < lo <= hi < Fraction(315, 100)

    def test_shared_leaf_is_refined_through_parent(self) -> None:
        leaf = OracleHandle("sqrt", Fraction(2))
        parent = OracleHandle("mul", Fraction(3), leaf)
        parent.refine(9)
        assert leaf.state[2] >= 9


class TestConcurrentRefinement:
    """Concurrent refiners never widen the published interval"""

    def test_threads_refining_one_handle(self) -> None:
        h = OracleHandle("sqrt", Fraction(7))
        seen = []
        lock = threading.Lock()

        def worker(depths):
            for depth in depths:
                lo, hi = h.refine(depth)
                with lock:
                    seen.append((lo, hi))

        threads = [
            threading.Thread(target=worker, args=(range(start, 40, 3),))
            for start in range(6)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lo, hi, depth = h.state
        assert depth == 39
        assert lo * lo <= 7 <= hi * hi
        assert all(s_lo <= lo and hi <= s_hi for s_lo, s_hi in seen)


class TestSign:
    """Sign decisions on handles"""

    def test_structural_zero(self) -> None:
        s = OracleHandle("sqrt", Fraction(3))
        diff = OracleHandle("add", s, OracleHandle("neg", s))
        assert diff.form == {}
        assert diff.sign() == 0

    def test_interval_sign(self) -> None:
        s = OracleHandle("sqrt", Fraction(2))
        diff = OracleHandle("add", s, Fraction(-7, 5))
        assert diff.sign() == 1

    def test_indeterminate_error_fields(self) -> None:
        s = OracleHandle("sqrt", Fraction(2))
        close = Fraction(1414213562373095, 10 ** 15)
        diff = OracleHandle("add", s, -close)
        with pytest.raises(IndeterminatePredicate) as info:
            diff.sign(max_depth=3)
        assert info.value.depth == 3
        assert "sqrt(2/1)" in info.value.expression

    def test_inverse_of_sum_has_form(self) -> None:
        """inv(1 + sqrt(3)) gets the form (sqrt(3) - 1)/2"""
        s = OracleHandle("sqrt", Fraction(3))
        inv = OracleHandle("inv", OracleHandle("add", s, Fraction(1)))
        assert inv.form == {(3,): Fraction(1, 2), (): Fraction(-1, 2)}
        diff = OracleHandle("add", inv, OracleHandle("mul", s, Fraction(-1, 2)))
        assert OracleHandle("add", diff, Fraction(1, 2)).sign() == 0

    def test_to_dict(self) -> None:
        d = OracleHandle("sqrt", Fraction(2)).to_dict()
        assert d["expr"] == "sqrt(2/1)"
        assert d["interval"].startswith("[")

    def test_bad_node(self) -> None:
        with pytest.raises(ValueError):
            OracleHandle("pow", Fraction(2), Fraction(3))
