# exactgeo/geometry/values.py

"""
================================================================================
 Exact values (exactgeo/geometry/values.py)
================================================================================

`ExactValue` is a closed sum type with two variants:

- `Rational(value)`: a `fractions.Fraction`, always in lowest terms with a
  positive denominator. Rationals are closed under + - * / and under sqrt
  of perfect squares.
- `Oracle(handle)`: a value that is not known to be rational, backed by an
  `OracleHandle` (see oracle.py). Mixing an Oracle with anything yields an
  Oracle unless the exact radical form collapses to a rational, e.g.
  sqrt(2) * sqrt(2) == Rational(2).

Every arithmetic and comparison site goes through the module functions below,
which dispatch on the variant. A float is never accepted as input and no value
ever decays to a float, except through the display-only `approx()`.

Equality: `==` on Rationals compares values. `==` on Oracles is identity only;
use `compare`/`is_zero` to compare numbers.
"""
from dataclasses import dataclass
from fractions import Fraction

from exactgeo.geometry.oracle import OracleHandle, rational_sqrt, rational_value, split_square


class ExactValue:
    """Common operator surface of `Rational` and `Oracle`."""

    __slots__ = ()

    def __add__(self, other):
        return add(self, other)

    def __radd__(self, other):
        return add(other, self)

    def __sub__(self, other):
        return sub(self, other)

    def __rsub__(self, other):
        return sub(other, self)

    def __mul__(self, other):
        return mul(self, other)

    def __rmul__(self, other):
        return mul(other, self)

    def __truediv__(self, other):
        return div(self, other)

    def __rtruediv__(self, other):
        return div(other, self)

    def __neg__(self):
        return neg(self)

    def __pos__(self):
        return self

    def sqrt(self):
        return sqrt(self)

    def sign(self, max_depth=None):
        return sign(self, max_depth)

    def compare(self, other, max_depth=None):
        return compare(self, other, max_depth)

    def is_zero(self, max_depth=None):
        return sign(self, max_depth) == 0


@dataclass(frozen=True, eq=False)
class Rational(ExactValue):
    value: Fraction

    def __post_init__(self):
        if not isinstance(self.value, Fraction):
            object.__setattr__(self, "value", Fraction(self.value))

    def __eq__(self, other):
        if isinstance(other, Rational):
            return self.value == other.value
        if isinstance(other, (int, Fraction)) and not isinstance(other, bool):
            return self.value == other
        return NotImplemented

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return f"{self.value.numerator}/{self.value.denominator}"

    def approx(self):
        return float(self.value)

    def interval(self):
        return self.value, self.value

    def to_dict(self):
        return {"kind": "rational", "value": str(self)}


@dataclass(frozen=True, eq=False)
class Oracle(ExactValue):
    handle: OracleHandle

    def __str__(self):
        return str(self.handle)

    def approx(self):
        return self.handle.approx()

    def interval(self):
        lo, hi, _ = self.handle.state
        return lo, hi

    def refine(self, depth=None):
        return self.handle.refine(depth)

    def to_dict(self):
        return {"kind": "oracle", **self.handle.to_dict()}


ZERO = Rational(Fraction(0))
ONE = Rational(Fraction(1))


def exact(v):
    """Coerce an int, Fraction or "p/q" string to a `Rational`; ExactValues pass through."""
    if isinstance(v, ExactValue):
        return v
    if isinstance(v, bool):
        raise TypeError("bool is not an exact value")
    if isinstance(v, (int, Fraction)):
        return Rational(Fraction(v))
    if isinstance(v, str):
        return Rational(Fraction(v.strip()))
    raise TypeError(f"cannot use {type(v).__name__} as an exact value")


def _operand(v):
    return v.value if isinstance(v, Rational) else v.handle


def _wrap(handle):
    value = rational_value(handle.form)
    if value is not None:
        return Rational(value)
    return Oracle(handle)


def add(a, b):
    a, b = exact(a), exact(b)
    if isinstance(a, Rational) and isinstance(b, Rational):
        return Rational(a.value + b.value)
    if a == ZERO:
        return b
    if b == ZERO:
        return a
    return _wrap(OracleHandle("add", _operand(a), _operand(b)))


def neg(a):
    a = exact(a)
    if isinstance(a, Rational):
        return Rational(-a.value)
    return _wrap(OracleHandle("neg", a.handle))


def sub(a, b):
    return add(a, neg(b))


def mul(a, b):
    a, b = exact(a), exact(b)
    if isinstance(a, Rational) and isinstance(b, Rational):
        return Rational(a.value * b.value)
    if a == ZERO or b == ZERO:
        return ZERO
    if a == ONE:
        return b
    if b == ONE:
        return a
    return _wrap(OracleHandle("mul", _operand(a), _operand(b)))


def div(a, b):
    """
    a / b. A zero divisor raises ZeroDivisionError; an oracle divisor has its
    sign decided first and is inverted exactly.
    """
    a, b = exact(a), exact(b)
    if isinstance(b, Rational):
        if not b.value:
            raise ZeroDivisionError(f"division of {a} by zero")
        return mul(a, Rational(1 / b.value))
    if b.sign() == 0:
        raise ZeroDivisionError(f"division of {a} by {b}, which is exactly zero")
    return mul(a, _wrap(OracleHandle("inv", b.handle)))


def square(a):
    return mul(a, a)


def sqrt(a):
    """
    Square root of a non-negative value.

    Rational perfect squares stay Rational; anything else becomes an Oracle
    whose initial interval is an integer Newton bracket.
    """
    a = exact(a)
    if isinstance(a, Rational):
        if a.value < 0:
            raise ValueError(f"square root of negative value {a}")
        root = rational_sqrt(a.value)
        if root is not None:
            return Rational(root)
        # sqrt(p/q) == (s/q) * sqrt(m) with s*s*m == p*q
        s, m = split_square(a.value.numerator * a.value.denominator)
        radical = Oracle(OracleHandle("sqrt", Fraction(m)))
        return mul(Rational(Fraction(s, a.value.denominator)), radical)
    s = a.sign()
    if s < 0:
        raise ValueError(f"square root of negative value {a}")
    if s == 0:
        return ZERO
    return _wrap(OracleHandle("sqrt", a.handle))


def sign(a, max_depth=None):
    """-1, 0 or 1; raises `IndeterminatePredicate` for an undecidable oracle."""
    a = exact(a)
    if isinstance(a, Rational):
        n = a.value.numerator
        return (n > 0) - (n < 0)
    return a.handle.sign(max_depth)


def compare(a, b, max_depth=None):
    """-1, 0 or 1 as a < b, a == b, a > b; `sign(a - b)`."""
    return sign(sub(a, b), max_depth)


def is_zero(a, max_depth=None):
    return sign(a, max_depth) == 0


def is_rational(a):
    return isinstance(exact(a), Rational)
