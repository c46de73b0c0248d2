# exactgeo/geometry/oracle.py

"""
================================================================================
 Oracle engine (exactgeo/geometry/oracle.py)
================================================================================

An oracle stands for a real number that is not known to be rational, e.g.
sqrt(2) or the x-coordinate of a circle-circle intersection. It carries two
views of the same number:

1.  **Expression tree**: an `OracleHandle` node (`const`, `sqrt`, `add`,
    `mul`, `neg`, `inv`) whose operands are Fractions or other handles.
    Handles are shared by reference, so two values built from the same
    `sqrt(D)` read one cache.

2.  **Enclosing interval**: rational bounds `lo <= value <= hi`, computed
    on demand at a given refinement depth. Depth `d` evaluates every sqrt
    leaf with `settings.precision_bits(d)` bits, so each round at least
    halves the width.

Sign decisions:
- The exact *radical form* of the expression (a linear combination of
  square-root monomials with rational coefficients) is computed once per
  node. When it is empty the value is exactly zero (`sqrt(x) - sqrt(x)`,
  `sqrt(2)*sqrt(2) - 2`).
- Otherwise the interval is refined round by round until it excludes zero.
  If it still contains zero after `max_refinement_depth` rounds the engine
  raises `IndeterminatePredicate`. It never loops forever and never guesses.

Cache publication:
Computing an enclosure needs no lock. Publishing it intersects the new bounds
with the current ones and replaces the `(lo, hi, depth)` tuple in a single
assignment under a per-handle lock, so the cached interval only ever shrinks.
"""
import logging
import math
import threading
from collections import Counter
from fractions import Fraction

from exactgeo.config import settings
from exactgeo.geometry.errors import IndeterminatePredicate

logger = logging.getLogger(__name__)

# Radical forms with more monomials than this are not tracked structurally.
FORM_LIMIT = 256


def _small_primes(limit):
    sieve = bytearray([1]) * (limit + 1)
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(limit) + 1):
        if sieve[i]:
            sieve[i * i::i] = bytearray(len(sieve[i * i::i]))
    return [i for i, flag in enumerate(sieve) if flag]


_PRIMES = _small_primes(1000)


# ==============================================================================
# 1. Rational square roots
# ==============================================================================

def rational_sqrt(r):
    """
    Exact square root of a non-negative Fraction, or None when it is irrational.

    A reduced fraction p/q is the square of a rational iff both p and q are
    perfect squares.
    """
    if r < 0:
        return None
    n, d = r.numerator, r.denominator
    sn, sd = math.isqrt(n), math.isqrt(d)
    if sn * sn == n and sd * sd == d:
        return Fraction(sn, sd)
    return None


def sqrt_bracket(r, bits):
    """
    Rational bounds `lo <= sqrt(r) < hi` with `hi - lo == 2**-bits`.

    `math.isqrt` is an integer Newton iteration, so the bracket is exact.
    """
    scale = 1 << bits
    s = math.isqrt(r.numerator * scale * scale // r.denominator)
    return Fraction(s, scale), Fraction(s + 1, scale)


def split_square(n):
    """Write a positive integer as `a*a*m`, pulling out small square factors."""
    a = 1
    for p in _PRIMES:
        pp = p * p
        if pp > n:
            break
        while n % pp == 0:
            n //= pp
            a *= p
    root = math.isqrt(n)
    if root * root == n:
        return a * root, 1
    return a, n


# ==============================================================================
# 2. Radical forms
# ==============================================================================
#
# A form is a dict {monomial: Fraction}. A monomial is a sorted tuple of atoms
# standing for the product of their square roots:
#   - an int m > 1 is sqrt(m); at most one int per monomial,
#   - a _Nested atom is sqrt(X) for a non-rational form X.
# Every atom is strictly positive. The empty dict is the number zero.

class _Nested:
    __slots__ = ("form", "text")

    def __init__(self, form):
        self.form = form
        self.text = form_text(form)

    def __eq__(self, other):
        return isinstance(other, _Nested) and self.text == other.text

    def __hash__(self):
        return hash(self.text)


def _atom_key(atom):
    if isinstance(atom, int):
        return (0, atom, "")
    return (1, 0, atom.text)


def _monomial_text(monomial):
    return "*".join(f"sqrt({a})" if isinstance(a, int) else f"sqrt[{a.text}]" for a in monomial) or "1"


def form_text(form):
    if not form:
        return "0"
    parts = sorted(form.items(), key=lambda item: _monomial_text(item[0]))
    return " + ".join(f"{coeff}*{_monomial_text(mono)}" for mono, coeff in parts)


def _form_add(f, g):
    if f is None or g is None:
        return None
    out = dict(f)
    for mono, coeff in g.items():
        total = out.get(mono, 0) + coeff
        if total:
            out[mono] = total
        else:
            out.pop(mono, None)
    return out if len(out) <= FORM_LIMIT else None


def _form_scale(f, k):
    if f is None:
        return None
    if not k:
        return {}
    return {mono: coeff * k for mono, coeff in f.items()}


def _mul_monomials(m1, m2):
    radicand, square = 1, 1
    nested = Counter()
    for atom in m1 + m2:
        if isinstance(atom, int):
            # sqrt(r) * sqrt(a) == g * sqrt((r/g) * (a/g)) with g = gcd(r, a)
            g = math.gcd(radicand, atom)
            square *= g
            radicand = (radicand // g) * (atom // g)
        else:
            nested[atom] += 1
    s, radicand = split_square(radicand)
    square *= s
    atoms = [radicand] if radicand > 1 else []
    atoms.extend(atom for atom, count in nested.items() if count % 2)
    form = {tuple(sorted(atoms, key=_atom_key)): Fraction(square)}
    # sqrt(X) * sqrt(X) == X
    for atom, count in nested.items():
        for _ in range(count // 2):
            form = _form_mul(form, atom.form)
            if form is None:
                return None
    return form


def _form_mul(f, g):
    if f is None or g is None:
        return None
    out = {}
    for m1, c1 in f.items():
        for m2, c2 in g.items():
            product = _mul_monomials(m1, m2)
            if product is None:
                return None
            out = _form_add(out, _form_scale(product, c1 * c2))
            if out is None:
                return None
    return out


def _sqrt_rational_form(r):
    if not r:
        return {}
    # sqrt(p/q) == sqrt(p*q) / q
    a, m = split_square(r.numerator * r.denominator)
    return {((m,) if m > 1 else ()): Fraction(a, r.denominator)}


def _int_atom(mono):
    return next((a for a in mono if isinstance(a, int)), None)


def _split_radical(f):
    """
    Pick one radical of `f` and return the part of `f` free of it.

    A nested atom N splits f into P + R with N absent from every monomial of
    P. An integer radical splits on a factor p of the radicands such that
    every radicand is either a multiple of p or coprime to it.
    """
    for mono in f:
        for atom in mono:
            if not isinstance(atom, int):
                return {m: c for m, c in f.items() if atom not in m}
    radicands = sorted({_int_atom(mono) for mono in f} - {None})
    if not radicands:
        return None
    r = radicands[0]
    p = next((q for q in _PRIMES if r % q == 0), r)
    changed = True
    while changed:
        changed = False
        for a in radicands:
            g = math.gcd(a, p)
            if 1 < g < p:
                p, changed = g, True
    return {m: c for m, c in f.items() if _int_atom(m) is None or _int_atom(m) % p}


# Conjugation rounds before an inverse is given up as untracked.
_CONJUGATE_ROUNDS = 32


def _inv_form(f):
    """
    Exact form of 1/f by rationalizing the denominator.

    With f = P + R where R carries one radical, (P + R)(P - R) = P^2 - R^2 no
    longer contains it. Repeating until the denominator is rational gives
    1/f = (product of conjugates) / denominator.
    """
    if not f:
        return None
    num = {(): Fraction(1)}
    for _ in range(_CONJUGATE_ROUNDS):
        value = rational_value(f)
        if value is not None:
            return _form_scale(num, 1 / value) if value else None
        free = _split_radical(f)
        if free is None:
            return None
        # P - R == 2P - f
        conj = _form_add(_form_scale(free, 2), _form_scale(f, -1))
        f = _form_mul(f, conj)
        num = _form_mul(num, conj)
        if not f or num is None:
            return None
    return None


def rational_value(form):
    """The rational a form denotes, or None when it involves a radical."""
    if form is None or any(mono for mono in form):
        return None
    return form.get((), Fraction(0))


# ==============================================================================
# 3. Handles
# ==============================================================================

def _operand_text(arg):
    if isinstance(arg, Fraction):
        return f"{arg.numerator}/{arg.denominator}"
    return str(arg)


class OracleHandle:
    """
    A node of an oracle expression with its own refinement cache.

    Outside code reads the cache through `interval()`/`state` and changes it
    only through `refine()`.
    """

    OPS = {"const": 1, "sqrt": 1, "neg": 1, "inv": 1, "add": 2, "mul": 2}

    def __init__(self, op, *args):
        if op not in self.OPS or len(args) != self.OPS[op]:
            raise ValueError(f"bad oracle node {op}{args}")
        self.op = op
        self.args = tuple(a if isinstance(a, OracleHandle) else Fraction(a) for a in args)
        self.form = self._radical_form()
        self._publish_lock = threading.Lock()
        lo, hi = self._enclose(0)
        self._state = (lo, hi, 0)

    # --- structure -------------------------------------------------------------

    def _arg_form(self, arg):
        if isinstance(arg, OracleHandle):
            return arg.form
        return {(): arg} if arg else {}

    def _radical_form(self):
        forms = [self._arg_form(a) for a in self.args]
        if self.op == "const":
            return forms[0]
        if self.op == "neg":
            return _form_scale(forms[0], -1)
        if self.op == "add":
            return _form_add(forms[0], forms[1])
        if self.op == "mul":
            return _form_mul(forms[0], forms[1])
        if self.op == "inv":
            return _inv_form(forms[0])
        # sqrt
        inner = forms[0]
        value = rational_value(inner)
        if value is not None:
            return _sqrt_rational_form(value)
        if inner is None:
            return None
        return {(_Nested(inner),): Fraction(1)}

    def __str__(self):
        return f"{self.op}({', '.join(_operand_text(a) for a in self.args)})"

    __repr__ = __str__

    # --- intervals -------------------------------------------------------------

    @staticmethod
    def _arg_interval(arg, depth):
        if isinstance(arg, OracleHandle):
            return arg.interval(depth)
        return arg, arg

    def _enclose(self, depth):
        bits = settings.precision_bits(depth)
        if self.op == "const":
            c = self.args[0]
            return c, c
        if self.op == "sqrt":
            arg = self.args[0]
            if not isinstance(arg, OracleHandle):
                return sqrt_bracket(arg, bits)
            lo, hi = arg.interval(depth)
            lo = max(lo, Fraction(0))
            hi = max(hi, Fraction(0))
            return sqrt_bracket(lo, bits)[0], sqrt_bracket(hi, bits)[1]
        if self.op == "neg":
            lo, hi = self._arg_interval(self.args[0], depth)
            return -hi, -lo
        if self.op == "add":
            lo1, hi1 = self._arg_interval(self.args[0], depth)
            lo2, hi2 = self._arg_interval(self.args[1], depth)
            return lo1 + lo2, hi1 + hi2
        if self.op == "mul":
            lo1, hi1 = self._arg_interval(self.args[0], depth)
            lo2, hi2 = self._arg_interval(self.args[1], depth)
            products = (lo1 * lo2, lo1 * hi2, hi1 * lo2, hi1 * hi2)
            return min(products), max(products)
        # inv: the operand interval must exclude zero before it can be inverted
        arg = self.args[0]
        limit = max(depth, settings.max_refinement_depth)
        d = depth
        lo, hi = self._arg_interval(arg, d)
        while lo <= 0 <= hi:
            if d >= limit:
                raise IndeterminatePredicate(str(arg), (lo, hi), d)
            d += 1
            lo, hi = self._arg_interval(arg, d)
        return 1 / hi, 1 / lo

    @property
    def state(self):
        """The cached `(lo, hi, depth)` triple."""
        return self._state

    def interval(self, depth=0):
        """Bounds valid at refinement depth `depth` or deeper."""
        lo, hi, have = self._state
        if have >= depth:
            return lo, hi
        return self.refine(depth)

    def refine(self, depth=None):
        """
        Tighten the cached interval to at least `depth` rounds (default: one
        more round than cached) and return the published bounds.

        Idempotent: refining again to the same depth never loosens the cache.
        """
        if depth is None:
            depth = self._state[2] + 1
        lo, hi = self._enclose(depth)
        return self._publish(lo, hi, depth)

    def _publish(self, lo, hi, depth):
        with self._publish_lock:
            old_lo, old_hi, old_depth = self._state
            state = (max(lo, old_lo), min(hi, old_hi), max(depth, old_depth))
            self._state = state
        return state[0], state[1]

    def width(self):
        lo, hi, _ = self._state
        return hi - lo

    def approx(self):
        lo, hi, _ = self._state
        return float((lo + hi) / 2)

    # --- sign ------------------------------------------------------------------

    def _structural_sign(self):
        form = self.form
        if form is None:
            return None
        if not form:
            return 0
        # every atom is a positive square root, so a common coefficient sign wins
        signs = {coeff > 0 for coeff in form.values()}
        if len(signs) == 1:
            return 1 if signs.pop() else -1
        return None

    def sign(self, max_depth=None):
        """
        -1, 0 or 1. Raises `IndeterminatePredicate` when the interval still
        straddles zero after `max_depth` rounds.
        """
        structural = self._structural_sign()
        if structural is not None:
            return structural
        limit = settings.max_refinement_depth if max_depth is None else max_depth
        lo, hi, depth = self._state
        while True:
            if lo > 0:
                return 1
            if hi < 0:
                return -1
            if depth >= limit:
                break
            depth += 1
            lo, hi = self.interval(depth)
            logger.debug("refined %s to depth %d: [%s, %s]", self, depth, lo, hi)
        logger.warning("sign of %s undecided after %d rounds", self, depth)
        raise IndeterminatePredicate(str(self), (lo, hi), depth)

    def to_dict(self):
        lo, hi, _ = self._state
        return {"expr": str(self), "interval": f"[{_operand_text(lo)},{_operand_text(hi)}]"}
