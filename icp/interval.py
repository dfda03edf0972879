"""Closed real intervals [lo, hi] with +/- infinity.

Lattice view:
  - [lo, hi] <= [lo', hi']  iff  lo' <= lo and hi <= hi'
  - [lo, hi] join [lo', hi'] = [min(lo,lo'), max(hi,hi')]      (hull)
  - [lo, hi] meet [lo', hi'] = [max(lo,lo'), min(hi,hi')]      (intersection)
  - EMPTY  = [+inf, -inf]
  - ENTIRE = [-inf, +inf]

Arithmetic rounds outward: each finite bound is computed exactly as a
Fraction, then rounded down for a lower bound and up for an upper bound.
A result that is representable as a float stays exact, otherwise the
interval widens by at most one ulp per bound. Every operation on an empty
operand yields EMPTY.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Union

INF = float("inf")
NEG_INF = float("-inf")
_MAX = sys.float_info.max

Number = Union[int, float]
Rounding = Callable[[Fraction], float]


# ---------------------------------------------------------------------------
# Directed rounding
# ---------------------------------------------------------------------------

def _round_down(q: Fraction) -> float:
    """Largest float <= q."""
    try:
        f = float(q)
    except OverflowError:
        return _MAX if q > 0 else NEG_INF
    if Fraction(f) > q:
        f = math.nextafter(f, NEG_INF)
    return f


def _round_up(q: Fraction) -> float:
    """Smallest float >= q."""
    try:
        f = float(q)
    except OverflowError:
        return INF if q > 0 else -_MAX
    if Fraction(f) < q:
        f = math.nextafter(f, INF)
    return f


def _add_bound(x: float, y: float, rnd: Rounding) -> float:
    if math.isinf(x) or math.isinf(y):
        return x + y
    return rnd(Fraction(x) + Fraction(y))


def _mul_bound(x: float, y: float, rnd: Rounding) -> float:
    # 0 * inf = 0
    if x == 0 or y == 0:
        return 0.0
    if math.isinf(x) or math.isinf(y):
        return x * y
    return rnd(Fraction(x) * Fraction(y))


def _div_bound(x: float, y: float, rnd: Rounding) -> float:
    """x / y for finite x and finite non-zero y."""
    return rnd(Fraction(x) / Fraction(y))


def _inv_bound(x: float, rnd: Rounding) -> float:
    if math.isinf(x):
        return 0.0
    return rnd(1 / Fraction(x))


def _pow_bound(x: float, n: int, rnd: Rounding) -> float:
    if math.isinf(x):
        return x ** n
    try:
        x ** n
    except OverflowError:
        # past the float range; rnd picks the largest float or infinity
        big = Fraction(_MAX) * 2
        return rnd(big if x > 0 or n % 2 == 0 else -big)
    return rnd(Fraction(x) ** n)


def _root_bound(x: float, n: int, upward: bool) -> float:
    """n-th root of a non-negative bound, rounded up or down to a float."""
    if x == 0 or math.isinf(x) or n == 1:
        return x
    r = math.sqrt(x) if n == 2 else x ** (1.0 / n)
    q = Fraction(x)
    if upward:
        while Fraction(r) ** n < q:
            r = math.nextafter(r, INF)
        while Fraction(math.nextafter(r, NEG_INF)) ** n >= q:
            r = math.nextafter(r, NEG_INF)
    else:
        while Fraction(r) ** n > q:
            r = math.nextafter(r, NEG_INF)
        while Fraction(math.nextafter(r, INF)) ** n <= q:
            r = math.nextafter(r, INF)
    return r


def _odd_root_bound(x: float, n: int, upward: bool) -> float:
    if x < 0:
        return -_root_bound(-x, n, not upward)
    return _root_bound(x, n, upward)


@dataclass(frozen=True)
class Interval:
    """A closed interval of real numbers; empty when lo > hi."""
    lo: float = NEG_INF
    hi: float = INF

    def __post_init__(self):
        object.__setattr__(self, "lo", float(self.lo))
        object.__setattr__(self, "hi", float(self.hi))

    @classmethod
    def point(cls, value: Number) -> Interval:
        return cls(float(value), float(value))

    @classmethod
    def coerce(cls, value: Interval | Number | tuple | list) -> Interval:
        """Accept an Interval, a number, or a (lo, hi) pair."""
        if isinstance(value, Interval):
            return value
        if isinstance(value, (tuple, list)):
            if len(value) != 2:
                raise ValueError(f"Expected (lo, hi), got {value!r}")
            return cls(float(value[0]), float(value[1]))
        return cls.point(value)

    def __str__(self) -> str:
        if self.is_empty():
            return "∅"
        return f"[{_fmt(self.lo)}, {_fmt(self.hi)}]"

    def to_list(self) -> list[float] | None:
        if self.is_empty():
            return None
        return [self.lo, self.hi]

    # -- predicates ----------------------------------------------------------

    def is_empty(self) -> bool:
        return self.lo > self.hi

    def is_entire(self) -> bool:
        return self.lo == NEG_INF and self.hi == INF

    def is_point(self) -> bool:
        return self.lo == self.hi

    def is_integer_point(self) -> bool:
        return self.is_point() and math.isfinite(self.lo) and float(self.lo).is_integer()

    def contains(self, value: Number | Fraction) -> bool:
        return self.lo <= value <= self.hi

    def leq(self, other: Interval) -> bool:
        """Subset test: self ⊆ other."""
        if self.is_empty():
            return True
        if other.is_empty():
            return False
        return other.lo <= self.lo and self.hi <= other.hi

    # -- lattice -------------------------------------------------------------

    def meet(self, other: Interval) -> Interval:
        new_lo = max(self.lo, other.lo)
        new_hi = min(self.hi, other.hi)
        if new_lo > new_hi:
            return EMPTY
        return Interval(new_lo, new_hi)

    def join(self, other: Interval) -> Interval:
        if self.is_empty():
            return other
        if other.is_empty():
            return self
        return Interval(min(self.lo, other.lo), max(self.hi, other.hi))

    __and__ = meet
    __or__ = join

    # -- arithmetic ----------------------------------------------------------

    def add(self, other: Interval) -> Interval:
        if self.is_empty() or other.is_empty():
            return EMPTY
        return Interval(_add_bound(self.lo, other.lo, _round_down),
                        _add_bound(self.hi, other.hi, _round_up))

    def sub(self, other: Interval) -> Interval:
        if self.is_empty() or other.is_empty():
            return EMPTY
        return Interval(_add_bound(self.lo, -other.hi, _round_down),
                        _add_bound(self.hi, -other.lo, _round_up))

    def mul(self, other: Interval) -> Interval:
        if self.is_empty() or other.is_empty():
            return EMPTY
        pairs = [(self.lo, other.lo), (self.lo, other.hi),
                 (self.hi, other.lo), (self.hi, other.hi)]
        return Interval(min(_mul_bound(x, y, _round_down) for x, y in pairs),
                        max(_mul_bound(x, y, _round_up) for x, y in pairs))

    def reciprocal(self) -> Interval:
        """Hull of {1/x | x in self, x != 0}."""
        if self.is_empty() or (self.lo == 0 and self.hi == 0):
            return EMPTY
        if self.lo < 0 < self.hi:
            return ENTIRE
        if self.lo == 0:
            return Interval(_inv_bound(self.hi, _round_down), INF)
        if self.hi == 0:
            return Interval(NEG_INF, _inv_bound(self.lo, _round_up))
        return Interval(_inv_bound(self.hi, _round_down), _inv_bound(self.lo, _round_up))

    def div(self, other: Interval) -> Interval:
        if self.is_empty() or other.is_empty():
            return EMPTY
        bounds = (self.lo, self.hi, other.lo, other.hi)
        if other.contains(0) or not all(math.isfinite(b) for b in bounds):
            return self.mul(other.reciprocal())
        pairs = [(self.lo, other.lo), (self.lo, other.hi),
                 (self.hi, other.lo), (self.hi, other.hi)]
        return Interval(min(_div_bound(x, y, _round_down) for x, y in pairs),
                        max(_div_bound(x, y, _round_up) for x, y in pairs))

    def neg(self) -> Interval:
        if self.is_empty():
            return EMPTY
        return Interval(-self.hi, -self.lo)

    def power(self, other: Interval) -> Interval:
        """self ** other for an integer point exponent; ENTIRE otherwise."""
        if self.is_empty() or other.is_empty():
            return EMPTY
        if not other.is_integer_point():
            return ENTIRE
        n = int(other.lo)
        if n < 0:
            return self.power(Interval.point(-n)).reciprocal()
        if n == 0:
            return Interval(1.0, 1.0)
        if n % 2 == 1 or self.lo >= 0:
            return Interval(_pow_bound(self.lo, n, _round_down),
                            _pow_bound(self.hi, n, _round_up))
        if self.hi <= 0:
            return Interval(_pow_bound(self.hi, n, _round_down),
                            _pow_bound(self.lo, n, _round_up))
        return Interval(0.0, max(_pow_bound(self.lo, n, _round_up),
                                 _pow_bound(self.hi, n, _round_up)))

    def root(self, n: int) -> Interval:
        """Principal real n-th root (n >= 1); the non-negative branch for even n."""
        if self.is_empty():
            return EMPTY
        if n % 2 == 1:
            return Interval(_odd_root_bound(self.lo, n, upward=False),
                            _odd_root_bound(self.hi, n, upward=True))
        nonneg = self.meet(Interval(0.0, INF))
        if nonneg.is_empty():
            return EMPTY
        return Interval(_root_bound(nonneg.lo, n, upward=False),
                        _root_bound(nonneg.hi, n, upward=True))

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div
    __neg__ = neg
    __pow__ = power


def _fmt(x: float) -> str:
    if x == INF:
        return "+inf"
    if x == NEG_INF:
        return "-inf"
    return repr(x)


EMPTY = Interval(INF, NEG_INF)
ENTIRE = Interval(NEG_INF, INF)
