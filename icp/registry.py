"""ICP Operation Registry — forward and reverse interval operators.

Each operator kind maps to a forward evaluator `f(a, b) -> v` and a reverse
contractor `r(v, a, b) -> (v', a', b')`. A reverse contractor narrows all
three intervals of the relation `v = a op b`:

  v' = v ∩ (a op b)
  a' = a ∩ (projection of v' and b onto a)
  b' = b ∩ (projection of v' and a' onto b)

Each projection over-approximates the set of values still consistent with
the relation, so no solution is ever removed (HC4-revise, Benhamou et al.
1999).

The registry is read-only after construction. Intersection is always
present since the constraint injector relies on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from icp.errors import UnsupportedOperator, unsupported_operator
from icp.interval import Interval, ENTIRE
from icp.ir import OpKind, ReverseFn

ForwardFn = Callable[[Interval, Interval], Interval]


def _relaxed_div(num: Interval, den: Interval) -> Interval:
    """{x | x * d = n for some n in num, d in den}, hulled.

    When both contain zero, 0 * x = 0 holds for every x.
    """
    if num.contains(0) and den.contains(0):
        return ENTIRE
    return num.div(den)


# ---------------------------------------------------------------------------
# Reverse contractors
# ---------------------------------------------------------------------------

def reverse_add(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a.add(b))
    a = a.meet(v.sub(b))
    b = b.meet(v.sub(a))
    return v, a, b


def reverse_sub(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a.sub(b))
    a = a.meet(v.add(b))
    b = b.meet(a.sub(v))
    return v, a, b


def reverse_mul(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a.mul(b))
    a = a.meet(_relaxed_div(v, b))
    b = b.meet(_relaxed_div(v, a))
    return v, a, b


def reverse_div(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a.div(b))
    a = a.meet(v.mul(b))
    # b = a / v where v != 0; b is unconstrained when a = v = 0
    b = b.meet(_relaxed_div(a, v))
    return v, a, b


def reverse_pow(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a.power(b))
    if v.is_empty() or not b.is_integer_point():
        return v, a, b
    n = int(b.lo)
    if n == 0:
        return v, a, b
    target = v if n > 0 else v.reciprocal()
    root = target.root(abs(n))
    if abs(n) % 2 == 1:
        return v, a.meet(root), b
    # even power: x^n in v  <=>  |x| in root
    a = a.meet(root).join(a.meet(root.neg()))
    return v, a, b


def reverse_intersect(v: Interval, a: Interval, b: Interval) -> tuple[Interval, Interval, Interval]:
    v = v.meet(a).meet(b)
    return v, a.meet(v), b.meet(v)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RegistryEntry:
    op: OpKind
    reverse_name: str
    forward: ForwardFn
    reverse: ReverseFn


_ALL_ENTRIES: dict[OpKind, RegistryEntry] = {
    OpKind.ADD: RegistryEntry(OpKind.ADD, "reverse_add", Interval.add, reverse_add),
    OpKind.SUB: RegistryEntry(OpKind.SUB, "reverse_sub", Interval.sub, reverse_sub),
    OpKind.MUL: RegistryEntry(OpKind.MUL, "reverse_mul", Interval.mul, reverse_mul),
    OpKind.DIV: RegistryEntry(OpKind.DIV, "reverse_div", Interval.div, reverse_div),
    OpKind.POW: RegistryEntry(OpKind.POW, "reverse_pow", Interval.power, reverse_pow),
    OpKind.INTERSECT: RegistryEntry(OpKind.INTERSECT, "reverse_intersect", Interval.meet, reverse_intersect),
}


class OperationRegistry:
    """Read-only mapping from operator kind to its forward/reverse pair."""

    def __init__(self, entries: Iterable[RegistryEntry] = ()):
        table = {e.op: e for e in entries}
        table.setdefault(OpKind.INTERSECT, _ALL_ENTRIES[OpKind.INTERSECT])
        self._table: Mapping[OpKind, RegistryEntry] = MappingProxyType(table)

    @classmethod
    def subset(cls, ops: Iterable[OpKind | str]) -> OperationRegistry:
        """Registry restricted to `ops` (kinds or symbols such as "+")."""
        kinds = []
        for op in ops:
            if not isinstance(op, OpKind):
                try:
                    op = OpKind.from_symbol(op)
                except ValueError:
                    raise UnsupportedOperator(unsupported_operator(
                        str(op), OpKind.symbols(),
                    )) from None
            kinds.append(op)
        return cls(_ALL_ENTRIES[k] for k in kinds)

    def supports(self, op: OpKind) -> bool:
        return op in self._table

    def entry(self, op: OpKind) -> RegistryEntry:
        try:
            return self._table[op]
        except KeyError:
            raise UnsupportedOperator(unsupported_operator(
                op.value, sorted(k.value for k in self._table),
            )) from None

    def reverse_of(self, op: OpKind) -> str:
        return self.entry(op).reverse_name

    def forward(self, op: OpKind) -> ForwardFn:
        return self.entry(op).forward

    def operators(self) -> list[OpKind]:
        return list(self._table)

    def __contains__(self, op: object) -> bool:
        return op in self._table

    def __len__(self) -> int:
        return len(self._table)


DEFAULT_REGISTRY = OperationRegistry(_ALL_ENTRIES.values())
