"""ICP Contractor — wires unfolding, constraint injection and reverse
propagation into a reusable box contractor.

    c = build("x^2 + y^2", (0, 1))
    c.apply({"x": Interval(-2, 2), "y": Interval(-2, 2)})
    # x and y narrowed to [-1.0, 1.0]

All structural checks happen in `build`. `apply` only ever returns a box;
an inconsistent box (every variable empty) is a result, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from icp.ast_nodes import Expr, leaf_variables
from icp.interval import Interval, EMPTY, ENTIRE, INF
from icp.ir import Operand, Program, ReverseCall, is_variable
from icp.parser import parse
from icp.pass1_unfold import unfold, constrain
from icp.pass2_propagate import propagate
from icp.registry import DEFAULT_REGISTRY, ForwardFn, OperationRegistry
from icp.symbols import SymbolGenerator

logger = logging.getLogger(__name__)

Box = dict[str, Interval]
BoxLike = Mapping[str, Union[Interval, tuple, list, int, float]]


def is_inconsistent(box: Mapping[str, Interval]) -> bool:
    """True for the empty-box result of a violated constraint."""
    return any(iv.is_empty() for iv in box.values())


def coerce_box(box: BoxLike) -> Box:
    return {name: Interval.coerce(value) for name, value in box.items()}


class Contractor:
    """A precomputed forward/reverse program for `expression ∈ target`."""

    def __init__(self, expression: Expr, target: Interval,
                 forward: Program, reverse: tuple[ReverseCall, ...],
                 registry: OperationRegistry):
        self.expression = expression
        self.target = target
        self.forward = forward
        self.reverse = reverse
        self._evaluators: tuple[tuple[str, ForwardFn, Operand, Operand], ...] = tuple(
            (s.result, registry.forward(s.op), s.left, s.right) for s in forward.statements
        )

    @property
    def variables(self) -> tuple[str, ...]:
        return self.forward.inputs

    def __repr__(self) -> str:
        return f"Contractor({self.expression} ∈ {self.target})"

    @staticmethod
    def _value(work: Box, operand: Operand) -> Interval:
        if isinstance(operand, str):
            return work[operand]
        if isinstance(operand, Interval):
            return operand
        return Interval.point(operand)

    def _inconsistent(self, box: Box) -> Box:
        names = list(box) + [v for v in self.variables if v not in box]
        return {name: EMPTY for name in names}

    def apply(self, box: BoxLike) -> Box:
        """Narrow `box` against the constraint; never widens."""
        original = coerce_box(box)
        if is_inconsistent(original):
            return self._inconsistent(original)
        work: Box = dict(original)
        for name in self.variables:
            work.setdefault(name, ENTIRE)

        # forward pass; the injected constraint is the last statement
        for result, forward, left, right in self._evaluators:
            work[result] = forward(self._value(work, left), self._value(work, right))

        if work[self.forward.output].is_empty():
            logger.debug("%r: constraint violated on forward pass", self)
            return self._inconsistent(original)

        for rc in self.reverse:
            narrowed = rc.fn(
                work[rc.result],
                self._value(work, rc.left),
                self._value(work, rc.right),
            )
            updates: Box = {}
            for operand, iv in zip((rc.result, rc.left, rc.right), narrowed):
                # an operand named twice keeps both narrowings
                if is_variable(operand) and operand in updates:
                    iv = updates[operand].meet(iv)
                if iv.is_empty():
                    logger.debug("%r: %s emptied %s", self, rc.name, operand)
                    return self._inconsistent(original)
                if is_variable(operand):
                    updates[operand] = iv
            work.update(updates)

        out: Box = {}
        for name, iv in original.items():
            out[name] = work[name] if name in self.variables else iv
        for name in self.variables:
            out.setdefault(name, work[name])
        return out

    __call__ = apply


def build(tree: Union[Expr, str],
          target: Union[Interval, tuple, list],
          registry: Optional[OperationRegistry] = None,
          symbols: Optional[SymbolGenerator] = None) -> Contractor:
    """Build a Contractor for `tree ∈ target`.

    Runs unfold, constrain and propagate once. Raises ParseError,
    MalformedExpression or UnsupportedOperator; no partial contractor is
    ever returned.
    """
    if isinstance(tree, str):
        tree = parse(tree)
    if registry is None:
        registry = DEFAULT_REGISTRY
    if symbols is None:
        symbols = SymbolGenerator()
    target = Interval.coerce(target)

    result, statements = unfold(tree, symbols)
    statements = constrain(statements, result, target)
    reverse = propagate(statements, registry)

    forward = Program(
        statements=tuple(statements),
        output=result,
        inputs=tuple(leaf_variables(tree)),
    )
    contractor = Contractor(tree, target, forward, tuple(reverse), registry)
    logger.debug("built %r: %d forward statements, %d reverse calls",
                 contractor, len(forward), len(reverse))
    return contractor


# ---------------------------------------------------------------------------
# Fixed-point driver
# ---------------------------------------------------------------------------

@dataclass
class FixpointResult:
    box: Box
    iterations: int = 0
    converged: bool = False
    history: list[Box] = field(default_factory=list)

    @property
    def inconsistent(self) -> bool:
        return is_inconsistent(self.box)


def _bound_shift(old: Interval, new: Interval) -> float:
    """Largest amount either bound moved inward."""
    if old.is_empty() or new.is_empty():
        return 0.0 if old.is_empty() == new.is_empty() else INF
    shift = 0.0
    if new.lo != old.lo:
        shift = max(shift, new.lo - old.lo)
    if new.hi != old.hi:
        shift = max(shift, old.hi - new.hi)
    return shift


def fixpoint(contractor: Contractor, box: BoxLike,
             max_iterations: int = 50, tolerance: float = 1e-9,
             keep_history: bool = False) -> FixpointResult:
    """Apply `contractor` until no bound moves by more than `tolerance`."""
    current = coerce_box(box)
    result = FixpointResult(box=current)
    for i in range(1, max_iterations + 1):
        nxt = contractor.apply(current)
        if keep_history:
            result.history.append(nxt)
        result.box, result.iterations = nxt, i
        if is_inconsistent(nxt):
            result.converged = True
            break
        shift = max((_bound_shift(current.get(k, ENTIRE), nxt[k]) for k in nxt), default=0.0)
        current = nxt
        if shift <= tolerance:
            result.converged = True
            break
    logger.info("fixpoint of %r: %d iterations, converged=%s, inconsistent=%s",
                contractor, result.iterations, result.converged, result.inconsistent)
    return result
