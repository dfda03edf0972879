"""ICP soundness verifier — Z3 check that a contraction lost no solutions.

A contraction of `before` to `after` under `f(x) ∈ T` is sound when

    ∄ x ∈ before .  f(x) ∈ T  ∧  x ∉ after

This module asks Z3 (nonlinear real arithmetic) for such an x:
  unsat   -> sound
  sat     -> unsound, the model is a counterexample
  unknown -> solver gave up (timeout, incomplete theory)

Integer exponents are expanded to products; every divisor is constrained
to be non-zero, matching the interval semantics of division.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Mapping, Union

import z3

from icp.ast_nodes import Expr, Leaf, Call, leaf_variables
from icp.errors import (
    MalformedExpression, UnsupportedOperator,
    malformed_expression, unsupported_operator,
)
from icp.interval import Interval, ENTIRE
from icp.parser import parse

logger = logging.getLogger(__name__)

SOUND = "sound"
UNSOUND = "unsound"
UNKNOWN = "unknown"


@dataclass
class VerificationResult:
    status: str
    counterexample: dict[str, str] = field(default_factory=dict)
    reason: str = ""

    @property
    def sound(self) -> bool:
        return self.status == SOUND

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"status": self.status}
        if self.counterexample:
            d["counterexample"] = self.counterexample
        if self.reason:
            d["reason"] = self.reason
        return d


def _real(value: Union[int, float]) -> Any:
    frac = Fraction(value)
    return z3.RatVal(frac.numerator, frac.denominator)


class _Encoder:
    """Translates an expression tree to a Z3 real term."""

    def __init__(self, z3_vars: dict[str, Any]):
        self.z3_vars = z3_vars
        self.side_conditions: list[Any] = []

    def encode(self, expr: Expr) -> Any:
        if isinstance(expr, Leaf):
            if isinstance(expr.value, str):
                return self.z3_vars[expr.value]
            return _real(expr.value)

        if isinstance(expr, Call) and len(expr.args) == 2:
            left = self.encode(expr.args[0])
            if expr.op == "^":
                return self._power(left, expr.args[1])
            right = self.encode(expr.args[1])
            if expr.op == "+":
                return left + right
            if expr.op == "-":
                return left - right
            if expr.op == "*":
                return left * right
            if expr.op == "/":
                self.side_conditions.append(right != 0)
                return left / right
            raise UnsupportedOperator(unsupported_operator(expr.op, ["+", "-", "*", "/", "^"]))

        raise MalformedExpression(malformed_expression(repr(expr), "cannot encode for Z3"))

    def _power(self, base: Any, exponent: Expr) -> Any:
        value = exponent.value if isinstance(exponent, Leaf) else None
        if isinstance(value, str) or value is None or not float(value).is_integer():
            raise UnsupportedOperator(unsupported_operator(
                f"^ {exponent}", ["^ with an integer literal exponent"],
            ))
        n = int(value)
        term = _real(1)
        for _ in range(abs(n)):
            term = term * base
        if n < 0:
            self.side_conditions.append(base != 0)
            return _real(1) / term
        return term


def _within(term: Any, iv: Interval) -> list[Any]:
    if iv.is_empty():
        return [z3.BoolVal(False)]
    bounds = []
    if math.isfinite(iv.lo):
        bounds.append(term >= _real(iv.lo))
    if math.isfinite(iv.hi):
        bounds.append(term <= _real(iv.hi))
    return bounds


def check_contraction(tree: Union[Expr, str],
                      target: Union[Interval, tuple],
                      before: Mapping[str, Interval],
                      after: Mapping[str, Interval],
                      timeout_ms: int = 5000) -> VerificationResult:
    """Ask Z3 whether `after` dropped any solution of `tree ∈ target` in `before`."""
    if isinstance(tree, str):
        tree = parse(tree)
    target = Interval.coerce(target)
    names = leaf_variables(tree)
    z3_vars = {name: z3.Real(name) for name in names}

    encoder = _Encoder(z3_vars)
    f = encoder.encode(tree)

    solver = z3.Solver()
    solver.set("timeout", timeout_ms)
    solver.add(*encoder.side_conditions)
    for name in names:
        solver.add(*_within(z3_vars[name], before.get(name, ENTIRE)))
    solver.add(*_within(f, target))

    outside = []
    for name in names:
        inside = _within(z3_vars[name], after.get(name, ENTIRE))
        if inside:
            outside.append(z3.Not(z3.And(*inside)))
    if not outside:
        return VerificationResult(status=SOUND, reason="contracted box is unbounded")
    solver.add(z3.Or(*outside))

    result = solver.check()
    if result == z3.unsat:
        logger.debug("contraction of %s is sound", tree)
        return VerificationResult(status=SOUND)
    if result == z3.sat:
        model = solver.model()
        counterexample = {
            name: model.evaluate(var, model_completion=True).as_decimal(12)
            for name, var in z3_vars.items()
        }
        logger.warning("contraction of %s dropped solution %s", tree, counterexample)
        return VerificationResult(status=UNSOUND, counterexample=counterexample)
    reason = solver.reason_unknown()
    logger.info("soundness of %s undecided: %s", tree, reason)
    return VerificationResult(status=UNKNOWN, reason=reason)
