"""ICP Pass 1 — Unfold.

Lowers an expression tree to a flat list of single-operation assignments,
introducing one fresh temporary per Call node, then injects the constraint
on the output variable.

Traversal is left child first, then right child, then the node itself, so
every operand is defined before the statement that uses it and temporary
numbering is deterministic for a given tree and generator state.
"""

from __future__ import annotations

import logging
from numbers import Real
from typing import Optional

from icp.ast_nodes import Expr, Leaf, Call, leaf_variables
from icp.errors import MalformedExpression, UnsupportedOperator, malformed_expression, unsupported_operator
from icp.interval import Interval
from icp.ir import OpKind, Operand, Program, Statement, is_variable
from icp.symbols import SymbolGenerator

logger = logging.getLogger(__name__)

# The intersection kind is reserved for injected constraints.
_TREE_OPERATORS = {k.value: k for k in OpKind if k is not OpKind.INTERSECT}


class Unfolder:
    """Lowers an expression tree to flat statements."""

    def __init__(self, symbols: SymbolGenerator):
        self._symbols = symbols
        self._statements: list[Statement] = []

    def _emit(self, op: OpKind, left: Operand, right: Operand) -> str:
        result = self._symbols.next_symbol()
        self._statements.append(Statement(result=result, op=op, left=left, right=right))
        return result

    def unfold(self, tree: Expr) -> tuple[Operand, list[Statement]]:
        self._statements = []
        result = self._unfold_expr(tree)
        return result, list(self._statements)

    def _unfold_expr(self, expr: Expr) -> Operand:
        if isinstance(expr, Leaf):
            value = expr.value
            if isinstance(value, str):
                return value
            if isinstance(value, Real) and not isinstance(value, bool):
                return value
            raise MalformedExpression(malformed_expression(
                repr(expr), f"leaf value of type {type(value).__name__}",
            ))

        if isinstance(expr, Call):
            if len(expr.args) != 2:
                raise MalformedExpression(malformed_expression(
                    str(expr), f"operator '{expr.op}' has arity {len(expr.args)}, expected 2",
                ))
            op = _TREE_OPERATORS.get(expr.op)
            if op is None:
                raise UnsupportedOperator(unsupported_operator(expr.op, sorted(_TREE_OPERATORS)))
            left = self._unfold_expr(expr.args[0])
            right = self._unfold_expr(expr.args[1])
            return self._emit(op, left, right)

        raise MalformedExpression(malformed_expression(
            repr(expr), f"unrecognized node kind {type(expr).__name__}",
        ))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def unfold(tree: Expr, symbols: Optional[SymbolGenerator] = None) -> tuple[Operand, list[Statement]]:
    """Unfold `tree` into (result operand, statements)."""
    if symbols is None:
        symbols = SymbolGenerator()
    symbols.reserve(leaf_variables(tree))
    result, statements = Unfolder(symbols).unfold(tree)
    logger.debug("unfolded %s into %d statements, result %s", tree, len(statements), result)
    return result, statements


def unfold_program(tree: Expr, symbols: Optional[SymbolGenerator] = None) -> Program:
    result, statements = unfold(tree, symbols)
    return Program(
        statements=tuple(statements),
        output=result,
        inputs=tuple(leaf_variables(tree)),
    )


def constrain(statements: list[Statement] | tuple[Statement, ...],
              result: Operand,
              interval: Interval) -> list[Statement]:
    """Return `statements` followed by `result = result ∩ interval`."""
    if not is_variable(result):
        raise MalformedExpression(malformed_expression(
            str(result), "constant expression has no variable to constrain",
        ))
    constraint = Statement(result=result, op=OpKind.INTERSECT, left=result, right=interval)
    return list(statements) + [constraint]
