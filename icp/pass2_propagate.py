"""ICP Pass 2 — Propagate.

Builds the reverse program: the forward statements walked last-to-first,
each replaced by a call to its reverse contractor. The injected constraint
comes last in the forward program, so it is the first reverse call, and
each operand is narrowed before its own defining statement is reversed.

The reverse program is built in full before it is returned: an operator
without a registered reverse aborts the whole pass.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from icp.ir import ReverseCall, Statement
from icp.registry import DEFAULT_REGISTRY, OperationRegistry

logger = logging.getLogger(__name__)


def propagate(statements: Sequence[Statement],
              registry: Optional[OperationRegistry] = None) -> list[ReverseCall]:
    """Return one ReverseCall per statement, in reverse order."""
    if registry is None:
        registry = DEFAULT_REGISTRY
    calls: list[ReverseCall] = []
    for stmt in reversed(statements):
        entry = registry.entry(stmt.op)
        calls.append(ReverseCall(
            result=stmt.result,
            op=stmt.op,
            left=stmt.left,
            right=stmt.right,
            name=entry.reverse_name,
            fn=entry.reverse,
        ))
    logger.debug("built reverse program of %d calls", len(calls))
    return calls
