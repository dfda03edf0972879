"""ICP expression tree.

Two node kinds only:
  Leaf(value)     a variable name or a numeric literal
  Call(op, args)  an operator symbol applied to exactly two children

Nodes are immutable and hashable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from icp.errors import SourceLocation


@dataclass(frozen=True)
class Expr:
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class Leaf(Expr):
    value: Union[str, int, float] = 0

    @property
    def is_variable(self) -> bool:
        return isinstance(self.value, str)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Call(Expr):
    op: str = ""
    args: tuple[Expr, ...] = ()

    def __str__(self) -> str:
        if len(self.args) == 2:
            return f"({self.args[0]} {self.op} {self.args[1]})"
        inner = ", ".join(str(a) for a in self.args)
        return f"{self.op}({inner})"


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------

def var(name: str) -> Leaf:
    return Leaf(value=name)


def const(value: Union[int, float]) -> Leaf:
    return Leaf(value=value)


def call(op: str, *args: Expr) -> Call:
    return Call(op=op, args=tuple(args))


def leaf_variables(tree: Expr) -> list[str]:
    """Variable names in first-occurrence, left-to-right order."""
    names: list[str] = []
    seen: set[str] = set()
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            if node.is_variable and node.value not in seen:
                seen.add(node.value)
                names.append(node.value)
        elif isinstance(node, Call):
            stack.extend(reversed(node.args))
    return names


def count_calls(tree: Expr) -> int:
    if isinstance(tree, Call):
        return 1 + sum(count_calls(a) for a in tree.args)
    return 0
