"""ICP Flat IR — single-operation assignment statements.

No nesting. Each statement assigns one binary operation on two operands
to one variable. Operands are input variables, earlier temporaries,
numeric literals, or (for the injected constraint) interval literals.
JSON-serializable for inspection and the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence, Union

from icp.interval import Interval

Operand = Union[str, int, float, Interval]


class OpKind(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"

    # Structural: emitted by the constraint injector only
    INTERSECT = "∩"

    @classmethod
    def from_symbol(cls, symbol: str) -> OpKind:
        return cls(symbol)

    @classmethod
    def symbols(cls) -> list[str]:
        return [k.value for k in cls]


def is_variable(operand: Operand) -> bool:
    return isinstance(operand, str)


def operand_to_str(operand: Operand) -> str:
    return str(operand)


def operand_to_json(operand: Operand) -> Any:
    if isinstance(operand, Interval):
        return {"interval": operand.to_list()}
    return operand


@dataclass(frozen=True)
class Statement:
    """result = left op right"""
    result: str
    op: OpKind
    left: Operand
    right: Operand

    def variables(self) -> list[str]:
        return [o for o in (self.left, self.right) if is_variable(o)]

    def __str__(self) -> str:
        return (f"{self.result} = {operand_to_str(self.left)} "
                f"{self.op.value} {operand_to_str(self.right)}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "op": self.op.value,
            "left": operand_to_json(self.left),
            "right": operand_to_json(self.right),
        }


@dataclass(frozen=True)
class Program:
    """Forward program: ordered statements plus the designated output."""
    statements: tuple[Statement, ...] = ()
    output: Operand = ""
    inputs: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)

    def temporaries(self) -> list[str]:
        inputs = set(self.inputs)
        seen: list[str] = []
        for stmt in self.statements:
            if stmt.result not in inputs and stmt.result not in seen:
                seen.append(stmt.result)
        return seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputs": list(self.inputs),
            "output": operand_to_json(self.output),
            "statements": [s.to_dict() for s in self.statements],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        return "\n".join(str(s) for s in self.statements)


ReverseFn = Callable[[Interval, Interval, Interval], "tuple[Interval, Interval, Interval]"]


@dataclass(frozen=True)
class ReverseCall:
    """(result, left, right) = name(result, left, right)"""
    result: str
    op: OpKind
    left: Operand
    right: Operand
    name: str
    fn: ReverseFn = field(compare=False, repr=False)

    def __str__(self) -> str:
        args = ", ".join(operand_to_str(o) for o in (self.result, self.left, self.right))
        return f"({args}) = {self.name}({args})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "call": self.name,
            "result": self.result,
            "left": operand_to_json(self.left),
            "right": operand_to_json(self.right),
        }


def programs_to_dict(statements: Sequence[Statement],
                     reverse: Sequence[ReverseCall]) -> dict[str, Any]:
    return {
        "forward": [s.to_dict() for s in statements],
        "reverse": [r.to_dict() for r in reverse],
    }
