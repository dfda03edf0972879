"""Structured error objects for the ICP build pipeline.

Every error is machine-readable. Build-time failures carry enough context
(node, operator, position) to be reported as JSON by the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    SYNTAX_ERROR = "syntax_error"
    MALFORMED_EXPRESSION = "malformed_expression"
    UNSUPPORTED_OPERATOR = "unsupported_operator"


@dataclass
class SourceLocation:
    line: int
    column: int
    file: str = "<expr>"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class IcpError:
    kind: ErrorKind
    message: str
    location: Optional[SourceLocation] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.kind.value}]{loc}: {self.message}"


def syntax_error(
    message: str,
    location: Optional[SourceLocation] = None,
) -> IcpError:
    return IcpError(
        kind=ErrorKind.SYNTAX_ERROR,
        message=message,
        location=location,
    )


def malformed_expression(
    node: str,
    reason: str,
) -> IcpError:
    return IcpError(
        kind=ErrorKind.MALFORMED_EXPRESSION,
        message=f"Malformed expression node {node}: {reason}",
        details={"node": node, "reason": reason},
    )


def unsupported_operator(
    op: str,
    available: list[str],
) -> IcpError:
    return IcpError(
        kind=ErrorKind.UNSUPPORTED_OPERATOR,
        message=f"No reverse operator registered for '{op}'",
        details={"operator": op, "available": available},
    )


class BuildError(Exception):
    """Exception wrapping one or more IcpErrors."""

    def __init__(self, errors: list[IcpError] | IcpError):
        if isinstance(errors, IcpError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent)


class ParseError(BuildError):
    """Source text could not be parsed into an expression tree."""


class MalformedExpression(BuildError):
    """A tree node has an unsupported shape or arity."""


class UnsupportedOperator(BuildError):
    """An operator has no registered forward/reverse pair."""
