"""ICP Lexer — tokenizer for arithmetic constraint expressions.

Produces a stream of tokens with line/column tracking. `**` is accepted
as a synonym for `^`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from icp.errors import SourceLocation, syntax_error, ParseError


class TokenType(Enum):
    # Literals
    INT_LIT = auto()
    FLOAT_LIT = auto()

    # Identifier
    IDENT = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    CARET = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()

    # Special
    EOF = auto()


@dataclass
class Token:
    type: TokenType
    value: str
    location: SourceLocation

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.location})"


_SINGLE_CHAR: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


class Lexer:
    """Tokenizer for constraint expressions."""

    def __init__(self, source: str, filename: str = "<expr>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _peek_ahead(self, offset: int = 1) -> Optional[str]:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in (" ", "\t", "\r", "\n"):
            self._advance()

    def _read_number(self) -> Token:
        loc = self._loc()
        value = ""
        is_float = False
        while self._peek() is not None and self._peek().isdigit():
            value += self._advance()
        if self._peek() == "." and (self._peek_ahead() or "").isdigit():
            is_float = True
            value += self._advance()
            while self._peek() is not None and self._peek().isdigit():
                value += self._advance()
        if self._peek() in ("e", "E"):
            nxt = self._peek_ahead() or ""
            nxt2 = self._peek_ahead(2) or ""
            if nxt.isdigit() or (nxt in ("+", "-") and nxt2.isdigit()):
                is_float = True
                value += self._advance()
                if self._peek() in ("+", "-"):
                    value += self._advance()
                while self._peek() is not None and self._peek().isdigit():
                    value += self._advance()
        token_type = TokenType.FLOAT_LIT if is_float else TokenType.INT_LIT
        return Token(token_type, value, loc)

    def _read_identifier(self) -> Token:
        loc = self._loc()
        value = ""
        while self.pos < len(self.source) and (self.source[self.pos].isalnum() or self.source[self.pos] == "_"):
            value += self._advance()
        return Token(TokenType.IDENT, value, loc)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while self.pos < len(self.source):
            self._skip_whitespace()
            if self.pos >= len(self.source):
                break

            ch = self._peek()
            loc = self._loc()

            if ch.isdigit() or (ch == "." and (self._peek_ahead() or "").isdigit()):
                tokens.append(self._read_number())
            elif ch.isalpha() or ch == "_":
                tokens.append(self._read_identifier())
            elif ch == "*":
                self._advance()
                if self._peek() == "*":
                    self._advance()
                    tokens.append(Token(TokenType.CARET, "^", loc))
                else:
                    tokens.append(Token(TokenType.STAR, "*", loc))
            elif ch in _SINGLE_CHAR:
                self._advance()
                tokens.append(Token(_SINGLE_CHAR[ch], ch, loc))
            else:
                raise ParseError(syntax_error(f"Unexpected character '{ch}'", loc))

        tokens.append(Token(TokenType.EOF, "", self._loc()))
        return tokens


def tokenize(source: str, filename: str = "<expr>") -> list[Token]:
    return Lexer(source, filename).tokenize()
