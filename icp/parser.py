"""ICP Parser — LL(1) recursive-descent parser for arithmetic expressions.

Grammar:
  expression := term (('+' | '-') term)*
  term       := unary (('*' | '/') unary)*
  unary      := '-' unary | power
  power      := primary ('^' unary)?          (right-associative)
  primary    := NUMBER | IDENT | '(' expression ')'

Unary minus on a literal folds into the literal; on anything else it
becomes `0 - operand`, so the tree only ever holds binary calls.
"""

from __future__ import annotations

from typing import Optional

from icp.lexer import Token, TokenType, tokenize
from icp.ast_nodes import Expr, Leaf, Call
from icp.errors import SourceLocation, syntax_error, ParseError


class Parser:
    """LL(1) recursive-descent parser for constraint expressions."""

    def __init__(self, tokens: list[Token], filename: str = "<expr>"):
        self.tokens = tokens
        self.pos = 0
        self.filename = filename

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF

    def _peek(self) -> TokenType:
        return self._current().type

    def _loc(self) -> SourceLocation:
        return self._current().location

    def _advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _expect(self, tt: TokenType) -> Token:
        tok = self._current()
        if tok.type != tt:
            raise ParseError(syntax_error(
                f"Expected {tt.name}, got {tok.type.name} ('{tok.value}')",
                tok.location,
            ))
        return self._advance()

    def _match(self, tt: TokenType) -> Optional[Token]:
        if self._peek() == tt:
            return self._advance()
        return None

    def parse(self) -> Expr:
        expr = self._parse_expression()
        self._expect(TokenType.EOF)
        return expr

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------

    def _parse_expression(self) -> Expr:
        left = self._parse_term()
        while self._peek() in (TokenType.PLUS, TokenType.MINUS):
            loc = self._loc()
            op = self._advance().value
            right = self._parse_term()
            left = Call(op=op, args=(left, right), location=loc)
        return left

    def _parse_term(self) -> Expr:
        left = self._parse_unary()
        while self._peek() in (TokenType.STAR, TokenType.SLASH):
            loc = self._loc()
            op = self._advance().value
            right = self._parse_unary()
            left = Call(op=op, args=(left, right), location=loc)
        return left

    def _parse_unary(self) -> Expr:
        if self._peek() == TokenType.MINUS:
            loc = self._loc()
            self._advance()
            operand = self._parse_unary()
            if isinstance(operand, Leaf) and not operand.is_variable:
                return Leaf(value=-operand.value, location=loc)
            return Call(op="-", args=(Leaf(value=0, location=loc), operand), location=loc)
        if self._match(TokenType.PLUS):
            return self._parse_unary()
        return self._parse_power()

    def _parse_power(self) -> Expr:
        base = self._parse_primary()
        if self._peek() == TokenType.CARET:
            loc = self._loc()
            self._advance()
            exponent = self._parse_unary()
            return Call(op="^", args=(base, exponent), location=loc)
        return base

    def _parse_primary(self) -> Expr:
        tt = self._peek()
        loc = self._loc()

        if tt == TokenType.INT_LIT:
            tok = self._advance()
            return Leaf(value=int(tok.value), location=loc)

        if tt == TokenType.FLOAT_LIT:
            tok = self._advance()
            return Leaf(value=float(tok.value), location=loc)

        if tt == TokenType.IDENT:
            tok = self._advance()
            return Leaf(value=tok.value, location=loc)

        if tt == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN)
            return expr

        raise ParseError(syntax_error(
            f"Unexpected token '{self._current().value}' ({tt.name})",
            loc,
        ))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(source: str, filename: str = "<expr>") -> Expr:
    """Parse an arithmetic expression into a Leaf/Call tree."""
    tokens = tokenize(source, filename)
    parser = Parser(tokens, filename)
    return parser.parse()
