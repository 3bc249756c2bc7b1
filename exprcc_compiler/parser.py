"""
Recursive-descent parser for the exprcc expression compiler.

Parses the Lexer's token list into an AST defined in ast_nodes:

    expr    := mul (('+' | '-') mul)*
    mul     := primary (('*' | '/') primary)*
    primary := NUMBER | '(' expr ')'

Each repeating tier folds into its left operand, so a-b-c parses as
(a-b)-c. One token of lookahead is enough at every tier; the cursor
never moves backwards.

Operator chains are parsed in a loop and may be any length. Each
parenthesis level costs three Python frames, so nesting is capped at
MAX_NESTING and deeper input is a ParseError at the offending '('.
"""

from __future__ import annotations
import logging
from typing import List

from .lexer import Token, TokenType
from .ast_nodes import BinaryOperator, BinaryOp, Expression, IntLiteral
from .diagnostics import ParseError

logger = logging.getLogger(__name__)

MAX_NESTING = 200


class Parser:
    """Recursive descent parser producing an AST from tokens."""

    def __init__(self, tokens: List[Token], source: str = ""):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.source = source
        self.pos = 0
        self.depth = 0

    # ── Helpers ─────────────────────────────

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _error(self, message: str, expected: str) -> ParseError:
        return ParseError(message, self._cur().offset, self.source, expected=expected)

    def _consume(self, op: str) -> bool:
        """Advance past `op` if it is the current token; report whether it was."""
        tok = self._cur()
        if tok.type != TokenType.RESERVED or tok.value != op:
            return False
        self._advance()
        return True

    def _expect(self, op: str):
        if not self._consume(op):
            raise self._error(f"expected '{op}'", op)

    def _expect_number(self) -> int:
        tok = self._cur()
        if tok.type != TokenType.NUM:
            raise self._error("expected a number", "number")
        self._advance()
        return tok.value

    def at_eof(self) -> bool:
        return self._cur().type == TokenType.EOF

    # ── Entry points ──────────────────────────

    def parse(self) -> Expression:
        """Parse the whole token list as a single expression."""
        node = self.parse_expr()
        if not self.at_eof():
            raise self._error("unexpected trailing input", "end of input")
        logger.debug("parsed %d tokens into %s", len(self.tokens), type(node).__name__)
        return node

    def parse_expr(self) -> Expression:
        left = self._parse_mul()
        while True:
            tok = self._cur()
            if self._consume("+"):
                left = BinaryOp(op=BinaryOperator.ADD, left=left,
                                right=self._parse_mul(), offset=tok.offset)
            elif self._consume("-"):
                left = BinaryOp(op=BinaryOperator.SUB, left=left,
                                right=self._parse_mul(), offset=tok.offset)
            else:
                return left

    # ── Productions ───────────────────────────

    def _parse_mul(self) -> Expression:
        left = self._parse_primary()
        while True:
            tok = self._cur()
            if self._consume("*"):
                left = BinaryOp(op=BinaryOperator.MUL, left=left,
                                right=self._parse_primary(), offset=tok.offset)
            elif self._consume("/"):
                left = BinaryOp(op=BinaryOperator.DIV, left=left,
                                right=self._parse_primary(), offset=tok.offset)
            else:
                return left

    def _parse_primary(self) -> Expression:
        """Parse a number or a parenthesized expression."""
        tok = self._cur()
        if self._consume("("):
            if self.depth >= MAX_NESTING:
                raise ParseError("expression nested too deeply", tok.offset,
                                 self.source)
            self.depth += 1
            node = self.parse_expr()
            self._expect(")")
            self.depth -= 1
            return node

        return IntLiteral(value=self._expect_number(), offset=tok.offset)
