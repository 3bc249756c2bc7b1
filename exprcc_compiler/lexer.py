"""
Lexer / Tokenizer for the exprcc expression compiler.

Converts an arithmetic expression into a flat list of tokens for the
parser. Only three kinds exist: integer literals, the single-character
symbols + - * / ( ), and one terminating EOF token.

Every token records its 0-based offset into the source so diagnostics
can point at it without re-scanning. Only ASCII is accepted, so up to
and including the first error the character index is also the byte
offset into the UTF-8 encoding.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import List

from .diagnostics import LexerError

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Token types
# ──────────────────────────────────────────────

class TokenType(enum.Enum):
    NUM = "NUM"             # integer literal
    RESERVED = "RESERVED"   # operator or parenthesis
    EOF = "EOF"


# push takes a sign-extended 32-bit immediate
MAX_IMMEDIATE = 2 ** 31 - 1

PUNCTUATORS = "+-*/()"

# C isspace() in the "C" locale; all of these are single bytes
WHITESPACE = " \t\n\v\f\r"


# ──────────────────────────────────────────────
# Token data class
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str | int
    offset: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, @{self.offset})"


# ──────────────────────────────────────────────
# Lexer
# ──────────────────────────────────────────────

class Lexer:
    """Tokenizes an expression string into a list of Tokens."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []

    def _peek(self) -> str:
        return self.source[self.pos] if self.pos < len(self.source) else "\0"

    def _read_number(self) -> Token:
        start = self.pos
        # ASCII digits only
        while self.pos < len(self.source) and self.source[self.pos] in "0123456789":
            self.pos += 1
        value = int(self.source[start:self.pos])
        if value > MAX_IMMEDIATE:
            raise LexerError("number out of range", start, self.source,
                             character=self.source[start])
        return Token(TokenType.NUM, value, start)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source and return a list of tokens."""
        self.pos = 0
        self.tokens = []

        while self.pos < len(self.source):
            ch = self._peek()

            if ch in WHITESPACE:
                self.pos += 1
                continue

            if ch in PUNCTUATORS:
                self.tokens.append(Token(TokenType.RESERVED, ch, self.pos))
                self.pos += 1
                continue

            if ch in "0123456789":
                self.tokens.append(self._read_number())
                continue

            raise LexerError("invalid token", self.pos, self.source, character=ch)

        self.tokens.append(Token(TokenType.EOF, "", len(self.source)))
        logger.debug("tokenized %d chars into %d tokens",
                     len(self.source), len(self.tokens))
        return self.tokens
