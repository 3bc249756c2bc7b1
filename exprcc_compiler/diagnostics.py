"""
Diagnostics for the exprcc expression compiler.

Both the lexer and the parser fail fast: the first problem raises a
CompileError subclass carrying the original source and the byte offset
of the offending input. Nothing in the pipeline prints or exits; the
CLI is the only place that renders an error (format_diagnostic) and
terminates the process.

Rendered form (same layout for lexical and syntax errors):

    1+$
      ^ invalid token
"""

from __future__ import annotations
from typing import Tuple


class CompileError(Exception):
    """Base class for errors that point at a location in the source."""

    def __init__(self, message: str, offset: int, source: str = ""):
        self.message = message
        self.offset = offset
        self.source = source
        super().__init__(f"{message} (at offset {offset})")


class LexerError(CompileError):
    """Unrecognized character (or unusable literal) during tokenization."""

    def __init__(self, message: str, offset: int, source: str = "",
                 character: str = ""):
        self.character = character
        super().__init__(message, offset, source)


class ParseError(CompileError):
    """Missing symbol or number during parsing."""

    def __init__(self, message: str, offset: int, source: str = "",
                 expected: str = ""):
        self.expected = expected
        super().__init__(message, offset, source)


# every vertical character the lexer skips as whitespace
LINE_BREAKS = "\n\r\v\f"


def _locate(source: str, offset: int) -> Tuple[str, int]:
    """Return (line text, column) for a byte offset into source."""
    offset = max(0, min(offset, len(source)))
    line_start = offset
    while line_start > 0 and source[line_start - 1] not in LINE_BREAKS:
        line_start -= 1
    line_end = offset
    while line_end < len(source) and source[line_end] not in LINE_BREAKS:
        line_end += 1
    return source[line_start:line_end], offset - line_start


def format_diagnostic(error: CompileError) -> str:
    """Render the source line, a caret under the offset, and the message."""
    line, col = _locate(error.source, error.offset)
    return f"{line}\n{' ' * col}^ {error.message}"
