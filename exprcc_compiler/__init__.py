"""
exprcc: arithmetic expression compiler for x86-64
=================================================
Compiles an integer expression such as "(1+2)*3" into an Intel-syntax
assembly listing whose `main` returns the expression value in RAX.

Architecture:
    ┌────────────┐    ┌──────────┐    ┌──────────┐    ┌───────────┐
    │ Expression │───>│  Lexer   │───>│  Parser  │───>│  CodeGen  │
    │  (string)  │    │ (tokens) │    │  (AST)   │    │ (asm text)│
    └────────────┘    └──────────┘    └──────────┘    └───────────┘

    - lexer.py:       single-pass scanner, one token per symbol or number
    - parser.py:      recursive descent, three precedence tiers
    - ast_nodes.py:   frozen dataclass tree (IntLiteral, BinaryOp)
    - codegen.py:     postorder walk emitting push/pop stack code
    - diagnostics.py: LexerError / ParseError and the caret renderer
    - evaluator.py:   reference stack machine for checking listings
"""

from __future__ import annotations
from typing import List

__version__ = "0.1.0"

from .diagnostics import CompileError, LexerError, ParseError, format_diagnostic
from .lexer import Lexer, Token, TokenType, MAX_IMMEDIATE
from .ast_nodes import ASTNode, BinaryOp, BinaryOperator, IntLiteral, dump_ast
from .parser import Parser, MAX_NESTING
from .codegen import CodeGenerator, CodeGenError
from .evaluator import EvaluationError, StackMachine, exit_status

PROLOGUE = [
    ".intel_syntax noprefix",
    ".globl main",
    "main:",
]

EPILOGUE = [
    "  pop rax",
    "  ret",
]


def compile_expression(source: str) -> List[str]:
    """Compile an expression to its instruction lines (no prologue/epilogue).

    Raises LexerError or ParseError on the first problem in the source.
    """
    tokens = Lexer(source).tokenize()
    ast = Parser(tokens, source).parse()
    return CodeGenerator().generate(ast)


def compile_source(source: str) -> str:
    """Compile an expression to a complete assembly listing.

    Full pipeline: Lexer -> Parser -> AST -> CodeGenerator, wrapped in
    the `main` prologue and a final `pop rax` / `ret`.
    """
    body = compile_expression(source)
    return "\n".join(PROLOGUE + body + EPILOGUE)
