"""
AST Node definitions for the exprcc expression compiler.

Defines the Abstract Syntax Tree produced by the parser and consumed by
the code generator. The tree has two node kinds: integer leaves and
binary operations. Nodes are frozen, so a tree is read-only once the
parser has built it, and == compares whole trees structurally.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, fields
from typing import List, Tuple, Union


class BinaryOperator(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


# ──────────────────────────────────────────────
# Base AST node
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""
    offset: int = 0


# ──────────────────────────────────────────────
# Expressions
# ──────────────────────────────────────────────

Expression = Union["IntLiteral", "BinaryOp"]

@dataclass(frozen=True)
class IntLiteral(ASTNode):
    """Integer constant."""
    value: int = 0

@dataclass(frozen=True)
class BinaryOp(ASTNode):
    """Binary operation: left op right."""
    op: BinaryOperator = BinaryOperator.ADD
    left: Expression = None   # type: ignore
    right: Expression = None  # type: ignore

    def __post_init__(self):
        if self.left is None or self.right is None:
            raise ValueError(f"BinaryOp {self.op.value!r} needs two operands")


# ──────────────────────────────────────────────
# Debug dump
# ──────────────────────────────────────────────

def dump_ast(node: ASTNode, indent: int = 0) -> str:
    """Pretty-print an AST node tree (debug helper).

    Iterative: the work stack holds finished lines and (node, indent)
    pairs still to expand, in reverse output order.
    """
    lines: List[str] = []
    work: List[Union[str, Tuple[ASTNode, int]]] = [(node, indent)]
    while work:
        item = work.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        current, depth = item
        prefix = "  " * depth
        lines.append(f"{prefix}{type(current).__name__}:")
        pending: List[Union[str, Tuple[ASTNode, int]]] = []
        for f in fields(current):
            val = getattr(current, f.name)
            if isinstance(val, ASTNode):
                pending.append(f"{prefix}  {f.name}:")
                pending.append((val, depth + 2))
            elif isinstance(val, BinaryOperator):
                pending.append(f"{prefix}  {f.name}: {val.value}")
            else:
                pending.append(f"{prefix}  {f.name}: {val}")
        work.extend(reversed(pending))
    return "\n".join(lines)
