"""
x86-64 stack-machine code generator for the exprcc expression compiler.

Translates the AST into Intel-syntax instructions that evaluate the
expression on the machine stack.

Register usage convention:
  - rax: left operand, then the result
  - rdi: right operand
  - rdx: sign extension of rax for division (set by CQO)

Every subtree leaves exactly one value pushed. A binary node emits its
left subtree, then its right subtree, so the right operand is on top
of the stack and is popped first.

Division is IDIV: signed, quotient truncated toward zero, remainder
takes the sign of the dividend (-7/2 is -3).

Only the expression body is produced here; the .globl/main: prologue
and the final pop/ret belong to the driver (see compile_source).
"""

from __future__ import annotations
import logging
from typing import Dict, List, Tuple

from .ast_nodes import ASTNode, BinaryOp, BinaryOperator, Expression, IntLiteral

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Operator table
# ──────────────────────────────────────────────

OPERATOR_INSTRUCTIONS: Dict[BinaryOperator, List[str]] = {
    BinaryOperator.ADD: ["add rax, rdi"],
    BinaryOperator.SUB: ["sub rax, rdi"],
    BinaryOperator.MUL: ["imul rax, rdi"],
    BinaryOperator.DIV: ["cqo", "idiv rdi"],
}


class CodeGenError(Exception):
    def __init__(self, message: str, node: ASTNode):
        self.node = node
        super().__init__(f"Code generation error at offset {node.offset}: {message}")


class CodeGenerator:
    """Generates stack-machine assembly lines from an AST."""

    INDENT = "  "

    def __init__(self):
        self._code_lines: List[str] = []

    # ── Output helpers ────────────────────────

    def _emit(self, line: str):
        self._code_lines.append(f"{self.INDENT}{line}")

    # ── Main generation entry point ───────────

    def generate(self, node: Expression) -> List[str]:
        """Generate the instruction lines for one expression tree."""
        self._code_lines = []
        self._gen_expr(node)
        logger.debug("generated %d instructions", len(self._code_lines))
        return list(self._code_lines)

    # ── Expression generation ─────────────────

    def _gen_expr(self, expr: Expression):
        """Postorder walk with an explicit work stack.

        Operator chains build trees as deep as they are long, so the walk
        does not recurse. A BinaryOp is visited twice: first to schedule
        left, right and itself, then (expanded=True) to emit the operation.
        """
        work: List[Tuple[Expression, bool]] = [(expr, False)]
        while work:
            node, expanded = work.pop()
            if isinstance(node, IntLiteral):
                self._emit(f"push {node.value}")
            elif isinstance(node, BinaryOp):
                if expanded:
                    self._gen_binary_op(node)
                    continue
                if node.op not in OPERATOR_INSTRUCTIONS:
                    raise CodeGenError(f"invalid operator {node.op!r}", node)
                work.append((node, True))
                work.append((node.right, False))
                work.append((node.left, False))
            else:
                raise CodeGenError(f"unhandled node {type(node).__name__}", node)

    def _gen_binary_op(self, op: BinaryOp):
        """Combine the two operands already on the stack."""
        self._emit("pop rdi")
        self._emit("pop rax")
        for line in OPERATOR_INSTRUCTIONS[op.op]:
            self._emit(line)
        self._emit("push rax")
