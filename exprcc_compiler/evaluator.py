"""
Reference stack machine for exprcc listings.

Executes the subset of x86-64 Intel syntax that the code generator and
driver emit, so generated code can be checked without an assembler:

    push <imm32>|<reg>    pop <reg>
    add/sub/imul <reg>, <reg>
    cqo                   idiv <reg>
    ret

Blank lines, assembler directives (.intel_syntax, .globl) and labels
are skipped.

Registers and stack slots hold 64-bit two's-complement values.
ADD, SUB and IMUL wrap modulo 2**64. IDIV divides RDX:RAX by the
operand, truncating toward zero; a zero divisor or a quotient that
does not fit in 64 bits is a divide error (EvaluationError), as on
the CPU.
"""

from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

MASK64 = (1 << 64) - 1
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
IMM32_MIN = -(1 << 31)
IMM32_MAX = (1 << 31) - 1

REGISTERS = ("rax", "rdi", "rdx")


class EvaluationError(Exception):
    def __init__(self, message: str, line: str = ""):
        self.line = line
        where = f" in {line.strip()!r}" if line else ""
        super().__init__(f"{message}{where}")


# ══════════════════════════════════════════════
# 64-bit arithmetic helpers
# ══════════════════════════════════════════════

def to_signed64(value: int) -> int:
    """Wrap an arbitrary integer to a signed 64-bit value."""
    value &= MASK64
    return value - (1 << 64) if value & (1 << 63) else value


def trunc_divmod(dividend: int, divisor: int) -> Tuple[int, int]:
    """Signed division truncating toward zero, as IDIV does.

    The remainder has the sign of the dividend: trunc_divmod(-7, 2) == (-3, -1).
    """
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        quotient = -quotient
    return quotient, dividend - quotient * divisor


def exit_status(value: int) -> int:
    """Low byte of a return value, as reported by the shell."""
    return value & 0xFF


# ══════════════════════════════════════════════
# Machine
# ══════════════════════════════════════════════

class StackMachine:
    """Interpreter for generated listings.

    Usage:
        vm = StackMachine()
        vm.run(compile_source("1+2*3").splitlines())   # -> 7
        vm.evaluate(compile_expression("10-2-3"))      # -> 5
    """

    def __init__(self):
        self.regs: Dict[str, int] = {}
        self.stack: List[int] = []
        self.steps = 0
        self._dispatch: Dict[str, Callable[[List[str], str], None]] = {
            "push": self._op_push,
            "pop": self._op_pop,
            "add": self._op_add,
            "sub": self._op_sub,
            "imul": self._op_imul,
            "cqo": self._op_cqo,
            "idiv": self._op_idiv,
        }
        self.reset()

    def reset(self):
        self.regs = {name: 0 for name in REGISTERS}
        self.stack = []
        self.steps = 0

    # ── Execution ──────────────────────────────

    @staticmethod
    def _decode(line: str) -> Tuple[str, List[str]]:
        text = line.split("#", 1)[0].strip()
        if not text or text.startswith(".") or text.endswith(":"):
            return "", []
        parts = text.split(None, 1)
        operands = [o.strip() for o in parts[1].split(",")] if len(parts) > 1 else []
        return parts[0].lower(), operands

    def step(self, line: str) -> bool:
        """Execute one line. Returns False when the line is `ret`."""
        mnemonic, operands = self._decode(line)
        if not mnemonic:
            return True
        if mnemonic == "ret":
            self._check_operands(operands, 0, line)
            return False
        handler = self._dispatch.get(mnemonic)
        if handler is None:
            raise EvaluationError(f"unknown instruction {mnemonic!r}", line)
        handler(operands, line)
        self.steps += 1
        return True

    def run(self, lines: Iterable[str]) -> int:
        """Run a complete listing and return RAX at `ret`."""
        self.reset()
        for line in lines:
            if not self.step(line):
                logger.debug("ret after %d instructions, rax=%d", self.steps, self.regs["rax"])
                return self.regs["rax"]
        raise EvaluationError("listing ended without ret")

    def evaluate(self, lines: Iterable[str]) -> int:
        """Run expression body lines and return the single value left on the stack."""
        self.reset()
        for line in lines:
            if not self.step(line):
                raise EvaluationError("unexpected ret in expression body", line)
        if len(self.stack) != 1:
            raise EvaluationError(f"expected one value on the stack, found {len(self.stack)}")
        return self.stack[0]

    # ── Operand helpers ────────────────────────

    @staticmethod
    def _check_operands(operands: List[str], count: int, line: str):
        if len(operands) != count:
            raise EvaluationError(f"expected {count} operand(s), got {len(operands)}", line)

    def _reg(self, name: str, line: str) -> str:
        name = name.lower()
        if name not in self.regs:
            raise EvaluationError(f"unknown register {name!r}", line)
        return name

    def _binary(self, operands: List[str], line: str,
                fn: Callable[[int, int], int]):
        self._check_operands(operands, 2, line)
        dst, src = self._reg(operands[0], line), self._reg(operands[1], line)
        self.regs[dst] = to_signed64(fn(self.regs[dst], self.regs[src]))

    # ── Instruction handlers ───────────────────

    def _op_push(self, operands: List[str], line: str):
        self._check_operands(operands, 1, line)
        operand = operands[0]
        if operand.lower() in self.regs:
            self.stack.append(self.regs[operand.lower()])
            return
        try:
            value = int(operand, 0)
        except ValueError:
            raise EvaluationError(f"bad operand {operand!r}", line) from None
        if not IMM32_MIN <= value <= IMM32_MAX:
            raise EvaluationError(f"immediate {value} does not fit in 32 bits", line)
        self.stack.append(value)

    def _op_pop(self, operands: List[str], line: str):
        self._check_operands(operands, 1, line)
        reg = self._reg(operands[0], line)
        if not self.stack:
            raise EvaluationError("pop from empty stack", line)
        self.regs[reg] = self.stack.pop()

    def _op_add(self, operands: List[str], line: str):
        self._binary(operands, line, lambda a, b: a + b)

    def _op_sub(self, operands: List[str], line: str):
        self._binary(operands, line, lambda a, b: a - b)

    def _op_imul(self, operands: List[str], line: str):
        self._binary(operands, line, lambda a, b: a * b)

    def _op_cqo(self, operands: List[str], line: str):
        self._check_operands(operands, 0, line)
        self.regs["rdx"] = -1 if self.regs["rax"] < 0 else 0

    def _op_idiv(self, operands: List[str], line: str):
        self._check_operands(operands, 1, line)
        divisor = self.regs[self._reg(operands[0], line)]
        if divisor == 0:
            raise EvaluationError("division by zero", line)
        # RDX:RAX as a signed 128-bit dividend
        dividend = (self.regs["rdx"] << 64) | (self.regs["rax"] & MASK64)
        quotient, remainder = trunc_divmod(dividend, divisor)
        if not INT64_MIN <= quotient <= INT64_MAX:
            raise EvaluationError("division overflow", line)
        self.regs["rax"] = quotient
        self.regs["rdx"] = remainder
