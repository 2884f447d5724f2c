"""
Reference Stack Machine
=======================

Executes instruction lists produced by the analyser.

Memory Model:
    There is a single operand stack. Slot i is stack cell i: every
    declaration pushes exactly one value, in declaration order, so the
    bottom of the stack doubles as the slot store.

        begin const a = 1; var b; b = a + 1; print(b); end

        LIT 1      stack: [1]           a lives in cell 0
        LIT 0      stack: [1, 0]        b lives in cell 1
        LOD 0      stack: [1, 0, 1]
        LIT 1      stack: [1, 0, 1, 1]
        ADD 0      stack: [1, 0, 2]
        STO 1      stack: [1, 2]
        LOD 1      stack: [1, 2, 2]
        WRT 0      stack: [1, 2]        output: [2]

Arithmetic wraps to 32-bit signed integers. DIV truncates toward zero.

Example:
    >>> from miniplc0 import compile_plc0
    >>> from miniplc0.vm import execute
    >>> execute(compile_plc0("begin print(7 / 2); end"))
    [3]
"""

from typing import Callable, Iterable, Optional
import logging

from miniplc0.errors import ExecutionError
from miniplc0.instructions import Instruction, Operation, OPERATION_TABLE


logger = logging.getLogger(__name__)


def wrap_int32(value: int) -> int:
    """Reduce an integer to the signed 32-bit range (two's complement)."""
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return value


class StackMachine:
    """
    Interpreter for miniplc0 instructions.

    Example:
        >>> vm = StackMachine(instructions)
        >>> vm.run()
        [6]

    Attributes:
        instructions: The program being executed
        stack: The operand stack (cells 0..n-1 are the slots)
        output: Values written by WRT so far
        pc: Index of the next instruction
        on_output: Optional callback invoked with each written value
    """

    def __init__(
        self,
        instructions: Iterable[Instruction],
        on_output: Optional[Callable[[int], None]] = None,
    ):
        self.instructions = list(instructions)
        self.on_output = on_output
        self.reset()

    def reset(self) -> None:
        """Clear the stack and output and rewind to the first instruction."""
        self.stack: list[int] = []
        self.output: list[int] = []
        self.pc = 0

    @property
    def halted(self) -> bool:
        return self.pc >= len(self.instructions)

    def run(self) -> list[int]:
        """
        Execute until the last instruction has run.

        Returns:
            Values written by WRT, in order

        Raises:
            ExecutionError: On stack underflow, bad slot, or division by zero
        """
        while not self.halted:
            self.step()

        logger.debug(
            f"Executed {len(self.instructions)} instructions, "
            f"wrote {len(self.output)} values"
        )
        return list(self.output)

    def step(self) -> None:
        """Execute exactly one instruction."""
        instruction = self.instructions[self.pc]
        info = OPERATION_TABLE[instruction.operation]

        if len(self.stack) < info.pops:
            raise ExecutionError(
                f"stack underflow in {instruction} (needs {info.pops}, has {len(self.stack)})",
                self.pc,
            )

        operation = instruction.operation
        operand = instruction.operand

        if operation == Operation.LIT:
            self.stack.append(operand)

        elif operation == Operation.LOD:
            self._check_slot(operand)
            self.stack.append(self.stack[operand])

        elif operation == Operation.STO:
            value = self.stack.pop()
            self._check_slot(operand)
            self.stack[operand] = value

        elif operation == Operation.WRT:
            value = self.stack.pop()
            self.output.append(value)
            if self.on_output is not None:
                self.on_output(value)

        else:
            rhs = self.stack.pop()
            lhs = self.stack.pop()
            self.stack.append(self._arithmetic(operation, lhs, rhs))

        self.pc += 1

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self.stack):
            raise ExecutionError(
                f"slot {slot} outside stack of depth {len(self.stack)}", self.pc
            )

    def _arithmetic(self, operation: Operation, lhs: int, rhs: int) -> int:
        if operation == Operation.ADD:
            return wrap_int32(lhs + rhs)
        if operation == Operation.SUB:
            return wrap_int32(lhs - rhs)
        if operation == Operation.MUL:
            return wrap_int32(lhs * rhs)

        if rhs == 0:
            raise ExecutionError("division by zero", self.pc)
        # Truncate toward zero like C, not toward negative infinity
        quotient = abs(lhs) // abs(rhs)
        if (lhs < 0) != (rhs < 0):
            quotient = -quotient
        return wrap_int32(quotient)


def execute(instructions: Iterable[Instruction]) -> list[int]:
    """Run instructions on a fresh StackMachine and return its output."""
    return StackMachine(instructions).run()
