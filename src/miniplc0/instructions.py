"""
Stack Machine Instruction Set
=============================

Defines the instructions emitted by the analyser and the textual listing
format used to store them.

Instruction Overview:
    Every instruction is an operation plus one 32-bit signed operand.
    Only LIT (immediate value) and LOD/STO (slot index) use the operand;
    the others carry 0.

    | Operation | Operand | Stack effect                          |
    |-----------|---------|---------------------------------------|
    | LIT       | value   | push value                            |
    | LOD       | slot    | push value stored in slot             |
    | STO       | slot    | pop top into slot                     |
    | ADD       | 0       | pop rhs, pop lhs, push lhs + rhs      |
    | SUB       | 0       | pop rhs, pop lhs, push lhs - rhs      |
    | MUL       | 0       | pop rhs, pop lhs, push lhs * rhs      |
    | DIV       | 0       | pop rhs, pop lhs, push lhs / rhs      |
    | WRT       | 0       | pop and print                         |

Listing Format:
    One instruction per line, mnemonic then operand:

        LIT 1
        LOD 0
        ADD 0
        WRT 0

    A numbered listing prefixes each line with its index ("  3: STO 0").
    parse_listing() accepts both forms, ignoring blank lines and '#'
    comments.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable

from miniplc0.errors import ListingFormatError


INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


# =============================================================================
# Operation Definitions
# =============================================================================

class Operation(Enum):
    """Stack machine operations."""
    LIT = auto()
    LOD = auto()
    STO = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    WRT = auto()


@dataclass(frozen=True)
class OperationInfo:
    """Information about an operation."""
    operation: Operation
    uses_operand: bool
    pops: int
    pushes: int
    description: str

    @property
    def mnemonic(self) -> str:
        return self.operation.name


# =============================================================================
# Operation Table
# =============================================================================

OPERATION_TABLE: dict[Operation, OperationInfo] = {
    Operation.LIT: OperationInfo(Operation.LIT, True, 0, 1,
                                 "Push immediate value"),
    Operation.LOD: OperationInfo(Operation.LOD, True, 0, 1,
                                 "Push value stored in slot"),
    Operation.STO: OperationInfo(Operation.STO, True, 1, 0,
                                 "Pop top of stack into slot"),
    Operation.ADD: OperationInfo(Operation.ADD, False, 2, 1,
                                 "Add (second + top)"),
    Operation.SUB: OperationInfo(Operation.SUB, False, 2, 1,
                                 "Subtract (second - top)"),
    Operation.MUL: OperationInfo(Operation.MUL, False, 2, 1,
                                 "Multiply (second * top)"),
    Operation.DIV: OperationInfo(Operation.DIV, False, 2, 1,
                                 "Integer divide (second / top)"),
    Operation.WRT: OperationInfo(Operation.WRT, False, 1, 0,
                                 "Pop and print top of stack"),
}


# =============================================================================
# Instruction
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A single stack machine instruction.

    Attributes:
        operation: The Operation to perform
        operand: Immediate value or slot index (0 when unused)
    """
    operation: Operation
    operand: int = 0

    def __post_init__(self):
        if not INT32_MIN <= self.operand <= INT32_MAX:
            raise ValueError(f"operand {self.operand} does not fit in 32 bits")

    @property
    def info(self) -> OperationInfo:
        return OPERATION_TABLE[self.operation]

    def __str__(self) -> str:
        return f"{self.operation.name} {self.operand}"

    def __repr__(self) -> str:
        return f"Instruction({self.operation.name}, {self.operand})"


# =============================================================================
# Listing Format
# =============================================================================

def format_listing(instructions: Iterable[Instruction], numbered: bool = False) -> str:
    """
    Render instructions as a textual listing.

    Args:
        instructions: Instructions in execution order
        numbered: Prefix each line with the instruction index

    Returns:
        The listing, one instruction per line, ending with a newline
        unless empty
    """
    instructions = list(instructions)
    width = len(str(max(len(instructions) - 1, 0)))
    lines = []
    for index, instruction in enumerate(instructions):
        if numbered:
            lines.append(f"{index:>{width}}: {instruction}")
        else:
            lines.append(str(instruction))
    return "".join(f"{line}\n" for line in lines)


def parse_listing(text: str) -> list[Instruction]:
    """
    Read a listing produced by format_listing().

    Raises:
        ListingFormatError: For unknown mnemonics or bad operands
    """
    instructions = []
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        # Optional "N:" index prefix
        if ":" in line:
            index, line = line.split(":", 1)
            if not index.strip().isdigit():
                raise ListingFormatError("bad index prefix", line_number, raw)
            line = line.strip()

        fields = line.split()
        if not fields:
            raise ListingFormatError("missing operation", line_number, raw)
        try:
            operation = Operation[fields[0].upper()]
        except KeyError:
            raise ListingFormatError("unknown operation", line_number, raw) from None

        if len(fields) > 2:
            raise ListingFormatError("too many fields", line_number, raw)

        operand = 0
        if len(fields) == 2:
            try:
                operand = int(fields[1])
            except ValueError:
                raise ListingFormatError("operand is not an integer", line_number, raw) from None

        try:
            instructions.append(Instruction(operation, operand))
        except ValueError as e:
            raise ListingFormatError(str(e), line_number, raw) from None

    return instructions
