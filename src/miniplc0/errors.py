"""
miniplc0 Error Hierarchy
========================

This module defines the exception hierarchy for the miniplc0 toolchain.
All exceptions inherit from MiniPlc0Error, allowing callers to catch all
toolchain errors with a single except clause if desired.

Exception Hierarchy
-------------------
MiniPlc0Error (base)
├── CompilationError - positioned, user-facing diagnostic
│   ├── LexicalError - unreadable input, bad characters, literal overflow
│   ├── ParseError - missing delimiters, terminators, operands
│   └── SemanticError - declaration and initialization rules
├── InternalCompilerError - compiler bug, never caused by bad input
├── ListingFormatError - malformed textual instruction listing
└── ExecutionError - runtime failure in the reference stack machine

A compilation produces at most one CompilationError. Its identity is the
pair (position, code): two errors with the same position and code compare
equal whatever their concrete class or attached source text.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
          ^
    hint: suggestion for fixing (when available)

Positions are zero-based internally and rendered one-based in messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MiniPlc0Error(Exception):
    """
    Base exception for all miniplc0 errors.

    All exceptions in the package inherit from this class:

        try:
            compile_plc0(source)
        except MiniPlc0Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Position Tracking
# =============================================================================

@dataclass(frozen=True, order=True)
class Position:
    """
    A zero-based (line, column) location in source text.

    Advancing past a newline moves to (line + 1, 0). The position just past
    the last character of the input is valid and marks end of input.

    Attributes:
        line: Line number (0-indexed)
        column: Column number (0-indexed)
    """
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        """Format as one-based 'line:column' for messages."""
        return f"{self.line + 1}:{self.column + 1}"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(Enum):
    """
    Classification of every user-facing compilation error.

    Each member's value is a (message, hint) pair used to render
    diagnostics.
    """

    # === Lexical ===
    STREAM_ERROR = ("input could not be read", None)
    INTEGER_OVERFLOW = (
        "integer literal out of range",
        "literals must not exceed 2147483647",
    )
    INVALID_INPUT = ("invalid character in input", None)
    INVALID_IDENTIFIER = (
        "identifier cannot start with a digit",
        None,
    )

    # === Syntax ===
    NO_BEGIN = ("expected 'begin'", "a program must start with 'begin'")
    NO_END = ("expected 'end'", "a program must finish with 'end'")
    NEED_IDENTIFIER = ("expected identifier", None)
    CONSTANT_NEED_VALUE = (
        "constant declared without a value",
        "write 'const name = value;'",
    )
    NO_SEMICOLON = ("expected ';'", None)
    INCOMPLETE_EXPRESSION = ("incomplete expression", None)
    INVALID_PRINT = (
        "malformed print statement",
        "write 'print(expression);'",
    )

    # === Semantic ===
    NOT_DECLARED = ("identifier not declared", None)
    ASSIGN_TO_CONSTANT = ("cannot assign to a constant", None)
    DUPLICATE_DECLARATION = ("identifier already declared", None)
    NOT_INITIALIZED = (
        "variable used before initialization",
        "assign a value to the variable before reading it",
    )

    @property
    def message(self) -> str:
        return self.value[0]

    @property
    def hint(self) -> Optional[str]:
        return self.value[1]


# =============================================================================
# Compilation Errors
# =============================================================================

class CompilationError(MiniPlc0Error):
    """
    A positioned compilation error.

    This class carries everything a front end needs to report one
    diagnostic: where it happened, what kind of error it is, and
    optionally the text of the offending line so a caret can be drawn.

    Attributes:
        position: Zero-based position of the error
        code: The ErrorCode classification
        filename: Source name used in messages
        source_line: The source text of the error line (optional)
        detail: Extra context such as the offending name (optional)
    """

    def __init__(
        self,
        code: ErrorCode,
        position: Position = Position(),
        filename: str = "<input>",
        source_line: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.code = code
        self.position = position
        self.filename = filename
        self.source_line = source_line
        self.detail = detail
        super().__init__(self._format_message())

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.code.message} '{self.detail}'"
        return self.code.message

    @property
    def hint(self) -> Optional[str]:
        return self.code.hint

    def with_context(
        self,
        filename: str,
        source_line: Optional[str] = None,
    ) -> "CompilationError":
        """Return a copy of this error bound to a file name and source line."""
        return type(self)(
            self.code,
            self.position,
            filename=filename,
            source_line=source_line,
            detail=self.detail,
        )

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.plc0:3:7: error: cannot assign to a constant 'x'
                  x = 2;
                  ^
        """
        parts = [f"{self.filename}:{self.position}: error: {self.message}"]

        # Source context with caret pointer
        if self.source_line is not None:
            parts.append(f"    {self.source_line}")
            padding = " " * (4 + self.position.column)
            parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompilationError):
            return NotImplemented
        return self.position == other.position and self.code == other.code

    def __hash__(self) -> int:
        return hash((self.position, self.code))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {self.position!r})"


class LexicalError(CompilationError):
    """
    Error found while splitting source text into tokens.

    Examples:
        - Unrecognised character such as '#'
        - Integer literal larger than 2147483647
        - Source file that cannot be read or decoded
    """
    pass


class ParseError(CompilationError):
    """
    Error found while matching tokens against the grammar.

    Examples:
        - Program not wrapped in begin/end
        - Missing ';' after a declaration or statement
        - Operator without a right-hand operand
    """
    pass


class SemanticError(CompilationError):
    """
    Error found while checking names against the symbol table.

    Examples:
        - Using a name that was never declared
        - Declaring the same name twice
        - Assigning to a constant
        - Reading a variable before it has a value
    """
    pass


# =============================================================================
# Non-diagnostic Errors
# =============================================================================

class InternalCompilerError(MiniPlc0Error):
    """
    An internal invariant of the compiler was violated.

    This never results from bad input. It is not a CompilationError, so
    the tokenize/analyse entry points let it propagate instead of turning
    it into a diagnostic.
    """
    pass


class ListingFormatError(MiniPlc0Error):
    """
    Malformed textual instruction listing.

    Attributes:
        line_number: One-based line of the listing that failed to parse
        text: The offending line
    """

    def __init__(self, message: str, line_number: int, text: str):
        self.line_number = line_number
        self.text = text
        super().__init__(f"listing line {line_number}: {message}: {text!r}")


class ExecutionError(MiniPlc0Error):
    """
    Runtime failure while executing instructions on the stack machine.

    Attributes:
        pc: Index of the instruction that failed
    """

    def __init__(self, message: str, pc: int):
        self.pc = pc
        super().__init__(f"instruction {pc}: {message}")
