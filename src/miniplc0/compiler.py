"""
miniplc0 Compiler Main Module
=============================

This module provides the main compiler interface for miniplc0.
It runs the two compilation stages in order:

    Source → Lex → Analyse → Instructions

Usage
-----
Command line:
    $ plc0c program.plc0 -o program.s0

Programmatic:
    >>> from miniplc0 import compile_plc0
    >>> compile_plc0("begin const x = 1; end")
    [Instruction(LIT, 1)]

Error Handling
--------------
Compilation stops at the first error. Compiler.compile_source() reports it
through CompilerResult.error; compile_plc0() raises it instead. Errors are
bound to the source file name and, unless disabled, to the text of the
offending line so that str(error) shows a caret under the column.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from miniplc0.analyser import Analyser
from miniplc0.errors import CompilationError, ErrorCode, LexicalError
from miniplc0.instructions import Instruction, format_listing
from miniplc0.lexer import Lexer, Token


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        encoding: Text encoding used by compile_file()
        source_context: Attach the offending source line to errors so that
                        diagnostics show a caret under the error column
        numbered_listing: Prefix each listing line with the instruction index
    """
    encoding: str = "utf-8"
    source_context: bool = True
    numbered_listing: bool = False


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        instructions: Emitted instructions (empty on failure)
        tokens: Tokens produced by the lexer (empty on lexical failure)
        error: The compilation error, if any
        numbered_listing: Whether listing() numbers its lines
    """
    filename: str = ""
    success: bool = False
    instructions: list[Instruction] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)
    error: Optional[CompilationError] = None
    numbered_listing: bool = False

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    def listing(self) -> str:
        """Render the instructions in the textual listing format."""
        return format_listing(self.instructions, numbered=self.numbered_listing)

    def raise_if_error(self) -> None:
        if self.error is not None:
            raise self.error


class Compiler:
    """
    miniplc0 compiler.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("hello.plc0")
        if result.success:
            print(result.listing())
        else:
            print(result.error)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile miniplc0 source code.

        Compiling the same source twice gives identical results; each call
        uses a fresh lexer, symbol table and instruction buffer.

        Args:
            source: Program text
            filename: Source name for error messages

        Returns:
            CompilerResult describing the outcome. CompilationError is
            reported in the result, never raised.
        """
        result = CompilerResult(
            filename=filename,
            numbered_listing=self.options.numbered_listing,
        )

        try:
            # Stage 1: Lexical analysis
            tokens = list(Lexer(source).tokenize())
            result.tokens = tokens
            logger.debug(f"{filename}: tokenized {len(tokens)} tokens")

            # Stage 2: Analysis and code generation
            result.instructions = Analyser(tokens).analyse()
            result.success = True

        except CompilationError as e:
            result.error = self._bind_error(e, source, filename)
            result.instructions = []
            logger.debug(f"{filename}: compilation failed with {e.code.name}")

        return result

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a miniplc0 source file.

        A file that cannot be read or decoded yields a STREAM_ERROR result.

        Args:
            filepath: Path to the source file

        Returns:
            CompilerResult describing the outcome
        """
        path = Path(filepath)
        try:
            source = path.read_text(encoding=self.options.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return CompilerResult(
                filename=str(path),
                error=LexicalError(
                    ErrorCode.STREAM_ERROR, filename=str(path), detail=str(path)
                ),
                numbered_listing=self.options.numbered_listing,
            )

        return self.compile_source(source, str(path))

    def compile_source_or_raise(self, source: str, filename: str = "<input>") -> list[Instruction]:
        """
        Compile source and return its instructions.

        Raises:
            CompilationError: If compilation fails
        """
        result = self.compile_source(source, filename)
        result.raise_if_error()
        return result.instructions

    def _bind_error(
        self, error: CompilationError, source: str, filename: str
    ) -> CompilationError:
        """Attach filename and, if enabled, the source line to an error."""
        source_line = None
        if self.options.source_context:
            lines = source.splitlines()
            if error.position.line < len(lines):
                source_line = lines[error.position.line]
        return error.with_context(filename, source_line)


def compile_plc0(source: str, filename: str = "<input>") -> list[Instruction]:
    """
    Compile miniplc0 source with default options.

    Raises:
        CompilationError: If compilation fails
    """
    return Compiler().compile_source_or_raise(source, filename)
