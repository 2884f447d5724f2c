"""
miniplc0 - Single-Pass Compiler for the PL/0-style miniplc0 Language
====================================================================

This package translates miniplc0 programs directly into instructions for
a small stack machine, reporting the first error with its line and column.

A miniplc0 program declares constants, then variables, then runs
assignments and print statements:

    begin
      const a = 1;
      var b = 2;
      var c;
      c = 3;
      print(a + b + c);
    end

Main Components
---------------
- **lexer**: source text → tokens (tokenize)
- **analyser**: tokens → instructions, by recursive descent with symbol
  table checks and code emission fused together (analyse)
- **compiler**: the two stages behind one call (Compiler, compile_plc0)
- **instructions**: the instruction set and its textual listing format
- **vm**: a reference stack machine that executes compiled programs
- **cli**: the plc0c command-line tool

Quick Start
-----------
    >>> from miniplc0 import compile_plc0, execute
    >>> execute(compile_plc0("begin print(-(2 + 3) * 4); end"))
    [-20]

Or use the command-line tool:
    $ plc0c program.plc0           # writes program.s0
    $ plc0c --run program.plc0     # compiles and executes
"""

__version__ = "1.0.0"
__author__ = "miniplc0 contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from miniplc0.errors import (
    MiniPlc0Error,
    Position,
    ErrorCode,
    CompilationError,
    LexicalError,
    ParseError,
    SemanticError,
    InternalCompilerError,
    ListingFormatError,
    ExecutionError,
)
from miniplc0.lexer import Lexer, Token, TokenKind, tokenize
from miniplc0.symbols import SymbolTable, SymbolCategory
from miniplc0.instructions import (
    Operation,
    OperationInfo,
    OPERATION_TABLE,
    Instruction,
    format_listing,
    parse_listing,
)
from miniplc0.analyser import Analyser, TokenCursor, analyse
from miniplc0.compiler import Compiler, CompilerOptions, CompilerResult, compile_plc0
from miniplc0.vm import StackMachine, execute

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Errors
    "MiniPlc0Error",
    "Position",
    "ErrorCode",
    "CompilationError",
    "LexicalError",
    "ParseError",
    "SemanticError",
    "InternalCompilerError",
    "ListingFormatError",
    "ExecutionError",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    # Symbol table
    "SymbolTable",
    "SymbolCategory",
    # Instructions
    "Operation",
    "OperationInfo",
    "OPERATION_TABLE",
    "Instruction",
    "format_listing",
    "parse_listing",
    # Analyser
    "Analyser",
    "TokenCursor",
    "analyse",
    # Compiler
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_plc0",
    # Stack machine
    "StackMachine",
    "execute",
]
