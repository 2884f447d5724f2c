"""
miniplc0 Analyser
=================

This module implements a single-pass recursive descent analyser for the
miniplc0 language. It reads the token list produced by the lexer, checks
every name against the symbol table, and appends stack machine
instructions as each construct is recognised. No syntax tree is built.

Grammar (EBNF)
--------------
program      ::= 'begin' main 'end'
main         ::= const_decls var_decls statements
const_decls  ::= { 'const' IDENTIFIER '=' const_expr ';' }
var_decls    ::= { 'var' IDENTIFIER [ '=' expr ] ';' }
statements   ::= { ';' | assignment | output }
assignment   ::= IDENTIFIER '=' expr ';'
output       ::= 'print' '(' expr ')' ';'
const_expr   ::= [ '+' | '-' ] UNSIGNED_INTEGER
expr         ::= item { ( '+' | '-' ) item }
item         ::= factor { ( '*' | '/' ) factor }
factor       ::= [ '+' | '-' ] ( IDENTIFIER | UNSIGNED_INTEGER | '(' expr ')' )

Code Generation
---------------
| Construct               | Emitted code                          |
|-------------------------|---------------------------------------|
| const x = -5;           | LIT -5                                |
| var x;                  | LIT 0                                 |
| var x = e;              | <e>                                   |
| x = e;                  | <e> STO slot(x)                       |
| print(e);               | <e> WRT 0                             |
| a + b, a - b            | <a> <b> ADD 0 / SUB 0                 |
| a * b, a / b            | <a> <b> MUL 0 / DIV 0                 |
| -f                      | LIT 0 <f> SUB 0                       |
| identifier              | LOD slot                              |
| literal                 | LIT value                             |

Declarations only push. Each declaration's push lands in the stack cell
matching its slot, which is why no STO is needed until an assignment.

Errors
------
The first error aborts analysis. Its position is the end of the most
recently read token, or (0, 0) when nothing has been read.

Example Usage
-------------
>>> from miniplc0.lexer import tokenize
>>> from miniplc0.analyser import analyse
>>> tokens, _ = tokenize("begin var x = 1; x = 2; end")
>>> instructions, error = analyse(tokens)
>>> [str(i) for i in instructions]
['LIT 1', 'LIT 2', 'STO 0']
"""

from typing import Optional, Sequence
import logging

from miniplc0.errors import (
    CompilationError,
    ErrorCode,
    InternalCompilerError,
    ParseError,
    Position,
    SemanticError,
)
from miniplc0.instructions import Instruction, Operation
from miniplc0.lexer import Token, TokenKind
from miniplc0.symbols import SymbolTable


logger = logging.getLogger(__name__)


# =============================================================================
# Token Cursor
# =============================================================================

class TokenCursor:
    """
    Read position over an immutable token list with one-step pushback.

    unread() steps back over the most recently read token. It may be
    called repeatedly but never before the first token.

    Attributes:
        position: End of the most recently read token, (0, 0) initially
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = tuple(tokens)
        self._offset = 0
        self.position = Position(0, 0)

    def next(self) -> Optional[Token]:
        """Consume and return the next token, or None at end of input."""
        if self._offset == len(self._tokens):
            return None

        token = self._tokens[self._offset]
        self._offset += 1
        self.position = token.end
        return token

    def unread(self) -> None:
        """
        Step back one token.

        Raises:
            InternalCompilerError: When already at the first token
        """
        if self._offset == 0:
            raise InternalCompilerError("analyser unread a token before the beginning")

        self._offset -= 1
        self.position = self._tokens[self._offset].end

    def accept(self, *kinds: TokenKind) -> Optional[Token]:
        """
        Consume the next token if it is one of kinds.

        On a mismatch the token is pushed back and None is returned.
        """
        token = self.next()
        if token is None:
            return None
        if token.kind in kinds:
            return token
        self.unread()
        return None

    def check(self, *kinds: TokenKind) -> bool:
        """Report whether the next token is one of kinds, consuming nothing."""
        if self.accept(*kinds) is None:
            return False
        self.unread()
        return True


# =============================================================================
# Analyser
# =============================================================================

class Analyser:
    """
    Recursive descent analyser with fused semantic checks and code emission.

    One instance analyses one program. It owns its token cursor, symbol
    table and instruction buffer.

    Usage:
        analyser = Analyser(tokens)
        instructions = analyser.analyse()

    Attributes:
        symbols: The SymbolTable built while analysing
        instructions: Instructions emitted so far
    """

    def __init__(self, tokens: Sequence[Token]):
        self._cursor = TokenCursor(tokens)
        self.symbols = SymbolTable()
        self.instructions: list[Instruction] = []

    def analyse(self) -> list[Instruction]:
        """
        Analyse the whole program.

        Returns:
            The emitted instructions in execution order

        Raises:
            CompilationError: For the first syntax or semantic error
        """
        self._analyse_program()
        logger.debug(
            f"Emitted {len(self.instructions)} instructions "
            f"for {len(self.symbols)} slots"
        )
        return list(self.instructions)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit(self, operation: Operation, operand: int = 0) -> None:
        self.instructions.append(Instruction(operation, operand))

    def _syntax_error(self, code: ErrorCode) -> ParseError:
        return ParseError(code, self._cursor.position)

    def _semantic_error(self, code: ErrorCode, name: str) -> SemanticError:
        return SemanticError(code, self._cursor.position, detail=name)

    def _expect(self, kind: TokenKind, code: ErrorCode) -> Token:
        """Consume a token of the given kind or fail with code."""
        token = self._cursor.next()
        if token is None or token.kind != kind:
            raise self._syntax_error(code)
        return token

    # =========================================================================
    # Program Structure
    # =========================================================================

    def _analyse_program(self) -> None:
        """program ::= 'begin' main 'end'"""
        self._expect(TokenKind.BEGIN, ErrorCode.NO_BEGIN)
        self._analyse_main()
        self._expect(TokenKind.END, ErrorCode.NO_END)

    def _analyse_main(self) -> None:
        """main ::= const_decls var_decls statements"""
        self._analyse_constant_declarations()
        self._analyse_variable_declarations()
        self._analyse_statement_sequence()

    # =========================================================================
    # Declarations
    # =========================================================================

    def _declare_name(self) -> str:
        """Read the identifier of a declaration and reject redeclarations."""
        token = self._expect(TokenKind.IDENTIFIER, ErrorCode.NEED_IDENTIFIER)
        name = token.value
        if self.symbols.is_declared(name):
            raise self._semantic_error(ErrorCode.DUPLICATE_DECLARATION, name)
        return name

    def _analyse_constant_declarations(self) -> None:
        """const_decls ::= { 'const' IDENTIFIER '=' const_expr ';' }"""
        while self._cursor.accept(TokenKind.CONST):
            name = self._declare_name()
            self.symbols.add_constant(name)

            self._expect(TokenKind.EQUALS, ErrorCode.CONSTANT_NEED_VALUE)
            value = self._analyse_constant_expression()
            self._expect(TokenKind.SEMICOLON, ErrorCode.NO_SEMICOLON)

            self._emit(Operation.LIT, value)

    def _analyse_variable_declarations(self) -> None:
        """var_decls ::= { 'var' IDENTIFIER [ '=' expr ] ';' }"""
        while self._cursor.accept(TokenKind.VAR):
            name = self._declare_name()

            if self._cursor.accept(TokenKind.EQUALS):
                # Slot is allocated after the initializer so it cannot
                # refer to the variable being declared.
                self._analyse_expression()
                self.symbols.add_variable(name)
            else:
                self.symbols.add_uninitialized(name)
                self._emit(Operation.LIT, 0)

            self._expect(TokenKind.SEMICOLON, ErrorCode.NO_SEMICOLON)

    def _analyse_constant_expression(self) -> int:
        """
        const_expr ::= [ '+' | '-' ] UNSIGNED_INTEGER

        The sign is folded into the returned value.
        """
        negative = False
        sign = self._cursor.accept(TokenKind.PLUS, TokenKind.MINUS)
        if sign is not None:
            negative = sign.kind == TokenKind.MINUS

        literal = self._expect(TokenKind.UNSIGNED_INTEGER, ErrorCode.INCOMPLETE_EXPRESSION)
        return -literal.value if negative else literal.value

    # =========================================================================
    # Statements
    # =========================================================================

    def _analyse_statement_sequence(self) -> None:
        """statements ::= { ';' | assignment | output }"""
        while True:
            if self._cursor.accept(TokenKind.SEMICOLON):
                continue
            if self._cursor.check(TokenKind.IDENTIFIER):
                self._analyse_assignment_statement()
            elif self._cursor.check(TokenKind.PRINT):
                self._analyse_output_statement()
            else:
                return

    def _analyse_assignment_statement(self) -> None:
        """assignment ::= IDENTIFIER '=' expr ';'"""
        name = self._cursor.next().value

        if not self.symbols.is_declared(name):
            raise self._semantic_error(ErrorCode.NOT_DECLARED, name)
        if self.symbols.is_constant(name):
            raise self._semantic_error(ErrorCode.ASSIGN_TO_CONSTANT, name)

        self._expect(TokenKind.EQUALS, ErrorCode.INCOMPLETE_EXPRESSION)
        self._analyse_expression()

        if self.symbols.is_uninitialized(name):
            self.symbols.mark_initialized(name)

        self._expect(TokenKind.SEMICOLON, ErrorCode.NO_SEMICOLON)
        self._emit(Operation.STO, self.symbols.slot(name))

    def _analyse_output_statement(self) -> None:
        """output ::= 'print' '(' expr ')' ';'"""
        self._cursor.next()

        self._expect(TokenKind.LPAREN, ErrorCode.INVALID_PRINT)
        self._analyse_expression()
        self._expect(TokenKind.RPAREN, ErrorCode.INVALID_PRINT)
        self._expect(TokenKind.SEMICOLON, ErrorCode.NO_SEMICOLON)

        self._emit(Operation.WRT)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _analyse_expression(self) -> None:
        """expr ::= item { ( '+' | '-' ) item }"""
        self._analyse_item()

        while True:
            operator = self._cursor.accept(TokenKind.PLUS, TokenKind.MINUS)
            if operator is None:
                return

            self._analyse_item()
            if operator.kind == TokenKind.PLUS:
                self._emit(Operation.ADD)
            else:
                self._emit(Operation.SUB)

    def _analyse_item(self) -> None:
        """item ::= factor { ( '*' | '/' ) factor }"""
        self._analyse_factor()

        while True:
            operator = self._cursor.accept(TokenKind.STAR, TokenKind.SLASH)
            if operator is None:
                return

            self._analyse_factor()
            if operator.kind == TokenKind.STAR:
                self._emit(Operation.MUL)
            else:
                self._emit(Operation.DIV)

    def _analyse_factor(self) -> None:
        """
        factor ::= [ '+' | '-' ] ( IDENTIFIER | UNSIGNED_INTEGER | '(' expr ')' )

        A leading '-' becomes 0 - factor at runtime; '+' emits nothing.
        """
        sign = self._cursor.accept(TokenKind.PLUS, TokenKind.MINUS)
        negative = sign is not None and sign.kind == TokenKind.MINUS
        if negative:
            self._emit(Operation.LIT, 0)

        token = self._cursor.next()
        if token is None:
            raise self._syntax_error(ErrorCode.INCOMPLETE_EXPRESSION)

        if token.kind == TokenKind.IDENTIFIER:
            name = token.value
            if not self.symbols.is_declared(name):
                raise self._semantic_error(ErrorCode.NOT_DECLARED, name)
            if not self.symbols.is_readable(name):
                raise self._semantic_error(ErrorCode.NOT_INITIALIZED, name)
            self._emit(Operation.LOD, self.symbols.slot(name))

        elif token.kind == TokenKind.UNSIGNED_INTEGER:
            self._emit(Operation.LIT, token.value)

        elif token.kind == TokenKind.LPAREN:
            self._analyse_expression()
            self._expect(TokenKind.RPAREN, ErrorCode.INCOMPLETE_EXPRESSION)

        else:
            raise self._syntax_error(ErrorCode.INCOMPLETE_EXPRESSION)

        if negative:
            self._emit(Operation.SUB)


# =============================================================================
# Convenience Function
# =============================================================================

def analyse(
    tokens: Sequence[Token],
) -> tuple[list[Instruction], Optional[CompilationError]]:
    """
    Analyse a token list.

    Returns:
        (instructions, None) on success, or ([], error) for the first
        compilation error. InternalCompilerError is not caught.
    """
    try:
        instructions = Analyser(tokens).analyse()
    except CompilationError as e:
        logger.debug(f"Analysis failed: {e.code.name} at {e.position!r}")
        return [], e
    return instructions, None
