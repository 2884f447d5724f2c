"""
miniplc0 Lexer (Tokenizer)
==========================

This module implements the lexer for the miniplc0 language. It converts
source text into a list of tokens for the analyser.

Token Categories
----------------
- Keywords: begin, end, var, const, print (case-sensitive)
- Identifiers: a letter followed by letters and digits (no underscore)
- Unsigned integers: decimal digits, at most 2147483647
- Operators: + - * / =
- Delimiters: ( ) ;

Signs are never part of a literal. "-5" is a MINUS token followed by an
UNSIGNED_INTEGER token; the analyser decides what the sign means.

Positions
---------
Every token carries a half-open [start, end) span of zero-based
(line, column) positions. A newline moves to (line + 1, 0).

Example Usage
-------------
>>> from miniplc0.lexer import tokenize
>>> tokens, error = tokenize("begin print(42); end")
>>> tokens[2]
Token(LPAREN, 0:11-0:12)
>>> tokens[3]
Token(UNSIGNED_INTEGER, 42, 0:12-0:14)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import logging
import string

from miniplc0.errors import (
    CompilationError,
    ErrorCode,
    LexicalError,
    Position,
)


logger = logging.getLogger(__name__)

# Largest magnitude an unsigned literal may have (int32 maximum)
INT32_MAX = 2**31 - 1


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenKind(Enum):
    """Token kinds of the miniplc0 language."""

    # === Keywords ===
    BEGIN = auto()              # begin
    END = auto()                # end
    VAR = auto()                # var
    CONST = auto()              # const
    PRINT = auto()              # print

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    UNSIGNED_INTEGER = auto()

    # === Operators ===
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    EQUALS = auto()             # =

    # === Delimiters ===
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    SEMICOLON = auto()          # ;


KEYWORDS: dict[str, TokenKind] = {
    "begin": TokenKind.BEGIN,
    "end": TokenKind.END,
    "var": TokenKind.VAR,
    "const": TokenKind.CONST,
    "print": TokenKind.PRINT,
}

PUNCTUATION: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "=": TokenKind.EQUALS,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ";": TokenKind.SEMICOLON,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token of miniplc0 source.

    Attributes:
        kind: The TokenKind classification
        start: Position of the first character
        end: Position just past the last character
        value: Lexeme for identifiers, int for unsigned integers, else None
    """
    kind: TokenKind
    start: Position
    end: Position
    value: str | int | None = None

    def __repr__(self) -> str:
        span = (
            f"{self.start.line}:{self.start.column}-"
            f"{self.end.line}:{self.end.column}"
        )
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.kind.name}, {self.value}, {span})"
            return f"Token({self.kind.name}, {self.value!r}, {span})"
        return f"Token({self.kind.name}, {span})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes miniplc0 source code.

    The whole source is held in memory; tokens are produced one at a time
    by tokenize(), which stops at the first error.

    Usage:
        lexer = Lexer(source_text)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits

    WHITESPACE = " \t\n\r\v\f"

    def __init__(self, source: str):
        self.source = source

        # Current position in source
        self._pos = 0
        self._line = 0
        self._column = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        End of input simply ends the iteration; no end-of-file token is
        produced.

        Yields:
            Token objects in source order

        Raises:
            LexicalError: On the first invalid character or literal
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                return

            token = self._scan_token()
            self._check_token(token)
            yield token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Look at the current character. Returns "" past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1

        return char

    def _position(self) -> Position:
        return Position(self._line, self._column)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    def _scan_token(self) -> Token:
        start = self._position()
        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_word(start)

        if char in string.digits:
            return self._scan_unsigned_integer(start)

        if char in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[char], start, self._position())

        raise LexicalError(ErrorCode.INVALID_INPUT, start, detail=char)

    def _scan_word(self, start: Position) -> Token:
        """Scan an identifier or keyword."""
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        word = "".join(chars)
        if word in KEYWORDS:
            return Token(KEYWORDS[word], start, self._position())
        return Token(TokenKind.IDENTIFIER, start, self._position(), word)

    def _scan_unsigned_integer(self, start: Position) -> Token:
        """
        Scan a run of decimal digits.

        The magnitude is compared against INT32_MAX rather than relying on
        a failing conversion; anything larger is an INTEGER_OVERFLOW at
        the literal's first digit.
        """
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())

        value = int("".join(chars))
        if value > INT32_MAX:
            raise LexicalError(ErrorCode.INTEGER_OVERFLOW, start)

        return Token(TokenKind.UNSIGNED_INTEGER, start, self._position(), value)

    def _check_token(self, token: Token) -> None:
        """Reject identifiers whose lexeme starts with a digit."""
        if token.kind == TokenKind.IDENTIFIER and token.value[:1].isdigit():
            raise LexicalError(
                ErrorCode.INVALID_IDENTIFIER, token.start, detail=token.value
            )


# =============================================================================
# Convenience Function
# =============================================================================

def tokenize(source: str) -> tuple[list[Token], Optional[CompilationError]]:
    """
    Tokenize a whole program.

    Returns:
        (tokens, None) on success, or ([], error) for the first lexical
        error. No partial token list is ever returned.
    """
    try:
        tokens = list(Lexer(source).tokenize())
    except CompilationError as e:
        logger.debug(f"Tokenization failed: {e.code.name} at {e.position!r}")
        return [], e

    logger.debug(f"Tokenized {len(tokens)} tokens")
    return tokens, None
