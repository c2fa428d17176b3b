"""
Token definitions for the postlang lexer.

The language has very few token kinds. Keywords get their own kind,
integer literals are INT, and everything else (identifiers *and* single
punctuation characters) is an IDENT whose payload is its text. The parser
tells operators from names purely by looking at that text.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """Enumeration of all token kinds in postlang."""
    
    END = auto()                    # End of input
    
    # Commands
    FUNC = auto()                   # fun
    EXT = auto()                    # extern
    RET = auto()                    # ret
    
    # Conditional
    IF = auto()                     # if
    ELSE = auto()                   # else
    
    # Values
    INT = auto()                    # 42
    IDENT = auto()                  # name, or one punctuation character


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.
    
    Used for error reporting and debugging information.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input
    
    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"
    
    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    A lexical token.
    
    ``value`` is the payload: an ``int`` for INT tokens, the text for IDENT
    tokens, and ``None`` for every other kind.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # int for INT, str for IDENT, else None
    location: Optional[SourceLocation] = None
    
    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.type.name}({self.value!r})"
        return self.type.name
    
    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")
    
    @property
    def text(self) -> Optional[str]:
        """IDENT payload, or None for any other kind."""
        if self.type == TokenType.IDENT:
            return self.value
        return None
    
    @property
    def is_word(self) -> bool:
        """True for identifiers, false for punctuation IDENTs."""
        text = self.text
        return bool(text) and _is_word_char(text[0])
    
    @property
    def is_keyword(self) -> bool:
        return self.type in KEYWORDS.values()
    
    def is_punct(self, char: str) -> bool:
        """Check whether this token is the given punctuation character."""
        return self.type == TokenType.IDENT and self.value == char
    
    def describe(self) -> str:
        """Human readable description used in diagnostics."""
        if self.type == TokenType.END:
            return "end of input"
        if self.type == TokenType.INT:
            return f"integer {self.value}"
        if self.type == TokenType.IDENT:
            return f"'{self.value}'"
        return f"keyword '{self.lexeme}'"


def _is_word_char(char: str) -> bool:
    return char.isascii() and char.isalnum()


# Reserved spellings
KEYWORDS = {
    "fun": TokenType.FUNC,
    "extern": TokenType.EXT,
    "ret": TokenType.RET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
}

# Binary operator precedence; anything missing binds at -1 and never matches
BINOP_PRECEDENCE = {
    "=": 0,
    
    "<": 10,
    ">": 10,
    
    "+": 20,
    "-": 20,
    
    "*": 40,
    "/": 40,
}

# Signed 64-bit range of integer literals
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def get_token_precedence(token: Token) -> int:
    """Precedence of the token's text as a binary operator, or -1."""
    text = token.text
    if text is None:
        return -1
    return BINOP_PRECEDENCE.get(text, -1)
