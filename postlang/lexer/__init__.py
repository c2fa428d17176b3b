"""
postlang Lexer Package

Scanner and token model for postlang. Produces END, keyword, INT and
IDENT tokens; punctuation is carried as single-character IDENTs.

Author: xwest
"""

from .tokens import (
    Token, TokenType, SourceLocation, KEYWORDS, BINOP_PRECEDENCE,
    get_token_precedence
)
from .lexer import Lexer, tokenize_string
from .errors import Diagnostic, CompilerError, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "KEYWORDS",
    "BINOP_PRECEDENCE",
    "get_token_precedence",
    "tokenize_string",
    "Diagnostic",
    "CompilerError",
    "LexerError",
]
