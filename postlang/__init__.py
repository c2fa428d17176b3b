"""
postlang - an expression-oriented language compiled incrementally to
native code with LLVM.

Author: xwest
"""

__version__ = "0.1.0"

from .backend import LLVMBackend, BackendError, BackendInitError
from .lexer import Lexer, Token, TokenType, CompilerError, LexerError
from .parser import Parser, ParseError, parse_string, format_ast
from .session import (
    SessionConfig, CompilationSession, Driver, TopLevelResult, ResultKind, run_source
)

__all__ = [
    "__version__",
    "Lexer", "Token", "TokenType",
    "Parser", "parse_string", "format_ast",
    "SessionConfig", "CompilationSession", "Driver", "TopLevelResult", "ResultKind",
    "run_source", "LLVMBackend",
    "CompilerError", "LexerError", "ParseError", "BackendError", "BackendInitError",
]
