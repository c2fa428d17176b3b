"""
postlang Compilation Session Package

Symbol table, AST lowering, the seal-and-reset session protocol and the
top-level driver loop.

Author: xwest
"""

from .config import SessionConfig, RedefinitionPolicy
from .errors import (
    SemanticError, UnresolvedSymbolError, RedefinitionError, ArityError
)
from .symbol_table import SymbolTable, FunctionSymbol
from .lowering import Lowerer
from .session import CompilationSession
from .driver import Driver, TopLevelResult, ResultKind, run_source

__all__ = [
    # Configuration
    "SessionConfig", "RedefinitionPolicy",
    
    # Core session
    "SymbolTable", "FunctionSymbol", "Lowerer", "CompilationSession",
    "Driver", "TopLevelResult", "ResultKind", "run_source",
    
    # Error handling
    "SemanticError", "UnresolvedSymbolError", "RedefinitionError", "ArityError",
]
