"""
Incremental compilation session for postlang.

Each top-level entity gets its own translation unit. ``define`` and
``evaluate`` lower one function into the current unit, seal it, and reset
the backend so the next entity starts fresh; ``declare_extern`` only
records a signature, which later units pick up through the symbol table.

Author: xwest
"""

from typing import Any, Optional

from ..parser.ast_nodes import Prototype, Function
from ..backend.base import Backend
from .config import SessionConfig, RedefinitionPolicy
from .symbol_table import SymbolTable, FunctionSymbol
from .lowering import Lowerer
from .errors import create_redefinition_error


ANONYMOUS_PREFIX = "__anon_expr"


class CompilationSession:
    """
    Owns the symbol table and the backend's current translation unit.
    
    Nothing else mutates either; the driver talks to the session only
    through ``define``, ``declare_extern`` and ``evaluate``.
    """
    
    def __init__(self, backend: Backend, config: Optional[SessionConfig] = None):
        self.backend = backend
        self.config = config or SessionConfig()
        self.symbols = SymbolTable()
        self.lowerer = Lowerer(backend, self.symbols)
        
        self.last_ir: Optional[str] = None
        self._anonymous_count = 0
    
    def define(self, function: Function) -> FunctionSymbol:
        """
        Lower, seal and record a named definition.
        
        The symbol is only recorded once the unit has been sealed, so a
        failed definition leaves earlier ones callable.
        
        Raises:
            RedefinitionError: If the name already has a body and the
                redefinition policy is "error"
            CompilerError: If lowering or sealing fails
        """
        proto = function.proto
        if (self.config.redefinition == RedefinitionPolicy.ERROR
                and self.symbols.is_defined(proto.name)):
            raise create_redefinition_error(proto)
        
        link_name = self.symbols.next_link_name(proto.name)
        self._seal(function, link_name, anonymous=False)
        return self.symbols.define(proto, link_name)
    
    def declare_extern(self, prototype: Prototype) -> FunctionSymbol:
        """Record an external signature and declare it in the current unit."""
        symbol = self.symbols.declare(prototype)
        handle = self.lowerer.visit(prototype)
        self.last_ir = self.backend.function_ir(handle)
        return symbol
    
    def evaluate(self, function: Function) -> int:
        """
        Lower an anonymous wrapper, run it, and return its value.
        
        Raises:
            UnresolvedSymbolError: If it calls something nothing defines
            CompilerError: If lowering or sealing fails
        """
        self._anonymous_count += 1
        link_name = f"{ANONYMOUS_PREFIX}.{self._anonymous_count}"
        
        self._seal(function, link_name, anonymous=True)
        return self.backend.execute_entry_point(link_name)
    
    def _seal(self, function: Function, link_name: str, anonymous: bool) -> Any:
        """The seal-and-reset transition: lower, hand off, start a fresh unit."""
        try:
            handle = self.lowerer.lower_function(function, link_name)
            self.last_ir = self.backend.function_ir(handle)
            return self.backend.seal_unit(anonymous=anonymous)
        finally:
            self.backend.reset_unit()
