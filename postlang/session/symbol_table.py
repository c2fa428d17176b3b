"""
Function symbol table for postlang compilation sessions.

Every top-level entity is lowered into its own translation unit, so a call
to a function defined by an earlier entity cannot see that function's
body. The symbol table remembers each function's prototype and the name
its current body was linked under, which is enough for a later unit to
declare the function externally and let the JIT link the call.

Author: xwest
"""

from typing import Dict, Iterator, Optional
from dataclasses import dataclass

from ..parser.ast_nodes import Prototype


@dataclass
class FunctionSymbol:
    """A function known to the session."""
    prototype: Prototype
    link_name: str          # Symbol the current body (or extern) resolves to
    defined: bool = False   # True once a body has been sealed
    
    @property
    def name(self) -> str:
        return self.prototype.name
    
    @property
    def arity(self) -> int:
        return self.prototype.arity
    
    def __str__(self) -> str:
        params = ", ".join(self.prototype.params)
        kind = "fun" if self.defined else "extern"
        return f"{kind} {self.name}({params}) -> @{self.link_name}"


class SymbolTable:
    """
    Mapping from function name to ``FunctionSymbol``.
    
    Entries are never removed. Redefinitions get a fresh link name
    (``foo``, ``foo.1``, ``foo.2``, ...) so units that were sealed against
    an older body keep calling it.
    """
    
    def __init__(self):
        self._symbols: Dict[str, FunctionSymbol] = {}
        self._generations: Dict[str, int] = {}
    
    def lookup(self, name: str) -> Optional[FunctionSymbol]:
        return self._symbols.get(name)
    
    def is_defined(self, name: str) -> bool:
        symbol = self._symbols.get(name)
        return symbol is not None and symbol.defined
    
    def link_name_for(self, name: str) -> str:
        """Name that calls to ``name`` should be linked against right now."""
        symbol = self._symbols.get(name)
        if symbol is None:
            return name
        return symbol.link_name
    
    def next_link_name(self, name: str) -> str:
        """Link name the next definition of ``name`` will use."""
        generation = self._generations.get(name, 0)
        if generation == 0:
            return name
        return f"{name}.{generation}"
    
    def declare(self, prototype: Prototype) -> FunctionSymbol:
        """
        Record an extern declaration.
        
        Re-declaring an identical signature is a no-op, and so is declaring
        a function that already has a body with that signature. A different
        signature replaces the entry; it links against the name the next
        definition of the function will get, never against a body of the
        wrong arity.
        """
        existing = self._symbols.get(prototype.name)
        if existing is not None and existing.prototype.same_signature(prototype):
            return existing
        
        symbol = FunctionSymbol(prototype, self.next_link_name(prototype.name))
        self._symbols[prototype.name] = symbol
        return symbol
    
    def define(self, prototype: Prototype, link_name: str) -> FunctionSymbol:
        """Record a sealed definition, replacing any previous entry."""
        symbol = FunctionSymbol(prototype, link_name, defined=True)
        self._symbols[prototype.name] = symbol
        self._generations[prototype.name] = self._generations.get(prototype.name, 0) + 1
        return symbol
    
    def __contains__(self, name: str) -> bool:
        return name in self._symbols
    
    def __len__(self) -> int:
        return len(self._symbols)
    
    def __iter__(self) -> Iterator[FunctionSymbol]:
        return iter(self._symbols.values())
