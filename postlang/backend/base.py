"""
Backend contract for postlang.

The compilation session never touches machine types or instructions
itself. It walks the AST and calls these primitives, bottom-up, with
opaque value and function handles that only the backend understands.

A backend assembles one translation unit at a time: functions are
declared and built into the current unit, ``seal_unit`` hands the unit
off for linking, and ``reset_unit`` starts a fresh one.

Author: xwest
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..lexer.tokens import SourceLocation


class Backend(ABC):
    """Narrow code generation and execution interface."""
    
    # ------------------------------------------------------------------
    # Functions in the current unit
    # ------------------------------------------------------------------
    
    @abstractmethod
    def lookup_function(self, link_name: str) -> Optional[Any]:
        """Function handle already present in the current unit, or None."""
        pass
    
    @abstractmethod
    def declare_function(self, link_name: str, params: List[str]) -> Any:
        """Declare (or reuse) a function of ``len(params)`` integer parameters."""
        pass
    
    @abstractmethod
    def function_arity(self, function: Any) -> int:
        pass
    
    @abstractmethod
    def begin_function_body(self, function: Any, params: List[str]):
        """Start emitting the body of ``function`` and bind its parameters."""
        pass
    
    @abstractmethod
    def finish_function_body(self, value: Any):
        """
        Return ``value`` from the function being built and verify it.
        
        Raises:
            BackendError: If the function is malformed
        """
        pass
    
    @abstractmethod
    def discard_function(self, function: Any):
        """Drop a partially built function from the current unit."""
        pass
    
    @abstractmethod
    def function_ir(self, function: Any) -> str:
        """Textual IR of a function, for debug dumps."""
        pass
    
    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------
    
    @abstractmethod
    def emit_integer(self, value: int) -> Any:
        pass
    
    @abstractmethod
    def load_variable(self, name: str) -> Optional[Any]:
        """Current value of a parameter or local, or None if unbound."""
        pass
    
    @abstractmethod
    def store_variable(self, name: str, value: Any) -> Any:
        """Store into ``name``'s slot, creating the slot if needed."""
        pass
    
    @abstractmethod
    def emit_binary(self, op: str, lhs: Any, rhs: Any,
                    location: Optional[SourceLocation] = None) -> Any:
        pass
    
    @abstractmethod
    def emit_call(self, function: Any, args: List[Any]) -> Any:
        pass
    
    @abstractmethod
    def begin_conditional(self, cond: Any):
        """Branch on ``cond != 0`` and start the then-branch."""
        pass
    
    @abstractmethod
    def begin_else(self, then_value: Any):
        """Close the then-branch with ``then_value`` and start the else-branch."""
        pass
    
    @abstractmethod
    def end_conditional(self, else_value: Any) -> Any:
        """Close the else-branch and return the merged value."""
        pass
    
    # ------------------------------------------------------------------
    # Units and execution
    # ------------------------------------------------------------------
    
    @abstractmethod
    def seal_unit(self, anonymous: bool = False) -> Any:
        """Hand the current unit off for linking and return its handle."""
        pass
    
    @abstractmethod
    def reset_unit(self):
        """Start a fresh, empty translation unit."""
        pass
    
    @abstractmethod
    def execute_entry_point(self, link_name: str) -> int:
        """Link and run a sealed zero-argument function."""
        pass
