"""
AST lowering for postlang.

``Lowerer`` is the ASTVisitor that turns one top-level ``Function`` into
backend calls. Children are always lowered before their parent combines
them, except where evaluation order is part of the semantics: the
branches of a conditional, and the arity check of a call, which happens
before any argument is touched.

Author: xwest
"""

from typing import Any, Dict, Optional

from ..lexer.errors import CompilerError
from ..parser.ast_nodes import (
    ASTVisitor, Literal, VarRef, BinaryOp, Call, Conditional, Prototype, Function,
    is_assignment
)
from ..backend.base import Backend
from .symbol_table import SymbolTable
from .errors import (
    ArityError, create_undefined_function_error, create_undefined_variable_error,
    create_invalid_assignment_error, create_nesting_error
)


class Lowerer(ASTVisitor):
    """
    Drives a ``Backend`` over one function at a time.
    
    Calls resolve against the function currently being built first (so a
    function can call itself before its symbol is recorded), then against
    the session's symbol table, declaring the callee in the current unit
    on demand.
    """
    
    def __init__(self, backend: Backend, symbols: SymbolTable):
        self.backend = backend
        self.symbols = symbols
        
        self._link_name: Optional[str] = None
        self._local: Dict[str, Prototype] = {}
    
    def lower_function(self, function: Function, link_name: str) -> Any:
        """
        Lower a definition or anonymous wrapper under ``link_name``.
        
        Returns:
            The backend function handle
        
        Raises:
            CompilerError: If any part of the body cannot be lowered; the
                partially built function has already been discarded
        """
        self._link_name = link_name
        try:
            return self.visit(function)
        finally:
            self._link_name = None
            self._local.clear()
    
    def visit_Function(self, node: Function) -> Any:
        proto = node.proto
        link_name = self._link_name or proto.name
        
        handle = self.backend.declare_function(link_name, proto.params)
        if not proto.is_anonymous:
            self._local[proto.name] = proto
        
        self.backend.begin_function_body(handle, proto.params)
        try:
            value = self.visit(node.body)
            self.backend.finish_function_body(value)
        except CompilerError:
            self.backend.discard_function(handle)
            raise
        except RecursionError:
            self.backend.discard_function(handle)
            raise create_nesting_error(node, node.location) from None
        
        return handle
    
    def visit_Prototype(self, node: Prototype) -> Any:
        """Declare an extern in the current unit."""
        return self.backend.declare_function(
            self.symbols.link_name_for(node.name), node.params
        )
    
    def visit_Literal(self, node: Literal) -> Any:
        return self.backend.emit_integer(node.value)
    
    def visit_VarRef(self, node: VarRef) -> Any:
        value = self.backend.load_variable(node.name)
        if value is None:
            raise create_undefined_variable_error(node.name, node.location, node)
        return value
    
    def visit_BinaryOp(self, node: BinaryOp) -> Any:
        if is_assignment(node):
            return self._lower_assignment(node)
        
        # Walk left-deep chains (1 + 2 + ... + n) in a loop instead of recursing
        chain = [node]
        while isinstance(chain[-1].lhs, BinaryOp) and not is_assignment(chain[-1].lhs):
            chain.append(chain[-1].lhs)
        
        value = self.visit(chain[-1].lhs)
        for op_node in reversed(chain):
            rhs = self.visit(op_node.rhs)
            value = self.backend.emit_binary(op_node.op, value, rhs, op_node.location)
        return value
    
    def _lower_assignment(self, node: BinaryOp) -> Any:
        if not isinstance(node.lhs, VarRef):
            raise create_invalid_assignment_error(node, node.location)
        
        value = self.visit(node.rhs)
        self.backend.store_variable(node.lhs.name, value)
        return value
    
    def visit_Call(self, node: Call) -> Any:
        if node.callee in self._local:
            proto = self._local[node.callee]
            link_name = self._link_name
        else:
            symbol = self.symbols.lookup(node.callee)
            if symbol is None:
                raise create_undefined_function_error(node.callee, node.location, node)
            proto = symbol.prototype
            link_name = symbol.link_name
        
        if proto.arity != len(node.args):
            raise ArityError(node.callee, proto.arity, len(node.args), node.location, node)
        
        function = self.backend.lookup_function(link_name)
        if function is None or self.backend.function_arity(function) != proto.arity:
            function = self.backend.declare_function(link_name, proto.params)
        
        args = [self.visit(arg) for arg in node.args]
        return self.backend.emit_call(function, args)
    
    def visit_Conditional(self, node: Conditional) -> Any:
        cond = self.visit(node.cond)
        self.backend.begin_conditional(cond)
        
        then_value = self.visit(node.then)
        self.backend.begin_else(then_value)
        
        else_value = self.visit(node.else_)
        return self.backend.end_conditional(else_value)
