"""
Abstract Syntax Tree node definitions for postlang.

The node set is closed: five expression variants plus ``Prototype`` and
``Function``. Every operation over the tree (lowering, debug printing) is
written as an ``ASTVisitor`` subclass, and the visitor base declares one
abstract method per variant, so a visitor that forgets a variant cannot
be instantiated.

Author: xwest
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, List, Optional
from dataclasses import dataclass, field

from ..lexer.tokens import SourceLocation


class ASTNode(ABC):
    """Base class for all AST nodes."""
    
    def accept(self, visitor: 'ASTVisitor') -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)
    
    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class Literal(Expression):
    """Integer literal."""
    value: int
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    def children(self) -> List[ASTNode]:
        return []


@dataclass
class VarRef(Expression):
    """Reference to a parameter or local variable."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    def children(self) -> List[ASTNode]:
        return []


@dataclass
class BinaryOp(Expression):
    """Binary operation expression."""
    op: str
    lhs: Expression
    rhs: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    def children(self) -> List[ASTNode]:
        return [self.lhs, self.rhs]


@dataclass
class Call(Expression):
    """Function call expression."""
    callee: str
    args: List[Expression] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    def children(self) -> List[ASTNode]:
        return list(self.args)


@dataclass
class Conditional(Expression):
    """if/else expression; both branches are mandatory."""
    cond: Expression
    then: Expression
    else_: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    def children(self) -> List[ASTNode]:
        return [self.cond, self.then, self.else_]


# ============================================================================
# Functions
# ============================================================================

@dataclass
class Prototype(ASTNode):
    """
    Function signature: a name and positional parameter names.
    
    An empty name marks the wrapper synthesized around a bare top-level
    expression.
    """
    name: str
    params: List[str] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    @property
    def arity(self) -> int:
        return len(self.params)
    
    @property
    def is_anonymous(self) -> bool:
        return self.name == ""
    
    def same_signature(self, other: 'Prototype') -> bool:
        return self.name == other.name and self.arity == other.arity
    
    def children(self) -> List[ASTNode]:
        return []


@dataclass
class Function(ASTNode):
    """Function definition: prototype plus expression body."""
    proto: Prototype
    body: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    
    @property
    def name(self) -> str:
        return self.proto.name
    
    def children(self) -> List[ASTNode]:
        return [self.proto, self.body]


def is_assignment(node: ASTNode) -> bool:
    """Check whether ``node`` is a ``name = value`` binary operation."""
    return isinstance(node, BinaryOp) and node.op == "="


# ============================================================================
# Visitors
# ============================================================================

class ASTVisitor(ABC):
    """
    Visitor over the closed set of node variants.
    
    ``visit`` is the only dispatch point; subclasses implement every
    ``visit_<Variant>`` method.
    """
    
    _DISPATCH = {
        Literal: "visit_Literal",
        VarRef: "visit_VarRef",
        BinaryOp: "visit_BinaryOp",
        Call: "visit_Call",
        Conditional: "visit_Conditional",
        Prototype: "visit_Prototype",
        Function: "visit_Function",
    }
    
    def visit(self, node: ASTNode) -> Any:
        method_name = self._DISPATCH.get(type(node))
        if method_name is None:
            raise TypeError(f"Not a postlang AST node: {node!r}")
        return getattr(self, method_name)(node)
    
    @abstractmethod
    def visit_Literal(self, node: Literal) -> Any:
        pass
    
    @abstractmethod
    def visit_VarRef(self, node: VarRef) -> Any:
        pass
    
    @abstractmethod
    def visit_BinaryOp(self, node: BinaryOp) -> Any:
        pass
    
    @abstractmethod
    def visit_Call(self, node: Call) -> Any:
        pass
    
    @abstractmethod
    def visit_Conditional(self, node: Conditional) -> Any:
        pass
    
    @abstractmethod
    def visit_Prototype(self, node: Prototype) -> Any:
        pass
    
    @abstractmethod
    def visit_Function(self, node: Function) -> Any:
        pass


class ASTPrinter(ASTVisitor):
    """Indented debug dump of a tree, four spaces per nesting level."""
    
    def __init__(self):
        self.lines: List[str] = []
        self.layer = 0
    
    @contextmanager
    def _nested(self):
        self.layer += 1
        try:
            yield
        finally:
            self.layer -= 1
    
    def _emit(self, *parts: Any):
        self.lines.append("    " * self.layer + " ".join(str(p) for p in parts))
    
    def visit_Literal(self, node: Literal):
        with self._nested():
            self._emit("Value:", node.value)
    
    def visit_VarRef(self, node: VarRef):
        with self._nested():
            self._emit("Var:", node.name)
    
    def visit_BinaryOp(self, node: BinaryOp):
        with self._nested():
            self._emit("BinaryOp:")
            self.visit(node.lhs)
            self._emit("OP:", node.op)
            self.visit(node.rhs)
            self._emit("End of BinaryOp")
    
    def visit_Call(self, node: Call):
        with self._nested():
            self._emit("Call:", node.callee)
            for i, arg in enumerate(node.args):
                self._emit("Arg:", i)
                self.visit(arg)
            self._emit("End of Call")
    
    def visit_Conditional(self, node: Conditional):
        with self._nested():
            self._emit("If:")
            self.visit(node.cond)
            self._emit("Then:")
            self.visit(node.then)
            self._emit("Else:")
            self.visit(node.else_)
    
    def visit_Prototype(self, node: Prototype):
        with self._nested():
            self._emit("Proto:", node.name)
            for i, param in enumerate(node.params):
                self._emit("Arg:", i, "-", param)
            self._emit("End of Proto")
    
    def visit_Function(self, node: Function):
        with self._nested():
            # Anonymous wrappers print as their bare body
            if node.proto.is_anonymous:
                self.visit(node.body)
                return
            self._emit("Func:", node.proto.name)
            self.visit(node.proto)
            self.visit(node.body)
            self._emit("End of Func")


def format_ast(node: ASTNode) -> str:
    """Render ``node`` with ``ASTPrinter``."""
    printer = ASTPrinter()
    printer.visit(node)
    return "\n".join(printer.lines)
