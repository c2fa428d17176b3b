"""
postlang Parser Package

Recursive descent / precedence climbing parser and the AST node model.

Author: xwest
"""

from .ast_nodes import (
    ASTNode, Expression, Literal, VarRef, BinaryOp, Call, Conditional,
    Prototype, Function, ASTVisitor, ASTPrinter, format_ast, is_assignment
)
from .parser import Parser, parse_string, parse_expression_string
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "parse_string", "parse_expression_string",
    
    # AST nodes
    "ASTNode", "Expression",
    "Literal", "VarRef", "BinaryOp", "Call", "Conditional",
    "Prototype", "Function",
    "ASTVisitor", "ASTPrinter", "format_ast", "is_assignment",
    
    # Error handling
    "ParseError",
]
