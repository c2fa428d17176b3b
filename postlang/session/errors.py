"""
Semantic error handling for postlang compilation sessions.

Name resolution, call arity and redefinition problems found while a
top-level entity is lowered. None of them is fatal: the driver reports the
error and moves on to the next entity.

Author: xwest
"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import CompilerError
from ..parser.ast_nodes import ASTNode, Prototype


class SemanticError(CompilerError):
    """
    Exception raised when a well-formed entity cannot be compiled.
    
    Contains detailed diagnostic information for error reporting.
    """
    
    default_code = "S001"
    
    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        node: Optional[ASTNode] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, location, code=code, help_text=help_text)
        self.node = node


class UnresolvedSymbolError(SemanticError):
    """Call or reference to a name with no known prototype or binding."""
    
    default_code = "S010"
    
    def __init__(self, name: str, message: str, location: Optional[SourceLocation] = None,
                 node: Optional[ASTNode] = None, help_text: Optional[str] = None):
        super().__init__(message, location, node=node, help_text=help_text)
        self.name = name


class RedefinitionError(SemanticError):
    """Definition of a name that already has a body."""
    
    default_code = "S011"


class ArityError(SemanticError):
    """Call whose argument count differs from the declared parameter count."""
    
    default_code = "S015"
    
    def __init__(self, callee: str, expected: int, found: int,
                 location: Optional[SourceLocation] = None, node: Optional[ASTNode] = None):
        super().__init__(
            f"Function '{callee}' expects {expected} argument{'s' if expected != 1 else ''}, "
            f"but {found} {'were' if found != 1 else 'was'} provided",
            location,
            node=node
        )
        self.callee = callee
        self.expected = expected
        self.found = found


# Common semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    "S001": "Semantic error",
    "S010": "Undefined symbol",
    "S011": "Redefinition",
    "S015": "Wrong number of arguments",
    "S020": "Invalid assignment target",
    "S030": "Expression nested too deeply",
}


def create_undefined_function_error(name: str, location: Optional[SourceLocation] = None,
                                    node: Optional[ASTNode] = None) -> UnresolvedSymbolError:
    """Create an error for a call to a function nobody declared."""
    return UnresolvedSymbolError(
        name,
        f"Unknown function referenced: '{name}'",
        location,
        node=node,
        help_text=f"Define it with 'fun {name}(...)' or declare it with 'extern {name}(...)'."
    )


def create_undefined_variable_error(name: str, location: Optional[SourceLocation] = None,
                                    node: Optional[ASTNode] = None) -> UnresolvedSymbolError:
    """Create an error for a read of a variable that has no binding."""
    return UnresolvedSymbolError(
        name,
        f"Unknown variable name: '{name}'",
        location,
        node=node
    )


def create_unlinked_symbol_error(name: str) -> UnresolvedSymbolError:
    """Create an error for a declared symbol that no unit or library provides."""
    return UnresolvedSymbolError(
        name,
        f"Symbol '{name}' is declared but never defined",
        help_text="Define the function before evaluating an expression that calls it."
    )


def create_redefinition_error(proto: Prototype) -> RedefinitionError:
    return RedefinitionError(
        f"Function '{proto.name}' is already defined",
        proto.location,
        node=proto,
        help_text="Redefinition is disabled (POSTLANG_REDEFINITION=error)."
    )


def create_invalid_assignment_error(node: ASTNode, location: Optional[SourceLocation] = None) -> SemanticError:
    return SemanticError(
        "Destination of '=' must be a variable",
        location,
        node=node,
        code="S020"
    )


def create_nesting_error(function: ASTNode, location: Optional[SourceLocation] = None) -> SemanticError:
    """Create an error for a body nested deeper than lowering can recurse."""
    return SemanticError(
        "Expression nested too deeply to compile",
        location,
        node=function,
        code="S030",
        help_text="Split the expression into smaller functions."
    )
