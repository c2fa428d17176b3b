"""
Error handling for the postlang parser.

Author: xwest
"""

from typing import Optional

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import CompilerError


class ParseError(CompilerError):
    """
    Raised when the parser meets a token it cannot use (a syntax error).
    
    The parser gives up on the current top-level entity; the driver
    resynchronizes by skipping one token.
    """
    
    default_code = "P001"
    
    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, location, code=code, help_text=help_text)
        self.token = token


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P005": "Invalid expression",
    "P008": "Malformed function signature",
    "P010": "Unexpected end of input",
    "P011": "Expression nested too deeply",
}


def create_unexpected_token_error(expected: str, found: Token) -> ParseError:
    """Create an error for a token other than the one the grammar needs."""
    code = "P010" if found.type == TokenType.END else "P002"
    return ParseError(
        message=f"Expected {expected}, found {found.describe()}",
        location=found.location,
        token=found,
        code=code
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    return ParseError(
        message=f"Unexpected token when expecting an expression: {found.describe()}",
        location=found.location,
        token=found,
        code="P005",
        help_text="Expressions start with a number, a name, '(' or 'if'."
    )


def create_prototype_error(reason: str, found: Token) -> ParseError:
    """Create an error for a malformed function signature."""
    return ParseError(
        message=f"{reason}, found {found.describe()}",
        location=found.location,
        token=found,
        code="P008",
        help_text="Prototypes look like: name(param1, param2)"
    )


def create_nesting_error(found: Optional[Token]) -> ParseError:
    """Create an error for input nested deeper than the parser can recurse."""
    if found is None:
        return ParseError(message="Expression nested too deeply", code="P011")
    return ParseError(
        message=f"Expression nested too deeply, stopped at {found.describe()}",
        location=found.location,
        token=found,
        code="P011",
        help_text="Split the expression into smaller functions."
    )
