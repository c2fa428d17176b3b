"""
Error handling for the postlang lexer.

Also home of the ``Diagnostic`` record and the ``CompilerError`` base
class that every later stage (parser, session, backend) builds its own
errors on, so the top-level driver can report all of them the same way.

Author: xwest
"""

from typing import Optional
from dataclasses import dataclass

from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """A single reportable problem (error, warning, info)."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info"
    code: Optional[str] = None
    help_text: Optional[str] = None
    
    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        if self.code:
            severity_prefix += f"[{self.code}]"
        result = f"{severity_prefix}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"
        
        if self.help_text:
            result += f"  help: {self.help_text}\n"
        
        return result


class CompilerError(Exception):
    """
    Base class of every error reported at the top-level driver boundary.
    
    Contains detailed diagnostic information for error reporting.
    """
    
    default_code: Optional[str] = None
    
    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code or self.default_code,
            help_text=help_text
        )
    
    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location
    
    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code
    
    def __str__(self) -> str:
        return str(self.diagnostic)


class LexerError(CompilerError):
    """Raised when the scanner meets a malformed literal."""
    
    default_code = "L001"


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid input",
    "L007": "Number literal overflow",
}


def create_number_overflow_error(lexeme: str, location: SourceLocation) -> LexerError:
    """Create an error for an integer literal outside the 64-bit range."""
    return LexerError(
        message=f"Integer literal out of range: '{lexeme}'",
        location=location,
        code="L007",
        help_text="Integer literals must fit in a signed 64-bit integer."
    )

