"""
Error handling for postlang code generation and execution.

Author: xwest
"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import CompilerError


class BackendError(CompilerError):
    """
    Lowering, verification or linking failure reported by the backend.
    
    Discards the current top-level entity only.
    """
    
    default_code = "B001"


class BackendInitError(BackendError):
    """The target machine or execution engine could not be created."""
    
    default_code = "B100"


# Common backend error codes for categorization
BACKEND_ERROR_CODES = {
    "B001": "Code generation failed",
    "B002": "Module verification failed",
    "B003": "Unsupported operator",
    "B004": "Conflicting function declaration",
    "B100": "Backend initialization failed",
}


def create_verification_error(unit_name: str, reason: str) -> BackendError:
    return BackendError(
        message=f"Generated code for '{unit_name}' failed verification: {reason.strip()}",
        code="B002"
    )


def create_unsupported_operator_error(op: str, location: Optional[SourceLocation] = None) -> BackendError:
    return BackendError(
        message=f"Invalid binary operator: '{op}'",
        location=location,
        code="B003"
    )
