"""
postlang Backend Package

The code generation contract and its llvmlite implementation.

Author: xwest
"""

from .errors import BackendError, BackendInitError
from .base import Backend
from .llvm_backend import LLVMBackend

__all__ = [
    "Backend", "LLVMBackend",
    "BackendError", "BackendInitError",
]
