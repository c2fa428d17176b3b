"""
postlang JIT Package

Incremental MCJIT linker and the runtime library it links against.
"""

from .jit_compiler import JITCompiler, TranslationUnit, UnitState
from .runtime_library import RuntimeLibrary, ipow, log2

__all__ = [
    "JITCompiler", "TranslationUnit", "UnitState",
    "RuntimeLibrary", "ipow", "log2",
]
