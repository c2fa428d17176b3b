"""
postlang Runtime Library
========================

The small standard library compiled code can call after declaring it with
``extern``. Each function is a ctypes callback registered as a process
symbol, so the JIT links calls to it like any other external function.

    extern print(x)     writes x and a newline, returns 0
    extern put(x)       writes the character chr(x + 48), returns 0
    extern ipow(a, n)   a to the power n, wrapped to 64 bits
    extern log2(x)      index of the highest set bit of x (0 for 0)
    extern in()         reads one integer from input
"""

import sys
import ctypes
import inspect
from typing import Any, Callable, Dict, Optional, TextIO

import click
import llvmlite.binding as llvm

from ..lexer.tokens import INT64_MIN, INT64_MAX


_UINT64_MASK = (1 << 64) - 1


def _wrap_int64(value: int) -> int:
    """Two's complement wrap of an arbitrary int into the signed 64-bit range."""
    value &= _UINT64_MASK
    if value > INT64_MAX:
        value -= 1 << 64
    return value


def ipow(a: int, n: int) -> int:
    """Integer power; negative exponents truncate toward zero."""
    if n < 0:
        if a == 1:
            return 1
        if a == -1:
            return -1 if n % 2 else 1
        return 0
    return _wrap_int64(pow(a, n, 1 << 64))


def log2(x: int) -> int:
    """Index of the highest set bit of x's 64-bit pattern."""
    bits = x & _UINT64_MASK
    if bits == 0:
        return 0
    return bits.bit_length() - 1


class RuntimeLibrary:
    """
    Registers the runtime functions with LLVM's process symbol table.
    
    ``output`` and ``input`` default to whatever ``sys.stdout`` and
    ``sys.stdin`` are at call time.
    """
    
    def __init__(self, output: Optional[TextIO] = None, input: Optional[TextIO] = None):
        self.output = output
        self.input = input
        
        # ctypes callbacks must outlive every engine that links against them
        self._callbacks: Dict[str, Any] = {}
    
    def functions(self) -> Dict[str, Callable[..., int]]:
        return {
            "print": self._print,
            "put": self._put,
            "ipow": ipow,
            "log2": log2,
            "in": self._read_int,
        }
    
    def install(self):
        """Register every runtime function as a process symbol."""
        for name, function in self.functions().items():
            arity = len(inspect.signature(function).parameters)
            prototype = ctypes.CFUNCTYPE(ctypes.c_int64, *([ctypes.c_int64] * arity))
            callback = prototype(function)
            self._callbacks[name] = callback
            llvm.add_symbol(name, ctypes.cast(callback, ctypes.c_void_p).value)
    
    def _print(self, x: int) -> int:
        click.echo(str(x), file=self.output)
        return 0
    
    def _put(self, x: int) -> int:
        code = (x + 48) & 0xFF
        click.echo(chr(code), file=self.output, nl=False)
        return 0
    
    def _read_int(self) -> int:
        """Read one optionally signed decimal integer; 0 at end of input."""
        stream = self.input if self.input is not None else sys.stdin
        
        char = stream.read(1)
        while char and char.isspace():
            char = stream.read(1)
        
        digits = ""
        if char in ("-", "+"):
            digits = char
            char = stream.read(1)
        while char and char.isdigit():
            digits += char
            char = stream.read(1)
        
        try:
            value = int(digits)
        except ValueError:
            return 0
        return max(INT64_MIN, min(INT64_MAX, value))
