"""
LLVM Backend for postlang.

Implements the ``Backend`` contract with llvmlite's IR builder. The
language has a single type, so every value, parameter and return value is
a 64-bit integer. Parameters and assigned variables live in stack slots
allocated in the entry block.

Author: xwest
"""

from typing import Any, Dict, List, Optional, Set
from dataclasses import dataclass, field

import llvmlite.binding as llvm
import llvmlite.ir as ll

from ..lexer.tokens import SourceLocation
from ..jit.jit_compiler import JITCompiler, TranslationUnit
from ..jit.runtime_library import RuntimeLibrary
from .base import Backend
from .errors import BackendError, create_verification_error, create_unsupported_operator_error


I64 = ll.IntType(64)


@dataclass
class ConditionalFrame:
    """Blocks of an if/else whose branches are still being emitted."""
    else_block: ll.Block
    merge_block: ll.Block
    then_value: Any = None
    then_end: Optional[ll.Block] = None


@dataclass
class LLVMGenContext:
    """Context for LLVM code generation of one translation unit."""
    module: ll.Module
    builder: Optional[ll.IRBuilder] = None
    current_function: Optional[ll.Function] = None
    entry_block: Optional[ll.Block] = None
    slots: Dict[str, Any] = field(default_factory=dict)
    conditionals: List[ConditionalFrame] = field(default_factory=list)
    
    # Bodiless declarations, re-created if the unit has to be rebuilt
    declarations: Dict[str, List[str]] = field(default_factory=dict)
    
    # Every function a call instruction targets
    called: Set[str] = field(default_factory=set)


class LLVMBackend(Backend):
    """
    LLVM backend for postlang.
    
    Builds translation units with llvmlite.ir and hands sealed units to a
    ``JITCompiler`` for linking and execution.
    """
    
    def __init__(self, optimization_level: int = 2, runtime: Optional[RuntimeLibrary] = None):
        """
        Initialize the LLVM backend.
        
        Args:
            optimization_level: Codegen and pass pipeline level, 0-3
            runtime: Runtime library to expose to compiled code
        
        Raises:
            BackendInitError: If the native target cannot be initialized
        """
        self.jit = JITCompiler(optimization_level)
        
        self.runtime = runtime or RuntimeLibrary()
        self.runtime.install()
        
        self._unit_count = 0
        self.context = self._new_context()
    
    def _new_context(self) -> LLVMGenContext:
        self._unit_count += 1
        return LLVMGenContext(module=ll.Module(name=f"postlang.unit{self._unit_count}"))
    
    @property
    def builder(self) -> ll.IRBuilder:
        if self.context.builder is None:
            raise BackendError("No function body is being emitted")
        return self.context.builder
    
    # ========================================================================
    # Functions
    # ========================================================================
    
    def lookup_function(self, link_name: str) -> Optional[ll.Function]:
        value = self.context.module.globals.get(link_name)
        if isinstance(value, ll.Function):
            return value
        return None
    
    def declare_function(self, link_name: str, params: List[str]) -> ll.Function:
        existing = self.lookup_function(link_name)
        if existing is not None:
            if len(existing.args) == len(params):
                return existing
            if not existing.is_declaration or self.context.current_function is not None:
                raise BackendError(
                    f"Function '{link_name}' redeclared with {len(params)} parameters, "
                    f"previously {len(existing.args)}",
                    code="B004"
                )
            del self.context.declarations[link_name]
            self._rebuild_unit()
        
        fnty = ll.FunctionType(I64, [I64] * len(params))
        function = ll.Function(self.context.module, fnty, name=link_name)
        for arg, param in zip(function.args, params):
            arg.name = param
        
        self.context.declarations[link_name] = list(params)
        return function
    
    def function_arity(self, function: ll.Function) -> int:
        return len(function.args)
    
    def begin_function_body(self, function: ll.Function, params: List[str]):
        ctx = self.context
        ctx.declarations.pop(function.name, None)
        
        ctx.current_function = function
        ctx.entry_block = function.append_basic_block(name="entry")
        ctx.builder = ll.IRBuilder(ctx.entry_block)
        ctx.slots = {}
        ctx.conditionals = []
        
        for arg, param in zip(function.args, params):
            slot = self._create_slot(param)
            ctx.builder.store(arg, slot)
    
    def finish_function_body(self, value: Any):
        ctx = self.context
        if ctx.conditionals:
            raise BackendError("Function body ended inside an unfinished conditional")
        
        self.builder.ret(value)
        
        try:
            llvm.parse_assembly(str(ctx.module)).verify()
        except RuntimeError as e:
            raise create_verification_error(ctx.current_function.name, str(e)) from e
        
        ctx.current_function = None
        ctx.builder = None
        ctx.entry_block = None
    
    def discard_function(self, function: ll.Function):
        """Rebuild the unit without ``function``; explicit declarations survive."""
        self.context.declarations.pop(function.name, None)
        self._rebuild_unit()
    
    def _rebuild_unit(self):
        old = self.context
        self.context = LLVMGenContext(module=ll.Module(name=old.module.name))
        
        for name, params in old.declarations.items():
            self.declare_function(name, params)
    
    def function_ir(self, function: ll.Function) -> str:
        return str(function)
    
    # ========================================================================
    # Variables
    # ========================================================================
    
    def _create_slot(self, name: str, initial: Optional[Any] = None) -> Any:
        """
        Allocate a stack slot at the top of the entry block.
        
        The builder's insertion point is a list index, so inserting ahead of
        it from a second builder leaves it stale; move it back to the end of
        the entry block afterwards.
        """
        ctx = self.context
        entry_builder = ll.IRBuilder(ctx.entry_block)
        entry_builder.position_at_start(ctx.entry_block)
        slot = entry_builder.alloca(I64, name=name)
        if initial is not None:
            entry_builder.store(initial, slot)
        
        if ctx.builder is not None and ctx.builder.block is ctx.entry_block:
            ctx.builder.position_at_end(ctx.entry_block)
        
        ctx.slots[name] = slot
        return slot
    
    def load_variable(self, name: str) -> Optional[Any]:
        slot = self.context.slots.get(name)
        if slot is None:
            return None
        return self.builder.load(slot, name=name, typ=I64)
    
    def store_variable(self, name: str, value: Any) -> Any:
        slot = self.context.slots.get(name)
        if slot is None:
            # Reads on paths that skip the assignment see 0
            slot = self._create_slot(name, initial=ll.Constant(I64, 0))
        self.builder.store(value, slot)
        return value
    
    # ========================================================================
    # Expressions
    # ========================================================================
    
    def emit_integer(self, value: int) -> Any:
        return ll.Constant(I64, value)
    
    def emit_binary(self, op: str, lhs: Any, rhs: Any,
                    location: Optional[SourceLocation] = None) -> Any:
        builder = self.builder
        
        if op == "+":
            return builder.add(lhs, rhs, name="addtmp")
        if op == "-":
            return builder.sub(lhs, rhs, name="subtmp")
        if op == "*":
            return builder.mul(lhs, rhs, name="multmp")
        if op == "/":
            return self._emit_division(lhs, rhs)
        if op in ("<", ">"):
            flag = builder.icmp_signed(op, lhs, rhs, name="cmptmp")
            return builder.zext(flag, I64, name="booltmp")
        
        raise create_unsupported_operator_error(op, location)
    
    def _emit_division(self, lhs: Any, rhs: Any) -> Any:
        """
        Signed division without undefined cases.
        
        x / 0 is 0 and x / -1 is the wrapped negation of x, so
        INT64_MIN / -1 cannot trap.
        """
        builder = self.builder
        zero = ll.Constant(I64, 0)
        
        is_zero = builder.icmp_signed("==", rhs, zero, name="divzero")
        is_minus_one = builder.icmp_signed("==", rhs, ll.Constant(I64, -1), name="divneg")
        special = builder.or_(is_zero, is_minus_one, name="divspecial")
        
        divisor = builder.select(special, ll.Constant(I64, 1), rhs, name="divisor")
        quotient = builder.sdiv(lhs, divisor, name="quottmp")
        negated = builder.sub(zero, lhs, name="negtmp")
        
        special_value = builder.select(is_zero, zero, negated, name="divfix")
        return builder.select(special, special_value, quotient, name="divtmp")
    
    def emit_call(self, function: ll.Function, args: List[Any]) -> Any:
        self.context.called.add(function.name)
        return self.builder.call(function, args, name="calltmp")
    
    def begin_conditional(self, cond: Any):
        ctx = self.context
        builder = self.builder
        
        flag = builder.icmp_signed("!=", cond, ll.Constant(I64, 0), name="ifcond")
        
        then_block = ctx.current_function.append_basic_block(name="then")
        else_block = ctx.current_function.append_basic_block(name="else")
        merge_block = ctx.current_function.append_basic_block(name="ifcont")
        
        builder.cbranch(flag, then_block, else_block)
        builder.position_at_end(then_block)
        
        ctx.conditionals.append(ConditionalFrame(else_block, merge_block))
    
    def begin_else(self, then_value: Any):
        frame = self.context.conditionals[-1]
        builder = self.builder
        
        # Nested conditionals may have moved the then-branch to another block
        frame.then_value = then_value
        frame.then_end = builder.block
        
        builder.branch(frame.merge_block)
        builder.position_at_end(frame.else_block)
    
    def end_conditional(self, else_value: Any) -> Any:
        frame = self.context.conditionals.pop()
        builder = self.builder
        
        else_end = builder.block
        builder.branch(frame.merge_block)
        builder.position_at_end(frame.merge_block)
        
        phi = builder.phi(I64, name="iftmp")
        phi.add_incoming(frame.then_value, frame.then_end)
        phi.add_incoming(else_value, else_end)
        return phi
    
    # ========================================================================
    # Units and execution
    # ========================================================================
    
    def seal_unit(self, anonymous: bool = False) -> TranslationUnit:
        module = self.context.module
        exports = {f.name for f in module.functions if not f.is_declaration}
        
        unit = TranslationUnit(
            name=module.name,
            module=module,
            exports=exports,
            imports=self.context.called - exports,
            anonymous=anonymous
        )
        self.jit.add_unit(unit)
        return unit
    
    def reset_unit(self):
        self.context = self._new_context()
    
    def execute_entry_point(self, link_name: str) -> int:
        return self.jit.execute(link_name)
