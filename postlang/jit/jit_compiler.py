"""
postlang JIT Compiler
=====================

Incremental linker on top of an llvmlite MCJIT execution engine.

Every sealed translation unit is verified, optimized and kept *pending*
until something needs it. Executing an entry point loads the unit that
defines it plus, transitively, every pending unit it calls into, and only
then finalizes the engine. A unit is never handed to the engine while one
of its imports is unresolvable, because MCJIT treats an unresolved
external as a fatal error that takes the whole process down; the missing
symbol is reported as ``UnresolvedSymbolError`` instead.

Features:
- Forward references between definitions (link on first use)
- Process and runtime library symbols as import providers
- Anonymous entry points unloaded after they run
"""

import ctypes
from typing import Dict, List, Optional, Set
from dataclasses import dataclass, field
from enum import Enum, auto

import llvmlite.binding as llvm
import llvmlite.ir as ir

from ..backend.errors import BackendError, BackendInitError, create_verification_error
from ..session.errors import create_unlinked_symbol_error


class UnitState(Enum):
    """States of a sealed translation unit"""
    PENDING = auto()    # Verified, waiting for its first use
    LOADED = auto()     # Owned by the execution engine


@dataclass
class TranslationUnit:
    """A sealed module and the symbols it provides and needs."""
    name: str
    module: ir.Module
    exports: Set[str] = field(default_factory=set)
    imports: Set[str] = field(default_factory=set)
    anonymous: bool = False
    
    state: UnitState = UnitState.PENDING
    compiled: Optional[llvm.ModuleRef] = None
    
    @property
    def is_loaded(self) -> bool:
        return self.state == UnitState.LOADED


class JITCompiler:
    """
    MCJIT-backed incremental linker.
    
    Owns the target machine and the execution engine for one session.
    """
    
    def __init__(self, optimization_level: int = 2):
        """
        Create the target machine and an empty execution engine.
        
        Raises:
            BackendInitError: If the native target is unavailable
        """
        self.optimization_level = optimization_level
        
        try:
            llvm.initialize_native_target()
            llvm.initialize_native_asmprinter()
            
            target = llvm.Target.from_default_triple()
            self.target_machine = target.create_target_machine(opt=optimization_level)
            
            backing_module = llvm.parse_assembly("")
            self.engine = llvm.create_mcjit_compiler(backing_module, self.target_machine)
        except RuntimeError as e:
            raise BackendInitError(f"Failed to initialize LLVM JIT: {e}") from e
        
        self.triple = self.target_machine.triple
        self.data_layout = str(self.target_machine.target_data)
        
        self._units: Dict[str, TranslationUnit] = {}
        self._providers: Dict[str, str] = {}  # symbol -> unit name
    
    # ========================================================================
    # Units
    # ========================================================================
    
    def add_unit(self, unit: TranslationUnit):
        """
        Verify, optimize and register a sealed unit as pending.
        
        Raises:
            BackendError: If the module fails verification or defines a
                symbol another unit already provides
        """
        for symbol in unit.exports:
            if symbol in self._providers:
                raise BackendError(
                    f"Symbol '{symbol}' is already defined by unit '{self._providers[symbol]}'",
                    code="B004"
                )
        
        unit.module.triple = self.triple
        unit.module.data_layout = self.data_layout
        
        try:
            compiled = llvm.parse_assembly(str(unit.module))
            compiled.verify()
        except RuntimeError as e:
            raise create_verification_error(unit.name, str(e)) from e
        
        self._optimize(compiled)
        
        unit.compiled = compiled
        unit.state = UnitState.PENDING
        self._units[unit.name] = unit
        for symbol in unit.exports:
            self._providers[symbol] = unit.name
    
    def remove_unit(self, name: str):
        """Forget a unit, unloading it from the engine if it was linked."""
        unit = self._units.pop(name, None)
        if unit is None:
            return
        
        for symbol in unit.exports:
            if self._providers.get(symbol) == name:
                del self._providers[symbol]
        
        if unit.is_loaded:
            self.engine.remove_module(unit.compiled)
    
    def provider_of(self, symbol: str) -> Optional[TranslationUnit]:
        name = self._providers.get(symbol)
        if name is None:
            return None
        return self._units[name]
    
    @property
    def pending_units(self) -> List[TranslationUnit]:
        return [u for u in self._units.values() if not u.is_loaded]
    
    @property
    def loaded_units(self) -> List[TranslationUnit]:
        return [u for u in self._units.values() if u.is_loaded]
    
    # ========================================================================
    # Linking and execution
    # ========================================================================
    
    def link(self, symbol: str):
        """
        Load the unit providing ``symbol`` and everything it depends on.
        
        Nothing is loaded unless the whole dependency closure resolves.
        
        Raises:
            UnresolvedSymbolError: Naming the first import no unit or
                library provides
        """
        batch: List[TranslationUnit] = []
        queued: Set[str] = set()
        worklist = [symbol]
        
        while worklist:
            name = worklist.pop()
            unit = self.provider_of(name)
            if unit is None:
                if not llvm.address_of_symbol(name):
                    raise create_unlinked_symbol_error(name)
                continue
            
            if unit.is_loaded or unit.name in queued:
                continue
            
            queued.add(unit.name)
            batch.append(unit)
            worklist.extend(sorted(unit.imports))
        
        if not batch:
            return
        
        for unit in batch:
            self.engine.add_module(unit.compiled)
            unit.state = UnitState.LOADED
        self.engine.finalize_object()
    
    def execute(self, symbol: str) -> int:
        """
        Link and call a zero-argument function returning a 64-bit integer.
        
        An anonymous unit is removed afterwards whether or not it ran.
        """
        unit = self.provider_of(symbol)
        if unit is None:
            raise create_unlinked_symbol_error(symbol)
        
        try:
            self.link(symbol)
            address = self.engine.get_function_address(symbol)
            entry = ctypes.CFUNCTYPE(ctypes.c_int64)(address)
            return entry()
        finally:
            if unit.anonymous:
                self.remove_unit(unit.name)
    
    def _optimize(self, module: llvm.ModuleRef):
        """Run the default per-module pipeline for the configured level."""
        if self.optimization_level == 0:
            return
        
        pto = llvm.create_pipeline_tuning_options(speed_level=self.optimization_level)
        pb = llvm.create_pass_builder(self.target_machine, pto)
        pm = pb.getModulePassManager()
        pm.run(module, pb)
