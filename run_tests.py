#!/usr/bin/env python3
"""
Main test runner for the postlang test suite.

Checks that the toolchain imports, runs one program end to end, then
discovers and runs everything under tests/.

Author: xwest
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def smoke_test() -> bool:
    """Compile and run a small program through the whole pipeline."""
    print("postlang Test Suite")
    print("=" * 60)
    
    try:
        from postlang.backend.llvm_backend import LLVMBackend
        from postlang.session.session import CompilationSession
        from postlang.session.driver import ResultKind, run_source
        
        print("✅ All postlang modules imported successfully")
    except ImportError as e:
        print(f"❌ Failed to import postlang modules: {e}")
        print("   Install the dependencies with: pip install -e .[dev]")
        return False
    
    code = """
    fun square(x) x * x
    fun sum_squares(a, b) square(a) + square(b)
    sum_squares(3, 4)
    """
    
    print("Testing simple compilation pipeline...")
    session = CompilationSession(LLVMBackend())
    results = list(run_source(code, session))
    
    errors = [r for r in results if r.kind == ResultKind.ERROR]
    if errors:
        for result in errors:
            print(f"     ❌ {result.error}")
        return False
    
    value = results[-1].value
    if value != 25:
        print(f"❌ Expected 25, got {value}")
        return False
    
    print(f"     ✅ sum_squares(3, 4) evaluated to {value}")
    print()
    return True


def run_all_tests() -> bool:
    """Discover and run the unit tests."""
    suite = unittest.defaultTestLoader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return result.wasSuccessful()


if __name__ == "__main__":
    ok = smoke_test() and run_all_tests()
    sys.exit(0 if ok else 1)
