"""
Test suite for AST lowering against a recording backend.

The recording backend implements the backend contract by logging every
call, so these tests check exactly which primitives lowering reaches, in
which order, without generating any machine code.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from postlang.backend.base import Backend
from postlang.parser.parser import parse_string
from postlang.parser.ast_nodes import Literal, VarRef, BinaryOp, Call, Prototype, Function
from postlang.session.symbol_table import SymbolTable
from postlang.session.lowering import Lowerer
from postlang.session.session import CompilationSession
from postlang.session.config import SessionConfig
from postlang.session.errors import (
    ArityError, UnresolvedSymbolError, RedefinitionError, SemanticError
)


class RecordingBackend(Backend):
    """Backend that records calls and returns symbolic values."""
    
    def __init__(self):
        self.calls = []
        self.functions = {}
        self.slots = set()
        self.sealed = []
        self.results = {}
    
    def _record(self, *call):
        self.calls.append(call)
    
    def names(self):
        return [call[0] for call in self.calls]
    
    def lookup_function(self, link_name):
        return self.functions.get(link_name)
    
    def declare_function(self, link_name, params):
        self._record("declare_function", link_name, len(params))
        self.functions[link_name] = (link_name, len(params))
        return self.functions[link_name]
    
    def function_arity(self, function):
        return function[1]
    
    def begin_function_body(self, function, params):
        self._record("begin_function_body", function[0])
        self.slots = set(params)
    
    def finish_function_body(self, value):
        self._record("finish_function_body", value)
    
    def discard_function(self, function):
        self._record("discard_function", function[0])
        self.functions.pop(function[0], None)
    
    def function_ir(self, function):
        return f"<ir {function[0]}>"
    
    def emit_integer(self, value):
        self._record("emit_integer", value)
        return str(value)
    
    def load_variable(self, name):
        if name not in self.slots:
            return None
        self._record("load_variable", name)
        return name
    
    def store_variable(self, name, value):
        self._record("store_variable", name, value)
        self.slots.add(name)
        return value
    
    def emit_binary(self, op, lhs, rhs, location=None):
        self._record("emit_binary", op)
        return f"({lhs} {op} {rhs})"
    
    def emit_call(self, function, args):
        self._record("emit_call", function[0], len(args))
        return f"{function[0]}({', '.join(args)})"
    
    def begin_conditional(self, cond):
        self._record("begin_conditional", cond)
    
    def begin_else(self, then_value):
        self._record("begin_else", then_value)
    
    def end_conditional(self, else_value):
        self._record("end_conditional", else_value)
        return "phi"
    
    def seal_unit(self, anonymous=False):
        self._record("seal_unit", anonymous)
        self.sealed.append(dict(self.functions))
        return len(self.sealed)
    
    def reset_unit(self):
        self._record("reset_unit")
        self.functions = {}
    
    def execute_entry_point(self, link_name):
        self._record("execute_entry_point", link_name)
        return self.results.get(link_name, 0)


def parse_one(source):
    [item] = parse_string(source)
    return item


class TestLowerer(unittest.TestCase):
    """Test cases for the lowering visitor."""
    
    def setUp(self):
        self.backend = RecordingBackend()
        self.symbols = SymbolTable()
        self.lowerer = Lowerer(self.backend, self.symbols)
    
    def test_arity_mismatch_never_reaches_call_emission(self):
        self.symbols.declare(Prototype("foo", ["a", "b"]))
        function = Function(Prototype("", []), Call("foo", [VarRef("x")]))
        
        with self.assertRaises(ArityError) as cm:
            self.lowerer.lower_function(function, "__anon_expr.1")
        
        self.assertEqual(cm.exception.expected, 2)
        self.assertEqual(cm.exception.found, 1)
        self.assertEqual(cm.exception.code, "S015")
        self.assertNotIn("emit_call", self.backend.names())
        # Arguments are not lowered either
        self.assertNotIn("load_variable", self.backend.names())
        self.assertEqual(self.backend.names()[-1], "discard_function")
    
    def test_children_lowered_before_parent(self):
        self.lowerer.lower_function(parse_one("fun f(a) a + 2 * a"), "f")
        self.assertEqual(self.backend.calls, [
            ("declare_function", "f", 1),
            ("begin_function_body", "f"),
            ("load_variable", "a"),
            ("emit_integer", 2),
            ("load_variable", "a"),
            ("emit_binary", "*"),
            ("emit_binary", "+"),
            ("finish_function_body", "(a + (2 * a))"),
        ])
    
    def test_operator_chain_lowered_left_to_right(self):
        self.lowerer.lower_function(parse_one("fun f(a) a - 1 - 2"), "f")
        self.assertEqual(self.backend.calls[2:], [
            ("load_variable", "a"),
            ("emit_integer", 1),
            ("emit_binary", "-"),
            ("emit_integer", 2),
            ("emit_binary", "-"),
            ("finish_function_body", "((a - 1) - 2)"),
        ])
    
    def test_too_deep_body_is_discarded(self):
        body = Literal(1)
        for _ in range(5000):
            body = BinaryOp("*", Literal(2), body)
        
        with self.assertRaises(SemanticError) as cm:
            self.lowerer.lower_function(Function(Prototype("f", []), body), "f")
        
        self.assertEqual(cm.exception.code, "S030")
        self.assertEqual(self.backend.names()[-1], "discard_function")
    
    def test_call_resolves_through_symbol_table(self):
        self.symbols.define(Prototype("sq", ["x"]), "sq.1")
        self.lowerer.lower_function(parse_one("sq(3)"), "__anon_expr.1")
        self.assertIn(("declare_function", "sq.1", 1), self.backend.calls)
        self.assertIn(("emit_call", "sq.1", 1), self.backend.calls)
    
    def test_recursive_call_uses_function_being_defined(self):
        self.lowerer.lower_function(parse_one("fun f(n) if n f(n - 1) else 0"), "f.3")
        declarations = [c for c in self.backend.calls if c[0] == "declare_function"]
        self.assertEqual(declarations, [("declare_function", "f.3", 1)])
        self.assertIn(("emit_call", "f.3", 1), self.backend.calls)
        self.assertIsNone(self.symbols.lookup("f"))
    
    def test_recursive_call_arity_checked(self):
        with self.assertRaises(ArityError):
            self.lowerer.lower_function(parse_one("fun f(n) f(n, n)"), "f")
    
    def test_unknown_function(self):
        with self.assertRaises(UnresolvedSymbolError) as cm:
            self.lowerer.lower_function(parse_one("nope(1)"), "__anon_expr.1")
        self.assertEqual(cm.exception.name, "nope")
        self.assertEqual(cm.exception.code, "S010")
    
    def test_unknown_variable(self):
        with self.assertRaises(UnresolvedSymbolError) as cm:
            self.lowerer.lower_function(parse_one("fun f(a) b"), "f")
        self.assertEqual(cm.exception.name, "b")
        self.assertIn("discard_function", self.backend.names())
    
    def test_assignment_stores_and_yields_value(self):
        self.lowerer.lower_function(parse_one("fun f(a) (b = a + 1) * b"), "f")
        self.assertIn(("store_variable", "b", "(a + 1)"), self.backend.calls)
        self.assertEqual(self.backend.calls[-1], ("finish_function_body", "((a + 1) * b)"))
    
    def test_assignment_to_non_variable_is_semantic_error(self):
        with self.assertRaises(SemanticError) as cm:
            self.lowerer.lower_function(parse_one("fun f(a) 1 = a"), "f")
        self.assertEqual(cm.exception.code, "S020")
    
    def test_conditional_protocol(self):
        self.lowerer.lower_function(parse_one("fun f(c) if c 1 else 2"), "f")
        names = self.backend.names()
        begin = names.index("begin_conditional")
        self.assertEqual(
            names[begin:],
            ["begin_conditional", "emit_integer", "begin_else", "emit_integer",
             "end_conditional", "finish_function_body"]
        )
        self.assertEqual(self.backend.calls[-1], ("finish_function_body", "phi"))
    
    def test_extern_prototype_declares_link_name(self):
        self.symbols.define(Prototype("g", ["x"]), "g.2")
        self.lowerer.visit(Prototype("g", ["y"]))
        self.assertEqual(self.backend.calls, [("declare_function", "g.2", 1)])


class TestCompilationSession(unittest.TestCase):
    """Test cases for the seal-and-reset protocol."""
    
    def setUp(self):
        self.backend = RecordingBackend()
        self.session = CompilationSession(self.backend)
    
    def test_define_seals_and_resets(self):
        symbol = self.session.define(parse_one("fun f(x) x"))
        self.assertEqual(symbol.link_name, "f")
        self.assertTrue(symbol.defined)
        self.assertEqual(self.backend.names()[-2:], ["seal_unit", "reset_unit"])
        self.assertEqual(self.session.last_ir, "<ir f>")
    
    def test_failed_definition_is_not_recorded(self):
        with self.assertRaises(UnresolvedSymbolError):
            self.session.define(parse_one("fun f(x) y"))
        self.assertIsNone(self.session.symbols.lookup("f"))
        self.assertNotIn("seal_unit", self.backend.names())
        self.assertEqual(self.backend.names()[-1], "reset_unit")
    
    def test_evaluate_runs_anonymous_entry_point(self):
        self.backend.results["__anon_expr.1"] = 7
        self.assertEqual(self.session.evaluate(parse_one("3 + 4")), 7)
        self.assertIn(("seal_unit", True), self.backend.calls)
        self.assertEqual(self.backend.calls[-1], ("execute_entry_point", "__anon_expr.1"))
    
    def test_anonymous_link_names_are_unique(self):
        self.session.evaluate(parse_one("1"))
        self.session.evaluate(parse_one("2"))
        executed = [c[1] for c in self.backend.calls if c[0] == "execute_entry_point"]
        self.assertEqual(executed, ["__anon_expr.1", "__anon_expr.2"])
    
    def test_redefinition_replaces_by_default(self):
        self.session.define(parse_one("fun f(x) x"))
        symbol = self.session.define(parse_one("fun f(x) x + 1"))
        self.assertEqual(symbol.link_name, "f.1")
    
    def test_redefinition_error_policy(self):
        session = CompilationSession(self.backend, SessionConfig(redefinition="error"))
        session.define(parse_one("fun f(x) x"))
        with self.assertRaises(RedefinitionError) as cm:
            session.define(parse_one("fun f(x) x + 1"))
        self.assertEqual(cm.exception.code, "S011")
        self.assertEqual(session.symbols.link_name_for("f"), "f")
    
    def test_extern_then_definition_keeps_plain_name(self):
        self.session.declare_extern(parse_one("extern f(x)"))
        symbol = self.session.define(parse_one("fun f(x) x"))
        self.assertEqual(symbol.link_name, "f")
    
    def test_identical_extern_twice_keeps_calls_valid(self):
        self.session.declare_extern(parse_one("extern foo(a, b)"))
        self.session.declare_extern(parse_one("extern foo(a, b)"))
        self.session.evaluate(parse_one("foo(1, 2)"))
        self.assertIn(("emit_call", "foo", 2), self.backend.calls)


if __name__ == '__main__':
    unittest.main()
