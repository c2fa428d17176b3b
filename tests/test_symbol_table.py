"""
Test suite for the postlang function symbol table and session configuration.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from postlang.parser.ast_nodes import Prototype
from postlang.session.symbol_table import SymbolTable
from postlang.session.config import SessionConfig, RedefinitionPolicy


class TestSymbolTable(unittest.TestCase):
    """Test cases for declarations, definitions and link names."""
    
    def setUp(self):
        self.symbols = SymbolTable()
    
    def test_unknown_name(self):
        self.assertIsNone(self.symbols.lookup("f"))
        self.assertNotIn("f", self.symbols)
        self.assertFalse(self.symbols.is_defined("f"))
        self.assertEqual(self.symbols.link_name_for("f"), "f")
    
    def test_declare_extern(self):
        symbol = self.symbols.declare(Prototype("print", ["x"]))
        self.assertEqual(symbol.link_name, "print")
        self.assertFalse(symbol.defined)
        self.assertIs(self.symbols.lookup("print"), symbol)
    
    def test_identical_redeclaration_is_idempotent(self):
        first = self.symbols.declare(Prototype("f", ["a", "b"]))
        second = self.symbols.declare(Prototype("f", ["x", "y"]))
        self.assertIs(first, second)
        self.assertEqual(len(self.symbols), 1)
        self.assertEqual(self.symbols.lookup("f").arity, 2)
    
    def test_different_signature_replaces_extern(self):
        self.symbols.declare(Prototype("f", ["a"]))
        self.symbols.declare(Prototype("f", ["a", "b"]))
        self.assertEqual(self.symbols.lookup("f").arity, 2)
        self.assertEqual(len(self.symbols), 1)
    
    def test_first_definition_uses_plain_name(self):
        self.assertEqual(self.symbols.next_link_name("f"), "f")
        symbol = self.symbols.define(Prototype("f", ["x"]), "f")
        self.assertTrue(symbol.defined)
        self.assertTrue(self.symbols.is_defined("f"))
    
    def test_redefinitions_get_fresh_link_names(self):
        self.symbols.define(Prototype("f", ["x"]), self.symbols.next_link_name("f"))
        self.assertEqual(self.symbols.next_link_name("f"), "f.1")
        self.symbols.define(Prototype("f", ["x"]), self.symbols.next_link_name("f"))
        self.assertEqual(self.symbols.link_name_for("f"), "f.1")
        self.assertEqual(self.symbols.next_link_name("f"), "f.2")
    
    def test_extern_does_not_hide_definition(self):
        self.symbols.define(Prototype("f", ["x"]), "f")
        symbol = self.symbols.declare(Prototype("f", ["y"]))
        self.assertTrue(symbol.defined)
        self.assertEqual(symbol.link_name, "f")
    
    def test_extern_with_new_arity_links_to_next_definition(self):
        self.symbols.define(Prototype("f", ["x"]), "f")
        symbol = self.symbols.declare(Prototype("f", ["x", "y"]))
        self.assertFalse(symbol.defined)
        self.assertEqual(symbol.link_name, "f.1")
        self.assertEqual(self.symbols.next_link_name("f"), "f.1")
    
    def test_entries_are_never_removed(self):
        self.symbols.declare(Prototype("a", []))
        self.symbols.define(Prototype("b", []), "b")
        self.symbols.define(Prototype("a", ["x"]), "a")
        self.assertEqual(sorted(s.name for s in self.symbols), ["a", "b"])


class TestSessionConfig(unittest.TestCase):
    """Test cases for configuration defaults and environment overrides."""
    
    def test_defaults(self):
        config = SessionConfig()
        self.assertEqual(config.prompt, "post> ")
        self.assertEqual(config.banner, "\n==== done ====")
        self.assertEqual(config.redefinition, RedefinitionPolicy.REPLACE)
        self.assertEqual(config.optimization_level, 2)
        self.assertFalse(config.dump_ast)
        self.assertFalse(config.dump_ir)
    
    def test_string_policy_is_coerced(self):
        self.assertEqual(SessionConfig(redefinition="error").redefinition, RedefinitionPolicy.ERROR)
        with self.assertRaises(ValueError):
            SessionConfig(redefinition="shadow")
    
    def test_optimization_level_range(self):
        with self.assertRaises(ValueError):
            SessionConfig(optimization_level=4)
    
    def test_from_env(self):
        config = SessionConfig.from_env({
            "POSTLANG_REDEFINITION": "Error",
            "POSTLANG_OPT_LEVEL": "0",
            "POSTLANG_DUMP_AST": "yes",
            "POSTLANG_DUMP_IR": "0",
        })
        self.assertEqual(config.redefinition, RedefinitionPolicy.ERROR)
        self.assertEqual(config.optimization_level, 0)
        self.assertTrue(config.dump_ast)
        self.assertFalse(config.dump_ir)
    
    def test_from_env_empty(self):
        self.assertEqual(SessionConfig.from_env({}), SessionConfig())
    
    def test_overrides_beat_environment(self):
        config = SessionConfig.from_env({"POSTLANG_OPT_LEVEL": "1"}, optimization_level=3,
                                        filename="prog.post")
        self.assertEqual(config.optimization_level, 3)
        self.assertEqual(config.filename, "prog.post")
    
    def test_invalid_environment_values(self):
        for environ in [
            {"POSTLANG_OPT_LEVEL": "fast"},
            {"POSTLANG_OPT_LEVEL": "7"},
            {"POSTLANG_DUMP_IR": "maybe"},
            {"POSTLANG_REDEFINITION": "ignore"},
        ]:
            with self.subTest(environ=environ):
                with self.assertRaises(ValueError):
                    SessionConfig.from_env(environ)


if __name__ == '__main__':
    unittest.main()
