"""
Test suite for the postlang AST node model.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from postlang.lexer.tokens import SourceLocation
from postlang.parser.parser import parse_string
from postlang.parser.ast_nodes import (
    ASTVisitor, Literal, VarRef, BinaryOp, Call, Conditional, Prototype, Function,
    format_ast, is_assignment
)


class NodeCounter(ASTVisitor):
    """Counts nodes by walking children through the visitor."""
    
    def __init__(self):
        self.count = 0
    
    def _count(self, node):
        self.count += 1
        for child in node.children():
            self.visit(child)
    
    visit_Literal = _count
    visit_VarRef = _count
    visit_BinaryOp = _count
    visit_Call = _count
    visit_Conditional = _count
    visit_Prototype = _count
    visit_Function = _count


class TestASTNodes(unittest.TestCase):
    """Test cases for node structure and equality."""
    
    def test_location_does_not_affect_equality(self):
        here = SourceLocation("a", 1, 1, 0)
        there = SourceLocation("b", 9, 9, 99)
        self.assertEqual(Literal(1, here), Literal(1, there))
        self.assertNotEqual(Literal(1), Literal(2))
    
    def test_prototype_properties(self):
        proto = Prototype("f", ["a", "b"])
        self.assertEqual(proto.arity, 2)
        self.assertFalse(proto.is_anonymous)
        self.assertTrue(Prototype("", []).is_anonymous)
        self.assertTrue(proto.same_signature(Prototype("f", ["x", "y"])))
        self.assertFalse(proto.same_signature(Prototype("f", ["x"])))
    
    def test_is_assignment(self):
        self.assertTrue(is_assignment(BinaryOp("=", VarRef("x"), Literal(1))))
        self.assertFalse(is_assignment(BinaryOp("+", VarRef("x"), Literal(1))))
        self.assertFalse(is_assignment(Literal(1)))
    
    def test_children(self):
        cond = Conditional(VarRef("c"), Literal(1), Literal(2))
        self.assertEqual(cond.children(), [VarRef("c"), Literal(1), Literal(2)])
        self.assertEqual(Call("f", [Literal(1)]).children(), [Literal(1)])
        self.assertEqual(Literal(3).children(), [])


class TestASTVisitor(unittest.TestCase):
    """Test cases for visitor dispatch."""
    
    def test_visitor_missing_a_variant_cannot_be_instantiated(self):
        class Incomplete(ASTVisitor):
            def visit_Literal(self, node):
                return node.value
        
        with self.assertRaises(TypeError):
            Incomplete()
    
    def test_dispatch_reaches_every_variant(self):
        [function] = parse_string("fun f(a, b) if a < b g(a, 1) else b = 2")
        counter = NodeCounter()
        counter.visit(function)
        # Function, Prototype, Conditional, BinaryOp(<), a, b, Call, a, 1, BinaryOp(=), b, 2
        self.assertEqual(counter.count, 12)
    
    def test_accept(self):
        counter = NodeCounter()
        Literal(5).accept(counter)
        self.assertEqual(counter.count, 1)
    
    def test_non_node_is_rejected(self):
        with self.assertRaises(TypeError):
            NodeCounter().visit("not a node")


class TestASTPrinter(unittest.TestCase):
    """Test cases for the debug dump."""
    
    def test_function_dump(self):
        [function] = parse_string("fun add(a, b) a + 1")
        self.assertEqual(format_ast(function).splitlines(), [
            "    Func: add",
            "        Proto: add",
            "        Arg: 0 - a",
            "        Arg: 1 - b",
            "        End of Proto",
            "        BinaryOp:",
            "            Var: a",
            "        OP: +",
            "            Value: 1",
            "        End of BinaryOp",
            "    End of Func",
        ])
    
    def test_anonymous_function_prints_body_only(self):
        [function] = parse_string("f(2)")
        self.assertEqual(format_ast(function).splitlines(), [
            "        Call: f",
            "        Arg: 0",
            "            Value: 2",
            "        End of Call",
        ])
    
    def test_conditional_dump(self):
        text = format_ast(Conditional(VarRef("c"), Literal(1), Literal(2)))
        self.assertEqual(text.splitlines(), [
            "    If:",
            "        Var: c",
            "    Then:",
            "        Value: 1",
            "    Else:",
            "        Value: 2",
        ])


if __name__ == '__main__':
    unittest.main()
