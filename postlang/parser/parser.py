"""
postlang Parser

Recursive descent for statements, precedence climbing for binary
expressions. The parser pulls tokens from the lexer on demand and holds
exactly one token of lookahead; nothing is ever pushed back.

Grammar (informal):

    top        := definition | extern | expression | ';'
    definition := 'fun' prototype expression
    extern     := 'extern' prototype
    prototype  := name '(' [name (',' name)*] ')'
    expression := primary (binop primary)*
    primary    := INT | name | name '(' [expression (',' expression)*] ')'
                | '(' expression ')'
                | 'if' expression expression 'else' expression

Author: xwest
"""

from typing import List, Optional, Union

from ..lexer.tokens import Token, TokenType, get_token_precedence
from ..lexer.lexer import Lexer
from .ast_nodes import (
    Expression, Literal, VarRef, BinaryOp, Call, Conditional, Prototype, Function
)
from .errors import (
    ParseError, create_unexpected_token_error, create_invalid_expression_error,
    create_prototype_error
)


TopLevel = Union[Function, Prototype]


class Parser:
    """
    postlang parser.
    
    Every ``parse_*`` method either returns a complete node or raises
    ``ParseError``; a failure abandons the entity being parsed and leaves
    the lookahead on the offending token.
    """
    
    def __init__(self, lexer: Lexer):
        """
        Initialize parser over a lexer.
        
        The first token is not read until it is needed, so an interactive
        caller can print a prompt before the scanner blocks on input.
        """
        self.lexer = lexer
        self._current: Optional[Token] = None
    
    @property
    def current(self) -> Token:
        """The lookahead token."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current
    
    @property
    def lookahead(self) -> Optional[Token]:
        """The lookahead token if it has been scanned, without scanning it."""
        return self._current
    
    def synchronize(self):
        """
        Skip the token a failed parse stopped on.
        
        If the failure happened while a token was being scanned, the
        scanner has already moved past the bad input and nothing is
        skipped.
        """
        if self._current is None:
            return
        self.advance()
    
    def advance(self) -> Token:
        """
        Discard the lookahead token and read the next one.
        
        If scanning fails the old token is still gone; the next access to
        ``current`` resumes after the malformed input.
        """
        self.current
        self._current = None
        self._current = self.lexer.next_token()
        return self._current
    
    # ========================================================================
    # Expressions
    # ========================================================================
    
    def parse_primary(self) -> Expression:
        """Parse a literal, variable, call, parenthesized expression or conditional."""
        token = self.current
        
        if token.is_punct("("):
            return self._parse_parentheses()
        if token.type == TokenType.IF:
            return self._parse_conditional()
        if token.type == TokenType.INT:
            return self._parse_literal()
        if token.is_word:
            return self._parse_identifier()
        
        raise create_invalid_expression_error(token)
    
    def parse_expression(self) -> Expression:
        lhs = self.parse_primary()
        return self.parse_binary_rhs(0, lhs)
    
    def parse_binary_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing.
        
        Folds ``op primary`` pairs into ``lhs`` while the lookahead operator
        binds at least as tightly as ``min_precedence``. When the operator
        after the new right operand binds tighter than the current one, the
        right operand is handed to a recursive call first so the tighter
        operator claims it. Equal precedence folds left.
        """
        while True:
            precedence = get_token_precedence(self.current)
            if precedence < min_precedence:
                return lhs
            
            op_token = self.current
            self.advance()
            
            rhs = self.parse_primary()
            
            next_precedence = get_token_precedence(self.current)
            if precedence < next_precedence:
                rhs = self.parse_binary_rhs(precedence + 1, rhs)
            
            lhs = BinaryOp(op_token.text, lhs, rhs, op_token.location)
    
    def _parse_literal(self) -> Literal:
        token = self.current
        self.advance()
        return Literal(token.value, token.location)
    
    def _parse_parentheses(self) -> Expression:
        self.advance()  # eject '('
        expr = self.parse_expression()
        self._expect(")", "')' in expression")
        return expr
    
    def _parse_identifier(self) -> Expression:
        """Parse a variable reference or, when '(' follows, a call."""
        name_token = self.current
        self.advance()
        
        if not self.current.is_punct("("):
            return VarRef(name_token.text, name_token.location)
        self.advance()  # eject '('
        
        args: List[Expression] = []
        if not self.current.is_punct(")"):
            while True:
                args.append(self.parse_expression())
                
                if self.current.is_punct(")"):
                    break
                if not self.current.is_punct(","):
                    raise create_unexpected_token_error(
                        "')' or ',' in argument list", self.current
                    )
                self.advance()
        
        self.advance()  # eject ')'
        return Call(name_token.text, args, name_token.location)
    
    def _parse_conditional(self) -> Conditional:
        """if <cond> <then> else <else>; there is no 'then' keyword."""
        if_token = self.current
        self.advance()  # eject 'if'
        
        cond = self.parse_expression()
        then = self.parse_expression()
        
        if self.current.type != TokenType.ELSE:
            raise create_unexpected_token_error("'else' in conditional", self.current)
        self.advance()  # eject 'else'
        
        else_ = self.parse_expression()
        return Conditional(cond, then, else_, if_token.location)
    
    # ========================================================================
    # Top-level entities
    # ========================================================================
    
    def parse_prototype(self) -> Prototype:
        name_token = self.current
        if not name_token.is_word:
            raise create_prototype_error("Expected function name in prototype", name_token)
        self.advance()  # eject name
        
        if not self.current.is_punct("("):
            raise create_prototype_error("Expected '(' in prototype", self.current)
        self.advance()  # eject '('
        
        params: List[str] = []
        while not self.current.is_punct(")"):
            if not self.current.is_word:
                raise create_prototype_error("Expected parameter name in prototype", self.current)
            params.append(self.current.text)
            self.advance()
            
            if self.current.is_punct(")"):
                break
            if not self.current.is_punct(","):
                raise create_prototype_error(
                    "Expected ',' between parameters in prototype", self.current
                )
            self.advance()  # eject ','
        
        self.advance()  # eject ')'
        return Prototype(name_token.text, params, name_token.location)
    
    def parse_definition(self) -> Function:
        start = self._expect_keyword(TokenType.FUNC, "'fun'")
        proto = self.parse_prototype()
        body = self.parse_expression()
        return Function(proto, body, start.location)
    
    def parse_extern(self) -> Prototype:
        self._expect_keyword(TokenType.EXT, "'extern'")
        return self.parse_prototype()
    
    def parse_top_level_expression(self) -> Function:
        """Wrap a bare expression in an anonymous zero-parameter function."""
        location = self.current.location
        body = self.parse_expression()
        return Function(Prototype("", [], location), body, location)
    
    def parse_top_level(self) -> Optional[TopLevel]:
        """
        Parse the next top-level entity, skipping ';' separators.
        
        Returns:
            A Function (definition or anonymous wrapper), a Prototype
            (extern), or None at end of input
        """
        while self.current.is_punct(";"):
            self.advance()
        
        token = self.current
        if token.type == TokenType.END:
            return None
        if token.type == TokenType.FUNC:
            return self.parse_definition()
        if token.type == TokenType.EXT:
            return self.parse_extern()
        return self.parse_top_level_expression()
    
    # ========================================================================
    # Helpers
    # ========================================================================
    
    def _expect(self, char: str, expected: str) -> Token:
        token = self.current
        if not token.is_punct(char):
            raise create_unexpected_token_error(expected, token)
        self.advance()
        return token
    
    def _expect_keyword(self, token_type: TokenType, expected: str) -> Token:
        token = self.current
        if token.type != token_type:
            raise create_unexpected_token_error(expected, token)
        self.advance()
        return token


def parse_string(source: str, filename: str = "<string>") -> List[TopLevel]:
    """
    Convenience function to parse every top-level entity in a string.
    
    Raises:
        LexerError, ParseError: On the first failure
    """
    parser = Parser(Lexer(source, filename))
    items = []
    while True:
        item = parser.parse_top_level()
        if item is None:
            return items
        items.append(item)


def parse_expression_string(source: str, filename: str = "<string>") -> Expression:
    """
    Parse ``source`` as exactly one expression.
    
    Raises:
        ParseError: If the text is not a single complete expression
    """
    parser = Parser(Lexer(source, filename))
    expr = parser.parse_expression()
    if parser.current.type != TokenType.END:
        raise create_unexpected_token_error("end of input", parser.current)
    return expr
