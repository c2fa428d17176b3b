"""
Top-level driver loop for postlang.

A state machine over the parser's lookahead token. Each step pulls one
complete top-level entity, hands it to the ``CompilationSession`` and
yields a ``TopLevelResult`` describing what happened. Errors are results,
not exceptions: the loop always resumes with the next entity.

Author: xwest
"""

from enum import Enum
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..lexer.tokens import TokenType
from ..lexer.errors import CompilerError, Diagnostic, LexerError
from ..lexer.lexer import Lexer
from ..parser.ast_nodes import Function, Prototype, format_ast
from ..parser.parser import Parser
from ..parser.errors import ParseError, create_nesting_error
from ..backend.errors import BackendInitError
from .session import CompilationSession


class ResultKind(Enum):
    """What a processed top-level entity turned out to be"""
    DEFINITION = "definition"
    EXTERN = "extern"
    EXPRESSION = "expression"
    ERROR = "error"


@dataclass
class TopLevelResult:
    """Outcome of one top-level entity."""
    kind: ResultKind
    name: Optional[str] = None
    value: Optional[int] = None
    ir: Optional[str] = None
    ast: Optional[str] = None
    error: Optional[CompilerError] = None
    
    @property
    def ok(self) -> bool:
        return self.kind != ResultKind.ERROR
    
    @property
    def diagnostic(self) -> Optional[Diagnostic]:
        if self.error is None:
            return None
        return self.error.diagnostic


class Driver:
    """
    Runs the read-lower-execute loop until the parser reaches END.
    
    ``on_prompt`` is called before each top-level entity is read, which is
    where an interactive front end prints its prompt.
    """
    
    def __init__(self, parser: Parser, session: CompilationSession,
                 on_prompt: Optional[Callable[[], None]] = None):
        self.parser = parser
        self.session = session
        self.on_prompt = on_prompt
    
    def run(self) -> Iterator[TopLevelResult]:
        """
        Process top-level entities, yielding one result for each.
        
        Separators (';') produce no result.
        
        Raises:
            BackendInitError: The only error that ends the loop
        """
        while True:
            if self.on_prompt is not None:
                self.on_prompt()
            
            try:
                token = self.parser.current
                if token.type == TokenType.END:
                    return
                if token.is_punct(";"):
                    self.parser.advance()
                    continue
                
                item = self._parse_entity()
            except (LexerError, ParseError, RecursionError) as e:
                if isinstance(e, RecursionError):
                    e = create_nesting_error(self.parser.lookahead)
                yield TopLevelResult(ResultKind.ERROR, error=e)
                try:
                    self.parser.synchronize()
                except LexerError as resync_error:
                    yield TopLevelResult(ResultKind.ERROR, error=resync_error)
                continue
            
            yield self._process(item)
    
    def _parse_entity(self):
        token_type = self.parser.current.type
        if token_type == TokenType.FUNC:
            return self.parser.parse_definition()
        if token_type == TokenType.EXT:
            return self.parser.parse_extern()
        return self.parser.parse_top_level_expression()
    
    def _process(self, item) -> TopLevelResult:
        """Hand a parsed entity to the session; lowering errors skip no input."""
        session = self.session
        ast_text = self._format(item) if session.config.dump_ast else None
        
        try:
            if isinstance(item, Prototype):
                session.declare_extern(item)
                return TopLevelResult(ResultKind.EXTERN, name=item.name,
                                      ir=session.last_ir, ast=ast_text)
            
            if isinstance(item, Function) and item.proto.is_anonymous:
                value = session.evaluate(item)
                return TopLevelResult(ResultKind.EXPRESSION, value=value,
                                      ir=session.last_ir, ast=ast_text)
            
            session.define(item)
            return TopLevelResult(ResultKind.DEFINITION, name=item.name,
                                  ir=session.last_ir, ast=ast_text)
        except BackendInitError:
            raise
        except CompilerError as e:
            return TopLevelResult(ResultKind.ERROR, name=item.name, ast=ast_text, error=e)
    
    @staticmethod
    def _format(item) -> str:
        try:
            return format_ast(item)
        except RecursionError:
            return f"<{item.name or 'expression'}: too deeply nested to print>"


def run_source(source, session: CompilationSession, filename: str = "<string>") -> Iterator[TopLevelResult]:
    """Convenience wrapper: drive ``session`` over a string or text stream."""
    return Driver(Parser(Lexer(source, filename)), session).run()
