"""
postlang Lexer - turns a character stream into tokens

Characters are pulled one at a time so the same scanner works on a string,
a file, or an interactive terminal where each read may block until the
user types the next line.

Author: xwest
"""

from typing import List, TextIO, Union
from io import StringIO

from .tokens import (
    Token, TokenType, SourceLocation, KEYWORDS, INT64_MAX, _is_word_char
)
from .errors import LexerError, create_number_overflow_error


class Lexer:
    """
    postlang lexical analyzer.
    
    Owns a one-character lookahead buffer. ``next_token`` only ever moves
    forward; there is no way to un-read a character or a token.
    """
    
    def __init__(self, source: Union[str, TextIO], filename: str = "<unknown>"):
        """
        Initialize the lexer.
        
        Args:
            source: Source code string, or a readable text stream
            filename: Name of source for error reporting
        """
        if isinstance(source, str):
            source = StringIO(source)
        self.stream = source
        self.filename = filename
        
        # Location of the lookahead character
        self.pos = -1
        self.line = 1
        self.column = 0
        self._last_char = " "
        
        self.errors: List[LexerError] = []
    
    def next_token(self) -> Token:
        """
        Scan and return the next token.
        
        Raises:
            LexerError: If an integer literal does not fit in 64 bits. The
                literal's characters are consumed, so calling again resumes
                after it.
        """
        self._skip_whitespace_and_comments()
        
        location = self._location()
        
        if self._last_char == "":
            return Token(TokenType.END, "", None, location)
        
        if _is_word_char(self._last_char):
            return self._tokenize_word(location)
        
        # Anything else is a one-character IDENT
        char = self._last_char
        self._advance()
        return Token(TokenType.IDENT, char, char, location)
    
    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole input.
        
        Malformed literals are recorded in ``self.errors`` and skipped.
        
        Returns:
            List of tokens ending with END
        """
        tokens = []
        while True:
            try:
                token = self.next_token()
            except LexerError as e:
                self.errors.append(e)
                continue
            
            tokens.append(token)
            if token.type == TokenType.END:
                return tokens
    
    def _tokenize_word(self, location: SourceLocation) -> Token:
        """Scan an alphanumeric word: keyword, integer or identifier."""
        word = self._read_word()
        
        if word in KEYWORDS:
            return Token(KEYWORDS[word], word, None, location)
        
        if word.isdigit():
            value = int(word)
            if value > INT64_MAX:
                raise create_number_overflow_error(word, location)
            return Token(TokenType.INT, word, value, location)
        
        return Token(TokenType.IDENT, word, word, location)
    
    def _read_word(self) -> str:
        chars = []
        while _is_word_char(self._last_char):
            chars.append(self._last_char)
            self._advance()
        return "".join(chars)
    
    def _skip_whitespace_and_comments(self):
        """Skip layout and '#' line comments."""
        while True:
            while self._last_char and self._last_char.isspace():
                self._advance()
            
            if self._last_char != "#":
                return
            
            while self._last_char not in ("", "\n", "\r"):
                self._advance()
    
    def _advance(self):
        """Read the next character into the lookahead slot."""
        if self._last_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        self._last_char = self.stream.read(1)
    
    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)
    
    def has_errors(self) -> bool:
        """Check if lexer encountered any errors."""
        return len(self.errors) > 0


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.
    
    Raises:
        LexerError: If lexing fails
    """
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()
    
    if lexer.has_errors():
        # Raise the first error encountered
        raise lexer.errors[0]
    
    return tokens

