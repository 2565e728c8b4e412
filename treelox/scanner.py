"""Lexical scanner for Lox source text.

The scanner makes a single left-to-right pass over the source with one
character of lookahead and produces a list of `Token`. It stops at the
first error; callers that want to keep going (a REPL, an editor) decide
what to do with the raised `ScanError`.
"""

from __future__ import annotations

from typing import Any, List, Optional

from .errors import ScanError, ScanErrorKind
from .tokens import KEYWORDS, Token, TokenType


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
}

# first char -> (type when followed by '=', type otherwise)
ONE_OR_TWO_CHAR_TOKENS = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


def is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


def byte_offsets(source: str) -> List[int]:
    """Map every character index of `source`, and its end, to a UTF-8 byte offset."""
    offsets = [0]
    for c in source:
        offsets.append(offsets[-1] + len(c.encode('utf-8', 'surrogatepass')))
    return offsets


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1
        # spans and error offsets are reported in bytes
        self.offsets = byte_offsets(source)

    def scan_tokens(self) -> List[Token]:
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()
        self.tokens.append(Token.eof(self.line, self.offsets[self.current]))
        return self.tokens

    def token_at(self, offset: int, line: int) -> Token:
        """Scan the single token that starts at character index `offset`."""
        self.tokens = []
        self.current = offset
        self.line = line
        while not self.tokens and not self.is_at_end():
            self.start = self.current
            self.scan_token()
        if not self.tokens:
            return Token.eof(self.line, self.offsets[self.current])
        return self.tokens[0]

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def scan_token(self) -> None:
        c = self.advance()
        if c in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[c])
        elif c in ONE_OR_TWO_CHAR_TOKENS:
            double, single = ONE_OR_TWO_CHAR_TOKENS[c]
            self.add_token(double if self.match('=') else single)
        elif c == '/':
            if self.match('/'):
                # comment runs to end of line; the newline is scanned next
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.line += 1
        elif c == '"':
            self.string()
        elif is_digit(c):
            self.number()
        elif is_alpha(c):
            self.identifier()
        else:
            raise ScanError(
                ScanErrorKind.INVALID_CHARACTER, self.line, self.offsets[self.start],
                f"Invalid character {c!r}.",
            )

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def add_token(self, kind: TokenType, literal: Optional[Any] = None) -> None:
        lexeme = self.source[self.start:self.current]
        span = (self.offsets[self.start], self.offsets[self.current])
        self.tokens.append(Token(kind, lexeme, literal, self.line, span))

    def string(self) -> None:
        start_line = self.line
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()
        if self.is_at_end():
            raise ScanError(ScanErrorKind.UNTERMINATED_STRING, start_line, self.offsets[self.start])
        self.advance()  # closing quote
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self) -> None:
        while is_digit(self.peek()):
            self.advance()
        # a '.' only belongs to the number when a digit follows it
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()
        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self) -> None:
        while is_alphanumeric(self.peek()):
            self.advance()
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))


def scan(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return Scanner(source).scan_tokens()
