"""
Lexer for the Pebble Programming Language
Converts source code into tokens
"""

from typing import Callable, List, Optional
from tokens import Token, TokenType, KEYWORDS
from errors import LexError, PebbleError
from source_map import get_source_map, Span

# Characters that are a token on their own
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
    '*': TokenType.MULTIPLY,
}

# Characters that may be followed by '=' to form a second operator
EQUALS_PAIRS = {
    '!': (TokenType.NOT_EQUAL, TokenType.NOT),
    '=': (TokenType.EQUAL, TokenType.ASSIGN),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

def is_digit(c: str) -> bool:
    return "0" <= c <= "9"

def is_alpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z" or c == "_"

def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)

class Lexer:
    def __init__(self, source: str, file_path: str = "<string>",
                 reporter: Optional[Callable[[PebbleError], None]] = None):
        self.source = source
        self.file_path = file_path
        self.reporter = reporter
        self.tokens: List[Token] = []
        self.errors: List[LexError] = []
        self.current = 0
        self.line = 1
        self.column = 1
        self.start = 0  # Start of current token
        self.start_line = 1
        self.start_column = 1

        # Register file with source map
        self.file_id = get_source_map().add_file(file_path, source)

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    def tokenize(self) -> List[Token]:
        """Tokenize the source code and return a list of tokens"""
        while not self.is_at_end():
            self.start = self.current
            self.start_line = self.line
            self.start_column = self.column
            self.scan_token()

        self.start = self.current
        self.tokens.append(Token(TokenType.EOF, "", None, self.line, self.column, self.create_span()))
        return self.tokens

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def scan_token(self):
        """Scan and create a token from current position"""
        c = self.advance()

        if c in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[c])
        elif c in EQUALS_PAIRS:
            with_equals, alone = EQUALS_PAIRS[c]
            self.add_token(with_equals if self.match('=') else alone)
        elif c == '/':
            if self.match('/'):
                # Comment runs to end of line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.DIVIDE)

        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.newline()

        elif c == '"':
            self.string()
        elif is_digit(c):
            self.number()
        elif is_alpha(c):
            self.identifier()
        else:
            self.error(LexError.unexpected_character(self.create_span(), self.start_line, c))

    def advance(self) -> str:
        """Consume and return the current character"""
        if self.is_at_end():
            return '\0'

        char = self.source[self.current]
        self.current += 1
        self.column += 1
        return char

    def match(self, expected: str) -> bool:
        """Consume the current character if it is the expected one"""
        if self.is_at_end() or self.source[self.current] != expected:
            return False

        self.current += 1
        self.column += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def newline(self):
        self.line += 1
        self.column = 1

    def string(self):
        """Handle string literals; they may span lines and have no escapes"""
        while self.peek() != '"' and not self.is_at_end():
            if self.advance() == '\n':
                self.newline()

        if self.is_at_end():
            self.error(LexError.unterminated_string(self.create_span(), self.start_line))
            return

        # Consume closing quote
        self.advance()
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        """Handle numeric literals"""
        while is_digit(self.peek()):
            self.advance()

        # Look for decimal part
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        """Handle identifiers and keywords"""
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def add_token(self, token_type: TokenType, literal=None):
        text = self.source[self.start:self.current]
        token = Token(token_type, text, literal, self.start_line, self.start_column, self.create_span())
        self.tokens.append(token)

    def error(self, error: LexError):
        self.errors.append(error)
        if self.reporter:
            self.reporter(error)

    def create_span(self) -> Span:
        """Create a span for the current token"""
        return Span(self.file_id, self.start, self.current)
