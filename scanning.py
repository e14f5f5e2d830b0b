"""
Lox Scanner
Single left-to-right pass over source text producing line-tagged tokens
"""

from typing import List, Optional, Tuple
import sys

from pyparsing import ParseException, ParserElement, Regex

from syntax import KEYWORDS, Token, TokenType
from error_handling import LoxScanError


# Digit run with an optional fractional part; decodes to a double
NUMBER_LITERAL: ParserElement = Regex(r"[0-9]+(?:\.[0-9]+)?").set_parse_action(
    lambda t: float(t[0])
)

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

# Operators that become their two-character form when followed by '='
EQUAL_SUFFIXED_TOKENS = {
    '!': (TokenType.BANG, TokenType.BANG_EQUAL),
    '=': (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    '<': (TokenType.LESS, TokenType.LESS_EQUAL),
    '>': (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def is_alpha(char: str) -> bool:
    return 'a' <= char <= 'z' or 'A' <= char <= 'Z' or char == '_'


def is_alphanumeric(char: str) -> bool:
    return is_alpha(char) or is_digit(char)


def decode_number(text: str, line: int) -> float:
    """Validate a number lexeme against NUMBER_LITERAL and convert it to a double"""
    try:
        return NUMBER_LITERAL.parse_string(text, parse_all=True)[0]
    except ParseException as e:
        if text.endswith('.'):
            raise LoxScanError(line, "Expect digit after '.' in number literal.") from e
        raise LoxScanError.from_parse_exception(e, line, text) from e


class Scanner:
    """Lox scanner collecting tokens and scan errors"""

    def __init__(self, source: str, debug: bool = False):
        self.source = source
        self.debug = debug
        self.tokens: List[Token] = []
        self.errors: List[LoxScanError] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        """Scan the whole source; errors are collected, never raised"""
        while not self.is_at_end():
            self.start = self.current
            try:
                self.scan_token()
            except LoxScanError as e:
                self.errors.append(e)
                if self.debug:
                    print(f"[scan] {e}", file=sys.stderr)

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self) -> None:
        char = self.advance()

        if char in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[char])
        elif char in EQUAL_SUFFIXED_TOKENS:
            single, double = EQUAL_SUFFIXED_TOKENS[char]
            self.add_token(double if self.match('=') else single)
        elif char == '/':
            if self.match('/'):
                # Line comment runs to the end of the line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif char in (' ', '\r', '\t'):
            pass
        elif char == '\n':
            self.line += 1
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            raise LoxScanError(self.line, f"Unexpected character '{char}'.")

    def string(self) -> None:
        start_line = self.line
        new_lines = 0
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                new_lines += 1
            self.advance()

        if self.is_at_end():
            self.line += new_lines
            raise LoxScanError(start_line, "Unterminated string.")

        # The closing quote
        self.advance()
        value = self.source[self.start + 1:self.current - 1]
        self.add_token(TokenType.STRING, value)
        self.line += new_lines

    def number(self) -> None:
        """Take the digits and an optional '.' fraction; decode_number checks the shape"""
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == '.':
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        text = self.source[self.start:self.current]
        self.add_token(TokenType.NUMBER, decode_number(text, self.line))

    def identifier(self) -> None:
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    # ------------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------------

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def add_token(self, token_type: TokenType, literal: Optional[object] = None) -> None:
        text = self.source[self.start:self.current]
        token = Token(token_type, text, literal, self.line)
        self.tokens.append(token)
        if self.debug:
            print(f"[scan] {format_token(token)}", file=sys.stderr)


# ============================================================================
# PUBLIC API
# ============================================================================

def scan(source: str, debug: bool = False) -> Tuple[List[Token], List[LoxScanError]]:
    """Scan source text into (tokens, scan_errors)"""
    scanner = Scanner(source, debug=debug)
    tokens = scanner.scan_tokens()
    return tokens, scanner.errors


def format_token(token: Token) -> str:
    """Render a token as: TYPE lexeme literal"""
    literal = "null" if token.literal is None else repr(token.literal)
    return f"{token.type.value} {token.lexeme} {literal}"


def create_scanner(source: str, debug: bool = False) -> Scanner:
    """Create a Lox scanner"""
    return Scanner(source, debug=debug)


def create_debug_scanner(source: str) -> Scanner:
    """Create a Lox scanner with debug enabled"""
    return Scanner(source, debug=True)
