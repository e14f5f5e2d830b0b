"""
Lox Parser
Recursive-descent parser with a precedence table for binary operators and
statement-level error recovery
"""

from typing import List, Tuple
import sys

from syntax import (
    Token, TokenType, Expr, Stmt,
    Literal, Unary, Binary, Grouping, Variable, Assignment,
    ExpressionStatement, PrintStatement, VarDeclaration,
    Number, String, TRUE, FALSE, NIL,
    ast_to_sexpr,
)
from error_handling import LoxParseError


# Keywords that begin a new statement; synchronization stops before them
STATEMENT_KEYWORDS = {
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
}

# Binary operator binding strength, lowest first; every level is left-associative
EQUALITY, COMPARISON, TERM, FACTOR = range(1, 5)

BINARY_PRECEDENCE = {
    TokenType.BANG_EQUAL: EQUALITY,
    TokenType.EQUAL_EQUAL: EQUALITY,
    TokenType.GREATER: COMPARISON,
    TokenType.GREATER_EQUAL: COMPARISON,
    TokenType.LESS: COMPARISON,
    TokenType.LESS_EQUAL: COMPARISON,
    TokenType.MINUS: TERM,
    TokenType.PLUS: TERM,
    TokenType.SLASH: FACTOR,
    TokenType.STAR: FACTOR,
}

UNARY_OPERATORS = (TokenType.BANG, TokenType.MINUS)

NESTING_TOO_DEEP = "Expression nesting too deep."


class Parser:
    """Lox parser over a scanned token list

    Grammar, lowest to highest binding:
        program     -> declaration* EOF
        declaration -> "var" IDENTIFIER "=" expression ";" | statement
        statement   -> "print" expression ";" | expression ";"
        expression  -> assignment
        assignment  -> IDENTIFIER "=" assignment | binary
        binary      -> equality, via BINARY_PRECEDENCE
        equality    -> comparison (("!=" | "==") comparison)*
        comparison  -> term ((">" | ">=" | "<" | "<=") term)*
        term        -> factor (("-" | "+") factor)*
        factor      -> unary (("/" | "*") unary)*
        unary       -> ("!" | "-") unary | primary
        primary     -> NUMBER | STRING | "true" | "false" | "nil"
                     | "(" expression ")" | IDENTIFIER
    """

    def __init__(self, tokens: List[Token], debug: bool = False):
        self.tokens = tokens
        self.debug = debug
        self.current = 0
        self.errors: List[LoxParseError] = []

    def parse(self) -> List[Stmt]:
        """Parse a program; malformed statements are dropped and recorded"""
        statements = []
        while not self.is_at_end():
            try:
                stmt = self.declaration()
                statements.append(stmt)
                if self.debug:
                    print(f"[parse] {ast_to_sexpr(stmt)}", file=sys.stderr)
            except LoxParseError as e:
                self.recover(e)
            except RecursionError:
                self.recover(LoxParseError(self.peek(), NESTING_TOO_DEEP))
        return statements

    def recover(self, error: LoxParseError) -> None:
        self.errors.append(error)
        if self.debug:
            print(f"[parse] {error}; synchronizing", file=sys.stderr)
        self.synchronize()

    def parse_expression(self) -> Expr:
        """Parse exactly one expression spanning all tokens"""
        try:
            expr = self.expression()
        except RecursionError:
            raise LoxParseError(self.peek(), NESTING_TOO_DEEP) from None
        if not self.is_at_end():
            raise LoxParseError(self.peek(), "Expect end of expression.")
        return expr

    # ------------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------------

    def declaration(self) -> Stmt:
        if self.match(TokenType.VAR):
            return self.var_declaration()
        return self.statement()

    def var_declaration(self) -> Stmt:
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")
        # An initializer is mandatory
        if not self.match(TokenType.EQUAL):
            raise LoxParseError(name, "Expect '=' and an initializer after variable name.")
        initializer = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclaration(name, initializer)

    def statement(self) -> Stmt:
        if self.match(TokenType.PRINT):
            return self.print_statement()
        return self.expression_statement()

    def print_statement(self) -> Stmt:
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def expression_statement(self) -> Stmt:
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(expr)

    # ------------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------------

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.binary()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assignment(expr.name, value)
            raise LoxParseError(equals, "Invalid assignment target.")

        return expr

    def binary(self, min_precedence: int = EQUALITY) -> Expr:
        """Equality down to factor, driven by BINARY_PRECEDENCE

        Operators at one level fold to the left in a loop; only a tighter
        operator on the right opens a nested call.
        """
        expr = self.unary()
        while True:
            precedence = BINARY_PRECEDENCE.get(self.peek().type)
            if precedence is None or precedence < min_precedence:
                return expr
            operator = self.advance()
            right = self.binary(precedence + 1)
            expr = Binary(expr, operator, right)

    def unary(self) -> Expr:
        operators = []
        while self.match(*UNARY_OPERATORS):
            operators.append(self.previous())
        expr = self.primary()
        for operator in reversed(operators):
            expr = Unary(operator, expr)
        return expr

    def primary(self) -> Expr:
        if self.match(TokenType.FALSE):
            return Literal(FALSE)
        if self.match(TokenType.TRUE):
            return Literal(TRUE)
        if self.match(TokenType.NIL):
            return Literal(NIL)
        if self.match(TokenType.NUMBER):
            return Literal(Number(self.previous().literal))
        if self.match(TokenType.STRING):
            return Literal(String(self.previous().literal))
        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous())
        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise LoxParseError(self.peek(), "Expect expression.")

    # ------------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------------

    def match(self, *token_types: TokenType) -> bool:
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type: TokenType, message: str) -> Token:
        if self.check(token_type):
            return self.advance()
        raise LoxParseError(self.peek(), message)

    def check(self, token_type: TokenType) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[max(self.current - 1, 0)]

    def synchronize(self) -> None:
        """Discard tokens up to the next statement boundary"""
        self.advance()
        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_KEYWORDS:
                return
            self.advance()


# ============================================================================
# PUBLIC API
# ============================================================================

def parse(tokens: List[Token], debug: bool = False) -> Tuple[List[Stmt], List[LoxParseError]]:
    """Parse tokens into (statements, parse_errors)"""
    parser = Parser(tokens, debug=debug)
    statements = parser.parse()
    return statements, parser.errors


def create_parser(tokens: List[Token], debug: bool = False) -> Parser:
    """Create a Lox parser"""
    return Parser(tokens, debug=debug)


def create_debug_parser(tokens: List[Token]) -> Parser:
    """Create a Lox parser with debug enabled"""
    return Parser(tokens, debug=True)
