"""
Lox Token and AST Model
Shared vocabulary of the scanner, parser and interpreter: tokens, runtime
values, expression and statement nodes
"""

from typing import Any, List, Optional, Union
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import math


# ============================================================================
# TOKENS
# ============================================================================

class TokenType(Enum):
    """Closed set of lexical categories"""
    # Single-character tokens
    LEFT_PAREN = "LEFT_PAREN"
    RIGHT_PAREN = "RIGHT_PAREN"
    LEFT_BRACE = "LEFT_BRACE"
    RIGHT_BRACE = "RIGHT_BRACE"
    COMMA = "COMMA"
    DOT = "DOT"
    MINUS = "MINUS"
    PLUS = "PLUS"
    SEMICOLON = "SEMICOLON"
    SLASH = "SLASH"
    STAR = "STAR"

    # One or two character tokens
    BANG = "BANG"
    BANG_EQUAL = "BANG_EQUAL"
    EQUAL = "EQUAL"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    LESS = "LESS"
    LESS_EQUAL = "LESS_EQUAL"

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Keywords
    AND = "AND"
    CLASS = "CLASS"
    ELSE = "ELSE"
    FALSE = "FALSE"
    FOR = "FOR"
    FUN = "FUN"
    IF = "IF"
    NIL = "NIL"
    OR = "OR"
    PRINT = "PRINT"
    RETURN = "RETURN"
    SUPER = "SUPER"
    THIS = "THIS"
    TRUE = "TRUE"
    VAR = "VAR"
    WHILE = "WHILE"

    EOF = "EOF"


KEYWORDS = {
    'and': TokenType.AND,
    'class': TokenType.CLASS,
    'else': TokenType.ELSE,
    'false': TokenType.FALSE,
    'for': TokenType.FOR,
    'fun': TokenType.FUN,
    'if': TokenType.IF,
    'nil': TokenType.NIL,
    'or': TokenType.OR,
    'print': TokenType.PRINT,
    'return': TokenType.RETURN,
    'super': TokenType.SUPER,
    'this': TokenType.THIS,
    'true': TokenType.TRUE,
    'var': TokenType.VAR,
    'while': TokenType.WHILE,
}


@dataclass(frozen=True)
class Token:
    """Lox token with its source line"""
    type: TokenType
    lexeme: str
    literal: Any = None
    line: int = 1

    def __str__(self) -> str:
        return f"{self.type.value}({self.lexeme})"


# ============================================================================
# RUNTIME VALUES
# ============================================================================

def format_number(value: float) -> str:
    """Decimal text of a double, without exponent notation"""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        text = str(int(value))
        # int() drops the sign of negative zero
        return "-0" if text == "0" and math.copysign(1.0, value) < 0 else text
    return format(Decimal(repr(value)), "f")


@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Nil:
    def __str__(self) -> str:
        return "nil"


NIL = Nil()
TRUE = Boolean(True)
FALSE = Boolean(False)

Value = Union[Number, String, Boolean, Nil]


def type_name(value: Value) -> str:
    """Name of a value's variant, used in error messages"""
    if isinstance(value, Number):
        return "number"
    elif isinstance(value, String):
        return "string"
    elif isinstance(value, Boolean):
        return "boolean"
    return "nil"


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class Unary:
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Binary:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Grouping:
    expression: 'Expr'


@dataclass(frozen=True)
class Variable:
    name: Token


@dataclass(frozen=True)
class Assignment:
    name: Token
    value: 'Expr'


Expr = Union[Literal, Unary, Binary, Grouping, Variable, Assignment]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class ExpressionStatement:
    """Expression evaluated for its side effects only"""
    expression: Expr


@dataclass(frozen=True)
class PrintStatement:
    expression: Expr


@dataclass(frozen=True)
class VarDeclaration:
    name: Token
    initializer: Expr


Stmt = Union[ExpressionStatement, PrintStatement, VarDeclaration]


# ============================================================================
# AST PRINTING
# ============================================================================

def parenthesize(name: str, *parts: Union[Expr, str]) -> str:
    """Render a prefix form: (name part part ...)"""
    rendered = [part if isinstance(part, str) else ast_to_sexpr(part) for part in parts]
    return f"({' '.join([name] + rendered)})"


def ast_to_sexpr(node: Union[Expr, Stmt]) -> str:
    """Render an expression or statement as a parenthesized prefix form"""
    if isinstance(node, Literal):
        if isinstance(node.value, String):
            return f'"{node.value.value}"'
        return str(node.value)
    elif isinstance(node, Unary):
        return parenthesize(node.operator.lexeme, node.right)
    elif isinstance(node, Binary):
        # Fold the left spine in a loop; long operator chains stay shallow
        chain = []
        while isinstance(node, Binary):
            chain.append(node)
            node = node.left
        text = ast_to_sexpr(node)
        for binary in reversed(chain):
            text = parenthesize(binary.operator.lexeme, text, binary.right)
        return text
    elif isinstance(node, Grouping):
        return parenthesize("group", node.expression)
    elif isinstance(node, Variable):
        return node.name.lexeme
    elif isinstance(node, Assignment):
        return parenthesize("=", node.name.lexeme, node.value)
    elif isinstance(node, ExpressionStatement):
        return parenthesize(";", node.expression)
    elif isinstance(node, PrintStatement):
        return parenthesize("print", node.expression)
    elif isinstance(node, VarDeclaration):
        return parenthesize("var", node.name.lexeme, node.initializer)
    raise TypeError(f"Not an AST node: {node!r}")


def pretty_print_ast(statements: List[Stmt], header: Optional[str] = None) -> str:
    """One s-expression per line, optionally preceded by a header"""
    lines = [header] if header else []
    lines.extend(ast_to_sexpr(stmt) for stmt in statements)
    return "\n".join(lines)
