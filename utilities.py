"""
Utilities module for the Lox interpreter
Operand checks, operator tables, truthiness and equality
"""

from typing import Callable, Dict, Tuple
import math
import operator

from syntax import (
  Token, TokenType, Value,
  Number, String, Boolean, Nil,
  TRUE, FALSE,
)
from error_handling import LoxRuntimeError


BinaryOperation = Callable[[Token, Value, Value], Value]
UnaryOperation = Callable[[Token, Value], Value]


# ==================== TRUTHINESS AND EQUALITY ====================

def is_truthy(value: Value) -> bool:
  """Only nil and false are falsy"""
  if isinstance(value, Nil):
    return False
  if isinstance(value, Boolean):
    return value.value
  return True


def values_equal(left: Value, right: Value) -> bool:
  """
  Structural equality between runtime values

  Values of different variants are never equal. Numbers follow IEEE-754
  comparison, so NaN is not equal to itself.
  """
  if type(left) is not type(right):
    return False
  if isinstance(left, Nil):
    return True
  return left.value == right.value


def make_boolean(flag: bool) -> Boolean:
  return TRUE if flag else FALSE


# ==================== OPERAND CHECKS ====================

def check_number_operand(op: Token, operand: Value) -> float:
  """
  Require a numeric operand

  Args:
    op: Operator token, used for the error line
    operand: Evaluated operand

  Returns:
    The operand's float value

  Raises:
    LoxRuntimeError if operand is not a number
  """
  if isinstance(operand, Number):
    return operand.value
  raise LoxRuntimeError(op, "Operand must be a number.")


def check_number_operands(op: Token, left: Value, right: Value) -> Tuple[float, float]:
  """Require both operands to be numbers"""
  if isinstance(left, Number) and isinstance(right, Number):
    return left.value, right.value
  raise LoxRuntimeError(op, "Operands must be numbers.")


# ==================== ARITHMETIC ====================

def divide(x: float, y: float) -> float:
  """IEEE-754 division: a zero divisor gives inf, -inf or NaN"""
  if y == 0.0:
    if x == 0.0 or math.isnan(x):
      return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)
  return x / y


# ==================== OPERATION FACTORIES ====================

def binary_arithmetic_op(op: Callable[[float, float], float]) -> BinaryOperation:
  """
  Factory for numeric binary operations

  Args:
    op: Float operator function (e.g., operator.sub)

  Returns:
    Function (operator_token, left, right) -> Number
  """
  def arithmetic(token: Token, left: Value, right: Value) -> Value:
    x, y = check_number_operands(token, left, right)
    return Number(op(x, y))

  return arithmetic


def binary_comparison_op(op: Callable[[float, float], bool]) -> BinaryOperation:
  """
  Factory for numeric comparisons

  Args:
    op: Float comparison function (e.g., operator.lt)

  Returns:
    Function (operator_token, left, right) -> Boolean
  """
  def comparison(token: Token, left: Value, right: Value) -> Value:
    x, y = check_number_operands(token, left, right)
    return make_boolean(op(x, y))

  return comparison


def equality_op(negate: bool) -> BinaryOperation:
  """Factory for == and !=; never fails"""
  def equality(token: Token, left: Value, right: Value) -> Value:
    return make_boolean(values_equal(left, right) != negate)

  return equality


def add_values(token: Token, left: Value, right: Value) -> Value:
  """Numeric addition or string concatenation, no implicit coercion"""
  if isinstance(left, Number) and isinstance(right, Number):
    return Number(left.value + right.value)
  if isinstance(left, String) and isinstance(right, String):
    return String(left.value + right.value)
  raise LoxRuntimeError(token, "Operands must be two numbers or two strings.")


def negate(token: Token, operand: Value) -> Value:
  return Number(-check_number_operand(token, operand))


def logical_not(token: Token, operand: Value) -> Value:
  return make_boolean(not is_truthy(operand))


# ==================== OPERATOR TABLES ====================

# Every operator kind the parser can place in a Binary node
BINARY_OPERATORS: Dict[TokenType, BinaryOperation] = {
  TokenType.PLUS: add_values,
  TokenType.MINUS: binary_arithmetic_op(operator.sub),
  TokenType.STAR: binary_arithmetic_op(operator.mul),
  TokenType.SLASH: binary_arithmetic_op(divide),
  TokenType.GREATER: binary_comparison_op(operator.gt),
  TokenType.GREATER_EQUAL: binary_comparison_op(operator.ge),
  TokenType.LESS: binary_comparison_op(operator.lt),
  TokenType.LESS_EQUAL: binary_comparison_op(operator.le),
  TokenType.EQUAL_EQUAL: equality_op(negate=False),
  TokenType.BANG_EQUAL: equality_op(negate=True),
}

# Every operator kind the parser can place in a Unary node
UNARY_OPERATORS: Dict[TokenType, UnaryOperation] = {
  TokenType.MINUS: negate,
  TokenType.BANG: logical_not,
}
