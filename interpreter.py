"""
Lox Interpreter
Tree-walking evaluator: statements run in order against one shared
Environment; the first runtime error aborts the run
"""

from typing import List, Optional, TextIO
import sys

from syntax import (
  Expr, Stmt, Value,
  Literal, Unary, Binary, Grouping, Variable, Assignment,
  ExpressionStatement, PrintStatement, VarDeclaration,
  ast_to_sexpr,
)
from environment import Environment
from error_handling import LoxRuntimeError
from utilities import BINARY_OPERATORS, UNARY_OPERATORS

NESTING_TOO_DEEP = "Expression nesting too deep."


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def evaluate(expr: Expr, env: Environment) -> Value:
  """Evaluate an expression to exactly one value"""
  if isinstance(expr, Literal):
    return expr.value
  elif isinstance(expr, Grouping):
    return evaluate(expr.expression, env)
  elif isinstance(expr, Variable):
    return env.get(expr.name)
  elif isinstance(expr, Assignment):
    return eval_assignment(expr, env)
  elif isinstance(expr, Unary):
    return eval_unary(expr, env)
  elif isinstance(expr, Binary):
    return eval_binary(expr, env)
  raise TypeError(f"Not an expression: {expr!r}")


def eval_assignment(expr: Assignment, env: Environment) -> Value:
  """Assign and yield the assigned value"""
  try:
    value = evaluate(expr.value, env)
  except RecursionError:
    raise LoxRuntimeError(expr.name, NESTING_TOO_DEEP) from None
  env.assign(expr.name, value)
  return value


def eval_unary(expr: Unary, env: Environment) -> Value:
  """Apply a run of prefix operators innermost first"""
  operators = []
  while isinstance(expr, Unary):
    operators.append(expr.operator)
    expr = expr.right
  try:
    value = evaluate(expr, env)
  except RecursionError:
    raise LoxRuntimeError(operators[-1], NESTING_TOO_DEEP) from None
  for operator in reversed(operators):
    value = UNARY_OPERATORS[operator.type](operator, value)
  return value


def eval_binary(expr: Binary, env: Environment) -> Value:
  """
  Evaluate left then right, then apply the operator.
  A left-nested chain like `1 + 2 + 3` is walked down its left spine and
  folded in a loop, so chain length does not grow the Python stack.
  """
  chain = []
  while isinstance(expr, Binary):
    chain.append(expr)
    expr = expr.left

  operator = chain[-1].operator
  try:
    value = evaluate(expr, env)
    for node in reversed(chain):
      operator = node.operator
      right = evaluate(node.right, env)
      value = BINARY_OPERATORS[operator.type](operator, value, right)
  except RecursionError:
    raise LoxRuntimeError(operator, NESTING_TOO_DEEP) from None
  return value


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def execute(stmt: Stmt, env: Environment, out: Optional[TextIO] = None) -> None:
  """Execute one statement for its side effects"""
  if isinstance(stmt, ExpressionStatement):
    evaluate(stmt.expression, env)
  elif isinstance(stmt, PrintStatement):
    value = evaluate(stmt.expression, env)
    print(str(value), file=out if out is not None else sys.stdout)
  elif isinstance(stmt, VarDeclaration):
    value = evaluate(stmt.initializer, env)
    env.define(stmt.name.lexeme, value)
  else:
    raise TypeError(f"Not a statement: {stmt!r}")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def run_program(statements: List[Stmt], env: Environment, out: Optional[TextIO] = None,
                debug: bool = False) -> None:
  """
  Execute statements strictly in order.
  Raises the first LoxRuntimeError; later statements do not run.
  """
  for stmt in statements:
    if debug:
      print(f"[interpret] {ast_to_sexpr(stmt)}", file=sys.stderr)
    execute(stmt, env, out)


def interpret(statements: List[Stmt], env: Environment, out: Optional[TextIO] = None,
              debug: bool = False) -> Optional[LoxRuntimeError]:
  """Execute statements; return the runtime error that stopped them, if any"""
  try:
    run_program(statements, env, out, debug)
  except LoxRuntimeError as e:
    if debug:
      print(f"[interpret] {e}", file=sys.stderr)
    return e
  return None


# ============================================================================
# SESSION INTERPRETER
# ============================================================================

class Interpreter:
  """Owns one Environment across successive runs (e.g. REPL lines)"""

  def __init__(self, environment: Optional[Environment] = None,
               out: Optional[TextIO] = None, debug: bool = False):
    self.environment = environment if environment is not None else Environment()
    self.out = out
    self.debug = debug

  def interpret(self, statements: List[Stmt]) -> Optional[LoxRuntimeError]:
    return interpret(statements, self.environment, self.out, self.debug)

  def evaluate(self, expr: Expr) -> Value:
    return evaluate(expr, self.environment)


def create_interpreter(out: Optional[TextIO] = None, debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter with a fresh environment"""
  return Interpreter(out=out, debug=debug)


def create_debug_interpreter(out: Optional[TextIO] = None) -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(out=out, debug=True)
