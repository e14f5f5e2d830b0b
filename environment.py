"""
Lox Environment
Single flat mapping from variable name to runtime value, shared by every
evaluation step of one run (or one REPL session)
"""

from typing import Dict, Iterator, Tuple

from syntax import Token, Value
from error_handling import LoxRuntimeError


class Environment:
  """Mutable variable store supporting define/get/assign"""

  def __init__(self):
    self.values: Dict[str, Value] = {}

  def define(self, name: str, value: Value) -> None:
    """Bind name to value, inserting or overwriting"""
    self.values[name] = value

  def get(self, name: Token) -> Value:
    """Look up a variable; undefined names are a runtime error"""
    try:
      return self.values[name.lexeme]
    except KeyError:
      raise undefined_variable(name) from None

  def assign(self, name: Token, value: Value) -> None:
    """Overwrite an existing binding; never declares implicitly"""
    if name.lexeme not in self.values:
      raise undefined_variable(name)
    self.values[name.lexeme] = value

  def __contains__(self, name: str) -> bool:
    return name in self.values

  def __len__(self) -> int:
    return len(self.values)

  def items(self) -> Iterator[Tuple[str, Value]]:
    return iter(self.values.items())


def undefined_variable(name: Token) -> LoxRuntimeError:
  return LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")


def create_environment() -> Environment:
  """Create an empty environment for one run"""
  return Environment()
