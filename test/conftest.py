"""
Test configuration for Lox tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from scanning import scan
from parsing import parse
from environment import Environment
from interpreter import interpret


@pytest.fixture
def run_lox():
  """Run source through every stage; returns (stdout text, errors)"""
  def run(source, env=None):
    env = env if env is not None else Environment()
    out = io.StringIO()
    tokens, scan_errors = scan(source)
    statements, parse_errors = parse(tokens)
    errors = [*scan_errors, *parse_errors]
    if not errors:
      runtime_error = interpret(statements, env, out)
      if runtime_error is not None:
        errors.append(runtime_error)
    return out.getvalue(), errors

  return run
