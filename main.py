"""
Lox - Main Entry Point
Runs a script file or an interactive prompt on top of the scanner, parser
and interpreter
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from syntax import KEYWORDS, TokenType, ast_to_sexpr, pretty_print_ast
from scanning import scan, format_token
from parsing import parse, create_parser
from interpreter import Interpreter, create_interpreter, create_debug_interpreter
from error_handling import LoxError, LoxParseError, LoxRuntimeError, render_error


VERSION = "pylox 0.1.0"

# Exit statuses for script mode
EXIT_OK = 0
EXIT_FILE_ERROR = 1
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

HISTORY_FILE = "~/.pylox_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='pylox',
      description='Lox - a small dynamically-typed scripting language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.lox             # Run a Lox script
  %(prog)s                        # Interactive mode
  %(prog)s --tokens script.lox    # Show tokens, then run
  %(prog)s --ast script.lox       # Show the parsed AST, then run
  %(prog)s --debug script.lox     # Trace every stage on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Lox script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '-t', '--tokens',
      action='store_true',
      help='Print the scanned tokens'
  )

  parser.add_argument(
      '-a', '--ast',
      action='store_true',
      help='Print the parsed AST'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def report_error(error: LoxError, source: Optional[str] = None) -> None:
  """Print an error to stderr, with source context when available"""
  print(render_error(error, source), file=sys.stderr)


def run_source(source: str, interpreter: Interpreter, show_tokens: bool = False,
               show_ast: bool = False, debug: bool = False,
               detailed_errors: bool = True) -> int:
  """
  Scan, parse and interpret one piece of source text.
  Returns the exit status for the outcome.
  """
  context = source if detailed_errors else None

  tokens, scan_errors = scan(source, debug=debug)
  if show_tokens:
    for token in tokens:
      print(format_token(token))

  statements, parse_errors = parse(tokens, debug=debug)
  if show_ast:
    print(pretty_print_ast(statements))

  static_errors: List[LoxError] = [*scan_errors, *parse_errors]
  if static_errors:
    for error in static_errors:
      report_error(error, context)
    return EXIT_STATIC_ERROR

  runtime_error = interpreter.interpret(statements)
  if runtime_error is not None:
    report_error(runtime_error, context)
    return EXIT_RUNTIME_ERROR

  return EXIT_OK


def run_script_file(script_path: str, show_tokens: bool = False, show_ast: bool = False,
                    debug: bool = False) -> int:
  """Run a Lox script file and return its exit status"""
  try:
    source = Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    return EXIT_FILE_ERROR
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'", file=sys.stderr)
    return EXIT_FILE_ERROR
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}", file=sys.stderr)
    print("  Hint: Make sure the file is a text file with UTF-8 encoding", file=sys.stderr)
    return EXIT_FILE_ERROR

  interpreter = create_debug_interpreter() if debug else create_interpreter()
  return run_source(source, interpreter, show_tokens, show_ast, debug)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

REPL_COMMANDS = [":tokens", ":ast", ":env", ":help", "exit"]


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS) + REPL_COMMANDS

  def completer(text, state):
    options = [word for word in completions if word.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def is_bare_expression(source: str) -> bool:
  """True for input like `1 + 2` that lacks a statement keyword and ';'"""
  tokens, scan_errors = scan(source)
  if scan_errors or len(tokens) < 2:
    return False
  if tokens[0].type in (TokenType.VAR, TokenType.PRINT):
    return False
  return tokens[-2].type != TokenType.SEMICOLON


def echo_expression(source: str, interpreter: Interpreter, debug: bool = False,
                    show_tokens: bool = False, show_ast: bool = False) -> None:
  """Evaluate a bare expression and print its value"""
  tokens, _ = scan(source, debug=debug)
  if show_tokens:
    for token in tokens:
      print(format_token(token))
  try:
    expr = create_parser(tokens, debug=debug).parse_expression()
    if show_ast:
      print(ast_to_sexpr(expr))
    value = interpreter.evaluate(expr)
  except (LoxParseError, LoxRuntimeError) as e:
    report_error(e)
    return
  print(f"=> {value}")


def show_environment(interpreter: Interpreter) -> None:
  print("Current environment:")
  if len(interpreter.environment) == 0:
    print("  (no variables defined)")
    return
  for name, value in interpreter.environment.items():
    val_str = str(value)
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str}")


def show_help() -> None:
  print("REPL Commands:")
  print("  :tokens <src>     - Show scanned tokens")
  print("  :ast <src>        - Show parsed AST")
  print("  :env              - Show current environment")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  var x = 1;                - Variable declaration (initializer required)")
  print("  x = x + 1;                - Assignment")
  print("  print x;                  - Print a value")
  print("  1 + 2 * 3                 - Bare expression, echoed as => 7")


def run_repl_line(line: str, interpreter: Interpreter, debug: bool = False,
                  show_tokens: bool = False, show_ast: bool = False) -> None:
  """Handle one line of interactive input"""
  code = line.strip()
  if not code:
    return

  command, _, argument = code.partition(" ")
  argument = argument.strip()

  if command == ":tokens":
    if not argument:
      print("Usage: :tokens <source>")
      return
    tokens, errors = scan(argument)
    for token in tokens:
      print(format_token(token))
    for error in errors:
      report_error(error)
    return

  if command == ":ast":
    if not argument:
      print("Usage: :ast <source>")
      return
    tokens, scan_errors = scan(argument)
    statements, parse_errors = parse(tokens)
    print(pretty_print_ast(statements))
    for error in [*scan_errors, *parse_errors]:
      report_error(error)
    return

  if code == ":env":
    show_environment(interpreter)
    return

  if code == ":help":
    show_help()
    return

  if is_bare_expression(code):
    echo_expression(code, interpreter, debug, show_tokens, show_ast)
    return

  run_source(code, interpreter, show_tokens, show_ast, debug, detailed_errors=False)


def run_interactive_mode(debug: bool = False, show_tokens: bool = False,
                         show_ast: bool = False) -> None:
  """Run Lox in interactive mode; one environment for the whole session"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      line = input("> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if line.strip() == "exit":
      break

    run_repl_line(line, interpreter, debug, show_tokens, show_ast)


def main(argv: Optional[List[str]] = None) -> int:
  """Main entry point for Lox"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script and not args.interactive:
    return run_script_file(args.script, show_tokens=args.tokens, show_ast=args.ast,
                           debug=args.debug)

  run_interactive_mode(debug=args.debug, show_tokens=args.tokens, show_ast=args.ast)
  return EXIT_OK


if __name__ == "__main__":
  sys.exit(main())
