"""
Command line and interactive mode tests for Lox
"""

import io

import pytest
from main import (
  main, run_source, run_script_file, run_repl_line, is_bare_expression,
  create_arg_parser, EXIT_OK, EXIT_FILE_ERROR, EXIT_STATIC_ERROR, EXIT_RUNTIME_ERROR,
)
from interpreter import create_interpreter


class TestScriptMode:
  """File execution and exit statuses"""

  @pytest.fixture
  def script(self, tmp_path):
    def write(source):
      path = tmp_path / "script.lox"
      path.write_text(source, encoding="utf-8")
      return str(path)
    return write

  def test_successful_run(self, script, capsys):
    status = main([script('var greeting = "hi"; print greeting + " there";')])
    assert status == EXIT_OK
    assert capsys.readouterr().out == "hi there\n"

  def test_parse_error_status(self, script, capsys):
    status = main([script("print 1;\nvar x;\nprint 2;")])
    captured = capsys.readouterr()
    assert status == EXIT_STATIC_ERROR
    assert captured.out == ""
    assert "line 2" in captured.err

  def test_scan_error_status(self, script, capsys):
    status = main([script('print "open;')])
    assert status == EXIT_STATIC_ERROR
    assert "Unterminated string." in capsys.readouterr().err

  def test_runtime_error_status(self, script, capsys):
    status = main([script('print 1;\nprint 1 + "a";')])
    captured = capsys.readouterr()
    assert status == EXIT_RUNTIME_ERROR
    assert captured.out == "1\n"
    assert "Runtime error at line 2" in captured.err

  def test_missing_file(self, tmp_path, capsys):
    status = run_script_file(str(tmp_path / "nope.lox"))
    assert status == EXIT_FILE_ERROR
    assert "not found" in capsys.readouterr().err

  def test_token_dump(self, script, capsys):
    main(["--tokens", script("print 1;")])
    out = capsys.readouterr().out
    assert "PRINT print null" in out
    assert "NUMBER 1 1.0" in out
    assert out.endswith("1\n")

  def test_ast_dump(self, script, capsys):
    main(["-a", script("print 1 + 2 * 3;")])
    assert capsys.readouterr().out == "(print (+ 1 (* 2 3)))\n7\n"

  def test_arg_parser_flags(self):
    args = create_arg_parser().parse_args(["-t", "-a", "--debug", "x.lox"])
    assert args.tokens and args.ast and args.debug
    assert args.script == "x.lox"


class TestRunSource:

  def test_environment_persists_across_calls(self, capsys):
    interpreter = create_interpreter()
    assert run_source("var count = 1;", interpreter) == EXIT_OK
    assert run_source("count = count + 1; print count;", interpreter) == EXIT_OK
    assert capsys.readouterr().out == "2\n"

  def test_all_parse_errors_reported(self, capsys):
    status = run_source("print ;\nprint ;", create_interpreter(), detailed_errors=False)
    err = capsys.readouterr().err
    assert status == EXIT_STATIC_ERROR
    assert "[line 1]" in err
    assert "[line 2]" in err

  def test_long_sum_runs_to_completion(self, capsys):
    source = "print " + " + ".join(["1"] * 600) + ";"
    assert run_source(source, create_interpreter()) == EXIT_OK
    assert capsys.readouterr().out == "600\n"

  def test_excessive_nesting_is_a_static_error(self, capsys):
    source = "print " + "(" * 5000 + "1" + ")" * 5000 + ";"
    status = run_source(source, create_interpreter(), detailed_errors=False)
    assert status == EXIT_STATIC_ERROR
    assert "Expression nesting too deep." in capsys.readouterr().err


class TestInteractiveMode:
  """REPL line handling"""

  @pytest.fixture
  def interpreter(self):
    return create_interpreter()

  @pytest.mark.parametrize("line,expected", [
      ("1 + 2", True),
      ("x = 3", True),
      ("print 1", False),
      ("var a = 1", False),
      ("1 + 2;", False),
      ("", False),
  ])
  def test_is_bare_expression(self, line, expected):
    assert is_bare_expression(line) is expected

  def test_bare_expression_is_echoed(self, interpreter, capsys):
    run_repl_line("1 + 2 * 3", interpreter)
    assert capsys.readouterr().out == "=> 7\n"

  def test_statements_share_session_environment(self, interpreter, capsys):
    run_repl_line("var x = 41;", interpreter)
    run_repl_line("x = x + 1;", interpreter)
    run_repl_line("print x;", interpreter)
    run_repl_line("x", interpreter)
    assert capsys.readouterr().out == "42\n=> 42\n"

  def test_errors_do_not_end_session(self, interpreter, capsys):
    run_repl_line("print nope;", interpreter)
    run_repl_line("print 5;", interpreter)
    captured = capsys.readouterr()
    assert "Undefined variable 'nope'." in captured.err
    assert captured.out == "5\n"

  def test_env_command(self, interpreter, capsys):
    run_repl_line(":env", interpreter)
    run_repl_line('var name = "lox";', interpreter)
    run_repl_line(":env", interpreter)
    out = capsys.readouterr().out
    assert "(no variables defined)" in out
    assert "name = lox" in out

  def test_tokens_command(self, interpreter, capsys):
    run_repl_line(":tokens var", interpreter)
    assert "VAR var null" in capsys.readouterr().out

  def test_ast_command(self, interpreter, capsys):
    run_repl_line(":ast print -1;", interpreter)
    assert capsys.readouterr().out == "(print (- 1))\n"

  def test_help_command(self, interpreter, capsys):
    run_repl_line(":help", interpreter)
    assert "REPL Commands" in capsys.readouterr().out

  def test_interactive_loop_exits(self, monkeypatch, capsys):
    lines = iter(["var a = 2;", "a * 21", "exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    monkeypatch.setattr("main.setup_readline", lambda: None)
    assert main(["-i"]) == EXIT_OK
    assert "=> 42" in capsys.readouterr().out

  @pytest.mark.parametrize("command", [":tokens", ":ast", ":tokens   "])
  def test_bare_dump_command_prints_usage(self, interpreter, command, capsys):
    run_repl_line(command, interpreter)
    captured = capsys.readouterr()
    assert captured.out.startswith("Usage: " + command.strip())
    assert captured.err == ""

  def test_dump_flags_apply_to_statements(self, interpreter, capsys):
    run_repl_line("print 1;", interpreter, show_tokens=True, show_ast=True)
    out = capsys.readouterr().out
    assert "PRINT print null" in out
    assert out.endswith("(print 1)\n1\n")

  def test_dump_flags_apply_to_bare_expressions(self, interpreter, capsys):
    run_repl_line("1 + 2", interpreter, show_tokens=True, show_ast=True)
    out = capsys.readouterr().out
    assert "PLUS + null" in out
    assert out.endswith("(+ 1 2)\n=> 3\n")

  def test_interactive_mode_honors_ast_flag(self, monkeypatch, capsys):
    lines = iter(["print 2 * 3;", "exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    monkeypatch.setattr("main.setup_readline", lambda: None)
    assert main(["-i", "-a"]) == EXIT_OK
    assert "(print (* 2 3))\n6\n" in capsys.readouterr().out
