import io
import os
import sys

import pytest

from minishell.env import Environment
from minishell.errors import ExitShell
from minishell.executor import CommandNotFound, Executor, collect_heredoc, find_executable
from minishell.models import Command, Redirect, RedirectType

UPPER = [sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"]


def make_executor(env_vars, stdin_text=""):
    env = Environment.from_environ(env_vars)
    out, err = io.StringIO(), io.StringIO()
    executor = Executor(env, [], stdin=io.StringIO(stdin_text), stdout=out, stderr=err)
    return executor, env, out, err


def test_find_executable_returns_first_match(tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    (second / "tool").write_text("")
    found = find_executable("tool", [str(first), str(second)])
    assert found == f"{second}/tool"
    assert find_executable("absent", [str(first), str(second)]) is None


def test_collect_heredoc_stops_at_delimiter():
    assert collect_heredoc("EOF", ["a\n", "b\n", "EOF\n", "c\n"]) == "a\nb\n"
    assert collect_heredoc("EOF", ["x\n", "y"]) == "x\ny\n"


def test_single_builtin_runs_in_shell():
    executor, env, out, _ = make_executor({})
    status = executor.run([Command(["export", "A=1"])])
    assert status == 0
    assert env.get("A") == "1"
    executor.run([Command(["echo", "hi"])])
    assert out.getvalue() == "hi\n"


def test_pipeline_builtin_is_isolated():
    executor, env, out, _ = make_executor({"PATH": "/usr/bin"})
    status = executor.run([Command(["export", "B=2"]), Command(["echo", "x"])])
    assert status == 0
    assert "B" not in env
    assert out.getvalue() == "x\n"


def test_unknown_command_gives_127(tmp_path):
    executor, _, _, err = make_executor({"PATH": str(tmp_path)})
    executor.path_dirs = [str(tmp_path)]
    status = executor.run([Command(["nosuchcmd"])])
    assert status == 127
    assert err.getvalue() == "minishell: nosuchcmd: command not found\n"


def test_dot_command_is_not_found():
    executor, _, _, err = make_executor({"PATH": "/usr/bin"})
    assert executor.run([Command(["./script"])]) == 127
    assert "command not found" in err.getvalue()


def test_missing_absolute_program(tmp_path):
    executor, _, _, err = make_executor({"PATH": "/usr/bin"})
    missing = str(tmp_path / "nothing")
    assert executor.run([Command([missing])]) == 127
    assert err.getvalue() == f"minishell: {missing}: No such file or directory\n"


def test_command_not_found_exception_carries_status():
    error = CommandNotFound("ghost")
    assert error.exit_code == 127
    assert error.command == "ghost"


def test_output_redirect_writes_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    executor, _, out, _ = make_executor({"PATH": "/usr/bin"})
    redirect = Redirect(RedirectType.OUTPUT_SINGLE, "out.txt")
    status = executor.run([Command(["echo", "hi"], [redirect])])
    assert status == 0
    assert (tmp_path / "out.txt").read_text() == "hi\n"
    assert out.getvalue() == ""


def test_append_redirect(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "log.txt").write_text("first\n")
    executor, _, _, _ = make_executor({"PATH": "/usr/bin"})
    redirect = Redirect(RedirectType.OUTPUT_DOUBLE, "log.txt")
    assert executor.run([Command(["echo", "second"], [redirect])]) == 0
    assert (tmp_path / "log.txt").read_text() == "first\nsecond\n"


def test_redirect_only_truncates_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "made.txt").write_text("old")
    executor, _, _, _ = make_executor({"PATH": "/usr/bin"})
    status = executor.run([Command([], [Redirect(RedirectType.OUTPUT_SINGLE, "made.txt")])])
    assert status == 0
    assert (tmp_path / "made.txt").read_text() == ""


def test_missing_input_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    executor, _, out, _ = make_executor({"PATH": "/usr/bin", "PWD": str(tmp_path)})
    redirect = Redirect(RedirectType.INPUT_SINGLE, "missing.txt")
    status = executor.run([Command(list(UPPER), [redirect])])
    assert status == 1
    assert out.getvalue() == "minishell: missing.txt: No such file or directory\n"


def test_input_redirect_feeds_program(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_text("abc\n")
    executor, _, out, _ = make_executor({"PATH": "/usr/bin", "PWD": str(tmp_path)})
    redirect = Redirect(RedirectType.INPUT_SINGLE, "in.txt")
    assert executor.run([Command(list(UPPER), [redirect])]) == 0
    assert out.getvalue() == "ABC\n"


def test_pipeline_passes_output():
    executor, _, out, _ = make_executor({"PATH": "/usr/bin"})
    status = executor.run([Command(["echo", "hello"]), Command(list(UPPER))])
    assert status == 0
    assert out.getvalue() == "HELLO\n"


def test_heredoc_reads_from_stdin():
    executor, _, out, _ = make_executor({"PATH": "/usr/bin"}, "line1\nEND\nafter\n")
    redirect = Redirect(RedirectType.INPUT_DOUBLE, "END")
    executor.run([Command(list(UPPER), [redirect])])
    assert out.getvalue() == "LINE1\n"
    assert executor.stdin.readline() == "after\n"


def test_external_exit_status():
    executor, _, _, _ = make_executor({"PATH": "/usr/bin"})
    command = Command([sys.executable, "-c", "import sys; sys.exit(3)"])
    assert executor.run([command]) == 3


def test_single_exit_raises():
    executor, _, out, _ = make_executor({})
    with pytest.raises(ExitShell) as info:
        executor.run([Command(["exit", "7"])])
    assert info.value.code == 7
    assert out.getvalue() == "exit\n"


def test_exit_in_pipeline_sets_status():
    executor, _, out, _ = make_executor({"PATH": "/usr/bin"})
    status = executor.run([Command(["echo", "a"]), Command(["exit", "4"])])
    assert status == 4
    assert out.getvalue() == "exit\n"


def test_cd_in_pipeline_keeps_cwd(tmp_path, monkeypatch):
    start = tmp_path / "start"
    start.mkdir()
    monkeypatch.chdir(start)
    executor, _, out, _ = make_executor({"PATH": "/usr/bin"})
    executor.run([Command(["cd", str(tmp_path)]), Command(["echo", "x"])])
    assert os.getcwd() == str(start)
    assert out.getvalue() == "x\n"