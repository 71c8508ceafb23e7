"""Commands the shell runs itself: echo, cd, pwd, env, export, unset, exit."""

from __future__ import annotations

import os
from typing import Callable, TextIO

from .env import Environment
from .errors import PROMPT_NAME, ExitShell, ShellError, report_error

BUILTINS = frozenset({"pwd", "env", "export", "unset", "cd", "echo", "exit"})

_SPACE_CHARS = " \f\n\r\t\v"
_INT_MAX = 2147483647


def is_builtin(name: str | None) -> bool:
    """True if *name* is exactly one of the shell's own commands."""
    return name is not None and name in BUILTINS


def echo_n_option(argument: str) -> bool:
    """True for ``-n``, ``-nn``, ``-nnn`` and so on."""
    return argument.startswith("-n") and all(char == "n" for char in argument[2:])


def _write_shell_error(error: ShellError, err: TextIO) -> None:
    err.write(f"{PROMPT_NAME}: {error.message}\n")


def builtin_echo(argv: list[str], out: TextIO) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    words = argv[1:]
    omit_newline = bool(words) and echo_n_option(words[0])
    if omit_newline:
        words = words[1:]
    out.write(" ".join(words))
    if not omit_newline:
        out.write("\n")
    return 0


def builtin_cd(argv: list[str], env: Environment, err: TextIO) -> int:
    """Change the working directory.

    With no argument the shell's ``HOME`` is used. An argument holding ``~``
    is resolved against the process's ``HOME``: its text from the third
    character on is joined to that directory.
    """
    if len(argv) < 2:
        home = env.get("HOME")
        if home is None:
            report_error("cd ", "HOME not set", err)
            return 1
        try:
            os.chdir(home)
        except OSError:
            pass
        return 0

    target = argv[1]
    if "~" in target:
        process_home = os.environ.get("HOME", "")
        path = f"{process_home}/{target[2:]}" if len(target) > 1 else process_home
        try:
            os.chdir(path)
        except OSError:
            pass
        return 0

    try:
        os.chdir(target)
    except OSError:
        report_error("cd", f"{target}: No such file or directory", err)
        return 1
    return 0


def builtin_pwd(out: TextIO) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError:
        return 1
    out.write(cwd + "\n")
    return 0


def builtin_env(env: Environment, out: TextIO) -> int:
    """Print every exported variable as ``KEY=value``."""
    for line in env.env_lines():
        out.write(line + "\n")
    return 0


def builtin_export(argv: list[str], env: Environment, out: TextIO, err: TextIO) -> int:
    """Define variables, or list them all sorted when given no arguments."""
    arguments = argv[1:]
    if not arguments:
        for line in env.export_lines():
            out.write(line + "\n")
        return 0
    status = 0
    for argument in arguments:
        try:
            env.export(argument)
        except ShellError as error:
            _write_shell_error(error, err)
            status = error.exit_code
    return status


def builtin_unset(argv: list[str], env: Environment, err: TextIO) -> int:
    """Remove the named variables."""
    status = 0
    for name in argv[1:]:
        try:
            env.unset(name)
        except ShellError as error:
            _write_shell_error(error, err)
            status = error.exit_code
    return status


def _atoi(text: str) -> int:
    body = text.lstrip(_SPACE_CHARS)
    sign = 1
    if body and body[0] in "+-":
        if body[0] == "-":
            sign = -1
        body = body[1:]
    digits = ""
    for char in body:
        if not "0" <= char <= "9":
            break
        digits += char
    number = int(digits) if digits else 0
    if number > _INT_MAX:
        return -1
    return number * sign


def _is_numeric(argument: str) -> bool:
    body = argument[1:] if len(argument) > 1 and argument[0] == "-" else argument
    return all("0" <= char <= "9" for char in body)


def builtin_exit(argv: list[str], pipeline_length: int, out: TextIO, err: TextIO) -> int:
    """Leave the shell by raising :class:`ExitShell`.

    ``exit`` is announced on *out* when the command stands alone. With more
    than one argument nothing is left and 1 is returned.
    """
    if len(argv) < 2:
        if pipeline_length == 1:
            out.write("exit\n")
        raise ExitShell(0)

    argument = argv[1]
    if not _is_numeric(argument):
        out.write("exit\n")
        report_error("exit", f"{argument}: numeric argument required", err)
        raise ExitShell(255)

    if len(argv) > 2:
        out.write("exit\n")
        report_error("exit", "too many arguments", err)
        return 1

    if pipeline_length == 1:
        out.write("exit\n")
    raise ExitShell(_atoi(argument) & 0xFF)


def run_builtin(
    argv: list[str],
    env: Environment,
    out: TextIO,
    err: TextIO,
    pipeline_length: int = 1,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its exit status."""
    name = argv[0] if argv else None
    handlers: dict[str, Callable[[], int]] = {
        "pwd": lambda: builtin_pwd(out),
        "env": lambda: builtin_env(env, out),
        "export": lambda: builtin_export(argv, env, out, err),
        "unset": lambda: builtin_unset(argv, env, err),
        "cd": lambda: builtin_cd(argv, env, err),
        "echo": lambda: builtin_echo(argv, out),
        "exit": lambda: builtin_exit(argv, pipeline_length, out, err),
    }
    if name not in handlers:
        raise ValueError(f"not a builtin: {name!r}")
    return handlers[name]()