"""Exceptions raised by the shell and the helper that prints error lines."""

from __future__ import annotations

from typing import TextIO

PROMPT_NAME = "minishell"


class ShellError(Exception):
    """An error that ends the current command with a given exit status."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ParseError(ShellError):
    """A syntax error found while reading a command line."""

    EXIT_CODE = 258

    def __init__(self, message: str) -> None:
        super().__init__(message, self.EXIT_CODE)


class ExitShell(Exception):
    """Raised to leave the shell with the given status."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


def report_error(command: str | None, message: str, stream: TextIO) -> None:
    """Write ``minishell: <command>: <message>`` to *stream*.

    Nothing is written when *command* is None.
    """
    if command is None:
        return
    text = f"{PROMPT_NAME}: {command}: {message}"
    if not text.endswith("\n"):
        text += "\n"
    stream.write(text)