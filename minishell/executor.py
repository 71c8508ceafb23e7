"""Running parsed pipelines: redirections, builtins and external programs."""

from __future__ import annotations

import copy
import io
import os
import subprocess
import sys
from contextlib import ExitStack
from typing import Any, BinaryIO, Iterable, TextIO

from .builtins import is_builtin, run_builtin
from .env import Environment
from .errors import PROMPT_NAME, ExitShell, ShellError, report_error
from .models import Command, RedirectType

COMMAND_NOT_FOUND = "command not found"
NO_SUCH_FILE = "No such file or directory"


class CommandNotFound(ShellError):
    """The command word names nothing that can be run."""

    def __init__(self, command: str, message: str = COMMAND_NOT_FOUND) -> None:
        super().__init__(message, 127)
        self.command = command


class _StageFailed(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def find_executable(name: str, directories: Iterable[str]) -> str | None:
    """Return ``<dir>/<name>`` for the first directory where it exists."""
    for directory in directories:
        candidate = f"{directory}/{name}"
        if os.path.exists(candidate):
            return candidate
    return None


def collect_heredoc(delimiter: str, lines: Iterable[str]) -> str:
    """Gather lines up to the one equal to *delimiter*, each ending in a newline."""
    body = []
    for line in lines:
        text = line[:-1] if line.endswith("\n") else line
        if text == delimiter:
            break
        body.append(text + "\n")
    return "".join(body)


def _fileno(stream: Any) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class Executor:
    """Runs the commands of one line, stage after stage."""

    def __init__(
        self,
        env: Environment,
        path_dirs: Iterable[str],
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.env = env
        self.path_dirs = list(path_dirs)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def run(self, commands: list[Command]) -> int:
        """Run a pipeline and return the exit status of its last stage.

        A lone builtin without redirections runs in the shell itself and may
        raise :class:`ExitShell`; every other stage runs in isolation.
        """
        if not commands:
            return 0
        first = commands[0]
        if len(commands) == 1 and is_builtin(first.name) and not first.redirects:
            return run_builtin(first.argv, self.env, self.stdout, self.stderr, 1)

        status = 0
        data: bytes | None = None
        total = len(commands)
        for index, command in enumerate(commands):
            is_last = index == total - 1
            status, data = self._run_stage(command, data, is_last, total - index)
        return status

    def _run_stage(
        self, command: Command, data: bytes | None, is_last: bool, remaining: int
    ) -> tuple[int, bytes]:
        try:
            self._check_command(command)
        except CommandNotFound as error:
            report_error(error.command, error.message, self.stderr)
            return error.exit_code, b""

        with ExitStack() as stack:
            try:
                redirected_input, out_file = self._apply_redirects(command, stack)
            except _StageFailed as failure:
                return failure.status, b""
            if command.name is None:
                return 0, b""
            stdin_data = redirected_input if redirected_input is not None else data
            if is_builtin(command.name):
                return self._run_builtin_stage(command, out_file, is_last, remaining)
            return self._run_external_stage(command, stdin_data, out_file, is_last)

    def _check_command(self, command: Command) -> None:
        name = command.name
        if name is None:
            return
        if not name:
            raise CommandNotFound(name)
        if name.startswith("/"):
            if not (os.path.isfile(name) and os.access(name, os.X_OK)):
                raise CommandNotFound(name, NO_SUCH_FILE)
            return
        if name.startswith("."):
            raise CommandNotFound(name)
        if self.env.get("PATH") is None:
            raise CommandNotFound(name)
        if not (find_executable(name, self.path_dirs) or is_builtin(name)):
            raise CommandNotFound(name)

    def _apply_redirects(
        self, command: Command, stack: ExitStack
    ) -> tuple[bytes | None, BinaryIO | None]:
        stdin_data: bytes | None = None
        out_file: BinaryIO | None = None
        has_command = command.name is not None
        for redirect in command.redirects:
            kind = redirect.type
            if kind is RedirectType.INPUT_SINGLE:
                self._check_input_file(redirect.file)
                if has_command:
                    stdin_data = self._read_file(redirect.file)
            elif kind is RedirectType.INPUT_DOUBLE:
                text = collect_heredoc(redirect.file, iter(self.stdin.readline, ""))
                if has_command:
                    stdin_data = text.encode()
            elif kind is RedirectType.OUTPUT_SINGLE:
                handle = self._open_output(redirect.file, "wb", stack)
                if has_command:
                    out_file = handle
            elif has_command:
                out_file = self._open_output(redirect.file, "ab", stack)
        return stdin_data, out_file

    def _file_error(self, name: str, message: str = NO_SUCH_FILE) -> None:
        self.stdout.write(f"{PROMPT_NAME}: {name}: {message}\n")
        raise _StageFailed(1)

    def _check_input_file(self, name: str) -> None:
        for variable in self.env:
            if variable.key.startswith("PWD"):
                if not os.path.exists(f"{variable.value or ''}/{name}"):
                    self._file_error(name)

    def _read_file(self, name: str) -> bytes:
        try:
            with open(name, "rb") as handle:
                return handle.read()
        except FileNotFoundError:
            self._file_error(name)
        except OSError as error:
            self._file_error(name, error.strerror or str(error))
        return b""

    def _open_output(self, name: str, mode: str, stack: ExitStack) -> BinaryIO:
        try:
            return stack.enter_context(open(name, mode))
        except OSError as error:
            report_error(name, error.strerror or str(error), self.stderr)
            raise _StageFailed(1) from error

    def _run_builtin_stage(
        self, command: Command, out_file: BinaryIO | None, is_last: bool, remaining: int
    ) -> tuple[int, bytes]:
        buffer = io.StringIO()
        target = buffer if (out_file is not None or not is_last) else self.stdout
        isolated_env = copy.deepcopy(self.env)
        saved_cwd = os.getcwd()
        try:
            status = run_builtin(command.argv, isolated_env, target, self.stderr, remaining)
        except ExitShell as exit_request:
            status = exit_request.code
        finally:
            os.chdir(saved_cwd)
        output = buffer.getvalue().encode()
        if out_file is not None:
            out_file.write(output)
            return status, b""
        return status, b"" if is_last else output

    def _flush(self) -> None:
        for stream in (self.stdout, self.stderr):
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()

    def _run_external_stage(
        self,
        command: Command,
        stdin_data: bytes | None,
        out_file: BinaryIO | None,
        is_last: bool,
    ) -> tuple[int, bytes]:
        name = command.argv[0]
        executable = name if name.startswith("/") else find_executable(name, self.path_dirs)

        stdout_fd = _fileno(self.stdout)
        stderr_fd = _fileno(self.stderr)
        stdout_arg: Any
        if out_file is not None:
            stdout_arg = out_file
        elif not is_last or stdout_fd is None:
            stdout_arg = subprocess.PIPE
        else:
            stdout_arg = stdout_fd
        stderr_arg: Any = subprocess.PIPE if stderr_fd is None else stderr_fd

        options: dict[str, Any] = {}
        if stdin_data is None:
            stdin_fd = _fileno(self.stdin)
            options["stdin"] = subprocess.DEVNULL if stdin_fd is None else stdin_fd
        else:
            options["input"] = stdin_data

        self._flush()
        try:
            result = subprocess.run(
                command.argv,
                executable=executable,
                stdout=stdout_arg,
                stderr=stderr_arg,
                env={},
                check=False,
                **options,
            )
        except OSError:
            message = NO_SUCH_FILE if name.startswith("/") else COMMAND_NOT_FOUND
            report_error(name, message, self.stderr)
            return 127, b""

        if result.stderr:
            self.stderr.write(result.stderr.decode(errors="replace"))
        status = result.returncode if result.returncode >= 0 else 0
        output = result.stdout or b""
        if out_file is not None:
            return status, b""
        if is_last:
            if output:
                self.stdout.write(output.decode(errors="replace"))
            return status, b""
        return status, output