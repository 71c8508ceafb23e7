"""The interactive loop: read a line, parse it, run it."""

from __future__ import annotations

import os
import signal
import sys
import threading
from typing import Any, Callable, Mapping, TextIO

from .env import Environment
from .errors import PROMPT_NAME, ExitShell, ParseError
from .executor import Executor
from .models import Command, RedirectType
from .parser import is_empty_line, parse_line

termios: Any
try:
    import termios
except ImportError:
    termios = None

PROMPT = "minishell$ "
_SIGQUIT = getattr(signal, "SIGQUIT", None)


def _install(signum: int | None, handler: Any) -> None:
    if signum is None or handler is None:
        return
    if threading.current_thread() is not threading.main_thread():
        return
    try:
        signal.signal(signum, handler)
    except (ValueError, OSError):
        pass


def _current_handlers() -> dict[int, Any]:
    signals = [signal.SIGINT] + ([_SIGQUIT] if _SIGQUIT is not None else [])
    return {signum: signal.getsignal(signum) for signum in signals}


def _set_echoctl(enabled: bool) -> None:
    """Turn the terminal's echoing of control characters on or off."""
    if termios is None:
        return
    flag = getattr(termios, "ECHOCTL", 0)
    try:
        fd = sys.stdin.fileno()
        if not os.isatty(fd):
            return
        attrs = termios.tcgetattr(fd)
        attrs[3] = attrs[3] | flag if enabled else attrs[3] & ~flag
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attrs)
    except (OSError, ValueError, termios.error):
        return


def _read_line(prompt: str) -> str:
    try:
        import readline  # noqa: F401  line editing and history for input()
    except ImportError:
        pass
    return input(prompt)


class Shell:
    """A shell session: its variables, last exit status and streams."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        source = os.environ if environ is None else environ
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.env = Environment.from_environ(source)
        path = source.get("PATH")
        if path is None:
            self.stdout.write("Failed to get path\n")
            self.path_dirs: list[str] = []
        else:
            self.path_dirs = [part for part in path.split(":") if part]
        self.exit_code = 0
        self.executor = Executor(self.env, self.path_dirs, stdin, self.stdout, self.stderr)
        self._interactive = False

    def execute(self, line: str) -> int:
        """Parse and run one line; return the resulting exit status."""
        if is_empty_line(line):
            return self.exit_code
        try:
            commands = parse_line(line, self.env, self.exit_code)
        except ParseError as error:
            self.stdout.write(f"{PROMPT_NAME}: {error.message}\n")
            self.exit_code = error.exit_code
            return self.exit_code
        if self._interactive:
            self._execution_signals(commands)
        try:
            self.exit_code = self.executor.run(commands)
        except ExitShell as exit_request:
            self.exit_code = exit_request.code
            raise
        return self.exit_code

    def repl(self, input_func: Callable[[str], str] | None = None) -> int:
        """Read and run lines until end of input or ``exit``; return the status."""
        read = input_func if input_func is not None else _read_line
        saved = _current_handlers()
        self._interactive = True
        try:
            while True:
                self._prompt_signals()
                try:
                    line = read(PROMPT)
                except EOFError:
                    self.stdout.write("exit\n")
                    return 0
                except KeyboardInterrupt:
                    self.stdout.write("\n")
                    self.exit_code = 1
                    continue
                try:
                    self.execute(line)
                except ExitShell as exit_request:
                    return exit_request.code
                except KeyboardInterrupt:
                    self.stdout.write("\n")
        finally:
            self._interactive = False
            for signum, handler in saved.items():
                _install(signum, handler)
            _set_echoctl(True)

    def _prompt_signals(self) -> None:
        _set_echoctl(False)
        _install(signal.SIGINT, signal.default_int_handler)
        _install(_SIGQUIT, signal.SIG_IGN)

    def _execution_signals(self, commands: list[Command]) -> None:
        redirects = commands[0].redirects if commands else []
        if redirects and redirects[0].type not in (
            RedirectType.OUTPUT_SINGLE,
            RedirectType.OUTPUT_DOUBLE,
        ):
            return
        _set_echoctl(True)
        _install(signal.SIGINT, self._on_interrupt)
        _install(_SIGQUIT, self._on_quit)

    def _on_interrupt(self, signum: int, frame: Any) -> None:
        self.stdout.write("\n")

    def _on_quit(self, signum: int, frame: Any) -> None:
        self.stdout.write("Quit: 3\n")


def main(argv: list[str] | None = None) -> int:
    """Start an interactive session on the process's streams."""
    return Shell().repl()


if __name__ == "__main__":
    raise SystemExit(main())