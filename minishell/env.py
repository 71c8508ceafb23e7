"""Shell variables: the ordered table behind ``env``, ``export`` and ``unset``."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator, Mapping

from .errors import ShellError

NOT_VALID = "not a valid identifier"


@dataclass
class EnvVar:
    """One shell variable.

    *exported* is set once the variable has been given a value with ``=``;
    only such variables are listed by ``env``.
    """

    key: str
    value: str | None = None
    exported: bool = False


def _ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _ascii_alpha(char: str) -> bool:
    return "a" <= char <= "z" or "A" <= char <= "Z"


def starts_with_digit_name(argument: str) -> bool:
    """True if a digit comes before any letter in *argument*."""
    for char in argument:
        if _ascii_digit(char):
            return True
        if _ascii_alpha(char):
            return False
    return False


def parse_export_argument(argument: str) -> EnvVar:
    """Turn an ``export`` argument such as ``KEY=value`` into a variable.

    The argument is cut at every ``=`` and empty pieces are dropped: the
    first piece is the key and the second, if any, the value. A variable is
    marked exported only when the argument holds an ``=``.
    """
    if argument.startswith("="):
        raise ShellError(f"export: `=': {NOT_VALID}")
    pieces = [piece for piece in argument.split("=") if piece]
    variable = EnvVar(pieces[0])
    if "=" in argument:
        variable.exported = True
        if len(pieces) > 1:
            variable.value = pieces[1]
    return variable


class Environment:
    """Variables kept in the order they were first defined.

    Errors are raised as :class:`ShellError` whose message is the text that
    follows ``minishell: `` on the error line.
    """

    def __init__(self) -> None:
        self._vars: dict[str, EnvVar] = {}

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Environment:
        """Build an environment from a mapping, by default the process's."""
        env = cls()
        source = os.environ if environ is None else environ
        for key, value in source.items():
            env._vars[key] = EnvVar(key, value, True)
        return env

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(list(self._vars.values()))

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def get(self, key: str) -> str | None:
        """Value of *key*, or None if it is unknown or has no value."""
        variable = self._vars.get(key)
        return variable.value if variable else None

    def set(self, key: str, value: str | None, exported: bool = True) -> None:
        """Define or overwrite *key*, keeping its place if it already exists."""
        variable = self._vars.get(key)
        if variable is None:
            self._vars[key] = EnvVar(key, value, exported)
        else:
            variable.value = value
            variable.exported = exported

    def export(self, argument: str) -> None:
        """Apply one ``export`` argument."""
        if not argument:
            raise ShellError(f"`' : {NOT_VALID}")
        if starts_with_digit_name(argument):
            raise ShellError(f"{argument}:  {NOT_VALID}")
        new = parse_export_argument(argument)
        existing = self._vars.get(new.key)
        if existing is None:
            self._vars[new.key] = new
        elif new.exported:
            existing.value = new.value
            existing.exported = True

    def unset(self, name: str) -> None:
        """Remove *name*; unknown names are ignored."""
        if not name:
            raise ShellError(f"`' : {NOT_VALID}")
        if _ascii_digit(name[0]) or "=" in name:
            raise ShellError(f"{name}: {NOT_VALID}")
        self._vars.pop(name, None)

    def env_lines(self) -> list[str]:
        """Lines printed by ``env``: exported variables as ``KEY=value``."""
        return [
            f"{var.key}={var.value or ''}"
            for var in self._vars.values()
            if var.exported
        ]

    def export_lines(self) -> list[str]:
        """Lines printed by a bare ``export``, sorted by key."""
        lines = []
        for var in sorted(self._vars.values(), key=lambda v: v.key):
            line = f"declare -x {var.key}"
            if var.exported:
                line += f'="{var.value or ""}"'
            lines.append(line)
        return lines

    def path_directories(self) -> list[str]:
        """Directories named by ``PATH``, empty entries dropped."""
        path = self.get("PATH")
        if path is None:
            return []
        return [part for part in path.split(":") if part]