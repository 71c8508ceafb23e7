"""Parsed commands and their redirections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

SPACE_CHARS = " \f\n\r\t\v"


class RedirectType(IntEnum):
    """The four kinds of redirection the shell understands."""

    INPUT_SINGLE = 1
    INPUT_DOUBLE = 2
    OUTPUT_SINGLE = 3
    OUTPUT_DOUBLE = 4

    @property
    def operator(self) -> str:
        return {
            RedirectType.INPUT_SINGLE: "<",
            RedirectType.INPUT_DOUBLE: "<<",
            RedirectType.OUTPUT_SINGLE: ">",
            RedirectType.OUTPUT_DOUBLE: ">>",
        }[self]


@dataclass
class Redirect:
    """One redirection: its kind and the file word (or heredoc delimiter)."""

    type: RedirectType
    file: str

    @classmethod
    def from_token(cls, token: str) -> Redirect:
        """Build a redirection from a token such as ``>> out.txt``."""
        if token.startswith("<<"):
            kind = RedirectType.INPUT_DOUBLE
        elif token.startswith(">>"):
            kind = RedirectType.OUTPUT_DOUBLE
        elif token.startswith("<"):
            kind = RedirectType.INPUT_SINGLE
        elif token.startswith(">"):
            kind = RedirectType.OUTPUT_SINGLE
        else:
            raise ValueError(f"not a redirection token: {token!r}")
        rest = token[len(kind.operator):]
        return cls(kind, rest.lstrip(SPACE_CHARS))


@dataclass
class Command:
    """A simple command: its words and its redirections, in order."""

    argv: list[str] = field(default_factory=list)
    redirects: list[Redirect] = field(default_factory=list)

    @property
    def argc(self) -> int:
        """Number of arguments after the command name."""
        return len(self.argv) - 1

    @property
    def name(self) -> str | None:
        return self.argv[0] if self.argv else None

    def add_argument(self, word: str) -> None:
        self.argv.append(word)

    def add_redirect(self, redirect: Redirect) -> None:
        self.redirects.append(redirect)

    def has_syntax_error(self) -> bool:
        """True if a redirection lacks a usable file word."""
        return any(
            not redirect.file or redirect.file[0] in "<>"
            for redirect in self.redirects
        )