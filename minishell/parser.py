"""Splitting a command line into commands, words and redirections."""

from __future__ import annotations

from typing import Iterator, Protocol

from .errors import ParseError
from .models import SPACE_CHARS, Command, Redirect

QUOTES = "'\""
UNCLOSED_QUOTE = "unclosed quote"
PIPE_SYNTAX_ERROR = "syntax error near unexpected token '|'"
REDIRECT_SYNTAX_ERROR = "syntax error near unexpected token"
_KEY_STOPS = "\"' $"


class _Lookup(Protocol):
    def get(self, key: str) -> str | None: ...


def skip_quotes(text: str, pos: int) -> int:
    """Return the index of the quote closing the one at *pos*."""
    if pos >= len(text) or text[pos] not in QUOTES:
        raise ValueError(f"no quote at position {pos}")
    closing = text.find(text[pos], pos + 1)
    if closing == -1:
        raise ParseError(UNCLOSED_QUOTE)
    return closing


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in SPACE_CHARS:
        pos += 1
    return pos


def _iter_segments(line: str) -> Iterator[str]:
    if line.startswith("|"):
        raise ParseError(PIPE_SYNTAX_ERROR)
    pos = 0
    while pos < len(line):
        if line[pos] == "|":
            pos += 1
        pos = _skip_spaces(line, pos)
        start = pos
        while pos < len(line) and line[pos] != "|":
            if line[pos] in QUOTES:
                pos = skip_quotes(line, pos)
            pos += 1
        segment = line[start:pos]
        if not segment:
            raise ParseError(PIPE_SYNTAX_ERROR)
        yield segment


def split_pipeline(line: str) -> list[str]:
    """Split *line* on unquoted ``|`` into command segments."""
    return list(_iter_segments(line))


def _skip_redirect(segment: str, pos: int) -> int:
    pos += 2 if segment.startswith(("<<", ">>"), pos) else 1
    pos = _skip_spaces(segment, pos)
    if pos < len(segment) and segment[pos] in QUOTES:
        pos = skip_quotes(segment, pos)
    return pos


def _iter_words(segment: str) -> Iterator[str]:
    pos = 0
    while pos < len(segment):
        pos = _skip_spaces(segment, pos)
        start = pos
        if pos < len(segment) and segment[pos] in "<>":
            pos = _skip_redirect(segment, pos)
            if pos < len(segment):
                pos += 1
        while pos < len(segment) and segment[pos] != " ":
            char = segment[pos]
            if char in "<>":
                break
            if char in QUOTES:
                pos = skip_quotes(segment, pos)
            pos += 1
        yield segment[start:pos]


def split_words(segment: str) -> list[str]:
    """Split a command segment into raw words and redirection tokens."""
    return [word for word in _iter_words(segment) if word]


def parse_command(segment: str) -> Command:
    """Build a command from a segment, without expanding its words."""
    command = Command()
    for word in split_words(segment):
        if word[0] in "<>":
            command.add_redirect(Redirect.from_token(word))
        else:
            command.add_argument(word)
    return command


def _env_key(text: str) -> str:
    end = 0
    while end < len(text) and text[end] not in _KEY_STOPS:
        end += 1
    return text[:end]


def expand(word: str, env: _Lookup, exit_code: int) -> str:
    """Expand ``$NAME`` and ``$?`` in *word* and remove its quotes."""
    out: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(word):
        char = word[i]
        if quote is None and char in QUOTES:
            quote = char
        elif char == quote:
            quote = None
        elif char == "$" and quote != "'":
            rest = word[i + 1:]
            if rest.startswith("?"):
                out.append(str(exit_code))
                i += 1
            else:
                key = _env_key(rest)
                i += len(key)
                if not key:
                    out.append("$")
                else:
                    value = env.get(key)
                    if value is not None:
                        out.append(value)
        else:
            out.append(char)
        i += 1
    return "".join(out)


def parse_line(line: str, env: _Lookup, exit_code: int = 0) -> list[Command]:
    """Parse a whole line into expanded commands, one per pipeline stage."""
    commands: list[Command] = []
    for segment in _iter_segments(line):
        command = parse_command(segment)
        command.argv = [expand(word, env, exit_code) for word in command.argv]
        for redirect in command.redirects:
            redirect.file = expand(redirect.file, env, exit_code)
        if command.has_syntax_error():
            raise ParseError(REDIRECT_SYNTAX_ERROR)
        commands.append(command)
    return commands


def is_empty_line(line: str) -> bool:
    """True if *line* holds nothing but whitespace."""
    return all(char in SPACE_CHARS for char in line)