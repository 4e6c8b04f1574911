"""Splits a command line into pipelines of commands with redirections."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from turboshell.errors import ShellSyntaxError
from turboshell.expand import preparse
from turboshell.syntax import check_syntax


class RedirectKind(enum.IntEnum):
    TRUNCATE = 1
    APPEND = 2
    INPUT = 3


@dataclass
class Redirect:
    kind: RedirectKind
    path: str


@dataclass
class Command:
    args: list = field(default_factory=list)
    redirects: list = field(default_factory=list)


@dataclass
class Pipeline:
    commands: list = field(default_factory=list)


class _Stop(enum.Enum):
    WORD = enum.auto()
    PIPE = enum.auto()
    SEMICOLON = enum.auto()
    END = enum.auto()


def is_whitespace(char):
    """Return True for a space or a tab."""
    return char in (" ", "\t")


def skip_whitespace(text, index):
    """Return the first index at or after ``index`` that is not whitespace."""
    while index < len(text) and is_whitespace(text[index]):
        index += 1
    return index


def _isalnum(char):
    return char.isascii() and char.isalnum()


def _unterminated():
    return ShellSyntaxError("Syntax error", 2)


class _SegmentParser:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.status = _Stop.WORD
        self.commands = []
        self._reset()

    def _reset(self):
        self.args = [""]
        self.pending = []

    def char(self, offset=0):
        index = self.pos + offset
        return self.text[index] if 0 <= index < len(self.text) else ""

    def char_at(self, index):
        return self.text[index] if 0 <= index < len(self.text) else ""

    def _finish_command(self):
        args = list(self.args)
        redirects = []
        for kind, arg_index in self.pending:
            redirects.append(Redirect(kind, args[arg_index]))
            args[arg_index] = None
        self.commands.append(Command([a for a in args if a is not None], redirects))
        self._reset()

    def _word_may_follow(self, index):
        following = self.char_at(skip_whitespace(self.text, index))
        return following != "" and following not in "\n|;"

    def _redirect(self):
        if self.args[-1]:
            self.args.append("")
        kind = 0
        while self.char() == ">":
            kind += 1
            self.pos += 1
        if self.char() == "<":
            kind = RedirectKind.INPUT
            self.pos += 1
        self.pos = skip_whitespace(self.text, self.pos)
        self.pending.append((RedirectKind(kind), len(self.args) - 1))

    def _plain(self):
        shielded = False
        self.pos = skip_whitespace(self.text, self.pos)
        while self.pos < len(self.text):
            char = self.char()
            if char == "|":
                self.status = _Stop.PIPE
                following = skip_whitespace(self.text, self.pos + 1)
                if self.char_at(following) == "\n":
                    self.pos = following
                return
            if char in (";", "\n"):
                self.status = _Stop.SEMICOLON if char == ";" else _Stop.END
                return
            if char in ("<", ">"):
                self._redirect()
            if is_whitespace(self.char()):
                if self._word_may_follow(self.pos + 1):
                    self.args.append("")
                return
            char = self.char()
            if char == "\\":
                self.pos += 1
                shielded = True
                char = self.char()
            if not shielded and (
                (char == "$" and _isalnum(self.char(1))) or char in ('"', "'")
            ):
                return
            self.args[-1] += char
            self.pos += 1
            shielded = False

    def _after_quote(self):
        if is_whitespace(self.char(1)):
            if self.char_at(skip_whitespace(self.text, self.pos + 1)) != "\n":
                self.args.append("")

    def _single(self):
        self.pos += 1
        while self.pos < len(self.text) and self.char() != "'":
            if self.char() == "\n":
                raise _unterminated()
            self.args[-1] += self.char()
            self.pos += 1
        if self.char() != "'":
            raise _unterminated()
        self._after_quote()

    def _double(self):
        shielded = False
        self.pos += 1
        while self.pos < len(self.text) and (self.char() != '"' or shielded):
            char = self.char()
            if char == "\n":
                raise _unterminated()
            if char == "\\" and self.char(1) in '$\\`"' and not shielded:
                self.pos += 1
                shielded = True
                continue
            self.args[-1] += char
            self.pos += 1
            shielded = False
        if self.char() != '"' and not shielded:
            raise _unterminated()
        if self.char():
            self._after_quote()

    def _distribute(self):
        if self.char() not in ('"', "'"):
            self._plain()
        if self.char() == '"':
            self._double()
        if self.char() == "'":
            self._single()

    def parse(self):
        while self.pos < len(self.text) and self.char() != "\n":
            self._distribute()
            if (
                self.pos >= len(self.text)
                or self.status is _Stop.END
                or self.char() == "\n"
            ):
                break
            if self.status is _Stop.SEMICOLON:
                break
            if self.status is _Stop.PIPE:
                self.status = _Stop.WORD
                self._finish_command()
            self.pos += 1
        self._finish_command()
        return Pipeline(self.commands)


def parse_segment(text):
    """Parse one expanded command, ending at ``;`` or newline, into a pipeline."""
    return _SegmentParser(text).parse()


def parse_line(line, env, exit_status):
    """Yield the pipelines of ``line`` one ``;``-separated part at a time.

    Each part is expanded only when it is reached, so ``exit_status`` may be a
    callable returning the current status and changes to ``env`` made by
    earlier parts are seen by later ones. Syntax errors raise
    :class:`ShellSyntaxError` before anything is yielded.
    """
    check_syntax(line)
    if not line.endswith("\n"):
        line += "\n"
    current_status = exit_status if callable(exit_status) else (lambda: exit_status)
    rest = line
    while True:
        segment, rest = preparse(rest, env, current_status())
        yield parse_segment(segment)
        if not segment.endswith(";") or rest.strip(" \t") in ("", "\n"):
            return