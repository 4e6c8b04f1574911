"""The interactive shell: reads lines, runs them and keeps the history."""

from __future__ import annotations

import contextlib
import os
import signal
import sys

from turboshell.env import Environment, history_file_path
from turboshell.errors import ShellError, ShellExit
from turboshell.executor import run_pipeline
from turboshell.history import History
from turboshell.lineeditor import LineEditor, raw_terminal
from turboshell.parser import parse_line
from turboshell.state import ShellState

PROMPT = "\x1b[33mturboshell-1.0$ \x1b[0m"
SAVE_CURSOR = "\x1b7"
_READ_SIZE = 1024
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _fileno(stream):
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _entries(environ):
    if hasattr(environ, "items"):
        return [f"{key}={value}" for key, value in environ.items()]
    return list(environ)


class Shell:
    """A shell session with its environment, status and history."""

    def __init__(self, environ=None, program_path="minishell", history_path=None):
        env = Environment(_entries(os.environ if environ is None else environ))
        if history_path is None:
            history_path = history_file_path(env, program_path)
        self.history_path = history_path
        self.history = History.load(history_path)
        self.state = ShellState(env=env, history=self.history, history_path=history_path)

    def execute(self, line):
        """Run every command of ``line`` and return the last exit status.

        :class:`ShellExit` raised by ``exit`` is passed on to the caller.
        """
        state = self.state
        try:
            for pipeline in parse_line(line, state.env, lambda: state.exit_status):
                run_pipeline(state, pipeline)
        except ShellError as err:
            state.stderr.write(err.message + "\n")
            state.stderr.flush()
            state.exit_status = err.status
        return state.exit_status

    def run(self, stdin=None):
        """Read and run lines from ``stdin`` until exit; return the exit status.

        A terminal is read key by key with line editing; any other stream
        is read line by line. The session's lines are appended to the
        history file on the way out.
        """
        stream = sys.stdin if stdin is None else stdin
        fd = _fileno(stream)
        try:
            if fd is not None and os.isatty(fd):
                self._interactive(fd)
            else:
                for line in stream:
                    self._handle(line)
            status = self.state.exit_status
        except ShellExit as stop:
            status = stop.status
        except EOFError:
            status = 0
        self.history.save(self.history_path)
        return status

    def _handle(self, line):
        if line in ("", "\n"):
            return
        try:
            self.execute(line)
        finally:
            self.history.commit(line)

    def _prompt(self):
        self.history.reset_cursor()
        self.state.stdout.write(PROMPT + SAVE_CURSOR)
        self.state.stdout.flush()

    def _read_line(self, fd, editor):
        while True:
            data = os.read(fd, _READ_SIZE)
            if not data:
                raise EOFError
            try:
                line = editor.feed(data.decode(_ENCODING, _ERRORS))
            except KeyboardInterrupt:
                self.state.exit_status = 1
                self._prompt()
                continue
            if line is not None:
                return line

    def _interactive(self, fd):
        editor = LineEditor(self.history, self.state.stdout)
        with self._signal_handlers():
            while True:
                self._prompt()
                with raw_terminal(fd):
                    line = self._read_line(fd, editor)
                self._handle(line)

    def _on_signal(self, signum, frame):
        if signum == signal.SIGINT:
            self.state.exit_status = 130
            self.state.stdout.write("\n")
        else:
            self.state.exit_status = 131
            self.state.stdout.write("Quit: 3\n")
        self.state.stdout.flush()

    @contextlib.contextmanager
    def _signal_handlers(self):
        signums = [signal.SIGINT]
        if hasattr(signal, "SIGQUIT"):
            signums.append(signal.SIGQUIT)
        previous = {signum: signal.signal(signum, self._on_signal) for signum in signums}
        try:
            yield
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)


def main(argv=None):
    """Start an interactive session and return its exit status."""
    argv = sys.argv if argv is None else argv
    program_path = argv[0] if argv else "minishell"
    return Shell(os.environ, program_path).run()


if __name__ == "__main__":
    sys.exit(main())