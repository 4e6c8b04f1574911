"""Reads a command line key by key from a terminal in raw mode."""

from __future__ import annotations

import contextlib
import enum
import os
import shutil

try:
    import termios
except ImportError:  # pragma: no cover - platforms without termios
    termios = None

RESTORE_CURSOR = "\x1b8"
CLEAR_TO_END = "\x1b[J"
CURSOR_LEFT = "\x08"
CURSOR_RIGHT = "\x1b[C"
DELETE_CHARACTER = "\x1b[P"
# Visible width of the prompt plus the cursor cell.
_PROMPT_CELLS = 17


class Key(enum.Enum):
    """What a chunk of terminal input means to the editor."""

    TEXT = enum.auto()
    ENTER = enum.auto()
    UP = enum.auto()
    DOWN = enum.auto()
    LEFT = enum.auto()
    RIGHT = enum.auto()
    BACKSPACE = enum.auto()
    INTERRUPT = enum.auto()
    EOF = enum.auto()
    IGNORED = enum.auto()


_SEQUENCES = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[D": Key.LEFT,
    "\x1b[C": Key.RIGHT,
    "\x7f": Key.BACKSPACE,
}


def _filtered(data):
    """Drop what the terminal sent that cannot go into a line.

    Only the last character of a chunk is examined, as a chunk is normally
    one key press.
    """
    if not data:
        return ""
    last = data[-1]
    if last == "\t":
        return data[:-1]
    if last == "~" or ord(last) > 127:
        return ""
    if last in "\n\x03":
        return data
    if last in "\x04\x7f":
        return data if len(data) == 1 else data[:-1]
    if not " " <= last <= "~":
        return data[:-1]
    return data


def classify_key(data):
    """Return the :class:`Key` that the input chunk ``data`` stands for."""
    text = _filtered(data)
    if not text:
        return Key.IGNORED
    if text[-1] == "\n":
        return Key.ENTER
    if text[-1] == "\x03":
        return Key.INTERRUPT
    if text == "\x04":
        return Key.EOF
    return _SEQUENCES.get(text, Key.TEXT)


class LineEditor:
    """Builds up a line from key presses, echoing to ``out``.

    Arrow keys walk through ``history``; typed text replaces the history
    entry under the cursor.
    """

    def __init__(self, history, out):
        self.history = history
        self.out = out
        self.line = ""

    def feed(self, data):
        """Process one chunk of input.

        Returns the finished line, ending in a newline, once Enter is
        pressed, otherwise None. Ctrl-C clears the line and raises
        KeyboardInterrupt; Ctrl-D on an empty line raises EOFError.
        """
        key = classify_key(data)
        try:
            return self._dispatch(key, _filtered(data))
        finally:
            self.out.flush()

    def _dispatch(self, key, text):
        if key is Key.IGNORED:
            return None
        if key is Key.INTERRUPT:
            self.line = ""
            self.out.write("\n")
            raise KeyboardInterrupt
        if key is Key.EOF:
            if self.line:
                return None
            self.out.write("exit")
            raise EOFError
        if key is Key.UP:
            self._recall(self.history.up())
        elif key is Key.DOWN:
            self._recall(self.history.down())
        elif key is Key.BACKSPACE:
            self._erase()
        elif key is Key.LEFT:
            self.out.write(CURSOR_RIGHT)
        elif key is Key.RIGHT:
            self.out.write(CURSOR_LEFT)
        else:
            self.out.write(text)
            self.line += text
            self.history.edit(self.line)
            if key is Key.ENTER:
                finished, self.line = self.line, ""
                return finished
        return None

    def _recall(self, entry):
        self.out.write(RESTORE_CURSOR + CLEAR_TO_END)
        if entry is not None:
            self.line = entry
        self.out.write(self.line)

    def _erase(self):
        columns = shutil.get_terminal_size().columns
        cells = len(self.line) + _PROMPT_CELLS
        if columns > 0 and cells // columns > 0 and cells % columns == 0:
            self.out.write(f"\x1b[{columns}G{CLEAR_TO_END}")
        if self.line:
            self.out.write(CURSOR_LEFT + DELETE_CHARACTER)
            self.line = self.line[:-1]


@contextlib.contextmanager
def raw_terminal(fd):
    """Turn off echo, line buffering and signal keys on ``fd`` for the block.

    Does nothing when ``fd`` is not a terminal.
    """
    if termios is None or not os.isatty(fd):
        yield
        return
    saved = termios.tcgetattr(fd)
    raw = termios.tcgetattr(fd)
    raw[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG)
    raw[6][termios.VMIN] = 1
    raw[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, raw)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)