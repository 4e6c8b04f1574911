"""State shared by the parts of the shell while it runs."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Optional, TextIO

from turboshell.env import Environment
from turboshell.errors import format_error
from turboshell.history import History


@dataclass
class ShellState:
    """The environment, last exit status, streams and history of a session."""

    env: Environment = field(default_factory=Environment)
    exit_status: int = 0
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    history: Optional[History] = None
    history_path: Optional[str] = None

    def error(self, head, arg, message):
        """Write a ``head: arg: message`` line to the error stream."""
        self.stderr.write(format_error(head, arg, message) + "\n")
        self.stderr.flush()