"""Exceptions raised by the shell and the text of its error messages."""

SHELL_NAME = "turboshell-1.0"


class ShellError(Exception):
    """A failure that ends the current command with an exit status."""

    def __init__(self, message, status=1):
        super().__init__(message)
        self.message = message
        self.status = status


class ShellSyntaxError(ShellError):
    """A command line that cannot be parsed."""


class ShellExit(Exception):
    """Raised to leave the shell with the given status."""

    def __init__(self, status=0):
        super().__init__(status)
        self.status = status


def format_error(head, arg, error):
    """Return the standard ``head: arg: error`` message line."""
    return f"{head}: {arg}: {error}"


def syntax_error_message(line, index):
    """Describe the unexpected token found at ``line[index]``.

    A ``;`` or ``>`` that is immediately repeated is reported doubled.
    """
    token = line[index] if 0 <= index < len(line) else ""
    if token and token in ";>" and index + 1 < len(line) and line[index + 1] == token:
        token *= 2
    return f"{SHELL_NAME}: syntax error near unexpected token `{token}'"