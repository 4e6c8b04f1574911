"""The commands the shell runs itself: echo, cd, pwd, export, unset, env, exit."""

from __future__ import annotations

import os

from turboshell.errors import SHELL_NAME, ShellExit

_LONG_MAX = 2**63 - 1
_ULONG_WRAP = 2**64
_SPACES = " \t\n\v\f\r"
_NOT_NUMERIC_STATUS = 255


def _is_alpha(char):
    return char.isascii() and char.isalpha()


def _is_digit(char):
    return char.isascii() and char.isdigit()


def _builtin_error(state, builtin, name, message):
    state.stderr.write(f"turboshell: {builtin}{name}{message}\n")
    state.stderr.flush()
    state.exit_status = 1


def parse_exit_code(text):
    """Read a leading signed decimal number as C ``int`` conversion would.

    Values beyond the range of a 64-bit signed long give -1, or 0 when
    negative; other values are truncated to 32 bits.
    """
    index = 0
    while index < len(text) and text[index] in _SPACES:
        index += 1
    sign = 1
    if index < len(text) and text[index] in "+-":
        if text[index] == "-":
            sign = -1
        index += 1
    result = 0
    while index < len(text) and _is_digit(text[index]):
        result = (result * 10 + int(text[index])) % _ULONG_WRAP
        index += 1
    if result > _LONG_MAX:
        return 0 if sign < 0 else -1
    value = result & 0xFFFFFFFF
    if value >= 2**31:
        value -= 2**32
    value *= sign
    return (value + 2**31) % 2**32 - 2**31


def echo(state, args):
    """Print the arguments separated by spaces; leading ``-n`` drops the newline."""
    words = args[1:]
    skipped = 0
    while skipped < len(words) and words[skipped] == "-n":
        skipped += 1
    text = " ".join(words[skipped:])
    if not skipped:
        text += "\n"
    state.stdout.write(text)
    state.stdout.flush()
    state.exit_status = 0
    return state.exit_status


def pwd(state, args):
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = ""
    state.stdout.write(f"{cwd}\n")
    state.stdout.flush()
    state.exit_status = 0
    return state.exit_status


def print_env(state, args):
    """Print every variable that holds a value as ``KEY=VALUE``."""
    for var in state.env:
        if var.is_set:
            state.stdout.write(f"{var.key}={var.value}\n")
    state.stdout.flush()
    state.exit_status = 0
    return state.exit_status


def cd(state, args):
    """Change directory, defaulting to ``$HOME``, and update PWD and OLDPWD."""
    target = args[1] if len(args) > 1 else None
    if target is None:
        target = state.env.get("HOME")
        if target is None:
            _builtin_error(state, "cd: ", "", "HOME not set")
            return state.exit_status
        if not target:
            return state.exit_status
    try:
        os.chdir(target)
    except OSError:
        _builtin_error(state, "cd: ", target, ": No such file or directory")
        return state.exit_status
    current = state.env.get_var("PWD")
    previous = state.env.get_var("OLDPWD")
    if current is None or previous is None:
        return state.exit_status
    previous.value = current.value
    try:
        current.value = os.getcwd()
    except OSError as err:
        state.stderr.write(
            "cd: error retrieving current directory: getcwd: "
            f"cannot access parent directories: {err.strerror}\n"
        )
        state.stderr.flush()
        current.value = ""
    return state.exit_status


def export(state, args):
    """List the variables sorted, or set each ``KEY[=VALUE]`` argument."""
    if len(args) < 2:
        for var in state.env.sorted_vars():
            line = f"declare -x {var.key}"
            if var.has_separator:
                line += f'="{var.value}"'
            state.stdout.write(line + "\n")
        state.stdout.flush()
    else:
        for entry in args[1:]:
            if entry and not _is_alpha(entry[0]):
                _builtin_error(state, "export: '", entry, "` not a valid identifier")
                continue
            state.env.export(entry)
    state.exit_status = 0
    return state.exit_status


def unset(state, args):
    """Remove each named variable."""
    state.exit_status = 0
    for name in args[1:]:
        if not name or not _is_alpha(name[0]):
            _builtin_error(state, "unset: '", name, "` not a valid identifier")
            continue
        state.env.unset(name)
    return state.exit_status


def exit_shell(state, args, in_pipeline=False):
    """Leave the shell by raising :class:`ShellExit`.

    A non-numeric argument exits with 255; more than one argument only
    reports an error and sets the status to 1.
    """
    if not in_pipeline:
        state.stdout.write("exit\n")
        state.stdout.flush()
    if len(args) > 1:
        argument = args[1]
        digits = argument
        if argument[:1] in ("-", "+"):
            if len(argument) == 1:
                _not_numeric(state, argument)
            digits = argument[1:]
        if not all(_is_digit(char) for char in digits):
            _not_numeric(state, argument)
    if len(args) > 2:
        state.exit_status = 1
        state.error(SHELL_NAME, "exit", "too many arguments")
        return state.exit_status
    if len(args) == 2:
        raise ShellExit(parse_exit_code(args[1]) & 0xFF)
    raise ShellExit(0)


def _not_numeric(state, argument):
    state.error(f"{SHELL_NAME}: exit", argument, "numeric argument required")
    raise ShellExit(_NOT_NUMERIC_STATUS)


_BUILTINS = {
    "echo": echo,
    "cd": cd,
    "pwd": pwd,
    "export": export,
    "unset": unset,
    "env": print_env,
}


def is_builtin(name):
    """Return True when ``name`` is run by the shell itself."""
    return name == "exit" or name in _BUILTINS


def run_builtin(state, args, in_pipeline=False):
    """Run the builtin named by ``args[0]`` and return the exit status."""
    name = args[0]
    if name == "exit":
        return exit_shell(state, args, in_pipeline)
    try:
        handler = _BUILTINS[name]
    except KeyError:
        raise ValueError(f"not a builtin: {name}") from None
    return handler(state, args)