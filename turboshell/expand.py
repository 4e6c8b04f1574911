"""Variable expansion applied to a command line before it is parsed."""

from __future__ import annotations

from turboshell.errors import SHELL_NAME, ShellError

# Quote states of the pre-parser.
_SINGLE = 0
_NORMAL = 1
_DOUBLE = 2

_ON_SINGLE_QUOTE = {_SINGLE: _NORMAL, _NORMAL: _SINGLE, _DOUBLE: _DOUBLE}
_ON_DOUBLE_QUOTE = {_SINGLE: _SINGLE, _NORMAL: _DOUBLE, _DOUBLE: _NORMAL}


def _isalnum(char):
    return char.isascii() and char.isalnum()


def _char_at(line, index):
    return line[index] if 0 <= index < len(line) else ""


def _read_key(line, index):
    """Collect a variable name starting at ``index``; None for a digit name."""
    if _char_at(line, index).isdigit() and _char_at(line, index).isascii():
        return None, index + 1
    key = ""
    while index < len(line):
        char = line[index]
        if char == "\n" or not (_isalnum(char) or char == "?"):
            break
        key += char
        index += 1
        if char == "?":
            break
    return key, index


def lookup_variable(line, index, env, exit_status):
    """Expand the ``$`` at ``line[index]``.

    Return the value and the index just past the variable name. ``$?`` gives
    the exit status, a lone ``$`` stays ``$`` and unknown names give "".
    """
    key, index = _read_key(line, index + 1)
    following = _char_at(line, index)
    if key is None or (following.isdigit() and following.isascii()):
        return "", index
    if not key:
        return "$", index
    if key[0] == "?":
        return str(exit_status), index
    value = env.get(key)
    return ("" if value is None else value), index


def _ambiguous_redirect(line, dollar):
    name = ""
    for char in line[dollar + 1:]:
        if not _isalnum(char):
            break
        name += char
    return ShellError(f"{SHELL_NAME}: {name}: ambiguous redirect", 1)


def preparse(line, env, exit_status):
    """Expand variables in the first command of ``line``.

    The command ends at the first unquoted, unescaped ``;``, which is kept.
    Returns the expanded command and the text after it. A non-empty value
    that follows other text is wrapped in double quotes. An empty value
    after a redirection raises :class:`ShellError`.
    """
    result = ""
    quote = _NORMAL
    index = 0
    while index < len(line):
        char = line[index]
        previous = line[index - 1] if index else ""
        if char == "'":
            quote = _ON_SINGLE_QUOTE[quote]
        elif char == '"':
            quote = _ON_DOUBLE_QUOTE[quote]
        if char == ";" and quote == _NORMAL and previous != "\\":
            result += char
            break
        if (char == "$" and previous == "\\") or quote == _SINGLE or char != "$":
            result += char
            index += 1
            continue
        dollar = index
        value, index = lookup_variable(line, dollar, env, exit_status)
        if not value and any(c in "<>" for c in line[:dollar]):
            raise _ambiguous_redirect(line, dollar)
        if value:
            result += f'"{value}"' if result else value
    return result, line[index + 1:]