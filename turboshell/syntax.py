"""Checks a command line for misplaced operators and open quotes."""

from turboshell.errors import SHELL_NAME, ShellSyntaxError, format_error, syntax_error_message

SYNTAX_STATUS = 2


def _char_at(line, index):
    return line[index] if index < len(line) else ""


def _skip_whitespace(line, index):
    while index < len(line) and line[index] in " \t":
        index += 1
    return index


def _in_set(char, chars):
    # The end of the line counts as a member of every set.
    return char == "" or char in chars


def _fail(line, index):
    raise ShellSyntaxError(syntax_error_message(line, index), SYNTAX_STATUS)


def _check_semicolon(line, index):
    following = _skip_whitespace(line, index + 1)
    if _in_set(_char_at(line, following), "|;") or index == 0:
        if _char_at(line, following) == ";" or index == 0:
            _fail(line, index)
        _fail(line, following)


def _check_pipe(line, index):
    following = _skip_whitespace(line, index + 1)
    if _in_set(_char_at(line, following), "|;\n"):
        if _char_at(line, following) == ";":
            _fail(line, following)
        _fail(line, index)


def _check_redirect(line, index):
    following = _skip_whitespace(line, index + 1)
    if _char_at(line, following) in ("", "\n"):
        raise ShellSyntaxError(
            f"{SHELL_NAME}: syntax error near unexpected token `newline'", SYNTAX_STATUS
        )
    if line[index] == ">" and _char_at(line, index + 1) == ">":
        index += 1
    following = _skip_whitespace(line, index + 1)
    if _in_set(_char_at(line, following), "|;><"):
        _fail(line, following)


def check_syntax(line):
    """Raise :class:`ShellSyntaxError` if ``line`` is malformed.

    Operators inside quotes or after a backslash are ignored.
    """
    shield = dquote = squote = False
    for index, char in enumerate(line):
        if char == "\\" and not squote and not shield:
            shield = True
            continue
        if char == '"' and not squote and not shield:
            dquote = not dquote
        if char == "'" and not dquote and not shield:
            squote = not squote
        if not (shield or dquote or squote):
            if char == ";":
                _check_semicolon(line, index)
            elif char == "|":
                _check_pipe(line, index)
            elif char in "><":
                _check_redirect(line, index)
        shield = False
    if dquote or squote:
        raise ShellSyntaxError(
            format_error(SHELL_NAME, "syntax error", "need more quotes"), SYNTAX_STATUS
        )