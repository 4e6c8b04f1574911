from turboshell.errors import (
    ShellError,
    ShellExit,
    ShellSyntaxError,
    format_error,
    syntax_error_message,
)


def test_format_error_joins_parts():
    assert (
        format_error("turboshell-1.0", "foo", "command not found")
        == "turboshell-1.0: foo: command not found"
    )


def test_syntax_error_message_doubles_semicolon():
    message = syntax_error_message("ls ;; pwd", 3)
    assert message == "turboshell-1.0: syntax error near unexpected token `;;'"


def test_syntax_error_message_doubles_redirect():
    assert syntax_error_message("ls >> >", 3).endswith("`>>'")


def test_syntax_error_message_does_not_double_pipe():
    assert syntax_error_message("a || b", 2).endswith("`|'")


def test_syntax_error_message_single_token():
    assert syntax_error_message("ls | x", 3).endswith("`|'")


def test_syntax_error_message_past_end_has_empty_token():
    assert syntax_error_message("ls", 2).endswith("`'")


def test_shell_error_carries_status():
    error = ShellError("boom", 2)
    assert error.status == 2
    assert error.message == "boom"
    assert str(error) == "boom"


def test_shell_error_default_status():
    assert ShellError("boom").status == 1


def test_syntax_error_is_shell_error():
    error = ShellSyntaxError("bad", 2)
    assert isinstance(error, ShellError)
    assert error.status == 2
    assert error.message == "bad"
    assert str(error) == "bad"


def test_shell_exit_status():
    error = ShellExit(255)
    assert error.status == 255
    assert not isinstance(error, ShellError)