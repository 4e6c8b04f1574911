import io

import pytest

from turboshell.errors import ShellExit
from turboshell.shell import Shell, main


def make_shell(tmp_path, **extra):
    environ = {"HOME": str(tmp_path), **extra}
    shell = Shell(environ, "minishell")
    shell.state.stdout = io.StringIO()
    shell.state.stderr = io.StringIO()
    return shell


def test_history_file_defaults_to_home(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.history_path == f"{tmp_path}/tsh_history"


def test_history_is_loaded_without_blank_lines(tmp_path):
    path = tmp_path / "tsh_history"
    path.write_text("ls\n\npwd\n")
    shell = Shell({"HOME": str(tmp_path)}, "minishell")
    assert shell.history.entries == ["ls", "pwd", ""]


def test_execute_echo(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.execute("echo hello\n") == 0
    assert shell.state.stdout.getvalue() == "hello\n"


def test_later_commands_see_exported_variables(tmp_path):
    shell = make_shell(tmp_path)
    shell.execute("export A=1; echo $A\n")
    assert shell.state.stdout.getvalue() == "1\n"


def test_syntax_error_sets_status(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.execute("echo ;;\n") == 2
    assert "syntax error" in shell.state.stderr.getvalue()
    assert shell.state.stdout.getvalue() == ""


def test_unknown_command(tmp_path):
    empty = tmp_path / "bin"
    empty.mkdir()
    shell = make_shell(tmp_path, PATH=str(empty))
    assert shell.execute("nosuchcmd\n") == 127
    assert "command not found" in shell.state.stderr.getvalue()


def test_exit_raises_with_status(tmp_path):
    shell = make_shell(tmp_path)
    with pytest.raises(ShellExit) as info:
        shell.execute("exit 3\n")
    assert info.value.status == 3


def test_run_stops_at_exit_and_saves_history(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.run(io.StringIO("echo a\nexit 5\necho b\n")) == 5
    assert shell.state.stdout.getvalue() == "a\nexit\n"
    assert (tmp_path / "tsh_history").read_text() == "echo a\nexit 5\n"


def test_run_skips_empty_lines(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.run(io.StringIO("\necho a\n\n")) == 0
    assert (tmp_path / "tsh_history").read_text() == "echo a\n"


def test_run_returns_last_status_at_end_of_input(tmp_path):
    shell = make_shell(tmp_path)
    assert shell.run(io.StringIO("echo ;;\n")) == 2


def test_main_reads_stdin(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr("sys.stdin", io.StringIO("exit 7\n"))
    assert main(["minishell"]) == 7
    assert capsys.readouterr().out == "exit\n"
    assert (tmp_path / "tsh_history").read_text() == "exit 7\n"