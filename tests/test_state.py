import io

from turboshell.env import Environment
from turboshell.state import ShellState


def test_error_writes_formatted_line():
    stderr = io.StringIO()
    state = ShellState(env=Environment([]), stderr=stderr)
    state.error("turboshell-1.0", "foo", "command not found")
    assert stderr.getvalue() == "turboshell-1.0: foo: command not found\n"


def test_errors_accumulate():
    stderr = io.StringIO()
    state = ShellState(stderr=stderr)
    state.error("a", "b", "c")
    state.error("d", "e", "f")
    assert stderr.getvalue().splitlines() == ["a: b: c", "d: e: f"]


def test_defaults():
    state = ShellState()
    assert state.exit_status == 0
    assert len(state.env) == 0
    assert state.history is None


def test_states_do_not_share_environment():
    first = ShellState()
    second = ShellState()
    first.env.add("A=1")
    assert second.env.get("A") is None
    assert first.env.get("A") == "1"