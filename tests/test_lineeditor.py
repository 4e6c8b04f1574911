import io

import pytest

from turboshell.history import History
from turboshell.lineeditor import CURSOR_RIGHT, Key, LineEditor, classify_key


@pytest.mark.parametrize(
    "data, key",
    [
        ("\x1b[A", Key.UP),
        ("\x1b[B", Key.DOWN),
        ("\x1b[D", Key.LEFT),
        ("\x1b[C", Key.RIGHT),
        ("\x7f", Key.BACKSPACE),
        ("\n", Key.ENTER),
        ("ab\n", Key.ENTER),
        ("\x03", Key.INTERRUPT),
        ("\x04", Key.EOF),
        ("a", Key.TEXT),
        ("a\t", Key.TEXT),
        ("\t", Key.IGNORED),
        ("~", Key.IGNORED),
        ("\x1b[3~", Key.IGNORED),
        ("\u00e9", Key.IGNORED),
        ("", Key.IGNORED),
    ],
)
def test_classify_key(data, key):
    assert classify_key(data) is key


def make_editor(entries=()):
    history = History(entries)
    out = io.StringIO()
    return LineEditor(history, out), history, out


def test_text_then_enter_returns_line():
    editor, history, out = make_editor()
    assert editor.feed("ab") is None
    assert editor.feed("\n") == "ab\n"
    assert editor.line == ""
    assert "ab" in out.getvalue()


def test_typing_edits_current_history_entry():
    editor, history, _ = make_editor(["ls"])
    editor.feed("x")
    editor.feed("y")
    assert history.entries == ["ls", "xy"]


def test_tab_is_dropped():
    editor, _, _ = make_editor()
    editor.feed("a\t")
    assert editor.feed("\n") == "a\n"


def test_backspace_removes_last_character():
    editor, _, _ = make_editor()
    editor.feed("abc")
    editor.feed("\x7f")
    assert editor.line == "ab"
    assert editor.feed("\n") == "ab\n"


def test_backspace_on_empty_line_keeps_it_empty():
    editor, _, _ = make_editor()
    editor.feed("\x7f")
    assert editor.line == ""


def test_arrows_walk_history():
    editor, _, _ = make_editor(["ls", "pwd"])
    editor.feed("\x1b[A")
    assert editor.line == "pwd"
    editor.feed("\x1b[A")
    assert editor.line == "ls"
    editor.feed("\x1b[A")
    assert editor.line == "ls"
    editor.feed("\x1b[B")
    assert editor.line == "pwd"
    editor.feed("\x1b[B")
    assert editor.line == ""


def test_left_arrow_moves_cursor_only():
    editor, _, out = make_editor()
    editor.feed("a")
    editor.feed("\x1b[D")
    assert editor.line == "a"
    assert out.getvalue().endswith(CURSOR_RIGHT)


def test_interrupt_clears_line():
    editor, _, out = make_editor()
    editor.feed("abc")
    with pytest.raises(KeyboardInterrupt):
        editor.feed("\x03")
    assert editor.line == ""
    assert out.getvalue().endswith("\n")


def test_ctrl_d_on_empty_line_ends_input():
    editor, _, out = make_editor()
    with pytest.raises(EOFError):
        editor.feed("\x04")
    assert out.getvalue().endswith("exit")


def test_ctrl_d_with_text_is_ignored():
    editor, _, _ = make_editor()
    editor.feed("ab")
    assert editor.feed("\x04") is None
    assert editor.line == "ab"