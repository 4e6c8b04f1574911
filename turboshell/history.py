"""Command history with a movable cursor and a history file."""

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class History:
    """Past command lines followed by the line being typed.

    ``entries`` always ends with the current line; ``cursor`` points at
    the entry shown in the editor. Lines committed since ``session_start``
    are the ones :meth:`save` appends to the history file.
    """

    def __init__(self, entries=()):
        self.entries = [*entries, ""]
        self.session_start = len(self.entries) - 1
        self.cursor = self.session_start

    @classmethod
    def load(cls, path):
        """Read non-empty lines from ``path``; a missing file gives an empty history."""
        try:
            with open(path, encoding=_ENCODING, errors=_ERRORS) as stream:
                text = stream.read()
        except OSError:
            return cls()
        return cls(line for line in text.split("\n") if line)

    def save(self, path):
        """Append the lines committed this session to ``path``; return how many."""
        pending = self.entries[self.session_start:-1]
        if not pending:
            return 0
        try:
            with open(path, "a", encoding=_ENCODING, errors=_ERRORS) as stream:
                stream.writelines(f"{line}\n" for line in pending)
        except OSError:
            return 0
        self.session_start = len(self.entries) - 1
        return len(pending)

    def commit(self, line):
        """Store ``line`` as the newest entry and start a fresh current line."""
        self.entries[-1] = line.removesuffix("\n")
        self.entries.append("")
        self.reset_cursor()

    def up(self):
        """Move to the previous entry and return it, or None at the oldest."""
        if self.cursor <= 0:
            return None
        self.cursor -= 1
        return self.entries[self.cursor]

    def down(self):
        """Move to the next entry and return it, or None at the newest."""
        if self.cursor >= len(self.entries) - 1:
            return None
        self.cursor += 1
        return self.entries[self.cursor]

    def edit(self, text):
        """Replace the entry under the cursor with ``text``."""
        self.entries[self.cursor] = text.removesuffix("\n")

    def reset_cursor(self):
        """Point the cursor at the current line."""
        self.cursor = len(self.entries) - 1