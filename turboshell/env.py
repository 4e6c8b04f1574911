"""The shell's environment: an ordered list of variables."""

from __future__ import annotations

from dataclasses import dataclass, replace

HISTORY_FILE_NAME = "tsh_history"


@dataclass
class EnvVar:
    """One environment variable.

    ``has_separator`` records whether the entry carried ``=``; a variable
    exported without a value is kept but not printed by ``env``.
    """

    key: str
    value: str = ""
    has_separator: bool = False
    is_set: bool = False


def parse_env_entry(entry):
    """Split a ``KEY=VALUE`` string into an :class:`EnvVar`."""
    key, sep, value = entry.partition("=")
    has_separator = bool(sep)
    return EnvVar(key=key, value=value, has_separator=has_separator, is_set=has_separator)


def _entry_text(var):
    return f"{var.key}={var.value}" if var.has_separator else var.key


class Environment:
    """Variables in insertion order, looked up by their first occurrence."""

    def __init__(self, entries=()):
        self._vars = [parse_env_entry(entry) for entry in entries]

    def get_var(self, key):
        """Return the first variable named ``key``, or None."""
        return next((var for var in self._vars if var.key == key), None)

    def get(self, key):
        """Return the value of ``key``, or None when it is absent."""
        var = self.get_var(key)
        return None if var is None else var.value

    def add(self, entry):
        """Append ``entry`` without looking for an existing variable."""
        var = parse_env_entry(entry)
        self._vars.append(var)
        return var

    def export(self, entry):
        """Set a variable the way the ``export`` builtin does.

        An existing variable only changes when ``entry`` holds ``=``;
        an unknown one is appended.
        """
        new = parse_env_entry(entry)
        existing = self.get_var(new.key)
        if existing is None:
            self._vars.append(new)
            return new
        if new.has_separator:
            existing.value = new.value
            existing.has_separator = True
            existing.is_set = True
        return existing

    def unset(self, key):
        """Remove the first variable named ``key``; return whether one was found."""
        for position, var in enumerate(self._vars):
            if var.key == key:
                del self._vars[position]
                return True
        return False

    def to_list(self):
        """Render every variable as ``KEY=VALUE`` (or ``KEY`` without ``=``)."""
        return [_entry_text(var) for var in self._vars]

    def sorted_vars(self):
        """Return copies of the variables sorted by key."""
        return [replace(var) for var in sorted(self._vars, key=lambda var: var.key)]

    def __iter__(self):
        return iter(self._vars)

    def __len__(self):
        return len(self._vars)


def history_file_path(env, program_path):
    """Return where the history file lives.

    It is placed in ``$HOME``; without ``HOME`` it goes next to the program,
    whose path is trimmed of the characters of its name.
    """
    home = env.get("HOME")
    base = home if home is not None else program_path.strip("minishell")
    return f"{base}/{HISTORY_FILE_NAME}"