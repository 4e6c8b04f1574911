"""An interactive shell with pipelines, redirections, quoting and history."""

__version__ = "1.0.0"