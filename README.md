# turboshell

A small interactive shell for POSIX systems. It reads a line, checks it for
syntax errors, expands variables, splits it into commands and runs them, either
as built-ins or as programs found on `PATH`.

## Features

- Commands separated by `;` and joined by `|` into pipelines.
- Redirections: `>` (truncate), `>>` (append) and `<` (input).
- Single quotes, double quotes and backslash escapes.
- Variable expansion with `$NAME`, and `$?` for the exit status of the last command.
- Built-ins: `echo` (with `-n`), `cd`, `pwd`, `export`, `unset`, `env` and `exit`.
  In a pipeline of more than one command, built-ins work on a copy of the
  environment, and `exit` does not leave the shell.
- A line editor with history when reading from a terminal: the up and down
  arrow keys move through earlier lines, backspace erases, Ctrl-C abandons the
  current line and Ctrl-D on an empty line leaves the shell.
- History is kept in `tsh_history` in your home directory (next to the program
  when `HOME` is not set); it is loaded at start and the lines of the session
  are appended to it when the shell exits.
- When it reads from something other than a terminal, the shell runs the input
  line by line.

Program names looked up on `PATH` are lower-cased before the search.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
turboshell
```

The prompt is `turboshell-1.0$ `. For example:

```
turboshell-1.0$ export GREETING=hello
turboshell-1.0$ echo $GREETING world | cat > out.txt
turboshell-1.0$ cat < out.txt
hello world
turboshell-1.0$ exit 3
```

Errors follow the familiar form, such as
`turboshell-1.0: nosuch: command not found` with exit status 127, or
``turboshell-1.0: syntax error near unexpected token `;;'`` with status 2.

## Using it from Python

```python
from turboshell.shell import Shell

shell = Shell(environ={"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
status = shell.execute("export NAME=value; echo $NAME")
```

`Shell.execute` runs one line and returns the last exit status; `exit` raises
`turboshell.errors.ShellExit`. `Shell.run` reads lines from a stream until the
end or `exit` and returns the exit status.

The parts are usable one by one as well: `turboshell.syntax.check_syntax`
validates a line, `turboshell.parser.parse_line` turns it into pipelines of
commands, `turboshell.executor.run_pipeline` runs one, and
`turboshell.env.Environment` holds the variables.

## What it does not do

There are no here-documents (`<<`), no `&&` or `||`, no wildcard expansion,
no background jobs or job control, and no scripting constructs such as `if`
or loops.

## Running the tests

```
pip install .[test]
pytest
```