"""Runs parsed commands and pipelines: builtins, programs and redirections."""

from __future__ import annotations

import contextlib
import copy
import io
import os
import stat
import subprocess
import threading
from dataclasses import replace

from turboshell.builtins import is_builtin, run_builtin
from turboshell.errors import SHELL_NAME, ShellError, ShellExit, format_error
from turboshell.parser import RedirectKind

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
_SIGINT = 2
_SIGQUIT = 3
_SIGNAL_STATUS = {_SIGINT: 130, _SIGQUIT: 131}


def binary_in_dir(directory, name):
    """Return True when ``directory`` holds an entry called ``name``."""
    try:
        return name in os.listdir(directory)
    except OSError:
        return False


def _ascii_lower(text):
    return "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in text)


def find_in_path(name, path_value):
    """Look ``name``, lower-cased, up in the ``:``-separated directories."""
    lowered = _ascii_lower(name)
    for directory in path_value.split(":"):
        if binary_in_dir(directory, lowered):
            return f"{directory}/{lowered}"
    return None


def _is_path_like(name):
    return "/" in name or name == "." or name.startswith("..")


def _by_path(state, name, relative):
    if relative is not None:
        path = "./" + relative
    elif name.startswith("."):
        if name == ".":
            raise ShellError(
                f"{SHELL_NAME}: .: filename argument required\n"
                ".: usage: . filename [arguments]",
                state.exit_status,
            )
        path = f"{os.getcwd()}/{name}"
    else:
        path = name
    if os.path.isdir(path):
        raise ShellError(format_error(SHELL_NAME, name, "is a directory"), 126)
    binary = path.rpartition("/")[2]
    directory = path[: len(path) - len(binary)]
    if not binary_in_dir(directory, binary):
        raise ShellError(
            format_error(SHELL_NAME, name, "No such file or directory"), state.exit_status
        )
    return path


def resolve_command(state, name):
    """Find the program to run for ``name``.

    Returns the path and the name to pass as ``argv[0]``; a search of
    ``PATH`` lower-cases the name. Raises :class:`ShellError` when nothing
    can be run.
    """
    if _is_path_like(name):
        return _by_path(state, name, None), name
    path_value = state.env.get("PATH")
    if path_value is not None:
        found = find_in_path(name, path_value)
        if found is None:
            raise ShellError(format_error(SHELL_NAME, name, "command not found"), 127)
        return found, _ascii_lower(name)
    return _by_path(state, name, name), name


@contextlib.contextmanager
def open_redirects(redirects):
    """Open the redirection files in order; yield ``(input, output)``.

    The last input and the last output win; either may be None. A file that
    cannot be opened raises :class:`ShellError` with status 1.
    """
    with contextlib.ExitStack() as stack:
        infile = outfile = None
        for redirect in redirects:
            try:
                if redirect.kind is RedirectKind.INPUT:
                    handle = open(redirect.path, "rb")
                    infile = handle
                else:
                    append = redirect.kind is RedirectKind.APPEND
                    flags = os.O_CREAT | os.O_RDWR | (os.O_APPEND if append else os.O_TRUNC)
                    fd = os.open(redirect.path, flags, 0o755)
                    handle = os.fdopen(
                        fd, "a" if append else "w", encoding=_ENCODING, errors=_ERRORS
                    )
                    outfile = handle
            except OSError as err:
                raise ShellError(f"{SHELL_NAME}: {redirect.path}: {err.strerror}", 1) from err
            stack.callback(handle.close)
        yield infile, outfile


def wait_status_to_exit(returncode):
    """Turn a child's return code into a shell status.

    Killed by SIGINT gives 130, by SIGQUIT 131; other signals give None,
    meaning the status is left unchanged.
    """
    if returncode >= 0:
        return returncode
    return _SIGNAL_STATUS.get(-returncode)


def _report(state, err):
    state.stderr.write(err.message + "\n")
    state.stderr.flush()


def _fileno_of(stream):
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _output_target(stream):
    """Return what to hand to the child and whether output must be copied."""
    if stream is None:
        return subprocess.PIPE, False
    stream.flush()
    fd = _fileno_of(stream)
    if fd is not None:
        return fd, False
    return subprocess.PIPE, True


def _pump(pipe, stream):
    data = pipe.read()
    pipe.close()
    stream.write(data.decode(_ENCODING, _ERRORS))
    stream.flush()


def _feed(pipe, data):
    try:
        pipe.write(data)
    except BrokenPipeError:
        pass
    finally:
        with contextlib.suppress(BrokenPipeError):
            pipe.close()


def _child_env(env):
    result = {}
    for var in env:
        if var.has_separator and var.key and "\0" not in var.key + var.value:
            result.setdefault(var.key, var.value)
    return result


def _close_source(source):
    if source is not None and not isinstance(source, bytes):
        source.close()


def _executable(state, path):
    try:
        mode = os.lstat(path).st_mode
    except OSError as err:
        state.stderr.write(f"{err.strerror}\n")
        state.stderr.flush()
        return False
    if mode & stat.S_IXUSR:
        return True
    state.stderr.write(f"turboshell: {path}: Permission denied\n")
    state.stderr.flush()
    return False


def _spawn(state, path, argv, source, sink):
    """Start a program; ``source`` is None, bytes or a file, ``sink`` a stream or None."""
    feed = None
    stdin = None
    if isinstance(source, bytes):
        stdin, feed = subprocess.PIPE, source
    elif source is not None:
        stdin = source
    stdout, copy_out = _output_target(sink)
    stderr, copy_err = _output_target(state.stderr)
    try:
        proc = subprocess.Popen(
            argv,
            executable=path,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            env=_child_env(state.env),
        )
    except OSError:
        return None, []
    finally:
        _close_source(source)
    threads = []
    if feed is not None:
        threads.append(threading.Thread(target=_feed, args=(proc.stdin, feed)))
    if copy_out:
        threads.append(threading.Thread(target=_pump, args=(proc.stdout, sink)))
    if copy_err:
        threads.append(threading.Thread(target=_pump, args=(proc.stderr, state.stderr)))
    for thread in threads:
        thread.start()
    return proc, threads


def _finish(proc, threads):
    if proc is None:
        return 0
    returncode = proc.wait()
    for thread in threads:
        thread.join()
    return wait_status_to_exit(returncode)


def _call_builtin(state, args, in_pipeline, output):
    saved = state.stdout
    if output is not None:
        state.stdout = output
    try:
        if in_pipeline:
            try:
                return run_builtin(state, args, True)
            except ShellExit as stop:
                return stop.status
        return run_builtin(state, args, False)
    finally:
        state.stdout.flush()
        state.stdout = saved


def _run_single(state, command):
    try:
        with open_redirects(command.redirects) as (infile, outfile):
            if not command.args:
                return None
            name = command.args[0]
            if not _is_path_like(name) and is_builtin(name):
                return _call_builtin(state, command.args, False, outfile)
            path, argv0 = resolve_command(state, name)
            if not _executable(state, path):
                return 0
            sink = outfile if outfile is not None else state.stdout
            proc, threads = _spawn(state, path, [argv0, *command.args[1:]], infile, sink)
            return _finish(proc, threads)
    except ShellError as err:
        _report(state, err)
        return err.status


def run_command(state, command):
    """Run one command with its redirections; return the new exit status."""
    status = _run_single(state, command)
    if status is not None:
        state.exit_status = status
    return state.exit_status


def _start_stage(state, command, source, sink):
    """Start one pipeline stage; return a waiter and the data for the next stage."""
    current = state.exit_status
    if not command.args:
        _close_source(source)
        return (lambda: current), b""
    name = command.args[0]
    if not _is_path_like(name) and is_builtin(name):
        _close_source(source)
        buffer = io.StringIO() if sink is None else None
        stage_state = replace(state, env=copy.deepcopy(state.env))
        status = _call_builtin(
            stage_state, command.args, True, buffer if buffer is not None else sink
        )
        downstream = buffer.getvalue().encode(_ENCODING, _ERRORS) if buffer is not None else b""
        return (lambda: status), downstream
    try:
        path, argv0 = resolve_command(state, name)
    except ShellError as err:
        _report(state, err)
        _close_source(source)
        return (lambda: err.status), b""
    if not _executable(state, path):
        _close_source(source)
        return (lambda: 0), b""
    proc, threads = _spawn(state, path, [argv0, *command.args[1:]], source, sink)
    if proc is None:
        return (lambda: 0), b""
    downstream = proc.stdout if sink is None else b""
    return (lambda: _finish(proc, threads)), downstream


def run_pipeline(state, pipeline):
    """Run the commands of ``pipeline`` connected by pipes.

    A single command runs in the shell itself; in a longer pipeline builtins
    work on a copy of the environment and ``exit`` does not leave the shell.
    The status is that of the last command.
    """
    commands = pipeline.commands
    if not commands:
        return state.exit_status
    if len(commands) == 1:
        return run_command(state, commands[0])
    waiters = []
    with contextlib.ExitStack() as stack:
        upstream = None
        for position, command in enumerate(commands):
            last = position == len(commands) - 1
            try:
                infile, outfile = stack.enter_context(open_redirects(command.redirects))
            except ShellError as err:
                _report(state, err)
                _close_source(upstream)
                upstream = b""
                waiters.append(lambda status=err.status: status)
                continue
            source = upstream
            if infile is not None:
                _close_source(upstream)
                source = infile
            if outfile is not None:
                sink = outfile
            elif last:
                sink = state.stdout
            else:
                sink = None
            waiter, downstream = _start_stage(state, command, source, sink)
            upstream = downstream if sink is None else b""
            waiters.append(waiter)
        _close_source(upstream)
        statuses = [wait() for wait in waiters]
    if statuses[-1] is not None:
        state.exit_status = statuses[-1]
    return state.exit_status