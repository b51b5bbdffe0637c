"""Running commands: builtins inside the shell, everything else as child processes."""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
import sys
from typing import Iterable, Iterator, Optional, Sequence, TextIO

from .builtins import ShellExit, is_builtin, run_builtin
from .env import Environment
from .parser import STDIN_FD, STDOUT_FD, Command
from .status import ShellStatus
from .textutil import split_on

_SHELL = "/bin/sh"


def find_command_path(command: str, env: Environment) -> Optional[str]:
    """Locate a command: names with a slash are used as given, others searched in PATH."""
    if "/" in command:
        return command
    path = env.get("PATH")
    if path is None:
        return None
    for directory in split_on(path, ":"):
        candidate = f"{directory}/{command}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def is_script_file(path: str) -> bool:
    """True for a readable file that does not start with '#!'.

    Such files are handed to /bin/sh when they cannot be executed directly.
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return False
    try:
        try:
            head = os.read(fd, 2)
        except OSError:
            head = b""
    finally:
        os.close(fd)
    return len(head) < 2 or head != b"#!"


def status_from_returncode(returncode: int) -> Optional[int]:
    """Exit status for a child's return code.

    A negative code means the child died from a signal: SIGINT gives 130,
    SIGQUIT gives 131 and any other signal leaves the status alone (None).
    """
    if returncode >= 0:
        return returncode
    signum = -returncode
    if signum == signal.SIGINT:
        return 130
    if signum == signal.SIGQUIT:
        return 131
    return None


def _report_signal(returncode: int) -> None:
    if returncode == -signal.SIGINT:
        sys.stdout.write("\n")
    elif returncode == -signal.SIGQUIT:
        sys.stdout.write("Quit (core dumped)\n")
    sys.stdout.flush()


def _report_exec_error(exc: OSError) -> None:
    sys.stderr.write(f"minishell: {exc.strerror}\n")


def _report_not_found(name: str) -> None:
    sys.stderr.write(f"minishell: command not found: {name}\n")


def _flush_std() -> None:
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(Exception):
            stream.flush()


def _default_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


@contextlib.contextmanager
def _ignoring_signals() -> Iterator[None]:
    saved = {}
    try:
        for signum in (signal.SIGINT, signal.SIGQUIT):
            saved[signum] = signal.signal(signum, signal.SIG_IGN)
    except ValueError:
        # Handlers can only be changed from the main thread.
        pass
    try:
        yield
    finally:
        for signum, handler in saved.items():
            if handler is not None:
                signal.signal(signum, handler)


def _env_mapping(env: Environment) -> dict[str, str]:
    return {key: value for key, value in env if value is not None}


def _spawn(argv: list[str], executable: str, mapping: dict[str, str]) -> subprocess.Popen:
    return subprocess.Popen(
        argv,
        executable=executable,
        env=mapping,
        preexec_fn=_default_signals,
    )


def run_external(args: Sequence[str], env: Environment, status: ShellStatus) -> int:
    """Run a program as a child process, wait for it and record its status."""
    name = args[0]
    path = find_command_path(name, env)
    if path is None:
        _report_not_found(name)
        return status.record(127)
    mapping = _env_mapping(env)
    _flush_std()
    try:
        process = _spawn(list(args), path, mapping)
    except OSError as exc:
        if not is_script_file(path):
            _report_exec_error(exc)
            return status.record(126)
        try:
            process = _spawn([_SHELL, path], _SHELL, mapping)
        except OSError as shell_exc:
            _report_exec_error(shell_exc)
            return status.record(126)
    with _ignoring_signals():
        returncode = process.wait()
    _report_signal(returncode)
    code = status_from_returncode(returncode)
    if code is not None:
        status.record(code)
    return status.code


@contextlib.contextmanager
def _builtin_output(redirected: bool) -> Iterator[Optional[TextIO]]:
    if not redirected:
        yield None
        return
    with open(STDOUT_FD, "w", encoding="utf-8", closefd=False) as stream:
        yield stream


def run_command(command: Command, env: Environment, status: ShellStatus) -> int:
    """Run a single command with its redirections applied to the shell's own streams."""
    if not command.args or command.redirect_failed:
        command.close()
        return status.code
    _flush_std()
    saved_in = os.dup(STDIN_FD)
    saved_out = os.dup(STDOUT_FD)
    redirected = command.output_fd != STDOUT_FD
    try:
        if command.input_fd != STDIN_FD:
            os.dup2(command.input_fd, STDIN_FD)
        if redirected:
            os.dup2(command.output_fd, STDOUT_FD)
        command.close()
        if is_builtin(command.name):
            with _builtin_output(redirected) as out:
                run_builtin(command.args, env, status, out)
            return status.code
        return run_external(command.args, env, status)
    finally:
        _flush_std()
        os.dup2(saved_in, STDIN_FD)
        os.dup2(saved_out, STDOUT_FD)
        os.close(saved_in)
        os.close(saved_out)


def _connect_pipes(commands: list[Command]) -> None:
    for current, following in zip(commands, commands[1:]):
        read_end, write_end = os.pipe()
        if current.output_fd == STDOUT_FD:
            current.output_fd = write_end
        else:
            os.close(write_end)
        if following.input_fd == STDIN_FD:
            following.input_fd = read_end
        else:
            os.close(read_end)


def _exec_external(args: Sequence[str], env: Environment) -> int:
    """Replace the process with the program; return an exit code only on failure."""
    path = find_command_path(args[0], env)
    if path is None:
        _report_not_found(args[0])
        return 127
    mapping = _env_mapping(env)
    _default_signals()
    try:
        os.execve(path, list(args), mapping)
    except OSError as exc:
        if not is_script_file(path):
            _report_exec_error(exc)
            return 126
    try:
        os.execve(_SHELL, [_SHELL, path], mapping)
    except OSError as exc:
        _report_exec_error(exc)
    return 126


def _child_body(
    commands: list[Command], current: Command, env: Environment, status: ShellStatus
) -> int:
    if current.redirect_failed:
        return 1
    if current.input_fd != STDIN_FD:
        os.dup2(current.input_fd, STDIN_FD)
    if current.output_fd != STDOUT_FD:
        os.dup2(current.output_fd, STDOUT_FD)
    for command in commands:
        command.close()
    if not current.args:
        return 1
    if is_builtin(current.name):
        with open(STDOUT_FD, "w", encoding="utf-8", closefd=False) as out:
            run_builtin(current.args, env, status, out)
        return status.code
    return _exec_external(current.args, env)


def _run_child(
    commands: list[Command], current: Command, env: Environment, status: ShellStatus
) -> None:
    code = 1
    try:
        code = _child_body(commands, current, env, status)
    except ShellExit as exc:
        code = exc.code
    except BaseException:
        code = 1
    finally:
        _flush_std()
        os._exit(code)


def run_pipeline(commands: Iterable[Command], env: Environment, status: ShellStatus) -> int:
    """Run commands joined by pipes, each in its own process.

    The status of the last command is recorded when it exits normally.
    Builtins run in their child and do not change the shell itself.
    """
    commands = list(commands)
    if not commands:
        return status.code
    _connect_pipes(commands)
    _flush_std()
    pids: list[int] = []
    try:
        for command in commands:
            pid = os.fork()
            if pid == 0:
                _run_child(commands, command, env, status)
            pids.append(pid)
    finally:
        for command in commands:
            command.close()
    with _ignoring_signals():
        for index, pid in enumerate(pids):
            _, wait_status = os.waitpid(pid, 0)
            if index == len(pids) - 1 and os.WIFEXITED(wait_status):
                status.record(os.WEXITSTATUS(wait_status))
    return status.code