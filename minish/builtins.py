"""Commands the shell runs itself."""

from __future__ import annotations

import math
import os
import sys
from typing import Optional, Sequence, TextIO

from .env import Environment
from .status import ShellStatus, normalize_status
from .textutil import atoi, is_valid_identifier

BUILTIN_NAMES = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})

_DIGITS = "0123456789"


class ShellExit(Exception):
    """Raised by the exit builtin; the shell ends with the given code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def _stream(out: Optional[TextIO]) -> TextIO:
    return out if out is not None else sys.stdout


def _error(message: str) -> None:
    sys.stderr.write(f"minishell: {message}\n")


def is_builtin(name: Optional[str]) -> bool:
    """True when the name is one of the shell's own commands."""
    return name in BUILTIN_NAMES


def _is_n_flag(arg: str) -> bool:
    return arg.startswith("-") and all(ch == "n" for ch in arg[1:])


def echo(args: Sequence[str], out: Optional[TextIO] = None) -> int:
    """Print the arguments separated by spaces; leading -n flags drop the newline."""
    words = list(args[1:])
    newline = True
    while words and _is_n_flag(words[0]):
        newline = False
        words.pop(0)
    text = " ".join(words)
    _stream(out).write(text + "\n" if newline else text)
    return 0


def _current_directory() -> Optional[str]:
    try:
        return os.getcwd()
    except OSError:
        return None


def _target_directory(args: Sequence[str], env: Environment) -> Optional[str]:
    if len(args) < 2 or args[1] == "~":
        return env.get("HOME")
    if args[1] == "-":
        return env.get("OLDPWD")
    return args[1]


def cd(args: Sequence[str], env: Environment) -> int:
    """Change directory, updating PWD and OLDPWD where they exist."""
    target = _target_directory(args, env)
    old_pwd = _current_directory()
    if target is None:
        named = args[1] if len(args) > 1 else ""
        _error(f"cd: {named}: No such file or directory")
        return 1
    try:
        os.chdir(target)
    except OSError as exc:
        _error(f"cd: {exc.strerror}")
        return 1
    new_pwd = _current_directory()
    for key, value in (("OLDPWD", old_pwd), ("PWD", new_pwd)):
        if key in env:
            env.set(key, value)
    return 0


def pwd(out: Optional[TextIO] = None) -> int:
    """Print the current directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _error(f"pwd: {exc.strerror}")
        return 1
    _stream(out).write(cwd + "\n")
    return 0


def export(args: Sequence[str], env: Environment, out: Optional[TextIO] = None) -> Optional[int]:
    """Set variables from NAME[=VALUE] arguments, or list them all.

    Listing leaves the exit status untouched and returns None.
    """
    if len(args) < 2:
        stream = _stream(out)
        for key, value in env:
            if value is None:
                stream.write(f"declare -x {key}\n")
            else:
                stream.write(f'declare -x {key}="{value}"\n')
        return None
    failed = 0
    for arg in args[1:]:
        key, sep, rest = arg.partition("=")
        value: Optional[str] = rest if sep else None
        if not is_valid_identifier(key):
            _error(f"export: `{arg}': not a valid identifier")
            failed = 1
        elif not env.update_existing(key, value):
            env.set(key, value)
    return failed


def unset(args: Sequence[str], env: Environment) -> int:
    """Remove the named variables; invalid names are reported."""
    for arg in args[1:]:
        if is_valid_identifier(arg):
            env.unset(arg)
        else:
            _error(f"unset: `{arg}': not a valid identifier")
    return 0


def env_command(env: Environment, out: Optional[TextIO] = None) -> None:
    """Print every variable that has a value; the exit status is left as is."""
    stream = _stream(out)
    for key, value in env:
        if value is not None:
            stream.write(f"{key}={value}\n")


def _is_numeric(text: str) -> bool:
    if not text:
        return False
    body = text[1:] if text[0] in "+-" else text
    return all(ch in _DIGITS for ch in body)


def _exit_code(arg: str) -> int:
    trimmed = arg.strip(" ")
    try:
        code = atoi(trimmed)
    except OverflowError:
        code = None
    if code is None or not _is_numeric(trimmed):
        _error(f"exit: {arg}: numeric argument required")
        return 2
    return int(math.fmod(code, 256))


def exit_command(args: Sequence[str], status: ShellStatus, out: Optional[TextIO] = None) -> int:
    """Leave the shell by raising ShellExit.

    With too many arguments nothing is left and 1 is returned instead.
    """
    _stream(out).write("exit\n")
    if len(args) < 2:
        raise ShellExit(status.code)
    code = _exit_code(args[1])
    status.record(2)
    if code == 2:
        raise ShellExit(2)
    if len(args) > 2:
        _error("exit: too many arguments")
        return status.record(1)
    raise ShellExit(status.record(normalize_status(code)))


def run_builtin(
    args: Sequence[str],
    env: Environment,
    status: ShellStatus,
    out: Optional[TextIO] = None,
) -> int:
    """Run a builtin command and record its exit status; return the status."""
    name = args[0] if args else None
    result: Optional[int]
    if name == "echo":
        result = echo(args, out)
    elif name == "cd":
        result = cd(args, env)
    elif name == "pwd":
        result = pwd(out)
    elif name == "export":
        result = export(args, env, out)
    elif name == "unset":
        result = unset(args, env)
    elif name == "env":
        env_command(env, out)
        result = None
    elif name == "exit":
        result = exit_command(args, status, out)
    else:
        raise ValueError(f"not a builtin: {name!r}")
    if result is not None:
        status.record(result)
    return status.code