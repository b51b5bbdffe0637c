"""The interactive read-evaluate loop of the shell."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from typing import Callable, Iterable, Iterator, Optional, Sequence

from .builtins import ShellExit
from .env import Environment
from .executor import run_command, run_pipeline
from .expansion import expand_tokens
from .heredoc import HeredocInterrupted
from .lexer import tokenize
from .parser import parse_commands
from .status import ShellStatus
from .syntax import SyntaxCheckError, check_syntax

PROMPT = "minishell> "

ReadLine = Callable[[str], Optional[str]]


def _read_line(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


@contextlib.contextmanager
def _prompt_signals() -> Iterator[None]:
    try:
        previous = signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    except ValueError:
        # Not the main thread: leave signal handling as it is.
        yield
        return
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGQUIT, previous)


class Shell:
    """A shell session: its variables, the last exit status and where input comes from."""

    def __init__(
        self,
        environ: Optional[Iterable[str]] = None,
        read_line: Optional[ReadLine] = None,
    ) -> None:
        if environ is None:
            entries = [f"{key}={value}" for key, value in os.environ.items()]
        else:
            entries = list(environ)
        self.env = Environment.from_strings(entries)
        self.status = ShellStatus()
        self._read_line = read_line or _read_line

    def run_line(self, line: str) -> int:
        """Check, expand, parse and run one input line; return the exit status.

        ShellExit from the exit builtin is passed on to the caller.
        """
        try:
            check_syntax(line)
        except SyntaxCheckError as exc:
            sys.stderr.write(exc.message + "\n")
            return self.status.record(exc.status)
        tokens = tokenize(line)
        if not tokens:
            return self.status.code
        tokens = expand_tokens(tokens, self.env, self.status.code)
        try:
            commands = parse_commands(tokens, self.env, self.status, self._read_line)
        except HeredocInterrupted:
            return self.status.code
        if not commands:
            return self.status.code
        if len(commands) == 1 and commands[0].args:
            return run_command(commands[0], self.env, self.status)
        return run_pipeline(commands, self.env, self.status)

    def _interrupted(self) -> None:
        sys.stdout.write("\n")
        sys.stdout.flush()
        self.status.record(130)

    def loop(self) -> int:
        """Read and run lines until end of input or exit; return the exit code."""
        with _prompt_signals():
            while True:
                try:
                    line = self._read_line(PROMPT)
                except KeyboardInterrupt:
                    self._interrupted()
                    continue
                if line is None:
                    sys.stdout.write("exit\n")
                    sys.stdout.flush()
                    return self.status.code
                try:
                    self.run_line(line)
                except ShellExit as exc:
                    return exc.code
                except KeyboardInterrupt:
                    self._interrupted()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start an interactive session on a terminal."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        sys.stderr.write("minishell: no arguments please\n")
        return 127
    if not sys.stdin.isatty():
        sys.stderr.write("minishell: use terminal please\n")
        return 1
    with contextlib.suppress(ImportError):
        import readline  # noqa: F401  line editing and history for input()
    return Shell().loop()