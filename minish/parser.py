"""Turning expanded tokens into commands with their redirections."""

from __future__ import annotations

import contextlib
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .env import Environment
from .heredoc import HeredocInterrupted, open_heredoc
from .lexer import Token, TokenType
from .status import ShellStatus

STDIN_FD = 0
STDOUT_FD = 1

ReadLine = Callable[[str], Optional[str]]

_FILE_FLAGS = {
    TokenType.REDIRECT_IN: os.O_RDONLY,
    TokenType.REDIRECT_OUT: os.O_CREAT | os.O_WRONLY | os.O_TRUNC,
    TokenType.APPEND: os.O_CREAT | os.O_WRONLY | os.O_APPEND,
}


def _read_line(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def _close_fd(fd: int) -> None:
    with contextlib.suppress(OSError):
        os.close(fd)


@dataclass
class Command:
    """One command of a pipeline: its words and where its input and output go."""

    args: list[str] = field(default_factory=list)
    input_fd: int = STDIN_FD
    output_fd: int = STDOUT_FD
    redirect_failed: bool = False

    @property
    def name(self) -> Optional[str]:
        """The command word, or None when the command has no words."""
        return self.args[0] if self.args else None

    def set_input(self, fd: int) -> None:
        """Replace the input descriptor, closing a previously opened one."""
        if self.input_fd != STDIN_FD:
            _close_fd(self.input_fd)
        self.input_fd = fd

    def set_output(self, fd: int) -> None:
        """Replace the output descriptor, closing a previously opened one."""
        if self.output_fd != STDOUT_FD:
            _close_fd(self.output_fd)
        self.output_fd = fd

    def close(self) -> None:
        """Close redirection descriptors and fall back to the standard streams."""
        if self.input_fd != STDIN_FD:
            _close_fd(self.input_fd)
            self.input_fd = STDIN_FD
        if self.output_fd != STDOUT_FD:
            _close_fd(self.output_fd)
            self.output_fd = STDOUT_FD


def _open_file(path: str, flags: int) -> Optional[int]:
    try:
        return os.open(path, flags, 0o644)
    except OSError as exc:
        sys.stderr.write(f"minishell: {exc.strerror}\n")
        return None


def _redirect_file(token: Token, target: Token, command: Command, status: ShellStatus) -> bool:
    fd = _open_file(target.value, _FILE_FLAGS[token.kind])
    if fd is None:
        command.redirect_failed = True
        status.record(1)
        return False
    if token.kind is TokenType.REDIRECT_IN:
        command.set_input(fd)
    else:
        command.set_output(fd)
    target.removed = True
    return True


def _redirect_heredoc(
    token: Token,
    key: Token,
    command: Command,
    env: Environment,
    status: ShellStatus,
    read_line: ReadLine,
) -> bool:
    try:
        fd, path = open_heredoc(key.value, env, status.code, read_line)
    except HeredocInterrupted:
        status.record(130)
        raise
    except OSError:
        status.record(130)
        command.redirect_failed = True
        return False
    # The open descriptor keeps the contents readable after the name is gone.
    with contextlib.suppress(OSError):
        os.unlink(path)
    token.fd = fd
    token.value = path
    command.set_input(fd)
    key.removed = True
    return True


def _apply_redirections(
    segment: list[Token],
    command: Command,
    env: Environment,
    status: ShellStatus,
    read_line: ReadLine,
) -> None:
    following: list[Optional[Token]] = [*segment[1:], None]
    for token, target in zip(segment, following):
        if token.kind in _FILE_FLAGS:
            if target is not None and target.kind is TokenType.REDIRECT_FILE:
                if not _redirect_file(token, target, command, status):
                    return
            token.removed = True
        elif token.kind is TokenType.HEREDOC:
            if target is not None and target.kind is TokenType.HEREDOC_KEY:
                if not _redirect_heredoc(token, target, command, env, status, read_line):
                    return
            token.removed = True


def _segments(tokens: list[Token]) -> list[list[Token]]:
    if not tokens:
        return []
    segments: list[list[Token]] = [[]]
    for token in tokens:
        if token.kind is TokenType.PIPE:
            segments.append([])
        else:
            segments[-1].append(token)
    if tokens[-1].kind is TokenType.PIPE:
        segments.pop()
    return segments


def parse_commands(
    tokens: Iterable[Token],
    env: Environment,
    status: ShellStatus,
    read_line: Optional[ReadLine] = None,
) -> list[Command]:
    """Group tokens into commands separated by pipes, opening their redirections.

    A redirection that cannot be opened marks its command as failed and
    sets status 1. An interrupted here-document closes everything opened so
    far, sets status 130 and raises HeredocInterrupted.
    """
    reader = read_line or _read_line
    commands: list[Command] = []
    for segment in _segments(list(tokens)):
        command = Command()
        try:
            _apply_redirections(segment, command, env, status, reader)
        except HeredocInterrupted:
            command.close()
            for done in commands:
                done.close()
            raise
        command.args = [
            token.value
            for token in segment
            if token.kind is TokenType.WORD and not token.removed
        ]
        commands.append(command)
    return commands