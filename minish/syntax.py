"""Up-front syntax check of an input line."""

from __future__ import annotations

from typing import Optional

from .textutil import is_space

_OPERATORS = "|<>"


class SyntaxCheckError(ValueError):
    """The line is malformed; the shell reports it and sets status 2."""

    status = 2

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _has_open_quote(line: str) -> bool:
    single = double = False
    for ch in line:
        if ch == "'" and not double:
            single = not single
        elif ch == '"' and not single:
            double = not double
    return single or double


def _skip_spaces(line: str, i: int) -> int:
    while i < len(line) and is_space(line[i]):
        i += 1
    return i


def check_syntax(line: Optional[str]) -> None:
    """Raise SyntaxCheckError for unbalanced quotes or misplaced operators."""
    if line is None or _has_open_quote(line):
        raise SyntaxCheckError("bad quote")
    n = len(line)
    start = _skip_spaces(line, 0)
    if start < n and line[start] == "|":
        raise SyntaxCheckError("bad pipe")
    i = 0
    while i < n:
        ch = line[i]
        if ch in "'\"":
            close = line.find(ch, i + 1)
            i = n if close < 0 else close
        elif ch in _OPERATORS:
            end = i
            while end < n and line[end] == ch:
                end += 1
            count = end - i
            if (ch == "|" and count > 1) or count > 2:
                raise SyntaxCheckError("bad op")
            end = _skip_spaces(line, end)
            if end >= n or line[end] in _OPERATORS:
                raise SyntaxCheckError("bad arg")
            i = end - 1
        i += 1