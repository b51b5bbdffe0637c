"""Reading here-documents into temporary files."""

from __future__ import annotations

import contextlib
import itertools
import os
import sys
import tempfile
from typing import Callable, Optional

from .env import Environment
from .expansion import expand_heredoc_line

ReadLine = Callable[[str], Optional[str]]

_counter = itertools.count()


class HeredocInterrupted(Exception):
    """Input of a here-document was interrupted; the shell sets status 130."""

    status = 130


def process_delimiter(delimiter: Optional[str]) -> Optional[str]:
    """Remove quoting from a delimiter, keeping quotes nested inside the other kind."""
    if delimiter is None:
        return None
    parts: list[str] = []
    in_single = in_double = False
    for ch in delimiter:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        else:
            parts.append(ch)
    return "".join(parts)


def should_expand(delimiter: Optional[str]) -> bool:
    """Lines are expanded unless the delimiter contains a quote."""
    if delimiter is None:
        return True
    return "'" not in delimiter and '"' not in delimiter


def next_temp_filename() -> str:
    """A fresh path for the next here-document's temporary file."""
    return os.path.join(tempfile.gettempdir(), f"minishell_heredoc_{next(_counter)}.tmp")


def _warn_end_of_file(wanted: Optional[str]) -> None:
    sys.stderr.write(
        "minishell: warning: here-document delimited by end-of-file "
        f"(wanted `{wanted or ''}')\n"
    )


def write_heredoc(
    path: str,
    delimiter: Optional[str],
    env: Environment,
    last_status: int,
    read_line: ReadLine,
) -> None:
    """Read lines until the delimiter and write them to path.

    read_line is called with the prompt and returns a line, or None at end
    of input. A KeyboardInterrupt while reading removes the file and raises
    HeredocInterrupted.
    """
    wanted = process_delimiter(delimiter)
    expand = should_expand(delimiter)
    try:
        with open(path, "w", encoding="utf-8") as handle:
            while True:
                line = read_line("> ")
                if line is None:
                    _warn_end_of_file(wanted)
                    break
                if line == wanted:
                    break
                if expand:
                    line = expand_heredoc_line(line, env, last_status)
                handle.write(f"{line}\n")
    except KeyboardInterrupt:
        sys.stdout.write("\n")
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)
        raise HeredocInterrupted(delimiter) from None


def open_heredoc(
    delimiter: Optional[str],
    env: Environment,
    last_status: int,
    read_line: ReadLine,
) -> tuple[int, str]:
    """Collect a here-document and return a read descriptor for it and its path."""
    path = next_temp_filename()
    write_heredoc(path, delimiter, env, last_status, read_line)
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)
        raise
    return fd, path