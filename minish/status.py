"""Exit status bookkeeping for the shell."""

from __future__ import annotations

from dataclasses import dataclass


def normalize_status(code: int) -> int:
    """Fold an exit code into the range a process can report."""
    if code < 0:
        code = 256 + code
    if code > 255:
        code %= 256
    return code


@dataclass
class ShellStatus:
    """The exit status of the last command run by the shell."""

    code: int = 0

    def record(self, code: int) -> int:
        """Store a new exit status and return the normalized value."""
        self.code = normalize_status(code)
        return self.code