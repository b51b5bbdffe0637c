"""The shell's ordered set of environment variables."""

from __future__ import annotations

import os
from typing import Iterable, Iterator, Optional

from .textutil import atoi

DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def _next_shlvl(value: str) -> str:
    try:
        level = atoi(value)
    except OverflowError:
        level = 0 if value.lstrip("\t\n\v\f\r ").startswith("-") else -1
    return str(level + 1)


class Environment:
    """Variables in insertion order; a value of None means exported without one."""

    def __init__(self, pairs: Iterable[tuple[str, Optional[str]]] = ()) -> None:
        self._vars: dict[str, Optional[str]] = {}
        for key, value in pairs:
            self._vars.setdefault(key, value)

    @classmethod
    def from_strings(cls, entries: Iterable[str], cwd: Optional[str] = None) -> "Environment":
        """Build from KEY=VALUE strings, raising SHLVL by one.

        With no entries a minimal default environment is created.
        """
        entries = list(entries or ())
        if not entries:
            if cwd is None:
                cwd = os.getcwd()
            return cls([
                ("OLDPWD", None),
                ("PATH", DEFAULT_PATH),
                ("PWD", cwd),
                ("SHLVL", "1"),
            ])
        pairs = []
        for entry in entries:
            key, sep, value = entry.partition("=")
            parsed: Optional[str] = value if sep else None
            if key == "SHLVL" and parsed is not None:
                parsed = _next_shlvl(parsed)
            pairs.append((key, parsed))
        return cls(pairs)

    def get(self, key: str) -> Optional[str]:
        """Return the value of a variable, or None."""
        return self._vars.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        """Assign a variable, adding it at the end if new."""
        self._vars[key] = value

    def update_existing(self, key: str, value: Optional[str]) -> bool:
        """Update a variable that already exists; a None value leaves it as is.

        Returns whether the variable existed.
        """
        if key not in self._vars:
            return False
        if value is not None:
            self._vars[key] = value
        return True

    def unset(self, key: str) -> None:
        """Remove a variable if present."""
        self._vars.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[tuple[str, Optional[str]]]:
        return iter(list(self._vars.items()))

    def __len__(self) -> int:
        return len(self._vars)

    def to_envp(self) -> list[str]:
        """KEY=VALUE strings for every variable that has a value."""
        return [f"{key}={value}" for key, value in self._vars.items() if value is not None]