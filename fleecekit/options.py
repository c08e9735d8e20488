"""Command-line option lookup by argument prefix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Options:
    """A stored copy of command-line arguments."""

    argv: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "argv", tuple(self.argv))

    def get(self, prefix: str) -> str | None:
        """Return the rest of the first argument starting with ``prefix``, or None."""
        for arg in self.argv:
            if arg.startswith(prefix):
                return arg[len(prefix):]
        return None


# Holds at most one parsed Options instance.
_active: list[Options] = []


def parse(argv: Iterable[str]) -> Options:
    """Store a global copy of the arguments for later :func:`get` calls."""
    if _active:
        raise RuntimeError("options have already been parsed")
    options = Options(tuple(argv))
    _active.append(options)
    return options


def get(prefix: str) -> str | None:
    """Look up an argument in the globally parsed options."""
    if not _active:
        raise RuntimeError("options must be parsed before use")
    return _active[0].get(prefix)


def destroy() -> None:
    """Forget the globally parsed options."""
    _active.clear()