"""Locate many substrings in a buffer in a single pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

Buffer = Union[bytes, bytearray, memoryview]
Callback = Callable[[Buffer, int, Any], None]


@dataclass(frozen=True)
class _Term:
    func: Callback
    arg: Any


class FindList:
    """A set of terms, each with a callback run wherever the term occurs in a buffer.

    The buffer is scanned once from left to right; callbacks may modify a
    mutable buffer, and changes ahead of the current position are seen by
    the rest of the scan.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("a FindList needs room for at least one term")
        self.size = size
        self._terms: dict[bytes, _Term] = {}
        self._min_len = 0
        self._max_len = 0

    def __len__(self) -> int:
        return len(self._terms)

    def add_term(self, value: str | bytes, func: Callback, arg: Any = None) -> None:
        """Register ``func(buf, position, arg)`` to run wherever ``value`` is found."""
        key = value.encode("latin-1") if isinstance(value, str) else bytes(value)
        if not key:
            raise ValueError("search terms must not be empty")
        if key in self._terms:
            raise ValueError(f"duplicate search term: {key!r}")
        if len(self._terms) >= self.size:
            raise ValueError("FindList is full")
        if not self._terms or len(key) < self._min_len:
            self._min_len = len(key)
        self._max_len = max(self._max_len, len(key))
        self._terms[key] = _Term(func, arg)

    def process(self, buf: Buffer) -> None:
        """Scan ``buf`` and run the callback of every term found in it."""
        if not self._terms:
            return
        lo, hi = self._min_len, self._max_len
        base = 0
        while base + lo <= len(buf):
            length = lo
            while length <= hi and base + length <= len(buf):
                term = self._terms.get(bytes(buf[base:base + length]))
                if term is not None:
                    term.func(buf, base, term.arg)
                length += 1
            base += 1