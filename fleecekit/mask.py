"""Bit masks that set, clear and count through bits of a byte buffer."""

from __future__ import annotations

from .stringutils import get_buffer_bit, set_buffer_bit

SET_BIT = "1"
CLEAR_BIT = "0"
INCREMENT_BIT = "n"


def _partial_mask(pattern: str, length: int, symbol: str) -> bytes:
    mask = bytearray(length)
    for bit, ch in enumerate(pattern[: 8 * length]):
        if ch == symbol:
            mask[bit // 8] |= 0x80 >> (bit % 8)
    return bytes(mask)


class Mask:
    """A mask built from a pattern string, one character per bit.

    ``'1'`` sets a bit, ``'0'`` clears it, ``'n'`` takes one bit of the
    current increment value (lowest bits at the rightmost ``'n'``), and any
    other character leaves the bit unchanged.
    """

    def __init__(self, pattern: str) -> None:
        if not pattern:
            raise ValueError("a mask pattern must not be empty")
        self.pattern = pattern
        self._length = (len(pattern) + 7) // 8
        self._set = _partial_mask(pattern, self._length, SET_BIT)
        self._clear = _partial_mask(pattern, self._length, CLEAR_BIT)
        self._inc = _partial_mask(pattern, self._length, INCREMENT_BIT)
        self._value = 0

    def __len__(self) -> int:
        return self._length

    def increment(self) -> None:
        """Advance the increment value, wrapping to zero past its maximum."""
        self._value = (self._value + 1) % (1 << (8 * self._length))

    def apply(self, buf: bytearray) -> None:
        """Apply the mask in place to the start of ``buf``."""
        if len(buf) < self._length:
            raise ValueError(
                f"buffer of {len(buf)} bytes is shorter than the mask ({self._length} bytes)"
            )
        for i, (set_byte, clear_byte) in enumerate(zip(self._set, self._clear)):
            buf[i] = (buf[i] | set_byte) & ~clear_byte & 0xFF

        value_bit = 0
        for bit in reversed(range(8 * self._length)):
            if get_buffer_bit(self._inc, bit):
                set_buffer_bit(buf, bit, (self._value >> value_bit) & 1)
                value_bit += 1