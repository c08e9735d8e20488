"""Immediate values from decoded text, matched against instruction bits."""

from __future__ import annotations

from fleecekit.stringutils import get_buffer_bit

BIT_TYPE_STRUCTURAL = -3
BIT_TYPE_RESERVED = -2
BIT_TYPE_UNUSED = -1

_U64_MAX = (1 << 64) - 1
_C_SPACE = " \t\n\v\f\r"
_DEC_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"


def _strtoull(text: str, base: int) -> tuple[int, int]:
    """Parse like C ``strtoull``: return the value and the number of characters used."""
    pos = len(text) - len(text.lstrip(_C_SPACE))
    negative = False
    if text[pos:pos + 1] in ("+", "-"):
        negative = text[pos] == "-"
        pos += 1
    digits = _DEC_DIGITS if base == 10 else _HEX_DIGITS
    if base == 16 and text[pos:pos + 2] in ("0x", "0X"):
        following = text[pos + 2:pos + 3]
        if following and following in digits:
            pos += 2
    start = pos
    while pos < len(text) and text[pos] in digits:
        pos += 1
    if pos == start:
        return 0, 0
    value = int(text[start:pos], base)
    if value > _U64_MAX:
        return _U64_MAX, pos
    if negative:
        value = -value & _U64_MAX
    return value, pos


def _val_bit(value: int, shift: int) -> bool:
    return bool(value & (1 << shift))


def _buf_bit(buf: bytes | bytearray, bit: int) -> bool | None:
    if bit // 8 >= len(buf):
        return None
    return bool(get_buffer_bit(buf, bit))


def value_match_length(value: int, buf: bytes | bytearray, which_bit: int, n_bits: int) -> int:
    """Number of bits of ``buf`` from ``which_bit`` that encode ``value``, or 0.

    The value is matched most significant bit first; failing that, byte by
    byte with the lowest byte first.
    """
    value &= _U64_MAX
    top_is_one = _val_bit(value, 63)

    first_flip = 62
    while first_flip > 0 and _val_bit(value, first_flip) == top_is_one:
        first_flip -= 1

    matched = 0
    while which_bit + matched < n_bits and _buf_bit(buf, which_bit + matched) == top_is_one:
        matched += 1

    shift = first_flip
    while (
        which_bit + matched < n_bits
        and shift >= 0
        and _buf_bit(buf, which_bit + matched) == _val_bit(value, shift)
    ):
        matched += 1
        shift -= 1

    if shift == -1:
        return matched

    matched = 0
    byte = 0
    while byte < n_bits - which_bit and 8 * byte < first_flip:
        for j in range(7, -1, -1):
            if _buf_bit(buf, which_bit + matched) == _val_bit(value, 8 * byte + j):
                matched += 1
            else:
                return 0
        byte += 1
    return matched


class Bitfield:
    """The possible encodings of an immediate value shown in decoded text."""

    def __init__(self, values: tuple[int, ...] = ()) -> None:
        self._values = list(values)

    @property
    def values(self) -> tuple[int, ...]:
        """All possible encoding values."""
        return tuple(self._values)

    def _add_possible_encoding_value(self, value: int) -> None:
        self._values.append(value & _U64_MAX)

    @classmethod
    def create(cls, text: str) -> Bitfield | None:
        """Build a bitfield from decimal or hex text, or return None if it is neither."""
        value, used = _strtoull(text, 10)
        if used != len(text):
            value, used = _strtoull(text, 16)
            if used != len(text):
                return None
        bitfield = cls()
        bitfield._add_possible_encoding_value(value)
        return bitfield

    def matches(self, buf: bytes | bytearray, which_bit: int, n_bits: int) -> int:
        """Number of bits of ``buf`` that match one of the values, or 0 for none."""
        for value in self._values:
            length = value_match_length(value, buf, which_bit, n_bits)
            if length:
                return length
        return 0