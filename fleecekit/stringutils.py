"""Helpers for decoder output tokens, bit buffers and assembler messages."""

from __future__ import annotations

import random

MAX_ERROR_FILENAME_LENGTH = 32

_ERROR_TOKENS = frozenset(
    {
        "llvm_decoding_error",
        "empty_decoding",
        "decoding_error",
        "no_entry",
        "No_Entry",
        "<invalid_reg>",
        "<INVALID_REG>",
        "nop",
        "bad",
        "?",
        "%,",
        "%(",
        "%{",
        "fixme",
        "undefined",
        "nyi",
        "invalid",
        ".long",
        "long",
        ".byte",
        "%?",
        "would_sig",
        "nop/reserved",
    }
)

_WHITESPACE = frozenset(" \t\n\v\f\r")
_END_CHARS = frozenset("[]{}\\/;:`'\"\n()")
_QUOTES = ("`", "'")


def signals_error(token: str | None) -> bool:
    """Return True if the token suggests a decoder failed to decode an instruction."""
    if not token:
        return False
    return token in _ERROR_TOKENS


def remove_operand(text: str, op: str, operand: str) -> str:
    """Remove the first ``operand`` (and a following ", ") if ``op`` occurs in ``text``."""
    if op not in text:
        return text
    pos = text.find(operand)
    if pos < 0:
        return text
    text = text[:pos] + text[pos + len(operand):]
    if pos < len(text) and text[pos] == ",":
        text = text[:pos] + text[pos + 2:]
    return text


def remove_at_substr(text: str, substr: str, length: int) -> str:
    """Remove ``length`` characters starting at the first occurrence of ``substr``."""
    index = text.find(substr)
    if index < 0:
        return text
    if length < 0:
        return text[:index]
    return text[:index] + text[index + length:]


def randomize_buffer(buf: bytearray) -> None:
    """Fill a mutable buffer in place with random bytes."""
    for i in range(len(buf)):
        buf[i] = random.getrandbits(8)


def _bit_mask(bit: int) -> int:
    return 0x80 >> (bit % 8)


def flip_buffer_bit(buf: bytearray, bit: int) -> None:
    """Invert one bit of the buffer, treating it as a most-significant-first bit array."""
    buf[bit // 8] ^= _bit_mask(bit)


def set_buffer_bit(buf: bytearray, bit: int, val: int) -> None:
    """Set one bit of the buffer to the lowest bit of ``val``."""
    if val & 1:
        buf[bit // 8] |= _bit_mask(bit)
    else:
        buf[bit // 8] &= ~_bit_mask(bit) & 0xFF


def get_buffer_bit(buf: bytes | bytearray, bit: int) -> int:
    """Return the value (0 or 1) of one bit of the buffer."""
    byte = buf[bit // 8]
    shift = 7 - bit % 8
    return (byte >> shift) & 1


def remove_character(text: str, char: str) -> str:
    """Return ``text`` with every occurrence of ``char`` removed."""
    return text.replace(char, "")


def asm_error_to_filename(asm_error: str) -> str:
    """Sanitize and truncate an assembler error message into a file name."""
    size = len(asm_error)

    def at(i: int) -> str:
        return asm_error[i] if i < size else ""

    cur = 0
    while at(cur) in _WHITESPACE:
        cur += 1

    out: list[str] = []
    while cur < size and len(out) < MAX_ERROR_FILENAME_LENGTH:
        if at(cur) in _QUOTES:
            cur += 1
            while cur < size and at(cur) not in _QUOTES:
                cur += 1
            if at(cur) == "'":
                cur += 1
            if at(cur) in _WHITESPACE:
                cur += 1

        if at(cur) == "0" and at(cur + 1) == "x":
            while cur < size and at(cur) not in _WHITESPACE:
                cur += 1

        ch = at(cur)
        if ch and ch not in _END_CHARS:
            out.append("_" if ch in _WHITESPACE else ch)
        else:
            if out and out[-1] == "_":
                out.pop()
            break
        cur += 1

    return "".join(out) or "no_message"


def format_byte_buffer(data: bytes | bytearray) -> str:
    """Format bytes as space-separated hex; only the first byte is zero-padded to two digits."""
    if not data:
        return ""
    first, *rest = data
    return " ".join([f"{first:02x}", *(f"{b:x}" for b in rest)])