"""Split decoded instruction text into fields and the separators between them."""

from __future__ import annotations

import re
from typing import Iterator

from fleecekit.stringutils import signals_error

_SEPARATORS = frozenset(" ,:[]{}()$#*+-\t\n")
_DIGITS = "0123456789"
_C_SPACE = " \t\n\v\f\r"

_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:"
    r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
    r"|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|inf(?:inity)?"
    r"|nan(?:\([0-9A-Za-z_]*\))?"
    r")",
    re.IGNORECASE,
)


def _float_prefix_length(text: str) -> int:
    """Number of characters a C ``strtod`` would consume from ``text`` (0 if none)."""
    stripped = text.lstrip(_C_SPACE)
    match = _FLOAT_PATTERN.match(stripped)
    if match is None:
        return 0
    return len(text) - len(stripped) + match.end()


def _is_whole_number(text: str) -> bool:
    return _float_prefix_length(text) == len(text)


def _is_digit(ch: str) -> bool:
    return len(ch) == 1 and ch in _DIGITS


def is_separator(char: str) -> bool:
    """Return True if ``char`` separates fields of an instruction."""
    return len(char) == 1 and char in _SEPARATORS


class FieldList:
    """The fields of an instruction (prefixes, opcode, operands) and their separators.

    There is always one more separator than fields: separator ``i`` comes
    before field ``i`` and the last separator ends the text.
    """

    def __init__(self, text: str) -> None:
        self._fields: list[str] = []
        self._separators: list[str] = []
        self._parse(text)

    def _parse(self, text: str) -> None:
        fields, seps = self._fields, self._separators
        size = len(text)

        def at(i: int) -> str:
            return text[i] if 0 <= i < size else ""

        in_field = not is_separator(at(0))
        last_sep: int | None = None
        if in_field:
            seps.append("")
            last_sep = 0

        def field_start(start: int, end: int) -> int:
            # A leading minus that makes the field a number belongs to the field.
            if (
                last_sep is not None
                and seps[last_sep].endswith("-")
                and _float_prefix_length(text[start:]) == end - start
            ):
                seps[last_sep] = seps[last_sep][:-1]
                return start - 1
            return start

        start = 0
        for cur, ch in enumerate(text):
            is_sep = ch in _SEPARATORS
            # The sign of a floating point exponent, as in "1.23e-5", is not a separator.
            if (
                is_sep
                and in_field
                and ch in "+-"
                and cur > 0
                and text[cur - 1] == "e"
                and _is_digit(at(cur + 1))
            ):
                is_sep = False

            if is_sep == in_field:
                if in_field:
                    start = field_start(start, cur)
                    fields.append(text[start:cur])
                else:
                    seps.append(text[start:cur])
                    last_sep = len(seps) - 1
                start = cur
            in_field = not is_sep

        if in_field:
            start = field_start(start, size)
            fields.append(text[start:])
            seps.append("")
        else:
            seps.append(text[start:])

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __str__(self) -> str:
        parts = [sep + field for sep, field in zip(self._separators, self._fields)]
        parts.append(self._separators[-1])
        return "".join(parts)

    def has_field(self, field: str) -> bool:
        """Return True if some field equals ``field`` exactly."""
        return field in self._fields

    def get_field(self, index: int) -> str | None:
        """Return the field at ``index``, or None if there is no such field."""
        if 0 <= index < len(self._fields):
            return self._fields[index]
        return None

    def set_field(self, index: int, value: str) -> None:
        """Replace the field at ``index``."""
        if not 0 <= index < len(self._fields):
            raise IndexError(f"field index {index} out of range")
        self._fields[index] = value

    def strip_digits(self) -> None:
        """Replace every field that is a decimal number with ``IMM``."""
        for i, field in enumerate(self._fields):
            first = field[:1]
            if (_is_digit(first) or first == "-") and _is_whole_number(field):
                self._fields[i] = "IMM"

    def strip_hex(self) -> None:
        """Replace every field that starts with ``0x`` (optionally negated) with ``IMM``."""
        for i, field in enumerate(self._fields):
            body = field[1:] if field.startswith("-") else field
            if body.startswith("0x"):
                self._fields[i] = "IMM"

    def total_bytes(self) -> int:
        """Bytes needed to hold the text of the list, including a terminator."""
        return len(str(self).encode("utf-8")) + 1

    def has_error(self) -> bool:
        """Return True if a field suggests the decoding failed."""
        return any(signals_error(field) for field in self._fields)

    def is_field_imm(self, index: int) -> bool:
        """Return True if the field at ``index`` looks like an immediate."""
        field = self._fields[index]
        if _is_whole_number(field):
            return True
        body = field[1:] if field.startswith("-") else field
        return body.startswith("0x")

    def is_field_reg(self, index: int) -> bool:
        """Register detection is not performed; always False."""
        self._fields[index]
        return False

    def debug_text(self) -> str:
        """A listing of the fields and separators, one per line."""
        lines = ["Fields:"]
        lines.extend(f"\t{field}" for field in self._fields)
        lines.append("Separators:")
        lines.extend(f"\t{sep}" for sep in self._separators)
        return "\n".join(lines) + "\n"