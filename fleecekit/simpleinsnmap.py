"""A first labelling of instruction bits by flipping each bit and redecoding."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fleecekit.bitfield import (
    BIT_TYPE_RESERVED,
    BIT_TYPE_STRUCTURAL,
    BIT_TYPE_UNUSED,
    Bitfield,
)
from fleecekit.fieldlist import FieldList
from fleecekit.stringutils import flip_buffer_bit

DECODING_ERROR_TEXT = "decoding_error"


class DecodeError(Exception):
    """Raised by a decoder that cannot decode its input."""


class Decoder(ABC):
    """Something that turns instruction bytes into assembly text."""

    name: str = "decoder"

    @abstractmethod
    def decode(self, data: bytes, normalize: bool = False) -> str:
        """Return the assembly text for ``data``; raise DecodeError on failure."""


def _decode(decoder: Decoder, data: bytes | bytearray) -> tuple[bool, str]:
    try:
        return True, decoder.decode(bytes(data), False)
    except DecodeError:
        return False, DECODING_ERROR_TEXT


def bit_type_by_changes(start_fields: FieldList, new_fields: FieldList) -> int:
    """Classify a change: the index of the one changed field, unused or structural."""
    if len(new_fields) != len(start_fields):
        return BIT_TYPE_STRUCTURAL
    result = BIT_TYPE_UNUSED
    for index, (new, old) in enumerate(zip(new_fields, start_fields)):
        if new != old:
            if result != BIT_TYPE_UNUSED:
                return BIT_TYPE_STRUCTURAL
            result = index
    return result


class SimpleInsnMap:
    """Bit types for every bit of an instruction.

    A bit's type is the index of the only field it changes, or one of the
    BIT_TYPE constants.
    """

    def __init__(self, data: bytes | bytearray, n_bytes_used: int, decoder: Decoder) -> None:
        self.n_bits = 8 * len(data)
        self.n_bits_used = 8 * n_bytes_used
        self._bit_types = [BIT_TYPE_UNUSED] * self.n_bits
        self._confirmed = [False] * self.n_bits
        self._map_bit_types(bytearray(data), decoder)

    def _map_bit_types(self, buf: bytearray, decoder: Decoder) -> None:
        success, text = _decode(decoder, buf)
        start_fields = FieldList(text)
        is_error = not success or start_fields.has_error()
        bitfields = [Bitfield.create(field) for field in start_fields]
        types, confirmed = self._bit_types, self._confirmed

        for i in range(min(self.n_bits_used, self.n_bits)):
            if confirmed[i]:
                continue
            flip_buffer_bit(buf, i)
            success, text = _decode(decoder, buf)
            new_fields = FieldList(text)

            types[i] = BIT_TYPE_UNUSED
            if success and not new_fields.has_error():
                bit_type = bit_type_by_changes(start_fields, new_fields)
                types[i] = bit_type
                bitfield = bitfields[bit_type] if bit_type >= 0 else None
                if bitfield is not None:
                    flip_buffer_bit(buf, i)
                    match_len = bitfield.matches(buf, i, self.n_bits_used)
                    flip_buffer_bit(buf, i)
                    if match_len > 0:
                        new_bitfield = Bitfield.create(new_fields.get_field(bit_type))
                        if (
                            new_bitfield is not None
                            and new_bitfield.matches(buf, i, self.n_bits_used) == match_len
                        ):
                            confirmed[i] = True
                            for j in range(i + 1, min(i + match_len, self.n_bits)):
                                confirmed[j] = True
                                types[j] = bit_type
            else:
                types[i] = BIT_TYPE_UNUSED if is_error else BIT_TYPE_RESERVED
            flip_buffer_bit(buf, i)

        for i in range(self.n_bits_used, self.n_bits):
            types[i] = BIT_TYPE_UNUSED

    def copy(self) -> SimpleInsnMap:
        """An independent copy of this map."""
        clone = object.__new__(type(self))
        clone.n_bits = self.n_bits
        clone.n_bits_used = self.n_bits_used
        clone._bit_types = list(self._bit_types)
        clone._confirmed = list(self._confirmed)
        return clone

    @property
    def bit_types(self) -> tuple[int, ...]:
        """The type of every bit, in order."""
        return tuple(self._bit_types)

    def bit_type(self, which_bit: int) -> int:
        """The type of one bit."""
        return self._bit_types[which_bit]

    def is_bit_confirmed_imm(self, which_bit: int) -> bool:
        """Return True if the bit was confirmed to be part of an immediate."""
        return self._confirmed[which_bit]

    def is_map_equivalent(self, other: SimpleInsnMap) -> bool:
        """Return True if the used bits have the same types (structural equals reserved)."""
        if self.n_bits != other.n_bits or self.n_bits_used != other.n_bits_used:
            return False
        loose = {BIT_TYPE_STRUCTURAL, BIT_TYPE_RESERVED}
        return all(
            mine == theirs or {mine, theirs} == loose
            for mine, theirs in zip(
                self._bit_types[: self.n_bits_used], other._bit_types[: other.n_bits_used]
            )
        )

    def override_bit_type(self, which_bit: int, new_type: int) -> None:
        """Set the type of one bit."""
        self._bit_types[which_bit] = new_type

    def __str__(self) -> str:
        return "".join(str(bit_type) for bit_type in self._bit_types)