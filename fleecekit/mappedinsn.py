"""Instructions whose bits are labelled, used to generate new inputs."""

from __future__ import annotations

import random
import re
from typing import Callable, Iterable, MutableSequence, MutableSet, Optional

from fleecekit.bitfield import BIT_TYPE_RESERVED, BIT_TYPE_STRUCTURAL
from fleecekit.fieldlist import FieldList
from fleecekit.simpleinsnmap import (
    DECODING_ERROR_TEXT,
    DecodeError,
    Decoder,
    SimpleInsnMap,
)
from fleecekit.stringutils import (
    flip_buffer_bit,
    randomize_buffer,
    set_buffer_bit,
)

Normalizer = Callable[[FieldList], None]

MAX_OPTIONAL_BYTES = 2

_HEX_FLOAT = re.compile(
    r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
)


def _hex_value(text: str) -> float:
    match = _HEX_FLOAT.match(text)
    if match is None:
        return 0.0
    return float.fromhex(match.group(0))


def _try_decode(decoder: Decoder, data: bytes | bytearray, normalize: bool) -> tuple[bool, str]:
    try:
        return True, decoder.decode(bytes(data), normalize)
    except DecodeError:
        return False, DECODING_ERROR_TEXT


def _template_of(fields: FieldList, normalizer: Optional[Normalizer]) -> str:
    fields.strip_hex()
    fields.strip_digits()
    if normalizer is not None:
        normalizer(fields)
    return str(fields)


def fields_match(field1: str, field2: str) -> bool:
    """Return True if two fields match after one byte was removed from an instruction.

    Fields match when equal, or when both are hex values and the second is one
    more than the first (relative branch targets shift with the length).
    """
    if field1 == field2:
        return True
    if field1.startswith("0x") and field2.startswith("0x"):
        return _hex_value(field1) == _hex_value(field2) - 1
    return False


def is_byte_optional(
    decoder: Decoder, data: bytes | bytearray, which_byte: int, old_fields: FieldList
) -> bool:
    """Return True if removing one byte leaves a decoding made of the old fields."""
    new_data = bytes(data[:which_byte]) + bytes(data[which_byte + 1:])
    success, text = _try_decode(decoder, new_data, False)
    if not success:
        return False
    new_fields = FieldList(text)
    if len(new_fields) > len(old_fields):
        return False
    if new_fields.has_error():
        return False

    n_old, n_new = len(old_fields), len(new_fields)
    j = 0
    old_field = old_fields.get_field(0)
    for i, new_field in enumerate(new_fields):
        while j < n_old - 1 and not fields_match(new_field, old_field):
            j += 1
            if n_old - j < n_new - i:
                return False
            old_field = old_fields.get_field(j)
        if j == n_old and not fields_match(new_field, old_field):
            return False
    return True


def find_num_bytes_used(data: bytes | bytearray, decoder: Decoder) -> int:
    """Length of the shortest prefix of ``data`` that decodes exactly like all of it."""
    success, old_text = _try_decode(decoder, data, False)
    if not success:
        return len(data)
    for length in range(1, len(data)):
        ok, new_text = _try_decode(decoder, data[:length], False)
        if ok and new_text == old_text:
            return length
    return len(data)


class MappedInsn:
    """An instruction with a label for each bit, able to derive new instructions."""

    print_queue = False

    def __init__(
        self,
        data: bytes | bytearray,
        decoder: Decoder,
        normalizer: Optional[Normalizer] = None,
        max_insn_len: int = 16,
    ) -> None:
        self.decoder = decoder
        self.normalizer = normalizer
        self.max_insn_len = max_insn_len
        success, text = _try_decode(decoder, data, False)
        self.fields = FieldList(text)
        self.is_error = not success or self.fields.has_error()
        self.data = bytearray(data)
        self.n_bytes_used = 0
        self._map: SimpleInsnMap | None = None
        if self.is_error:
            return
        self.n_bytes_used = find_num_bytes_used(self.data, decoder)
        self._map_bit_types()

    def _map_bit_types(self) -> None:
        bit_map = SimpleInsnMap(self.data, self.n_bytes_used, self.decoder)
        prelim = bit_map.copy()
        for i in range(8 * self.n_bytes_used):
            if (
                bit_map.bit_type(i) in (BIT_TYPE_STRUCTURAL, BIT_TYPE_RESERVED)
                or bit_map.is_bit_confirmed_imm(i)
            ):
                continue
            flip_buffer_bit(self.data, i)
            new_map = SimpleInsnMap(self.data, self.n_bytes_used, self.decoder)
            if not prelim.is_map_equivalent(new_map):
                bit_map.override_bit_type(i, BIT_TYPE_STRUCTURAL)
            flip_buffer_bit(self.data, i)
        self._map = bit_map

    def bit_type(self, which_bit: int) -> int:
        """The label of one bit of the instruction."""
        if self._map is None:
            raise ValueError("an instruction that failed to decode has no bit map")
        return self._map.bit_type(which_bit)

    def _template(self, decoder: Decoder) -> str | None:
        success, text = _try_decode(decoder, self.data, True)
        if not success:
            return None
        fields = FieldList(text)
        if fields.has_error():
            return None
        return _template_of(fields, self.normalizer)

    def enqueue_insn_if_new(
        self,
        queue: MutableSequence[bytes],
        seen: MutableSet[str],
        decoders: Iterable[Decoder],
    ) -> None:
        """Queue the current bytes if their template is new and few bytes are optional."""
        success, _ = _try_decode(self.decoder, self.data, True)
        if not success:
            return
        template = self._template(self.decoder)
        if template is None or template in seen:
            return
        seen.add(template)

        success, old_text = _try_decode(self.decoder, self.data, False)
        if not success:
            return
        old_fields = FieldList(old_text)
        n_optional = 0
        for i in range(self.n_bytes_used):
            if n_optional > MAX_OPTIONAL_BYTES:
                break
            if is_byte_optional(self.decoder, self.data, i, old_fields):
                n_optional += 1
        if n_optional > MAX_OPTIONAL_BYTES:
            return

        if self.print_queue:
            name = getattr(self.decoder, "name", type(self.decoder).__name__)
            hex_bytes = "".join(f"{b:02x} " for b in self.data)
            print(f"{name:<9}queue: {hex_bytes}: {template}")

        for other in decoders:
            if other is self.decoder:
                continue
            other_template = self._template(other)
            if other_template is not None:
                seen.add(other_template)

        queued = bytearray(self.max_insn_len)
        randomize_buffer(queued)
        queued[: len(self.data)] = self.data
        queue.append(bytes(queued))

    def queue_new_insns(
        self,
        queue: MutableSequence[bytes],
        seen: MutableSet[str],
        decoders: Iterable[Decoder],
    ) -> None:
        """Queue variations made by flipping structural bits and rewriting fields."""
        if self.is_error:
            return
        decoders = list(decoders)
        n_bits = 8 * self.n_bytes_used
        structural = [i for i in range(n_bits) if self.bit_type(i) == BIT_TYPE_STRUCTURAL]

        for pos, i in enumerate(structural):
            flip_buffer_bit(self.data, i)
            for j in structural[pos + 1:]:
                flip_buffer_bit(self.data, j)
                self.enqueue_insn_if_new(queue, seen, decoders)
                flip_buffer_bit(self.data, j)
            flip_buffer_bit(self.data, i)

        for i in structural:
            flip_buffer_bit(self.data, i)
            self.enqueue_insn_if_new(queue, seen, decoders)
            flip_buffer_bit(self.data, i)

        start = bytes(self.data)
        for field_index in range(len(self.fields)):
            field_bits = [j for j in range(n_bits) if self.bit_type(j) == field_index]
            for j in field_bits:
                set_buffer_bit(self.data, j, random.getrandbits(1))
            self.enqueue_insn_if_new(queue, seen, decoders)
            for j in field_bits:
                set_buffer_bit(self.data, j, 0)
            self.enqueue_insn_if_new(queue, seen, decoders)
            for j in field_bits:
                set_buffer_bit(self.data, j, 1)
            self.enqueue_insn_if_new(queue, seen, decoders)
            self.data[:] = start