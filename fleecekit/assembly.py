"""One decoder's view of an instruction: its text, template and reassembly result."""

from __future__ import annotations

from typing import Callable, Optional

from fleecekit.fieldlist import FieldList
from fleecekit.reassembly import AsmResult, ReassemblyOutcome
from fleecekit.simpleinsnmap import DECODING_ERROR_TEXT, DecodeError, Decoder

Reassembler = Callable[[bytes, str], ReassemblyOutcome]
Normalizer = Callable[[FieldList], None]


def _template_of(text: str, normalizer: Optional[Normalizer]) -> str:
    fields = FieldList(text)
    fields.strip_hex()
    fields.strip_digits()
    if normalizer is not None:
        normalizer(fields)
    return str(fields)


class Assembly:
    """Instruction bytes decoded by one decoder, with lazily computed results.

    ``reassembler`` is called with the original bytes and the decoded text and
    returns a :class:`ReassemblyOutcome`. ``normalizer`` may rewrite the fields
    of a template, for example to replace register names with a symbol.
    """

    def __init__(
        self,
        data: bytes | bytearray,
        decoder: Decoder,
        reassembler: Reassembler,
        normalizer: Optional[Normalizer] = None,
    ) -> None:
        self.data = bytes(data)
        self.decoder = decoder
        self._reassembler = reassembler
        self._normalizer = normalizer
        self._text: str | None = None
        self._decode_error = False
        self._template_text: str | None = None
        self._field_list: FieldList | None = None
        self._outcome: ReassemblyOutcome | None = None

    def __len__(self) -> int:
        return len(self.data)

    def copy(self) -> Assembly:
        """An independent copy sharing the decoder and any results computed so far."""
        clone = Assembly(self.data, self.decoder, self._reassembler, self._normalizer)
        clone._text = self._text
        clone._decode_error = self._decode_error
        clone._template_text = self._template_text
        clone._outcome = self._outcome
        return clone

    def _make_text(self) -> None:
        try:
            self._text = self.decoder.decode(self.data, True)
            self._decode_error = False
        except DecodeError:
            self._text = DECODING_ERROR_TEXT
            self._decode_error = True
        self._field_list = FieldList(self._text)
        if self._field_list.has_error():
            self._decode_error = True

    def text(self) -> str:
        """The decoded text, or ``decoding_error`` if decoding failed."""
        if self._text is None:
            self._make_text()
        return self._text  # type: ignore[return-value]

    def template(self) -> str:
        """The decoded text with immediates replaced by ``IMM`` and normalized."""
        if self._template_text is None:
            self._template_text = _template_of(self.text(), self._normalizer)
        return self._template_text

    def fields(self) -> FieldList:
        """The fields of the decoded text."""
        if self._field_list is None:
            self._field_list = FieldList(self.text())
        return self._field_list

    def is_error(self) -> bool:
        """Return True if the decoder failed or its output signals an error."""
        self.text()
        return self._decode_error

    def _reassembly(self) -> ReassemblyOutcome | None:
        if self.is_error():
            return None
        if self._outcome is None:
            self._outcome = self._reassembler(self.data, self.text())
        return self._outcome

    def asm_result(self) -> AsmResult:
        """The reassembly result; ``AsmResult.NONE`` for instructions that failed to decode."""
        outcome = self._reassembly()
        return AsmResult.NONE if outcome is None else outcome.result

    def asm_error(self) -> str | None:
        """The assembler's message, or None when nothing was reassembled."""
        outcome = self._reassembly()
        return None if outcome is None else outcome.error

    def asm_bytes(self) -> bytes | None:
        """The reassembled bytes, or None when nothing was reassembled."""
        outcome = self._reassembly()
        return None if outcome is None else outcome.data

    def is_equivalent(self, other: Assembly) -> bool:
        """Return True if both decodings mean the same instruction."""
        if self.is_error() and other.is_error():
            return True
        if self.is_error() != other.is_error():
            return False
        if self.text() == other.text():
            return True
        if self.asm_result() != other.asm_result():
            return False
        return (self.asm_bytes() or b"") == (other.asm_bytes() or b"")

    def debug_text(self) -> str:
        """A multi-line description of everything computed so far."""
        lines = [
            "-- ASM Debug --",
            f"Decoder = {getattr(self.decoder, 'name', type(self.decoder).__name__)}",
            f"{len(self.data)} bytes: " + "".join(f"{b:x} " for b in self.data),
            "Decoding:",
        ]
        if self._text is None:
            lines += ["NULL", "Error = N/A"]
        else:
            lines += [self._text, f"Error = {'yes' if self._decode_error else 'no'}"]
        lines.append("Fields: ")
        if self._field_list is None:
            lines.append("\tNULL")
        else:
            lines.append(self._field_list.debug_text().rstrip("\n"))
        lines.append("")
        lines.append("Template:")
        lines.append("\tNULL" if self._template_text is None else f"\t{self._template_text}")
        outcome = self._outcome
        lines.append(f"Reassembly: {outcome.result.value if outcome else ''}")
        if outcome is None:
            lines.append("\tNULL")
        elif outcome.result is AsmResult.ERROR:
            lines.append(f"\tError: {outcome.error}")
        else:
            lines.append(
                f"{len(outcome.data)}\tbytes: " + "".join(f"{b:x} " for b in outcome.data)
            )
        return "\n".join(lines) + "\n"