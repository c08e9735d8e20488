"""A record of one instruction on which several decoders disagree."""

from __future__ import annotations

from typing import Iterable, TextIO

from fleecekit.assembly import Assembly
from fleecekit.reassembly import AsmResult


class Report:
    """Copies of the decodings of one instruction by two or more decoders."""

    def __init__(self, assemblies: Iterable[Assembly]) -> None:
        copies = tuple(assembly.copy() for assembly in assemblies)
        if len(copies) < 2:
            raise ValueError("a report needs decodings from at least two decoders")
        self._assemblies = copies

    @property
    def assemblies(self) -> tuple[Assembly, ...]:
        """The decodings, one per decoder, in decoder order."""
        return self._assemblies

    @property
    def data(self) -> bytes:
        """The instruction bytes, as given to the first decoder."""
        return self._assemblies[0].data

    def __len__(self) -> int:
        return len(self._assemblies)

    def issue(self, stream: TextIO) -> None:
        """Write the report as one line: each decoding, then the bytes in hex."""
        parts: list[str] = []
        for assembly in self._assemblies:
            parts.append(assembly.text())
            if not assembly.is_error() and assembly.asm_result() is AsmResult.ERROR:
                parts.append(f": ERROR: {assembly.asm_error()}")
            parts.append(";")
        parts.extend(f"{byte:x} " for byte in self.data)
        parts.append("\n")
        stream.write("".join(parts))
        stream.flush()

    def is_equivalent(self, other: Report) -> bool:
        """Return True if both reports show the same pattern of disagreement.

        For every pair of decoders, wherever the first decoder's field is the
        same in both reports, the second decoder's field must be too.
        """
        if len(other) != len(self):
            return False
        mine = [assembly.fields() for assembly in self._assemblies]
        theirs = [assembly.fields() for assembly in other._assemblies]
        for index, (base1, base2) in enumerate(zip(mine, theirs)):
            if len(base1) != len(base2):
                return False
            for cmp1, cmp2 in zip(mine[index + 1:], theirs[index + 1:]):
                if len(cmp1) != len(cmp2):
                    return False
                for b1, b2, c1, c2 in zip(base1, base2, cmp1, cmp2):
                    if b1 == b2 and c1 != c2:
                        return False
        return True

    def make_template(self) -> str:
        """The templates of all decodings, each followed by ``"; "``."""
        return "".join(f"{assembly.template()}; " for assembly in self._assemblies)

    def debug_text(self) -> str:
        """A multi-line description of every decoding in the report."""
        parts = ["-- REPORT DEBUG --\n"]
        for assembly in self._assemblies:
            parts.append("ASM:\n\n")
            parts.append(assembly.debug_text())
            parts.append("\n")
        return "".join(parts)