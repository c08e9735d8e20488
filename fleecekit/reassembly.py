"""Reassemble decoded instruction text and compare the result with the input bytes."""

from __future__ import annotations

import struct
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence

DEFAULT_AS_FILENAME = "/tmp/fl_rd.o"
ERROR_BUFFER_SIZE = 512
COMMAND_BUFFER_SIZE = 128
COLONS_BEFORE_ERROR_MESSAGE = 5

_SHN_XINDEX = 0xFFFF


class AsmResult(str, Enum):
    """Outcome of reassembling one decoded instruction."""

    NONE = "N"
    SUCCESS = "S"
    DIFFERENT = "D"
    ERROR = "E"


@dataclass(frozen=True)
class ReassemblyOutcome:
    """The result of reassembly, the bytes produced and any assembler message."""

    result: AsmResult
    data: bytes = b""
    error: str = ""


class _Reassembler(Protocol):
    @property
    def output_filename(self) -> str: ...

    def reassemble(self, text: str) -> str | None: ...


def build_assembler_args(
    assembler: str,
    options_string: str | None = None,
    output_filename: str | None = None,
) -> list[str]:
    """Command line for the assembler: the program, ``-o <file>`` and comma-separated options."""
    filename = DEFAULT_AS_FILENAME if output_filename is None else output_filename
    args = [assembler, "-o", filename]
    if options_string is not None:
        args.extend(options_string.split(","))
    return args


def parse_assembler_error(stderr_text: str) -> str:
    """Extract the message that follows the fifth colon of the assembler's error output."""
    colons = 0
    out: list[str] = []
    for ch in stderr_text:
        if len(out) >= ERROR_BUFFER_SIZE - 1:
            break
        if colons >= COLONS_BEFORE_ERROR_MESSAGE and ch != "\n":
            out.append(ch)
        if ch == ":":
            colons += 1
    return "".join(out)


def _read_cstring(data: bytes, offset: int) -> str:
    end = data.find(b"\0", offset)
    if end < 0:
        raise ValueError("unterminated section name")
    return data[offset:end].decode("latin-1")


def read_text_section(path: str | Path, max_len: int) -> bytes:
    """Return the contents of the ``.text`` section of an ELF object (empty if absent)."""
    data = Path(path).read_bytes()
    if data[:4] != b"\x7fELF" or len(data) < 16:
        raise ValueError(f"{path} is not an ELF file")
    elf_class, encoding = data[4], data[5]
    if encoding == 1:
        order = "<"
    elif encoding == 2:
        order = ">"
    else:
        raise ValueError(f"{path} has an unknown ELF data encoding")

    try:
        if elf_class == 2:
            (shoff,) = struct.unpack_from(order + "Q", data, 0x28)
            shentsize, shnum, shstrndx = struct.unpack_from(order + "HHH", data, 0x3A)
            sh_format = order + "IIQQQQIIQQ"
        elif elf_class == 1:
            (shoff,) = struct.unpack_from(order + "I", data, 0x20)
            shentsize, shnum, shstrndx = struct.unpack_from(order + "HHH", data, 0x2E)
            sh_format = order + "IIIIIIIIII"
        else:
            raise ValueError(f"{path} has an unknown ELF class")

        if shoff == 0:
            return b""

        def section(index: int) -> tuple[int, ...]:
            return struct.unpack_from(sh_format, data, shoff + index * shentsize)

        first = section(0)
        if shnum == 0:
            shnum = first[5]
        if shstrndx == _SHN_XINDEX:
            shstrndx = first[6]
        names_offset = section(shstrndx)[4]

        for index in range(1, shnum):
            header = section(index)
            name_index, offset, size = header[0], header[4], header[5]
            if _read_cstring(data, names_offset + name_index) != ".text":
                continue
            if size > max_len:
                raise ValueError("reassembly byte buffer is too small")
            code = data[offset:offset + size]
            if len(code) != size:
                raise ValueError(f"could not read text section of {path}")
            return code
    except struct.error as exc:
        raise ValueError(f"{path} is a truncated ELF file") from exc
    return b""


class ReassemblyDaemon:
    """Runs an external assembler on one instruction at a time."""

    def __init__(
        self,
        assembler: str,
        options_string: str | None = None,
        output_filename: str | None = None,
    ) -> None:
        self.args: tuple[str, ...] = tuple(
            build_assembler_args(assembler, options_string, output_filename)
        )

    @property
    def output_filename(self) -> str:
        """The object file written by the assembler on success."""
        return self.args[2]

    def reassemble(self, text: str) -> str | None:
        """Assemble ``text``; return None on success or the assembler's error message."""
        completed = subprocess.run(
            list(self.args),
            input=(text + "\n").encode("utf-8"),
            stderr=subprocess.PIPE,
            env={},
            check=False,
        )
        if completed.returncode == 0:
            return None
        return parse_assembler_error(completed.stderr.decode("utf-8", "replace"))


def reassemble(
    data: Sequence[int] | bytes,
    text: str,
    daemon: _Reassembler,
    max_len: int,
) -> ReassemblyOutcome:
    """Reassemble ``text`` and compare the produced bytes with the original ``data``."""
    error = daemon.reassemble(text)
    if error is not None:
        return ReassemblyOutcome(AsmResult.ERROR, b"", error)
    produced = read_text_section(daemon.output_filename, max_len)
    original = bytes(data)
    if len(produced) > len(original) or original[:len(produced)] != produced:
        return ReassemblyOutcome(AsmResult.DIFFERENT, produced)
    return ReassemblyOutcome(AsmResult.SUCCESS, produced)