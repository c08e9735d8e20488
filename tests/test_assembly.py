import pytest

from fleecekit.assembly import Assembly
from fleecekit.reassembly import AsmResult, ReassemblyOutcome
from fleecekit.registerset import RegisterSet
from fleecekit.simpleinsnmap import DecodeError, Decoder


class TableDecoder(Decoder):
    name = "table"

    def __init__(self, table):
        self.table = table

    def decode(self, data, normalize=False):
        try:
            return self.table[bytes(data)]
        except KeyError:
            raise DecodeError(data.hex()) from None


class CountingReassembler:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def __call__(self, data, text):
        self.calls.append((data, text))
        return self.outcome


def success(data):
    return CountingReassembler(ReassemblyOutcome(AsmResult.SUCCESS, bytes(data)))


def test_text_is_decoder_output():
    dec = TableDecoder({b"\x01\x02": "add r1, 0x10"})
    asm = Assembly(b"\x01\x02", dec, success(b"\x01\x02"))
    assert asm.text() == "add r1, 0x10"
    assert not asm.is_error()
    assert len(asm.fields()) == 3


def test_decode_failure_is_error():
    asm = Assembly(b"\xff", TableDecoder({}), success(b""))
    assert asm.text() == "decoding_error"
    assert asm.is_error()


def test_error_token_marks_error():
    asm = Assembly(b"\x00", TableDecoder({b"\x00": "bad"}), success(b""))
    assert asm.is_error()


def test_template_strips_immediates():
    asm = Assembly(b"\x01", TableDecoder({b"\x01": "add r1, 0x10"}), success(b"\x01"))
    assert asm.template() == "add r1, IMM"


def test_template_uses_normalizer():
    regs = RegisterSet.make_formatted("REG", "r%d", 0, 15)
    asm = Assembly(
        b"\x01",
        TableDecoder({b"\x01": "add r1, 5"}),
        success(b"\x01"),
        regs.replace_reg_names_with_symbol,
    )
    assert asm.template() == "add REG, IMM"


def test_error_is_not_reassembled():
    reasm = success(b"")
    asm = Assembly(b"\xff", TableDecoder({}), reasm)
    assert asm.asm_result() is AsmResult.NONE
    assert asm.asm_bytes() is None
    assert asm.asm_error() is None
    assert reasm.calls == []


def test_reassembly_is_cached():
    data = b"\x01\x02"
    reasm = success(data)
    asm = Assembly(data, TableDecoder({data: "add r1, r2"}), reasm)
    assert asm.asm_result() is AsmResult.SUCCESS
    assert asm.asm_bytes() == data
    assert asm.asm_result() is AsmResult.SUCCESS
    assert reasm.calls == [(data, "add r1, r2")]


def test_equivalence_rules():
    table = {b"\x01": "add r1, r2", b"\x02": "add r1,r2", b"\x03": "sub r1, r2"}
    dec = TableDecoder(table)
    err1 = Assembly(b"\x09", dec, success(b""))
    err2 = Assembly(b"\x08", dec, success(b""))
    same_bytes = CountingReassembler(ReassemblyOutcome(AsmResult.DIFFERENT, b"\xaa"))
    a = Assembly(b"\x01", dec, same_bytes)
    b = Assembly(b"\x02", dec, same_bytes)
    c = Assembly(b"\x03", dec, CountingReassembler(ReassemblyOutcome(AsmResult.DIFFERENT, b"\xbb")))
    assert err1.is_equivalent(err2)
    assert not err1.is_equivalent(a)
    assert not a.is_equivalent(err1)
    assert a.is_equivalent(a.copy())
    assert a.is_equivalent(b)
    assert not a.is_equivalent(c)


def test_different_results_not_equivalent():
    dec = TableDecoder({b"\x01": "add r1, r2", b"\x02": "add r2, r1"})
    a = Assembly(b"\x01", dec, success(b"\x01"))
    b = Assembly(b"\x02", dec, CountingReassembler(ReassemblyOutcome(AsmResult.ERROR, b"", "oops")))
    assert not a.is_equivalent(b)
    assert b.asm_error() == "oops"


def test_copy_keeps_results():
    data = b"\x01"
    reasm = success(data)
    asm = Assembly(data, TableDecoder({data: "inc r1"}), reasm)
    asm.asm_result()
    clone = asm.copy()
    assert clone.data == data
    assert clone.text() == asm.text()
    assert clone.asm_bytes() == data
    assert len(reasm.calls) == 1


def test_debug_text_mentions_decoder_and_decoding():
    asm = Assembly(b"\x01", TableDecoder({b"\x01": "inc r1"}), success(b"\x01"))
    before = asm.debug_text()
    assert "NULL" in before
    asm.template()
    after = asm.debug_text()
    assert "Decoder = table" in after
    assert "inc r1" in after
    assert "Error = no" in after


@pytest.mark.parametrize("data", [b"", b"\x00\x01\x02"])
def test_length_matches_data(data):
    asm = Assembly(data, TableDecoder({}), success(data))
    assert len(asm) == len(data)