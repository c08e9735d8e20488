import io

import pytest

from fleecekit.assembly import Assembly
from fleecekit.reassembly import AsmResult, ReassemblyOutcome
from fleecekit.report import Report
from fleecekit.simpleinsnmap import DecodeError, Decoder


class TableDecoder(Decoder):
    def __init__(self, name, table):
        self.name = name
        self.table = table

    def decode(self, data, normalize=False):
        try:
            return self.table[bytes(data)]
        except KeyError:
            raise DecodeError(bytes(data).hex()) from None


def make_reassembler(outcomes=None):
    outcomes = outcomes or {}

    def reassemble(data, text):
        return outcomes.get(text, ReassemblyOutcome(AsmResult.SUCCESS, bytes(data)))

    return reassemble


def assemblies_for(data, texts, outcomes=None):
    reassembler = make_reassembler(outcomes)
    return [
        Assembly(data, TableDecoder(f"dec{i}", {data: text}), reassembler)
        for i, text in enumerate(texts)
    ]


def test_report_needs_two_decodings():
    with pytest.raises(ValueError):
        Report(assemblies_for(b"\x01", ["add r1, r2"]))


def test_report_copies_assemblies():
    originals = assemblies_for(b"\x01\x02", ["add r1, r2", "add r1, r3"])
    report = Report(originals)
    assert len(report) == 2
    assert report.assemblies[0] is not originals[0]
    assert [a.text() for a in report.assemblies] == ["add r1, r2", "add r1, r3"]
    assert report.data == b"\x01\x02"


def test_issue_writes_decodings_and_bytes():
    report = Report(assemblies_for(b"\x01\x02", ["add r1, r2", "add r1, r3"]))
    out = io.StringIO()
    report.issue(out)
    assert out.getvalue() == "add r1, r2;add r1, r3;1 2 \n"


def test_issue_includes_reassembly_error():
    outcomes = {"add r1, r2": ReassemblyOutcome(AsmResult.ERROR, b"", "bad operand")}
    report = Report(assemblies_for(b"\x01\x02", ["add r1, r2", "add r1, r3"], outcomes))
    out = io.StringIO()
    report.issue(out)
    assert out.getvalue().startswith("add r1, r2: ERROR: bad operand;add r1, r3;")


def test_equivalent_to_itself():
    report = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3"]))
    assert report.is_equivalent(Report(report.assemblies))


def test_not_equivalent_with_different_decoder_count():
    two = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3"]))
    three = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3", "add r1, r3"]))
    assert not two.is_equivalent(three)


def test_not_equivalent_with_different_field_counts():
    first = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3"]))
    second = Report(assemblies_for(b"\x02", ["add r1", "add r1, r3"]))
    assert not first.is_equivalent(second)


def test_not_equivalent_when_shared_field_gives_different_other_field():
    first = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3"]))
    second = Report(assemblies_for(b"\x02", ["add r1, r2", "add r1, r4"]))
    assert not first.is_equivalent(second)


def test_equivalent_when_disagreement_follows_same_pattern():
    first = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3"]))
    second = Report(assemblies_for(b"\x02", ["add r5, r2", "add r5, r3"]))
    assert first.is_equivalent(second)
    assert second.is_equivalent(first)


def test_make_template_joins_templates():
    report = Report(assemblies_for(b"\x01", ["mov r1, 0x10", "mov r1, 16"]))
    template = report.make_template()
    assert template == "mov r1, IMM; mov r1, IMM; "
    assert template == "".join(a.template() + "; " for a in report.assemblies)


def test_make_template_same_for_equal_immediates():
    first = Report(assemblies_for(b"\x01", ["mov r1, 0x10", "mov r1, 16"]))
    second = Report(assemblies_for(b"\x02", ["mov r1, 0x20", "mov r1, 32"]))
    assert first.make_template() == second.make_template()


def test_debug_text_lists_every_assembly():
    report = Report(assemblies_for(b"\x01", ["add r1, r2", "add r1, r3", "add r1, r4"]))
    text = report.debug_text()
    assert text.startswith("-- REPORT DEBUG --\n")
    assert text.count("ASM:\n") == 3
    assert text.count("-- ASM Debug --") == 3