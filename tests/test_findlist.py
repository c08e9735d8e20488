import pytest

from fleecekit.findlist import FindList


def _recorder(calls):
    def record(buf, pos, arg):
        calls.append((arg, pos))

    return record


def test_finds_all_occurrences_in_order():
    calls = []
    fl = FindList(11)
    fl.add_term("ab", _recorder(calls), "ab")
    fl.process(bytearray(b"xabyab"))
    assert calls == [("ab", 1), ("ab", 4)]


def test_overlapping_terms_of_different_lengths():
    calls = []
    fl = FindList(11)
    fl.add_term("a", _recorder(calls), "a")
    fl.add_term("abc", _recorder(calls), "abc")
    fl.process(b"abc")
    assert calls == [("a", 0), ("abc", 0)]


def test_term_longer_than_buffer_is_not_found():
    calls = []
    fl = FindList(5)
    fl.add_term("longterm", _recorder(calls), None)
    fl.process(b"long")
    assert calls == []


def test_callback_changes_ahead_are_seen():
    calls = []

    def rewrite(buf, pos, arg):
        calls.append((arg, pos))
        buf[pos + 1:pos + 2] = b"b"

    fl = FindList(7)
    fl.add_term("a", rewrite, "a")
    fl.add_term("b", _recorder(calls), "b")
    buf = bytearray(b"ax")
    fl.process(buf)
    assert buf == bytearray(b"ab")
    assert calls == [("a", 0), ("b", 1)]


def test_callback_receives_buffer_and_argument():
    seen = []

    def record(buf, pos, arg):
        seen.append((pos, arg, bytes(buf[pos:pos + len(arg)])))

    fl = FindList(7)
    fl.add_term(b"mov", record, b"mov")
    assert len(fl) == 1
    buf = bytearray(b"mov r1, r2; mov r3, r4")
    fl.process(buf)
    assert seen == [(0, b"mov", b"mov"), (12, b"mov", b"mov")]
    assert buf == bytearray(b"mov r1, r2; mov r3, r4")


def test_empty_list_processes_nothing():
    fl = FindList(3)
    buf = bytearray(b"abc")
    fl.process(buf)
    assert buf == bytearray(b"abc")
    assert len(fl) == 0


def test_empty_term_rejected():
    fl = FindList(3)
    with pytest.raises(ValueError):
        fl.add_term("", lambda buf, pos, arg: None)


def test_full_list_rejects_terms():
    fl = FindList(2)
    fl.add_term("a", lambda buf, pos, arg: None)
    fl.add_term("b", lambda buf, pos, arg: None)
    assert len(fl) == 2
    with pytest.raises(ValueError):
        fl.add_term("c", lambda buf, pos, arg: None)


def test_duplicate_term_rejected():
    fl = FindList(5)
    fl.add_term("a", lambda buf, pos, arg: None)
    with pytest.raises(ValueError):
        fl.add_term("a", lambda buf, pos, arg: None)


def test_invalid_size_rejected():
    with pytest.raises(ValueError):
        FindList(0)