import pytest

from fleecekit import options
from fleecekit.options import Options


@pytest.fixture(autouse=True)
def _reset_options():
    options.destroy()
    yield
    options.destroy()


def test_get_returns_suffix():
    options.parse(["fleece", "-as=/usr/bin/as", "-n=10"])
    assert options.get("-as=") == "/usr/bin/as"
    assert options.get("-n=") == "10"


def test_get_missing_returns_none():
    options.parse(["fleece", "-rand"])
    assert options.get("-as=") is None


def test_flag_without_value_gives_empty_suffix():
    options.parse(["fleece", "-rand"])
    assert options.get("-rand") == ""


def test_first_match_wins():
    options.parse(["-o=first", "-o=second"])
    assert options.get("-o=") == "first"


def test_get_before_parse_raises():
    with pytest.raises(RuntimeError):
        options.get("-as=")


def test_parse_twice_raises():
    options.parse(["a"])
    with pytest.raises(RuntimeError):
        options.parse(["b"])


def test_destroy_allows_reparse():
    options.parse(["-x=1"])
    options.destroy()
    options.parse(["-x=2"])
    assert options.get("-x=") == "2"


def test_options_object_copies_arguments():
    args = ["-asopt=-a,-b"]
    opts = Options(args)
    args.append("-n=3")
    assert opts.argv == ("-asopt=-a,-b",)
    assert opts.get("-asopt=") == "-a,-b"
    assert opts.get("-n=") is None