from fleecekit.info import VERSION, print_options, print_version, usage_text, version_text


def test_usage_mentions_mandatory_options():
    text = usage_text()
    assert "-as=/usr/bin/as" in text
    assert "-decoders=dec1,dec2" in text
    assert "-arch=architecture" in text


def test_usage_lists_help_and_version_flags():
    text = usage_text()
    assert "-h, --help" in text
    assert "-v, --version" in text


def test_print_options_writes_usage(capsys):
    print_options()
    assert capsys.readouterr().out == usage_text()


def test_version_text_format():
    assert version_text() == "Fleece version: " + VERSION


def test_print_version_writes_one_line(capsys):
    print_version()
    assert capsys.readouterr().out == version_text() + "\n"