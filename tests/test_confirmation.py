import io

import pytest

from fgacli.confirmation import ask_for_confirmation


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("\n", False),
        ("  Yes\n", True),
        ("y\n", True),
        ("NO\n", False),
        ("n\n", False),
        ("other\nn\n", False),
    ],
    ids=["default", "yes", "Y", "NO", "n", "other answer then no"],
)
def test_confirmation(text, expected):
    result = ask_for_confirmation("test", io.StringIO(text), io.StringIO())
    assert result is expected


def test_prompt_written_with_suffix():
    out = io.StringIO()
    ask_for_confirmation("test", io.StringIO("y\n"), out)
    assert out.getvalue() == "test(y/N)\n"


def test_prompt_repeated_until_valid_answer():
    out = io.StringIO()
    result = ask_for_confirmation("test", io.StringIO("maybe\nyes\n"), out)
    assert result is True
    assert out.getvalue().count("test(y/N)") == 2


def test_end_of_input_raises():
    with pytest.raises(EOFError):
        ask_for_confirmation("test", io.StringIO(""), io.StringIO())


def test_answer_without_newline_raises():
    with pytest.raises(EOFError):
        ask_for_confirmation("test", io.StringIO("y"), io.StringIO())