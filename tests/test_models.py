import pytest

from minishell.models import Command, Redirect, RedirectType


@pytest.mark.parametrize(
    "token, kind, file",
    [
        ("<< EOF", RedirectType.INPUT_DOUBLE, "EOF"),
        (">>log", RedirectType.OUTPUT_DOUBLE, "log"),
        ("<  in", RedirectType.INPUT_SINGLE, "in"),
        ("> out", RedirectType.OUTPUT_SINGLE, "out"),
    ],
)
def test_from_token(token, kind, file):
    assert Redirect.from_token(token) == Redirect(kind, file)


def test_redirect_type_numbers_follow_header():
    assert [int(t) for t in RedirectType] == [1, 2, 3, 4]
    assert Redirect.from_token("<<x").type == 2


def test_from_token_rejects_plain_word():
    with pytest.raises(ValueError):
        Redirect.from_token("cat")


def test_operator_round_trip():
    for kind in RedirectType:
        assert Redirect.from_token(kind.operator + "f").type is kind


def test_argc_counts_arguments_after_name():
    command = Command()
    assert command.argc == -1
    command.add_argument("echo")
    command.add_argument("hi")
    assert command.argc == len(command.argv) - 1
    assert command.argv == ["echo", "hi"]
    assert command.name == "echo"


@pytest.mark.parametrize("file", ["", "<", ">out"])
def test_syntax_error_detected(file):
    command = Command()
    command.add_redirect(Redirect(RedirectType.OUTPUT_SINGLE, file))
    assert command.has_syntax_error() is True


def test_no_syntax_error_with_good_file():
    command = Command(argv=["cat"])
    command.add_redirect(Redirect(RedirectType.INPUT_SINGLE, "in"))
    assert command.has_syntax_error() is False
    assert command.redirects[0].file == "in"