"""Tests for interactive request collection."""
import pytest

from watchrun.core import CommandRegistry, InteractiveCommand, ShellCommand
from watchrun.prompts import ask_yes_no, collect_request


def scripted(*answers):
    """Prompt function replaying answers and recording the questions."""
    remaining = list(answers)
    asked = []

    def ask(prompt):
        asked.append(prompt)
        return remaining.pop(0)

    ask.asked = asked
    return ask


def test_collects_in_order():
    ask = scripted("src", "tests", "", "make test", "n", "")

    request = collect_request(ask)

    assert request.paths == ["src", "tests"]
    assert request.action == ShellCommand("make test")
    assert request.watch_for_creations is False
    assert request.recursive is True
    assert "creation" in ask.asked[4]
    assert "recursively" in ask.asked[5]


def test_registered_command_is_recognized():
    commands = CommandRegistry()
    commands.register("lint")(lambda ctx: None)

    request = collect_request(scripted("", "lint", "", ""), commands=commands)

    assert request.paths == []
    assert request.action == InteractiveCommand("lint")


def test_invalid_action_is_asked_again(capsys):
    request = collect_request(scripted("", "   ", "[]", "make", "y", "no"))

    assert request.action == ShellCommand("make")
    assert request.recursive is False
    assert capsys.readouterr().out.count("Invalid action") == 2


@pytest.mark.parametrize("answers, default, expected", [
    ([""], True, True),
    ([""], False, False),
    (["YES"], False, True),
    (["maybe", "n"], True, False),
])
def test_ask_yes_no(answers, default, expected):
    assert ask_yes_no(scripted(*answers), "Continue?", default) is expected


def test_defaults_come_from_configuration():
    request = collect_request(scripted("", "make", "", ""),
                              watch_for_creations=False, recursive=False)

    assert request.watch_for_creations is False
    assert request.recursive is False
