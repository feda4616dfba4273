"""Tests for action parsing and dispatch."""
import pytest

from conftest import wait_until
from watchrun.core import (
    ActionRunner, CommandRegistry, InlineScheduler, InteractiveCommand,
    NativeCallable, ProcessLauncher, ShellCommand, parse_action_text, resolve_callable,
)
from watchrun.core.actions import INLINE_OUTPUT_LINES
from watchrun.errors import ActionExecutionError, InvalidActionSpecError


@pytest.fixture()
def commands():
    registry = CommandRegistry()

    @registry.register()
    def run_tests(context):
        context.launcher.run("true")

    return registry


@pytest.fixture()
def runner(tmp_path, display, commands):
    launcher = ProcessLauncher(InlineScheduler(), cwd=tmp_path)
    return ActionRunner(launcher, display, commands=commands, session_name="test")


class TestShellCommand:

    @pytest.mark.parametrize("text", ["", "   ", "&", " & "])
    def test_rejects_empty_text(self, text):
        with pytest.raises(InvalidActionSpecError):
            ShellCommand(text)

    def test_background_marker(self):
        spec = ShellCommand("make all &")

        assert spec.background
        assert spec.command == "make all"

    def test_foreground(self):
        spec = ShellCommand("make all")

        assert not spec.background
        assert spec.command == "make all"


class TestParseActionText:

    def test_plain_text_is_shell(self, commands):
        assert parse_action_text("make -j4", commands) == ShellCommand("make -j4")

    def test_quoted_text_is_shell(self, commands):
        # Quoting forces shell even for a registered name
        assert parse_action_text('"run-tests"', commands) == ShellCommand("run-tests")

    def test_argument_list_is_quoted(self, commands):
        spec = parse_action_text("[echo, hello world]", commands)

        assert spec == ShellCommand("echo 'hello world'")

    def test_registered_name_is_command(self, commands):
        assert parse_action_text("run-tests", commands) == InteractiveCommand("run-tests")

    def test_unregistered_name_is_shell(self, commands):
        assert parse_action_text("make", commands) == ShellCommand("make")

    def test_callable_reference(self, commands):
        spec = parse_action_text("os.path:join", commands)

        assert isinstance(spec, NativeCallable)
        assert spec.ref is resolve_callable("os.path:join")

    @pytest.mark.parametrize("text", ["", "   ", "[]", "[unclosed"])
    def test_invalid_text(self, commands, text):
        with pytest.raises(InvalidActionSpecError):
            parse_action_text(text, commands)


class TestResolveCallable:

    def test_nested_attribute(self):
        import os.path
        assert resolve_callable("os:path.join") is os.path.join

    @pytest.mark.parametrize("ref", ["no_such_module_xyz:thing", "os:no_such_attr"])
    def test_unresolvable(self, ref):
        with pytest.raises(InvalidActionSpecError):
            resolve_callable(ref)

    def test_not_callable(self):
        with pytest.raises(InvalidActionSpecError):
            resolve_callable("os:sep")


class TestActionRunner:

    def test_short_output_shown_inline(self, runner, display):
        runner.run(ShellCommand("echo one; echo two"))

        assert display.inline == ["one\ntwo\n"]
        assert display.surfaces == []

    def test_threshold_output_stays_inline(self, runner, display):
        runner.report_output("title", "line\n" * INLINE_OUTPUT_LINES)

        assert len(display.inline) == 1
        assert display.surfaces == []

    def test_long_output_gets_surface(self, runner, display):
        runner.run(ShellCommand(f"seq 1 {INLINE_OUTPUT_LINES + 1}"))

        assert display.inline == []
        assert len(display.surfaces) == 1
        title, text = display.surfaces[0]
        assert title == f"seq 1 {INLINE_OUTPUT_LINES + 1}"
        assert text.splitlines()[-1] == str(INLINE_OUTPUT_LINES + 1)

    def test_failing_shell_command_output_still_shown(self, runner, display):
        runner.run(ShellCommand("echo broken; exit 1"))

        assert display.inline == ["broken\n"]

    def test_background_output_shown_on_exit(self, runner, display):
        runner.run(ShellCommand("echo later &"))

        assert wait_until(lambda: display.inline == ["later\n"])

    def test_callable_receives_context(self, runner):
        seen = []
        runner.run(NativeCallable(seen.append), event="evt")

        (context,) = seen
        assert context.event == "evt"
        assert context.launcher is runner.launcher
        assert context.session_name == "test"

    def test_callable_failure_is_wrapped(self, runner):
        def broken(context):
            raise KeyError("missing")

        with pytest.raises(ActionExecutionError) as excinfo:
            runner.run(NativeCallable(broken))

        assert isinstance(excinfo.value.cause, KeyError)
        assert runner.stats == {'actions_run': 1, 'actions_failed': 1}

    def test_registered_command_runs(self, runner):
        runner.run(InteractiveCommand("run-tests"))

        assert runner.launcher.stats['commands_run'] == 1

    def test_unknown_command(self, runner):
        with pytest.raises(InvalidActionSpecError):
            runner.run(InteractiveCommand("nope"))

        assert runner.stats['actions_run'] == 0

    @pytest.mark.parametrize("spec", ["make", None, 42])
    def test_unrecognized_spec(self, runner, spec):
        with pytest.raises(InvalidActionSpecError):
            runner.run(spec)


def test_register_replaces_existing_name():
    registry = CommandRegistry()
    registry.register("build")(lambda ctx: "first")
    registry.register("build")(lambda ctx: "second")

    assert registry.names() == ["build"]
    assert registry.get("build")(None) == "second"
