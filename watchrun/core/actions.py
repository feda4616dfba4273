# watchrun/core/actions.py

"""
Action definitions and dispatch
"""
import importlib
import logging
import re
import shlex
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import yaml

from ..errors import ActionExecutionError, InvalidActionSpecError
from ..utils.display import ResultDisplay
from .commands import CommandRegistry, default_registry
from .process import BackgroundProcess, ProcessLauncher

logger = logging.getLogger(__name__)

# Output with more lines than this gets its own result surface
INLINE_OUTPUT_LINES = 10

BACKGROUND_SUFFIX = "&"

_CALLABLE_REF = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")
_BARE_NAME = re.compile(r"^[A-Za-z_][\w-]*$")


@dataclass(frozen=True)
class ShellCommand:
    """Command text run through the shell; a trailing & runs it in the background"""
    text: str

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise InvalidActionSpecError(f"Shell command must be a non-empty string: {self.text!r}")
        if self.text.strip() == BACKGROUND_SUFFIX:
            raise InvalidActionSpecError("Shell command has nothing to run in the background")

    @property
    def background(self) -> bool:
        return self.text.rstrip().endswith(BACKGROUND_SUFFIX)

    @property
    def command(self) -> str:
        """Command text without the background marker"""
        text = self.text.rstrip()
        if self.background:
            text = text[:-len(BACKGROUND_SUFFIX)].rstrip()
        return text

    def __str__(self):
        return f"shell:{self.text}"


@dataclass(frozen=True)
class NativeCallable:
    """Python callable invoked with an ActionContext"""
    ref: Callable

    def __post_init__(self):
        if not callable(self.ref):
            raise InvalidActionSpecError(f"Not callable: {self.ref!r}")

    def __str__(self):
        name = getattr(self.ref, '__qualname__', repr(self.ref))
        return f"call:{name}"


@dataclass(frozen=True)
class InteractiveCommand:
    """Named command from a CommandRegistry"""
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidActionSpecError(f"Command name must be a non-empty string: {self.name!r}")

    def __str__(self):
        return f"command:{self.name}"


ActionSpec = Union[ShellCommand, NativeCallable, InteractiveCommand]
ACTION_TYPES = (ShellCommand, NativeCallable, InteractiveCommand)


@dataclass
class ActionContext:
    """What an action gets to see when it runs"""
    event: Any
    launcher: ProcessLauncher
    session_name: str = ""


def resolve_callable(ref: str) -> Callable:
    """
    Import a callable from a "package.module:attribute" reference

    Raises:
        InvalidActionSpecError: the reference cannot be imported
    """
    module_name, _, attr_path = ref.partition(":")
    try:
        target = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            target = getattr(target, attr)
    except (ImportError, AttributeError) as e:
        raise InvalidActionSpecError(f"Cannot resolve callable {ref}: {e}") from e

    if not callable(target):
        raise InvalidActionSpecError(f"{ref} is not callable")
    return target


def parse_action_text(text: str, commands: Optional[CommandRegistry] = None) -> ActionSpec:
    """
    Interpret free text typed by the user as an action

    Args:
        text: "quoted" text, a [yaml, list] of arguments, a module:attribute
            reference, a registered command name, or a plain shell command
        commands: Registry used to recognize command names

    Returns:
        Action specification
    """
    commands = commands or default_registry
    text = (text or "").strip()
    if not text:
        raise InvalidActionSpecError("Empty action")

    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return ShellCommand(text[1:-1])

    if text.startswith("["):
        try:
            argv = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InvalidActionSpecError(f"Cannot parse argument list {text}: {e}") from e
        if not isinstance(argv, list) or not argv:
            raise InvalidActionSpecError(f"Argument list must be a non-empty list: {text}")
        return ShellCommand(shlex.join(str(arg) for arg in argv))

    if _CALLABLE_REF.match(text):
        return NativeCallable(resolve_callable(text))

    if _BARE_NAME.match(text) and text in commands:
        return InteractiveCommand(text)

    return ShellCommand(text)


class ActionRunner:
    """
    Runs action specifications
    """

    def __init__(self, launcher: ProcessLauncher, display: ResultDisplay,
                 commands: Optional[CommandRegistry] = None,
                 session_name: str = ""):
        """
        Initialize action runner

        Args:
            launcher: Process execution facility
            display: Where command output is shown
            commands: Registry for InteractiveCommand actions
            session_name: Label used in output titles
        """
        self.launcher = launcher
        self.display = display
        self.commands = commands or default_registry
        self.session_name = session_name

        self.stats = {
            'actions_run': 0,
            'actions_failed': 0,
        }

    def validate(self, spec: Any) -> None:
        """Reject specs that can never run"""
        if not isinstance(spec, ACTION_TYPES):
            raise InvalidActionSpecError(f"Unrecognized action: {spec!r}")
        if isinstance(spec, InteractiveCommand):
            self.commands.get(spec.name)

    def run(self, spec: Any, event: Any = None) -> None:
        """
        Run an action once

        Raises:
            InvalidActionSpecError: spec has an unknown shape
            ActionExecutionError: a callable or command raised
        """
        self.validate(spec)
        self.stats['actions_run'] += 1
        logger.info(f"Running action {spec}")

        if isinstance(spec, ShellCommand):
            self._run_shell(spec)
            return

        context = ActionContext(event=event, launcher=self.launcher,
                                session_name=self.session_name)
        try:
            if isinstance(spec, NativeCallable):
                spec.ref(context)
            else:
                self.commands.invoke(spec.name, context)
        except Exception as e:
            self.stats['actions_failed'] += 1
            raise ActionExecutionError(spec, e) from e

    def _run_shell(self, spec: ShellCommand):
        if spec.background:
            self.launcher.start(spec.command, on_exit=self._report_background)
            return

        result = self.launcher.run(spec.command)
        self.report_output(spec.command, result.output)

    def _report_background(self, process: BackgroundProcess):
        self.report_output(str(process.command), process.output)

    def report_output(self, title: str, output: str):
        """Show output inline, or on a new surface when it is long"""
        if len(output.splitlines()) > INLINE_OUTPUT_LINES:
            self.display.show_surface(title, output)
        else:
            self.display.show_inline(output)
