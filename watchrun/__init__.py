"""
watchrun - run a command when files change, without retriggering on its own output
"""
from .errors import (
    WatchRunError,
    WatchRegistrationError,
    WatchSetupError,
    ActionExecutionError,
    InvalidActionSpecError,
)
from .core import (
    Initiator,
    WatchSession,
    ShellCommand,
    NativeCallable,
    InteractiveCommand,
    register_command,
)

__version__ = "0.1.0"

__all__ = [
    'WatchRunError',
    'WatchRegistrationError',
    'WatchSetupError',
    'ActionExecutionError',
    'InvalidActionSpecError',
    'Initiator',
    'WatchSession',
    'ShellCommand',
    'NativeCallable',
    'InteractiveCommand',
    'register_command',
]
