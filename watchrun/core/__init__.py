# watchrun/core/__init__.py

"""
Pause/restore coordination around triggered actions
"""
from .actions import (
    ActionContext, ActionRunner, ShellCommand, NativeCallable, InteractiveCommand,
    parse_action_text, resolve_callable,
)
from .commands import CommandRegistry, default_registry, register_command
from .guard import GuardState, PauseGuard
from .initiator import Initiator
from .process import BackgroundProcess, ProcessLauncher
from .scheduler import InlineScheduler, LoopScheduler, Scheduler
from .sentinel import ProcessSentinel
from .session import WatchSession

__all__ = [
    'ActionContext',
    'ActionRunner',
    'ShellCommand',
    'NativeCallable',
    'InteractiveCommand',
    'parse_action_text',
    'resolve_callable',
    'CommandRegistry',
    'default_registry',
    'register_command',
    'GuardState',
    'PauseGuard',
    'Initiator',
    'BackgroundProcess',
    'ProcessLauncher',
    'InlineScheduler',
    'LoopScheduler',
    'Scheduler',
    'ProcessSentinel',
    'WatchSession',
]
