# watchrun/watch/__init__.py

"""
File watching: events, filtering, subsystems and watch bookkeeping
"""
from .events import ActionKind, FilesystemEvent
from .patterns import EventFilter, should_trigger, is_swap_file
from .subsystem import FilesystemSubsystem, WatchdogSubsystem, WatchHandle, WatchDescriptor
from .watchset import WatchSet

__all__ = [
    'ActionKind',
    'FilesystemEvent',
    'EventFilter',
    'should_trigger',
    'is_swap_file',
    'FilesystemSubsystem',
    'WatchdogSubsystem',
    'WatchHandle',
    'WatchDescriptor',
    'WatchSet',
]
