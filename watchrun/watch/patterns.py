# watchrun/watch/patterns.py

"""
Noise filtering for file system events
"""
import logging
from pathlib import Path
from typing import Dict, Any

from .events import ActionKind, FilesystemEvent

logger = logging.getLogger(__name__)

# Emacs and friends mark lock/swap files with this prefix
SWAP_FILE_PREFIX = ".#"

IGNORED_KINDS = frozenset({ActionKind.STOPPED, ActionKind.ATTRIBUTE_CHANGED})
CREATION_KINDS = frozenset({ActionKind.CREATED, ActionKind.RENAMED})


def is_swap_file(path: Path) -> bool:
    """Check if path names an editor swap file"""
    return Path(path).name.startswith(SWAP_FILE_PREFIX)


def should_trigger(event: FilesystemEvent, watch_for_creations: bool) -> bool:
    """
    Decide whether an event should trigger the action

    Args:
        event: Event delivered by the file system subsystem
        watch_for_creations: Whether created/renamed files count as changes

    Returns:
        True if the event is a qualifying event
    """
    if event.action_kind in IGNORED_KINDS:
        return False

    if is_swap_file(event.path):
        return False

    if not watch_for_creations and event.action_kind in CREATION_KINDS:
        return False

    return True


class EventFilter:
    """
    Session-bound event filter with statistics
    """

    def __init__(self, watch_for_creations: bool = True):
        self.watch_for_creations = watch_for_creations
        self.stats = {
            'events_checked': 0,
            'events_passed': 0,
            'events_suppressed': 0,
        }

    def __call__(self, event: FilesystemEvent) -> bool:
        return self.should_trigger(event)

    def should_trigger(self, event: FilesystemEvent) -> bool:
        """Apply the filtering rules and keep counts"""
        self.stats['events_checked'] += 1

        if should_trigger(event, self.watch_for_creations):
            self.stats['events_passed'] += 1
            return True

        self.stats['events_suppressed'] += 1
        logger.debug(f"Suppressed event {event}")
        return False

    def get_stats(self) -> Dict[str, Any]:
        """Get filter statistics"""
        return self.stats.copy()
