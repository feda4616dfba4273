# watchrun/core/session.py

"""
Watch sessions
"""
import itertools
from datetime import datetime
from typing import Dict, Any, Optional

from ..utils.display import ResultDisplay
from ..utils.logger import session_logger
from ..watch.events import FilesystemEvent
from ..watch.patterns import EventFilter
from ..watch.subsystem import FilesystemSubsystem
from ..watch.watchset import WatchSet
from .actions import ActionRunner, ActionSpec
from .commands import CommandRegistry
from .guard import GuardState, PauseGuard
from .process import ProcessLauncher
from .scheduler import Scheduler

_session_ids = itertools.count(1)


class WatchSession:
    """
    One watch request: its watches, its action and its pause state

    Raw events arrive on the subsystem's thread and are handed to the
    scheduler; everything else runs on the scheduler's serialized path.
    """

    def __init__(self, subsystem: FilesystemSubsystem, scheduler: Scheduler,
                 action: ActionSpec, display: ResultDisplay,
                 watch_for_creations: bool = True,
                 commands: Optional[CommandRegistry] = None,
                 name: Optional[str] = None,
                 cwd=None):
        """
        Initialize watch session

        Args:
            subsystem: File system event subsystem
            scheduler: Serialized callback path for this session
            action: What to run on a qualifying event
            display: Where command output is shown
            watch_for_creations: Whether created/renamed files trigger
            commands: Registry for named commands
            name: Label for logs and output
            cwd: Working directory for shell commands
        """
        self.name = name or f"session-{next(_session_ids)}"
        self.log = session_logger(__name__, self.name)
        self.subsystem = subsystem
        self.scheduler = scheduler
        self.action = action

        self.watch_set = WatchSet(subsystem)
        self.event_filter = EventFilter(watch_for_creations)
        self.launcher = ProcessLauncher(scheduler, cwd=cwd)
        self.runner = ActionRunner(self.launcher, display, commands, session_name=self.name)
        self.guard = PauseGuard(self)

        # Session flags
        self.live = True
        self.process_spotted = False

        self.stats = {
            'start_time': datetime.now(),
            'events_received': 0,
            'events_stale': 0,
            'events_ignored': 0,
            'actions_run': 0,
            'restores': 0,
            'watches_dropped': 0,
            'last_event': None,
        }

    @property
    def watch_for_creations(self) -> bool:
        return self.event_filter.watch_for_creations

    @property
    def state(self) -> GuardState:
        return self.guard.state

    def on_raw_event(self, event: FilesystemEvent):
        """Subscription callback; runs on the subsystem's thread"""
        self.scheduler.submit(self.handle_event, event)

    def handle_event(self, event: FilesystemEvent):
        """
        Process one event on the serialized path

        Raises:
            ActionExecutionError: the action failed
        """
        self.stats['events_received'] += 1
        self.stats['last_event'] = datetime.now()

        if not self.live:
            return

        if event.watch_handle not in self.watch_set:
            # Queued before its watch was removed
            self.stats['events_stale'] += 1
            self.log.debug(f"Dropping stale event {event}")
            return

        if not self.event_filter.should_trigger(event):
            self.stats['events_ignored'] += 1
            return

        self.log.info(f"Triggered by {event}")
        self.stats['actions_run'] += 1
        self.guard.run(event)

    def cancel(self) -> int:
        """
        Stop the session and remove every watch

        Returns:
            Number of watches removed
        """
        if not self.live:
            return 0

        self.live = False
        removed = self.watch_set.remove_all()
        self.log.info(f"Cancelled, removed {removed} watches")
        return removed

    def get_status(self) -> Dict[str, Any]:
        """Get session status"""
        return {
            'name': self.name,
            'live': self.live,
            'state': self.state.value,
            'action': str(self.action),
            'watch_for_creations': self.watch_for_creations,
            'watches': len(self.watch_set),
            'stats': {**self.stats, **self.event_filter.get_stats()},
        }
