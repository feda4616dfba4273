# watchrun/core/guard.py

"""
Pause cycle around a triggered action

All watches of the session are removed before the action runs and put
back afterwards, so files written by the action cannot trigger it again.
When the action leaves background processes running, the watches come
back only once the last of them has exited.
"""
import logging
import threading
from enum import Enum
from typing import Any, List, Optional, TYPE_CHECKING

from .process import BackgroundProcess
from .sentinel import ProcessSentinel

if TYPE_CHECKING:
    from .session import WatchSession

logger = logging.getLogger(__name__)


class GuardState(Enum):
    ARMED = "armed"
    PAUSED = "paused"
    DRAINING = "draining"
    RESTORED = "restored"


class PauseGuard:
    """
    Runs the session action inside a pause cycle

    States: ARMED -> PAUSED -> (DRAINING | RESTORED) -> ARMED
    """

    def __init__(self, session: "WatchSession"):
        self.session = session
        self.sentinel = ProcessSentinel(session.launcher)
        self.state = GuardState.ARMED
        self.cycles = 0

        self._descriptors: List[Any] = []
        self._pending: List[BackgroundProcess] = []
        # Completion handlers may run on another thread than run()
        self._lock = threading.RLock()

    @property
    def armed(self) -> bool:
        return self.state == GuardState.ARMED

    def run(self, event: Optional[Any] = None) -> GuardState:
        """
        Pause watching, run the action, restore or defer restoring

        Args:
            event: The qualifying event that triggered the cycle

        Returns:
            State at the end of the call (ARMED or DRAINING)

        Raises:
            ActionExecutionError: the action failed; watches are restored
                first unless a background process is still running
        """
        if not self.armed:
            # A stale event slipped in while watches were away
            logger.debug(f"Ignoring trigger in state {self.state.value}")
            return self.state

        session = self.session
        self.cycles += 1
        self.state = GuardState.PAUSED
        self._descriptors = session.watch_set.snapshot_and_clear()
        self._pending = []
        session.process_spotted = False
        session.log.info(f"Paused {len(self._descriptors)} watches for {event}")

        token = self.sentinel.install(self._on_spotted, self._on_terminated)
        try:
            session.runner.run(session.action, event)
        finally:
            self.sentinel.uninstall(token)
            with self._lock:
                if session.process_spotted and self._pending:
                    self.state = GuardState.DRAINING
                    session.log.info(f"Waiting for {len(self._pending)} "
                                     f"background process(es) before restoring watches")
                else:
                    self._restore()

        return self.state

    def _on_spotted(self, process: BackgroundProcess):
        with self._lock:
            self.session.process_spotted = True
            self._pending.append(process)

    def _on_terminated(self, process: BackgroundProcess):
        with self._lock:
            if process in self._pending:
                self._pending.remove(process)

            if self._pending:
                logger.debug(f"Process {process.pid} done, {len(self._pending)} still running")
                return

            if self.state != GuardState.DRAINING:
                # Exited before the action returned; run() restores
                return

            self._restore()

    def _restore(self):
        """Put the paused watches back; always ends ARMED"""
        session = self.session
        descriptors, self._descriptors = self._descriptors, []

        try:
            if not session.live:
                session.log.info("Session cancelled, not restoring watches")
                return

            # Deleted or rejected paths are dropped, the rest come back
            handles = session.watch_set.restore(descriptors, skip_missing=True, skip_failed=True)
            self.state = GuardState.RESTORED
            session.stats['restores'] += 1

            dropped = len(descriptors) - len(handles)
            if dropped:
                session.stats['watches_dropped'] += dropped
                session.log.warning(f"Restored {len(handles)} watches, dropped {dropped}")
            else:
                session.log.info(f"Restored {len(handles)} watches")

            if descriptors and not handles:
                session.log.error("No watch could be restored, cancelling session")
                session.cancel()
        finally:
            self.state = GuardState.ARMED
