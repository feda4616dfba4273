# watchrun/core/sentinel.py

"""
Background process detection for one action invocation
"""
import logging
from typing import Callable, List, Optional

from .process import BackgroundProcess, ProcessLauncher

logger = logging.getLogger(__name__)


class ProcessSentinel:
    """
    Watches a launcher while an action runs

    While installed, every background process the action starts is
    reported through on_spotted and gets on_terminated attached as a
    completion handler. Handlers the action attached itself run first.
    """

    def __init__(self, launcher: ProcessLauncher):
        self.launcher = launcher
        self.spotted: List[BackgroundProcess] = []
        self._token: Optional[int] = None

    @property
    def installed(self) -> bool:
        return self._token is not None

    def install(self, on_spotted: Callable[[BackgroundProcess], None],
                on_terminated: Callable[[BackgroundProcess], None]) -> int:
        """
        Start intercepting process creation

        Args:
            on_spotted: Called once per spawned process, at spawn time
            on_terminated: Called once per spawned process, after it exits

        Returns:
            Token for uninstall
        """
        if self.installed:
            raise RuntimeError("ProcessSentinel is already installed")

        self.spotted = []

        def intercept(process: BackgroundProcess):
            logger.debug(f"Spotted background process {process.pid}")
            self.spotted.append(process)
            on_spotted(process)
            process.add_done_callback(on_terminated)

        self._token = self.launcher.add_observer(intercept)
        return self._token

    def uninstall(self, token: int) -> None:
        """Stop intercepting; processes already spotted keep their handlers"""
        if token != self._token:
            logger.warning(f"Ignoring stale sentinel token {token}")
            return
        self.launcher.remove_observer(token)
        self._token = None
