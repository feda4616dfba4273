# watchrun/core/process.py

"""
Process execution for actions

Synchronous commands block the caller until they exit. Background
processes return immediately; their completion handlers run on the
session scheduler once the process has terminated.

Process creation is observable: every background spawn is reported to
the observers registered on the launcher, which is how a session notices
that an action left work running after it returned.
"""
import itertools
import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..utils.logger import log_exception
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

Command = Union[str, List[str]]


@dataclass
class CompletedCommand:
    """Result of a synchronous command"""
    command: Command
    returncode: int
    output: str

    @property
    def line_count(self) -> int:
        return len(self.output.splitlines())


class BackgroundProcess:
    """
    A process running concurrently with the session

    Completion handlers are called in the order they were added, each
    exactly once, with this object as the only argument.
    """

    def __init__(self, command: Command, popen: subprocess.Popen,
                 scheduler: Scheduler):
        self.command = command
        self.popen = popen
        self.scheduler = scheduler
        self.returncode: Optional[int] = None
        self.output: str = ""
        self._callbacks: List[Callable[["BackgroundProcess"], None]] = []
        self._lock = threading.Lock()
        self._waiter: Optional[threading.Thread] = None

    @property
    def pid(self) -> int:
        return self.popen.pid

    @property
    def finished(self) -> bool:
        return self.returncode is not None

    def __repr__(self):
        return f"<BackgroundProcess pid={self.pid} command={self.command!r}>"

    def add_done_callback(self, callback: Callable[["BackgroundProcess"], None]):
        """Attach a completion handler; runs right away if already finished"""
        with self._lock:
            if not self.finished:
                self._callbacks.append(callback)
                return
        self.scheduler.submit(callback, self)

    def start_waiting(self):
        """Wait for termination on a daemon thread"""
        self._waiter = threading.Thread(
            target=self._wait,
            name=f"watchrun-wait-{self.pid}",
            daemon=True,
        )
        self._waiter.start()

    def _wait(self):
        output, _ = self.popen.communicate()
        self.scheduler.submit(self._finish, self.popen.returncode, output or "")

    def _finish(self, returncode: int, output: str):
        with self._lock:
            self.returncode = returncode
            self.output = output
            callbacks, self._callbacks = self._callbacks, []

        logger.info(f"Background process {self.pid} exited with {returncode}")
        for callback in callbacks:
            try:
                callback(self)
            except Exception as e:
                log_exception(logger, e, message=f"Error in completion handler of process {self.pid}")


class ProcessLauncher:
    """
    Process execution facility with an explicit observer hook
    """

    def __init__(self, scheduler: Scheduler, cwd: Optional[Path] = None):
        """
        Initialize process launcher

        Args:
            scheduler: Serialized path for completion handlers
            cwd: Working directory for commands
        """
        self.scheduler = scheduler
        self.cwd = cwd
        self._tokens = itertools.count(1)
        self._observers: Dict[int, Callable[[BackgroundProcess], None]] = {}

        self.stats = {
            'commands_run': 0,
            'processes_started': 0,
        }

    def add_observer(self, observer: Callable[[BackgroundProcess], None]) -> int:
        """Observe every background process started from now on"""
        token = next(self._tokens)
        self._observers[token] = observer
        return token

    def remove_observer(self, token: int) -> None:
        self._observers.pop(token, None)

    def run(self, command: Command) -> CompletedCommand:
        """
        Run a command and wait for it

        Args:
            command: Shell string or argument list

        Returns:
            Exit status and combined stdout/stderr

        Raises:
            OSError: The command could not be executed
        """
        self.stats['commands_run'] += 1
        logger.info(f"Running: {command}")

        result = subprocess.run(
            command,
            shell=isinstance(command, str),
            cwd=self.cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

        if result.returncode != 0:
            logger.warning(f"Command exited with {result.returncode}: {command}")

        return CompletedCommand(
            command=command,
            returncode=result.returncode,
            output=result.stdout or "",
        )

    def start(self, command: Command,
              on_exit: Optional[Callable[[BackgroundProcess], None]] = None) -> BackgroundProcess:
        """
        Start a background process and return without waiting

        Args:
            command: Shell string or argument list
            on_exit: Completion handler of the caller

        Returns:
            The running process
        """
        popen = subprocess.Popen(
            command,
            shell=isinstance(command, str),
            cwd=self.cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        process = BackgroundProcess(command, popen, self.scheduler)
        self.stats['processes_started'] += 1
        logger.info(f"Started background process {process.pid}: {command}")

        if on_exit is not None:
            process.add_done_callback(on_exit)

        for observer in list(self._observers.values()):
            observer(process)

        process.start_waiting()
        return process
