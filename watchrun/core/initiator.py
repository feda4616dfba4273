# watchrun/core/initiator.py

"""
Session setup
"""
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..errors import WatchRegistrationError, WatchSetupError
from ..utils.display import ResultDisplay
from ..watch.subsystem import FilesystemSubsystem
from .actions import ActionSpec
from .commands import CommandRegistry, default_registry
from .scheduler import Scheduler
from .session import WatchSession


def normalize_paths(paths: Optional[Iterable[Union[str, Path]]], cwd: Path) -> List[Path]:
    """
    Drop blank entries; an empty result means the working directory

    Args:
        paths: Paths as given by the user
        cwd: Directory used when nothing usable is left

    Returns:
        Paths to watch, relative ones resolved against cwd
    """
    result = []
    for path in paths or []:
        if isinstance(path, str):
            path = path.strip()
            if not path:
                continue
        path = Path(path).expanduser()
        result.append(path if path.is_absolute() else cwd / path)

    return result or [cwd]


class Initiator:
    """
    Builds watch sessions
    """

    def __init__(self, subsystem: FilesystemSubsystem, scheduler: Scheduler,
                 display: ResultDisplay,
                 commands: Optional[CommandRegistry] = None,
                 cwd: Optional[Path] = None):
        """
        Initialize initiator

        Args:
            subsystem: File system event subsystem shared by the sessions
            scheduler: Serialized callback path for the sessions
            display: Where command output is shown
            commands: Registry for named commands
            cwd: Working directory (defaults to the process working directory)
        """
        self.subsystem = subsystem
        self.scheduler = scheduler
        self.display = display
        self.commands = commands or default_registry
        self.cwd = Path(cwd) if cwd else None

    def start(self, paths: Optional[Iterable[Union[str, Path]]], action: ActionSpec,
              watch_for_creations: bool = True, recursive: bool = True,
              name: Optional[str] = None) -> WatchSession:
        """
        Watch paths and run action on qualifying changes

        Args:
            paths: Files or directories; empty or blank means the working directory
            action: What to run
            watch_for_creations: Whether created/renamed files trigger
            recursive: Expand directories into per-file watches
            name: Session label

        Returns:
            Armed session

        Raises:
            InvalidActionSpecError: action can never run
            WatchSetupError: a watch could not be registered; nothing is left behind
        """
        cwd = self.cwd or Path.cwd()
        watch_paths = normalize_paths(paths, cwd)

        session = WatchSession(
            subsystem=self.subsystem,
            scheduler=self.scheduler,
            action=action,
            display=self.display,
            watch_for_creations=watch_for_creations,
            commands=self.commands,
            name=name,
            cwd=cwd,
        )
        session.runner.validate(action)

        try:
            for path in watch_paths:
                session.watch_set.add_recursive(path, session.on_raw_event, recursive)
        except WatchRegistrationError as e:
            removed = session.watch_set.remove_all()
            session.live = False
            session.log.error(f"Setup failed, rolled back {removed} watches: {e}")
            raise WatchSetupError(e) from e

        session.log.info(f"Watching {len(session.watch_set)} paths, "
                    f"action {action} (creations: {watch_for_creations}, recursive: {recursive})")
        return session
