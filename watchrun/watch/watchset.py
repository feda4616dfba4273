# watchrun/watch/watchset.py

"""
Watch handle bookkeeping for a single session
"""
import logging
import os
from pathlib import Path
from typing import List, Iterable, Set, Union

from ..errors import WatchRegistrationError
from ..utils.logger import log_exception
from .subsystem import (
    EventCallback,
    FilesystemSubsystem,
    WatchDescriptor,
    WatchHandle,
)

logger = logging.getLogger(__name__)


def iter_files(root: Path) -> List[Path]:
    """
    List every file reachable under root

    Args:
        root: Directory to walk

    Returns:
        Sorted list of file paths, without depth limit
    """
    files = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            files.append(Path(dirpath) / filename)
    return sorted(files)


class WatchSet:
    """
    Set of watch handles owned by one session

    The handle -> descriptor mapping lives in the subsystem; the set only
    remembers which handles belong to it. Handles are never shared with
    another WatchSet.
    """

    def __init__(self, subsystem: FilesystemSubsystem):
        self.subsystem = subsystem
        self._handles: Set[WatchHandle] = set()

    def __len__(self):
        return len(self._handles)

    def __contains__(self, handle):
        return handle in self._handles

    def __iter__(self):
        return iter(list(self._handles))

    def is_active(self, handle: WatchHandle) -> bool:
        return handle in self._handles

    def paths(self) -> Set[Path]:
        """Paths currently watched"""
        return {self.subsystem.describe(handle).path for handle in self._handles}

    def add(self, path: Union[str, Path], handler: EventCallback) -> WatchHandle:
        """
        Register one subscription

        Raises:
            WatchRegistrationError: path missing or rejected by the subsystem
        """
        handle = self.subsystem.subscribe(Path(path), handler)
        self._handles.add(handle)
        return handle

    def add_recursive(self, root: Union[str, Path], handler: EventCallback,
                      recursive: bool = True) -> List[WatchHandle]:
        """
        Watch root, or every file below it when recursive

        Files created after this call are not picked up.

        Args:
            root: File or directory to watch
            handler: Event callback for every subscription
            recursive: Expand directories into per-file watches

        Returns:
            Handles added by this call
        """
        root = Path(root)

        if recursive and root.is_dir():
            files = iter_files(root)
            logger.info(f"Watching {len(files)} files under {root}")
            return [self.add(path, handler) for path in files]

        logger.info(f"Watching {root}")
        return [self.add(root, handler)]

    def remove_all(self) -> int:
        """Remove every handle; returns how many were removed"""
        count = 0
        for handle in list(self._handles):
            self.subsystem.unsubscribe(handle)
            self._handles.discard(handle)
            count += 1
        return count

    def snapshot_and_clear(self) -> List[WatchDescriptor]:
        """
        Capture descriptors and remove every watch

        Returns:
            Descriptors needed to recreate the watches
        """
        descriptors = []
        for handle in list(self._handles):
            descriptors.append(self.subsystem.describe(handle))
            self.subsystem.unsubscribe(handle)
            self._handles.discard(handle)

        logger.debug(f"Paused {len(descriptors)} watches")
        return descriptors

    def restore(self, descriptors: Iterable[WatchDescriptor],
                skip_missing: bool = False,
                skip_failed: bool = False) -> List[WatchHandle]:
        """
        Recreate watches from descriptors

        Args:
            descriptors: Output of snapshot_and_clear
            skip_missing: Drop descriptors whose path no longer exists
                instead of failing
            skip_failed: Drop descriptors the subsystem rejects, log the
                error and carry on with the rest

        Raises:
            WatchRegistrationError: a watch could not be recreated and
                skip_failed is off
        """
        handles = []
        for descriptor in descriptors:
            if skip_missing and not descriptor.path.exists():
                logger.warning(f"Not restoring watch, path is gone: {descriptor.path}")
                continue
            try:
                handles.append(self.add(descriptor.path, descriptor.callback))
            except WatchRegistrationError as e:
                if not skip_failed:
                    raise
                log_exception(logger, e, message=f"Not restoring watch for {descriptor.path}")

        logger.debug(f"Restored {len(handles)} watches")
        return handles
