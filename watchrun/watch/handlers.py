# watchrun/watch/handlers.py

"""
Watchdog event handlers for watch subscriptions
"""
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Callable, Any, Tuple

from watchdog.events import (
    FileSystemEventHandler,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)

from .events import ActionKind, FilesystemEvent

logger = logging.getLogger(__name__)

Stamp = Tuple[int, int]


def content_stamp(path: Path) -> Optional[Stamp]:
    """(mtime_ns, size) of a regular file; None when it cannot be read"""
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_mtime_ns, st.st_size


class SubscriptionHandler(FileSystemEventHandler):
    """
    Event handler bound to exactly one watch subscription

    The handler converts watchdog events into FilesystemEvent objects
    carrying the subscription handle and hands them to the callback.
    Once deactivated it drops everything, including events already
    queued inside the observer.

    Watchdog reports metadata-only changes (chmod, chown, xattrs) as
    modifications. The handler keeps a content stamp per file it knows
    about and reports a modification that left the stamp unchanged as
    ATTRIBUTE_CHANGED.
    """

    def __init__(self, handle: Any, path: Path,
                 callback: Callable[[FilesystemEvent], None]):
        """
        Initialize subscription handler

        Args:
            handle: Watch handle this handler reports
            path: Watched path
            callback: Receives converted events
        """
        self.handle = handle
        self.path = path
        self.callback = callback
        self.active = True
        self._stamps: Dict[Path, Stamp] = {}
        self._seed_stamps()

        self.stats = {
            'events_received': 0,
            'events_delivered': 0,
            'events_dropped': 0,
        }

    def _seed_stamps(self):
        if self.path.is_dir():
            try:
                entries = list(os.scandir(self.path))
            except OSError as e:
                logger.debug(f"Cannot list {self.path}: {e}")
                return
            for entry in entries:
                if entry.is_file(follow_symlinks=False):
                    self._remember(Path(entry.path))
        else:
            self._remember(self.path)

    def _remember(self, path: Path) -> Optional[Stamp]:
        stamp = content_stamp(path)
        if stamp is None:
            self._stamps.pop(path, None)
        else:
            self._stamps[path] = stamp
        return stamp

    def deactivate(self):
        """Stop delivering events"""
        self.active = False

    def on_any_event(self, event):
        """Handle any file system event"""
        self.stats['events_received'] += 1

        if not self.active:
            self.stats['events_dropped'] += 1
            return

        converted = self._convert_event(event)
        if converted is None:
            self.stats['events_dropped'] += 1
            return

        self.stats['events_delivered'] += 1
        self.callback(converted)

    def _convert_event(self, event) -> Optional[FilesystemEvent]:
        """Convert watchdog event to our internal format"""
        src_path = Path(os.fsdecode(event.src_path))
        dest_path = Path(os.fsdecode(event.dest_path)) if event.dest_path else None

        if event.event_type == EVENT_TYPE_CREATED:
            kind = ActionKind.CREATED
            if not event.is_directory:
                self._remember(src_path)
        elif event.event_type == EVENT_TYPE_DELETED:
            self._stamps.pop(src_path, None)
            if event.is_directory and src_path == self.path:
                # The watched directory itself is gone
                kind = ActionKind.STOPPED
            else:
                kind = ActionKind.REMOVED
        elif event.event_type == EVENT_TYPE_MOVED:
            kind = ActionKind.RENAMED
            self._stamps.pop(src_path, None)
            if dest_path and not event.is_directory:
                self._remember(dest_path)
        elif event.event_type == EVENT_TYPE_MODIFIED:
            if event.is_directory:
                # Directory mtime bumps accompany every change of an entry
                kind = ActionKind.ATTRIBUTE_CHANGED
            else:
                kind = self._classify_modification(src_path)
        else:
            # opened / closed notifications carry no new content
            logger.debug(f"Ignoring {event.event_type} event for {src_path}")
            return None

        return FilesystemEvent(
            watch_handle=self.handle,
            action_kind=kind,
            path=src_path,
            path2=dest_path,
        )

    def _classify_modification(self, path: Path) -> ActionKind:
        previous = self._stamps.get(path)
        current = self._remember(path)
        if previous is not None and current == previous:
            logger.debug(f"Metadata-only change of {path}")
            return ActionKind.ATTRIBUTE_CHANGED
        return ActionKind.CHANGED

    def get_stats(self):
        """Get handler statistics"""
        return self.stats.copy()
