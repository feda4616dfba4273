"""Shared fixtures for watchrun tests."""
import itertools
import sys
import time
from pathlib import Path

import pytest

from watchrun.core import Initiator, InlineScheduler
from watchrun.errors import WatchRegistrationError
from watchrun.utils.display import ResultDisplay
from watchrun.watch.events import ActionKind, FilesystemEvent
from watchrun.watch.subsystem import FilesystemSubsystem, WatchDescriptor, WatchHandle


class FakeSubsystem(FilesystemSubsystem):
    """In-memory handle table; events are injected with emit()."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.subscriptions = {}
        self.fail_paths = set()
        self.subscribe_calls = 0

    def subscribe(self, path, callback):
        path = Path(path)
        self.subscribe_calls += 1
        if path in self.fail_paths:
            raise WatchRegistrationError(path, "no space left on device")
        if not path.exists():
            raise WatchRegistrationError(path, "path does not exist")
        handle = WatchHandle(next(self._ids))
        self.subscriptions[handle] = WatchDescriptor(path=path, callback=callback)
        return handle

    def unsubscribe(self, handle):
        del self.subscriptions[handle]

    def describe(self, handle):
        return self.subscriptions[handle]

    def active_paths(self):
        return sorted(descriptor.path for descriptor in self.subscriptions.values())

    def emit(self, path, kind=ActionKind.CHANGED, path2=None):
        """Deliver an event to every subscription on path or its directory."""
        path = Path(path)
        delivered = 0
        for handle, descriptor in list(self.subscriptions.items()):
            if descriptor.path in (path, path.parent):
                descriptor.callback(FilesystemEvent(handle, kind, path, path2))
                delivered += 1
        return delivered


class RecordingDisplay(ResultDisplay):
    def __init__(self):
        self.inline = []
        self.surfaces = []

    def show_inline(self, text):
        self.inline.append(text)

    def show_surface(self, title, text):
        self.surfaces.append((title, text))
        return None


def wait_until(predicate, timeout=5.0, interval=0.02):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def sleeper(seconds):
    """Argument list for a child process that sleeps."""
    return [sys.executable, "-c", f"import time; time.sleep({seconds})"]


@pytest.fixture()
def subsystem():
    return FakeSubsystem()


@pytest.fixture()
def display():
    return RecordingDisplay()


@pytest.fixture()
def initiator(subsystem, display, tmp_path):
    return Initiator(subsystem, InlineScheduler(), display, cwd=tmp_path)


@pytest.fixture()
def tree(tmp_path):
    """A small project tree with three files."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "pkg").mkdir()
    files = [
        tmp_path / "README",
        tmp_path / "src" / "main.c",
        tmp_path / "src" / "pkg" / "util.c",
    ]
    for path in files:
        path.write_text("x\n")
    return tmp_path
