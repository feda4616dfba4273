# watchrun/watch/subsystem.py

"""
File system event subsystems

A subsystem owns the table that maps watch handles to their descriptors.
Sessions only ever see opaque WatchHandle values.
"""
import itertools
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Callable, Any, Union

from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from ..errors import WatchRegistrationError
from .events import FilesystemEvent
from .handlers import SubscriptionHandler

logger = logging.getLogger(__name__)

EventCallback = Callable[[FilesystemEvent], None]


@dataclass(frozen=True)
class WatchHandle:
    """Opaque subscription identifier"""
    id: int

    def __str__(self):
        return f"watch#{self.id}"


@dataclass(frozen=True)
class WatchDescriptor:
    """Durable, re-creatable specification of one subscription"""
    path: Path
    callback: EventCallback


class FilesystemSubsystem:
    """
    Base interface for file system event subsystems
    """

    def subscribe(self, path: Union[str, Path], callback: EventCallback) -> WatchHandle:
        """Register one subscription and return its handle"""
        raise NotImplementedError

    def unsubscribe(self, handle: WatchHandle) -> None:
        """Remove a subscription; no event is delivered for it afterwards"""
        raise NotImplementedError

    def describe(self, handle: WatchHandle) -> WatchDescriptor:
        """Resolve the descriptor a handle was created from"""
        raise NotImplementedError

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass


@dataclass
class _Subscription:
    descriptor: WatchDescriptor
    handler: SubscriptionHandler
    watch: Any


class WatchdogSubsystem(FilesystemSubsystem):
    """
    Subsystem backed by a watchdog observer

    Every subscription is a non-recursive watchdog watch on one path.
    Several subscriptions on the same path share the observer watch and
    are told apart by their handlers.
    """

    def __init__(self, use_polling: bool = False, poll_interval: float = 1.0):
        """
        Initialize watchdog subsystem

        Args:
            use_polling: Use polling instead of OS events
            poll_interval: Polling interval in seconds
        """
        self.use_polling = use_polling
        self.poll_interval = poll_interval

        if use_polling:
            self.observer = PollingObserver(timeout=poll_interval)
            logger.debug(f"Using polling observer (interval: {poll_interval}s)")
        else:
            self.observer = Observer()
            logger.debug("Using OS event observer")

        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self._subscriptions: Dict[WatchHandle, _Subscription] = {}
        self._watch_refs: Dict[Any, int] = {}

    def start(self) -> None:
        """Start the observer thread"""
        if self.observer.is_alive():
            return
        self.observer.start()
        logger.info("Watchdog observer started")

    def stop(self) -> None:
        """Stop the observer thread"""
        if not self.observer.is_alive():
            return
        self.observer.stop()
        self.observer.join(timeout=10)
        logger.info("Watchdog observer stopped")

    def subscribe(self, path: Union[str, Path], callback: EventCallback) -> WatchHandle:
        path = Path(path)
        if not path.exists():
            raise WatchRegistrationError(path, "path does not exist")

        with self._lock:
            handle = WatchHandle(next(self._ids))
            handler = SubscriptionHandler(handle, path, callback)

            try:
                watch = self.observer.schedule(handler, str(path), recursive=False)
            except OSError as e:
                raise WatchRegistrationError(path, str(e)) from e

            self._watch_refs[watch] = self._watch_refs.get(watch, 0) + 1
            self._subscriptions[handle] = _Subscription(
                descriptor=WatchDescriptor(path=path, callback=callback),
                handler=handler,
                watch=watch,
            )

        logger.debug(f"Subscribed {handle} -> {path}")
        return handle

    def unsubscribe(self, handle: WatchHandle) -> None:
        with self._lock:
            subscription = self._subscriptions.pop(handle, None)
            if subscription is None:
                logger.warning(f"Unknown watch handle: {handle}")
                return

            subscription.handler.deactivate()

            watch = subscription.watch
            remaining = self._watch_refs[watch] - 1
            if remaining:
                self._watch_refs[watch] = remaining
                self.observer.remove_handler_for_watch(subscription.handler, watch)
            else:
                del self._watch_refs[watch]
                try:
                    self.observer.unschedule(watch)
                except KeyError:
                    logger.debug(f"Observer already dropped watch for {watch.path}")

        logger.debug(f"Unsubscribed {handle} -> {subscription.descriptor.path}")

    def describe(self, handle: WatchHandle) -> WatchDescriptor:
        with self._lock:
            subscription = self._subscriptions.get(handle)
        if subscription is None:
            raise KeyError(f"Unknown watch handle: {handle}")
        return subscription.descriptor

    def active_handles(self):
        """Handles currently registered with the observer"""
        with self._lock:
            return set(self._subscriptions)

    def handler_for(self, handle: WatchHandle) -> Optional[SubscriptionHandler]:
        with self._lock:
            subscription = self._subscriptions.get(handle)
        return subscription.handler if subscription else None
