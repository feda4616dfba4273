# watchrun/core/scheduler.py

"""
Serialized callback paths

Watchdog delivers events on its observer thread and background processes
finish on waiter threads. Neither runs session logic directly: both submit
the work to a scheduler, which runs it one callback at a time.
"""
import asyncio
import logging
from typing import Callable, Optional

from ..utils.logger import log_exception

logger = logging.getLogger(__name__)


class Scheduler:
    """Base interface for serialized callback paths"""

    def submit(self, callback: Callable, *args) -> None:
        raise NotImplementedError


class InlineScheduler(Scheduler):
    """
    Runs callbacks immediately on the submitting thread

    Only serialized when a single thread submits; meant for synchronous
    embedding and tests. Background process completion handlers then run
    on waiter threads, so PauseGuard serializes its own bookkeeping with a
    lock. Errors propagate to the submitter.
    """

    def submit(self, callback: Callable, *args) -> None:
        callback(*args)


class LoopScheduler(Scheduler):
    """
    Runs callbacks on an asyncio event loop

    The loop's single thread is the serialized path; submit is safe to
    call from any thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop,
                 on_error: Optional[Callable[[Exception], None]] = None):
        """
        Initialize loop scheduler

        Args:
            loop: Event loop that runs the callbacks
            on_error: Called after a callback error has been logged
        """
        self.loop = loop
        self.on_error = on_error
        self.stats = {
            'callbacks_run': 0,
            'callbacks_failed': 0,
        }

    def submit(self, callback: Callable, *args) -> None:
        if self.loop.is_closed():
            logger.debug(f"Event loop closed, dropping {callback}")
            return
        self.loop.call_soon_threadsafe(self._invoke, callback, args)

    def _invoke(self, callback: Callable, args: tuple):
        self.stats['callbacks_run'] += 1
        try:
            callback(*args)
        except Exception as e:
            self.stats['callbacks_failed'] += 1
            log_exception(logger, e, message=f"Error in watch callback: {e}")
            if self.on_error:
                self.on_error(e)
