# trip_viewport/api/viewport/scheduler.py
"""Cancellable delayed execution."""

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    """Handle for a pending callback."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Capability for running a callback after a delay."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledTask:
        ...


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        logger.debug(f"Scheduled callback in {delay_seconds:.3f}s")
        return timer


__all__ = ["ScheduledTask", "Scheduler", "ThreadingScheduler"]
