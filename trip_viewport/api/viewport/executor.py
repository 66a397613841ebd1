# trip_viewport/api/viewport/executor.py
"""Apply viewport commands to a map handle."""

import logging
import threading
from typing import Optional, Protocol, Tuple

from trip_viewport.api.models import FitRegion, NoOp, PanTo, Point, Region, ViewportCommand
from trip_viewport.api.viewport.scheduler import ScheduledTask, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_SECONDS = 0.25


class MapHandle(Protocol):
    """The subset of the map library the engine drives."""

    def fit_bounds(self, region: Region, padding: Optional[Tuple[int, int]] = None) -> None:
        ...

    def pan_to(self, point: Point) -> None:
        ...

    def get_bounds(self) -> Optional[Region]:
        ...

    def invalidate_size(self, force: bool = True) -> None:
        ...


class CommandExecutor:
    """Runs commands against a map handle, deferring layout-driven refits.

    Only the most recent deferred fit can ever run: scheduling a new one
    cancels the pending one, and ``dispose`` cancels whatever is left.
    """

    def __init__(self, map_handle: Optional[MapHandle],
                 scheduler: Optional[Scheduler] = None,
                 settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS):
        self.map_handle = map_handle
        self.scheduler = scheduler or ThreadingScheduler()
        self.settle_delay_seconds = settle_delay_seconds

        self.lock = threading.RLock()
        self._pending: Optional[ScheduledTask] = None
        self._generation = 0
        self._disposed = False

    @property
    def has_pending(self) -> bool:
        with self.lock:
            return self._pending is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def execute(self, command: ViewportCommand) -> None:
        """Apply ``command``; does nothing without a map or after disposal."""
        if self.map_handle is None or self._disposed:
            return

        if isinstance(command, NoOp):
            return
        if isinstance(command, PanTo):
            self.map_handle.pan_to(command.point)
        elif isinstance(command, FitRegion):
            if command.deferred:
                self._schedule_fit(command)
            else:
                self.map_handle.fit_bounds(command.region, padding=command.padding)
        else:
            raise TypeError(f"Unknown viewport command: {command!r}")

    def dispose(self) -> None:
        """Cancel any pending deferred fit and ignore all later commands."""
        with self.lock:
            self._disposed = True
            self._cancel_pending()
        logger.debug("Command executor disposed")

    def _cancel_pending(self) -> None:
        # caller holds the lock
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule_fit(self, command: FitRegion) -> None:
        with self.lock:
            if self._disposed:
                return
            if self._pending is not None:
                logger.debug("Superseding pending deferred fit")
            self._cancel_pending()
            generation = self._generation

            def fire() -> None:
                # held through the map calls: dispose() and newer fits wait for us
                with self.lock:
                    if not self._is_current(generation):
                        return
                    self._pending = None
                    self._run_deferred_fit(command, generation)

            self._pending = self.scheduler.schedule(self.settle_delay_seconds, fire)

    def _is_current(self, generation: int) -> bool:
        return not self._disposed and generation == self._generation

    def _run_deferred_fit(self, command: FitRegion, generation: int) -> None:
        # caller holds the lock; the map itself may dispose or reschedule
        try:
            self.map_handle.invalidate_size(True)
            if not self._is_current(generation):
                logger.debug("Deferred fit superseded during resize, skipping")
                return
            self.map_handle.fit_bounds(command.region, padding=command.padding)
        except Exception as e:
            logger.exception(f"Deferred fit failed: {e}")


__all__ = ["CommandExecutor", "MapHandle", "DEFAULT_SETTLE_DELAY_SECONDS"]
