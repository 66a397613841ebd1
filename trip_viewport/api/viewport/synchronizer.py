# trip_viewport/api/viewport/synchronizer.py
"""Keeps a map viewport in step with the trip-search state."""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from trip_viewport.api.config import get_viewport_config
from trip_viewport.api.models import NoOp, Region, Snapshot, ViewportCommand
from trip_viewport.api.viewport.classifier import classify_with_rule
from trip_viewport.api.viewport.executor import CommandExecutor, MapHandle
from trip_viewport.api.viewport.scheduler import Scheduler
from trip_viewport.api.viewport.snapshot import extract_snapshot

logger = logging.getLogger(__name__)


class StateSource(Protocol):
    """Anything that pushes ambient state to subscribers."""

    def subscribe(self, listener: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        ...


class ViewportSynchronizer:
    """Observes state changes and moves the map accordingly.

    Subscribing delivers the current state straight away, which acts as the
    mount notification (no previous snapshot). Each later notification is
    compared with the one before it; nothing older is kept.
    """

    def __init__(self, map_handle: Optional[MapHandle], state_source: StateSource,
                 constrained_platform: bool = False,
                 scheduler: Optional[Scheduler] = None,
                 config: Optional[Dict[str, Any]] = None):
        config = config or get_viewport_config()
        self.map_handle = map_handle
        self.constrained_platform = constrained_platform
        self.padding: Tuple[int, int] = tuple(config["bounds_padding"])
        self.executor = CommandExecutor(
            map_handle,
            scheduler=scheduler,
            settle_delay_seconds=config["settle_delay_ms"] / 1000.0,
        )

        self.previous: Optional[Snapshot] = None
        self.last_command: ViewportCommand = NoOp()
        self.last_rule: Optional[str] = None
        self.notification_count = 0

        # Notifications may come from socket handler threads
        self.lock = threading.Lock()
        self._disposed = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._unsubscribe = state_source.subscribe(self.on_state_change)

        logger.info(f"ViewportSynchronizer initialized (constrained_platform={constrained_platform})")

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_state_change(self, state: Dict[str, Any]) -> ViewportCommand:
        """Process one ambient state notification.

        Returns:
            The command that was chosen (NoOp once disposed)
        """
        with self.lock:
            if self._disposed:
                return NoOp()

            current = extract_snapshot(state)
            rule, command = classify_with_rule(
                self.previous,
                current,
                padding=self.padding,
                constrained_platform=self.constrained_platform,
                displayed_bounds=self._displayed_bounds,
            )
            self.previous = current
            self.last_command = command
            self.last_rule = rule
            self.notification_count += 1

            if not isinstance(command, NoOp):
                logger.debug(f"Viewport command via '{rule}': {command}")

            try:
                self.executor.execute(command)
            except Exception as e:
                logger.exception(f"Failed to apply viewport command {command}: {e}")

            return command

    def dispose(self) -> None:
        """Unsubscribe from the state source and cancel any deferred fit."""
        with self.lock:
            if self._disposed:
                return
            self._disposed = True
            unsubscribe, self._unsubscribe = self._unsubscribe, None

        if unsubscribe is not None:
            unsubscribe()
        self.executor.dispose()
        logger.info("ViewportSynchronizer disposed")

    def _displayed_bounds(self) -> Optional[Region]:
        if self.map_handle is None:
            return None
        try:
            return self.map_handle.get_bounds()
        except Exception as e:
            logger.warning(f"Could not read displayed map bounds: {e}")
            return None


__all__ = ["ViewportSynchronizer", "StateSource"]
