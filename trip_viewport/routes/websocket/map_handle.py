# trip_viewport/routes/websocket/map_handle.py
"""Map handle that drives a browser-side map over Socket.IO."""

import logging
import threading
from typing import Optional, Tuple

from trip_viewport.api.models import Point, Region

logger = logging.getLogger(__name__)


class SocketIOMapHandle:
    """Forwards viewport primitives to one client as Socket.IO events.

    Commands are fire-and-forget. ``get_bounds`` answers from the bounds the
    client last reported through ``map_bounds``.
    """

    def __init__(self, socketio, sid: str, namespace: str):
        self.socketio = socketio
        self.sid = sid
        self.namespace = namespace
        self._bounds: Optional[Region] = None
        self._lock = threading.Lock()

    def _emit(self, event: str, data: dict) -> None:
        self.socketio.emit(event, data, room=self.sid, namespace=self.namespace)
        logger.debug(f"[MAP] {event} -> {self.sid}: {data}")

    def fit_bounds(self, region: Region, padding: Optional[Tuple[int, int]] = None) -> None:
        if region.is_empty:
            raise ValueError("Refusing to fit an empty region")
        self._emit("fit_bounds", {
            "bounds": region.to_list(),
            "padding": list(padding) if padding is not None else None,
        })

    def pan_to(self, point: Point) -> None:
        self._emit("pan_to", point.to_dict())

    def invalidate_size(self, force: bool = True) -> None:
        self._emit("invalidate_size", {"force": force})

    def get_bounds(self) -> Optional[Region]:
        with self._lock:
            return self._bounds

    def update_bounds(self, region: Optional[Region]) -> None:
        """Record the bounds the client reports as currently displayed."""
        with self._lock:
            self._bounds = region


def parse_bounds(data) -> Optional[Region]:
    """Parse ``{"south", "west", "north", "east"}`` or ``[[s, w], [n, e]]``."""
    try:
        if isinstance(data, dict):
            region = Region(
                south=float(data["south"]),
                west=float(data["west"]),
                north=float(data["north"]),
                east=float(data["east"]),
            )
        else:
            (south, west), (north, east) = data
            region = Region(float(south), float(west), float(north), float(east))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring malformed bounds {data!r}: {e}")
        return None
    return None if region.is_empty else region
