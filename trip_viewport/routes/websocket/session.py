# trip_viewport/routes/websocket/session.py
"""WebSocket handlers for trip state updates and map integration."""

import logging
from flask import request

from .base import BaseWebSocketHandler
from .map_handle import parse_bounds
from trip_viewport.api.viewport.session_manager import get_session_manager

logger = logging.getLogger(__name__)


class SessionHandler(BaseWebSocketHandler):
    """Handles state and map events for a connected client."""

    def _require_session(self, event_name):
        viewport_session = get_session_manager().get_session(request.sid)
        if viewport_session is None:
            logger.error(f"❌ No viewport session for {request.sid} ({event_name})")
            self.emit_to_client("error", {"message": "No session available", "event": event_name})
        return viewport_session

    def register_handlers(self):
        """Register state and map event handlers."""

        @self.socketio.on("trip_state", namespace=self.namespace)
        def handle_trip_state(data):
            """Replace the client's trip-search state."""
            viewport_session = self._require_session("trip_state")
            if viewport_session is None:
                return

            try:
                self.log_event("trip_state")
                viewport_session.store.replace_state(data)
                get_session_manager().record_state_update(request.sid)
            except Exception as exc:
                self.handle_error(exc, "trip_state")

        @self.socketio.on("trip_state_patch", namespace=self.namespace)
        def handle_trip_state_patch(data):
            """Merge top-level keys into the client's trip-search state."""
            viewport_session = self._require_session("trip_state_patch")
            if viewport_session is None:
                return

            try:
                self.log_event("trip_state_patch", sorted(data) if isinstance(data, dict) else None)
                viewport_session.store.merge_state(data)
                get_session_manager().record_state_update(request.sid)
            except Exception as exc:
                self.handle_error(exc, "trip_state_patch")

        @self.socketio.on("map_ready", namespace=self.namespace)
        def handle_map_ready(data=None):
            """Start the viewport engine once the browser map is mounted."""
            viewport_session = self._require_session("map_ready")
            if viewport_session is None:
                return

            try:
                if isinstance(data, dict) and data.get("bounds") is not None:
                    viewport_session.map_handle.update_bounds(parse_bounds(data["bounds"]))

                already_ready = viewport_session.is_map_ready
                get_session_manager().start_synchronizer(request.sid)
                self.emit_to_client("map_synced", {
                    "session_id": viewport_session.session_id,
                    "status": "already_active" if already_ready else "active",
                })
                logger.info(f"📍 Map ready for session {viewport_session.session_id}")
            except Exception as exc:
                self.handle_error(exc, "map_ready")

        @self.socketio.on("map_bounds", namespace=self.namespace)
        def handle_map_bounds(data):
            """Record the bounds the browser map currently displays."""
            viewport_session = self._require_session("map_bounds")
            if viewport_session is None:
                return

            try:
                viewport_session.map_handle.update_bounds(parse_bounds(data))
            except Exception as exc:
                self.handle_error(exc, "map_bounds")

        @self.socketio.on("get_stats", namespace=self.namespace)
        def handle_get_stats():
            """Get session statistics for debugging."""
            viewport_session = get_session_manager().get_session(request.sid)
            if viewport_session is None:
                self.emit_to_client("stats", {"error": "No session"})
                return

            try:
                synchronizer = viewport_session.synchronizer
                self.emit_to_client("stats", {
                    "session_id": viewport_session.session_id,
                    "created_at": viewport_session.created_at.isoformat(),
                    "last_activity": viewport_session.last_activity.isoformat(),
                    "constrained_platform": viewport_session.constrained_platform,
                    "map_ready": viewport_session.is_map_ready,
                    "state_updates": viewport_session.state_updates,
                    "last_rule": synchronizer.last_rule if synchronizer else None,
                    "notifications": synchronizer.notification_count if synchronizer else 0,
                })
            except Exception as exc:
                self.handle_error(exc, "get_stats")
