# trip_viewport/routes/websocket/base.py
"""Shared plumbing for the map client's Socket.IO handlers."""

import logging
from flask import request
from flask_socketio import emit

from trip_viewport.api.config import get_websocket_config
from trip_viewport.api.viewport.session_manager import get_session_manager

logger = logging.getLogger(__name__)

NAMESPACE = get_websocket_config()["namespace"]


class BaseWebSocketHandler:
    """Base class giving handlers access to the caller's viewport session."""

    def __init__(self, socketio, namespace=NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def emit_to_client(self, event, data, room=None):
        """Send ``event`` to the calling client, or to ``room`` when given."""
        try:
            if room:
                self.socketio.emit(event, data, room=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def get_client_info(self):
        """Request details used to open a viewport session."""
        return {
            "sid": request.sid,
            "ip": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', ''),
        }

    def session_tag(self):
        """Short label for log lines: socket id, map state and platform."""
        viewport_session = get_session_manager().sessions.get(request.sid)
        if viewport_session is None:
            return f"{request.sid} [no session]"
        map_state = "map" if viewport_session.is_map_ready else "no-map"
        platform = "constrained" if viewport_session.constrained_platform else "desktop"
        return f"{request.sid} [{map_state}, {platform}]"

    def log_event(self, event_name, detail=None):
        """Log a map client event at debug level, tagged with its session."""
        suffix = f" - {detail}" if detail else ""
        logger.debug(f"[WS] {event_name} {self.session_tag()}{suffix}")

    def handle_error(self, error, event_name=""):
        """Log a failed event and tell the client which event it was."""
        logger.error(f"[WS] {event_name} failed for {self.session_tag()}: {error}")
        self.emit_to_client('error', {
            'message': str(error),
            'event': event_name,
            'session_id': request.sid,
        })
