# trip_viewport/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import time
import logging
from flask import request
from flask_socketio import disconnect

from .base import BaseWebSocketHandler, NAMESPACE
from .map_handle import SocketIOMapHandle
from trip_viewport.api.config import get_viewport_config
from trip_viewport.api.device import is_constrained_platform
from trip_viewport.api.viewport.session_manager import get_session_manager

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles WebSocket connection lifecycle events."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            """Create a viewport session for the connecting browser."""
            client_info = self.get_client_info()
            self.log_event('connect')

            try:
                override = get_viewport_config()["constrained_platform"]
                constrained = is_constrained_platform(client_info['user_agent'], override)

                map_handle = SocketIOMapHandle(self.socketio, client_info['sid'], self.namespace)
                manager = get_session_manager()
                viewport_session = manager.create_session(
                    client_info['sid'],
                    client_info['ip'],
                    map_handle,
                    constrained_platform=constrained,
                )

                logger.info(f"🔗 Session ready: {viewport_session.session_id}")
                self.emit_to_client('connected', {
                    'session_id': viewport_session.session_id,
                    'status': 'connected',
                    'constrained_platform': constrained,
                })

            except Exception as e:
                logger.error(f"Connection error: {e}")
                self.handle_error(e, 'connect')
                disconnect()

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(*args):
            """Dispose the viewport session so no deferred fit outlives the client."""
            try:
                get_session_manager().remove_session(request.sid, 'client_disconnect')
                logger.info(f"🔌 WebSocket disconnected, session {request.sid} removed")
            except Exception as e:
                logger.error(f"Disconnect error: {e}")

        @self.socketio.on('ping', namespace=self.namespace)
        def handle_ping():
            """Handle ping for connection testing."""
            self.emit_to_client('pong', {'timestamp': time.time()})
