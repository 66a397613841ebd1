"""WebSocket route handlers initialization."""

import logging

from .connection import ConnectionHandler
from .session import SessionHandler
from .base import NAMESPACE

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, namespace=NAMESPACE):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        namespace: Socket.IO namespace the map client connects to
    """
    logger.info("Registering WebSocket handlers...")

    try:
        connection_handler = ConnectionHandler(socketio, namespace)
        session_handler = SessionHandler(socketio, namespace)

        logger.info(f"Registering connection handler for namespace: {namespace}")
        connection_handler.register_handlers()

        logger.info(f"Registering session handler for namespace: {namespace}")
        session_handler.register_handlers()

        logger.info("✅ WebSocket handlers registered successfully")

    except Exception as e:
        logger.error(f"❌ Failed to register WebSocket handlers: {e}")
        logger.exception("WebSocket registration error:")
        raise


__all__ = ['register_websocket_handlers', 'NAMESPACE']
