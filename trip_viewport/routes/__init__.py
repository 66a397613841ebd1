# trip_viewport/routes/__init__.py
from .map import create_map_blueprint
from .websocket import register_websocket_handlers, NAMESPACE

__all__ = ['create_map_blueprint', 'register_websocket_handlers', 'NAMESPACE']
