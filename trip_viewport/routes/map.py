# trip_viewport/routes/map.py
"""Map routes and blueprint configuration."""

from flask import Blueprint, jsonify

from trip_viewport.api.config import get_viewport_config, get_websocket_config
from trip_viewport.api.viewport.session_manager import get_session_manager


def create_map_blueprint():
    """Create and configure the map blueprint.

    Returns:
        Configured Flask Blueprint
    """
    map_bp = Blueprint("map", __name__, url_prefix="/trip")

    @map_bp.route("/api/config")
    def api_config():
        """Return viewport configuration for the frontend map."""
        config = get_viewport_config()
        return jsonify({
            "bounds_padding": list(config["bounds_padding"]),
            "settle_delay_ms": config["settle_delay_ms"],
            "constrained_platform": config["constrained_platform"],
            "socket_namespace": get_websocket_config()["namespace"],
        })

    @map_bp.route("/api/stats")
    def api_stats():
        """Return session statistics."""
        return jsonify(get_session_manager().get_stats())

    @map_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "trip-viewport"})

    return map_bp


__all__ = ['create_map_blueprint']
