# api/config.py
"""Configuration management for the trip viewport service."""
import os
from dotenv import load_dotenv

load_dotenv()

CONSTRAINED_PLATFORM_MODES = ("auto", "true", "false")


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def _parse_padding(raw):
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) == 1:
        parts = parts * 2
    if len(parts) != 2:
        raise ValueError(f"Invalid VIEWPORT_BOUNDS_PADDING '{raw}' (expected 'x,y')")
    return int(parts[0]), int(parts[1])


def get_viewport_config():
    """Get viewport synchronization configuration."""
    return {
        # Pixel padding applied around every padded fit
        "bounds_padding": _parse_padding(os.getenv("VIEWPORT_BOUNDS_PADDING", "30,30")),

        # Delay before a layout-driven refit, so the map container can resize first
        "settle_delay_ms": int(os.getenv("VIEWPORT_SETTLE_DELAY_MS", "250")),

        # auto: sniff the user agent; true/false: force the platform flag
        "constrained_platform": os.getenv("VIEWPORT_CONSTRAINED_PLATFORM", "auto").strip().lower(),

        # Idle sessions are disposed after this many seconds
        "session_timeout_seconds": int(os.getenv("VIEWPORT_SESSION_TIMEOUT_SECONDS", "1800")),
    }


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "namespace": os.getenv("WEBSOCKET_NAMESPACE", "/trip/ws"),
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(",")
    }


def validate_viewport_config():
    """Validate viewport configuration is properly set."""
    config = get_viewport_config()

    if any(p < 0 for p in config["bounds_padding"]):
        raise ValueError("VIEWPORT_BOUNDS_PADDING must not be negative")

    if config["settle_delay_ms"] < 0:
        raise ValueError("VIEWPORT_SETTLE_DELAY_MS must not be negative")

    if config["constrained_platform"] not in CONSTRAINED_PLATFORM_MODES:
        raise ValueError(
            f"Invalid VIEWPORT_CONSTRAINED_PLATFORM. Must be one of: {', '.join(CONSTRAINED_PLATFORM_MODES)}"
        )

    if config["session_timeout_seconds"] <= 0:
        raise ValueError("VIEWPORT_SESSION_TIMEOUT_SECONDS must be positive")

    return True
