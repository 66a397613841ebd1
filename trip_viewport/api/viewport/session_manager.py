# trip_viewport/api/viewport/session_manager.py
"""Session lifecycle management for connected map clients."""

import time
import threading
import logging
from typing import Dict, Optional, Any
from datetime import datetime, timedelta

from trip_viewport.api.config import get_viewport_config
from trip_viewport.api.state_store import TripStateStore
from trip_viewport.api.viewport.executor import MapHandle
from trip_viewport.api.viewport.scheduler import Scheduler
from trip_viewport.api.viewport.synchronizer import ViewportSynchronizer

logger = logging.getLogger(__name__)


class ViewportSession:
    """State and viewport engine for a single connected client."""

    def __init__(self, session_id: str, user_ip: str, map_handle: Optional[MapHandle],
                 constrained_platform: bool = False):
        self.session_id = session_id
        self.user_ip = user_ip
        self.constrained_platform = constrained_platform

        # Timestamps
        self.created_at = datetime.now()
        self.last_activity = datetime.now()
        self.map_ready_at: Optional[datetime] = None

        # Components
        self.store = TripStateStore()
        self.map_handle = map_handle
        self.synchronizer: Optional[ViewportSynchronizer] = None

        # Stats
        self.state_updates = 0

    @property
    def is_map_ready(self) -> bool:
        return self.synchronizer is not None

    def touch(self):
        self.last_activity = datetime.now()


class ViewportSessionManager:
    """Manages one ViewportSession per connected socket."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 scheduler: Optional[Scheduler] = None,
                 start_cleanup: bool = True):
        self.config = config or get_viewport_config()
        self.scheduler = scheduler
        self.sessions: Dict[str, ViewportSession] = {}

        # Thread safety
        self.lock = threading.RLock()

        if start_cleanup:
            self.cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                daemon=True
            )
            self.cleanup_thread.start()

        logger.info("ViewportSessionManager initialized")

    def create_session(self, session_id: str, user_ip: str,
                       map_handle: Optional[MapHandle],
                       constrained_platform: bool = False) -> ViewportSession:
        """Create a session, replacing any stale one with the same ID.

        Args:
            session_id: Socket ID of the client
            user_ip: Client IP address, for logging
            map_handle: Handle that drives the client's map
            constrained_platform: Whether the client is a phone or tablet

        Returns:
            The new ViewportSession
        """
        with self.lock:
            if session_id in self.sessions:
                logger.warning(f"Replacing existing session {session_id}")
                self.remove_session(session_id)

            session = ViewportSession(session_id, user_ip, map_handle, constrained_platform)
            self.sessions[session_id] = session

            logger.info(f"Created session {session_id} for IP {user_ip} (constrained={constrained_platform})")
            return session

    def get_session(self, session_id: str) -> Optional[ViewportSession]:
        """Get an existing session by ID and mark it active."""
        with self.lock:
            session = self.sessions.get(session_id)
            if session:
                session.touch()
            return session

    def start_synchronizer(self, session_id: str) -> Optional[ViewportSynchronizer]:
        """Attach the viewport engine once the client's map is mounted.

        Calling it again for the same session returns the existing engine.

        Returns:
            The session's ViewportSynchronizer, or None if the session is unknown
        """
        with self.lock:
            session = self.get_session(session_id)
            if session is None:
                logger.error(f"Session {session_id} not found for map start")
                return None

            if session.synchronizer is None:
                session.synchronizer = ViewportSynchronizer(
                    session.map_handle,
                    session.store,
                    constrained_platform=session.constrained_platform,
                    scheduler=self.scheduler,
                    config=self.config,
                )
                session.map_ready_at = datetime.now()
                logger.info(f"Map ready for session {session_id}")
            return session.synchronizer

    def record_state_update(self, session_id: str):
        session = self.get_session(session_id)
        if session:
            session.state_updates += 1

    def remove_session(self, session_id: str, reason: str = "manual"):
        """Dispose a session's engine and stop tracking it.

        Args:
            session_id: Session ID to remove
            reason: Reason for removal
        """
        with self.lock:
            session = self.sessions.pop(session_id, None)
            if session is None:
                return

            if session.synchronizer is not None:
                session.synchronizer.dispose()

            duration = (datetime.now() - session.created_at).total_seconds()
            logger.info(
                f"Removed session {session_id} - "
                f"Reason: {reason}, Duration: {duration:.1f}s, "
                f"State updates: {session.state_updates}"
            )

    def get_stats(self) -> Dict[str, Any]:
        """Get overall session manager statistics."""
        with self.lock:
            return {
                "total_sessions": len(self.sessions),
                "map_ready_sessions": sum(1 for s in self.sessions.values() if s.is_map_ready),
                "constrained_sessions": sum(1 for s in self.sessions.values() if s.constrained_platform),
                "total_state_updates": sum(s.state_updates for s in self.sessions.values()),
                "config": {
                    "timeout_seconds": self.config["session_timeout_seconds"],
                    "settle_delay_ms": self.config["settle_delay_ms"],
                }
            }

    def _cleanup_loop(self):
        """Background thread to dispose idle sessions."""
        while True:
            try:
                time.sleep(30)  # Check every 30 seconds
                self.cleanup_expired_sessions()
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    def cleanup_expired_sessions(self) -> int:
        """Remove sessions idle for longer than the configured timeout."""
        timeout_seconds = self.config["session_timeout_seconds"]
        cutoff_time = datetime.now() - timedelta(seconds=timeout_seconds)

        with self.lock:
            expired_sessions = [
                sid for sid, session in self.sessions.items()
                if session.last_activity < cutoff_time
            ]

        for sid in expired_sessions:
            self.remove_session(sid, "timeout")

        if expired_sessions:
            logger.info(f"Cleaned up {len(expired_sessions)} expired sessions")
        return len(expired_sessions)


# Global session manager instance
_session_manager = None


def get_session_manager() -> ViewportSessionManager:
    """Get the global ViewportSessionManager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = ViewportSessionManager()
    return _session_manager
