# trip_viewport/api/state_store.py
"""Holds the ambient trip-search state and notifies subscribers on change."""

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

StateListener = Callable[[Dict[str, Any]], None]


class StatePayloadError(ValueError):
    """Raised when a client sends a state update that is not an object."""


class TripStateStore:
    """Latest trip-search state for one client, with change subscriptions.

    The state follows the shape of the web client's ``otp`` slice::

        {
            "currentQuery": {"from": {...}, "to": {...}, "intermediatePlaces": [...]},
            "activeSearchId": "abc",
            "searches": {"abc": {"activeItinerary": 0, "activeLeg": None,
                                 "activeStep": None, "response": {...}}},
            "ui": {"mapPopupLocation": None, "itineraryView": None},
            "urlParams": {"ui_itineraryView": None},
        }
    """

    def __init__(self, initial_state: Optional[Dict[str, Any]] = None):
        self._state: Dict[str, Any] = dict(initial_state or {})
        self._listeners: List[StateListener] = []
        self.lock = threading.Lock()
        # Serialises update + delivery so listeners see states in write order
        self.delivery_lock = threading.RLock()

    def get_state(self) -> Dict[str, Any]:
        with self.lock:
            return copy.deepcopy(self._state)

    def replace_state(self, state: Dict[str, Any]) -> None:
        """Replace the whole state and notify subscribers."""
        if not isinstance(state, dict):
            raise StatePayloadError(f"State must be an object, got {type(state).__name__}")
        with self.delivery_lock:
            with self.lock:
                self._state = copy.deepcopy(state)
            self._notify()

    def merge_state(self, patch: Dict[str, Any]) -> None:
        """Shallow-merge top-level keys into the state and notify subscribers."""
        if not isinstance(patch, dict):
            raise StatePayloadError(f"State patch must be an object, got {type(patch).__name__}")
        with self.delivery_lock:
            with self.lock:
                merged = dict(self._state)
                merged.update(copy.deepcopy(patch))
                self._state = merged
            self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` and deliver the current state to it right away.

        Returns:
            A callable that removes the listener
        """
        with self.delivery_lock:
            with self.lock:
                self._listeners.append(listener)
                current = copy.deepcopy(self._state)
            listener(current)

        def unsubscribe() -> None:
            with self.lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        # caller holds delivery_lock
        with self.lock:
            listeners = list(self._listeners)
            state = copy.deepcopy(self._state)
        logger.debug(f"Notifying {len(listeners)} state listener(s)")
        for listener in listeners:
            listener(state)
