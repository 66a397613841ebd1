# trip_viewport/api/viewport/snapshot.py
"""Derive comparison snapshots from the ambient trip-search state.

Extraction is intentionally lenient: a missing search, query or place
becomes None, and malformed coordinates become NaN points that the
geometry helpers skip. It never raises for bad content, so a broken
payload costs at most one viewport update.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from trip_viewport.api.models import (
    Itinerary,
    Leg,
    Point,
    Query,
    Snapshot,
    Step,
    ViewState,
)
from trip_viewport.api.services.map_service import MapService

VIEW_MODE_URL_PARAM = "ui_itineraryView"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        result = float(value)
    except (TypeError, ValueError):
        return math.nan
    # one shared NaN keeps malformed points equal across snapshots
    return math.nan if math.isnan(result) else result


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_point(place: Any) -> Optional[Point]:
    """Turn a ``{"lat", "lon"}`` place into a Point (``lng`` is accepted too)."""
    if not isinstance(place, dict):
        return None
    lon = place.get("lon", place.get("lng"))
    return Point(_as_float(place.get("lat")), _as_float(lon))


def parse_leg(raw: Dict[str, Any]) -> Leg:
    points = (parse_point(raw_step) for raw_step in raw.get("steps") or [])
    steps = [Step(point=point) for point in points if point is not None]

    geometry = MapService.decode_geometry(_as_dict(raw.get("legGeometry")).get("points"))
    return Leg(
        steps=tuple(steps),
        from_point=parse_point(raw.get("from")),
        to_point=parse_point(raw.get("to")),
        geometry=tuple(geometry),
    )


def parse_itinerary(raw: Any) -> Optional[Itinerary]:
    if not isinstance(raw, dict):
        return None
    legs = tuple(parse_leg(leg) for leg in raw.get("legs") or [] if isinstance(leg, dict))
    return Itinerary(legs=legs)


def get_active_search(state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the search selected by ``activeSearchId``, if any."""
    searches = _as_dict(state.get("searches"))
    search = searches.get(state.get("activeSearchId"))
    return search if isinstance(search, dict) else None


def get_active_itinerary(state: Dict[str, Any]) -> Optional[Itinerary]:
    """Return the itinerary the active search has selected, if any."""
    search = get_active_search(state)
    if search is None:
        return None

    plan = _as_dict(_as_dict(search.get("response")).get("plan"))
    itineraries = plan.get("itineraries")
    if not isinstance(itineraries, list) or not itineraries:
        return None

    index = _as_index(search.get("activeItinerary"))
    if index is None:
        index = 0
    if not 0 <= index < len(itineraries):
        return None
    return parse_itinerary(itineraries[index])


def get_view_mode(state: Dict[str, Any]) -> Optional[Any]:
    url_params = _as_dict(state.get("urlParams"))
    if url_params.get(VIEW_MODE_URL_PARAM) is not None:
        return url_params[VIEW_MODE_URL_PARAM]
    return _as_dict(state.get("ui")).get("itineraryView")


def extract_snapshot(state: Optional[Dict[str, Any]]) -> Snapshot:
    """Build the Snapshot for one ambient state."""
    state = _as_dict(state)
    raw_query = _as_dict(state.get("currentQuery"))
    intermediate = raw_query.get("intermediatePlaces")
    if not isinstance(intermediate, list):
        intermediate = []
    query = Query(
        from_place=parse_point(raw_query.get("from")),
        to_place=parse_point(raw_query.get("to")),
        intermediate_places=tuple(
            p for p in (parse_point(place) for place in intermediate) if p is not None
        ),
    )

    search = get_active_search(state) or {}
    view = ViewState(
        active_leg=_as_index(search.get("activeLeg")),
        active_step=_as_index(search.get("activeStep")),
        view_mode=get_view_mode(state),
        popup_active=bool(_as_dict(state.get("ui")).get("mapPopupLocation")),
    )

    return Snapshot(query=query, itinerary=get_active_itinerary(state), view=view)


__all__ = [
    "extract_snapshot",
    "get_active_search",
    "get_active_itinerary",
    "get_view_mode",
    "parse_point",
]
