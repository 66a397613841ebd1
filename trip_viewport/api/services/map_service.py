# trip_viewport/api/services/map_service.py
"""Service layer for map geometry: coordinate checks and bounding regions."""

import logging
import math
from typing import Any, Iterable, List, Optional

import googlemaps.convert

from trip_viewport.api.models import Itinerary, Leg, Point, Region

logger = logging.getLogger(__name__)


class MapService:
    """Pure geometry helpers shared by snapshot extraction and the classifier."""

    @staticmethod
    def validate_coordinates(lat: Any, lon: Any) -> bool:
        """Validate that coordinates are finite numbers within valid ranges.

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            True if valid, False otherwise
        """
        if isinstance(lat, bool) or isinstance(lon, bool):
            return False
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            return False
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90 <= lat <= 90 and -180 <= lon <= 180

    @staticmethod
    def is_valid_point(point: Optional[Point]) -> bool:
        return point is not None and MapService.validate_coordinates(point.lat, point.lon)

    @staticmethod
    def extend_region(region: Region, points: Iterable[Optional[Point]]) -> Region:
        """Extend ``region`` by every valid point, skipping the rest.

        Args:
            region: Starting region (may be empty)
            points: Points to include; None and invalid points are ignored

        Returns:
            The extended region
        """
        skipped = 0
        for point in points:
            if point is None:
                continue
            if not MapService.is_valid_point(point):
                skipped += 1
                continue
            region = region.extend(point)
        if skipped:
            logger.debug(f"Skipped {skipped} point(s) with invalid coordinates")
        return region

    @staticmethod
    def region_from_points(points: Iterable[Optional[Point]]) -> Region:
        return MapService.extend_region(Region.empty(), points)

    @staticmethod
    def leg_region(leg: Leg) -> Region:
        """Calculate the bounding region of a single leg.

        Covers the route geometry, both endpoints and every step.
        """
        points: List[Optional[Point]] = list(leg.geometry)
        points.append(leg.from_point)
        points.append(leg.to_point)
        points.extend(step.point for step in leg.steps)
        return MapService.region_from_points(points)

    @staticmethod
    def itinerary_region(itinerary: Itinerary) -> Region:
        """Calculate the bounding region covering every leg of an itinerary."""
        region = Region.empty()
        for leg in itinerary.legs:
            region = region.union(MapService.leg_region(leg))
        return region

    @staticmethod
    def decode_geometry(encoded: Optional[str]) -> List[Point]:
        """Decode a Google encoded polyline into points.

        Args:
            encoded: Encoded polyline string, as found in OTP ``legGeometry.points``

        Returns:
            Decoded points, or an empty list if the string is missing or corrupt
        """
        if not encoded or not isinstance(encoded, str):
            return []
        try:
            decoded = googlemaps.convert.decode_polyline(encoded)
        except (IndexError, TypeError, ValueError) as e:
            logger.warning(f"Failed to decode leg geometry: {e}")
            return []
        return [Point(p["lat"], p["lng"]) for p in decoded]


# Export for use in other modules
__all__ = ['MapService']
