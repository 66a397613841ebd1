"""Shared data structures for viewport synchronization.

Every type here is an immutable value: equality is structural, so two
Regions recomputed from the same itinerary compare equal even though they
are different objects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union


@dataclass(frozen=True)
class Point:
    """A latitude/longitude pair."""

    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle between a south-west and north-east corner.

    The empty region has inverted infinite corners so that extending it by
    a point yields the degenerate region around that point.
    """

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def empty(cls) -> "Region":
        return cls(math.inf, math.inf, -math.inf, -math.inf)

    @property
    def is_empty(self) -> bool:
        return self.south > self.north or self.west > self.east

    @property
    def south_west(self) -> Point:
        return Point(self.south, self.west)

    @property
    def north_east(self) -> Point:
        return Point(self.north, self.east)

    def extend(self, point: Point) -> "Region":
        return Region(
            south=min(self.south, point.lat),
            west=min(self.west, point.lon),
            north=max(self.north, point.lat),
            east=max(self.east, point.lon),
        )

    def union(self, other: "Region") -> "Region":
        if other.is_empty:
            return self
        if self.is_empty:
            return other
        return Region(
            south=min(self.south, other.south),
            west=min(self.west, other.west),
            north=max(self.north, other.north),
            east=max(self.east, other.east),
        )

    def to_list(self) -> list:
        """Leaflet-style ``[[south, west], [north, east]]``."""
        return [[self.south, self.west], [self.north, self.east]]


@dataclass(frozen=True)
class Step:
    """A single turn-by-turn step within a leg."""

    point: Point


@dataclass(frozen=True)
class Leg:
    """An ordered run of steps, plus the endpoints and route shape."""

    steps: Tuple[Step, ...] = ()
    from_point: Optional[Point] = None
    to_point: Optional[Point] = None
    geometry: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class Itinerary:
    legs: Tuple[Leg, ...] = ()


@dataclass(frozen=True)
class Query:
    from_place: Optional[Point] = None
    to_place: Optional[Point] = None
    intermediate_places: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class ViewState:
    active_leg: Optional[int] = None
    active_step: Optional[int] = None
    view_mode: Optional[Any] = None
    popup_active: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of the trip search used for transition comparison."""

    query: Query = field(default_factory=Query)
    itinerary: Optional[Itinerary] = None
    view: ViewState = field(default_factory=ViewState)


# --------------------------------------------------------------------------- #
# Viewport commands
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class FitRegion:
    region: Region
    padding: Optional[Tuple[int, int]] = None
    deferred: bool = False


@dataclass(frozen=True)
class PanTo:
    point: Point


@dataclass(frozen=True)
class NoOp:
    pass


ViewportCommand = Union[FitRegion, PanTo, NoOp]


__all__ = [
    "Point",
    "Region",
    "Step",
    "Leg",
    "Itinerary",
    "Query",
    "ViewState",
    "Snapshot",
    "FitRegion",
    "PanTo",
    "NoOp",
    "ViewportCommand",
]
