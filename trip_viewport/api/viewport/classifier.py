# trip_viewport/api/viewport/classifier.py
"""Map a snapshot transition to a single viewport command.

Rules are evaluated top to bottom and the first one whose predicate holds
decides the outcome. The order encodes which change is most structurally
significant: an itinerary replacement beats a leg click, which beats an
endpoint edit, which beats step navigation.

A builder may return None when the region it would fit turns out to be
empty; evaluation then continues with the next rule, so the map is never
asked to fit an empty region.
"""

from __future__ import annotations

import logging
from typing import Callable, List, NamedTuple, Optional, Tuple

from trip_viewport.api.models import (
    FitRegion,
    Itinerary,
    NoOp,
    PanTo,
    Point,
    Region,
    Snapshot,
    ViewportCommand,
)
from trip_viewport.api.services.map_service import MapService

logger = logging.getLogger(__name__)

DEFAULT_PADDING: Tuple[int, int] = (30, 30)

# Stands in for the previous snapshot on the first notification.
BLANK_SNAPSHOT = Snapshot()


class TransitionContext(NamedTuple):
    previous: Snapshot
    current: Snapshot
    padding: Tuple[int, int] = DEFAULT_PADDING
    constrained_platform: bool = False
    # Reads the bounds the map is currently showing; outside the snapshot.
    displayed_bounds: Callable[[], Optional[Region]] = lambda: None


class Rule(NamedTuple):
    name: str
    applies: Callable[[TransitionContext], bool]
    build: Callable[[TransitionContext], Optional[ViewportCommand]]


# --------------------------------------------------------------------------- #
# Geometry lookups
# --------------------------------------------------------------------------- #
def _itinerary_region(itinerary: Optional[Itinerary]) -> Optional[Region]:
    if itinerary is None:
        return None
    return MapService.itinerary_region(itinerary)


def _leg_region(itinerary: Itinerary, index: int) -> Region:
    if not 0 <= index < len(itinerary.legs):
        return Region.empty()
    return MapService.leg_region(itinerary.legs[index])


def _step_point(itinerary: Itinerary, leg_index: int, step_index: int) -> Optional[Point]:
    if not 0 <= leg_index < len(itinerary.legs):
        return None
    steps = itinerary.legs[leg_index].steps
    if not 0 <= step_index < len(steps):
        return None
    return steps[step_index].point


def _fit(region: Region, padding: Optional[Tuple[int, int]], deferred: bool = False) -> Optional[FitRegion]:
    if region.is_empty:
        return None
    return FitRegion(region=region, padding=padding, deferred=deferred)


def _pan(point: Optional[Point]) -> Optional[PanTo]:
    if not MapService.is_valid_point(point):
        return None
    return PanTo(point=point)


# --------------------------------------------------------------------------- #
# Rules
# --------------------------------------------------------------------------- #
def _popup_active(ctx: TransitionContext) -> bool:
    return ctx.previous.view.popup_active or ctx.current.view.popup_active


def _view_mode_changed(ctx: TransitionContext) -> bool:
    return ctx.previous.view.view_mode != ctx.current.view.view_mode


def _refit_for_view_mode(ctx: TransitionContext) -> Optional[ViewportCommand]:
    itinerary = ctx.current.itinerary
    if itinerary is None:
        return NoOp()
    active_leg = ctx.current.view.active_leg
    if active_leg is not None:
        region = _leg_region(itinerary, active_leg)
    else:
        region = MapService.itinerary_region(itinerary)
    return _fit(region, ctx.padding, deferred=True)


def _itinerary_bounds_changed(ctx: TransitionContext) -> bool:
    if ctx.current.itinerary is None:
        return False
    if ctx.previous.itinerary is None:
        return True
    return _itinerary_region(ctx.previous.itinerary) != _itinerary_region(ctx.current.itinerary)


def _fit_itinerary(ctx: TransitionContext) -> Optional[ViewportCommand]:
    return _fit(MapService.itinerary_region(ctx.current.itinerary), ctx.padding)


def _active_leg_changed(ctx: TransitionContext) -> bool:
    active_leg = ctx.current.view.active_leg
    return (
        ctx.current.itinerary is not None
        and active_leg is not None
        and active_leg != ctx.previous.view.active_leg
    )


def _fit_active_leg(ctx: TransitionContext) -> Optional[ViewportCommand]:
    return _fit(_leg_region(ctx.current.itinerary, ctx.current.view.active_leg), ctx.padding)


def _from_changed(ctx: TransitionContext) -> bool:
    return ctx.previous.query.from_place != ctx.current.query.from_place


def _to_changed(ctx: TransitionContext) -> bool:
    return ctx.previous.query.to_place != ctx.current.query.to_place


def _endpoints_changed(ctx: TransitionContext) -> bool:
    query = ctx.current.query
    return (
        query.from_place is not None
        and query.to_place is not None
        and (_from_changed(ctx) or _to_changed(ctx))
    )


def _fit_endpoints(ctx: TransitionContext) -> Optional[ViewportCommand]:
    # no endpoint fit on phones/tablets, the map may be hidden mid-edit
    if ctx.constrained_platform:
        return NoOp()
    query = ctx.current.query
    points = [query.from_place, query.to_place, *query.intermediate_places]
    return _fit(MapService.region_from_points(points), ctx.padding)


def _only_from_changed(ctx: TransitionContext) -> bool:
    return ctx.current.query.from_place is not None and _from_changed(ctx)


def _only_to_changed(ctx: TransitionContext) -> bool:
    return ctx.current.query.to_place is not None and _to_changed(ctx)


def _intermediate_changed(ctx: TransitionContext) -> bool:
    return ctx.previous.query.intermediate_places != ctx.current.query.intermediate_places


def _extend_displayed_bounds(ctx: TransitionContext) -> Optional[ViewportCommand]:
    bounds = ctx.displayed_bounds() or Region.empty()
    region = MapService.extend_region(bounds, ctx.current.query.intermediate_places)
    return _fit(region, padding=None)


def _active_step_changed(ctx: TransitionContext) -> bool:
    view = ctx.current.view
    return (
        ctx.current.itinerary is not None
        and view.active_leg is not None
        and view.active_step is not None
        and view.active_step != ctx.previous.view.active_step
    )


def _pan_to_step(ctx: TransitionContext) -> Optional[ViewportCommand]:
    view = ctx.current.view
    return _pan(_step_point(ctx.current.itinerary, view.active_leg, view.active_step))


RULES: List[Rule] = [
    Rule("popup_active", _popup_active, lambda ctx: NoOp()),
    Rule("view_mode_changed", _view_mode_changed, _refit_for_view_mode),
    Rule("itinerary_bounds_changed", _itinerary_bounds_changed, _fit_itinerary),
    Rule("active_leg_changed", _active_leg_changed, _fit_active_leg),
    Rule("endpoints_changed", _endpoints_changed, _fit_endpoints),
    Rule("from_changed", _only_from_changed, lambda ctx: _pan(ctx.current.query.from_place)),
    Rule("to_changed", _only_to_changed, lambda ctx: _pan(ctx.current.query.to_place)),
    Rule("intermediate_places_changed", _intermediate_changed, _extend_displayed_bounds),
    Rule("active_step_changed", _active_step_changed, _pan_to_step),
]

FALLBACK_RULE = "unchanged"


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #
def classify_with_rule(
    previous: Optional[Snapshot],
    current: Snapshot,
    padding: Tuple[int, int] = DEFAULT_PADDING,
    constrained_platform: bool = False,
    displayed_bounds: Callable[[], Optional[Region]] = lambda: None,
    rules: Optional[List[Rule]] = None,
) -> Tuple[str, ViewportCommand]:
    """Pick the command for a transition and report which rule chose it.

    Args:
        previous: Snapshot from the prior notification, None on the first one
        current: Snapshot for this notification
        padding: Padding for every fit except the intermediate-place extension
        constrained_platform: Suppresses the from/to fit on phones and tablets
        displayed_bounds: Returns the map's current bounds, or None if unknown
        rules: Rule list to evaluate, defaults to RULES

    Returns:
        Tuple of (rule name, command)
    """
    ctx = TransitionContext(
        previous=previous if previous is not None else BLANK_SNAPSHOT,
        current=current,
        padding=padding,
        constrained_platform=constrained_platform,
        displayed_bounds=displayed_bounds,
    )

    for rule in RULES if rules is None else rules:
        if not rule.applies(ctx):
            continue
        command = rule.build(ctx)
        if command is None:
            logger.debug(f"Rule '{rule.name}' matched an empty region, falling through")
            continue
        return rule.name, command

    return FALLBACK_RULE, NoOp()


def classify(previous: Optional[Snapshot], current: Snapshot, **kwargs) -> ViewportCommand:
    """Return the viewport command for a transition."""
    return classify_with_rule(previous, current, **kwargs)[1]


__all__ = [
    "BLANK_SNAPSHOT",
    "DEFAULT_PADDING",
    "FALLBACK_RULE",
    "RULES",
    "Rule",
    "TransitionContext",
    "classify",
    "classify_with_rule",
]
