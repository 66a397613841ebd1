import pytest

from trip_viewport.api.models import (
    Itinerary,
    Leg,
    Point,
    Query,
    Snapshot,
    Step,
    ViewState,
)


class FakeMap:
    """Records every primitive the engine calls."""

    def __init__(self, bounds=None):
        self.calls = []
        self.bounds = bounds

    def fit_bounds(self, region, padding=None):
        self.calls.append(("fit_bounds", region, padding))

    def pan_to(self, point):
        self.calls.append(("pan_to", point))

    def get_bounds(self):
        return self.bounds

    def invalidate_size(self, force=True):
        self.calls.append(("invalidate_size", force))


class ManualScheduler:
    """Scheduler driven by an explicit clock."""

    class Task:
        def __init__(self, due, callback):
            self.due = due
            self.callback = callback
            self.cancelled = False
            self.fired = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.now = 0.0
        self.tasks = []

    def schedule(self, delay_seconds, callback):
        task = self.Task(self.now + delay_seconds, callback)
        self.tasks.append(task)
        return task

    def advance(self, seconds):
        self.now += seconds
        for task in list(self.tasks):
            if not task.cancelled and not task.fired and task.due <= self.now:
                task.fired = True
                task.callback()

    @property
    def pending(self):
        return [t for t in self.tasks if not t.cancelled and not t.fired]


def make_leg(*points, steps=None):
    """Leg through ``points``; steps default to one per point."""
    pts = [Point(*p) for p in points]
    step_points = pts if steps is None else [Point(*p) for p in steps]
    return Leg(
        steps=tuple(Step(point=p) for p in step_points),
        from_point=pts[0] if pts else None,
        to_point=pts[-1] if pts else None,
    )


def make_snapshot(from_place=None, to_place=None, intermediate=(), itinerary=None,
                  active_leg=None, active_step=None, view_mode=None, popup_active=False):
    return Snapshot(
        query=Query(
            from_place=Point(*from_place) if from_place else None,
            to_place=Point(*to_place) if to_place else None,
            intermediate_places=tuple(Point(*p) for p in intermediate),
        ),
        itinerary=itinerary,
        view=ViewState(
            active_leg=active_leg,
            active_step=active_step,
            view_mode=view_mode,
            popup_active=popup_active,
        ),
    )


def place(lat, lon, name=None):
    return {"lat": lat, "lon": lon, "name": name or f"{lat},{lon}"}


def make_state(from_place=None, to_place=None, intermediate=None, itineraries=None,
               active_itinerary=0, active_leg=None, active_step=None,
               view_mode=None, popup=None):
    """Ambient trip-search state in the web client's shape."""
    state = {
        "currentQuery": {
            "from": place(*from_place) if from_place else None,
            "to": place(*to_place) if to_place else None,
            "intermediatePlaces": [place(*p) for p in intermediate or []],
        },
        "ui": {"mapPopupLocation": popup},
        "urlParams": {"ui_itineraryView": view_mode},
    }
    if itineraries is not None:
        state["activeSearchId"] = "search-1"
        state["searches"] = {
            "search-1": {
                "activeItinerary": active_itinerary,
                "activeLeg": active_leg,
                "activeStep": active_step,
                "response": {"plan": {"itineraries": itineraries}},
            }
        }
    return state


def raw_leg(*points, geometry=None):
    return {
        "mode": "WALK",
        "from": place(*points[0]),
        "to": place(*points[-1]),
        "legGeometry": {"points": geometry} if geometry else {},
        "steps": [{"lat": p[0], "lon": p[1], "relativeDirection": "CONTINUE"} for p in points],
    }


@pytest.fixture
def fake_map():
    return FakeMap()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def three_leg_itinerary():
    return Itinerary(legs=(
        make_leg((47.60, -122.33), (47.61, -122.34)),
        make_leg((47.61, -122.34), (47.65, -122.30)),
        make_leg((47.65, -122.30), (47.70, -122.28)),
    ))


@pytest.fixture
def viewport_config():
    return {
        "bounds_padding": (30, 30),
        "settle_delay_ms": 250,
        "constrained_platform": "auto",
        "session_timeout_seconds": 1800,
    }
