import random

import pytest

from trip_viewport.api.models import FitRegion, Itinerary, NoOp, PanTo, Point, Region
from trip_viewport.api.services.map_service import MapService
from trip_viewport.api.viewport.classifier import RULES, classify, classify_with_rule

from conftest import make_leg, make_snapshot

A = (47.6, -122.3)
B = (47.61, -122.33)
PADDING = (30, 30)


def _random_snapshot(rng, popup_active=None):
    def maybe_point():
        if rng.random() < 0.3:
            return None
        return (round(rng.uniform(47, 48), 3), round(rng.uniform(-123, -122), 3))

    itinerary = None
    if rng.random() < 0.6:
        itinerary = Itinerary(legs=tuple(
            make_leg(maybe_point() or A, maybe_point() or B) for _ in range(rng.randint(1, 3))
        ))
    return make_snapshot(
        from_place=maybe_point(),
        to_place=maybe_point(),
        intermediate=[p for p in (maybe_point(), maybe_point()) if p],
        itinerary=itinerary,
        active_leg=rng.choice([None, 0, 1, 2]),
        active_step=rng.choice([None, 0, 1]),
        view_mode=rng.choice([None, "list", "detail"]),
        popup_active=rng.random() < 0.5 if popup_active is None else popup_active,
    )


def test_rule_order():
    assert [rule.name for rule in RULES] == [
        "popup_active",
        "view_mode_changed",
        "itinerary_bounds_changed",
        "active_leg_changed",
        "endpoints_changed",
        "from_changed",
        "to_changed",
        "intermediate_places_changed",
        "active_step_changed",
    ]


@pytest.mark.parametrize("seed", range(40))
def test_popup_always_suppresses(seed):
    rng = random.Random(seed)
    side = rng.choice(["previous", "current", "both"])
    previous = _random_snapshot(rng, popup_active=side in ("previous", "both"))
    current = _random_snapshot(rng, popup_active=side in ("current", "both"))

    assert classify(previous, current) == NoOp()


@pytest.mark.parametrize("seed", range(40))
def test_unchanged_snapshot_is_noop(seed):
    snapshot = _random_snapshot(random.Random(seed), popup_active=False)
    assert classify(snapshot, snapshot) == NoOp()


@pytest.mark.parametrize("seed", range(20))
def test_new_itinerary_beats_endpoint_change(seed):
    rng = random.Random(seed)
    old = Itinerary(legs=(make_leg((47.0, -122.0), (47.1, -122.1)),))
    new = Itinerary(legs=(make_leg((47.5, -122.5), (47.5 + rng.random(), -122.9)),))
    previous = make_snapshot(from_place=A, to_place=B, itinerary=old)
    current = make_snapshot(from_place=B, to_place=A, itinerary=new)

    command = classify(previous, current, padding=PADDING)

    assert command == FitRegion(MapService.itinerary_region(new), PADDING)


def test_scenario_pan_to_new_origin():
    previous = make_snapshot()
    current = make_snapshot(from_place=A)

    assert classify(previous, current) == PanTo(Point(*A))


def test_scenario_fit_both_endpoints():
    previous = make_snapshot(from_place=A)
    current = make_snapshot(from_place=A, to_place=B)

    command = classify(previous, current, padding=PADDING, constrained_platform=False)

    assert command == FitRegion(Region(47.6, -122.33, 47.61, -122.3), PADDING)


def test_scenario_new_search_then_same_itinerary():
    first = Itinerary(legs=(make_leg((47.0, -122.0), (47.1, -122.1)),))
    second = Itinerary(legs=(make_leg((47.3, -122.4), (47.4, -122.5)),))
    before = make_snapshot(itinerary=first)
    after = make_snapshot(itinerary=second)
    # Structurally equal copy, as produced by a fresh extraction
    again = make_snapshot(itinerary=Itinerary(legs=(make_leg((47.3, -122.4), (47.4, -122.5)),)))

    assert classify(before, after, padding=PADDING) == FitRegion(Region(47.3, -122.5, 47.4, -122.4), PADDING)
    assert classify(after, again, padding=PADDING) == NoOp()


def test_scenario_active_leg_change(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=0)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=1)

    command = classify(previous, current, padding=PADDING)

    assert command == FitRegion(MapService.leg_region(three_leg_itinerary.legs[1]), PADDING)


def test_scenario_view_mode_change_is_deferred(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=2)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=2, view_mode="detail")

    rule, command = classify_with_rule(previous, current, padding=PADDING)

    assert rule == "view_mode_changed"
    assert command == FitRegion(MapService.leg_region(three_leg_itinerary.legs[2]), PADDING, deferred=True)


def test_scenario_constrained_platform_suppresses_endpoint_fit():
    previous = make_snapshot(from_place=(47.0, -122.0), to_place=(47.1, -122.1))
    current = make_snapshot(from_place=A, to_place=B)

    assert classify(previous, current, constrained_platform=True) == NoOp()


def test_constrained_platform_also_suppresses_single_edit_when_both_set():
    previous = make_snapshot(from_place=A, to_place=B)
    current = make_snapshot(from_place=(47.0, -122.0), to_place=B)

    rule, command = classify_with_rule(previous, current, constrained_platform=True)

    assert rule == "endpoints_changed"
    assert command == NoOp()


def test_view_mode_change_without_itinerary_is_noop():
    previous = make_snapshot(from_place=A)
    current = make_snapshot(from_place=B, view_mode="detail")

    rule, command = classify_with_rule(previous, current)

    assert rule == "view_mode_changed"
    assert command == NoOp()


def test_view_mode_change_fits_whole_itinerary_without_active_leg(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, view_mode="list")
    current = make_snapshot(itinerary=three_leg_itinerary, view_mode="detail")

    command = classify(previous, current, padding=PADDING)

    assert command == FitRegion(MapService.itinerary_region(three_leg_itinerary), PADDING, deferred=True)


def test_first_itinerary_fits_on_mount(three_leg_itinerary):
    current = make_snapshot(itinerary=three_leg_itinerary, from_place=A, to_place=B)

    rule, command = classify_with_rule(None, current, padding=PADDING)

    assert rule == "itinerary_bounds_changed"
    assert command == FitRegion(Region(47.60, -122.34, 47.70, -122.28), PADDING)


def test_itinerary_disappearing_does_not_refit():
    old = Itinerary(legs=(make_leg((47.0, -122.0), (47.1, -122.1)),))
    previous = make_snapshot(from_place=A, to_place=B, itinerary=old)
    current = make_snapshot(from_place=A, to_place=B)

    assert classify(previous, current) == NoOp()


def test_active_leg_cleared_does_not_refit(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=1)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=None)

    assert classify(previous, current) == NoOp()


def test_out_of_range_leg_falls_through_to_next_rule(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=0)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=7, from_place=A)

    rule, command = classify_with_rule(previous, current)

    assert rule == "from_changed"
    assert command == PanTo(Point(*A))


def test_endpoint_fit_includes_intermediate_places():
    previous = make_snapshot(from_place=A)
    current = make_snapshot(from_place=A, to_place=B, intermediate=[(47.9, -122.0), (999, 0)])

    command = classify(previous, current, padding=PADDING)

    assert command == FitRegion(Region(47.6, -122.33, 47.9, -122.0), PADDING)


def test_endpoint_fit_with_invalid_coordinates_falls_through():
    previous = make_snapshot(from_place=A, to_place=B)
    current = make_snapshot(from_place=(float("nan"), 0.0), to_place=(200.0, 0.0))

    rule, command = classify_with_rule(previous, current)

    assert rule == "unchanged"
    assert command == NoOp()


def test_destination_only_pans():
    previous = make_snapshot()
    current = make_snapshot(to_place=B)

    assert classify(previous, current) == PanTo(Point(*B))


def test_clearing_origin_is_noop():
    previous = make_snapshot(from_place=A)
    current = make_snapshot()

    assert classify(previous, current) == NoOp()


def test_intermediate_places_extend_displayed_bounds():
    displayed = Region(47.5, -122.5, 47.7, -122.2)
    previous = make_snapshot(intermediate=[(47.6, -122.3)])
    current = make_snapshot(intermediate=[(47.6, -122.3), (48.0, -122.0)])

    command = classify(previous, current, padding=PADDING, displayed_bounds=lambda: displayed)

    assert command == FitRegion(Region(47.5, -122.5, 48.0, -122.0), padding=None)


def test_intermediate_reorder_counts_as_change():
    displayed = Region(47.0, -123.0, 48.0, -122.0)
    previous = make_snapshot(intermediate=[(47.2, -122.2), (47.4, -122.4)])
    current = make_snapshot(intermediate=[(47.4, -122.4), (47.2, -122.2)])

    rule, command = classify_with_rule(previous, current, displayed_bounds=lambda: displayed)

    assert rule == "intermediate_places_changed"
    assert command == FitRegion(displayed, padding=None)


def test_intermediate_change_without_bounds_or_points_is_noop():
    previous = make_snapshot(intermediate=[(47.2, -122.2)])
    current = make_snapshot()

    assert classify(previous, current) == NoOp()


def test_active_step_pans_to_step(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=1, active_step=0)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=1, active_step=1)

    assert classify(previous, current) == PanTo(Point(47.65, -122.30))


def test_leg_click_beats_step_change(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=0, active_step=0)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=2, active_step=1)

    rule, _ = classify_with_rule(previous, current)

    assert rule == "active_leg_changed"


def test_missing_step_is_noop(three_leg_itinerary):
    previous = make_snapshot(itinerary=three_leg_itinerary, active_leg=1, active_step=0)
    current = make_snapshot(itinerary=three_leg_itinerary, active_leg=1, active_step=9)

    assert classify(previous, current) == NoOp()
