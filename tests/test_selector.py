# tests/test_selector.py
import itertools

import pytest

from services.errors import EmptyInputError
from services.hazard_index import HazardIndex
from services.models import CandidateRoute, GeoPoint, TruckProfile, TuningParams
from services.selector import select_route

def demo_index():
    return HazardIndex.from_records(
        [{"id": "low", "latitude": 30.0, "longitude": -97.0, "clearance_ft": 11.0}],
        no_truck_zones=[{"id": "nt", "name": "Downtown", "polygon": [
            {"lat": 31.0, "lng": -97.0}, {"lat": 31.0, "lng": -96.99},
            {"lat": 31.01, "lng": -96.99}, {"lat": 31.01, "lng": -97.0},
        ]}],
    )

def route(summary, lat, lng, duration_s=None):
    return CandidateRoute(points=(GeoPoint(lat, lng),), summary=summary, duration_s=duration_s)

BRIDGE = route("I-35 (low bridge)", 30.0003, -97.0, 100)    # score 10
CLEAR = route("TX-130", 33.0, -97.0, 900)                   # score 0
ZONE = route("Downtown", 31.005, -96.995, 50)                # score 5

def test_zero_score_route_wins_in_any_order():
    for order in itertools.permutations([BRIDGE, CLEAR, ZONE]):
        sel = select_route(list(order), TruckProfile(), TuningParams(), demo_index())
        assert sel.chosen.route is CLEAR
        assert sorted(sr.score for sr in sel.all) == [0, 5, 10]

def test_all_keeps_input_order_and_indexes():
    sel = select_route([BRIDGE, CLEAR, ZONE], TruckProfile(), TuningParams(), demo_index())
    assert [sr.score for sr in sel.all] == [10, 0, 5]
    assert [sr.index for sr in sel.all] == [0, 1, 2]
    assert sel.chosen.index == 1

def test_min_score_when_no_clear_route():
    sel = select_route([BRIDGE, ZONE], TruckProfile(), TuningParams(), demo_index())
    assert sel.chosen.route is ZONE

def test_duration_breaks_ties():
    slow = route("slow", 33.0, -97.0, 600)
    fast = route("fast", 34.0, -97.0, 500)
    sel = select_route([slow, fast], TruckProfile(), TuningParams(), demo_index())
    assert sel.chosen.route is fast

def test_missing_duration_sorts_last():
    unknown = route("unknown", 33.0, -97.0, None)
    known = route("known", 34.0, -97.0, 7200)
    sel = select_route([unknown, known], TruckProfile(), TuningParams(), demo_index())
    assert sel.chosen.route is known

def test_full_tie_goes_to_first_index():
    a = route("a", 33.0, -97.0, None)
    b = route("b", 34.0, -97.0, None)
    sel = select_route([a, b], TruckProfile(), TuningParams(), demo_index())
    assert sel.chosen.index == 0

def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        select_route([], TruckProfile(), TuningParams(), demo_index())
