# tests/test_api.py
from fastapi.testclient import TestClient

import api_routing
from main import create_app
from services import config
from services.errors import UpstreamFailure
from services.hazard_index import HazardIndex
from services.models import CandidateRoute, GeoPoint

def demo_index():
    return HazardIndex.from_records(
        [
            {"id": "low-11", "latitude": 30.0, "longitude": -97.0, "clearance_ft": 11.0},
            {"id": "ok-15", "latitude": 30.5, "longitude": -97.5, "clearance_ft": 15.0},
        ],
        no_truck_zones=[{"id": "nt", "name": "Downtown", "polygon": [
            {"lat": 31.0, "lng": -97.0}, {"lat": 31.0, "lng": -96.99},
            {"lat": 31.01, "lng": -96.99}, {"lat": 31.01, "lng": -97.0},
        ]}],
        residential_zones=[],
    )

CANDIDATES = [
    CandidateRoute(points=(GeoPoint(30.0003, -97.0),), summary="I-35", distance_m=1000, duration_s=400, encoded="abc"),
    CandidateRoute(points=(GeoPoint(33.0, -97.0),), summary="TX-130", distance_m=1400, duration_s=600, encoded="def"),
]

def client(monkeypatch, candidates=CANDIDATES):
    monkeypatch.setattr(config, "GOOGLE_MAPS_API_KEY", "test-key")
    monkeypatch.setattr(api_routing, "fetch_candidate_routes", lambda o, d, **kw: list(candidates))
    return TestClient(create_app(hazard_index=demo_index()))

def test_safe_route_picks_clear_alternative(monkeypatch):
    r = client(monkeypatch).post("/api/routing/safe-route", json={
        "origin": {"lat": 30.0, "lng": -97.0},
        "destination": "Dallas, TX",
        "truck": {"height_ft": 13.0},
    })
    assert r.status_code == 200
    body = r.json()
    assert body["chosenRouteIndex"] == 1
    assert body["chosenRouteHazards"] == {"lowBridges": [], "noTruckZones": [], "residentialZones": []}
    assert [route["score"] for route in body["routes"]] == [10, 0]
    assert body["routes"][0]["hazards"]["lowBridges"][0]["id"] == "low-11"
    assert body["routes"][1]["encoded"] == "def"
    assert body["usedTruckProfile"]["height_ft"] == 13.0
    assert body["usedTuning"]["bridgeBufferMeters"] == config.BRIDGE_BUFFER_METERS

def test_safe_route_defaults_and_tuning_override(monkeypatch):
    r = client(monkeypatch).post("/api/routing/safe-route", json={
        "originAddress": "Austin, TX",
        "destinationAddress": "Dallas, TX",
        "tuning": {"bridgeBufferMeters": 10},
    })
    assert r.status_code == 200
    body = r.json()
    # 33 m from the bridge is outside a 10 m buffer, so the faster route wins
    assert body["chosenRouteIndex"] == 0
    assert body["usedTruckProfile"]["height_ft"] == config.DEFAULT_TRUCK_HEIGHT_FT
    assert body["usedTuning"]["bridgeBufferMeters"] == 10

def test_safe_route_requires_endpoints(monkeypatch):
    r = client(monkeypatch).post("/api/routing/safe-route", json={"origin": "Austin, TX"})
    assert r.status_code == 400

def test_safe_route_rejects_bad_truck(monkeypatch):
    r = client(monkeypatch).post("/api/routing/safe-route", json={
        "origin": "a", "destination": "b", "truck": {"height_ft": -1},
    })
    assert r.status_code == 422

def test_safe_route_without_key(monkeypatch):
    c = client(monkeypatch)
    monkeypatch.setattr(config, "GOOGLE_MAPS_API_KEY", None)
    r = c.post("/api/routing/safe-route", json={"origin": "a", "destination": "b"})
    assert r.status_code == 500

def test_safe_route_upstream_failure(monkeypatch):
    c = client(monkeypatch)
    def fail(o, d, **kw):
        raise UpstreamFailure("No routes returned from Google Directions", status=200, detail={"status": "ZERO_RESULTS"})
    monkeypatch.setattr(api_routing, "fetch_candidate_routes", fail)
    r = c.post("/api/routing/safe-route", json={"origin": "a", "destination": "b"})
    assert r.status_code == 502
    assert r.json()["detail"]["detail"] == {"status": "ZERO_RESULTS"}

def test_bridges_endpoints(monkeypatch):
    c = client(monkeypatch)
    assert c.get("/api/bridges/stats").json() == {"count": 2, "noTruckZones": 1, "residentialZones": 0}
    assert len(c.get("/api/bridges/sample", params={"limit": 1}).json()) == 1
    hits = c.get("/api/bridges", params={"swLat": 30.1, "swLng": -96.9, "neLat": 29.9, "neLng": -97.1}).json()
    assert [b["id"] for b in hits] == ["low-11"]
    assert len(c.get("/api/bridges", params={"swLat": "x"}).json()) == 2

def test_health(monkeypatch):
    body = client(monkeypatch).get("/health").json()
    assert body["ok"] is True
    assert body["bridges"] == 2
