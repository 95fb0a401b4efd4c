#!/usr/bin/env python3
import json
import argparse
from pathlib import Path
from typing import Any, Dict, List

import requests

from services.geometry import decode_polyline

API_URL = "http://127.0.0.1:8000/api/routing/safe-route"

def build_payload(args) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "origin": args.origin,           # "lat,lng" or address
        "destination": args.destination,
        "truck": {"height_ft": args.height_ft},
        "tuning": {},
    }
    if args.buffer_m is not None:
        payload["tuning"]["bridgeBufferMeters"] = args.buffer_m
    if args.margin_ft is not None:
        payload["tuning"]["safetyMarginFt"] = args.margin_ft
    return payload

def to_feature_collection(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a GeoJSON FeatureCollection from a safe-route response:
    the chosen route as a LineString plus one Point per flagged low bridge.
    GeoJSON expects [lon, lat] order for coordinates.
    """
    chosen_idx = data.get("chosenRouteIndex")
    chosen = next((r for r in data.get("routes", []) if r.get("index") == chosen_idx), None)
    if chosen is None:
        raise ValueError("Response has no chosen route")

    features: List[Dict[str, Any]] = []
    coords = decode_polyline(chosen.get("encoded") or "")
    if coords:
        features.append({
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": [[p.lng, p.lat] for p in coords]},
            "properties": {
                "role": "route",
                "index": chosen_idx,
                "score": chosen.get("score"),
                "summary": chosen.get("summary"),
                "distance_m": chosen.get("distance_m"),
                "duration_s": chosen.get("duration_s"),
                "noTruckZones": [z.get("id") for z in chosen["hazards"].get("noTruckZones", [])],
                "residentialZones": [z.get("id") for z in chosen["hazards"].get("residentialZones", [])],
            },
        })

    for b in chosen["hazards"].get("lowBridges", []):
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [b["longitude"], b["latitude"]]},
            "properties": {"role": "low_bridge", "id": b.get("id"), "clearance_ft": b.get("clearance_ft")},
        })

    return {"type": "FeatureCollection", "features": features}

def main():
    parser = argparse.ArgumentParser(description="Call /api/routing/safe-route, decode the chosen route, write GeoJSON.")
    parser.add_argument("--origin", required=True, help='e.g. "29.7604,-95.3698"')
    parser.add_argument("--destination", required=True, help='e.g. "30.2672,-97.7431"')
    parser.add_argument("--height_ft", type=float, default=13.5)
    parser.add_argument("--buffer_m", type=float, default=None)
    parser.add_argument("--margin_ft", type=float, default=None)
    parser.add_argument("--api", default=API_URL)
    parser.add_argument("--out", default="route.geojson")
    args = parser.parse_args()

    r = requests.post(args.api, json=build_payload(args), timeout=30)
    if r.status_code != 200:
        print(r.text[:1000])
        raise SystemExit(f"safe-route returned HTTP {r.status_code} (see above).")
    data = r.json()

    fc = to_feature_collection(data)

    out_path = Path(args.out).resolve()
    out_path.write_text(json.dumps(fc, indent=2))
    print(f"Wrote GeoJSON to: {out_path}")
    for route in data.get("routes", []):
        print(f" - route {route['index']}: score={route['score']} summary={route.get('summary')!r}")

if __name__ == "__main__":
    main()
