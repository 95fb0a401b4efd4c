# services/scoring.py
from typing import Dict, List, Sequence

from services.geometry import haversine_m, meters_to_lat_degrees
from services.hazard_index import NO_TRUCK, RESIDENTIAL, HazardIndex
from services.models import (
    Bridge, CandidateRoute, GeoPoint, HazardReport, ScoredRoute, TruckProfile, TuningParams, Zone,
)

# Severity weights: low bridge (safety) > no-truck zone (regulatory) > residential (preference)
LOW_BRIDGE_WEIGHT = 10
NO_TRUCK_WEIGHT = 5
RESIDENTIAL_WEIGHT = 3


def required_clearance_ft(truck: TruckProfile, tuning: TuningParams) -> float:
    return max(tuning.min_clearance_ft, truck.height_ft + tuning.safety_margin_ft)

def hazard_score(report: HazardReport) -> int:
    return (LOW_BRIDGE_WEIGHT * len(report.low_bridges)
            + NO_TRUCK_WEIGHT * len(report.no_truck_zones)
            + RESIDENTIAL_WEIGHT * len(report.residential_zones))

# ----------------- bridges -----------------
def _near_route(bridge: Bridge, points: Sequence[GeoPoint], buffer_m: float) -> bool:
    bp = bridge.point
    for p in points:
        if haversine_m(bp, p) <= buffer_m:
            return True
    return False

def find_low_bridges(points: Sequence[GeoPoint], required_ft: float, buffer_m: float,
                     index: HazardIndex) -> List[Bridge]:
    """
    Bridges below `required_ft` that come within `buffer_m` of any route point.
    Presence only: the scan for a bridge stops at the first point in range.
    """
    if not points:
        return []
    # haversine distance is never below R*|dlat|, so bridges outside the padded
    # latitude span of the route can be skipped without changing the result
    pad = meters_to_lat_degrees(buffer_m) + 1e-9
    lo = min(p.lat for p in points) - pad
    hi = max(p.lat for p in points) + pad

    found: Dict[str, Bridge] = {}
    for b in index.bridges_below(required_ft):
        if b.id in found or not (lo <= b.lat <= hi):
            continue
        if _near_route(b, points, buffer_m):
            found[b.id] = b
    return list(found.values())

# ----------------- zones -----------------
def find_zones(points: Sequence[GeoPoint], kind: str, index: HazardIndex) -> List[Zone]:
    found: Dict[str, Zone] = {}
    for p in points:
        for z in index.zones_containing(p, kind):
            if z.id not in found:
                found[z.id] = z
    return list(found.values())

# ----------------- public entry -----------------
def score_route(route: CandidateRoute, truck: TruckProfile, tuning: TuningParams,
                index: HazardIndex, *, position: int = 0) -> ScoredRoute:
    pts = list(route.points)
    report = HazardReport(
        low_bridges=tuple(find_low_bridges(pts, required_clearance_ft(truck, tuning), tuning.bridge_buffer_m, index)),
        no_truck_zones=tuple(find_zones(pts, NO_TRUCK, index)),
        residential_zones=tuple(find_zones(pts, RESIDENTIAL, index)),
    )
    return ScoredRoute(route=route, hazards=report, score=hazard_score(report), index=position)
