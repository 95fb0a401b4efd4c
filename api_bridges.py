# api_bridges.py
import math
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from api_routing import get_hazard_index
from services.hazard_index import NO_TRUCK, RESIDENTIAL, HazardIndex
from services.models import Bridge

bridges_router = APIRouter(prefix="/api/bridges")

MAX_RESULTS = 50000

def _num(v: Optional[str]) -> Optional[float]:
    if v is None:
        return None
    try:
        f = float(v)
    except ValueError:
        return None
    return f if math.isfinite(f) else None

def _clamp(v: Optional[float], lo: int, hi: int, default: int) -> int:
    if v is None:
        return default
    return max(lo, min(hi, int(v)))

def bridge_to_dict(b: Bridge) -> Dict[str, Any]:
    return {"id": b.id, "latitude": b.lat, "longitude": b.lng, "clearance_ft": b.clearance_ft, "name": b.name}


@bridges_router.get("/stats")
def bridge_stats(index: HazardIndex = Depends(get_hazard_index)) -> Dict[str, Any]:
    return {
        "count": index.bridge_count,
        "noTruckZones": index.zone_count(NO_TRUCK),
        "residentialZones": index.zone_count(RESIDENTIAL),
    }

@bridges_router.get("/sample")
def bridge_sample(limit: Optional[str] = None, index: HazardIndex = Depends(get_hazard_index)) -> List[Dict[str, Any]]:
    n = _clamp(_num(limit), 1, 50, 5)
    return [bridge_to_dict(b) for b in index.bridges[:n]]

@bridges_router.get("")
def bridges_in_view(swLat: Optional[str] = None, swLng: Optional[str] = None,
                    neLat: Optional[str] = None, neLng: Optional[str] = None,
                    limit: Optional[str] = None,
                    index: HazardIndex = Depends(get_hazard_index)) -> List[Dict[str, Any]]:
    """
    Bridges inside a map viewport. Without a usable bbox, returns a small sample
    so the map still shows something.
    """
    corners = [_num(swLat), _num(swLng), _num(neLat), _num(neLng)]
    if any(v is None for v in corners):
        n = _clamp(_num(limit), 1, 500, 100)
        return [bridge_to_dict(b) for b in index.bridges[:n]]

    hits = index.bridges_in_bbox(*corners, cap=MAX_RESULTS)
    n = _clamp(_num(limit), 1, MAX_RESULTS, len(hits))
    return [bridge_to_dict(b) for b in hits[:n]]
