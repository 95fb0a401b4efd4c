# api_routing.py
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from services import config
from services.analytics import log_event, selection_event
from services.directions import fetch_candidate_routes
from services.errors import EmptyInputError, UpstreamFailure
from services.hazard_index import HazardIndex
from services.models import HazardReport, ScoredRoute, TruckProfile, TuningParams
from services.selector import select_route

logger = logging.getLogger(__name__)

routing_router = APIRouter(prefix="/api/routing")

# -----------------------------
# Models
# -----------------------------
class LatLngIn(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

class TruckIn(BaseModel):
    height_ft: Optional[float] = Field(default=None, gt=0)
    width_ft: Optional[float] = Field(default=None, gt=0)
    weight_lbs: Optional[float] = Field(default=None, gt=0)

class TuningIn(BaseModel):
    bridgeBufferMeters: Optional[float] = Field(default=None, gt=0)
    safetyMarginFt: Optional[float] = None
    minClearanceFt: Optional[float] = Field(default=None, ge=0)

class SafeRouteRequest(BaseModel):
    origin: Optional[Union[LatLngIn, str]] = None
    destination: Optional[Union[LatLngIn, str]] = None
    originAddress: Optional[str] = None
    destinationAddress: Optional[str] = None
    truck: TruckIn = Field(default_factory=TruckIn)
    tuning: TuningIn = Field(default_factory=TuningIn)

# -----------------------------
# Dependencies / helpers
# -----------------------------
def get_hazard_index(request: Request) -> HazardIndex:
    index = getattr(request.app.state, "hazard_index", None)
    if index is None:
        raise HTTPException(status_code=503, detail="Hazard datasets not loaded")
    return index

def _try_parse_latlng(text: str) -> Optional[Tuple[float, float]]:
    """Return (lat,lng) if text looks like 'lat,lng'."""
    if not isinstance(text, str) or "," not in text:
        return None
    a, b = text.split(",", 1)
    try:
        lat = float(a.strip())
        lng = float(b.strip())
    except ValueError:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return (lat, lng)

def _place(value: Optional[Union[LatLngIn, str]], address: Optional[str]) -> Tuple[Optional[str], Optional[Tuple[float, float]]]:
    """Provider query string plus coordinates when known (for the audit log)."""
    if address and address.strip():
        text = address.strip()
        return text, _try_parse_latlng(text)
    if isinstance(value, LatLngIn):
        return f"{value.lat},{value.lng}", (value.lat, value.lng)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        return text, _try_parse_latlng(text)
    return None, None

def resolve_truck(t: TruckIn) -> TruckProfile:
    return TruckProfile(
        height_ft=t.height_ft if t.height_ft is not None else config.DEFAULT_TRUCK_HEIGHT_FT,
        width_ft=t.width_ft,
        weight_lbs=t.weight_lbs,
    )

def resolve_tuning(t: TuningIn) -> TuningParams:
    base = config.default_tuning()
    return TuningParams(
        bridge_buffer_m=t.bridgeBufferMeters if t.bridgeBufferMeters is not None else base.bridge_buffer_m,
        safety_margin_ft=t.safetyMarginFt if t.safetyMarginFt is not None else base.safety_margin_ft,
        min_clearance_ft=t.minClearanceFt if t.minClearanceFt is not None else base.min_clearance_ft,
    )

def hazards_to_dict(report: HazardReport) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "lowBridges": [
            {"id": b.id, "latitude": b.lat, "longitude": b.lng, "clearance_ft": b.clearance_ft}
            for b in report.low_bridges
        ],
        "noTruckZones": [{"id": z.id, "name": z.name} for z in report.no_truck_zones],
        "residentialZones": [{"id": z.id, "name": z.name} for z in report.residential_zones],
    }

def scored_to_dict(sr: ScoredRoute) -> Dict[str, Any]:
    r = sr.route
    return {
        "index": sr.index,
        "score": sr.score,
        "hazards": hazards_to_dict(sr.hazards),
        "summary": r.summary,
        "distance_m": r.distance_m,
        "duration_s": r.duration_s,
        "encoded": r.encoded,
    }

# -----------------------------
# Endpoint
# -----------------------------
@routing_router.post("/safe-route")
async def safe_route(req: SafeRouteRequest, index: HazardIndex = Depends(get_hazard_index)) -> Dict[str, Any]:
    origin, o_latlng = _place(req.origin, req.originAddress)
    destination, d_latlng = _place(req.destination, req.destinationAddress)
    if not origin or not destination:
        raise HTTPException(status_code=400,
                            detail="Provide origin+destination coords or originAddress+destinationAddress")
    if not config.GOOGLE_MAPS_API_KEY:
        raise HTTPException(status_code=500, detail="GOOGLE_MAPS_API_KEY not set on server")

    truck = resolve_truck(req.truck)
    tuning = resolve_tuning(req.tuning)

    try:
        candidates = await anyio.to_thread.run_sync(
            lambda: fetch_candidate_routes(origin, destination, api_key=config.GOOGLE_MAPS_API_KEY)
        )
    except UpstreamFailure as e:
        raise HTTPException(status_code=502, detail={"error": str(e), "detail": e.detail})

    try:
        selection = select_route(candidates, truck, tuning, index)
    except EmptyInputError as e:
        logger.error("safe-route: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    log_event(selection_event(selection, o_latlng, d_latlng))

    return {
        "chosenRouteIndex": selection.chosen.index,
        "chosenRouteHazards": hazards_to_dict(selection.chosen.hazards),
        "routes": [scored_to_dict(sr) for sr in selection.all],
        "usedTruckProfile": {
            "height_ft": truck.height_ft,
            "width_ft": truck.width_ft,
            "weight_lbs": truck.weight_lbs,
        },
        "usedTuning": {
            "bridgeBufferMeters": tuning.bridge_buffer_m,
            "safetyMarginFt": tuning.safety_margin_ft,
            "minClearanceFt": tuning.min_clearance_ft,
        },
    }
