# services/directions.py
import logging
from typing import Any, Dict, List, Optional

import requests

from services import config
from services.errors import UpstreamFailure
from services.geometry import decode_polyline, dense_path
from services.models import CandidateRoute

logger = logging.getLogger(__name__)

# ----------------- response parsing -----------------
def _leg_sum(legs: List[Dict[str, Any]], *keys: str) -> Optional[float]:
    """Sum legs[*][key]['value'] using the first key present per leg; None if any leg has none."""
    if not legs:
        return None
    total = 0.0
    for leg in legs:
        val = None
        for k in keys:
            v = (leg.get(k) or {}).get("value")
            if v is not None:
                val = v
                break
        if val is None:
            return None
        total += float(val)
    return total

def candidate_from_google_route(raw: Dict[str, Any]) -> CandidateRoute:
    """Turn one Google Directions route into a CandidateRoute with a dense point path."""
    legs = raw.get("legs") or []
    steps: List[Dict[str, Any]] = []
    for leg in legs:
        steps.extend(leg.get("steps") or [])
    encoded = (raw.get("overview_polyline") or {}).get("points") or None

    points = dense_path(steps)
    if not points and encoded:
        points = decode_polyline(encoded)

    return CandidateRoute(
        points=tuple(points),
        summary=raw.get("summary") or "",
        distance_m=_leg_sum(legs, "distance"),
        duration_s=_leg_sum(legs, "duration_in_traffic", "duration"),
        encoded=encoded,
    )

# ----------------- Google Directions call -----------------
def fetch_candidate_routes(origin: str, destination: str, *,
                           api_key: Optional[str] = None,
                           timeout_s: Optional[float] = None) -> List[CandidateRoute]:
    """
    Ask the provider for alternatives between origin and destination.
    Origins are address strings or "lat,lng". No retries here.
    """
    key = api_key or config.GOOGLE_MAPS_API_KEY
    if not key:
        raise UpstreamFailure("GOOGLE_MAPS_API_KEY not set on server", status=0)

    params = {
        "origin": origin,
        "destination": destination,
        "mode": "driving",
        "alternatives": "true",
        "departure_time": "now",
        "key": key,
    }
    try:
        r = requests.get(config.DIRECTIONS_URL, params=params,
                         timeout=timeout_s or config.DIRECTIONS_TIMEOUT_S)
    except requests.RequestException as e:
        logger.warning("Directions request failed: %s", e)
        raise UpstreamFailure(f"Error fetching directions: {e}") from e

    try:
        data = r.json() if r.content else {}
    except ValueError:
        data = {}
    if r.status_code != 200:
        logger.warning("Directions HTTP %s: %s", r.status_code, r.text[:300])
        raise UpstreamFailure(f"Directions provider returned HTTP {r.status_code}",
                              status=r.status_code, detail=data or r.text[:300])

    status = data.get("status")
    routes = data.get("routes") or []
    if status not in (None, "OK") or not routes:
        logger.warning("Directions returned no routes (status=%s)", status)
        raise UpstreamFailure("No routes returned from Google Directions",
                              status=r.status_code,
                              detail={"status": status, "error_message": data.get("error_message")})

    try:
        return [candidate_from_google_route(rt) for rt in routes]
    except ValueError as e:
        logger.warning("Directions returned undecodable geometry: %s", e)
        raise UpstreamFailure("Malformed route geometry from provider",
                              status=r.status_code, detail={"error": str(e)}) from e
