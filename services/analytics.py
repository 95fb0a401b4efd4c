# services/analytics.py
import os, json, threading, logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from services import config
from services.models import Selection

logger = logging.getLogger(__name__)

_LOCK = threading.Lock()

ANALYTICS_ENABLE = os.getenv("ANALYTICS_ENABLE", "0") == "1"
ANALYTICS_PATH = os.getenv("ANALYTICS_PATH", os.path.join(config.DATA_DIR, "events.jsonl"))

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)

def round_coord(latlng: Optional[Tuple[float,float]], places: int = 2) -> Optional[Tuple[float,float]]:
    if not latlng:
        return None
    (lat, lng) = latlng
    return (round(float(lat), places), round(float(lng), places))

def selection_event(selection: Selection,
                    origin: Optional[Tuple[float, float]],
                    destination: Optional[Tuple[float, float]]) -> Dict[str, Any]:
    """Audit record for one safe-route request. Coordinates are rounded, addresses dropped."""
    return {
        "type": "safe_route",
        "origin_coord_round": round_coord(origin),
        "destination_coord_round": round_coord(destination),
        "chosen_index": selection.chosen.index,
        "scores": [sr.score for sr in selection.all],
        "low_bridges": [len(sr.hazards.low_bridges) for sr in selection.all],
    }

def log_event(event: Dict[str, Any], path: Optional[str] = None, enabled: Optional[bool] = None) -> bool:
    """
    Append a single JSON event to the analytics file if enabled.
    Returns True when a line was written. Write errors are logged, not raised.
    """
    if not (ANALYTICS_ENABLE if enabled is None else enabled):
        return False
    target = path or ANALYTICS_PATH
    event = dict(event)
    event["ts_iso"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    line = json.dumps(event, separators=(",", ":"), ensure_ascii=False)
    try:
        with _LOCK:
            _ensure_dir(target)
            with open(target, "a", encoding="utf-8") as f:
                f.write(line + "\n")
    except OSError as e:
        logger.warning("analytics write failed (%s): %s", target, e)
        return False
    return True
