# services/config.py
import os
from typing import Optional

from dotenv import load_dotenv

from services.models import TruckProfile, TuningParams

# Load env for local dev; in production rely on host envs
load_dotenv()

def _sanitize_key(k: Optional[str]) -> Optional[str]:
    if k is None:
        return None
    k = k.strip()
    return " ".join(k.split()) or None

def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# -----------------------------
# Directions provider
# -----------------------------
GOOGLE_MAPS_API_KEY = _sanitize_key(os.getenv("GOOGLE_MAPS_API_KEY"))
DIRECTIONS_URL = os.getenv("DIRECTIONS_URL", "https://maps.googleapis.com/maps/api/directions/json")
DIRECTIONS_TIMEOUT_S = _float_env("DIRECTIONS_TIMEOUT_S", 20.0)

# -----------------------------
# Datasets
# -----------------------------
DATA_DIR = os.getenv("DATA_DIR", os.path.join(APP_DIR, "data"))
BRIDGES_PATH = os.getenv("BRIDGES_PATH", os.path.join(DATA_DIR, "low_clearance_bridges.json"))
NO_TRUCK_ZONES_PATH = os.getenv("NO_TRUCK_ZONES_PATH", os.path.join(DATA_DIR, "no_truck_zones.json"))
RESIDENTIAL_ZONES_PATH = os.getenv("RESIDENTIAL_ZONES_PATH", os.path.join(DATA_DIR, "residential_zones.json"))

# -----------------------------
# Scoring defaults
# -----------------------------
DEFAULT_TRUCK_HEIGHT_FT = _float_env("DEFAULT_TRUCK_HEIGHT_FT", 13.5)   # 13'6" trailer
BRIDGE_BUFFER_METERS = _float_env("BRIDGE_BUFFER_METERS", 120.0)
SAFETY_MARGIN_FT = _float_env("SAFETY_MARGIN_FT", 0.5)
MIN_CLEARANCE_FT = _float_env("MIN_CLEARANCE_FT", 13.0)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def default_truck() -> TruckProfile:
    return TruckProfile(height_ft=DEFAULT_TRUCK_HEIGHT_FT)

def default_tuning() -> TuningParams:
    return TuningParams(
        bridge_buffer_m=BRIDGE_BUFFER_METERS,
        safety_margin_ft=SAFETY_MARGIN_FT,
        min_clearance_ft=MIN_CLEARANCE_FT,
    )
