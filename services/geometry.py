# services/geometry.py
import math
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from services.models import BBox, GeoPoint

EARTH_RADIUS_M = 6371000.0

# ----------------- distance -----------------
def haversine_m(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Great-circle distance in meters between two (lat, lng) points."""
    phi1 = math.radians(a[0]); phi2 = math.radians(b[0])
    dphi = math.radians(b[0] - a[0])
    dlmb = math.radians(b[1] - a[1])
    h = math.sin(dphi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(dlmb/2)**2
    # rounding can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return 2*EARTH_RADIUS_M*math.asin(math.sqrt(h))

def meters_to_lat_degrees(meters: float) -> float:
    return math.degrees(meters / EARTH_RADIUS_M)

# ----------------- polygons -----------------
def point_in_polygon(point: Tuple[float, float], ring: Sequence[Tuple[float, float]]) -> bool:
    """
    Even-odd ray casting with x=lat, y=lng. The ring is closed implicitly
    (last vertex connects to the first). Points exactly on an edge may land
    either way.
    """
    x, y = point[0], point[1]
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if ((yi > y) != (yj > y)) and (x < (xj - xi)*(y - yi)/(yj - yi) + xi):
            inside = not inside
        j = i
    return inside

def bounding_box(points: Iterable[Tuple[float, float]]) -> BBox:
    lats: List[float] = []
    lngs: List[float] = []
    for lat, lng in points:
        lats.append(lat); lngs.append(lng)
    if not lats:
        raise ValueError("bounding_box needs at least one point")
    return (min(lats), min(lngs), max(lats), max(lngs))

def in_bbox(point: Tuple[float, float], bbox: BBox) -> bool:
    s, w, n, e = bbox
    return (s <= point[0] <= n) and (w <= point[1] <= e)

# ----------------- Google encoded polyline -----------------
# Format: https://developers.google.com/maps/documentation/utilities/polylinealgorithm
_OFFSET = 63
_SCALE = 1e5

def _read_chunked(s: str, idx: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if idx >= len(s):
            raise ValueError("Invalid encoded polyline: truncated value")
        b = ord(s[idx]) - _OFFSET
        idx += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break
    return result, idx

def _zigzag_decode(n: int) -> int:
    return (n >> 1) ^ (-(n & 1))

def decode_polyline(encoded: str) -> List[GeoPoint]:
    """Decode a Google encoded polyline to a list of GeoPoint."""
    if not encoded:
        return []
    idx = 0
    lat = 0
    lng = 0
    out: List[GeoPoint] = []
    while idx < len(encoded):
        dlat, idx = _read_chunked(encoded, idx)
        dlng, idx = _read_chunked(encoded, idx)
        lat += _zigzag_decode(dlat)
        lng += _zigzag_decode(dlng)
        out.append(GeoPoint(lat / _SCALE, lng / _SCALE))
    return out

def _write_chunked(value: int, out: List[str]) -> None:
    v = ~(value << 1) if value < 0 else (value << 1)
    while v >= 0x20:
        out.append(chr((0x20 | (v & 0x1f)) + _OFFSET))
        v >>= 5
    out.append(chr(v + _OFFSET))

def encode_polyline(points: Iterable[Tuple[float, float]]) -> str:
    out: List[str] = []
    prev_lat = 0
    prev_lng = 0
    for lat, lng in points:
        ilat = int(math.floor(lat * _SCALE + 0.5))
        ilng = int(math.floor(lng * _SCALE + 0.5))
        _write_chunked(ilat - prev_lat, out)
        _write_chunked(ilng - prev_lng, out)
        prev_lat, prev_lng = ilat, ilng
    return "".join(out)

# ----------------- dense path -----------------
Step = Union[str, Dict[str, Any]]

def _step_polyline(step: Step) -> str:
    if isinstance(step, str):
        return step
    poly = step.get("polyline") if isinstance(step, dict) else None
    if isinstance(poly, dict):
        return poly.get("points") or ""
    if isinstance(poly, str):
        return poly
    return ""

def dense_path(steps: Iterable[Step]) -> List[GeoPoint]:
    """
    Decode every step polyline and join them. When a step starts exactly where
    the previous one ended, its first point is dropped so the seam is counted once.
    """
    pts: List[GeoPoint] = []
    for step in steps or []:
        enc = _step_polyline(step)
        if not enc:
            continue
        seg = decode_polyline(enc)
        if pts and seg and pts[-1] == seg[0]:
            pts.extend(seg[1:])
        else:
            pts.extend(seg)
    return pts
