# services/hazard_index.py
"""
In-memory bridge/zone index.

Built once from dataset rows and never mutated afterwards, so one instance can
be shared by every request thread without locking. Rows that cannot be used
(bad coordinates, missing clearance, degenerate polygons) are dropped while
building; they never reach scoring.
"""
import logging
import math
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from services.errors import MalformedRecord
from services.geometry import bounding_box, in_bbox, point_in_polygon
from services.models import Bridge, GeoPoint, Zone

logger = logging.getLogger(__name__)

NO_TRUCK = "no_truck"
RESIDENTIAL = "residential"
ZONE_KINDS = (NO_TRUCK, RESIDENTIAL)

# ----------------- row parsing -----------------
def _finite(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None

def _first(row: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if row.get(k) is not None:
            return row[k]
    return None

def _valid_coord(lat: Optional[float], lng: Optional[float]) -> bool:
    if lat is None or lng is None:
        return False
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return False
    # (0, 0) is the usual placeholder for "no location" in the source data
    return not (lat == 0.0 and lng == 0.0)

def parse_bridge(row: Dict[str, Any]) -> Bridge:
    if not isinstance(row, dict):
        raise MalformedRecord(f"bridge row is not an object: {row!r}")
    lat = _finite(_first(row, "latitude", "lat"))
    lng = _finite(_first(row, "longitude", "lng", "lon"))
    if not _valid_coord(lat, lng):
        raise MalformedRecord(f"bridge has unusable coordinates: {row!r}")
    clr = _finite(row.get("clearance_ft"))
    if clr is None or clr < 0:
        raise MalformedRecord(f"bridge has unusable clearance: {row!r}")
    bid = _first(row, "id", "structure_id")
    if bid is None or str(bid) == "":
        bid = f"{lat},{lng}"
    return Bridge(id=str(bid), lat=lat, lng=lng, clearance_ft=clr, name=str(row.get("name") or ""))

def _parse_vertex(v: Any) -> GeoPoint:
    if isinstance(v, dict):
        lat = _finite(_first(v, "lat", "latitude"))
        lng = _finite(_first(v, "lng", "lon", "longitude"))
    elif isinstance(v, (list, tuple)) and len(v) >= 2:
        lat, lng = _finite(v[0]), _finite(v[1])
    else:
        lat = lng = None
    if lat is None or lng is None:
        raise MalformedRecord(f"bad polygon vertex: {v!r}")
    return GeoPoint(lat, lng)

def parse_zone(row: Dict[str, Any], kind: str = "zone") -> Zone:
    if not isinstance(row, dict):
        raise MalformedRecord(f"zone row is not an object: {row!r}")
    raw_poly = row.get("polygon")
    if not isinstance(raw_poly, (list, tuple)):
        raise MalformedRecord(f"zone has no polygon: {row.get('id')!r}")
    polygon = tuple(_parse_vertex(v) for v in raw_poly)
    if len(polygon) < 3:
        raise MalformedRecord(f"zone polygon has fewer than 3 vertices: {row.get('id')!r}")
    name = str(row.get("name") or kind)
    zid = row.get("id")
    if zid is None or str(zid) == "":
        # unnamed zones are told apart by their first vertex
        zid = row.get("name") or f"{polygon[0].lat},{polygon[0].lng}"
    return Zone(id=str(zid), name=name, polygon=polygon)

def _parse_all(rows: Optional[Iterable[Dict[str, Any]]], parse, label: str) -> List:
    out = []
    skipped = 0
    for row in rows or []:
        try:
            out.append(parse(row))
        except MalformedRecord as e:
            skipped += 1
            logger.debug("skipping %s row: %s", label, e)
    if skipped:
        logger.debug("skipped %d malformed %s rows", skipped, label)
    return out

def _with_bbox(zone: Zone) -> Zone:
    return replace(zone, bbox=bounding_box(zone.polygon))

# ----------------- index -----------------
class HazardIndex:
    """Read-only bridges + zones, queryable by clearance and containment."""

    def __init__(self, bridges: Iterable[Bridge] = (),
                 no_truck_zones: Iterable[Zone] = (),
                 residential_zones: Iterable[Zone] = ()):
        self._bridges: Tuple[Bridge, ...] = tuple(bridges)
        self._zones: Dict[str, Tuple[Zone, ...]] = {
            NO_TRUCK: tuple(_with_bbox(z) for z in no_truck_zones if len(z.polygon) >= 3),
            RESIDENTIAL: tuple(_with_bbox(z) for z in residential_zones if len(z.polygon) >= 3),
        }

    @classmethod
    def from_records(cls,
                     bridges: Optional[Iterable[Dict[str, Any]]],
                     no_truck_zones: Optional[Iterable[Dict[str, Any]]] = None,
                     residential_zones: Optional[Iterable[Dict[str, Any]]] = None) -> "HazardIndex":
        return cls(
            bridges=_parse_all(bridges, parse_bridge, "bridge"),
            no_truck_zones=_parse_all(no_truck_zones, lambda r: parse_zone(r, NO_TRUCK), "no-truck zone"),
            residential_zones=_parse_all(residential_zones, lambda r: parse_zone(r, RESIDENTIAL), "residential zone"),
        )

    # --- bridges ---
    @property
    def bridges(self) -> Tuple[Bridge, ...]:
        return self._bridges

    @property
    def bridge_count(self) -> int:
        return len(self._bridges)

    def bridges_below(self, required_clearance_ft: float) -> Iterator[Bridge]:
        for b in self._bridges:
            if b.clearance_ft < required_clearance_ft:
                yield b

    def bridges_in_bbox(self, sw_lat: float, sw_lng: float, ne_lat: float, ne_lng: float,
                        cap: int = 50000) -> List[Bridge]:
        s, n = min(sw_lat, ne_lat), max(sw_lat, ne_lat)
        w, e = min(sw_lng, ne_lng), max(sw_lng, ne_lng)
        hits: List[Bridge] = []
        for b in self._bridges:
            if s <= b.lat <= n and w <= b.lng <= e:
                hits.append(b)
                if len(hits) >= cap:
                    break
        return hits

    # --- zones ---
    def zones(self, kind: str) -> Tuple[Zone, ...]:
        if kind not in self._zones:
            raise ValueError(f"Unknown zone kind: {kind!r}")
        return self._zones[kind]

    def zone_count(self, kind: str) -> int:
        return len(self.zones(kind))

    def zones_containing(self, point: Tuple[float, float], kind: str) -> Iterator[Zone]:
        for z in self.zones(kind):
            if in_bbox(point, z.bbox) and point_in_polygon(point, z.polygon):
                yield z

    def __repr__(self) -> str:
        return (f"HazardIndex(bridges={len(self._bridges)}, "
                f"no_truck={len(self._zones[NO_TRUCK])}, residential={len(self._zones[RESIDENTIAL])})")
