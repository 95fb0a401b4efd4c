# services/models.py
from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Tuple


class GeoPoint(NamedTuple):
    lat: float
    lng: float


BBox = Tuple[float, float, float, float]  # (min_lat, min_lng, max_lat, max_lng)


@dataclass(frozen=True)
class Bridge:
    id: str
    lat: float
    lng: float
    clearance_ft: float
    name: str = ""

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


@dataclass(frozen=True)
class Zone:
    id: str
    name: str
    polygon: Tuple[GeoPoint, ...]
    bbox: BBox = field(default=(0.0, 0.0, 0.0, 0.0), compare=False)  # recomputed by HazardIndex


@dataclass(frozen=True)
class TruckProfile:
    height_ft: float = 13.5
    width_ft: Optional[float] = None
    weight_lbs: Optional[float] = None


@dataclass(frozen=True)
class TuningParams:
    bridge_buffer_m: float = 120.0
    safety_margin_ft: float = 0.5
    min_clearance_ft: float = 13.0  # regulatory floor; anything lower is always flagged


@dataclass(frozen=True)
class CandidateRoute:
    points: Tuple[GeoPoint, ...]
    summary: str = ""
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None
    encoded: Optional[str] = None  # provider overview polyline, passed through for maps


@dataclass(frozen=True)
class HazardReport:
    low_bridges: Tuple[Bridge, ...] = ()
    no_truck_zones: Tuple[Zone, ...] = ()
    residential_zones: Tuple[Zone, ...] = ()

    @property
    def is_clear(self) -> bool:
        return not (self.low_bridges or self.no_truck_zones or self.residential_zones)


@dataclass(frozen=True)
class ScoredRoute:
    route: CandidateRoute
    hazards: HazardReport
    score: int
    index: int = 0


@dataclass(frozen=True)
class Selection:
    chosen: ScoredRoute
    all: Tuple[ScoredRoute, ...]
