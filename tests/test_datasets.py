# tests/test_datasets.py
import json

import pytest

from services.datasets import build_hazard_index, load_bridges, load_zones
from services.errors import DatasetMissing
from services.hazard_index import NO_TRUCK, RESIDENTIAL

BRIDGES = [
    {"id": "b1", "latitude": 30.0, "longitude": -97.0, "clearance_ft": 12.1, "name": "Rail overpass"},
    {"id": "b2", "latitude": "bad", "longitude": -97.0, "clearance_ft": 12.1},
]

def write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)

def test_missing_bridges_file_fails_fast(tmp_path):
    with pytest.raises(DatasetMissing):
        load_bridges(str(tmp_path / "nope.json"))
    with pytest.raises(FileNotFoundError):
        build_hazard_index(str(tmp_path / "nope.json"))

def test_bridges_accept_items_wrapper(tmp_path):
    p = write(tmp_path / "bridges.json", {"items": BRIDGES})
    assert len(load_bridges(p)) == 2

def test_zone_files_absent_or_empty(tmp_path):
    empty = tmp_path / "empty.json"
    empty.write_text("", encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_zones(None) == []
    assert load_zones(str(tmp_path / "missing.json")) == []
    assert load_zones(str(empty)) == []
    assert load_zones(str(broken)) == []
    assert load_zones(write(tmp_path / "list.json", [])) == []

def test_build_index_skips_bad_rows(tmp_path):
    bridges = write(tmp_path / "bridges.json", BRIDGES)
    zones = write(tmp_path / "nt.json", [
        {"id": "z1", "name": "Downtown", "polygon": [{"lat": 30, "lng": -97}, {"lat": 30, "lng": -96.9}, {"lat": 30.1, "lng": -96.9}]},
        {"id": "z2", "name": "Sliver", "polygon": [{"lat": 30, "lng": -97}]},
    ])
    idx = build_hazard_index(bridges, zones, str(tmp_path / "missing.json"))
    assert idx.bridge_count == 1
    assert idx.zone_count(NO_TRUCK) == 1
    assert idx.zone_count(RESIDENTIAL) == 0
